from calcly.calculator import AngleMode, EvaluationContext, calculate, get_angle_mode
from calcly.history import HistoryLog


# One user's calculator: angle mode, previous answer, and history
class Session:
    def __init__(self, angle_mode=AngleMode.DEGREES):
        self.context = EvaluationContext(angle_mode=get_angle_mode(angle_mode))
        self.history = HistoryLog()

    @property
    def angle_mode(self):
        return self.context.angle_mode

    @property
    def last_answer(self):
        return self.context.last_answer

    # Evaluates an expression, then stores its answer and records it in history
    # Raises an EvalError subclass without changing the session when the expression is bad
    def evaluate(self, expression):
        result = calculate(expression, self.context)

        self.context.last_answer = result.numeric
        self.record_history(expression.strip(), result.display)

        return result

    # param mode - AngleMode, or one of "deg", "degrees", "rad", "radians"
    def set_angle_mode(self, mode):
        self.context.angle_mode = get_angle_mode(mode)

    def record_history(self, expression, display):
        return self.history.record(expression, display)

    def clear_history(self):
        self.history.clear()

    def export_history_csv(self):
        return self.history.export_csv()
