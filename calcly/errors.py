# Failures raised while turning user text into a number
# Numeric edge cases (division by zero, overflow, bad factorial input) are results, not errors


class EvalError(ValueError):
    pass


# Raised by the normalizer when text contains a character outside the allow-list
class InvalidCharacter(EvalError):
    def __init__(self, char, position):
        super().__init__(f"Invalid character {char!r} at position {position}")
        self.char = char
        self.position = position


# Raised by the tokenizer and parser for malformed input
class ExpressionSyntaxError(EvalError):
    def __init__(self, message, position):
        super().__init__(f"{message} at position {position}")
        self.position = position


# Raised when a name is not in the function/constant table
class UnknownIdentifier(EvalError):
    def __init__(self, name, position=None):
        super().__init__(f"Unknown identifier: {name}")
        self.name = name
        self.position = position
