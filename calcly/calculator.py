# Calculator core: rewrites calculator notation, evaluates it, and formats the result
#
# Flow: normalize -> tokenize -> parse -> evaluate -> format_result
# Nothing here executes user text as code; evaluation only walks the parsed tree
# and calls the functions in calcly.functions.FUNCS

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from math import degrees, isfinite, radians
from operator import add, mul, sub
from re import IGNORECASE, search, sub as replace
from typing import Optional

from calcly.errors import InvalidCharacter, UnknownIdentifier
from calcly.functions import CONST, FUNCS, divide, power, remainder
from calcly.parser import PRIOR_ANSWER, BinaryOp, Call, Constant, Literal, PriorAnswer, UnaryMinus, parse, tokenize


UNICODE_SYMBOLS = {'π': "pi", '×': '*', '÷': '/', '−': '-'}

NUMBER_PATTERN = r"\d+(?:\.\d+)?|\.\d+"
DISALLOWED_REGEX = r"[^0-9A-Za-z_().+\-*/%^,\s]"

BINARY_OPS = {'+': add, '-': sub, '*': mul, '/': divide, '%': remainder, "**": power}

EXPONENT_LOWER = 1e-6
EXPONENT_UPPER = 1e12
EXPONENT_DIGITS = 9
ROUND_DIGITS = 12


class AngleMode(Enum):
    DEGREES = "deg"
    RADIANS = "rad"


ANGLE_MODE_NAMES = {"deg": AngleMode.DEGREES, "degrees": AngleMode.DEGREES,
                    "rad": AngleMode.RADIANS, "radians": AngleMode.RADIANS}


@dataclass
class EvaluationContext:
    angle_mode: AngleMode = AngleMode.DEGREES
    last_answer: Optional[float] = None


@dataclass(frozen=True)
class CalcResult:
    display: str
    numeric: float


# Looks up an angle mode by its short or full name, case-insensitively
def get_angle_mode(name):
    if isinstance(name, AngleMode):
        return name

    if (mode := ANGLE_MODE_NAMES.get(name.lower())) is None:
        raise ValueError(f"Unknown angle mode: {name}")

    return mode

# Evaluates one expression without touching the context
# param expression - raw text as typed by the user
# param    context - EvaluationContext holding the angle mode and previous answer
def calculate(expression, context):
    normalized = normalize(expression.strip(), context.last_answer)
    value = evaluate(parse(tokenize(normalized)), context)

    return CalcResult(format_result(value), value)

# Rewrites calculator notation into text the tokenizer understands
# Each step relies on the ones before it having run
def normalize(expr, last_answer=None):
    for symbol, canonical in UNICODE_SYMBOLS.items():
        expr = expr.replace(symbol, canonical)

    expr = replace(rf"({NUMBER_PATTERN})%", r"(\1/100)", expr)
    expr = expand_factorials(expr)
    expr = replace(r"√\s*\(", "sqrt(", expr)
    expr = replace(r"√\s*([0-9.]+)", r"sqrt(\1)", expr)

    # Implicit multiplication: 2pi, 3(4), (1)(2), pi e
    expr = replace(r"(\d)(?=pi|e|[a-zA-Z(])", r"\1*", expr)
    expr = replace(r"(pi|e|\))(?=\d|\(|pi|e)", r"\1*", expr)

    expr = expr.replace('^', "**")
    expr = substitute_answer(expr, last_answer)

    if (match := search(DISALLOWED_REGEX, expr)):
        raise InvalidCharacter(match.group(), match.start())

    return expr

# Rewrites X! as fact(X), where X is a number or a parenthesized group
# A group directly after a function name takes the name with it: sqrt(4)! -> fact(sqrt(4))
def expand_factorials(expr):
    while (index := expr.find('!')) != -1:
        if index and expr[index - 1] == ')':
            if (start := find_group_start(expr, index - 1)) is None:
                return expr

            while start and (expr[start - 1].isalpha() or expr[start - 1] == '_'):
                start -= 1
        elif (match := search(rf"(?:{NUMBER_PATTERN})\Z", expr[:index])):
            start = match.start()
        else:
            # Left in place for the character check to reject
            return expr

        expr = f"{expr[:start]}fact({expr[start:index]}){expr[index + 1:]}"

    return expr

# Returns the index of the '(' matching the ')' at close, or None if unmatched
def find_group_start(expr, close):
    depth = 0

    for i in range(close, -1, -1):
        if expr[i] == ')':
            depth += 1
        elif expr[i] == '(':
            depth -= 1

            if not depth:
                return i

    return None

# Replaces the word Ans with the previous answer written out in full
# Non-finite or missing answers are left as the Ans marker for the parser
def substitute_answer(expr, last_answer):
    if last_answer is None or not isfinite(last_answer):
        return replace(rf"\b{PRIOR_ANSWER}\b", PRIOR_ANSWER, expr, flags=IGNORECASE)

    # Decimal avoids exponent notation, which the tokenizer does not read
    value = format(Decimal(repr(float(last_answer))), 'f')
    return replace(rf"\b{PRIOR_ANSWER}\b", f"({value})", expr, flags=IGNORECASE)

def evaluate(node, context):
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, Constant):
        return CONST[node.name]

    if isinstance(node, PriorAnswer):
        if context.last_answer is None:
            raise UnknownIdentifier(PRIOR_ANSWER)

        return context.last_answer

    if isinstance(node, UnaryMinus):
        return -evaluate(node.child, context)

    if isinstance(node, BinaryOp):
        return evaluate_chain(node, context)

    if isinstance(node, Call):
        return call_function(node, context)

    raise TypeError(f"Unsupported expression node: {type(node).__name__}")

# Long chains such as 1+1+...+1 nest down the left branch, so that branch is walked in a loop
def evaluate_chain(node, context):
    chain = []

    while isinstance(node, BinaryOp):
        chain.append(node)
        node = node.left

    value = evaluate(node, context)

    for link in reversed(chain):
        value = BINARY_OPS[link.op](value, evaluate(link.right, context))

    return value

def call_function(node, context):
    entry = FUNCS[node.name]
    args = [evaluate(arg, context) for arg in node.args]
    in_degrees = context.angle_mode is AngleMode.DEGREES

    if entry.angle_in and in_degrees:
        args[0] = radians(args[0])

    result = entry.func(*args)

    if entry.angle_out and in_degrees:
        result = degrees(result)

    return result

def format_result(value):
    if not isfinite(value):
        return str(value)

    if value and (abs(value) < EXPONENT_LOWER or abs(value) > EXPONENT_UPPER):
        return format(value, f".{EXPONENT_DIGITS}e")

    rounded = round(value, ROUND_DIGITS)

    if not rounded:
        return "0"

    s = repr(rounded)

    if 'e' in s:
        s = format(rounded, f".{ROUND_DIGITS}f")

    if '.' in s:
        s = s.rstrip('0').rstrip('.')

    return s
