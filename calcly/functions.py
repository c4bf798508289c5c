# Closed table of the functions and constants an expression may use
# Every function follows IEEE-754 semantics: domain errors give nan, overflow gives inf

from dataclasses import dataclass
from math import acos, asin, atan, copysign, cos, e, exp, fmod, inf, isfinite, isinf, isnan, log, log10, nan, pi, sin, sqrt, tan
from typing import Callable


@dataclass(frozen=True)
class FunctionEntry:
    arity: int
    func: Callable
    # Argument is an angle in the session's mode
    angle_in: bool = False
    # Result is an angle in the session's mode
    angle_out: bool = False


# Calls a math function, mapping Python's exceptions back onto IEEE results
def ieee(func, *args, overflow=inf):
    try:
        return func(*args)
    except ValueError:
        return nan
    except OverflowError:
        return overflow

def divide(left, right):
    if right == 0:
        if left == 0 or isnan(left):
            return nan

        # 1/-0.0 is -inf
        return copysign(inf, left) * copysign(1.0, right)

    return left / right

# Remainder carries the sign of the dividend
def remainder(left, right):
    if right == 0 or isinf(left) or isnan(left) or isnan(right):
        return nan

    return fmod(left, right)

def power(base, exponent):
    try:
        result = base ** exponent
    except ZeroDivisionError:
        # 0 to a negative power keeps the sign of zero for odd exponents
        if float(exponent).is_integer() and exponent % 2:
            return copysign(inf, base)

        return inf
    except OverflowError:
        if base < 0 and float(exponent).is_integer() and exponent % 2:
            return -inf

        return inf

    # Negative base with a fractional exponent
    if isinstance(result, complex):
        return nan

    return result

def natural_log(x):
    return -inf if x == 0 else ieee(log, x)

def common_log(x):
    return -inf if x == 0 else ieee(log10, x)

# Non-finite, negative, or fractional input gives nan rather than an error
def fact(n):
    if not isfinite(n) or n < 0 or not float(n).is_integer():
        return nan

    result = 1.0
    for i in range(2, int(n) + 1):
        result *= i

        if isinf(result):
            break

    return result

def root(x, n):
    return power(x, divide(1.0, n))


FUNCS = {
    "sin": FunctionEntry(1, lambda x: ieee(sin, x), angle_in=True),
    "cos": FunctionEntry(1, lambda x: ieee(cos, x), angle_in=True),
    "tan": FunctionEntry(1, lambda x: ieee(tan, x), angle_in=True),
    "asin": FunctionEntry(1, lambda x: ieee(asin, x), angle_out=True),
    "acos": FunctionEntry(1, lambda x: ieee(acos, x), angle_out=True),
    "atan": FunctionEntry(1, lambda x: ieee(atan, x), angle_out=True),
    "ln": FunctionEntry(1, natural_log),
    "log": FunctionEntry(1, common_log),
    "exp": FunctionEntry(1, lambda x: ieee(exp, x)),
    "sqrt": FunctionEntry(1, lambda x: ieee(sqrt, x)),
    "pow": FunctionEntry(2, power),
    "root": FunctionEntry(2, root),
    "fact": FunctionEntry(1, fact),
}

CONST = {"pi": pi, "e": e}
