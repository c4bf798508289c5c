# Turns normalized expression text into tokens, then into a tree of nodes
# Grammar, loosest binding first:
#     expr    := term (('+' | '-') term)*
#     term    := power (('*' | '/' | '%') power)*
#     power   := unary ('**' power)?
#     unary   := ('-' | '+') unary | primary
#     primary := NUMBER | NAME | NAME '(' expr (',' expr)* ')' | '(' expr ')'

from dataclasses import dataclass
from re import compile as regex
from typing import Optional, Tuple

from calcly.errors import ExpressionSyntaxError, UnknownIdentifier
from calcly.functions import CONST, FUNCS


NUMBER = "number"
IDENTIFIER = "identifier"
OPERATOR = "operator"
LPAREN = "lparen"
RPAREN = "rparen"
COMMA = "comma"

# Identifier for the previous answer, left in place by the normalizer when it cannot be inlined
PRIOR_ANSWER = "Ans"

# Numbers take at most one decimal point; a lone ^ is read as **
TOKEN_REGEX = regex(r"(?P<number>\d+\.?\d*|\.\d+)|(?P<identifier>[A-Za-z_]+)|(?P<operator>\*\*|[+\-*/%^])|(?P<punct>[(),])")
PUNCTUATION = {'(': LPAREN, ')': RPAREN, ',': COMMA}

# Deepest nesting of parentheses, calls, unary signs, and powers a parse accepts
MAX_DEPTH = 100


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    position: int


@dataclass(frozen=True)
class Literal:
    value: float

@dataclass(frozen=True)
class Constant:
    name: str

@dataclass(frozen=True)
class PriorAnswer:
    pass

@dataclass(frozen=True)
class UnaryMinus:
    child: object

@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: object
    right: object

@dataclass(frozen=True)
class Call:
    name: str
    args: Tuple[object, ...]


def tokenize(text):
    tokens = []
    i = 0

    while i < len(text):
        if text[i].isspace():
            i += 1
            continue

        if not (match := TOKEN_REGEX.match(text, i)):
            raise ExpressionSyntaxError(f"Unexpected character {text[i]!r}", i)

        kind = match.lastgroup
        value = match.group()

        if kind == "punct":
            kind = PUNCTUATION[value]
        elif value == '^':
            value = "**"

        tokens.append(Token(kind, value, i))
        i = match.end()

    return tokens

def parse(tokens):
    return Parser(tokens).parse()


class Parser:
    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.index = 0
        self.depth = 0

    def parse(self):
        if not self.tokens:
            raise ExpressionSyntaxError("Empty expression", 0)

        node = self.expression()

        if (token := self.peek()) is not None:
            raise ExpressionSyntaxError(f"Unexpected {token.value!r}", token.position)

        return node

    def peek(self) -> Optional[Token]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def advance(self):
        token = self.peek()

        if token is None:
            raise ExpressionSyntaxError("Unexpected end of expression", self.end_position())

        self.index += 1
        return token

    def end_position(self):
        if not self.tokens:
            return 0

        last = self.tokens[-1]
        return last.position + len(last.value)

    def accept_operator(self, *ops):
        token = self.peek()

        if token is not None and token.kind == OPERATOR and token.value in ops:
            self.index += 1
            return token

        return None

    def descend(self, token):
        self.depth += 1

        if self.depth > MAX_DEPTH:
            raise ExpressionSyntaxError("Expression nested too deeply", token.position)

    def ascend(self, node):
        self.depth -= 1
        return node

    def expect(self, kind, description):
        token = self.peek()

        if token is None or token.kind != kind:
            position = self.end_position() if token is None else token.position
            raise ExpressionSyntaxError(f"Expected {description}", position)

        self.index += 1
        return token

    def expression(self):
        node = self.term()

        while (token := self.accept_operator('+', '-')):
            node = BinaryOp(token.value, node, self.term())

        return node

    def term(self):
        node = self.power()

        while (token := self.accept_operator('*', '/', '%')):
            node = BinaryOp(token.value, node, self.power())

        return node

    # Right-associative: recursing on the right operand makes 2**3**2 == 2**(3**2)
    def power(self):
        node = self.unary()

        if (token := self.accept_operator("**")):
            self.descend(token)
            return self.ascend(BinaryOp("**", node, self.power()))

        return node

    def unary(self):
        if (token := self.accept_operator('-')):
            self.descend(token)
            return self.ascend(UnaryMinus(self.unary()))

        if (token := self.accept_operator('+')):
            self.descend(token)
            return self.ascend(self.unary())

        return self.primary()

    def primary(self):
        token = self.advance()

        if token.kind == NUMBER:
            return Literal(float(token.value))

        if token.kind == LPAREN:
            self.descend(token)
            node = self.expression()
            self.expect(RPAREN, "')'")
            return self.ascend(node)

        if token.kind == IDENTIFIER:
            self.descend(token)
            return self.ascend(self.name(token))

        raise ExpressionSyntaxError(f"Unexpected {token.value!r}", token.position)

    def name(self, token):
        if token.value in CONST:
            return Constant(token.value)

        if token.value == PRIOR_ANSWER:
            return PriorAnswer()

        if (entry := FUNCS.get(token.value)) is None:
            raise UnknownIdentifier(token.value, token.position)

        self.expect(LPAREN, f"'(' after {token.value}")

        if (closing := self.peek()) is not None and closing.kind == RPAREN:
            raise ExpressionSyntaxError(f"Empty argument list for {token.value}", closing.position)

        args = [self.expression()]

        while self.peek() is not None and self.peek().kind == COMMA:
            self.index += 1
            args.append(self.expression())

        self.expect(RPAREN, "')'")

        if len(args) != entry.arity:
            raise ExpressionSyntaxError(f"{token.value} takes {entry.arity} argument(s), got {len(args)}", token.position)

        return Call(token.value, tuple(args))
