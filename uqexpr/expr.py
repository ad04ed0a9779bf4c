# Arithmetic expression evaluator and the bridge the line dispatcher calls.
#
# Lexer -> Pratt parser -> AST -> Evaluator. The accepted language follows the
# tinyexpr library:
# - '+', '-', '*', '/', '%' (fmod) and '^' (power, left-associative)
# - unary '+'/'-' bind tighter than '^', so -2^2 == 4
# - ',' evaluates both sides and yields the right one
# - builtin constants and functions, one-argument functions may omit parentheses
# Arithmetic follows IEEE rules: division by zero gives infinity and domain
# errors give NaN. The bridge reports every failure as NaN.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

# --------------------------
# Exceptions
# --------------------------

class ExpressionError(Exception):
    """Base class for expression failures."""
    pass

class LexerError(ExpressionError):
    """Raised for errors during tokenization."""
    pass

class ParseError(ExpressionError):
    """Raised for parsing errors with position information."""
    pass

class EvalError(ExpressionError):
    """Raised for unknown names and bad function calls."""
    pass

# --------------------------
# Tokenizer / Lexer
# --------------------------

@dataclass
class Token:
    """Represents a token with type, value, and character position."""
    type: str
    value: object
    pos: int

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, pos={self.pos})"

_OP_CHARS = set('+-*/%^')

def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'

class Lexer:
    """Tokenizer for expressions.

    Produces tokens: NUMBER, IDENT, OP, LPAREN, RPAREN, COMMA, EOF.
    '-' is always an operator; negative literals come from unary minus.
    """
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.len = len(text)

    def _peek(self, n: int = 0) -> str:
        i = self.pos + n
        return self.text[i] if i < self.len else ''

    def _advance(self, n: int = 1) -> None:
        self.pos += n

    def _skip_whitespace(self) -> None:
        while self._peek() and self._peek().isspace():
            self._advance()

    def _read_number(self) -> Token:
        start = self.pos
        has_dot = False
        has_exp = False
        while True:
            ch = self._peek()
            if _is_digit(ch):
                self._advance()
            elif ch == '.' and not has_dot and not has_exp:
                has_dot = True
                self._advance()
            elif ch in ('e', 'E') and not has_exp:
                has_exp = True
                self._advance()
                if self._peek() in ('+', '-'):
                    self._advance()
                # require at least one digit after e/E
                if not _is_digit(self._peek()):
                    raise LexerError(f"Invalid numeric literal at pos {self.pos}")
            else:
                break
        raw = self.text[start:self.pos]
        try:
            val = float(raw)
        except ValueError:
            raise LexerError(f"Invalid numeric literal: {raw}")
        return Token('NUMBER', val, start)

    def _read_ident(self) -> Token:
        start = self.pos
        while True:
            ch = self._peek()
            if ch.isascii() and (ch.isalnum() or ch == '_'):
                self._advance()
            else:
                break
        return Token('IDENT', self.text[start:self.pos], start)

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            self._skip_whitespace()
            ch = self._peek()
            if ch == '':
                break
            if _is_digit(ch) or (ch == '.' and _is_digit(self._peek(1))):
                tokens.append(self._read_number())
            elif ch.isascii() and ch.isalpha():
                tokens.append(self._read_ident())
            elif ch == '(':
                tokens.append(Token('LPAREN', ch, self.pos))
                self._advance()
            elif ch == ')':
                tokens.append(Token('RPAREN', ch, self.pos))
                self._advance()
            elif ch == ',':
                tokens.append(Token('COMMA', ch, self.pos))
                self._advance()
            elif ch in _OP_CHARS:
                tokens.append(Token('OP', ch, self.pos))
                self._advance()
            else:
                raise LexerError(f"Unknown character at pos {self.pos}: {ch!r}")
        tokens.append(Token('EOF', None, self.pos))
        return tokens

# --------------------------
# AST Nodes
# --------------------------

@dataclass
class ASTNode:
    """Base AST node."""
    pass

@dataclass
class Number(ASTNode):
    value: float

@dataclass
class Variable(ASTNode):
    name: str

@dataclass
class UnaryOp(ASTNode):
    op: str
    operand: ASTNode

@dataclass
class BinaryOp(ASTNode):
    op: str
    left: ASTNode
    right: ASTNode

@dataclass
class FuncCall(ASTNode):
    name: str
    args: List[ASTNode]

@dataclass
class Sequence(ASTNode):
    """Comma operator: every item is evaluated, the last one is the value."""
    items: List[ASTNode]

# --------------------------
# Builtins
# --------------------------

# Largest value the factorial/combination helpers accept before giving up
# with infinity.
_UINT_MAX = 4294967295.0
_ULONG_MAX = 2 ** 64 - 1

def _div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b

def _fmod(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan

def _odd_integer(x: float) -> bool:
    return x.is_integer() and x % 2 == 1

def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and _odd_integer(b):
            return -math.inf
        return math.inf
    except ValueError:
        # 0 to a negative power is a pole, anything else is a domain error
        if a == 0:
            if _odd_integer(b):
                return math.copysign(math.inf, a)
            return math.inf
        return math.nan

def _ieee(func: Callable[[float], float], odd: bool = False) -> Callable[[float], float]:
    """Wrap a math function so domain errors give NaN and overflow gives infinity.

    For an ``odd`` function the infinity takes the sign of the argument.
    """
    def wrapper(x: float) -> float:
        try:
            return float(func(x))
        except ValueError:
            return math.nan
        except OverflowError:
            return math.copysign(math.inf, x) if odd else math.inf
    wrapper.__name__ = func.__name__
    return wrapper

def _log_base(func: Callable[[float], float]) -> Callable[[float], float]:
    def wrapper(x: float) -> float:
        if x == 0:
            return -math.inf
        if math.isnan(x) or x < 0:
            return math.nan
        if math.isinf(x):
            return math.inf
        return func(x)
    wrapper.__name__ = func.__name__
    return wrapper

# fac and ncr count in a 64-bit unsigned accumulator and give infinity as
# soon as it would overflow, so fac(21) and ncr(100, 50) are infinite.
def _fac(a: float) -> float:
    if math.isnan(a) or a < 0:
        return math.nan
    if a > _UINT_MAX:
        return math.inf
    result = 1
    for i in range(1, int(a) + 1):
        if i > _ULONG_MAX // result:
            return math.inf
        result *= i
    return float(result)

def _ncr(n: float, r: float) -> float:
    if math.isnan(n) or math.isnan(r) or n < 0 or r < 0 or n < r:
        return math.nan
    if n > _UINT_MAX or r > _UINT_MAX:
        return math.inf
    un, ur = int(n), int(r)
    if ur > un // 2:
        ur = un - ur
    result = 1
    for i in range(1, ur + 1):
        if result > _ULONG_MAX // (un - ur + i):
            return math.inf
        result *= un - ur + i
        result //= i
    return float(result)

def _npr(n: float, r: float) -> float:
    return _ncr(n, r) * _fac(r)

# Builtins registry: name -> (arity, callable). Arity 0 entries are constants.
_BUILTINS: Dict[str, Tuple[int, Callable[..., float]]] = {}

def _register(name: str, arity: int, func: Callable[..., float]) -> None:
    _BUILTINS[name] = (arity, func)

_register('pi', 0, lambda: math.pi)
_register('e', 0, lambda: math.e)
_register('abs', 1, math.fabs)
_register('acos', 1, _ieee(math.acos))
_register('asin', 1, _ieee(math.asin))
_register('atan', 1, math.atan)
_register('ceil', 1, _ieee(lambda x: x if math.isinf(x) or math.isnan(x) else math.ceil(x)))
_register('cos', 1, _ieee(math.cos))
_register('cosh', 1, _ieee(math.cosh))
_register('exp', 1, _ieee(math.exp))
_register('fac', 1, _fac)
_register('floor', 1, _ieee(lambda x: x if math.isinf(x) or math.isnan(x) else math.floor(x)))
_register('ln', 1, _log_base(math.log))
_register('log', 1, _log_base(math.log10))
_register('log10', 1, _log_base(math.log10))
_register('sin', 1, _ieee(math.sin))
_register('sinh', 1, _ieee(math.sinh, odd=True))
_register('sqrt', 1, _ieee(math.sqrt))
_register('tan', 1, _ieee(math.tan))
_register('tanh', 1, math.tanh)
_register('atan2', 2, math.atan2)
_register('ncr', 2, _ncr)
_register('npr', 2, _npr)
_register('pow', 2, _pow)

BUILTIN_NAMES = sorted(_BUILTINS)

# --------------------------
# Parser (Pratt/top-down precedence)
# --------------------------

# Binding power for the operand of a prefix sign and of a parenthesis-free
# one-argument function call. Higher than '^' so that -2^2 == (-2)^2.
PREFIX_BP = 40

# Infix operators: map to (binding_power, right_assoc)
INFIX_BP: Dict[str, Tuple[int, bool]] = {
    '^': (30, False),
    '*': (20, False),
    '/': (20, False),
    '%': (20, False),
    '+': (10, False),
    '-': (10, False),
}

class Parser:
    """Pratt parser producing an AST for expressions.

    ``names`` lists the user variables in scope; they shadow builtins with the
    same name.
    """

    def __init__(self, tokens: List[Token], names: Optional[Mapping[str, float]] = None):
        self.tokens = tokens
        self.pos = 0
        self.names = names or {}

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _expect(self, typ: str) -> Token:
        tok = self._current()
        if tok.type != typ:
            raise ParseError(f"Expected {typ} at pos {tok.pos}; got {tok.type} {tok.value!r}")
        return self._advance()

    def parse(self) -> ASTNode:
        node = self.parse_list()
        if self._current().type != 'EOF':
            tok = self._current()
            raise ParseError(f"Unexpected token {tok.value!r} at pos {tok.pos}")
        return node

    def parse_list(self) -> ASTNode:
        items = [self.parse_expression(0)]
        while self._current().type == 'COMMA':
            self._advance()
            items.append(self.parse_expression(0))
        return items[0] if len(items) == 1 else Sequence(items)

    def parse_expression(self, rbp: int = 0) -> ASTNode:
        tok = self._advance()
        left = self.nud(tok)
        while True:
            cur = self._current()
            if cur.type == 'OP' and cur.value in INFIX_BP:
                bp, right_assoc = INFIX_BP[cur.value]
                if bp <= rbp:
                    break
                op_tok = self._advance()
                rhs_rbp = bp - 1 if right_assoc else bp
                right = self.parse_expression(rhs_rbp)
                left = BinaryOp(op_tok.value, left, right)
                continue
            break
        return left

    def nud(self, tok: Token) -> ASTNode:
        """Null denotation (prefix/primary)."""
        if tok.type == 'NUMBER':
            return Number(tok.value)
        if tok.type == 'IDENT':
            return self._identifier(tok)
        if tok.type == 'LPAREN':
            expr = self.parse_list()
            self._expect('RPAREN')
            return expr
        if tok.type == 'OP' and tok.value in ('+', '-'):
            operand = self.parse_expression(PREFIX_BP)
            return UnaryOp(tok.value, operand)
        raise ParseError(f"Unexpected token {tok.type} {tok.value!r} at pos {tok.pos}")

    def _identifier(self, tok: Token) -> ASTNode:
        name = tok.value
        if name in self.names:
            return Variable(name)
        if name not in _BUILTINS:
            raise EvalError(f"Undefined variable: {name}")
        arity, _ = _BUILTINS[name]
        if arity == 0:
            # constants may be written as pi or pi()
            if self._current().type == 'LPAREN' and self.tokens[self.pos + 1].type == 'RPAREN':
                self._advance()
                self._advance()
            return FuncCall(name, [])
        if arity == 1:
            return FuncCall(name, [self.parse_expression(PREFIX_BP)])
        return FuncCall(name, self._parse_argument_list(arity))

    def _parse_argument_list(self, arity: int) -> List[ASTNode]:
        """Parse '(' expr (, expr)* ')' with exactly ``arity`` arguments."""
        self._expect('LPAREN')
        args: List[ASTNode] = [self.parse_expression(0)]
        while self._current().type == 'COMMA':
            self._advance()
            args.append(self.parse_expression(0))
        self._expect('RPAREN')
        if len(args) != arity:
            raise ParseError(f"Expected {arity} arguments, got {len(args)}")
        return args

# --------------------------
# Evaluator
# --------------------------

class Evaluator:
    """Evaluates AST nodes against a mapping of variable values."""

    def __init__(self, env: Optional[Mapping[str, float]] = None):
        self.env: Mapping[str, float] = env or {}

    def eval(self, node: ASTNode) -> float:
        """Evaluate given AST node and return the result or raise EvalError."""
        if isinstance(node, Number):
            return node.value
        if isinstance(node, Variable):
            if node.name in self.env:
                return float(self.env[node.name])
            raise EvalError(f"Undefined variable: {node.name}")
        if isinstance(node, UnaryOp):
            val = self.eval(node.operand)
            if node.op == '+':
                return val
            if node.op == '-':
                return -val
            raise EvalError(f"Unknown unary operator: {node.op}")
        if isinstance(node, BinaryOp):
            left_val = self.eval(node.left)
            right_val = self.eval(node.right)
            op = node.op
            if op == '+':
                return left_val + right_val
            if op == '-':
                return left_val - right_val
            if op == '*':
                return left_val * right_val
            if op == '/':
                return _div(left_val, right_val)
            if op == '%':
                return _fmod(left_val, right_val)
            if op == '^':
                return _pow(left_val, right_val)
            raise EvalError(f"Unknown binary operator: {op}")
        if isinstance(node, FuncCall):
            if node.name not in _BUILTINS:
                raise EvalError(f"Unknown function: {node.name}")
            _, func = _BUILTINS[node.name]
            args = [self.eval(a) for a in node.args]
            return func(*args)
        if isinstance(node, Sequence):
            result = math.nan
            for item in node.items:
                result = self.eval(item)
            return result
        raise EvalError(f"Unsupported AST node: {type(node).__name__}")

# --------------------------
# Bridge
# --------------------------

def compile_expression(text: str, variables: Optional[Mapping[str, float]] = None) -> ASTNode:
    """Tokenize and parse ``text``; raises ExpressionError on failure."""
    tokens = Lexer(text).tokenize()
    return Parser(tokens, variables).parse()

def evaluate(text: str, variables: Optional[Mapping[str, float]] = None) -> float:
    """Evaluate ``text`` with ``variables`` in scope.

    Returns the result, or NaN if the expression cannot be parsed, refers to
    something undefined, or nests too deeply to parse or evaluate. Infinite
    results are returned as they are.
    """
    variables = variables or {}
    try:
        ast = compile_expression(text, variables)
        return Evaluator(variables).eval(ast)
    except (ExpressionError, RecursionError):
        return math.nan
