"""Symbolic polynomial expressions over named trace columns.

Constraints handed to the arithmetization backend are trees of these nodes.
The node set is closed under addition, subtraction, negation and
multiplication only: there is no division node, so nothing built from these
expressions can ever need a field inversion.

Leaves:
    Constant    An integer constant, reduced into the field on evaluation.
    Column      A trace column at the current row, or at the next row when
                `is_next` is set (row i+1 wraps to 0 on the last row).
    ChallengeRef
                A named verifier challenge component (e.g. 'alpha_0'). The
                value is only known after the trace is committed, so it is
                looked up from the evaluation context.
    FirstRow    The Lagrange selector that is 1 on row 0 and 0 elsewhere.

Internal nodes: Add, Sub, Neg, Mul.

Python operators build nodes through simplifying constructors that fold
constants, so `0 * x` is Constant(0) and `x + 0` is x. As a result, Fp2
arithmetic on base-field expressions leaves the second component as the
literal Constant(0).

Example:
    a = Column('a')
    expr = a.next() * challenge('alpha_0') - a
    degree(expr)   # 2
    evaluate(expr, ctx)
"""

from dataclasses import dataclass
from typing import Union


class Expression:
    """Base class of all expression nodes."""

    def __add__(self, other):
        if not _liftable(other):
            return NotImplemented
        return add(self, other)

    def __radd__(self, other):
        if not _liftable(other):
            return NotImplemented
        return add(other, self)

    def __sub__(self, other):
        if not _liftable(other):
            return NotImplemented
        return sub(self, other)

    def __rsub__(self, other):
        if not _liftable(other):
            return NotImplemented
        return sub(other, self)

    def __mul__(self, other):
        if not _liftable(other):
            return NotImplemented
        return mul(self, other)

    def __rmul__(self, other):
        if not _liftable(other):
            return NotImplemented
        return mul(other, self)

    def __neg__(self):
        return neg(self)

    def next(self) -> "Expression":
        """Shift every column reference one row forward."""
        raise NotImplementedError


ExprLike = Union[Expression, int, str]


def _liftable(value) -> bool:
    return isinstance(value, (Expression, int, str))


# --- Leaf nodes ---

@dataclass(frozen=True)
class Constant(Expression):
    value: int

    def next(self) -> Expression:
        return self

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Column(Expression):
    name: str
    is_next: bool = False

    def next(self) -> Expression:
        if self.is_next:
            raise ValueError(f"Column '{self.name}' is already shifted to the next row")
        return Column(self.name, True)

    def __str__(self) -> str:
        return f"{self.name}'" if self.is_next else self.name


@dataclass(frozen=True)
class ChallengeRef(Expression):
    name: str

    def next(self) -> Expression:
        return self

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FirstRow(Expression):

    def next(self) -> Expression:
        raise ValueError("The first-row selector cannot be shifted")

    def __str__(self) -> str:
        return "is_first"


# --- Internal nodes ---

@dataclass(frozen=True)
class Add(Expression):
    left: Expression
    right: Expression

    def next(self) -> Expression:
        return add(self.left.next(), self.right.next())

    def __str__(self) -> str:
        return f"({self.left} + {self.right})"


@dataclass(frozen=True)
class Sub(Expression):
    left: Expression
    right: Expression

    def next(self) -> Expression:
        return sub(self.left.next(), self.right.next())

    def __str__(self) -> str:
        return f"({self.left} - {self.right})"


@dataclass(frozen=True)
class Neg(Expression):
    expr: Expression

    def next(self) -> Expression:
        return neg(self.expr.next())

    def __str__(self) -> str:
        return f"-{self.expr}"


@dataclass(frozen=True)
class Mul(Expression):
    left: Expression
    right: Expression

    def next(self) -> Expression:
        return mul(self.left.next(), self.right.next())

    def __str__(self) -> str:
        return f"{self.left} * {self.right}"


ZERO = Constant(0)
ONE = Constant(1)
IS_FIRST = FirstRow()


# --- Helper constructors ---

def lift(value: ExprLike) -> Expression:
    """Turn ints into Constants and strings into current-row Columns."""
    if isinstance(value, Expression):
        return value
    if isinstance(value, int):
        return Constant(int(value))
    if isinstance(value, str):
        return Column(value)
    raise TypeError(f"Cannot use {type(value).__name__} as an expression")


def col(name: str) -> Column:
    return Column(name)


def const(value: int) -> Constant:
    return Constant(value)


def challenge(name: str) -> ChallengeRef:
    return ChallengeRef(name)


def _is_const(expr: Expression, value: int) -> bool:
    return isinstance(expr, Constant) and expr.value == value


def add(a: ExprLike, b: ExprLike) -> Expression:
    a, b = lift(a), lift(b)
    if _is_const(a, 0):
        return b
    if _is_const(b, 0):
        return a
    if isinstance(a, Constant) and isinstance(b, Constant):
        return Constant(a.value + b.value)
    return Add(a, b)


def sub(a: ExprLike, b: ExprLike) -> Expression:
    a, b = lift(a), lift(b)
    if _is_const(b, 0):
        return a
    if isinstance(a, Constant) and isinstance(b, Constant):
        return Constant(a.value - b.value)
    if _is_const(a, 0):
        return neg(b)
    return Sub(a, b)


def neg(a: ExprLike) -> Expression:
    a = lift(a)
    if isinstance(a, Constant):
        return Constant(-a.value)
    if isinstance(a, Neg):
        return a.expr
    return Neg(a)


def mul(a: ExprLike, b: ExprLike) -> Expression:
    a, b = lift(a), lift(b)
    if _is_const(a, 0) or _is_const(b, 0):
        return ZERO
    if _is_const(a, 1):
        return b
    if _is_const(b, 1):
        return a
    if isinstance(a, Constant) and isinstance(b, Constant):
        return Constant(a.value * b.value)
    return Mul(a, b)


# --- Analysis ---

def degree(expr: Expression) -> int:
    """Total degree in the trace columns (challenges count as constants)."""
    if isinstance(expr, (Constant, ChallengeRef)):
        return 0
    if isinstance(expr, (Column, FirstRow)):
        return 1
    if isinstance(expr, (Add, Sub)):
        return max(degree(expr.left), degree(expr.right))
    if isinstance(expr, Neg):
        return degree(expr.expr)
    if isinstance(expr, Mul):
        return degree(expr.left) + degree(expr.right)
    raise TypeError(f"Unknown expression type: {type(expr)}")


def _leaves(expr: Expression):
    if isinstance(expr, (Add, Sub, Mul)):
        yield from _leaves(expr.left)
        yield from _leaves(expr.right)
    elif isinstance(expr, Neg):
        yield from _leaves(expr.expr)
    else:
        yield expr


def columns(expr: Expression) -> frozenset:
    """All Column leaves referenced by the expression."""
    return frozenset(leaf for leaf in _leaves(expr) if isinstance(leaf, Column))


def challenge_names(expr: Expression) -> frozenset:
    return frozenset(leaf.name for leaf in _leaves(expr) if isinstance(leaf, ChallengeRef))


def is_zero(expr: Expression) -> bool:
    """Whether the expression simplified to the literal constant 0."""
    return _is_const(expr, 0)


# --- Evaluation ---

def evaluate(expr: Expression, ctx):
    """Evaluate an expression against a ConstraintContext.

    The context decides the shape of the result: whole-trace arrays for the
    prover context, galois scalars for the row and verifier contexts.
    """
    if isinstance(expr, Constant):
        return ctx.constant(expr.value)
    if isinstance(expr, Column):
        return ctx.next_col(expr.name) if expr.is_next else ctx.col(expr.name)
    if isinstance(expr, ChallengeRef):
        return ctx.challenge(expr.name)
    if isinstance(expr, FirstRow):
        return ctx.is_first()
    if isinstance(expr, Add):
        return evaluate(expr.left, ctx) + evaluate(expr.right, ctx)
    if isinstance(expr, Sub):
        return evaluate(expr.left, ctx) - evaluate(expr.right, ctx)
    if isinstance(expr, Neg):
        return -evaluate(expr.expr, ctx)
    if isinstance(expr, Mul):
        return evaluate(expr.left, ctx) * evaluate(expr.right, ctx)
    raise TypeError(f"Unknown expression type: {type(expr)}")
