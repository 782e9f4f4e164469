"""Lookup and permutation argument descriptions.

Both arguments prove a multiset relation between two tuples of column
expressions: every selected LHS row must appear among the selected RHS rows,
with the RHS row counted `multiplicity` times. A permutation is the lookup
whose multiplicity is fixed to 1, making the relation a bijection.

Example:
    spec = ArgumentSpec.permutation(
        lhs=['a1', 'a2'], rhs=['b1', 'b2'],
        lhs_selector=col('first_four'), rhs_selector=1 - col('first_four'),
    )
    acc = AccumulatorColumns(('z1', 'z2'))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from primitives.errors import ConfigurationError
from primitives.expression import (
    ONE, ZERO, Column, Expression, ExprLike, columns, lift,
)
from primitives.fp2 import Fp2


class ArgumentKind(Enum):
    LOOKUP = "lookup"
    PERMUTATION = "permutation"


def _lift_optional(value: Optional[ExprLike]) -> Optional[Expression]:
    return None if value is None else lift(value)


def _lift_tuple(values) -> tuple:
    # A bare name is a one-element tuple, not a sequence of characters
    if isinstance(values, (str, int, Expression)):
        values = (values,)
    return tuple(lift(v) for v in values)


@dataclass(frozen=True)
class ArgumentSpec:
    """One lookup or permutation instance. Immutable once built.

    Attributes:
        lhs_selector: Gates LHS rows; None means every row is selected
        lhs: LHS value tuple
        rhs_selector: Gates RHS rows; None means every row is selected
        rhs: RHS value tuple
        multiplicity: How many times each RHS row is counted
        kind: LOOKUP or PERMUTATION
    """
    lhs_selector: Optional[Expression]
    lhs: tuple
    rhs_selector: Optional[Expression]
    rhs: tuple
    multiplicity: Expression = ONE
    kind: ArgumentKind = ArgumentKind.LOOKUP

    def __post_init__(self):
        object.__setattr__(self, "lhs_selector", _lift_optional(self.lhs_selector))
        object.__setattr__(self, "rhs_selector", _lift_optional(self.rhs_selector))
        object.__setattr__(self, "lhs", _lift_tuple(self.lhs))
        object.__setattr__(self, "rhs", _lift_tuple(self.rhs))
        object.__setattr__(self, "multiplicity", lift(self.multiplicity))
        if self.kind is ArgumentKind.PERMUTATION and self.multiplicity != ONE:
            raise ConfigurationError(
                f"A permutation counts every row exactly once; got multiplicity {self.multiplicity}"
            )

    @classmethod
    def lookup(
        cls,
        lhs: Union[ExprLike, Sequence[ExprLike]],
        rhs: Union[ExprLike, Sequence[ExprLike]],
        multiplicity: ExprLike,
        lhs_selector: Optional[ExprLike] = None,
        rhs_selector: Optional[ExprLike] = None,
    ) -> "ArgumentSpec":
        return cls(lhs_selector, lhs, rhs_selector, rhs, multiplicity, ArgumentKind.LOOKUP)

    @classmethod
    def permutation(
        cls,
        lhs: Union[ExprLike, Sequence[ExprLike]],
        rhs: Union[ExprLike, Sequence[ExprLike]],
        lhs_selector: Optional[ExprLike] = None,
        rhs_selector: Optional[ExprLike] = None,
    ) -> "ArgumentSpec":
        return cls(lhs_selector, lhs, rhs_selector, rhs, ONE, ArgumentKind.PERMUTATION)

    @property
    def arity(self) -> int:
        return len(self.lhs)

    def validate(self) -> None:
        """Check the tuple invariants.

        Raises:
            ConfigurationError: If a tuple is empty or the arities differ
        """
        if not self.lhs or not self.rhs:
            raise ConfigurationError("LHS and RHS tuples must not be empty")
        if len(self.lhs) != len(self.rhs):
            raise ConfigurationError(
                f"LHS and RHS should have equal length, got {len(self.lhs)} and {len(self.rhs)}"
            )

    def unpack(self) -> tuple:
        """(lhs_selector, lhs, rhs_selector, rhs) with absent selectors as 1."""
        return (
            self.lhs_selector if self.lhs_selector is not None else ONE,
            self.lhs,
            self.rhs_selector if self.rhs_selector is not None else ONE,
            self.rhs,
        )

    def referenced_columns(self) -> frozenset:
        lhs_selector, lhs, rhs_selector, rhs = self.unpack()
        exprs = [lhs_selector, rhs_selector, self.multiplicity, *lhs, *rhs]
        return frozenset(c.name for e in exprs for c in columns(e))

    def check_accumulator(self, accumulator: "AccumulatorColumns") -> None:
        """Reject accumulator columns that the argument also reads.

        Raises:
            ConfigurationError: If an accumulator column is one of the inputs
        """
        shared = set(accumulator.names) & self.referenced_columns()
        if shared:
            raise ConfigurationError(
                f"Accumulator columns {sorted(shared)} are also read by the argument"
            )


@dataclass(frozen=True)
class AccumulatorColumns:
    """The one (base field) or two (Fp2) witness columns holding the running sum."""
    names: tuple

    def __post_init__(self):
        names = tuple(self.names)
        object.__setattr__(self, "names", names)
        if len(names) not in (1, 2):
            raise ConfigurationError(f"Expected 1 or 2 accumulator columns, got {len(names)}")
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Accumulator column names must be distinct, got {names}")

    @classmethod
    def coerce(cls, value: Union["AccumulatorColumns", str, Sequence[str]]) -> "AccumulatorColumns":
        if isinstance(value, AccumulatorColumns):
            return value
        if isinstance(value, str):
            return cls((value,))
        return cls(tuple(value))

    @property
    def with_extension(self) -> bool:
        return len(self.names) == 2

    def as_fp2(self, non_residue: int) -> Fp2:
        """The accumulator as a symbolic Fp2 element at the current row."""
        if self.with_extension:
            return Fp2(Column(self.names[0]), Column(self.names[1]), non_residue)
        return Fp2(Column(self.names[0]), ZERO, non_residue)
