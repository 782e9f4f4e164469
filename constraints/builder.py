"""Division-free constraints for the logUp accumulator.

For challenges alpha, beta and the folded denominators

    lhs_folded = beta - compress(lhs, alpha)
    rhs_folded = beta - compress(rhs, alpha)

the accumulator follows

    acc' = acc + lhs_selector / lhs_folded - m * rhs_selector / rhs_folded

so summing over the cyclic domain telescopes to zero iff the selected LHS
rows equal the selected RHS rows as multisets (with multiplicities m).
Constraints cannot divide, so the recurrence is multiplied through by
lhs_folded * rhs_folded:

    lhs_folded * rhs_folded * (acc' - acc)
        + m * rhs_selector * lhs_folded
        - lhs_selector * rhs_folded = 0

evaluated component-wise over Fp2. Together with acc = 0 on the first row this
gives 2 boundary and 2 transition constraints per instance. When the field is
large enough to skip the extension, challenges are embedded with c1 = 0 and
the second component of every constraint built from a single accumulator
column simplifies to the literal 0.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from primitives.errors import ConfigurationError
from primitives.expression import IS_FIRST, ChallengeRef, Expression, degree, is_zero
from primitives.field import check_soundness, field_info
from primitives.fp2 import Fp2
from protocol.challenges import ALPHA, BETA, component_names
from .argument import AccumulatorColumns, ArgumentSpec
from .compress import compress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundaryConstraint:
    """`expr` must vanish on the first row of the domain."""
    name: str
    expr: Expression

    def polynomial(self) -> Expression:
        """The constraint as a polynomial that vanishes on every row."""
        return IS_FIRST * self.expr

    @property
    def is_vacuous(self) -> bool:
        return is_zero(self.expr)


@dataclass(frozen=True)
class TransitionConstraint:
    """`expr` must vanish on every row; `expr` may reference the next row."""
    name: str
    expr: Expression

    def polynomial(self) -> Expression:
        return self.expr

    @property
    def is_vacuous(self) -> bool:
        return is_zero(self.expr)


Constraint = Union[BoundaryConstraint, TransitionConstraint]


@dataclass(frozen=True)
class ArgumentConstraints:
    """Constraints of one argument instance.

    Attributes:
        spec: The argument the constraints enforce
        accumulator: Accumulator columns being constrained
        uses_extension: Whether challenges carry two components
        boundary: (c0, c1) first-row constraints
        transition: (c0, c1) every-row constraints
    """
    spec: ArgumentSpec
    accumulator: AccumulatorColumns
    uses_extension: bool
    boundary: tuple
    transition: tuple

    def all(self) -> list:
        return [*self.boundary, *self.transition]

    @property
    def degree(self) -> int:
        return max(degree(c.polynomial()) for c in self.all())


def challenge_fp2(prefix: str, non_residue: int, uses_extension: bool) -> Fp2:
    """Symbolic challenge, embedded from the base field unless the extension is used."""
    c0_name, c1_name = component_names(prefix)
    if uses_extension:
        return Fp2(ChallengeRef(c0_name), ChallengeRef(c1_name), non_residue)
    return Fp2.from_base(ChallengeRef(c0_name), non_residue)


def folded_denominators(spec: ArgumentSpec, alpha: Fp2, beta: Fp2) -> tuple:
    """(beta - compress(lhs), beta - compress(rhs)) over Fp2."""
    theta = alpha.non_residue
    _, lhs, _, rhs = spec.unpack()
    lhs_folded = beta - compress([Fp2.from_base(v, theta) for v in lhs], alpha)
    rhs_folded = beta - compress([Fp2.from_base(v, theta) for v in rhs], alpha)
    return lhs_folded, rhs_folded


def build(
    spec: ArgumentSpec,
    accumulator: Union[AccumulatorColumns, Sequence[str]],
    known_field,
) -> ArgumentConstraints:
    """Build the boundary and transition constraints of one instance.

    Args:
        spec: Lookup or permutation description
        accumulator: One or two accumulator column names
        known_field: Field the instance runs over

    Returns:
        ArgumentConstraints with two boundary and two transition constraints

    Raises:
        ConfigurationError: Arity mismatch or wrong accumulator column count
        UnsupportedField: Unknown field
        InsufficientSoundness: One accumulator column on a field needing Fp2
    """
    spec.validate()
    accumulator = AccumulatorColumns.coerce(accumulator)
    spec.check_accumulator(accumulator)
    info = field_info(known_field)
    check_soundness(info.field, accumulator.with_extension)

    theta = info.non_residue
    uses_extension = info.needs_extension
    alpha = challenge_fp2(ALPHA, theta, uses_extension)
    beta = challenge_fp2(BETA, theta, uses_extension)

    lhs_selector, _, rhs_selector, _ = spec.unpack()
    lhs_folded, rhs_folded = folded_denominators(spec, alpha, beta)

    acc = accumulator.as_fp2(theta)
    next_acc = acc.next()

    update = (
        lhs_folded * rhs_folded * (next_acc - acc)
        + lhs_folded * (spec.multiplicity * rhs_selector)
        - rhs_folded * lhs_selector
    )

    prefix = accumulator.names[0]
    boundary = tuple(
        BoundaryConstraint(f"{prefix}.boundary[{i}]", component)
        for i, component in enumerate(acc.components())
    )
    transition = tuple(
        TransitionConstraint(f"{prefix}.transition[{i}]", component)
        for i, component in enumerate(update.components())
    )

    constraints = ArgumentConstraints(spec, accumulator, uses_extension, boundary, transition)
    logger.debug(
        "Built %s over %s: arity=%d accumulator=%s extension=%s degree=%d",
        spec.kind.value, info.field.value, spec.arity, accumulator.names,
        uses_extension, constraints.degree,
    )
    return constraints


def build_many(
    instances: Iterable[tuple],
    known_field,
) -> list:
    """Build several independent instances.

    Args:
        instances: (spec, accumulator) pairs
        known_field: Field shared by every instance

    Raises:
        ConfigurationError: If two instances share an accumulator column
    """
    built = [build(spec, accumulator, known_field) for spec, accumulator in instances]
    seen = set()
    for constraints in built:
        for name in constraints.accumulator.names:
            if name in seen:
                raise ConfigurationError(f"Accumulator column '{name}' is used by more than one instance")
            seen.add(name)
    return built
