"""Mock backend: check argument constraints directly on a complete trace.

The checker evaluates every boundary and transition constraint of the given
instances on every row (cyclically, so the transition of the last row reads
row 0) and reports the rows where a constraint does not vanish.

It also applies the final-value contract separately: the accumulated total
after the last row must equal the expected total (0 unless the caller claims
otherwise). On a cyclic domain with acc[0] = 0 the last-row transition already
implies a zero total; a backend without wrap-around rows relies on this check
alone.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

import numpy as np

from constraints.base import ProverConstraintContext, RowConstraintContext
from constraints.builder import ArgumentConstraints
from primitives.expression import evaluate
from primitives.fp2 import Fp2
from protocol.challenges import Challenges
from protocol.data import Trace
from witness.accumulator import compute_next_acc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstraintFailure:
    """A constraint that did not vanish.

    Attributes:
        name: Constraint name (e.g. 'z1.transition[0]' or 'z1.final_value')
        row: Row where it failed
        value: Offending value (constraint evaluation, or the total for final_value)
    """
    name: str
    row: int
    value: object


@dataclass
class CheckResult:
    failures: list = field(default_factory=list)
    checked: int = 0

    def has_errors(self) -> bool:
        return len(self.failures) > 0

    def failed_constraints(self) -> set:
        return {f.name for f in self.failures}

    def log(self) -> None:
        if not self.failures:
            logger.info("All %d constraints are satisfied", self.checked)
            return
        for failure in self.failures:
            logger.error("Constraint %s is not satisfied at row %d: %s", failure.name, failure.row, failure.value)
        logger.error("%d of %d constraints failed", len(self.failed_constraints()), self.checked)


def accumulated_total(trace: Trace, constraints: ArgumentConstraints, challenges: Challenges) -> Fp2:
    """The accumulator value one step past the last row, computed from the trace."""
    n = trace.n
    names = constraints.accumulator.names
    theta = challenges.alpha.non_residue
    ctx = RowConstraintContext(trace, challenges, n - 1)
    c0 = ctx.col(names[0])
    c1 = ctx.col(names[1]) if constraints.accumulator.with_extension else ctx.constant(0)
    return compute_next_acc(Fp2(c0, c1, theta), constraints.spec, challenges, ctx)


def final_value_check(total: Fp2, expected: Optional[Fp2] = None) -> bool:
    """Whether the accumulated total equals the expected total (default 0)."""
    if expected is None:
        return total.is_zero()
    return total == expected


class PolynomialConstraintChecker:
    """Row-by-row satisfaction check of argument constraints.

    Example:
        checker = PolynomialConstraintChecker(trace, challenges)
        result = checker.check([constraints])
        result.log()
        assert not result.has_errors()
    """

    def __init__(self, trace: Trace, challenges: Challenges):
        self.trace = trace
        self.challenges = challenges
        self._ctx = ProverConstraintContext(trace, challenges)

    def evaluate(self, polynomial):
        """Constraint values on every row."""
        return self.trace.gf.Zeros(self.trace.n) + evaluate(polynomial, self._ctx)

    def check(
        self,
        instances: Iterable[ArgumentConstraints],
        expected_totals: Optional[Mapping[str, Fp2]] = None,
        check_final_value: bool = True,
    ) -> CheckResult:
        """Check every constraint of every instance.

        Args:
            instances: Built argument constraints
            expected_totals: Claimed totals keyed by the first accumulator
                column name; instances not listed must total 0
            check_final_value: Also apply the final-value contract
        """
        expected_totals = expected_totals or {}
        result = CheckResult()
        for instance in instances:
            for constraint in instance.all():
                result.checked += 1
                values = self.evaluate(constraint.polynomial())
                for row in np.flatnonzero(values != 0):
                    result.failures.append(ConstraintFailure(constraint.name, int(row), values[row]))

            if check_final_value:
                result.checked += 1
                prefix = instance.accumulator.names[0]
                total = accumulated_total(self.trace, instance, self.challenges)
                if not final_value_check(total, expected_totals.get(prefix)):
                    result.failures.append(ConstraintFailure(f"{prefix}.final_value", self.trace.n - 1, total))
        return result
