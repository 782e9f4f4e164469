"""Contexts for evaluating symbolic constraints.

ConstraintContext provides a uniform interface for constraint evaluation that
works for the prover (whole-trace arrays), for a single row (scalars, used by
the witness generator), and for the verifier (opened evaluations). The same
constraint objects are evaluated in all three thanks to galois broadcasting.

Example:
    expr = col('a') * challenge('alpha_0') - col('b').next()

    # Whole trace: one value per row
    evaluate(expr, ProverConstraintContext(trace, challenges))

    # One row
    evaluate(expr, RowConstraintContext(trace, challenges, row=3))

    # Verifier: scalar evaluation from openings
    evaluate(expr, VerifierConstraintContext(verifier_data, challenges, field))
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from primitives.errors import ConfigurationError
from primitives.expression import evaluate
from primitives.field import get_field, resolve_field
from primitives.fp2 import Fp2
from protocol.challenges import Challenges
from protocol.data import Trace, VerifierData


class ConstraintContext(ABC):
    """Uniform interface for constraint evaluation."""

    def __init__(self, known_field, challenges: Optional[Challenges]):
        self.known_field = resolve_field(known_field)
        self.gf = get_field(self.known_field)
        self._challenges = challenges.as_dict() if challenges is not None else None

    @abstractmethod
    def col(self, name: str):
        """Column at the current row."""

    @abstractmethod
    def next_col(self, name: str):
        """Column at the next row (wrapping from the last row to row 0)."""

    @abstractmethod
    def is_first(self):
        """Lagrange selector of row 0."""

    def constant(self, value: int):
        return self.gf(value % self.gf.order)

    def challenge(self, name: str):
        """Fiat-Shamir challenge component (always scalar).

        Raises:
            ConfigurationError: If no challenges were supplied or the name is unknown
        """
        if self._challenges is None:
            raise ConfigurationError(
                f"Challenge '{name}' requested but no challenges were supplied; "
                f"challenges are only available after the trace is committed"
            )
        try:
            return self._challenges[name]
        except KeyError:
            raise ConfigurationError(
                f"Challenge '{name}' not found. Available: {sorted(self._challenges)}"
            ) from None


class ProverConstraintContext(ConstraintContext):
    """Prover implementation - returns arrays over every row of the trace."""

    def __init__(self, trace: Trace, challenges: Optional[Challenges] = None):
        super().__init__(trace.known_field, challenges)
        self._trace = trace

    @property
    def n(self) -> int:
        return self._trace.n

    def col(self, name: str):
        return self._trace.column(name)

    def next_col(self, name: str):
        return np.roll(self.col(name), -1)

    def is_first(self):
        selector = self.gf.Zeros(self.n)
        selector[0] = 1
        return selector


class RowConstraintContext(ConstraintContext):
    """Single-row implementation - returns scalars at `row`."""

    def __init__(self, trace: Trace, challenges: Optional[Challenges], row: int):
        super().__init__(trace.known_field, challenges)
        self._trace = trace
        self.row = row % trace.n

    def col(self, name: str):
        return self._trace.column(name)[self.row]

    def next_col(self, name: str):
        return self._trace.column(name)[(self.row + 1) % self._trace.n]

    def is_first(self):
        return self.gf(1 if self.row == 0 else 0)


class SliceConstraintContext(ConstraintContext):
    """Rows [start, stop) of the trace as arrays; next row still wraps over the whole domain."""

    def __init__(self, trace: Trace, challenges: Optional[Challenges], start: int, stop: int):
        super().__init__(trace.known_field, challenges)
        self._trace = trace
        self.start = start
        self.stop = stop

    def col(self, name: str):
        return self._trace.column(name)[self.start:self.stop]

    def next_col(self, name: str):
        rows = (np.arange(self.start, self.stop) + 1) % self._trace.n
        return self._trace.column(name)[rows]

    def is_first(self):
        selector = self.gf.Zeros(self.stop - self.start)
        if self.start == 0:
            selector[0] = 1
        return selector


class VerifierConstraintContext(ConstraintContext):
    """Verifier implementation - returns scalar openings."""

    def __init__(self, data: VerifierData, challenges: Optional[Challenges], known_field):
        super().__init__(known_field, challenges)
        self._data = data

    def _open(self, name: str, offset: int):
        try:
            return self._data.evals[(name, offset)]
        except KeyError:
            raise KeyError(f"No opening for column '{name}' at offset {offset}") from None

    def col(self, name: str):
        return self._open(name, 0)

    def next_col(self, name: str):
        return self._open(name, 1)

    def is_first(self):
        return self._open("__is_first__", 0)


def evaluate_fp2(value: Fp2, ctx: ConstraintContext) -> Fp2:
    """Evaluate both components of a symbolic Fp2 element."""
    return Fp2(evaluate(value.c0, ctx), evaluate(value.c1, ctx), value.non_residue)
