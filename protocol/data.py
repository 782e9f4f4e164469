"""Data containers for constraint evaluation and witness generation.

Two views of the same columns are used:

    1. Trace (prover side)
       - Named base-field columns over the whole row domain
       - Used by: witness generation, the vectorized constraint checker

    2. VerifierData (verifier side)
       - Opened evaluations keyed by (name, offset), offset 0 = current row,
         offset 1 = next row
       - Used by: VerifierConstraintContext

Usage:
    trace = Trace.from_values(KnownField.GOLDILOCKS, {'a': [0, 1, 2, 3]})
    ctx = ProverConstraintContext(trace, challenges)
    values = evaluate(constraint.expr, ctx)
"""

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from primitives.errors import ConfigurationError
from primitives.field import KnownField, get_field, resolve_field, to_field


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@dataclass
class Trace:
    """Named base-field columns over a cyclic row domain of size n.

    Attributes:
        known_field: Field the columns live in
        columns: Column values keyed by name, all galois arrays of length n
    """
    known_field: KnownField
    columns: dict = field(default_factory=dict)

    def __post_init__(self):
        self.known_field = resolve_field(self.known_field)
        gf = get_field(self.known_field)
        converted = {}
        for name, values in self.columns.items():
            if not isinstance(values, gf):
                values = to_field(self.known_field, values)
            converted[name] = values
        self.columns = converted

        lengths = {len(values) for values in self.columns.values()}
        if len(lengths) > 1:
            raise ConfigurationError(f"All trace columns must have the same length, got {sorted(lengths)}")
        if lengths and not _is_power_of_two(lengths.pop()):
            raise ConfigurationError(f"Trace length must be a power of two, got {self.n}")

    @classmethod
    def from_values(cls, known_field, columns: Mapping[str, Sequence[int]]) -> "Trace":
        """Build a trace from integer columns (negative values are reduced mod p)."""
        return cls(known_field, {name: to_field(known_field, values) for name, values in columns.items()})

    @property
    def gf(self):
        return get_field(self.known_field)

    @property
    def n(self) -> int:
        if not self.columns:
            return 0
        return len(next(iter(self.columns.values())))

    def column(self, name: str):
        try:
            return self.columns[name]
        except KeyError:
            raise KeyError(f"Column '{name}' not found in trace. Available: {sorted(self.columns)}") from None

    def row(self, i: int) -> dict:
        """Values of every column at row i (wrapping modulo n)."""
        i %= self.n
        return {name: values[i] for name, values in self.columns.items()}

    def with_columns(self, new_columns: Mapping) -> "Trace":
        """Return a copy of the trace with columns added or replaced."""
        merged = dict(self.columns)
        merged.update(new_columns)
        return Trace(self.known_field, merged)

    def __contains__(self, name: str) -> bool:
        return name in self.columns


@dataclass
class VerifierData:
    """Opened evaluations for single-point constraint evaluation.

    Attributes:
        evals: Evaluations keyed by (name, offset); offset 0 = current row,
               offset 1 = next row. The first-row selector is stored under
               ('__is_first__', 0).
    """
    evals: dict = field(default_factory=dict)

    @classmethod
    def from_trace_row(cls, trace: Trace, row: int) -> "VerifierData":
        """Open every column of a trace at `row` and `row + 1`."""
        n = trace.n
        evals = {}
        for name, values in trace.columns.items():
            evals[(name, 0)] = values[row % n]
            evals[(name, 1)] = values[(row + 1) % n]
        evals[("__is_first__", 0)] = trace.gf(1 if row % n == 0 else 0)
        return cls(evals=evals)

