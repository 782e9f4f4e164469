"""Off-circuit generation of logUp accumulator columns.

The accumulator satisfies acc[0] = 0 and

    acc[i+1] = acc[i] + lhs_selector[i] / lhs_folded[i]
                      - m[i] * rhs_selector[i] / rhs_folded[i]

where the folded denominators are beta minus the alpha-compressed LHS/RHS
tuples at row i. Unlike the constraint builder this runs on concrete values
and divides for real.

Two strategies produce identical columns:

- sequential: one pass, one Fp2 inversion per denominator per row;
- parallel: the domain is cut into chunks, each chunk computes its per-row
  increments with a Montgomery batch inversion and a local prefix sum on a
  thread pool, then a second pass adds each chunk's offset.

A vanishing denominator raises NonInvertibleValue naming the row and the
side. Columns are returned as new arrays; nothing is written to the trace
until the caller applies a complete witness, so an aborted instance leaves
no partial accumulator behind.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from constraints.argument import AccumulatorColumns, ArgumentSpec
from constraints.base import ConstraintContext, RowConstraintContext, SliceConstraintContext
from constraints.compress import compress
from primitives.errors import ConfigurationError, NonInvertibleValue
from primitives.expression import evaluate
from primitives.field import check_soundness, field_info
from primitives.fp2 import Fp2, batch_inverse_fp2
from protocol.challenges import Challenges
from protocol.data import Trace
from .base import WitnessModule

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024


@dataclass(frozen=True)
class AccumulatorWitness:
    """Accumulator columns of one instance.

    Attributes:
        accumulator: Columns the values belong to
        columns: Column values keyed by name
        total: Value after the last row (acc[n-1] plus the last increment)
    """
    accumulator: AccumulatorColumns
    columns: dict
    total: Fp2

    def apply(self, trace: Trace) -> Trace:
        """Return a copy of the trace with the accumulator columns written."""
        return trace.with_columns(self.columns)


def _folded_values(spec: ArgumentSpec, challenges: Challenges, ctx: ConstraintContext) -> tuple:
    theta = challenges.alpha.non_residue
    _, lhs, _, rhs = spec.unpack()
    lhs_folded = challenges.beta - compress([Fp2.from_base(evaluate(v, ctx), theta) for v in lhs], challenges.alpha)
    rhs_folded = challenges.beta - compress([Fp2.from_base(evaluate(v, ctx), theta) for v in rhs], challenges.alpha)
    return lhs_folded, rhs_folded


def _numerators(spec: ArgumentSpec, ctx: ConstraintContext) -> tuple:
    lhs_selector, _, rhs_selector, _ = spec.unpack()
    lhs_num = evaluate(lhs_selector, ctx)
    rhs_num = evaluate(spec.multiplicity, ctx) * evaluate(rhs_selector, ctx)
    return lhs_num, rhs_num


def _vanishing(side: str, row: int) -> NonInvertibleValue:
    return NonInvertibleValue(
        f"The {side} folded denominator vanishes at row {row}; "
        f"beta collided with a tuple fingerprint, restart with fresh challenges",
        row=row,
        side=side,
    )


def _invert(value: Fp2, side: str, row: int) -> Fp2:
    try:
        return value.inverse()
    except NonInvertibleValue:
        raise _vanishing(side, row) from None


def compute_next_acc(acc: Fp2, spec: ArgumentSpec, challenges: Challenges, ctx: RowConstraintContext) -> Fp2:
    """acc + lhs_selector/lhs_folded - m*rhs_selector/rhs_folded at one row.

    Args:
        acc: Accumulator value at the row
        spec: Argument description
        challenges: Session challenges
        ctx: Concrete values of every referenced column at the row

    Raises:
        NonInvertibleValue: If lhs_folded or rhs_folded is zero at this row
    """
    lhs_folded, rhs_folded = _folded_values(spec, challenges, ctx)
    lhs_num, rhs_num = _numerators(spec, ctx)
    lhs_inv = _invert(lhs_folded, "lhs", ctx.row)
    rhs_inv = _invert(rhs_folded, "rhs", ctx.row)
    return acc + lhs_inv * lhs_num - rhs_inv * rhs_num


def _check_instance(
    trace: Trace,
    spec: ArgumentSpec,
    accumulator: AccumulatorColumns,
    challenges: Challenges,
    allow_existing: bool = False,
) -> None:
    spec.validate()
    spec.check_accumulator(accumulator)
    info = field_info(trace.known_field)
    check_soundness(info.field, accumulator.with_extension)
    challenges.require(info.field, info.needs_extension)
    missing = spec.referenced_columns() - set(trace.columns)
    if missing:
        raise ConfigurationError(f"Trace is missing columns read by the argument: {sorted(missing)}")
    # A hint runs while the executor fills the accumulator in place
    present = set(accumulator.names) & set(trace.columns)
    if present and not allow_existing:
        raise ConfigurationError(f"Trace already holds accumulator columns {sorted(present)}")


class AccumulatorHint:
    """Per-row callable handed to a row-by-row trace executor.

    Called once per row, in row order, with the concrete values at that row
    (including the current accumulator); returns the accumulator value(s) the
    next row must hold.

    Example:
        hint = AccumulatorHint(spec, ('z1', 'z2'), challenges, trace)
        z_next = hint(RowConstraintContext(trace, challenges, row))
    """

    def __init__(
        self,
        spec: ArgumentSpec,
        accumulator: Union[AccumulatorColumns, Sequence[str]],
        challenges: Challenges,
        trace: Trace,
    ):
        self.spec = spec
        self.accumulator = AccumulatorColumns.coerce(accumulator)
        self.challenges = challenges
        _check_instance(trace, spec, self.accumulator, challenges, allow_existing=True)

    def __call__(self, ctx: RowConstraintContext) -> list:
        names = self.accumulator.names
        theta = self.challenges.alpha.non_residue
        c0 = ctx.col(names[0])
        c1 = ctx.col(names[1]) if self.accumulator.with_extension else ctx.constant(0)
        next_acc = compute_next_acc(Fp2(c0, c1, theta), self.spec, self.challenges, ctx)
        return list(next_acc.components()[: len(names)])


class LogUpWitness(WitnessModule):
    """Accumulator witness of one lookup or permutation instance."""

    def __init__(
        self,
        spec: ArgumentSpec,
        accumulator: Union[AccumulatorColumns, Sequence[str]],
        parallel: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_workers: Optional[int] = None,
    ):
        if chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
        self.spec = spec
        self.accumulator = AccumulatorColumns.coerce(accumulator)
        self.parallel = parallel
        self.chunk_size = chunk_size
        self.max_workers = max_workers

    def compute_columns(self, trace: Trace, challenges: Challenges) -> dict:
        return self.compute(trace, challenges).columns

    def compute(self, trace: Trace, challenges: Challenges) -> AccumulatorWitness:
        _check_instance(trace, self.spec, self.accumulator, challenges)
        if self.parallel:
            acc, total = self._compute_parallel(trace, challenges)
        else:
            acc, total = self._compute_sequential(trace, challenges)

        names = self.accumulator.names
        columns = {names[0]: acc.c0}
        if self.accumulator.with_extension:
            columns[names[1]] = acc.c1
        logger.info(
            "Generated %s accumulator %s over %d rows (%s)",
            self.spec.kind.value, names, trace.n, "parallel" if self.parallel else "sequential",
        )
        return AccumulatorWitness(self.accumulator, columns, total)

    def _compute_sequential(self, trace: Trace, challenges: Challenges) -> tuple:
        gf = trace.gf
        n = trace.n
        theta = challenges.alpha.non_residue
        c0 = gf.Zeros(n)
        c1 = gf.Zeros(n)
        acc = Fp2(gf(0), gf(0), theta)
        for row in range(n):
            c0[row] = acc.c0
            c1[row] = acc.c1
            acc = compute_next_acc(acc, self.spec, challenges, RowConstraintContext(trace, challenges, row))
        return Fp2(c0, c1, theta), acc

    def _chunk_increments(self, trace: Trace, challenges: Challenges, start: int, stop: int) -> Fp2:
        """Local inclusive prefix sums of the per-row increments of rows [start, stop)."""
        ctx = SliceConstraintContext(trace, challenges, start, stop)
        size = stop - start
        zeros = trace.gf.Zeros(size)
        lhs_folded, rhs_folded = _folded_values(self.spec, challenges, ctx)
        lhs_num, rhs_num = _numerators(self.spec, ctx)

        inverses = []
        vanishing = []
        for side, folded in (("lhs", lhs_folded), ("rhs", rhs_folded)):
            folded = folded + Fp2.from_base(zeros, folded.non_residue)
            try:
                inverses.append(batch_inverse_fp2(folded))
            except NonInvertibleValue as e:
                vanishing.append((start + e.row, side))
        if vanishing:
            # Same row and side as the sequential pass would report
            row, side = min(vanishing)
            raise _vanishing(side, row)
        lhs_inv, rhs_inv = inverses

        increments = lhs_inv * (zeros + lhs_num) - rhs_inv * (zeros + rhs_num)
        return Fp2(
            self._compute_cumulative_sum(increments.c0),
            self._compute_cumulative_sum(increments.c1),
            increments.non_residue,
        )

    def _compute_parallel(self, trace: Trace, challenges: Challenges) -> tuple:
        gf = trace.gf
        n = trace.n
        theta = challenges.alpha.non_residue
        bounds = [(start, min(start + self.chunk_size, n)) for start in range(0, n, self.chunk_size)]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            # Results are consumed in chunk order, so the earliest failing row is reported
            prefixes = list(pool.map(lambda b: self._chunk_increments(trace, challenges, *b), bounds))

            offsets = []
            running = Fp2(gf(0), gf(0), theta)
            for prefix in prefixes:
                offsets.append(running)
                running = running + prefix[len(prefix) - 1]
            total = running

            def shift(args):
                prefix, offset = args
                return prefix + offset

            inclusive = list(pool.map(shift, zip(prefixes, offsets)))

        c0 = gf.Zeros(n)
        c1 = gf.Zeros(n)
        for (start, stop), chunk in zip(bounds, inclusive):
            # acc[i] is the inclusive sum up to row i - 1
            rows = slice(start + 1, min(stop + 1, n))
            count = rows.stop - rows.start
            c0[rows] = chunk.c0[:count]
            c1[rows] = chunk.c1[:count]
        return Fp2(c0, c1, theta), total


def generate_accumulator(
    trace: Trace,
    spec: ArgumentSpec,
    accumulator: Union[AccumulatorColumns, Sequence[str]],
    challenges: Challenges,
    parallel: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_workers: Optional[int] = None,
) -> AccumulatorWitness:
    """Compute the accumulator columns of one instance over the whole trace.

    Raises:
        ConfigurationError: Invalid spec, accumulator or challenges, missing input
            columns, or accumulator columns already present in the trace
        InsufficientSoundness: One accumulator column on a field needing Fp2
        NonInvertibleValue: A folded denominator vanished
    """
    module = LogUpWitness(spec, accumulator, parallel, chunk_size, max_workers)
    return module.compute(trace, challenges)


def generate_accumulators(
    trace: Trace,
    instances: Iterable[tuple],
    challenges: Challenges,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> Trace:
    """Generate every instance's accumulator and return the completed trace.

    Instances are independent and run on a thread pool. The returned trace
    holds all accumulators, or the call raises and no column is written.
    """
    instances = list(instances)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        witnesses = list(pool.map(
            lambda inst: generate_accumulator(trace, inst[0], inst[1], challenges, parallel=parallel),
            instances,
        ))
    columns = {}
    for witness in witnesses:
        for name in witness.columns:
            if name in columns:
                raise ConfigurationError(f"Accumulator column '{name}' is used by more than one instance")
        columns.update(witness.columns)
    return trace.with_columns(columns)
