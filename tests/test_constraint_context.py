"""Tests for ConstraintContext ABC and implementations."""

import numpy as np
import pytest

from constraints.base import (
    ConstraintContext,
    ProverConstraintContext,
    RowConstraintContext,
    SliceConstraintContext,
    VerifierConstraintContext,
    evaluate_fp2,
)
from primitives.errors import ConfigurationError
from primitives.expression import IS_FIRST, challenge, col, evaluate
from primitives.field import FIELDS, KnownField, get_field
from primitives.fp2 import Fp2
from protocol.challenges import Challenges
from protocol.data import Trace, VerifierData

FF = get_field(KnownField.GOLDILOCKS)
THETA = FIELDS[KnownField.GOLDILOCKS].non_residue


@pytest.fixture
def trace() -> Trace:
    return Trace.from_values(KnownField.GOLDILOCKS, {
        'a': [1, 2, 3, 4, 5, 6, 7, 8],
        'b': [10, 20, 30, 40, 50, 60, 70, 80],
    })


@pytest.fixture
def challenges() -> Challenges:
    return Challenges.from_values(KnownField.GOLDILOCKS, alpha=(3, 4), beta=(5, 6))


def test_context_is_abstract() -> None:
    """ConstraintContext cannot be instantiated."""
    with pytest.raises(TypeError):
        ConstraintContext(KnownField.GOLDILOCKS, None)


def test_prover_context_col_returns_array(trace) -> None:
    """ProverConstraintContext.col returns full array of values."""
    ctx = ProverConstraintContext(trace)
    result = ctx.col('a')
    assert len(result) == 8
    assert np.array_equal(result, FF([1, 2, 3, 4, 5, 6, 7, 8]))


def test_prover_context_next_col_shifts(trace) -> None:
    """ProverConstraintContext.next_col shifts values by -1 (circular)."""
    ctx = ProverConstraintContext(trace)
    # [1,2,3,4,5,6,7,8] -> [2,3,4,5,6,7,8,1]
    assert np.array_equal(ctx.next_col('a'), FF([2, 3, 4, 5, 6, 7, 8, 1]))


def test_prover_context_is_first(trace) -> None:
    """is_first is 1 on row 0 and 0 elsewhere."""
    ctx = ProverConstraintContext(trace)
    assert np.array_equal(ctx.is_first(), FF([1, 0, 0, 0, 0, 0, 0, 0]))


def test_prover_context_missing_column(trace) -> None:
    """Unknown columns raise KeyError."""
    ctx = ProverConstraintContext(trace)
    with pytest.raises(KeyError):
        ctx.col('missing')


def test_challenge_without_challenges_rejected(trace) -> None:
    """Challenges exist only after commitment; asking early is a configuration bug."""
    ctx = ProverConstraintContext(trace)
    with pytest.raises(ConfigurationError):
        ctx.challenge('alpha_0')


def test_unknown_challenge_rejected(trace, challenges) -> None:
    """Unknown challenge names are a configuration error."""
    ctx = ProverConstraintContext(trace, challenges)
    with pytest.raises(ConfigurationError):
        ctx.challenge('gamma_0')


def test_challenge_components(trace, challenges) -> None:
    """Challenge components are looked up by name."""
    ctx = ProverConstraintContext(trace, challenges)
    assert ctx.challenge('alpha_0') == FF(3)
    assert ctx.challenge('alpha_1') == FF(4)
    assert ctx.challenge('beta_1') == FF(6)


def test_row_context_returns_scalars(trace, challenges) -> None:
    """RowConstraintContext reads one row and wraps the next row."""
    ctx = RowConstraintContext(trace, challenges, row=7)
    assert ctx.col('a') == FF(8)
    assert ctx.next_col('a') == FF(1)
    assert ctx.is_first() == FF(0)
    assert RowConstraintContext(trace, challenges, row=0).is_first() == FF(1)


def test_slice_context_wraps_next_row(trace, challenges) -> None:
    """The next row of the last slice row is row 0."""
    ctx = SliceConstraintContext(trace, challenges, 4, 8)
    assert np.array_equal(ctx.col('b'), FF([50, 60, 70, 80]))
    assert np.array_equal(ctx.next_col('b'), FF([60, 70, 80, 10]))
    assert np.array_equal(ctx.is_first(), FF([0, 0, 0, 0]))
    assert np.array_equal(SliceConstraintContext(trace, challenges, 0, 4).is_first(), FF([1, 0, 0, 0]))


class TestSameExpressionEverywhere:
    """One expression, evaluated by every context, gives the same values."""

    EXPR = col('a').next() * challenge('alpha_0') - col('b') + IS_FIRST * 5

    def test_prover_matches_rows(self, trace, challenges) -> None:
        """Whole-trace values equal per-row values."""
        full = evaluate(self.EXPR, ProverConstraintContext(trace, challenges))
        for row in range(trace.n):
            assert full[row] == evaluate(self.EXPR, RowConstraintContext(trace, challenges, row))

    def test_verifier_matches_rows(self, trace, challenges) -> None:
        """Openings give the same values as the trace rows."""
        for row in range(trace.n):
            data = VerifierData.from_trace_row(trace, row)
            ctx = VerifierConstraintContext(data, challenges, KnownField.GOLDILOCKS)
            assert evaluate(self.EXPR, ctx) == evaluate(self.EXPR, RowConstraintContext(trace, challenges, row))

    def test_slice_matches_prover(self, trace, challenges) -> None:
        """A slice gives the matching part of the whole-trace values."""
        full = evaluate(self.EXPR, ProverConstraintContext(trace, challenges))
        part = evaluate(self.EXPR, SliceConstraintContext(trace, challenges, 2, 6))
        assert np.array_equal(part, full[2:6])

    def test_expected_values(self, trace, challenges) -> None:
        """Values at the first and last rows, computed by hand."""
        full = evaluate(self.EXPR, ProverConstraintContext(trace, challenges))
        # row 0: a[1] * 3 - b[0] + 5 = 6 - 10 + 5
        assert full[0] == FF(1)
        # row 7 wraps: a[0] * 3 - b[7] = 3 - 80
        assert full[7] == FF(3) - FF(80)


def test_verifier_missing_opening(challenges) -> None:
    """Missing openings raise KeyError."""
    ctx = VerifierConstraintContext(VerifierData(), challenges, KnownField.GOLDILOCKS)
    with pytest.raises(KeyError):
        ctx.col('a')


def test_evaluate_fp2(trace, challenges) -> None:
    """Both components of a symbolic Fp2 are evaluated."""
    value = Fp2(col('a'), col('b'), THETA)
    result = evaluate_fp2(value, RowConstraintContext(trace, challenges, 2))
    assert result == Fp2(FF(3), FF(30), THETA)
