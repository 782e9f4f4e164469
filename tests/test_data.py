"""Tests for Trace and VerifierData containers."""

import numpy as np
import pytest

from primitives.errors import ConfigurationError, UnsupportedField
from primitives.field import GOLDILOCKS_PRIME, KnownField, get_field
from protocol.data import Trace, VerifierData

FF = get_field(KnownField.GOLDILOCKS)


def test_trace_from_values_reduces_into_field() -> None:
    """Negative values are reduced mod p."""
    trace = Trace.from_values('goldilocks', {'a': [-1, 0, 1, 2]})
    assert trace.known_field is KnownField.GOLDILOCKS
    assert trace.column('a')[0] == GOLDILOCKS_PRIME - 1
    assert trace.n == 4


def test_trace_accepts_plain_lists() -> None:
    """Plain lists are converted to galois arrays."""
    trace = Trace(KnownField.GOLDILOCKS, {'a': [1, 2]})
    assert isinstance(trace.column('a'), FF)


def test_trace_rejects_uneven_columns() -> None:
    """All columns must have the same length."""
    with pytest.raises(ConfigurationError):
        Trace.from_values(KnownField.GOLDILOCKS, {'a': [1, 2, 3, 4], 'b': [1, 2]})


def test_trace_rejects_non_power_of_two() -> None:
    """The row domain has a power-of-two size."""
    with pytest.raises(ConfigurationError):
        Trace.from_values(KnownField.GOLDILOCKS, {'a': [1, 2, 3]})


def test_trace_rejects_unknown_field() -> None:
    """Traces only live in recognized fields."""
    with pytest.raises(UnsupportedField):
        Trace.from_values('pallas', {'a': [1, 2]})


def test_missing_column_lists_available() -> None:
    """The KeyError lists the available columns."""
    trace = Trace.from_values(KnownField.GOLDILOCKS, {'a': [1, 2]})
    with pytest.raises(KeyError, match="Available"):
        trace.column('b')


def test_with_columns_returns_copy() -> None:
    """with_columns leaves the original trace unchanged."""
    trace = Trace.from_values(KnownField.GOLDILOCKS, {'a': [1, 2]})
    extended = trace.with_columns({'b': FF([3, 4])})
    assert 'b' in extended
    assert 'b' not in trace
    assert np.array_equal(extended.column('a'), trace.column('a'))


def test_row_wraps() -> None:
    """Row indices wrap modulo n."""
    trace = Trace.from_values(KnownField.GOLDILOCKS, {'a': [1, 2], 'b': [3, 4]})
    assert trace.row(2) == {'a': FF(1), 'b': FF(3)}


def test_verifier_data_from_trace_row() -> None:
    """Openings at the last row read row 0 as the next row."""
    trace = Trace.from_values(KnownField.GOLDILOCKS, {'a': [1, 2, 3, 4]})
    data = VerifierData.from_trace_row(trace, 3)
    assert data.evals[('a', 0)] == FF(4)
    assert data.evals[('a', 1)] == FF(1)
    assert data.evals[('__is_first__', 0)] == FF(0)
    assert VerifierData.from_trace_row(trace, 0).evals[('__is_first__', 0)] == FF(1)
