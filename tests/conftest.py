"""
Pytest configuration and shared argument fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the path so absolute imports work
# (tests/ is inside the project root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from constraints.argument import ArgumentSpec  # noqa: E402
from primitives.expression import ONE, col  # noqa: E402
from primitives.field import KnownField  # noqa: E402
from protocol.challenges import Challenges  # noqa: E402
from protocol.data import Trace  # noqa: E402

N_ROWS = 8


@pytest.fixture
def permutation_trace() -> Trace:
    """Rows 0-3 hold (a1, a2), rows 4-7 hold the same pairs as (b1, b2) in reverse."""
    first_four = [1, 1, 1, 1, 0, 0, 0, 0]
    return Trace.from_values(KnownField.GOLDILOCKS, {
        'first_four': first_four,
        'a1': [i for i in range(N_ROWS)],
        'a2': [i + 42 for i in range(N_ROWS)],
        'b1': [7 - i for i in range(N_ROWS)],
        'b2': [49 - i for i in range(N_ROWS)],
    })


@pytest.fixture
def permutation_spec() -> ArgumentSpec:
    return ArgumentSpec.permutation(
        lhs=['a1', 'a2'],
        rhs=['b1', 'b2'],
        lhs_selector=col('first_four'),
        rhs_selector=ONE - col('first_four'),
    )


@pytest.fixture
def lookup_trace() -> Trace:
    """Looked-up values x against the table t = 0..7 with multiplicities m."""
    return Trace.from_values(KnownField.GOLDILOCKS, {
        'x': [3, 3, 5, 0, 1, 3, 5, 7],
        't': list(range(N_ROWS)),
        'm': [1, 1, 0, 3, 0, 2, 0, 1],
    })


@pytest.fixture
def lookup_spec() -> ArgumentSpec:
    return ArgumentSpec.lookup(lhs=['x'], rhs=['t'], multiplicity=col('m'))


@pytest.fixture
def goldilocks_challenges() -> Challenges:
    return Challenges.sample(KnownField.GOLDILOCKS, with_extension=True, seed=1234)


@pytest.fixture
def bn254_challenges() -> Challenges:
    return Challenges.sample(KnownField.BN254, with_extension=False, seed=1234)
