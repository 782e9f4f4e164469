"""Constraint construction for lookup and permutation arguments.

An argument is described once by an ArgumentSpec and compiled by build() into
boundary and transition constraints over the accumulator columns. The
constraints are symbolic expressions: they never divide, and they are
evaluated by any ConstraintContext (whole trace, single row, or verifier
openings).
"""

from .argument import AccumulatorColumns, ArgumentKind, ArgumentSpec
from .base import (
    ConstraintContext,
    ProverConstraintContext,
    RowConstraintContext,
    SliceConstraintContext,
    VerifierConstraintContext,
    evaluate_fp2,
)
from .builder import (
    ArgumentConstraints,
    BoundaryConstraint,
    TransitionConstraint,
    build,
    build_many,
)
from .compress import compress

__all__ = [
    "ArgumentKind",
    "ArgumentSpec",
    "AccumulatorColumns",
    "ConstraintContext",
    "ProverConstraintContext",
    "RowConstraintContext",
    "SliceConstraintContext",
    "VerifierConstraintContext",
    "evaluate_fp2",
    "ArgumentConstraints",
    "BoundaryConstraint",
    "TransitionConstraint",
    "build",
    "build_many",
    "compress",
]
