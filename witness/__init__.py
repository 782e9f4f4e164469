"""Witness generation for lookup and permutation accumulators.

Runs on the prover only, after the challenges are drawn. Each instance gets a
LogUpWitness module; generate_accumulators() fills every instance of a trace
at once and returns the completed trace.
"""

from .accumulator import (
    DEFAULT_CHUNK_SIZE,
    AccumulatorHint,
    AccumulatorWitness,
    LogUpWitness,
    compute_next_acc,
    generate_accumulator,
    generate_accumulators,
)
from .base import WitnessModule

__all__ = [
    "WitnessModule",
    "LogUpWitness",
    "AccumulatorHint",
    "AccumulatorWitness",
    "DEFAULT_CHUNK_SIZE",
    "compute_next_acc",
    "generate_accumulator",
    "generate_accumulators",
]
