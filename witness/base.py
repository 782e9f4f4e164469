"""Base class for witness generation."""

from abc import ABC, abstractmethod
from typing import Dict

from protocol.challenges import Challenges
from protocol.data import Trace


class WitnessModule(ABC):
    """Per-instance witness generation. Used by the prover only.

    A witness module computes the columns that are only defined once the
    challenges are known (the accumulator of a lookup or permutation). Unlike
    the constraint builder it works on concrete values and may divide.
    """

    @abstractmethod
    def compute_columns(self, trace: Trace, challenges: Challenges) -> Dict[str, object]:
        """Compute the module's columns.

        Args:
            trace: Committed trace holding every column the instance reads
            challenges: Challenges drawn after the trace was committed

        Returns:
            Dictionary mapping column names to galois arrays over the whole domain
        """
        pass

    @staticmethod
    def _compute_cumulative_sum(row_values):
        """Compute cumulative sum: result[i] = sum(row_values[0:i+1])."""
        result = row_values.copy()
        for i in range(1, len(row_values)):
            result[i] = result[i - 1] + row_values[i]
        return result
