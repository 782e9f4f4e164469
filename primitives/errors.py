"""Error taxonomy for argument construction and witness generation.

Construction-time errors (ConfigurationError and its subclasses) signal a
caller bug and are raised before any constraint is produced. NonInvertibleValue
is raised during witness generation when a folded denominator vanishes for the
current challenges; the proving attempt has to be abandoned and restarted with
fresh challenges by the caller.
"""

from typing import Optional


class ConfigurationError(ValueError):
    """An argument instance was configured inconsistently."""


class InsufficientSoundness(ConfigurationError):
    """Base-field accumulator requested on a field that requires the extension."""


class UnsupportedField(ConfigurationError):
    """The field is not in the set of recognized fields."""


class NonInvertibleValue(ZeroDivisionError):
    """A value that must be inverted is the additive identity.

    Attributes:
        row: Row index at which the value vanished, if known
        side: Which folded denominator vanished ('lhs' or 'rhs'), if known
    """

    def __init__(self, message: str, row: Optional[int] = None, side: Optional[str] = None):
        super().__init__(message)
        self.row = row
        self.side = side
