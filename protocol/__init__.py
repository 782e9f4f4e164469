"""Protocol - traces, challenges and constraint checking.

The mock constraint checker lives in protocol.checker and is imported from
there; it depends on the constraint and witness packages, which in turn use
the containers exported here.
"""

from protocol.challenges import ALPHA, BETA, Challenges, component_names
from protocol.data import Trace, VerifierData

__all__ = [
    "Challenges",
    "ALPHA",
    "BETA",
    "component_names",
    "Trace",
    "VerifierData",
]
