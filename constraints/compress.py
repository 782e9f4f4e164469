"""Random-linear-combination compression of value tuples.

compress([x_1, ..., x_n], alpha) = alpha^(n-1)·x_1 + alpha^(n-2)·x_2 + ... + x_n

evaluated with Horner's rule, most significant element first. Two distinct
tuples of arity n collide for at most n - 1 values of alpha.
"""

from typing import Sequence

from primitives.errors import ConfigurationError


def compress(values: Sequence, alpha):
    """Fold a tuple into one value using the challenge alpha.

    Works on anything supporting + and * (Fp2 of expressions, Fp2 of galois
    scalars or arrays, plain galois values). A singleton tuple is returned
    unchanged and alpha is not referenced, so no degree is added when there
    is nothing to fold.

    Raises:
        ConfigurationError: If the tuple is empty
    """
    if len(values) == 0:
        raise ConfigurationError("Cannot compress an empty tuple")
    acc = values[0]
    for value in values[1:]:
        acc = acc * alpha + value
    return acc
