"""Montgomery batch inversion over galois prime-field arrays.

The Montgomery trick converts N field inversions into 3N-3 multiplications + 1
inversion. Used by the chunked witness generator to invert every folded
denominator of a chunk at once.
"""

import numpy as np

from primitives.errors import NonInvertibleValue


def batch_inverse(values):
    """Montgomery batch inversion for any galois FieldArray.

    Algorithm:
    1. Forward pass: Compute prefix products cumprods[i] = a[0] * a[1] * ... * a[i]
    2. Single inversion: inv_total = cumprods[N-1]^(-1)
    3. Backward pass: Extract individual inverses using cumprods

    Args:
        values: 1-D galois FieldArray to invert

    Returns:
        Galois FieldArray where result[i] = values[i]^(-1)

    Raises:
        NonInvertibleValue: If any element is zero; `row` is the first such index
    """
    n = len(values)
    if n == 0:
        return values

    zeros = np.flatnonzero(values == 0)
    if zeros.size > 0:
        row = int(zeros[0])
        raise NonInvertibleValue(f"Cannot invert zero at index {row}", row=row)

    if n == 1:
        return values ** -1

    field_type = type(values)

    cumprods = field_type.Zeros(n)
    cumprods[0] = values[0]
    for i in range(1, n):
        cumprods[i] = cumprods[i - 1] * values[i]

    inv_total = cumprods[n - 1] ** -1

    results = field_type.Zeros(n)
    z = inv_total
    for i in range(n - 1, 0, -1):
        results[i] = z * cumprods[i - 1]
        z = z * values[i]
    results[0] = z

    return results
