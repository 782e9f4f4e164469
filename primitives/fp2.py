"""Quadratic extension Fp2 = Fp[X] / (X^2 - θ).

An Fp2 element is a pair (c0, c1) standing for c0 + c1·X. The components may
be galois scalars, galois arrays (one value per row) or symbolic Expressions;
the same add/sub/mul code serves the constraint builder (expressions) and the
witness generator (concrete values). Only concrete components can be
inverted.

Multiplication:
    (a0 + a1·X)(b0 + b1·X) = (a0·b0 + θ·a1·b1) + (a0·b1 + a1·b0)·X

Inversion:
    (a0 + a1·X)^-1 = (a0 - a1·X) / (a0^2 - θ·a1^2)

The norm a0^2 - θ·a1^2 vanishes only on (0, 0) because θ is a non-residue.
Operations on elements with c1 = 0 reduce to base-field operations on c0.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np

from primitives.batch_inverse import batch_inverse
from primitives.errors import NonInvertibleValue
from primitives.expression import Expression, ZERO


def _zero_like(x):
    if isinstance(x, Expression):
        return ZERO
    return type(x).Zeros(np.shape(x))


def _scale(x, k: int):
    """Multiply a component by the integer constant k."""
    if isinstance(x, Expression):
        return x * k
    field = type(x)
    return x * field(k % field.order)


def _all_equal(a, b) -> bool:
    return bool(np.all(a == b))


@dataclass(frozen=True, eq=False)
class Fp2:
    """Element of the quadratic extension defined by `non_residue`."""
    c0: Any
    c1: Any
    non_residue: int

    # numpy must defer to the reflected operators below
    __array_ufunc__ = None

    @classmethod
    def from_base(cls, x, non_residue: int) -> "Fp2":
        """Embed a base-field value (or expression) as (x, 0)."""
        return cls(x, _zero_like(x), non_residue)

    def components(self) -> tuple:
        return self.c0, self.c1

    def _coerce(self, other) -> "Fp2":
        if isinstance(other, Fp2):
            if other.non_residue != self.non_residue:
                raise ValueError(
                    f"Cannot mix Fp2 elements over different non-residues "
                    f"({self.non_residue} vs {other.non_residue})"
                )
            return other
        return Fp2.from_base(other, self.non_residue)

    def __add__(self, other) -> "Fp2":
        other = self._coerce(other)
        return Fp2(self.c0 + other.c0, self.c1 + other.c1, self.non_residue)

    def __sub__(self, other) -> "Fp2":
        other = self._coerce(other)
        return Fp2(self.c0 - other.c0, self.c1 - other.c1, self.non_residue)

    def __neg__(self) -> "Fp2":
        return Fp2(-self.c0, -self.c1, self.non_residue)

    def __mul__(self, other) -> "Fp2":
        if not isinstance(other, Fp2):
            # Base-field scalar: scale both components
            return Fp2(self.c0 * other, self.c1 * other, self.non_residue)
        other = self._coerce(other)
        a0, a1 = self.c0, self.c1
        b0, b1 = other.c0, other.c1
        return Fp2(
            a0 * b0 + _scale(a1 * b1, self.non_residue),
            a0 * b1 + a1 * b0,
            self.non_residue,
        )

    def __radd__(self, other) -> "Fp2":
        return self._coerce(other) + self

    def __rsub__(self, other) -> "Fp2":
        return self._coerce(other) - self

    def __rmul__(self, other) -> "Fp2":
        return self * other

    def __eq__(self, other) -> bool:
        if not isinstance(other, Fp2):
            return NotImplemented
        return (
            self.non_residue == other.non_residue
            and _all_equal(self.c0, other.c0)
            and _all_equal(self.c1, other.c1)
        )

    __hash__ = None

    def norm(self):
        """a0^2 - θ·a1^2, a base-field value."""
        return self.c0 * self.c0 - _scale(self.c1 * self.c1, self.non_residue)

    def is_zero(self) -> bool:
        if isinstance(self.c0, Expression) or isinstance(self.c1, Expression):
            raise TypeError("Symbolic Fp2 elements have no concrete zero test")
        return bool(np.all(self.c0 == 0) and np.all(self.c1 == 0))

    def inverse(self) -> "Fp2":
        """Multiplicative inverse of a concrete scalar element.

        Raises:
            TypeError: If a component is symbolic
            NonInvertibleValue: If the element is zero
        """
        if isinstance(self.c0, Expression) or isinstance(self.c1, Expression):
            raise TypeError("Symbolic Fp2 elements cannot be inverted")
        norm = self.norm()
        if np.any(norm == 0):
            raise NonInvertibleValue("Cannot invert the zero element of Fp2")
        inv = norm ** -1
        return Fp2(self.c0 * inv, -self.c1 * inv, self.non_residue)

    def next(self) -> "Fp2":
        """Shift a symbolic element to the next row."""
        return Fp2(self.c0.next(), self.c1.next(), self.non_residue)

    def __getitem__(self, index) -> "Fp2":
        """Select rows from an element with array components."""
        return Fp2(self.c0[index], self.c1[index], self.non_residue)

    def __len__(self) -> int:
        return len(self.c0)

    def __repr__(self) -> str:
        return f"Fp2({self.c0!r}, {self.c1!r}; θ={self.non_residue})"


def batch_inverse_fp2(values: Fp2) -> Fp2:
    """Invert every row of an Fp2 element with array components.

    One base-field batch inversion of the norms, then two multiplications per
    row.

    Raises:
        NonInvertibleValue: If some row is zero; `row` names the first one
    """
    inv_norm = batch_inverse(values.norm())
    return Fp2(values.c0 * inv_norm, -values.c1 * inv_norm, values.non_residue)
