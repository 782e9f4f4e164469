"""Fiat-Shamir challenges consumed by one argument instance.

Two challenges are used: `alpha` folds tuples into a single value and `beta`
is the evaluation point. Each is an Fp2 element; on fields large enough to
skip the extension only the first component is meaningful and the second is
zero.

Challenges are derived by the surrounding transcript after every column that
feeds an argument has been committed. This module never derives or caches
them: a Challenges value is created by the caller for one proving session and
passed explicitly to every evaluation context and witness generator.
`Challenges.sample` stands in for the transcript in tests and examples.
"""

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from primitives.errors import ConfigurationError
from primitives.field import KnownField, field_info, get_field, resolve_field
from primitives.fp2 import Fp2

ALPHA = "alpha"
BETA = "beta"


def component_names(prefix: str) -> tuple[str, str]:
    """Names of the two base components of a challenge, e.g. ('alpha_0', 'alpha_1')."""
    return f"{prefix}_0", f"{prefix}_1"


def _sample_element(gf, rng: np.random.Generator):
    # 16 extra bytes make the modular bias negligible for every supported prime
    n_bytes = (gf.order.bit_length() + 7) // 8 + 16
    return gf(int.from_bytes(rng.bytes(n_bytes), "little") % gf.order)


@dataclass(frozen=True)
class Challenges:
    """The (alpha, beta) pair of one proving session.

    Attributes:
        known_field: Field the challenges live in
        alpha: Folding challenge
        beta: Evaluation point
        with_extension: Whether both Fp2 components were drawn
    """
    known_field: KnownField
    alpha: Fp2
    beta: Fp2
    with_extension: bool

    def __post_init__(self):
        if not self.with_extension:
            for name, value in ((ALPHA, self.alpha), (BETA, self.beta)):
                if int(value.c1) != 0:
                    raise ConfigurationError(
                        f"Challenge '{name}' has a non-zero second component but the "
                        f"challenges were declared as base-field values"
                    )

    @classmethod
    def sample(
        cls,
        known_field,
        with_extension: bool,
        seed: Union[int, np.random.Generator, None] = None,
    ) -> "Challenges":
        """Draw uniformly random challenges (transcript stand-in)."""
        known_field = resolve_field(known_field)
        gf = get_field(known_field)
        theta = field_info(known_field).non_residue
        rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)

        def draw() -> Fp2:
            c0 = _sample_element(gf, rng)
            c1 = _sample_element(gf, rng) if with_extension else gf(0)
            return Fp2(c0, c1, theta)

        return cls(known_field, draw(), draw(), with_extension)

    @classmethod
    def from_values(
        cls,
        known_field,
        alpha: Union[int, Sequence[int]],
        beta: Union[int, Sequence[int]],
    ) -> "Challenges":
        """Build challenges from integers: a single int per challenge for the
        base field, or a pair (c0, c1) for Fp2."""
        known_field = resolve_field(known_field)
        gf = get_field(known_field)
        theta = field_info(known_field).non_residue

        def lift(value) -> tuple[Fp2, bool]:
            if isinstance(value, int):
                return Fp2(gf(value % gf.order), gf(0), theta), False
            c0, c1 = value
            return Fp2(gf(c0 % gf.order), gf(c1 % gf.order), theta), True

        alpha_fp2, alpha_ext = lift(alpha)
        beta_fp2, beta_ext = lift(beta)
        if alpha_ext != beta_ext:
            raise ConfigurationError("alpha and beta must both be base-field values or both be Fp2 pairs")
        return cls(known_field, alpha_fp2, beta_fp2, alpha_ext)

    def as_dict(self) -> dict:
        """Base components keyed by the names referenced in constraints."""
        alpha_0, alpha_1 = component_names(ALPHA)
        beta_0, beta_1 = component_names(BETA)
        return {
            alpha_0: self.alpha.c0,
            alpha_1: self.alpha.c1,
            beta_0: self.beta.c0,
            beta_1: self.beta.c1,
        }

    def require(self, known_field, with_extension: bool) -> None:
        """Check that these challenges fit an instance over `known_field`.

        Raises:
            ConfigurationError: If the field differs, or the challenge shape does
                not match the field policy (`with_extension`)
        """
        known_field = resolve_field(known_field)
        if known_field != self.known_field:
            raise ConfigurationError(
                f"Challenges were drawn over {self.known_field.value}, "
                f"instance runs over {known_field.value}"
            )
        if with_extension and not self.with_extension:
            raise ConfigurationError(
                f"The {known_field.value} field needs Fp2 challenges; sample both components"
            )
        if not with_extension and self.with_extension:
            raise ConfigurationError(
                f"The {known_field.value} field uses base-field challenges; "
                f"sample them without the extension component"
            )

