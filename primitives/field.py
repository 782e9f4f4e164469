"""Recognized prime fields and the field-capability policy.

Every argument instance runs over one of a closed set of prime fields. Each
field fixes:

- the prime p and a generator of the multiplicative group (handed to galois so
  that constructing GF(p) never has to factor p - 1),
- the quadratic non-residue θ defining Fp2 = Fp[X] / (X^2 - θ),
- whether a single fingerprint challenge from Fp is too weak, in which case
  accumulators must live in Fp2.

Fields smaller than 2^SOUNDNESS_BITS need the extension. An unknown field is
rejected instead of guessed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Union

import galois

from primitives.errors import InsufficientSoundness, UnsupportedField

logger = logging.getLogger(__name__)

# --- Field Constants ---

SOUNDNESS_BITS = 128

GOLDILOCKS_PRIME = 0xFFFFFFFF00000001
BABYBEAR_PRIME = 0x78000001
KOALABEAR_PRIME = 0x7F000001
MERSENNE31_PRIME = 0x7FFFFFFF
BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617


class KnownField(Enum):
    GOLDILOCKS = "goldilocks"
    BABYBEAR = "babybear"
    KOALABEAR = "koalabear"
    MERSENNE31 = "mersenne31"
    BN254 = "bn254"


@dataclass(frozen=True)
class FieldInfo:
    """Static description of a recognized field.

    Attributes:
        field: Field identity
        prime: Field order p
        generator: Generator of the multiplicative group of GF(p)
        non_residue: θ with X^2 - θ irreducible over GF(p), reduced into [0, p)
    """
    field: KnownField
    prime: int
    generator: int
    non_residue: int

    @property
    def needs_extension(self) -> bool:
        return self.prime < 2**SOUNDNESS_BITS

    @property
    def bits(self) -> int:
        return self.prime.bit_length()


# θ is 7 for Goldilocks (as in x^2 - 7), 11 for BabyBear, 3 for KoalaBear,
# -1 for Mersenne31 (p = 3 mod 4) and the group generator 5 for BN254.
FIELDS: dict[KnownField, FieldInfo] = {
    KnownField.GOLDILOCKS: FieldInfo(KnownField.GOLDILOCKS, GOLDILOCKS_PRIME, 7, 7),
    KnownField.BABYBEAR: FieldInfo(KnownField.BABYBEAR, BABYBEAR_PRIME, 31, 11),
    KnownField.KOALABEAR: FieldInfo(KnownField.KOALABEAR, KOALABEAR_PRIME, 3, 3),
    KnownField.MERSENNE31: FieldInfo(KnownField.MERSENNE31, MERSENNE31_PRIME, 7, MERSENNE31_PRIME - 1),
    KnownField.BN254: FieldInfo(KnownField.BN254, BN254_PRIME, 5, 5),
}

FieldLike = Union[KnownField, str, int]


def resolve_field(field: FieldLike) -> KnownField:
    """Map a field identity, name or prime to a KnownField.

    Raises:
        UnsupportedField: If the value does not name a recognized field
    """
    if isinstance(field, KnownField):
        return field
    if isinstance(field, str):
        try:
            return KnownField(field.strip().lower())
        except ValueError:
            pass
    elif isinstance(field, int) and not isinstance(field, bool):
        for info in FIELDS.values():
            if info.prime == field:
                return info.field
    raise UnsupportedField(
        f"Argument gadgets are not implemented for field {field!r}. "
        f"Recognized fields: {[f.value for f in KnownField]}"
    )


def field_info(field: FieldLike) -> FieldInfo:
    return FIELDS[resolve_field(field)]


@lru_cache(maxsize=None)
def _galois_field(known: KnownField):
    info = FIELDS[known]
    logger.debug("Constructing GF(%d) for %s", info.prime, known.value)
    return galois.GF(info.prime, primitive_element=info.generator, verify=False)


def get_field(field: FieldLike):
    """Return the galois GF(p) class for a recognized field (built once per process)."""
    return _galois_field(resolve_field(field))


def to_field(field: FieldLike, values):
    """Lift Python integers (possibly negative) into GF(p), scalar or array."""
    gf = get_field(field)
    p = gf.order
    if isinstance(values, int):
        return gf(values % p)
    return gf([int(v) % p for v in values])


# --- Capability Policy ---

def needs_extension(field: FieldLike) -> bool:
    """Whether fingerprinting over this field requires Fp2 challenges."""
    return field_info(field).needs_extension


def check_soundness(field: FieldLike, with_extension: bool) -> None:
    """Reject a base-field accumulator on a field whose policy mandates Fp2.

    Raises:
        UnsupportedField: If the field is not recognized
        InsufficientSoundness: If with_extension is False but the field needs it
    """
    info = field_info(field)
    if not with_extension and info.needs_extension:
        raise InsufficientSoundness(
            f"The {info.field.value} field ({info.bits} bits) is too small for a "
            f"single-column accumulator; pass two accumulator columns to work over Fp2"
        )
