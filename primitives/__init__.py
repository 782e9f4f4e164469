"""Primitives - field arithmetic, Fp2 and symbolic expressions."""

from primitives.batch_inverse import batch_inverse
from primitives.errors import (
    ConfigurationError,
    InsufficientSoundness,
    NonInvertibleValue,
    UnsupportedField,
)
from primitives.expression import (
    IS_FIRST,
    ONE,
    ZERO,
    ChallengeRef,
    Column,
    Constant,
    Expression,
    challenge,
    col,
    const,
    degree,
    evaluate,
)
from primitives.field import (
    FIELDS,
    FieldInfo,
    KnownField,
    check_soundness,
    field_info,
    get_field,
    needs_extension,
    resolve_field,
    to_field,
)
from primitives.fp2 import Fp2, batch_inverse_fp2

__all__ = [
    # Field
    "KnownField",
    "FieldInfo",
    "FIELDS",
    "field_info",
    "get_field",
    "resolve_field",
    "to_field",
    "needs_extension",
    "check_soundness",
    # Fp2
    "Fp2",
    "batch_inverse",
    "batch_inverse_fp2",
    # Expressions
    "Expression",
    "Constant",
    "Column",
    "ChallengeRef",
    "ZERO",
    "ONE",
    "IS_FIRST",
    "col",
    "const",
    "challenge",
    "degree",
    "evaluate",
    # Errors
    "ConfigurationError",
    "InsufficientSoundness",
    "UnsupportedField",
    "NonInvertibleValue",
]
