"""Storage formats that declared fields and procedure parameters may use."""

from __future__ import annotations

from enum import Enum
from typing import Any


class Format(str, Enum):
    """Value format of a field as stored in the octopus backend."""

    BOOL = "bool"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINT = "uint"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    INT = "int"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    BYTE_ARRAY = "[]byte"
    STRING_ARRAY = "[]string"

    def __str__(self) -> str:
        return self.value


UNSIGNED_FORMATS = frozenset(
    {Format.UINT8, Format.UINT16, Format.UINT32, Format.UINT64, Format.UINT}
)
NUMERIC_FORMATS = UNSIGNED_FORMATS | frozenset(
    {Format.INT8, Format.INT16, Format.INT32, Format.INT64, Format.INT}
)
FLOAT_FORMATS = frozenset({Format.FLOAT32, Format.FLOAT64})
FIELD_FORMATS = NUMERIC_FORMATS | FLOAT_FORMATS | frozenset({Format.STRING, Format.BOOL})
PROC_FORMATS = FIELD_FORMATS | frozenset({Format.BYTE_ARRAY, Format.STRING_ARRAY})
OCTOPUS_PROC_IN_FORMATS = frozenset({Format.STRING, Format.STRING_ARRAY, Format.BYTE_ARRAY})


def _as_format(value: Any) -> Format | None:
    if isinstance(value, Format):
        return value
    if isinstance(value, str):
        try:
            return Format(value)
        except ValueError:
            return None
    return None


def is_field_format(value: Any) -> bool:
    """Whether ``value`` may be the format of an entity field."""
    fmt = _as_format(value)
    return fmt is not None and fmt in FIELD_FORMATS


def is_proc_format(value: Any) -> bool:
    """Whether ``value`` may be the format of a procedure input parameter."""
    fmt = _as_format(value)
    return fmt is not None and fmt in PROC_FORMATS