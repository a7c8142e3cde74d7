"""
Flag kinds and the integer width aliases used to select them.

Python has a single ``int`` type, so fields that need a specific flag width are
annotated with one of the ``NewType`` aliases below. The alias is only a marker
for the binder; at runtime the field still holds a plain ``int``.
"""

import datetime
import enum
import sys
from typing import Any, NewType, Optional

Int64 = NewType("Int64", int)
UInt = NewType("UInt", int)
UInt64 = NewType("UInt64", int)

# Width of the interpreter's native machine word.
NATIVE_INT_BITS: int = sys.maxsize.bit_length() + 1


class Kind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    INT64 = "int64"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT64 = "float64"
    STRING = "string"
    DURATION = "duration"

    def __str__(self) -> str:
        return self.value


# Matched by identity: bool must not fall through to int, and a timedelta is a
# duration no matter how it is stored.
_KINDS_BY_TYPE: dict[Any, Kind] = {
    bool: Kind.BOOL,
    int: Kind.INT,
    Int64: Kind.INT64,
    UInt: Kind.UINT,
    UInt64: Kind.UINT64,
    float: Kind.FLOAT64,
    str: Kind.STRING,
    datetime.timedelta: Kind.DURATION,
}


def kind_of(type_hint: Any) -> Optional[Kind]:
    """Return the flag kind for a field annotation, or None if it has none."""
    try:
        return _KINDS_BY_TYPE.get(type_hint)
    except TypeError:
        # Unhashable annotations (e.g. some typing constructs) have no kind.
        return None
