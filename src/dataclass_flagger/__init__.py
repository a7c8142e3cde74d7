"""
dataclass_flagger - Declare command-line flags from dataclass fields.

This package registers one command-line flag per public field of a dataclass
instance. Flag name, default and usage text come from a compact
``name,default,usage`` string in each field's metadata; the field's type selects
how the default and command-line values are decoded. Fields can also hold any
object with ``get()``, ``set(text)`` and ``__str__()`` to define their own flag
syntax. Flag values can additionally be loaded from YAML or JSON files.
"""

from .binder import (
    DEFAULT_FLAG_TAG,
    FlagMetadata,
    bind,
    default_flag_set,
    parse,
    parse_metadata,
    safe_bind,
    set_default_flag_set,
)
from .config import load_config_file
from .errors import (
    BadDefaultError,
    BadMetadataError,
    DuplicateFlagError,
    FlagBindError,
    FlagParseError,
    InvalidTargetError,
    UnsupportedTypeError,
)
from .flagset import FieldRef, Flag, FlagSet, FlagValue
from .kinds import Int64, Kind, UInt, UInt64

__version__ = "1.0.0"
__all__ = [
    "DEFAULT_FLAG_TAG",
    "BadDefaultError",
    "BadMetadataError",
    "DuplicateFlagError",
    "FieldRef",
    "Flag",
    "FlagBindError",
    "FlagMetadata",
    "FlagParseError",
    "FlagSet",
    "FlagValue",
    "Int64",
    "InvalidTargetError",
    "Kind",
    "UInt",
    "UInt64",
    "UnsupportedTypeError",
    "bind",
    "default_flag_set",
    "load_config_file",
    "parse",
    "parse_metadata",
    "safe_bind",
    "set_default_flag_set",
]
