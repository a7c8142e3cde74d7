"""
Exceptions raised while binding dataclass fields to command-line flags.
"""

from typing import Any, Optional


class FlagBindError(Exception):
    """Base class for every error raised by dataclass_flagger."""


class InvalidTargetError(FlagBindError, TypeError):
    """The object passed to bind() is not a writable dataclass instance."""


class BadDefaultError(FlagBindError, ValueError):
    """A field's default literal could not be decoded into its declared type."""

    def __init__(
        self, field_name: str, flag_name: str, kind: Any, literal: str, reason: str
    ) -> None:
        self.field_name = field_name
        self.flag_name = flag_name
        self.kind = kind
        self.literal = literal
        super().__init__(
            f"could not get {kind} default value for {flag_name!r} "
            f"(field {field_name!r}): {reason}"
        )


class UnsupportedTypeError(FlagBindError, TypeError):
    """A field's type has neither a flag decoder nor the FlagValue methods."""

    def __init__(self, field_name: str, field_type: Any) -> None:
        self.field_name = field_name
        self.field_type = field_type
        type_name = getattr(field_type, "__name__", None) or repr(field_type)
        super().__init__(f"unsupported type {type_name!r} for field {field_name!r}")


class DuplicateFlagError(FlagBindError, ValueError):
    """A flag with the same name is already registered in the flag set."""

    def __init__(self, name: str, prog: Optional[str] = None) -> None:
        self.name = name
        where = f" in {prog}" if prog else ""
        super().__init__(f"Flag name conflict{where}: {name}")


class FlagParseError(FlagBindError, ValueError):
    """Command-line arguments or a configuration file could not be applied."""


class BadMetadataError(FlagBindError, TypeError):
    """A field's flag metadata is not a ``name,default,usage`` string."""

    def __init__(self, field_name: str, tag: str, raw_tag: Any) -> None:
        self.field_name = field_name
        self.raw_tag = raw_tag
        super().__init__(
            f"flag metadata {tag!r} of field {field_name!r} must be a string, "
            f"got {type(raw_tag).__name__}: {raw_tag!r}"
        )
