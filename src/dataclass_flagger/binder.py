"""
Binding dataclass fields to command-line flags.

Each public field of a dataclass instance becomes one flag. The flag is described by
a ``name,default,usage`` string stored in the field's metadata under the ``"flag"``
key; every part is optional and the whole string may be omitted, in which case the
flag is named after the field and starts at the type's zero value.

Example:
    @dataclass
    class ServerConfig:
        host: str = field(default="", metadata={"flag": "host,localhost,Address to bind"})
        port: int = field(default=0, metadata={"flag": "port,8080,Port to listen on"})
        timeout: timedelta = field(
            default=timedelta(0), metadata={"flag": "timeout,30s,Request timeout"}
        )
        debug: bool = False                              # flag "debug", default false
        secret: str = field(default="", metadata={"flag": "-"})  # never a flag
        _cache: dict = field(default_factory=dict)        # private, never a flag

    config = ServerConfig()
    bind(config)
    parse(["--port=9000", "--debug"])

Binding writes each decoded default into its field straight away, so after bind()
the instance holds the flag defaults and after parse() the final values.
"""

import argparse
import dataclasses
import logging
import typing
from typing import Any, NamedTuple, Optional, Sequence

from result import Err, Ok, Result

from .decoders import decode_default
from .errors import (
    BadDefaultError,
    BadMetadataError,
    InvalidTargetError,
    UnsupportedTypeError,
)
from .flagset import FieldRef, Flag, FlagSet, FlagValue
from .kinds import kind_of

logger = logging.getLogger(__name__)

DEFAULT_FLAG_TAG = "flag"
IGNORE_TAG = "-"

_default_flag_set = FlagSet()


def default_flag_set() -> FlagSet:
    """Return the flag set used when bind() and parse() are not given one."""
    return _default_flag_set


def set_default_flag_set(flag_set: FlagSet) -> FlagSet:
    """Replace the process-wide default flag set and return the previous one."""
    global _default_flag_set
    previous = _default_flag_set
    _default_flag_set = flag_set
    return previous


class FlagMetadata(NamedTuple):
    name: str
    default: str
    usage: str


def parse_metadata(raw_tag: Optional[str], field_name: str) -> FlagMetadata:
    """
    Split a ``name,default,usage`` annotation into its three parts.

    A missing or empty name falls back to ``field_name``; a missing default or usage
    is the empty string. Commas cannot be escaped, so a comma inside the default or
    the usage ends that part, and anything after the third part is ignored.
    """
    if not raw_tag:
        return FlagMetadata(field_name, "", "")

    parts = raw_tag.split(",")[:3]
    parts += [""] * (3 - len(parts))
    name, default, usage = parts
    return FlagMetadata(name or field_name, default, usage)


def _resolve_target(target: Any) -> Any:
    if target is None:
        raise InvalidTargetError("cannot bind flags to None")
    if isinstance(target, type):
        raise InvalidTargetError(
            f"{target.__name__} is a class, bind() needs an instance of it"
        )
    if not dataclasses.is_dataclass(target):
        raise InvalidTargetError(
            f"{type(target).__name__!r} object is not a dataclass instance"
        )
    if type(target).__dataclass_params__.frozen:
        raise InvalidTargetError(
            f"{type(target).__name__} is a frozen dataclass, its fields cannot be set"
        )
    return target


def _extension_value(ref: FieldRef, field_type: Any) -> Optional[FlagValue]:
    """
    Return the FlagValue to register for a field, if it has one.

    A field holding a FlagValue is used as-is. A field holding None whose type is
    a FlagValue class gets a fresh instance of that class.
    """
    current = getattr(ref.owner, ref.name, None)
    if isinstance(current, FlagValue):
        return current
    if (
        current is None
        and isinstance(field_type, type)
        and kind_of(field_type) is None
        and issubclass(field_type, FlagValue)
    ):
        value = field_type()
        ref.write(value)
        return value
    return None


def _dispatch(
    flag_set: FlagSet, ref: FieldRef, field_type: Any, metadata: FlagMetadata
) -> Flag:
    value = _extension_value(ref, field_type)
    if value is not None:
        return flag_set.var(value, metadata.name, metadata.usage)

    kind = kind_of(field_type)
    if kind is None:
        raise UnsupportedTypeError(ref.name, field_type)

    default = decode_default(kind, metadata.default)
    if isinstance(default, Err):
        raise BadDefaultError(
            ref.name, metadata.name, kind, metadata.default, default.err_value
        )
    return flag_set.typed_var(
        kind, ref, metadata.name, default.ok_value, metadata.usage
    )


def bind(
    target: Any, flag_set: Optional[FlagSet] = None, *, tag: str = DEFAULT_FLAG_TAG
) -> list[Flag]:
    """
    Register one flag for every public field of a dataclass instance.

    Fields are visited in declaration order. Fields whose name starts with an
    underscore, and fields whose metadata ``tag`` is ``"-"``, are skipped. The first
    field that fails stops the walk; flags registered for earlier fields stay
    registered.

    Args:
        target: The dataclass instance to fill in.
        flag_set: Where to register the flags. Defaults to default_flag_set().
        tag: The metadata key holding each field's ``name,default,usage`` string.

    Returns:
        list[Flag]: The flags registered, in field order.

    Raises:
        InvalidTargetError: If target is not a non-frozen dataclass instance.
        BadDefaultError: If a field's default literal cannot be decoded.
        UnsupportedTypeError: If a field's type cannot be used as a flag.
        BadMetadataError: If a field's metadata under ``tag`` is not a string.
        DuplicateFlagError: If a flag name is already registered.
    """
    target = _resolve_target(target)
    if flag_set is None:
        flag_set = _default_flag_set

    cls = type(target)
    field_types = typing.get_type_hints(cls)
    registered = []

    for field in dataclasses.fields(target):
        if field.name.startswith("_"):
            logger.debug("Skipping private field %s.%s", cls.__name__, field.name)
            continue

        raw_tag = field.metadata.get(tag, "")
        if raw_tag is not None and not isinstance(raw_tag, str):
            raise BadMetadataError(field.name, tag, raw_tag)
        if raw_tag == IGNORE_TAG:
            logger.debug("Skipping ignored field %s.%s", cls.__name__, field.name)
            continue

        metadata = parse_metadata(raw_tag, field.name)
        field_type = field_types.get(field.name, field.type)
        registered.append(
            _dispatch(flag_set, FieldRef(target, field.name), field_type, metadata)
        )

    return registered


def safe_bind(
    target: Any, flag_set: Optional[FlagSet] = None, *, tag: str = DEFAULT_FLAG_TAG
) -> Result[list[Flag], str]:
    """
    Bind like bind(), but return the outcome instead of raising.

    Returns:
        Result[list[Flag], str]:
            - Ok with the flags registered,
            - Err with the error message if a field could not be bound.
    """
    try:
        return Ok(bind(target, flag_set, tag=tag))
    except (ValueError, TypeError, argparse.ArgumentError) as e:
        return Err(str(e))


def parse(
    args: Optional[Sequence[str]] = None, flag_set: Optional[FlagSet] = None
) -> list[str]:
    """Parse ``args`` with ``flag_set`` (or the default flag set), unchanged."""
    if flag_set is None:
        flag_set = _default_flag_set
    return flag_set.parse(args)
