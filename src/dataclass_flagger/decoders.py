"""
Text decoders and formatters for every primitive flag kind.

Each ``parse_*`` function is strict and pure: it takes the literal text of a value
and returns ``Ok(value)`` or ``Err(message)``. They back both the defaults written
in field metadata and the values given on the command line.

``decode_default`` adds the rule shared by all defaults: an empty literal means the
kind's zero value and is never handed to the parser.
"""

import datetime
import math
import re
from decimal import Decimal
from typing import Any, Callable

from result import Err, Ok, Result

from .kinds import NATIVE_INT_BITS, Kind

_TRUE_LITERALS = ("1", "t", "T", "TRUE", "true", "True")
_FALSE_LITERALS = ("0", "f", "F", "FALSE", "false", "False")

_SIGNED_RE = re.compile(r"[-+]?[0-9]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(
    r"[-+]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)

_NANOSECONDS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_SEGMENT = r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_SEGMENT_RE = re.compile(_DURATION_SEGMENT)
_DURATION_RE = re.compile(rf"([-+]?)((?:{_DURATION_SEGMENT})+)")
_MAX_DURATION_NS = (1 << 63) - 1
_ONE_MICROSECOND = datetime.timedelta(microseconds=1)


def parse_bool(text: str) -> Result[bool, str]:
    if text in _TRUE_LITERALS:
        return Ok(True)
    if text in _FALSE_LITERALS:
        return Ok(False)
    return Err(
        f"invalid boolean value: {text!r}. "
        f"Must be one of: {', '.join(_TRUE_LITERALS + _FALSE_LITERALS)}"
    )


def _parse_signed(text: str, bits: int) -> Result[int, str]:
    if not _SIGNED_RE.fullmatch(text):
        return Err(f"invalid integer syntax: {text!r}")
    value = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        return Err(f"integer out of range for {bits} bits: {text!r}")
    return Ok(value)


def _parse_unsigned(text: str, bits: int) -> Result[int, str]:
    if not _UNSIGNED_RE.fullmatch(text):
        return Err(f"invalid unsigned integer syntax: {text!r}")
    value = int(text)
    if value >= 1 << bits:
        return Err(f"unsigned integer out of range for {bits} bits: {text!r}")
    return Ok(value)


def parse_int(text: str) -> Result[int, str]:
    """Parse a decimal integer that fits the native machine word."""
    return _parse_signed(text, NATIVE_INT_BITS)


def parse_int64(text: str) -> Result[int, str]:
    return _parse_signed(text, 64)


def parse_uint(text: str) -> Result[int, str]:
    """Parse an unsigned decimal integer that fits the native machine word."""
    return _parse_unsigned(text, NATIVE_INT_BITS)


def parse_uint64(text: str) -> Result[int, str]:
    return _parse_unsigned(text, 64)


def parse_float(text: str) -> Result[float, str]:
    """
    Parse a decimal or exponential float literal.

    ``inf``, ``infinity`` and ``nan`` are accepted in any case. Finite literals
    too large for a double are rejected instead of silently becoming infinity.
    """
    if not _FLOAT_RE.fullmatch(text):
        return Err(f"invalid float syntax: {text!r}")
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        return Err(f"float out of range: {text!r}")
    return Ok(value)


def parse_string(text: str) -> Result[str, str]:
    return Ok(text)


def parse_duration(text: str) -> Result[datetime.timedelta, str]:
    """
    Parse a duration such as ``300ms``, ``1.5h`` or ``-2h45m``.

    Units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``. A bare
    ``0`` is the only literal allowed without a unit. Precision below one
    microsecond is truncated.
    """
    if text in ("0", "+0", "-0"):
        return Ok(datetime.timedelta(0))
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        return Err(f"invalid duration: {text!r}")

    sign, body = match.group(1), match.group(2)
    total_ns = sum(
        Decimal(number) * _NANOSECONDS_PER_UNIT[unit]
        for number, unit in _DURATION_SEGMENT_RE.findall(body)
    )
    if total_ns > _MAX_DURATION_NS:
        return Err(f"duration out of range: {text!r}")

    micros = int(total_ns // 1000)
    if sign == "-":
        micros = -micros
    return Ok(datetime.timedelta(microseconds=micros))


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _format_float(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def _fixed_point(amount: int, scale: int) -> str:
    whole, fraction = divmod(amount, scale)
    if not fraction:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}.{fraction:0{digits}d}".rstrip("0")


def format_duration(value: datetime.timedelta) -> str:
    """Render a timedelta in the syntax parse_duration accepts, e.g. ``1h2m3.5s``."""
    micros = value // _ONE_MICROSECOND
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1_000:
        return f"{sign}{micros}us"
    if micros < 1_000_000:
        return f"{sign}{_fixed_point(micros, 1_000)}ms"

    hours, micros = divmod(micros, 3600 * 1_000_000)
    minutes, micros = divmod(micros, 60 * 1_000_000)
    seconds = _fixed_point(micros, 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


PARSERS: dict[Kind, Callable[[str], Result[Any, str]]] = {
    Kind.BOOL: parse_bool,
    Kind.INT: parse_int,
    Kind.INT64: parse_int64,
    Kind.UINT: parse_uint,
    Kind.UINT64: parse_uint64,
    Kind.FLOAT64: parse_float,
    Kind.STRING: parse_string,
    Kind.DURATION: parse_duration,
}

ZERO_VALUES: dict[Kind, Any] = {
    Kind.BOOL: False,
    Kind.INT: 0,
    Kind.INT64: 0,
    Kind.UINT: 0,
    Kind.UINT64: 0,
    Kind.FLOAT64: 0.0,
    Kind.STRING: "",
    Kind.DURATION: datetime.timedelta(0),
}

_FORMATTERS: dict[Kind, Callable[[Any], str]] = {
    Kind.BOOL: _format_bool,
    Kind.INT: str,
    Kind.INT64: str,
    Kind.UINT: str,
    Kind.UINT64: str,
    Kind.FLOAT64: _format_float,
    Kind.STRING: str,
    Kind.DURATION: format_duration,
}


def decode_default(kind: Kind, literal: str) -> Result[Any, str]:
    """Decode a default literal, mapping the empty string to the kind's zero value."""
    if literal == "":
        return Ok(ZERO_VALUES[kind])
    return PARSERS[kind](literal)


def format_value(kind: Kind, value: Any) -> str:
    return _FORMATTERS[kind](value)
