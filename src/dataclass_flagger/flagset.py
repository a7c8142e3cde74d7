"""
FlagSet - a registry of command-line flags backed by argparse.

Every flag is bound to a place to write to: either a dataclass field, reached
through a FieldRef, or a user-defined FlagValue. Parsing the command line (or a
configuration file) writes straight into those targets, so after parse() the bound
dataclass instances hold the final configuration.

Example:
    flags = FlagSet("server")
    flags.int_var(FieldRef(cfg, "port"), "port", 8080, "Port to listen on")
    flags.parse(["--port=9000"])
    assert cfg.port == 9000
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import (
    Any,
    Iterator,
    Mapping,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from result import Err, Ok, Result

from .config import config_value_text, load_config_file
from .decoders import PARSERS, ZERO_VALUES, format_value
from .errors import DuplicateFlagError, FlagBindError, FlagParseError
from .kinds import Kind

logger = logging.getLogger(__name__)

_METAVARS = {
    Kind.BOOL: "BOOL",
    Kind.INT: "INT",
    Kind.INT64: "INT",
    Kind.UINT: "UINT",
    Kind.UINT64: "UINT",
    Kind.FLOAT64: "FLOAT",
    Kind.STRING: "STRING",
    Kind.DURATION: "DURATION",
}


@runtime_checkable
class FlagValue(Protocol):
    """
    The methods a value needs to be used as a flag directly.

    ``set`` receives the text given on the command line and raises ValueError if it
    cannot be applied. ``str()`` renders the current value; it is also used as the
    flag's recorded default. A value may define ``is_bool_flag()`` returning True to
    be usable without an argument (``--verbose``).
    """

    def get(self) -> Any: ...

    def set(self, text: str) -> None: ...

    def __str__(self) -> str: ...


class FieldRef(NamedTuple):
    """The location of one attribute on one object."""

    owner: Any
    name: str

    def read(self) -> Any:
        return getattr(self.owner, self.name)

    def write(self, value: Any) -> None:
        setattr(self.owner, self.name, value)


class _FieldValue:
    """FlagValue for a field of a primitive kind."""

    def __init__(self, ref: FieldRef, kind: Kind) -> None:
        self.ref = ref
        self.kind = kind

    def get(self) -> Any:
        return self.ref.read()

    def set(self, text: str) -> None:
        result = PARSERS[self.kind](text)
        if isinstance(result, Err):
            raise ValueError(result.err_value)
        self.ref.write(result.ok_value)

    def is_bool_flag(self) -> bool:
        return self.kind is Kind.BOOL

    def __str__(self) -> str:
        return format_value(self.kind, self.ref.read())

    def __repr__(self) -> str:
        return f"<{self.kind} flag value {self}>"


@dataclass
class Flag:
    """A registered flag: its name, usage text, bound value and default text."""

    name: str
    usage: str
    value: FlagValue
    def_value: str


def _is_bool_flag(value: Any) -> bool:
    is_bool_flag = getattr(value, "is_bool_flag", None)
    return callable(is_bool_flag) and bool(is_bool_flag())


def _format_description(usage: str, def_value: str, zero_text: str) -> str:
    """Append the default to the usage text unless it is the zero value."""
    # argparse %-formats help strings.
    description = usage.replace("%", "%%")
    if def_value == zero_text:
        return description
    default_suffix = f"(default: {def_value})".replace("%", "%%")
    return f"{description} {default_suffix}" if description else default_suffix


class _FlagArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that can raise FlagParseError instead of exiting."""

    def __init__(self, *args: Any, raise_errors: bool = False, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.raise_errors = raise_errors

    def error(self, message: str):
        if self.raise_errors:
            raise FlagParseError(message)
        super().error(message)


class _SetFlagAction(argparse.Action):
    """Hands the text of an option to its flag's value."""

    def __init__(self, option_strings, dest, flag: Flag, **kwargs) -> None:
        self.flag = flag
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None) -> None:
        try:
            self.flag.value.set(values)
        except ValueError as e:
            raise argparse.ArgumentError(self, f"invalid value {values!r}: {e}")


class FlagSet:
    """
    A named set of flags and the argparse parser that fills them in.

    A flag is given as ``--name=value`` or ``--name value``; the following word is
    taken as the value even when it starts with a dash, so ``--delay -1s`` works.
    A boolean flag given as ``--name`` alone is set to true and never takes the
    following word; use ``--name=false`` to clear it. Everything after a bare
    ``--`` is returned as positional arguments.

    Args:
        prog: Program name shown in usage and error messages.
        description: Text shown at the top of --help.
        exit_on_error: If True, invalid arguments print usage and exit like
            argparse does. If False, parse() raises FlagParseError instead.
        config_flag: Option string (e.g. "--config") that names a YAML or JSON file
            of flag values to apply before the command-line arguments. No such
            option is added when None.
    """

    def __init__(
        self,
        prog: Optional[str] = None,
        description: Optional[str] = None,
        *,
        exit_on_error: bool = True,
        config_flag: Optional[str] = None,
    ) -> None:
        self.parser: _FlagArgumentParser = _FlagArgumentParser(
            prog=prog,
            description=description,
            allow_abbrev=False,
            raise_errors=not exit_on_error,
        )
        self._flags: dict[str, Flag] = {}
        self._flags_by_option: dict[str, Flag] = {}
        self._args: list[str] = []
        self._parsed = False

        self._config_flag = config_flag
        if config_flag is not None:
            self.parser.add_argument(
                config_flag,
                type=str,
                metavar="FILE",
                help="Path to configuration file (YAML or JSON format)",
            )

    @property
    def name(self) -> str:
        return self.parser.prog

    @property
    def parsed(self) -> bool:
        """Whether parse() has completed successfully."""
        return self._parsed

    @property
    def args(self) -> list[str]:
        """Positional arguments left over by the last parse()."""
        return list(self._args)

    def __iter__(self) -> Iterator[Flag]:
        """Iterate over the registered flags in lexicographical order."""
        return iter(sorted(self._flags.values(), key=lambda f: f.name))

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def lookup(self, name: str) -> Optional[Flag]:
        """Return the flag registered under ``name``, or None."""
        return self._flags.get(name)

    def _option_strings(self, name: str) -> list[str]:
        if not name or name.startswith("-") or "=" in name:
            raise ValueError(f"Invalid flag name: {name!r}")
        if len(name) == 1:
            return [f"-{name}", f"--{name}"]
        return [f"--{name}"]

    def _check_name(self, name: str) -> list[str]:
        option_strings = self._option_strings(name)
        if name in self._flags:
            raise DuplicateFlagError(name, self.name)
        for option in option_strings:
            if option in self.parser._option_string_actions:
                raise DuplicateFlagError(option, self.name)
        return option_strings

    def _add(
        self,
        name: str,
        value: FlagValue,
        usage: str,
        def_value: str,
        zero_text: str,
        metavar: str,
    ) -> Flag:
        option_strings = self._check_name(name)
        flag = Flag(name=name, usage=usage, value=value, def_value=def_value)

        kwargs: dict[str, Any] = {
            "action": _SetFlagAction,
            "dest": name,
            "flag": flag,
            "default": argparse.SUPPRESS,
            "metavar": metavar,
            "help": _format_description(usage, def_value, zero_text),
        }
        if _is_bool_flag(value):
            kwargs.update(nargs="?", const="true")
        self.parser.add_argument(*option_strings, **kwargs)

        self._flags[name] = flag
        for option in option_strings:
            self._flags_by_option[option] = flag
        logger.debug("Registered flag %r (%s, default %r)", name, metavar, def_value)
        return flag

    def typed_var(
        self, kind: Kind, ref: FieldRef, name: str, default: Any, usage: str
    ) -> Flag:
        """
        Register a flag of a primitive kind that writes into ``ref``.

        ``default`` is written to the field straight away and its text form is
        recorded as the flag's def_value.
        """
        self._check_name(name)
        ref.write(default)
        return self._add(
            name,
            _FieldValue(ref, kind),
            usage,
            def_value=format_value(kind, default),
            zero_text=format_value(kind, ZERO_VALUES[kind]),
            metavar=_METAVARS[kind],
        )

    def bool_var(self, ref: FieldRef, name: str, default: bool, usage: str) -> Flag:
        return self.typed_var(Kind.BOOL, ref, name, default, usage)

    def int_var(self, ref: FieldRef, name: str, default: int, usage: str) -> Flag:
        return self.typed_var(Kind.INT, ref, name, default, usage)

    def int64_var(self, ref: FieldRef, name: str, default: int, usage: str) -> Flag:
        return self.typed_var(Kind.INT64, ref, name, default, usage)

    def uint_var(self, ref: FieldRef, name: str, default: int, usage: str) -> Flag:
        return self.typed_var(Kind.UINT, ref, name, default, usage)

    def uint64_var(self, ref: FieldRef, name: str, default: int, usage: str) -> Flag:
        return self.typed_var(Kind.UINT64, ref, name, default, usage)

    def float_var(self, ref: FieldRef, name: str, default: float, usage: str) -> Flag:
        return self.typed_var(Kind.FLOAT64, ref, name, default, usage)

    def string_var(self, ref: FieldRef, name: str, default: str, usage: str) -> Flag:
        return self.typed_var(Kind.STRING, ref, name, default, usage)

    def duration_var(self, ref: FieldRef, name: str, default: Any, usage: str) -> Flag:
        return self.typed_var(Kind.DURATION, ref, name, default, usage)

    def var(self, value: FlagValue, name: str, usage: str) -> Flag:
        """Register a user-defined FlagValue. Its current str() is the default."""
        if not isinstance(value, FlagValue):
            raise TypeError(
                f"{type(value).__name__} does not implement get(), set() and __str__()"
            )
        return self._add(
            name, value, usage, def_value=str(value), zero_text="", metavar="VALUE"
        )

    def set(self, name: str, text: str) -> None:
        """Set the value of the flag ``name`` from its text form."""
        flag = self._flags.get(name)
        if flag is None:
            raise FlagParseError(f"No such flag: {name}")
        try:
            flag.value.set(text)
        except ValueError as e:
            raise FlagParseError(
                f"Invalid value {text!r} for flag {name}: {e}"
            ) from e

    def apply_config(self, config: Mapping[str, Any]) -> None:
        """Set flags from a mapping of flag names to scalar values."""
        for name, value in config.items():
            self.set(name, config_value_text(name, value))

    def _apply_config_file(self, args: list[str]) -> None:
        config_parser = _FlagArgumentParser(
            add_help=False, allow_abbrev=False, raise_errors=True
        )
        config_parser.add_argument(self._config_flag, dest="config_file", type=str)
        known, _ = config_parser.parse_known_args(args)
        if known.config_file:
            self.apply_config(load_config_file(known.config_file))

    def parse(self, args: Optional[Sequence[str]] = None) -> list[str]:
        """
        Parse command-line arguments into the bound fields and values.

        Args:
            args (Optional[Sequence[str]]): Arguments to parse. If None, uses sys.argv.

        Returns:
            list[str]: The positional arguments that are not flags.

        Raises:
            FlagParseError: If an argument is invalid and exit_on_error is False.
            SystemExit: If an argument is invalid and exit_on_error is True, or
                --help was given.
        """
        arg_list = list(sys.argv[1:] if args is None else args)
        trailing: list[str] = []
        if "--" in arg_list:
            end = arg_list.index("--")
            arg_list, trailing = arg_list[:end], arg_list[end + 1 :]
        arg_list = self._normalize_args(arg_list)

        try:
            if self._config_flag is not None:
                self._apply_config_file(arg_list)
        except FlagParseError as e:
            self.parser.error(str(e))

        _, remaining = self.parser.parse_known_args(arg_list)
        unknown = [arg for arg in remaining if arg.startswith("-") and arg != "-"]
        if unknown:
            self.parser.error(f"unrecognized arguments: {' '.join(unknown)}")

        self._args = remaining + trailing
        self._parsed = True
        return list(self._args)

    def _normalize_args(self, args: list[str]) -> list[str]:
        """Rewrite every bare flag token into its ``--name=value`` form."""
        normalized = []
        tokens = iter(args)
        for token in tokens:
            flag = self._flags_by_option.get(token)
            if flag is None:
                normalized.append(token)
            elif _is_bool_flag(flag.value):
                normalized.append(f"{token}=true")
            else:
                value = next(tokens, None)
                # No value left: argparse reports the missing argument.
                normalized.append(token if value is None else f"{token}={value}")
        return normalized

    def safe_parse(
        self, args: Optional[Sequence[str]] = None
    ) -> Result[list[str], str]:
        """
        Parse like parse(), but return the outcome instead of raising or exiting.

        Returns:
            Result[list[str], str]:
                - Ok with the positional arguments that are not flags,
                - Err with the error message if parsing fails.
        """
        raise_errors = self.parser.raise_errors
        self.parser.raise_errors = True
        try:
            return Ok(self.parse(args))
        except FlagBindError as e:
            return Err(str(e))
        finally:
            self.parser.raise_errors = raise_errors

    def format_help(self) -> str:
        return self.parser.format_help()

    def print_help(self, file=None) -> None:
        self.parser.print_help(file)
