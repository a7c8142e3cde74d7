#!/usr/bin/env python3
"""
Tests for the FlagSet registry: registration, lookup, parsing and help output.
"""

import datetime
from dataclasses import dataclass, field

import pytest
from result import Err, Ok

from dataclass_flagger import (
    DuplicateFlagError,
    FieldRef,
    FlagParseError,
    FlagSet,
    bind,
)


@dataclass
class ServerConfig:
    """Configuration used to exercise the flag set."""

    host: str = field(default="", metadata={"flag": "host,localhost,Address to bind"})
    port: int = field(default=0, metadata={"flag": "port,8080,Port to listen on"})
    workers: int = field(default=0, metadata={"flag": "workers,,Worker count"})
    verbose: bool = field(default=False, metadata={"flag": "verbose,,Verbose output"})
    timeout: datetime.timedelta = field(
        default=datetime.timedelta(0), metadata={"flag": "timeout,30s,Request timeout"}
    )
    ratio: float = field(default=0.0, metadata={"flag": "ratio,0.5,Sample 100% of ratio"})


@pytest.fixture
def config():
    return ServerConfig()


@pytest.fixture
def flag_set(config):
    flags = FlagSet("server", exit_on_error=False)
    bind(config, flags)
    return flags


class TestRegistration:
    """Test suite for registering flags directly."""

    def test_typed_var_writes_default(self):
        """Test that registering a flag stores its default in the field."""
        config = ServerConfig(port=1)
        flags = FlagSet("test", exit_on_error=False)
        flag = flags.int_var(FieldRef(config, "port"), "port", 9090, "Port")

        assert config.port == 9090
        assert flag.def_value == "9090"
        assert flags.lookup("port") is flag

    def test_named_helpers(self):
        config = ServerConfig()
        flags = FlagSet("test", exit_on_error=False)
        flags.string_var(FieldRef(config, "host"), "host", "example.org", "")
        flags.bool_var(FieldRef(config, "verbose"), "verbose", True, "")
        flags.float_var(FieldRef(config, "ratio"), "ratio", 0.25, "")
        flags.duration_var(
            FieldRef(config, "timeout"), "timeout", datetime.timedelta(minutes=1), ""
        )

        assert (config.host, config.verbose, config.ratio) == ("example.org", True, 0.25)
        assert flags.lookup("timeout").def_value == "1m0s"
        assert flags.lookup("verbose").def_value == "true"

    def test_lookup_unknown_flag(self, flag_set):
        assert flag_set.lookup("missing") is None
        assert "missing" not in flag_set

    def test_iteration_is_sorted(self, flag_set):
        assert [f.name for f in flag_set] == [
            "host",
            "port",
            "ratio",
            "timeout",
            "verbose",
            "workers",
        ]
        assert len(flag_set) == 6

    def test_duplicate_name_raises(self, flag_set, config):
        """Test that registering a flag name twice is rejected."""
        with pytest.raises(DuplicateFlagError) as exc:
            flag_set.int_var(FieldRef(config, "workers"), "port", 1, "")

        assert isinstance(exc.value, ValueError)
        assert "Flag name conflict" in str(exc.value)
        # The field of the rejected flag is left alone.
        assert config.workers == 0

    def test_help_name_conflict(self, config):
        flags = FlagSet("test", exit_on_error=False)
        with pytest.raises(DuplicateFlagError):
            flags.bool_var(FieldRef(config, "verbose"), "help", False, "")

    @pytest.mark.parametrize("name", ["", "-port", "port=1"])
    def test_invalid_name(self, config, name):
        flags = FlagSet("test", exit_on_error=False)
        with pytest.raises(ValueError, match="Invalid flag name"):
            flags.int_var(FieldRef(config, "port"), name, 0, "")

    def test_var_requires_flag_value(self):
        flags = FlagSet("test", exit_on_error=False)
        with pytest.raises(TypeError):
            flags.var(object(), "thing", "")


class TestParse:
    """Test suite for FlagSet.parse()."""

    def test_parse_forms(self, flag_set, config):
        """Test '--name=value', '--name value' and bare boolean flags."""
        remaining = flag_set.parse(
            ["--host=example.org", "--port", "9000", "--verbose", "input.txt"]
        )

        assert remaining == ["input.txt"]
        assert flag_set.args == ["input.txt"]
        assert flag_set.parsed
        assert config.host == "example.org"
        assert config.port == 9000
        assert config.verbose is True

    def test_unset_flags_keep_defaults(self, flag_set, config):
        flag_set.parse([])
        assert config.host == "localhost"
        assert config.port == 8080
        assert config.timeout == datetime.timedelta(seconds=30)
        assert config.ratio == 0.5

    def test_explicit_false(self, flag_set, config):
        flag_set.parse(["--verbose=true", "--verbose=false"])
        assert config.verbose is False

    def test_bare_bool_flag_keeps_following_word(self, flag_set, config):
        """Test that '--verbose' never takes the next word as its value."""
        assert flag_set.parse(["--verbose", "file"]) == ["file"]
        assert config.verbose is True

        assert flag_set.parse(["--verbose=false", "false"]) == ["false"]
        assert config.verbose is False

    def test_single_letter_bool_flag(self, config):
        flags = FlagSet("test", exit_on_error=False)
        flags.bool_var(FieldRef(config, "verbose"), "v", False, "")

        assert flags.parse(["-v", "input.txt"]) == ["input.txt"]
        assert config.verbose is True

    def test_double_dash_ends_flags(self, flag_set, config):
        """Test that everything after '--' is returned untouched."""
        remaining = flag_set.parse(["--port=1", "--", "-x", "--port=2", "file"])

        assert remaining == ["-x", "--port=2", "file"]
        assert flag_set.args == ["-x", "--port=2", "file"]
        assert config.port == 1

    def test_double_dash_alone(self, flag_set):
        assert flag_set.parse(["--"]) == []

    def test_value_starting_with_dash(self, flag_set, config):
        """Test that the word after a flag is its value even if it starts with '-'."""
        flag_set.parse(["--timeout", "-1s", "--host", "-", "--port", "-5"])

        assert config.timeout == datetime.timedelta(seconds=-1)
        assert config.host == "-"
        assert config.port == -5

    def test_invalid_value(self, flag_set, config):
        """Test that an undecodable value raises FlagParseError and keeps the field."""
        with pytest.raises(FlagParseError, match="invalid value 'abc'"):
            flag_set.parse(["--port=abc"])
        assert config.port == 8080

    def test_unknown_flag(self, flag_set):
        with pytest.raises(FlagParseError, match="unrecognized arguments: --nope"):
            flag_set.parse(["--nope=1"])

    def test_missing_value(self, flag_set):
        with pytest.raises(FlagParseError):
            flag_set.parse(["--port"])

    def test_no_abbreviations(self, flag_set):
        with pytest.raises(FlagParseError):
            flag_set.parse(["--verb"])

    def test_exit_on_error(self, config, capsys):
        """Test that the default flag set exits like argparse on bad input."""
        flags = FlagSet("server")
        bind(config, flags)

        with pytest.raises(SystemExit) as exc:
            flags.parse(["--port=abc"])

        assert exc.value.code == 2
        assert "invalid value 'abc'" in capsys.readouterr().err

    def test_set(self, flag_set, config):
        flag_set.set("timeout", "1h")
        assert config.timeout == datetime.timedelta(hours=1)

        with pytest.raises(FlagParseError, match="No such flag"):
            flag_set.set("missing", "1")
        with pytest.raises(FlagParseError, match="Invalid value"):
            flag_set.set("port", "eighty")

    def test_safe_parse(self, config):
        """Test that safe_parse() returns Err instead of exiting."""
        flags = FlagSet("server")
        bind(config, flags)

        assert flags.safe_parse(["--port=1", "rest"]) == Ok(["rest"])
        assert config.port == 1

        result = flags.safe_parse(["--port=abc"])
        assert isinstance(result, Err)
        assert "invalid value 'abc'" in result.err_value


class TestHelp:
    """Test suite for the generated help text."""

    def test_help_contains_usage_and_defaults(self, flag_set):
        help_output = flag_set.format_help()

        assert "--host STRING" in help_output
        assert "Address to bind (default: localhost)" in help_output
        assert "Port to listen on (default: 8080)" in help_output
        assert "Request timeout (default: 30s)" in help_output
        assert "Sample 100% of ratio (default: 0.5)" in help_output

    def test_zero_default_not_shown(self, flag_set):
        help_output = flag_set.format_help()
        assert "Worker count" in help_output
        assert "(default: 0)" not in help_output
        assert "(default: false)" not in help_output

    def test_help_exits(self, flag_set, capsys):
        with pytest.raises(SystemExit) as exc:
            flag_set.parse(["--help"])
        assert exc.value.code == 0
        assert "--verbose [BOOL]" in capsys.readouterr().out
