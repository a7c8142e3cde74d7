#!/usr/bin/env python3
"""
Example demonstrating config file override functionality.

This script shows how values from a config file can be overridden
by command-line arguments, demonstrating the priority system:
1. Command-line arguments (highest priority)
2. Config file values
3. Defaults from the field metadata (lowest priority)

Try:
    python config_file_example.py --config settings.yaml --port=9000
"""

from dataclasses import dataclass, field

from dataclass_flagger import FlagSet, bind


@dataclass
class ServiceConfig:
    host: str = field(default="", metadata={"flag": "host,localhost,Address to bind"})
    port: int = field(default=0, metadata={"flag": "port,8080,Port to listen on"})
    debug: bool = field(default=False, metadata={"flag": "debug,,Enable debug mode"})


if __name__ == "__main__":
    config = ServiceConfig()
    flags = FlagSet("service", config_flag="--config")
    bind(config, flags)
    flags.parse()

    print("Results:")
    print("-" * 20)
    for flag in flags:
        print(f"{flag.name}: {flag.value} (default: {flag.def_value!r})")
