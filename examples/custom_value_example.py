#!/usr/bin/env python3
"""
Example demonstrating user-defined flag values.

Any object with get(), set(text) and __str__() can sit in a dataclass field; it is
registered as-is and decides for itself how command-line text is interpreted.
"""

from dataclasses import dataclass, field

from dataclass_flagger import FlagSet, bind


class HostList:
    """A comma-separated list of hosts; every use of the flag appends to it."""

    def __init__(self) -> None:
        self.hosts: list[str] = []

    def get(self) -> list[str]:
        return self.hosts

    def set(self, text: str) -> None:
        hosts = [h.strip() for h in text.split(",") if h.strip()]
        if not hosts:
            raise ValueError("expected at least one host")
        self.hosts.extend(hosts)

    def __str__(self) -> str:
        return ",".join(self.hosts)


@dataclass
class ClientConfig:
    hosts: HostList = field(
        default_factory=HostList, metadata={"flag": "host,,Host to contact (repeatable)"}
    )
    retries: int = field(default=0, metadata={"flag": "retries,3,Retries per host"})


if __name__ == "__main__":
    config = ClientConfig()
    flags = FlagSet("client")
    bind(config, flags)

    # Simulate parsing arguments (replace with `None` to use CLI args)
    flags.parse(["--host", "a.example.org,b.example.org", "--host=c.example.org"])

    print(f"hosts: {config.hosts.get()}")
    print(f"retries: {config.retries}")
    for flag in flags:
        print(f"  --{flag.name} (default {flag.def_value!r}): {flag.usage}")
