#!/usr/bin/env python3
"""
Example script demonstrating the usage of dataclass_flagger.

This script shows how to declare flags through dataclass field metadata and
parse the command line straight into a dataclass instance.

Try:
    python basic_example.py --name=demo --temperature=31.5 --timeout=2m --verbose
"""

import datetime
from dataclasses import dataclass, field

from dataclass_flagger import FlagSet, UInt, bind


@dataclass
class SimulationConfig:
    """Configuration for simulation parameters."""

    name: str = field(default="", metadata={"flag": "name,baseline,Name of the simulation"})
    temperature: float = field(
        default=0.0, metadata={"flag": "temperature,27.0,Temperature in Celsius"}
    )
    num_simulations: UInt = field(
        default=UInt(0), metadata={"flag": "simulations,100,Number of simulations to run"}
    )
    output_dir: str = field(
        default="", metadata={"flag": "output-dir,/tmp/output,Output directory path"}
    )
    timeout: datetime.timedelta = field(
        default=datetime.timedelta(0), metadata={"flag": "timeout,5m,Time limit per run"}
    )
    verbose: bool = field(default=False, metadata={"flag": "verbose,,Enable verbose output"})
    run_id: str = field(default="generated", metadata={"flag": "-"})


def main() -> None:
    """Main function demonstrating the binder."""
    config = SimulationConfig()
    flags = FlagSet(description="dataclass_flagger example")
    bind(config, flags)
    inputs = flags.parse()

    print("Parsed Configuration:")
    print("-" * 30)
    print(f"Simulation Name: {config.name}")
    print(f"Temperature: {config.temperature}°C")
    print(f"Number of Simulations: {config.num_simulations}")
    print(f"Output Directory: {config.output_dir}")
    print(f"Timeout: {config.timeout}")
    print(f"Verbose: {config.verbose}")
    print(f"Run ID (not a flag): {config.run_id}")
    print(f"Inputs: {inputs}")


if __name__ == "__main__":
    main()
