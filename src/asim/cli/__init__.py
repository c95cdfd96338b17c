"""
asim Command-Line Interface
===========================

This package provides command-line tools for asim:

- **asimc**: Compiler (listings and symbol files)
- **asimrun**: Compile and run a program, printing the final machine state

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

import logging
from typing import Optional

import click

from asim.config import MachineConfig

__all__ = ["asimc", "asimrun", "load_config", "setup_logging"]


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def load_config(
    register_count: Optional[int] = None,
    max_ticks: Optional[int] = None
) -> MachineConfig:
    """
    Build the machine configuration from the environment and command line.

    Raises:
        click.BadParameter: If the resulting machine parameters are invalid
    """
    try:
        return MachineConfig.from_env().with_overrides(
            register_count=register_count,
            max_ticks=max_ticks,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
