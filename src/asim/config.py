"""
asim Machine Configuration
==========================

Machine parameters shared by the compiler and the engine. Configuration can
come from:
- Default values (defined here)
- Environment variables
- Command-line options (applied by the CLI tools on top of the environment)

Environment variables (all optional):
    ASIM_REGISTER_COUNT: Size of the register file (positive integer)
    ASIM_MAX_TICKS: Tick budget for Engine.run() (positive integer)

Invalid values are ignored and the default is kept.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_REGISTER_COUNT = 16
DEFAULT_MAX_TICKS = 10_000


@dataclass(frozen=True)
class MachineConfig:
    """
    Configuration of an asim machine.

    Attributes:
        register_count: Number of registers (default: 16, addresses 0-15)
        max_ticks: Ticks Engine.run() executes before giving up (default: 10,000)
    """
    register_count: int = DEFAULT_REGISTER_COUNT
    max_ticks: int = DEFAULT_MAX_TICKS

    def __post_init__(self) -> None:
        if self.register_count < 1:
            raise ValueError(f"register_count must be positive, got {self.register_count}")
        if self.max_ticks < 1:
            raise ValueError(f"max_ticks must be positive, got {self.max_ticks}")

    @classmethod
    def from_env(cls) -> "MachineConfig":
        """
        Create MachineConfig from environment variables.

        Returns:
            MachineConfig with values from environment variables
        """
        values = {}

        if register_count := _positive_int("ASIM_REGISTER_COUNT"):
            values["register_count"] = register_count

        if max_ticks := _positive_int("ASIM_MAX_TICKS"):
            values["max_ticks"] = max_ticks

        return cls(**values)

    def with_overrides(
        self,
        register_count: Optional[int] = None,
        max_ticks: Optional[int] = None
    ) -> "MachineConfig":
        """Return a copy with every non-None argument replacing the current value."""
        changes = {}
        if register_count is not None:
            changes["register_count"] = register_count
        if max_ticks is not None:
            changes["max_ticks"] = max_ticks
        return replace(self, **changes)


def _positive_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.debug(f"Ignoring non-integer {name}={raw!r}")
        return None
    if value < 1:
        logger.debug(f"Ignoring non-positive {name}={raw!r}")
        return None
    return value
