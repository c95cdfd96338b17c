"""
asim Execution Engine
=====================

The engine executes a compiled command list on a 4-bit accumulator
machine with a fixed-size register file.

Machine State
-------------
- Accumulator: one Nibble; carry/negative/zero flags are read from it
- Registers: register_count Nibbles, all zero at start
- Program counter: index of the next command, starts at 0

Execution Model
---------------
tick() executes exactly one command and reports whether the program
counter still points inside the program. Once it has run past the last
command the engine is halted; callers stop ticking at that point. Branches
test the accumulator flags as they stand before the branch executes.

Example
-------
>>> from asim import compile
>>> engine = Engine(16, compile("LDA #7\\nADD #1\\nSTA (0)"))
>>> engine.run()
3
>>> engine.register(0).as_signed(), engine.flags.negative
(-8, True)
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from asim.config import DEFAULT_MAX_TICKS, MachineConfig
from asim.cpu import Command, Opcode
from asim.errors import ExecutionError, ExecutionLimitError
from asim.nibble import Nibble

logger = logging.getLogger(__name__)


# =============================================================================
# State Records
# =============================================================================

@dataclass(frozen=True)
class StatusFlags:
    """Condition flags derived from the accumulator."""
    carry: bool
    negative: bool
    zero: bool

    @classmethod
    def of(cls, value: Nibble) -> "StatusFlags":
        return cls(carry=value.carry, negative=value.negative, zero=value.zero)

    def __str__(self) -> str:
        return "".join([
            "C" if self.carry else "-",
            "N" if self.negative else "-",
            "Z" if self.zero else "-",
        ])


@dataclass(frozen=True)
class EngineState:
    """
    Complete visible engine state, for snapshotting.

    Attributes:
        accumulator: Current accumulator
        registers: Register file contents
        flags: Flags derived from the accumulator
        program_counter: Index of the next command
        next_line: Source line of the next command (program length once halted)
        halted: True once the program counter has left the program
    """
    accumulator: Nibble
    registers: tuple[Nibble, ...]
    flags: StatusFlags
    program_counter: int
    next_line: int
    halted: bool


# =============================================================================
# Engine
# =============================================================================

class Engine:
    """
    asim virtual machine.

    The engine owns its state; callers observe it through read-only
    properties and advance it with tick() or run().

    Attributes:
        max_ticks: Default tick budget for run()
    """

    def __init__(
        self,
        register_count: int,
        commands: Sequence[Command],
        max_ticks: int = DEFAULT_MAX_TICKS
    ):
        """
        Create an engine for a program.

        Args:
            register_count: Size of the register file
            commands: The compiled program, copied into the engine
            max_ticks: Default tick budget for run()

        Raises:
            ValueError: If register_count is negative
        """
        if register_count < 0:
            raise ValueError(f"register count must not be negative, got {register_count}")

        self._commands: tuple[Command, ...] = tuple(commands)
        self._registers: list[Nibble] = [Nibble(0)] * register_count
        self._accumulator = Nibble(0)
        self._pc = 0
        self.max_ticks = max_ticks

    @classmethod
    def from_config(cls, commands: Sequence[Command], config: MachineConfig) -> "Engine":
        """Create an engine sized and budgeted by a MachineConfig."""
        return cls(config.register_count, commands, max_ticks=config.max_ticks)

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def accumulator(self) -> Nibble:
        return self._accumulator

    @property
    def registers(self) -> tuple[Nibble, ...]:
        """Snapshot of the register file."""
        return tuple(self._registers)

    @property
    def register_count(self) -> int:
        return len(self._registers)

    def register(self, index: int) -> Nibble:
        """
        Read one register.

        Raises:
            ExecutionError: If index is outside the register file
        """
        self._check_register(index)
        return self._registers[index]

    @property
    def flags(self) -> StatusFlags:
        return StatusFlags.of(self._accumulator)

    @property
    def program_counter(self) -> int:
        return self._pc

    @property
    def commands(self) -> tuple[Command, ...]:
        return self._commands

    @property
    def halted(self) -> bool:
        return self._pc >= len(self._commands)

    @property
    def next_line(self) -> int:
        """
        Source line of the command that executes next.

        Once the engine has halted this is the number of commands, which
        never collides with a real line of a non-empty program's listing.
        """
        if self.halted:
            return len(self._commands)
        return self._commands[self._pc].line

    def snapshot(self) -> EngineState:
        return EngineState(
            accumulator=self._accumulator,
            registers=self.registers,
            flags=self.flags,
            program_counter=self._pc,
            next_line=self.next_line,
            halted=self.halted,
        )

    # =========================================================================
    # Execution
    # =========================================================================

    def tick(self) -> bool:
        """
        Execute the command at the program counter.

        Returns:
            True while the program counter still points into the program

        Raises:
            ExecutionError: If the engine has already halted, or the command
                addresses a register outside the register file
        """
        if self.halted:
            raise ExecutionError(
                f"engine halted at {self._pc}, program has {len(self._commands)} commands"
            )

        command = self._commands[self._pc]
        logger.debug(f"{self._pc:4d}: {command}  (acc={self._accumulator.value})")
        self._execute(command)

        if self.halted:
            logger.debug(f"Halted at {self._pc}")
            return False
        return True

    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Tick until the engine halts.

        Args:
            max_ticks: Tick budget (defaults to self.max_ticks)

        Returns:
            Number of ticks executed

        Raises:
            ExecutionLimitError: If the program did not halt within the budget
        """
        budget = self.max_ticks if max_ticks is None else max_ticks
        ticks = 0
        while not self.halted:
            if ticks >= budget:
                raise ExecutionLimitError(ticks)
            self.tick()
            ticks += 1
        return ticks

    def _execute(self, command: Command) -> None:
        operand = command.operand

        match command.opcode:
            case Opcode.NOP:
                pass
            case Opcode.LOAD_FIX:
                self._accumulator = Nibble(operand)
            case Opcode.LOAD_FROM_REGISTER:
                self._accumulator = self.register(operand)
            case Opcode.SAVE_TO_REGISTER:
                self._check_register(operand)
                self._registers[operand] = self._accumulator
            case Opcode.ADD_FIX:
                self._accumulator = self._accumulator + Nibble(operand)
            case Opcode.ADD_FROM_REGISTER:
                self._accumulator = self._accumulator + self.register(operand)
            case Opcode.SUB_FIX:
                self._accumulator = self._accumulator - Nibble(operand)
            case Opcode.SUB_FROM_REGISTER:
                self._accumulator = self._accumulator - self.register(operand)
            case Opcode.JUMP:
                self._pc = operand
                return
            case Opcode.BRANCH_IF_ZERO:
                self._branch(self._accumulator.zero, operand)
                return
            case Opcode.BRANCH_IF_CARRY:
                self._branch(self._accumulator.carry, operand)
                return
            case Opcode.BRANCH_IF_NEGATIVE:
                self._branch(self._accumulator.negative, operand)
                return
            case _:
                raise ExecutionError(f"unknown opcode {command.opcode!r}")

        self._pc += 1

    def _branch(self, condition: bool, offset: int) -> None:
        self._pc += offset if condition else 1

    def _check_register(self, index: int) -> None:
        if not 0 <= index < len(self._registers):
            raise ExecutionError(
                f"register {index} out of range (register file has "
                f"{len(self._registers)} registers)"
            )
