"""
asim Label and Opcode Resolver
==============================

The resolver turns unresolved commands into executable Command objects in
two passes:

1. Build the label table (label name -> command index). A name defined
   twice is an error; the first definition is kept.
2. Translate every command on its own: resolve the operand to an integer,
   pick the opcode from the shared instruction table, check that register
   addresses and jump targets fit the machine, and record the source line
   of the instruction.

Because the label table is complete before any operand is resolved,
labels can be referenced before they are defined.

Jump targets may equal the number of commands. Execution then runs off
the end of the program, which is how a program halts.
"""

import logging
from typing import Optional

from asim.assembler.lexer import LineTable
from asim.assembler.parser import UnresolvedCommand
from asim.cpu import (
    BRANCH_OPCODES,
    REGISTER_OPCODES,
    Command,
    Opcode,
    OperandKind,
    get_opcode,
)
from asim.config import DEFAULT_REGISTER_COUNT
from asim.errors import ErrorCollector, ErrorKind

logger = logging.getLogger(__name__)

# Largest operand a command can carry (an unsigned 64-bit machine word)
MAX_OPERAND = 2**64 - 1

_NOT_ALLOWED = {
    OperandKind.FIXED: ErrorKind.NOT_ALLOWED_FIX_NUMBER,
    OperandKind.ADDRESS: ErrorKind.NOT_ALLOWED_ADDRESS,
    OperandKind.LABEL: ErrorKind.NOT_ALLOWED_LABEL,
}


class Resolver:
    """
    Resolves labels and opcodes for a parsed program.

    Usage:
        resolver = Resolver(source, line_table)
        commands = resolver.resolve(unresolved)
        labels = resolver.labels

    Attributes:
        labels: Label name -> command index, filled in by resolve()
        errors: Collector the resolver records errors in
    """

    def __init__(
        self,
        source: str,
        line_table: LineTable,
        register_count: int = DEFAULT_REGISTER_COUNT,
        errors: Optional[ErrorCollector] = None
    ):
        self._source = source
        self._line_table = line_table
        self._register_count = register_count
        self.labels: dict[str, int] = {}
        self.errors = errors if errors is not None else ErrorCollector()

    def resolve(self, commands: list[UnresolvedCommand]) -> list[Command]:
        """
        Resolve a parsed program.

        Args:
            commands: Unresolved commands, in program order

        Returns:
            Every command that resolved successfully
        """
        self._build_label_table(commands)

        resolved: list[Command] = []
        for index, command in enumerate(commands):
            result = self._translate(index, command, len(commands))
            if result is not None:
                resolved.append(result)

        logger.debug(
            f"Resolved {len(resolved)} of {len(commands)} commands, "
            f"{len(self.labels)} labels"
        )
        return resolved

    # =========================================================================
    # Pass 1: Label Table
    # =========================================================================

    def _build_label_table(self, commands: list[UnresolvedCommand]) -> None:
        self.labels = {}
        for index, command in enumerate(commands):
            if command.label is None:
                continue
            name = command.label.text(self._source)
            if name in self.labels:
                self.errors.add(
                    ErrorKind.LABEL_REASSIGN, command.label.start, command.label.end
                )
                continue
            self.labels[name] = index

    # =========================================================================
    # Pass 2: Translation
    # =========================================================================

    def _translate(
        self,
        index: int,
        command: UnresolvedCommand,
        program_length: int
    ) -> Optional[Command]:
        instruction = command.instruction
        line = self._line_table.index_of(instruction.start)
        mnemonic = instruction.text(self._source)
        operand = command.operand

        if operand is None:
            opcode = get_opcode(mnemonic, None)
            # Only reachable for command lists not built by the parser
            if opcode is None:
                self.errors.add(ErrorKind.MISSING_OPERAND, instruction.start, instruction.end)
                return None
            return Command(opcode, 0, line)

        value = self._resolve_operand(command)
        if value is None:
            return None

        opcode = get_opcode(mnemonic, operand.kind)
        if opcode is None:
            self.errors.add(_NOT_ALLOWED[operand.kind], operand.start, operand.end)
            return None

        if opcode in REGISTER_OPCODES and value >= self._register_count:
            self.errors.add(ErrorKind.ADDRESS_OUT_OF_RANGE, operand.start, operand.end)
            return None

        if opcode == Opcode.JUMP:
            target = value
        elif opcode in BRANCH_OPCODES:
            target = index + value
        else:
            target = None

        if target is not None and target > program_length:
            self.errors.add(ErrorKind.TARGET_OUT_OF_RANGE, operand.start, operand.end)
            return None

        return Command(opcode, value, line)

    def _resolve_operand(self, command: UnresolvedCommand) -> Optional[int]:
        """Turn the operand into a non-negative integer, or record why it can't be."""
        operand = command.operand
        text = operand.value.text(self._source)

        if operand.kind == OperandKind.LABEL:
            if text not in self.labels:
                self.errors.add(
                    ErrorKind.MISSING_LABEL, operand.value.start, operand.value.end
                )
                return None
            return self.labels[text]

        digits = text.lstrip("0") or "0"
        value = None
        if digits.isascii() and digits.isdigit() and len(digits) <= len(str(MAX_OPERAND)):
            value = int(digits)
        if value is None or value > MAX_OPERAND:
            self.errors.add(
                ErrorKind.INVALID_OPERANT, operand.value.start, operand.value.end
            )
            return None
        return value


def resolve(
    commands: list[UnresolvedCommand],
    source: str,
    line_table: LineTable,
    register_count: int = DEFAULT_REGISTER_COUNT,
    errors: Optional[ErrorCollector] = None
) -> tuple[list[Command], ErrorCollector]:
    """
    Resolve a parsed program.

    Returns:
        (commands, error collector)
    """
    resolver = Resolver(source, line_table, register_count, errors)
    resolved = resolver.resolve(commands)
    return resolved, resolver.errors
