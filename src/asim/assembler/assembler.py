"""
asim Assembler - Main Interface
===============================

This module provides compile() and the Assembler class, the primary
interfaces for turning asim source text into an executable command list.
They coordinate the lexer, parser and resolver, and collect every error
found along the way into a single report.

Example Usage
-------------
>>> from asim import compile
>>> commands = compile('''
... loop: ADD #1
...       BRC #2
...       JMP loop
... ''')
>>> [str(c) for c in commands]
['ADD #1', 'BRC #2', 'JMP 0']

The Assembler class keeps the results of the last compilation around for
listings and symbol files:

    from asim.assembler import Assembler

    asm = Assembler()
    asm.assemble_file("multiply.asm")
    asm.write_listing("multiply.lst")
    asm.write_symbols("multiply.sym")

Command-Line Usage
------------------
    $ asimc multiply.asm -l multiply.lst -s multiply.sym

Options:
    -l, --listing FILE     Write listing to FILE instead of stdout
    -s, --symbols FILE     Generate symbol file
    -r, --registers N      Size of the register file to check against
    -v, --verbose          Verbose output
"""

import logging
from pathlib import Path

from asim.assembler.lexer import tokenize
from asim.assembler.parser import parse
from asim.assembler.resolver import DEFAULT_REGISTER_COUNT, Resolver
from asim.cpu import Command
from asim.errors import CompileError, ErrorCollector, ParseErrorReport

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main asim assembler class.

    Attributes:
        register_count: Register file size that ADDRESS operands are checked against
    """

    def __init__(self, register_count: int = DEFAULT_REGISTER_COUNT):
        if register_count < 1:
            raise ValueError(f"register count must be positive, got {register_count}")
        self.register_count = register_count

        self._commands: list[Command] = []
        self._labels: dict[str, int] = {}
        self._report = ParseErrorReport()

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str) -> list[Command]:
        """
        Compile source code from a string.

        Args:
            source: asim assembly source

        Returns:
            The executable command list

        Raises:
            CompileError: If the source contains any error. The exception
                carries the full report, which also stays available through
                get_error_report().
        """
        self._commands = []
        self._labels = {}

        errors = ErrorCollector()
        tokens, line_table = tokenize(source)
        unresolved, _ = parse(tokens, source, errors)

        resolver = Resolver(source, line_table, self.register_count, errors)
        commands = resolver.resolve(unresolved)

        self._report = errors.build_report(source, line_table)
        if self._report:
            logger.debug(f"Compilation failed with {len(self._report)} errors")
            raise CompileError(self._report)

        self._commands = commands
        self._labels = dict(resolver.labels)
        logger.debug(
            f"Compiled {len(line_table)} lines into {len(commands)} commands"
        )
        return list(commands)

    def assemble_file(self, filepath: str | Path) -> list[Command]:
        """
        Compile source code from a file.

        Raises:
            CompileError: If the source contains any error
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.debug(f"Compiling {filepath}")
        return self.assemble_string(filepath.read_text())

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_commands(self) -> list[Command]:
        return list(self._commands)

    def get_symbols(self) -> dict[str, int]:
        """Label name -> command index of the last successful compilation."""
        return dict(self._labels)

    def get_listing(self) -> str:
        """
        Get the listing as a string.

        One row per command: command index, source line, canonical form.
        """
        lines = []
        lines.append("asim Listing")
        lines.append("=" * 40)
        lines.append("")
        lines.append(" Idx  Line  Command")
        lines.append("-" * 40)
        for index, command in enumerate(self._commands):
            lines.append(f"{index:4d} {command.line:4d}:  {command}")
        if self._labels:
            lines.append("")
            lines.append("Symbol Table")
            lines.append("-" * 30)
            for name, index in sorted(self._labels.items()):
                lines.append(f"{name:20s} = {index}")
        return "\n".join(lines) + "\n"

    def write_listing(self, filepath: str | Path) -> None:
        with open(filepath, "w") as f:
            f.write(self.get_listing())
        logger.debug(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name index (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by asimc\n")
            for name, index in sorted(self._labels.items()):
                f.write(f"{name} {index}\n")
        logger.debug(f"Wrote symbols to {filepath}")

    def has_errors(self) -> bool:
        """Check if the last compilation produced errors."""
        return bool(self._report)

    def get_error_report(self) -> str:
        """Get formatted error report of the last compilation."""
        return self._report.format()


# =============================================================================
# Convenience Functions
# =============================================================================

def compile(source: str, register_count: int = DEFAULT_REGISTER_COUNT) -> list[Command]:
    """
    Compile asim source text into an executable command list.

    Args:
        source: asim assembly source
        register_count: Register file size that ADDRESS operands must fit

    Returns:
        The command list

    Raises:
        CompileError: If the source contains any error; no partial command
            list is produced
    """
    return Assembler(register_count).assemble_string(source)


def compile_file(filepath: str | Path, register_count: int = DEFAULT_REGISTER_COUNT) -> list[Command]:
    """Compile an asim source file. See compile()."""
    return Assembler(register_count).assemble_file(filepath)
