"""
asim - 4-bit Accumulator Machine Assembler and Simulator
========================================================

This package compiles a small line-oriented assembly language and executes
the result on a simulated 4-bit accumulator machine with carry, negative
and zero flags. It is meant for teaching and visualizing low-level
execution: a caller compiles once, then steps the engine one tick at a
time and inspects its state in between.

Main Components
---------------
- **assembler**: Lexer, parser and resolver (asimc)
    Turns source text into a command list, reporting every error at once

- **emulator**: Execution engine (asimrun)
    Runs a command list one command per tick

- **nibble**: 4-bit arithmetic with carry/negative/zero flags

- **cpu**: The instruction set shared by the assembler and the engine

Quick Start
-----------
Compile and run a program:
    >>> from asim import compile, Engine
    >>> engine = Engine(16, compile('''
    ...     LDA #3
    ... loop:
    ...     SUB #1
    ...     BRZ #2
    ...     JMP loop
    ...     STA (0)
    ... '''))
    >>> engine.run()
    10
    >>> engine.register(0).value
    0

Report compile errors:
    >>> from asim import CompileError
    >>> try:
    ...     compile("STA #5")
    ... except CompileError as e:
    ...     print(e.report.format())
    line 0: error: not allowed fix number
        STA #5
            ^^
    <BLANKLINE>
    1 error

Or use the command-line tools:
    $ asimc multiply.asm -l multiply.lst
    $ asimrun --trace multiply.asm

Version History
---------------
1.0.0 - Initial release with compiler, engine and command-line tools
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from asim.assembler import Assembler, compile, compile_file

from asim.config import MachineConfig

from asim.cpu import Command, Opcode, OperandKind

from asim.emulator import Engine, EngineState, StatusFlags

from asim.errors import (
    AsimError,
    CompileError,
    ErrorKind,
    ExecutionError,
    ExecutionLimitError,
    ParseError,
    ParseErrorReport,
    SourceLine,
)

from asim.nibble import Nibble

__all__ = [
    # Version info
    "__version__",
    # Compilation
    "compile",
    "compile_file",
    "Assembler",
    # Execution
    "Engine",
    "EngineState",
    "StatusFlags",
    "MachineConfig",
    # Instruction set
    "Command",
    "Opcode",
    "OperandKind",
    "Nibble",
    # Exception hierarchy and diagnostics
    "AsimError",
    "CompileError",
    "ExecutionError",
    "ExecutionLimitError",
    "ErrorKind",
    "ParseError",
    "ParseErrorReport",
    "SourceLine",
]
