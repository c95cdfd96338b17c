"""
asimrun - asim Program Runner
=============================

Compiles an asim program and runs it until it halts, then prints the
final accumulator, flags and register file.

Usage Examples
--------------
Run a program:
    $ asimrun multiply.asm

Show the machine state after every tick:
    $ asimrun --trace multiply.asm

Guard against programs that never halt:
    $ asimrun --max-ticks 500 loop.asm

Exit Codes
----------
0 - Program halted
1 - Compile errors, or the tick budget ran out
2 - Invalid arguments
"""

from pathlib import Path
from typing import Optional

import click

from asim import __version__
from asim.assembler import Assembler
from asim.cli import load_config, setup_logging
from asim.cli.errors import handle_cli_exception
from asim.emulator import Engine, EngineState
from asim.errors import ExecutionLimitError


# =============================================================================
# State Formatting
# =============================================================================

def format_status(state: EngineState) -> str:
    """One-line summary of program counter, accumulator and flags."""
    acc = state.accumulator
    return (
        f"pc={state.program_counter:<3d} line={state.next_line:<3d} "
        f"acc={acc.value:<2d} ({acc.as_signed():+d}) flags={state.flags}"
    )


def format_registers(state: EngineState, per_row: int = 8) -> str:
    rows = []
    for base in range(0, len(state.registers), per_row):
        chunk = state.registers[base:base + per_row]
        rows.append("  ".join(
            f"r{base + offset:<2d}={value.value:>2d}"
            for offset, value in enumerate(chunk)
        ))
    return "\n".join(rows)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-r", "--registers",
    type=click.IntRange(min=1),
    default=None,
    help="Register file size (default: $ASIM_REGISTER_COUNT or 16)",
)
@click.option(
    "--max-ticks",
    type=click.IntRange(min=1),
    default=None,
    help="Give up after this many ticks (default: $ASIM_MAX_TICKS or 10000)",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Print the machine state after every tick",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="asimrun")
def main(
    input_file: Path,
    registers: Optional[int],
    max_ticks: Optional[int],
    trace: bool,
    verbose: bool,
) -> None:
    """
    Compile and run an asim program.

    INPUT_FILE is the assembly source file to run.

    \b
    Examples:
        asimrun multiply.asm              # Run, print final state
        asimrun --trace multiply.asm      # Print state after each tick
        asimrun -r 4 small.asm            # Run with 4 registers
    """
    setup_logging(verbose)

    try:
        config = load_config(register_count=registers, max_ticks=max_ticks)

        commands = Assembler(register_count=config.register_count).assemble_file(input_file)
        engine = Engine.from_config(commands, config)

        if verbose:
            click.echo(
                f"Running {len(commands)} commands with {config.register_count} "
                f"registers, budget {config.max_ticks} ticks"
            )

        if trace:
            ticks = _run_traced(engine, config.max_ticks)
        else:
            ticks = engine.run()

        state = engine.snapshot()
        click.echo(f"Halted after {ticks} ticks")
        click.echo(format_status(state))
        click.echo(format_registers(state))

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Execution")


def _run_traced(engine: Engine, max_ticks: int) -> int:
    ticks = 0
    while not engine.halted:
        if ticks >= max_ticks:
            raise ExecutionLimitError(ticks)
        command = engine.commands[engine.program_counter]
        engine.tick()
        ticks += 1
        click.echo(f"{ticks:5d}  {str(command):<9s} {format_status(engine.snapshot())}")
    return ticks


if __name__ == "__main__":
    main()
