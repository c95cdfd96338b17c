"""
asimc - asim Compiler Command-Line Interface
============================================

This module implements the command-line interface for the asim compiler.
It checks a program, reports every error it contains, and prints or writes
the compiled listing.

Usage Examples
--------------
Check a program and print its listing:
    $ asimc multiply.asm

Write listing and symbol files:
    $ asimc multiply.asm -l multiply.lst -s multiply.sym

Check against a smaller register file:
    $ asimc -r 8 multiply.asm
"""

from pathlib import Path
from typing import Optional

import click

from asim import __version__
from asim.assembler import Assembler
from asim.cli import load_config, setup_logging
from asim.cli.errors import handle_cli_exception


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write listing to this file instead of stdout",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-r", "--registers",
    type=click.IntRange(min=1),
    default=None,
    help="Register file size (default: $ASIM_REGISTER_COUNT or 16)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="asimc")
def main(
    input_file: Path,
    listing: Optional[Path],
    symbols: Optional[Path],
    registers: Optional[int],
    verbose: bool,
) -> None:
    """
    Compile asim assembly source.

    INPUT_FILE is the assembly source file to compile.

    On success the listing (command index, source line, command) is
    printed, unless -l sends it to a file. On failure every error is
    reported on stderr and the exit status is 1.

    \b
    Examples:
        asimc multiply.asm                   # Print listing
        asimc multiply.asm -l out.lst        # Write listing file
        asimc multiply.asm -s out.sym        # Also write symbols
    """
    setup_logging(verbose)

    try:
        config = load_config(register_count=registers)
        asm = Assembler(register_count=config.register_count)

        if verbose:
            click.echo(f"Compiling {input_file}...")

        commands = asm.assemble_file(input_file)

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")
        else:
            click.echo(asm.get_listing(), nl=False)

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(
                f"Compilation complete: {len(commands)} commands, "
                f"{len(asm.get_symbols())} labels"
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Compilation")


if __name__ == "__main__":
    main()
