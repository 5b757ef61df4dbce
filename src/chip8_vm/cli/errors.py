"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the command-line tools.

Copyright (c) 2025 chip8-vm contributors
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    FAILURE = 1          # Bad arguments or ROM load failure
    MACHINE_FAULT = 2    # Program halted the machine (stack/memory fault)
    INTERNAL_ERROR = 3   # Unexpected internal error


class Chip8Command(click.Command):
    """
    Click command that reports usage errors with exit code 1.

    Click exits with 2 on usage errors by default; code 2 is reserved here
    for machine faults.
    """

    def main(self, *args, **kwargs):
        kwargs.pop("standalone_mode", None)
        try:
            return super().main(*args, standalone_mode=False, **kwargs)
        except click.UsageError as e:
            e.show()
            sys.exit(ExitCode.FAILURE)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(ExitCode.FAILURE)


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for CLI tools.

    Formats the error message, optionally prints a traceback for internal
    errors in verbose mode, and exits with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from chip8_vm.errors import Chip8Error

    if isinstance(error, Chip8Error):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.FAILURE)

    elif isinstance(error, (click.BadParameter, ValueError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.FAILURE)

    elif isinstance(error, OSError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.FAILURE)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
