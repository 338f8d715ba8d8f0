"""CLI entry point for jsmolt."""

import logging
from pathlib import Path
from typing import Any

import click

from jsmolt import __version__
from jsmolt.commands.registry import (
    apply_refactoring,
    discover_and_register_commands,
    get_command,
    registered_command_names,
)

# Dynamically discover and import all command modules
discover_and_register_commands()

TARGET_HELP = (
    "Cursor position as L<line>:<column>, or a selected range as "
    "L<line>:<column>-L<line>:<column>. Lines and columns start at 1."
)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs.")
def main(verbose: bool) -> None:
    """jsmolt - JavaScript and TypeScript refactoring CLI tool.

    Based on Martin Fowler's refactoring catalog, this tool provides
    automated refactorings for JavaScript and TypeScript code.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def refactor_file(refactoring_name: str, file_path: Path, **params: Any) -> None:
    """Apply a refactoring to a file.

    Args:
        refactoring_name: Name of the refactoring to apply
        file_path: Path to the file to refactor
        **params: Additional parameters for the refactoring

    Raises:
        ValueError: If refactoring_name is not recognized, or the refactoring
            can't be applied
    """
    apply_refactoring(refactoring_name, file_path, **params)


def _build_refactoring_command(refactoring_name: str) -> click.Command:
    command_class = get_command(refactoring_name)

    @click.command(name=refactoring_name, help=command_class.__doc__)
    @click.argument(
        "file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
    )
    @click.option("--target", required=True, help=TARGET_HELP)
    def refactoring_command(file_path: Path, target: str) -> None:
        try:
            refactor_file(refactoring_name, file_path, target=target)
        except ValueError as e:
            raise click.ClickException(str(e)) from e

    return refactoring_command


for _refactoring_name in registered_command_names():
    main.add_command(_build_refactoring_command(_refactoring_name))
