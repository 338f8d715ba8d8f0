"""Inline refactoring command, for whatever is declared at the target."""

from jsmolt.commands.base import BaseCommand
from jsmolt.commands.registry import register_command
from jsmolt.refactorings.composing_methods.inline_variable_or_function import (
    InlineVariableOrFunction,
)


@register_command
class InlineCommand(BaseCommand):
    """Command to inline the function or the variable declared at the target."""

    name = "inline"

    def validate(self) -> None:
        self.validate_required_params("target")

    def execute(self) -> None:
        self.apply_refactoring(InlineVariableOrFunction(self.parse_selection()))
