"""Inline Variable refactoring command."""

from jsmolt.commands.base import BaseCommand
from jsmolt.commands.registry import register_command
from jsmolt.refactorings.composing_methods.inline_variable import InlineVariable


@register_command
class InlineVariableCommand(BaseCommand):
    """Command to inline a variable, destructured binding or type alias into its references."""

    name = "inline-variable"

    def validate(self) -> None:
        """Validate that required parameters are present.

        Raises:
            ValueError: If required parameters are missing
        """
        self.validate_required_params("target")

    def execute(self) -> None:
        """Apply inline-variable refactoring.

        Raises:
            ValueError: If no inlinable variable is declared at the target,
                or if it's assigned again
        """
        self.apply_refactoring(InlineVariable(self.parse_selection()))
