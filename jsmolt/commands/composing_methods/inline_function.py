"""Inline Function refactoring command."""

from jsmolt.commands.base import BaseCommand
from jsmolt.commands.registry import register_command
from jsmolt.refactorings.composing_methods.inline_function import InlineFunction


@register_command
class InlineFunctionCommand(BaseCommand):
    """Command to replace the references to a function declaration with its body."""

    name = "inline-function"

    def validate(self) -> None:
        """Validate that required parameters are present.

        Raises:
            ValueError: If required parameters are missing
        """
        self.validate_required_params("target")

    def execute(self) -> None:
        """Apply inline-function refactoring.

        Raises:
            ValueError: If the target isn't on a function header, or if the
                function can't be inlined at one of its call sites
        """
        self.apply_refactoring(InlineFunction(self.parse_selection()))
