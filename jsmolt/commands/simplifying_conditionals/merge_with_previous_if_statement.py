"""Merge With Previous If Statement refactoring command."""

from jsmolt.commands.base import BaseCommand
from jsmolt.commands.registry import register_command
from jsmolt.refactorings.simplifying_conditionals.merge_with_previous_if_statement import (
    MergeWithPreviousIfStatement,
)


@register_command
class MergeWithPreviousIfStatementCommand(BaseCommand):
    """Command to move a statement into every branch of the if statement before it."""

    name = "merge-with-previous-if-statement"

    def validate(self) -> None:
        """Validate that required parameters are present.

        Raises:
            ValueError: If required parameters are missing
        """
        self.validate_required_params("target")

    def execute(self) -> None:
        """Apply merge-with-previous-if-statement refactoring.

        Raises:
            ValueError: If the statement at the target doesn't follow an if statement
        """
        self.apply_refactoring(MergeWithPreviousIfStatement(self.parse_selection()))
