"""Base classes for refactoring operations."""

from abc import ABC, abstractmethod

from jsmolt.core.ast_utils import DEFAULT_LANGUAGE
from jsmolt.core.editor import Editor, InMemoryEditor
from jsmolt.core.selection import Selection


class RefactoringBase(ABC):
    """Base class for all refactoring operations.

    A refactoring reads the code of an editor at a selection. It either writes
    the refactored code back, or reports why it can't through
    ``editor.show_error`` and leaves the code untouched.
    """

    def __init__(self, selection: Selection) -> None:
        """Initialize the refactoring.

        Args:
            selection: The cursor or selected range the refactoring applies to
        """
        self.selection = selection

    @abstractmethod
    def apply(self, editor: Editor) -> None:
        """Apply the refactoring to the editor's code.

        Args:
            editor: The editor holding the code to refactor

        Raises:
            ValueError: If the code can't be parsed
        """
        pass

    def validate(self, source: str, language: str = DEFAULT_LANGUAGE) -> bool:
        """Validate that the refactoring can be applied.

        Runs the refactoring against an in-memory copy of the source.

        Args:
            source: Source code to validate
            language: Grammar to parse the source with

        Returns:
            True if refactoring changes the code without a blocking error, False otherwise
        """
        editor = InMemoryEditor(source, language)
        try:
            self.apply(editor)
        except ValueError:
            return False
        blocked = any(not reason.is_notice for reason in editor.errors)
        return not blocked and editor.code != source
