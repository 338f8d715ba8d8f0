"""Base class for all refactoring commands."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from jsmolt.core.ast_utils import parse_target
from jsmolt.core.editor import FileEditor
from jsmolt.core.refactoring_base import RefactoringBase
from jsmolt.core.selection import Selection

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """Base class for all refactoring commands."""

    name: str  # e.g., "inline-variable"

    def __init__(self, file_path: Path, **params: Any):
        """Initialize the command.

        Args:
            file_path: Path to the file to refactor
            **params: Additional parameters for the refactoring
        """
        self.file_path = file_path
        self.params = params

    @abstractmethod
    def execute(self) -> None:
        """Execute the refactoring and modify the file in place.

        Raises:
            ValueError: If refactoring cannot be applied
        """
        pass

    def validate_required_params(self, *param_names: str) -> None:
        """Validate that required parameters are present.

        Args:
            *param_names: Names of required parameters

        Raises:
            ValueError: If any required parameters are missing
        """
        missing = [p for p in param_names if p not in self.params]
        if missing:
            raise ValueError(f"Missing required parameters for {self.name}: {', '.join(missing)}")

    @abstractmethod
    def validate(self) -> None:
        """Validate parameters before execution.

        Raises:
            ValueError: If parameters are invalid
        """
        pass

    def parse_selection(self) -> Selection:
        """Parse the 'target' parameter into a selection.

        Raises:
            ValueError: If the target format is invalid
        """
        return Selection.from_positions(*parse_target(self.params["target"]))

    def apply_refactoring(self, refactoring: RefactoringBase) -> None:
        """Apply a refactoring to the file.

        Notices (the refactoring was applied, but not completely) are logged
        as warnings.

        Args:
            refactoring: The refactoring to apply

        Raises:
            ValueError: If the refactoring reported it can't be applied
        """
        editor = FileEditor(self.file_path)
        refactoring.apply(editor)

        for reason in editor.errors:
            if not reason.is_notice:
                raise ValueError(f"{self.name}: {reason.value}")
        for reason in editor.errors:
            logger.warning("%s: %s", self.file_path, reason.value)
