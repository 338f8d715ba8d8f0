"""
Tests for BaseCommand class.

This module tests the core functionality of the BaseCommand class,
including parameter validation, target parsing and how refactoring errors
are reported.
"""

import logging
from pathlib import Path

import pytest

from jsmolt.commands.base import BaseCommand
from jsmolt.core.editor import Editor, ErrorReason
from jsmolt.core.refactoring_base import RefactoringBase
from jsmolt.core.selection import Selection


class ConcreteCommand(BaseCommand):
    """Concrete implementation of BaseCommand for testing."""

    name = "test-command"

    def execute(self) -> None:
        """Execute the refactoring (no-op for testing)."""
        pass

    def validate(self) -> None:
        """Validate parameters (no-op for testing)."""
        pass


class ReportingRefactoring(RefactoringBase):
    """Refactoring that appends a line and reports a reason, for testing."""

    def __init__(self, reason: ErrorReason) -> None:
        super().__init__(Selection.cursor_at(0, 0))
        self.reason = reason

    def apply(self, editor: Editor) -> None:
        if self.reason.is_notice:
            editor.write(editor.code + "log();\n")
        editor.show_error(self.reason)


class TestValidateRequiredParams:
    """Tests for BaseCommand.validate_required_params() method."""

    def test_all_required_params_present(self) -> None:
        """Should not raise when all required params are present."""
        cmd = ConcreteCommand(Path("test.ts"), foo="value1", bar="value2")

        # Should not raise
        cmd.validate_required_params("foo", "bar")

    def test_error_message_format(self) -> None:
        """Should list every missing param after the command name."""
        cmd = ConcreteCommand(Path("test.ts"), foo="value1")

        with pytest.raises(ValueError) as exc_info:
            cmd.validate_required_params("foo", "param1", "param2")

        assert str(exc_info.value) == "Missing required parameters for test-command: param1, param2"


class TestParseSelection:
    """Tests for BaseCommand.parse_selection() method."""

    def test_cursor(self) -> None:
        """Should convert a 1-based target to a 0-based cursor."""
        cmd = ConcreteCommand(Path("test.ts"), target="L2:5")

        assert cmd.parse_selection() == Selection.cursor_at(1, 4)

    def test_range(self) -> None:
        """Should convert a range target."""
        cmd = ConcreteCommand(Path("test.ts"), target="L1:1-L3:2")

        assert cmd.parse_selection() == Selection.from_positions(0, 0, 2, 1)

    def test_invalid_target(self) -> None:
        """Should raise on a malformed target."""
        cmd = ConcreteCommand(Path("test.ts"), target="line 3")

        with pytest.raises(ValueError, match="Invalid position format"):
            cmd.parse_selection()


class TestApplyRefactoring:
    """Tests for BaseCommand.apply_refactoring() method."""

    def test_blocking_error_raises(self, tmp_path: Path) -> None:
        """Should raise with the reason and leave the file untouched."""
        test_file = tmp_path / "input.ts"
        test_file.write_text("a();\n")
        cmd = ConcreteCommand(test_file)

        with pytest.raises(ValueError) as exc_info:
            cmd.apply_refactoring(ReportingRefactoring(ErrorReason.DID_NOT_FIND_INLINABLE_CODE))

        assert str(exc_info.value) == (
            "test-command: I didn't find a valid code to inline in the selection"
        )
        assert test_file.read_text() == "a();\n"

    def test_notice_is_logged(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Should write the file and log notices as warnings."""
        test_file = tmp_path / "input.ts"
        test_file.write_text("a();\n")
        cmd = ConcreteCommand(test_file)

        with caplog.at_level(logging.WARNING, logger="jsmolt.commands.base"):
            cmd.apply_refactoring(ReportingRefactoring(ErrorReason.CANT_REMOVE_EXPORTED_VARIABLE))

        assert test_file.read_text() == "a();\nlog();\n"
        assert "can't remove the exported variable" in caplog.text
