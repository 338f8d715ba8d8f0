"""Pytest configuration and shared fixtures for jsmolt tests."""

import difflib
import shutil
from pathlib import Path
from typing import Any, Optional

import pytest

from jsmolt.core.editor import InMemoryEditor
from jsmolt.core.refactoring_base import RefactoringBase


class RefactoringTestBase:
    """Base class for refactoring tests with automatic fixture management.

    Usage:
        class TestInlineVariable(RefactoringTestBase):
            fixture_category = "composing_methods/inline_variable"

            def test_simple(self):
                self.refactor("inline-variable", target="L1:7")

    Convention:
        - Test method name (minus 'test_' prefix) maps to fixture directory name
        - Fixture directory contains input.ts and expected.ts
        - Example: test_simple() -> fixtures/composing_methods/inline_variable/simple/
    """

    fixture_category: Optional[str] = None  # Must be set in subclass

    @pytest.fixture(autouse=True)
    def _setup_fixture(self, tmp_path: Path, request: pytest.FixtureRequest) -> None:  # type: ignore[misc]
        """Automatically set up fixture files before each test.

        Creates:
            self.tmp_path: Temporary directory for this test
            self.test_file: Path to input.ts (copied to tmp_path)
            self.expected_file: Path to expected.ts (in fixtures)
        """
        self.tmp_path = tmp_path

        # test_simple_case -> simple_case
        test_name = request.function.__name__
        fixture_name = test_name[5:] if test_name.startswith("test_") else test_name

        if self.fixture_category is None:
            raise ValueError(f"{self.__class__.__name__} must set fixture_category class attribute")

        fixture_dir = Path(__file__).parent / "fixtures" / self.fixture_category / fixture_name

        if fixture_dir.exists():
            input_file = fixture_dir / "input.ts"
            expected_file = fixture_dir / "expected.ts"
            if not (input_file.exists() and expected_file.exists()):
                raise FileNotFoundError(
                    f"Fixture directory {fixture_dir} must contain input.ts and expected.ts"
                )
            self.test_file: Optional[Path] = tmp_path / "input.ts"
            self.expected_file: Optional[Path] = expected_file
            shutil.copy(input_file, self.test_file)
        else:
            # Allow tests without fixtures (for error cases, etc.)
            self.test_file = None
            self.expected_file = None

        yield

    def refactor(self, refactoring_name: str, **params: Any) -> None:
        """Run refactoring and assert result matches expected output.

        Args:
            refactoring_name: Name of refactoring (e.g., "inline-variable")
            **params: Parameters to pass to the refactoring

        Raises:
            AssertionError: If refactored output doesn't match expected
        """
        # Import here to avoid registering commands during test collection
        from jsmolt.cli import refactor_file

        if self.test_file is None:
            raise RuntimeError("No fixture loaded. Ensure fixture directory exists for this test.")
        refactor_file(refactoring_name, self.test_file, **params)

        self.assert_matches_expected()

    def assert_matches_expected(self, normalize: bool = True) -> None:
        """Assert that the test file matches the expected file.

        Args:
            normalize: If True, ignore trailing whitespace at the end of lines
                and of the file. If False, use exact string comparison.
        """
        if self.test_file is None or self.expected_file is None:
            raise RuntimeError("No fixture loaded")

        actual = self.test_file.read_text()
        expected = self.expected_file.read_text()
        if normalize:
            actual = normalize_code(actual)
            expected = normalize_code(expected)

        assert actual == expected, format_diff(actual, expected)


def normalize_code(code: str) -> str:
    """Normalize code for comparison by stripping trailing whitespace."""
    return "\n".join(line.rstrip() for line in code.rstrip().split("\n"))


def format_diff(actual: str, expected: str) -> str:
    """Format a readable diff between actual and expected."""
    diff = difflib.unified_diff(
        expected.splitlines(keepends=True),
        actual.splitlines(keepends=True),
        fromfile="expected.ts",
        tofile="actual.ts",
        lineterm="",
    )
    return "".join(diff)


def run_refactoring(refactoring: RefactoringBase, code: str) -> InMemoryEditor:
    """Apply a refactoring to code held in memory.

    Returns:
        The editor, holding the resulting code and the errors shown
    """
    editor = InMemoryEditor(code)
    refactoring.apply(editor)
    return editor
