"""Editing abstractions: error reasons, modifications and editors.

Refactorings never touch files directly. They read the code from an ``Editor``,
compute every modification up front, then commit them with a single ``write``.
When a refactoring can't be applied, it reports an ``ErrorReason`` through
``show_error`` and leaves the code untouched.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Tuple

from jsmolt.core.ast_utils import DEFAULT_LANGUAGE, language_for_path
from jsmolt.core.selection import Position, Selection

logger = logging.getLogger(__name__)


class ErrorReason(Enum):
    """Why a refactoring couldn't be applied (or fully applied)."""

    DID_NOT_FIND_INLINABLE_CODE = "I didn't find a valid code to inline in the selection"
    CANT_INLINE_REDECLARED_VARIABLES = "I can't inline redeclared variables"
    CANT_REMOVE_EXPORTED_VARIABLE = (
        "I inlined the references, but I can't remove the exported variable"
    )
    CANT_INLINE_FUNCTION_WITH_MULTIPLE_RETURNS = (
        "I can't inline a function with multiple return statements"
    )
    CANT_INLINE_ASSIGNED_FUNCTION_WITHOUT_RETURN = (
        "I can't inline an assigned function that doesn't return a value"
    )
    CANT_INLINE_ASSIGNED_FUNCTION_WITH_MANY_STATEMENTS = (
        "I can't inline an assigned function that has many statements"
    )
    CANT_REMOVE_EXPORTED_FUNCTION = (
        "I inlined the references, but I can't remove the exported function"
    )
    DID_NOT_FIND_STATEMENT_TO_MERGE = (
        "I didn't find a statement to merge with the previous if statement"
    )

    @property
    def is_notice(self) -> bool:
        """Notices are reported after the refactoring was still applied."""
        return self in (
            ErrorReason.CANT_REMOVE_EXPORTED_VARIABLE,
            ErrorReason.CANT_REMOVE_EXPORTED_FUNCTION,
        )


@dataclass(frozen=True)
class Modification:
    """Replace the code at ``selection`` with ``code``."""

    code: str
    selection: Selection


class SourceText:
    """Source code addressable by ``Position``.

    Positions use UTF-8 byte columns, so the text is kept encoded and every
    modification is applied on bytes.
    """

    def __init__(self, code: str) -> None:
        self.code = code
        self.data = code.encode("utf8")
        self._line_starts = [0] + [match.end() for match in re.finditer(b"\n", self.data)]

    @property
    def lines(self) -> List[str]:
        return self.code.split("\n")

    def offset_at(self, position: Position) -> int:
        """Convert a position to a byte offset, clamping positions past the end."""
        if position.line >= len(self._line_starts):
            return len(self.data)
        line_start = self._line_starts[position.line]
        if position.line + 1 < len(self._line_starts):
            line_end = self._line_starts[position.line + 1] - 1
        else:
            line_end = len(self.data)
        return min(line_start + position.character, line_end)

    def span_of(self, selection: Selection) -> Tuple[int, int]:
        return self.offset_at(selection.start), self.offset_at(selection.end)

    def read(self, selection: Selection) -> str:
        start, end = self.span_of(selection)
        return self.data[start:end].decode("utf8")

    def render(self, selection: Selection, modifications: Iterable[Modification]) -> str:
        """Read the code at ``selection`` with the modifications it contains applied.

        Modifications that aren't fully inside the selection are ignored.

        Args:
            selection: The range to render
            modifications: Candidate modifications

        Returns:
            The rendered code

        Raises:
            ValueError: If two modifications overlap
        """
        start, end = self.span_of(selection)
        return self._render(start, end, modifications)

    def apply(self, modifications: Iterable[Modification]) -> str:
        """Apply all modifications at once and return the new code.

        Raises:
            ValueError: If two modifications overlap
        """
        return self._render(0, len(self.data), modifications)

    def _render(self, start: int, end: int, modifications: Iterable[Modification]) -> str:
        edits = []
        for modification in modifications:
            edit_start, edit_end = self.span_of(modification.selection)
            if start <= edit_start and edit_end <= end:
                edits.append((edit_start, edit_end, modification.code))
        edits.sort(key=lambda edit: (edit[0], edit[1]))

        chunks = []
        cursor = start
        for edit_start, edit_end, code in edits:
            if edit_start < cursor:
                raise ValueError(
                    f"Overlapping modifications at bytes {edit_start}-{edit_end}"
                )
            chunks.append(self.data[cursor:edit_start])
            chunks.append(code.encode("utf8"))
            cursor = edit_end
        chunks.append(self.data[cursor:end])
        return b"".join(chunks).decode("utf8")


class Editor(ABC):
    """The document a refactoring reads from and writes to."""

    language: str = DEFAULT_LANGUAGE

    @property
    @abstractmethod
    def code(self) -> str:
        """The current code of the document."""

    @abstractmethod
    def write(self, code: str) -> None:
        """Replace the whole document with ``code``."""

    @abstractmethod
    def show_error(self, reason: ErrorReason) -> None:
        """Report why the refactoring couldn't be applied."""

    def read_then_write(
        self,
        selection: Selection,
        get_modifications: Callable[[str], List[Modification]],
    ) -> None:
        """Read the code at ``selection`` and write the modifications it produces.

        Args:
            selection: Range of code to read
            get_modifications: Builds the modifications from the code read
        """
        source = SourceText(self.code)
        modifications = get_modifications(source.read(selection))
        self.write(source.apply(modifications))


class InMemoryEditor(Editor):
    """Editor holding its document in memory, recording the errors it is shown."""

    def __init__(self, code: str, language: str = DEFAULT_LANGUAGE) -> None:
        self._code = code
        self.language = language
        self.errors: List[ErrorReason] = []

    @property
    def code(self) -> str:
        return self._code

    def write(self, code: str) -> None:
        self._code = code

    def show_error(self, reason: ErrorReason) -> None:
        logger.debug("Refactoring reported: %s", reason.value)
        self.errors.append(reason)


class FileEditor(InMemoryEditor):
    """Editor backed by a file on disk, written in place."""

    def __init__(self, file_path: Path) -> None:
        super().__init__(file_path.read_text(), language_for_path(file_path))
        self.file_path = file_path

    def write(self, code: str) -> None:
        super().write(code)
        self.file_path.write_text(code)
        logger.debug("Wrote %s", self.file_path)
