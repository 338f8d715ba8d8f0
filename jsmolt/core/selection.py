"""Positions and selections within source code.

Lines are 0-based. Characters are UTF-8 byte columns, the same unit tree-sitter
reports in ``Node.start_point`` and ``Node.end_point``.
"""

from dataclasses import dataclass

from tree_sitter import Node


@dataclass(frozen=True, order=True)
class Position:
    """A point between two characters of the source code."""

    line: int
    character: int


@dataclass(frozen=True)
class Selection:
    """A range of source code, from start (inclusive) to end (exclusive).

    Selections are immutable: every ``extend_*`` method returns a new selection.
    A cursor is a selection whose start and end are the same position.
    """

    start: Position
    end: Position

    @classmethod
    def cursor_at(cls, line: int, character: int) -> "Selection":
        """Create an empty selection at the given position."""
        position = Position(line, character)
        return cls(position, position)

    @classmethod
    def from_positions(
        cls, start_line: int, start_character: int, end_line: int, end_character: int
    ) -> "Selection":
        return cls(Position(start_line, start_character), Position(end_line, end_character))

    @classmethod
    def from_node(cls, node: Node) -> "Selection":
        """Create the selection covering a syntax tree node.

        Args:
            node: The tree-sitter node

        Returns:
            Selection spanning the node's text
        """
        start_line, start_character = node.start_point
        end_line, end_character = node.end_point
        return cls.from_positions(start_line, start_character, end_line, end_character)

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def is_inside(self, other: "Selection") -> bool:
        """Check if this selection lies within another one, bounds included."""
        return other.start <= self.start and self.end <= other.end

    def is_inside_node(self, node: Node) -> bool:
        return self.is_inside(Selection.from_node(node))

    def extend_start_to_start_of(self, other: "Selection") -> "Selection":
        return Selection(other.start, self.end)

    def extend_start_to_end_of(self, other: "Selection") -> "Selection":
        return Selection(other.end, self.end)

    def extend_end_to_start_of(self, other: "Selection") -> "Selection":
        return Selection(self.start, other.start)

    def extend_end_to_end_of(self, other: "Selection") -> "Selection":
        return Selection(self.start, other.end)

    def extend_to_start_of_line(self) -> "Selection":
        return Selection(Position(self.start.line, 0), self.end)

    def extend_to_start_of_next_line(self) -> "Selection":
        """Extend the end of the selection past its line break."""
        return Selection(self.start, Position(self.end.line + 1, 0))
