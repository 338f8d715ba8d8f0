"""Tests for Position and Selection."""

from jsmolt.core.ast_utils import parse_source
from jsmolt.core.selection import Position, Selection


class TestPosition:
    """Tests for Position ordering."""

    def test_positions_order_by_line_then_character(self) -> None:
        """Test a position on an earlier line is before, whatever its character."""
        assert Position(0, 10) < Position(1, 0)
        assert Position(1, 2) > Position(1, 1)
        assert not Position(1, 1) < Position(1, 1)


class TestSelection:
    """Tests for Selection."""

    def test_cursor_is_empty(self) -> None:
        """Test a cursor starts and ends at the same position."""
        cursor = Selection.cursor_at(2, 4)

        assert cursor.is_empty
        assert cursor.start == Position(2, 4)

    def test_is_inside_includes_bounds(self) -> None:
        """Test a selection is inside another one sharing its bounds."""
        outer = Selection.from_positions(0, 0, 2, 5)

        assert outer.is_inside(outer)
        assert Selection.cursor_at(2, 5).is_inside(outer)
        assert not Selection.from_positions(1, 0, 2, 6).is_inside(outer)

    def test_from_node(self) -> None:
        """Test the selection of a node spans its text."""
        tree = parse_source("const a = 1;\nconst b = 2;")
        second = tree.root_node.named_children[1]

        assert Selection.from_node(second) == Selection.from_positions(1, 0, 1, 12)
        assert Selection.cursor_at(1, 6).is_inside_node(second)

    def test_extend(self) -> None:
        """Test every extension returns a new selection from the other one's bounds."""
        selection = Selection.from_positions(1, 4, 1, 8)
        other = Selection.from_positions(0, 2, 3, 1)

        assert selection.extend_start_to_start_of(other) == Selection.from_positions(0, 2, 1, 8)
        assert selection.extend_start_to_end_of(other) == Selection.from_positions(3, 1, 1, 8)
        assert selection.extend_end_to_start_of(other) == Selection.from_positions(1, 4, 0, 2)
        assert selection.extend_end_to_end_of(other) == Selection.from_positions(1, 4, 3, 1)
        assert selection == Selection.from_positions(1, 4, 1, 8)

    def test_extend_to_whole_lines(self) -> None:
        """Test a selection extended to the start of its line and past its line break."""
        selection = Selection.from_positions(1, 4, 2, 8)

        whole_lines = selection.extend_to_start_of_line().extend_to_start_of_next_line()

        assert whole_lines == Selection.from_positions(1, 0, 3, 0)
