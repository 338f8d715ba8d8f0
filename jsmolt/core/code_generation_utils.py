"""Utilities for moving blocks of code around as text.

Refactorings replace code textually, so a block moved to another place has to
be re-indented to match its new surroundings.
"""

import textwrap

from tree_sitter import Node

from jsmolt.core.ast_utils import is_alone_on_its_lines
from jsmolt.core.editor import SourceText
from jsmolt.core.selection import Position, Selection

DEFAULT_INDENTATION = "  "


def line_indentation(source: SourceText, line: int) -> str:
    """Get the leading whitespace of a line.

    Args:
        source: The source code
        line: 0-based line number

    Returns:
        The whitespace the line starts with
    """
    lines = source.lines
    if line >= len(lines):
        return ""
    text = lines[line]
    return text[: len(text) - len(text.lstrip())]


def reindent(code: str, from_indentation: str, to_indentation: str) -> str:
    """Move every line but the first from one indentation level to another.

    The first line is left alone: it's inserted where the code goes.

    Examples:
        >>> reindent("if (a) {\\n    b();\\n  }", "  ", "")
        'if (a) {\\n  b();\\n}'
    """
    lines = code.split("\n")
    for index in range(1, len(lines)):
        line = lines[index]
        if not line.strip():
            lines[index] = ""
        elif line.startswith(from_indentation):
            lines[index] = to_indentation + line[len(from_indentation) :]
        else:
            lines[index] = to_indentation + line.lstrip()
    return "\n".join(lines)


def dedent_block(code: str) -> str:
    """Strip the blank lines around a block of code and remove its common indentation.

    Examples:
        >>> dedent_block("\\n    a();\\n    b();\\n  ")
        'a();\\nb();'
    """
    lines = code.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return textwrap.dedent("\n".join(lines)).strip()


def whole_lines_selection(node: Node) -> Selection:
    """Select a node, with its lines and line break when it's alone on them."""
    if not is_alone_on_its_lines(node):
        return selection_with_spacing(node)
    return Selection.from_node(node).extend_to_start_of_line().extend_to_start_of_next_line()


def selection_with_spacing(node: Node) -> Selection:
    """Select a node sharing its line, with the spaces separating it from its neighbour.

    The spaces up to the code following on the same line are selected, or
    else the spaces after the code preceding it.

    Examples:
        Removing ``const a = 1;`` from ``const a = 1; log(a);`` leaves ``log(a);``.
    """
    selection = Selection.from_node(node)
    following = node.next_sibling
    if following is not None and following.start_point[0] == node.end_point[0]:
        return selection.extend_end_to_start_of(Selection.from_node(following))
    previous = node.prev_sibling
    if previous is not None and previous.end_point[0] == node.start_point[0]:
        return selection.extend_start_to_end_of(Selection.from_node(previous))
    return selection


def removal_selection_with_blank_lines(node: Node, source: SourceText) -> Selection:
    """Select a node for removal, together with one side of blank lines around it.

    Blank lines following the node are removed when code follows them.
    Otherwise, the blank lines preceding the node are.

    Args:
        node: The node to remove
        source: The source code the node belongs to

    Returns:
        The selection to delete
    """
    if not is_alone_on_its_lines(node):
        return selection_with_spacing(node)

    lines = source.lines
    start_line = node.start_point[0]
    end_line = node.end_point[0]

    after = end_line + 1
    while after < len(lines) and not lines[after].strip():
        after += 1
    if end_line + 1 < after < len(lines):
        return Selection(Position(start_line, 0), Position(after, 0))

    before = start_line
    while before > 0 and not lines[before - 1].strip():
        before -= 1
    return Selection(Position(before, 0), Position(after, 0))


# Contexts where an inserted expression can't bind to surrounding operators
DELIMITED_CONTEXT_TYPES = frozenset(
    {
        "variable_declarator",
        "assignment_expression",
        "augmented_assignment_expression",
        "return_statement",
        "expression_statement",
        "arguments",
        "parenthesized_expression",
        "template_substitution",
        "array",
        "object",
        "pair",
        "spread_element",
    }
)

PRIMARY_EXPRESSION_TYPES = frozenset(
    {
        "identifier",
        "shorthand_property_identifier",
        "this",
        "call_expression",
        "member_expression",
        "subscript_expression",
        "parenthesized_expression",
        "string",
        "template_string",
        "number",
        "regex",
        "true",
        "false",
        "null",
        "undefined",
        "array",
        "object",
    }
)


def needs_parentheses(target: Node, expression_type: str) -> bool:
    """Check if an expression replacing ``target`` must be parenthesized.

    Args:
        target: The node being replaced
        expression_type: Syntax node type of the replacing expression

    Returns:
        True if the expression could bind differently without parentheses
    """
    parent = target.parent
    if parent is None:
        return False
    if parent.type == "arrow_function":
        return expression_type in ("object", "sequence_expression")
    if expression_type in PRIMARY_EXPRESSION_TYPES:
        return False
    if expression_type == "sequence_expression":
        return parent.type not in ("parenthesized_expression", "expression_statement")
    return parent.type not in DELIMITED_CONTEXT_TYPES


# Types an operator could split when they're inlined next to it
COMPOUND_TYPE_TYPES = frozenset(
    {
        "union_type",
        "intersection_type",
        "function_type",
        "constructor_type",
        "conditional_type",
        "index_type_query",
        "readonly_type",
    }
)

DELIMITED_TYPE_CONTEXT_TYPES = frozenset(
    {
        "type_annotation",
        "opting_type_annotation",
        "omitting_type_annotation",
        "adding_type_annotation",
        "type_alias_declaration",
        "type_arguments",
        "tuple_type",
        "parenthesized_type",
        "constraint",
        "default_type",
        "as_expression",
        "satisfies_expression",
    }
)


def type_needs_parentheses(target: Node, type_node_type: str) -> bool:
    """Check if a type replacing the type reference ``target`` must be parenthesized.

    Examples:
        ``string | number`` replacing ``A`` in ``A[]`` gives ``(string | number)[]``.
    """
    if type_node_type not in COMPOUND_TYPE_TYPES:
        return False
    parent = target.parent
    if parent is None:
        return False
    if parent.type == type_node_type and type_node_type in ("union_type", "intersection_type"):
        return False
    return parent.type not in DELIMITED_TYPE_CONTEXT_TYPES
