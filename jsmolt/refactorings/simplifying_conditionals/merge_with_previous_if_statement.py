"""Merge With Previous If Statement refactoring.

Moves the statement following an if statement into every branch of it:

    if (isValid) {            if (isValid) {
      doSomething();            doSomething();
    }                  =>       doSomethingElse();
    doSomethingElse();        }

When the statement is itself an if statement with the same condition and no
else branch, its consequence is merged instead.
"""

import logging
import re
from typing import List, Optional, Tuple

from tree_sitter import Node

from jsmolt.core.ast_utils import (
    named_children_without_comments,
    node_text,
    parse_source,
    previous_named_sibling,
    same_node,
)
from jsmolt.core.code_generation_utils import (
    DEFAULT_INDENTATION,
    line_indentation,
    reindent,
    whole_lines_selection,
)
from jsmolt.core.editor import Editor, ErrorReason, Modification, SourceText
from jsmolt.core.refactoring_base import RefactoringBase
from jsmolt.core.selection import Selection

logger = logging.getLogger(__name__)

STATEMENT_CONTAINER_TYPES = frozenset({"program", "statement_block"})
WHITESPACE = re.compile(r"\s+")


class MergeWithPreviousIfStatement(RefactoringBase):
    """Merge the selected statement into the if statement right before it."""

    def apply(self, editor: Editor) -> None:
        tree = parse_source(editor.code, editor.language)
        match = find_statement_to_merge(tree.root_node, self.selection)
        if match is None:
            editor.show_error(ErrorReason.DID_NOT_FIND_STATEMENT_TO_MERGE)
            return

        if_statement, statement = match
        source = SourceText(editor.code)
        modifications = merge_into_if_statement(if_statement, statement, source)
        modifications.append(Modification("", _removal_selection(if_statement, statement)))
        editor.write(source.apply(modifications))
        logger.debug("Merged statement at line %d", statement.start_point[0] + 1)


def find_statement_to_merge(root: Node, selection: Selection) -> Optional[Tuple[Node, Node]]:
    """Find the deepest statement at the selection that follows an if statement.

    Args:
        root: The program node
        selection: The cursor or selected range

    Returns:
        The (if statement, statement) pair, or None
    """
    match = None
    node: Optional[Node] = root
    while node is not None:
        parent = node.parent
        if (
            node.is_named
            and node.type != "comment"
            and parent is not None
            and parent.type in STATEMENT_CONTAINER_TYPES
        ):
            previous = previous_named_sibling(node)
            if previous is not None and previous.type == "if_statement":
                match = (previous, node)
        node = next((child for child in node.children if selection.is_inside_node(child)), None)
    return match


def merge_into_if_statement(
    if_statement: Node, statement: Node, source: SourceText
) -> List[Modification]:
    """Build the modifications adding a statement to every branch of an if chain.

    Args:
        if_statement: The first if statement of the chain
        statement: The statement to merge
        source: The source code

    Returns:
        One modification per branch
    """
    modifications = []
    current = if_statement
    while True:
        statements = _statements_to_merge(current, statement)
        consequence = current.child_by_field_name("consequence")
        modifications.append(_append_to_branch(consequence, statements, source))

        alternative = current.child_by_field_name("alternative")
        if alternative is None:
            break
        branch = named_children_without_comments(alternative)[0]
        if branch.type == "if_statement":
            current = branch
            continue
        modifications.append(_append_to_branch(branch, [statement], source))
        break
    return modifications


def _statements_to_merge(if_statement: Node, statement: Node) -> List[Node]:
    if statement.type != "if_statement" or statement.child_by_field_name("alternative") is not None:
        return [statement]
    if _condition_code(statement) != _condition_code(if_statement):
        return [statement]
    consequence = statement.child_by_field_name("consequence")
    if consequence.type == "statement_block":
        return named_children_without_comments(consequence)
    return [consequence]


def _condition_code(if_statement: Node) -> str:
    return WHITESPACE.sub("", node_text(if_statement.child_by_field_name("condition")))


def _append_to_branch(branch: Node, statements: List[Node], source: SourceText) -> Modification:
    base_indentation = line_indentation(source, branch.start_point[0])
    indentation = base_indentation + _indentation_unit(branch, base_indentation, source)
    code = "".join(
        f"\n{indentation}{_moved_code(statement, indentation, source)}" for statement in statements
    )

    if branch.type == "statement_block":
        last = branch.children[-2]
        if last.type == "{":
            code += f"\n{base_indentation}"
        return Modification(code, Selection.cursor_at(*last.end_point))

    existing = _moved_code(branch, indentation, source)
    return Modification(
        f"{{\n{indentation}{existing}{code}\n{base_indentation}}}", Selection.from_node(branch)
    )


def _indentation_unit(branch: Node, base_indentation: str, source: SourceText) -> str:
    if branch.type == "statement_block":
        statements = named_children_without_comments(branch)
        if statements and statements[0].start_point[0] != branch.start_point[0]:
            indentation = line_indentation(source, statements[0].start_point[0])
            if len(indentation) > len(base_indentation):
                return indentation[len(base_indentation) :]
    return DEFAULT_INDENTATION


def _moved_code(statement: Node, indentation: str, source: SourceText) -> str:
    code = source.read(Selection.from_node(statement))
    return reindent(code, line_indentation(source, statement.start_point[0]), indentation)


def _removal_selection(if_statement: Node, statement: Node) -> Selection:
    if same_node(statement.prev_sibling, if_statement):
        return Selection.from_node(statement).extend_start_to_end_of(
            Selection.from_node(if_statement)
        )
    return whole_lines_selection(statement)
