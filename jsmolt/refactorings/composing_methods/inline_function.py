"""Inline Function refactoring: replace the calls to a function with its body."""

import logging
from functools import partial
from typing import Dict, Iterator, List, Optional, Tuple

from tree_sitter import Node

from jsmolt.core.ast_utils import (
    CLASS_TYPES,
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_TYPES,
    contains,
    function_scope_of,
    named_children_without_comments,
    node_text,
    parse_source,
    pattern_identifiers,
    same_node,
    walk,
)
from jsmolt.core.code_generation_utils import (
    dedent_block,
    line_indentation,
    needs_parentheses,
    reindent,
    removal_selection_with_blank_lines,
    whole_lines_selection,
)
from jsmolt.core.editor import Editor, ErrorReason, Modification, SourceText
from jsmolt.core.exports import find_exported_id_names
from jsmolt.core.reference_resolver import IdentifierToReplace, find_reference_nodes
from jsmolt.core.refactoring_base import RefactoringBase
from jsmolt.core.selection import Selection
from jsmolt.refactorings.composing_methods.call_substitution import (
    MISSING_ARGUMENT,
    UNDEFINED,
    Argument,
    build_call_substitution,
)

logger = logging.getLogger(__name__)

ASSIGNMENT_CONTEXT_TYPES = frozenset(
    {"variable_declarator", "assignment_expression", "augmented_assignment_expression"}
)


class InlineFunction(RefactoringBase):
    """Inline the function declared at the selection into its references.

    Calls used as statements are replaced by the function body, calls used as
    values by the returned expression, and any other reference by an anonymous
    function. The declaration is removed unless it's exported.
    """

    def apply(self, editor: Editor) -> None:
        tree = parse_source(editor.code, editor.language)
        function = find_function_declaration(tree.root_node, self.selection)
        if function is None:
            editor.show_error(ErrorReason.DID_NOT_FIND_INLINABLE_CODE)
            return

        inliner = FunctionInliner(function, SourceText(editor.code))
        if inliner.has_multiple_returns:
            editor.show_error(ErrorReason.CANT_INLINE_FUNCTION_WITH_MULTIPLE_RETURNS)
            return

        references = inliner.find_references()
        if not references:
            editor.show_error(ErrorReason.DID_NOT_FIND_INLINABLE_CODE)
            return

        reason = inliner.call_sites_error(references)
        if reason is not None:
            editor.show_error(reason)
            return

        modifications = inliner.inline_references(references)
        is_exported = inliner.is_exported
        if not is_exported:
            modifications.append(Modification("", inliner.declaration_removal_selection))

        editor.write(inliner.source.apply(modifications))
        logger.debug("Inlined function '%s' into %d references", inliner.name, len(references))

        if is_exported:
            editor.show_error(ErrorReason.CANT_REMOVE_EXPORTED_FUNCTION)


def find_function_declaration(root: Node, selection: Selection) -> Optional[Node]:
    """Find the function declaration whose header contains the selection.

    The header is everything but the parameters and the body: the `function`
    keyword, the name, the type parameters and the return type.

    Args:
        root: The program node
        selection: The cursor or selected range

    Returns:
        The function declaration node, or None
    """
    for node in walk(root):
        if node.type not in FUNCTION_DECLARATION_TYPES or not selection.is_inside_node(node):
            continue
        parameters = node.child_by_field_name("parameters")
        body = node.child_by_field_name("body")
        if parameters is None or body is None:
            continue
        if selection.is_inside_node(parameters) or selection.is_inside_node(body):
            continue
        return node
    return None


def return_statements(node: Node) -> Iterator[Node]:
    """Iterate over the return statements of a function body.

    Nested functions and classes are not searched: their returns are their own.
    """
    for child in node.named_children:
        if child.type == "return_statement":
            yield child
        elif child.type not in FUNCTION_TYPES and child.type not in CLASS_TYPES:
            yield from return_statements(child)


class FunctionInliner:
    """Computes the modifications inlining one function declaration."""

    def __init__(self, function: Node, source: SourceText) -> None:
        self.function = function
        self.source = source
        self.name_node = function.child_by_field_name("name")
        self.name = node_text(self.name_node)
        self.parameters = function.child_by_field_name("parameters")
        self.body = function.child_by_field_name("body")
        self.statements = named_children_without_comments(self.body)
        self.parameter_references: Dict[str, List[Node]] = {
            node_text(binding): find_reference_nodes(binding, self.body)
            for binding in pattern_identifiers(self.parameters)
        }

    @property
    def has_multiple_returns(self) -> bool:
        returns = list(return_statements(self.body))
        if len(returns) > 1:
            return True
        return len(returns) == 1 and not same_node(returns[0], self.statements[-1])

    @property
    def is_exported(self) -> bool:
        return self.name in find_exported_id_names(function_scope_of(self.function))

    @property
    def declaration_removal_selection(self) -> Selection:
        return removal_selection_with_blank_lines(self.function, self.source)

    def find_references(self) -> List[Node]:
        """Find the references to the function outside of its own declaration."""
        scope = function_scope_of(self.function)
        return [
            node
            for node in find_reference_nodes(self.name_node, scope)
            if not contains(self.function, node)
        ]

    def call_sites_error(self, references: List[Node]) -> Optional[ErrorReason]:
        """Check that every call used as a value can be replaced by an expression.

        Returns:
            Why the function can't be inlined, or None if it can
        """
        for call in self._calls(references):
            if _is_statement_call(call):
                continue
            if len(self.statements) > 1:
                return ErrorReason.CANT_INLINE_ASSIGNED_FUNCTION_WITH_MANY_STATEMENTS
            if not self.statements:
                return ErrorReason.CANT_INLINE_ASSIGNED_FUNCTION_WITHOUT_RETURN
            statement = self.statements[0]
            if statement.type == "return_statement":
                continue
            if (
                statement.type != "expression_statement"
                or call.parent.type in ASSIGNMENT_CONTEXT_TYPES
            ):
                return ErrorReason.CANT_INLINE_ASSIGNED_FUNCTION_WITHOUT_RETURN
        return None

    def inline_references(self, references: List[Node]) -> List[Modification]:
        """Build the modifications replacing every reference.

        Calls are handled innermost first, so a call nested in the arguments
        of another one is already inlined when the outer call is rendered.
        """
        modifications: List[Modification] = []
        # Expression type each inlined call was replaced with, by byte range
        inlined_types: Dict[Tuple[int, int], str] = {}

        for node in references:
            if not self._is_callee(node):
                modifications.append(self._function_literal_for(node))

        calls = sorted(self._calls(references), key=lambda call: call.end_byte - call.start_byte)
        for call in calls:
            render = partial(self._render, modifications=modifications)
            arguments = []
            for argument_node in _call_arguments(call):
                argument = Argument.from_node(argument_node, render)
                key = (argument_node.start_byte, argument_node.end_byte)
                argument.node_type = inlined_types.get(key, argument.node_type)
                arguments.append(argument)
            substitution = build_call_substitution(self.parameters, arguments)

            if _is_statement_call(call):
                selection, code = self._inline_statement_call(call.parent, substitution)
            else:
                selection = Selection.from_node(call)
                code, expression_type = self._inline_expression_call(call, substitution)
                inlined_types[(call.start_byte, call.end_byte)] = expression_type

            modifications = [
                modification
                for modification in modifications
                if not modification.selection.is_inside(selection)
            ]
            modifications.append(Modification(code, selection))
        return modifications

    def _calls(self, references: List[Node]) -> List[Node]:
        return [node.parent for node in references if self._is_callee(node)]

    def _is_callee(self, node: Node) -> bool:
        parent = node.parent
        return (
            parent is not None
            and parent.type == "call_expression"
            and same_node(parent.child_by_field_name("function"), node)
        )

    def _render(self, node: Node, modifications: List[Modification]) -> str:
        return self.source.render(Selection.from_node(node), modifications)

    def _substitute_parameters(self, substitution: Dict[str, Argument]) -> List[Modification]:
        modifications = []
        for name, references in self.parameter_references.items():
            argument = substitution.get(name, MISSING_ARGUMENT)
            for reference in references:
                code = argument.text
                if reference.parent.type != "unary_expression" and needs_parentheses(
                    reference, argument.node_type
                ):
                    code = f"({code})"
                modifications.append(IdentifierToReplace.from_node(reference).replace_with(code))
        return modifications

    def _inline_statement_call(
        self, statement: Node, substitution: Dict[str, Argument]
    ) -> Tuple[Selection, str]:
        modifications = self._substitute_parameters(substitution)
        if self.statements and self.statements[-1].type == "return_statement":
            return_statement = self.statements[-1]
            value = _return_value(return_statement)
            if value is None:
                modifications.append(Modification("", Selection.from_node(return_statement)))
            else:
                keyword = Selection.from_node(return_statement).extend_end_to_start_of(
                    Selection.from_node(value)
                )
                modifications.append(Modification("", keyword))

        opening_brace, closing_brace = self.body.children[0], self.body.children[-1]
        interior = Selection(
            Selection.from_node(opening_brace).end, Selection.from_node(closing_brace).start
        )
        code = dedent_block(self.source.render(interior, modifications))

        if not code:
            return whole_lines_selection(statement), ""
        indentation = line_indentation(self.source, statement.start_point[0])
        return Selection.from_node(statement), reindent(code, "", indentation)

    def _inline_expression_call(
        self, call: Node, substitution: Dict[str, Argument]
    ) -> Tuple[str, str]:
        statement = self.statements[0]
        if statement.type == "return_statement":
            expression = _return_value(statement)
            if expression is None:
                return UNDEFINED, "undefined"
        else:
            expression = named_children_without_comments(statement)[0]

        code = self._render_substituted(expression, substitution)
        if needs_parentheses(call, expression.type):
            return f"({code})", "parenthesized_expression"
        return code, expression.type

    def _render_substituted(self, node: Node, substitution: Dict[str, Argument]) -> str:
        return self._render(node, self._substitute_parameters(substitution))

    def _function_literal_for(self, reference: Node) -> Modification:
        function = self.function
        prefix = "async " if function.children[0].type == "async" else ""
        keyword = "function*" if function.type == "generator_function_declaration" else "function"
        signature_start = function.child_by_field_name("type_parameters") or self.parameters
        signature = self.source.read(
            Selection.from_node(signature_start).extend_end_to_end_of(Selection.from_node(function))
        )
        literal = reindent(
            f"{prefix}{keyword}{signature}",
            line_indentation(self.source, function.start_point[0]),
            line_indentation(self.source, reference.start_point[0]),
        )
        return IdentifierToReplace.from_node(reference).replace_with(literal)


def _is_statement_call(call: Node) -> bool:
    return call.parent is not None and call.parent.type == "expression_statement"


def _call_arguments(call: Node) -> List[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return []
    return named_children_without_comments(arguments)


def _return_value(return_statement: Node) -> Optional[Node]:
    values = named_children_without_comments(return_statement)
    return values[0] if values else None

