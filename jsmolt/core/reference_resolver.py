"""Find the references to a binding within its scope.

A reference is an occurrence of the binding's name that actually refers to
it. Occurrences shadowed by an inner declaration are not references, and
neither are property keys, function declaration names, export/import
specifiers or names read by a ``typeof`` type query.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from tree_sitter import Node

from jsmolt.core.ast_utils import (
    FUNCTION_DECLARATION_TYPES,
    ancestors,
    contains,
    declared_identifiers,
    declared_type_names,
    loop_declaration_kind,
    named_children_without_comments,
    node_text,
    pattern_identifiers,
    same_node,
    walk,
)
from jsmolt.core.editor import Modification
from jsmolt.core.selection import Selection

logger = logging.getLogger(__name__)

REFERENCE_TYPES = frozenset({"identifier", "shorthand_property_identifier"})

NON_REFERENCE_PARENT_TYPES = frozenset(
    {
        "export_statement",
        "export_specifier",
        "import_specifier",
        "import_clause",
        "namespace_import",
        "namespace_export",
        "jsx_opening_element",
        "jsx_closing_element",
        "jsx_self_closing_element",
        "jsx_attribute",
    }
)

# Nodes whose `name` field declares a type instead of referring to one
TYPE_NAMING_PARENT_TYPES = frozenset(
    {
        "type_alias_declaration",
        "interface_declaration",
        "class_declaration",
        "abstract_class_declaration",
        "class",
        "type_parameter",
        "mapped_type_clause",
    }
)

ASSIGNMENT_TYPES = frozenset({"assignment_expression", "augmented_assignment_expression"})
DESTRUCTURING_TARGET_TYPES = frozenset({"array_pattern", "object_pattern", "array", "object"})
ASSIGNED_IDENTIFIER_TYPES = frozenset(
    {"identifier", "shorthand_property_identifier", "shorthand_property_identifier_pattern"}
)


@dataclass(frozen=True)
class IdentifierToReplace:
    """An occurrence of a binding that should be replaced when inlining it.

    Attributes:
        selection: Where the occurrence is
        is_in_unary_expression: The occurrence is the operand of a unary operator
        shorthand_key: The property name, when the occurrence is an object shorthand
    """

    selection: Selection
    is_in_unary_expression: bool
    shorthand_key: Optional[str]

    @classmethod
    def from_node(cls, node: Node) -> "IdentifierToReplace":
        parent = node.parent
        return cls(
            selection=Selection.from_node(node),
            is_in_unary_expression=parent is not None and parent.type == "unary_expression",
            shorthand_key=node_text(node) if node.type == "shorthand_property_identifier" else None,
        )

    def replace_with(self, code: str) -> Modification:
        """Build the modification replacing this occurrence with ``code``.

        ``!value`` becomes ``!(code)`` and ``{ value }`` becomes ``{ value: code }``.
        """
        if self.is_in_unary_expression:
            code = f"({code})"
        if self.shorthand_key is not None:
            code = f"{self.shorthand_key}: {code}"
        return Modification(code, self.selection)


def find_reference_nodes(binding: Node, scope: Node) -> List[Node]:
    """Find the nodes referring to a binding within a scope.

    Args:
        binding: The identifier node that declares the binding
        scope: The node whose subtree the binding is visible in

    Returns:
        The referencing identifier nodes, in source order
    """
    name = node_text(binding)
    references = []
    for node in walk(scope):
        if node.type not in REFERENCE_TYPES or node_text(node) != name:
            continue
        if contains(binding, node):
            continue
        if not _is_reference_context(node):
            continue
        if is_shadowed(node, scope, binding):
            continue
        references.append(node)
    logger.debug("Found %d references to '%s'", len(references), name)
    return references


def find_references(binding: Node, scope: Node) -> List[IdentifierToReplace]:
    """Find the occurrences to replace when inlining a binding."""
    return [IdentifierToReplace.from_node(node) for node in find_reference_nodes(binding, scope)]


def is_shadowed(node: Node, scope: Node, binding: Node) -> bool:
    """Check if a scope between the node and ``scope`` redeclares the binding's name.

    Args:
        node: An occurrence of the name
        scope: The scope the binding is declared in
        binding: The declaring identifier, which doesn't count as a redeclaration

    Returns:
        True if the occurrence refers to another declaration
    """
    name = node_text(node)
    for ancestor in ancestors(node, stop=scope):
        for declared in declared_identifiers(ancestor):
            if node_text(declared) == name and not same_node(declared, binding):
                return True
    return False


def is_reassigned(binding: Node, scope: Node) -> bool:
    """Check if the binding is assigned or declared again anywhere in its scope.

    Args:
        binding: The identifier node that declares the binding
        scope: The scope the binding is declared in

    Returns:
        True if any assignment, compound assignment, ++/--, for...in/of target
        or ``var`` redeclaration targets the binding
    """
    name = node_text(binding)
    for node in walk(scope):
        for identifier in _assigned_identifiers(node):
            if same_node(identifier, binding) or node_text(identifier) != name:
                continue
            if not is_shadowed(identifier, scope, binding):
                logger.debug("'%s' is reassigned at line %d", name, node.start_point[0] + 1)
                return True
    return False


def _assigned_identifiers(node: Node) -> List[Node]:
    if node.type in ASSIGNMENT_TYPES:
        return _target_identifiers(node.child_by_field_name("left"))
    if node.type == "update_expression":
        return _target_identifiers(node.child_by_field_name("argument"))
    if node.type == "for_in_statement":
        left = node.child_by_field_name("left")
        kind = loop_declaration_kind(node)
        if kind is None:
            return _target_identifiers(left)
        if kind == "var" and left is not None:
            return pattern_identifiers(left)
        return []
    if node.type == "variable_declarator" and node.parent.type == "variable_declaration":
        return pattern_identifiers(node.child_by_field_name("name"))
    return []


def _target_identifiers(target: Optional[Node]) -> List[Node]:
    if target is None:
        return []
    if target.type == "parenthesized_expression":
        return _target_identifiers(named_children_without_comments(target)[0])
    if target.type == "identifier":
        return [target]
    if target.type not in DESTRUCTURING_TARGET_TYPES:
        return []
    return [
        node
        for node in walk(target)
        if node.type in ASSIGNED_IDENTIFIER_TYPES
        and node.parent is not None
        and node.parent.type not in ("member_expression", "subscript_expression")
    ]


def find_type_query_nodes(binding: Node, scope: Node) -> List[Node]:
    """Find the ``typeof`` type queries reading a binding.

    They can't be inlined: a type query needs a name, not a value.

    Returns:
        The queried identifier nodes, in source order
    """
    name = node_text(binding)
    queried = []
    for node in walk(scope):
        if node.type != "type_query":
            continue
        identifier = next((child for child in walk(node) if child.type == "identifier"), None)
        if identifier is None or node_text(identifier) != name:
            continue
        if not is_shadowed(identifier, scope, binding):
            queried.append(identifier)
    return queried


def find_type_reference_nodes(name_node: Node, scope: Node) -> List[Node]:
    """Find the type references to a type alias within a scope.

    Type parameters, ``infer`` declarations and inner type declarations with
    the same name hide the alias from the types nested in them.

    Args:
        name_node: The name of the type alias declaration
        scope: The node whose subtree the alias is visible in

    Returns:
        The referencing ``type_identifier`` nodes, in source order
    """
    name = node_text(name_node)
    references = []
    for node in walk(scope):
        if node.type != "type_identifier" or node_text(node) != name:
            continue
        if same_node(node, name_node) or not _is_type_reference_context(node):
            continue
        if _is_type_shadowed(node, scope, name_node):
            continue
        references.append(node)
    logger.debug("Found %d type references to '%s'", len(references), name)
    return references


def _is_type_shadowed(node: Node, scope: Node, name_node: Node) -> bool:
    name = node_text(node)
    for ancestor in ancestors(node, stop=scope):
        for declared in declared_type_names(ancestor):
            if node_text(declared) == name and not same_node(declared, name_node):
                return True
    return False


def _is_type_reference_context(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type == "nested_type_identifier":
        return False
    if parent.type in TYPE_NAMING_PARENT_TYPES:
        return not same_node(parent.child_by_field_name("name"), node)
    if parent.type == "infer_type":
        return not same_node(named_children_without_comments(parent)[0], node)
    return True


def _is_reference_context(node: Node) -> bool:
    parent = node.parent
    if parent is None:
        return False
    if parent.type in NON_REFERENCE_PARENT_TYPES:
        return False
    if any(ancestor.type == "type_query" for ancestor in ancestors(node)):
        return False
    if parent.type in FUNCTION_DECLARATION_TYPES:
        return not same_node(parent.child_by_field_name("name"), node)
    if parent.type == "member_expression":
        return not same_node(parent.child_by_field_name("property"), node)
    if parent.type == "pair":
        return not same_node(parent.child_by_field_name("key"), node)
    return True
