"""Locate the inlinable code under a selection.

Destructuring patterns are decomposed down to the identifier the selection is
on, wrapping it with the pattern context on the way back up.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from tree_sitter import Node

from jsmolt.core.ast_utils import (
    VARIABLE_DECLARATION_TYPES,
    array_elements,
    declaration_scope_of,
    named_children_without_comments,
    node_text,
    property_accessor,
)
from jsmolt.core.selection import Selection
from jsmolt.refactorings.composing_methods.inlinable_code import (
    InlinableArrayPattern,
    InlinableCode,
    InlinableIdentifier,
    InlinableObjectPattern,
    InlinableTopLevelPattern,
    InlinableTypeAlias,
    MultipleDeclarations,
    SingleDeclaration,
)

logger = logging.getLogger(__name__)

DECLARATION_TYPES = VARIABLE_DECLARATION_TYPES | {"type_alias_declaration"}
IDENTIFIER_TYPES = frozenset({"identifier", "shorthand_property_identifier_pattern"})
DESTRUCTURED_PROPERTY_TYPES = frozenset({"pair_pattern", "shorthand_property_identifier_pattern"})
SIBLING_PROPERTY_TYPES = DESTRUCTURED_PROPERTY_TYPES | {"object_assignment_pattern"}
NAMEABLE_INDEX_TYPES = frozenset({"number", "string", "identifier"})


@dataclass(frozen=True)
class Declaration:
    """A binding and the value it's initialized with.

    Attributes:
        id: The bound identifier or pattern
        init: The initializer of the whole declarator
        declarator: The variable declarator, for a top-level pattern
    """

    id: Node
    init: Optional[Node]
    declarator: Optional[Node] = None


def find_inlinable_code_in_ast(root: Node, selection: Selection) -> Optional[InlinableCode]:
    """Find the inlinable code declared at the selection.

    Declarations on the path to the selection are tried innermost first.

    Args:
        root: The program node
        selection: The cursor or selected range

    Returns:
        The inlinable code, or None if the selection isn't on an inlinable declaration
    """
    for statement in reversed(_declarations_containing(root, selection)):
        inlinable_code = _find_in_declaration_statement(statement, selection)
        if inlinable_code is not None:
            return inlinable_code
    return None


def find_inlinable_code(
    selection: Selection, scope: Node, declaration: Declaration
) -> Optional[InlinableCode]:
    """Decompose a declaration down to the binding under the selection.

    Args:
        selection: The cursor or selected range
        scope: The scope the declaration binds its names in
        declaration: The binding to decompose

    Returns:
        The inlinable code, or None if nothing under the selection can be inlined
    """
    id_node, init = declaration.id, declaration.init
    if init is None:
        return None

    if id_node.type in IDENTIFIER_TYPES:
        return InlinableIdentifier(id_node, scope, init)

    if id_node.type == "object_pattern":
        result = _find_in_object_pattern(selection, scope, id_node, init)
    elif id_node.type == "array_pattern":
        result = _find_in_array_pattern(selection, scope, id_node, init)
    else:
        return None

    if result is None or declaration.declarator is None:
        return result
    return InlinableTopLevelPattern(result, declaration.declarator)


def get_init_name(init: Node) -> Optional[str]:
    """Render an initializer as a name that can be read repeatedly.

    Args:
        init: The initializer expression

    Returns:
        'obj', 'this', 'obj.a', 'obj?.a', 'obj[0]', 'obj["a"]' or 'obj[key]',
        None for any other expression
    """
    if init.type == "identifier":
        return node_text(init)
    if init.type == "this":
        return "this"

    if init.type == "member_expression":
        object_name = _object_name(init)
        property_node = init.child_by_field_name("property")
        if object_name is None or property_node is None:
            return None
        separator = "?." if init.child_by_field_name("optional_chain") is not None else "."
        return f"{object_name}{separator}{node_text(property_node)}"

    if init.type == "subscript_expression":
        object_name = _object_name(init)
        index = init.child_by_field_name("index")
        if object_name is None or index is None or index.type not in NAMEABLE_INDEX_TYPES:
            return None
        return f"{object_name}[{node_text(index)}]"

    return None


def _object_name(expression: Node) -> Optional[str]:
    object_node = expression.child_by_field_name("object")
    return get_init_name(object_node) if object_node is not None else None


def _declarations_containing(root: Node, selection: Selection) -> List[Node]:
    declarations = []
    node: Optional[Node] = root
    while node is not None:
        if node.type in DECLARATION_TYPES:
            declarations.append(node)
        node = next((child for child in node.children if selection.is_inside_node(child)), None)
    return declarations


def _find_in_declaration_statement(
    statement: Node, selection: Selection
) -> Optional[InlinableCode]:
    scope = declaration_scope_of(statement)

    if statement.type == "type_alias_declaration":
        if statement.child_by_field_name("type_parameters") is not None:
            logger.debug("Generic type aliases can't be inlined")
            return None
        return SingleDeclaration(InlinableTypeAlias(statement, scope), statement)

    declarators = [
        child for child in statement.named_children if child.type == "variable_declarator"
    ]

    if len(declarators) == 1:
        child = find_inlinable_code(selection, scope, _declaration_of(declarators[0]))
        return SingleDeclaration(child, statement) if child is not None else None

    for index in reversed(range(len(declarators))):
        declarator = declarators[index]
        if not selection.is_inside_node(declarator):
            continue
        child = find_inlinable_code(selection, scope, _declaration_of(declarator))
        if child is None:
            continue
        previous = declarators[index - 1] if index > 0 else None
        following = declarators[index + 1] if index + 1 < len(declarators) else None
        return MultipleDeclarations(child, previous, following)
    return None


def _declaration_of(declarator: Node) -> Declaration:
    return Declaration(
        id=declarator.child_by_field_name("name"),
        init=declarator.child_by_field_name("value"),
        declarator=declarator,
    )


def _find_in_object_pattern(
    selection: Selection, scope: Node, pattern: Node, init: Node
) -> Optional[InlinableCode]:
    if get_init_name(init) is None:
        logger.debug("Can't read destructured properties from '%s'", node_text(init))
        return None

    properties = named_children_without_comments(pattern)
    has_rest_sibling = any(node.type == "rest_pattern" for node in properties)

    for index in reversed(range(len(properties))):
        property_node = properties[index]
        if property_node.type not in DESTRUCTURED_PROPERTY_TYPES:
            continue
        if not selection.is_inside_node(property_node):
            continue

        accessor = property_accessor(property_node)
        if accessor is None:
            continue

        if property_node.type == "pair_pattern":
            value = property_node.child_by_field_name("value")
        else:
            value = property_node
        child = find_inlinable_code(selection, scope, Declaration(value, init))
        if child is None:
            continue

        return InlinableObjectPattern(
            child,
            accessor,
            property_node,
            has_rest_sibling,
            previous=_sibling_property(properties, index - 1),
            following=_sibling_property(properties, index + 1),
        )
    return None


def _sibling_property(properties: List[Node], index: int) -> Optional[Node]:
    if index < 0 or index >= len(properties):
        return None
    sibling = properties[index]
    return sibling if sibling.type in SIBLING_PROPERTY_TYPES else None


def _find_in_array_pattern(
    selection: Selection, scope: Node, pattern: Node, init: Node
) -> Optional[InlinableCode]:
    if get_init_name(init) is None:
        logger.debug("Can't read destructured elements from '%s'", node_text(init))
        return None

    elements = array_elements(pattern)
    for index in reversed(range(len(elements))):
        element = elements[index]
        if element is None or element.type == "rest_pattern":
            continue
        if not selection.is_inside_node(element):
            continue

        child = find_inlinable_code(selection, scope, Declaration(element, init))
        if child is None:
            continue

        previous = next((node for node in reversed(elements[:index]) if node is not None), None)
        following = next((node for node in elements[index + 1 :] if node is not None), None)
        return InlinableArrayPattern(child, index, element, previous, following)
    return None
