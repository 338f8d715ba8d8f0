"""Shared syntax tree utility functions for refactorings."""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "typescript"

LANGUAGE_LOADERS = {
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

# JavaScript is parsed with the TypeScript grammar, which accepts it
EXTENSION_LANGUAGES = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "typescript",
    ".mjs": "typescript",
    ".cjs": "typescript",
    ".tsx": "tsx",
    ".jsx": "tsx",
}

# Target format constants for cursor parsing
LINE_PREFIX = "L"
COLUMN_SEPARATOR = ":"
RANGE_SEPARATOR = "-"
POSITION_PATTERN = re.compile(r"L(\d+)(?::(\d+))?")

FUNCTION_DECLARATION_TYPES = frozenset({"function_declaration", "generator_function_declaration"})
FUNCTION_TYPES = FUNCTION_DECLARATION_TYPES | frozenset(
    {
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
NAMED_FUNCTION_EXPRESSION_TYPES = frozenset(
    {"function_expression", "function", "generator_function"}
)
BLOCK_TYPES = frozenset({"program", "statement_block", "class_static_block"})
VARIABLE_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})
TYPE_DECLARATION_TYPES = CLASS_TYPES | frozenset(
    {"type_alias_declaration", "interface_declaration", "enum_declaration"}
)


def parse_position(position: str) -> Tuple[int, int]:
    """Parse a position from 'L3:5' format.

    Lines and columns are 1-based, as editors display them. The column
    defaults to 1 when omitted ('L3').

    Args:
        position: Position string such as "L3:5"

    Returns:
        Tuple of 0-based (line, column)

    Raises:
        ValueError: If the position format is invalid
    """
    match = POSITION_PATTERN.fullmatch(position.strip())
    if match is None:
        raise ValueError(
            f"Invalid position format '{position}'. "
            f"Expected '{LINE_PREFIX}<line>{COLUMN_SEPARATOR}<column>'"
        )
    line = int(match.group(1))
    column = int(match.group(2) or 1)
    if line < 1 or column < 1:
        raise ValueError(f"Invalid position '{position}': lines and columns start at 1")
    return line - 1, column - 1


def parse_target(target: str) -> Tuple[int, int, int, int]:
    """Parse a cursor target in 'L3:5' or 'L3:5-L4:2' format.

    Args:
        target: Target string

    Returns:
        Tuple of 0-based (start_line, start_column, end_line, end_column)

    Raises:
        ValueError: If the format is invalid or the range is reversed
    """
    parts = target.split(RANGE_SEPARATOR)
    if len(parts) > 2:
        raise ValueError(
            f"Invalid target format '{target}'. Expected 'L<line>:<column>' "
            "or 'L<line>:<column>-L<line>:<column>'"
        )
    start = parse_position(parts[0])
    end = parse_position(parts[1]) if len(parts) == 2 else start
    if end < start:
        raise ValueError(f"Invalid target '{target}': range ends before it starts")
    return start[0], start[1], end[0], end[1]


def language_for_path(file_path: Path) -> str:
    """Pick the grammar to parse a file with, based on its extension."""
    return EXTENSION_LANGUAGES.get(file_path.suffix.lower(), DEFAULT_LANGUAGE)


@lru_cache(maxsize=None)
def get_parser(language: str) -> Parser:
    """Get the tree-sitter parser for a grammar.

    Raises:
        ValueError: If the language is not supported
    """
    if language not in LANGUAGE_LOADERS:
        raise ValueError(f"Unsupported language: {language}")
    return Parser(Language(LANGUAGE_LOADERS[language]()))


def parse_source(code: str, language: str = DEFAULT_LANGUAGE) -> Tree:
    """Parse source code into a syntax tree.

    Args:
        code: JavaScript or TypeScript source code
        language: Grammar name, "typescript" or "tsx"

    Returns:
        The parsed tree

    Raises:
        ValueError: If the code contains syntax errors
    """
    tree = get_parser(language).parse(code.encode("utf8"))
    if tree.root_node.has_error:
        raise ValueError("Failed to parse source code: it contains syntax errors")
    return tree


def node_text(node: Node) -> str:
    return node.text.decode("utf8")


def walk(node: Node) -> Iterator[Node]:
    """Iterate over a node and all its descendants, in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def ancestors(node: Node, stop: Optional[Node] = None) -> Iterator[Node]:
    """Iterate over the ancestors of a node, innermost first, excluding ``stop``."""
    current = node.parent
    while current is not None and not same_node(current, stop):
        yield current
        current = current.parent


def same_node(first: Optional[Node], second: Optional[Node]) -> bool:
    if first is None or second is None:
        return False
    return (
        first.type == second.type
        and first.start_byte == second.start_byte
        and first.end_byte == second.end_byte
    )


def contains(outer: Node, inner: Node) -> bool:
    return outer.start_byte <= inner.start_byte and inner.end_byte <= outer.end_byte


def named_children_without_comments(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def previous_named_sibling(node: Node) -> Optional[Node]:
    """Get the previous named sibling of a node, skipping comments."""
    sibling = node.prev_named_sibling
    while sibling is not None and sibling.type == "comment":
        sibling = sibling.prev_named_sibling
    return sibling


def array_elements(node: Node) -> List[Optional[Node]]:
    """Get the elements of an array literal or pattern, holes included as None.

    Args:
        node: An ``array`` or ``array_pattern`` node

    Returns:
        Elements by index, None where the array has a hole
    """
    elements: List[Optional[Node]] = []
    current = None
    for child in node.children:
        if child.type == ",":
            elements.append(current)
            current = None
        elif child.is_named and child.type != "comment":
            current = child
    if current is not None:
        elements.append(current)
    return elements


def pattern_identifiers(node: Node) -> List[Node]:
    """Collect the identifiers a binding pattern declares.

    Handles plain identifiers, object and array destructuring, default values,
    rest elements and TypeScript parameter wrappers.

    Args:
        node: A pattern, a parameter, or a ``formal_parameters`` node

    Returns:
        The declared identifier nodes, in source order
    """
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [node]
    if node.type in ("object_pattern", "array_pattern", "formal_parameters", "rest_pattern"):
        identifiers = []
        for child in named_children_without_comments(node):
            identifiers.extend(pattern_identifiers(child))
        return identifiers
    if node.type == "pair_pattern":
        value = node.child_by_field_name("value")
        return pattern_identifiers(value) if value is not None else []
    if node.type in ("assignment_pattern", "object_assignment_pattern"):
        left = node.child_by_field_name("left")
        return pattern_identifiers(left) if left is not None else []
    if node.type in ("required_parameter", "optional_parameter"):
        pattern = node.child_by_field_name("pattern")
        return pattern_identifiers(pattern) if pattern is not None else []
    return []


def statement_declarations(statement: Node) -> List[Node]:
    """Collect the value identifiers a statement declares in its block."""
    if statement.type in VARIABLE_DECLARATION_TYPES:
        identifiers = []
        for declarator in statement.named_children:
            if declarator.type == "variable_declarator":
                identifiers.extend(pattern_identifiers(declarator.child_by_field_name("name")))
        return identifiers
    if statement.type in FUNCTION_DECLARATION_TYPES or statement.type in CLASS_TYPES:
        name = statement.child_by_field_name("name")
        return [name] if name is not None else []
    if statement.type == "export_statement":
        declaration = statement.child_by_field_name("declaration")
        return statement_declarations(declaration) if declaration is not None else []
    return []


def loop_declaration_kind(loop: Node) -> Optional[str]:
    """Get the keyword a for...in/of loop declares its variable with.

    Returns:
        'const', 'let' or 'var', None when the loop assigns an existing binding
    """
    for child in loop.children:
        if child.type in ("const", "let", "var"):
            return child.type
    return None


def is_var_scope(node: Node) -> bool:
    """Check if ``var`` declarations anywhere inside a node are bound to it."""
    if node.type in ("program", "class_static_block"):
        return True
    return (
        node.type == "statement_block"
        and node.parent is not None
        and node.parent.type in FUNCTION_TYPES
    )


def hoisted_var_identifiers(scope: Node) -> List[Node]:
    """Collect the ``var`` names declared in a function body, outside nested functions.

    Args:
        scope: A function body, a class static block or the program

    Returns:
        The identifiers declared with ``var`` at any block depth
    """
    identifiers: List[Node] = []
    stack = list(reversed(scope.children))
    while stack:
        node = stack.pop()
        if node.type in FUNCTION_TYPES or node.type == "class_static_block":
            continue
        if node.type == "variable_declaration":
            identifiers.extend(statement_declarations(node))
        elif node.type == "for_in_statement" and loop_declaration_kind(node) == "var":
            identifiers.extend(pattern_identifiers(node.child_by_field_name("left")))
        stack.extend(reversed(node.children))
    return identifiers


def _is_var_statement(statement: Node) -> bool:
    if statement.type == "export_statement":
        declaration = statement.child_by_field_name("declaration")
        return declaration is not None and declaration.type == "variable_declaration"
    return statement.type == "variable_declaration"


def declared_identifiers(node: Node) -> List[Node]:
    """Collect the identifiers a scope-introducing node declares.

    ``var`` declarations are reported by the function body, the class static
    block or the program they're hoisted to, not by the block they're written in.

    Args:
        node: Any node. Only functions, blocks, loops and catch clauses declare.

    Returns:
        The declared identifier nodes
    """
    identifiers: List[Node] = []
    if node.type in FUNCTION_TYPES:
        parameters = node.child_by_field_name("parameters") or node.child_by_field_name(
            "parameter"
        )
        if parameters is not None:
            identifiers.extend(pattern_identifiers(parameters))
        if node.type in NAMED_FUNCTION_EXPRESSION_TYPES:
            name = node.child_by_field_name("name")
            if name is not None:
                identifiers.append(name)
    elif node.type in BLOCK_TYPES:
        for statement in node.named_children:
            if not _is_var_statement(statement):
                identifiers.extend(statement_declarations(statement))
        if is_var_scope(node):
            identifiers.extend(hoisted_var_identifiers(node))
    elif node.type == "for_statement":
        for child in node.named_children:
            if child.type == "lexical_declaration":
                identifiers.extend(statement_declarations(child))
    elif node.type == "for_in_statement":
        left = node.child_by_field_name("left")
        if loop_declaration_kind(node) in ("const", "let") and left is not None:
            identifiers.extend(pattern_identifiers(left))
    elif node.type == "catch_clause":
        parameter = node.child_by_field_name("parameter")
        if parameter is not None:
            identifiers.extend(pattern_identifiers(parameter))
    return identifiers


def declared_type_names(node: Node) -> List[Node]:
    """Collect the type names a node declares for the types nested in it.

    Covers type parameters (``<T>``), type declarations of a block, ``infer``
    declarations of a conditional type and the key of a mapped type.

    Args:
        node: Any node

    Returns:
        The declared name nodes
    """
    names: List[Node] = []
    type_parameters = node.child_by_field_name("type_parameters")
    if type_parameters is not None:
        for parameter in type_parameters.named_children:
            name = parameter.child_by_field_name("name")
            if parameter.type == "type_parameter" and name is not None:
                names.append(name)

    if node.type in BLOCK_TYPES:
        for statement in node.named_children:
            if statement.type == "export_statement":
                statement = statement.child_by_field_name("declaration")
            if statement is None or statement.type not in TYPE_DECLARATION_TYPES:
                continue
            name = statement.child_by_field_name("name")
            if name is not None:
                names.append(name)
    elif node.type == "conditional_type":
        extends = node.child_by_field_name("right")
        if extends is not None:
            names.extend(
                named_children_without_comments(inferred)[0]
                for inferred in walk(extends)
                if inferred.type == "infer_type"
            )
    elif node.type == "index_signature":
        for child in node.named_children:
            name = child.child_by_field_name("name")
            if child.type == "mapped_type_clause" and name is not None:
                names.append(name)
    return names


def function_scope_of(node: Node) -> Node:
    """Get the body of the closest function enclosing a node, or the program."""
    ancestor = node.parent
    while ancestor is not None:
        if ancestor.type in FUNCTION_TYPES:
            return ancestor.child_by_field_name("body") or ancestor
        if ancestor.type == "program":
            return ancestor
        ancestor = ancestor.parent
    return node


def declaration_scope_of(statement: Node) -> Node:
    """Get the scope a declaration statement binds its names in.

    ``var`` declarations are function-scoped, everything else is bound in the
    enclosing block. An ``export`` wrapper is looked through.
    """
    if statement.type == "variable_declaration":
        return function_scope_of(statement)
    parent = statement.parent
    if parent is not None and parent.type == "export_statement":
        parent = parent.parent
    return parent if parent is not None else statement


def is_alone_on_its_lines(node: Node) -> bool:
    """Check that no other code shares the lines a node spans."""
    previous = node.prev_sibling
    following = node.next_sibling
    starts_line = previous is None or previous.end_point[0] < node.start_point[0]
    ends_line = following is None or following.start_point[0] > node.end_point[0]
    return starts_line and ends_line


def property_accessor(property_node: Node) -> Optional[str]:
    """Render how a destructured property is read from its object.

    Args:
        property_node: A ``pair_pattern`` or ``shorthand_property_identifier_pattern``

    Returns:
        '.name', '["name"]', '[0]' or '[expression]', None for private names
    """
    if property_node.type == "shorthand_property_identifier_pattern":
        return f".{node_text(property_node)}"
    key = property_node.child_by_field_name("key")
    if key is None:
        return None
    if key.type == "property_identifier":
        return f".{node_text(key)}"
    if key.type in ("string", "number"):
        return f"[{node_text(key)}]"
    if key.type == "computed_property_name":
        expressions = named_children_without_comments(key)
        return f"[{node_text(expressions[0])}]" if expressions else None
    return None


def property_key_name(property_node: Node) -> Optional[str]:
    """Get the static key name of an object property or destructured property.

    Returns:
        The key as written without quotes, None for computed keys
    """
    if property_node.type in (
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
    ):
        return node_text(property_node)
    key = property_node.child_by_field_name("key")
    if key is None:
        return None
    if key.type in ("property_identifier", "number"):
        return node_text(key)
    if key.type == "string":
        return node_text(key)[1:-1]
    return None
