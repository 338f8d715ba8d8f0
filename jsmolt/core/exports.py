"""Look up which local names a scope exports."""

from typing import List

from tree_sitter import Node

from jsmolt.core.ast_utils import node_text, statement_declarations


def find_exported_id_names(scope: Node) -> List[str]:
    """Find the local names exported by the direct export statements of a scope.

    Covers ``export const``/``function``/``class``/``type`` declarations,
    ``export default name`` and ``export { name, other as alias }``.
    Re-exports (``export { name } from "./module"``) don't export local names.

    Args:
        scope: The scope node, usually the program

    Returns:
        The exported local names
    """
    names: List[str] = []
    for statement in scope.named_children:
        if statement.type != "export_statement":
            continue
        if statement.child_by_field_name("source") is not None:
            continue

        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            if declaration.type in ("type_alias_declaration", "interface_declaration"):
                names.append(node_text(declaration.child_by_field_name("name")))
            else:
                identifiers = statement_declarations(declaration)
                names.extend(node_text(identifier) for identifier in identifiers)

        value = statement.child_by_field_name("value")
        if value is not None and value.type == "identifier":
            names.append(node_text(value))

        for clause in statement.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                name = specifier.child_by_field_name("name")
                if name is not None:
                    names.append(node_text(name))
    return names
