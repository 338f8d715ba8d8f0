"""Inlinable code: a binding that can be replaced by its value, and how.

Leaves know the binding itself: its references and the code of its value.
Composites wrap a leaf with the declaration context it sits in (a single
declaration, one declarator among many, a destructured property or element),
and decide how much of the declaration to remove once the references are
replaced.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from tree_sitter import Node

from jsmolt.core.ast_utils import contains, node_text
from jsmolt.core.code_generation_utils import (
    needs_parentheses,
    type_needs_parentheses,
    whole_lines_selection,
)
from jsmolt.core.editor import Modification
from jsmolt.core.exports import find_exported_id_names
from jsmolt.core.reference_resolver import (
    IdentifierToReplace,
    find_reference_nodes,
    find_type_query_nodes,
    find_type_reference_nodes,
    is_reassigned,
)
from jsmolt.core.selection import Selection

# Selection for "nothing to remove": an empty selection at the start of the code
NO_SELECTION = Selection.cursor_at(0, 0)


class InlinableCode(ABC):
    """Code that can be inlined into its references."""

    @property
    @abstractmethod
    def is_redeclared(self) -> bool:
        """Is the binding assigned again after its declaration?"""

    @property
    @abstractmethod
    def is_exported(self) -> bool:
        """Is the binding exported from its module?"""

    @property
    @abstractmethod
    def has_identifiers_to_update(self) -> bool:
        pass

    @property
    @abstractmethod
    def should_extend_selection_to_declaration(self) -> bool:
        """Can the enclosing declaration be removed along with this code?"""

    @property
    @abstractmethod
    def value_selection(self) -> Selection:
        """Where the code to inline is."""

    @property
    @abstractmethod
    def code_to_remove_selection(self) -> Selection:
        """What to delete once the references are inlined."""

    @abstractmethod
    def update_identifiers_with(self, inlined_code: str) -> List[Modification]:
        """Build the modifications replacing every reference with ``inlined_code``."""


class InlinableIdentifier(InlinableCode):
    """A variable bound to the value of an expression."""

    def __init__(self, identifier: Node, scope: Node, value: Node) -> None:
        """Initialize the inlinable identifier.

        Args:
            identifier: The declared identifier
            scope: The scope the identifier is bound in
            value: The expression to inline. For destructured bindings, this is
                the initializer of the whole pattern.
        """
        self.identifier = identifier
        self.scope = scope
        self.value_type = value.type
        self._value_selection = Selection.from_node(value)
        self.references = find_reference_nodes(identifier, scope)
        self.identifiers_to_replace: List[IdentifierToReplace] = [
            IdentifierToReplace.from_node(node) for node in self.references
        ]
        # `typeof value` still needs the declaration once the value is inlined
        self.is_queried_as_type = len(find_type_query_nodes(identifier, scope)) > 0

    @property
    def is_redeclared(self) -> bool:
        return is_reassigned(self.identifier, self.scope)

    @property
    def is_exported(self) -> bool:
        return node_text(self.identifier) in find_exported_id_names(self.scope)

    @property
    def has_identifiers_to_update(self) -> bool:
        return len(self.identifiers_to_replace) > 0

    @property
    def should_extend_selection_to_declaration(self) -> bool:
        return not self.is_queried_as_type

    @property
    def value_selection(self) -> Selection:
        return self._value_selection

    @property
    def code_to_remove_selection(self) -> Selection:
        if self.is_queried_as_type:
            return NO_SELECTION
        return self._value_selection.extend_start_to_start_of(Selection.from_node(self.identifier))

    def update_identifiers_with(self, inlined_code: str) -> List[Modification]:
        modifications = []
        for node, identifier in zip(self.references, self.identifiers_to_replace):
            code = inlined_code
            if not identifier.is_in_unary_expression and needs_parentheses(node, self.value_type):
                code = f"({code})"
            modifications.append(identifier.replace_with(code))
        return modifications


class InlinableTypeAlias(InlinableCode):
    """A TypeScript type alias, inlined into the type references to it."""

    def __init__(self, declaration: Node, scope: Node) -> None:
        self.declaration = declaration
        self.scope = scope
        name = declaration.child_by_field_name("name")
        value = declaration.child_by_field_name("value")
        self.name = node_text(name)
        self.value_type = value.type
        self._value_selection = Selection.from_node(value)
        self.references = [
            node
            for node in find_type_reference_nodes(name, scope)
            if not contains(declaration, node)
        ]

    @property
    def is_redeclared(self) -> bool:
        return False

    @property
    def is_exported(self) -> bool:
        return self.name in find_exported_id_names(self.scope)

    @property
    def has_identifiers_to_update(self) -> bool:
        return len(self.references) > 0

    @property
    def should_extend_selection_to_declaration(self) -> bool:
        return True

    @property
    def value_selection(self) -> Selection:
        return self._value_selection

    @property
    def code_to_remove_selection(self) -> Selection:
        return Selection.from_node(self.declaration)

    def update_identifiers_with(self, inlined_code: str) -> List[Modification]:
        modifications = []
        for node in self.references:
            code = inlined_code
            if type_needs_parentheses(node, self.value_type):
                code = f"({code})"
            modifications.append(Modification(code, Selection.from_node(node)))
        return modifications


class CompositeInlinable(InlinableCode):
    """Inlinable code that delegates to the code it wraps."""

    def __init__(self, child: InlinableCode) -> None:
        self.child = child

    @property
    def is_redeclared(self) -> bool:
        return self.child.is_redeclared

    @property
    def is_exported(self) -> bool:
        return self.child.is_exported

    @property
    def has_identifiers_to_update(self) -> bool:
        return self.child.has_identifiers_to_update

    @property
    def should_extend_selection_to_declaration(self) -> bool:
        return self.child.should_extend_selection_to_declaration

    @property
    def value_selection(self) -> Selection:
        return self.child.value_selection

    @property
    def code_to_remove_selection(self) -> Selection:
        return self.child.code_to_remove_selection

    def update_identifiers_with(self, inlined_code: str) -> List[Modification]:
        return self.child.update_identifiers_with(inlined_code)


class SingleDeclaration(CompositeInlinable):
    """The only declarator of a declaration statement: `const a = 1;`."""

    def __init__(self, child: InlinableCode, statement: Node) -> None:
        super().__init__(child)
        self.statement = statement

    @property
    def code_to_remove_selection(self) -> Selection:
        if not self.child.should_extend_selection_to_declaration:
            return self.child.code_to_remove_selection
        return whole_lines_selection(self.statement)


class MultipleDeclarations(CompositeInlinable):
    """One declarator among others: `const a = 1, b = 2;`."""

    def __init__(
        self, child: InlinableCode, previous: Optional[Node], following: Optional[Node]
    ) -> None:
        super().__init__(child)
        self.previous = previous
        self.following = following

    @property
    def code_to_remove_selection(self) -> Selection:
        selection = self.child.code_to_remove_selection
        if not self.child.should_extend_selection_to_declaration:
            return selection
        if self.following is not None:
            return selection.extend_end_to_start_of(Selection.from_node(self.following))
        if self.previous is not None:
            return selection.extend_start_to_end_of(Selection.from_node(self.previous))
        return selection


class InlinableObjectPattern(CompositeInlinable):
    """A property of a destructured object: `const { a } = obj;`.

    References are rewritten to read the property from the initializer
    (`obj.a`). The property is removed from the pattern, unless a rest element
    (`...others`) would then capture it.
    """

    def __init__(
        self,
        child: InlinableCode,
        accessor: str,
        property_node: Node,
        has_rest_sibling: bool,
        previous: Optional[Node],
        following: Optional[Node],
    ) -> None:
        """Initialize the inlinable object pattern.

        Args:
            child: Inlinable code for the property value
            accessor: How the property is read: '.a', '["a"]', '[0]'
            property_node: The destructured property
            has_rest_sibling: The pattern has a rest element
            previous: The previous property, if any
            following: The next property, if any
        """
        super().__init__(child)
        self.accessor = accessor
        self.property_node = property_node
        self.has_rest_sibling = has_rest_sibling
        self.previous = previous
        self.following = following

    @property
    def should_extend_selection_to_declaration(self) -> bool:
        if not self.child.should_extend_selection_to_declaration:
            return False
        return not self.has_rest_sibling and self.previous is None and self.following is None

    @property
    def code_to_remove_selection(self) -> Selection:
        if not self.child.should_extend_selection_to_declaration:
            return self.child.code_to_remove_selection

        if self.has_rest_sibling:
            value = self.property_node.child_by_field_name("value")
            if value is not None and value.type == "object_pattern":
                # Keep the key so the rest element still excludes it
                key = self.property_node.child_by_field_name("key")
                return Selection.from_node(value).extend_start_to_end_of(Selection.from_node(key))
            return NO_SELECTION

        selection = Selection.from_node(self.property_node)
        if self.following is not None:
            return selection.extend_end_to_start_of(Selection.from_node(self.following))
        if self.previous is not None:
            return selection.extend_start_to_end_of(Selection.from_node(self.previous))
        return selection

    def update_identifiers_with(self, inlined_code: str) -> List[Modification]:
        return self.child.update_identifiers_with(f"{inlined_code}{self.accessor}")


class InlinableArrayPattern(CompositeInlinable):
    """An element of a destructured array: `const [a, b] = items;`."""

    def __init__(
        self,
        child: InlinableCode,
        index: int,
        element: Node,
        previous: Optional[Node],
        following: Optional[Node],
    ) -> None:
        super().__init__(child)
        self.index = index
        self.element = element
        self.previous = previous
        self.following = following

    @property
    def should_extend_selection_to_declaration(self) -> bool:
        if not self.child.should_extend_selection_to_declaration:
            return False
        return self.previous is None and self.following is None

    @property
    def code_to_remove_selection(self) -> Selection:
        if not self.child.should_extend_selection_to_declaration:
            return self.child.code_to_remove_selection

        selection = Selection.from_node(self.element)
        # Later elements keep their index: leave a hole unless it's the last one
        if self.following is None and self.previous is not None:
            return selection.extend_start_to_end_of(Selection.from_node(self.previous))
        return selection

    def update_identifiers_with(self, inlined_code: str) -> List[Modification]:
        return self.child.update_identifiers_with(f"{inlined_code}[{self.index}]")


class InlinableTopLevelPattern(CompositeInlinable):
    """A destructuring pattern declared with its initializer: `{ a } = obj`."""

    def __init__(self, child: InlinableCode, declarator: Node) -> None:
        super().__init__(child)
        self.declarator = declarator

    @property
    def code_to_remove_selection(self) -> Selection:
        if not self.child.should_extend_selection_to_declaration:
            return self.child.code_to_remove_selection
        return Selection.from_node(self.declarator)
