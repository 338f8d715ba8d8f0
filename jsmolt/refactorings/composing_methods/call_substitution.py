"""Bind the parameters of a function to the arguments of one of its calls.

The result maps every name the parameter list declares to the code it stands
for at that call site. Destructured parameters are resolved through array and
object literal arguments when possible, and through property or index access
on the argument otherwise.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from tree_sitter import Node

from jsmolt.core.ast_utils import (
    array_elements,
    named_children_without_comments,
    node_text,
    property_accessor,
    property_key_name,
)

UNDEFINED = "undefined"

Member = Tuple[Optional[str], str, "Argument"]


@dataclass
class Argument:
    """The code of a call argument, with its structure when it's a literal.

    Attributes:
        text: The code of the argument
        node_type: Syntax node type of the code, which decides if it needs parentheses
        elements: Elements of an array literal, None for holes
        members: (key, code, value) of each member of an object literal
    """

    text: str
    node_type: str = "identifier"
    elements: Optional[List[Optional["Argument"]]] = None
    members: Optional[List[Member]] = None

    @classmethod
    def from_node(cls, node: Node, render: Callable[[Node], str] = node_text) -> "Argument":
        """Build an argument from its syntax node.

        Args:
            node: The argument expression
            render: Produces the code of a node

        Returns:
            The argument
        """
        text = render(node)

        if node.type == "array":
            elements = array_elements(node)
            if any(
                element is not None and element.type == "spread_element" for element in elements
            ):
                return cls(text, node.type)
            return cls(
                text,
                node.type,
                elements=[
                    cls.from_node(element, render) if element is not None else None
                    for element in elements
                ],
            )

        if node.type == "object":
            members: List[Member] = []
            for member in named_children_without_comments(node):
                if member.type not in ("pair", "shorthand_property_identifier"):
                    return cls(text, node.type)
                key = property_key_name(member)
                if key is None:
                    return cls(text, node.type)
                value = member.child_by_field_name("value") if member.type == "pair" else member
                members.append((key, render(member), cls.from_node(value, render)))
            return cls(text, node.type, members=members)

        return cls(text, node.type)

    @classmethod
    def of_elements(cls, elements: List[Optional["Argument"]]) -> "Argument":
        """Build an array literal argument out of other arguments."""
        texts = [element.text if element is not None else UNDEFINED for element in elements]
        return cls(f"[{', '.join(texts)}]", "array", elements=list(elements))


MISSING_ARGUMENT = Argument(UNDEFINED, "undefined")


def build_call_substitution(
    parameters: Node, arguments: List[Argument]
) -> Dict[str, Argument]:
    """Map the names declared by a parameter list to the code they take at a call.

    Args:
        parameters: The ``formal_parameters`` node of the function
        arguments: The arguments of the call, in order

    Returns:
        The argument of every declared name, 'undefined' for missing arguments
    """
    substitution: Dict[str, Argument] = {}
    spread_start = _spread_start(arguments)
    position = 0
    for parameter in named_children_without_comments(parameters):
        pattern, default = _unwrap_parameter(parameter)
        if pattern is None or pattern.type == "this":
            continue
        if pattern.type == "rest_pattern":
            rest = _rest_of_arguments(arguments, position)
            _bind(_rest_target(pattern), rest, None, substitution)
            break
        if spread_start is not None and position >= spread_start:
            argument = _spread_argument(arguments[spread_start:], position - spread_start, default)
            default = None
        else:
            argument = arguments[position] if position < len(arguments) else None
        _bind(pattern, argument, default, substitution)
        position += 1
    return substitution


def _spread_start(arguments: List[Argument]) -> Optional[int]:
    for index, argument in enumerate(arguments):
        if argument.node_type == "spread_element":
            return index
    return None


def _spread_array(arguments: List[Argument]) -> Argument:
    """Gather arguments, spread ones included, in an array literal."""
    return Argument(f"[{', '.join(argument.text for argument in arguments)}]", "array")


def _rest_of_arguments(arguments: List[Argument], position: int) -> Argument:
    spread_start = _spread_start(arguments)
    if spread_start is None:
        return Argument.of_elements(list(arguments[position:]))
    if position <= spread_start:
        return _spread_array(arguments[position:])
    return _rest_of_array(_spread_array(arguments[spread_start:]), position - spread_start)


def _spread_argument(
    spread_arguments: List[Argument], index: int, default: Optional[Node]
) -> Argument:
    """Read the argument at ``index`` from arguments starting with a spread one.

    Its position depends on the spread length, so it's read from the array of
    these arguments, falling back to the default value when it's undefined.
    """
    element = _element_of(_spread_array(spread_arguments), index)
    if default is None:
        return element
    return Argument(
        f"{element.text} === {UNDEFINED} ? {node_text(default)} : {element.text}",
        "ternary_expression",
    )


def _unwrap_parameter(parameter: Node) -> Tuple[Optional[Node], Optional[Node]]:
    if parameter.type in ("required_parameter", "optional_parameter"):
        return parameter.child_by_field_name("pattern"), parameter.child_by_field_name("value")
    if parameter.type == "assignment_pattern":
        return parameter.child_by_field_name("left"), parameter.child_by_field_name("right")
    return parameter, None


def _rest_target(rest: Node) -> Node:
    return named_children_without_comments(rest)[0]


def _bind(
    pattern: Node,
    argument: Optional[Argument],
    default: Optional[Node],
    substitution: Dict[str, Argument],
) -> None:
    if argument is None and default is not None:
        argument = Argument.from_node(default)

    if pattern.type in ("assignment_pattern", "object_assignment_pattern"):
        _bind(
            pattern.child_by_field_name("left"),
            argument,
            pattern.child_by_field_name("right"),
            substitution,
        )
    elif pattern.type in ("identifier", "shorthand_property_identifier_pattern"):
        substitution[node_text(pattern)] = argument if argument is not None else MISSING_ARGUMENT
    elif pattern.type == "array_pattern":
        _bind_array_pattern(pattern, argument, substitution)
    elif pattern.type == "object_pattern":
        _bind_object_pattern(pattern, argument, substitution)


def _bind_array_pattern(
    pattern: Node, argument: Optional[Argument], substitution: Dict[str, Argument]
) -> None:
    for index, element in enumerate(array_elements(pattern)):
        if element is None:
            continue
        if element.type == "rest_pattern":
            _bind(_rest_target(element), _rest_of_array(argument, index), None, substitution)
            break
        _bind(element, _element_of(argument, index), None, substitution)


def _bind_object_pattern(
    pattern: Node, argument: Optional[Argument], substitution: Dict[str, Argument]
) -> None:
    bound_keys = []
    for property_node in named_children_without_comments(pattern):
        if property_node.type == "rest_pattern":
            target = _rest_target(property_node)
            rest = _rest_of_object(argument, bound_keys, pattern, target)
            _bind(target, rest, None, substitution)
            continue

        if property_node.type == "object_assignment_pattern":
            key_node = property_node.child_by_field_name("left")
            target = property_node
        elif property_node.type == "pair_pattern":
            key_node = property_node
            target = property_node.child_by_field_name("value")
        else:
            key_node = property_node
            target = property_node

        accessor = property_accessor(key_node)
        if accessor is None:
            continue
        key = property_key_name(key_node)
        if key is not None:
            bound_keys.append(key)
        _bind(target, _property_of(argument, key, accessor), None, substitution)


def _element_of(argument: Optional[Argument], index: int) -> Optional[Argument]:
    if argument is None:
        return None
    if argument.elements is not None:
        return argument.elements[index] if index < len(argument.elements) else None
    return Argument(f"{argument.text}[{index}]", "subscript_expression")


def _rest_of_array(argument: Optional[Argument], index: int) -> Argument:
    if argument is None:
        return Argument.of_elements([])
    if argument.elements is not None:
        return Argument.of_elements(argument.elements[index:])
    return Argument(f"{argument.text}.slice({index})", "call_expression")


def _property_of(
    argument: Optional[Argument], key: Optional[str], accessor: str
) -> Optional[Argument]:
    if argument is None:
        return None
    if argument.members is not None and key is not None:
        for member_key, _, value in argument.members:
            if member_key == key:
                return value
        return None
    return Argument(f"{argument.text}{accessor}", "member_expression")


def _rest_of_object(
    argument: Optional[Argument], bound_keys: List[str], pattern: Node, target: Node
) -> Argument:
    if argument is None:
        return Argument("{}", "object")
    if argument.members is not None:
        leftover = [code for key, code, _ in argument.members if key not in bound_keys]
        return Argument(f"{{ {', '.join(leftover)} }}" if leftover else "{}", "object")
    return Argument(
        f"(({node_text(pattern)}) => {node_text(target)})({argument.text})", "call_expression"
    )
