"""
Type expression classification.

Maps a tree-sitter-go type node to one of the closed ``Type`` variants.
"""

from typing import Mapping, Optional

from tree_sitter import Node

from extraction.config import (
    ARRAY_TYPE_NODES,
    COMMENT_NODE,
    INTERFACE_ALIAS_NAMES,
    INTERFACE_TYPE_NODE,
    MAP_TYPE_NODE,
    PARENTHESIZED_TYPE_NODE,
    POINTER_TYPE_NODE,
    PRIMITIVE_TYPE_NAMES,
    QUALIFIED_TYPE_NODE,
    TYPE_IDENTIFIER_NODE,
)
from extraction.errors import UnsupportedTypeExpression
from extraction.models import (
    AliasInfo,
    ArrayType,
    CustomType,
    InterfaceValueType,
    MapType,
    PointerType,
    SimpleType,
    Type,
)


def node_text(node: Node) -> str:
    """Decode the source text of a node."""
    return node.text.decode("utf-8") if node.text else ""


def simple_type(name: str) -> Optional[SimpleType]:
    """Return a SimpleType for builtin primitive names, else None."""
    if name in PRIMITIVE_TYPE_NAMES:
        return SimpleType(name=name)
    return None


def _required_child(node: Node, field_name: Optional[str] = None) -> Node:
    """Fetch a mandatory sub-expression of a type node."""
    if field_name is not None:
        child = node.child_by_field_name(field_name)
    else:
        child = next(
            (c for c in node.named_children if c.type != COMMENT_NODE), None
        )
    if child is None:
        raise UnsupportedTypeExpression(
            f"incomplete {node.type} at line {node.start_point.row + 1}: {node_text(node)!r}"
        )
    return child


def classify_type(
    node: Node,
    aliases: Optional[Mapping[str, AliasInfo]] = None,
) -> Type:
    """Classify a type expression node.

    Args:
        node: A tree-sitter-go type node.
        aliases: Known alias declarations by name. Custom names found here
            carry their AliasInfo.

    Returns:
        The Type variant describing the expression.

    Raises:
        UnsupportedTypeExpression: For shapes outside the supported set
            (function, channel, generic, inline struct types, ...).
    """
    if node.type == INTERFACE_TYPE_NODE:
        return InterfaceValueType()

    if node.type == TYPE_IDENTIFIER_NODE:
        name = node_text(node)
        primitive = simple_type(name)
        if primitive is not None:
            return primitive
        if name in INTERFACE_ALIAS_NAMES:
            return InterfaceValueType()
        alias_info = aliases.get(name) if aliases else None
        return CustomType(name=name, alias_info=alias_info)

    if node.type == QUALIFIED_TYPE_NODE:
        name_node = _required_child(node, "name")
        return CustomType(name=node_text(name_node), expr=node_text(node))

    if node.type in ARRAY_TYPE_NODES:
        element = _required_child(node, "element")
        return ArrayType(inner_type=classify_type(element, aliases))

    if node.type == POINTER_TYPE_NODE:
        pointee = _required_child(node)
        return PointerType(inner_type=classify_type(pointee, aliases))

    if node.type == MAP_TYPE_NODE:
        key_type = classify_type(_required_child(node, "key"), aliases)
        value_type = classify_type(_required_child(node, "value"), aliases)
        return MapType(key_type=key_type, value_type=value_type)

    if node.type == PARENTHESIZED_TYPE_NODE:
        return classify_type(_required_child(node), aliases)

    raise UnsupportedTypeExpression(
        f"unsupported type expression {node.type} at line {node.start_point.row + 1}: "
        f"{node_text(node)!r}"
    )
