"""
AST traversal and declaration extraction logic.

This module walks a tree-sitter-go syntax tree and assembles struct and
constant definitions. The walk is a pre-order traversal over an explicit
stack: each visit returns True when the node was fully handled and its
children must not be visited (struct declarations), False to keep descending.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple, Union

from tree_sitter import Node, Tree

from extraction.config import (
    COMMENT_NODE,
    DEFAULT_NAME_TAG_KEY,
    FIELD_DECLARATION_LIST_NODE,
    FIELD_DECLARATION_NODE,
    LITERAL_NODES,
    PACKAGE_CLAUSE_NODE,
    PACKAGE_IDENTIFIER_NODE,
    PARENTHESIZED_TYPE_NODE,
    SKIPPED_DECLARATION_SHAPES,
    SOURCE_FILE_NODE,
    STRUCT_TYPE_NODE,
    TYPE_DECLARATION_NODE,
    TYPE_IDENTIFIER_NODE,
    TYPE_SPEC_NODES,
    VALUE_SPEC_NODES,
)
from extraction.errors import (
    ExtractionError,
    InvalidTagEntry,
    UnsupportedDeclarationShape,
    UnsupportedTypeExpression,
)
from extraction.models import (
    AliasInfo,
    ConstantDef,
    FieldDef,
    ParsedFile,
    PointerType,
    StructDef,
)
from extraction.tags import parse_tag, remove_quotes
from extraction.types import classify_type, node_text, simple_type

logger = logging.getLogger(__name__)

# Statement terminators that sit between a declaration and the next comment
_TERMINATOR_TOKENS = {"\n", ";"}


def clean_comment(comment_text: str) -> str:
    """Strip ``//`` or ``/* */`` markers and surrounding whitespace.

    Args:
        comment_text: Raw comment text with delimiters.

    Returns:
        Cleaned comment text.
    """
    stripped = comment_text.strip()
    if stripped.startswith("//"):
        stripped = stripped[2:]
    elif stripped.startswith("/*"):
        stripped = stripped[2:]
        if stripped.endswith("*/"):
            stripped = stripped[:-2]
    return stripped.strip()


def _is_trailing_comment(comment: Node) -> bool:
    """Check whether a comment trails a declaration on the same line."""
    previous = comment.prev_sibling
    while previous is not None and previous.type in _TERMINATOR_TOKENS:
        previous = previous.prev_sibling
    if previous is None or previous.type == COMMENT_NODE:
        return False
    return previous.end_point.row == comment.start_point.row


def get_leading_comments(node: Node) -> Tuple[str, ...]:
    """Collect the comment block directly above a declaration node.

    Walks backward through siblings while they are comments on consecutive
    lines. A blank line, or a comment that trails the previous declaration
    on its own line, ends the block.

    Args:
        node: The declaration node to find comments for.

    Returns:
        Cleaned comment lines in source order.
    """
    comments: List[str] = []
    sibling = node.prev_named_sibling
    expected_row = node.start_point.row

    while sibling is not None and sibling.type == COMMENT_NODE:
        if expected_row - sibling.end_point.row > 1:
            break
        if _is_trailing_comment(sibling):
            break
        comments.append(clean_comment(node_text(sibling)))
        expected_row = sibling.start_point.row
        sibling = sibling.prev_named_sibling

    comments.reverse()
    return tuple(comments)


def _comment_anchor(spec: Node) -> Node:
    """Return the node whose leading comments document a type spec.

    For an ungrouped ``type X struct{}`` the comment sits above the ``type``
    keyword, i.e. before the enclosing declaration.
    """
    parent = spec.parent
    if parent is None or parent.type != TYPE_DECLARATION_NODE:
        return spec
    if any(child.type == "(" for child in parent.children):
        return spec
    return parent


def extract_package_name(root: Node) -> str:
    """Return the package name declared by a source file, or an empty string."""
    for child in root.named_children:
        if child.type != PACKAGE_CLAUSE_NODE:
            continue
        for ident in child.named_children:
            if ident.type == PACKAGE_IDENTIFIER_NODE:
                return node_text(ident)
    return ""


def _unwrap_parentheses(type_node: Node) -> Node:
    while type_node.type == PARENTHESIZED_TYPE_NODE:
        inner = next(
            (c for c in type_node.named_children if c.type != COMMENT_NODE), None
        )
        if inner is None:
            break
        type_node = inner
    return type_node


def _iter_nodes(node: Node, node_types: Set[str]) -> Iterator[Node]:
    """Yield every descendant (and the node itself) of the given types in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in node_types:
            yield current
        stack.extend(reversed(current.named_children))


def collect_aliases(root: Union[Tree, Node]) -> Dict[str, AliasInfo]:
    """Collect identifier aliases (``type MyEnum string``) declared in a file.

    Args:
        root: Parsed tree or its root node.

    Returns:
        Mapping of alias name to AliasInfo. The underlying type is recorded
        only when it is a builtin primitive.
    """
    if isinstance(root, Tree):
        root = root.root_node

    aliases: Dict[str, AliasInfo] = {}
    for spec in _iter_nodes(root, TYPE_SPEC_NODES):
        name_node = spec.child_by_field_name("name")
        type_node = spec.child_by_field_name("type")
        if name_node is None or type_node is None:
            continue
        type_node = _unwrap_parentheses(type_node)
        if type_node.type != TYPE_IDENTIFIER_NODE:
            continue
        aliases[node_text(name_node)] = AliasInfo(
            underlying=simple_type(node_text(type_node)),
        )
    return aliases


def parse_field(
    node: Node,
    aliases: Optional[Mapping[str, AliasInfo]] = None,
    name_tag_key: str = DEFAULT_NAME_TAG_KEY,
) -> List[FieldDef]:
    """Build the field definitions of one ``field_declaration`` node.

    ``A, B int`` declares two fields sharing type and tag; an embedded field
    yields a single composition field with an empty name. A field tagged
    with the skip marker yields nothing.

    Raises:
        InvalidTagEntry: If the tag cannot be parsed.
        UnsupportedTypeExpression: If the field type cannot be classified.
    """
    names = [node_text(n) for n in node.children_by_field_name("name") if n.is_named]
    label = names[0] if names else "<embedded>"

    tag_node = node.child_by_field_name("tag")
    raw_tag = node_text(tag_node) if tag_node is not None else None
    try:
        tag = parse_tag(raw_tag, name_tag_key)
    except InvalidTagEntry as exc:
        raise InvalidTagEntry(f"failed to parse field {label!r} tags: {exc}") from exc

    if tag.skip:
        logger.debug("Skipping field %s marked %s:\"-\"", label, name_tag_key)
        return []

    type_node = node.child_by_field_name("type")
    if type_node is None:
        raise UnsupportedTypeExpression(f"field {label!r} has no type expression")
    try:
        field_type = classify_type(type_node, aliases)
    except UnsupportedTypeExpression as exc:
        raise UnsupportedTypeExpression(f"failed to parse field {label!r} type: {exc}") from exc

    # Embedded pointer: `*Dep` keeps the star as a bare token of the field.
    if not names and any(child.type == "*" for child in node.children):
        field_type = PointerType(inner_type=field_type)

    comments = get_leading_comments(node)
    return [
        FieldDef(
            name=name,
            type=field_type,
            serialized_name=tag.serialized_name,
            nullable=tag.omit_if_empty or tag.nullable,
            comments=comments,
            all_tags=tag.all_entries,
            is_composition_field=(name == ""),
        )
        for name in (names or [""])
    ]


def build_struct_def(
    name: str,
    struct_node: Node,
    comments: Tuple[str, ...] = (),
    aliases: Optional[Mapping[str, AliasInfo]] = None,
    name_tag_key: str = DEFAULT_NAME_TAG_KEY,
) -> StructDef:
    """Assemble a StructDef from a ``struct_type`` node.

    Raises:
        ExtractionError: If any field fails; the struct name is added to the message.
    """
    fields: List[FieldDef] = []
    for body in struct_node.named_children:
        if body.type != FIELD_DECLARATION_LIST_NODE:
            continue
        for field_node in body.named_children:
            if field_node.type != FIELD_DECLARATION_NODE:
                continue
            try:
                fields.extend(parse_field(field_node, aliases, name_tag_key))
            except ExtractionError as exc:
                raise type(exc)(f"failed to parse struct {name}: {exc}") from exc

    return StructDef(name=name, fields=tuple(fields), comments=comments)


def visit_type_spec(
    node: Node,
    aliases: Optional[Mapping[str, AliasInfo]] = None,
    name_tag_key: str = DEFAULT_NAME_TAG_KEY,
) -> Optional[StructDef]:
    """Process a ``type_spec``/``type_alias`` node.

    Returns:
        A StructDef for struct declarations, None for skipped alias shapes.

    Raises:
        UnsupportedDeclarationShape: For any other underlying shape.
    """
    name_node = node.child_by_field_name("name")
    type_node = node.child_by_field_name("type")
    name = node_text(name_node) if name_node is not None else ""
    line = node.start_point.row + 1

    if type_node is None:
        raise UnsupportedDeclarationShape(
            f"type declaration {name!r} at line {line} has no underlying type"
        )
    type_node = _unwrap_parentheses(type_node)

    if type_node.type == STRUCT_TYPE_NODE:
        comments = get_leading_comments(_comment_anchor(node))
        return build_struct_def(name, type_node, comments, aliases, name_tag_key)

    if type_node.type in SKIPPED_DECLARATION_SHAPES:
        logger.debug("Skipping %s declaration %s at line %d", type_node.type, name, line)
        return None

    raise UnsupportedDeclarationShape(
        f"unexpected type for type declaration {name!r} at line {line}: "
        f"{type_node.type} ({node_text(type_node)!r})"
    )


def visit_value_spec(
    node: Node,
    aliases: Optional[Mapping[str, AliasInfo]] = None,
) -> Optional[ConstantDef]:
    """Process a ``const_spec``/``var_spec`` node.

    Only the first name bound to a literal first initializer is captured.
    Computed values, ``iota`` and specs without an initializer are skipped.
    """
    names = [n for n in node.children_by_field_name("name") if n.is_named]
    value_list = node.child_by_field_name("value")
    if not names or value_list is None:
        return None

    values = [c for c in value_list.named_children if c.type != COMMENT_NODE]
    if not values or values[0].type not in LITERAL_NODES:
        logger.debug(
            "Skipping non-literal value declaration at line %d", node.start_point.row + 1
        )
        return None

    const_type = None
    type_node = node.child_by_field_name("type")
    if type_node is not None:
        try:
            const_type = classify_type(type_node, aliases)
        except UnsupportedTypeExpression as exc:
            logger.debug("Leaving constant %s untyped: %s", node_text(names[0]), exc)

    return ConstantDef(
        name=node_text(names[0]),
        value=remove_quotes(node_text(values[0])),
        type=const_type,
    )


@dataclass
class _WalkState:
    """Per-file accumulator owned by a single walk."""

    aliases: Mapping[str, AliasInfo]
    name_tag_key: str
    package_name: str = ""
    structs: List[StructDef] = field(default_factory=list)
    constants: List[ConstantDef] = field(default_factory=list)


def _visit(node: Node, state: _WalkState) -> bool:
    """Dispatch on node kind. Returns True when children must be skipped."""
    if node.type == SOURCE_FILE_NODE:
        state.package_name = extract_package_name(node)
        return False

    if node.type in TYPE_SPEC_NODES:
        struct_def = visit_type_spec(node, state.aliases, state.name_tag_key)
        if struct_def is not None:
            state.structs.append(struct_def)
        return True

    if node.type in VALUE_SPEC_NODES:
        constant = visit_value_spec(node, state.aliases)
        if constant is not None:
            state.constants.append(constant)
        return False

    return False


def _walk(root: Node, state: _WalkState) -> None:
    """Pre-order walk with an explicit stack; expression trees can be very deep."""
    stack = [root]
    while stack:
        node = stack.pop()
        if _visit(node, state):
            continue
        stack.extend(reversed(node.named_children))


def extract_parsed_file(
    tree: Union[Tree, Node],
    known_aliases: Optional[Mapping[str, AliasInfo]] = None,
    name_tag_key: str = DEFAULT_NAME_TAG_KEY,
) -> ParsedFile:
    """Extract all structs and constants from a parsed Go file.

    This is the main entry point for declaration extraction.

    Args:
        tree: The parsed AST tree, or its root node.
        known_aliases: Aliases declared in other files. Aliases declared in
            this file take precedence.
        name_tag_key: Tag key carrying the serialized field name.

    Returns:
        The ParsedFile snapshot with structs and constants in source order.

    Raises:
        ExtractionError: If any declaration cannot be processed. No partial
            result is returned.
    """
    root = tree.root_node if isinstance(tree, Tree) else tree

    aliases: Dict[str, AliasInfo] = dict(known_aliases or {})
    aliases.update(collect_aliases(root))

    state = _WalkState(aliases=aliases, name_tag_key=name_tag_key)
    _walk(root, state)

    logger.debug(
        "Extracted %d structs and %d constants from package %s",
        len(state.structs),
        len(state.constants),
        state.package_name or "<none>",
    )
    return ParsedFile(
        structs=tuple(state.structs),
        constants=tuple(state.constants),
        package_name=state.package_name,
    )
