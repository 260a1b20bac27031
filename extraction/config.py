"""
Configuration constants for Go declaration extraction.

Defines the tree-sitter-go node type strings used by the walker, the type
classifier and the literal/comment helpers.
"""

from typing import FrozenSet, Set

from core.loader_config import DEFAULT_NAME_TAG_KEY

# File root node type
SOURCE_FILE_NODE: str = "source_file"

# Package clause and its identifier child
PACKAGE_CLAUSE_NODE: str = "package_clause"
PACKAGE_IDENTIFIER_NODE: str = "package_identifier"

# Type declaration wrapper (`type X ...` or `type ( ... )`)
TYPE_DECLARATION_NODE: str = "type_declaration"

# Type declaration specs (`type X struct{}` and `type X = Y`)
TYPE_SPEC_NODES: Set[str] = {
    "type_spec",
    "type_alias",
}

# Value declaration specs (`const X = 1`, `var X = 1`)
VALUE_SPEC_NODES: Set[str] = {
    "const_spec",
    "var_spec",
}

# Underlying shapes of a type declaration
STRUCT_TYPE_NODE: str = "struct_type"
FIELD_DECLARATION_LIST_NODE: str = "field_declaration_list"
FIELD_DECLARATION_NODE: str = "field_declaration"

# Type declarations with these underlying shapes are skipped silently
SKIPPED_DECLARATION_SHAPES: Set[str] = {
    "array_type",
    "slice_type",
    "type_identifier",
    "interface_type",
}

# Type expression node types
TYPE_IDENTIFIER_NODE: str = "type_identifier"
QUALIFIED_TYPE_NODE: str = "qualified_type"
INTERFACE_TYPE_NODE: str = "interface_type"
POINTER_TYPE_NODE: str = "pointer_type"
MAP_TYPE_NODE: str = "map_type"
PARENTHESIZED_TYPE_NODE: str = "parenthesized_type"
ARRAY_TYPE_NODES: Set[str] = {
    "array_type",
    "slice_type",
}

# Builtin primitive type names classified as SimpleType
PRIMITIVE_TYPE_NAMES: FrozenSet[str] = frozenset({
    "string",
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "float32",
    "float64",
    "bool",
    "byte",
})

# Predeclared identifiers meaning `interface{}`
INTERFACE_ALIAS_NAMES: FrozenSet[str] = frozenset({"any"})

# Literal expression node types captured as constant values
LITERAL_NODES: Set[str] = {
    "interpreted_string_literal",
    "raw_string_literal",
    "int_literal",
    "float_literal",
    "imaginary_literal",
    "rune_literal",
}

# Comment node type (includes // and /* */)
COMMENT_NODE: str = "comment"

# Characters that may wrap a literal or a tag
QUOTE_CHARS: str = "\"`'"

# Go source file extension and test file suffix
GO_EXTENSION: str = ".go"
GO_TEST_SUFFIX: str = "_test.go"

# Tag semantics; DEFAULT_NAME_TAG_KEY is shared with the loader config
NULLABLE_TAG_KEY: str = "nullable"
OMITEMPTY_OPTION: str = "omitempty"
SKIP_FIELD_MARKER: str = "-"

