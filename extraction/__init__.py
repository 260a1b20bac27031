"""
Declaration Extractor

Tree-sitter-based Go source parser and declaration extractor.
Extracts structs (fields, types, tags, comments) and literal constants.
"""

from extraction.models import (
    AliasInfo,
    ArrayType,
    ConstantDef,
    CustomType,
    FieldDef,
    InterfaceValueType,
    MapType,
    ParsedFile,
    PointerType,
    SimpleType,
    StructDef,
    Tag,
    Type,
)
from extraction.errors import (
    ExtractionError,
    InvalidTagEntry,
    SourceSyntaxError,
    UnsupportedDeclarationShape,
    UnsupportedTypeExpression,
)
from extraction.parser import create_parser, parse_file, parse_bytes, count_error_nodes
from extraction.tags import parse_tag, remove_quotes
from extraction.types import classify_type
from extraction.traversal import collect_aliases, extract_parsed_file
from extraction.extractor import (
    load,
    load_with_stats,
    parse_go_file,
    discover_go_files,
    is_valid_file,
    ExtractionStats,
)

__all__ = [
    # Data models
    "AliasInfo",
    "ArrayType",
    "ConstantDef",
    "CustomType",
    "FieldDef",
    "InterfaceValueType",
    "MapType",
    "ParsedFile",
    "PointerType",
    "SimpleType",
    "StructDef",
    "Tag",
    "Type",
    "ExtractionStats",
    # Errors
    "ExtractionError",
    "InvalidTagEntry",
    "SourceSyntaxError",
    "UnsupportedDeclarationShape",
    "UnsupportedTypeExpression",
    # Low-level parsing
    "create_parser",
    "parse_file",
    "parse_bytes",
    "count_error_nodes",
    # Mid-level extraction
    "parse_tag",
    "remove_quotes",
    "classify_type",
    "collect_aliases",
    "extract_parsed_file",
    # High-level orchestration
    "load",
    "load_with_stats",
    "parse_go_file",
    "discover_go_files",
    "is_valid_file",
]
