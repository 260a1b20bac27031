"""
Data models for extracted Go declarations.

``Type`` is a closed union of frozen dataclasses. Each variant carries a
``kind`` discriminator and serializes itself with ``to_dict``.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

from extraction.config import SKIP_FIELD_MARKER


@dataclass(frozen=True)
class SimpleType:
    """A builtin primitive type such as ``int64`` or ``string``."""

    kind: ClassVar[str] = "simple"

    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "name": self.name}


@dataclass(frozen=True)
class ArrayType:
    """An array or slice; the length/capacity is not modeled."""

    kind: ClassVar[str] = "array"

    inner_type: "Type"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "inner_type": self.inner_type.to_dict()}


@dataclass(frozen=True)
class MapType:
    """A map with arbitrary key and value types."""

    kind: ClassVar[str] = "map"

    key_type: "Type"
    value_type: "Type"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "key_type": self.key_type.to_dict(),
            "value_type": self.value_type.to_dict(),
        }


@dataclass(frozen=True)
class PointerType:
    """A pointer to another type. Nullability comes from tags, not from here."""

    kind: ClassVar[str] = "pointer"

    inner_type: "Type"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "inner_type": self.inner_type.to_dict()}


@dataclass(frozen=True)
class AliasInfo:
    """Marks a custom name as a simple alias of another type.

    Attributes:
        underlying: The aliased type when it is a primitive, otherwise None.
    """

    underlying: Optional[SimpleType] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "underlying": self.underlying.to_dict() if self.underlying else None,
        }


@dataclass(frozen=True)
class CustomType:
    """A reference to a named type declared elsewhere; never resolved.

    Attributes:
        name: Type name. For qualified references (``pkg.Name``) the final segment.
        alias_info: Set when the name is known to be a simple alias.
        expr: Raw source text of a qualified reference (``pkg.Name``). Two
            references to the same name in different packages are not equal.
    """

    kind: ClassVar[str] = "custom"

    name: str
    alias_info: Optional[AliasInfo] = None
    expr: Optional[str] = None

    @property
    def package(self) -> Optional[str]:
        """Package qualifier of the reference, if any."""
        if self.expr and "." in self.expr:
            return self.expr.rsplit(".", 1)[0]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "alias_info": self.alias_info.to_dict() if self.alias_info else None,
            "expr": self.expr,
        }


@dataclass(frozen=True)
class InterfaceValueType:
    """The fully dynamic ``interface{}`` type."""

    kind: ClassVar[str] = "interface"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind}


Type = Union[SimpleType, ArrayType, MapType, PointerType, CustomType, InterfaceValueType]


def _frozen_map(entries: Mapping[str, str]) -> Mapping[str, str]:
    """Return a read-only copy of a tag mapping."""
    return MappingProxyType(dict(entries))


@dataclass(frozen=True)
class Tag:
    """Parsed field tag.

    Attributes:
        serialized_name: First component of the name-mapping tag (``json`` by default).
        omit_if_empty: Whether the name-mapping tag carries ``omitempty``.
        nullable: Whether the tag carries ``nullable:"true"``.
        all_entries: Read-only key/value pairs of the raw tag.
    """

    serialized_name: str = ""
    omit_if_empty: bool = False
    nullable: bool = False
    all_entries: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "all_entries", _frozen_map(self.all_entries))

    @property
    def skip(self) -> bool:
        """True when the field is excluded from serialization (``json:"-"``)."""
        return self.serialized_name == SKIP_FIELD_MARKER


@dataclass(frozen=True)
class FieldDef:
    """A single struct field.

    Attributes:
        name: Declared identifier, empty for embedded (composition) fields.
        type: Classified field type.
        serialized_name: Name from the name-mapping tag.
        nullable: omitempty or ``nullable:"true"``.
        comments: Leading comment lines with markers stripped.
        all_tags: Read-only key/value pairs of the field tag.
        is_composition_field: True iff the field is embedded.
    """

    name: str
    type: Type
    serialized_name: str = ""
    nullable: bool = False
    comments: Tuple[str, ...] = ()
    all_tags: Mapping[str, str] = field(default_factory=dict, hash=False)
    is_composition_field: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "all_tags", _frozen_map(self.all_tags))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.to_dict(),
            "serialized_name": self.serialized_name,
            "nullable": self.nullable,
            "comments": list(self.comments),
            "all_tags": dict(self.all_tags),
            "is_composition_field": self.is_composition_field,
        }


@dataclass(frozen=True)
class StructDef:
    """A named struct declaration with its fields in declaration order."""

    name: str
    fields: Tuple[FieldDef, ...] = ()
    comments: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
            "comments": list(self.comments),
        }


@dataclass(frozen=True)
class ConstantDef:
    """A constant bound to a literal value.

    Attributes:
        name: First declared name of the declaration.
        value: Literal text with surrounding quotes removed.
        type: Declared type of the constant, if spelled out.
    """

    name: str
    value: str
    type: Optional[Type] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "type": self.type.to_dict() if self.type else None,
        }


@dataclass(frozen=True)
class ParsedFile:
    """Everything extracted from one Go source file."""

    structs: Tuple[StructDef, ...] = ()
    constants: Tuple[ConstantDef, ...] = ()
    package_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert the parsed file to a dictionary suitable for JSON serialization.

        Returns:
            Dictionary representation of the parsed file.
        """
        return {
            "package_name": self.package_name,
            "structs": [s.to_dict() for s in self.structs],
            "constants": [c.to_dict() for c in self.constants],
        }
