"""
Unit tests for traversal.py

Tests the tree walker, struct/field assembly, comment association and
constant extraction.
"""

import unittest
from pathlib import Path

from extraction.errors import (
    InvalidTagEntry,
    UnsupportedDeclarationShape,
    UnsupportedTypeExpression,
)
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
)
from extraction.parser import parse_bytes, parse_file
from extraction.traversal import (
    clean_comment,
    collect_aliases,
    extract_parsed_file,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _extract(source: bytes, **kwargs) -> ParsedFile:
    return extract_parsed_file(parse_bytes(source), **kwargs)


def _extract_fixture(name: str, **kwargs) -> ParsedFile:
    tree, _ = parse_file(str(FIXTURES_DIR / name))
    return extract_parsed_file(tree, **kwargs)


class TestCleanComment(unittest.TestCase):
    """Test comment marker stripping."""

    def test_line_comment(self):
        self.assertEqual(clean_comment("// comment here"), "comment here")

    def test_line_comment_without_space(self):
        self.assertEqual(clean_comment("//tight"), "tight")

    def test_block_comment(self):
        self.assertEqual(clean_comment("/* block doc */"), "block doc")

    def test_empty_comment(self):
        self.assertEqual(clean_comment("//"), "")


class TestStructWithPrimitives(unittest.TestCase):
    """Test the primitives fixture end to end."""

    @classmethod
    def setUpClass(cls):
        cls.parsed = _extract_fixture("struct_with_primitives.go")

    def test_package(self):
        self.assertEqual(self.parsed.package_name, "fixtures")
        self.assertEqual(self.parsed.constants, ())

    def test_struct(self):
        self.assertEqual(len(self.parsed.structs), 1)
        struct = self.parsed.structs[0]
        self.assertEqual(struct.name, "Primitives")
        self.assertEqual(struct.comments, ("Primitives covers every builtin field type.",))

    def test_fields(self):
        expected = [
            FieldDef(
                name="Int",
                type=SimpleType(name="int"),
                serialized_name="int",
                comments=("comment here",),
                all_tags={"json": "int"},
            ),
            FieldDef(
                name="Int64",
                type=SimpleType(name="int64"),
                serialized_name="int_64",
                all_tags={"json": "int_64"},
            ),
            FieldDef(
                name="Float32",
                type=SimpleType(name="float32"),
                serialized_name="float_32",
                all_tags={"json": "float_32"},
            ),
            FieldDef(
                name="Float64",
                type=SimpleType(name="float64"),
                serialized_name="float_64",
                all_tags={"json": "float_64"},
            ),
            FieldDef(
                name="Bool",
                type=SimpleType(name="bool"),
                serialized_name="bool",
                all_tags={"json": "bool"},
            ),
            FieldDef(
                name="String",
                type=SimpleType(name="string"),
                serialized_name="string",
                all_tags={"json": "string"},
            ),
            FieldDef(
                name="Bytes",
                type=ArrayType(inner_type=SimpleType(name="byte")),
                serialized_name="bytes",
                all_tags={"json": "bytes"},
            ),
            FieldDef(
                name="Map",
                type=MapType(
                    key_type=SimpleType(name="string"),
                    value_type=SimpleType(name="string"),
                ),
                serialized_name="map",
                all_tags={"json": "map"},
            ),
            FieldDef(
                name="MapInterface",
                type=MapType(
                    key_type=SimpleType(name="string"),
                    value_type=InterfaceValueType(),
                ),
                serialized_name="map_interface",
                all_tags={"json": "map_interface"},
            ),
            FieldDef(
                name="Slice",
                type=ArrayType(inner_type=SimpleType(name="int")),
                serialized_name="slice",
                all_tags={"json": "slice"},
            ),
            FieldDef(
                name="Omitempty",
                type=SimpleType(name="int"),
                serialized_name="omitempty",
                nullable=True,
                all_tags={"json": "omitempty,omitempty"},
            ),
            FieldDef(
                name="Required",
                type=SimpleType(name="int"),
                serialized_name="some_int",
                all_tags={"json": "some_int,required"},
            ),
            FieldDef(
                name="Ptr",
                type=PointerType(inner_type=SimpleType(name="int")),
                serialized_name="ptr",
                all_tags={"json": "ptr"},
            ),
            FieldDef(
                name="NullableBool",
                type=SimpleType(name="bool"),
                serialized_name="nullable_bool",
                nullable=True,
                all_tags={"json": "nullable_bool", "nullable": "true"},
            ),
            FieldDef(
                name="NullableBoolOmitempty",
                type=SimpleType(name="bool"),
                serialized_name="nullable_bool_omitempty",
                nullable=True,
                all_tags={
                    "json": "nullable_bool_omitempty,omitempty",
                    "nullable": "true",
                },
            ),
        ]
        self.assertEqual(list(self.parsed.structs[0].fields), expected)

    def test_skipped_field_absent(self):
        names = [f.name for f in self.parsed.structs[0].fields]
        self.assertNotIn("Interface", names)

    def test_deterministic(self):
        self.assertEqual(_extract_fixture("struct_with_primitives.go"), self.parsed)


class TestStructWithDep(unittest.TestCase):
    """Test composition fields, aliases and skipped alias declarations."""

    @classmethod
    def setUpClass(cls):
        cls.parsed = _extract_fixture("struct_with_dep.go")

    def test_struct_order(self):
        self.assertEqual([s.name for s in self.parsed.structs], ["Dep", "Dep2", "Struct"])

    def test_dep_structs(self):
        self.assertEqual(
            self.parsed.structs[0],
            StructDef(
                name="Dep",
                fields=(
                    FieldDef(
                        name="Int",
                        type=SimpleType(name="int"),
                        serialized_name="int",
                        all_tags={"json": "int"},
                    ),
                ),
            ),
        )

    def test_struct_fields(self):
        string_alias = AliasInfo(underlying=SimpleType(name="string"))
        self.assertEqual(
            self.parsed.structs[2].fields,
            (
                FieldDef(
                    name="Dep",
                    type=CustomType(name="Dep"),
                    serialized_name="dep",
                    all_tags={"json": "dep"},
                ),
                FieldDef(
                    name="",
                    type=CustomType(name="Dep2"),
                    is_composition_field=True,
                ),
                FieldDef(name="Constant", type=CustomType(name="MyEnum")),
                FieldDef(
                    name="Constant2",
                    type=CustomType(name="MyEnum2", alias_info=string_alias),
                ),
            ),
        )

    def test_typed_constants(self):
        enum_type = CustomType(
            name="MyEnum2", alias_info=AliasInfo(underlying=SimpleType(name="string"))
        )
        self.assertEqual(
            self.parsed.constants,
            (
                ConstantDef(name="MyEnum21", value="1", type=enum_type),
                ConstantDef(name="MyEnum22", value="2", type=enum_type),
            ),
        )

    def test_known_aliases_from_other_files(self):
        parsed = _extract_fixture(
            "struct_with_dep.go",
            known_aliases={"MyEnum": AliasInfo(underlying=SimpleType(name="string"))},
        )
        constant_field = parsed.structs[2].fields[2]
        self.assertEqual(
            constant_field.type.alias_info, AliasInfo(underlying=SimpleType(name="string"))
        )


class TestConstants(unittest.TestCase):
    """Test value declaration handling."""

    @classmethod
    def setUpClass(cls):
        cls.parsed = _extract_fixture("constants.go")

    def test_constants(self):
        enum_type = CustomType(
            name="MyEnum", alias_info=AliasInfo(underlying=SimpleType(name="string"))
        )
        self.assertEqual(
            self.parsed.constants,
            (
                ConstantDef(name="PublicConst", value="public"),
                ConstantDef(name="privateConst", value="private"),
                ConstantDef(name="MyEnumValue1", value="enum-1", type=enum_type),
                ConstantDef(name="MyEnumValue2", value="enum-2", type=enum_type),
                ConstantDef(name="Answer", value="42"),
                ConstantDef(name="Raw", value="raw"),
                ConstantDef(name="First", value="1"),
            ),
        )

    def test_no_structs(self):
        self.assertEqual(self.parsed.structs, ())
        self.assertEqual(self.parsed.package_name, "fixtures")


class TestNestedTypes(unittest.TestCase):
    """Test grouped declarations, embedded pointers and comment edge cases."""

    @classmethod
    def setUpClass(cls):
        cls.parsed = _extract_fixture("nested_types.go")

    def _event_field(self, name):
        event = self.parsed.structs[1]
        return next(f for f in event.fields if f.name == name)

    def test_struct_order_includes_local_types(self):
        self.assertEqual(
            [s.name for s in self.parsed.structs], ["Point", "Event", "local"]
        )

    def test_grouped_declaration_comment(self):
        self.assertEqual(self.parsed.structs[0].comments, ("Point is a 2D point.",))

    def test_multiple_names_share_type_and_tag(self):
        point = self.parsed.structs[0]
        self.assertEqual([f.name for f in point.fields], ["X", "Y"])
        for field in point.fields:
            self.assertEqual(field.type, SimpleType(name="float64"))
            self.assertEqual(field.serialized_name, "xy")

    def test_embedded_fields(self):
        event = self.parsed.structs[1]
        embedded = [f for f in event.fields if f.is_composition_field]
        self.assertEqual(len(embedded), 2)
        self.assertEqual(embedded[0].type, CustomType(name="Time", expr="time.Time"))
        self.assertEqual(embedded[0].type.expr, "time.Time")
        self.assertEqual(embedded[1].type, PointerType(inner_type=CustomType(name="Dep")))
        for field in embedded:
            self.assertEqual(field.name, "")

    def test_block_comment(self):
        self.assertEqual(self._event_field("Created").comments, ("block doc",))

    def test_nested_map(self):
        field = self._event_field("Index")
        self.assertEqual(
            field.type,
            MapType(
                key_type=SimpleType(name="string"),
                value_type=ArrayType(
                    inner_type=PointerType(inner_type=SimpleType(name="int"))
                ),
            ),
        )
        self.assertTrue(field.nullable)

    def test_array_of_slice(self):
        self.assertEqual(
            self._event_field("Grid").type,
            ArrayType(inner_type=ArrayType(inner_type=CustomType(name="Point"))),
        )

    def test_any(self):
        self.assertEqual(self._event_field("Any").type, InterfaceValueType())

    def test_type_alias_in_map_key_and_duplicate_tag(self):
        field = self._event_field("Matrix")
        self.assertEqual(
            field.type,
            MapType(
                key_type=CustomType(
                    name="Label", alias_info=AliasInfo(underlying=SimpleType(name="string"))
                ),
                value_type=PointerType(
                    inner_type=ArrayType(inner_type=SimpleType(name="float32"))
                ),
            ),
        )
        self.assertEqual(field.serialized_name, "matrix_last")
        self.assertEqual(field.all_tags, {"json": "matrix_last", "db": "matrix_col"})

    def test_trailing_comment_not_attached(self):
        self.assertEqual(self._event_field("Tail").comments, ())
        self.assertEqual(self._event_field("Next").comments, ())

    def test_struct_without_comment(self):
        self.assertEqual(self.parsed.structs[1].comments, ())


class TestWalkerScenarios(unittest.TestCase):
    """Test walker dispatch rules on inline sources."""

    def test_composition_fields_have_empty_name(self):
        source = b"""package p

type A struct {
	Dep2
	Named int `json:"named"`
}
"""
        parsed = _extract(source)
        for field in parsed.structs[0].fields:
            self.assertEqual(field.is_composition_field, field.name == "")
        self.assertEqual(
            parsed.structs[0].fields[0],
            FieldDef(name="", type=CustomType(name="Dep2"), is_composition_field=True),
        )

    def test_skipped_alias_shapes(self):
        source = b"""package p

type S []int
type F [3]string
type E string
type A = int
type I interface {
	Do()
}
"""
        parsed = _extract(source)
        self.assertEqual(parsed.structs, ())
        self.assertEqual(parsed.package_name, "p")

    def test_function_type_declaration_is_fatal(self):
        source = b"package p\n\ntype Handler func(int) error\n"
        with self.assertRaises(UnsupportedDeclarationShape):
            _extract(source)

    def test_map_type_declaration_is_fatal(self):
        source = b"package p\n\ntype Index map[string]int\n"
        with self.assertRaises(UnsupportedDeclarationShape):
            _extract(source)

    def test_unsupported_field_type_aborts_file(self):
        source = b"""package p

type Good struct {
	A int
}

type Bad struct {
	Fn func()
}
"""
        with self.assertRaises(UnsupportedTypeExpression) as ctx:
            _extract(source)
        self.assertIn("Bad", str(ctx.exception))
        self.assertIn("Fn", str(ctx.exception))

    def test_invalid_tag_aborts_file(self):
        source = b"package p\n\ntype T struct {\n\tA int `json`\n}\n"
        with self.assertRaises(InvalidTagEntry) as ctx:
            _extract(source)
        self.assertIn("T", str(ctx.exception))

    def test_skipped_field_is_not_classified(self):
        """A field excluded by its tag never reaches the classifier."""
        source = b"package p\n\ntype T struct {\n\tFn func() `json:\"-\"`\n\tA int\n}\n"
        parsed = _extract(source)
        self.assertEqual([f.name for f in parsed.structs[0].fields], ["A"])

    def test_nullable_derivation(self):
        source = b"""package p

type T struct {
	Plain  int `json:"plain"`
	Omit   int `json:"omit,omitempty"`
	Null   int `json:"null" nullable:"true"`
	Both   int `json:"both,omitempty" nullable:"true"`
	NoTag  int
}
"""
        fields = _extract(source).structs[0].fields
        self.assertEqual(
            [(f.name, f.nullable) for f in fields],
            [
                ("Plain", False),
                ("Omit", True),
                ("Null", True),
                ("Both", True),
                ("NoTag", False),
            ],
        )

    def test_custom_name_tag_key(self):
        source = b"package p\n\ntype T struct {\n\tA int `yaml:\"a_yaml\" json:\"a_json\"`\n}\n"
        field = _extract(source, name_tag_key="yaml").structs[0].fields[0]
        self.assertEqual(field.serialized_name, "a_yaml")

    def test_comment_separated_by_blank_line(self):
        source = b"""package p

// Detached comment

type T struct {
	A int
}
"""
        self.assertEqual(_extract(source).structs[0].comments, ())

    def test_multi_line_doc(self):
        source = b"""package p

// T is documented
// over two lines.
type T struct {
	A int
}
"""
        self.assertEqual(
            _extract(source).structs[0].comments,
            ("T is documented", "over two lines."),
        )

    def test_non_literal_values_skipped(self):
        source = b"""package p

const (
	Zero = iota
	One
)

var Sum = 1 + 2
var Name string
const Rune = 'x'
"""
        parsed = _extract(source)
        self.assertEqual(parsed.constants, (ConstantDef(name="Rune", value="x"),))

    def test_empty_source(self):
        parsed = _extract(b"package empty\n")
        self.assertEqual(parsed, ParsedFile(package_name="empty"))

    def test_accepts_root_node(self):
        tree = parse_bytes(b"package p\n\nconst X = \"x\"\n")
        self.assertEqual(
            extract_parsed_file(tree.root_node).constants,
            (ConstantDef(name="X", value="x"),),
        )


class TestCollectAliases(unittest.TestCase):
    """Test alias collection."""

    def test_collect(self):
        source = b"""package p

type MyEnum string
type Other Dep
type Label = int
type S struct{}
type L []int
"""
        aliases = collect_aliases(parse_bytes(source))
        self.assertEqual(
            aliases,
            {
                "MyEnum": AliasInfo(underlying=SimpleType(name="string")),
                "Other": AliasInfo(underlying=None),
                "Label": AliasInfo(underlying=SimpleType(name="int")),
            },
        )


class TestParsedFileSerialization(unittest.TestCase):
    """Test to_dict output."""

    def test_to_dict(self):
        parsed = _extract(
            b"package p\n\n// T doc\ntype T struct {\n\tA *int `json:\"a,omitempty\"`\n}\n"
            b"\nconst C = \"c\"\n"
        )
        self.assertEqual(
            parsed.to_dict(),
            {
                "package_name": "p",
                "structs": [
                    {
                        "name": "T",
                        "comments": ["T doc"],
                        "fields": [
                            {
                                "name": "A",
                                "type": {
                                    "kind": "pointer",
                                    "inner_type": {"kind": "simple", "name": "int"},
                                },
                                "serialized_name": "a",
                                "nullable": True,
                                "comments": [],
                                "all_tags": {"json": "a,omitempty"},
                                "is_composition_field": False,
                            }
                        ],
                    }
                ],
                "constants": [{"name": "C", "value": "c", "type": None}],
            },
        )


class TestParsedFileSnapshot(unittest.TestCase):
    """Test that extraction results cannot be changed after the fact."""

    SOURCE = b"package p\n\ntype T struct {\n\tA int `json:\"a\" db:\"a_col\"`\n}\n"

    def test_field_tags_are_read_only(self):
        parsed = _extract(self.SOURCE)
        field = parsed.structs[0].fields[0]
        with self.assertRaises(TypeError):
            field.all_tags["db"] = "changed"
        self.assertEqual(parsed.structs[0].fields[0].all_tags["db"], "a_col")

    def test_field_tags_do_not_share_the_input_mapping(self):
        tags = {"json": "a"}
        field = FieldDef(name="A", type=SimpleType(name="int"), all_tags=tags)
        tags["json"] = "b"
        self.assertEqual(field.all_tags, {"json": "a"})

    def test_results_are_hashable(self):
        first = _extract(self.SOURCE)
        second = _extract(self.SOURCE)
        self.assertEqual(hash(first), hash(second))
        self.assertEqual(len({first, second}), 1)


class TestDeepTrees(unittest.TestCase):
    """Test files whose syntax trees are far deeper than the declarations."""

    def test_long_concatenation_before_struct(self):
        terms = " + ".join(['"a"'] * 1500)
        source = (
            f"package p\n\nvar Big = {terms}\n\n"
            "type S struct {\n\tA int `json:\"a\"`\n}\n\nconst After = \"x\"\n"
        ).encode("utf-8")

        parsed = _extract(source)

        self.assertEqual([s.name for s in parsed.structs], ["S"])
        self.assertEqual(parsed.structs[0].fields[0].serialized_name, "a")
        self.assertEqual(parsed.constants, (ConstantDef(name="After", value="x"),))
        self.assertEqual(collect_aliases(parse_bytes(source)), {})


if __name__ == "__main__":
    unittest.main()
