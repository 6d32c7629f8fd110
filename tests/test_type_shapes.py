"""Tests for composite type extraction and structural comparison."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typearch_guard.core.source import SourceFile
from typearch_guard.standards.type_shapes import (
    FieldDefinition,
    MatchKind,
    TypeDefinition,
    compare_types,
    extract_type_definitions,
    find_duplicates,
)


def extract(code: str, path: str = "src/types.ts") -> list[TypeDefinition]:
    return extract_type_definitions(SourceFile.from_text(Path(path), code), path)


def shape(name: str, file_path: str, *fields: str, line: int = 1) -> TypeDefinition:
    """Build a definition from ``"name:type"`` / ``"name?:type"`` strings."""
    parsed = []
    for text in fields:
        field_name, field_type = text.split(":", 1)
        optional = field_name.endswith("?")
        parsed.append(FieldDefinition(field_name.rstrip("?"), field_type, optional))
    return TypeDefinition(name=name, file_path=file_path, line=line, fields=tuple(parsed))


class TestExtraction:
    def test_interface_fields(self) -> None:
        code = "export interface User {\n  id: string;\n  name: string;\n  email?: string;\n}\n"
        (user,) = extract(code)
        assert user.name == "User"
        assert user.line == 1
        assert [f.signature for f in user.fields] == ["id:string", "name:string", "email?:string"]

    def test_brace_on_next_line(self) -> None:
        code = "const x = 1;\n\ntype Point =\n{\n  x: number;\n  y: number;\n};\n"
        (point,) = extract(code)
        assert point.name == "Point"
        assert point.line == 3

    def test_single_line_body(self) -> None:
        (pair,) = extract("export type Pair = { left: string; right: number };")
        assert [f.name for f in pair.fields] == ["left", "right"]

    def test_nested_object_members_do_not_leak(self) -> None:
        code = """export type Config = {
  name: string;
  db: {
    host: string;
    port: number;
  };
  debug?: boolean;
};
"""
        (config,) = extract(code)
        assert [f.name for f in config.fields] == ["name", "db", "debug"]
        assert config.fields[1].type == "{ host: string; port: number; }"
        assert config.fields[2].optional

    def test_multi_line_union_member(self) -> None:
        code = """export type Task = {
  status:
    | 'open'
    | 'closed';
  title: string;
};
"""
        (task,) = extract(code)
        assert task.fields[0] == FieldDefinition("status", "'open' | 'closed'", False)
        assert task.fields[1].name == "title"

    def test_whitespace_inside_types_is_collapsed(self) -> None:
        code = "export interface Stats {\n  counts:   Map<string,   number>;\n  total: number;\n}\n"
        (stats,) = extract(code)
        assert stats.fields[0].type == "Map<string, number>"

    def test_function_typed_members(self) -> None:
        code = "export interface Props {\n  onChange: (value: string) => void;\n  label: string;\n}\n"
        (props,) = extract(code)
        assert props.fields[0].type == "(value: string) => void"

    def test_generic_declarations(self) -> None:
        code = (
            "export interface Box<T extends Record<string, unknown>> {\n"
            "  value: T;\n  label: string;\n}\n"
            "export type Page<T> = {\n  items: T[];\n  total: number;\n};\n"
        )
        assert [d.name for d in extract(code)] == ["Box", "Page"]

    def test_non_object_declarations_are_skipped(self) -> None:
        code = (
            "export type Id = string | number;\n"
            "export type Admin = User & {\n  role: string;\n  level: number;\n};\n"
            "export interface Staff extends User {\n  team: string;\n  desk: number;\n}\n"
        )
        assert extract(code) == []

    def test_too_few_fields_are_discarded(self) -> None:
        assert extract("export type Only = { id: string };\nexport type Empty = {};\n") == []

    def test_methods_and_index_signatures_are_not_fields(self) -> None:
        code = (
            "export interface Repo {\n  save(): void;\n  [key: string]: unknown;\n"
            "  name: string;\n  size: number;\n}\n"
        )
        (repo,) = extract(code)
        assert [f.name for f in repo.fields] == ["name", "size"]

    def test_comments_in_body_are_ignored(self) -> None:
        code = """export interface Doc {
  /** The user's id */
  id: string;
  // don't forget the name
  name: string; // it's required
}
"""
        (doc,) = extract(code)
        assert [f.signature for f in doc.fields] == ["id:string", "name:string"]

    def test_unterminated_body_runs_to_end_of_file(self) -> None:
        (broken,) = extract("export interface Broken {\n  a: string;\n  b: number;\n")
        assert [f.name for f in broken.fields] == ["a", "b"]

    def test_declaration_marker_skips_one_declaration(self) -> None:
        code = (
            "import { x } from './x';\n"
            "// @type-duplicate-allowed\n"
            "export type A = { a: string; b: string };\n"
            "export type B = { a: string; b: string };\n"
        )
        assert [d.name for d in extract(code)] == ["B"]

    def test_header_marker_skips_the_file(self) -> None:
        code = (
            "// Legacy shapes, kept for the v1 API\n"
            "// @type-duplicate-allowed\n"
            "\n"
            "export type A = { a: string; b: string };\n"
        )
        assert extract(code) == []

    def test_display_path_is_recorded(self) -> None:
        (a,) = extract("type A = { a: string; b: string };", path="src/types/a.ts")
        assert a.file_path == "src/types/a.ts"
        assert a.location == "src/types/a.ts:1"


class TestCompareTypes:
    def test_exact_match_ignores_field_order(self) -> None:
        user = shape("User", "types/user.ts", "id:string", "name:string", "email:string")
        customer = shape("Customer", "types/customer.ts", "email:string", "id:string", "name:string")
        match = compare_types(user, customer)
        assert match.match_kind == MatchKind.EXACT
        assert match.type1.name == "Customer"
        assert "types/customer.ts:1" in match.suggestion
        assert "types/user.ts:1" in match.suggestion

    def test_subset_names_the_omitted_fields(self) -> None:
        small = shape("A", "types/a.ts", "id:string", "name:string")
        large = shape("B", "types/b.ts", "id:string", "name:string", "email:string")
        match = compare_types(small, large)
        assert match.match_kind == MatchKind.SUBSET
        assert (match.type1.name, match.type2.name) == ("A", "B")
        assert "type A = Omit<B, 'email'>" in match.suggestion

    def test_superset_when_the_first_type_is_larger(self) -> None:
        large = shape("Full", "types/a.ts", "id:string", "name:string", "age:number", "x:boolean")
        small = shape("Part", "types/b.ts", "id:string", "name:string")
        match = compare_types(small, large)
        assert match.match_kind == MatchKind.SUPERSET
        assert (match.type1.name, match.type2.name) == ("Part", "Full")
        assert "Omit<Full, 'age' | 'x'>" in match.suggestion

    def test_subset_requires_same_optionality(self) -> None:
        small = shape("A", "types/a.ts", "id:string", "name?:string")
        large = shape("B", "types/b.ts", "id:string", "name:string", "email:string")
        assert compare_types(small, large) is None

    def test_optional_variance(self) -> None:
        a = shape("A", "types/a.ts", "id:string", "name:string", "note?:string")
        b = shape("B", "types/b.ts", "id:string", "name:string", "note?:string", "tag?:string")
        match = compare_types(a, b)
        assert match.match_kind == MatchKind.OPTIONAL_VARIANCE
        assert "Partial<T>" in match.suggestion

    def test_optional_variance_needs_optionals_on_both_sides(self) -> None:
        a = shape("A", "types/a.ts", "id:string", "name:string")
        b = shape("B", "types/b.ts", "id:string", "name:string", "note?:string")
        assert compare_types(a, b).match_kind == MatchKind.SUBSET

    def test_required_opportunity(self) -> None:
        required = shape("Strict", "types/b.ts", "id:string", "name:string")
        partial = shape("Loose", "types/a.ts", "id?:string", "name:string")
        match = compare_types(partial, required)
        assert match.match_kind == MatchKind.REQUIRED_OPPORTUNITY
        assert (match.type1.name, match.type2.name) == ("Strict", "Loose")
        assert "type Strict = Required<Loose>" in match.suggestion

    def test_different_declared_types_do_not_match(self) -> None:
        a = shape("A", "types/a.ts", "id:string", "name:string")
        b = shape("B", "types/b.ts", "id:number", "name:string")
        assert compare_types(a, b) is None

    def test_same_file_pairs_are_never_compared(self) -> None:
        a = shape("A", "types/a.ts", "id:string", "name:string", line=1)
        b = shape("B", "types/a.ts", "id:string", "name:string", line=9)
        assert compare_types(a, b) is None

    def test_argument_order_does_not_matter(self) -> None:
        a = shape("A", "types/a.ts", "id:string", "name:string", "x?:number")
        b = shape("B", "types/b.ts", "id:string", "name:string")
        assert compare_types(a, b) == compare_types(b, a)
        assert compare_types(a, b).match_kind == MatchKind.SUPERSET


class TestFindDuplicates:
    def test_each_pair_reported_once(self) -> None:
        fields = ("id:string", "name:string")
        definitions = [
            shape("A", "types/a.ts", *fields),
            shape("B", "types/b.ts", *fields),
            shape("C", "types/c.ts", *fields),
        ]
        matches = find_duplicates(definitions)
        pairs = [(m.type1.name, m.type2.name) for m in matches]
        assert pairs == [("A", "B"), ("A", "C"), ("B", "C")]
        assert all(m.match_kind == MatchKind.EXACT for m in matches)

    def test_result_is_independent_of_input_order(self) -> None:
        definitions = [
            shape("A", "types/a.ts", "id:string", "name:string"),
            shape("B", "types/b.ts", "id:string", "name:string", "email:string"),
            shape("C", "types/c.ts", "id?:string", "name:string"),
            shape("D", "types/d.ts", "x:number", "y:number"),
        ]
        assert find_duplicates(definitions) == find_duplicates(list(reversed(definitions)))

    def test_unrelated_types_produce_nothing(self) -> None:
        definitions = [
            shape("Point", "types/geo.ts", "x:number", "y:number"),
            shape("User", "types/user.ts", "id:string", "name:string"),
        ]
        assert find_duplicates(definitions) == []
