"""Tests for the API surface parser."""

from pathlib import Path

import pytest

from breaking_change_detector.surface.parser import parse_api_surface


@pytest.fixture
def fixtures_path():
    """Path to test fixtures."""
    return Path(__file__).parent.parent / "fixtures" / "sources"


def parse(code):
    return parse_api_surface(code, "test.ts")


class TestParseFunctions:
    """Tests for exported function declarations."""

    def test_extracts_exported_functions(self):
        """Extracts plain and async exported functions in declaration order."""
        surface = parse("""
export function greet(name: string): string {
  return 'Hello, ' + name;
}

export async function fetchData(id: number): Promise<Data> {
  return await api.get(id);
}
""")

        assert [f.name for f in surface.functions] == ["greet", "fetchData"]

        greet = surface.functions[0]
        assert len(greet.params) == 1
        assert greet.params[0].name == "name"
        assert greet.params[0].type == "string"
        assert greet.return_type == "string"
        assert greet.is_async is False

        fetch_data = surface.functions[1]
        assert fetch_data.is_async is True
        assert fetch_data.return_type == "Promise<Data>"

    def test_counts_every_exported_function(self):
        """One entry per top-level export function, async flags preserved."""
        surface = parse("""
export function a(): void {}
export async function b(): Promise<void> {}
function internal(): void {}
export function c(x: number): number { return x; }
export async function d() {}
""")

        assert [(f.name, f.is_async) for f in surface.functions] == [
            ("a", False),
            ("b", True),
            ("c", False),
            ("d", True),
        ]

    def test_missing_return_type_defaults_to_void(self):
        """A function without a return annotation returns 'void'."""
        surface = parse("export function reset() {\n  state = {};\n}\n")

        assert surface.functions[0].return_type == "void"

    def test_parameter_optionality(self):
        """'?', default values and rest parameters are optional."""
        surface = parse(
            "export function f(a: string, b?: number, c = 5, ...rest: string[])"
            ": void {}"
        )

        params = surface.functions[0].params
        assert [(p.name, p.optional) for p in params] == [
            ("a", False),
            ("b", True),
            ("c", True),
            ("rest", True),
        ]
        assert params[2].type == "unknown"
        assert params[3].type == "string[]"
        assert [p.position for p in params] == [0, 1, 2, 3]

    def test_nested_types_in_parameters(self):
        """Commas inside generics, object types and function types are kept."""
        surface = parse(
            "export function on(map: Map<string, number>, "
            "opts: { a: string, b: number }, "
            "cb: (err: Error, data: string) => void = noop): void {}"
        )

        params = surface.functions[0].params
        assert [p.type for p in params] == [
            "Map<string, number>",
            "{ a: string, b: number }",
            "(err: Error, data: string) => void",
        ]
        assert params[2].optional is True

    def test_default_value_containing_separators(self):
        """String defaults with commas do not split the parameter."""
        surface = parse('export function join(parts: string[], sep = ", "): string {}')

        assert [p.name for p in surface.functions[0].params] == ["parts", "sep"]

    def test_generic_function(self):
        """Generic parameter lists are skipped, including constraints."""
        surface = parse(
            "export function pick<T extends { id: string }, K extends keyof T>"
            "(item: T, key: K): T[K] {\n  return item[key];\n}"
        )

        func = surface.functions[0]
        assert func.name == "pick"
        assert [p.type for p in func.params] == ["T", "K"]
        assert func.return_type == "T[K]"

    def test_object_literal_return_type(self):
        """An object-literal return type is read whole, not taken as the body."""
        surface = parse(
            "export function origin(): { x: number; y: number } {\n"
            "  return { x: 0, y: 0 };\n}"
        )

        assert surface.functions[0].return_type == "{ x: number; y: number }"

    def test_this_parameter_is_not_an_argument(self):
        """TypeScript's `this` annotation is dropped from the parameter list."""
        surface = parse("export function bind(this: Window, key: string): void {}")

        params = surface.functions[0].params
        assert [(p.name, p.position) for p in params] == [("key", 0)]

    def test_line_numbers(self):
        """Each declaration records the line of its export keyword."""
        surface = parse(
            "export function a(): void {}\n\nexport function b(): void {}\n"
        )

        assert [f.line_number for f in surface.functions] == [1, 3]

    def test_default_export_is_not_named_surface(self):
        """`export default function` is not part of the named surface."""
        surface = parse("export default function main(): void {}")

        assert surface.functions == ()


class TestParseArrowFunctions:
    """Tests for exported arrow-function constants."""

    def test_parses_typed_arrow_function(self):
        """Arrow functions expose params and return type like functions."""
        surface = parse(
            "export const load = async (id: string): Promise<Item> => {\n"
            "  return store.get(id);\n};"
        )

        load = surface.functions[0]
        assert load.name == "load"
        assert load.is_async is True
        assert [(p.name, p.type) for p in load.params] == [("id", "string")]
        assert load.return_type == "Promise<Item>"

    def test_parses_single_parameter_arrow(self):
        """Bare single-parameter arrows are recognised."""
        surface = parse("export const double = x => x * 2;")

        assert surface.functions[0].params[0].name == "x"

    def test_ignores_plain_constants(self):
        """Exported constants that are not functions are ignored."""
        surface = parse(
            "export const VERSION = '1.0.0';\n"
            "export const total = (a + b) * 2;\n"
            "export const config = { retries: 3 };\n"
        )

        assert surface.functions == ()

    def test_arrow_functions_keep_source_order(self):
        """Functions and arrow constants are interleaved in source order."""
        surface = parse(
            "export function first(): void {}\n"
            "export const second = (): void => {};\n"
            "export function third(): void {}\n"
        )

        assert [f.name for f in surface.functions] == ["first", "second", "third"]


class TestParseInterfaces:
    """Tests for exported interfaces."""

    def test_extracts_exported_interfaces(self):
        """Captures properties, optionality and base interfaces."""
        surface = parse("""
export interface User {
  id: string;
  name: string;
  email?: string;
}

export interface Product extends BaseEntity {
  title: string;
  price: number;
}
""")

        assert len(surface.interfaces) == 2

        user = surface.interfaces[0]
        assert user.name == "User"
        assert [p.name for p in user.properties] == ["id", "name", "email"]
        assert [p.optional for p in user.properties] == [False, False, True]
        assert user.extends == ()

        product = surface.interfaces[1]
        assert "BaseEntity" in product.extends

    def test_extends_keeps_every_base_verbatim(self):
        """Multiple and generic bases are kept as written."""
        surface = parse(
            "export interface Repo<T>\n"
            "  extends Reader<T>, Writer<T, Error>, Closeable {\n"
            "  name: string;\n}"
        )

        assert surface.interfaces[0].extends == (
            "Reader<T>",
            "Writer<T, Error>",
            "Closeable",
        )

    def test_member_shapes(self):
        """Properties are kept; methods and index signatures are ignored."""
        surface = parse("""
export interface Options {
  retries?: number;
  onError: (err: Error, attempt: number) => void;
  headers: { [key: string]: string };
  [extra: string]: unknown;
  log(message: string): void;
  readonly mode: 'a' | 'b',
  'content-type'?: string
}
""")

        props = surface.interfaces[0].properties
        assert [(p.name, p.optional, p.type) for p in props] == [
            ("retries", True, "number"),
            ("onError", False, "(err: Error, attempt: number) => void"),
            ("headers", False, "{ [key: string]: string }"),
            ("mode", False, "'a' | 'b'"),
            ("content-type", True, "string"),
        ]

    def test_multiline_union_property(self):
        """A property type continued on following lines is joined."""
        surface = parse("""
export interface Event {
  kind:
    | 'click'
    | 'hover';
  target: string;
}
""")

        props = surface.interfaces[0].properties
        assert [p.name for p in props] == ["kind", "target"]
        assert props[0].type == "| 'click' | 'hover'"

    def test_empty_interface(self):
        """An interface without members has no properties."""
        surface = parse("export interface Marker {}")

        assert surface.interfaces[0].name == "Marker"
        assert surface.interfaces[0].properties == ()


class TestParseTypes:
    """Tests for exported type aliases."""

    def test_extracts_exported_types(self):
        """Captures names and the right-hand side verbatim."""
        surface = parse("""
export type UserId = string;
export type Status = 'pending' | 'active' | 'inactive';
""")

        assert [(t.name, t.definition) for t in surface.types] == [
            ("UserId", "string"),
            ("Status", "'pending' | 'active' | 'inactive'"),
        ]

    def test_generic_and_function_aliases(self):
        """Generic parameters are skipped and arrows kept in the definition."""
        surface = parse(
            "export type Maybe<T> = T | null;\n"
            "export type Handler = (req: Request) => Promise<void>;\n"
        )

        assert [t.definition for t in surface.types] == [
            "T | null",
            "(req: Request) => Promise<void>",
        ]

    def test_alias_without_semicolons(self):
        """Without semicolons the definition ends with the line."""
        surface = parse("export type A = string\nexport type B = number\n")

        assert [(t.name, t.definition) for t in surface.types] == [
            ("A", "string"),
            ("B", "number"),
        ]

    def test_multiline_conditional_type(self):
        """Continuation lines of conditional types stay in the definition."""
        surface = parse(
            "export type Unwrap<T> = T extends Promise<infer U>\n  ? U\n  : T;\n"
        )

        assert surface.types[0].definition == (
            "T extends Promise<infer U>\n  ? U\n  : T"
        )

    def test_object_alias(self):
        """Object-literal aliases are captured whole."""
        surface = parse("export type Point = { x: number; y: number };")

        assert surface.types[0].definition == "{ x: number; y: number }"


class TestParseExports:
    """Tests for re-export clauses."""

    def test_collects_public_names(self):
        """Aliased names are recorded under the name consumers import."""
        surface = parse(
            "export { a, b as c } from './mod';\n"
            "export type { Options } from './types';\n"
            "export * from './everything';\n"
        )

        assert surface.exports == ("a", "c", "Options")


class TestTolerance:
    """The parser skips what it does not understand instead of failing."""

    def test_skips_destructured_parameters(self):
        """Declarations with destructuring are omitted, others still parsed."""
        surface = parse(
            "export function configure({ a, b }: Options): void {}\n"
            "export function ok(x: string): string { return x; }\n"
        )

        assert [f.name for f in surface.functions] == ["ok"]

    def test_skips_unbalanced_declarations(self):
        """Truncated declarations are dropped without raising."""
        surface = parse(
            "export interface Fine { a: string; }\n"
            "export function broken(a: string\n"
        )

        assert surface.functions == ()
        assert [i.name for i in surface.interfaces] == ["Fine"]

    def test_ignores_commented_out_exports(self):
        """Exports inside comments are not part of the surface."""
        surface = parse("""
// export function legacy(): void {}
/*
export interface Old { a: string; }
*/
export function current(): void {}
""")

        assert [f.name for f in surface.functions] == ["current"]
        assert surface.interfaces == ()

    def test_comment_markers_inside_strings_are_kept(self):
        """A '//' inside a string literal does not start a comment."""
        surface = parse(
            "export function link(url = 'https://example.com'): string {}\n"
            "export function next(): void {}\n"
        )

        assert [f.name for f in surface.functions] == ["link", "next"]

    @pytest.mark.parametrize("code", ["", "   \n\n", "const x = 1;", "export {"])
    def test_source_without_exports_is_empty(self, code):
        """Source without recognisable exports gives an empty surface."""
        assert parse(code).is_empty

    def test_redeclared_name_keeps_last_declaration(self):
        """Last declaration wins when a name is declared twice.

        Redeclaration is ambiguous in the source language; this pins the
        chosen behaviour.
        """
        surface = parse(
            "export function f(a: string): string {}\n"
            "export type T = string;\n"
            "export function f(a: number): number {}\n"
            "export type T = number;\n"
        )

        assert len(surface.functions) == 1
        assert surface.functions[0].params[0].type == "number"
        assert [t.definition for t in surface.types] == ["number"]


class TestParseFixtureFiles:
    """Tests against complete source files."""

    def test_parses_declaration_file(self, fixtures_path):
        """Declaration files with overloads and `declare` are understood."""
        code = (fixtures_path / "declarations.d.ts").read_text()

        surface = parse_api_surface(code, "declarations.d.ts")

        assert [f.name for f in surface.functions] == ["format", "parse"]
        assert surface.functions[0].params[0].type == "string | number"
        parse_fn = surface.functions[1]
        assert parse_fn.return_type == "T"
        assert parse_fn.params[1].optional is True
        assert parse_fn.params[1].type == "(key: string, value: unknown) => unknown"
        assert surface.interfaces[0].name == "FormatOptions"
        assert surface.types[0].definition == "(value: unknown) => string"

    def test_parses_service_module(self, fixtures_path):
        """A typical module yields all four kinds of surface."""
        code = (fixtures_path / "user_service_v1.ts").read_text()

        surface = parse_api_surface(code, "src/user_service.ts")

        assert surface.file_path == "src/user_service.ts"
        assert [f.name for f in surface.functions] == [
            "getUser",
            "createUser",
            "deleteUser",
            "formatUser",
        ]
        assert [i.name for i in surface.interfaces] == ["BaseEntity", "User"]
        assert [t.name for t in surface.types] == ["Role", "UserId"]
        assert surface.exports == ("database",)
        assert surface.get_function("getUser").return_type == "Promise<User | null>"
        assert surface.get_function("formatUser").return_type == "string"
