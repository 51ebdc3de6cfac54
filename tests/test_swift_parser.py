from pathlib import Path

import pytest

from schema_docgen.errors import SourceParseError
from schema_docgen.parser.declarations import DeclKind
from schema_docgen.parser.swift import parse_source, parse_text, tokenize

FIXTURES = Path(__file__).parent / "fixtures"


def _record(source, *names):
    decls = source.declarations
    found = None
    for name in names:
        found = [d for d in decls if d.name == name][0]
        decls = found.children
    return found


class TestTokenizer:
    def test_doc_comments_attach_to_next_token(self):
        tokens = tokenize("/// Hello\n/// JSON\nstruct A {}")
        assert tokens[0].text == "struct"
        assert tokens[0].comments == ["Hello", "JSON"]

    def test_trailing_comment_is_not_leading(self):
        tokens = tokenize("let a: Int // about a\nlet b: Int")
        second_let = [t for t in tokens if t.text == "let"][1]
        assert second_let.comments == []

    def test_string_segments_split_on_interpolation(self):
        tokens = tokenize('"/users/\\(id)/posts"')
        assert tokens[0].kind == "string"
        assert tokens[0].segments == ["/users/", "/posts"]

    def test_block_comment_skipped(self):
        tokens = tokenize("/* a /* nested */ b */ struct")
        assert [t.text for t in tokens if t.kind != "eof"] == ["struct"]

    def test_unterminated_string(self):
        with pytest.raises(SourceParseError, match="line 2"):
            tokenize('\nlet a = "abc\n"')


class TestDeclarationParser:
    def test_fixture_top_level_names(self):
        source = parse_source(FIXTURES / "chat.swift")
        names = [d.name for d in source.declarations]
        assert names == ["Image", "PlainText", "Body", "Message", "Member", "Thread", "GetMessages", "PostMessage"]

    def test_record_conformances_and_comment(self):
        source = parse_source(FIXTURES / "chat.swift")
        message = _record(source, "Message")
        assert message.kind == DeclKind.RECORD
        assert message.conformances == ["Object"]
        assert message.comment == "Hello\nJSON"

    def test_field_shapes(self):
        source = parse_text(
            """
            struct A: Object {
              let count: Int
              let url: String?
              let tags: [String]
              let grid: [[Int]]
              let lookup: [String: Int]
              let maybe: [String]?
              let image: Message.Image
            }
            """
        )
        shapes = {f.name: f.type_shape for f in source.declarations[0].fields()}
        assert (shapes["count"].kind, shapes["count"].name) == ("plain", "Int")
        assert (shapes["url"].kind, shapes["url"].name) == ("optional", "String")
        assert (shapes["tags"].kind, shapes["tags"].name) == ("array", "String")
        assert shapes["grid"].kind == "unsupported"
        assert shapes["lookup"].kind == "unsupported"
        assert shapes["maybe"].kind == "unsupported"
        assert shapes["maybe"].text == "[String]?"
        assert (shapes["image"].kind, shapes["image"].name) == ("plain", "Message.Image")

    def test_literal_initializers(self):
        source = parse_text(
            """
            struct Demo {
              let defaultString = "DemoDemo"
              let defaultNumber: Int = 1
              let defaultBoolean: Bool = true
              let created: String = makeDate()
              let method: HTTPMethod = .get
            }
            """
        )
        fields = {f.name: f for f in source.declarations[0].fields()}
        assert fields["defaultString"].type_shape is None
        assert fields["defaultString"].initializer.segments == ["DemoDemo"]
        assert fields["defaultNumber"].initializer.literal() == "1"
        assert fields["defaultBoolean"].initializer.literal() == "true"
        assert fields["created"].initializer.kind == "expression"
        assert fields["method"].initializer.kind == "member"
        assert fields["method"].initializer.text == "get"

    def test_skips_functions_and_computed_properties(self):
        source = parse_text(
            """
            struct A: Object {
              let id: String
              var label: String { id.uppercased() }
              var observed: Int = 0 {
                didSet { print(observed) }
              }
              init(id: String) { self.id = id }
              func describe() -> String {
                return "\\(id)"
              }
              static var shared: A { A(id: "") }
              let name: String
            }
            """
        )
        record = source.declarations[0]
        assert [f.name for f in record.fields()] == ["id", "observed", "name"]

    def test_static_modifier_recorded(self):
        source = parse_text("struct A { static let max: Int = 1\n let value: Int }")
        fields = source.declarations[0].fields()
        assert fields[0].modifiers == ["static"]
        assert not fields[0].is_stored_field
        assert fields[1].is_stored_field

    def test_enum_cases(self):
        source = parse_text(
            """
            enum Body: OneOf {
              case text(bodyText: PlainText)
              case image(Image), video(_ clip: Video)
              case empty
            }
            """
        )
        enum = source.declarations[0]
        assert enum.kind == DeclKind.SUM
        cases = enum.cases()
        assert [c.name for c in cases] == ["text", "image", "video", "empty"]
        assert cases[0].parameters[0].label == "bodyText"
        assert cases[1].parameters[0].label is None
        assert cases[1].parameters[0].type_shape.name == "Image"
        assert cases[2].parameters[0].label == "clip"
        assert cases[3].parameters == []

    def test_nested_records(self):
        source = parse_source(FIXTURES / "chat.swift")
        nested = _record(source, "Message", "MyNested1Type", "MyNested2Type")
        assert nested.conformances == ["Object"]
        assert nested.fields()[0].name == "value"

    def test_protocols_and_extensions_skipped(self):
        source = parse_text(
            """
            public protocol Object {}
            extension Message {
              struct Hidden: Object { let a: Int }
            }
            public struct Visible: Object { let a: Int }
            """
        )
        assert [d.name for d in source.declarations] == ["Visible"]
        assert source.declarations[0].modifiers == ["public"]

    def test_unbalanced_braces(self):
        with pytest.raises(SourceParseError, match="expected '}'"):
            parse_text("struct A: Object {\n let a: Int\n")

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(SourceParseError, match="cannot read"):
            parse_source(tmp_path / "missing.swift")
