from pathlib import Path

from schema_docgen.generator.markdown import (
    TABLE_HEADER,
    MarkdownBuilder,
    render_document,
    render_endpoint,
    render_object_catalog,
)
from schema_docgen.parser.base import (
    BOOLEAN,
    NUMBER,
    STRING,
    UNKNOWN,
    HTTPMethod,
    Member,
    OneofCase,
    OneofWrapper,
    ParsedEndpoint,
    SchemaObject,
    ValueType,
)
from schema_docgen.parser.context import ParserContext
from schema_docgen.parser.extract import extract_schema
from schema_docgen.parser.swift import parse_source

FIXTURES = Path(__file__).parent / "fixtures"


def _table_rows(markdown: str) -> list[list[str]]:
    """Split pipe-table body rows into cells."""
    rows = []
    for line in markdown.splitlines():
        if line.startswith("|") and line not in (TABLE_HEADER, "|---|---|---|---|---|"):
            rows.append(line.strip("|").split("|"))
    return rows


def _endpoint_context() -> ParserContext:
    context = ParserContext()
    objects = [
        SchemaObject(name="GetUser_Header", members=[Member(key="authToken", value_type=STRING, is_required=True, comment="Bearer token")]),
        SchemaObject(name="GetUser_Query", members=[Member(key="limit", value_type=NUMBER, is_required=False, default_value="20")]),
        SchemaObject(name="GetUser_Body"),
        SchemaObject(name="GetUser_Response", members=[Member(key="user", value_type=ValueType.object_ref("User"), is_required=True)]),
        SchemaObject(name="User", comment="A user", members=[Member(key="name", value_type=STRING, is_required=True)]),
    ]
    for obj in objects:
        context.add_symbol(obj.name)
        context.register_object(obj)
    context.register_endpoint(
        ParsedEndpoint(
            name="GetUser",
            method=HTTPMethod.GET,
            path="/users",
            header=objects[0].ref(),
            query=objects[1].ref(),
            body=objects[2].ref(),
            response=objects[3].ref(),
        )
    )
    return context


class TestDescribe:
    def test_primitives(self):
        builder = MarkdownBuilder("GetUser")
        assert [builder.describe(v) for v in (STRING, NUMBER, BOOLEAN, UNKNOWN)] == ["string", "number", "boolean", "unknown"]

    def test_object_link_uses_namespace(self):
        builder = MarkdownBuilder("GetUser")
        assert builder.describe(ValueType.object_ref("User")) == "[User](#_GetUser_User) object"

    def test_array_and_oneof(self):
        builder = MarkdownBuilder("global")
        wrapper = OneofWrapper(
            wrapper_name="Body",
            cases=(
                OneofCase(name="text", value_type=ValueType.object_ref("PlainText")),
                OneofCase(name="count", value_type=NUMBER),
            ),
        )
        assert builder.describe(ValueType.array_of(ValueType.array_of(STRING))) == "array of array of string"
        assert builder.describe(ValueType.one_of(wrapper)) == "one of [PlainText](#_global_PlainText) object, number"


class TestPropertyTable:
    def test_row_layout(self):
        builder = MarkdownBuilder()
        builder.append_property_table([
            Member(key="updatedAt", value_type=STRING, is_required=True, comment="Last | update\nISO"),
            Member(key="limit", value_type=NUMBER, is_required=False, default_value="20"),
        ])
        lines = builder.render().splitlines()
        assert lines[0] == "|Key|ValueType|Required|Default|Description|"
        assert lines[1] == "|---|---|---|---|---|"
        assert lines[2] == "|updated_at|string|true||Last \\| update<br>ISO|"
        assert lines[3] == "|limit|number|false|20||"

    def test_required_column_round_trip(self):
        members = [
            Member(key="a", value_type=STRING, is_required=True),
            Member(key="b", value_type=ValueType.array_of(NUMBER), is_required=False),
            Member(key="c", value_type=BOOLEAN, is_required=False, default_value="true"),
            Member(key="d", value_type=ValueType.object_ref("X"), is_required=True),
        ]
        builder = MarkdownBuilder()
        builder.append_property_table(members)
        parsed = [row[2] == "true" for row in _table_rows(builder.render())]
        assert parsed == [m.is_required for m in members]


class TestRenderEndpoint:
    def test_sections(self):
        rendered = render_endpoint(_endpoint_context().endpoints["GetUser"], _endpoint_context())
        lines = rendered.splitlines()
        assert lines[0] == "## GET : GetUser"
        assert "**Path** : /users" in lines
        assert "**Method** : GET" in lines
        headings = [line for line in lines if line.startswith("## ")]
        assert headings == ["## GET : GetUser", "## Header", "## Query", "## Body", "## Response", "## Related Objects"]

    def test_related_objects_section(self):
        context = _endpoint_context()
        rendered = render_endpoint(context.endpoints["GetUser"], context)
        related = rendered.split("## Related Objects", 1)[1]
        assert '### <span id="_GetUser_User"></span>User object' in related
        assert "A user" in related
        assert "#### Properties" in related
        assert "|name|string|true|||" in related
        assert "|user|[User](#_GetUser_User) object|true|||" in rendered

    def test_object_without_comment(self):
        context = _endpoint_context()
        context.objects["User"].comment = ""
        rendered = render_endpoint(context.endpoints["GetUser"], context)
        assert "No description" in rendered


class TestRenderDocument:
    def test_empty_context(self):
        assert render_document(ParserContext()) == "\n"

    def test_catalog_uses_global_namespace(self):
        context = _endpoint_context()
        catalog = render_object_catalog(context)
        assert catalog.startswith("## Objects")
        assert '<span id="_global_User"></span>User object' in catalog
        assert render_document(context, include_catalog=True).rstrip().endswith("---")

    def test_fixture_document(self):
        context = extract_schema(parse_source(FIXTURES / "chat.swift"))
        document = render_document(context)

        assert document.index("## GET : GetMessages") < document.index("## POST : PostMessage")
        assert "**Path** : /rooms/,/messages" in document
        assert "|authorization|string|true||Bearer token|" in document
        assert "|count|number|true|50||" in document

        get_messages = document.split("## POST : PostMessage")[0]
        related = get_messages.split("## Related Objects")[1]
        anchors = [line.split("</span>")[1] for line in related.splitlines() if line.startswith("### ")]
        assert anchors == [
            "Image object",
            "Member object",
            "Message object",
            "Message_Image object",
            "Message_MyNested1Type object",
            "Message_MyNested1Type_MyNested2Type object",
            "PlainText object",
            "Thread object",
        ]
        assert "|body|one of [PlainText](#_GetMessages_PlainText) object, [Message_Image](#_GetMessages_Message_Image) object|true|||" in related
        assert "|replies|array of [Thread](#_GetMessages_Thread) object|false|||" in related
        assert "|type|string|true|thread|The type name|" in related
