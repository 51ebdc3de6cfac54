"""Markdown API document renderer.

Renders every endpoint of a populated ParserContext: its four payload
tables followed by the objects reachable from its body and response.
Object links and anchors are namespaced by endpoint so identically named
objects in different endpoints do not collide.
"""

from typing import Iterable

from schema_docgen.generator.related import collect_related_objects
from schema_docgen.parser.base import Member, ObjectRef, ParsedEndpoint, SchemaObject, ValueKind, ValueType, to_snake_case
from schema_docgen.parser.context import ParserContext

GLOBAL_NAMESPACE = "global"
TABLE_HEADER = "|Key|ValueType|Required|Default|Description|"
TABLE_RULE = "|---|---|---|---|---|"


class MarkdownBuilder:
    """Line buffer with helpers for object links and property tables."""

    def __init__(self, anchor_namespace: str = GLOBAL_NAMESPACE):
        self.anchor_namespace = anchor_namespace
        self.lines: list[str] = []

    def append(self, line: str = "") -> None:
        self.lines.append(line)

    def append_separator(self) -> None:
        self.lines.extend(["---", ""])

    def render(self) -> str:
        return "\n".join(self.lines)

    # -- links ----------------------------------------------------------------

    def anchor_id(self, name: str) -> str:
        return f"_{self.anchor_namespace}_{name}"

    def object_link(self, ref: ObjectRef) -> str:
        return f"[{ref.name}](#{self.anchor_id(ref.name)})"

    def object_anchor(self, obj: SchemaObject) -> str:
        return f'<span id="{self.anchor_id(obj.name)}"></span>{obj.name} object'

    def describe(self, value_type: ValueType) -> str:
        """Human readable description of a value type."""
        kind = value_type.kind
        if kind == ValueKind.OBJECT:
            return f"{self.object_link(value_type.ref)} object"
        if kind == ValueKind.ARRAY:
            return f"array of {self.describe(value_type.item)}"
        if kind == ValueKind.ONEOF:
            return "one of " + ", ".join(self.describe(c.value_type) for c in value_type.wrapper.cases)
        return kind.value

    # -- blocks ---------------------------------------------------------------

    def append_property_table(self, members: Iterable[Member]) -> None:
        self.append(TABLE_HEADER)
        self.append(TABLE_RULE)
        for member in members:
            cells = [
                to_snake_case(member.key),
                self.describe(member.value_type),
                "true" if member.is_required else "false",
                _cell(member.default_value or ""),
                _cell(member.comment),
            ]
            self.append("|" + "|".join(cells) + "|")

    def append_objects(self, objects: Iterable[SchemaObject], heading: str = "###") -> None:
        for obj in sorted(objects, key=lambda o: o.name):
            self.append(f"{heading} {self.object_anchor(obj)}")
            self.append()
            self.append(obj.comment or "No description")
            self.append()
            self.append(f"{heading}# Properties")
            self.append()
            self.append_property_table(obj.members)
            self.append()
            self.append_separator()


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", "<br>")


def render_endpoint(endpoint: ParsedEndpoint, context: ParserContext) -> str:
    """Render one endpoint section with its related objects."""
    builder = MarkdownBuilder(anchor_namespace=endpoint.name)
    method = endpoint.method.label

    builder.append(f"## {method} : {endpoint.name}")
    builder.append()
    builder.append(f"**Path** : {endpoint.path}")
    builder.append(f"**Method** : {method}")
    builder.append()

    for title, ref in (
        ("Header", endpoint.header),
        ("Query", endpoint.query),
        ("Body", endpoint.body),
        ("Response", endpoint.response),
    ):
        builder.append(f"## {title}")
        builder.append()
        builder.append_property_table(context.object(ref).members)
        builder.append()
        builder.append_separator()

    members = context.object(endpoint.body).members + context.object(endpoint.response).members
    builder.append("## Related Objects")
    builder.append()
    builder.append_objects(collect_related_objects(members, context))
    return builder.render()


def render_object_catalog(context: ParserContext) -> str:
    """Render every extracted object under the global namespace."""
    builder = MarkdownBuilder(anchor_namespace=GLOBAL_NAMESPACE)
    builder.append("## Objects")
    builder.append()
    builder.append_objects(context.objects.values())
    return builder.render()


def render_document(context: ParserContext, include_catalog: bool = False) -> str:
    """Render all endpoints in registration order, optionally followed by the object catalog."""
    sections = [render_endpoint(endpoint, context) for endpoint in context.endpoints.values()]
    if include_catalog:
        sections.append(render_object_catalog(context))
    return "\n\n".join(section.rstrip("\n") for section in sections) + "\n"
