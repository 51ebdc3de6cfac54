"""Related-objects closure of a set of members."""

from typing import Iterable

from schema_docgen.parser.base import Member, SchemaObject, ValueKind, ValueType
from schema_docgen.parser.context import ParserContext


def collect_related_objects(members: Iterable[Member], context: ParserContext) -> list[SchemaObject]:
    """Return every object reachable from *members*, sorted by name.

    Follows object references directly and through arrays and one-of cases.
    Each object is visited once, so mutually referencing objects terminate.
    References to objects that were never extracted are ignored.
    """
    seen: set[str] = set()
    stack: list[ValueType] = [m.value_type for m in members]

    while stack:
        value_type = stack.pop()
        if value_type.kind == ValueKind.ARRAY:
            stack.append(value_type.item)
        elif value_type.kind == ValueKind.ONEOF:
            stack.extend(case.value_type for case in value_type.wrapper.cases)
        elif value_type.kind == ValueKind.OBJECT:
            name = value_type.ref.name
            if name in seen or name not in context.objects:
                continue
            seen.add(name)
            stack.extend(m.value_type for m in context.objects[name].members)

    return [context.objects[name] for name in sorted(seen)]
