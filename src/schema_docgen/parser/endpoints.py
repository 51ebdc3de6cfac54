"""Endpoint extraction: Endpoint records -> ParsedEndpoint."""

from schema_docgen.errors import (
    MissingNestedRecordError,
    MissingPropertyError,
    SchemaDocError,
    UndefinedMethodError,
)
from schema_docgen.parser.base import HTTPMethod, ObjectRef, ParsedEndpoint
from schema_docgen.parser.context import ParserContext
from schema_docgen.parser.declarations import Declaration, DeclKind, SourceFile, qualified_name
from schema_docgen.parser.objects import extract_object, walk_objects

PAYLOAD_RECORDS = ("Header", "Query", "Body", "Response")


def extract_endpoints(source: SourceFile, context: ParserContext, strict: bool = True) -> None:
    """Register a ParsedEndpoint for every Endpoint record, in source order."""
    for decl in source.declarations:
        _walk(decl, None, context, strict)


def _walk(decl: Declaration, namespace: str | None, context: ParserContext, strict: bool) -> None:
    if decl.kind not in (DeclKind.RECORD, DeclKind.SUM):
        return
    if decl.is_endpoint:
        try:
            context.register_endpoint(parse_endpoint(decl, namespace, context, strict))
        except SchemaDocError as e:
            if strict:
                raise
            context.errors.append(e)
        return
    name = qualified_name(namespace, decl.name)
    for child in decl.children:
        _walk(child, name, context, strict)


def parse_endpoint(decl: Declaration, namespace: str | None, context: ParserContext, strict: bool = True) -> ParsedEndpoint:
    """Read method and path, then extract the endpoint's nested Object records."""
    name = qualified_name(namespace, decl.name)
    method = _parse_method(decl, name)
    path = _literal(decl, "path", name, context.segment_separator)

    # required records are checked before anything gets registered
    nested = {child.name for child in decl.records() if child.is_object}
    for record in PAYLOAD_RECORDS:
        if record not in nested:
            raise MissingNestedRecordError(record, name)

    # a failing endpoint leaves none of its objects registered
    registered = set(context.objects)
    refs: dict[str, ObjectRef] = {}
    try:
        for child in decl.children:
            if child.is_object:
                refs.setdefault(child.name, extract_object(child, name, context, strict))
            else:
                walk_objects(child, name, context, strict)
    except SchemaDocError:
        for key in [k for k in context.objects if k not in registered]:
            del context.objects[key]
        raise

    return ParsedEndpoint(
        name=name,
        method=method,
        path=path,
        header=refs["Header"],
        query=refs["Query"],
        body=refs["Body"],
        response=refs["Response"],
    )


def _parse_method(decl: Declaration, name: str) -> HTTPMethod:
    field = decl.field("method")
    if field is None or field.initializer is None:
        raise MissingPropertyError("method", name)
    initializer = field.initializer
    if initializer.kind == "member":
        text = initializer.text
    elif initializer.kind == "string":
        text = "".join(initializer.segments)
    else:
        raise MissingPropertyError("method", name)
    try:
        return HTTPMethod(text)
    except ValueError:
        raise UndefinedMethodError(text, name) from None


def _literal(decl: Declaration, prop: str, name: str, separator: str) -> str:
    field = decl.field(prop)
    if field is None or field.initializer is None or field.initializer.kind != "string":
        raise MissingPropertyError(prop, name)
    return field.initializer.literal(separator)
