"""Record extraction: Object records -> SchemaObject."""

from schema_docgen.errors import SchemaDocError, UnresolvedTypeError, UnsupportedTypeShapeError
from schema_docgen.parser.base import STRING, Member, ObjectRef, SchemaObject, ValueType, to_snake_case
from schema_docgen.parser.context import ParserContext
from schema_docgen.parser.declarations import Declaration, DeclKind, SourceFile, TypeShape, qualified_name


def resolve_shape(
    shape: TypeShape,
    namespace: str | None,
    context: ParserContext,
    declaration: str,
    field: str | None = None,
) -> tuple[ValueType, bool]:
    """Resolve a declared type shape to ``(value_type, is_required)``.

    Arrays are never required: a missing array is treated as empty.
    """
    if shape.kind == "unsupported" or shape.name is None:
        raise UnsupportedTypeShapeError(shape.text, declaration=declaration, field=field)
    try:
        value_type = context.resolve(shape.name, namespace)
    except UnresolvedTypeError as e:
        raise UnresolvedTypeError(e.type_name, e.namespace, declaration=declaration, field=field) from None
    if shape.kind == "array":
        return ValueType.array_of(value_type), False
    return value_type, shape.kind == "plain"


def extract_objects(source: SourceFile, context: ParserContext, strict: bool = True) -> None:
    """Extract every Object record outside of Endpoint records."""
    for decl in source.declarations:
        walk_objects(decl, None, context, strict)


def walk_objects(decl: Declaration, namespace: str | None, context: ParserContext, strict: bool = True) -> None:
    """Extract Object records at any depth below *decl*, skipping Endpoint records."""
    if decl.kind not in (DeclKind.RECORD, DeclKind.SUM) or decl.is_endpoint:
        return
    if decl.is_object:
        try:
            extract_object(decl, namespace, context, strict)
        except SchemaDocError as e:
            if strict:
                raise
            context.errors.append(e)
        return
    name = qualified_name(namespace, decl.name)
    for child in decl.children:
        walk_objects(child, name, context, strict)


def extract_object(decl: Declaration, parent: str | None, context: ParserContext, strict: bool = True) -> ObjectRef:
    """Build and register the SchemaObject for an Object record.

    Nested records are extracted first under this record's name. Fields with
    an unsupported type shape are recorded as errors and dropped.
    """
    name = qualified_name(parent, decl.name)

    for child in decl.children:
        walk_objects(child, name, context, strict)

    members: list[Member] = []
    if decl.is_nominal:
        members.append(
            Member(
                key="type",
                value_type=STRING,
                is_required=True,
                default_value=to_snake_case(name),
                comment="The type name",
            )
        )

    for field in decl.fields():
        if not field.is_stored_field:
            continue
        try:
            value_type, is_required = resolve_shape(field.type_shape, name, context, name, field.name)
        except UnsupportedTypeShapeError as e:
            context.errors.append(e)
            continue
        default = field.initializer.literal(context.segment_separator) if field.initializer else None
        members.append(
            Member(
                key=field.name,
                value_type=value_type,
                is_required=is_required,
                default_value=default,
                comment=field.comment,
            )
        )

    return context.register_object(SchemaObject(name=name, comment=decl.comment, members=members))
