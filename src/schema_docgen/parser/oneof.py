"""Sum-type extraction: OneOf enums -> OneofWrapper.

Only enums whose every case carries exactly one associated value become
wrappers; any other OneOf enum is an ordinary enum and is skipped without
an error. A case payload with an unsupported type shape is always recorded
and its enum skipped.
"""

import click

from schema_docgen.errors import SchemaDocError, UnsupportedTypeShapeError
from schema_docgen.parser.base import OneofCase, OneofWrapper, to_snake_case
from schema_docgen.parser.context import ParserContext
from schema_docgen.parser.declarations import Declaration, DeclKind, SourceFile, qualified_name
from schema_docgen.parser.objects import resolve_shape


def extract_oneofs(source: SourceFile, context: ParserContext, strict: bool = True, verbose: bool = False) -> None:
    """Register a OneofWrapper for every qualifying OneOf enum, in source order."""
    for decl in source.declarations:
        _walk(decl, None, context, strict, verbose)


def _walk(decl: Declaration, namespace: str | None, context: ParserContext, strict: bool, verbose: bool) -> None:
    if decl.kind not in (DeclKind.RECORD, DeclKind.SUM):
        return
    name = qualified_name(namespace, decl.name)
    if decl.is_oneof:
        try:
            wrapper = build_wrapper(decl, namespace, context)
        except UnsupportedTypeShapeError as e:
            context.errors.append(e)
        except SchemaDocError as e:
            if strict:
                raise
            context.errors.append(e)
        else:
            if wrapper is None:
                if verbose:
                    click.echo(f"  Skipped enum {name}: not every case has a single payload", err=True)
            else:
                context.register_wrapper(wrapper)
    for child in decl.children:
        _walk(child, name, context, strict, verbose)


def build_wrapper(decl: Declaration, namespace: str | None, context: ParserContext) -> OneofWrapper | None:
    """Resolve the cases of a OneOf enum, or None when it is not a wrapper."""
    name = qualified_name(namespace, decl.name)
    cases = decl.cases()
    if not cases or any(len(case.parameters) != 1 for case in cases):
        return None

    resolved: list[OneofCase] = []
    for case in cases:
        parameter = case.parameters[0]
        value_type, _ = resolve_shape(parameter.type_shape, name, context, name, case.name)
        resolved.append(OneofCase(name=to_snake_case(parameter.label or case.name), value_type=value_type))
    return OneofWrapper(wrapper_name=name, cases=tuple(resolved))
