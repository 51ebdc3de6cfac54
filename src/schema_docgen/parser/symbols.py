"""First pass: register every Object record name and the scope chain of all records."""

from schema_docgen.parser.context import ParserContext
from schema_docgen.parser.declarations import Declaration, DeclKind, SourceFile, qualified_name


def collect_symbols(source: SourceFile, context: ParserContext) -> None:
    """Register an ObjectSymbol for every Object record, at any depth."""
    for decl in source.declarations:
        _collect(decl, None, context)


def _collect(decl: Declaration, namespace: str | None, context: ParserContext) -> None:
    if decl.kind not in (DeclKind.RECORD, DeclKind.SUM):
        return
    name = qualified_name(namespace, decl.name)
    context.add_scope(name, namespace)
    if decl.is_object:
        context.add_symbol(name)
    for child in decl.children:
        _collect(child, name, context)
