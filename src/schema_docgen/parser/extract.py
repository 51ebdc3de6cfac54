"""Runs the extraction passes in order over one source file."""

from typing import Callable

from schema_docgen.errors import SchemaDocError
from schema_docgen.parser.context import ParserContext
from schema_docgen.parser.declarations import SourceFile
from schema_docgen.parser.endpoints import extract_endpoints
from schema_docgen.parser.objects import extract_objects
from schema_docgen.parser.oneof import extract_oneofs
from schema_docgen.parser.symbols import collect_symbols

# Called after each pass with the pass name and the errors it recorded.
PassReporter = Callable[[str, list[SchemaDocError]], None]

PASS_NAMES = ("Symbol", "Enum", "Object", "Endpoint")


def extract_schema(
    source: SourceFile,
    context: ParserContext | None = None,
    strict: bool = True,
    verbose: bool = False,
    report: PassReporter | None = None,
) -> ParserContext:
    """Populate a ParserContext from *source*.

    Each pass completes before the next starts: symbols, one-of wrappers,
    objects, endpoints. With ``strict`` the first fatal error is raised;
    otherwise it is recorded and the offending declaration skipped.
    """
    context = context or ParserContext()
    passes = (
        lambda: collect_symbols(source, context),
        lambda: extract_oneofs(source, context, strict=strict, verbose=verbose),
        lambda: extract_objects(source, context, strict=strict),
        lambda: extract_endpoints(source, context, strict=strict),
    )
    for name, run in zip(PASS_NAMES, passes):
        seen = len(context.errors)
        run()
        if report is not None:
            report(name, context.errors[seen:])
    return context
