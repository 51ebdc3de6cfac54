"""CLI entry point for schema-docgen."""

from pathlib import Path

import click

from schema_docgen.config import CONFIG_ENV_VAR, DocgenConfig, load_config
from schema_docgen.errors import SchemaDocError
from schema_docgen.generator.markdown import render_document
from schema_docgen.parser.context import ParserContext
from schema_docgen.parser.extract import extract_schema
from schema_docgen.parser.swift import parse_source


def _report_pass(name: str, errors: list[SchemaDocError]) -> None:
    """Print the errors recorded by one extraction pass."""
    if not errors:
        return
    click.echo(f"{name} extracting => found {len(errors)} error(s)")
    for error in errors:
        click.echo(f" - {error}")


def build_context(source_path: Path, config: DocgenConfig, verbose: bool = False) -> ParserContext:
    """Parse *source_path* and run every extraction pass."""
    if verbose:
        click.echo(f"Parsing {source_path}...", err=True)
    source = parse_source(source_path)

    context = extract_schema(
        source,
        context=config.make_context(),
        strict=config.strict,
        verbose=verbose,
        report=_report_pass,
    )
    if verbose:
        click.echo(
            f"Found {len(context.objects)} objects, {len(context.oneof_wrappers)} one-of wrappers, "
            f"{len(context.endpoints)} endpoints.",
            err=True,
        )
    return context


@click.command()
@click.argument("source", required=False, type=click.Path(path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the document to this file instead of stdout.")
@click.option("--config", "config_path", default=None, envvar=CONFIG_ENV_VAR, type=click.Path(path_type=Path), help="YAML configuration file.")
@click.option("--skip-invalid", is_flag=True, help="Record invalid declarations and continue instead of aborting.")
@click.option("--all-objects", is_flag=True, help="Append a catalog of every extracted object.")
@click.option("-v", "--verbose", is_flag=True, help="Print pass progress to stderr.")
@click.pass_context
def main(ctx: click.Context, source: Path | None, output: Path | None, config_path: Path | None, skip_invalid: bool, all_objects: bool, verbose: bool):
    """Generate Markdown API documentation from Swift schema declarations."""
    if source is None:
        ctx.exit(1)

    try:
        config = load_config(config_path)
        if skip_invalid:
            config.strict = False
        context = build_context(source, config, verbose=verbose)
        document = render_document(context, include_catalog=all_objects or config.object_catalog)
    except SchemaDocError as e:
        click.echo(f"Error! {e}", err=True)
        ctx.exit(1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document, encoding="utf-8")
        click.echo(f"Document saved to {output}")
        return

    click.echo("Result")
    click.echo("")
    click.echo(document, nl=False)


if __name__ == "__main__":  # pragma: no cover
    main()
