"""CLI entry point for spec-portal."""

import asyncio
import json
from pathlib import Path

import click
import yaml

from spec_portal.catalog.discovery import SpecCatalog
from spec_portal.catalog.projection import list_versions, specs_for_header
from spec_portal.config import configure_logging, load_config
from spec_portal.errors import SpecNotFoundError
from spec_portal.generator.code_sample import CodeSampleExtractor, render_curl
from spec_portal.generator.operation_doc import render_operation_html


def _catalog(ctx: click.Context) -> SpecCatalog:
    return ctx.obj["catalog"]


@click.group()
@click.option("--content-root", type=click.Path(path_type=Path), default=None, help="Docs content root (default: $SPEC_PORTAL_CONTENT_ROOT).")
@click.option("--log-level", default=None, help="Logging level (default: $SPEC_PORTAL_LOG_LEVEL or INFO).")
@click.pass_context
def main(ctx: click.Context, content_root: Path | None, log_level: str | None):
    """Spec Portal: discover, inspect and serve versioned OpenAPI specs."""
    config = load_config()
    if content_root is not None:
        config.content_root = content_root
    configure_logging(log_level or config.log_level)
    ctx.obj = {
        "config": config,
        "catalog": SpecCatalog(config.content_root, ttl=config.cache_ttl),
    }


@main.command()
@click.argument("language")
@click.argument("version")
@click.pass_context
def specs(ctx: click.Context, language: str, version: str):
    """List specs discovered for LANGUAGE and VERSION."""
    found = asyncio.run(_catalog(ctx).list_specs(language, version))
    if not found:
        click.echo(f"No specs found for {language}/{version}.")
        return
    for spec in found:
        click.echo(f"{spec.id}\t{spec.title}\t{spec.declared_version}\t{len(spec.operations)} operations")


@main.command()
@click.argument("language")
@click.argument("version")
@click.pass_context
def scan(ctx: click.Context, language: str, version: str):
    """Scan the content tree and report loaded and skipped files."""
    report = asyncio.run(_catalog(ctx).scan(language, version))
    click.echo(f"Scanned {report.candidates} candidate files for {language}/{version}.")
    for spec in report.loaded:
        click.echo(f"  loaded   {spec.source_path} ({spec.id})")
    for skipped in report.skipped:
        click.echo(f"  skipped  {skipped.path} [{skipped.reason.value}] {skipped.detail}")


@main.command()
@click.argument("language")
@click.argument("version")
@click.pass_context
def header(ctx: click.Context, language: str, version: str):
    """Print the header navigation view as JSON."""
    entries = asyncio.run(specs_for_header(_catalog(ctx), language, version))
    click.echo(json.dumps([e.model_dump() for e in entries], indent=2, ensure_ascii=False))


@main.command()
@click.argument("service")
@click.option("--lang", default="en", help="Content language.")
@click.pass_context
def versions(ctx: click.Context, service: str, lang: str):
    """List versions available for SERVICE."""
    found = asyncio.run(list_versions(_catalog(ctx), service, lang))
    if not found:
        click.echo(f"No versions found for {service} ({lang}).")
        return
    for info in found:
        badge = f" [{info.badge}]" if info.badge else ""
        click.echo(f"{info.label}{badge}")


@main.command()
@click.argument("service")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file path.")
@click.option("--lang", default="en", help="Content language.")
@click.option("--version", "version", default="v3", help="Version directory.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
@click.pass_context
def export(ctx: click.Context, service: str, output: Path, lang: str, version: str, fmt: str):
    """Export the raw spec for SERVICE as JSON or YAML."""
    try:
        spec = asyncio.run(_catalog(ctx).get_spec(service, lang, version))
    except SpecNotFoundError as e:
        raise click.ClickException(str(e)) from e

    if fmt == "yaml":
        content = yaml.safe_dump(spec.raw_document, sort_keys=False, allow_unicode=True)
    else:
        content = json.dumps(spec.raw_document, indent=2, ensure_ascii=False, default=str)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    click.echo(f"Spec {service} saved to {output}")


@main.command()
@click.argument("service")
@click.argument("operation_id")
@click.option("--lang", default="en", help="Content language.")
@click.option("--version", "version", default="v3", help="Version directory.")
@click.option("--curl", is_flag=True, help="Print a curl sample instead of the HTML reference.")
@click.pass_context
def operation(ctx: click.Context, service: str, operation_id: str, lang: str, version: str, curl: bool):
    """Render one operation of SERVICE."""
    try:
        spec = asyncio.run(_catalog(ctx).get_spec(service, lang, version))
    except SpecNotFoundError as e:
        raise click.ClickException(str(e)) from e

    op = next((o for o in spec.operations if o.operation_id == operation_id), None)
    if op is None:
        raise click.ClickException(f"Operation '{operation_id}' not found in {service}")

    if curl:
        extractor = CodeSampleExtractor(spec.raw_document)
        data = extractor.extract_operation(op.path, op.method)
        click.echo(render_curl(extractor.build(data)))
    else:
        click.echo(render_operation_html(op, spec))


@main.command()
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", default=8000, type=int, help="Bind port.")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int):
    """Serve specs over HTTP."""
    import uvicorn

    from spec_portal.server import create_app

    app = create_app(config=ctx.obj["config"], catalog=_catalog(ctx))
    click.echo(f"Serving {ctx.obj['config'].content_root} on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)
