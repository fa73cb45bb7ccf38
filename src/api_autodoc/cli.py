"""CLI entry point for api-autodoc."""

import logging
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from api_autodoc.config import Configuration, load_configuration
from api_autodoc.errors import AutodocError
from api_autodoc.extract.source import PrebuiltTransactionSource
from api_autodoc.models import Capture
from api_autodoc.registry import InMemoryRegistry, load_registry
from api_autodoc.render.document import Document
from api_autodoc.render.documents import Documents

CAPTURE_SUFFIXES = (".yaml", ".yml", ".json")


def _load_capture(file_path: Path) -> Capture:
    """Load a capture file (YAML or JSON)."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
        return Capture.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise click.ClickException(f"{file_path}: invalid capture: {e}")


def _build_document(config_path: Path | None, schema_path: Path | None, output_root: Path | None) -> Document:
    try:
        configuration = load_configuration(config_path) if config_path else Configuration()
        registry = load_registry(schema_path) if schema_path else InMemoryRegistry()
    except AutodocError as e:
        raise click.ClickException(str(e))
    if output_root is not None:
        configuration.output_root = output_root
    return Document(configuration, registry)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug details.")
def main(verbose: bool):
    """API Autodoc: render Markdown API docs from recorded HTTP exchanges."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("capture_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the document here instead of stdout.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("--schema", "schema_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML parameter declarations.")
def render(capture_path: Path, output: Path | None, config_path: Path | None, schema_path: Path | None):
    """Render a single capture file to Markdown."""
    capture = _load_capture(capture_path)
    document = _build_document(config_path, schema_path, None)
    source = PrebuiltTransactionSource(capture.transaction, capture.description)
    try:
        markdown = document.render(source, capture.example)
    except AutodocError as e:
        raise click.ClickException(f"{capture_path}: {e}")

    if output is None:
        click.echo(markdown, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    click.echo(f"Document saved to {output}")


@main.command()
@click.argument("capture_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output root (overrides the configuration).")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("--schema", "schema_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML parameter declarations.")
@click.option("--toc/--no-toc", default=None, help="Also write a table of contents.")
def build(capture_dir: Path, output: Path | None, config_path: Path | None, schema_path: Path | None, toc: bool | None):
    """Render every capture in a directory and write the documentation tree."""
    document = _build_document(config_path, schema_path, output)
    if toc is not None:
        document.configuration.toc = toc

    capture_files = sorted(p for p in capture_dir.rglob("*") if p.suffix in CAPTURE_SUFFIXES)
    click.echo(f"Found {len(capture_files)} captures in {capture_dir}.")

    documents = Documents(document.configuration)
    for capture_path in capture_files:
        capture = _load_capture(capture_path)
        source = PrebuiltTransactionSource(capture.transaction, capture.description)
        try:
            documents.append(document.prepare(source, capture.example))
        except AutodocError as e:
            raise click.ClickException(f"{capture_path}: {e}")

    try:
        written = documents.write()
    except AutodocError as e:
        raise click.ClickException(str(e))
    for file_path in written:
        click.echo(f"  Created {file_path}")
    click.echo(f"Done! Wrote {len(documents)} documents to {document.configuration.output_root}")
