"""CLI entry point for api-collection-kit."""

import logging
from pathlib import Path

import click

from api_collection_kit.bulk import ReplaceOptions, export_variables, import_variables, replace_in_collection
from api_collection_kit.converter import TARGET_FORMATS, convert_collection
from api_collection_kit.errors import CollectionError
from api_collection_kit.models import UnifiedCollection
from api_collection_kit.parser import detect_file_format, load_structured, parse_collection_file, read_text_file
from api_collection_kit.storage import CollectionStore

FORMAT_CHOICE = click.Choice(list(TARGET_FORMATS))
VARIABLE_FORMAT_CHOICE = click.Choice(["json", "csv"])


def _parse(file_path: Path) -> UnifiedCollection:
    try:
        return parse_collection_file(file_path)
    except CollectionError as e:
        raise click.ClickException(str(e)) from e


def _emit(text: str, output: Path | None) -> None:
    """Write ``text`` to ``output``, or to stdout when no output path is given."""
    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    click.echo(f"Saved to {output}", err=True)


def _default_target(collection: UnifiedCollection) -> str:
    return collection.source_format if collection.source_format in TARGET_FORMATS else "json"


def _convert(collection: UnifiedCollection, target: str) -> str:
    try:
        return convert_collection(collection, target)
    except CollectionError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """API Collection Kit: convert and bulk-edit Postman, Insomnia and Thunder Client collections."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def detect(file_path: Path):
    """Print the detected format of a collection file."""
    data = None
    if detect_file_format(file_path) not in ("env", "csv"):
        try:
            data = load_structured(read_text_file(file_path), file_path.name)
        except CollectionError:
            data = None
    click.echo(detect_file_format(file_path, data))


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--to", "target", required=True, type=FORMAT_CHOICE, help="Target format.")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output file path. Defaults to stdout.")
def convert(file_path: Path, target: str, output: Path | None):
    """Convert a collection file to another format."""
    collection = _parse(file_path)
    click.echo(f"Parsed {collection.name!r} ({collection.source_format}), converting to {target}...", err=True)
    _emit(_convert(collection, target), output)


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--find", "find", required=True, help="Text to find (matched literally).")
@click.option("--replace", "replace", default="", help="Replacement text.")
@click.option("--scope", default="all", type=click.Choice(["all", "variables", "requests"]), help="Fields to search.")
@click.option("--case-sensitive", is_flag=True, help="Match case exactly.")
@click.option("--to", "target", default=None, type=FORMAT_CHOICE, help="Output format. Defaults to the source format.")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output file path. Defaults to stdout.")
def replace(file_path: Path, find: str, replace: str, scope: str, case_sensitive: bool, target: str | None, output: Path | None):
    """Find and replace text across variables and requests."""
    collection = _parse(file_path)
    result = replace_in_collection(
        collection,
        ReplaceOptions(find=find, replace=replace, scope=scope, case_sensitive=case_sensitive),
    )
    click.echo(f"Replaced {result.count} occurrence(s).", err=True)
    _emit(_convert(result.collection, target or _default_target(collection)), output)


@main.command("export-vars")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", default="json", type=VARIABLE_FORMAT_CHOICE, help="Variable export format.")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output file path. Defaults to stdout.")
def export_vars(file_path: Path, fmt: str, output: Path | None):
    """Export the variables of a collection as JSON or CSV."""
    collection = _parse(file_path)
    _emit(export_variables(collection, fmt), output)


@main.command("import-vars")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("vars_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", default=None, type=VARIABLE_FORMAT_CHOICE, help="Variable file format. Guessed from the extension.")
@click.option("--to", "target", default=None, type=FORMAT_CHOICE, help="Output format. Defaults to the source format.")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output file path. Defaults to stdout.")
def import_vars(file_path: Path, vars_path: Path, fmt: str | None, target: str | None, output: Path | None):
    """Replace the variables of a collection with those in VARS_PATH."""
    collection = _parse(file_path)
    fmt = fmt or ("csv" if vars_path.suffix.lower() == ".csv" else "json")
    try:
        updated = import_variables(collection, read_text_file(vars_path), fmt)
    except CollectionError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Imported {len(updated.variables)} variable(s).", err=True)
    _emit(_convert(updated, target or _default_target(collection)), output)


@main.group()
@click.option("--path", "store_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Store file. Defaults to $API_COLLECTION_KIT_STORE.")
@click.pass_context
def store(ctx: click.Context, store_path: Path | None):
    """Manage saved collections."""
    ctx.obj = CollectionStore(store_path)


def _load_all(collection_store: CollectionStore) -> list[UnifiedCollection]:
    try:
        return collection_store.load()
    except CollectionError as e:
        raise click.ClickException(str(e)) from e


@store.command("add")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def store_add(collection_store: CollectionStore, file_path: Path):
    """Parse a collection file and save it."""
    collection = _parse(file_path)
    try:
        collection_store.upsert(collection)
    except CollectionError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Saved {collection.name!r} as {collection.id}")


@store.command("list")
@click.pass_obj
def store_list(collection_store: CollectionStore):
    """List saved collections."""
    collections = _load_all(collection_store)
    if not collections:
        click.echo("No saved collections.")
        return
    for c in collections:
        request_count = sum(1 for _ in c.iter_requests())
        click.echo(f"{c.id}\t{c.type}\t{c.source_format}\t{c.name}\t{request_count} requests, {len(c.variables)} variables")


@store.command("show")
@click.argument("collection_id")
@click.option("--to", "target", default=None, type=FORMAT_CHOICE, help="Output format. Defaults to the source format.")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output file path. Defaults to stdout.")
@click.pass_obj
def store_show(collection_store: CollectionStore, collection_id: str, target: str | None, output: Path | None):
    """Print a saved collection in the requested format."""
    collection = next((c for c in _load_all(collection_store) if c.id == collection_id), None)
    if collection is None:
        raise click.ClickException(f"No saved collection with id {collection_id}")
    _emit(_convert(collection, target or _default_target(collection)), output)


@store.command("remove")
@click.argument("collection_id")
@click.pass_obj
def store_remove(collection_store: CollectionStore, collection_id: str):
    """Delete a saved collection."""
    try:
        removed = collection_store.delete(collection_id)
    except CollectionError as e:
        raise click.ClickException(str(e)) from e
    if not removed:
        raise click.ClickException(f"No saved collection with id {collection_id}")
    click.echo(f"Removed {collection_id}")


@store.command("clear")
@click.confirmation_option(prompt="Delete all saved collections?")
@click.pass_obj
def store_clear(collection_store: CollectionStore):
    """Delete every saved collection."""
    collection_store.clear()
    click.echo("Cleared all saved collections.")
