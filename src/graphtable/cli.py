"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.console import Console
from rich.tree import Tree

from .errors import GraphTableError, RecordsLoadError
from .models.fields import fields_for_request
from .models.index_builder import IndexBuilder, SortDescriptor, group_key_for_field
from .models.list_projection import ListProjection
from .models.record_store import RecordStore
from .utils.jsonio import read_json

app = typer.Typer(help="Preview how records are grouped into list sections")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RecordsLoadError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except GraphTableError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output")) -> None:
    """Configure logging for every command."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_records(path: Path) -> list[dict]:
    try:
        payload = read_json(path)
    except (OSError, ValueError) as exc:
        raise RecordsLoadError(f"cannot read {path}: {exc}") from exc
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]
    if not isinstance(payload, list):
        raise RecordsLoadError(f"{path} must contain a JSON array of objects")
    return [item for item in payload if isinstance(item, dict)]


@app.command()
@_handle_errors
def sections(
    records_file: Path = typer.Argument(..., help="JSON array of records"),
    group_by: Optional[str] = typer.Option("name", "--group-by", help="Field whose first letter names the section"),
    sort: Optional[str] = typer.Option(None, "--sort", help="Field used to order rows within a section"),
    descending: bool = typer.Option(False, "--descending", help="Reverse the row order"),
    title_field: Optional[str] = typer.Option(None, "--title-field", help="Field shown for each row"),
    more: bool = typer.Option(False, "--more", help="Show the loading row as if more pages were pending"),
) -> None:
    """Print the sectioned projection of RECORDS_FILE."""

    store = RecordStore()
    store.append(_load_records(records_file))
    if not more:
        store.append(None)

    group_key = group_key_for_field(group_by)
    comparators = [SortDescriptor(sort, ascending=not descending)] if sort else None
    index = IndexBuilder.rebuild(store.records, None, group_key, comparators)
    projection = ListProjection(
        lambda: index,
        lambda: store.expecting_more,
        lambda: more,
        lambda: group_key,
    )

    label_field = title_field or group_by
    tree = Tree(f"[bold]{records_file.name}[/bold] ({len(store)} records)")
    for section, key in enumerate(projection.section_titles()):
        branch = tree.add(f"[bold cyan]{key or '∅'}[/bold cyan]")
        for row in range(projection.row_count(section)):
            if projection.is_paging_sentinel(section, row):
                branch.add("[dim]… loading more[/dim]")
                continue
            record = projection.record_at(section, row)
            value = record.get(label_field) if record is not None and label_field else None
            branch.add("" if value is None else str(value))
    Console().print(tree)


@app.command()
def fields(
    custom: List[str] = typer.Argument(None, help="Fields the caller wants"),
    group_by: Optional[str] = typer.Option(None, "--group-by", help="Grouping field to include"),
) -> None:
    """Print the comma separated field list for a record request."""

    print(fields_for_request(custom or [], group_by_field=group_by))


if __name__ == "__main__":
    app()
