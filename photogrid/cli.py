"""
Command-line interface for photo grid layout files.

Usage:
    photogrid new album.json --rows 3 --cols 4
    photogrid inspect album.json
    photogrid validate album.json
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__, config
from .errors import LayoutFormatError
from .grid_layout import GridPartition
from .photos import PhotoGallery
from .serialization import export_layout, import_layout, load_layout_from_file, save_layout_to_file
from .tracks import Axis

app = typer.Typer(
    name="photogrid",
    help="Create and inspect photo collage grid layouts.",
    add_completion=False,
)
console = Console()

_LABELS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"photogrid version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """photogrid - magazine-style photo collage layouts."""


def render_map(partition: GridPartition) -> List[str]:
    """One text line per grid row; each visible cell gets a letter, gaps are dots."""
    labels = {
        cell.id: _LABELS[i % len(_LABELS)]
        for i, cell in enumerate(partition.visible_cells())
    }
    return [
        " ".join(labels.get(cell_id, "?") if cell_id else "." for cell_id in line)
        for line in partition.coverage_map()
    ]


def _load(path: Path, strict: bool):
    try:
        return import_layout(load_layout_from_file(path), strict=strict)
    except (ValueError, LayoutFormatError) as exc:
        console.print(f"[red]Cannot load {path}:[/red] {exc}")
        raise typer.Exit(code=1)


@app.command()
def new(
    output: Path = typer.Argument(..., help="Where to write the layout JSON file."),
    rows: int = typer.Option(config.DEFAULT_ROWS, "--rows", "-r", min=1, help="Number of rows."),
    cols: int = typer.Option(config.DEFAULT_COLUMNS, "--cols", "-c", min=1, help="Number of columns."),
    name: str = typer.Option(config.DEFAULT_LAYOUT_NAME, "--name", "-n", help="Layout name."),
):
    """Write an empty uniform grid layout."""
    partition = GridPartition(rows, cols)
    record = export_layout(partition, partition.tracks, PhotoGallery(), name=name)
    try:
        path = save_layout_to_file(record, output)
    except ValueError as exc:
        console.print(f"[red]Cannot write {output}:[/red] {exc}")
        raise typer.Exit(code=1)
    console.print(f"[green]Created[/green] {rows}x{cols} layout at {path}")


@app.command()
def inspect(
    path: Path = typer.Argument(..., help="Layout JSON file to show."),
):
    """Show the cells, track weights and a map of a layout."""
    imported = _load(path, strict=False)
    partition = imported.partition

    console.print(f"[bold]{imported.name}[/bold]  {partition.rows}x{partition.columns}, "
                  f"{len(imported.gallery)} photo(s)")
    console.print(f"rows:    {partition.tracks.template(Axis.ROWS)}")
    console.print(f"columns: {partition.tracks.template(Axis.COLUMNS)}")

    table = Table(title="Cells")
    table.add_column("Id")
    table.add_column("Row", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Span")
    table.add_column("Photo")
    for cell in partition.visible_cells():
        photo = imported.gallery.find(cell.occupant.photo_id) if cell.occupant else None
        table.add_row(
            cell.id,
            str(cell.row),
            str(cell.col),
            f"{cell.row_span}x{cell.col_span}",
            photo.filename if photo else "",
        )
    console.print(table)
    for line in render_map(partition):
        console.print(line, highlight=False)
    if imported.dropped_cells:
        console.print(f"[yellow]Dropped cells:[/yellow] {', '.join(imported.dropped_cells)}")


@app.command()
def validate(
    path: Path = typer.Argument(..., help="Layout JSON file to check."),
):
    """Check that a layout imports without repairs."""
    imported = _load(path, strict=True)
    gaps = imported.partition.gaps()
    if gaps:
        console.print(f"[yellow]{len(gaps)} uncovered position(s)[/yellow]")
    console.print(f"[green]OK[/green] {path}")


if __name__ == "__main__":
    app()
