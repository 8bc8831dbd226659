import json

from typer.testing import CliRunner

from photogrid import Direction, GridPartition, PhotoGallery, SpanMutator
from photogrid.cli import app, render_map
from photogrid.serialization import export_layout, save_layout_to_file

runner = CliRunner()


def test_new_then_inspect(tmp_path):
    target = tmp_path / "album.json"
    result = runner.invoke(app, ["new", str(target), "--rows", "2", "--cols", "3", "--name", "Test"])
    assert result.exit_code == 0, result.output
    record = json.loads(target.read_text(encoding="utf-8"))
    assert record["gridRows"] == 2 and record["gridCols"] == 3
    assert len(record["cells"]) == 6

    result = runner.invoke(app, ["inspect", str(target)])
    assert result.exit_code == 0, result.output
    assert "Test" in result.output
    assert "A B C" in result.output


def test_render_map_marks_merged_cells_and_gaps():
    grid = GridPartition(2, 2)
    mutator = SpanMutator(grid)
    mutator.grow(grid.find_cell_containing(1, 1), Direction.RIGHT)
    grid.remove_cell(grid.find_cell_containing(2, 2))
    assert render_map(grid) == ["A A", "B ."]


def test_validate_reports_bad_layout(tmp_path):
    grid = GridPartition(1, 1)
    record = export_layout(grid, grid.tracks, PhotoGallery())
    record["cells"][0]["colSpan"] = 2
    path = save_layout_to_file(record, tmp_path / "bad.json")

    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 1

    record["cells"][0]["colSpan"] = 1
    save_layout_to_file(record, path)
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 0
    assert "OK" in result.output


def test_inspect_missing_file(tmp_path):
    result = runner.invoke(app, ["inspect", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
