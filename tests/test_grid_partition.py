import pytest

from photogrid import (
    Axis,
    Cell,
    CellNotFoundError,
    ConfirmationRequired,
    Direction,
    GridPartition,
    SpanMutator,
    TrackSizer,
)


def test_initialize_creates_one_visible_cell_per_coordinate():
    grid = GridPartition(3, 4)
    visible = list(grid.visible_cells())
    assert len(visible) == 12
    assert {(c.row, c.col) for c in visible} == {
        (r, c) for r in range(1, 4) for c in range(1, 5)
    }
    assert all(c.is_unit for c in visible)
    assert grid.tracks.weights(Axis.ROWS) == [1.0, 1.0, 1.0]
    assert grid.tracks.weights(Axis.COLUMNS) == [1.0] * 4
    assert grid.problems() == []


def test_initialize_rejects_empty_grid():
    with pytest.raises(ValueError):
        GridPartition(0, 2)


def test_visible_cells_is_restartable():
    grid = GridPartition(2, 2)
    first = [c.id for c in grid.visible_cells()]
    second = [c.id for c in grid.visible_cells()]
    assert first == second


def test_append_row_and_column_add_unit_cells_and_weights():
    grid = GridPartition(2, 2)
    grid.append_row()
    grid.append_column()
    assert (grid.rows, grid.columns) == (3, 3)
    assert len(grid) == 9
    assert grid.tracks.count(Axis.ROWS) == 3
    assert grid.tracks.count(Axis.COLUMNS) == 3
    assert grid.find_cell_containing(3, 3).is_unit
    assert len({c.id for c in grid.cells}) == 9
    assert grid.problems() == []


def test_remove_last_row_drops_cells_and_weight():
    grid = GridPartition(3, 2)
    assert grid.remove_last_row() is True
    assert grid.rows == 2
    assert len(grid) == 4
    assert grid.tracks.count(Axis.ROWS) == 2
    assert grid.problems() == []


def test_remove_last_line_blocked_at_one():
    grid = GridPartition(1, 1)
    assert grid.remove_last_row() is False
    assert grid.remove_last_column() is False
    assert (grid.rows, grid.columns) == (1, 1)


def test_remove_line_with_photo_requires_confirmation():
    grid = GridPartition(2, 2)
    cell = grid.find_cell_containing(1, 2)
    grid.place_photo(cell, "photo-1")

    assert grid.line_has_occupant(Axis.COLUMNS, 2)
    with pytest.raises(ConfirmationRequired):
        grid.remove_last_column()
    assert grid.columns == 2 and len(grid) == 4

    assert grid.remove_last_column(confirmed=True) is True
    assert grid.columns == 1
    assert grid.occupied_cells() == []


def test_remove_last_row_clips_merged_cell_reaching_into_it():
    grid = GridPartition(3, 1)
    top = grid.find_cell_containing(1, 1)
    grid.remove_cell(grid.find_cell_containing(2, 1))
    grid.remove_cell(grid.find_cell_containing(3, 1))
    top.row_span = 3

    assert grid.remove_last_row() is True
    assert top.row_span == 2
    assert grid.problems() == []


def test_is_occupied_and_place_photo_on_hidden_cell():
    grid = GridPartition(2, 2)
    anchor = grid.find_cell_containing(1, 1)
    hidden = grid.find_cell_containing(1, 2)
    anchor.col_span = 2  # overlap on purpose to exercise the query

    assert grid.is_occupied(hidden.row, hidden.col)
    assert not grid.is_visible(hidden)
    assert grid.place_photo(hidden, "photo-1") is False
    assert hidden.occupant is None


def test_lookups_raise_not_found():
    grid = GridPartition(2, 2)
    with pytest.raises(CellNotFoundError):
        grid.find_cell_by_id("cell-99")
    grid.remove_cell(grid.find_cell_containing(2, 2))
    with pytest.raises(CellNotFoundError):
        grid.find_cell_containing(2, 2)
    assert grid.gaps() == [(2, 2)]


def test_clear_photos_requires_confirmation():
    grid = GridPartition(2, 2)
    grid.place_photo(grid.find_cell_containing(1, 1), "photo-1")
    with pytest.raises(ConfirmationRequired):
        grid.clear_photos()
    assert grid.clear_photos(confirmed=True) == 1
    assert grid.occupied_cells() == []
    assert grid.clear_photos() == 0


def test_new_cell_ids_never_collide_after_absorption():
    grid = GridPartition(2, 2)
    grid.remove_cell(grid.find_cell_containing(1, 2))
    grid.append_row()
    ids = [c.id for c in grid.cells]
    assert len(ids) == len(set(ids))


def test_is_occupied_takes_a_coordinate():
    grid = GridPartition(2, 3)
    anchor = grid.find_cell_containing(1, 1)
    SpanMutator(grid).grow(anchor, Direction.RIGHT)

    assert not grid.is_occupied(1, 1)
    assert grid.is_occupied(1, 2)
    assert not grid.is_occupied(1, 3)
    assert not grid.is_occupied(2, 2)


def test_from_cells_skips_unit_expansion(monkeypatch):
    def fail(*_args, **_kwargs):
        raise AssertionError("initialize should not run")

    monkeypatch.setattr(GridPartition, "initialize", fail)
    tracks = TrackSizer(500, 400)
    cell = Cell(id="cell-7", row=1, col=1, row_span=500, col_span=400)

    grid = GridPartition.from_cells(500, 400, [cell], tracks=tracks)

    assert grid.cells == [cell]
    assert grid.tracks is tracks
    assert (grid.rows, grid.columns) == (500, 400)
    assert grid.problems() == []
    with pytest.raises(ValueError):
        GridPartition.from_cells(0, 1, [])
