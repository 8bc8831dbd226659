import pytest

from photogrid import Axis, GridPartition
from photogrid.controllers import DragController, DragKind


@pytest.fixture
def grid():
    return GridPartition(2, 3)


def test_column_divider_drag_advances_anchor_only_on_commit(grid):
    drag = DragController(grid.tracks)
    assert drag.begin_drag(DragKind.COLUMN_DIVIDER, (100, 10), extent=(300, 200), index=0)

    assert drag.drag_to((120, 10)) is True
    assert drag.anchor == (120, 10)
    assert grid.tracks.weights(Axis.COLUMNS)[:2] == pytest.approx([1.2, 0.8])

    # Would squeeze the right column below the floor: tick dropped.
    assert drag.drag_to((300, 10)) is False
    assert drag.anchor == (120, 10)
    assert grid.tracks.weights(Axis.COLUMNS)[:2] == pytest.approx([1.2, 0.8])

    # The next tick is measured from the last committed position.
    assert drag.drag_to((110, 10)) is True
    assert grid.tracks.weights(Axis.COLUMNS)[:2] == pytest.approx([1.1, 0.9])

    drag.end_drag()
    assert not drag.active
    assert drag.drag_to((0, 0)) is False


def test_row_divider_uses_vertical_delta(grid):
    drag = DragController(grid.tracks)
    assert drag.begin_drag(DragKind.ROW_DIVIDER, (0, 50), extent=(300, 200), index=0)
    assert drag.drag_to((999, 70)) is True
    assert grid.tracks.weights(Axis.ROWS) == pytest.approx([1.2, 0.8])
    assert grid.tracks.weights(Axis.COLUMNS) == [1.0, 1.0, 1.0]


def test_divider_drag_needs_valid_index(grid):
    drag = DragController(grid.tracks)
    assert drag.begin_drag(DragKind.ROW_DIVIDER, (0, 0), extent=(10, 10), index=1) is False
    assert not drag.active


def test_photo_pan_is_relative_to_drag_start(grid):
    cell = grid.find_cell_containing(1, 1)
    grid.place_photo(cell, "photo-1")
    drag = DragController(grid.tracks)

    assert drag.begin_drag(DragKind.PHOTO, (10, 10), extent=(200, 100), cell=cell)
    drag.drag_to((30, 20))
    assert (cell.occupant.x, cell.occupant.y) == pytest.approx((60.0, 60.0))
    drag.drag_to((10, 0))
    assert (cell.occupant.x, cell.occupant.y) == pytest.approx((50.0, 40.0))
    drag.end_drag()


def test_photo_drag_requires_a_photo(grid):
    drag = DragController(grid.tracks)
    cell = grid.find_cell_containing(1, 1)
    assert drag.begin_drag(DragKind.PHOTO, (0, 0), extent=(10, 10), cell=cell) is False


def test_dragging_context_clears_state_on_error(grid):
    drag = DragController(grid.tracks)
    with pytest.raises(RuntimeError):
        with drag.dragging(DragKind.COLUMN_DIVIDER, (0, 0), extent=(300, 200), index=1) as started:
            assert started
            drag.drag_to((10, 0))
            raise RuntimeError("pointer stream lost")
    assert not drag.active
    assert drag.anchor is None


def test_new_drag_replaces_stale_one(grid):
    cell = grid.find_cell_containing(2, 2)
    grid.place_photo(cell, "photo-1")
    drag = DragController(grid.tracks)
    drag.begin_drag(DragKind.COLUMN_DIVIDER, (0, 0), extent=(300, 200), index=0)
    drag.begin_drag(DragKind.PHOTO, (5, 5), extent=(100, 100), cell=cell)
    assert drag.kind is DragKind.PHOTO
    assert drag.anchor == (5, 5)
