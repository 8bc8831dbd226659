import itertools
import random

import pytest

from photogrid import ConfirmationRequired, Direction, GridPartition, SpanMutator


@pytest.fixture
def grid():
    return GridPartition(2, 2)


def test_grow_right_absorbs_neighbour(grid):
    mutator = SpanMutator(grid)
    anchor = grid.find_cell_containing(1, 1)
    absorbed_id = grid.find_cell_containing(1, 2).id

    assert mutator.grow(anchor, Direction.RIGHT) is True
    assert anchor.col_span == 2
    assert len(grid) == 3
    assert absorbed_id not in {c.id for c in grid.cells}
    assert grid.problems() == []


def test_grow_blocked_by_photo_leaves_grid_unchanged(grid):
    mutator = SpanMutator(grid)
    anchor = grid.find_cell_containing(1, 1)
    grid.place_photo(grid.find_cell_containing(1, 2), "photo-1")
    before = [(c.id, c.row, c.col, c.row_span, c.col_span) for c in grid.cells]

    assert mutator.can_grow(anchor, Direction.RIGHT) is False
    assert mutator.grow(anchor, Direction.RIGHT) is False
    assert [(c.id, c.row, c.col, c.row_span, c.col_span) for c in grid.cells] == before


def test_grow_blocked_by_merged_neighbour():
    grid = GridPartition(3, 3)
    mutator = SpanMutator(grid)
    right = grid.find_cell_containing(1, 2)
    assert mutator.grow(right, Direction.DOWN)

    anchor = grid.find_cell_containing(1, 1)
    assert mutator.can_grow(anchor, Direction.RIGHT) is False


def test_grow_blocked_by_cell_reaching_in_from_elsewhere():
    grid = GridPartition(2, 3)
    mutator = SpanMutator(grid)
    middle = grid.find_cell_containing(2, 2)
    assert mutator.grow(middle, Direction.RIGHT)

    # (2, 3) is covered by the merged cell anchored at (2, 2).
    corner = grid.find_cell_containing(1, 3)
    assert mutator.grow(corner, Direction.DOWN) is False
    assert grid.problems() == []


def test_grow_blocked_at_grid_edge(grid):
    mutator = SpanMutator(grid)
    cell = grid.find_cell_containing(2, 2)
    assert mutator.can_grow(cell, Direction.DOWN) is False
    assert mutator.can_grow(cell, Direction.RIGHT) is False


def test_grow_multi_row_cell_absorbs_whole_line():
    grid = GridPartition(3, 3)
    mutator = SpanMutator(grid)
    anchor = grid.find_cell_containing(1, 1)
    assert mutator.grow(anchor, Direction.DOWN)
    assert mutator.grow(anchor, Direction.RIGHT)
    assert (anchor.row_span, anchor.col_span) == (2, 2)
    assert len(grid) == 6


def test_shrink_leaves_gap(grid):
    mutator = SpanMutator(grid)
    anchor = grid.find_cell_containing(1, 1)
    mutator.grow(anchor, Direction.RIGHT)

    assert mutator.shrink(anchor, Direction.RIGHT) is True
    assert anchor.col_span == 1
    assert grid.gaps() == [(1, 2)]
    assert mutator.shrink(anchor, Direction.RIGHT) is False


def test_gap_is_reclaimed_by_later_grow(grid):
    mutator = SpanMutator(grid)
    anchor = grid.find_cell_containing(1, 1)
    mutator.grow(anchor, Direction.RIGHT)
    mutator.shrink(anchor, Direction.RIGHT)

    assert mutator.grow(anchor, Direction.RIGHT) is True
    assert grid.gaps() == []


def test_grow_to_edge_keeps_partial_progress():
    grid = GridPartition(5, 1)
    mutator = SpanMutator(grid)
    grid.place_photo(grid.find_cell_containing(4, 1), "photo-1")
    anchor = grid.find_cell_containing(1, 1)

    assert mutator.can_grow_to_edge(anchor, Direction.DOWN)
    assert mutator.grow_to_edge(anchor, Direction.DOWN) == 2
    assert anchor.row_span == 3
    assert len(grid) == 3


def test_grow_to_edge_reaches_boundary():
    grid = GridPartition(1, 4)
    mutator = SpanMutator(grid)
    anchor = grid.find_cell_containing(1, 2)
    assert mutator.grow_to_edge(anchor, Direction.RIGHT) == 2
    assert anchor.col_span == 3
    assert mutator.can_grow_to_edge(anchor, Direction.RIGHT) is False


def test_delete_middle_cell_heals_from_above():
    grid = GridPartition(3, 1)
    mutator = SpanMutator(grid)
    top = grid.find_cell_containing(1, 1)

    healer = mutator.delete_cell(grid.find_cell_containing(2, 1))

    assert healer is top
    assert top.row_span == 2
    assert len(list(grid.visible_cells())) == 2
    assert grid.gaps() == []


def test_delete_heals_from_left_when_above_does_not_match():
    grid = GridPartition(2, 2)
    mutator = SpanMutator(grid)
    mutator.grow(grid.find_cell_containing(1, 1), Direction.RIGHT)
    left = grid.find_cell_containing(2, 1)

    healer = mutator.delete_cell(grid.find_cell_containing(2, 2))

    assert healer is left
    assert left.col_span == 2
    assert grid.gaps() == []


def test_delete_without_compatible_neighbour_leaves_gap():
    grid = GridPartition(2, 2)
    mutator = SpanMutator(grid)
    assert mutator.delete_cell(grid.find_cell_containing(1, 1)) is None
    assert grid.gaps() == [(1, 1)]


def test_delete_tall_hole_scans_whole_rectangle():
    grid = GridPartition(3, 2)
    mutator = SpanMutator(grid)
    bottom = grid.find_cell_containing(2, 2)
    mutator.grow(bottom, Direction.DOWN)

    healer = mutator.delete_cell(bottom)

    above = grid.find_cell_containing(1, 2)
    assert healer is above
    assert above.row_span == 3
    assert grid.problems() == []


def test_delete_occupied_cell_requires_confirmation(grid):
    mutator = SpanMutator(grid)
    cell = grid.find_cell_containing(2, 1)
    grid.place_photo(cell, "photo-1")

    with pytest.raises(ConfirmationRequired):
        mutator.delete_cell(cell)
    assert cell.id in {c.id for c in grid.cells}

    mutator.delete_cell(cell, confirmed=True)
    assert cell.id not in {c.id for c in grid.cells}


def test_random_edit_sequences_never_overlap():
    rng = random.Random(1234)
    for _ in range(30):
        grid = GridPartition(rng.randint(1, 4), rng.randint(1, 4))
        mutator = SpanMutator(grid)
        for _ in range(40):
            action = rng.choice(["grow", "shrink", "delete", "edge", "row", "col"])
            cells = grid.cells
            if action == "row":
                grid.append_row()
                continue
            if action == "col":
                grid.append_column()
                continue
            if not cells:
                continue
            cell = rng.choice(cells)
            direction = rng.choice(list(Direction))
            if action == "grow":
                mutator.grow(cell, direction)
            elif action == "shrink":
                mutator.shrink(cell, direction)
            elif action == "edge":
                mutator.grow_to_edge(cell, direction)
            else:
                mutator.delete_cell(cell, confirmed=True)
            assert grid.problems() == []
        for a, b in itertools.combinations(grid.cells, 2):
            assert not a.overlaps(b.row, b.col, b.row_span, b.col_span)
