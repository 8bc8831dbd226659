"""Span editing for collage cells.

Cells grow by absorbing the line of plain cells next to them, shrink by
giving up their last row or column, and when a cell is deleted a neighbour
above or to the left may grow into the hole.  Edits that are not allowed
return ``False`` (or ``None``) without touching the grid so a UI can simply
disable the matching control.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from .errors import ConfirmationRequired
from .grid_layout import Cell, GridPartition


LOGGER = logging.getLogger(__name__)


class Direction(str, Enum):
    DOWN = "down"
    RIGHT = "right"


class SpanMutator:
    """Grow, shrink and delete cells of a :class:`GridPartition`."""

    def __init__(self, partition: GridPartition) -> None:
        self.partition = partition

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _span(self, cell: Cell, direction: Direction) -> int:
        return cell.row_span if direction is Direction.DOWN else cell.col_span

    def _absorbable_line(self, cell: Cell, direction: Direction, span: int) -> Optional[List[Cell]]:
        """Cells filling the line that would make ``cell`` span ``span`` units.

        Returns ``None`` when the line is outside the grid or holds a photo or
        a merged cell.  Uncovered positions in the line do not block.
        """
        grid = self.partition
        if direction is Direction.DOWN:
            target = cell.row + span - 1
            if target > grid.rows:
                return None
            positions = [(target, c) for c in range(cell.col, cell.col_end)]
        else:
            target = cell.col + span - 1
            if target > grid.columns:
                return None
            positions = [(r, target) for r in range(cell.row, cell.row_end)]

        absorbed: List[Cell] = []
        for row, col in positions:
            neighbour = grid.covering_cell(row, col, exclude=cell)
            if neighbour is None:
                continue
            if neighbour.has_photo or not neighbour.is_unit:
                return None
            absorbed.append(neighbour)
        return absorbed

    def _absorb(self, cell: Cell, direction: Direction, absorbed: List[Cell]) -> None:
        for neighbour in absorbed:
            self.partition.remove_cell(neighbour)
        if direction is Direction.DOWN:
            cell.row_span += 1
        else:
            cell.col_span += 1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def can_grow(self, cell: Cell, direction: Direction) -> bool:
        return self._absorbable_line(cell, direction, self._span(cell, direction) + 1) is not None

    def grow(self, cell: Cell, direction: Direction) -> bool:
        """Extend ``cell`` by one row or column, absorbing the cells there."""
        absorbed = self._absorbable_line(cell, direction, self._span(cell, direction) + 1)
        if absorbed is None:
            LOGGER.debug("Grow %s blocked for %s", direction.value, cell.id)
            return False
        self._absorb(cell, direction, absorbed)
        LOGGER.debug("Grew %s %s to %dx%d", cell.id, direction.value, cell.row_span, cell.col_span)
        return True

    def shrink(self, cell: Cell, direction: Direction) -> bool:
        """Give up the last row or column of ``cell``.

        The vacated positions are left uncovered.
        """
        if self._span(cell, direction) <= 1:
            return False
        if direction is Direction.DOWN:
            cell.row_span -= 1
        else:
            cell.col_span -= 1
        return True

    def can_grow_to_edge(self, cell: Cell, direction: Direction) -> bool:
        return self.can_grow(cell, direction)

    def grow_to_edge(self, cell: Cell, direction: Direction) -> int:
        """Keep growing ``cell`` until blocked or at the grid edge.

        Every absorbed line is kept even if a later one is blocked.
        Returns the number of lines absorbed.
        """
        steps = 0
        while self.grow(cell, direction):
            steps += 1
        return steps

    def delete_cell(self, cell: Cell, *, confirmed: bool = False) -> Optional[Cell]:
        """Remove ``cell`` and let a neighbour take over its area.

        Returns the neighbour that grew into the hole, or ``None`` when the
        area is left as a gap.
        """
        if cell.has_photo and not confirmed:
            raise ConfirmationRequired(
                "delete_cell", "This cell has a photo. Are you sure you want to delete it?"
            )
        self.partition.remove_cell(cell)
        return self.heal_hole(cell.row, cell.col, cell.row_span, cell.col_span)

    def heal_hole(self, row: int, col: int, row_span: int, col_span: int) -> Optional[Cell]:
        """Grow the cell above, else the cell to the left, over a hole."""
        grid = self.partition
        if row > 1:
            above = next(
                (
                    c for c in grid.cells
                    if c.col == col and c.col_span == col_span and c.row_end == row
                ),
                None,
            )
            if above is not None and self._can_extend(above, above.row_span + row_span, above.col_span):
                above.row_span += row_span
                LOGGER.debug("Healed hole at (%d, %d) by growing %s down", row, col, above.id)
                return above

        if col > 1:
            left = next(
                (
                    c for c in grid.cells
                    if c.row == row and c.row_span == row_span and c.col_end == col
                ),
                None,
            )
            if left is not None and self._can_extend(left, left.row_span, left.col_span + col_span):
                left.col_span += col_span
                LOGGER.debug("Healed hole at (%d, %d) by growing %s right", row, col, left.id)
                return left

        LOGGER.debug("Hole at (%d, %d) %dx%d left uncovered", row, col, row_span, col_span)
        return None

    def _can_extend(self, cell: Cell, row_span: int, col_span: int) -> bool:
        grid = self.partition
        return grid.in_bounds(cell.row, cell.col, row_span, col_span) and grid.rect_is_free(
            cell.row, cell.col, row_span, col_span, exclude=cell
        )
