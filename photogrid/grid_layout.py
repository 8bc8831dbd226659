"""Grid partition model for photo collages.

This module provides a pure-Python representation of a collage grid: a
``rows x columns`` area tiled by rectangular cells that may span several
rows and columns.  No two cells overlap.  A position may be left uncovered
after a deletion that could not be healed; such gaps are rendered empty.

Coordinates are 1-based ``(row, col)`` pairs.  The classes are UI agnostic
so they can be unit tested without a Qt environment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from . import config
from .errors import CellNotFoundError, ConfirmationRequired
from .tracks import Axis, TrackSizer


LOGGER = logging.getLogger(__name__)


Coord = Tuple[int, int]


@dataclass
class Placement:
    """How a photo sits inside its cell.

    ``x``/``y`` are percentages of the cell size and are not clamped so a
    photo can be panned partly out of view.  ``scale`` is kept within
    ``[MIN_PHOTO_SCALE, MAX_PHOTO_SCALE]``.
    """

    photo_id: str
    x: float = config.DEFAULT_PHOTO_X
    y: float = config.DEFAULT_PHOTO_Y
    scale: float = config.DEFAULT_PHOTO_SCALE
    rotation: float = config.DEFAULT_PHOTO_ROTATION

    def zoom(self, delta: float) -> float:
        self.scale = clamp_scale(self.scale + delta)
        return self.scale

    def wheel(self, delta_y: float) -> float:
        """Zoom one step; scrolling down (positive ``delta_y``) zooms out."""
        step = -config.ZOOM_STEP if delta_y > 0 else config.ZOOM_STEP
        return self.zoom(step)

    def rotate(self, degrees: float) -> float:
        self.rotation += degrees
        return self.rotation

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y


def clamp_scale(scale: float) -> float:
    return max(config.MIN_PHOTO_SCALE, min(config.MAX_PHOTO_SCALE, scale))


@dataclass
class Cell:
    """A rectangular block of the grid, optionally holding a photo."""

    id: str
    row: int
    col: int
    row_span: int = 1
    col_span: int = 1
    occupant: Optional[Placement] = field(default=None, compare=False)

    @property
    def row_end(self) -> int:
        """First row below the footprint."""
        return self.row + self.row_span

    @property
    def col_end(self) -> int:
        return self.col + self.col_span

    @property
    def is_unit(self) -> bool:
        return self.row_span == 1 and self.col_span == 1

    @property
    def has_photo(self) -> bool:
        return self.occupant is not None

    def contains(self, row: int, col: int) -> bool:
        return self.row <= row < self.row_end and self.col <= col < self.col_end

    def overlaps(self, row: int, col: int, row_span: int, col_span: int) -> bool:
        return (
            self.row < row + row_span
            and row < self.row_end
            and self.col < col + col_span
            and col < self.col_end
        )

    def footprint(self) -> Iterator[Coord]:
        for r in range(self.row, self.row_end):
            for c in range(self.col, self.col_end):
                yield r, c


class GridPartition:
    """Maintain the set of cells tiling a ``rows x columns`` grid."""

    def __init__(
        self,
        rows: int = config.DEFAULT_ROWS,
        columns: int = config.DEFAULT_COLUMNS,
        tracks: Optional[TrackSizer] = None,
    ) -> None:
        self.tracks = tracks or TrackSizer(rows, columns)
        self.rows = 0
        self.columns = 0
        self._cells: Dict[str, Cell] = {}
        self._next_id = 0
        self.initialize(rows, columns)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _new_cell(self, row: int, col: int) -> Cell:
        cell = Cell(id=f"{config.CELL_ID_PREFIX}{self._next_id}", row=row, col=col)
        self._next_id += 1
        self._cells[cell.id] = cell
        return cell

    def _reserve_ids_above(self, cell_id: str) -> None:
        suffix = cell_id[len(config.CELL_ID_PREFIX):]
        if cell_id.startswith(config.CELL_ID_PREFIX) and suffix.isdigit():
            self._next_id = max(self._next_id, int(suffix) + 1)

    @property
    def cells(self) -> List[Cell]:
        """All registered cells, in insertion order."""
        return list(self._cells.values())

    def __len__(self) -> int:
        return len(self._cells)

    def in_bounds(self, row: int, col: int, row_span: int = 1, col_span: int = 1) -> bool:
        return (
            row >= 1
            and col >= 1
            and row_span >= 1
            and col_span >= 1
            and row + row_span - 1 <= self.rows
            and col + col_span - 1 <= self.columns
        )

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    def initialize(self, rows: int, columns: int) -> None:
        """Replace every cell with a fresh grid of unit cells."""
        if rows < config.MIN_GRID_DIMENSION or columns < config.MIN_GRID_DIMENSION:
            raise ValueError("Grid must have positive dimensions")
        self.rows = rows
        self.columns = columns
        self._cells = {}
        self._next_id = 0
        for r in range(1, rows + 1):
            for c in range(1, columns + 1):
                self._new_cell(r, c)
        self.tracks.reset(rows, columns)
        LOGGER.debug("Initialized %dx%d grid", rows, columns)

    @classmethod
    def from_cells(
        cls,
        rows: int,
        columns: int,
        cells: List[Cell],
        tracks: Optional[TrackSizer] = None,
    ) -> "GridPartition":
        """Build a partition from pre-made cells without unit expansion."""
        if rows < config.MIN_GRID_DIMENSION or columns < config.MIN_GRID_DIMENSION:
            raise ValueError("Grid must have positive dimensions")
        partition = cls.__new__(cls)
        partition.tracks = tracks or TrackSizer(rows, columns)
        partition.rows = rows
        partition.columns = columns
        partition._cells = {}
        partition._next_id = 0
        for cell in cells:
            partition._cells[cell.id] = cell
            partition._reserve_ids_above(cell.id)
        return partition

    def add_cell(self, cell: Cell) -> None:
        if cell.id in self._cells:
            raise ValueError(f"Duplicate cell id: {cell.id}")
        self._cells[cell.id] = cell
        self._reserve_ids_above(cell.id)

    def remove_cell(self, cell: Cell) -> None:
        if self._cells.pop(cell.id, None) is None:
            raise CellNotFoundError(f"Cell not found: {cell.id}")

    def append_row(self) -> None:
        self.rows += 1
        for c in range(1, self.columns + 1):
            self._new_cell(self.rows, c)
        self.tracks.append_track(Axis.ROWS)

    def append_column(self) -> None:
        self.columns += 1
        for r in range(1, self.rows + 1):
            self._new_cell(r, self.columns)
        self.tracks.append_track(Axis.COLUMNS)

    def _cells_in_line(self, axis: Axis, index: int) -> List[Cell]:
        """Cells whose footprint lies entirely within one row or column."""
        if axis is Axis.ROWS:
            return [c for c in self._cells.values() if c.row == index and c.row_span == 1]
        return [c for c in self._cells.values() if c.col == index and c.col_span == 1]

    def line_has_occupant(self, axis: Axis, index: int) -> bool:
        return any(c.has_photo for c in self._cells_in_line(axis, index))

    def remove_last_row(self, *, confirmed: bool = False) -> bool:
        return self._remove_last_line(Axis.ROWS, confirmed=confirmed)

    def remove_last_column(self, *, confirmed: bool = False) -> bool:
        return self._remove_last_line(Axis.COLUMNS, confirmed=confirmed)

    def _remove_last_line(self, axis: Axis, *, confirmed: bool) -> bool:
        last = self.rows if axis is Axis.ROWS else self.columns
        if last <= config.MIN_GRID_DIMENSION:
            LOGGER.debug("Cannot remove the only remaining %s", axis.value)
            return False
        if not confirmed and self.line_has_occupant(axis, last):
            noun = "row" if axis is Axis.ROWS else "column"
            raise ConfirmationRequired(
                f"remove_{noun}",
                f"This {noun} has photos. Are you sure you want to delete it?",
            )

        for cell in self._cells_in_line(axis, last):
            del self._cells[cell.id]
        # Merged cells reaching into the removed line are clipped to the new edge.
        for cell in self._cells.values():
            if axis is Axis.ROWS and cell.row_end - 1 >= last:
                cell.row_span = last - cell.row
            elif axis is Axis.COLUMNS and cell.col_end - 1 >= last:
                cell.col_span = last - cell.col

        if axis is Axis.ROWS:
            self.rows -= 1
        else:
            self.columns -= 1
        self.tracks.remove_last_track(axis)
        LOGGER.debug("Removed last %s; grid is now %dx%d", axis.value, self.rows, self.columns)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def covering_cell(self, row: int, col: int, exclude: Optional[Cell] = None) -> Optional[Cell]:
        """Return the cell whose footprint contains ``(row, col)``, if any."""
        for cell in self._cells.values():
            if cell is exclude:
                continue
            if cell.contains(row, col):
                return cell
        return None

    def is_occupied(self, row: int, col: int) -> bool:
        """True if ``(row, col)`` lies inside a cell that starts elsewhere.

        Such a position is hidden under a merged cell and cannot take a drop.
        """
        return any(
            cell.contains(row, col) and (cell.row, cell.col) != (row, col)
            for cell in self._cells.values()
        )

    def is_visible(self, cell: Cell) -> bool:
        return self.covering_cell(cell.row, cell.col, exclude=cell) is None

    def visible_cells(self) -> Iterator[Cell]:
        """Yield the cells that should be rendered.

        Each call starts a fresh pass over a snapshot of the cell set.
        """
        for cell in list(self._cells.values()):
            if self.is_visible(cell):
                yield cell

    def rect_is_free(
        self,
        row: int,
        col: int,
        row_span: int,
        col_span: int,
        exclude: Optional[Cell] = None,
    ) -> bool:
        """True if no cell other than ``exclude`` overlaps the rectangle."""
        return not any(
            cell is not exclude and cell.overlaps(row, col, row_span, col_span)
            for cell in self._cells.values()
        )

    def find_cell_containing(self, row: int, col: int) -> Cell:
        cell = self.covering_cell(row, col)
        if cell is None:
            raise CellNotFoundError(f"No cell covers ({row}, {col})")
        return cell

    def find_cell_by_id(self, cell_id: str) -> Cell:
        try:
            return self._cells[cell_id]
        except KeyError:
            raise CellNotFoundError(f"Cell not found: {cell_id}") from None

    def coverage_map(self) -> List[List[Optional[str]]]:
        """Cell id per grid position, ``None`` for gaps."""
        grid: List[List[Optional[str]]] = [[None] * self.columns for _ in range(self.rows)]
        for cell in self._cells.values():
            for r, c in cell.footprint():
                if 1 <= r <= self.rows and 1 <= c <= self.columns:
                    grid[r - 1][c - 1] = cell.id
        return grid

    def gaps(self) -> List[Coord]:
        return [
            (r + 1, c + 1)
            for r, line in enumerate(self.coverage_map())
            for c, cell_id in enumerate(line)
            if cell_id is None
        ]

    def problems(self) -> List[str]:
        """Describe every broken partition invariant; empty when healthy."""
        issues: List[str] = []
        if self.rows < 1 or self.columns < 1:
            issues.append(f"invalid grid size {self.rows}x{self.columns}")
        if self.tracks.count(Axis.ROWS) != self.rows:
            issues.append("row weight count does not match rows")
        if self.tracks.count(Axis.COLUMNS) != self.columns:
            issues.append("column weight count does not match columns")
        cells = self.cells
        for i, cell in enumerate(cells):
            if not self.in_bounds(cell.row, cell.col, cell.row_span, cell.col_span):
                issues.append(f"{cell.id} lies outside the grid")
            for other in cells[i + 1:]:
                if other.overlaps(cell.row, cell.col, cell.row_span, cell.col_span):
                    issues.append(f"{cell.id} overlaps {other.id}")
        return issues

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------
    def occupied_cells(self) -> List[Cell]:
        return [c for c in self._cells.values() if c.has_photo]

    def place_photo(self, cell: Cell, photo_id: str) -> bool:
        """Drop a photo into ``cell`` with a centred default placement."""
        if self.is_occupied(cell.row, cell.col):
            LOGGER.debug("Drop rejected: %s is covered by another cell", cell.id)
            return False
        cell.occupant = Placement(photo_id=photo_id)
        return True

    def remove_photo(self, cell: Cell) -> Optional[Placement]:
        previous, cell.occupant = cell.occupant, None
        return previous

    def clear_photos(self, *, confirmed: bool = False) -> int:
        """Empty every cell; the photos themselves stay in the gallery."""
        occupied = self.occupied_cells()
        if occupied and not confirmed:
            raise ConfirmationRequired(
                "clear_photos", "Are you sure you want to remove all photos?"
            )
        for cell in occupied:
            cell.occupant = None
        return len(occupied)
