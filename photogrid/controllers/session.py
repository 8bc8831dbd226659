"""Editor session for collage layouts.

This module introduces :class:`EditorSession`, a small service layer that
owns one grid partition, its track weights and the photo gallery, and turns
discrete user intents ("grow this cell downward", "drop this photo here")
into calls on the engine.  It also keeps the selected cell in sync with
edits.  Destructive intents raise :class:`ConfirmationRequired` until the
caller re-invokes them with ``confirmed=True``.  The session is UI agnostic
so alternative front ends (Qt, CLI tools, tests) can drive it directly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from .. import config
from ..grid_layout import Cell, GridPartition
from ..photos import Photo, PhotoGallery, PhotoIntake, PhotoUpload, IntakeReport
from ..serialization import export_layout, import_layout
from ..spans import Direction, SpanMutator
from ..tracks import Axis
from .drag import DragController


LOGGER = logging.getLogger(__name__)


class EditorSession:
    """Mediate between user gestures and the grid engine."""

    def __init__(
        self,
        rows: int = config.DEFAULT_ROWS,
        columns: int = config.DEFAULT_COLUMNS,
        *,
        name: str = config.DEFAULT_LAYOUT_NAME,
        max_photos: int = config.MAX_PHOTOS,
    ) -> None:
        self.name = name
        self.gallery = PhotoGallery(max_photos=max_photos)
        self._attach(GridPartition(rows, columns))
        self.selected: Optional[Cell] = None

    def _attach(self, partition: GridPartition) -> None:
        self.partition = partition
        self.spans = SpanMutator(partition)
        self.drag = DragController(partition.tracks)
        self.intake = PhotoIntake(self.gallery)

    @property
    def tracks(self):
        return self.partition.tracks

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select(self, cell: Optional[Cell]) -> None:
        self.selected = cell

    def _forget(self, cell: Cell) -> None:
        if self.selected is not None and self.selected.id == cell.id:
            self.selected = None

    def _prune_selection(self) -> None:
        if self.selected is not None and self.selected.id not in {c.id for c in self.partition.cells}:
            self.selected = None

    # ------------------------------------------------------------------
    # Grid structure
    # ------------------------------------------------------------------
    def reset_grid(self, rows: int, columns: int) -> None:
        self.drag.end_drag()
        self.partition.initialize(rows, columns)
        self.selected = None

    def add_row(self) -> None:
        self.partition.append_row()

    def add_column(self) -> None:
        self.partition.append_column()

    def remove_row(self, *, confirmed: bool = False) -> bool:
        removed = self.partition.remove_last_row(confirmed=confirmed)
        if removed:
            self._prune_selection()
        return removed

    def remove_column(self, *, confirmed: bool = False) -> bool:
        removed = self.partition.remove_last_column(confirmed=confirmed)
        if removed:
            self._prune_selection()
        return removed

    # ------------------------------------------------------------------
    # Spans
    # ------------------------------------------------------------------
    def can_grow(self, cell: Cell, direction: Direction) -> bool:
        return self.spans.can_grow(cell, direction)

    def grow(self, cell: Cell, direction: Direction) -> bool:
        return self.spans.grow(cell, direction)

    def shrink(self, cell: Cell, direction: Direction) -> bool:
        return self.spans.shrink(cell, direction)

    def grow_to_edge(self, cell: Cell, direction: Direction) -> int:
        return self.spans.grow_to_edge(cell, direction)

    def delete_cell(self, cell: Cell, *, confirmed: bool = False) -> Optional[Cell]:
        healer = self.spans.delete_cell(cell, confirmed=confirmed)
        self._forget(cell)
        return healer

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------
    def add_photos(self, uploads: Iterable[PhotoUpload]) -> IntakeReport:
        return self.intake.load(uploads)

    def can_drop(self, cell: Cell) -> bool:
        return not self.partition.is_occupied(cell.row, cell.col)

    def drop_photo(self, photo_id: str, cell: Cell) -> bool:
        """Place a gallery photo into ``cell`` and select the cell."""
        photo = self.gallery.get(photo_id)
        if not self.partition.place_photo(cell, photo.id):
            return False
        self.selected = cell
        return True

    def remove_photo(self, cell: Cell) -> None:
        self.partition.remove_photo(cell)
        self._forget(cell)

    def clear_canvas(self, *, confirmed: bool = False) -> int:
        cleared = self.partition.clear_photos(confirmed=confirmed)
        self.selected = None
        return cleared

    def photo_for(self, cell: Cell) -> Optional[Photo]:
        if cell.occupant is None:
            return None
        return self.gallery.find(cell.occupant.photo_id)

    @property
    def photos_on_canvas(self) -> int:
        return len(self.partition.occupied_cells())

    @property
    def photo_count_text(self) -> str:
        return self.gallery.count_text

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def visible_cells(self) -> Iterator[Cell]:
        return self.partition.visible_cells()

    def track_templates(self) -> Dict[str, str]:
        return {
            "rows": self.tracks.template(Axis.ROWS),
            "columns": self.tracks.template(Axis.COLUMNS),
        }

    def divider_positions(self, axis: Axis) -> List[float]:
        return [self.tracks.divider_position(axis, i) for i in self.tracks.dividers(axis)]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def export_record(self) -> Dict[str, Any]:
        return export_layout(self.partition, self.tracks, self.gallery, name=self.name)

    def load_record(self, record: Mapping[str, Any], *, strict: bool = False) -> List[str]:
        """Replace the session content with ``record``.

        Returns the ids of cells that had to be dropped while importing.
        """
        imported = import_layout(record, strict=strict)
        self.drag.end_drag()
        self.name = imported.name
        self.gallery = imported.gallery
        self._attach(imported.partition)
        self.selected = None
        LOGGER.info("Loaded layout %r (%dx%d)", self.name, self.partition.rows, self.partition.columns)
        return imported.dropped_cells
