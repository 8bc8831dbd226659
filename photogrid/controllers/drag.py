"""Three-phase drag protocol for divider and photo drags.

The platform layer translates pointer events into ``begin_drag`` /
``drag_to`` / ``end_drag`` calls.  Only one drag is active at a time and its
anchor state is always cleared by ``end_drag``; the :meth:`DragController.dragging`
context manager guarantees that even when the event stream ends abnormally.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from ..grid_layout import Cell
from ..tracks import Axis, TrackSizer


LOGGER = logging.getLogger(__name__)


Point = Tuple[float, float]


class DragKind(str, Enum):
    COLUMN_DIVIDER = "column_divider"
    ROW_DIVIDER = "row_divider"
    PHOTO = "photo"


@dataclass
class _DragState:
    kind: DragKind
    anchor: Point
    extent: Tuple[float, float]
    index: int = -1
    cell: Optional[Cell] = None
    origin: Point = (0.0, 0.0)


class DragController:
    """Hold the transient state of the drag in progress."""

    def __init__(self, tracks: TrackSizer) -> None:
        self.tracks = tracks
        self._state: Optional[_DragState] = None

    @property
    def active(self) -> bool:
        return self._state is not None

    @property
    def kind(self) -> Optional[DragKind]:
        return self._state.kind if self._state else None

    @property
    def anchor(self) -> Optional[Point]:
        return self._state.anchor if self._state else None

    def begin_drag(
        self,
        kind: DragKind,
        anchor: Point,
        *,
        extent: Tuple[float, float],
        index: int = -1,
        cell: Optional[Cell] = None,
    ) -> bool:
        """Start a drag at pointer position ``anchor``.

        ``extent`` is the ``(width, height)`` in pixels of the canvas for
        divider drags, or of the cell for photo drags.  Divider drags need
        the divider ``index``; photo drags need a ``cell`` holding a photo.
        """
        if self._state is not None:
            LOGGER.debug("Starting %s drag while %s drag active; ending it", kind.value, self._state.kind.value)
            self.end_drag()

        if kind is DragKind.PHOTO:
            if cell is None or cell.occupant is None:
                return False
            origin = (cell.occupant.x, cell.occupant.y)
            self._state = _DragState(kind, anchor, extent, cell=cell, origin=origin)
            return True

        axis = Axis.COLUMNS if kind is DragKind.COLUMN_DIVIDER else Axis.ROWS
        if index not in self.tracks.dividers(axis):
            return False
        self._state = _DragState(kind, anchor, extent, index=index)
        return True

    def drag_to(self, position: Point) -> bool:
        """Apply one pointer move; returns whether anything changed."""
        state = self._state
        if state is None:
            return False
        dx = position[0] - state.anchor[0]
        dy = position[1] - state.anchor[1]

        if state.kind is DragKind.PHOTO:
            placement = state.cell.occupant if state.cell is not None else None
            width, height = state.extent
            if placement is None or width <= 0 or height <= 0:
                return False
            # Pan is relative to the placement at drag start, anchor stays put.
            placement.move_to(
                state.origin[0] + dx / width * 100,
                state.origin[1] + dy / height * 100,
            )
            return True

        if state.kind is DragKind.COLUMN_DIVIDER:
            committed = self.tracks.drag_divider(Axis.COLUMNS, state.index, dx, state.extent[0])
            if committed:
                state.anchor = (position[0], state.anchor[1])
        else:
            committed = self.tracks.drag_divider(Axis.ROWS, state.index, dy, state.extent[1])
            if committed:
                state.anchor = (state.anchor[0], position[1])
        return committed

    def end_drag(self) -> None:
        self._state = None

    @contextmanager
    def dragging(
        self,
        kind: DragKind,
        anchor: Point,
        *,
        extent: Tuple[float, float],
        index: int = -1,
        cell: Optional[Cell] = None,
    ) -> Iterator[bool]:
        """Run a drag inside a ``with`` block; yields whether it started."""
        started = self.begin_drag(kind, anchor, extent=extent, index=index, cell=cell)
        try:
            yield started
        finally:
            self.end_drag()
