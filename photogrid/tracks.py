"""Fractional track sizing for the collage grid.

Rows and columns carry positive weights ("fr units").  Dragging the divider
between two neighbouring tracks moves weight from one to the other, so the
pair keeps its combined size and the rest of the grid is untouched.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, List, Sequence

from . import config


LOGGER = logging.getLogger(__name__)


class Axis(str, Enum):
    """Which family of tracks an operation applies to."""

    ROWS = "rows"
    COLUMNS = "columns"


class TrackSizer:
    """Own the row and column weights of a grid."""

    def __init__(
        self,
        rows: int = config.DEFAULT_ROWS,
        columns: int = config.DEFAULT_COLUMNS,
        *,
        min_weight: float = config.MIN_TRACK_WEIGHT,
    ) -> None:
        if min_weight <= 0:
            raise ValueError("min_weight must be greater than zero")
        self.min_weight = min_weight
        self._weights: Dict[Axis, List[float]] = {Axis.ROWS: [], Axis.COLUMNS: []}
        self.reset(rows, columns)

    # ------------------------------------------------------------------
    # Track bookkeeping
    # ------------------------------------------------------------------
    def reset(self, rows: int, columns: int) -> None:
        """Recreate both axes with ``rows``/``columns`` uniform tracks."""
        self._weights[Axis.ROWS] = [config.DEFAULT_TRACK_WEIGHT] * rows
        self._weights[Axis.COLUMNS] = [config.DEFAULT_TRACK_WEIGHT] * columns

    def count(self, axis: Axis) -> int:
        return len(self._weights[axis])

    def weights(self, axis: Axis) -> List[float]:
        """Return a copy of the weights on ``axis``."""
        return list(self._weights[axis])

    def set_weights(self, axis: Axis, weights: Iterable[float]) -> None:
        values = [float(w) for w in weights]
        if any(w < self.min_weight for w in values):
            raise ValueError(f"Track weights must be at least {self.min_weight}")
        self._weights[axis] = values

    def append_track(self, axis: Axis, weight: float = config.DEFAULT_TRACK_WEIGHT) -> None:
        self._weights[axis].append(float(weight))

    def remove_last_track(self, axis: Axis) -> float:
        """Drop the trailing track on ``axis`` and return its weight."""
        return self._weights[axis].pop()

    def total(self, axis: Axis) -> float:
        return sum(self._weights[axis])

    # ------------------------------------------------------------------
    # Resizing
    # ------------------------------------------------------------------
    def drag_divider(
        self,
        axis: Axis,
        index: int,
        pixel_delta: float,
        canvas_extent: float,
    ) -> bool:
        """Move the divider between tracks ``index`` and ``index + 1``.

        ``pixel_delta`` is converted to fr units relative to the canvas
        extent along ``axis``.  The tick is applied only when both tracks
        stay at or above the minimum weight; otherwise nothing changes and
        ``False`` is returned so the caller keeps its drag anchor.
        """
        weights = self._weights[axis]
        if canvas_extent <= 0 or not 0 <= index < len(weights) - 1:
            LOGGER.debug("Divider drag ignored: axis=%s index=%d extent=%s", axis.value, index, canvas_extent)
            return False

        delta = pixel_delta / canvas_extent * self.total(axis)
        new_before = weights[index] + delta
        new_after = weights[index + 1] - delta
        if new_before < self.min_weight or new_after < self.min_weight:
            return False

        weights[index] = new_before
        weights[index + 1] = new_after
        return True

    def reset_weights(self, axis: Axis) -> None:
        """Make every track on ``axis`` the same size again."""
        self._weights[axis] = [config.DEFAULT_TRACK_WEIGHT] * len(self._weights[axis])

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------
    def dividers(self, axis: Axis) -> range:
        """Indices of the draggable dividers on ``axis``."""
        return range(max(self.count(axis) - 1, 0))

    def divider_position(self, axis: Axis, index: int) -> float:
        """Fraction of the canvas extent at which divider ``index`` sits."""
        weights = self._weights[axis]
        if not 0 <= index < len(weights):
            raise IndexError(f"No divider {index} on {axis.value}")
        return sum(weights[: index + 1]) / sum(weights)

    def template(self, axis: Axis) -> str:
        """Track list in ``fr`` notation, e.g. ``"1fr 1.5fr"``."""
        return " ".join(f"{_format_weight(w)}fr" for w in self._weights[axis])


def _format_weight(weight: float) -> str:
    return f"{weight:.4f}".rstrip("0").rstrip(".")


def uniform_weights(count: int) -> Sequence[float]:
    return [config.DEFAULT_TRACK_WEIGHT] * count
