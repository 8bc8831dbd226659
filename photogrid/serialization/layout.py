"""Layout record export and import.

A layout record is a JSON-compatible dictionary holding the grid size, both
track weight lists, every visible cell with its span and photo placement,
and the photos referenced by the layout.  Cells hidden under another cell's
span carry no state of their own and are not written.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .. import config
from ..errors import LayoutFormatError
from ..grid_layout import Cell, GridPartition, Placement, clamp_scale
from ..photos import Photo, PhotoGallery
from ..tracks import Axis, TrackSizer, uniform_weights


LOGGER = logging.getLogger(__name__)


@dataclass(eq=True, frozen=True)
class PlacementState:
    """Pan and zoom of a photo inside its cell."""

    x: float
    y: float
    scale: float

    def to_payload(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "scale": self.scale}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PlacementState":
        return cls(
            x=float(payload.get("x", config.DEFAULT_PHOTO_X)),
            y=float(payload.get("y", config.DEFAULT_PHOTO_Y)),
            scale=float(payload.get("scale", config.DEFAULT_PHOTO_SCALE)),
        )


@dataclass(eq=True, frozen=True)
class CellState:
    """Serializable snapshot of one visible cell."""

    id: str
    row: int
    col: int
    row_span: int = 1
    col_span: int = 1
    photo_id: Optional[str] = None
    position: Optional[PlacementState] = None
    rotation: Optional[float] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "row": self.row,
            "col": self.col,
            "rowSpan": self.row_span,
            "colSpan": self.col_span,
        }
        if self.photo_id is not None:
            payload["photoId"] = self.photo_id
        if self.position is not None:
            payload["photoPosition"] = self.position.to_payload()
        if self.rotation is not None:
            payload["photoRotation"] = self.rotation
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, strict: bool = False) -> "CellState":
        """Parse a cell entry.

        Raises ``KeyError``/``TypeError``/``ValueError`` when the geometry is
        malformed.  Unusable placement data only empties the cell, unless
        ``strict`` is set.
        """
        if not isinstance(payload, Mapping):
            raise TypeError(f"cell entry must be an object, not {type(payload).__name__}")
        cell_id = str(payload["id"])
        row = int(payload["row"])
        col = int(payload["col"])
        row_span = int(payload.get("rowSpan", 1))
        col_span = int(payload.get("colSpan", 1))
        photo_id = payload.get("photoId")

        raw_position = payload.get("photoPosition")
        raw_rotation = payload.get("photoRotation")
        try:
            position = (
                PlacementState.from_payload(raw_position)
                if isinstance(raw_position, Mapping)
                else None
            )
            rotation = None if raw_rotation is None else float(raw_rotation)
        except (TypeError, ValueError) as exc:
            if strict:
                raise
            LOGGER.warning("Cell %s has unusable placement data (%s); importing it empty", cell_id, exc)
            position, rotation = None, None

        return cls(
            id=cell_id,
            row=row,
            col=col,
            row_span=row_span,
            col_span=col_span,
            photo_id=None if photo_id is None else str(photo_id),
            position=position,
            rotation=rotation,
        )

    @classmethod
    def from_cell(cls, cell: Cell) -> "CellState":
        occupant = cell.occupant
        return cls(
            id=cell.id,
            row=cell.row,
            col=cell.col,
            row_span=cell.row_span,
            col_span=cell.col_span,
            photo_id=occupant.photo_id if occupant else None,
            position=PlacementState(occupant.x, occupant.y, occupant.scale) if occupant else None,
            rotation=occupant.rotation if occupant else None,
        )

    def to_cell(self, gallery: PhotoGallery) -> Cell:
        """Rebuild the cell; a dangling photo id or missing placement leaves it empty."""
        occupant = None
        photo = gallery.find(self.photo_id)
        if photo is not None and self.position is not None:
            occupant = Placement(
                photo_id=photo.id,
                x=self.position.x,
                y=self.position.y,
                scale=clamp_scale(self.position.scale),
                rotation=self.rotation or 0.0,
            )
        elif self.photo_id is not None:
            LOGGER.warning("Cell %s refers to unusable photo %s; importing it empty", self.id, self.photo_id)
        return Cell(
            id=self.id,
            row=self.row,
            col=self.col,
            row_span=self.row_span,
            col_span=self.col_span,
            occupant=occupant,
        )


@dataclass(eq=True, frozen=True)
class PhotoState:
    """Photo entry of a layout record."""

    id: str
    filename: str
    image_data: str

    def to_payload(self) -> Dict[str, str]:
        return {"id": self.id, "filename": self.filename, "imageData": self.image_data}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PhotoState":
        if not isinstance(payload, Mapping):
            raise TypeError(f"photo entry must be an object, not {type(payload).__name__}")
        # Records written by the browser editor call the image field "dataUrl".
        image_data = payload.get("imageData", payload.get("dataUrl", ""))
        return cls(
            id=str(payload["id"]),
            filename=str(payload.get("filename", "")),
            image_data=str(image_data),
        )

    @classmethod
    def from_photo(cls, photo: Photo) -> "PhotoState":
        return cls(id=photo.id, filename=photo.filename, image_data=photo.image_data)

    def to_photo(self) -> Photo:
        return Photo(id=self.id, filename=self.filename, image_data=self.image_data)


@dataclass(eq=True, frozen=True)
class LayoutState:
    """Serializable snapshot of a whole collage layout."""

    name: str
    grid_rows: int
    grid_cols: int
    column_weights: Tuple[float, ...]
    row_weights: Tuple[float, ...]
    cells: List[CellState] = field(default_factory=list)
    photos: List[PhotoState] = field(default_factory=list)
    version: str = config.LAYOUT_VERSION

    def to_payload(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "name": self.name,
            "gridRows": self.grid_rows,
            "gridCols": self.grid_cols,
            "columnWeights": list(self.column_weights),
            "rowWeights": list(self.row_weights),
            "cells": [cell.to_payload() for cell in self.cells],
            "photos": [photo.to_payload() for photo in self.photos],
        }


@dataclass
class ImportedLayout:
    """Objects rebuilt from a layout record."""

    name: str
    partition: GridPartition
    gallery: PhotoGallery
    dropped_cells: List[str] = field(default_factory=list)

    @property
    def tracks(self) -> TrackSizer:
        return self.partition.tracks


def export_layout(
    partition: GridPartition,
    tracks: TrackSizer,
    photos: Iterable[Photo],
    *,
    name: str = config.DEFAULT_LAYOUT_NAME,
) -> Dict[str, Any]:
    """Capture the partition, weights and photos as a layout record."""
    state = LayoutState(
        name=name,
        grid_rows=partition.rows,
        grid_cols=partition.columns,
        column_weights=tuple(tracks.weights(Axis.COLUMNS)),
        row_weights=tuple(tracks.weights(Axis.ROWS)),
        cells=[CellState.from_cell(cell) for cell in partition.visible_cells()],
        photos=[PhotoState.from_photo(photo) for photo in photos],
    )
    return state.to_payload()


def _check_version(version: str) -> None:
    major = version.split(".")[0]
    if major != config.LAYOUT_VERSION.split(".")[0]:
        raise LayoutFormatError(
            f"Incompatible layout version: {version}. "
            f"Expected version {config.LAYOUT_VERSION.split('.')[0]}.x"
        )


def _read_weights(
    payload: Mapping[str, Any],
    key: str,
    count: int,
    min_weight: float,
    strict: bool,
) -> List[float]:
    raw = payload.get(key)
    try:
        weights = [float(w) for w in raw] if raw is not None else []
    except (TypeError, ValueError):
        weights = []
    if len(weights) == count and all(w >= min_weight for w in weights):
        return weights
    if strict:
        raise LayoutFormatError(f"{key} must hold {count} weights of at least {min_weight}")
    if raw is not None:
        LOGGER.warning("Ignoring invalid %s %r; using uniform weights", key, raw)
    return list(uniform_weights(count))


def _read_entries(payload: Mapping[str, Any], key: str, strict: bool) -> List[Any]:
    raw = payload.get(key)
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    if strict:
        raise LayoutFormatError(f"{key} must be a list, not {type(raw).__name__}")
    LOGGER.warning("Ignoring %s: expected a list, got %s", key, type(raw).__name__)
    return []


def import_layout(payload: Mapping[str, Any], *, strict: bool = False) -> ImportedLayout:
    """Rebuild a partition, its weights and the photo gallery from a record.

    Photos are rebuilt first so cells can resolve their ``photoId``.  Cells
    are taken as recorded, spans included.  Cells that fall outside the grid
    or overlap an earlier cell are dropped with a warning; with
    ``strict=True`` they raise :class:`LayoutFormatError` instead.
    """
    if not isinstance(payload, Mapping):
        raise LayoutFormatError("Layout record must be a mapping")
    _check_version(str(payload.get("version", config.LAYOUT_VERSION)))
    try:
        rows = int(payload["gridRows"])
        columns = int(payload["gridCols"])
    except (KeyError, TypeError, ValueError) as exc:
        raise LayoutFormatError("Layout record needs integer gridRows and gridCols") from exc
    if rows < config.MIN_GRID_DIMENSION or columns < config.MIN_GRID_DIMENSION:
        raise LayoutFormatError(f"Invalid grid size {rows}x{columns}")

    gallery = PhotoGallery(max_photos=config.MAX_PHOTOS)
    for entry in _read_entries(payload, "photos", strict):
        try:
            state = PhotoState.from_payload(entry)
            gallery.add(state.to_photo())
        except (KeyError, TypeError, ValueError) as exc:
            if strict:
                raise LayoutFormatError(f"Invalid photo entry: {entry!r}") from exc
            LOGGER.warning("Skipping invalid photo entry: %s", exc)

    tracks = TrackSizer(rows, columns)
    tracks.set_weights(
        Axis.ROWS, _read_weights(payload, "rowWeights", rows, tracks.min_weight, strict)
    )
    tracks.set_weights(
        Axis.COLUMNS, _read_weights(payload, "columnWeights", columns, tracks.min_weight, strict)
    )

    partition = GridPartition.from_cells(rows, columns, [], tracks=tracks)
    dropped: List[str] = []
    for entry in _read_entries(payload, "cells", strict):
        try:
            state = CellState.from_payload(entry, strict=strict)
        except (KeyError, TypeError, ValueError) as exc:
            if strict:
                raise LayoutFormatError(f"Invalid cell entry: {entry!r}") from exc
            LOGGER.warning("Skipping invalid cell entry: %s", exc)
            dropped.append(str(entry.get("id", "?")) if isinstance(entry, Mapping) else "?")
            continue

        reason = None
        if not partition.in_bounds(state.row, state.col, state.row_span, state.col_span):
            reason = "lies outside the grid"
        elif not partition.rect_is_free(state.row, state.col, state.row_span, state.col_span):
            reason = "overlaps another cell"
        elif state.id in {c.id for c in partition.cells}:
            reason = "reuses an existing id"
        if reason is not None:
            if strict:
                raise LayoutFormatError(f"Cell {state.id} {reason}")
            LOGGER.warning("Dropping cell %s: %s", state.id, reason)
            dropped.append(state.id)
            continue
        partition.add_cell(state.to_cell(gallery))

    name = str(payload.get("name", config.DEFAULT_LAYOUT_NAME))
    LOGGER.debug("Imported layout %r: %d cells, %d photos", name, len(partition), len(gallery))
    return ImportedLayout(name=name, partition=partition, gallery=gallery, dropped_cells=dropped)
