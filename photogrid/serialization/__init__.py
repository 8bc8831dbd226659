"""Serialization helpers for photo grid layouts."""

from .layout import (
    CellState,
    ImportedLayout,
    LayoutState,
    PhotoState,
    PlacementState,
    export_layout,
    import_layout,
)
from .store import load_layout_from_file, save_layout_to_file

__all__ = [
    "CellState",
    "ImportedLayout",
    "LayoutState",
    "PhotoState",
    "PlacementState",
    "export_layout",
    "import_layout",
    "load_layout_from_file",
    "save_layout_to_file",
]
