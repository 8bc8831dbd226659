"""Grid partition engine for magazine-style photo collages."""

from .errors import (
    CellNotFoundError,
    ConfirmationRequired,
    LayoutFormatError,
    PhotoGridError,
    PhotoNotFoundError,
)
from .grid_layout import Cell, GridPartition, Placement
from .photos import Photo, PhotoGallery, PhotoIntake, PhotoUpload
from .spans import Direction, SpanMutator
from .tracks import Axis, TrackSizer

__version__ = "0.1.0"

__all__ = [
    "Axis",
    "Cell",
    "CellNotFoundError",
    "ConfirmationRequired",
    "Direction",
    "GridPartition",
    "LayoutFormatError",
    "Photo",
    "PhotoGallery",
    "PhotoGridError",
    "PhotoIntake",
    "PhotoNotFoundError",
    "PhotoUpload",
    "Placement",
    "SpanMutator",
    "TrackSizer",
    "__version__",
]
