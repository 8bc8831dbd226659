"""Controller layer turning user gestures into grid engine calls."""

from .drag import DragController, DragKind
from .session import EditorSession

__all__ = [
    "DragController",
    "DragKind",
    "EditorSession",
]
