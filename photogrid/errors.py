"""Exception hierarchy for the photo grid engine.

Blocked edits are not exceptions: mutators report them by returning
``False``.  The classes here cover lookups that should not fail under
correct usage, destructive edits that need the user's consent, and layout
records that cannot be imported.
"""

from __future__ import annotations


class PhotoGridError(Exception):
    """Base class for all photo grid errors."""


class CellNotFoundError(PhotoGridError, LookupError):
    """Raised when a cell lookup by id or coordinate finds nothing."""


class PhotoNotFoundError(PhotoGridError, LookupError):
    """Raised when a photo id is not present in the gallery."""


class ConfirmationRequired(PhotoGridError, RuntimeError):
    """Raised when a destructive edit would discard a placed photo.

    Nothing has been mutated when this is raised.  Re-invoke the operation
    with ``confirmed=True`` once the user agreed.
    """

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation
        self.message = message


class LayoutFormatError(PhotoGridError, ValueError):
    """Raised when a persisted layout record cannot be imported."""
