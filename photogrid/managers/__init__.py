"""Long-running helpers attached to an editor session."""

from .autosave import AutosaveError, AutosaveManager, autosave_metrics

__all__ = ["AutosaveError", "AutosaveManager", "autosave_metrics"]
