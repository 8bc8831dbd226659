"""Utility helpers for the photo grid editor."""

from . import validation

__all__ = ["validation"]
