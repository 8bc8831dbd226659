"""Path validation helpers for photo and layout files."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Union
from urllib.parse import urlparse


PathLike = Union[str, Path]


def _has_url_scheme(path_str: str) -> bool:
    """Return True if *path_str* looks like a URL with a scheme.

    Single-letter schemes such as ``"C"`` are Windows drive letters.
    """
    parsed = urlparse(path_str)
    return bool(parsed.scheme and len(parsed.scheme) > 1)


def _check_extension(p: Path, allowed_exts: Iterable[str]) -> None:
    if p.suffix.lower() not in {ext.lower() for ext in allowed_exts}:
        raise ValueError(f"Unsupported file extension: {p.suffix}")


def validate_input_path(path: PathLike, allowed_exts: Iterable[str]) -> Path:
    """Resolve an existing local file with one of *allowed_exts*."""
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")

    p = Path(path_str).expanduser()
    try:
        p = p.resolve(strict=True)
    except FileNotFoundError as exc:
        raise ValueError(f"File does not exist: {path_str}") from exc

    if not p.is_file():
        raise ValueError(f"Not a file: {path_str}")
    _check_extension(p, allowed_exts)
    return p


def validate_image_path(path: PathLike, allowed_exts: Iterable[str]) -> Path:
    """Validate a user-supplied photo *path* before reading its bytes."""
    return validate_input_path(path, allowed_exts)


def validate_output_path(path: PathLike, allowed_exts: Iterable[str]) -> Path:
    """Validate where a layout file will be written.

    The parent directory must already exist.
    """
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")

    p = Path(path_str).expanduser().resolve()
    if not p.parent.exists():
        raise ValueError(f"Directory does not exist: {p.parent}")
    _check_extension(p, allowed_exts)
    return p


def validate_layout_input_path(
    path: PathLike,
    allowed_exts: Iterable[str],
    max_bytes: int,
) -> Path:
    """Validate a layout file before it is parsed.

    The file must be non-empty and at most *max_bytes* long.
    """
    p = validate_input_path(path, allowed_exts)
    size = p.stat().st_size
    if size == 0:
        raise ValueError(f"Layout file is empty: {p}")
    if size > max_bytes:
        raise ValueError(f"Layout file is too large ({size} bytes, limit {max_bytes})")
    return p


def validate_layout_output_path(path: PathLike, allowed_exts: Iterable[str]) -> Path:
    """Validate where a layout file will be written.

    On top of :func:`validate_output_path` the target must not be a
    directory and its parent must be writable.
    """
    p = validate_output_path(path, allowed_exts)
    if p.is_dir():
        raise ValueError(f"Target is a directory: {p}")
    if not os.access(p.parent, os.W_OK):
        raise ValueError(f"Directory is not writable: {p.parent}")
    return p
