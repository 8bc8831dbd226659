"""Photo gallery and photo intake.

Photos live in a :class:`PhotoGallery` that is independent of the grid: a
cell only refers to a photo by id, so removing a cell never removes the
photo.  New photos arrive through :class:`PhotoIntake`, which filters files
by MIME type, enforces the gallery capacity and decodes the accepted files
with Pillow, optionally on a Qt thread pool.
"""

from __future__ import annotations

import base64
import io
import logging
import mimetypes
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError
from PySide6.QtCore import QThreadPool

from utils.validation import validate_image_path

from . import config
from .errors import PhotoGridError, PhotoNotFoundError
from .workers import Worker


LOGGER = logging.getLogger(__name__)


class PhotoDecodeError(PhotoGridError):
    """Raised when uploaded bytes are not a readable image."""


@dataclass
class Photo:
    """A decoded photo available for placement."""

    id: str
    filename: str
    image_data: str  # data URL or other displayable reference


def new_photo_id() -> str:
    return f"photo-{uuid.uuid4().hex}"


class PhotoGallery:
    """Ordered collection of the photos the user has loaded."""

    def __init__(self, photos: Iterable[Photo] = (), max_photos: int = config.MAX_PHOTOS) -> None:
        self.max_photos = max_photos
        self._photos: Dict[str, Photo] = {}
        for photo in photos:
            self.add(photo)

    def add(self, photo: Photo) -> None:
        if photo.id in self._photos:
            raise ValueError(f"Duplicate photo id: {photo.id}")
        self._photos[photo.id] = photo

    def get(self, photo_id: str) -> Photo:
        try:
            return self._photos[photo_id]
        except KeyError:
            raise PhotoNotFoundError(f"Photo not found: {photo_id}") from None

    def find(self, photo_id: Optional[str]) -> Optional[Photo]:
        if photo_id is None:
            return None
        return self._photos.get(photo_id)

    def remove(self, photo_id: str) -> Photo:
        photo = self.get(photo_id)
        del self._photos[photo_id]
        return photo

    @property
    def remaining(self) -> int:
        return max(self.max_photos - len(self._photos), 0)

    @property
    def count_text(self) -> str:
        return f"{len(self._photos)} / {self.max_photos}"

    def __iter__(self) -> Iterator[Photo]:
        return iter(list(self._photos.values()))

    def __len__(self) -> int:
        return len(self._photos)

    def __contains__(self, photo_id: object) -> bool:
        return photo_id in self._photos


@dataclass(frozen=True)
class PhotoUpload:
    """Raw file handed over by the platform layer."""

    filename: str
    data: bytes
    mime_type: str = ""

    @property
    def content_type(self) -> str:
        if self.mime_type:
            return self.mime_type
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or ""

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith(config.IMAGE_MIME_PREFIX)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "PhotoUpload":
        allowed = {f".{ext}" for ext in config.SUPPORTED_IMAGE_FORMATS}
        safe_path = validate_image_path(path, allowed)
        return cls(filename=safe_path.name, data=safe_path.read_bytes())


@dataclass
class IntakeReport:
    """Outcome of one batch of uploads."""

    accepted: List[Photo] = field(default_factory=list)
    rejected_type: List[str] = field(default_factory=list)
    rejected_capacity: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def rejected(self) -> int:
        return len(self.rejected_type) + len(self.rejected_capacity) + len(self.failed)


def decode_photo(upload: PhotoUpload) -> Photo:
    """Verify ``upload`` with Pillow and wrap it as a data URL photo."""
    try:
        with Image.open(io.BytesIO(upload.data)) as img:
            image_format = img.format
            img.verify()
    # verify() may also raise SyntaxError/ValueError from format plugins.
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        raise PhotoDecodeError(f"Unreadable image {upload.filename}: {exc}") from exc

    mime = Image.MIME.get(image_format or "", upload.content_type) or "application/octet-stream"
    encoded = base64.b64encode(upload.data).decode("ascii")
    return Photo(
        id=new_photo_id(),
        filename=upload.filename,
        image_data=f"data:{mime};base64,{encoded}",
    )


class PhotoIntake:
    """Screen, decode and collect uploads into a gallery."""

    def __init__(
        self,
        gallery: PhotoGallery,
        decoder: Callable[[PhotoUpload], Photo] = decode_photo,
        thread_pool: Optional[QThreadPool] = None,
    ) -> None:
        self.gallery = gallery
        self._decoder = decoder
        self._thread_pool = thread_pool
        self._pending = 0

    @property
    def pending(self) -> int:
        return self._pending

    def _screen(self, uploads: Iterable[PhotoUpload]) -> Tuple[List[PhotoUpload], IntakeReport]:
        report = IntakeReport()
        images: List[PhotoUpload] = []
        for upload in uploads:
            if upload.is_image:
                images.append(upload)
            else:
                report.rejected_type.append(upload.filename)

        capacity = max(self.gallery.remaining - self._pending, 0)
        accepted, overflow = images[:capacity], images[capacity:]
        report.rejected_capacity.extend(u.filename for u in overflow)
        if report.rejected_type:
            LOGGER.warning("Skipped %d non-image file(s)", len(report.rejected_type))
        if overflow:
            LOGGER.warning(
                "Maximum %d photos allowed; skipped %d file(s)",
                self.gallery.max_photos,
                len(overflow),
            )
        return accepted, report

    def _accept(self, photo: Photo, report: IntakeReport) -> None:
        self.gallery.add(photo)
        report.accepted.append(photo)
        LOGGER.info("Loaded photo %s (%s)", photo.filename, self.gallery.count_text)

    def load(self, uploads: Iterable[PhotoUpload]) -> IntakeReport:
        """Decode uploads synchronously, in request order."""
        accepted, report = self._screen(uploads)
        for upload in accepted:
            try:
                photo = self._decoder(upload)
            except PhotoDecodeError as exc:
                LOGGER.warning("Error reading file %s: %s", upload.filename, exc)
                report.failed.append(upload.filename)
                continue
            self._accept(photo, report)
        return report

    def submit(
        self,
        uploads: Iterable[PhotoUpload],
        on_loaded: Optional[Callable[[Photo], None]] = None,
    ) -> IntakeReport:
        """Decode uploads on the thread pool.

        The returned report lists rejected files right away; ``accepted``
        and ``failed`` fill in as decodes finish, in completion order.
        """
        accepted, report = self._screen(uploads)
        pool = self._thread_pool or QThreadPool.globalInstance()
        for upload in accepted:
            self._pending += 1
            pool.start(self._make_worker(upload, report, on_loaded))
        return report

    def _make_worker(
        self,
        upload: PhotoUpload,
        report: IntakeReport,
        on_loaded: Optional[Callable[[Photo], None]],
    ) -> Worker:
        worker = Worker(self._decoder, upload)

        def _handle_result(photo: Photo) -> None:
            self._pending -= 1
            self._accept(photo, report)
            if on_loaded is not None:
                on_loaded(photo)

        def _handle_error(message: str) -> None:
            self._pending -= 1
            LOGGER.warning("Error reading file %s: %s", upload.filename, message)
            report.failed.append(upload.filename)

        worker.signals.result.connect(_handle_result)
        worker.signals.error.connect(_handle_error)
        return worker
