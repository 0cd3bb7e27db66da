"""File and image checks for uploaded files.

The checks work on anything shaped like an upload: a ``filename``, a
declared ``content_type`` (may be empty), a byte ``size``, and an
``open()`` method returning a fresh readable stream.
``fieldcheck.http.UploadFile`` is the concrete implementation.

Content type detection trusts the declared type unless it is missing
or the generic ``application/octet-stream``; then the leading bytes are
matched against a small signature table, and as a last resort the
filename extension is consulted.

Read errors are never raised to the caller: they are recorded on the
field like any other validation failure, always with the
``file_unreadable`` message rather than a per-call override.
"""

from __future__ import annotations

import logging
import math
import mimetypes
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO, Protocol

from PIL import Image

from fieldcheck.errors import ContractError

if TYPE_CHECKING:
    from fieldcheck.config import Messages

logger = logging.getLogger("fieldcheck.files")

OCTET_STREAM = "application/octet-stream"

# Raster formats accepted as "an image", by the names callers may use
IMAGE_TYPES: dict[str, str] = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
}

# How many leading bytes are inspected when sniffing
SNIFF_SIZE = 512

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
)

# Control bytes that never appear in text
_BINARY_BYTES = frozenset(
    [*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)]
)


@dataclass(frozen=True, slots=True)
class ImageDimension:
    """Width and height of an image, in pixels."""

    width: int
    height: int


class Upload(Protocol):
    """Anything the file checks can inspect."""

    filename: str
    content_type: str
    size: int

    def open(self) -> BinaryIO: ...


def sniff_mime_type(head: bytes) -> str:
    """Guess a content type from the first bytes of a file."""
    for signature, mime in _SIGNATURES:
        if head.startswith(signature):
            return mime
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    if head and not _BINARY_BYTES.intersection(head):
        return "text/plain"
    return OCTET_STREAM


def detect_mime_type(upload: Upload) -> str:
    """Return the effective content type of *upload*.

    Raises:
        OSError: If the content has to be sniffed and cannot be read.
    """
    declared = upload.content_type.split(";")[0].strip().lower()
    if declared and declared != OCTET_STREAM:
        return declared

    with upload.open() as fh:
        head = fh.read(SNIFF_SIZE)
    detected = sniff_mime_type(head)
    if detected == OCTET_STREAM:
        guessed, _ = mimetypes.guess_type(upload.filename)
        if guessed:
            detected = guessed
    logger.debug("sniffed %r as %s", upload.filename, detected)
    return detected


def read_dimensions(upload: Upload) -> ImageDimension:
    """Read the pixel size from the image header; pixel data is not decoded."""
    with upload.open() as fh, Image.open(fh) as img:
        width, height = img.size
    return ImageDimension(width, height)


def kilobytes(size: int) -> float:
    """Bytes to whole kilobytes, rounded up."""
    return float(math.ceil(size / 1024))


def _image_types(formats: str) -> frozenset[str]:
    names = [name.strip().lower() for name in formats.split(",") if name.strip()]
    if not names:
        return frozenset(IMAGE_TYPES.values())
    unknown = [name for name in names if name not in IMAGE_TYPES]
    if unknown:
        msg = f"is_image: unsupported image format(s): {', '.join(unknown)}"
        raise ContractError(msg)
    return frozenset(IMAGE_TYPES[name] for name in names)


class FileChecks:
    """File and image checks, mixed into ``Validator``."""

    messages: Messages

    def append(self, field: str, message: str, *args: object) -> None:
        raise NotImplementedError

    def file_mime_type(
        self,
        field: str,
        upload: Upload,
        mime_types: str,
        *,
        message: str | None = None,
    ) -> None:
        """Check the upload's content type against a comma-separated list.

        Example: ``v.file_mime_type("doc", upload, "application/pdf, text/plain")``
        """
        allowed = {t.strip().lower() for t in mime_types.split(",") if t.strip()}
        if not allowed:
            msg = "file_mime_type: mime_types cannot be empty"
            raise ContractError(msg)

        detected = self._detect(field, upload)
        if detected is None or detected in allowed:
            return
        self.append(field, message or self.messages.file_mime_type.format(types=mime_types))

    def file_size(
        self,
        field: str,
        upload: Upload,
        min_size: int | None = None,
        max_size: int | None = None,
        *,
        message: str | None = None,
    ) -> None:
        """Check the upload's size in bytes. ``None`` disables a bound."""
        if min_size is None and max_size is None:
            msg = "file_size: a minimum or maximum size must be given"
            raise ContractError(msg)

        too_small = min_size is not None and upload.size < min_size
        too_large = max_size is not None and upload.size > max_size

        if message and (too_small or too_large):
            self.append(field, message)
        elif too_small and too_large:
            self.append(
                field,
                self.messages.file_size.format(
                    min=kilobytes(min_size),  # type: ignore[arg-type]
                    max=kilobytes(max_size),  # type: ignore[arg-type]
                ),
            )
        elif too_small:
            self.append(field, self.messages.file_min_size.format(min=kilobytes(min_size)))  # type: ignore[arg-type]
        elif too_large:
            self.append(field, self.messages.file_max_size.format(max=kilobytes(max_size)))  # type: ignore[arg-type]

    def is_image(
        self,
        field: str,
        upload: Upload,
        formats: str = "",
        *,
        message: str | None = None,
    ) -> bool:
        """Check that the upload is a JPEG, PNG or GIF image.

        *formats* optionally narrows the accepted formats, comma-separated
        and case-insensitive: ``"jpeg"``, ``"png, gif"``.
        """
        wanted = _image_types(formats)
        detected = self._detect(field, upload)
        if detected is None:
            return False
        if detected in wanted:
            return True

        if message:
            self.append(field, message)
        elif formats.strip():
            self.append(field, self.messages.image_format.format(formats=formats))
        else:
            self.append(field, self.messages.not_an_image)
        return False

    def image_dimensions(
        self,
        field: str,
        upload: Upload,
        min_dimension: ImageDimension | None = None,
        max_dimension: ImageDimension | None = None,
        *,
        message: str | None = None,
    ) -> None:
        """Check an image's pixel size against minimum and/or maximum bounds.

        Non-images get a fixed "not an image" message instead of a size
        comparison.
        """
        if min_dimension is None and max_dimension is None:
            msg = "image_dimensions: a minimum or maximum dimension must be given"
            raise ContractError(msg)

        if not self.is_image(field, upload, message=self.messages.image_no_dimensions):
            return

        try:
            real = read_dimensions(upload)
        except (OSError, ValueError, Image.DecompressionBombError):
            logger.debug("cannot read dimensions of %r", upload.filename, exc_info=True)
            self.append(field, self.messages.image_unreadable)
            return

        too_small = min_dimension is not None and (
            real.width < min_dimension.width or real.height < min_dimension.height
        )
        too_large = max_dimension is not None and (
            real.width > max_dimension.width or real.height > max_dimension.height
        )

        if message and (too_small or too_large):
            self.append(field, message)
        elif too_small and too_large:
            self.append(
                field,
                self.messages.image_dimension.format(
                    min_width=min_dimension.width,  # type: ignore[union-attr]
                    min_height=min_dimension.height,  # type: ignore[union-attr]
                    max_width=max_dimension.width,  # type: ignore[union-attr]
                    max_height=max_dimension.height,  # type: ignore[union-attr]
                ),
            )
        elif too_large:
            self.append(
                field,
                self.messages.image_max_dimension.format(
                    width=max_dimension.width,  # type: ignore[union-attr]
                    height=max_dimension.height,  # type: ignore[union-attr]
                ),
            )
        elif too_small:
            self.append(
                field,
                self.messages.image_min_dimension.format(
                    width=min_dimension.width,  # type: ignore[union-attr]
                    height=min_dimension.height,  # type: ignore[union-attr]
                ),
            )

    def _detect(self, field: str, upload: Upload) -> str | None:
        try:
            return detect_mime_type(upload)
        except OSError:
            logger.debug("cannot read upload %r", upload.filename, exc_info=True)
            self.append(field, self.messages.file_unreadable)
            return None
