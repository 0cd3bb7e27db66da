"""Request bodies as validation input — form fields and uploaded files.

``parse_form_data`` turns a raw body into ``FormData``: string fields
by name, plus ``UploadFile`` objects under ``FormData.files``. Both
plug straight into ``validate()`` and the ``Validator`` file checks.

URL-encoded bodies are decoded with stdlib ``urllib.parse``. Multipart
bodies need ``python-multipart`` (``pip install fieldcheck[forms]``).
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import BinaryIO
from urllib.parse import parse_qsl

from fieldcheck.errors import ConfigurationError

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"


@dataclass(frozen=True, slots=True)
class UploadFile:
    """One file part of a multipart submission, held in memory.

    ``content_type`` is what the client declared for the part, or ``""``
    when it sent none; the file checks sniff the content in that case.
    """

    filename: str
    content_type: str
    size: int
    _content: bytes

    @classmethod
    def from_bytes(cls, filename: str, content: bytes, content_type: str = "") -> UploadFile:
        return cls(filename=filename, content_type=content_type, size=len(content), _content=content)

    def open(self) -> BinaryIO:
        """Return a new stream positioned at the start of the content."""
        return io.BytesIO(self._content)

    async def read(self) -> bytes:
        return self._content

    async def save(self, path: Path) -> None:
        """Write the content to *path*. Parent directories must exist."""
        path.write_bytes(self._content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Read-only form fields, one or more string values per name.

    Indexing gives the first value of a field, ``get_list`` gives all of
    them. Uploaded files live apart from the string fields, in ``files``::

        form = await parse_form_data(body, content_type)
        form["title"]                 # "Holiday"
        form.get_list("tag")          # ["beach", "family"]
        form.files.get("photo")       # UploadFile or None
    """

    __slots__ = ("_fields", "_files")

    def __init__(
        self,
        data: Mapping[str, Iterable[str]],
        files: Mapping[str, UploadFile] | None = None,
    ) -> None:
        self._fields: dict[str, tuple[str, ...]] = {name: tuple(values) for name, values in data.items()}
        self._files: Mapping[str, UploadFile] = MappingProxyType(dict(files or {}))

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[str, str]],
        files: Mapping[str, UploadFile] | None = None,
    ) -> FormData:
        """Group ``(name, value)`` pairs by name, keeping their order."""
        grouped: dict[str, list[str]] = {}
        for name, value in pairs:
            grouped.setdefault(name, []).append(value)
        return cls(grouped, files)

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._fields[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        shown = ", ".join(f"{name!r}: {values[0]!r}" for name, values in self._fields.items())
        return f"FormData({{{shown}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._fields.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """All values submitted under *key*, e.g. for checkboxes."""
        return list(self._fields.get(key, ()))


async def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Decode a form submission.

    Args:
        body: Raw request body.
        content_type: The request's ``Content-Type`` header, parameters
            included (``charset``, ``boundary``).

    Raises:
        ConfigurationError: A multipart body arrived but
            ``python-multipart`` is not installed.
        ValueError: The content type is not a form encoding, or a
            multipart type has no boundary.
    """
    media_type, _, params = content_type.partition(";")
    media_type = media_type.strip().lower()

    if media_type == URLENCODED:
        charset = _charset(params) or "utf-8"
        return FormData.from_pairs(parse_qsl(body.decode(charset), keep_blank_values=True))

    if media_type == MULTIPART:
        return _MultipartCollector.parse(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _charset(params: str) -> str | None:
    for param in params.split(";"):
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset":
            return value.strip().strip('"') or None
    return None


class _MultipartCollector:
    """Callback target for ``python_multipart.MultipartParser``.

    Buffers each part, then files it as a string field or, when the
    part's disposition carries a filename, as an ``UploadFile``.
    """

    def __init__(self, parse_options_header) -> None:
        self._parse_options_header = parse_options_header
        self.pairs: list[tuple[str, str]] = []
        self.files: dict[str, UploadFile] = {}
        self._headers: dict[str, str] = {}
        self._header_name = bytearray()
        self._header_value = bytearray()
        self._body = bytearray()

    @classmethod
    def parse(cls, body: bytes, content_type: str) -> FormData:
        try:
            from python_multipart.multipart import MultipartParser, parse_options_header
        except ImportError:
            msg = (
                "Multipart form parsing requires the 'python-multipart' package. "
                "Install it with: pip install fieldcheck[forms]"
            )
            raise ConfigurationError(msg) from None

        _, options = parse_options_header(content_type.encode("latin-1"))
        boundary = options.get(b"boundary")
        if not boundary:
            msg = "Multipart form data missing boundary parameter"
            raise ValueError(msg)

        collector = cls(parse_options_header)
        parser = MultipartParser(boundary, collector.callbacks())
        parser.write(body)
        parser.finalize()
        return FormData.from_pairs(collector.pairs, collector.files)

    def callbacks(self) -> dict[str, object]:
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
        }

    def on_part_begin(self) -> None:
        self._headers = {}
        self._body = bytearray()

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        name = self._header_name.decode("latin-1").strip().lower()
        self._headers[name] = self._header_value.decode("latin-1").strip()
        self._header_name = bytearray()
        self._header_value = bytearray()

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._body += data[start:end]

    def on_part_end(self) -> None:
        disposition = self._headers.get("content-disposition")
        if disposition is None:
            return
        _, params = self._parse_options_header(disposition.encode("latin-1"))
        name = params.get(b"name")
        if name is None:
            return

        field = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is None:
            self.pairs.append((field, self._body.decode("utf-8", errors="replace")))
        else:
            # A part without Content-Type keeps "" so the file checks sniff it
            self.files[field] = UploadFile.from_bytes(
                filename.decode("utf-8"),
                bytes(self._body),
                self._headers.get("content-type", ""),
            )
