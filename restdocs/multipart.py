import io
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from python_multipart.multipart import MultipartParser as PBaseParser
from python_multipart.multipart import parse_options_header

logger = logging.getLogger(__name__)


@dataclass
class FileUpload:
    """A file part of a multipart/form-data body.

    Attributes:
        filename: Filename from the part's Content-Disposition, if provided
        content_type: Content-Type of the part, if provided
        headers: All headers of the part, lower-cased names
        file: File-like object holding the part's data
    """

    filename: str | None
    content_type: str | None
    file: io.BytesIO
    headers: dict[str, str] = field(default_factory=dict)

    def read(self) -> bytes:
        """Read the whole content of the part."""
        self.file.seek(0)
        return self.file.read()


class MultipartParser:
    """
    An asynchronous multipart/form-data parser built on python_multipart.

    Consumes a body from an ASGI receive callable and collects plain fields as
    strings and file parts as FileUpload instances, keeping each part's headers.
    """

    def __init__(self, boundary: bytes, charset: str = "utf-8"):
        if not boundary:
            raise ValueError("Boundary is required for MultipartParser")
        self.boundary = boundary
        self.charset = charset

        self._callbacks = {
            "on_part_begin": self._on_part_begin,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
            "on_header_begin": self._on_header_begin,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
        }

        self.fields: dict[str, list[str]] = defaultdict(list)
        self.files: dict[str, list[FileUpload]] = defaultdict(list)

        self._current_part_headers: dict[str, str] = {}
        self._current_part_name: str | None = None
        self._current_part_filename: str | None = None
        self._current_part_data_buffer: io.BytesIO | None = None
        self._is_file_part: bool = False

        self._current_header_name_buffer = bytearray()
        self._current_header_value_buffer = bytearray()

    def _reset_current_part_state(self):
        self._current_part_headers = {}
        self._current_part_name = None
        self._current_part_filename = None
        self._current_part_data_buffer = None
        self._is_file_part = False

    def _reset_current_header_state(self):
        self._current_header_name_buffer.clear()
        self._current_header_value_buffer.clear()

    def _on_part_begin(self):
        self._reset_current_part_state()
        self._current_part_data_buffer = io.BytesIO()

    def _on_header_begin(self):
        self._reset_current_header_state()

    def _on_header_field(self, data: bytes, start: int, end: int):
        self._current_header_name_buffer.extend(data[start:end])

    def _on_header_value(self, data: bytes, start: int, end: int):
        self._current_header_value_buffer.extend(data[start:end])

    def _on_header_end(self):
        name = self._current_header_name_buffer.decode("ascii", errors="ignore").strip().lower()
        value = self._current_header_value_buffer.decode(self.charset, errors="replace").strip()
        if name:
            self._current_part_headers[name] = value
        self._reset_current_header_state()

    def _on_headers_finished(self):
        disposition = self._current_part_headers.get("content-disposition")
        if not disposition:
            logger.debug("Skipping multipart part without Content-Disposition")
            return

        _, params = parse_options_header(disposition.encode("latin-1"))
        name = params.get(b"name")
        if name is not None:
            self._current_part_name = name.decode(self.charset, errors="replace")

        filename = params.get(b"filename")
        if filename is not None:
            self._current_part_filename = filename.decode(self.charset, errors="replace")
            self._is_file_part = True

    def _on_part_data(self, data: bytes, start: int, end: int):
        if self._current_part_data_buffer is not None:
            self._current_part_data_buffer.write(data[start:end])

    def _on_part_end(self):
        if self._current_part_data_buffer is None or self._current_part_name is None:
            return

        self._current_part_data_buffer.seek(0)
        if self._is_file_part:
            self.files[self._current_part_name].append(
                FileUpload(
                    filename=self._current_part_filename,
                    content_type=self._current_part_headers.get("content-type"),
                    file=self._current_part_data_buffer,
                    headers=dict(self._current_part_headers),
                )
            )
        else:
            value = self._current_part_data_buffer.read().decode(self.charset, errors="replace")
            self.fields[self._current_part_name].append(value)

    async def parse(
        self, receive: Callable[[], Awaitable[dict[str, Any]]]
    ) -> dict[str, list[str | FileUpload]]:
        """
        Parse multipart/form-data from an ASGI receive callable.

        Returns:
            A dictionary where keys are part names and values are lists of
            strings (plain fields) or FileUpload instances (file parts).
        """
        self.fields.clear()
        self.files.clear()

        parser = PBaseParser(self.boundary, self._callbacks)

        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                break

            body_chunk = message.get("body", b"")
            if body_chunk:
                parser.write(body_chunk)

            more_body = message.get("more_body", False)

        parser.finalize()

        result: dict[str, list[str | FileUpload]] = defaultdict(list)
        for name, values in self.fields.items():
            result[name].extend(values)
        for name, uploads in self.files.items():
            result[name].extend(uploads)
        return dict(result)
