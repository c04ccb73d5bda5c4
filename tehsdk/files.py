"""File resolution for uploads.

:func:`resolve_file` turns whatever the caller passed for a media field into
either a string the Bot API understands directly (a ``file_id`` or an
``http(s)://`` URL) or an :class:`InputFile` describing bytes to upload.
"""

from __future__ import annotations

import io
import os
import time
from dataclasses import dataclass
from typing import IO, Any, Union

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Fixed extension → MIME table.  Anything else uploads as octet-stream.
MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
    ".webm": "video/webm",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".wav": "audio/wav",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".txt": "text/plain",
}

# Extension used to name anonymous buffers/streams, per upload field.
_DEFAULT_EXTENSIONS: dict[str, str] = {
    "photo": ".jpg",
    "video": ".mp4",
    "animation": ".mp4",
    "video_note": ".mp4",
    "audio": ".mp3",
    "voice": ".ogg",
    "sticker": ".webp",
}


@dataclass
class InputFile:
    """Bytes to upload as one multipart part.

    ``data`` is either ``bytes`` or a binary stream.  Streams opened by
    :func:`resolve_file` are owned by the descriptor and closed by
    :meth:`close` once the request that carried them is done.
    """

    data: Union[bytes, IO[bytes]]
    filename: str
    content_type: str = DEFAULT_CONTENT_TYPE
    owns_stream: bool = False

    def as_part(self) -> tuple[str, Union[bytes, IO[bytes]], str]:
        """Return the ``(filename, data, content_type)`` tuple ``requests`` expects."""
        return self.filename, self.data, self.content_type

    def close(self) -> None:
        """Close the underlying stream if this descriptor opened it."""
        if self.owns_stream and not isinstance(self.data, (bytes, bytearray)):
            self.data.close()


FileSource = Union[str, os.PathLike, bytes, bytearray, IO[bytes], InputFile]


def get_mime_type(filename: str) -> str:
    """Return the MIME type for *filename*'s extension (case-insensitive)."""
    _, ext = os.path.splitext(filename)
    return MIME_TYPES.get(ext.lower(), DEFAULT_CONTENT_TYPE)


def is_remote_reference(value: str) -> bool:
    """True for URLs the Bot API fetches by itself."""
    return value.startswith(("http://", "https://"))


def _default_filename(field: str) -> str:
    ext = _DEFAULT_EXTENSIONS.get(field, "")
    return f"{field or 'file'}_{int(time.time() * 1000)}{ext}"


def resolve_file(source: Any, field: str = "document") -> Union[str, InputFile, Any]:
    """Resolve *source* for the upload field *field*.

    Resolution rules:

    1. :class:`InputFile` — returned as is.
    2. ``str`` URL (``http://`` / ``https://``) — passed through.
    3. ``str`` or path-like naming an existing regular file — opened for
       streaming, filename and content type taken from the path.
    4. Any other ``str`` — passed through as a ``file_id``.
    5. ``bytes``/``bytearray`` or a readable binary stream — wrapped with a
       generated filename (the stream's own ``name`` wins when it has one).
    6. Anything else — passed through untouched.
    """
    if isinstance(source, InputFile):
        return source

    if isinstance(source, str) and is_remote_reference(source):
        return source

    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        if os.path.isfile(path):
            filename = os.path.basename(path)
            return InputFile(
                data=open(path, "rb"),
                filename=filename,
                content_type=get_mime_type(filename),
                owns_stream=True,
            )
        return path

    if isinstance(source, (bytes, bytearray)):
        filename = _default_filename(field)
        return InputFile(data=bytes(source), filename=filename, content_type=get_mime_type(filename))

    if isinstance(source, io.IOBase) or hasattr(source, "read"):
        name = getattr(source, "name", None)
        filename = os.path.basename(name) if isinstance(name, str) and name else _default_filename(field)
        return InputFile(data=source, filename=filename, content_type=get_mime_type(filename))

    return source
