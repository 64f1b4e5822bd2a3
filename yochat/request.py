"""Turning the question and an optional attached file into Gemini content parts."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

from google.genai import types as gt
from loguru import logger

from yochat.errors import AttachmentError

# Media the model accepts as raw bytes. Anything else is inlined as text.
DEFAULT_BLOB_MIME_TYPES = frozenset({
    "application/pdf",
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "image/png",
    "image/jpeg",
    "image/webp",
    "video/mov",
    "video/mpeg",
    "video/mp4",
    "video/mpg",
    "video/avi",
    "video/wmv",
    "video/mpegps",
    "video/flv",
})


@dataclass(frozen=True)
class Attachment:
    path: Path
    mime_type: str
    data: bytes

    @property
    def name(self) -> str:
        return self.path.name

    def as_text(self) -> str:
        content = self.data.decode("utf-8", errors="replace")
        return f"file - [{self.name}], [{content}]"


def guess_mime_type(path: str | Path) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or "text/plain"


def read_attachment(path: str | Path) -> Attachment:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise AttachmentError(f"Error reading file {path}: {e}") from e
    attachment = Attachment(path=path, mime_type=guess_mime_type(path), data=data)
    logger.debug("read attachment {} ({} bytes, {})", path, len(data), attachment.mime_type)
    return attachment


def attachment_part(attachment: Attachment, blob_mime_types=DEFAULT_BLOB_MIME_TYPES) -> gt.Part:
    if attachment.mime_type in blob_mime_types:
        return gt.Part.from_bytes(data=attachment.data, mime_type=attachment.mime_type)
    return gt.Part.from_text(text=attachment.as_text())


def build_parts(question: str, attachment: Attachment | None = None,
                blob_mime_types=DEFAULT_BLOB_MIME_TYPES) -> list[gt.Part]:
    """File part first (if any), then the question text (if any)."""
    parts = []
    if attachment is not None:
        parts.append(attachment_part(attachment, blob_mime_types))
    if question:
        parts.append(gt.Part.from_text(text=question))
    return parts


def build_contents(parts: list[gt.Part]) -> list[gt.Content]:
    return [gt.Content(role="user", parts=parts)]
