"""Attachment Encoder — reads a user-selected image and returns an inline data URL.

Invariants:
    - Declared size above the cap → AttachmentTooLargeError, read() never called
    - Non-image media type → FieldValidationError, read() never called
    - Read errors → ReadFailedError; a short or long read never yields an encoding
    - Output is produced only from the complete byte string

Design Decisions:
    - Works on any BinarySource: FastAPI UploadFile for the API, PathSource for local files
    - PathSource reads through asyncio.to_thread so the event loop keeps serving
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from certvault.core.attachment_policy import (
    check_attachment_size, encode_data_url, resolve_media_type,
)
from certvault.core.domain_types import MAX_ATTACHMENT_BYTES
from certvault.core.errors import AttachmentTooLargeError, ReadFailedError
from certvault.core.repository_protocols import BinarySource

logger = logging.getLogger(__name__)


@dataclass
class PathSource:
    """A local file exposed as a BinarySource."""
    path: Path
    size: int | None
    content_type: str | None = None
    filename: str | None = None

    @classmethod
    def from_path(cls, path: Path | str, content_type: str | None = None) -> "PathSource":
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError as e:
            raise ReadFailedError(f"cannot stat {path.name}") from e
        return cls(path=path, size=size, content_type=content_type, filename=path.name)

    async def read(self) -> bytes:
        return await asyncio.to_thread(self.path.read_bytes)


class AttachmentEncoder:
    """Size-checked, all-or-nothing conversion of a file to an inline data URL."""

    def __init__(self, max_bytes: int = MAX_ATTACHMENT_BYTES):
        self.max_bytes = max_bytes

    async def encode(self, source: BinarySource) -> str:
        size = check_attachment_size(source.size, self.max_bytes)
        media_type = resolve_media_type(source.content_type, source.filename)

        try:
            data = await source.read()
        except (OSError, ValueError) as e:
            logger.error(
                f"Attachment read failed: {e}",
                extra={"operation": "read", "attachment_bytes": size},
            )
            raise ReadFailedError("the file could not be read") from e

        if len(data) > self.max_bytes:
            raise AttachmentTooLargeError(len(data), self.max_bytes)
        if len(data) != size:
            logger.error(
                f"Attachment read returned {len(data)} of {size} bytes",
                extra={"operation": "read", "attachment_bytes": size},
            )
            raise ReadFailedError(f"expected {size} bytes, read {len(data)}")

        logger.info(
            "Attachment encoded",
            extra={"operation": "read", "attachment_bytes": size},
        )
        return encode_data_url(media_type, data)
