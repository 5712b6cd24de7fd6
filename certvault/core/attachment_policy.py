"""Attachment Policy — pure checks and inline encoding for certificate images.

Invariants:
    - Size is checked against the cap from the declared size alone (no bytes needed)
    - Only image/* media types are accepted
    - encode_data_url output is an RFC 2397 data URL: data:<type>;base64,<payload>
    - Encoding is all-or-nothing: it operates on the complete byte string

Design Decisions:
    - Split from infrastructure/attachment_encoder.py: the reader does the IO,
      these functions decide and encode (impureim sandwich)
    - mimetypes guess from filename when the client omits a content type
"""

import base64
import mimetypes

from certvault.core.domain_types import MAX_ATTACHMENT_BYTES
from certvault.core.errors import AttachmentTooLargeError, FieldValidationError


def check_attachment_size(size: int | None, limit: int = MAX_ATTACHMENT_BYTES) -> int:
    """Reject a declared size above the cap. Returns the size when accepted."""
    if size is None:
        raise FieldValidationError("Attachment size must be declared", "image")
    if size < 0:
        raise FieldValidationError(f"Invalid attachment size {size}", "image")
    if size > limit:
        raise AttachmentTooLargeError(size, limit)
    return size


def resolve_media_type(content_type: str | None, filename: str | None) -> str:
    """Pick the attachment media type, requiring an image type."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if not media_type and filename:
        guessed, _ = mimetypes.guess_type(filename)
        media_type = guessed or ""
    if not media_type.startswith("image/"):
        raise FieldValidationError(
            f"Attachment must be an image (got '{media_type or 'unknown'}')", "image",
        )
    return media_type


def encode_data_url(media_type: str, data: bytes) -> str:
    """Encode bytes as a self-describing inline string renderable as-is."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{payload}"
