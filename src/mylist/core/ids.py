"""Owner id segments for cache keys and invalidation messages.

Owner ids are opaque client-supplied strings. Before they are embedded in a
Redis key or a SCAN pattern they are encoded as unpadded Base64URL, whose
alphabet has no glob metacharacters and no ``:`` separators.
"""

from __future__ import annotations

import base64
import binascii
import re

_SEGMENT = re.compile(r"^[A-Za-z0-9_-]+$")


class InvalidOwnerSegment(ValueError):
    """Raised when a key segment is not an encoded owner id."""


def encode_owner_segment(owner_id: str) -> str:
    return base64.urlsafe_b64encode(owner_id.encode("utf-8")).decode("ascii").rstrip("=")


def decode_owner_segment(segment: str) -> str:
    """Recover the owner id from an encoded segment."""
    if not _SEGMENT.match(segment) or len(segment) % 4 == 1:
        raise InvalidOwnerSegment(f"not an owner segment: {segment!r}")
    try:
        return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise InvalidOwnerSegment(f"not an owner segment: {segment!r}") from exc
