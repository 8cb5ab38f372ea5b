"""Cache key schema for list pages.

Key format: {prefix}:{owner_b64}:{version}:{page}:{page_size}

Where:
- prefix: "mylist" (namespace for a shared Redis)
- owner_b64: Base64URL encoded owner id (no glob metacharacters)
- version: cache-format tag, bumped whenever the cached page shape changes
- page, page_size: clamped pagination parameters

The owner segment comes before the version so that one pattern removes
every cached page of an owner regardless of format version.
"""

from __future__ import annotations

from mylist.core.ids import encode_owner_segment


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    PREFIX = "mylist"
    CURRENT_VERSION = "v2"

    @classmethod
    def page(
        cls, owner_id: str, page: int, page_size: int, version: str = CURRENT_VERSION
    ) -> str:
        """Key for one cached page of an owner's list."""
        owner_b64 = encode_owner_segment(owner_id)
        return f"{cls.PREFIX}:{owner_b64}:{version}:{page}:{page_size}"

    @classmethod
    def owner_pattern(cls, owner_id: str) -> str:
        """Pattern matching all cached pages of an owner.

        Use with Redis SCAN + DEL for cache invalidation.
        """
        return f"{cls.PREFIX}:{encode_owner_segment(owner_id)}:*"

