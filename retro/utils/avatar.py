from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit, urlunsplit

AVATAR_SIZE = 200
SIZE_PARAM = "sz"


def normalize_avatar_url(url: Optional[str]) -> Optional[str]:
    """Rewrite the ``sz`` query parameter of an avatar URL to ``AVATAR_SIZE``.

    Only the ``sz`` pair is touched; the rest of the URL is kept byte for
    byte. URLs that carry no ``sz`` parameter are returned unchanged.
    """
    if not url:
        return url
    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = parts.query.split("&")
    rewritten = [
        f"{SIZE_PARAM}={AVATAR_SIZE}" if pair.split("=", 1)[0] == SIZE_PARAM else pair
        for pair in pairs
    ]
    if rewritten == pairs:
        return url
    return urlunsplit(parts._replace(query="&".join(rewritten)))
