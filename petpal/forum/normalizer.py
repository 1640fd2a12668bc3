"""
Map Reddit's listing JSON onto Post.

Pure functions, no I/O. Reddit omits or nulls fields freely, so every field
falls back to a fixed default instead of failing: empty, null, zero and
wrongly-typed values are all treated as missing.
"""

import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from petpal.forum.exceptions import MalformedPayloadError
from petpal.forum.models import Post, PostOrigin

_IMAGE_SUFFIXES = (".jpg", ".png", ".gif")
_DEFAULT_AUTHOR = "Unknown"
_SUBREDDIT_NAME = re.compile(r"^[A-Za-z0-9_]{2,21}$")


def normalize_subreddit(name: str) -> str:
    """Strip an optional r/ prefix and validate the subreddit name."""
    cleaned = (name or "").strip()
    for prefix in ("/r/", "r/"):
        if cleaned.lower().startswith(prefix):
            cleaned = cleaned[len(prefix):]
            break
    cleaned = cleaned.strip("/")
    if not _SUBREDDIT_NAME.match(cleaned):
        raise ValueError(f"Invalid subreddit name: {name!r}")
    return cleaned


def has_image(url: Any) -> bool:
    return isinstance(url, str) and url.endswith(_IMAGE_SUFFIXES)


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value:
        return value
    return default


def _created_at(value: Any, now: datetime) -> datetime:
    # bool is an int subclass; True must not become 1970-01-01T00:00:01
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value == 0:
        return now
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return now


def normalize_post(raw: Any, source_group: str, *, now: datetime | None = None) -> Post:
    """Build a fully-defaulted Post from one listing child's ``data`` object."""
    if not isinstance(raw, Mapping):
        raw = {}
    if now is None:
        now = datetime.now(timezone.utc)

    return Post(
        title=_text(raw.get("title"), ""),
        body=_text(raw.get("selftext"), ""),
        created_at=_created_at(raw.get("created_utc"), now),
        author=_text(raw.get("author"), _DEFAULT_AUTHOR),
        source_group=_text(raw.get("subreddit"), source_group),
        has_image=has_image(raw.get("url")),
        origin=PostOrigin.REDDIT,
    )


def normalize_listing(payload: Any, source_group: str, *, now: datetime | None = None) -> list[Post]:
    """
    Normalize a whole ``{data: {children: [{data: {...}}, ...]}}`` listing.

    Upstream order is preserved. Missing ``data``/``children`` keys mean an
    empty listing; a structure of the wrong shape raises MalformedPayloadError.
    """
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError(
            "Reddit listing is not a JSON object",
            context={"type": type(payload).__name__},
        )

    data = payload.get("data")
    if data is None:
        return []
    if not isinstance(data, Mapping):
        raise MalformedPayloadError("Reddit listing 'data' is not an object")

    children = data.get("children")
    if children is None:
        return []
    if not isinstance(children, list):
        raise MalformedPayloadError("Reddit listing 'children' is not an array")

    if now is None:
        now = datetime.now(timezone.utc)

    posts: list[Post] = []
    for child in children:
        item = child.get("data") if isinstance(child, Mapping) else None
        posts.append(normalize_post(item, source_group, now=now))
    return posts
