"""Flatten the Post/Repost union returned by `posts.items` into one feed."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from dateutil import parser as dateparse

from lens_profile.feed.types import FeedItem, Post, RawItem, Repost
from lens_profile.lens.errors import ItemMalformed, MalformedResponse

logger = logging.getLogger(__name__)

# unparsable timestamps sort after everything else
OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(ts) -> Optional[datetime]:
    """Parse an API timestamp into an aware datetime; None if it can't be read.

    Naive values are taken as UTC.
    """
    if not ts or not isinstance(ts, str):
        return None
    try:
        dt = dateparse.isoparse(ts)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def sort_key(item: FeedItem) -> datetime:
    return parse_timestamp(item.get("timestamp")) or OLDEST


def extract_items(response: dict) -> List[RawItem]:
    """Pull `posts.items` out of a posts response (with or without the `data` envelope).

    A missing or empty list means the upstream broke its contract, not that
    the account has no posts, so it is a hard failure.
    """
    if not isinstance(response, dict):
        raise MalformedResponse("posts response is not an object")
    data = response.get("data", response)
    posts = (data or {}).get("posts") if isinstance(data, dict) else None
    items = posts.get("items") if isinstance(posts, dict) else None
    if not items or not isinstance(items, list):
        raise MalformedResponse("No posts found")
    return items


def normalize_item(raw: RawItem) -> FeedItem:
    if not isinstance(raw, dict):
        raise ItemMalformed(f"item is not an object: {raw!r}")
    # null id/timestamp is malformed; a present but unreadable timestamp
    # (including "") is kept and sorts as oldest
    if raw.get("id") is None or raw.get("timestamp") is None:
        raise ItemMalformed(f"item without id/timestamp: {raw.get('id')!r}")

    repost_of = raw.get("repostOf")
    if isinstance(repost_of, dict) and isinstance(repost_of.get("metadata"), dict):
        return Repost(
            type="Repost",
            id=raw["id"],
            timestamp=raw["timestamp"],
            repostedBy=raw.get("author") or {},
            originalPost=repost_of,
        )
    if isinstance(raw.get("metadata"), dict):
        post: Post = {**raw, "type": "Post"}  # type: ignore[typeddict-item]
        return post
    raise ItemMalformed(f"item {raw['id']!r} has neither metadata nor repostOf.metadata")


def normalize_feed(items: Iterable[RawItem]) -> List[FeedItem]:
    """Normalize raw items and order them newest first.

    Malformed items are logged and dropped. Equal timestamps keep their
    input order.
    """
    feed: List[FeedItem] = []
    for raw in items:
        try:
            feed.append(normalize_item(raw))
        except ItemMalformed as e:
            logger.warning("Skipping malformed item: %s", e)
    feed.sort(key=sort_key, reverse=True)
    return feed
