from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional

from lens_profile.config import DEFAULT_AVATAR, ProfileConfig
from lens_profile.feed.normalizer import extract_items, normalize_feed
from lens_profile.lens.client import LensClient
from lens_profile.lens.errors import LensError
from lens_profile.report.view import Card, ProfilePage, build_cards, build_profile

logger = logging.getLogger(__name__)


def render_feed(response: dict, *, now: Optional[datetime] = None,
                default_avatar: str = DEFAULT_AVATAR) -> List[Card]:
    """Raw posts response -> ordered, renderable cards.

    Pure: no I/O, independent of how the response was fetched. Raises
    MalformedResponse when `posts.items` is missing or empty.
    """
    items = normalize_feed(extract_items(response))
    return build_cards(items, now=now, default_avatar=default_avatar)


@contextmanager
def loading(label: str):
    """Bracket one page load; the "done" line is logged on every exit path."""
    logger.info("Loading %s...", label)
    started = datetime.now(timezone.utc)
    try:
        yield
    finally:
        elapsed = (datetime.now(timezone.utc) - started).total_seconds()
        logger.info("Finished loading %s (%.2fs)", label, elapsed)


def load_profile_page(client: LensClient, config: ProfileConfig, *,
                      now: Optional[datetime] = None) -> ProfilePage:
    """Fetch account -> stats -> posts in order and assemble the page.

    An account failure propagates: there is nothing to show without it.
    A stats failure keeps the header (with zero counters), reports the error
    and stops before posts. A posts failure keeps header and stats.
    """
    now = now or datetime.now(timezone.utc)
    generated = now.astimezone().strftime("%Y-%m-%d %H:%M")
    errors: List[str] = []

    with loading(config.handle):
        account = client.fetch_account()

        address = account.get("address") or config.evm_address
        try:
            stats = client.fetch_stats(address)
        except LensError as e:
            logger.error("Error loading stats for %s: %s", config.handle, e)
            errors.append(f"Error loading profile stats: {e}")
            profile = build_profile(account, None, default_avatar=config.default_avatar)
            return ProfilePage(profile=profile, errors=tuple(errors), generated=generated)

        profile = build_profile(account, stats, default_avatar=config.default_avatar)

        cards: List[Card] = []
        try:
            cards = render_feed(client.fetch_posts(config.evm_address), now=now,
                                default_avatar=config.default_avatar)
        except LensError as e:
            logger.error("Error loading posts for %s: %s", config.handle, e)
            errors.append(f"Error loading posts: {e}")

    return ProfilePage(profile=profile, cards=tuple(cards), errors=tuple(errors), generated=generated)
