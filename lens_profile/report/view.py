"""Build the presentational tree for the profile page.

Everything here is pure: raw account/stats dicts and normalized feed items
go in, frozen dataclasses come out. `render.py` mounts them into HTML.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from lens_profile.config import DEFAULT_AVATAR
from lens_profile.feed.content import Media, ResolvedContent
from lens_profile.feed.normalizer import parse_timestamp
from lens_profile.feed.resolver import resolve_content
from lens_profile.feed.types import FeedItem

UNKNOWN_AUTHOR = "Unknown"
UNKNOWN_REPOSTER = "Someone"
UNKNOWN_PROFILE = "Profile Name"

# first key present wins; the v2 API used the total* names
LIKE_KEYS = ("reactions", "upvotes", "totalUpvotes")
COMMENT_KEYS = ("comments",)
MIRROR_KEYS = ("reposts", "mirrors", "totalAmountOfMirrors")
COLLECT_KEYS = ("collects", "totalAmountOfCollects")


@dataclass(frozen=True)
class TimestampLabel:
    text: str
    relative: bool


@dataclass(frozen=True)
class AppBadge:
    name: str
    logo: str
    url: Optional[str] = None


@dataclass(frozen=True)
class StatsLine:
    likes: int
    comments: int
    mirrors: int
    collects: int
    author_name: str
    author_avatar: str
    timestamp: TimestampLabel
    app: Optional[AppBadge] = None
    reposted_by: Optional[str] = None


@dataclass(frozen=True)
class Card:
    id: str
    content: ResolvedContent
    stats: StatsLine
    media: Optional[Media] = None
    repost: bool = False
    reposted_by: Optional[str] = None


@dataclass(frozen=True)
class Profile:
    display_name: str
    handle: str
    bio_lines: Tuple[str, ...]
    avatar_url: str
    cover_url: Optional[str]
    followers: int
    following: int
    posts: int


@dataclass(frozen=True)
class ProfilePage:
    profile: Optional[Profile]
    cards: Tuple[Card, ...] = ()
    errors: Tuple[str, ...] = ()
    generated: str = ""


def display_name(account: Optional[dict], fallback: str) -> str:
    account = account or {}
    name = (account.get("metadata") or {}).get("name")
    if name:
        return name
    return (account.get("username") or {}).get("value") or fallback


def avatar_url(account: Optional[dict], default_avatar: str = DEFAULT_AVATAR) -> str:
    return ((account or {}).get("metadata") or {}).get("picture") or default_avatar


def _count(stats: Optional[dict], keys: Iterable[str]) -> int:
    stats = stats or {}
    for key in keys:
        value = stats.get(key)
        if value is None:
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0
    return 0


def format_timestamp(ts, *, now: Optional[datetime] = None) -> TimestampLabel:
    """Relative label ("45s ago", "3h ago") inside a week, an absolute date after that.

    Buckets use floor division with exclusive upper bounds, so exactly 60s
    reads "1m ago". Unreadable timestamps give an empty label.
    """
    dt = parse_timestamp(ts)
    if dt is None:
        return TimestampLabel("", False)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - dt).total_seconds()))
    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400
    if seconds < 60:
        return TimestampLabel(f"{seconds}s ago", True)
    if minutes < 60:
        return TimestampLabel(f"{minutes}m ago", True)
    if hours < 24:
        return TimestampLabel(f"{hours}h ago", True)
    if days < 7:
        return TimestampLabel(f"{days}d ago", True)
    try:
        local = dt.astimezone()
    except (OverflowError, OSError, ValueError):
        local = dt  # outside what the platform's local-time conversion supports
    return TimestampLabel(local.strftime("%c"), False)


def app_badge(app: Optional[dict]) -> Optional[AppBadge]:
    meta = (app or {}).get("metadata") or {}
    if not meta.get("logo"):
        return None
    return AppBadge(name=meta.get("name") or "App", logo=meta["logo"], url=meta.get("url") or None)


def _stats_line(post: dict, ts, *, now, default_avatar, reposted_by=None) -> StatsLine:
    stats = post.get("stats")
    author = post.get("author")
    return StatsLine(
        likes=_count(stats, LIKE_KEYS),
        comments=_count(stats, COMMENT_KEYS),
        mirrors=_count(stats, MIRROR_KEYS),
        collects=_count(stats, COLLECT_KEYS),
        author_name=display_name(author, UNKNOWN_AUTHOR),
        author_avatar=avatar_url(author, default_avatar),
        timestamp=format_timestamp(ts, now=now),
        app=app_badge(post.get("app")),
        reposted_by=reposted_by,
    )


def build_card(item: FeedItem, *, now: Optional[datetime] = None,
               default_avatar: str = DEFAULT_AVATAR) -> Card:
    if item.get("type") == "Repost":
        original = item.get("originalPost") or {}
        reposter = display_name(item.get("repostedBy"), UNKNOWN_REPOSTER)
        post, reposted_by = original, reposter
    else:
        post, reposted_by = item, None

    content = resolve_content(post.get("metadata"))
    media = content.media if content.media and content.media.url else None
    return Card(
        id=str(item.get("id", "")),
        content=content,
        media=media,
        repost=reposted_by is not None,
        reposted_by=reposted_by,
        stats=_stats_line(post, item.get("timestamp"), now=now,
                          default_avatar=default_avatar, reposted_by=reposted_by),
    )


def build_cards(items: Iterable[FeedItem], *, now: Optional[datetime] = None,
                default_avatar: str = DEFAULT_AVATAR) -> List[Card]:
    now = now or datetime.now(timezone.utc)
    return [build_card(it, now=now, default_avatar=default_avatar) for it in items]


def build_profile(account: dict, stats: Optional[dict], *,
                  default_avatar: str = DEFAULT_AVATAR) -> Profile:
    meta = account.get("metadata") or {}
    username = (account.get("username") or {}).get("value") or ""
    bio = meta.get("bio")
    feed_stats = (stats or {}).get("feedStats")
    follow_stats = (stats or {}).get("graphFollowStats")
    return Profile(
        display_name=display_name(account, UNKNOWN_PROFILE),
        handle=username,
        bio_lines=tuple(bio.splitlines()) if bio else (f"@{username}",),
        avatar_url=avatar_url(account, default_avatar),
        cover_url=meta.get("coverPicture") or None,
        followers=_count(follow_stats, ("followers",)),
        following=_count(follow_stats, ("following",)),
        posts=_count(feed_stats, ("posts",)),
    )
