"""Turn post metadata (any `__typename` variant) into renderer-ready content.

Text resolution and media resolution are independent: an article can carry
a rich body and a video at the same time.
"""
from __future__ import annotations

import json
import logging
from typing import List, Optional, Tuple

from lens_profile.feed.content import (
    ArticleImage,
    Block,
    Heading,
    ListBlock,
    Media,
    Paragraph,
    PlainBody,
    ResolvedContent,
)
from lens_profile.lens.errors import ContentParseError

logger = logging.getLogger(__name__)

NO_CONTENT = "No content available"
NO_ARTICLE_CONTENT = "Article content not available"

ARTICLE = "ArticleMetadata"
IMAGE = "ImageMetadata"
VIDEO = "VideoMetadata"
AUDIO = "AudioMetadata"

HEADINGS = {f"h{n}": n for n in range(1, 7)}


def _s(value) -> str:
    return "" if value is None else str(value)


def resolve_text(metadata: Optional[dict]) -> str:
    if not metadata:
        return NO_CONTENT
    if metadata.get("__typename") == ARTICLE:
        return metadata.get("content") or NO_ARTICLE_CONTENT
    for field in ("content", "description", "name"):
        if metadata.get(field):
            return metadata[field]
    return NO_CONTENT


def attribute_map(metadata: dict) -> dict:
    out = {}
    for attr in metadata.get("attributes") or []:
        if isinstance(attr, dict) and isinstance(attr.get("key"), str) and attr["key"]:
            out[attr["key"]] = attr.get("value")
    return out


def parse_content_blocks(raw_json: str) -> list:
    try:
        blocks = json.loads(raw_json)
    except (TypeError, ValueError) as e:
        raise ContentParseError(f"contentJson is not valid JSON: {e}") from e
    if not isinstance(blocks, list):
        raise ContentParseError(f"contentJson is a {type(blocks).__name__}, expected a list")
    return blocks


def _span_text(node: dict) -> str:
    children = node.get("children") or []
    return "".join(_s(c.get("text")) for c in children if isinstance(c, dict)).strip()


def _filename(url: str) -> str:
    return url.rsplit("/", 1)[-1]


def _mime(value) -> str:
    # the API reports enum names like VIDEO_MP4; pass real MIME types through
    value = _s(value)
    if not value or "/" in value:
        return value
    return value.lower().replace("_", "/", 1)


def _block(block: dict, *, cover_url: str, title: Optional[str]) -> Optional[Block]:
    kind = block.get("type")
    if kind in ("title", "subtitle"):
        # already shown from metadata.title / attributes.subtitle
        return None
    if kind == "img":
        url = block.get("url")
        if not url or not isinstance(url, str):
            return None
        cover_name = _filename(cover_url) if cover_url else ""
        is_cover = bool(cover_name) and _filename(url) == cover_name
        alt = block.get("alt") or ((title or "Article cover") if is_cover else "")
        return ArticleImage(
            url=url,
            alt=alt,
            caption=_s(block.get("caption")),
            cover=is_cover,
            wide=not is_cover and block.get("width") == "wide",
        )
    if kind in ("p", "paragraph"):
        text = _span_text(block)
        return Paragraph(text) if text else None
    if kind in HEADINGS:
        text = _span_text(block)
        return Heading(HEADINGS[kind], text) if text else None
    if kind in ("ul", "ol"):
        items = tuple(
            t for t in (_span_text(li) for li in block.get("children") or [] if isinstance(li, dict)) if t
        )
        return ListBlock(ordered=kind == "ol", items=items) if items else None
    logger.debug("Unhandled block type: %r", kind)
    return None


def resolve_article_body(metadata: dict, title: Optional[str] = None) -> Tuple[Block, ...]:
    attrs = attribute_map(metadata)
    content = metadata.get("content")
    fallback: Tuple[Block, ...] = (PlainBody(content),) if content else ()

    raw_json = attrs.get("contentJson")
    if not raw_json:
        return fallback
    try:
        raw_blocks = parse_content_blocks(raw_json)
    except ContentParseError as e:
        logger.warning("Article %s: %s; using plain content", metadata.get("id", ""), e)
        return fallback

    cover_url = _s(attrs.get("coverUrl"))
    body: List[Block] = []
    for raw in raw_blocks:
        if not isinstance(raw, dict):
            continue
        try:
            block = _block(raw, cover_url=cover_url, title=title)
        except (TypeError, ValueError, AttributeError) as e:
            # skip it; the rest of the article still renders
            logger.warning("Error rendering block %r: %s", raw.get("type"), e)
            continue
        if block is not None:
            body.append(block)
    return tuple(body)


def extract_media(metadata: Optional[dict]) -> Optional[Media]:
    """Media by type tag. The url may be empty; callers decide whether to show it."""
    if not metadata:
        return None
    tag = metadata.get("__typename")
    if tag == IMAGE:
        image = metadata.get("image") or {}
        url = (image.get("original") or {}).get("url") or image.get("item") or ""
        return Media(kind="image", url=url)
    elif tag == VIDEO:
        video = metadata.get("video") or {}
        return Media(
            kind="video",
            url=_s(video.get("item")),
            cover=_s(video.get("cover")),
            duration_label=_s(video.get("duration")),
            mime_type=_mime(video.get("type")),
        )
    elif tag == AUDIO:
        audio = metadata.get("audio") or {}
        return Media(
            kind="audio",
            url=_s(audio.get("item")),
            cover=_s(audio.get("cover")),
            duration_label=_s(audio.get("duration")),
            artist=_s(audio.get("artist")),
            genre=_s(audio.get("genre")),
            credits=_s(audio.get("credits")),
            mime_type=_mime(audio.get("type")),
        )
    else:
        # text, article, link, event, ... carry no attachable media
        return None


def resolve_content(metadata: Optional[dict]) -> ResolvedContent:
    text = resolve_text(metadata)
    if not metadata:
        return ResolvedContent(display_text=text)

    media = extract_media(metadata)
    title = metadata.get("title") or None
    if metadata.get("__typename") == ARTICLE:
        return ResolvedContent(
            display_text=text,
            title=title,
            subtitle=attribute_map(metadata).get("subtitle") or None,
            body=resolve_article_body(metadata, title),
            is_article=True,
            media=media,
        )
    return ResolvedContent(display_text=text, title=title, media=media)
