from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Media:
    kind: str            # "image" | "video" | "audio"
    url: str
    cover: str = ""
    duration_label: str = ""
    artist: str = ""
    genre: str = ""
    credits: str = ""
    mime_type: str = ""


@dataclass(frozen=True)
class ArticleImage:
    url: str
    alt: str = ""
    caption: str = ""
    cover: bool = False
    wide: bool = False


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class ListBlock:
    ordered: bool
    items: Tuple[str, ...]


@dataclass(frozen=True)
class PlainBody:
    """Article body shown as-is when there is no usable `contentJson`."""
    text: str


Block = Union[ArticleImage, Paragraph, Heading, ListBlock, PlainBody]


@dataclass(frozen=True)
class ResolvedContent:
    display_text: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    body: Tuple[Block, ...] = ()
    is_article: bool = False
    media: Optional[Media] = None

    @property
    def has_article_body(self) -> bool:
        return bool(self.title or self.subtitle or self.body)
