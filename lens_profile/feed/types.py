from typing import Any, Dict, List, Literal, Optional, TypedDict, Union


class Author(TypedDict, total=False):
    username: Optional[Dict[str, Any]]   # {"value": "lens/alice"}
    metadata: Optional[Dict[str, Any]]   # {"name", "picture"}


class Post(TypedDict, total=False):
    type: Literal["Post"]
    id: str
    author: Author
    timestamp: str        # ISO8601
    app: Optional[Dict[str, Any]]
    metadata: Dict[str, Any]   # tagged by __typename
    stats: Optional[Dict[str, Any]]


class Repost(TypedDict, total=False):
    type: Literal["Repost"]
    id: str
    timestamp: str
    repostedBy: Author
    originalPost: Post


FeedItem = Union[Post, Repost]
RawItem = Dict[str, Any]
RawItems = List[RawItem]
