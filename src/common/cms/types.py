"""Data structures for CMS records after normalization."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

DEFAULT_ROLE = {"type": "authenticated", "name": "Authenticated"}


@dataclass
class ImageData:
    url: str


@dataclass
class Author:
    id: Optional[int]
    name: str
    email: str = ""
    avatar: Optional[ImageData] = None


@dataclass
class Category:
    document_id: Optional[str]
    name: str
    description: str = ""
    id: Optional[int] = None


@dataclass
class BlogPost:
    """A blog post as rendered by the frontend."""
    id: int
    title: str
    document_id: Optional[str] = None
    # None when not set in the CMS; such posts are routed by documentId
    slug: Optional[str] = None
    description: str = ""
    # Markdown string, rich-text block list, or a {"type": "doc"} wrapper
    content: Union[str, List[Any], Dict[str, Any], None] = None
    created_at: Optional[str] = None
    cover: Optional[ImageData] = None
    author: Optional[Author] = None
    categories: List[Category] = field(default_factory=list)


@dataclass
class UserBlogPostData:
    """Fields submitted by the writer when creating a post."""
    title: str
    slug: str
    description: str
    content: str
    # Category documentIds for the CMS relation
    categories: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "content": self.content,
        }
        if self.categories:
            payload["categories"] = list(self.categories)
        return payload


@dataclass
class User:
    id: int
    username: str
    email: str = ""
    role: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ROLE))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Comment:
    id: Optional[int]
    content: str
    user: User
    blog: Any = None
    is_approved: bool = True
    created_at: Optional[str] = None


@dataclass
class Vote:
    id: int
    value: int
    user_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "value": self.value}


@dataclass
class Pagination:
    page: int = 1
    page_count: int = 1
    page_size: int = 10
    total: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count


@dataclass
class AuthResponse:
    jwt: str
    user: User
