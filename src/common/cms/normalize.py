"""Normalization of CMS response records.

The CMS answers in two shapes depending on its major version: v4 wraps every
record as ``{"id": ..., "attributes": {...}}`` and every relation as
``{"data": ...}``, while v5 returns flat records. Everything past this module
sees only the dataclasses from :mod:`common.cms.types`.
"""

from typing import Any, Dict, List, Optional, Union

from common.cms.types import (
    DEFAULT_ROLE,
    Author,
    BlogPost,
    Category,
    Comment,
    ImageData,
    User,
    Vote,
)

COMMENT_DEFAULT_ROLE = {"name": "User", "type": "authenticated"}


def _first(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def flatten(record: Any) -> Any:
    """Flatten a v4 ``{"id", "attributes"}`` record; other values pass through."""
    if isinstance(record, dict) and isinstance(record.get("attributes"), dict):
        return {"id": record.get("id"), **record["attributes"]}
    return record


def unwrap_relation(value: Any) -> Any:
    """Unwrap a v4 ``{"data": ...}`` relation and flatten its record(s)."""
    if isinstance(value, dict) and "data" in value and set(value) <= {"data", "meta"}:
        value = value["data"]
    if isinstance(value, list):
        return [flatten(item) for item in value if item is not None]
    return flatten(value)


def _image(value: Any) -> Optional[ImageData]:
    value = unwrap_relation(value)
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict) and value.get("url"):
        return ImageData(url=value["url"])
    return None


def _author(value: Any) -> Optional[Author]:
    value = unwrap_relation(value)
    if not isinstance(value, dict):
        return None
    return Author(
        id=value.get("id"),
        name=_first(value.get("name"), value.get("username"), ""),
        email=value.get("email") or "",
        avatar=_image(value.get("avatar")),
    )


def normalize_category(raw: Any) -> Category:
    record = flatten(raw) or {}
    return Category(
        document_id=record.get("documentId"),
        name=record.get("name") or "",
        description=record.get("description") or "",
        id=record.get("id"),
    )


def normalize_post(raw: Dict[str, Any]) -> BlogPost:
    """
    Normalize a blog record from either CMS version into a BlogPost.

    :param raw: Record from the ``data`` array of a blogs response
    :return: BlogPost
    """
    record = flatten(raw)
    categories = unwrap_relation(record.get("categories")) or []
    if not isinstance(categories, list):
        categories = [categories]
    return BlogPost(
        id=record.get("id"),
        document_id=record.get("documentId"),
        title=record.get("title") or "",
        slug=record.get("slug") or None,
        description=record.get("description") or "",
        content=record.get("content"),
        created_at=_first(record.get("createdAt"), record.get("publishedAt")),
        cover=_image(record.get("cover")),
        author=_author(record.get("author")),
        categories=[normalize_category(c) for c in categories if c],
    )


def normalize_user(raw: Dict[str, Any]) -> User:
    """Build a User, filling the default role when the CMS omitted it."""
    role = raw.get("role")
    if isinstance(role, dict) and "data" in role:
        role = unwrap_relation(role)
    if not isinstance(role, dict) or not (role.get("name") or role.get("type")):
        role = dict(DEFAULT_ROLE)
    return User(
        id=raw.get("id"),
        username=_first(raw.get("username"), raw.get("email"), ""),
        email=raw.get("email") or "",
        role={"name": role.get("name", ""), "type": role.get("type", "")},
    )


def normalize_comment(raw: Dict[str, Any]) -> Comment:
    """
    Normalize a comment record.

    Handles flat and ``attributes`` records, and user data stored under either
    ``author`` or ``user``, wrapped or not.
    """
    attrs = raw.get("attributes") if isinstance(raw.get("attributes"), dict) else raw

    def wrapped(key: str) -> Dict[str, Any]:
        relation = attrs.get(key)
        if isinstance(relation, dict) and isinstance(relation.get("data"), dict):
            return relation["data"]
        return {}

    author_data = _first(
        wrapped("author").get("attributes"),
        attrs.get("author"),
        wrapped("user").get("attributes"),
        attrs.get("user"),
    )

    if isinstance(author_data, dict):
        user = User(
            id=_first(author_data.get("id"), wrapped("author").get("id"), wrapped("user").get("id")),
            username=_first(author_data.get("username"), author_data.get("name"), "User"),
            email=_first(author_data.get("email"), ""),
            role=_first(author_data.get("role"), dict(COMMENT_DEFAULT_ROLE)),
        )
    else:
        user = User(id=0, username="User", email="", role=dict(COMMENT_DEFAULT_ROLE))

    return Comment(
        id=_first(raw.get("id"), attrs.get("id")),
        content=_first(attrs.get("content"), raw.get("content"), ""),
        blog=_first(attrs.get("blog"), raw.get("blog")),
        user=user,
        is_approved=_first(attrs.get("isApproved"), raw.get("isApproved"), True),
        created_at=_first(attrs.get("createdAt"), raw.get("createdAt")),
    )


def normalize_vote(raw: Dict[str, Any]) -> Vote:
    record = flatten(raw)
    user = unwrap_relation(record.get("user"))
    return Vote(
        id=record.get("id"),
        value=int(record.get("value") or 0),
        user_id=user.get("id") if isinstance(user, dict) else None,
    )


def response_items(body: Any) -> List[Any]:
    """Records from a response body that is either a bare list or ``{"data": [...]}``."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, list):
            return data
    return []


def display_name(user: Optional[User]) -> str:
    """Name shown next to a user's content."""
    if user is None:
        return "Anonymous"
    return user.username or user.email or "Anonymous"


def post_route_param(post: BlogPost) -> Union[str, int]:
    """Path segment for a post: its slug, else documentId, else numeric id."""
    return post.slug or post.document_id or post.id
