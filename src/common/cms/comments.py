"""CRUD wrappers for post comments."""

from typing import Any, Dict, List, Optional

from common.base.logging_config import get_logger
from common.cms.client import get_cms_client
from common.cms.normalize import normalize_comment, response_items
from common.cms.types import Comment

logger = get_logger(__name__)


def get_comments_by_blog(blog_id: int, token: Optional[str] = None) -> List[Comment]:
    """
    Fetch approved comments for a post, newest first.

    :param blog_id: Numeric post id
    :param token: Optional JWT, for CMS setups that restrict comment reads
    :return: Normalized comments
    """
    path = (
        f"api/comments?filters[blog][id][$eq]={blog_id}"
        f"&filters[isApproved][$eq]=true&populate=*&sort=createdAt:desc"
    )
    body = get_cms_client().get(path, token=token)
    return [normalize_comment(raw) for raw in response_items(body) if raw]


def post_comment(blog_id: int, content: str, token: str) -> Dict[str, Any]:
    """
    Submit a comment. New comments stay hidden until a moderator approves them.

    :raises ValueError: If the content is blank
    """
    content = (content or "").strip()
    if not content:
        raise ValueError("Comment content is required")

    body = get_cms_client().post(
        "api/comments",
        token=token,
        json={"data": {"content": content, "blog": blog_id}},
    ) or {}
    logger.info(f"Comment submitted on blog {blog_id}")
    return body.get("data") or {}
