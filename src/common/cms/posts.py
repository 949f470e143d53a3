"""CRUD wrappers for blog posts, categories and cover uploads."""

from typing import Any, BinaryIO, Dict, List, Optional, Tuple
from urllib.parse import quote

from common.base.logging_config import get_logger
from common.cms.client import get_cms_client
from common.cms.errors import CMSError, PostNotFound
from common.cms.normalize import normalize_category, normalize_post, response_items
from common.cms.types import BlogPost, Category, Pagination, UserBlogPostData
from common.config.site_config import get_site_config
from richtext.markdown_reader import markdown_to_blocks

logger = get_logger(__name__)

# Upload target for cover images
BLOG_CONTENT_TYPE = "api::blog.blog"
COVER_FIELD = "cover"


def _pagination(meta: Optional[Dict[str, Any]]) -> Pagination:
    raw = (meta or {}).get("pagination")
    if not raw:
        return Pagination(page=1, page_count=1, page_size=10, total=0)
    return Pagination(
        page=int(raw.get("page", 1)),
        page_count=int(raw.get("pageCount", 1)),
        page_size=int(raw.get("pageSize", 10)),
        total=int(raw.get("total", 0)),
    )


def get_all_posts(page: int = 1, search_query: str = "") -> Tuple[List[BlogPost], Pagination]:
    """
    Fetch one page of posts, optionally filtered by a case-insensitive title match.

    :param page: 1-based page number
    :param search_query: Title substring to filter on
    :return: Tuple of (posts, pagination)
    :raises CMSError: "Server error" on any CMS failure
    """
    page_size = get_site_config().page_size
    search_filter = f"&filters[title][$containsi]={quote(search_query)}" if search_query else ""
    path = f"api/blogs?populate=*&pagination[page]={page}&pagination[pageSize]={page_size}{search_filter}"

    try:
        body = get_cms_client().get(path) or {}
    except CMSError as e:
        logger.error(f"Error fetching blogs: {e}")
        raise CMSError("Server error", e.status) from e

    posts = [normalize_post(raw) for raw in (body.get("data") or [])]
    return posts, _pagination(body.get("meta"))


def _find_post(field: str, value: str) -> Optional[BlogPost]:
    body = get_cms_client().get(f"api/blogs?filters[{field}][$eq]={quote(value)}&populate=*") or {}
    records = body.get("data") or []
    if records:
        return normalize_post(records[0])
    return None


def get_post_by_slug(slug: str) -> BlogPost:
    """
    Fetch a single post by slug, falling back to documentId for posts without one.

    :param slug: Slug or documentId from the URL
    :return: BlogPost
    :raises PostNotFound: When neither lookup matches
    :raises CMSError: "Server error" on any CMS failure
    """
    try:
        post = _find_post("slug", slug) or _find_post("documentId", slug)
    except CMSError as e:
        logger.error(f"Error fetching post '{slug}': {e}")
        raise CMSError("Server error", e.status) from e

    if post is None:
        logger.info(f"No post matches '{slug}'")
        raise PostNotFound()
    return post


def get_all_categories() -> List[Category]:
    """
    :return: All categories
    :raises CMSError: "Server error" on any CMS failure
    """
    try:
        body = get_cms_client().get("api/categories")
    except CMSError as e:
        logger.error(f"Error fetching categories: {e}")
        raise CMSError("Server error", e.status) from e
    return [normalize_category(raw) for raw in response_items(body)]


def upload_image(image: BinaryIO, ref_id: int, token: Optional[str] = None,
                 filename: str = "cover", mimetype: Optional[str] = None) -> Dict[str, Any]:
    """
    Upload an image and attach it as the cover of a blog post.

    :param image: Readable binary stream
    :param ref_id: Numeric id of the post the image belongs to
    :param token: Author's JWT
    :return: The first uploaded file record
    """
    file_tuple = (filename, image, mimetype) if mimetype else (filename, image)
    try:
        uploaded = get_cms_client().post(
            "api/upload",
            token=token,
            data={"ref": BLOG_CONTENT_TYPE, "refId": str(ref_id), "field": COVER_FIELD},
            files={"files": file_tuple},
        )
    except CMSError as e:
        logger.error(f"Error uploading image: {e}")
        raise

    if isinstance(uploaded, list) and uploaded:
        return uploaded[0]
    raise CMSError("Upload returned no files")


def create_post(post_data: UserBlogPostData, token: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a blog post.

    The writer submits Markdown; unless the site stores Markdown as-is, it is
    converted into rich-text blocks first.

    :param post_data: Writer's fields
    :param token: Author's JWT
    :return: The created record (includes id and documentId)
    :raises CMSError: "Failed to create post" on any CMS failure
    """
    payload = post_data.to_payload()
    if get_site_config().content_format == "blocks":
        payload["content"] = markdown_to_blocks(post_data.content)

    try:
        body = get_cms_client().post("api/blogs", token=token, json={"data": payload}) or {}
    except CMSError as e:
        logger.error(f"Error creating post: {e}")
        raise CMSError("Failed to create post", e.status) from e

    created = body.get("data") or {}
    logger.info(f"Created post id={created.get('id')} documentId={created.get('documentId')}")
    return created
