"""Blueprint for the public pages: the post list and single posts."""

from typing import Dict, List

from flask import Blueprint, request, render_template, g
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from common.cms import (
    BlogPost,
    CMSError,
    PostNotFound,
    get_all_posts,
    get_comments_by_blog,
    get_post_by_slug,
    post_route_param,
)
from inkwell.blueprints.metrics import record_cms_error
from inkwell.blueprints.votes import vote_summary
from inkwell.decorators import optional_auth
from richtext import render_post_content

logger = get_logger(__name__)

blog_bp = Blueprint('blog', __name__)


def _page_arg() -> int:
    try:
        return max(1, int(request.args.get('page', 1)))
    except ValueError:
        return 1


def _scores(posts: List[BlogPost]) -> Dict[int, int]:
    """Vote score per post id; posts whose votes fail to load score 0."""
    scores = {}
    for post in posts:
        try:
            scores[post.id], _ = vote_summary(post.id)
        except CMSError as e:
            logger.warning(f"Could not load votes for blog {post.id}: {e}")
            scores[post.id] = 0
    return scores


@blog_bp.route('/')
@optional_auth
def home() -> ResponseReturnValue:
    """Paginated post list with optional title search."""
    page = _page_arg()
    search = request.args.get('search', '').strip()

    try:
        posts, pagination = get_all_posts(page, search)
    except CMSError as e:
        record_cms_error(e.status)
        return render_template('home.html', posts=[], pagination=None, scores={},
                               search=search, error='Error fetching posts.'), 502

    return render_template(
        'home.html',
        posts=posts,
        pagination=pagination,
        scores=_scores(posts),
        search=search,
    )


@blog_bp.route('/blogs/<slug>')
@optional_auth
def view_post(slug: str) -> ResponseReturnValue:
    """
    Show a single post with its votes and comments.

    :param slug: Post slug, or documentId for posts without one
    """
    try:
        post = get_post_by_slug(slug)
    except PostNotFound:
        return render_template('post.html', post=None, error='Post not found.'), 404
    except CMSError as e:
        record_cms_error(e.status)
        return render_template('post.html', post=None,
                               error='Error fetching post. Please try again later.'), 502

    try:
        comments = get_comments_by_blog(post.id, g.token)
    except CMSError as e:
        logger.warning(f"Could not load comments for blog {post.id}: {e}")
        comments = []

    try:
        score, user_vote = vote_summary(post.id, g.user)
    except CMSError as e:
        logger.warning(f"Could not load votes for blog {post.id}: {e}")
        score, user_vote = 0, None

    return render_template(
        'post.html',
        post=post,
        content=render_post_content(post.content),
        comments=comments,
        score=score,
        user_vote=user_vote,
        post_path=f"/blogs/{post_route_param(post)}",
    )
