"""Blueprint for post comments, as JSON endpoints and form posts."""

from typing import Any, Dict

from flask import Blueprint, request, jsonify, g, flash, redirect
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from common.cms import CMSError, Comment, display_name, get_comments_by_blog, post_comment
from inkwell.blueprints.auth import safe_redirect_target
from inkwell.blueprints.metrics import record_cms_error
from inkwell.decorators import optional_auth, require_auth

logger = get_logger(__name__)

comments_bp = Blueprint('comments', __name__)

MODERATION_MESSAGE = 'Your comment is awaiting moderation'


def comment_to_json(comment: Comment) -> Dict[str, Any]:
    return {
        'id': comment.id,
        'content': comment.content,
        'createdAt': comment.created_at,
        'isApproved': comment.is_approved,
        'user': {
            'id': comment.user.id,
            'username': display_name(comment.user),
        },
    }


@comments_bp.route('/api/blogs/<int:blog_id>/comments', methods=['GET'])
@optional_auth
def list_comments(blog_id: int) -> ResponseReturnValue:
    """Approved comments on a post, newest first."""
    try:
        comments = get_comments_by_blog(blog_id, g.token)
    except CMSError as e:
        record_cms_error(e.status)
        logger.error(f"Error fetching comments for blog {blog_id}: {e}")
        return jsonify({'error': 'Failed to fetch comments'}), 502
    return jsonify({'comments': [comment_to_json(c) for c in comments]})


@comments_bp.route('/api/blogs/<int:blog_id>/comments', methods=['POST'])
@require_auth
def create_comment(blog_id: int) -> ResponseReturnValue:
    """
    Submit a comment. Expects JSON ``{content}``.

    :return: 201 with a moderation notice
    """
    data = request.get_json(silent=True) or {}
    try:
        post_comment(blog_id, data.get('content', ''), g.token)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except CMSError as e:
        record_cms_error(e.status)
        logger.error(f"Error posting comment on blog {blog_id}: {e}")
        return jsonify({'error': 'Failed to post comment'}), 502

    return jsonify({'message': MODERATION_MESSAGE}), 201


@comments_bp.route('/blogs/<int:blog_id>/comments', methods=['POST'])
@optional_auth
def comment_form(blog_id: int) -> ResponseReturnValue:
    """Comment from the post page's form and return to the post."""
    back = safe_redirect_target(request.form.get('next'))

    if not g.user:
        flash('Login to comment', 'error')
        return redirect(back)

    try:
        post_comment(blog_id, request.form.get('content', ''), g.token)
    except ValueError:
        flash('Comment cannot be empty', 'error')
        return redirect(back)
    except CMSError as e:
        record_cms_error(e.status)
        logger.error(f"Error posting comment on blog {blog_id}: {e}")
        flash('Failed to post comment', 'error')
        return redirect(back)

    flash(MODERATION_MESSAGE, 'success')
    return redirect(back)
