"""Blueprint for up/down votes on posts, as JSON endpoints and form posts."""

from typing import Optional, Tuple

from flask import Blueprint, request, jsonify, g, flash, redirect
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from common.cms import CMSError, User, apply_vote, get_votes_by_blog, vote_score
from inkwell.blueprints.auth import safe_redirect_target
from inkwell.blueprints.metrics import record_cms_error
from inkwell.decorators import optional_auth, require_auth

logger = get_logger(__name__)

votes_bp = Blueprint('votes', __name__)


def vote_summary(blog_id: int, user: Optional[User] = None) -> Tuple[int, Optional[int]]:
    """
    Score of a post and the given user's vote on it.

    :param blog_id: Numeric post id
    :param user: Current user, if logged in
    :return: Tuple of (score, user's vote value or None)
    :raises CMSError: If the votes cannot be fetched
    """
    votes = get_votes_by_blog(blog_id)
    user_vote = None
    if user is not None:
        user_vote = next((v.value for v in votes if v.user_id == user.id), None)
    return vote_score(votes), user_vote


def _parse_value(raw) -> Optional[int]:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value in (1, -1) else None


@votes_bp.route('/api/blogs/<int:blog_id>/votes')
@optional_auth
def get_votes(blog_id: int) -> ResponseReturnValue:
    """
    Current score and the caller's vote.

    :return: JSON ``{score, userVote}``
    """
    try:
        score, user_vote = vote_summary(blog_id, g.user)
    except CMSError as e:
        record_cms_error(e.status)
        logger.error(f"Error fetching votes for blog {blog_id}: {e}")
        return jsonify({'error': 'Failed to fetch votes'}), 502
    return jsonify({'score': score, 'userVote': user_vote})


@votes_bp.route('/api/blogs/<int:blog_id>/vote', methods=['POST'])
@require_auth
def post_vote(blog_id: int) -> ResponseReturnValue:
    """
    Cast, flip or withdraw a vote. Expects JSON ``{value: 1 | -1}``.

    :return: JSON ``{score, userVote, action}``
    """
    data = request.get_json(silent=True) or {}
    value = _parse_value(data.get('value'))
    if value is None:
        return jsonify({'error': 'Vote value must be 1 or -1'}), 400

    try:
        score_before = vote_score(get_votes_by_blog(blog_id))
        change, _ = apply_vote(blog_id, g.user, value, g.token)
    except CMSError as e:
        record_cms_error(e.status)
        logger.error(f"Error voting on blog {blog_id}: {e}")
        return jsonify({'error': 'Failed to vote'}), 502

    return jsonify({
        'score': score_before + change.score_delta,
        'userVote': change.new_value,
        'action': change.action,
    })


@votes_bp.route('/blogs/<int:blog_id>/vote', methods=['POST'])
@optional_auth
def vote_form(blog_id: int) -> ResponseReturnValue:
    """Vote from the post page's buttons and return to the post."""
    back = safe_redirect_target(request.form.get('next'))

    if not g.user:
        flash('Login to vote', 'error')
        return redirect(back)

    value = _parse_value(request.form.get('value'))
    if value is None:
        flash('Failed to vote', 'error')
        return redirect(back)

    try:
        apply_vote(blog_id, g.user, value, g.token)
    except CMSError as e:
        record_cms_error(e.status)
        logger.error(f"Error voting on blog {blog_id}: {e}")
        flash('Failed to vote', 'error')

    return redirect(back)
