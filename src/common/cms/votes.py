"""Up/down votes on posts.

A user holds at most one vote per post. Voting the same direction again
withdraws the vote, voting the other direction flips it.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from common.base.logging_config import get_logger
from common.cms.client import get_cms_client
from common.cms.normalize import normalize_vote, response_items
from common.cms.types import User, Vote

logger = get_logger(__name__)

VALID_VOTES = (1, -1)
# Upper bound on votes fetched for scoring
VOTES_PAGE_SIZE = 100


@dataclass
class VoteChange:
    action: str  # "create", "update" or "remove"
    new_value: Optional[int]
    score_delta: int


def resolve_vote(current: Optional[Vote], value: int) -> VoteChange:
    """
    Decide what a click on the up/down button does given the user's existing vote.

    :param current: The user's vote on the post, if any
    :param value: 1 for up, -1 for down
    :return: The CMS action to take and the resulting change in score
    :raises ValueError: If value is not 1 or -1
    """
    if value not in VALID_VOTES:
        raise ValueError(f"Vote value must be 1 or -1, got {value!r}")

    if current is not None and current.value == value:
        return VoteChange("remove", None, -value)
    if current is not None:
        return VoteChange("update", value, value - current.value)
    return VoteChange("create", value, value)


def vote_score(votes: Iterable[Vote]) -> int:
    return sum(v.value for v in votes)


def get_votes_by_blog(blog_id: int) -> List[Vote]:
    path = f"api/votes?filters[blog][id][$eq]={blog_id}&populate=user&pagination[pageSize]={VOTES_PAGE_SIZE}"
    body = get_cms_client().get(path)
    return [normalize_vote(raw) for raw in response_items(body)]


def get_user_vote(blog_id: int, user_id: int, token: str) -> Optional[Vote]:
    path = f"api/votes?filters[blog][id][$eq]={blog_id}&filters[user][id][$eq]={user_id}"
    body = get_cms_client().get(path, token=token)
    items = response_items(body)
    return normalize_vote(items[0]) if items else None


def cast_vote(blog_id: int, value: int, token: str) -> Vote:
    body = get_cms_client().post(
        "api/votes", token=token, json={"data": {"blog": blog_id, "value": value}}
    ) or {}
    return normalize_vote(body.get("data") or {})


def update_vote(vote_id: int, value: int, token: str) -> Vote:
    body = get_cms_client().put(
        f"api/votes/{vote_id}", token=token, json={"data": {"value": value}}
    ) or {}
    return normalize_vote(body.get("data") or {"id": vote_id, "value": value})


def delete_vote(vote_id: int, token: str) -> None:
    get_cms_client().delete(f"api/votes/{vote_id}", token=token)


def apply_vote(blog_id: int, user: User, value: int, token: str) -> Tuple[VoteChange, Optional[Vote]]:
    """
    Look up the user's current vote and perform the resolved create/update/delete.

    :return: Tuple of (change, the user's vote afterwards or None)
    """
    current = get_user_vote(blog_id, user.id, token)
    change = resolve_vote(current, value)

    if change.action == "remove":
        delete_vote(current.id, token)
        vote = None
    elif change.action == "update":
        vote = update_vote(current.id, value, token)
        vote.value = value
    else:
        vote = cast_vote(blog_id, value, token)
        vote.value = value

    logger.info(f"User {user.id} vote on blog {blog_id}: {change.action} ({change.score_delta:+d})")
    return change, vote
