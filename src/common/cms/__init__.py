"""Client for the headless CMS that stores posts, comments, votes and users."""

from .errors import CMSError, PostNotFound, AuthError
from .types import BlogPost, Category, Comment, User, Vote, Pagination, AuthResponse, UserBlogPostData
from .normalize import display_name, post_route_param
from .client import CMSClient, init_cms_client, get_cms_client
from .posts import get_all_posts, get_post_by_slug, get_all_categories, upload_image, create_post
from .comments import get_comments_by_blog, post_comment
from .votes import (
    VoteChange,
    resolve_vote,
    vote_score,
    get_votes_by_blog,
    get_user_vote,
    cast_vote,
    update_vote,
    delete_vote,
    apply_vote,
)
from .auth import login, register, fetch_current_user, decode_token_claims, token_expired

__all__ = [
    'CMSError', 'PostNotFound', 'AuthError',
    'BlogPost', 'Category', 'Comment', 'User', 'Vote', 'Pagination', 'AuthResponse', 'UserBlogPostData',
    'display_name', 'post_route_param',
    'CMSClient', 'init_cms_client', 'get_cms_client',
    'get_all_posts', 'get_post_by_slug', 'get_all_categories', 'upload_image', 'create_post',
    'get_comments_by_blog', 'post_comment',
    'VoteChange', 'resolve_vote', 'vote_score', 'get_votes_by_blog', 'get_user_vote',
    'cast_vote', 'update_vote', 'delete_vote', 'apply_vote',
    'login', 'register', 'fetch_current_user', 'decode_token_claims', 'token_expired',
]
