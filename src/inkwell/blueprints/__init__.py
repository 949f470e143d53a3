"""Blueprints for the Inkwell web application."""

from .auth import auth_bp
from .blog import blog_bp
from .comments import comments_bp
from .votes import votes_bp
from .write import write_bp
from .errors import errors_bp
from .metrics import metrics_bp

INKWELL_BLUEPRINTS = [auth_bp, blog_bp, comments_bp, votes_bp, write_bp, errors_bp, metrics_bp]

__all__ = [
    'auth_bp', 'blog_bp', 'comments_bp', 'votes_bp', 'write_bp', 'errors_bp', 'metrics_bp',
    'INKWELL_BLUEPRINTS',
]
