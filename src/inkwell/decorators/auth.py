"""Auth tools. The require_auth and require_editor web decorators."""

from functools import wraps
from typing import Any, Optional

from flask import render_template, g, request, jsonify, redirect, url_for

from common.base.logging_config import get_logger
from common.cms import CMSError, fetch_current_user
from common.cms.types import User
from common.config.site_config import get_site_config

logger = get_logger(__name__)

# Role type as spelled by some CMS installs
MISSPELLED_EDITOR_TYPE = 'wditor'


def get_request_token() -> Optional[str]:
    """JWT from the auth cookie, or from an Authorization header for API clients."""
    token = request.cookies.get(get_site_config().cookie_name)
    if token:
        return token

    auth_header = request.headers.get('Authorization', '')
    # Support both "Bearer <token>" and just "<token>" formats
    if auth_header.startswith('Bearer '):
        auth_header = auth_header[7:]
    return auth_header.strip() or None


def _populate_user():
    """Helper to populate g.user and g.token from the request's JWT, if any."""
    if hasattr(g, 'user'):  # already populated
        return

    g.token = get_request_token()
    g.user = None
    if not g.token:
        return

    try:
        g.user = fetch_current_user(g.token)
    except CMSError as e:
        logger.error(f"Could not verify auth token, treating request as anonymous: {e}")
        return

    if g.user is None:
        logger.info(f"Auth token rejected: {g.token[:8]}... (truncated)")


def is_editor(user: Any) -> bool:
    """
    Whether a user may write posts.

    :param user: User dataclass or plain dict from the CMS
    :return: True for editor and admin roles, matched on role name or type
    """
    if not user:
        return False
    role = user.get('role') if isinstance(user, dict) else getattr(user, 'role', None)
    if not isinstance(role, dict):
        return False

    name = str(role.get('name') or '').lower()
    role_type = str(role.get('type') or '').lower()
    editor_roles = get_site_config().editor_roles
    return name in editor_roles or role_type in editor_roles or role_type == MISSPELLED_EDITOR_TYPE


def _is_api_request() -> bool:
    return bool(
        request.headers.get('Authorization') or
        request.path.startswith('/api/') or
        request.headers.get('Content-Type', '').startswith('application/json')
    )


def _login_redirect():
    return redirect(url_for('auth.login_page', redirect=request.full_path.rstrip('?')))


def optional_auth(f):
    """Decorator that optionally populates g.user if a user is logged in, allowing access to both authenticated and unauthenticated users."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _populate_user()
        return f(*args, **kwargs)
    return decorated_function


def require_auth(f):
    """
    Decorator to require authentication before accessing a route.

    For API requests (with Authorization header, an /api/ path or JSON
    content type), returns a JSON 401. Otherwise redirects to the login page
    with the current path as the post-login target.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _populate_user()

        if not g.user:
            if _is_api_request():
                return jsonify({
                    'error': 'Authentication required',
                    'code': 'UNAUTHORIZED'
                }), 401
            return _login_redirect()

        return f(*args, **kwargs)

    decorated_function.__auth_required__ = True
    return decorated_function


def require_editor(f):
    """
    Decorator that requires an editor or admin role.

    Anonymous users are handled as in require_auth; logged in users without
    the role get a 403 page.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _populate_user()

        if not g.user:
            if _is_api_request():
                return jsonify({
                    'error': 'Authentication required',
                    'code': 'UNAUTHORIZED'
                }), 401
            return _login_redirect()

        if not is_editor(g.user):
            user: User = g.user
            logger.warning(f"User {user.username} denied editor access to {request.path}")
            if _is_api_request():
                return jsonify({'error': 'Access Denied', 'code': 'FORBIDDEN'}), 403
            return render_template('error.html',
                                   error_code='403',
                                   error_title='Access Denied',
                                   error_message='You need editor permissions to write posts.'), 403

        return f(*args, **kwargs)

    decorated_function.__auth_required__ = True
    decorated_function.__editor_required__ = True
    return decorated_function
