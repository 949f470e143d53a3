"""Authentication blueprint: login, registration and logout against the CMS.

The CMS issues the JWT; this app only keeps it in an HttpOnly cookie and
forwards it on every CMS call made on the user's behalf.
"""

import re
from typing import Optional
from urllib.parse import urlsplit

from flask import Blueprint, request, render_template, redirect, url_for, jsonify, g, Response
from flask.typing import ResponseReturnValue

import constants
from common.base.logging_config import get_logger
from common.cms import AuthError, CMSError, AuthResponse, fetch_current_user, login, register
from common.config.site_config import get_site_config
from inkwell.blueprints.metrics import record_login, record_logout
from inkwell.decorators.auth import get_request_token

logger = get_logger(__name__)

auth_bp = Blueprint('auth', __name__)

_CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f\x7f]')


def set_auth_cookie(response: Response, token: str) -> Response:
    """
    Store the JWT in the session cookie.

    :param response: Outgoing response
    :param token: JWT from the CMS
    :return: The same response
    """
    config = get_site_config()
    response.set_cookie(
        config.cookie_name,
        token,
        max_age=config.cookie_max_age,
        path='/',
        httponly=True,
        samesite='Lax',
        secure=not constants.is_development_mode() and not constants.TESTING,
    )
    return response


def clear_auth_cookie(response: Response) -> Response:
    response.set_cookie(
        get_site_config().cookie_name,
        '',
        max_age=0,
        path='/',
        httponly=True,
        samesite='Lax',
    )
    return response


def safe_redirect_target(target: Optional[str]) -> str:
    """Only same-site paths are followed after login; anything else goes home."""
    if not target or not target.startswith('/') or target.startswith('//'):
        return '/'
    # Browsers read a backslash as a slash and drop tabs and newlines
    if '\\' in target or _CONTROL_CHARS_RE.search(target):
        return '/'
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return '/'
    return target


def _auth_payload(auth: AuthResponse) -> dict:
    return {'user': auth.user.to_dict(), 'token': auth.jwt}


@auth_bp.route('/login', methods=['GET'])
def login_page() -> ResponseReturnValue:
    """Render the login form."""
    return render_template('login.html', redirect_to=safe_redirect_target(request.args.get('redirect')))


@auth_bp.route('/login', methods=['POST'])
def login_submit() -> ResponseReturnValue:
    """Log in from the form and redirect to the requested page."""
    identifier = request.form.get('identifier', '').strip()
    password = request.form.get('password', '')
    redirect_to = safe_redirect_target(request.form.get('redirect'))

    if not identifier or not password:
        return render_template('login.html', error='Please enter your username or email and password.',
                               identifier=identifier, redirect_to=redirect_to), 400

    try:
        auth = login(identifier, password)
    except AuthError as e:
        record_login('password', success=False)
        logger.info(f"Login failed for '{identifier}': {e}")
        return render_template('login.html', error=e.message, identifier=identifier,
                               redirect_to=redirect_to), e.status or 502

    record_login('password', success=True)
    return set_auth_cookie(redirect(redirect_to), auth.jwt)


@auth_bp.route('/register', methods=['GET'])
def register_page() -> ResponseReturnValue:
    """Render the sign-up form."""
    return render_template('register.html', redirect_to=safe_redirect_target(request.args.get('redirect')))


@auth_bp.route('/register', methods=['POST'])
def register_submit() -> ResponseReturnValue:
    """Create an account from the form, log it in and redirect."""
    username = request.form.get('username', '').strip()
    email = request.form.get('email', '').strip()
    password = request.form.get('password', '')
    redirect_to = safe_redirect_target(request.form.get('redirect'))

    if not username or not email or not password:
        return render_template('register.html', error='All fields are required.',
                               username=username, email=email, redirect_to=redirect_to), 400

    try:
        auth = register(username, email, password)
    except AuthError as e:
        record_login('register', success=False)
        logger.info(f"Registration failed for '{username}': {e}")
        return render_template('register.html', error=e.message, username=username, email=email,
                               redirect_to=redirect_to), e.status or 502

    record_login('register', success=True)
    return set_auth_cookie(redirect(redirect_to), auth.jwt)


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout() -> ResponseReturnValue:
    """Clear the auth cookie and go home."""
    record_logout()
    return clear_auth_cookie(redirect(url_for('blog.home')))


@auth_bp.route('/api/auth/login', methods=['POST'])
def api_login() -> ResponseReturnValue:
    """
    Log in with JSON ``{identifier|email, password}``.

    :return: ``{user, token}`` and the auth cookie, or ``{error}`` with the CMS status
    """
    data = request.get_json(silent=True) or {}
    identifier = data.get('identifier') or data.get('email')
    password = data.get('password')
    if not identifier or not password:
        return jsonify({'error': 'Identifier and password are required'}), 400

    try:
        auth = login(identifier, password)
    except AuthError as e:
        record_login('password', success=False)
        return jsonify({'error': e.message}), e.status or 502
    except Exception as e:
        logger.error(f"Unexpected login failure: {str(e)}", exc_info=True)
        return jsonify({'error': 'Internal server error', 'details': str(e)}), 500

    record_login('password', success=True)
    return set_auth_cookie(jsonify(_auth_payload(auth)), auth.jwt)


@auth_bp.route('/api/auth/register', methods=['POST'])
def api_register() -> ResponseReturnValue:
    """
    Register with JSON ``{username, email, password}``.

    :return: ``{user, token}`` and the auth cookie, or ``{error}`` with the CMS status
    """
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    email = data.get('email')
    password = data.get('password')
    if not username or not email or not password:
        return jsonify({'error': 'Username, email and password are required'}), 400

    try:
        auth = register(username, email, password)
    except AuthError as e:
        record_login('register', success=False)
        return jsonify({'error': e.message}), e.status or 502
    except Exception as e:
        logger.error(f"Unexpected registration failure: {str(e)}", exc_info=True)
        return jsonify({'error': 'Internal server error', 'details': str(e)}), 500

    record_login('register', success=True)
    return set_auth_cookie(jsonify(_auth_payload(auth)), auth.jwt)


@auth_bp.route('/api/auth/logout', methods=['POST'])
def api_logout() -> ResponseReturnValue:
    record_logout()
    return clear_auth_cookie(jsonify({'message': 'Logged out'}))


@auth_bp.route('/api/auth/me')
def api_me() -> ResponseReturnValue:
    """
    Return the user behind the request's token.

    :return: ``{user, token}``; 401 without a token or when the CMS rejects it
    """
    token = get_request_token()
    if not token:
        return jsonify({'error': 'Not authenticated'}), 401

    try:
        user = fetch_current_user(token)
    except CMSError as e:
        logger.error(f"Could not verify token: {e}")
        return jsonify({'error': 'Could not reach the CMS'}), 502

    if user is None:
        return jsonify({'error': 'Invalid token'}), 401

    g.user, g.token = user, token
    return jsonify({'user': user.to_dict(), 'token': token})
