"""Error handling blueprint and utilities for Inkwell."""

from flask import Blueprint, render_template, request, jsonify, current_app
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from common.cms import CMSError
from inkwell.blueprints.metrics import record_cms_error
from inkwell.decorators.auth import _populate_user

logger = get_logger(__name__)

errors_bp = Blueprint('errors', __name__)


def wants_html() -> bool:
    return request.headers.get('Accept', '').startswith('text/html')


def handle_error(error_code: str, error_title: str, error_message: str, details: str | None = None) -> ResponseReturnValue:
    """
    Unified error handler that returns HTML or JSON based on Accept header.

    :param error_code: HTTP status code as string
    :param error_title: Title for the error page
    :param error_message: User-friendly error description
    :param details: Optional technical details (shown only in debug mode)
    :return: HTML template or JSON response with appropriate status code
    """
    status_code = int(error_code)

    if wants_html():
        # The navbar needs the user; 404s never ran a route decorator
        _populate_user()

        return render_template(
            'error.html',
            error_code=error_code,
            error_title=error_title,
            error_message=error_message,
            technical_details=details if current_app.debug else None,
        ), status_code

    response = {
        'error': error_title.lower().replace(' ', '_'),
        'message': error_message
    }
    if current_app.debug and details:
        response['details'] = details

    return jsonify(response), status_code

@errors_bp.app_errorhandler(400)
def bad_request(e: Exception) -> ResponseReturnValue:
    """Handle 400 Bad Request errors."""
    logger.warning(f"Bad request: {str(e)}")
    return handle_error(
        "400",
        "Bad Request",
        "The request could not be understood by the server due to malformed syntax.",
        str(e)
    )

@errors_bp.app_errorhandler(401)
def unauthorized(e: Exception) -> ResponseReturnValue:
    """Handle 401 Unauthorized errors."""
    logger.info(f"Unauthorized access attempt: {str(e)}")
    return handle_error(
        "401",
        "Unauthorized",
        "Authentication is required to access this resource.",
        str(e)
    )

@errors_bp.app_errorhandler(403)
def forbidden(e: Exception) -> ResponseReturnValue:
    """Handle 403 Forbidden errors."""
    logger.warning(f"Forbidden access attempt: {str(e)}")
    return handle_error(
        "403",
        "Access Denied",
        "You don't have permission to access this resource.",
        str(e)
    )

@errors_bp.app_errorhandler(404)
def page_not_found(e: Exception) -> ResponseReturnValue:
    """Handle 404 Not Found errors."""
    logger.info(f"Page not found: {request.path}")
    return handle_error(
        "404",
        "Page Not Found",
        "The page you are looking for could not be found. It might have been removed, renamed, or does not exist.",
        str(e)
    )

@errors_bp.app_errorhandler(405)
def method_not_allowed(e: Exception) -> ResponseReturnValue:
    """Handle 405 Method Not Allowed errors."""
    logger.warning(f"Method not allowed: {request.method} {request.path}")
    return handle_error(
        "405",
        "Method Not Allowed",
        f"The {request.method} method is not allowed for this endpoint.",
        str(e)
    )

@errors_bp.app_errorhandler(500)
def internal_server_error(e: Exception) -> ResponseReturnValue:
    """Handle 500 Internal Server errors."""
    logger.error(f"Internal server error: {str(e)}", exc_info=True)
    return handle_error(
        "500",
        "Internal Server Error",
        "An unexpected error occurred. Please try again later.",
        str(e)
    )

@errors_bp.app_errorhandler(CMSError)
def handle_cms_error(e: CMSError) -> ResponseReturnValue:
    """Handle CMS failures that escaped a view."""
    logger.error(f"CMS error: {str(e)}", exc_info=True)
    record_cms_error(e.status)
    return handle_error(
        "502",
        "Bad Gateway",
        "The content service is not responding. Please try again later.",
        str(e)
    )
