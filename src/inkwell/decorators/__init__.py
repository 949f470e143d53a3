"""Web decorators for authentication."""

from .auth import require_auth, optional_auth, require_editor, is_editor, get_request_token

__all__ = ['require_auth', 'optional_auth', 'require_editor', 'is_editor', 'get_request_token']
