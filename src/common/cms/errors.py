"""Exceptions raised by the CMS client."""

from typing import Optional


class CMSError(Exception):
    """A CMS request failed, either at the transport level or with a non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status {self.status})"


class PostNotFound(CMSError):
    """No post matches the requested slug or documentId."""

    def __init__(self, message: str = "Post not found."):
        super().__init__(message, 404)


class AuthError(CMSError):
    """The CMS rejected a login or registration."""
