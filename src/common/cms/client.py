"""HTTP client for the CMS REST API."""

from typing import Any, Dict, Optional

import requests

from common.base.logging_config import get_logger
from common.cms.errors import CMSError
from common.config.site_config import SiteConfig, get_site_config

logger = get_logger(__name__)


def error_message(response: requests.Response, default: str) -> str:
    """Extract the CMS's ``error.message`` from a failed response, if it sent one."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str) and error:
            return error
    return default


class CMSClient:
    """Client for making requests to the CMS REST API."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        """
        :param base_url: CMS root URL, e.g. http://localhost:1337
        :param timeout: Per-request timeout in seconds
        :param session: Optional session, mainly for tests
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        """Absolute URL for an API path such as ``api/blogs?populate=*``."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform a request and return the decoded JSON body.

        :param method: HTTP method
        :param path: API path including any query string
        :param token: Optional user JWT sent as a bearer token
        :return: Decoded JSON, or None for an empty body
        :raises CMSError: On transport failure or a non-2xx status
        """
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = self.url(path)
        logger.debug(f"CMS {method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=json,
                data=data,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"CMS request {method} {path} failed: {e}")
            raise CMSError(f"Could not reach CMS: {e}") from e

        if not response.ok:
            message = error_message(response, response.reason or "CMS request failed")
            logger.warning(f"CMS {method} {path} returned {response.status_code}: {message}")
            raise CMSError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise CMSError(f"Invalid JSON from CMS: {e}", response.status_code) from e

    def get(self, path: str, token: Optional[str] = None) -> Any:
        return self.request("GET", path, token=token)

    def post(self, path: str, token: Optional[str] = None, **kwargs) -> Any:
        return self.request("POST", path, token=token, **kwargs)

    def put(self, path: str, token: Optional[str] = None, **kwargs) -> Any:
        return self.request("PUT", path, token=token, **kwargs)

    def delete(self, path: str, token: Optional[str] = None) -> Any:
        return self.request("DELETE", path, token=token)


# Global client instance
_cms_client = None

def init_cms_client(config: Optional[SiteConfig] = None, session: Optional[requests.Session] = None) -> CMSClient:
    """
    Initialize the global CMS client from site configuration.

    :param config: Site configuration, defaults to the global one
    :param session: Optional requests session
    :return: CMS client instance
    """
    global _cms_client
    config = config or get_site_config()
    logger.info(f"Initializing CMS client for {config.cms_url}")
    _cms_client = CMSClient(config.cms_url, timeout=config.request_timeout, session=session)
    return _cms_client

def get_cms_client() -> CMSClient:
    """
    Get the global CMS client, creating it from site configuration on first use.

    :return: CMS client instance
    """
    global _cms_client
    if _cms_client is None:
        _cms_client = init_cms_client()
    return _cms_client

def reset_cms_client() -> None:
    """Drop the global client (primarily for testing)."""
    global _cms_client
    _cms_client = None
