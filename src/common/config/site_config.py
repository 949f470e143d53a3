"""Site configuration management for Inkwell."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import tomli

import constants
from common.base.logging_config import get_logger
logger = get_logger(__name__)

@dataclass
class SiteConfig:
    """Site configuration data structure."""
    title: str = "Inkwell"
    cms_url: str = "http://localhost:1337"
    page_size: int = 10
    request_timeout: float = 10.0
    # "blocks" converts the writer's Markdown into rich-text blocks before create
    content_format: str = "blocks"
    cookie_name: str = "auth-token"
    cookie_max_age: int = 60 * 60 * 24
    protected_routes: List[str] = field(default_factory=lambda: ["/write"])
    editor_roles: List[str] = field(default_factory=lambda: ["editor", "admin"])

    def media_url(self, path: Optional[str]) -> str:
        """
        Build an absolute URL for a CMS media path.

        :param path: Media path as returned by the CMS, e.g. /uploads/cover.png
        :return: Absolute URL, or empty string for a missing path
        """
        if not path:
            return ""
        if path.startswith(('http://', 'https://')):
            return path
        return f"{self.cms_url.rstrip('/')}{path}"

class SiteManager:
    """Loads site configuration from TOML and applies environment overrides."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize site manager with configuration file.

        :param config_path: Path to TOML configuration file
        """
        self.config_path = config_path
        self.config = SiteConfig()
        self._load_config()
        self._apply_environment()
        self._validate_config()

    def _load_config(self) -> None:
        """Load site configuration from TOML file, if present."""
        if not self.config_path or not Path(self.config_path).exists():
            logger.info(f"No site configuration at {self.config_path}, using defaults")
            return

        try:
            logger.info(f"Loading site configuration from {self.config_path}")
            with open(self.config_path, 'rb') as f:
                config = tomli.load(f)
        except Exception as e:
            logger.error(f"Error loading site configuration: {str(e)}")
            raise

        site = config.get('site', {})
        cms = config.get('cms', {})
        auth = config.get('auth', {})

        self.config.title = site.get('title', self.config.title)
        self.config.page_size = int(site.get('page_size', self.config.page_size))
        self.config.cms_url = cms.get('url', self.config.cms_url)
        self.config.request_timeout = float(cms.get('timeout', self.config.request_timeout))
        self.config.content_format = cms.get('content_format', self.config.content_format)
        self.config.cookie_name = auth.get('cookie_name', self.config.cookie_name)
        self.config.cookie_max_age = int(auth.get('cookie_max_age', self.config.cookie_max_age))
        self.config.protected_routes = auth.get('protected_routes', self.config.protected_routes)
        self.config.editor_roles = [r.lower() for r in auth.get('editor_roles', self.config.editor_roles)]

    def _apply_environment(self) -> None:
        """Environment variables take precedence over the file."""
        if cms_url := os.getenv('CMS_URL'):
            self.config.cms_url = cms_url
        if page_limit := os.getenv('PAGE_LIMIT'):
            self.config.page_size = int(page_limit)
        if timeout := os.getenv('CMS_TIMEOUT'):
            self.config.request_timeout = float(timeout)

    def _validate_config(self) -> None:
        """Validate site configuration for consistency."""
        if self.config.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.config.page_size}")
        if self.config.content_format not in ('blocks', 'markdown'):
            raise ValueError(f"Unknown content_format '{self.config.content_format}'")
        if not self.config.cms_url.startswith(('http://', 'https://')):
            raise ValueError(f"CMS url must be http(s), got '{self.config.cms_url}'")
        logger.info(f"Site configuration: cms={self.config.cms_url}, page_size={self.config.page_size}")

# Default configuration file path
DEFAULT_CONFIG_PATH = Path(constants.CONFIG_DIR) / "site.toml"

# Global site manager instance
_site_manager = None

def init_site_manager(config_path: Optional[str] = None) -> SiteManager:
    """
    Initialize global site manager instance.

    :param config_path: Path to site configuration file
    :return: Site manager instance
    """
    global _site_manager
    config_path = config_path or DEFAULT_CONFIG_PATH
    _site_manager = SiteManager(config_path)
    return _site_manager

def get_site_config() -> SiteConfig:
    """
    Get the global site configuration, loading defaults on first use.

    :return: Site configuration
    """
    global _site_manager
    if _site_manager is None:
        logger.info("Site manager not initialized, initializing with default config")
        _site_manager = SiteManager(DEFAULT_CONFIG_PATH)
    return _site_manager.config
