"""Common configuration management for Inkwell."""

# Site configuration
from .site_config import (
    SiteConfig,
    SiteManager,
    init_site_manager,
    get_site_config
)

__all__ = [
    # Site config
    'SiteConfig', 'SiteManager', 'init_site_manager', 'get_site_config'
]
