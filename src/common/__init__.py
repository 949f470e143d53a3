"""Common - Shared functionality across Inkwell components."""

# Import key subpackages for easy access
from . import base
from . import config
from . import cms
from . import formatting

__all__ = ["base", "config", "cms", "formatting"]
