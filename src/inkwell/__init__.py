"""Inkwell - Flask web frontend for a headless CMS blog."""

from . import decorators
from . import blueprints
from .server import create_app, get_app, run_server

__all__ = ['decorators', 'blueprints', 'create_app', 'get_app', 'run_server']
