import os
from typing import Optional

# System state
TESTING: bool = False
INITIALIZED: bool = False

def is_development_mode() -> bool:
    """
    Check if the application is running in development mode.

    :return: True if FLASK_ENV is set to 'development', False otherwise
    """
    flask_env = os.getenv('FLASK_ENV', 'production').lower()
    return flask_env == 'development'

# Get the src directory
SRC_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(SRC_DIR)

# Define common paths relative to project root
WEB_DIR = os.path.join(SRC_DIR, "inkwell")
STATIC_DIR = os.path.join(WEB_DIR, "static")

KEY_DIR = os.path.join(PROJECT_ROOT, "keys")
CONFIG_DIR = os.path.join(PROJECT_ROOT, "config")

LOG_DIR = os.path.join(PROJECT_ROOT, "logs")
REQUEST_LOG_DIR = os.path.join(LOG_DIR, "requests")

def init_testing(log_dir: Optional[str] = None) -> None:
    """
    Initialize system for testing mode.

    :param log_dir: Optional log directory override, e.g. a temp dir
    """
    global TESTING, INITIALIZED, LOG_DIR, REQUEST_LOG_DIR
    TESTING = True
    INITIALIZED = True
    if log_dir:
        LOG_DIR = log_dir
        REQUEST_LOG_DIR = os.path.join(LOG_DIR, "requests")

def init_production() -> None:
    """Initialize system for production mode."""
    global TESTING, INITIALIZED
    TESTING = False
    INITIALIZED = True

def reset() -> None:
    """Reset to uninitialized state (primarily for testing)."""
    global TESTING, INITIALIZED, LOG_DIR, REQUEST_LOG_DIR
    TESTING = False
    INITIALIZED = False
    LOG_DIR = os.path.join(PROJECT_ROOT, "logs")
    REQUEST_LOG_DIR = os.path.join(LOG_DIR, "requests")
