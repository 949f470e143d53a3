#!/usr/bin/env python3

"""Inkwell Launch Script."""

import os
import sys
import argparse
import datetime
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

import constants
from common.base.logging_config import configure_logging, get_logger
from common.config.site_config import init_site_manager

def get_log_filename():
    """
    Generate a log filename including PID and datetime.

    :return: Formatted log filename string
    """
    pid = os.getpid()
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"inkwell_{timestamp}_pid{pid}.log"

def init_system(log_level="INFO", app_log_level="DEBUG"):
    """Initialize system components."""
    constants.init_production()

    log_filename = get_log_filename()

    configure_logging(
        log_level=log_level,
        app_log_level=app_log_level,
        log_filename=log_filename
    )

    logger = get_logger(__name__)
    logger.info(f"Starting with PID {os.getpid()}, log file: {log_filename}")

    # Fail fast on a broken site.toml
    init_site_manager()

def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Launch the Inkwell blog frontend.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        prog='launch.py'
    )

    # Server configuration
    parser.add_argument('--host', default='0.0.0.0',
                       help='Host for server (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=5000,
                       help='Port for server (default: 5000)')

    # Development options
    parser.add_argument('--dev', action='store_true',
                       help='Enable development mode (CORS, Flask dev server)')
    parser.add_argument('--debug', action='store_true',
                       help='Enable debug mode')

    # Logging configuration
    parser.add_argument('--log-level', default='INFO',
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                       help='Set the logging level (default: INFO)')
    parser.add_argument('--app-log-level', default='DEBUG',
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                       help='Set the application-specific logging level (default: DEBUG)')
    parser.add_argument('--quiet', '-q', action='store_true',
                       help='Suppress non-essential output')

    parser.epilog = """
Examples:
  %(prog)s                          # Serve on port 5000 with waitress
  %(prog)s --port 8080              # Serve on port 8080
  %(prog)s --dev                    # Development server with CORS enabled

Environment:
  CMS_URL, PAGE_LIMIT, CMS_TIMEOUT override config/site.toml.

Note: Log files are created with timestamp and PID in the filename format:
      inkwell_YYYYMMDD_HHMMSS_pidNNNN.log
    """ % {'prog': parser.prog}

    return parser.parse_args(argv)

def main():
    """Main entry point."""
    try:
        args = parse_args()

        if args.dev:
            os.environ['FLASK_ENV'] = 'development'

        log_level = 'DEBUG' if args.debug else args.log_level
        if args.quiet:
            log_level = 'WARNING'

        init_system(log_level=log_level, app_log_level=args.app_log_level)

        logger = get_logger(__name__)
        logger.info("Inkwell system initialized")

        from inkwell.server import run_server
        if not args.quiet:
            print(f"Starting Inkwell on http://{args.host}:{args.port}")
        run_server(host=args.host, port=args.port, debug=args.debug or args.dev)

        return 0

    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if '--debug' in sys.argv:
            import traceback
            traceback.print_exc()
        return 1

if __name__ == '__main__':
    sys.exit(main())
