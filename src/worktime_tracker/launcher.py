"""
Command-line launcher for the Work-Time Tracker server.

Reads host, port and reload defaults from the configuration and lets the
command line override them.
"""

import argparse
import sys
from typing import List, Optional

import uvicorn

from .config import config_manager
from .utils.logging_config import get_logger, initialize_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worktime-tracker",
        description="Run the Work-Time Tracker API server",
    )
    parser.add_argument("--host", help="Interface to bind (default from config)")
    parser.add_argument("--port", type=int, help="Port to listen on (default from config)")
    parser.add_argument(
        "--reload", action="store_true", default=None, help="Reload on code changes"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate the configuration and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the launcher."""
    args = build_parser().parse_args(argv)
    config = config_manager.load_config()

    issues = config_manager.validate_config()
    if args.check_config:
        for issue in issues:
            print(f"[WARNING] {issue}")
        print("[OK] Configuration is valid" if not issues else f"[ERROR] {len(issues)} issue(s) found")
        return 0 if not issues else 1

    initialize_logging(debug=args.debug or config.server.debug)
    logger = get_logger('main')
    for issue in issues:
        logger.warning(f"Configuration issue: {issue}")

    host = args.host or config.server.host
    port = args.port or config.server.port
    reload = config.server.auto_reload if args.reload is None else args.reload

    logger.info(f"Starting server on http://{host}:{port}")
    try:
        uvicorn.run(
            "worktime_tracker.main:app",
            host=host,
            port=port,
            reload=reload,
            log_level="debug" if args.debug else "info",
        )
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
