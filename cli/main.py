"""CLI entry point."""

import sys
import os

from common.logging_config import configure_components, get_logger
from cli.repl import repl_loop

LOGGED_PACKAGES = ('cli', 'transfer', 'gateway')


def main() -> None:
    """Entry point for CLI."""
    debug = '--debug' in sys.argv
    if debug:
        sys.argv.remove('--debug')
    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')

    configure_components(LOGGED_PACKAGES, log_level=log_level)
    logger = get_logger('cli')

    if debug:
        logger.info("Debug logging enabled")

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
