"""CLI entry point."""

import os
import shlex
import sys

from common.logging_config import setup_logging
from cli.constants import HELP_TEXT
from cli.repl import repl_loop, run_line


def main() -> None:
    """
    Entry point for CLI.

    With no arguments an interactive REPL starts; otherwise the arguments
    are run as a single command, e.g. `chatvault upload backup.tar`.
    """
    args = sys.argv[1:]
    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if not args:
        logger.info("CLI starting...")
        try:
            repl_loop()
        except Exception as e:
            logger.error(f"CLI error: {e}", exc_info=True)
            raise
        finally:
            logger.info("CLI exiting")
        return

    if args[0] in ('help', '--help', '-h'):
        print(HELP_TEXT)
        return

    result = run_line(shlex.join(args))
    print(result)
    if result.startswith("Error") or " failed: " in result:
        sys.exit(1)


if __name__ == "__main__":
    main()
