"""CLI entry point.

Without arguments the interactive REPL starts. Anything else on the command
line is run as a single command, e.g. ``tagvault backup nightly.zip``.
"""

import os
import shlex
import sys

from common.logging_config import setup_logging
from cli.commands import dispatch_command
from cli.parser import ParseError, parse_command
from cli.repl import repl_loop


def run_once(argv: list[str]) -> int:
    """Run one command and return the process exit code."""
    try:
        cmd_obj = parse_command(shlex.join(argv))
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    result = dispatch_command(cmd_obj)
    print(result)
    return 1 if result.startswith("Error") else 0


def main() -> None:
    """Entry point for CLI."""
    args = sys.argv[1:]
    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if args:
        sys.exit(run_once(args))

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
