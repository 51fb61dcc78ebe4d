"""
Main entry point for the OBS-Cutter application.

This script parses command-line arguments, configures the logger and runs a
single split of an ultra-wide recording into its left and right halves. The
process exits with the code returned by `obs_cutter.cli.run`.
"""

import sys

from loguru import logger

from obs_cutter.cli import get_args, run
from obs_cutter.config.common import EXIT_CANCELLED, LOGGER_FORMAT


# Configure the logger for initial setup.
# The level is overridden once the command-line arguments are known.
logger.remove()
logger.add(sys.stderr, level="INFO", format=LOGGER_FORMAT)


def main():
    """
    Main function to start the split.

    1. Parses command-line arguments.
    2. Re-configures the global logger with the requested level.
    3. Runs the split and exits with its exit code.
    """
    args = get_args()

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    try:
        exit_code = run(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        exit_code = EXIT_CANCELLED

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
