"""
Command line entry point for hostkit.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .orchestrator import TOOLS, ToolRunner
from .utils.logging import get_logger

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostkit",
        description="Local machine utilities: download sorter, git branch cleaner, "
        "network monitor and port resolver.",
    )
    parser.add_argument("tool", choices=TOOLS, help="Tool to run")
    parser.add_argument("--config", dest="config_path", help="Path to configuration file")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Override the configured log level",
    )
    return parser


async def async_main(tool: str, config_path: Optional[str], log_level: Optional[str]) -> int:
    """Async main application entry point."""
    logger = get_logger("main")
    logger.info(f"Starting hostkit {tool}", extra={"config_path": config_path})

    try:
        runner = ToolRunner(tool, config_path=config_path, log_level=log_level)
        return 0 if await runner.run() else 1
    except Exception as e:
        logger.error("Application failed", extra={"error": str(e)}, exc_info=True)
        return 1


def main(argv: Optional[List[str]] = None) -> None:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    try:
        exit_code = asyncio.run(async_main(args.tool, args.config_path, args.log_level))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        exit_code = 0

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
