"""pomfinder - Find POM URLs of Maven dependencies and their dependencies.

Reads ``group:artifact:version`` lines from STDIN (or ``--input``) and prints
the URL of every POM found, one per line, on STDOUT. Diagnostics go to STDERR.

    Returns:
        int: Exit code
"""
from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional, TextIO

from args import parse_args
from cli_config import Settings, build_settings
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from errors import ConfigError, InputFormatError
from fetcher.pool import FetchPool
from finder.finder import Finder
from pom.dependency import Dependency

logger = logging.getLogger(__name__)


class InputReadError(Exception):
    """Raised when the coordinate stream can't be read."""


async def _read_line(stream: TextIO) -> str:
    """Read one line without blocking the event loop."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, stream.readline)
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(str(e)) from e


async def find_poms(
    stream: TextIO,
    settings: Settings,
    output: Optional[TextIO] = None,
    pool: Optional[FetchPool] = None,
) -> Finder:
    """Resolve every coordinate in ``stream`` and wait until all are done.

    Lookups start as soon as each line is read. Malformed lines are logged and
    skipped.

    Args:
        stream: Text stream of coordinates, one per line.
        settings: Effective configuration.
        output: Where found URLs are printed; defaults to STDOUT.
        pool: Fetch pool to use instead of building one from ``settings``.

    Returns:
        Finder: The finder, for its ``failed`` flag and collected URLs.
    """
    if pool is None:
        pool = FetchPool(
            settings.repositories,
            workers=settings.workers,
            timeout=settings.timeout,
            retries=settings.retries,
            retry_delay=settings.retry_delay,
        )
    async with pool:
        finder = Finder(settings.finder_options(), pool, output=output)
        try:
            while True:
                line = await _read_line(stream)
                if not line:
                    break
                if not line.strip():
                    continue
                try:
                    dep = Dependency.from_string(line)
                except InputFormatError as e:
                    logger.error("skipping input line: %s", e)
                    continue
                finder.resolve(dep)
        finally:
            # Let started lookups finish so the pool isn't torn down under them.
            await finder.wait()
    return finder


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    configure_logging(getattr(args, "LOG_LEVEL", None), getattr(args, "LOG_FILE", None))


def run(argv=None, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> int:
    """Run the CLI and return the exit code instead of exiting."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main"),
        )

    try:
        settings = build_settings(args)
    except ConfigError as e:
        logger.error("%s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    logger.debug("Using repositories: %s", ", ".join(settings.repositories))

    input_path = getattr(args, "INPUT", None)
    try:
        if input_path:
            with open(input_path, "r", encoding="utf-8") as fh:
                finder = asyncio.run(find_poms(fh, settings, output=stdout))
        else:
            finder = asyncio.run(find_poms(stdin or sys.stdin, settings, output=stdout))
    except OSError as e:
        logger.error("File error: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value
    except InputReadError as e:
        logger.error("STDIN err: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    if finder.failed:
        logger.warning("%d dependencies could not be resolved.", len(finder.failures))
        if settings.exit_code:
            return ExitCodes.RESOLUTION_FAILED.value

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="main",
                outcome="failed" if finder.failed else "success",
                count=len(finder.urls),
            ),
        )
    return ExitCodes.SUCCESS.value


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
