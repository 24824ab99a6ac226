"""Shared helpers: environment configuration, logging setup, line handling"""

import logging
import os
import sys

NEWLINE_SYMBOL = '\n'
STDIN_PATH = '-'
STDIN_LABEL = '(standard input)'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_int_env(name: str, default: int = 0) -> int:
    """Read an integer from the environment, falling back to default on absence or garbage."""
    value = os.environ.get(name, '').strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def default_thread_count() -> int:
    """Default worker count: SCANR_MAX_THREADS, or the number of CPUs."""
    threads = get_int_env('SCANR_MAX_THREADS')
    if threads <= 0:
        threads = os.cpu_count() or 1
    return threads


def max_block_lines() -> int:
    """Pending output block size after which a context block is flushed early."""
    limit = get_int_env('SCANR_MAX_BLOCK_LINES')
    if limit <= 0:
        limit = 1000
    return limit


def configure_logging(debug: bool = False) -> None:
    """Configure root logging on stderr.

    Level comes from SCANR_LOG_LEVEL (default WARNING) unless debug forces DEBUG.
    """
    if debug:
        level = logging.DEBUG
    else:
        level_name = os.getenv('SCANR_LOG_LEVEL', 'WARNING').upper()
        level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def strip_line_ending(line: str) -> str:
    """Drop exactly one trailing line terminator (\\n, \\r\\n or \\r)."""
    if line.endswith(NEWLINE_SYMBOL):
        line = line[:-1]
    if line.endswith('\r'):
        line = line[:-1]
    return line
