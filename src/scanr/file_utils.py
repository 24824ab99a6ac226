"""Resolution of user-supplied paths into work items"""

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from scanr.errors import DirectoryWithoutRecursiveError, FileOpenError, FilesystemTraversalError, ScanrError
from scanr.utils import STDIN_LABEL, STDIN_PATH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    """A single stream to scan, owned by exactly one worker once popped"""

    path: str
    label: str
    is_stdin: bool = False


def stdin_item() -> WorkItem:
    return WorkItem(path=STDIN_PATH, label=STDIN_LABEL, is_stdin=True)


def walk_directory(root: str, on_error: Callable[[ScanrError], None]) -> Iterator[WorkItem]:
    """
    Yield every regular file below root in a stable (sorted) order.

    Traversal errors are reported once through on_error and the unreadable
    subtree is skipped; the rest of the tree is still walked.
    """

    def _walk_error(e: OSError) -> None:
        on_error(FilesystemTraversalError(e.filename or root, e.strerror or str(e)))

    found = 0
    for dirpath, dirnames, filenames in os.walk(root, onerror=_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            filepath = os.path.join(dirpath, name)
            # broken symlinks, sockets, fifos
            if not os.path.isfile(filepath):
                logger.debug(f'[COLLECT] Skipping non-regular file: {filepath}')
                continue
            found += 1
            yield WorkItem(path=filepath, label=filepath)

    logger.info(f'[COLLECT] Found {found} file(s) under {root}')


def collect_work_items(
    paths: list[str], recursive: bool, on_error: Callable[[ScanrError], None]
) -> list[WorkItem]:
    """
    Resolve paths into the full list of work items before scanning starts.

    Args:
        paths: Files, directories, or '-' for standard input; empty means stdin
        recursive: Expand directories instead of rejecting them
        on_error: Receives every non-fatal problem met along the way

    Returns:
        Work items in the order the paths were given
    """
    if not paths:
        return [stdin_item()]

    items: list[WorkItem] = []
    for path in paths:
        if path == STDIN_PATH:
            items.append(stdin_item())
        elif os.path.isdir(path):
            if not recursive:
                on_error(DirectoryWithoutRecursiveError(path))
                continue
            items.extend(walk_directory(path, on_error))
        elif os.path.isfile(path):
            items.append(WorkItem(path=path, label=path))
        elif not os.path.exists(path):
            on_error(FileOpenError(path, 'No such file or directory'))
        else:
            on_error(FileOpenError(path, 'Not a regular file'))

    logger.info(f'[COLLECT] Queued {len(items)} item(s) from {len(paths)} path(s)')
    return items
