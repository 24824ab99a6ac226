"""Error taxonomy for scanr

Only InvalidPatternError and NoInputFilesError abort a run. Everything else is
reported on the diagnostic channel and the run carries on with the next path.
"""


class ScanrError(Exception):
    """Base class for all scanr errors."""


class InvalidPatternError(ScanrError):
    """A raw pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regular expression '{pattern}': {reason}")


class FileOpenError(ScanrError):
    """A file could not be opened or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'{path}: {reason}')


class DirectoryWithoutRecursiveError(ScanrError):
    """A directory was given without the recursive option."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'{path}: Is a directory (use -r to search recursively)')


class FilesystemTraversalError(ScanrError):
    """Walking a directory tree failed for part of the tree."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'{path}: {reason}')


class NoInputFilesError(ScanrError):
    """Nothing could be queued for scanning."""

    def __init__(self):
        super().__init__('no valid files to process')
