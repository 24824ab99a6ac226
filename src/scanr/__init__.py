"""scanr - multi-threaded pattern search with context output"""

from scanr.__version__ import __version__

__all__ = ['__version__']
