"""
Lazy, read-only access to JSON documents parsed by a native engine.

Parsing hands back a Document whose root is a mapping or sequence view.
Fields and elements are converted to Python values only when read; nested
objects and arrays come back as further views over the same parsed tree.
The document owns the engine's memory and frees it on ``close()``.
"""

from ._config import ParseConfig
from ._document import Document
from ._document import load
from ._document import open  # noqa: A004
from ._document import open_with
from ._document import parse
from ._document import parse_with
from ._engines import Engine
from ._engines import available_engines
from ._engines import register_engine
from ._errors import BackendUnavailableError
from ._errors import DocumentClosedError
from ._errors import IndexOutOfRange
from ._errors import IteratorInitError
from ._errors import KeyNotFound
from ._errors import LazyJSONError
from ._errors import ParseError
from ._errors import StringExtractionError
from ._profile import HotPathStats
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
from ._profile import log_hot_path_stats
from ._views import LazyArray
from ._views import LazyObject
from ._views import Value
from ._views import ValueKind

__version__ = "0.1.0"

__all__ = [
    "BackendUnavailableError",
    "Document",
    "DocumentClosedError",
    "Engine",
    "HotPathStats",
    "IndexOutOfRange",
    "IteratorInitError",
    "KeyNotFound",
    "LazyArray",
    "LazyJSONError",
    "LazyObject",
    "ParseConfig",
    "ParseError",
    "StringExtractionError",
    "Value",
    "ValueKind",
    "available_engines",
    "clear_hot_path_stats",
    "get_hot_path_stats",
    "load",
    "log_hot_path_stats",
    "open",
    "open_with",
    "parse",
    "parse_with",
    "register_engine",
]
