"""Exception taxonomy for lazy document access."""

type Position = int


class LazyJSONError(Exception):
    """Base class for every error raised by lazyjson."""


class ParseError(LazyJSONError, ValueError):
    """
    Reports that the engine could not produce a usable document.

    Carries the same position information as ``json.JSONDecodeError`` so
    callers can point at the offending line and column. Engines that do not
    report where parsing failed pass ``pos=None``; ``pos``, ``lineno`` and
    ``colno`` are then None and the message names no location.
    """

    def __init__(
        self, msg: str, doc: str = "", pos: Position | None = 0
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if pos is not None and (not isinstance(pos, int) or pos < 0):
            raise ValueError("pos must be a non-negative integer or None")

        self.msg = msg
        self.doc = doc
        self.pos = pos
        self.lineno: int | None = None
        self.colno: int | None = None

        if pos is None:
            super().__init__(msg)
            return

        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")


class StringExtractionError(LazyJSONError):
    """Raised when a string node yields no data."""


class KeyNotFound(LazyJSONError, KeyError):
    """Raised by keyed lookup on an object view when the key is absent."""


class IndexOutOfRange(LazyJSONError, IndexError):
    """Raised by ordinal lookup on an array view outside its bounds."""


class IteratorInitError(LazyJSONError):
    """Raised when the engine refuses to open a cursor over an object node."""


class DocumentClosedError(LazyJSONError, ValueError):
    """Raised when a document, or a view into it, is used after close()."""


class BackendUnavailableError(LazyJSONError):
    """Raised when an unknown or uninstalled engine is requested."""
