"""
Document lifecycle and the entry points that create documents.

A Document is the only owner of an engine's document and allocator handles.
Release is deterministic through ``close()``, the context-manager protocol,
or the ``*_with`` helpers; a ``weakref.finalize`` hook catches documents the
caller forgot, logging a warning as it frees them.
"""

import logging
import os
import weakref
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from os import PathLike
from typing import IO
from typing import Any

from ._config import ParseConfig
from ._engines import AllocatorHandle
from ._engines import DocHandle
from ._engines import Engine
from ._engines import get_engine
from ._errors import DocumentClosedError
from ._errors import ParseError
from ._profile import ProfileContext
from ._views import LazyArray
from ._views import LazyObject
from ._views import Value
from ._views import ValueKind
from ._views import classify
from ._views import coerce

logger = logging.getLogger(__name__)

type Source = str | bytes | bytearray | memoryview
type Root = LazyObject | LazyArray

_CONTAINER_KINDS = (ValueKind.OBJECT, ValueKind.ARRAY)


def _release(engine: Engine, doc: DocHandle, alc: AllocatorHandle) -> None:
    try:
        engine.free_document(doc)
    finally:
        engine.free_allocator(alc)


def _release_leaked(
    engine: Engine, doc: DocHandle, alc: AllocatorHandle
) -> None:
    logger.warning(
        "Releasing %s document that was never closed; "
        "use close() or a with-block",
        engine.name,
    )
    _release(engine, doc, alc)


class Document:
    """
    An open parsed document and the root view over it.

    Container operations delegate to ``root``. Views obtained from a
    document are valid only until it is closed; afterwards they raise
    DocumentClosedError.
    """

    def __init__(
        self, engine: Engine, doc_handle: DocHandle, alc_handle: AllocatorHandle
    ) -> None:
        self._engine = engine
        self._doc_handle = doc_handle
        self._alc_handle = alc_handle
        self._root: Root | None = None
        # The callback holds the handles, never self
        self._finalizer = weakref.finalize(
            self, _release_leaked, engine, doc_handle, alc_handle
        )

    def _bind_root(self, source: bytes) -> None:
        node = self._engine.get_root(self._doc_handle)
        if node is None:
            raise ParseError("Error parsing root", _preview(source), 0)
        if classify(self._engine, node) not in _CONTAINER_KINDS:
            raise ParseError(
                "JSON root must be an object or array", _preview(source), 0
            )
        root = coerce(self, node)
        assert isinstance(root, LazyObject | LazyArray)
        self._root = root

    def _live_engine(self) -> Engine:
        if not self._finalizer.alive:
            raise DocumentClosedError("I/O operation on closed document")
        return self._engine

    @property
    def root(self) -> Root:
        if self._root is None:
            raise DocumentClosedError("document has no root")
        return self._root

    @property
    def is_open(self) -> bool:
        # False after close() and after the exit-time finalizer has run
        return self._finalizer.alive

    @property
    def backend(self) -> str:
        return self._engine.name

    def close(self) -> None:
        """Frees the document, then its allocator. Repeated calls do nothing."""
        if self._finalizer.detach() is None:
            return
        try:
            _release(self._engine, self._doc_handle, self._alc_handle)
        finally:
            # Views never read their node once the document is closed
            if self._root is not None:
                self._root._node = None
        logger.debug("Closed %s document", self._engine.name)

    def __enter__(self) -> "Document":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self.root)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.root)

    def __getitem__(self, key: str | int) -> Value:
        return self.root[key]  # type: ignore[index]

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def get(self, key: str | int, default: Any = None) -> Value | Any:
        return self.root.get(key, default)  # type: ignore[arg-type]

    def keys(self) -> Iterable[str] | range:
        root = self.root
        if isinstance(root, LazyObject):
            return root.keys()
        return range(len(root))

    def values(self) -> Iterable[Value]:
        root = self.root
        if isinstance(root, LazyObject):
            return root.values()
        return root

    def items(self) -> Iterable[tuple[Any, Value]]:
        root = self.root
        if isinstance(root, LazyObject):
            return root.items()
        return enumerate(root)

    def __repr__(self) -> str:
        kind = type(self._root).__name__
        if not self.is_open:
            return f"<closed Document {kind}>"
        if isinstance(self._root, LazyObject):
            return f"<Document {kind} with {len(self._root)} entries>"
        return f"<Document {len(self.root)}-element {kind}>"


def _preview(source: bytes) -> str:
    return source.decode("utf-8", "replace")


def _as_bytes(source: Source) -> bytes:
    if isinstance(source, str):
        # surrogatepass lets the engine report lone surrogates as bad UTF-8
        return source.encode("utf-8", "surrogatepass")
    if isinstance(source, bytes):
        return source
    if isinstance(source, bytearray | memoryview):
        return bytes(source)
    raise TypeError(
        "the JSON source must be str or bytes-like, "
        f"not {type(source).__name__}"
    )


def _config(backend: str | None, options: dict[str, Any]) -> ParseConfig:
    if backend is None:
        return ParseConfig(options=options)
    return ParseConfig(backend=backend, options=options)


def _adopt(
    engine: Engine, doc_handle: DocHandle, alc: AllocatorHandle, source: bytes
) -> Document:
    doc = Document(engine, doc_handle, alc)
    try:
        doc._bind_root(source)
    except BaseException:
        doc.close()
        raise
    logger.debug("Opened %s document", engine.name)
    return doc


def parse(
    source: Source, *, backend: str | None = None, **options: Any
) -> Document:
    """
    Parses JSON text into an open Document.

    ``options`` are forwarded verbatim to the engine. Raises ParseError when
    the engine rejects the input or the root is not an object or array.
    """
    data = _as_bytes(source)
    config = _config(backend, options)
    engine = get_engine(config.backend)

    with ProfileContext("parse", len(data)):
        alc = engine.new_allocator()
        try:
            doc_handle = engine.read_document(data, alc, **config.options)
        except BaseException:
            engine.free_allocator(alc)
            raise
        return _adopt(engine, doc_handle, alc, data)


def open(
    path: str | PathLike[str], *, backend: str | None = None, **options: Any
) -> Document:
    """
    Reads and parses the JSON file at ``path``.

    I/O failures surface as OSError before any Document exists.
    """
    path = os.fspath(path)
    config = _config(backend, options)
    engine = get_engine(config.backend)

    with ProfileContext("open"):
        alc = engine.new_allocator()
        try:
            doc_handle = engine.read_file(path, alc, **config.options)
        except BaseException:
            engine.free_allocator(alc)
            raise
        return _adopt(engine, doc_handle, alc, b"")


def load(
    fp: IO[str] | IO[bytes], *, backend: str | None = None, **options: Any
) -> Document:
    """Parses JSON read from a file-like object."""
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return parse(fp.read(), backend=backend, **options)


def parse_with[T](
    fn: Callable[[Document], T],
    source: Source,
    *,
    backend: str | None = None,
    **options: Any,
) -> T:
    """Parses ``source``, returns ``fn(doc)``, then closes the document."""
    with parse(source, backend=backend, **options) as doc:
        return fn(doc)


def open_with[T](
    fn: Callable[[Document], T],
    path: str | PathLike[str],
    *,
    backend: str | None = None,
    **options: Any,
) -> T:
    """Opens ``path``, returns ``fn(doc)``, and always closes the document."""
    with open(path, backend=backend, **options) as doc:
        return fn(doc)
