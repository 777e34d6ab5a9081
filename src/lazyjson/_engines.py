"""
Engine contract consumed by the lazy views, plus the built-in engines.

An engine owns tokenizing, parsing, memory, and node introspection. Document,
allocator, node, and cursor handles it hands out are opaque to every layer
above this module; only the engine that produced a handle may interpret it.
"""

import importlib.util
import logging
from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any

import orjson

from ._errors import BackendUnavailableError
from ._errors import ParseError

logger = logging.getLogger(__name__)

type Node = Any
type DocHandle = Any
type AllocatorHandle = Any
type Cursor = Any
type EngineFactory = Callable[[], "Engine"]

_UTF8_BOM = b"\xef\xbb\xbf"

# Resolution order for backend="auto"
PREFERRED_ENGINES = ("cysimdjson", "orjson")


class Engine(ABC):
    """
    Low-level API over a parsed document.

    Absence is always signalled with ``None``: a lookup miss, an empty array
    slot, a missing root, and a cursor that could not be opened. JSON null
    must therefore be represented by some other node value.
    """

    name: str = ""

    @abstractmethod
    def new_allocator(self) -> AllocatorHandle: ...

    @abstractmethod
    def free_allocator(self, alc: AllocatorHandle) -> None: ...

    @abstractmethod
    def read_document(
        self, data: bytes, alc: AllocatorHandle, **options: Any
    ) -> DocHandle:
        """Parses ``data`` into memory owned by ``alc``; raises ParseError."""

    def read_file(
        self, path: str | PathLike[str], alc: AllocatorHandle, **options: Any
    ) -> DocHandle:
        """Reads ``path`` and parses its bytes; raises OSError or ParseError."""
        return self.read_document(Path(path).read_bytes(), alc, **options)

    @abstractmethod
    def free_document(self, doc: DocHandle) -> None: ...

    @abstractmethod
    def get_root(self, doc: DocHandle) -> Node | None: ...

    # Type predicates

    @abstractmethod
    def is_str(self, node: Node) -> bool: ...

    @abstractmethod
    def is_raw(self, node: Node) -> bool: ...

    @abstractmethod
    def is_num(self, node: Node) -> bool: ...

    @abstractmethod
    def is_real(self, node: Node) -> bool: ...

    @abstractmethod
    def is_bool(self, node: Node) -> bool: ...

    @abstractmethod
    def is_obj(self, node: Node) -> bool: ...

    @abstractmethod
    def is_arr(self, node: Node) -> bool: ...

    # Scalar extraction

    @abstractmethod
    def get_str(self, node: Node) -> str | None: ...

    @abstractmethod
    def get_real(self, node: Node) -> float: ...

    @abstractmethod
    def get_int(self, node: Node) -> int: ...

    @abstractmethod
    def get_bool(self, node: Node) -> bool: ...

    # Object nodes

    @abstractmethod
    def obj_get(self, node: Node, key: str) -> Node | None: ...

    @abstractmethod
    def obj_size(self, node: Node) -> int: ...

    @abstractmethod
    def obj_iter_init(self, node: Node) -> Cursor | None:
        """Returns a fresh cursor positioned before the first member."""

    @abstractmethod
    def obj_iter_has_next(self, cursor: Cursor) -> bool: ...

    @abstractmethod
    def obj_iter_next(self, cursor: Cursor) -> Node:
        """Advances the cursor and returns the next key node."""

    @abstractmethod
    def obj_iter_get_val(self, cursor: Cursor) -> Node:
        """Returns the value paired with the key last returned by next."""

    # Array nodes

    @abstractmethod
    def arr_get(self, node: Node, index: int) -> Node | None:
        """Returns the element at 0-based ``index``, or None."""

    @abstractmethod
    def arr_size(self, node: Node) -> int: ...


class NullNode:
    """Node for JSON null in tree engines, distinct from an absent node."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NULL_NODE"


NULL_NODE = NullNode()


def _as_node(value: Any) -> Node:
    return NULL_NODE if value is None else value


@dataclass
class TreeDocument:
    """A decoded tree; ``root`` is None once the document is freed."""

    root: Node | None


class Arena:
    """
    Allocator for tree engines.

    Every document decoded into the arena is reachable only through it, so
    releasing the arena drops the whole tree in one step.
    """

    def __init__(self, parser: Any = None) -> None:
        self.parser = parser
        self.documents: list[TreeDocument] = []
        self.freed = False

    def adopt(self, doc: TreeDocument) -> TreeDocument:
        if self.freed:
            raise ValueError("allocator has already been freed")
        self.documents.append(doc)
        return doc

    def release(self) -> None:
        for doc in self.documents:
            doc.root = None
        self.documents.clear()
        self.parser = None
        self.freed = True


class MemberCursor:
    """Position over an object's members; one per iteration pass."""

    __slots__ = ("members", "remaining", "value")

    def __init__(self, members: Iterator[tuple[str, Any]], size: int) -> None:
        self.members = members
        self.remaining = size
        self.value: Node = None


def _text_of(data: bytes) -> str:
    return data.decode("utf-8", "replace")


class TreeEngine(Engine):
    """
    Shared introspection for engines that decode into Python containers.

    Node handles are the decoded values themselves, except JSON null which
    becomes ``NULL_NODE``. Subclasses name their container types and decode.
    """

    object_types: tuple[type, ...] = (dict,)
    array_types: tuple[type, ...] = (list,)

    def new_allocator(self) -> Arena:
        return Arena()

    def free_allocator(self, alc: Arena) -> None:
        alc.release()

    def read_document(
        self, data: bytes, alc: Arena, *, allow_bom: bool = False
    ) -> TreeDocument:
        if data.startswith(_UTF8_BOM):
            if not allow_bom:
                raise ParseError(
                    "JSON input should not contain BOM (Byte Order Mark)",
                    _text_of(data),
                    0,
                )
            data = data[len(_UTF8_BOM) :]
        root = self._decode(data, alc)
        return alc.adopt(TreeDocument(_as_node(root)))

    @abstractmethod
    def _decode(self, data: bytes, alc: Arena) -> Any: ...

    def free_document(self, doc: TreeDocument) -> None:
        doc.root = None

    def get_root(self, doc: TreeDocument) -> Node | None:
        return doc.root

    def is_str(self, node: Node) -> bool:
        return isinstance(node, str)

    def is_raw(self, node: Node) -> bool:
        return False

    def is_num(self, node: Node) -> bool:
        return isinstance(node, int | float) and not isinstance(node, bool)

    def is_real(self, node: Node) -> bool:
        return isinstance(node, float)

    def is_bool(self, node: Node) -> bool:
        return isinstance(node, bool)

    def is_obj(self, node: Node) -> bool:
        return isinstance(node, self.object_types)

    def is_arr(self, node: Node) -> bool:
        return isinstance(node, self.array_types)

    def get_str(self, node: Node) -> str | None:
        return node if isinstance(node, str) else None

    def get_real(self, node: Node) -> float:
        return float(node)

    def get_int(self, node: Node) -> int:
        return int(node)

    def get_bool(self, node: Node) -> bool:
        return bool(node)

    def obj_get(self, node: Node, key: str) -> Node | None:
        try:
            value = node[key]
        except KeyError:
            return None
        return _as_node(value)

    def obj_size(self, node: Node) -> int:
        return len(node)

    def obj_iter_init(self, node: Node) -> MemberCursor | None:
        if not self.is_obj(node):
            return None
        return MemberCursor(iter(node.items()), len(node))

    def obj_iter_has_next(self, cursor: MemberCursor) -> bool:
        return cursor.remaining > 0

    def obj_iter_next(self, cursor: MemberCursor) -> Node:
        key, value = next(cursor.members)
        cursor.remaining -= 1
        cursor.value = _as_node(value)
        return key

    def obj_iter_get_val(self, cursor: MemberCursor) -> Node:
        return cursor.value

    def arr_get(self, node: Node, index: int) -> Node | None:
        if not 0 <= index < len(node):
            return None
        return _as_node(node[index])

    def arr_size(self, node: Node) -> int:
        return len(node)


class OrjsonEngine(TreeEngine):
    """Decodes with orjson into a tree owned by the arena."""

    name = "orjson"

    def _decode(self, data: bytes, alc: Arena) -> Any:
        try:
            return orjson.loads(data)
        except orjson.JSONDecodeError as e:
            doc = e.doc if isinstance(e.doc, str) else _text_of(data)
            raise ParseError(e.msg, doc, max(e.pos, 0)) from e


class CysimdjsonEngine(TreeEngine):
    """
    Parses with simdjson through cysimdjson.

    Containers stay native proxies until a view touches them. A parser owns
    the buffer behind every proxy it returned and invalidates them when it
    parses again, so each arena holds exactly one parser and one document.
    """

    name = "cysimdjson"

    def __init__(self) -> None:
        import cysimdjson

        self._cysimdjson = cysimdjson
        self.object_types = (cysimdjson.JSONObject,)
        self.array_types = (cysimdjson.JSONArray,)

    def new_allocator(self) -> Arena:
        return Arena(parser=self._cysimdjson.JSONParser())

    def _decode(self, data: bytes, alc: Arena) -> Any:
        if alc.parser is None or alc.documents:
            raise ValueError("cysimdjson arena already owns a document")
        try:
            return alc.parser.parse(data)
        except (ValueError, RuntimeError) as e:
            # simdjson reports an error code, not an offset
            raise ParseError(
                str(e) or "Invalid JSON", _text_of(data), None
            ) from e


_factories: dict[str, EngineFactory] = {}
_probes: dict[str, Callable[[], bool]] = {}
_instances: dict[str, Engine] = {}


def register_engine(
    name: str,
    factory: EngineFactory,
    available: Callable[[], bool] | None = None,
) -> None:
    """
    Makes an engine selectable by ``name``.

    ``available`` reports whether the engine can be constructed in this
    environment; engines without a probe are always considered available.
    Registering an existing name replaces it.
    """
    if not isinstance(name, str) or not name or name == "auto":
        raise ValueError(f"invalid engine name: {name!r}")
    _factories[name] = factory
    _probes[name] = available or (lambda: True)
    _instances.pop(name, None)


def available_engines() -> list[str]:
    """Names of registered engines that can be used here."""
    return [name for name, probe in _probes.items() if probe()]


def get_engine(name: str) -> Engine:
    """Returns the engine registered as ``name``, resolving ``"auto"``."""
    if name == "auto":
        usable = set(available_engines())
        for candidate in PREFERRED_ENGINES:
            if candidate in usable:
                name = candidate
                break
        else:
            raise BackendUnavailableError("no JSON engine is available")

    if name in _instances:
        return _instances[name]
    if name not in _factories:
        raise BackendUnavailableError(f"unknown JSON engine: {name!r}")
    if not _probes[name]():
        raise BackendUnavailableError(f"JSON engine {name!r} is not installed")

    try:
        engine = _factories[name]()
    except ImportError as e:
        raise BackendUnavailableError(
            f"JSON engine {name!r} failed to load: {e}"
        ) from e
    logger.debug("Loaded JSON engine %s", name)
    _instances[name] = engine
    return engine


register_engine("orjson", OrjsonEngine)
register_engine(
    "cysimdjson",
    CysimdjsonEngine,
    lambda: importlib.util.find_spec("cysimdjson") is not None,
)
