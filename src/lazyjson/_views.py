"""
Lazy views over engine nodes, and the coercion that produces them.

Nothing here copies a container. A view keeps its node handle and the
document that owns it; values are classified and converted each time they
are read. Strings and scalars come back as independent Python objects that
outlive the document, while nested views alias the same tree and die with it.
"""

import operator
from collections.abc import ItemsView
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import Sequence
from collections.abc import ValuesView
from enum import Enum
from typing import TYPE_CHECKING
from typing import Any
from typing import assert_never
from typing import overload

from ._errors import IndexOutOfRange
from ._errors import IteratorInitError
from ._errors import KeyNotFound
from ._errors import StringExtractionError
from ._profile import ProfileContext

if TYPE_CHECKING:
    from ._document import Document
    from ._engines import Cursor
    from ._engines import Engine
    from ._engines import Node

type Value = str | int | float | bool | None | LazyObject | LazyArray

_MISSING: Any = object()


class ValueKind(Enum):
    """The variants a node can coerce to."""

    STRING = "string"
    INTEGER = "integer"
    REAL = "real"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


def classify(engine: "Engine", node: "Node") -> ValueKind:
    """
    Determines what a node coerces to without extracting anything.

    Precedence is fixed: strings (and raw passthrough nodes) first, then
    numbers, booleans, objects, arrays. Anything else, JSON null included,
    is NULL.
    """
    if engine.is_str(node) or engine.is_raw(node):
        return ValueKind.STRING
    elif engine.is_num(node):
        return ValueKind.REAL if engine.is_real(node) else ValueKind.INTEGER
    elif engine.is_bool(node):
        return ValueKind.BOOLEAN
    elif engine.is_obj(node):
        return ValueKind.OBJECT
    elif engine.is_arr(node):
        return ValueKind.ARRAY
    else:
        return ValueKind.NULL


def _extract_string(engine: "Engine", node: "Node") -> str:
    text = engine.get_str(node)
    if text is None:
        raise StringExtractionError("Error parsing string")
    return text


def coerce(doc: "Document", node: "Node") -> Value:
    """Produces the Python value, or a new view, for ``node``."""
    engine = doc._live_engine()
    with ProfileContext("coerce"):
        kind = classify(engine, node)
        if kind is ValueKind.STRING:
            return _extract_string(engine, node)
        elif kind is ValueKind.REAL:
            return engine.get_real(node)
        elif kind is ValueKind.INTEGER:
            return engine.get_int(node)
        elif kind is ValueKind.BOOLEAN:
            return engine.get_bool(node)
        elif kind is ValueKind.OBJECT:
            return LazyObject(doc, node)
        elif kind is ValueKind.ARRAY:
            return LazyArray(doc, node)
        elif kind is ValueKind.NULL:
            return None
        else:
            assert_never(kind)


class LazyObject(Mapping[str, Value]):
    """
    Read-only mapping over a JSON object node.

    Keys keep source order. Every iteration pass opens its own cursor, so
    nested or interleaved loops over the same view do not disturb each other.
    """

    __slots__ = ("_doc", "_node")

    def __init__(self, doc: "Document", node: "Node") -> None:
        self._doc = doc
        self._node = node

    def get(self, key: str, default: Any = None) -> Value | Any:
        """Returns the value for ``key``, or ``default`` without allocating."""
        engine = self._doc._live_engine()
        if not isinstance(key, str):
            return default
        node = engine.obj_get(self._node, key)
        if node is None:
            return default
        return coerce(self._doc, node)

    def __getitem__(self, key: str) -> Value:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyNotFound(key)
        return value

    def __contains__(self, key: object) -> bool:
        engine = self._doc._live_engine()
        if not isinstance(key, str):
            return False
        return engine.obj_get(self._node, key) is not None

    def __len__(self) -> int:
        return self._doc._live_engine().obj_size(self._node)

    def _open_cursor(self) -> "Cursor":
        cursor = self._doc._live_engine().obj_iter_init(self._node)
        if cursor is None:
            raise IteratorInitError("Failed to initialize object iterator")
        return cursor

    def __iter__(self) -> Iterator[str]:
        return self._keys_from(self._open_cursor())

    def _keys_from(self, cursor: "Cursor") -> Iterator[str]:
        while True:
            engine = self._doc._live_engine()
            if not engine.obj_iter_has_next(cursor):
                return
            yield _extract_string(engine, engine.obj_iter_next(cursor))

    def iter_items(self) -> Iterator[tuple[str, Value]]:
        """
        Walks ``(key, value)`` pairs in source order.

        The cursor is opened before this returns, so an unusable node fails
        here with IteratorInitError rather than on the first ``next()``.
        """
        with ProfileContext("iter_items"):
            cursor = self._open_cursor()
        return self._items_from(cursor)

    def _items_from(self, cursor: "Cursor") -> Iterator[tuple[str, Value]]:
        while True:
            engine = self._doc._live_engine()
            if not engine.obj_iter_has_next(cursor):
                return
            key = _extract_string(engine, engine.obj_iter_next(cursor))
            yield key, coerce(self._doc, engine.obj_iter_get_val(cursor))

    def items(self) -> "_LazyItemsView":
        return _LazyItemsView(self)

    def values(self) -> "_LazyValuesView":
        return _LazyValuesView(self)

    def __repr__(self) -> str:
        if not self._doc.is_open:
            return "<LazyObject of closed document>"
        return f"<LazyObject with {len(self)} entries>"


class _LazyItemsView(ItemsView[str, Value]):
    _mapping: LazyObject

    def __iter__(self) -> Iterator[tuple[str, Value]]:
        return self._mapping.iter_items()


class _LazyValuesView(ValuesView[Value]):
    _mapping: LazyObject

    def __iter__(self) -> Iterator[Value]:
        for _, value in self._mapping.iter_items():
            yield value


class LazyArray(Sequence[Value]):
    """
    Read-only sequence over a JSON array node.

    Indices follow Python lists: 0-based, negatives count from the end.
    The view carries no iteration state.
    """

    __slots__ = ("_doc", "_node")

    def __init__(self, doc: "Document", node: "Node") -> None:
        self._doc = doc
        self._node = node

    def __len__(self) -> int:
        return self._doc._live_engine().arr_size(self._node)

    def get(self, index: int, default: Any = None) -> Value | Any:
        """Returns the element at ``index``, or ``default`` if out of range."""
        engine = self._doc._live_engine()
        position = operator.index(index)
        size = engine.arr_size(self._node)
        if position < 0:
            position += size
        if not 0 <= position < size:
            return default
        node = engine.arr_get(self._node, position)
        if node is None:
            return default
        return coerce(self._doc, node)

    @overload
    def __getitem__(self, index: int) -> Value: ...

    @overload
    def __getitem__(self, index: slice) -> list[Value]: ...

    def __getitem__(self, index: int | slice) -> Value | list[Value]:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        value = self.get(index, _MISSING)
        if value is _MISSING:
            raise IndexOutOfRange(f"array index {index} out of range")
        return value

    def __iter__(self) -> Iterator[Value]:
        for position in range(len(self)):
            yield self[position]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LazyArray | list | tuple):
            return len(self) == len(other) and all(
                mine == theirs for mine, theirs in zip(self, other, strict=True)
            )
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if not self._doc.is_open:
            return "<LazyArray of closed document>"
        return f"<{len(self)}-element LazyArray>"
