"""
Pytest configuration and shared fixtures for lazyjson tests.

Provides immutable test data fixtures, engine parametrization, and a stub
engine that can be told to fail in ways the real engines never do.
"""

import importlib.util
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import pytest

import lazyjson
from lazyjson._engines import Arena
from lazyjson._engines import MemberCursor
from lazyjson._engines import Node
from lazyjson._engines import OrjsonEngine
from lazyjson._engines import TreeDocument
from lazyjson._engines import _factories
from lazyjson._engines import _instances
from lazyjson._engines import _probes

SAMPLE_OBJECT = (
    '{"a": 1, "b": 2.5, "c": true, "d": null, "e": "x", "f": [1,2], "g": {}}'
)

_CYSIMDJSON_MISSING = importlib.util.find_spec("cysimdjson") is None

_REGISTRY_TABLES = (_factories, _probes, _instances)

requires_cysimdjson = pytest.mark.skipif(
    _CYSIMDJSON_MISSING, reason="cysimdjson is not installed"
)

ENGINE_PARAMS = [
    "orjson",
    pytest.param(
        "cysimdjson",
        marks=requires_cysimdjson,
    ),
]


@dataclass(frozen=True)
class CoercionCase:
    """
    Immutable container for one field of SAMPLE_OBJECT.

    Holds the key, the expected Python value, and its exact type so int and
    float results cannot be confused.
    """

    description: str
    key: str
    expected: Any
    expected_type: type


@dataclass(frozen=True)
class JsonTestCase:
    """
    Immutable container for JSON test case data.

    Holds test input and expected behavior for consistent test execution.
    """

    description: str
    input_data: str
    should_fail: bool = False
    skip_reason: str = ""


class StubEngine(OrjsonEngine):
    """
    Orjson engine with switchable failures and release accounting.

    Each flag makes one primitive report absence the way a native engine
    would for a malformed handle.
    """

    name = "stub"

    def __init__(self) -> None:
        self.fail_strings = False
        self.fail_cursor = False
        self.empty_slots = False
        self.allocators_created = 0
        self.allocators_freed = 0
        self.documents_freed = 0

    def new_allocator(self) -> Arena:
        self.allocators_created += 1
        return super().new_allocator()

    def free_allocator(self, alc: Arena) -> None:
        self.allocators_freed += 1
        super().free_allocator(alc)

    def free_document(self, doc: TreeDocument) -> None:
        self.documents_freed += 1
        super().free_document(doc)

    def get_str(self, node: Node) -> str | None:
        return None if self.fail_strings else super().get_str(node)

    def obj_iter_init(self, node: Node) -> MemberCursor | None:
        return None if self.fail_cursor else super().obj_iter_init(node)

    def arr_get(self, node: Node, index: int) -> Node | None:
        return None if self.empty_slots else super().arr_get(node, index)


@pytest.fixture(params=ENGINE_PARAMS)
def backend(request: pytest.FixtureRequest) -> str:
    """Name of each installed built-in engine."""
    return str(request.param)


@pytest.fixture
def stub_engine() -> StubEngine:
    """A fresh StubEngine registered as backend "stub"."""
    engine = StubEngine()
    lazyjson.register_engine("stub", lambda: engine)
    return engine


@pytest.fixture(autouse=True)
def isolated_registry() -> Iterator[None]:
    """Restores the engine registry after each test."""
    saved = [dict(table) for table in _REGISTRY_TABLES]
    yield
    for table, snapshot in zip(_REGISTRY_TABLES, saved, strict=True):
        table.clear()
        table.update(snapshot)


@pytest.fixture
def sample_doc(backend: str) -> Iterator[lazyjson.Document]:
    """SAMPLE_OBJECT parsed by each engine, closed after the test."""
    with lazyjson.parse(SAMPLE_OBJECT, backend=backend) as doc:
        yield doc


@pytest.fixture
def coercion_cases() -> list[CoercionCase]:
    """
    Provides the expected value of every field in SAMPLE_OBJECT.

    Containers are checked separately since they come back as views.
    """
    return [
        CoercionCase("integer", "a", 1, int),
        CoercionCase("real", "b", 2.5, float),
        CoercionCase("boolean", "c", True, bool),
        CoercionCase("null", "d", None, type(None)),
        CoercionCase("string", "e", "x", str),
    ]


@pytest.fixture
def json_fail_cases() -> list[JsonTestCase]:
    """
    Provides JSON strings that must fail to open as a document.

    Based on the json.org JSON_checker suite. A scalar payload is rejected
    here too, since a document root must be an object or array.
    """
    fail_docs = [
        # https://json.org/JSON_checker/test/fail1.json
        '"A JSON payload should be an object or array, not a string."',
        # https://json.org/JSON_checker/test/fail2.json
        '["Unclosed array"',
        # https://json.org/JSON_checker/test/fail3.json
        '{unquoted_key: "keys must be quoted"}',
        # https://json.org/JSON_checker/test/fail4.json
        '["extra comma",]',
        # https://json.org/JSON_checker/test/fail5.json
        '["double extra comma",,]',
        # https://json.org/JSON_checker/test/fail6.json
        '[   , "<-- missing value"]',
        # https://json.org/JSON_checker/test/fail7.json
        '["Comma after the close"],',
        # https://json.org/JSON_checker/test/fail8.json
        '["Extra close"]]',
        # https://json.org/JSON_checker/test/fail9.json
        '{"Extra comma": true,}',
        # https://json.org/JSON_checker/test/fail10.json
        '{"Extra value after close": true} "misplaced quoted value"',
        # https://json.org/JSON_checker/test/fail11.json
        '{"Illegal expression": 1 + 2}',
        # https://json.org/JSON_checker/test/fail12.json
        '{"Illegal invocation": alert()}',
        # https://json.org/JSON_checker/test/fail13.json
        '{"Numbers cannot have leading zeroes": 013}',
        # https://json.org/JSON_checker/test/fail14.json
        '{"Numbers cannot be hex": 0x14}',
        # https://json.org/JSON_checker/test/fail15.json
        '["Illegal backslash escape: \\x15"]',
        # https://json.org/JSON_checker/test/fail16.json
        "[\\naked]",
        # https://json.org/JSON_checker/test/fail17.json
        '["Illegal backslash escape: \\017"]',
        # https://json.org/JSON_checker/test/fail18.json - SKIPPED
        '[[[[[[[[[[[[[[[[[[[["Too deep"]]]]]]]]]]]]]]]]]]]]',
        # https://json.org/JSON_checker/test/fail19.json
        '{"Missing colon" null}',
        # https://json.org/JSON_checker/test/fail20.json
        '{"Double colon":: null}',
        # https://json.org/JSON_checker/test/fail21.json
        '{"Comma instead of colon", null}',
        # https://json.org/JSON_checker/test/fail22.json
        '["Colon instead of comma": false]',
        # https://json.org/JSON_checker/test/fail23.json
        '["Bad value", truth]',
        # https://json.org/JSON_checker/test/fail24.json
        "['single quote']",
        # https://json.org/JSON_checker/test/fail25.json
        '["\ttab\tcharacter\tin\tstring\t"]',
        # https://json.org/JSON_checker/test/fail26.json
        '["tab\\   character\\   in\\  string\\  "]',
        # https://json.org/JSON_checker/test/fail27.json
        '["line\nbreak"]',
        # https://json.org/JSON_checker/test/fail28.json
        '["line\\\nbreak"]',
        # https://json.org/JSON_checker/test/fail29.json
        "[0e]",
        # https://json.org/JSON_checker/test/fail30.json
        "[0e+]",
        # https://json.org/JSON_checker/test/fail31.json
        "[0e+-1]",
        # https://json.org/JSON_checker/test/fail32.json
        '{"Comma instead if closing brace": true,',
        # https://json.org/JSON_checker/test/fail33.json
        '["mismatch"}',
    ]

    skips = {
        18: "engines accept nesting far deeper than 20 levels",
    }

    return [
        JsonTestCase(
            description=f"fail{idx + 1}.json",
            input_data=doc,
            should_fail=True,
            skip_reason=skips.get(idx + 1, ""),
        )
        for idx, doc in enumerate(fail_docs)
    ]


@pytest.fixture
def json_pass_cases() -> list[JsonTestCase]:
    """
    Provides JSON strings that must open as documents.

    These cases cover a wide object, deep nesting, and nested objects.
    """
    return [
        JsonTestCase(
            description="pass1.json - complex nested structure",
            input_data="""[
    "JSON Test Pattern pass1",
    {"object with 1 member":["array with 1 element"]},
    {},
    [],
    -42,
    true,
    false,
    null,
    {
        "integer": 1234567890,
        "real": -9876.543210,
        "e": 0.123456789e-12,
        "E": 1.234567890E+34,
        "":  23456789012E66,
        "zero": 0,
        "one": 1,
        "space": " ",
        "quote": "\\"",
        "backslash": "\\\\",
        "controls": "\\b\\f\\n\\r\\t",
        "slash": "/ & \\/",
        "alpha": "abcdefghijklmnopqrstuvwyz",
        "ALPHA": "ABCDEFGHIJKLMNOPQRSTUVWYZ",
        "digit": "0123456789",
        "0123456789": "digit",
        "special": "`1~!@#$%^&*()_+-={':[,]}|;.</>?",
        "hex": "\\u0123\\u4567\\u89AB\\uCDEF\\uabcd\\uef4A",
        "true": true,
        "false": false,
        "null": null,
        "array":[  ],
        "object":{  },
        "address": "50 St. James Street",
        "url": "https://www.JSON.org/",
        "comment": "// /* <!-- --",
        "# -- --> */": " ",
        " s p a c e d " :[1,2 , 3

,

4 , 5        ,          6           ,7        ],"compact":[1,2,3,4,5,6,7],
        "jsontext": "{\\"object with 1 member\\":[\\"array with 1 element\\"]}"
    }
]""",
        ),
        JsonTestCase(
            description="pass2.json - deep nesting",
            input_data='[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]]',
        ),
        JsonTestCase(
            description="pass3.json - simple object",
            input_data='{"JSON Test Pattern pass3": {"The outermost value": "must be an object or array.", "In this test": "It is an object."}}',
        ),
    ]
