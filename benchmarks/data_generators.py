"""
Test data generators for lazy access benchmarks.

Creates JSON documents where only a small part is read back:
- A small record (< 1KB)
- A wide object with thousands of members
- A long array of uniform records
- A deeply nested configuration tree
- A string-heavy payload with escape sequences
"""

import json
import random
import string
from typing import Any

_ESCAPES = ['\\"', "\\\\", "\\/", "\\b", "\\f", "\\n", "\\r", "\\t"]
_ESCAPE_PROBABILITY = 0.3

DATA_TYPES = [
    "small_record",
    "wide_object",
    "record_array",
    "nested_config",
    "string_heavy",
]


def generate_test_data(data_type: str, *, seed: int = 0) -> str:
    """Generates JSON test data of the given shape."""
    generators = {
        "small_record": _generate_small_record,
        "wide_object": _generate_wide_object,
        "record_array": _generate_record_array,
        "nested_config": _generate_nested_config,
        "string_heavy": _generate_string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    rng = random.Random(seed)
    return json.dumps(generators[data_type](rng))


def read_probe(data_type: str, root: Any) -> Any:
    """
    Reads the handful of values a caller would typically want.

    Works on both plain dicts and lists and lazy views, so every library
    in a comparison does the same amount of access.
    """
    if data_type == "small_record":
        return root["metadata"]["source"]
    if data_type == "wide_object":
        return root["field_02500"]
    if data_type == "record_array":
        return root[-1]["status"]
    if data_type == "nested_config":
        node = root
        while "child" in node:
            node = node["child"]
        return node["value"]
    if data_type == "string_heavy":
        return root["strings"][50]
    raise ValueError(f"Unknown data type: {data_type}")


def _generate_small_record(rng: random.Random) -> dict[str, Any]:
    return {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }


def _generate_wide_object(rng: random.Random) -> dict[str, Any]:
    """Generates an object with 5000 scalar members."""
    return {
        f"field_{i:05d}": rng.choice(
            [rng.randint(-1000, 1000), _random_string(rng, 12), None]
        )
        for i in range(5000)
    }


def _generate_record_array(rng: random.Random) -> list[dict[str, Any]]:
    """Generates 2000 transaction-like records."""
    return [
        {
            "id": f"txn_{i:06d}",
            "amount": round(rng.uniform(1.0, 1000.0), 2),
            "currency": rng.choice(["USD", "EUR", "GBP", "JPY"]),
            "status": rng.choice(["completed", "pending", "failed"]),
            "tags": [_random_string(rng, 6) for _ in range(3)],
        }
        for i in range(2000)
    ]


def _generate_nested_config(rng: random.Random) -> dict[str, Any]:
    """Generates a chain 200 levels deep with siblings at each level."""
    node: dict[str, Any] = {"value": _random_string(rng, 10)}
    for depth in range(200):
        node = {
            "level": depth,
            "siblings": [_random_string(rng, 15) for _ in range(10)],
            "child": node,
        }
    return node


def _generate_string_heavy(rng: random.Random) -> dict[str, Any]:
    """Generates strings where roughly a third of the characters escape."""

    def escaped_string() -> str:
        chars = []
        for _ in range(50):
            if rng.random() < _ESCAPE_PROBABILITY:
                chars.append(json.loads(f'"{rng.choice(_ESCAPES)}"'))
            else:
                chars.append(
                    rng.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    return {
        "strings": [escaped_string() for _ in range(500)],
        "unicode": [chr(rng.randint(0x00A0, 0x2FFF)) * 8 for _ in range(200)],
    }


def _random_string(rng: random.Random, length: int) -> str:
    return "".join(rng.choices(string.ascii_letters, k=length))
