"""Environment flags and parse configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "LAZYJSON_PROFILE" in os.environ

# "auto" prefers the native lazy engine, falling back to orjson
DEFAULT_BACKEND = os.environ.get("LAZYJSON_BACKEND", "auto")


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures which engine parses a document and what it is told.

    ``options`` is handed to the engine untouched; this layer never
    interprets it.
    """

    backend: str = DEFAULT_BACKEND
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.backend, str) or not self.backend:
            raise TypeError("backend must be a non-empty string")
        if not isinstance(self.options, Mapping):
            raise TypeError("options must be a mapping")
        if not all(isinstance(key, str) for key in self.options):
            raise TypeError("option names must be strings")
