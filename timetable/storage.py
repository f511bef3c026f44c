"""
Local key-value storage: a JSON file of string slots and an in-memory double.

Each slot holds one whole serialized collection. Reads and writes are always
whole-slot; there are no partial updates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol
import json
import os
import tempfile


class KeyValueStore(Protocol):
    """Defines the operations the backends need from local storage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


@dataclass
class InMemoryKeyValueStore:
    """Test double for local storage interactions."""

    slots: dict = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.slots.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.slots[key] = value


@dataclass
class JsonFileKeyValueStore:
    """
    Slots persisted as one JSON object on disk.

    The file is rewritten through a temporary sibling and ``os.replace`` so a
    reader never observes a half-written document.
    """

    path: str

    def _read_all(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
