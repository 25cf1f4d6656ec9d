from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass
class _BaseSettings:
    _filename: str
    _settings: dict[str, Any]

    def __init__(self, filename, settings):
        self._filename = filename
        self._settings = settings

    def as_dict(self) -> dict[str, Any]:
        return dict(self._settings)

    # ==============================
    # Serialization/Deserialization
    # ==============================
    def save(self):
        with open(self._filename, 'w') as f:
            json.dump(self._settings, f, indent=2)

    @classmethod
    def load(cls, filename) -> _BaseSettings:
        try:
            with open(filename, 'r') as f:
                settings_data = json.load(f)
        except FileNotFoundError:
            settings_data = {}
        return cls(filename, settings_data)
