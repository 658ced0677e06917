import copy
import json
from pathlib import Path
from typing import Any, Dict


class TestDataLoader:
    """Request payloads and records shared by the integration tests"""

    __test__ = False
    _data: Dict[str, Any] = None

    @classmethod
    def load(cls) -> Dict[str, Any]:
        if cls._data is None:
            with open(Path(__file__).parent / "test_data.json") as f:
                cls._data = json.load(f)
        return cls._data

    @classmethod
    def get(cls, key: str) -> Dict[str, Any]:
        """Deep copy of one payload, so tests can mutate it freely"""
        if key not in cls.load():
            raise KeyError(f"No test data named {key!r}")
        return copy.deepcopy(cls.load()[key])

    @classmethod
    def payload(cls, key: str, **overrides: Any) -> Dict[str, Any]:
        data = cls.get(key)
        data.update(overrides)
        return data
