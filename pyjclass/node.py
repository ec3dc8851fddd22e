"""
Common base for decoded class file structures.
"""

from abc import ABC
import dataclasses
import json


class ClassNode(ABC):
    """Base class for all decoded nodes."""

    def to_dict(self) -> dict:
        """Convert node to dictionary for JSON serialization."""
        result = {"_type": self.__class__.__name__}
        for f in dataclasses.fields(self):
            if f.name.startswith("_"):
                continue
            result[f.name] = _serialize_value(getattr(self, f.name))
        return result

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


def _serialize_value(value):
    """Helper to serialize a value for JSON."""
    if value is None:
        return None
    if isinstance(value, ClassNode):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, str)):
        return value
    return str(value)
