
"""
serializer.py
Provides utility functions for serializing and deserializing exchange results and simulation summaries to/from JSON.
Used by the simulation scripts to save data for analysis.
"""

import json
from enum import Enum
from typing import Any


def _default(o: Any):
    if isinstance(o, Enum):
        return o.value
    if isinstance(o, bytes):
        return o.hex()
    return getattr(o, '__dict__', str(o))


def dumps(obj: Any, indent=None) -> str:
    """
    Serialize a Python object (including dataclasses, enums and bytes) to a JSON string.
    Args:
        obj: Object to serialize.
        indent (int|None): Pretty-print indentation.
    Returns:
        str: JSON string.
    """
    return json.dumps(obj, default=_default, indent=indent)


def loads(s: str):
    """
    Deserialize a JSON string to a Python object (dict/list).
    Args:
        s (str): JSON string.
    Returns:
        object: Deserialized Python object.
    """
    return json.loads(s)
