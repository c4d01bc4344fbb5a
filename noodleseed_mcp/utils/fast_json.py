"""
Fast JSON utility module backed by orjson

Used for SSE frame payloads and command request bodies, where every
message on every open stream passes through serialization.
"""

from typing import Any, Union

import orjson

JSONDecodeError = orjson.JSONDecodeError


def dumps(obj: Any) -> str:
    """
    Serialize to a JSON string.

    orjson emits compact single-line output, which keeps each SSE
    ``data:`` field on one line.
    """
    return orjson.dumps(obj).decode('utf-8')


def loads(s: Union[str, bytes]) -> Any:
    """
    Deserialize JSON from str or bytes.

    Raises:
        JSONDecodeError: if the payload is not valid JSON
    """
    return orjson.loads(s)


__all__ = ['dumps', 'loads', 'JSONDecodeError']
