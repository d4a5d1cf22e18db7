import json
import pickle
from enum import Enum
from typing import Any

from schoolms.common.exceptions import CacheBackendError

# One-byte header in front of every payload stored out of process
_JSON_HEADER = b"j"
_PICKLE_HEADER = b"p"


class SerializationFormat(str, Enum):
    """Các định dạng serialize."""

    JSON = "json"
    PICKLE = "pickle"
    AUTO = "auto"


def is_json_serializable(data: Any) -> bool:
    """Plain JSON types only; pydantic models and dates go through pickle."""
    if data is None or isinstance(data, (str, int, float, bool)):
        return True
    if isinstance(data, list):
        return all(is_json_serializable(v) for v in data)
    if isinstance(data, dict):
        return all(
            isinstance(k, str) and is_json_serializable(v) for k, v in data.items()
        )
    return False


def serialize_value(
    data: Any, format: SerializationFormat = SerializationFormat.AUTO
) -> bytes:
    """
    Serialize dữ liệu để lưu vào cache.

    Args:
        data: Dữ liệu cần serialize
        format: Định dạng serialize

    Returns:
        Header-prefixed bytes

    Raises:
        CacheBackendError: the value cannot be encoded in the requested format
    """
    if format == SerializationFormat.AUTO:
        format = (
            SerializationFormat.JSON
            if is_json_serializable(data)
            else SerializationFormat.PICKLE
        )

    try:
        if format == SerializationFormat.JSON:
            return _JSON_HEADER + json.dumps(data).encode("utf-8")
        return _PICKLE_HEADER + pickle.dumps(data, protocol=pickle.HIGHEST_PROTOCOL)
    except (TypeError, ValueError, pickle.PicklingError, AttributeError) as e:
        raise CacheBackendError(f"Không thể serialize dữ liệu: {str(e)}") from e


def deserialize_value(payload: bytes) -> Any:
    """
    Deserialize dữ liệu từ cache.

    Args:
        payload: Bytes produced by ``serialize_value``

    Returns:
        Dữ liệu gốc

    Raises:
        CacheBackendError: unknown header or corrupt payload
    """
    if not payload:
        raise CacheBackendError("Empty cache payload")

    header, body = payload[:1], payload[1:]
    try:
        if header == _JSON_HEADER:
            return json.loads(body.decode("utf-8"))
        if header == _PICKLE_HEADER:
            return pickle.loads(body)
    except Exception as e:
        raise CacheBackendError(f"Không thể deserialize dữ liệu: {str(e)}") from e

    raise CacheBackendError(f"Unknown cache payload header {header!r}")
