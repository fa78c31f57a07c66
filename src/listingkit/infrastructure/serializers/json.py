"""JSON serializer implementation."""

import json
from datetime import date, datetime
from typing import Any

from listingkit.core.exceptions import SerializationError


class JsonSerializer:
    """JSON serializer for cache values.

    Rows coming back from the backend are plain JSON already; the only
    extra types handled are dates and datetimes, which round-trip
    through tagged objects.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        """Initialize the JSON serializer.

        Args:
            encoding: Character encoding to use.
        """
        self._encoding = encoding

    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Raises:
            SerializationError: If the value cannot be serialized.
        """
        try:
            json_str = json.dumps(value, default=self._default_encoder)
            return json_str.encode(self._encoding)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize value: {e}") from e

    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Raises:
            SerializationError: If the data cannot be deserialized.
        """
        try:
            json_str = data.decode(self._encoding)
            return json.loads(json_str, object_hook=self._object_hook)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SerializationError(f"Failed to deserialize data: {e}") from e

    def _default_encoder(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return {"__datetime__": obj.isoformat()}
        if isinstance(obj, date):
            return {"__date__": obj.isoformat()}
        if hasattr(obj, "__dict__"):
            return obj.__dict__
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    @staticmethod
    def _object_hook(obj: dict[str, Any]) -> Any:
        if len(obj) == 1:
            if "__datetime__" in obj:
                return datetime.fromisoformat(obj["__datetime__"])
            if "__date__" in obj:
                return date.fromisoformat(obj["__date__"])
        return obj
