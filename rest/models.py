import json
from dataclasses import dataclass, field
from typing import Any, Optional

from ratelimit import Bucket


@dataclass
class RateLimitResponse:
    """Body einer 429-Antwort."""
    retry_after: float
    message: str = ""
    is_global: bool = False

    @classmethod
    def from_body(cls, body: bytes) -> "RateLimitResponse":
        """
        Raises:
            ValueError: wenn der Body kein JSON-Objekt mit retry_after ist
        """
        data = json.loads(body)
        if not isinstance(data, dict) or "retry_after" not in data:
            raise ValueError("429 ohne retry_after")

        try:
            retry_after = float(data["retry_after"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Ungültiges retry_after: {data['retry_after']!r}") from e

        return cls(
            retry_after=retry_after,
            message=data.get("message", ""),
            is_global=bool(data.get("global", False)),
        )


@dataclass
class HTTPRequest:
    method: str
    url: str
    data: Any = None
    reason: Optional[str] = None
    content_type: str = "application/json"
    bucket_id: str = ""
    bucket: Optional[Bucket] = field(default=None, repr=False)
    # Anzahl bisheriger 429-Wiederholungen
    sequence: int = 0
