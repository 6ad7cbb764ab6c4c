"""Hash utilities for response cache keys.

Provides stable hashing of request payloads so identical requests map to
the same cache entry regardless of dict ordering.
"""

import hashlib
import json
from typing import Any

from pydantic import BaseModel


def canonical_json(payload: Any) -> str:
    """Serialise a payload to a stable, compact JSON string.

    Pydantic models are dumped in JSON mode with their field names, so a
    request and its dict form hash identically.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def calculate_payload_hash(payload: Any) -> str:
    """Calculate a SHA-256 hex digest of the canonical payload form."""
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
