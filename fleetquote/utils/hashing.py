import hashlib
import json


def payload_hash(payload: dict) -> str:
    """Stable sha256 of a JSON-able payload; key order does not matter."""
    s = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()


def cache_key(prefix: str, payload: dict) -> str:
    return f"{prefix}:{payload_hash(payload)}"
