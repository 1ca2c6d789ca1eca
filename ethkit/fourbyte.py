"""Lookup of method and event signatures in the public 4byte directory."""

from __future__ import annotations

import json
import urllib.request
from typing import Any

FOUR_BYTE_URL = "https://www.4byte.directory"
_TIMEOUT = 30.0


def resolve(signature: str) -> str:
    """Return the text signature for a hex selector, or an empty string if unknown."""
    return _get("/api/v1/signatures/?hex_signature=" + signature)


def resolve_bytes(data: bytes) -> str:
    """Return the text signature for a selector given as bytes."""
    return resolve(bytes(data).hex())


def _field(obj: Any, name: str) -> Any:
    if not isinstance(obj, dict):
        raise ValueError("unexpected response format")
    lowered = {str(key).lower(): value for key, value in obj.items()}
    return lowered.get(name)


def _get(path: str) -> str:
    with urllib.request.urlopen(FOUR_BYTE_URL + path, timeout=_TIMEOUT) as response:
        payload = json.loads(response.read())
    results = _field(payload, "results") or []
    if not isinstance(results, list):
        raise ValueError("unexpected response format")
    if not results:
        return ""
    return _field(results[0], "text_signature") or ""