"""Signing helpers for Foxbit REST v3 requests.

Prehash layout (no separators)::

    timestamp + method + "/rest/v3" + path + query + body

The signature is the lowercase hex HMAC-SHA256 of the prehash keyed by the API secret.
"""
from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any


def sign(prehash: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), prehash.encode("utf-8"), hashlib.sha256).hexdigest()


def timestamp_ms() -> str:
    return str(int(time.time() * 1000))


def compact_json(body: Any) -> str:
    """Serialize ``body`` exactly as it is signed and sent."""
    if not body:
        return ""
    # sorted keys, no spaces
    return json.dumps(body, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def canonicalize(
    method: str,
    prefix: str,
    path: str,
    timestamp: str,
    query: str = "",
    body: str = "",
) -> str:
    return f"{timestamp}{method}{prefix}{path}{query}{body}"


__all__ = ["canonicalize", "compact_json", "sign", "timestamp_ms"]
