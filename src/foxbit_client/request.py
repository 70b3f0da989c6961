from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from . import signing

# Everything printable is left alone except the reserved set below; controls, space and
# non-ASCII are always escaped by quote().
_QUERY_ENCODE_SET = '"#<>?@[\\]^`{|}+%'
_QUERY_SAFE = "".join(chr(c) for c in range(0x21, 0x7F) if chr(c) not in _QUERY_ENCODE_SET)

ACCESS_KEY_HEADER = "X-FB-ACCESS-KEY"
TIMESTAMP_HEADER = "X-FB-ACCESS-TIMESTAMP"
SIGNATURE_HEADER = "X-FB-ACCESS-SIGNATURE"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"


@dataclass(frozen=True)
class Credentials:
    access_key: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class Endpoint:
    """One exchange call: what gets signed is exactly what gets sent."""

    method: HttpMethod
    path: str
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None
    private: bool = False

    @property
    def query(self) -> str:
        return build_query(self.params)

    @property
    def payload(self) -> str:
        return signing.compact_json(self.body)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(params: Mapping[str, Any] | None) -> str:
    """Return the canonical ``key=value&...`` string for ``params``.

    Keys are sorted so the result never depends on insertion order; ``None`` values are
    dropped rather than sent empty.
    """
    if not params:
        return ""
    items = sorted(((k, v) for k, v in params.items() if v is not None), key=lambda kv: kv[0])
    return "&".join(f"{k}={quote(_format_value(v), safe=_QUERY_SAFE)}" for k, v in items)


def build_headers(
    endpoint: Endpoint,
    credentials: Credentials,
    *,
    prefix: str,
    timestamp: str | None = None,
) -> dict[str, str]:
    # one timestamp for both prehash and header
    ts = timestamp if timestamp is not None else signing.timestamp_ms()
    prehash = signing.canonicalize(
        endpoint.method.value,
        prefix,
        endpoint.path,
        ts,
        endpoint.query,
        endpoint.payload,
    )
    return {
        ACCESS_KEY_HEADER: credentials.access_key,
        TIMESTAMP_HEADER: ts,
        SIGNATURE_HEADER: signing.sign(prehash, credentials.secret),
    }
