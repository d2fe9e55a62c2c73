"""Header merging for forwarded requests and relayed responses.

Headers are handled as raw bytes end to end so values pass through without
being re-encoded.
"""

from typing import Iterable, Mapping

import httpx

RawHeaders = list[tuple[bytes, bytes]]

# Derived by the HTTP layer from the target URL and the buffered body.
INBOUND_SKIP_HEADERS = {b"host", b"transfer-encoding"}

# Framing of the relayed body is owned by the server, not the upstream.
RELAY_SKIP_HEADERS = {b"transfer-encoding"}


def encode_header(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return value.encode("utf-8")


def apply_headers(
    target: RawHeaders,
    source: Iterable[tuple[str | bytes, str | bytes]],
) -> None:
    """Set each header on target, or delete it when the value is empty."""
    for key, value in source:
        key, value = encode_header(key), encode_header(value)
        lookup_key = key.lower()
        found = [idx for idx, (k, _) in enumerate(target) if k.lower() == lookup_key]

        if not value:
            for idx in reversed(found):
                del target[idx]
            continue

        for idx in reversed(found[1:]):
            del target[idx]
        if found:
            target[found[0]] = (key, value)
        else:
            target.append((key, value))


class HeaderBuilder:
    """Build outbound request headers and relayed response headers."""

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self.overrides = tuple((overrides or {}).items())
        self._raw_overrides = tuple(
            (encode_header(k), encode_header(v)) for k, v in self.overrides
        )

    def merge_outbound(
        self,
        headers: httpx.Headers,
        inbound: Iterable[tuple[bytes, bytes]],
    ) -> httpx.Headers:
        """Copy inbound headers, then overrides, onto the outbound headers.

        Overrides are applied last so they win for colliding names, delete
        included.
        """
        merged = list(headers.raw)
        apply_headers(
            merged,
            ((k, v) for k, v in inbound if k.lower() not in INBOUND_SKIP_HEADERS),
        )
        apply_headers(merged, self._raw_overrides)
        return httpx.Headers(merged)

    def build_relayed(self, upstream: httpx.Headers) -> RawHeaders:
        """Copy upstream response headers, last value wins per name."""
        relayed: dict[bytes, bytes] = {}
        for key, value in upstream.raw:
            key_lower = key.lower()
            if key_lower in RELAY_SKIP_HEADERS:
                continue
            relayed[key_lower] = value
        return list(relayed.items())
