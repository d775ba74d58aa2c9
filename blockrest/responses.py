"""HTTP responses, errors and script-hash parsing shared by the REST endpoints."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Optional, Union

from blockrest.address import AddressError, Network, address_to_script

CHAIN_TXS_PER_PAGE = 25
MAX_MEMPOOL_TXS = 50
BLOCK_LIMIT = 10
ADDRESS_SEARCH_LIMIT = 10

TTL_LONG = 157_784_630  # static resources (5 years)
TTL_SHORT = 10  # volatile resources
TTL_MEMPOOL_RECENT = 5  # GET /mempool/recent
CONF_FINAL = 10  # reorgs deeper than this are considered unlikely

_SCRIPTHASH_LEN = 32


class HttpError(Exception):
    """An error answered to the client with ``status`` and a plain-text message."""

    def __init__(self, message: str, status: int = HTTPStatus.BAD_REQUEST) -> None:
        super().__init__(message)
        self.message = message
        self.status = HTTPStatus(status)

    @classmethod
    def not_found(cls, message: str) -> "HttpError":
        return cls(message, HTTPStatus.NOT_FOUND)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"HttpError({int(self.status)}, {self.message!r})"


@dataclass
class Response:
    """A complete HTTP response: status, headers and body bytes."""

    status: HTTPStatus = HTTPStatus.OK
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.body)

    @classmethod
    def from_error(cls, error: HttpError) -> "Response":
        return cls(
            status=error.status,
            headers={"Content-Type": "text/plain"},
            body=error.message.encode("utf-8"),
        )


def _cache_control(ttl: int) -> str:
    return f"public, max-age={ttl}"


def http_message(status: int, message: Union[str, bytes], ttl: int) -> Response:
    """A plain-text response cached for ``ttl`` seconds."""
    body = message.encode("utf-8") if isinstance(message, str) else bytes(message)
    return Response(
        status=HTTPStatus(status),
        headers={"Content-Type": "text/plain", "Cache-Control": _cache_control(ttl)},
        body=body,
    )


def _to_json(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"{type(obj).__name__} is not JSON serializable")


def json_response(value: Any, ttl: int) -> Response:
    """A compact JSON response cached for ``ttl`` seconds.

    Objects with a ``to_dict`` method are serialized through it.
    """
    try:
        text = json.dumps(value, default=_to_json, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise HttpError(str(exc)) from exc
    return Response(
        status=HTTPStatus.OK,
        headers={"Content-Type": "application/json", "Cache-Control": _cache_control(ttl)},
        body=text.encode("utf-8"),
    )


def ttl_by_depth(height: Optional[int], best_height: int) -> int:
    """Long cache lifetime for deeply confirmed data, short otherwise."""
    if height is None:
        return TTL_SHORT
    return TTL_LONG if best_height - height >= CONF_FINAL else TTL_SHORT


def parse_scripthash(text: str) -> bytes:
    """Parse a 64-digit hex script hash into its 32 bytes."""
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        raise HttpError("Invalid scripthash") from None
    if len(raw) != _SCRIPTHASH_LEN or len(text) != 2 * _SCRIPTHASH_LEN:
        raise HttpError("Invalid scripthash")
    return raw


def _compute_script_hash(script: bytes) -> bytes:
    return hashlib.sha256(bytes(script)).digest()


def address_to_scripthash(addr: str, network: Network) -> bytes:
    """Return the script hash of the output script an address pays to."""
    try:
        script = address_to_script(addr, network)
    except AddressError as exc:
        raise HttpError(str(exc)) from exc
    return _compute_script_hash(script)


def to_scripthash(script_type: str, script_str: str, network: Network) -> bytes:
    """Resolve an ``address`` or ``scripthash`` path segment to a script hash."""
    if script_type == "address":
        return address_to_scripthash(script_str, network)
    if script_type == "scripthash":
        return parse_scripthash(script_str)
    raise HttpError("Invalid script type")