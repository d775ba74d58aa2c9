"""Hash helpers plus small thread and socket utilities."""

from __future__ import annotations

import hashlib
import ipaddress
import socket
import threading
from typing import Any, Callable

HASH_LEN = 32


def sha256d(data: bytes) -> bytes:
    """Return SHA-256 applied twice to ``data``."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def full_hash(data: bytes) -> bytes:
    """Return the first 32 bytes of ``data`` as a full hash."""
    if len(data) < HASH_LEN:
        raise ValueError(f"expected at least {HASH_LEN} bytes, got {len(data)}")
    return bytes(data[:HASH_LEN])


def hash_to_hex(digest: bytes) -> str:
    """Render a 32-byte hash in the usual byte-reversed hex form."""
    if len(digest) != HASH_LEN:
        raise ValueError(f"expected {HASH_LEN} bytes, got {len(digest)}")
    return bytes(digest)[::-1].hex()


def hex_to_hash(text: str) -> bytes:
    """Parse a byte-reversed hex hash string into its 32 raw bytes."""
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        raise ValueError("Invalid hash string") from None
    if len(raw) != HASH_LEN or len(text) != 2 * HASH_LEN:
        raise ValueError("Invalid hash string")
    return raw[::-1]


def spawn_thread(name: str, target: Callable[[], Any]) -> threading.Thread:
    """Start ``target`` on a new named thread and return the thread."""
    thread = threading.Thread(target=target, name=name)
    thread.start()
    return thread


def create_socket(addr: tuple[str, int]) -> socket.socket:
    """Create a TCP socket bound to ``addr`` with port reuse enabled."""
    host, port = addr[0], addr[1]
    version = ipaddress.ip_address(host).version
    family = socket.AF_INET6 if version == 6 else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        if hasattr(socket, "SO_REUSEPORT"):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock