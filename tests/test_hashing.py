import socket
import threading

import pytest

from blockrest.hashing import (
    create_socket,
    full_hash,
    hash_to_hex,
    hex_to_hash,
    sha256d,
    spawn_thread,
)

GENESIS_HEADER = (
    "0100000000000000000000000000000000000000000000000000000000000000"
    "000000003ba3edfd7a7b12b27ac72c3e67768f617fc81bc3888a51323a9fb8aa"
    "4b1e5e4a29ab5f49ffff001d1dac2b7c"
)
GENESIS_HASH = "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f"
ZERO_HASH = "0000000000000000000000000000000000000000000000000000000000000000"


def test_sha256d_of_genesis_header_gives_genesis_hash():
    assert hash_to_hex(sha256d(bytes.fromhex(GENESIS_HEADER))) == GENESIS_HASH


def test_sha256d_length():
    assert len(sha256d(b"anything")) == 32


def test_hex_round_trip():
    assert hash_to_hex(hex_to_hash(GENESIS_HASH)) == GENESIS_HASH


def test_hex_to_hash_reverses_bytes():
    raw = hex_to_hash(GENESIS_HASH)
    assert raw[::-1].hex() == GENESIS_HASH


def test_zero_hash():
    assert hex_to_hash(ZERO_HASH) == bytes(32)


@pytest.mark.parametrize("text", ["zz" * 32, "00" * 31, "00" * 33, ""])
def test_hex_to_hash_rejects_bad_input(text):
    with pytest.raises(ValueError):
        hex_to_hash(text)


def test_hash_to_hex_rejects_wrong_length():
    with pytest.raises(ValueError):
        hash_to_hex(b"\x01\x02")


def test_full_hash_truncates():
    data = bytes(range(40))
    assert full_hash(data) == bytes(range(32))


def test_full_hash_too_short():
    with pytest.raises(ValueError):
        full_hash(b"\x00" * 31)


def test_spawn_thread_runs_target():
    seen = []
    done = threading.Event()

    def work():
        seen.append(threading.current_thread().name)
        done.set()

    thread = spawn_thread("worker", work)
    thread.join(timeout=5)
    assert done.is_set()
    assert seen == ["worker"]
    assert thread.name == "worker"


def test_create_socket_binds():
    with create_socket(("127.0.0.1", 0)) as sock:
        host, port = sock.getsockname()
        assert host == "127.0.0.1"
        assert port > 0
        assert sock.family == socket.AF_INET
        assert sock.type == socket.SOCK_STREAM


def test_create_socket_rejects_hostname():
    with pytest.raises(ValueError):
        create_socket(("not-an-ip", 0))