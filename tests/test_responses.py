from http import HTTPStatus

import pytest

from blockrest.address import Network
from blockrest.responses import (
    CONF_FINAL,
    TTL_LONG,
    TTL_SHORT,
    HttpError,
    Response,
    address_to_scripthash,
    http_message,
    json_response,
    parse_scripthash,
    to_scripthash,
    ttl_by_depth,
)

GENESIS_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"
GENESIS_SCRIPTHASH = "6191c3b590bfcfa0475e877c302da1e323497acf3b42c08d8fa28e364edf018b"


class _Dictable:
    def to_dict(self):
        return {"a": 1, "b": [True, None]}


def test_value_param_error_is_bad_request():
    v = {"confirmations": 10}
    assert v.get("confirmations") == 10
    err = HttpError("notexist absent or not a u64")
    assert err.status == HTTPStatus.BAD_REQUEST
    assert str(err) == "notexist absent or not a u64"


def test_not_found_status():
    err = HttpError.not_found("Block not found")
    assert err.status == HTTPStatus.NOT_FOUND
    assert err.message == "Block not found"


def test_response_from_error():
    resp = Response.from_error(HttpError.not_found("Transaction not found"))
    assert resp.status == 404
    assert resp.content_type == "text/plain"
    assert resp.text == "Transaction not found"


def test_http_message_headers_and_body():
    resp = http_message(200, "123", 10)
    assert resp.status == 200
    assert resp.headers == {"Content-Type": "text/plain", "Cache-Control": "public, max-age=10"}
    assert resp.body == b"123"


def test_http_message_accepts_bytes():
    resp = http_message(HTTPStatus.METHOD_NOT_ALLOWED, b"Invalid method", 0)
    assert resp.status == 405
    assert resp.headers["Cache-Control"] == "public, max-age=0"
    assert resp.body == b"Invalid method"


def test_json_response_is_compact():
    resp = json_response({"x": [1, 2], "y": "z"}, TTL_LONG)
    assert resp.body == b'{"x":[1,2],"y":"z"}'
    assert resp.content_type == "application/json"
    assert resp.headers["Cache-Control"] == f"public, max-age={TTL_LONG}"


def test_json_response_uses_to_dict():
    resp = json_response([_Dictable()], 5)
    assert resp.json() == [{"a": 1, "b": [True, None]}]


def test_json_response_unserializable_raises_http_error():
    with pytest.raises(HttpError) as info:
        json_response(object(), 5)
    assert info.value.status == HTTPStatus.BAD_REQUEST


@pytest.mark.parametrize(
    "height, best, expected",
    [
        (None, 100, TTL_SHORT),
        (100, 100, TTL_SHORT),
        (100 - CONF_FINAL + 1, 100, TTL_SHORT),
        (100 - CONF_FINAL, 100, TTL_LONG),
        (0, 100, TTL_LONG),
    ],
)
def test_ttl_by_depth(height, best, expected):
    assert ttl_by_depth(height, best) == expected


def test_parse_scripthash_valid():
    raw = parse_scripthash("00" * 31 + "ff")
    assert raw == bytes(31) + b"\xff"


@pytest.mark.parametrize("text", ["zz" * 32, "00" * 31, "00" * 33, ""])
def test_parse_scripthash_invalid(text):
    with pytest.raises(HttpError, match="Invalid scripthash"):
        parse_scripthash(text)


def test_address_to_scripthash_genesis():
    assert address_to_scripthash(GENESIS_ADDRESS, Network.BITCOIN).hex() == GENESIS_SCRIPTHASH


def test_address_on_wrong_network():
    with pytest.raises(HttpError) as info:
        address_to_scripthash(GENESIS_ADDRESS, Network.REGTEST)
    assert info.value.message == "Address on invalid network"
    assert info.value.status == HTTPStatus.BAD_REQUEST


def test_invalid_address():
    with pytest.raises(HttpError) as info:
        address_to_scripthash("not-an-address0", Network.BITCOIN)
    assert info.value.status == HTTPStatus.BAD_REQUEST


def test_to_scripthash_dispatch():
    assert to_scripthash("address", GENESIS_ADDRESS, Network.BITCOIN).hex() == GENESIS_SCRIPTHASH
    assert to_scripthash("scripthash", GENESIS_SCRIPTHASH, Network.BITCOIN).hex() == GENESIS_SCRIPTHASH


def test_to_scripthash_invalid_type():
    with pytest.raises(HttpError, match="Invalid script type"):
        to_scripthash("pubkey", GENESIS_SCRIPTHASH, Network.BITCOIN)