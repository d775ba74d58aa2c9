import pytest

from blockrest.script import Instruction, Script, ScriptError

HASH20 = bytes(range(20))
HASH32 = bytes(range(32))

P2PKH = Script(bytes([0x76, 0xA9, 0x14]) + HASH20 + bytes([0x88, 0xAC]))
P2SH = Script(bytes([0xA9, 0x14]) + HASH20 + bytes([0x87]))
P2WPKH = Script(bytes([0x00, 0x14]) + HASH20)
P2WSH = Script(bytes([0x00, 0x20]) + HASH32)
P2TR = Script(bytes([0x51, 0x20]) + HASH32)
P2PK33 = Script(bytes([0x21, 0x02]) + HASH32 + bytes([0xAC]))
P2PK65 = Script(bytes([0x41, 0x04]) + HASH32 + HASH32 + bytes([0xAC]))


@pytest.mark.parametrize(
    "script, expected",
    [
        (Script(b""), "empty"),
        (Script(b"\x6a\x04abcd"), "op_return"),
        (P2PK33, "p2pk"),
        (P2PK65, "p2pk"),
        (P2PKH, "p2pkh"),
        (P2SH, "p2sh"),
        (P2WPKH, "v0_p2wpkh"),
        (P2WSH, "v0_p2wsh"),
        (P2TR, "v1_p2tr"),
        (Script(b"\xba"), "provably_unspendable"),
        (Script(b"\x65\x01"), "provably_unspendable"),
        (Script(b"\x51"), "unknown"),
    ],
)
def test_script_type(script, expected):
    assert script.script_type() == expected


def test_predicates_are_exclusive_for_standard_types():
    assert P2PKH.is_p2pkh() and not P2PKH.is_p2sh()
    assert P2SH.is_p2sh() and not P2SH.is_p2pkh()
    assert P2WPKH.is_p2wpkh() and not P2WPKH.is_p2wsh()
    assert P2WSH.is_p2wsh() and not P2WSH.is_p2tr()
    assert P2TR.is_p2tr() and not P2TR.is_p2wsh()


def test_empty_is_not_unspendable():
    assert Script(b"").is_empty() is True
    assert Script(b"").is_provably_unspendable() is False


@pytest.mark.parametrize("first", [0x6A, 0x50, 0x62, 0x89, 0x8A, 0x7E, 0x99, 0xBB, 0xFF])
def test_unspendable_first_bytes(first):
    assert Script(bytes([first])).is_provably_unspendable() is True


@pytest.mark.parametrize("first", [0x00, 0x51, 0x76, 0xA9, 0xAC, 0xB9])
def test_spendable_first_bytes(first):
    assert Script(bytes([first])).is_provably_unspendable() is False


def test_from_hex_round_trip():
    assert Script.from_hex(P2PKH.hex()) == P2PKH
    assert str(P2WSH) == P2WSH.hex()


def test_p2pkh_asm():
    expected = "OP_DUP OP_HASH160 OP_PUSHBYTES_20 " + HASH20.hex() + " OP_EQUALVERIFY OP_CHECKSIG"
    assert P2PKH.to_asm() == expected
    assert repr(P2PKH) == f"Script({expected})"


def test_zero_push_asm():
    assert Script(b"\x00").to_asm() == "OP_0"


def test_truncated_pushdata_length_asm():
    assert Script(b"\x76\x4c").to_asm() == "OP_DUP<unexpected end>"


def test_push_past_end_asm():
    assert Script(b"\x05\x01").to_asm().endswith("<push past end>")


def test_empty_asm():
    assert Script(b"").to_asm() == ""


def test_instructions_splits_pushes_and_ops():
    items = list(P2PKH.instructions())
    assert [item.opcode for item in items] == [0x76, 0xA9, 0x14, 0x88, 0xAC]
    assert items[2] == Instruction(0x14, HASH20)
    assert items[0].is_push is False
    assert items[2].is_push is True


def test_instructions_pushdata1():
    payload = bytes(range(80))
    script = Script(bytes([0x4C, len(payload)]) + payload + b"\x87")
    items = list(script.instructions())
    assert items[0].data == payload
    assert items[1] == Instruction(0x87)


def test_instructions_last_push_is_redeem_script():
    redeem = bytes(P2WSH)
    sig = b"\x30" * 10
    script_sig = Script(bytes([len(sig)]) + sig + bytes([len(redeem)]) + redeem)
    last = list(script_sig.instructions())[-1]
    assert Script(last.data).is_p2wsh()


def test_instructions_zero_push_is_empty_push():
    items = list(Script(b"\x00").instructions())
    assert items == [Instruction(0x00, b"")]


@pytest.mark.parametrize("raw", [b"\x05\x01", b"\x4c", b"\x4d\x01", b"\x4c\x05ab"])
def test_instructions_truncated_raise(raw):
    with pytest.raises(ScriptError):
        list(Script(raw).instructions())