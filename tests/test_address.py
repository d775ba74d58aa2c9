import pytest

from blockrest.address import (
    AddressError,
    Network,
    address_to_script,
    base58check_decode,
    base58check_encode,
    bech32_decode,
    bech32_encode,
    script_to_address,
)
from blockrest.script import Script

HASH20 = bytes(range(20))
HASH32 = bytes(range(32))

P2PKH = Script(bytes([0x76, 0xA9, 0x14]) + HASH20 + bytes([0x88, 0xAC]))
P2SH = Script(bytes([0xA9, 0x14]) + HASH20 + bytes([0x87]))
P2WPKH = Script(bytes([0x00, 0x14]) + HASH20)
P2WSH = Script(bytes([0x00, 0x20]) + HASH32)
P2TR = Script(bytes([0x51, 0x20]) + HASH32)

ZERO_P2PKH_ADDRESS = "1111111111111111111114oLvT2"


def test_base58check_zero_hash_address():
    assert base58check_encode(bytes(21)) == ZERO_P2PKH_ADDRESS


def test_base58check_round_trip():
    payload = b"\x00\x00" + bytes(range(1, 30))
    assert base58check_decode(base58check_encode(payload)) == payload


def test_base58check_bad_checksum():
    tampered = ZERO_P2PKH_ADDRESS[:-1] + "3"
    with pytest.raises(AddressError):
        base58check_decode(tampered)


def test_base58check_bad_character():
    with pytest.raises(AddressError):
        base58check_decode("10OIl")


@pytest.mark.parametrize(
    "hrp, witver, program",
    [("bc", 0, HASH20), ("tb", 0, HASH32), ("bcrt", 1, HASH32), ("bc", 16, b"\x01\x02")],
)
def test_bech32_round_trip(hrp, witver, program):
    encoded = bech32_encode(hrp, witver, program)
    assert encoded.startswith(hrp + "1")
    assert bech32_decode(hrp, encoded) == (witver, program)


def test_bech32_uppercase_accepted():
    encoded = bech32_encode("bcrt", 0, HASH20)
    assert bech32_decode("bcrt", encoded.upper()) == (0, HASH20)


def test_bech32_mixed_case_rejected():
    encoded = bech32_encode("bc", 0, HASH20)
    with pytest.raises(AddressError):
        bech32_decode("bc", encoded[:5].upper() + encoded[5:])


def test_bech32_wrong_hrp_rejected():
    encoded = bech32_encode("tb", 0, HASH20)
    with pytest.raises(AddressError):
        bech32_decode("bc", encoded)


def test_bech32_single_error_detected():
    encoded = bech32_encode("bc", 0, HASH20)
    position = len(encoded) - 10
    replacement = "q" if encoded[position] != "q" else "p"
    tampered = encoded[:position] + replacement + encoded[position + 1:]
    with pytest.raises(AddressError):
        bech32_decode("bc", tampered)


@pytest.mark.parametrize(
    "witver, program", [(0, bytes(25)), (17, HASH20), (1, b"\x01"), (2, bytes(41))]
)
def test_bech32_encode_rejects_invalid_programs(witver, program):
    with pytest.raises(AddressError):
        bech32_encode("bc", witver, program)


def test_script_to_address_zero_p2pkh_mainnet():
    zero_p2pkh = Script(bytes([0x76, 0xA9, 0x14]) + bytes(20) + bytes([0x88, 0xAC]))
    assert script_to_address(zero_p2pkh, Network.BITCOIN) == ZERO_P2PKH_ADDRESS


def test_script_to_address_prefixes():
    assert script_to_address(P2PKH, Network.REGTEST)[0] in "mn"
    assert script_to_address(P2SH, Network.BITCOIN).startswith("3")
    assert script_to_address(P2WPKH, Network.REGTEST).startswith("bcrt1q")
    assert script_to_address(P2TR, Network.BITCOIN).startswith("bc1p")


@pytest.mark.parametrize("script", [Script(b""), Script(b"\x6a\x01\x00"), Script(b"\x51")])
def test_script_without_address(script):
    assert script_to_address(script, Network.BITCOIN) is None


@pytest.mark.parametrize("script", [P2PKH, P2SH, P2WPKH, P2WSH, P2TR])
@pytest.mark.parametrize("network", list(Network))
def test_address_round_trip(script, network):
    address = script_to_address(script, network)
    assert address_to_script(address, network) == script


def test_legacy_testnet_address_valid_on_regtest():
    address = script_to_address(P2PKH, Network.TESTNET)
    assert address_to_script(address, Network.REGTEST) == P2PKH


def test_bech32_testnet_address_valid_on_signet():
    address = script_to_address(P2WPKH, Network.TESTNET)
    assert address_to_script(address, Network.SIGNET) == P2WPKH


def test_bech32_testnet_address_invalid_on_regtest():
    address = script_to_address(P2WPKH, Network.TESTNET)
    with pytest.raises(AddressError, match="invalid network"):
        address_to_script(address, Network.REGTEST)


def test_mainnet_address_invalid_on_testnet():
    with pytest.raises(AddressError, match="invalid network"):
        address_to_script(ZERO_P2PKH_ADDRESS, Network.TESTNET)


@pytest.mark.parametrize("text", ["", "not an address", "bc1qqqqqqqqqqq", "1" * 60])
def test_address_to_script_rejects_garbage(text):
    with pytest.raises(AddressError):
        address_to_script(text, Network.BITCOIN)


def test_addresses_differ_between_main_and_test_networks():
    assert script_to_address(P2PKH, Network.BITCOIN) != script_to_address(
        P2PKH, Network.TESTNET
    )
    assert script_to_address(P2WPKH, Network.TESTNET) == script_to_address(
        P2WPKH, Network.SIGNET
    )
    assert script_to_address(P2SH, Network.REGTEST) == script_to_address(
        P2SH, Network.TESTNET
    )