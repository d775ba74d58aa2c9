"""Networks and Bitcoin address encoding (base58check and bech32/bech32m)."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from blockrest.hashing import sha256d
from blockrest.script import Script


class AddressError(ValueError):
    """Raised when an address cannot be parsed or does not fit the network."""


class Network(Enum):
    BITCOIN = "mainnet"
    TESTNET = "testnet"
    SIGNET = "signet"
    REGTEST = "regtest"

    @property
    def p2pkh_prefix(self) -> int:
        return 0x00 if self is Network.BITCOIN else 0x6F

    @property
    def p2sh_prefix(self) -> int:
        return 0x05 if self is Network.BITCOIN else 0xC4

    @property
    def bech32_hrp(self) -> str:
        return _HRPS[self]


_HRPS = {
    Network.BITCOIN: "bc",
    Network.TESTNET: "tb",
    Network.SIGNET: "tb",
    Network.REGTEST: "bcrt",
}
_HRP_NETWORKS = {
    "bc": frozenset({Network.BITCOIN}),
    "tb": frozenset({Network.TESTNET, Network.SIGNET}),
    "bcrt": frozenset({Network.REGTEST}),
}
_MAINNET = frozenset({Network.BITCOIN})
_TEST_NETWORKS = frozenset({Network.TESTNET, Network.SIGNET, Network.REGTEST})
_LEGACY_VERSIONS = {
    0x00: ("p2pkh", _MAINNET),
    0x05: ("p2sh", _MAINNET),
    0x6F: ("p2pkh", _TEST_NETWORKS),
    0xC4: ("p2sh", _TEST_NETWORKS),
}

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_MAX_LEN = 50

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_BECH32_CONST = 1
_BECH32M_CONST = 0x2BC830A3
_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


def base58check_encode(payload: bytes) -> str:
    """Encode ``payload`` with a 4-byte double-SHA256 checksum in base58."""
    data = bytes(payload) + sha256d(payload)[:4]
    number = int.from_bytes(data, "big")
    chars = []
    while number:
        number, rem = divmod(number, 58)
        chars.append(_B58_ALPHABET[rem])
    leading = len(data) - len(data.lstrip(b"\x00"))
    return "1" * leading + "".join(reversed(chars))


def base58check_decode(text: str) -> bytes:
    """Decode a base58check string and return the payload without checksum."""
    number = 0
    for char in text:
        digit = _B58_ALPHABET.find(char)
        if digit < 0:
            raise AddressError(f"invalid base58 character {char!r}")
        number = number * 58 + digit
    leading = len(text) - len(text.lstrip("1"))
    raw = b"\x00" * leading + number.to_bytes((number.bit_length() + 7) // 8, "big")
    if len(raw) < 4:
        raise AddressError("base58 data too short")
    payload, checksum = raw[:-4], raw[-4:]
    if sha256d(payload)[:4] != checksum:
        raise AddressError("invalid base58 checksum")
    return payload


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATORS):
            if (top >> bit) & 1:
                chk ^= generator
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _convert_bits(data, from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out = []
    maxv = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise AddressError("invalid data value")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise AddressError("invalid padding")
    return out


def _check_witness_program(witver: int, program: bytes) -> None:
    if not 0 <= witver <= 16:
        raise AddressError(f"invalid witness version {witver}")
    if not 2 <= len(program) <= 40:
        raise AddressError(f"invalid witness program length {len(program)}")
    if witver == 0 and len(program) not in (20, 32):
        raise AddressError(f"invalid segwit v0 program length {len(program)}")


def bech32_encode(hrp: str, witver: int, program: bytes) -> str:
    """Encode a witness program as a segwit address (bech32 for v0, bech32m above)."""
    _check_witness_program(witver, program)
    hrp = hrp.lower()
    const = _BECH32_CONST if witver == 0 else _BECH32M_CONST
    data = [witver] + _convert_bits(program, 8, 5, True)
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ const
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(_CHARSET[d] for d in data + checksum)


def bech32_decode(hrp: str, text: str) -> tuple[int, bytes]:
    """Decode a segwit address for ``hrp`` into (witness version, program)."""
    if len(text) > 90:
        raise AddressError("bech32 string too long")
    if text.lower() != text and text.upper() != text:
        raise AddressError("mixed-case bech32 string")
    text = text.lower()
    sep = text.rfind("1")
    if sep < 1 or sep + 7 > len(text):
        raise AddressError("invalid bech32 separator position")
    if text[:sep] != hrp.lower():
        raise AddressError("invalid bech32 prefix")
    if any(not 33 <= ord(c) <= 126 for c in text[:sep]):
        raise AddressError("invalid character in bech32 prefix")
    try:
        data = [_CHARSET.index(c) for c in text[sep + 1:]]
    except ValueError:
        raise AddressError("invalid bech32 character") from None
    const = _polymod(_hrp_expand(text[:sep]) + data)
    if const not in (_BECH32_CONST, _BECH32M_CONST):
        raise AddressError("invalid bech32 checksum")
    values = data[:-6]
    if not values:
        raise AddressError("missing witness version")
    witver = values[0]
    program = bytes(_convert_bits(values[1:], 5, 8, False))
    _check_witness_program(witver, program)
    expected = _BECH32_CONST if witver == 0 else _BECH32M_CONST
    if const != expected:
        raise AddressError("invalid checksum variant for witness version")
    return witver, program


def _is_witness_program(script: Script) -> bool:
    if not 4 <= len(script) <= 42:
        return False
    first = script[0]
    if first != 0x00 and not 0x51 <= first <= 0x60:
        return False
    return 0x02 <= script[1] <= 0x28 and script[1] == len(script) - 2


def script_to_address(script: bytes, network: Network) -> Optional[str]:
    """Return the address that pays to ``script``, or None if it has none."""
    script = Script(script)
    if script.is_p2pkh():
        return base58check_encode(bytes([network.p2pkh_prefix]) + script[3:23])
    if script.is_p2sh():
        return base58check_encode(bytes([network.p2sh_prefix]) + script[2:22])
    if _is_witness_program(script):
        witver = 0 if script[0] == 0x00 else script[0] - 0x50
        try:
            return bech32_encode(network.bech32_hrp, witver, bytes(script[2:]))
        except AddressError:
            return None
    return None


def _parse(address: str) -> tuple[Script, frozenset]:
    sep = address.rfind("1")
    hrp = address[:sep].lower() if sep > 0 else ""
    if hrp in _HRP_NETWORKS:
        witver, program = bech32_decode(hrp, address)
        opcode = 0x00 if witver == 0 else 0x50 + witver
        return Script(bytes([opcode, len(program)]) + program), _HRP_NETWORKS[hrp]

    if len(address) > _B58_MAX_LEN:
        raise AddressError("base58 address too long")
    payload = base58check_decode(address)
    if len(payload) != 21:
        raise AddressError(f"invalid base58 payload length {len(payload)}")
    try:
        kind, networks = _LEGACY_VERSIONS[payload[0]]
    except KeyError:
        raise AddressError(f"invalid address version byte {payload[0]}") from None
    digest = payload[1:]
    if kind == "p2pkh":
        return Script(bytes([0x76, 0xA9, 0x14]) + digest + bytes([0x88, 0xAC])), networks
    return Script(bytes([0xA9, 0x14]) + digest + bytes([0x87])), networks


def address_to_script(address: str, network: Network) -> Script:
    """Parse ``address`` and return its output script, checking the network."""
    script, networks = _parse(address)
    if network not in networks:
        raise AddressError("Address on invalid network")
    return script