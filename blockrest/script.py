"""Bitcoin output and input scripts: classification, parsing and assembly text."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from typing import Iterator, Optional

OP_0 = 0x00
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E
OP_PUSHNUM_1 = 0x51
OP_PUSHNUM_16 = 0x60
OP_RETURN = 0x6A
OP_DUP = 0x76
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xA9
OP_CHECKSIG = 0xAC
OP_CHECKSIGADD = 0xBA

_PUSHDATA_WIDTHS = {OP_PUSHDATA1: 1, OP_PUSHDATA2: 2, OP_PUSHDATA4: 4}

_NAMED_OPCODES = {
    0x4C: "OP_PUSHDATA1",
    0x4D: "OP_PUSHDATA2",
    0x4E: "OP_PUSHDATA4",
    0x4F: "OP_PUSHNUM_NEG1",
    0x50: "OP_RESERVED",
    0x61: "OP_NOP",
    0x62: "OP_VER",
    0x63: "OP_IF",
    0x64: "OP_NOTIF",
    0x65: "OP_VERIF",
    0x66: "OP_VERNOTIF",
    0x67: "OP_ELSE",
    0x68: "OP_ENDIF",
    0x69: "OP_VERIFY",
    0x6A: "OP_RETURN",
    0x6B: "OP_TOALTSTACK",
    0x6C: "OP_FROMALTSTACK",
    0x6D: "OP_2DROP",
    0x6E: "OP_2DUP",
    0x6F: "OP_3DUP",
    0x70: "OP_2OVER",
    0x71: "OP_2ROT",
    0x72: "OP_2SWAP",
    0x73: "OP_IFDUP",
    0x74: "OP_DEPTH",
    0x75: "OP_DROP",
    0x76: "OP_DUP",
    0x77: "OP_NIP",
    0x78: "OP_OVER",
    0x79: "OP_PICK",
    0x7A: "OP_ROLL",
    0x7B: "OP_ROT",
    0x7C: "OP_SWAP",
    0x7D: "OP_TUCK",
    0x7E: "OP_CAT",
    0x7F: "OP_SUBSTR",
    0x80: "OP_LEFT",
    0x81: "OP_RIGHT",
    0x82: "OP_SIZE",
    0x83: "OP_INVERT",
    0x84: "OP_AND",
    0x85: "OP_OR",
    0x86: "OP_XOR",
    0x87: "OP_EQUAL",
    0x88: "OP_EQUALVERIFY",
    0x89: "OP_RESERVED1",
    0x8A: "OP_RESERVED2",
    0x8B: "OP_1ADD",
    0x8C: "OP_1SUB",
    0x8D: "OP_2MUL",
    0x8E: "OP_2DIV",
    0x8F: "OP_NEGATE",
    0x90: "OP_ABS",
    0x91: "OP_NOT",
    0x92: "OP_0NOTEQUAL",
    0x93: "OP_ADD",
    0x94: "OP_SUB",
    0x95: "OP_MUL",
    0x96: "OP_DIV",
    0x97: "OP_MOD",
    0x98: "OP_LSHIFT",
    0x99: "OP_RSHIFT",
    0x9A: "OP_BOOLAND",
    0x9B: "OP_BOOLOR",
    0x9C: "OP_NUMEQUAL",
    0x9D: "OP_NUMEQUALVERIFY",
    0x9E: "OP_NUMNOTEQUAL",
    0x9F: "OP_LESSTHAN",
    0xA0: "OP_GREATERTHAN",
    0xA1: "OP_LESSTHANOREQUAL",
    0xA2: "OP_GREATERTHANOREQUAL",
    0xA3: "OP_MIN",
    0xA4: "OP_MAX",
    0xA5: "OP_WITHIN",
    0xA6: "OP_RIPEMD160",
    0xA7: "OP_SHA1",
    0xA8: "OP_SHA256",
    0xA9: "OP_HASH160",
    0xAA: "OP_HASH256",
    0xAB: "OP_CODESEPARATOR",
    0xAC: "OP_CHECKSIG",
    0xAD: "OP_CHECKSIGVERIFY",
    0xAE: "OP_CHECKMULTISIG",
    0xAF: "OP_CHECKMULTISIGVERIFY",
    0xB0: "OP_NOP1",
    0xB1: "OP_CLTV",
    0xB2: "OP_CSV",
    0xBA: "OP_CHECKSIGADD",
    0xFF: "OP_INVALIDOPCODE",
}

_OPCODE_NAMES = {
    **{code: f"OP_PUSHBYTES_{code}" for code in range(0x00, 0x4C)},
    **{0x50 + n: f"OP_PUSHNUM_{n}" for n in range(1, 17)},
    **{0xB3 + n - 4: f"OP_NOP{n}" for n in range(4, 11)},
    **{code: f"OP_RETURN_{code}" for code in range(0xBB, 0xFF)},
    **_NAMED_OPCODES,
}

# Opcodes that end execution like OP_RETURN in legacy script context.
_RETURN_LIKE = frozenset({0x6A, 0x50, 0x62, 0x89, 0x8A})
# Opcodes that are illegal in legacy script context.
_ILLEGAL = frozenset(
    {0x65, 0x66, 0xFF, 0x7E, 0x7F, 0x80, 0x81, 0x83, 0x84, 0x85, 0x86,
     0x8D, 0x8E, 0x95, 0x96, 0x97, 0x98, 0x99}
)


class ScriptError(ValueError):
    """Raised when a script cannot be split into instructions."""


@dataclass(frozen=True)
class Instruction:
    """One script instruction: an opcode and, for pushes, its data."""

    opcode: int
    data: Optional[bytes] = None

    @property
    def is_push(self) -> bool:
        return self.data is not None


class Script(bytes):
    """A raw script, held as its serialized bytes."""

    @classmethod
    def from_hex(cls, text: str) -> "Script":
        return cls(bytes.fromhex(text))

    def __repr__(self) -> str:
        return f"Script({self.to_asm()})"

    def __str__(self) -> str:
        return self.hex()

    def is_empty(self) -> bool:
        return len(self) == 0

    def is_op_return(self) -> bool:
        return len(self) > 0 and self[0] == OP_RETURN

    def is_p2pk(self) -> bool:
        if len(self) == 67:
            return self[0] == 0x41 and self[66] == OP_CHECKSIG
        if len(self) == 35:
            return self[0] == 0x21 and self[34] == OP_CHECKSIG
        return False

    def is_p2pkh(self) -> bool:
        return (
            len(self) == 25
            and self[0] == OP_DUP
            and self[1] == OP_HASH160
            and self[2] == 0x14
            and self[23] == OP_EQUALVERIFY
            and self[24] == OP_CHECKSIG
        )

    def is_p2sh(self) -> bool:
        return (
            len(self) == 23
            and self[0] == OP_HASH160
            and self[1] == 0x14
            and self[22] == OP_EQUAL
        )

    def is_p2wpkh(self) -> bool:
        return len(self) == 22 and self[0] == OP_0 and self[1] == 0x14

    def is_p2wsh(self) -> bool:
        return len(self) == 34 and self[0] == OP_0 and self[1] == 0x20

    def is_p2tr(self) -> bool:
        return len(self) == 34 and self[0] == OP_PUSHNUM_1 and self[1] == 0x20

    def is_provably_unspendable(self) -> bool:
        if not self:
            return False
        first = self[0]
        return first in _RETURN_LIKE or first in _ILLEGAL or first >= OP_CHECKSIGADD

    def instructions(self) -> Iterator[Instruction]:
        """Yield the script's instructions; raise ScriptError on a truncated push."""
        size = len(self)
        pos = 0
        while pos < size:
            opcode = self[pos]
            pos += 1
            if opcode <= 0x4B:
                length = opcode
            elif opcode in _PUSHDATA_WIDTHS:
                width = _PUSHDATA_WIDTHS[opcode]
                if pos + width > size:
                    raise ScriptError("unexpected end of script")
                length = int.from_bytes(self[pos:pos + width], "little")
                pos += width
            else:
                yield Instruction(opcode)
                continue
            if pos + length > size:
                raise ScriptError("push past end of script")
            yield Instruction(opcode, bytes(self[pos:pos + length]))
            pos += length

    def to_asm(self) -> str:
        """Return the human-readable assembly form of the script."""
        parts: list[str] = []
        stream = iter(self)
        for opcode in stream:
            if opcode <= 0x4B:
                length = opcode
            elif opcode in _PUSHDATA_WIDTHS:
                width = _PUSHDATA_WIDTHS[opcode]
                raw_len = bytes(islice(stream, width))
                if len(raw_len) < width:
                    parts.append("<unexpected end>")
                    break
                length = int.from_bytes(raw_len, "little")
            else:
                length = 0

            if parts:
                parts.append(" ")
            parts.append("OP_0" if opcode == OP_0 else _OPCODE_NAMES[opcode])

            if length:
                parts.append(" ")
                data = bytes(islice(stream, length))
                if len(data) < length:
                    parts.append("<push past end>")
                    break
                parts.append(data.hex())
        return "".join(parts)

    def script_type(self) -> str:
        """Classify the script as an output type name."""
        if self.is_empty():
            return "empty"
        if self.is_op_return():
            return "op_return"
        if self.is_p2pk():
            return "p2pk"
        if self.is_p2pkh():
            return "p2pkh"
        if self.is_p2sh():
            return "p2sh"
        if self.is_p2wpkh():
            return "v0_p2wpkh"
        if self.is_p2wsh():
            return "v0_p2wsh"
        if self.is_p2tr():
            return "v1_p2tr"
        if self.is_provably_unspendable():
            return "provably_unspendable"
        return "unknown"