"""Transactions, their wire format and input/output helpers."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from blockrest.block import BlockId
from blockrest.hashing import hash_to_hex, sha256d
from blockrest.script import Script, ScriptError

_NULL_VOUT = 0xFFFFFFFF


@dataclass(frozen=True)
class OutPoint:
    txid: bytes
    vout: int

    def is_null(self) -> bool:
        return self.txid == bytes(32) and self.vout == _NULL_VOUT


@dataclass
class TxIn:
    previous_output: OutPoint
    script_sig: Script = field(default_factory=Script)
    sequence: int = 0xFFFFFFFF
    witness: list[bytes] = field(default_factory=list)


@dataclass
class TxOut:
    value: int
    script_pubkey: Script


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._stream = io.BytesIO(data)

    def read(self, n: int) -> bytes:
        chunk = self._stream.read(n)
        if len(chunk) != n:
            raise ValueError("unexpected end of transaction data")
        return chunk

    def peek_byte(self) -> Optional[int]:
        pos = self._stream.tell()
        chunk = self._stream.read(1)
        self._stream.seek(pos)
        return chunk[0] if chunk else None

    def u32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.read(8))[0]

    def varint(self) -> int:
        first = self.read(1)[0]
        if first < 0xFD:
            return first
        width = {0xFD: 2, 0xFE: 4, 0xFF: 8}[first]
        return int.from_bytes(self.read(width), "little")

    def varbytes(self) -> bytes:
        return self.read(self.varint())

    def at_end(self) -> bool:
        return self.peek_byte() is None


def _varint(n: int) -> bytes:
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def _varbytes(data: bytes) -> bytes:
    return _varint(len(data)) + bytes(data)


@dataclass
class Transaction:
    version: int
    lock_time: int
    input: list[TxIn]
    output: list[TxOut]

    @classmethod
    def parse(cls, data: bytes) -> "Transaction":
        reader = _Reader(bytes(data))
        version = reader.u32()
        count = reader.varint()
        segwit = False
        if count == 0 and reader.peek_byte() == 1:
            reader.read(1)
            segwit = True
            count = reader.varint()
        inputs = []
        for _ in range(count):
            txid = reader.read(32)
            vout = reader.u32()
            script = Script(reader.varbytes())
            sequence = reader.u32()
            inputs.append(TxIn(OutPoint(txid, vout), script, sequence))
        outputs = [
            TxOut(reader.u64(), Script(reader.varbytes())) for _ in range(reader.varint())
        ]
        if segwit:
            for txin in inputs:
                txin.witness = [reader.varbytes() for _ in range(reader.varint())]
            if not any(txin.witness for txin in inputs):
                raise ValueError("segwit flag set but no witness data")
        lock_time = reader.u32()
        if not reader.at_end():
            raise ValueError("trailing bytes after transaction")
        return cls(version, lock_time, inputs, outputs)

    def _has_witness(self) -> bool:
        return any(txin.witness for txin in self.input)

    def _encode(self, include_witness: bool) -> bytes:
        segwit = include_witness and self._has_witness()
        parts = [struct.pack("<I", self.version & 0xFFFFFFFF)]
        if segwit:
            parts.append(b"\x00\x01")
        parts.append(_varint(len(self.input)))
        for txin in self.input:
            parts.append(txin.previous_output.txid)
            parts.append(struct.pack("<I", txin.previous_output.vout))
            parts.append(_varbytes(txin.script_sig))
            parts.append(struct.pack("<I", txin.sequence))
        parts.append(_varint(len(self.output)))
        for txout in self.output:
            parts.append(struct.pack("<Q", txout.value))
            parts.append(_varbytes(txout.script_pubkey))
        if segwit:
            for txin in self.input:
                parts.append(_varint(len(txin.witness)))
                parts.extend(_varbytes(item) for item in txin.witness)
        parts.append(struct.pack("<I", self.lock_time))
        return b"".join(parts)

    def serialize(self) -> bytes:
        """Encode the transaction in wire format, witness data included."""
        return self._encode(include_witness=True)

    def txid(self) -> bytes:
        return sha256d(self._encode(include_witness=False))

    def weight(self) -> int:
        return len(self._encode(include_witness=False)) * 3 + self.total_size()

    def total_size(self) -> int:
        return len(self.serialize())

    def is_coinbase(self) -> bool:
        return len(self.input) == 1 and self.input[0].previous_output.is_null()


@dataclass(frozen=True)
class TransactionStatus:
    confirmed: bool
    block_height: Optional[int] = None
    block_hash: Optional[bytes] = None
    block_time: Optional[int] = None

    @classmethod
    def from_blockid(cls, blockid: Optional[BlockId]) -> "TransactionStatus":
        if blockid is None:
            return cls(False)
        return cls(True, blockid.height, blockid.hash, blockid.time)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"confirmed": self.confirmed}
        if self.block_height is not None:
            result["block_height"] = self.block_height
        if self.block_hash is not None:
            result["block_hash"] = hash_to_hex(self.block_hash)
        if self.block_time is not None:
            result["block_time"] = self.block_time
        return result


@dataclass(frozen=True)
class TxInput:
    txid: bytes
    vin: int


@dataclass(frozen=True)
class InnerScripts:
    redeem_script: Optional[Script] = None
    witness_script: Optional[Script] = None


def is_coinbase(txin: TxIn) -> bool:
    return txin.previous_output.is_null()


def has_prevout(txin: TxIn) -> bool:
    return not txin.previous_output.is_null()


def is_spendable(txout: TxOut) -> bool:
    return not Script(txout.script_pubkey).is_provably_unspendable()


def extract_tx_prevouts(
    tx: Transaction, txos: Mapping[OutPoint, TxOut], allow_missing: bool
) -> dict[int, TxOut]:
    """Map input index to the output it spends, for inputs that spend one."""
    prevouts: dict[int, TxOut] = {}
    for index, txin in enumerate(tx.input):
        if not has_prevout(txin):
            continue
        txo = txos.get(txin.previous_output)
        if txo is None:
            if not allow_missing:
                raise ValueError(f"missing outpoint {txin.previous_output!r}")
            continue
        prevouts[index] = txo
    return prevouts


def serialize_outpoint(outpoint: OutPoint) -> dict[str, Any]:
    return {"txid": hash_to_hex(outpoint.txid), "vout": outpoint.vout}


def _last_instruction(script: Script):
    last = None
    try:
        for last in script.instructions():
            pass
    except ScriptError:
        return None
    return last


def get_innerscripts(txin: TxIn, prevout: TxOut) -> InnerScripts:
    """Return the redeemScript of a p2sh spend and the witnessScript of a p2wsh spend."""
    prev_script = Script(prevout.script_pubkey)
    redeem_script = None
    if prev_script.is_p2sh():
        last = _last_instruction(Script(txin.script_sig))
        if last is not None and last.is_push:
            redeem_script = Script(last.data)

    witness_script = None
    if prev_script.is_p2wsh() or (redeem_script is not None and redeem_script.is_p2wsh()):
        if txin.witness:
            witness_script = Script(txin.witness[-1])

    return InnerScripts(redeem_script, witness_script)