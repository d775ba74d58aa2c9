"""JSON views of blocks, transactions, outputs and spends for the REST API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from blockrest.address import Network, script_to_address
from blockrest.block import DEFAULT_BLOCKHASH, BlockHeaderMeta, BlockId
from blockrest.fees import get_tx_fee
from blockrest.hashing import hash_to_hex
from blockrest.script import Script
from blockrest.transaction import (
    OutPoint,
    Transaction,
    TransactionStatus,
    TxIn,
    TxOut,
    extract_tx_prevouts,
    get_innerscripts,
    is_coinbase,
)

_U32 = 0xFFFFFFFF


@dataclass(frozen=True)
class BlockValue:
    id: bytes
    height: int
    version: int
    timestamp: int
    tx_count: int
    size: int
    weight: int
    merkle_root: bytes
    previousblockhash: Optional[bytes]
    mediantime: int
    nonce: int
    bits: int
    difficulty: float

    @classmethod
    def from_header_meta(cls, blockhm: BlockHeaderMeta) -> "BlockValue":
        entry = blockhm.header_entry
        header = entry.header
        prev = header.prev_blockhash
        return cls(
            id=header.block_hash(),
            height=entry.height,
            version=header.version & _U32,
            timestamp=header.time,
            tx_count=blockhm.meta.tx_count,
            size=blockhm.meta.size,
            weight=blockhm.meta.weight,
            merkle_root=header.merkle_root,
            previousblockhash=prev if prev != DEFAULT_BLOCKHASH else None,
            mediantime=blockhm.mtp,
            nonce=header.nonce,
            bits=header.bits,
            difficulty=header.difficulty(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": hash_to_hex(self.id),
            "height": self.height,
            "version": self.version,
            "timestamp": self.timestamp,
            "tx_count": self.tx_count,
            "size": self.size,
            "weight": self.weight,
            "merkle_root": hash_to_hex(self.merkle_root),
            "previousblockhash": (
                hash_to_hex(self.previousblockhash)
                if self.previousblockhash is not None
                else None
            ),
            "mediantime": self.mediantime,
            "nonce": self.nonce,
            "bits": self.bits,
            "difficulty": self.difficulty,
        }


@dataclass(frozen=True)
class TxOutValue:
    scriptpubkey: Script
    scriptpubkey_asm: str
    scriptpubkey_type: str
    scriptpubkey_address: Optional[str]
    value: int

    @classmethod
    def from_txout(cls, txout: TxOut, network: Network) -> "TxOutValue":
        script = Script(txout.script_pubkey)
        return cls(
            scriptpubkey=script,
            scriptpubkey_asm=script.to_asm(),
            scriptpubkey_type=script.script_type(),
            scriptpubkey_address=script_to_address(script, network),
            value=txout.value,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "scriptpubkey": self.scriptpubkey.hex(),
            "scriptpubkey_asm": self.scriptpubkey_asm,
            "scriptpubkey_type": self.scriptpubkey_type,
        }
        if self.scriptpubkey_address is not None:
            result["scriptpubkey_address"] = self.scriptpubkey_address
        result["value"] = self.value
        return result


@dataclass(frozen=True)
class TxInValue:
    txid: bytes
    vout: int
    prevout: Optional[TxOutValue]
    scriptsig: Script
    scriptsig_asm: str
    witness: Optional[list[str]]
    is_coinbase: bool
    sequence: int
    inner_redeemscript_asm: Optional[str]
    inner_witnessscript_asm: Optional[str]

    @classmethod
    def from_txin(
        cls, txin: TxIn, prevout: Optional[TxOut], network: Network
    ) -> "TxInValue":
        script_sig = Script(txin.script_sig)
        witness = [bytes(item).hex() for item in txin.witness] or None
        redeem_asm = witness_asm = None
        if prevout is not None:
            inner = get_innerscripts(txin, prevout)
            if inner.redeem_script is not None:
                redeem_asm = inner.redeem_script.to_asm()
            if inner.witness_script is not None:
                witness_asm = inner.witness_script.to_asm()
        return cls(
            txid=txin.previous_output.txid,
            vout=txin.previous_output.vout,
            prevout=TxOutValue.from_txout(prevout, network) if prevout is not None else None,
            scriptsig=script_sig,
            scriptsig_asm=script_sig.to_asm(),
            witness=witness,
            is_coinbase=is_coinbase(txin),
            sequence=txin.sequence,
            inner_redeemscript_asm=redeem_asm,
            inner_witnessscript_asm=witness_asm,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "txid": hash_to_hex(self.txid),
            "vout": self.vout,
            "prevout": self.prevout.to_dict() if self.prevout is not None else None,
            "scriptsig": self.scriptsig.hex(),
            "scriptsig_asm": self.scriptsig_asm,
        }
        if self.witness is not None:
            result["witness"] = list(self.witness)
        result["is_coinbase"] = self.is_coinbase
        result["sequence"] = self.sequence
        if self.inner_redeemscript_asm is not None:
            result["inner_redeemscript_asm"] = self.inner_redeemscript_asm
        if self.inner_witnessscript_asm is not None:
            result["inner_witnessscript_asm"] = self.inner_witnessscript_asm
        return result


@dataclass(frozen=True)
class TransactionValue:
    txid: bytes
    version: int
    locktime: int
    vin: list[TxInValue]
    vout: list[TxOutValue]
    size: int
    weight: int
    fee: int
    status: Optional[TransactionStatus]

    @classmethod
    def build(
        cls,
        tx: Transaction,
        blockid: Optional[BlockId],
        txos: Mapping[OutPoint, TxOut],
        network: Network,
    ) -> "TransactionValue":
        prevouts = extract_tx_prevouts(tx, txos, True)
        return cls(
            txid=tx.txid(),
            version=tx.version & _U32,
            locktime=tx.lock_time,
            vin=[
                TxInValue.from_txin(txin, prevouts.get(index), network)
                for index, txin in enumerate(tx.input)
            ],
            vout=[TxOutValue.from_txout(txout, network) for txout in tx.output],
            size=tx.total_size(),
            weight=tx.weight(),
            fee=get_tx_fee(tx, prevouts, network),
            status=TransactionStatus.from_blockid(blockid),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "txid": hash_to_hex(self.txid),
            "version": self.version,
            "locktime": self.locktime,
            "vin": [vin.to_dict() for vin in self.vin],
            "vout": [vout.to_dict() for vout in self.vout],
            "size": self.size,
            "weight": self.weight,
            "fee": self.fee,
        }
        if self.status is not None:
            result["status"] = self.status.to_dict()
        return result


@dataclass(frozen=True)
class UtxoValue:
    txid: bytes
    vout: int
    status: TransactionStatus
    value: int

    @classmethod
    def from_utxo(cls, utxo: Any) -> "UtxoValue":
        """Build from any object with ``txid``, ``vout``, ``confirmed`` and ``value``."""
        return cls(
            txid=utxo.txid,
            vout=utxo.vout,
            status=TransactionStatus.from_blockid(utxo.confirmed),
            value=utxo.value,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "txid": hash_to_hex(self.txid),
            "vout": self.vout,
            "status": self.status.to_dict(),
            "value": self.value,
        }


@dataclass(frozen=True)
class SpendingValue:
    spent: bool = False
    txid: Optional[bytes] = None
    vin: Optional[int] = None
    status: Optional[TransactionStatus] = None

    @classmethod
    def from_spend(cls, spend: Any) -> "SpendingValue":
        """Build from any object with ``txid``, ``vin`` and ``confirmed``."""
        return cls(
            spent=True,
            txid=spend.txid,
            vin=spend.vin,
            status=TransactionStatus.from_blockid(spend.confirmed),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"spent": self.spent}
        if self.txid is not None:
            result["txid"] = hash_to_hex(self.txid)
        if self.vin is not None:
            result["vin"] = self.vin
        if self.status is not None:
            result["status"] = self.status.to_dict()
        return result