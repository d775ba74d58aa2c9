"""Transaction fee calculation and mempool fee histograms."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from blockrest.transaction import Transaction, TxOut

VSIZE_BIN_WIDTH = 50_000  # vbytes


def get_tx_fee(tx: Transaction, prevouts: Mapping[int, TxOut], network: Any = None) -> int:
    """Return inputs minus outputs in satoshis; coinbase transactions pay none."""
    if tx.is_coinbase():
        return 0
    total_in = sum(prevout.value for prevout in prevouts.values())
    total_out = sum(txout.value for txout in tx.output)
    if total_in < total_out:
        raise ValueError("outputs exceed inputs")
    return total_in - total_out


@dataclass(frozen=True)
class TxFeeInfo:
    fee: int
    vsize: int
    fee_per_vbyte: float

    @classmethod
    def from_transaction(
        cls, tx: Transaction, prevouts: Mapping[int, TxOut], network: Any = None
    ) -> "TxFeeInfo":
        fee = get_tx_fee(tx, prevouts, network)
        vsize_float = tx.weight() / 4
        return cls(fee, math.ceil(vsize_float), fee / vsize_float)


def make_fee_histogram(entries: Iterable[TxFeeInfo]) -> list[tuple[float, int]]:
    """Group vsizes by fee rate, highest first, into bins of about VSIZE_BIN_WIDTH."""
    histogram: list[tuple[float, int]] = []
    bin_size = 0
    last_fee_rate = 0.0
    for entry in sorted(entries, key=lambda e: e.fee_per_vbyte, reverse=True):
        if bin_size > VSIZE_BIN_WIDTH and last_fee_rate != entry.fee_per_vbyte:
            histogram.append((last_fee_rate, bin_size))
            bin_size = 0
        last_fee_rate = entry.fee_per_vbyte
        bin_size += entry.vsize
    if bin_size > 0:
        histogram.append((last_fee_rate, bin_size))
    return histogram