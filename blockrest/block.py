"""Block headers, the ordered header chain and per-block metadata."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping, Optional

from blockrest.hashing import hash_to_hex, sha256d

MTP_SPAN = 11
DEFAULT_BLOCKHASH = bytes(32)
_HEADER_FORMAT = "<I32s32sIII"
_HEADER_SIZE = 80
_MAX_TARGET = 0xFFFF * 256 ** (0x1D - 3)


def _compact_to_target(bits: int) -> int:
    exponent = bits >> 24
    mantissa = bits & 0x007FFFFF
    if exponent <= 3:
        return mantissa >> (8 * (3 - exponent))
    return mantissa << (8 * (exponent - 3))


@dataclass(frozen=True)
class BlockHeader:
    """An 80-byte block header; hashes are kept as raw internal-order bytes."""

    version: int
    prev_blockhash: bytes
    merkle_root: bytes
    time: int
    bits: int
    nonce: int

    @classmethod
    def parse(cls, data: bytes) -> "BlockHeader":
        if len(data) != _HEADER_SIZE:
            raise ValueError(f"block header must be {_HEADER_SIZE} bytes, got {len(data)}")
        version, prev, merkle, time, bits, nonce = struct.unpack(_HEADER_FORMAT, data)
        return cls(version, prev, merkle, time, bits, nonce)

    def serialize(self) -> bytes:
        return struct.pack(
            _HEADER_FORMAT,
            self.version,
            self.prev_blockhash,
            self.merkle_root,
            self.time,
            self.bits,
            self.nonce,
        )

    def block_hash(self) -> bytes:
        return sha256d(self.serialize())

    def difficulty(self) -> float:
        target = _compact_to_target(self.bits)
        if target == 0:
            raise ZeroDivisionError("header target is zero")
        return _MAX_TARGET / target


@dataclass(frozen=True)
class BlockId:
    height: int
    hash: bytes
    time: int

    @classmethod
    def from_entry(cls, entry: "HeaderEntry") -> "BlockId":
        return cls(entry.height, entry.hash, entry.header.time)


@dataclass(frozen=True)
class HeaderEntry:
    height: int
    hash: bytes
    header: BlockHeader

    def __repr__(self) -> str:
        stamp = datetime.fromtimestamp(self.header.time, tz=timezone.utc)
        text = stamp.isoformat().replace("+00:00", "Z")
        return f"hash={hash_to_hex(self.hash)} height={self.height} @ {text}"


class HeaderList:
    """The best chain of headers, indexed by height and by hash."""

    def __init__(self) -> None:
        self._headers: list[HeaderEntry] = []
        self._heights: dict[bytes, int] = {}
        self._tip: bytes = DEFAULT_BLOCKHASH

    @classmethod
    def empty(cls) -> "HeaderList":
        return cls()

    @classmethod
    def build(cls, headers_map: Mapping[bytes, BlockHeader], tip_hash: bytes) -> "HeaderList":
        """Chain headers back from ``tip_hash``; other headers are dropped as orphans."""
        remaining = dict(headers_map)
        chain: list[BlockHeader] = []
        blockhash = tip_hash
        while blockhash != DEFAULT_BLOCKHASH:
            try:
                header = remaining.pop(blockhash)
            except KeyError:
                raise ValueError(
                    f"missing expected blockhash in headers map: {hash_to_hex(blockhash)}"
                ) from None
            chain.append(header)
            blockhash = header.prev_blockhash
        chain.reverse()
        headers = cls.empty()
        headers.apply(headers.order(chain))
        return headers

    def order(self, new_headers: list[BlockHeader]) -> list[HeaderEntry]:
        hashed = [(header.block_hash(), header) for header in new_headers]
        for (prev_hash, _), (_, header) in zip(hashed, hashed[1:]):
            if header.prev_blockhash != prev_hash:
                raise ValueError("headers do not form a chain")
        if not hashed:
            return []
        prev_blockhash = hashed[0][1].prev_blockhash
        if prev_blockhash == DEFAULT_BLOCKHASH:
            new_height = 0
        else:
            parent = self.header_by_blockhash(prev_blockhash)
            if parent is None:
                raise ValueError(f"{hash_to_hex(prev_blockhash)} is not part of the blockchain")
            new_height = parent.height + 1
        return [
            HeaderEntry(height, blockhash, header)
            for height, (blockhash, header) in enumerate(hashed, start=new_height)
        ]

    def apply(self, new_headers: list[HeaderEntry]) -> None:
        for prev, entry in zip(new_headers, new_headers[1:]):
            if prev.height + 1 != entry.height:
                raise ValueError("non-consecutive header heights")
            if prev.hash != entry.header.prev_blockhash:
                raise ValueError("headers do not form a chain")
        if not new_headers:
            return
        first = new_headers[0]
        new_height = first.height
        if new_height > 0:
            if new_height - 1 >= len(self._headers):
                raise ValueError("new headers do not connect to the chain")
            expected = self._headers[new_height - 1].hash
        else:
            expected = DEFAULT_BLOCKHASH
        if first.header.prev_blockhash != expected:
            raise ValueError("new headers do not connect to the chain")
        del self._headers[new_height:]
        for entry in new_headers:
            self._tip = entry.hash
            self._headers.append(entry)
            self._heights[entry.hash] = entry.height

    def header_by_blockhash(self, blockhash: bytes) -> Optional[HeaderEntry]:
        height = self._heights.get(blockhash)
        if height is None or height >= len(self._headers):
            return None
        entry = self._headers[height]
        return entry if entry.hash == blockhash else None

    def header_by_height(self, height: int) -> Optional[HeaderEntry]:
        if 0 <= height < len(self._headers):
            return self._headers[height]
        return None

    def equals(self, other: "HeaderList") -> bool:
        mine = self._headers[-1] if self._headers else None
        theirs = other._headers[-1] if other._headers else None
        return mine == theirs

    def tip(self) -> bytes:
        expected = self._headers[-1].hash if self._headers else DEFAULT_BLOCKHASH
        if self._tip != expected:
            raise RuntimeError("header list tip is inconsistent")
        return self._tip

    def __len__(self) -> int:
        return len(self._headers)

    def is_empty(self) -> bool:
        return not self._headers

    def __iter__(self) -> Iterator[HeaderEntry]:
        return iter(self._headers)

    def get_mtp(self, height: int) -> int:
        """Return the median time past at ``height`` (0 beyond the tip)."""
        if height == 0:
            return self._headers[0].header.time
        if height > len(self._headers) - 1:
            return 0
        start = max(0, height - (MTP_SPAN - 1))
        times = sorted(entry.header.time for entry in self._headers[start:height + 1])
        return times[len(times) // 2]


@dataclass(frozen=True)
class BlockStatus:
    in_best_chain: bool
    height: Optional[int] = None
    next_best: Optional[bytes] = None

    @classmethod
    def confirmed(cls, height: int, next_best: Optional[bytes]) -> "BlockStatus":
        return cls(True, height, next_best)

    @classmethod
    def orphaned(cls) -> "BlockStatus":
        return cls(False, None, None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "in_best_chain": self.in_best_chain,
            "height": self.height,
            "next_best": hash_to_hex(self.next_best) if self.next_best is not None else None,
        }


def _number_field(value: Mapping[str, Any], name: str) -> int:
    if name not in value:
        raise ValueError(f"missing {name}")
    number = value[name]
    if isinstance(number, bool) or not isinstance(number, (int, float)):
        raise ValueError(f"{name} not a number")
    return int(number)


@dataclass(frozen=True)
class BlockMeta:
    tx_count: int
    size: int
    weight: int

    @classmethod
    def parse_getblock(cls, value: Mapping[str, Any]) -> "BlockMeta":
        return cls(
            tx_count=_number_field(value, "nTx"),
            size=_number_field(value, "size"),
            weight=_number_field(value, "weight"),
        )


@dataclass(frozen=True)
class BlockHeaderMeta:
    header_entry: HeaderEntry
    meta: BlockMeta
    mtp: int = field(default=0)