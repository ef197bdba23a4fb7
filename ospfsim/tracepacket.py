"""Packet of the traffic-aware simulation that records the routers it passed."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import List, Optional

from ospfsim.datapacket import _HEADER, _INT, _LEN, _SHORT_MAX, _SHORT_MIN, _Reader, _check_int32

__all__ = ["OSPFPacket"]


def _encode_string(text: str) -> bytes:
    encoded = text.encode("utf-8")
    return _LEN.pack(len(encoded)) + encoded


def _check_hop(hop: str) -> str:
    if hop is None:
        return ""
    if not isinstance(hop, str):
        raise TypeError(f"hop must be a str, got {type(hop).__name__}")
    return hop


@dataclass
class OSPFPacket:
    """A data message with source, destination, payload and a trace of router hops."""

    name: Optional[str] = None
    kind: int = 0
    src_id: int = 0
    dest_id: int = 0
    payload: str = ""
    hop_trace: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not _SHORT_MIN <= self.kind <= _SHORT_MAX:
            raise ValueError(f"kind {self.kind} does not fit in a short")
        _check_int32(self.src_id, "srcId")
        _check_int32(self.dest_id, "destId")
        if self.payload is None:
            self.payload = ""
        self.hop_trace = [_check_hop(hop) for hop in self.hop_trace]

    def _index_error(self, index: int) -> IndexError:
        return IndexError(f"Array of size {len(self.hop_trace)} indexed by {index}")

    def dup(self) -> "OSPFPacket":
        """Return an independent copy of this packet, hop trace included."""
        return dataclasses.replace(self, hop_trace=list(self.hop_trace))

    def get_hop_trace(self, index: int) -> str:
        """Return the hop recorded at ``index``."""
        if not 0 <= index < len(self.hop_trace):
            raise self._index_error(index)
        return self.hop_trace[index]

    def set_hop_trace(self, index: int, hop: str) -> None:
        """Replace the hop recorded at ``index``."""
        if not 0 <= index < len(self.hop_trace):
            raise self._index_error(index)
        self.hop_trace[index] = _check_hop(hop)

    def insert_hop_trace(self, index: int, hop: str) -> None:
        """Insert a hop before position ``index``; ``index`` may equal the length."""
        if not 0 <= index <= len(self.hop_trace):
            raise self._index_error(index)
        self.hop_trace.insert(index, _check_hop(hop))

    def append_hop_trace(self, hop: str) -> None:
        """Record a hop at the end of the trace."""
        self.insert_hop_trace(len(self.hop_trace), hop)

    def erase_hop_trace(self, index: int) -> None:
        """Remove the hop recorded at ``index``."""
        if not 0 <= index < len(self.hop_trace):
            raise self._index_error(index)
        del self.hop_trace[index]

    def resize_hop_trace(self, size: int) -> None:
        """Truncate the trace, or extend it with empty hops, to ``size`` entries."""
        if size < 0:
            raise ValueError(f"array size must not be negative, got {size}")
        current = len(self.hop_trace)
        if size <= current:
            del self.hop_trace[size:]
        else:
            self.hop_trace.extend([""] * (size - current))

    def to_bytes(self) -> bytes:
        """Serialize the packet into a compact binary form."""
        parts = []
        if self.name is None:
            parts.append(b"\x00")
        else:
            parts.append(b"\x01" + _encode_string(self.name))
        parts.append(_HEADER.pack(self.kind))
        parts.append(_INT.pack(self.src_id))
        parts.append(_INT.pack(self.dest_id))
        parts.append(_encode_string(self.payload))
        parts.append(_LEN.pack(len(self.hop_trace)))
        parts.extend(_encode_string(hop) for hop in self.hop_trace)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "OSPFPacket":
        """Rebuild a packet from the output of :meth:`to_bytes`."""
        reader = _Reader(bytes(data))
        flag = reader.take(1)
        if flag == b"\x00":
            name = None
        elif flag == b"\x01":
            name = reader.string()
        else:
            raise ValueError("malformed packet: bad name marker")
        (kind,) = _HEADER.unpack(reader.take(_HEADER.size))
        (src_id,) = _INT.unpack(reader.take(_INT.size))
        (dest_id,) = _INT.unpack(reader.take(_INT.size))
        payload = reader.string()
        (count,) = _LEN.unpack(reader.take(_LEN.size))
        hops = [reader.string() for _ in range(count)]
        if not reader.exhausted:
            raise ValueError("malformed packet: trailing data")
        return cls(
            name=name,
            kind=kind,
            src_id=src_id,
            dest_id=dest_id,
            payload=payload,
            hop_trace=hops,
        )