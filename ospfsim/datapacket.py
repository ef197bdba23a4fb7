"""Data packet exchanged between routers of the static-topology simulation."""

from __future__ import annotations

import dataclasses
import struct
from dataclasses import dataclass
from typing import Optional, Union

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_SHORT_MIN = -(2**15)
_SHORT_MAX = 2**15 - 1

FIELD_NAMES = ("srcId", "destId", "payload")
FIELD_TYPES = ("int", "int", "string")

_HEADER = struct.Struct(">h")
_INT = struct.Struct(">i")
_LEN = struct.Struct(">I")

FieldRef = Union[int, str]


def _check_int32(value: int, what: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{what} must be an int, got {type(value).__name__}")
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"{what} {value} does not fit in a 32-bit int")
    return value


def _field_index(field: FieldRef) -> int:
    if isinstance(field, str):
        try:
            return FIELD_NAMES.index(field)
        except ValueError:
            return -1
    return field


@dataclass
class DataPacket:
    """A message carrying a payload from a source router to a destination router."""

    name: Optional[str] = None
    kind: int = 0
    src_id: int = 0
    dest_id: int = 0
    payload: str = ""

    def __post_init__(self) -> None:
        if not _SHORT_MIN <= self.kind <= _SHORT_MAX:
            raise ValueError(f"kind {self.kind} does not fit in a short")
        _check_int32(self.src_id, "srcId")
        _check_int32(self.dest_id, "destId")
        if self.payload is None:
            self.payload = ""

    def dup(self) -> "DataPacket":
        """Return an independent copy of this packet."""
        return dataclasses.replace(self)

    def field_value_as_string(self, field: FieldRef) -> str:
        """Return the value of a field, given by name or index, as a string.

        Unknown fields yield an empty string.
        """
        index = _field_index(field)
        if index == 0:
            return str(self.src_id)
        if index == 1:
            return str(self.dest_id)
        if index == 2:
            return self.payload
        return ""

    def set_field_value_as_string(self, field: FieldRef, value: str) -> None:
        """Set a field, given by name or index, from its string form."""
        index = _field_index(field)
        if index == 0:
            self.src_id = _check_int32(int(value.strip()), "srcId")
        elif index == 1:
            self.dest_id = _check_int32(int(value.strip()), "destId")
        elif index == 2:
            self.payload = "" if value is None else value
        else:
            raise ValueError(f"Cannot set field {field!r} of class 'DataPacket'")

    def to_bytes(self) -> bytes:
        """Serialize the packet into a compact binary form."""
        parts = []
        if self.name is None:
            parts.append(b"\x00")
        else:
            encoded = self.name.encode("utf-8")
            parts.append(b"\x01" + _LEN.pack(len(encoded)) + encoded)
        parts.append(_HEADER.pack(self.kind))
        parts.append(_INT.pack(self.src_id))
        parts.append(_INT.pack(self.dest_id))
        payload = self.payload.encode("utf-8")
        parts.append(_LEN.pack(len(payload)) + payload)
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DataPacket":
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
        if not reader.exhausted:
            raise ValueError("malformed packet: trailing data")
        return cls(name=name, kind=kind, src_id=src_id, dest_id=dest_id, payload=payload)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def exhausted(self) -> bool:
        return self._pos == len(self._data)

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise ValueError("malformed packet: truncated data")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def string(self) -> str:
        (length,) = _LEN.unpack(self.take(_LEN.size))
        try:
            return self.take(length).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("malformed packet: invalid text") from exc