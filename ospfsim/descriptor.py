"""Reflective field access for :class:`~ospfsim.tracepacket.OSPFPacket`."""

from __future__ import annotations

from typing import NamedTuple, Optional, Union

from ospfsim.datapacket import _check_int32
from ospfsim.tracepacket import OSPFPacket

__all__ = ["OSPFPacketDescriptor"]

FieldRef = Union[int, str]


class _Field(NamedTuple):
    name: str
    type_name: str
    is_array: bool


_FIELDS = (
    _Field("srcId", "int", False),
    _Field("destId", "int", False),
    _Field("payload", "string", False),
    _Field("hopTrace", "string", True),
)

_SRC_ID, _DEST_ID, _PAYLOAD, _HOP_TRACE = range(len(_FIELDS))


def _packet(obj: object) -> OSPFPacket:
    if not isinstance(obj, OSPFPacket):
        raise TypeError(f"expected an OSPFPacket, got {type(obj).__name__}")
    return obj


class OSPFPacketDescriptor:
    """Describes the fields of an OSPFPacket and reads or writes them as strings."""

    def _index(self, field: FieldRef) -> int:
        if isinstance(field, str):
            return self.find_field(field)
        return field

    def field_count(self) -> int:
        """Return the number of fields."""
        return len(_FIELDS)

    def field_name(self, field: int) -> Optional[str]:
        """Return the name of a field, or None when the index is out of range."""
        if 0 <= field < len(_FIELDS):
            return _FIELDS[field].name
        return None

    def find_field(self, name: str) -> int:
        """Return the index of the named field, or -1 when there is none."""
        for index, spec in enumerate(_FIELDS):
            if spec.name == name:
                return index
        return -1

    def field_type(self, field: FieldRef) -> Optional[str]:
        """Return the declared type of a field, or None when it does not exist."""
        index = self._index(field)
        if 0 <= index < len(_FIELDS):
            return _FIELDS[index].type_name
        return None

    def is_array(self, field: FieldRef) -> bool:
        """Tell whether a field is a resizable array."""
        index = self._index(field)
        return 0 <= index < len(_FIELDS) and _FIELDS[index].is_array

    def array_size(self, obj: OSPFPacket, field: FieldRef) -> int:
        """Return the length of an array field; scalar fields report 0."""
        packet = _packet(obj)
        if self._index(field) == _HOP_TRACE:
            return len(packet.hop_trace)
        return 0

    def set_array_size(self, obj: OSPFPacket, field: FieldRef, size: int) -> None:
        """Resize an array field."""
        packet = _packet(obj)
        index = self._index(field)
        if index != _HOP_TRACE:
            raise ValueError(f"Cannot set array size of field {field} of class 'OSPFPacket'")
        packet.resize_hop_trace(size)

    def value_as_string(self, obj: OSPFPacket, field: FieldRef, index: int = 0) -> str:
        """Return a field value as a string; unknown fields yield an empty string."""
        packet = _packet(obj)
        which = self._index(field)
        if which == _SRC_ID:
            return str(packet.src_id)
        if which == _DEST_ID:
            return str(packet.dest_id)
        if which == _PAYLOAD:
            return packet.payload
        if which == _HOP_TRACE:
            return packet.get_hop_trace(index)
        return ""

    def set_value_as_string(
        self, obj: OSPFPacket, field: FieldRef, index: int, value: str
    ) -> None:
        """Set a field from its string form."""
        packet = _packet(obj)
        which = self._index(field)
        if which == _SRC_ID:
            packet.src_id = _check_int32(int(value.strip()), "srcId")
        elif which == _DEST_ID:
            packet.dest_id = _check_int32(int(value.strip()), "destId")
        elif which == _PAYLOAD:
            packet.payload = "" if value is None else value
        elif which == _HOP_TRACE:
            packet.set_hop_trace(index, value)
        else:
            raise ValueError(f"Cannot set field {field} of class 'OSPFPacket'")