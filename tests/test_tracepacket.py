import pytest

from ospfsim.tracepacket import OSPFPacket


def _packet():
    return OSPFPacket(
        name="data",
        src_id=1,
        dest_id=7,
        payload="Hello from r1 to r7",
        hop_trace=["r1", "r3"],
    )


def test_defaults_are_empty():
    pkt = OSPFPacket()
    assert (pkt.src_id, pkt.dest_id, pkt.payload, pkt.hop_trace) == (0, 0, "", [])


def test_append_records_hops_in_order():
    pkt = OSPFPacket(src_id=1, dest_id=7)
    for hop in ("r1", "r3", "r5", "r7"):
        pkt.append_hop_trace(hop)
    assert pkt.hop_trace == ["r1", "r3", "r5", "r7"]
    assert pkt.get_hop_trace(2) == "r5"


def test_get_out_of_range_raises():
    pkt = _packet()
    with pytest.raises(IndexError, match="Array of size 2 indexed by 2"):
        pkt.get_hop_trace(2)


def test_get_negative_raises():
    with pytest.raises(IndexError):
        _packet().get_hop_trace(-1)


def test_set_replaces_entry():
    pkt = _packet()
    pkt.set_hop_trace(1, "r2")
    assert pkt.hop_trace == ["r1", "r2"]


def test_set_out_of_range_raises():
    pkt = OSPFPacket()
    with pytest.raises(IndexError):
        pkt.set_hop_trace(0, "r1")


def test_insert_at_front_middle_and_end():
    pkt = _packet()
    pkt.insert_hop_trace(0, "r0")
    pkt.insert_hop_trace(2, "r2")
    pkt.insert_hop_trace(4, "r4")
    assert pkt.hop_trace == ["r0", "r1", "r2", "r3", "r4"]


def test_insert_past_end_raises():
    pkt = _packet()
    with pytest.raises(IndexError):
        pkt.insert_hop_trace(3, "r9")
    assert pkt.hop_trace == ["r1", "r3"]


def test_erase_removes_entry():
    pkt = _packet()
    pkt.erase_hop_trace(0)
    assert pkt.hop_trace == ["r3"]
    pkt.erase_hop_trace(0)
    assert pkt.hop_trace == []


def test_erase_out_of_range_raises():
    pkt = OSPFPacket()
    with pytest.raises(IndexError):
        pkt.erase_hop_trace(0)


def test_resize_grows_with_empty_hops_and_shrinks():
    pkt = _packet()
    pkt.resize_hop_trace(4)
    assert pkt.hop_trace == ["r1", "r3", "", ""]
    pkt.resize_hop_trace(1)
    assert pkt.hop_trace == ["r1"]
    pkt.resize_hop_trace(0)
    assert pkt.hop_trace == []


def test_resize_negative_raises():
    with pytest.raises(ValueError):
        _packet().resize_hop_trace(-1)


def test_dup_is_independent():
    original = _packet()
    copy = original.dup()
    assert copy == original
    copy.append_hop_trace("r5")
    copy.payload = "changed"
    assert original.hop_trace == ["r1", "r3"]
    assert original.payload == "Hello from r1 to r7"


def test_round_trip_bytes():
    pkt = _packet()
    assert OSPFPacket.from_bytes(pkt.to_bytes()) == pkt


def test_round_trip_without_name_and_trace():
    pkt = OSPFPacket(src_id=-5, dest_id=2**31 - 1, payload="Random traffic")
    restored = OSPFPacket.from_bytes(pkt.to_bytes())
    assert restored == pkt
    assert restored.name is None


def test_round_trip_unicode_hops():
    pkt = OSPFPacket(payload="héllo", hop_trace=["rå", ""])
    assert OSPFPacket.from_bytes(pkt.to_bytes()).hop_trace == ["rå", ""]


def test_wire_bytes_of_empty_packet():
    assert OSPFPacket().to_bytes() == bytes(1 + 2 + 4 + 4 + 4 + 4)


def test_truncated_bytes_rejected():
    data = _packet().to_bytes()
    with pytest.raises(ValueError):
        OSPFPacket.from_bytes(data[:-1])


def test_trailing_bytes_rejected():
    data = _packet().to_bytes()
    with pytest.raises(ValueError):
        OSPFPacket.from_bytes(data + b"\x00")


def test_bad_name_marker_rejected():
    data = _packet().to_bytes()
    with pytest.raises(ValueError):
        OSPFPacket.from_bytes(b"\x07" + data[1:])


def test_out_of_range_ids_rejected():
    with pytest.raises(ValueError):
        OSPFPacket(dest_id=2**31)
    with pytest.raises(ValueError):
        OSPFPacket(kind=2**15)


def test_non_int_id_rejected():
    with pytest.raises(TypeError):
        OSPFPacket(src_id="1")