import pytest

from ospfsim.descriptor import OSPFPacketDescriptor
from ospfsim.tracepacket import OSPFPacket


@pytest.fixture
def desc():
    return OSPFPacketDescriptor()


def test_field_names_in_order(desc):
    names = [desc.field_name(i) for i in range(desc.field_count())]
    assert names == ["srcId", "destId", "payload", "hopTrace"]


def test_find_field_round_trips(desc):
    for i in range(desc.field_count()):
        assert desc.find_field(desc.field_name(i)) == i


def test_unknown_field_lookups(desc):
    assert desc.find_field("nope") == -1
    assert desc.field_name(desc.field_count()) is None
    assert desc.field_name(-1) is None
    assert desc.field_type(desc.field_count()) is None


def test_field_types(desc):
    types = [desc.field_type(i) for i in range(desc.field_count())]
    assert types == ["int", "int", "string", "string"]
    assert desc.field_type("hopTrace") == "string"


def test_only_hop_trace_is_array(desc):
    arrays = [desc.field_name(i) for i in range(desc.field_count()) if desc.is_array(i)]
    assert arrays == ["hopTrace"]


def test_array_size_reflects_hop_trace(desc):
    pkt = OSPFPacket(hop_trace=["r1", "r2"])
    hop = desc.find_field("hopTrace")
    assert desc.array_size(pkt, hop) == len(pkt.hop_trace)
    assert desc.array_size(pkt, desc.find_field("payload")) == 0


def test_set_array_size_grows_and_shrinks(desc):
    pkt = OSPFPacket(hop_trace=["r1"])
    desc.set_array_size(pkt, "hopTrace", 3)
    assert pkt.hop_trace == ["r1", "", ""]
    desc.set_array_size(pkt, "hopTrace", 0)
    assert pkt.hop_trace == []


def test_set_array_size_on_scalar_fails(desc):
    with pytest.raises(ValueError):
        desc.set_array_size(OSPFPacket(), "srcId", 2)


def test_int_field_string_round_trip(desc):
    pkt = OSPFPacket()
    desc.set_value_as_string(pkt, "srcId", 0, " 42 ")
    desc.set_value_as_string(pkt, "destId", 0, "-7")
    assert pkt.src_id == 42
    assert pkt.dest_id == -7
    assert desc.value_as_string(pkt, "srcId") == "42"
    assert desc.value_as_string(pkt, "destId") == "-7"


def test_payload_and_hop_round_trip(desc):
    pkt = OSPFPacket(hop_trace=["r1", "r2"])
    desc.set_value_as_string(pkt, "payload", 0, "Hello")
    desc.set_value_as_string(pkt, "hopTrace", 1, "r9")
    assert desc.value_as_string(pkt, "payload") == "Hello"
    assert desc.value_as_string(pkt, "hopTrace", 1) == "r9"
    assert pkt.hop_trace == ["r1", "r9"]


def test_hop_index_out_of_range(desc):
    pkt = OSPFPacket(hop_trace=["r1"])
    with pytest.raises(IndexError):
        desc.value_as_string(pkt, "hopTrace", 1)
    with pytest.raises(IndexError):
        desc.set_value_as_string(pkt, "hopTrace", 5, "r2")


def test_bad_int_values_rejected(desc):
    pkt = OSPFPacket()
    with pytest.raises(ValueError):
        desc.set_value_as_string(pkt, "srcId", 0, "abc")
    with pytest.raises(ValueError):
        desc.set_value_as_string(pkt, "destId", 0, "2147483648")
    assert pkt.src_id == 0


def test_unknown_field_value_access(desc):
    pkt = OSPFPacket(payload="x")
    assert desc.value_as_string(pkt, 99) == ""
    with pytest.raises(ValueError):
        desc.set_value_as_string(pkt, 99, 0, "1")


def test_wrong_object_type(desc):
    with pytest.raises(TypeError):
        desc.value_as_string(object(), "srcId")