from jp2lam.packets import (
    Packet,
    PacketSequence,
    PacketSequenceBuilder,
    TilePartPayload,
)


def test_packet_sequence_preserves_opaque_bytes():
    seq = PacketSequence([Packet.opaque(bytes([0xDE, 0xAD])), Packet.opaque(bytes([0xBE, 0xEF]))])
    assert seq.packet_count() == 2
    assert seq.byte_len() == 4
    assert seq.to_bytes() == bytes([0xDE, 0xAD, 0xBE, 0xEF])


def test_header_body_packet_writes_in_order():
    packet = Packet.header_body(bytes([0x01, 0x02]), bytes([0xA0, 0xB0, 0xC0]))
    assert packet.byte_len() == 5
    assert packet.to_bytes() == bytes([0x01, 0x02, 0xA0, 0xB0, 0xC0])
    assert packet.is_opaque is False


def test_opaque_packet_is_opaque():
    packet = Packet.opaque(b"\x01\x02")
    assert packet.is_opaque is True
    assert packet.to_bytes() == b"\x01\x02"


def test_payload_from_packets_preserves_header_body_order():
    payload = TilePartPayload.from_packets(
        [Packet.header_body(bytes([0x01, 0x02]), bytes([0xA0])), Packet.opaque(bytes([0xBB, 0xCC]))]
    )
    assert payload.packet_count() == 2
    assert payload.byte_len() == 5
    assert payload.to_bytes() == bytes([0x01, 0x02, 0xA0, 0xBB, 0xCC])


def test_payload_from_raw_bytes_is_single_packet():
    payload = TilePartPayload.from_raw_bytes(b"\xde\xad\xbe\xef")
    assert payload.packet_count() == 1
    assert payload.byte_len() == 4
    assert payload.to_bytes() == b"\xde\xad\xbe\xef"


def test_builder_constructs_mixed_packet_sequence():
    payload = (
        PacketSequenceBuilder()
        .push_header_body_packet(bytes([0x01]), bytes([0xA0, 0xA1]))
        .push_opaque_packet(bytes([0xBE, 0xEF]))
        .finish_payload()
    )
    assert payload.packet_count() == 2
    assert payload.byte_len() == 5
    assert payload.to_bytes() == bytes([0x01, 0xA0, 0xA1, 0xBE, 0xEF])


def test_builder_packet_count_and_finish():
    builder = PacketSequenceBuilder().push_opaque_packet(b"a").push_opaque_packet(b"bc")
    assert builder.packet_count() == 2
    seq = builder.finish()
    assert seq.to_bytes() == b"abc"
    assert seq.packet_count() == 2