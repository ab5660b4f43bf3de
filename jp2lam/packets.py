"""Tier-2 packet containers and tile-part payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class Packet:
    """One packet: either opaque bytes or a header followed by a body."""

    header: bytes
    body: bytes | None = None

    @classmethod
    def opaque(cls, data: bytes) -> Packet:
        return cls(bytes(data))

    @classmethod
    def header_body(cls, header: bytes, body: bytes) -> Packet:
        return cls(bytes(header), bytes(body))

    @property
    def is_opaque(self) -> bool:
        return self.body is None

    def byte_len(self) -> int:
        return len(self.header) + len(self.body or b"")

    def to_bytes(self) -> bytes:
        return self.header + (self.body or b"")


@dataclass(frozen=True)
class PacketSequence:
    packets: tuple[Packet, ...] = ()

    def __init__(self, packets: Iterable[Packet] = ()) -> None:
        object.__setattr__(self, "packets", tuple(packets))

    @classmethod
    def from_opaque_bytes(cls, data: bytes) -> PacketSequence:
        return cls([Packet.opaque(data)])

    def byte_len(self) -> int:
        return sum(packet.byte_len() for packet in self.packets)

    def packet_count(self) -> int:
        return len(self.packets)

    def to_bytes(self) -> bytes:
        return b"".join(packet.to_bytes() for packet in self.packets)


@dataclass(frozen=True)
class TilePartPayload:
    """The bytes that follow SOD in a tile-part."""

    sequence: PacketSequence

    @classmethod
    def from_raw_bytes(cls, data: bytes) -> TilePartPayload:
        return cls(PacketSequence.from_opaque_bytes(data))

    @classmethod
    def from_packet_sequence(cls, sequence: PacketSequence) -> TilePartPayload:
        return cls(sequence)

    @classmethod
    def from_packets(cls, packets: Iterable[Packet]) -> TilePartPayload:
        return cls(PacketSequence(packets))

    def byte_len(self) -> int:
        return self.sequence.byte_len()

    def packet_count(self) -> int:
        return self.sequence.packet_count()

    def to_bytes(self) -> bytes:
        return self.sequence.to_bytes()


@dataclass
class PacketSequenceBuilder:
    """Accumulates packets; push methods return the builder for chaining."""

    packets: list[Packet] = field(default_factory=list)

    def push_opaque_packet(self, data: bytes) -> PacketSequenceBuilder:
        self.packets.append(Packet.opaque(data))
        return self

    def push_header_body_packet(self, header: bytes, body: bytes) -> PacketSequenceBuilder:
        self.packets.append(Packet.header_body(header, body))
        return self

    def packet_count(self) -> int:
        return len(self.packets)

    def finish(self) -> PacketSequence:
        return PacketSequence(self.packets)

    def finish_payload(self) -> TilePartPayload:
        return TilePartPayload.from_packet_sequence(self.finish())