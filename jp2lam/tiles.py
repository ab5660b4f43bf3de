"""Tile-part header and tile-part containers."""

from __future__ import annotations

from dataclasses import dataclass, field

from jp2lam.packets import TilePartPayload


@dataclass(frozen=True)
class TilePartHeader:
    """The SOT fields that identify a tile-part."""

    tile_index: int
    part_index: int
    total_parts: int

    def __post_init__(self) -> None:
        if not 0 <= self.tile_index <= 0xFFFF:
            raise ValueError(f"tile_index {self.tile_index} out of 16-bit range")
        for name in ("part_index", "total_parts"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} {value} out of 8-bit range")


@dataclass
class TilePart:
    header: TilePartHeader
    header_segments: list[bytes] = field(default_factory=list)
    payload: TilePartPayload = field(default_factory=lambda: TilePartPayload.from_raw_bytes(b""))