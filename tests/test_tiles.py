import pytest

from jp2lam.packets import TilePartPayload
from jp2lam.tiles import TilePart, TilePartHeader


def test_header_equality():
    assert TilePartHeader(0, 0, 1) == TilePartHeader(tile_index=0, part_index=0, total_parts=1)
    assert TilePartHeader(0, 0, 1) != TilePartHeader(1, 0, 1)


@pytest.mark.parametrize(
    "args",
    [(-1, 0, 0), (0x10000, 0, 0), (0, 256, 0), (0, 0, 256), (0, -1, 0)],
)
def test_header_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        TilePartHeader(*args)


def test_header_accepts_limits():
    header = TilePartHeader(0xFFFF, 0xFF, 0xFF)
    assert header.tile_index == 0xFFFF
    assert header.total_parts == 0xFF


def test_tile_part_holds_segments_and_payload():
    segments = [b"\xff\x64\x00\x03\x01"]
    part = TilePart(
        header=TilePartHeader(0, 0, 0),
        header_segments=segments,
        payload=TilePartPayload.from_raw_bytes(b"\xde\xad"),
    )
    assert part.header_segments == segments
    assert part.payload.to_bytes() == b"\xde\xad"


def test_tile_part_default_payload_is_empty():
    part = TilePart(TilePartHeader(0, 0, 0))
    assert part.payload.byte_len() == 0
    assert part.header_segments == []