# jp2lam

Building blocks for a JPEG 2000 encoder aimed at scanned documents and
web-derived images:

- `jp2lam.mq_encoder` / `jp2lam.mq_decoder`: the MQ binary arithmetic coder
  and its inverse, with the shared 94-entry probability state table.
- `jp2lam.packets`: tier-2 packet containers, packet sequences and tile-part
  payloads.
- `jp2lam.tiles`: tile-part header and tile-part containers.
- `jp2lam.contrast_mask`: 8×8 block contrast masking on a luma plane.
- `jp2lam.taubman`: subband-domain visual masking multipliers.

It uses only the Python standard library.

## Installing

```
pip install .
```

## Arithmetic coding

```python
from jp2lam.mq_encoder import MqCoder, T1_CTXNO_UNI, T1_CTXNO_AGG
from jp2lam.mq_decoder import MqDecoder

coder = MqCoder()
symbols = [(T1_CTXNO_UNI, 1), (T1_CTXNO_AGG, 0), (T1_CTXNO_UNI, 1)]
for ctx, bit in symbols:
    coder.encode_with_ctx(ctx, bit)
data = coder.finish()

decoder = MqDecoder(data)
decoded = [decoder.decode_with_ctx(ctx) for ctx, _ in symbols]
assert decoded == [bit for _, bit in symbols]
```

`encode_with_ctx` raises `ValueError` for a symbol other than 0 or 1.
Besides `finish`, `MqCoder` offers `flush_and_restart` (terminate a pass and
restart the registers while keeping context states), `erterm_flush`
(predictable termination), `segmark_encode` (the 1010 segmentation symbol),
raw bypass coding through `bypass_init`, `bypass_encode`, `bypass_flush` and
`raw_term_flush_and_restart`, and `reset`, `set_state`, `state_index` and
`numbytes` for inspecting or controlling its state. The decoder treats reading
past the end of its input as reading 0xff bytes.

## Packets and tile-parts

```python
from jp2lam.packets import PacketSequenceBuilder
from jp2lam.tiles import TilePart, TilePartHeader

payload = (
    PacketSequenceBuilder()
    .push_header_body_packet(b"\x10\x20", b"\x30")
    .push_opaque_packet(b"\x40\x50")
    .finish_payload()
)
payload.packet_count()   # 2
payload.to_bytes()       # b"\x10\x20\x30\x40\x50"

tile_part = TilePart(TilePartHeader(tile_index=0, part_index=0, total_parts=1),
                     header_segments=[b"\xff\x64\x00\x03\x01"],
                     payload=payload)
```

`TilePartHeader` raises `ValueError` when the tile index does not fit in
16 bits or the part fields do not fit in 8 bits. `TilePartPayload.from_raw_bytes`
wraps bytes as a single opaque packet.

## Perceptual masking

```python
from jp2lam.contrast_mask import (
    SourceRect, average_mask_for_source_rect, build_contrast_mask_map_from_luma_u8,
)
from jp2lam.taubman import TaubmanMaskMap, mean_subband_nu

luma = bytes(range(256)) * 4          # a 32×32 plane
mask_map = build_contrast_mask_map_from_luma_u8(luma, 32, 32)
weight = average_mask_for_source_rect(mask_map, SourceRect(0, 0, 16, 16))

subband = TaubmanMaskMap.from_subband([0.0] * 256, 16, 16, synthesis_norm=2.0)
subband.block_masking_multiplier(0, 0, 16, 16)   # 1.0 for a flat subband
mean_subband_nu(subband)
```

Contrast-mask visibility weights lie between `min_visibility_weight` and
`max_visibility_weight` of `ContrastMaskParams`, except that near-white blocks
(mean luma above 210) are capped lower, down to `white_min_visibility`.
`contrast_mask_for_luma_block8x8`, `dct8x8_luma`, `weighted_dct_energy`,
`variance` and `quadrant_variance_delta` are available for single blocks.

## What this package does not do

It has no image model, no encoding-plan builder, no codestream marker writer
or parser and no JP2 file wrapper, so it cannot turn an image into a `.jp2`
or `.j2k` file on its own. There is no command-line tool.

## Running the tests

```
pip install .[test]
pytest
```