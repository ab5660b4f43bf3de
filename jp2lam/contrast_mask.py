"""Contrast masking over 8x8 luma blocks, after Ponomarenko et al.

Textured regions hide compression artifacts, so they can take more
distortion; smooth regions and clean edges cannot. A DCT-based energy
measure is corrected by a quadrant-variance factor so that sharp edges
are not mistaken for texture.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

# CSF-derived DCT coefficient weights; DC carries no masking weight.
PSNR_HVS_M_CSF_WEIGHTS: tuple[tuple[float, ...], ...] = (
    (0.0000, 0.8264, 1.0000, 0.3906, 0.1736, 0.0625, 0.0384, 0.0269),
    (0.6944, 0.6944, 0.5102, 0.2770, 0.1479, 0.0297, 0.0278, 0.0331),
    (0.5102, 0.5917, 0.3906, 0.1736, 0.0625, 0.0308, 0.0210, 0.0319),
    (0.5102, 0.3460, 0.2066, 0.1189, 0.0384, 0.0132, 0.0156, 0.0260),
    (0.3086, 0.2066, 0.0730, 0.0319, 0.0216, 0.0084, 0.0094, 0.0169),
    (0.1736, 0.0816, 0.0331, 0.0244, 0.0152, 0.0092, 0.0078, 0.0118),
    (0.0416, 0.0244, 0.0164, 0.0132, 0.0094, 0.0068, 0.0069, 0.0098),
    (0.0193, 0.0118, 0.0111, 0.0104, 0.0080, 0.0100, 0.0094, 0.0102),
)

_WHITE_START = 210.0
_WHITE_END = 250.0

# _COS[freq][pos] = cos((2*pos + 1) * freq * pi / 16)
_COS = tuple(
    tuple(math.cos(((2 * pos + 1) * float(freq) * math.pi) / 16.0) for pos in range(8))
    for freq in range(8)
)
_INV_SQRT2 = 1.0 / math.sqrt(2.0)


@dataclass(frozen=True)
class ContrastMaskParams:
    """Strength and limits of contrast masking."""

    masking_divisor: float = 16.0
    strength: float = 0.75
    min_visibility_weight: float = 0.25
    max_visibility_weight: float = 1.0
    variance_epsilon: float = 1e-9
    white_min_visibility: float = 0.05


@dataclass(frozen=True)
class ContrastMask:
    """Masking analysis of one 8x8 block."""

    weighted_energy: float
    edge_delta: float
    masking_energy: float
    normalized_masking: float
    visibility_weight: float


@dataclass
class ContrastMaskMap:
    """Row-major grid of block masks covering a whole image."""

    blocks_x: int
    blocks_y: int
    masks: list[ContrastMask] = field(default_factory=list)
    normalizer: float = 1.0

    def get(self, bx: int, by: int) -> ContrastMask | None:
        if bx < 0 or by < 0 or bx >= self.blocks_x or by >= self.blocks_y:
            return None
        return self.masks[by * self.blocks_x + bx]


@dataclass(frozen=True)
class SourceRect:
    """Half-open image-space rectangle."""

    x0: int
    y0: int
    x1: int
    y1: int


def _check_block(block: Sequence[float]) -> None:
    if len(block) != 64:
        raise ValueError(f"an 8x8 block needs 64 samples, got {len(block)}")


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def dct8x8_luma(block: Sequence[float]) -> list[list[float]]:
    """2-D DCT-II of a row-major 8x8 block; result[u][v] has u along x, v along y."""
    _check_block(block)
    rows = [block[y * 8 : y * 8 + 8] for y in range(8)]
    out = [[0.0] * 8 for _ in range(8)]
    for u in range(8):
        au = _INV_SQRT2 if u == 0 else 1.0
        cos_u = _COS[u]
        for v in range(8):
            av = _INV_SQRT2 if v == 0 else 1.0
            cos_v = _COS[v]
            total = 0.0
            for y, row in enumerate(rows):
                cy = cos_v[y]
                for x, sx in enumerate(row):
                    total += sx * cos_u[x] * cy
            out[u][v] = 0.25 * au * av * total
    return out


def weighted_dct_energy(coeffs: Sequence[Sequence[float]]) -> float:
    """CSF-weighted energy of DCT coefficients."""
    total = 0.0
    for coeff_row, weight_row in zip(coeffs, PSNR_HVS_M_CSF_WEIGHTS):
        for c, w in zip(coeff_row, weight_row):
            total += c * c * w
    return total


def variance(values: Sequence[float]) -> float:
    """Population variance; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    n = float(len(values))
    mean = sum(values) / n
    return sum((v - mean) * (v - mean) for v in values) / n


def quadrant_variance_delta(block: Sequence[float], eps: float) -> float:
    """Mean quadrant variance over whole-block variance, clamped to [0, 1].

    Near 1 for texture, low for clean edges, 0 for flat blocks.
    """
    _check_block(block)
    whole_var = variance(block)
    if whole_var <= eps:
        return 0.0
    quadrants = [
        [block[y * 8 + x] for y in range(y0, y0 + 4) for x in range(x0, x0 + 4)]
        for y0, x0 in ((0, 0), (0, 4), (4, 0), (4, 4))
    ]
    avg_quadrant_var = sum(variance(q) for q in quadrants) / 4.0
    return _clamp(avg_quadrant_var / whole_var, 0.0, 1.0)


def _block_energy(block: Sequence[float], params: ContrastMaskParams) -> tuple[float, float, float]:
    ew = weighted_dct_energy(dct8x8_luma(block))
    delta = quadrant_variance_delta(block, params.variance_epsilon)
    return ew, delta, ew * delta / params.masking_divisor


def _visibility(normalized: float, params: ContrastMaskParams) -> float:
    raw = 1.0 / (1.0 + params.strength * normalized * 4.0)
    return _clamp(raw, params.min_visibility_weight, params.max_visibility_weight)


def contrast_mask_for_luma_block8x8(
    block: Sequence[float], params: ContrastMaskParams = ContrastMaskParams()
) -> ContrastMask:
    """Masking analysis of one row-major 8x8 luma block."""
    ew, delta, masking_energy = _block_energy(block, params)
    normalized = masking_energy / (masking_energy + 1024.0)
    return ContrastMask(
        weighted_energy=ew,
        edge_delta=delta,
        masking_energy=masking_energy,
        normalized_masking=normalized,
        visibility_weight=_visibility(normalized, params),
    )


def _gather_block(luma: Sequence[int], width: int, height: int, x0: int, y0: int) -> list[float]:
    max_x = max(width - 1, 0)
    max_y = max(height - 1, 0)
    block: list[float] = []
    for y in range(8):
        row_off = min(y0 + y, max_y) * width
        block.extend(float(luma[row_off + min(x0 + x, max_x)]) for x in range(8))
    return block


def _percentile(values: list[float], p: float) -> float:
    if not values:
        return 1.0
    ordered = sorted(values)
    idx = math.floor((len(ordered) - 1) * _clamp(p, 0.0, 1.0) + 0.5)
    return ordered[idx]


def build_contrast_mask_map_from_luma_u8(
    luma: Sequence[int],
    width: int,
    height: int,
    params: ContrastMaskParams = ContrastMaskParams(),
) -> ContrastMaskMap:
    """Mask map for a whole luma plane, normalised by the 75th-percentile energy.

    Near-white blocks (mean luma above 210) have their weight capped so the
    rate allocator can let them decode as clean white.
    """
    if len(luma) < width * height:
        raise ValueError(f"luma plane has {len(luma)} samples, expected {width * height}")
    blocks_x = -(-width // 8)
    blocks_y = -(-height // 8)

    raw_blocks: list[tuple[float, float, float, float]] = []
    for by in range(blocks_y):
        for bx in range(blocks_x):
            block = _gather_block(luma, width, height, bx * 8, by * 8)
            mean_luma = sum(block) / 64.0
            ew, delta, masking_energy = _block_energy(block, params)
            raw_blocks.append((ew, delta, masking_energy, mean_luma))

    normalizer = max(_percentile([entry[2] for entry in raw_blocks], 0.75), 1.0)

    masks: list[ContrastMask] = []
    for ew, delta, masking_energy, mean_luma in raw_blocks:
        normalized = masking_energy / (masking_energy + normalizer)
        visibility = _visibility(normalized, params)
        if mean_luma > _WHITE_START:
            fade = _clamp((mean_luma - _WHITE_START) / (_WHITE_END - _WHITE_START), 0.0, 1.0)
            white_ceil = (
                params.min_visibility_weight * (1.0 - fade) + params.white_min_visibility * fade
            )
            visibility = min(visibility, white_ceil)
        masks.append(ContrastMask(ew, delta, masking_energy, normalized, visibility))

    return ContrastMaskMap(blocks_x, blocks_y, masks, normalizer)


def average_mask_for_source_rect(mask_map: ContrastMaskMap, rect: SourceRect) -> float:
    """Mean visibility weight of the blocks a rectangle touches; 1.0 if none."""
    bx0 = rect.x0 // 8
    by0 = rect.y0 // 8
    bx1 = min((rect.x1 + 7) // 8, mask_map.blocks_x)
    by1 = min((rect.y1 + 7) // 8, mask_map.blocks_y)
    weights = [
        mask.visibility_weight
        for by in range(by0, by1)
        for bx in range(bx0, bx1)
        if (mask := mask_map.get(bx, by)) is not None
    ]
    if not weights:
        return 1.0
    return sum(weights) / len(weights)