"""Subband-domain visual masking after Taubman's EBCOT paper.

For each 8x8 cell of subband coefficients, nu is the mean of
norm * |coefficient|; the perceptual weight of the cell is
1 / (nu^2 + f^2) with f^2 = 1/512.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

F_SQUARED = 1.0 / 512.0
CELL_SIZE = 8


def _div_ceil(a: int, b: int) -> int:
    return -(-a // b)


@dataclass
class TaubmanMaskMap:
    """Per-cell activity values for one subband."""

    cell_cols: int
    cell_rows: int
    cell_nu: list[float] = field(default_factory=list)

    @classmethod
    def from_subband(
        cls,
        coeffs: Sequence[float],
        width: int,
        height: int,
        synthesis_norm: float,
    ) -> TaubmanMaskMap:
        """Compute the map from row-major coefficients with stride ``width``."""
        cell_cols = _div_ceil(width, CELL_SIZE)
        cell_rows = _div_ceil(height, CELL_SIZE)
        cell_nu: list[float] = []
        for row_start in range(0, cell_rows * CELL_SIZE, CELL_SIZE):
            row_end = min(row_start + CELL_SIZE, height)
            for col_start in range(0, cell_cols * CELL_SIZE, CELL_SIZE):
                col_end = min(col_start + CELL_SIZE, width)
                values = [
                    synthesis_norm * abs(v)
                    for row in range(row_start, row_end)
                    for v in coeffs[row * width + col_start : row * width + col_end]
                ]
                cell_nu.append(sum(values) / len(values) if values else 0.0)
        return cls(cell_cols, cell_rows, cell_nu)

    def visibility_divisor(self, cell_row: int, cell_col: int) -> float:
        """nu^2 + f^2 for one cell."""
        nu = self.cell_nu[cell_row * self.cell_cols + cell_col]
        return nu * nu + F_SQUARED

    def block_masking_multiplier(
        self, block_col: int, block_row: int, block_w: int, block_h: int
    ) -> float:
        """Mean of 1/(nu^2+f^2) over the cells a block overlaps, scaled into (0, 1].

        1.0 means perfectly flat (no masking); values near 0 mean strong masking.
        """
        col_start = block_col // CELL_SIZE
        col_end = min(_div_ceil(block_col + block_w, CELL_SIZE), self.cell_cols)
        row_start = block_row // CELL_SIZE
        row_end = min(_div_ceil(block_row + block_h, CELL_SIZE), self.cell_rows)

        inverses = [
            1.0 / self.visibility_divisor(cr, cc)
            for cr in range(row_start, row_end)
            for cc in range(col_start, col_end)
        ]
        if not inverses:
            return 1.0
        mean_inv = sum(inverses) / len(inverses)
        return min(max(mean_inv * F_SQUARED, 0.0), 1.0)


def mean_subband_nu(mask: TaubmanMaskMap) -> float:
    """Average cell activity across a whole subband."""
    if not mask.cell_nu:
        return 0.0
    return sum(mask.cell_nu) / len(mask.cell_nu)