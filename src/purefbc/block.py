"""Decoded pixel blocks and the output orders of both vendors"""
from typing import List
import numpy as np
from numba import jit

PIXELS_PER_CACHELINE = 16
CACHELINE_BYTES = PIXELS_PER_CACHELINE * 4

# Gen11 logical pixel index -> output slot. Pixels are coded 2x2 block by
# 2x2 block; the output cacheline stores them row-major within 4x2 tiles.
BLOCK_ORDER = np.array([
     0,  1,  4,  5,  2,  3,  6,  7,
     8,  9, 12, 13, 10, 11, 14, 15,
    16, 17, 20, 21, 18, 19, 22, 23,
    24, 25, 28, 29, 26, 27, 30, 31,
], dtype=np.intp)

_ORDINALS = ("First", "Second", "Third", "Fourth")


@jit(nopython=True, cache=True)
def _write_quadrants(upper, lower, output, start):
    """
    Write one DCC cacheline in quadrant order, converting G/Cr/Cb/A to RGBA.

    upper and lower are (4 channels, 8 columns) planes; quadrants are
    upper-left, lower-left, upper-right, lower-right.
    """
    index = start
    for half in range(2):
        for row in range(2):
            plane = upper if row == 0 else lower
            for column in range(half * 4, half * 4 + 4):
                g = plane[0, column]
                output[index, 0] = (plane[1, column] + g) & 0xFF
                output[index, 1] = g
                output[index, 2] = (plane[2, column] + g) & 0xFF
                output[index, 3] = plane[3, column]
                index += 1


def write_dcc_cacheline(upper: np.ndarray, lower: np.ndarray, output: np.ndarray, cacheline: int) -> None:
    """Assemble the reconstructed channel planes of one DCC cacheline into output"""
    _write_quadrants(upper, lower, output, cacheline * PIXELS_PER_CACHELINE)


def scatter_block_order(logical: np.ndarray) -> np.ndarray:
    """Move gen11 pixels from coding order to their output slots"""
    output = np.zeros_like(logical)
    output[BLOCK_ORDER] = logical
    return output


class PixelBlock:
    """
    RGBA8 pixels produced by one decode, in the format's output order.

    The order is not raster order: DCC blocks are quadrant-major per
    cacheline, gen11 CCS blocks follow BLOCK_ORDER.
    """

    def __init__(self, pixels: np.ndarray) -> None:
        pixels = np.asarray(pixels, dtype=np.uint8)
        if pixels.ndim != 2 or pixels.shape[1] != 4 or pixels.shape[0] % PIXELS_PER_CACHELINE:
            raise ValueError(f"Pixel block must be (16*n, 4) RGBA8, got shape {pixels.shape}")
        self.pixels: np.ndarray = pixels

    def __len__(self) -> int:
        return self.pixels.shape[0]

    def __repr__(self) -> str:
        return f"PixelBlock({len(self)} pixels, {self.cacheline_count} cachelines)"

    @property
    def cacheline_count(self) -> int:
        return len(self) // PIXELS_PER_CACHELINE

    def cachelines(self) -> List[np.ndarray]:
        """Split into 16-pixel (64-byte) output cachelines"""
        return list(self.pixels.reshape(self.cacheline_count, PIXELS_PER_CACHELINE, 4))

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_hex(self) -> str:
        """Hex dump in labeled cacheline sections, 16 bytes per line"""
        sections = []
        for index, cacheline in enumerate(self.cachelines()):
            label = _ORDINALS[index] if index < len(_ORDINALS) else f"Cacheline {index + 1}"
            raw = cacheline.tobytes()
            lines = [
                " ".join(f"{byte:02X}" for byte in raw[offset:offset + 16])
                for offset in range(0, len(raw), 16)
            ]
            sections.append(f"{label} cacheline:\n" + "\n".join(lines) + "\n")
        return "\n".join(sections)

    def to_image(self) -> np.ndarray:
        """
        Image preview: one row per output cacheline, 16 pixels per row.

        Returns:
            numpy array of shape (cachelines, 16, 4) with dtype uint8 (RGBA)
        """
        return self.pixels.reshape(self.cacheline_count, PIXELS_PER_CACHELINE, 4).copy()
