"""Intel CCS (compression control surface) decoders, gen8 and gen11"""
import logging
from typing import Callable, List, NamedTuple, Optional, Tuple
import numpy as np

from .base import CachelineDecoder
from ..bitstream import CACHELINE_BITS, BitAccumulator, BitCursor
from ..block import PixelBlock, scatter_block_order
from ..enums import FormatFamily
from ..errors import FormatViolation, InvariantViolation
from ..modes import DecodeMode, lookup_ccs_mode

logger = logging.getLogger(__name__)

BLOCK_PIXELS = 32
MAX_CHANNEL_BITS = 8
BASE_BITS = 32

GEN8_TRAILER_BITS = 16

# Prediction flag, extension flags and three 4-bit widths
GEN11_HEADER_BITS = 1 + 8 + 3 * 4

SUBWINDOWS = 8
SUBWINDOW_PIXELS = 4
UNIFORM_SUBWINDOWS = 4
EXTENSION_ENTRIES = UNIFORM_SUBWINDOWS + (SUBWINDOWS - UNIFORM_SUBWINDOWS) * SUBWINDOW_PIXELS
EXTENSION_ENTRY_BITS = 22
EXTENSION_FIRST_PASS_BITS = 14
EXTENSION_PADDING_BITS = 19


class ChannelWidths(NamedTuple):
    """Per-pixel delta widths; unused is the must-be-zero tail of each pixel"""
    r: int
    g: int
    b: int
    a: int
    unused: int = 0


class BaseColor(NamedTuple):
    r: int
    g: int
    b: int
    a: int


Pixel = Tuple[int, int, int, int]


def _read_gen11_widths(cursor: BitCursor, inter_pred: int, budget: int) -> ChannelWidths:
    """
    Read the three 4-bit color widths; alpha gets what is left of budget.

    Alpha is capped at 8 bits and anything beyond is per-pixel padding.
    Under inter-channel prediction the fields are stored B, R, G.
    """
    if inter_pred:
        b = cursor.read_bits(4)
        r = cursor.read_bits(4)
        g = cursor.read_bits(4)
    else:
        r = cursor.read_bits(4)
        g = cursor.read_bits(4)
        b = cursor.read_bits(4)

    for name, width in (("R", r), ("G", g), ("B", b)):
        if width > MAX_CHANNEL_BITS:
            raise InvariantViolation(f"Channel {name} delta width {width} exceeds {MAX_CHANNEL_BITS} bits")
    if r + g + b > budget:
        raise InvariantViolation(f"Delta widths R={r} G={g} B={b} exceed the {budget}-bit pixel budget")

    a = budget - (r + g + b)
    unused = 0
    if a > MAX_CHANNEL_BITS:
        unused = a - MAX_CHANNEL_BITS
        a = MAX_CHANNEL_BITS
    return ChannelWidths(r, g, b, a, unused)


def _read_gen11_bases(cursor: BitCursor, inter_pred: int) -> BaseColor:
    if inter_pred:
        b = cursor.read_bits(8)
        r = cursor.read_bits(8)
        g = cursor.read_bits(8)
    else:
        r = cursor.read_bits(8)
        g = cursor.read_bits(8)
        b = cursor.read_bits(8)
    return BaseColor(r, g, b, cursor.read_bits(8))


def _decode_pixel(read: Callable[[int], int], discard: Callable[[int], None],
                  widths: ChannelWidths, base: BaseColor, inter_pred: int) -> Pixel:
    """
    Decode one gen11 pixel from read/discard over a cursor or accumulator.

    With inter-channel prediction, blue is coded first, red is predicted
    from blue and green from the mean of blue and red.
    """
    if inter_pred:
        b = (base.b + read(widths.b)) & 0xFF
        r = (base.r + b + read(widths.r)) & 0xFF
        g = (base.g + (b + r) // 2 + read(widths.g)) & 0xFF
    else:
        r = (base.r + read(widths.r)) & 0xFF
        g = (base.g + read(widths.g)) & 0xFF
        b = (base.b + read(widths.b)) & 0xFF
    a = (base.a + read(widths.a)) & 0xFF
    discard(widths.unused)
    return r, g, b, a


def decode_gen8(cursor: BitCursor) -> np.ndarray:
    """
    Gen8 layout: 4 skip flags, 4 base bytes, 4 3-bit widths, then 32 pixels
    of 14 bits each and a 16-bit zero trailer. Pixels are in linear order.
    """
    skips = [cursor.read_bits(1) for _ in range(4)]
    bases = [cursor.read_bits(8) for _ in range(4)]

    widths = []
    for name, skip in zip("RGBA", skips):
        width = cursor.read_bits(3)
        if skip:
            if width != 0:
                raise FormatViolation(f"Gen8 channel {name} is skipped but its width field is {width}")
        else:
            width += 1
        widths.append(width)

    budget = 14
    if sum(widths) > budget:
        raise InvariantViolation(f"Gen8 delta widths {widths} exceed the {budget}-bit pixel budget")
    unused = budget - sum(widths)

    pixels = np.zeros((BLOCK_PIXELS, 4), dtype=np.uint8)
    for index in range(BLOCK_PIXELS):
        for channel in range(4):
            # Skipped channels have width 0 and read nothing
            pixels[index, channel] = (bases[channel] + cursor.read_bits(widths[channel])) & 0xFF
        cursor.expect_zero_bits(unused)

    cursor.expect_zero_bits(GEN8_TRAILER_BITS)
    return pixels


def decode_gen11(cursor: BitCursor, mode: DecodeMode) -> np.ndarray:
    """
    Gen11 layout: prediction flag, 8 extension flags, channel widths, base
    color, then one delta group per recovered pixel. The rest of the
    payload is zero padding.
    """
    inter_pred = cursor.read_bits(1)
    extension = cursor.read_bits(8)
    if extension:
        if not mode.allows_extension:
            raise FormatViolation(
                f"Extension flags 0x{extension:02X} set in CCS mode {mode.code}; "
                f"only observed in mode 6"
            )
        return decode_gen11_extension(cursor, inter_pred, extension)

    widths = _read_gen11_widths(cursor, inter_pred, mode.bits_per_pixel)
    base = _read_gen11_bases(cursor, inter_pred)
    logger.debug("Gen11 inter_pred=%d widths=%s base=%s", inter_pred, widths, base)

    logical = np.zeros((BLOCK_PIXELS, 4), dtype=np.uint8)
    half = BLOCK_PIXELS // len(mode.recovered)
    for index in range(BLOCK_PIXELS):
        if not mode.recovered[index // half]:
            continue
        logical[index] = _decode_pixel(cursor.read_bits, cursor.expect_zero_bits, widths, base, inter_pred)

    pixels_recovered = half * mode.cachelines_recovered
    cursor.expect_zero_bits(
        CACHELINE_BITS - GEN11_HEADER_BITS - BASE_BITS - pixels_recovered * mode.bits_per_pixel
    )
    return scatter_block_order(logical)


def decode_gen11_extension(cursor: BitCursor, inter_pred: int, extension: int) -> np.ndarray:
    """
    Gen11 extension: each 2x2 sub-window is either uniform (one entry) or
    coded pixel by pixel (four entries), 20 entries in all.

    Entry bits are interleaved: the first 14 bits of every entry, then the
    remaining 8 bits of every entry, then 19 zero bits.
    """
    flags = BitAccumulator()
    flags.push(extension, SUBWINDOWS)
    uniform = [flags.take(1) for _ in range(SUBWINDOWS)]
    if sum(uniform) != UNIFORM_SUBWINDOWS:
        raise InvariantViolation(
            f"Extension flags 0x{extension:02X} mark {sum(uniform)} uniform sub-windows, "
            f"expected {UNIFORM_SUBWINDOWS}"
        )
    logger.debug("Gen11 extension uniform sub-windows: %s", uniform)

    widths = _read_gen11_widths(cursor, inter_pred, EXTENSION_ENTRY_BITS)
    base = _read_gen11_bases(cursor, inter_pred)

    entries: List[BitAccumulator] = [BitAccumulator() for _ in range(EXTENSION_ENTRIES)]
    for entry in entries:
        entry.fill(cursor, EXTENSION_FIRST_PASS_BITS)
    for entry in entries:
        entry.fill(cursor, EXTENSION_ENTRY_BITS - EXTENSION_FIRST_PASS_BITS)
    cursor.expect_zero_bits(EXTENSION_PADDING_BITS)

    logical = np.zeros((BLOCK_PIXELS, 4), dtype=np.uint8)
    pending = iter(entries)
    for subwindow, is_uniform in enumerate(uniform):
        start = subwindow * SUBWINDOW_PIXELS
        if is_uniform:
            entry = next(pending)
            logical[start:start + SUBWINDOW_PIXELS] = _decode_pixel(
                entry.take, entry.expect_zero, widths, base, inter_pred)
        else:
            for index in range(start, start + SUBWINDOW_PIXELS):
                entry = next(pending)
                logical[index] = _decode_pixel(entry.take, entry.expect_zero, widths, base, inter_pred)

    return scatter_block_order(logical)


class CCSDecoder(CachelineDecoder):
    """Intel CCS decoder for one hardware generation (8 or 11)"""

    def __init__(self, generation: int) -> None:
        self.generation = generation

    def decode(self, data: bytes, mode: Optional[int] = None) -> PixelBlock:
        decode_mode = lookup_ccs_mode(self.generation, mode)
        cursor = BitCursor(data)

        if decode_mode.family == FormatFamily.CCS_GEN8:
            pixels = decode_gen8(cursor)
        else:
            pixels = decode_gen11(cursor, decode_mode)

        return PixelBlock(pixels)
