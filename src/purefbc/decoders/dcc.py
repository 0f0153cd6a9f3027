"""AMD DCC (delta color compression) decoder"""
from typing import Tuple
import numpy as np
from numba import jit

from .base import CachelineDecoder
from ..bitstream import BitCursor
from ..block import PixelBlock, write_dcc_cacheline
from ..enums import DCCChannel
from ..headers import ChannelHeaderInfo, read_channel_headers
from ..modes import lookup_dcc_mode

# Each half of a cacheline is 4 columns by an upper and a lower row
HALF_COLUMNS = 4
HALF_POSITIONS = 8


@jit(nopython=True, cache=True)
def sign_magnitude(sign, magnitude):
    """Sign-magnitude delta as an offset to add modulo 256"""
    if sign:
        return 255 - magnitude
    return magnitude


@jit(nopython=True, cache=True)
def _walk_delta_chain(upper, lower, column, signs, deltas):
    """
    Reconstruct a half from its seeded top-left pixel upper[column].

    Positions are not chained in raster order. The upper row runs two
    columns ahead of the lower row; each lower pair hangs off the upper
    pixel above its first column:

        u0 -> u1 -> u2 -> u3
        |           |
        l0 -> l1    l2 -> l3
    """
    c = column
    upper[c + 1] = (upper[c] + sign_magnitude(signs[1], deltas[1])) & 0xFF
    lower[c] = (upper[c] + sign_magnitude(signs[2], deltas[2])) & 0xFF
    lower[c + 1] = (lower[c] + sign_magnitude(signs[3], deltas[3])) & 0xFF
    upper[c + 2] = (upper[c + 1] + sign_magnitude(signs[4], deltas[4])) & 0xFF
    upper[c + 3] = (upper[c + 2] + sign_magnitude(signs[5], deltas[5])) & 0xFF
    lower[c + 2] = (upper[c + 2] + sign_magnitude(signs[6], deltas[6])) & 0xFF
    lower[c + 3] = (lower[c + 2] + sign_magnitude(signs[7], deltas[7])) & 0xFF


def read_deltas(cursor: BitCursor, bits: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read the sign bits and delta magnitudes of one half.

    All 8 sign bits come first. Magnitudes are stored by bit plane:
    bit 0 of every position, then bit 1 of every position, and so on.
    """
    signs = np.zeros(HALF_POSITIONS, dtype=np.int32)
    deltas = np.zeros(HALF_POSITIONS, dtype=np.int32)
    for position in range(HALF_POSITIONS):
        signs[position] = cursor.read_bits(1)
    for plane in range(bits):
        for position in range(HALF_POSITIONS):
            deltas[position] |= cursor.read_bits(1) << plane
    return signs, deltas


class DCCDecoder(CachelineDecoder):
    """
    AMD DCC decoder.

    The payload holds a two-stage header followed by delta streams for up
    to 4 cachelines. Each cacheline is 16 pixels split into a left and a
    right half per channel; channels are G, Cr, Cb and A, with R = Cr + G
    and B = Cb + G on output.
    """

    def decode(self, data: bytes, mode: int) -> PixelBlock:
        decode_mode = lookup_dcc_mode(mode)
        cursor = BitCursor(data)

        infos = read_channel_headers(cursor, decode_mode.cachelines_recovered)

        # Cachelines the payload does not cover stay zero
        output = np.zeros((decode_mode.output_pixels, 4), dtype=np.uint8)
        upper = np.zeros((len(DCCChannel), HALF_POSITIONS), dtype=np.int32)
        lower = np.zeros((len(DCCChannel), HALF_POSITIONS), dtype=np.int32)

        for cacheline, channel_infos in enumerate(infos):
            for channel, info in zip(DCCChannel, channel_infos):
                self._decode_left(cursor, info, upper[channel], lower[channel])
                self._decode_right(cursor, info, upper[channel], lower[channel])
            write_dcc_cacheline(upper, lower, output, cacheline)

        return PixelBlock(output)

    @staticmethod
    def _decode_left(cursor: BitCursor, info: ChannelHeaderInfo, upper: np.ndarray, lower: np.ndarray) -> None:
        if info.left_constant:
            upper[:HALF_COLUMNS] = info.left_base
            lower[:HALF_COLUMNS] = info.left_base
            return

        signs, deltas = read_deltas(cursor, info.left_bits)
        if info.left_header_present:
            # Seed is base + delta with the sign bit as its lsb
            upper[0] = (info.left_base + (int(deltas[0]) << 1) + int(signs[0])) & 0xFF
        else:
            upper[0] = sign_magnitude(signs[0], deltas[0])
        _walk_delta_chain(upper, lower, 0, signs, deltas)

    @staticmethod
    def _decode_right(cursor: BitCursor, info: ChannelHeaderInfo, upper: np.ndarray, lower: np.ndarray) -> None:
        last_left = int(upper[HALF_COLUMNS - 1])

        if info.right_constant:
            # Without a header byte the flat value is the left half's last
            # upper pixel, which is left_base when the left half is flat too
            value = info.right_base if info.right_header_present else last_left
            upper[HALF_COLUMNS:] = value
            lower[HALF_COLUMNS:] = value
            return

        signs, deltas = read_deltas(cursor, info.right_bits)
        if info.right_header_present:
            upper[HALF_COLUMNS] = (info.right_base + (int(deltas[0]) << 1) + int(signs[0])) & 0xFF
        else:
            upper[HALF_COLUMNS] = (last_left + sign_magnitude(signs[0], deltas[0])) & 0xFF
        _walk_delta_chain(upper, lower, HALF_COLUMNS, signs, deltas)
