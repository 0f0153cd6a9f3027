"""DCC per-channel header structures"""
import logging
from typing import List, Tuple

from .bitstream import BitCursor
from .enums import DCCChannel
from .errors import InvariantViolation, UnsupportedHeaderPattern

logger = logging.getLogger(__name__)

# Seed width used when a delta-coded left half has no header byte
UNHEADED_SEED_BITS = 7

# (left_header_present, right_header_present, left_constant, right_constant)
# combinations seen in real payloads. Anything else has unknown meaning.
LEGAL_HEADER_PATTERNS = frozenset({
    (0, 0, 0, 1),  # left 7-bit sign-magnitude seed, right inherits left
    (0, 0, 1, 1),  # both halves zero
    (0, 1, 0, 1),  # left 7-bit sign-magnitude seed, right flat
    (1, 0, 0, 0),  # left delta-coded, right delta-coded from left's last pixel
    (1, 0, 0, 1),  # left delta-coded, right flat at left's last pixel
    (1, 0, 1, 1),  # both flat at the header byte
    (1, 1, 0, 0),  # both delta-coded independently
    (1, 1, 0, 1),  # left delta-coded, right flat
    (1, 1, 1, 0),  # left flat, right delta-coded
    (1, 1, 1, 1),  # both flat, independently valued
})


def trailing_zero_count(value: int) -> int:
    """Position of the lowest set bit of a header byte"""
    value &= 0xFF
    if value == 0:
        raise InvariantViolation("Delta-coded header byte is zero")
    count = 0
    while not value & 1:
        value >>= 1
        count += 1
    return count


def split_header_byte(value: int) -> Tuple[int, int]:
    """
    Split a delta-coded header byte into (base, delta bit width).

    The lowest set bit marks the width and is not part of the base,
    e.g. 0b10110100 -> base 0b10110000, width 2.
    """
    bits = trailing_zero_count(value)
    return value & ~(1 << bits) & 0xFF, bits


class ChannelHeaderInfo:
    """Decode plan for one channel of one cacheline (left and right halves)"""
    def __init__(self) -> None:
        self.left_header_present: int = 0  # A header byte follows for the left half
        self.right_header_present: int = 0  # A header byte follows for the right half
        self.left_constant: int = 0  # Left half is flat (no deltas)
        self.right_constant: int = 0  # Right half is flat (no deltas)
        self.left_base: int = 0  # Left half base value
        self.left_bits: int = 0  # Left half delta bit width, 0-7
        self.right_base: int = 0  # Right half base value
        self.right_bits: int = 0  # Right half delta bit width, 0-7

    def __repr__(self) -> str:
        return (
            f"ChannelHeaderInfo(pattern={self.pattern}, "
            f"left=({self.left_base}, {self.left_bits}), "
            f"right=({self.right_base}, {self.right_bits}))"
        )

    @property
    def pattern(self) -> Tuple[int, int, int, int]:
        return (self.left_header_present, self.right_header_present,
                self.left_constant, self.right_constant)

    def check_pattern(self, cacheline: int, channel: DCCChannel) -> None:
        if self.pattern not in LEGAL_HEADER_PATTERNS:
            raise UnsupportedHeaderPattern(self.pattern, cacheline, channel.name)

    def read_header_bytes(self, cursor: BitCursor, cacheline: int, channel: DCCChannel) -> None:
        """Second header stage: read the base bytes this channel announced"""
        try:
            if self.left_header_present:
                header_byte = cursor.read_bits(8)
                if self.left_constant:
                    self.left_base, self.left_bits = header_byte, 0
                else:
                    self.left_base, self.left_bits = split_header_byte(header_byte)
            elif self.left_constant:
                self.left_base, self.left_bits = 0, 0
            else:
                # Seed pixel is sign-magnitude coded in the delta stream itself
                self.left_base, self.left_bits = 0, UNHEADED_SEED_BITS

            if self.right_header_present:
                header_byte = cursor.read_bits(8)
                if self.right_constant:
                    self.right_base, self.right_bits = header_byte, 0
                else:
                    self.right_base, self.right_bits = split_header_byte(header_byte)
            elif self.right_constant:
                self.right_base, self.right_bits = 0, 0
            else:
                self.right_base, self.right_bits = self.left_base, self.left_bits
        except InvariantViolation as e:
            raise InvariantViolation(f"Cacheline {cacheline} channel {channel.name}: {e}") from e


def read_channel_headers(cursor: BitCursor, cachelines: int) -> List[List[ChannelHeaderInfo]]:
    """
    Parse the two-stage DCC header for every recovered cacheline.

    Stage one holds, per cacheline, the header-present flag pair of every
    channel followed by the constant flag pair of every channel. All flags
    are validated before any header byte is read. Stage two then holds the
    announced header bytes, cacheline by cacheline, channel by channel.

    Returns:
        infos[cacheline][channel]
    """
    infos = [[ChannelHeaderInfo() for _ in DCCChannel] for _ in range(cachelines)]

    for channel_infos in infos:
        for info in channel_infos:
            info.left_header_present = cursor.read_bits(1)
            info.right_header_present = cursor.read_bits(1)
        for info in channel_infos:
            info.left_constant = cursor.read_bits(1)
            info.right_constant = cursor.read_bits(1)

    for cacheline, channel_infos in enumerate(infos):
        for channel, info in zip(DCCChannel, channel_infos):
            info.check_pattern(cacheline, channel)

    for cacheline, channel_infos in enumerate(infos):
        for channel, info in zip(DCCChannel, channel_infos):
            info.read_header_bytes(cursor, cacheline, channel)
            logger.debug("Cacheline %d channel %s: %r", cacheline, channel.name, info)

    return infos
