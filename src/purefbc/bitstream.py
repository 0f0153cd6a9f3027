"""Bit readers over compressed cacheline payloads

Both vendors pack their fields least-significant bit first: the first bit
of the stream is bit 0 of byte 0, the ninth is bit 0 of byte 1.
"""
from .errors import FormatViolation, OutOfBounds

CACHELINE_SIZE = 64
CACHELINE_BITS = CACHELINE_SIZE * 8


class BitCursor:
    """Sequential reader over one 64-byte payload"""

    def __init__(self, data: bytes, size: int = CACHELINE_SIZE) -> None:
        if len(data) != size:
            raise ValueError(f"Expected {size} bytes of payload, got {len(data)}")
        self.data: bytes = bytes(data)
        self.byte_index: int = 0  # Next byte to read from
        self.bit_offset: int = 0  # Bits of that byte already consumed, 0-7

    @property
    def position(self) -> int:
        """Number of bits consumed so far"""
        return self.byte_index * 8 + self.bit_offset

    @property
    def remaining(self) -> int:
        return len(self.data) * 8 - self.position

    def read_bits(self, count: int) -> int:
        """
        Read the next count bits, LSB first.

        Args:
            count: Number of bits to read (0-8)

        Returns:
            The bits as an unsigned integer; 0 for a zero-width read
        """
        if not 0 <= count <= 8:
            raise ValueError(f"Cannot read {count} bits at once (0-8 allowed)")
        if count == 0:
            return 0
        if count > self.remaining:
            raise OutOfBounds(
                f"Reading {count} bits at bit {self.position} runs past "
                f"the {len(self.data)}-byte payload"
            )

        value = self.data[self.byte_index] >> self.bit_offset
        first_byte_bits = 8 - self.bit_offset
        if count > first_byte_bits:
            value |= self.data[self.byte_index + 1] << first_byte_bits
        value &= (1 << count) - 1

        self.byte_index, self.bit_offset = divmod(self.position + count, 8)
        return value

    def expect_zero_bits(self, count: int) -> None:
        """Consume count padding bits, failing if any of them is set"""
        start = self.position
        while count > 0:
            chunk = min(count, 8)
            if self.read_bits(chunk) != 0:
                raise FormatViolation(
                    f"Reserved bits at {start}-{self.position - 1} are not zero"
                )
            count -= chunk


class BitAccumulator:
    """
    Holds up to 32 bits taken from a cursor so they can be drained later.

    Gen11 extension payloads interleave the bits of different pixel entries;
    each entry is filled in several passes and only then decoded.
    """
    CAPACITY = 32

    def __init__(self) -> None:
        self.buffer: int = 0
        self.bits_used: int = 0

    def push(self, value: int, count: int) -> None:
        """Append count bits of value above the bits already held"""
        if not 0 <= count <= 8:
            raise ValueError(f"Cannot push {count} bits at once (0-8 allowed)")
        if self.bits_used + count > self.CAPACITY:
            raise OutOfBounds(
                f"Accumulator holds {self.bits_used} bits, cannot add {count}"
            )
        self.buffer |= (value & ((1 << count) - 1)) << self.bits_used
        self.bits_used += count

    def fill(self, cursor: BitCursor, count: int) -> None:
        """Move count bits from the cursor into the accumulator"""
        while count > 8:
            self.push(cursor.read_bits(8), 8)
            count -= 8
        if count > 0:
            self.push(cursor.read_bits(count), count)

    def take(self, count: int) -> int:
        """Drain the oldest count bits (0-8)"""
        if not 0 <= count <= 8:
            raise ValueError(f"Cannot take {count} bits at once (0-8 allowed)")
        if count > self.bits_used:
            raise OutOfBounds(
                f"Taking {count} bits from an accumulator holding {self.bits_used}"
            )
        value = self.buffer & ((1 << count) - 1)
        self.buffer >>= count
        self.bits_used -= count
        return value

    def expect_zero(self, count: int) -> None:
        """Drain count padding bits, failing if any of them is set"""
        while count > 0:
            chunk = min(count, 8)
            if self.take(chunk) != 0:
                raise FormatViolation("Reserved bits in accumulated entry are not zero")
            count -= chunk
