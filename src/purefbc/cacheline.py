"""Compressed cacheline container"""
from typing import Optional

from .bitstream import CACHELINE_SIZE
from .block import PixelBlock
from .decoders import CCSDecoder, DCCDecoder


def parse_hex_payload(text: str) -> bytes:
    """
    Parse whitespace-separated hex byte values, e.g. "1f 00 a3 ...".

    Raises:
        ValueError: token is not a hex byte, or the count is not 64
    """
    tokens = text.split()
    if len(tokens) != CACHELINE_SIZE:
        raise ValueError(f"Expected {CACHELINE_SIZE} hex bytes, got {len(tokens)}")

    payload = bytearray()
    for position, token in enumerate(tokens):
        try:
            value = int(token, 16)
        except ValueError:
            raise ValueError(f"Invalid hex byte {token!r} at position {position}") from None
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Hex value {token!r} at position {position} does not fit in a byte")
        payload.append(value)
    return bytes(payload)


class Cacheline:
    """One 64-byte compressed payload as read from GPU memory"""
    def __init__(self, data: bytes = bytes(CACHELINE_SIZE)) -> None:
        if len(data) != CACHELINE_SIZE:
            raise ValueError(f"Cacheline must be {CACHELINE_SIZE} bytes, got {len(data)}")
        self.data: bytes = bytes(data)

    def __str__(self) -> str:
        """Return debug string representation of the payload"""
        lines = ["Compressed cacheline:"]
        for offset in range(0, CACHELINE_SIZE, 16):
            chunk = self.data[offset:offset + 16]
            lines.append(f"  {offset:02X}: " + " ".join(f"{byte:02X}" for byte in chunk))
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cacheline):
            return NotImplemented
        return self.data == other.data

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Cacheline':
        """Read a cacheline from exactly 64 raw bytes"""
        return cls(data)

    @classmethod
    def from_hex(cls, text: str) -> 'Cacheline':
        """Read a cacheline from 64 whitespace-separated hex bytes"""
        return cls(parse_hex_payload(text))

    @classmethod
    def from_dump(cls, data: bytes, index: int = 0) -> 'Cacheline':
        """
        Select one cacheline from a raw memory dump.

        Args:
            data: Raw dump, a sequence of 64-byte cachelines
            index: Cacheline number within the dump
        """
        count = len(data) // CACHELINE_SIZE
        if not 0 <= index < count:
            raise ValueError(f"Invalid cacheline index {index}. Dump has {count} cacheline(s).")
        offset = index * CACHELINE_SIZE
        return cls(data[offset:offset + CACHELINE_SIZE])

    def decode_dcc(self, mode: int) -> PixelBlock:
        """Decode as AMD DCC with metadata code mode (0x28, 0xCC or 0x66)"""
        return DCCDecoder().decode(self.data, mode)

    def decode_ccs(self, generation: int, mode: Optional[int] = None) -> PixelBlock:
        """Decode as Intel CCS of the given generation; gen11 needs mode (1, 2, 6 or 8)"""
        return CCSDecoder(generation).decode(self.data, mode)
