"""Base class for cacheline decoders"""
from abc import ABC, abstractmethod
from typing import Optional

from ..block import PixelBlock


class CachelineDecoder(ABC):
    """Base class for cacheline decoders"""
    @abstractmethod
    def decode(self, data: bytes, mode: Optional[int] = None) -> PixelBlock:
        """
        Decode one compressed 64-byte payload to RGBA8 pixels

        Args:
            data: Compressed payload, exactly 64 bytes
            mode: Format-specific mode code

        Returns:
            PixelBlock in the format's output order

        Raises:
            UnsupportedMode: mode is not in the decoder's mode table
            FormatViolation, OutOfBounds, InvariantViolation: malformed payload
        """
        pass
