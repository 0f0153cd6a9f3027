"""purefbc - Decoder for undocumented GPU framebuffer compression formats"""

__version__ = "0.1.0"

# Compressed payload container
from .cacheline import Cacheline, parse_hex_payload

# Decoded output
from .block import PixelBlock, BLOCK_ORDER

# Bit-level readers
from .bitstream import BitCursor, BitAccumulator, CACHELINE_SIZE

# Decoders and mode table
from .decoders import CachelineDecoder, DCCDecoder, CCSDecoder
from .modes import DecodeMode, lookup_dcc_mode, lookup_ccs_mode
from .headers import ChannelHeaderInfo

# Enumerations
from .enums import FormatFamily, DCCMode, CCSGeneration, CCSMode, DCCChannel

# Errors
from .errors import (
    DecodeError,
    UnsupportedMode,
    FormatViolation,
    UnsupportedHeaderPattern,
    OutOfBounds,
    InvariantViolation,
)

# CLI entry point
from .cli import main

__all__ = [
    '__version__',
    'Cacheline',
    'parse_hex_payload',
    'PixelBlock',
    'BLOCK_ORDER',
    'BitCursor',
    'BitAccumulator',
    'CACHELINE_SIZE',
    'CachelineDecoder',
    'DCCDecoder',
    'CCSDecoder',
    'DecodeMode',
    'lookup_dcc_mode',
    'lookup_ccs_mode',
    'ChannelHeaderInfo',
    'FormatFamily',
    'DCCMode',
    'CCSGeneration',
    'CCSMode',
    'DCCChannel',
    'DecodeError',
    'UnsupportedMode',
    'FormatViolation',
    'UnsupportedHeaderPattern',
    'OutOfBounds',
    'InvariantViolation',
    'main',
]
