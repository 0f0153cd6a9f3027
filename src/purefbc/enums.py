"""Mode codes and channel indices"""
from enum import IntEnum


class FormatFamily(IntEnum):
    """Compressed framebuffer layouts understood by the decoders"""
    DCC = 0  # AMD delta color compression
    CCS_GEN8 = 8  # Intel compression control surface, gen8 layout
    CCS_GEN11 = 11  # Intel compression control surface, gen11 layout


class DCCMode(IntEnum):
    """DCC metadata codes, named by how many cachelines the payload covers"""
    FOUR_CACHELINES = 0x28
    THREE_CACHELINES = 0xCC
    TWO_CACHELINES = 0x66


class CCSGeneration(IntEnum):
    GEN8 = 8
    GEN11 = 11


class CCSMode(IntEnum):
    """Gen11 CCS codes, named by per-pixel bit budget"""
    BPP6 = 1
    BPP12_FIRST_HALF = 2
    BPP14 = 6
    BPP12_SECOND_HALF = 8


class DCCChannel(IntEnum):
    """Internal DCC channels: green, red and blue as offsets from green, alpha"""
    G = 0
    CR = 1
    CB = 2
    A = 3
