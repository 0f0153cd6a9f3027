"""Mode table: maps externally supplied mode codes to decode parameters"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .enums import CCSGeneration, CCSMode, DCCMode, FormatFamily
from .errors import UnsupportedMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeMode:
    """Static decode parameters for one mode code"""
    family: FormatFamily
    code: int
    recovered: Tuple[bool, ...]  # One flag per 64-byte output cacheline
    bits_per_pixel: Optional[int] = None  # Per-pixel delta budget (CCS only)
    allows_extension: bool = False  # Gen11 8-subwindow extension observed
    warning: Optional[str] = None  # Emitted when some cachelines are not encoded

    @property
    def output_cachelines(self) -> int:
        return len(self.recovered)

    @property
    def cachelines_recovered(self) -> int:
        return sum(self.recovered)

    @property
    def output_pixels(self) -> int:
        return self.output_cachelines * 16


DCC_MODES: Dict[int, DecodeMode] = {
    DCCMode.FOUR_CACHELINES: DecodeMode(
        FormatFamily.DCC, DCCMode.FOUR_CACHELINES, (True, True, True, True)),
    DCCMode.THREE_CACHELINES: DecodeMode(
        FormatFamily.DCC, DCCMode.THREE_CACHELINES, (True, True, True, False),
        warning="Fourth cacheline not encoded in compressed payload."),
    DCCMode.TWO_CACHELINES: DecodeMode(
        FormatFamily.DCC, DCCMode.TWO_CACHELINES, (True, True, False, False),
        warning="Third and fourth cachelines not encoded in compressed payload."),
}

GEN8_MODE = DecodeMode(FormatFamily.CCS_GEN8, CCSGeneration.GEN8, (True, True), bits_per_pixel=14)

GEN11_MODES: Dict[int, DecodeMode] = {
    CCSMode.BPP6: DecodeMode(
        FormatFamily.CCS_GEN11, CCSMode.BPP6, (True, True), bits_per_pixel=6),
    CCSMode.BPP12_FIRST_HALF: DecodeMode(
        FormatFamily.CCS_GEN11, CCSMode.BPP12_FIRST_HALF, (True, False), bits_per_pixel=12,
        warning="Second cacheline not encoded in compressed payload."),
    CCSMode.BPP14: DecodeMode(
        FormatFamily.CCS_GEN11, CCSMode.BPP14, (True, True), bits_per_pixel=14,
        allows_extension=True),
    CCSMode.BPP12_SECOND_HALF: DecodeMode(
        FormatFamily.CCS_GEN11, CCSMode.BPP12_SECOND_HALF, (False, True), bits_per_pixel=12,
        warning="First cacheline not encoded in compressed payload."),
}


def _announce(mode: DecodeMode) -> DecodeMode:
    if mode.warning:
        logger.warning(mode.warning)
    return mode


def lookup_dcc_mode(code: int) -> DecodeMode:
    """
    Resolve a DCC metadata code.

    Raises:
        UnsupportedMode: code is missing or not one of 0x28, 0xCC, 0x66
    """
    if code is None:
        raise UnsupportedMode("DCC decode requires a mode code.")
    mode = DCC_MODES.get(code)
    if mode is None:
        raise UnsupportedMode(f"DCC mode {code:x} not (yet) supported.")
    return _announce(mode)


def lookup_ccs_mode(generation: int, code: Optional[int] = None) -> DecodeMode:
    """
    Resolve a CCS generation and, for gen11, its mode code.

    Gen8 has a single layout, so code is ignored there.

    Raises:
        UnsupportedMode: unknown generation, or gen11 code missing or unknown
    """
    if generation == CCSGeneration.GEN8:
        if code is not None:
            logger.debug("Ignoring CCS mode %s for gen8 payload", code)
        return GEN8_MODE
    if generation != CCSGeneration.GEN11:
        raise UnsupportedMode(f"CCS generation {generation} not supported.")
    if code is None:
        raise UnsupportedMode("Gen11 CCS decode requires a mode code.")
    mode = GEN11_MODES.get(code)
    if mode is None:
        raise UnsupportedMode(f"CCS mode {code} not (yet) supported.")
    return _announce(mode)
