"""Decode failure kinds"""


class DecodeError(ValueError):
    """Base class for every failure raised while decoding a cacheline"""
    pass


class UnsupportedMode(DecodeError):
    """Mode code is not in the mode table"""
    pass


class FormatViolation(DecodeError):
    """A reserved or must-be-zero region of the payload is nonzero"""
    pass


class UnsupportedHeaderPattern(FormatViolation):
    """DCC header flag combination that has never been observed"""

    def __init__(self, pattern: tuple, cacheline: int, channel: str) -> None:
        self.pattern = pattern
        self.cacheline = cacheline
        self.channel = channel
        lhp, rhp, lconst, rconst = pattern
        super().__init__(
            f"Cacheline {cacheline} channel {channel}: header pattern "
            f"lhp={lhp} rhp={rhp} lconst={lconst} rconst={rconst} not observed"
        )


class OutOfBounds(DecodeError):
    """A read would run past the end of the payload"""
    pass


class InvariantViolation(DecodeError):
    """Decoded field values contradict each other"""
    pass
