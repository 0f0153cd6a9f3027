import pytest

PAYLOAD_BITS = 512


class BitWriter:
    """Builds test payloads LSB first, the order the decoders read them"""

    def __init__(self):
        self.bits = []

    @property
    def position(self):
        return len(self.bits)

    def write(self, value, count):
        for i in range(count):
            self.bits.append((value >> i) & 1)
        return self

    def write_bits(self, bits):
        for bit in bits:
            self.write(bit, 1)
        return self

    def zeros(self, count):
        return self.write(0, count)

    def payload(self, size=64):
        assert len(self.bits) <= size * 8, f"{len(self.bits)} bits do not fit"
        data = bytearray(size)
        for index, bit in enumerate(self.bits):
            data[index // 8] |= bit << (index % 8)
        return bytes(data)


@pytest.fixture
def writer():
    return BitWriter()


def pattern_payload():
    return bytes((i * 37 + 11) & 0xFF for i in range(64))


@pytest.fixture
def sample_payload():
    return pattern_payload()
