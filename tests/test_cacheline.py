import numpy as np
import pytest

from purefbc import Cacheline, parse_hex_payload
from purefbc.errors import UnsupportedMode


def test_parse_hex_payload():
    text = " ".join(f"{i:02x}" for i in range(64))
    assert parse_hex_payload(text) == bytes(range(64))


def test_parse_hex_accepts_any_whitespace():
    text = "\n".join(" ".join("FF" for _ in range(16)) for _ in range(4)) + "\n"
    assert parse_hex_payload(text) == bytes([0xFF] * 64)


@pytest.mark.parametrize("text", [
    "00 " * 63,
    "00 " * 65,
    "zz " + "00 " * 63,
    "100 " + "00 " * 63,
])
def test_parse_hex_rejects_malformed_text(text):
    with pytest.raises(ValueError):
        parse_hex_payload(text)


def test_from_dump_selects_cacheline():
    dump = bytes(64) + bytes([7] * 64) + bytes(10)
    assert Cacheline.from_dump(dump, 1).data == bytes([7] * 64)
    with pytest.raises(ValueError, match="2 cacheline"):
        Cacheline.from_dump(dump, 2)


def test_payload_length_is_checked():
    with pytest.raises(ValueError):
        Cacheline.from_bytes(bytes(128))


def test_str_dumps_payload():
    text = str(Cacheline(bytes(range(64))))
    assert "Compressed cacheline:" in text
    assert "  30: 30 31 32" in text


def test_decode_entry_points():
    cacheline = Cacheline(bytes(64))
    block = cacheline.decode_ccs(11, 1)
    assert block.tobytes() == bytes(128)
    with pytest.raises(UnsupportedMode):
        cacheline.decode_dcc(0x12)


def test_flat_dcc_from_hex():
    # Per cacheline: 0x55 = every left header present, 0xFF = every half flat
    header = "55 ff " * 4 + "0a 14 1e ff " * 4
    text = header + "00 " * (64 - 24)
    block = Cacheline.from_hex(text).decode_dcc(0x28)
    np.testing.assert_array_equal(block.pixels, np.tile([30, 10, 40, 255], (64, 1)))
