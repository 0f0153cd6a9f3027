import logging

import numpy as np
import pytest

from purefbc.block import BLOCK_ORDER
from purefbc.decoders import CCSDecoder
from purefbc.errors import FormatViolation, InvariantViolation

GEN11_PREFIX_BITS = 53


def gen11_header(writer, widths, bases, inter_pred=0, extension=0):
    writer.write(inter_pred, 1).write(extension, 8)
    for width in widths:
        writer.write(width, 4)
    for base in bases:
        writer.write(base, 8)
    return writer


def in_block_order(logical):
    output = np.zeros((32, 4), dtype=np.uint8)
    for index, pixel in enumerate(logical):
        output[BLOCK_ORDER[index]] = pixel
    return output


# gen8

def test_gen8_skipped_channels_are_flat(writer):
    writer.write_bits([1, 1, 1, 1])
    writer.write(1, 8).write(2, 8).write(3, 8).write(4, 8)
    block = CCSDecoder(8).decode(writer.payload())

    assert len(block) == 32
    np.testing.assert_array_equal(block.pixels, np.tile([1, 2, 3, 4], (32, 1)))


def test_gen8_trailer_must_be_zero(writer):
    writer.write_bits([1, 1, 1, 1])
    writer.write(1, 8).write(2, 8).write(3, 8).write(4, 8)
    payload = bytearray(writer.payload())
    payload[63] = 0x80
    with pytest.raises(FormatViolation):
        CCSDecoder(8).decode(bytes(payload))


def test_gen8_deltas_in_linear_order(writer):
    writer.write_bits([0, 0, 0, 0])
    writer.write(10, 8).write(20, 8).write(30, 8).write(40, 8)
    writer.write(0, 3).write(1, 3).write(2, 3).write(3, 3)
    for i in range(32):
        writer.write(i & 1, 1).write(i & 3, 2).write(i & 7, 3).write(i & 15, 4).zeros(4)
    assert writer.position == 496

    block = CCSDecoder(8).decode(writer.payload())

    expected = [(10 + (i & 1), 20 + (i & 3), 30 + (i & 7), 40 + (i & 15)) for i in range(32)]
    np.testing.assert_array_equal(block.pixels, np.array(expected, dtype=np.uint8))


def test_gen8_skipped_channel_with_width_is_rejected(writer):
    writer.write_bits([1, 0, 0, 0]).zeros(32).write(2, 3)
    with pytest.raises(FormatViolation, match="channel R"):
        CCSDecoder(8).decode(writer.payload())


def test_gen8_width_budget(writer):
    writer.write_bits([0, 0, 0, 0]).zeros(32)
    writer.write(7, 3).write(7, 3).write(0, 3).write(0, 3)
    with pytest.raises(InvariantViolation):
        CCSDecoder(8).decode(writer.payload())


def test_gen8_pixel_padding_must_be_zero(writer):
    writer.write_bits([1, 1, 1, 1]).zeros(32).zeros(12)
    writer.write(1, 14)
    with pytest.raises(FormatViolation):
        CCSDecoder(8).decode(writer.payload())


# gen11

def test_gen11_independent_channels(writer):
    gen11_header(writer, (2, 2, 2), (100, 50, 25, 200))
    for i in range(32):
        writer.write(i & 3, 2).write((i >> 2) & 3, 2).write(0, 2).write(i, 8)
    assert writer.position == GEN11_PREFIX_BITS + 32 * 14

    block = CCSDecoder(11).decode(writer.payload(), 6)

    logical = [(100 + (i & 3), 50 + ((i >> 2) & 3), 25, 200 + i) for i in range(32)]
    np.testing.assert_array_equal(block.pixels, in_block_order(logical))


def test_gen11_inter_channel_prediction(writer):
    # Widths and bases are stored B, R, G
    gen11_header(writer, (2, 2, 2), (10, 250, 3, 255), inter_pred=1)
    for _ in range(32):
        writer.write(1, 2).write(2, 2).write(3, 2)

    block = CCSDecoder(11).decode(writer.payload(), 1)

    # b = 10+1, r = 250+11+2 wraps to 7, g = 3 + (11+7)//2 + 3
    np.testing.assert_array_equal(block.pixels, np.tile([7, 15, 11, 255], (32, 1)))


@pytest.mark.parametrize("code, decoded, message", [
    (2, slice(0, 16), "Second cacheline not encoded"),
    (8, slice(16, 32), "First cacheline not encoded"),
])
def test_gen11_half_recovery(writer, caplog, code, decoded, message):
    gen11_header(writer, (4, 4, 4), (1, 2, 3, 4))
    for i in range(16):
        writer.write(i, 4).write(0, 4).write(0, 4)

    with caplog.at_level(logging.WARNING):
        block = CCSDecoder(11).decode(writer.payload(), code)

    logical = np.zeros((32, 4), dtype=np.uint8)
    logical[decoded] = [(1 + i, 2, 3, 4) for i in range(16)]
    np.testing.assert_array_equal(block.pixels, in_block_order(logical))
    assert message in caplog.text


def test_gen11_tail_must_be_zero(writer):
    gen11_header(writer, (2, 2, 2), (0, 0, 0, 0))
    payload = bytearray(writer.payload())
    payload[63] = 0x01
    with pytest.raises(FormatViolation):
        CCSDecoder(11).decode(bytes(payload), 1)


def test_gen11_alpha_overflow_is_padding(writer):
    # Mode 6 with no color deltas: 8 alpha bits then 6 padding bits per pixel
    gen11_header(writer, (0, 0, 0), (0, 0, 0, 0))
    writer.write(0xAB, 8).write(1, 6)
    with pytest.raises(FormatViolation):
        CCSDecoder(11).decode(writer.payload(), 6)


def test_gen11_channel_width_limit(writer):
    gen11_header(writer, (9, 0, 0), (0, 0, 0, 0))
    with pytest.raises(InvariantViolation):
        CCSDecoder(11).decode(writer.payload(), 6)


def test_gen11_width_budget(writer):
    gen11_header(writer, (4, 4, 0), (0, 0, 0, 0))
    with pytest.raises(InvariantViolation):
        CCSDecoder(11).decode(writer.payload(), 1)


def test_gen11_extension_only_in_mode_6(writer):
    gen11_header(writer, (0, 0, 0), (0, 0, 0, 0), extension=0x0F)
    with pytest.raises(FormatViolation, match="only observed in mode 6"):
        CCSDecoder(11).decode(writer.payload(), 1)


# gen11 extension

def extension_payload(writer, flags, widths=(8, 8, 6), bases=(0, 0, 0, 9)):
    gen11_header(writer, widths, bases, extension=flags)
    entries = [k | (2 * k) << 8 | k << 16 for k in range(20)]
    for entry in entries:
        writer.write(entry & 0x3FFF, 14)
    for entry in entries:
        writer.write(entry >> 14, 8)
    writer.zeros(19)
    assert writer.position == 512
    return writer.payload()


def test_gen11_extension_subwindows(writer):
    # Sub-windows 0, 2, 4 and 6 are uniform
    payload = extension_payload(writer, 0b01010101)

    block = CCSDecoder(11).decode(payload, 6)

    entry_for_pixel = [0, 0, 0, 0, 1, 2, 3, 4, 5, 5, 5, 5, 6, 7, 8, 9,
                       10, 10, 10, 10, 11, 12, 13, 14, 15, 15, 15, 15, 16, 17, 18, 19]
    logical = [(k, 2 * k, k, 9) for k in entry_for_pixel]
    np.testing.assert_array_equal(block.pixels, in_block_order(logical))


@pytest.mark.parametrize("flags", [0b00000111, 0b00011111, 0xFF])
def test_gen11_extension_needs_four_uniform_subwindows(writer, flags):
    payload = extension_payload(writer, flags)
    with pytest.raises(InvariantViolation, match="uniform sub-windows"):
        CCSDecoder(11).decode(payload, 6)


def test_gen11_extension_padding_must_be_zero(writer):
    payload = bytearray(extension_payload(writer, 0x0F))
    payload[63] = 0x40
    with pytest.raises(FormatViolation):
        CCSDecoder(11).decode(bytes(payload), 6)


# all modes

@pytest.mark.parametrize("generation, code", [(8, None), (11, 1), (11, 2), (11, 6), (11, 8)])
def test_all_zero_payload_decodes_to_blank_block(generation, code):
    block = CCSDecoder(generation).decode(bytes(64), code)
    assert block.tobytes() == bytes(128)


def test_decode_is_deterministic(writer):
    payload = extension_payload(writer, 0b10101010)
    decoder = CCSDecoder(11)
    assert decoder.decode(payload, 6).tobytes() == decoder.decode(payload, 6).tobytes()
