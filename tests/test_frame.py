"""Tests for the frame codec and the text encoder."""

import pytest

from ringcode.bits import bits_to_bytes, bytes_to_bits
from ringcode.encoder import capacity_table, encode
from ringcode.errors import (
    HeaderChecksumMismatch,
    InsufficientBits,
    PayloadLengthInvalid,
    PayloadTooLarge,
    RedundancyValidationFailed,
)
from ringcode.frame import (
    ECC_BYTES,
    FrameHeader,
    decode_frame,
    encode_frame,
    max_payload_bytes,
    read_frame,
)
from ringcode.layout import LAYOUT
from ringcode.redundancy import RedundancyScheme

HEADER_START = 32
DATA_START = 32 + 56


def _frame_bits(header: FrameHeader, codeword: bytes) -> list[int]:
    bits = list(LAYOUT.start_pattern) + bytes_to_bits(header.to_bytes()) + bytes_to_bits(codeword)
    return (bits + [0] * 1344)[:1344]


def _flip(bits: list[int], index: int) -> list[int]:
    flipped = list(bits)
    flipped[index] ^= 1
    return flipped


class TestCapacityLimits:
    def test_max_payload_per_level(self):
        assert max_payload_bytes(0) == 149
        assert max_payload_bytes(1) == 141
        assert max_payload_bytes(2) == 125
        assert max_payload_bytes(3) == 93

    def test_capacity_table(self):
        assert capacity_table() == {0: 149, 1: 141, 2: 125, 3: 93}

    def test_ecc_table(self):
        assert ECC_BYTES == {0: 8, 1: 16, 2: 32, 3: 64}

    def test_unknown_level_raises(self):
        with pytest.raises(ValueError, match="Unknown ecc level"):
            max_payload_bytes(4)


class TestEncodeFrame:
    def test_length_is_capacity(self):
        for level in range(4):
            assert len(encode("hi", level)) == 1344

    def test_starts_with_start_pattern(self):
        bits = encode("hi")
        assert bits[:32] == [1, 0] * 16

    def test_header_layout(self):
        bits = encode("hi", 2)
        header = bits_to_bytes(bits[HEADER_START:DATA_START])
        # version 3, level 2, payload 2, redundancy 32, checksum 3+2+2+32
        assert header == bytes([3, 2, 0, 2, 0, 32, 39])

    def test_payload_follows_header(self):
        bits = encode("hi", 2)
        assert bits_to_bytes(bits[DATA_START : DATA_START + 16]) == b"hi"

    def test_deterministic(self):
        assert encode("The same text", 1) == encode("The same text", 1)

    def test_str_and_bytes_agree(self):
        assert encode("abc") == encode(b"abc")

    @pytest.mark.parametrize("level,limit", [(0, 149), (1, 141), (2, 125), (3, 93)])
    def test_exact_max_length_succeeds(self, level, limit):
        bits = encode("x" * limit, level)
        assert decode_frame(bits) == "x" * limit

    @pytest.mark.parametrize("level,limit", [(0, 149), (1, 141), (2, 125), (3, 93)])
    def test_one_byte_over_fails(self, level, limit):
        with pytest.raises(PayloadTooLarge, match="Text too long"):
            encode("x" * (limit + 1), level)

    def test_limit_counts_utf8_bytes(self):
        # 63 two-byte characters = 126 bytes > 125
        with pytest.raises(PayloadTooLarge):
            encode("я" * 63, 2)

    def test_payload_too_large_is_value_error(self):
        with pytest.raises(ValueError):
            encode("x" * 200, 0)

    def test_empty_payload_raises(self):
        with pytest.raises(ValueError, match="Empty payload"):
            encode_frame(b"", 2)

    def test_unknown_level_raises(self):
        with pytest.raises(ValueError, match="Unknown ecc level"):
            encode("hi", 7)

    def test_reed_solomon_version_byte(self):
        bits = encode("hi", 1, RedundancyScheme.REED_SOLOMON)
        assert bits_to_bytes(bits[HEADER_START : HEADER_START + 8]) == b"\x04"


class TestDecodeFrame:
    def test_roundtrip_each_level(self):
        for level in range(4):
            assert decode_frame(encode("hello, ring", level)) == "hello, ring"

    def test_roundtrip_unicode(self):
        text = "кольцевой код ✓"
        assert decode_frame(encode(text, 3)) == text

    def test_roundtrip_reed_solomon(self):
        for level in range(4):
            bits = encode("hello, ring", level, RedundancyScheme.REED_SOLOMON)
            assert decode_frame(bits) == "hello, ring"

    def test_read_frame_fields(self):
        frame = read_frame(encode("hello", 0))
        assert frame.text == "hello"
        assert frame.payload == b"hello"
        assert frame.header.version == 3
        assert frame.header.ecc_level == 0
        assert frame.header.payload_length == 5
        assert frame.header.redundancy_length == 8
        assert frame.corrected == 0

    def test_start_pattern_not_checked(self):
        bits = encode("hello")
        bits[:32] = [0] * 32
        assert decode_frame(bits) == "hello"

    def test_invalid_utf8_is_replaced(self):
        bits = encode(b"\xffabcdef", 2)
        assert decode_frame(bits) == "�abcdef"

    def test_all_zero_bits_rejected(self):
        assert decode_frame([0] * 1344) is None

    def test_all_one_bits_rejected(self):
        assert decode_frame([1] * 1344) is None

    def test_unknown_version_reads_as_parity(self):
        header = FrameHeader.build(9, 2, 3, 32)
        frame = read_frame(_frame_bits(header, b"abc"))
        assert frame.text == "abc"
        assert frame.header.version == 9

    def test_version_zero_frame(self):
        header = FrameHeader.build(0, 1, 5, 16)
        assert decode_frame(_frame_bits(header, b"hello")) == "hello"

    def test_numpy_bitstream(self):
        import numpy as np

        bits = np.array(encode("numpy"), dtype=np.uint8)
        assert decode_frame(bits) == "numpy"


class TestRejections:
    def test_every_header_bit_flip_is_detected(self):
        bits = encode("checksum", 2)
        for index in range(HEADER_START, HEADER_START + 48):
            with pytest.raises(HeaderChecksumMismatch):
                read_frame(_flip(bits, index))

    def test_checksum_bit_flip_is_detected(self):
        bits = encode("checksum", 2)
        with pytest.raises(HeaderChecksumMismatch):
            read_frame(_flip(bits, DATA_START - 1))

    def test_rejection_returns_none(self):
        bits = _flip(encode("checksum", 2), HEADER_START + 20)
        assert decode_frame(bits) is None

    def test_short_stream(self):
        with pytest.raises(InsufficientBits):
            read_frame(encode("hi")[:60])

    def test_truncated_codeword(self):
        with pytest.raises(InsufficientBits):
            read_frame(encode("hi", 2)[:200])

    def test_zero_payload_length(self):
        header = FrameHeader.build(3, 2, 0, 32)
        with pytest.raises(PayloadLengthInvalid):
            read_frame(_frame_bits(header, b"abc"))

    def test_lengths_over_capacity(self):
        header = FrameHeader.build(3, 2, 130, 32)
        with pytest.raises(PayloadLengthInvalid):
            read_frame(_frame_bits(header, b"x" * 157))

    def test_mostly_zero_payload(self):
        bits = encode(b"\x00" * 17 + b"abc", 2)
        with pytest.raises(RedundancyValidationFailed):
            read_frame(bits)
        assert decode_frame(bits) is None

    def test_mostly_ff_payload(self):
        bits = encode(b"\xff" * 30, 1)
        with pytest.raises(RedundancyValidationFailed):
            read_frame(bits)

    def test_reed_solomon_level_mismatch(self):
        header = FrameHeader.build(4, 2, 3, 16)
        with pytest.raises(PayloadLengthInvalid):
            read_frame(_frame_bits(header, b"abc"))


class TestReedSolomonFrames:
    def _corrupt_bytes(self, bits, byte_indices):
        corrupted = list(bits)
        for byte in byte_indices:
            start = DATA_START + byte * 8
            for k in range(start, start + 8):
                corrupted[k] ^= 1
        return corrupted

    def test_corrects_payload_errors(self):
        bits = encode("error correcting ring", 2, RedundancyScheme.REED_SOLOMON)
        frame = read_frame(self._corrupt_bytes(bits, [0, 1, 2, 40, 130]))
        assert frame.text == "error correcting ring"
        assert frame.corrected == 5

    def test_parity_frame_cannot_correct(self):
        bits = encode("error correcting ring", 2)
        text = decode_frame(self._corrupt_bytes(bits, [0]))
        assert text != "error correcting ring"

    def test_too_many_errors_rejected(self):
        bits = encode("error correcting ring", 3, RedundancyScheme.REED_SOLOMON)
        corrupted = self._corrupt_bytes(bits, range(0, 80, 2))
        with pytest.raises(RedundancyValidationFailed):
            read_frame(corrupted)


class TestFrameHeader:
    def test_bytes_roundtrip(self):
        header = FrameHeader.build(3, 1, 300, 16)
        assert FrameHeader.from_bytes(header.to_bytes()) == header
        assert header.checksum_ok

    def test_big_endian_lengths(self):
        raw = FrameHeader.build(3, 1, 0x0102, 0x0304).to_bytes()
        assert raw[2:6] == b"\x01\x02\x03\x04"

    def test_wrong_size_raises(self):
        with pytest.raises(ValueError):
            FrameHeader.from_bytes(b"\x00" * 6)
