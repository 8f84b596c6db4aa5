"""Bit manipulation and checksum utilities for ring code frames.

Handles conversion between byte strings and MSB-first bit sequences,
plus the 8-bit additive header checksum and the XOR data checksum.
"""

from __future__ import annotations

from collections.abc import Sequence


def bytes_to_bits(data: bytes) -> list[int]:
    """Convert bytes to a list of bits (MSB first).

    Args:
        data: Input bytes.

    Returns:
        List of 0s and 1s, eight per byte, MSB first.
    """
    bits: list[int] = []
    for byte in data:
        for i in range(7, -1, -1):
            bits.append((byte >> i) & 1)
    return bits


def bits_to_bytes(bits: Sequence[int]) -> bytes:
    """Pack MSB-first bits into bytes.

    A trailing partial byte is padded with zero bits.

    Args:
        bits: Sequence of 0s and 1s (a list or a numpy array).

    Returns:
        Packed bytes.
    """
    result = bytearray()
    n = len(bits)
    for i in range(0, n, 8):
        byte = 0
        for j in range(8):
            bit = int(bits[i + j]) if i + j < n else 0
            byte = (byte << 1) | (bit & 1)
        result.append(byte)
    return bytes(result)


def checksum8(data: bytes) -> int:
    """Sum of all bytes modulo 256."""
    return sum(data) & 0xFF


def xor_checksum(data: bytes) -> int:
    """XOR of all bytes."""
    value = 0
    for byte in data:
        value ^= byte
    return value
