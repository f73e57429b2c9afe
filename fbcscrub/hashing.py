"""64-bit chunk hashing: SipHash-1-3 keyed with zeros."""

from __future__ import annotations

import struct

_MASK = (1 << 64) - 1


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (64 - bits))) & _MASK


def _rounds(v0: int, v1: int, v2: int, v3: int, count: int) -> tuple[int, int, int, int]:
    for _ in range(count):
        v0 = (v0 + v1) & _MASK
        v1 = _rotl(v1, 13) ^ v0
        v0 = _rotl(v0, 32)
        v2 = (v2 + v3) & _MASK
        v3 = _rotl(v3, 16) ^ v2
        v0 = (v0 + v3) & _MASK
        v3 = _rotl(v3, 21) ^ v0
        v2 = (v2 + v1) & _MASK
        v1 = _rotl(v1, 17) ^ v2
        v2 = _rotl(v2, 32)
    return v0, v1, v2, v3


def _siphash(data: bytes, k0: int, k1: int, c_rounds: int, d_rounds: int) -> int:
    """Generic SipHash-c-d over ``data`` with the 128-bit key ``(k0, k1)``."""
    data = bytes(data)
    v0 = k0 ^ 0x736F6D6570736575
    v1 = k1 ^ 0x646F72616E646F6D
    v2 = k0 ^ 0x6C7967656E657261
    v3 = k1 ^ 0x7465646279746573

    full_words = len(data) // 8
    for word in struct.unpack_from(f"<{full_words}Q", data):
        v3 ^= word
        v0, v1, v2, v3 = _rounds(v0, v1, v2, v3, c_rounds)
        v0 ^= word

    tail = data[full_words * 8:]
    last = int.from_bytes(tail, "little") | ((len(data) & 0xFF) << 56)
    v3 ^= last
    v0, v1, v2, v3 = _rounds(v0, v1, v2, v3, c_rounds)
    v0 ^= last

    v2 ^= 0xFF
    v0, v1, v2, v3 = _rounds(v0, v1, v2, v3, d_rounds)
    return v0 ^ v1 ^ v2 ^ v3


def hash_chunk(data: bytes | bytearray | memoryview) -> int:
    """Return the unsigned 64-bit hash used to identify a chunk of bytes."""
    return _siphash(bytes(data), 0, 0, 1, 3)