"""
MIX archives do not store file names. Every entry is addressed by a 32-bit identifier that is
derived from the upper case file name by `westmix.lib.namehash.name_hash`.
"""
from __future__ import annotations

import struct

from westmix.lib.crypto import rotl32
from westmix.lib.types import buf

__all__ = ['name_hash', 'as_name_bytes']


def as_name_bytes(name: str | buf) -> bytes:
    """
    Convert a file name into the byte string that is hashed. Text is encoded as latin1 since the
    games use single byte code pages for their file names.
    """
    if isinstance(name, str):
        return name.encode('latin1')
    return bytes(name)


def name_hash(name: str | buf) -> int:
    """
    Compute the identifier of the given file name. The name is converted to upper case and padded
    with zero bytes to a multiple of four; the identifier is the sum of all little-endian 32-bit
    words of this string, where the accumulator is rotated left by one bit before each addition.
    The empty name maps to zero.
    """
    data = bytearray(as_name_bytes(name).upper())
    data.extend(bytes(-len(data) % 4))
    result = 0
    for word, in struct.iter_unpack('<I', data):
        result = rotl32(result, 1) + word & 0xFFFFFFFF
    return result
