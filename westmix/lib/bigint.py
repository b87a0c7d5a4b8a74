"""
A fixed width unsigned integer type with ten 32-bit words, sized exactly for the RSA modulus that
protects the Blowfish keys of encrypted MIX archives. The arithmetic deliberately avoids Python's
arbitrary precision integers: every operation works word by word and wraps modulo 2**320, and
modular reduction is done by shift-and-subtract long division.
"""
from __future__ import annotations

import functools

from typing import Iterable

from westmix.lib.types import buf

__all__ = ['BigInt320', 'mod_mul', 'mod_exp']

WORDS = 10
BYTES = WORDS * 4
MASK = 0xFFFFFFFF


def _compare(a: list[int], b: list[int]) -> int:
    for x, y in zip(reversed(a), reversed(b)):
        if x != y:
            return 1 if x > y else -1
    return 0


def _subtract(a: list[int], b: list[int]) -> None:
    borrow = 0
    for k, y in enumerate(b):
        d = a[k] - y - borrow
        borrow = d < 0
        a[k] = d & MASK


def _shift_left(a: list[int]) -> None:
    carry = 0
    for k, x in enumerate(a):
        a[k] = (x << 1 | carry) & MASK
        carry = x >> 31


def _shift_right(a: list[int]) -> None:
    carry = 0
    for k in range(len(a) - 1, -1, -1):
        x = a[k]
        a[k] = x >> 1 | carry << 31
        carry = x & 1


def _highest_bit(a: list[int]) -> int:
    for k in range(len(a) - 1, -1, -1):
        if x := a[k]:
            return 32 * k + x.bit_length() - 1
    return -1


@functools.total_ordering
class BigInt320:
    """
    An unsigned 320-bit integer stored as ten 32-bit words in little-endian word order.
    """
    __slots__ = 'words',

    words: list[int]

    def __init__(self, words: Iterable[int] = ()):
        words = [w & MASK for w in words]
        if len(words) > WORDS:
            raise ValueError(F'a {self.__class__.__name__} has at most {WORDS} words')
        words.extend(0 for _ in range(WORDS - len(words)))
        self.words = words

    @classmethod
    def FromInt(cls, value: int):
        return cls((value >> (32 * k)) & MASK for k in range(WORDS))

    @classmethod
    def FromBytes(cls, data: buf):
        """
        Read a big-endian byte string. Only the last 40 bytes are significant.
        """
        data = bytes(data[-BYTES:])
        data = bytes(BYTES - len(data)) + data
        return cls(int.from_bytes(data[k - 4:k], 'big') for k in range(BYTES, 0, -4))

    @classmethod
    def FromBytesLE(cls, data: buf, size: int | None = None):
        """
        Read `size` bytes of a little-endian byte string; by default the entire input is used.
        Bytes past the 40th are ignored.
        """
        if size is not None:
            data = data[:size]
        data = bytes(data[:BYTES])
        data = data + bytes(BYTES - len(data))
        return cls(int.from_bytes(data[k:k + 4], 'little') for k in range(0, BYTES, 4))

    def to_bytes(self, size: int = BYTES) -> bytes:
        """
        Convert to a big-endian byte string of the given size, truncating the most significant
        bytes or padding with zeros as necessary.
        """
        return self.to_bytes_le(size)[::-1]

    def to_bytes_le(self, size: int = BYTES) -> bytes:
        """
        Convert to a little-endian byte string of the given size, truncating the most significant
        bytes or padding with zeros as necessary.
        """
        data = b''.join(w.to_bytes(4, 'little') for w in self.words)
        if size <= BYTES:
            return data[:size]
        return data + bytes(size - BYTES)

    def __int__(self):
        return sum(w << (32 * k) for k, w in enumerate(self.words))

    def __repr__(self):
        return F'{self.__class__.__name__}(0x{int(self):X})'

    def __eq__(self, other):
        if not isinstance(other, BigInt320):
            return NotImplemented
        return self.words == other.words

    def __lt__(self, other: BigInt320):
        return _compare(self.words, other.words) < 0

    def __hash__(self):
        return hash(tuple(self.words))

    def compare(self, other: BigInt320) -> int:
        """
        Return a negative number, zero, or a positive number when this value is less than, equal
        to, or greater than the other value, respectively.
        """
        return _compare(self.words, other.words)

    def __add__(self, other: BigInt320):
        result = []
        carry = 0
        for x, y in zip(self.words, other.words):
            s = x + y + carry
            result.append(s & MASK)
            carry = s >> 32
        return BigInt320(result)

    def __sub__(self, other: BigInt320):
        result = list(self.words)
        _subtract(result, other.words)
        return BigInt320(result)

    def shl1(self):
        result = BigInt320(self.words)
        _shift_left(result.words)
        return result

    def shr1(self):
        result = BigInt320(self.words)
        _shift_right(result.words)
        return result

    def bit(self, index: int) -> bool:
        if not 0 <= index < 32 * WORDS:
            return False
        return bool(self.words[index >> 5] >> (index & 31) & 1)

    @property
    def highest_bit(self) -> int:
        """
        The index of the most significant set bit, or -1 when the value is zero.
        """
        return _highest_bit(self.words)

    @property
    def is_zero(self) -> bool:
        return not any(self.words)

    def __bool__(self):
        return not self.is_zero


def mod_mul(a: BigInt320, b: BigInt320, m: BigInt320) -> BigInt320:
    """
    Compute `a * b % m`. The full 640-bit product is computed with schoolbook multiplication and
    reduced by aligning the modulus with the highest bit of the remainder and subtracting it
    wherever it fits while shifting it back down.
    """
    if m.is_zero:
        return BigInt320()
    product = [0] * (2 * WORDS)
    for i, x in enumerate(a.words):
        if not x:
            continue
        carry = 0
        for j, y in enumerate(b.words):
            t = product[i + j] + x * y + carry
            product[i + j] = t & MASK
            carry = t >> 32
        k = i + WORDS
        while carry:
            t = product[k] + carry
            product[k] = t & MASK
            carry = t >> 32
            k += 1
    hp = _highest_bit(product)
    hm = m.highest_bit
    if hp >= hm:
        divisor = m.words + [0] * WORDS
        for _ in range(hp - hm):
            _shift_left(divisor)
        for _ in range(hp - hm + 1):
            if _compare(product, divisor) >= 0:
                _subtract(product, divisor)
            _shift_right(divisor)
    r = BigInt320(product[:WORDS])
    while r >= m:
        r = r - m
    return r


def mod_exp(base: BigInt320, exponent: BigInt320, modulus: BigInt320) -> BigInt320:
    """
    Compute `base ** exponent % modulus` by square-and-multiply, processing the exponent from its
    least significant bit upwards. An exponent of zero yields one.
    """
    result = BigInt320((1,))
    if exponent.is_zero:
        return result
    square = mod_mul(base, BigInt320((1,)), modulus)
    for k in range(exponent.highest_bit + 1):
        if exponent.bit(k):
            result = mod_mul(result, square, modulus)
        square = mod_mul(square, square, modulus)
    return result
