"""
Encrypted MIX archives carry an 80-byte key block directly after their flags word. It contains the
56-byte Blowfish key for the archive index, encrypted with the private half of a fixed RSA key
pair. This module implements the raw public key operation that recovers the Blowfish key. There is
no padding scheme and no integrity check; a wrong key block yields a wrong Blowfish key.
"""
from __future__ import annotations

import base64

from westmix.lib.bigint import BigInt320, mod_exp
from westmix.lib.environment import logger
from westmix.lib.exceptions import DecryptionUnavailable
from westmix.lib.types import buf

__all__ = [
    'KEY_BLOCK_SIZE',
    'BLOWFISH_KEY_SIZE',
    'PUBLIC_EXPONENT',
    'PUBLIC_MODULUS',
    'MixKeyUnwrapper',
    'unwrap_key',
]

KEY_BLOCK_SIZE = 80
BLOWFISH_KEY_SIZE = 56
PUBLIC_EXPONENT = 0x10001

# DER encoded INTEGER as it is embedded in the game executables
_PUBLIC_KEY_DER = 'AihRvNoIbTn85FZRYNZRcT+i6KpU+maCsEqr3Q5q+LDB5tH7Tz2qQ38V'

PUBLIC_MODULUS = base64.b64decode(_PUBLIC_KEY_DER)[2:]


class MixKeyUnwrapper:
    """
    Performs the public key operation of a given RSA key on a key block. The default arguments
    correspond to the key that is used by all retail archives.
    """
    def __init__(self, modulus: buf = PUBLIC_MODULUS, exponent: int = PUBLIC_EXPONENT):
        self.modulus = BigInt320.FromBytes(modulus)
        if self.modulus.is_zero:
            raise ValueError('the modulus must not be zero')
        self.exponent = BigInt320.FromInt(exponent)
        self.bit_length = self.modulus.highest_bit + 1
        self.block_plain_size = (self.bit_length - 1) // 8
        if self.block_plain_size < 1:
            raise ValueError(F'a modulus of {self.bit_length} bits is too small')
        self.block_cipher_size = self.block_plain_size + 1
        self.block_count = (BLOWFISH_KEY_SIZE - 1) // self.block_plain_size + 1

    @property
    def input_size(self) -> int:
        return self.block_count * self.block_cipher_size

    def unwrap(self, block: buf) -> bytes:
        """
        Decrypt the key block and return the 56-byte Blowfish key. The input is split into chunks
        of `block_cipher_size` bytes which are each interpreted as a little-endian integer; every
        chunk is raised to the public exponent and the `block_plain_size` least significant bytes
        of each result are concatenated.
        """
        view = memoryview(block)
        if len(view) < self.input_size:
            raise DecryptionUnavailable(
                F'the key block has {len(view)} bytes, but {self.input_size} are required')
        log = logger(__name__)
        plain = bytearray()
        for k in range(self.block_count):
            offset = k * self.block_cipher_size
            chunk = BigInt320.FromBytesLE(view[offset:offset + self.block_cipher_size])
            plain.extend(mod_exp(chunk, self.exponent, self.modulus).to_bytes_le(self.block_plain_size))
            log.debug(F'unwrapped key block chunk {k + 1} of {self.block_count}')
        return bytes(plain[:BLOWFISH_KEY_SIZE])


_default_unwrapper: MixKeyUnwrapper | None = None


def unwrap_key(block: buf) -> bytes:
    """
    Recover the Blowfish key from the key block of an encrypted archive using the public key that
    is used by all retail archives.
    """
    global _default_unwrapper
    if _default_unwrapper is None:
        _default_unwrapper = MixKeyUnwrapper()
    return _default_unwrapper.unwrap(block)
