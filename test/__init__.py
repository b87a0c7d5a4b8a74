from __future__ import annotations

import functools
import logging
import math
import random
import string
import struct
import unittest

import westmix

from westmix.lib.namehash import name_hash


__all__ = ['westmix', 'TestBase', 'NameUnknownException', 'MixTestKey', 'build_mix']


class NameUnknownException(Exception):
    def __init__(self, name):
        super().__init__('could not resolve: {}'.format(name))


class MixTestKey:
    """
    A private RSA key of the same size as the retail key. It is used to create key blocks for
    encrypted test archives, since the private half of the retail key is unknown.
    """
    EXPONENT = 0x10001

    def __init__(self):
        from Cryptodome.Util.number import getPrime
        while True:
            p = getPrime(160)
            q = getPrime(160)
            n = p * q
            phi = (p - 1) * (q - 1)
            if n.bit_length() != 319 or math.gcd(self.EXPONENT, phi) != 1:
                continue
            break
        self.n = n
        self.d = pow(self.EXPONENT, -1, phi)
        self.bits = n.bit_length()
        self.plain_size = (self.bits - 1) // 8
        self.cipher_size = self.plain_size + 1

    @property
    def modulus(self) -> bytes:
        return self.n.to_bytes(40, 'big')

    def unwrapper(self):
        from westmix.lib.mixkey import MixKeyUnwrapper
        return MixKeyUnwrapper(self.modulus, self.EXPONENT)

    def wrap(self, key: bytes) -> bytes:
        count = -(-len(key) // self.plain_size)
        block = bytearray()
        for k in range(count):
            chunk = key[k * self.plain_size:(k + 1) * self.plain_size]
            m = int.from_bytes(chunk, 'little')
            block.extend(pow(m, self.d, self.n).to_bytes(self.cipher_size, 'little'))
        return bytes(block)

    @classmethod
    @functools.lru_cache(maxsize=None)
    def Default(cls):
        return cls()


def build_mix(
    files,
    flagged=False,
    checksum=False,
    encrypted=False,
    key: bytes = bytes(range(1, 57)),
    keypair: MixTestKey | None = None,
    data_size=None,
) -> bytes:
    """
    Assemble a MIX archive from a list of pairs of a name or hash and the file contents.
    """
    entries = []
    body = bytearray()
    for name, data in files:
        hash = name if isinstance(name, int) else name_hash(name)
        entries.append(struct.pack('<III', hash, len(body), len(data)))
        body.extend(data)
    if data_size is None:
        data_size = len(body)
    index = struct.pack('<hi', len(entries), data_size) + b''.join(entries)
    flags = checksum | (encrypted << 1)
    if encrypted:
        from Cryptodome.Cipher import Blowfish
        keypair = keypair or MixTestKey.Default()
        index += bytes(-len(index) % 8)
        index = keypair.wrap(key) + Blowfish.new(key, Blowfish.MODE_ECB).encrypt(index)
        flagged = True
    archive = bytearray()
    if flagged or flags:
        archive.extend(struct.pack('<HH', 0, flags))
    archive.extend(index)
    archive.extend(body)
    if checksum:
        archive.extend(bytes(range(0xA0, 0xA0 + 20)))
    return bytes(archive)


class TestBase(unittest.TestCase):

    def ldu(self, name, *args):
        unit = westmix.load(name)
        if unit is None:
            raise NameUnknownException(name)
        return unit.assemble(*args).log_detach()

    def generate_random_buffer(self, size):
        return bytes(random.randrange(0, 0x100) for _ in range(size))

    def generate_random_text(self, size):
        return ''.join(string.printable[
            random.randrange(0, len(string.printable))] for _ in range(size)).encode('UTF8')

    def setUp(self):
        random.seed(0xBAADF00D)  # guarantee deterministic 'random' buffers
        logging.disable(logging.CRITICAL)

    def assertContains(self, container, member, msg=None):
        self.assertIn(member, container, msg)
