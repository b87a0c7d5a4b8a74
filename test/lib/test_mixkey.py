from westmix.lib.exceptions import DecryptionUnavailable
from westmix.lib.mixkey import (
    BLOWFISH_KEY_SIZE,
    KEY_BLOCK_SIZE,
    PUBLIC_MODULUS,
    MixKeyUnwrapper,
    unwrap_key,
)

from .. import TestBase, MixTestKey


class TestKeyUnwrap(TestBase):

    def test_public_key_dimensions(self):
        unwrapper = MixKeyUnwrapper()
        self.assertEqual(len(PUBLIC_MODULUS), 40)
        self.assertEqual(unwrapper.bit_length, 319)
        self.assertEqual(unwrapper.block_plain_size, 39)
        self.assertEqual(unwrapper.block_cipher_size, 40)
        self.assertEqual(unwrapper.block_count, 2)
        self.assertEqual(unwrapper.input_size, KEY_BLOCK_SIZE)

    def test_trivial_blocks(self):
        self.assertEqual(unwrap_key(bytes(KEY_BLOCK_SIZE)), bytes(BLOWFISH_KEY_SIZE))
        block = bytearray(KEY_BLOCK_SIZE)
        block[0] = 1
        block[40] = 1
        key = unwrap_key(block)
        self.assertEqual(len(key), BLOWFISH_KEY_SIZE)
        self.assertEqual(key, B'\x01' + bytes(38) + B'\x01' + bytes(16))

    def test_matches_modular_power(self):
        n = int.from_bytes(PUBLIC_MODULUS, 'big')
        block = self.generate_random_buffer(KEY_BLOCK_SIZE)
        c1 = int.from_bytes(block[:40], 'little') % n
        c2 = int.from_bytes(block[40:], 'little') % n
        m1 = pow(c1, 0x10001, n).to_bytes(40, 'little')[:39]
        m2 = pow(c2, 0x10001, n).to_bytes(40, 'little')[:39]
        self.assertEqual(unwrap_key(block), (m1 + m2)[:56])

    def test_round_trip_with_private_key(self):
        keypair = MixTestKey.Default()
        key = self.generate_random_buffer(BLOWFISH_KEY_SIZE)
        block = keypair.wrap(key)
        self.assertEqual(len(block), KEY_BLOCK_SIZE)
        self.assertEqual(keypair.unwrapper().unwrap(block), key)

    def test_trailing_data_is_ignored(self):
        keypair = MixTestKey.Default()
        key = self.generate_random_buffer(BLOWFISH_KEY_SIZE)
        self.assertEqual(keypair.unwrapper().unwrap(keypair.wrap(key) + B'JUNK'), key)

    def test_short_block(self):
        with self.assertRaises(DecryptionUnavailable):
            unwrap_key(bytes(79))

    def test_small_modulus(self):
        unwrapper = MixKeyUnwrapper((0x10001).to_bytes(3, 'big'))
        self.assertEqual(unwrapper.block_plain_size, 2)
        self.assertEqual(unwrapper.block_count, 28)
        with self.assertRaises(DecryptionUnavailable):
            unwrapper.unwrap(bytes(KEY_BLOCK_SIZE))

    def test_invalid_modulus(self):
        with self.assertRaises(ValueError):
            MixKeyUnwrapper(bytes(40))
        with self.assertRaises(ValueError):
            MixKeyUnwrapper(B'\x01')
