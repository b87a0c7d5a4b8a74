import io
import os
import struct
import tempfile

from unittest import mock

import westmix

from westmix.lib.exceptions import (
    DecryptionUnavailable,
    InvalidFormat,
    MixError,
    NotFound,
    Truncated,
)
from westmix.lib.mix import Entry, MixArchive, MixFlags
from westmix.lib.mixkey import MixKeyUnwrapper
from westmix.lib.namehash import name_hash

from .. import TestBase, MixTestKey, build_mix


class TestMixArchive(TestBase):

    FILES = [
        ('TEST.DAT', B'The quick brown fox'),
        ('LAZY.DAT', B'jumps over the lazy dog'),
        ('EMPTY.DAT', B''),
    ]

    def check_contents(self, archive: MixArchive):
        self.assertEqual(archive.file_count, 3)
        self.assertEqual(len(archive), 3)
        for name, data in self.FILES:
            self.assertTrue(archive.file_exists(name))
            self.assertTrue(archive.file_exists(name.lower()))
            self.assertEqual(archive.file_size(name), len(data))
            self.assertEqual(archive.read(name), data)
        self.assertFalse(archive.file_exists('MISSING.DAT'))
        self.assertEqual(archive.file_size('MISSING.DAT'), 0)

    def test_legacy_layout(self):
        with westmix.open_memory(build_mix(self.FILES)) as archive:
            self.check_contents(archive)
            self.assertFalse(archive.is_encrypted)
            self.assertFalse(archive.has_checksum)
            self.assertIsNone(archive.checksum)
            self.assertEqual(archive.data_offset, 6 + 12 * 3)
            self.assertEqual(archive.data_size, 42)

    def test_single_entry_legacy_archive(self):
        data = B'Westwood Studios'
        with westmix.open_memory(build_mix([('TEST.DAT', data)])) as archive:
            self.assertTrue(archive.file_exists('TEST.DAT'))
            self.assertEqual(archive.read('TEST.DAT'), data)
            self.assertFalse(archive.file_exists('NOPE.DAT'))

    def test_flagged_layout(self):
        with westmix.open_memory(build_mix(self.FILES, flagged=True)) as archive:
            self.check_contents(archive)
            self.assertEqual(archive.flags, MixFlags(0))
            self.assertEqual(archive.data_offset, 4 + 6 + 12 * 3)

    def test_checksum(self):
        with westmix.open_memory(build_mix(self.FILES, checksum=True)) as archive:
            self.check_contents(archive)
            self.assertTrue(archive.has_checksum)
            self.assertTrue(archive.flags.Checksum)
            self.assertEqual(archive.checksum, bytes(range(0xA0, 0xB4)))

    def test_unknown_flags_are_ignored(self):
        data = bytearray(build_mix(self.FILES, flagged=True))
        data[2:4] = struct.pack('<H', 0x8000)
        with westmix.open_memory(data) as archive:
            self.check_contents(archive)
            self.assertFalse(archive.is_encrypted)

    def test_encrypted_layout(self):
        keypair = MixTestKey.Default()
        data = build_mix(self.FILES, encrypted=True, keypair=keypair)
        with westmix.open_memory(data, unwrapper=keypair.unwrapper()) as archive:
            self.check_contents(archive)
            self.assertTrue(archive.is_encrypted)
            self.assertEqual(archive.data_offset, 4 + 80 + 48)

    def test_encrypted_with_checksum(self):
        keypair = MixTestKey.Default()
        files = self.FILES[:2]
        data = build_mix(files, encrypted=True, checksum=True, keypair=keypair, key=bytes(56))
        with westmix.open_memory(data, unwrapper=keypair.unwrapper()) as archive:
            self.assertEqual(archive.flags, MixFlags.Checksum | MixFlags.Encrypted)
            self.assertEqual(archive.data_offset, 4 + 80 + 32)
            for name, contents in files:
                self.assertEqual(archive.read(name), contents)
            self.assertEqual(archive.checksum, bytes(range(0xA0, 0xB4)))

    def test_encrypted_key_block_unusable(self):
        data = build_mix(self.FILES, encrypted=True)
        unwrapper = MixKeyUnwrapper((0x10001).to_bytes(3, 'big'))
        with self.assertRaises(DecryptionUnavailable):
            westmix.open_memory(data, unwrapper=unwrapper)

    def test_encrypted_key_block_truncated(self):
        with self.assertRaises(Truncated):
            westmix.open_memory(struct.pack('<HH', 0, 2) + bytes(40))

    def test_empty_flagged_archive(self):
        with westmix.open_memory(struct.pack('<HHhi', 0, 0, 0, 0)) as archive:
            self.assertEqual(archive.file_count, 0)
            self.assertIsNone(archive.find('ANY.DAT'))

    def test_entry_count_bounds(self):
        with self.assertRaises(InvalidFormat):
            westmix.open_memory(struct.pack('<hi', -1, 0))
        with self.assertRaises(InvalidFormat):
            westmix.open_memory(build_mix(self.FILES), max_entries=2)
        with westmix.open_memory(build_mix(self.FILES), max_entries=3) as archive:
            self.assertEqual(archive.file_count, 3)

    def test_invalid_format_is_value_error(self):
        with self.assertRaises(ValueError):
            westmix.open_memory(struct.pack('<hi', -7, 0))

    def test_truncated_header(self):
        with self.assertRaises(Truncated):
            westmix.open_memory(B'\x01')
        with self.assertRaises(Truncated):
            westmix.open_memory(struct.pack('<hi', 5, 0) + bytes(12))

    def test_truncated_entry(self):
        data = build_mix(self.FILES[:2])[:-4]
        with westmix.open_memory(data) as archive:
            with self.assertRaises(Truncated) as context:
                archive.read('LAZY.DAT')
            self.assertEqual(bytes(context.exception), B'jumps over the lazy')
            self.assertIsNone(archive.alloc_read('LAZY.DAT'))
            self.assertEqual(archive.read('TEST.DAT'), B'The quick brown fox')

    def test_missing_entry(self):
        with westmix.open_memory(build_mix(self.FILES)) as archive:
            with self.assertRaises(NotFound):
                archive.read('MISSING.DAT')
            with self.assertRaises(KeyError):
                archive.read(0x12345678)
            self.assertIsNone(archive.alloc_read('MISSING.DAT'))
            self.assertNotIn('MISSING.DAT', archive)
            self.assertIn('TEST.DAT', archive)

    def test_lookup_by_hash_and_entry(self):
        with westmix.open_memory(build_mix(self.FILES)) as archive:
            entry = archive.find('TEST.DAT')
            self.assertIsInstance(entry, Entry)
            self.assertEqual(entry.hash, name_hash('TEST.DAT'))
            self.assertEqual(archive.find(entry.hash), entry)
            self.assertEqual(archive.read(entry), B'The quick brown fox')
            self.assertEqual(archive.read(name_hash('LAZY.DAT')), B'jumps over the lazy dog')

    def test_entries_are_sorted(self):
        files = [(F'FILE{k:02d}.DAT', bytes([k]) * k) for k in range(20)]
        with westmix.open_memory(build_mix(files)) as archive:
            hashes = [entry.hash for entry in archive]
            self.assertEqual(hashes, sorted(hashes))
            self.assertEqual(len(archive.entries), 20)
            for name, data in files:
                self.assertEqual(archive.read(name), data)

    def test_duplicate_hashes(self):
        files = [('DUP.DAT', B'first'), ('OTHER.DAT', B'other'), ('DUP.DAT', B'second')]
        with westmix.open_memory(build_mix(files)) as archive:
            self.assertEqual(archive.file_count, 2)
            self.assertEqual(archive.read('DUP.DAT'), B'first')

    def test_read_into(self):
        with westmix.open_memory(build_mix(self.FILES)) as archive:
            buffer = bytearray(9)
            self.assertEqual(archive.read_into('TEST.DAT', buffer), 9)
            self.assertEqual(buffer, B'The quick')
            buffer = bytearray(32)
            self.assertEqual(archive.read_into('TEST.DAT', buffer), 19)
            self.assertEqual(buffer[:19], B'The quick brown fox')
            with self.assertRaises(NotFound):
                archive.read_into('MISSING.DAT', buffer)

    def test_read_lcw(self):
        files = [('PACKED.BIN', B'\x83abc\xFE\x04\x00d\x80')]
        with westmix.open_memory(build_mix(files)) as archive:
            self.assertEqual(archive.read_lcw('PACKED.BIN'), B'abcdddd')
            self.assertEqual(archive.read_lcw('PACKED.BIN', 5), B'abcdd')

    def test_nested_archive(self):
        inner = build_mix(self.FILES, flagged=True)
        outer = build_mix([('README.TXT', B'hello'), ('INNER.MIX', inner)])
        archive = westmix.open_memory(outer, name='OUTER.MIX')
        nested = archive.open_nested('INNER.MIX')
        self.assertEqual(nested.name, 'OUTER.MIX/INNER.MIX')
        archive.close()
        self.check_contents(nested)
        nested.close()

    def test_nested_archive_by_hash(self):
        inner = build_mix(self.FILES)
        outer = build_mix([('INNER.MIX', inner)])
        with westmix.open_memory(outer, name='OUTER.MIX') as archive:
            with archive.open_nested(name_hash('INNER.MIX')) as nested:
                self.assertEqual(nested.name, F'OUTER.MIX/{name_hash("INNER.MIX"):08X}')
                self.check_contents(nested)
            with self.assertRaises(NotFound):
                archive.open_nested('MISSING.MIX')

    def test_closed_archive(self):
        archive = westmix.open_memory(build_mix(self.FILES))
        archive.close()
        archive.close()
        self.assertTrue(archive.closed)
        with self.assertRaises(ValueError):
            archive.read('TEST.DAT')

    def test_borrowed_buffer_is_released(self):
        data = bytearray(build_mix(self.FILES))
        with westmix.open_memory(data) as archive:
            self.check_contents(archive)
            with self.assertRaises(BufferError):
                data.extend(B'x')
        data.extend(B'x')

    def test_owned_buffer(self):
        data = bytearray(build_mix(self.FILES))
        archive = westmix.open_memory(data, owns=True)
        self.check_contents(archive)
        archive.close()
        self.assertTrue(archive.closed)

    def test_failed_open_releases_buffer(self):
        data = bytearray(struct.pack('<hi', -1, 0))
        with self.assertRaises(MixError):
            westmix.open_memory(data)
        data.extend(B'x')

    def test_stream(self):
        stream = io.BytesIO(build_mix(self.FILES, checksum=True))
        with westmix.open_stream(stream) as archive:
            self.check_contents(archive)
            self.assertEqual(archive.checksum, bytes(range(0xA0, 0xB4)))
        self.assertFalse(stream.closed)

    def test_path(self):
        with tempfile.TemporaryDirectory() as root:
            path = os.path.join(root, 'TEST.MIX')
            with open(path, 'wb') as stream:
                stream.write(build_mix(self.FILES))
            with westmix.open(path) as archive:
                self.assertEqual(archive.name, path)
                self.check_contents(archive)
            with self.assertRaises(NotFound):
                westmix.open(os.path.join(root, 'MISSING.MIX'))
            with self.assertRaises(NotFound):
                westmix.open(root)

    def test_unreadable_path(self):
        with mock.patch('io.open', side_effect=PermissionError(13, 'Permission denied')):
            with self.assertRaises(NotFound) as context:
                westmix.open('LOCAL.MIX')
        self.assertIsInstance(context.exception, MixError)
        self.assertIsInstance(context.exception.__cause__, PermissionError)

    def test_name_outside_code_page(self):
        with westmix.open_memory(build_mix(self.FILES)) as archive:
            self.assertIsNone(archive.find('\u65E5\u672C.DAT'))
            self.assertFalse(archive.file_exists('\u65E5\u672C.DAT'))
            self.assertEqual(archive.file_size('\u65E5\u672C.DAT'), 0)
            with self.assertRaises(NotFound):
                archive.read('\u65E5\u672C.DAT')
            self.assertIsNone(archive.alloc_read('\u65E5\u672C.DAT'))

    def test_repr(self):
        with MixArchive.FromBuffer(build_mix(self.FILES), name='TEST.MIX') as archive:
            self.assertEqual(repr(archive), "MixArchive('TEST.MIX')")
