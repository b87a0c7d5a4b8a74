import enum
import io

from westmix.lib.structures import EOF, FlagAccessMixin, MemoryFile, Struct, StructReader

from .. import TestBase


class TestStructures(TestBase):

    def test_memoryfile(self):
        with MemoryFile(B'Westwood Studios') as mem:
            self.assertTrue(mem.readable())
            self.assertTrue(mem.seekable())
            self.assertEqual(mem.read(8), B'Westwood')
            self.assertEqual(mem.tell(), 8)
            self.assertEqual(mem.remaining_bytes, 8)
            self.assertEqual(mem.read(1, peek=True), B' ')
            self.assertEqual(mem.tell(), 8)
            mem.seek(-7, io.SEEK_END)
            self.assertEqual(mem.read(), B'Studios')
            self.assertTrue(mem.eof)
            self.assertEqual(mem.read(), B'')
            mem.seek(0)
            self.assertEqual(bytes(mem.getbuffer()[:4]), B'West')
            self.assertEqual(mem.getvalue(), B'Westwood Studios')

    def test_memoryfile_requires_buffer(self):
        with self.assertRaises(TypeError):
            MemoryFile('text')

    def test_structreader_integers(self):
        reader = StructReader(bytes.fromhex('FFFF 78563412 0100 FEFFFFFF 2A'))
        self.assertEqual(reader.i16(), -1)
        self.assertEqual(reader.u32(), 0x12345678)
        self.assertEqual(reader.u16(), 1)
        self.assertEqual(reader.i32(), -2)
        self.assertEqual(reader.u8(), 0x2A)
        with self.assertRaises(EOF):
            reader.u8()

    def test_structreader_big_endian(self):
        reader = StructReader(bytes.fromhex('1234 12345678'), bigendian=True)
        self.assertEqual(reader.u16(), 0x1234)
        self.assertEqual(reader.read_struct('<I'), [0x78563412])

    def test_structreader_eof_keeps_rest(self):
        reader = StructReader(B'abc')
        with self.assertRaises(EOF) as context:
            reader.read_exactly(5)
        self.assertEqual(bytes(context.exception), B'abc')
        with self.assertRaises(ValueError):
            reader.read_integer(12)

    def test_struct_parse(self):
        class Pair(Struct):
            def __init__(self, reader: StructReader, scale: int):
                self.a, self.b = reader.read_struct('HH')
                self.a *= scale

        pair = Pair.Parse(bytes.fromhex('0100 0200 FFFF'), 3)
        self.assertEqual((pair.a, pair.b), (3, 2))
        self.assertEqual(len(pair), 4)
        self.assertEqual(bytes(pair), bytes.fromhex('0100 0200'))

    def test_flag_access(self):
        class Flags(FlagAccessMixin, enum.IntFlag):
            Checksum = 1
            Encrypted = 2

        flags = Flags(2)
        self.assertTrue(flags.Encrypted)
        self.assertFalse(flags.Checksum)
        self.assertEqual(list(Flags(3)), [Flags.Checksum, Flags.Encrypted])
        self.assertEqual(repr(Flags.Checksum), 'Checksum')
