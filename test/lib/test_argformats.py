import os
import tempfile

from argparse import ArgumentTypeError

from westmix.lib.argformats import multibin, number

from .. import TestBase


class TestArgumentFormats(TestBase):

    def test_multibin_handlers(self):
        self.assertEqual(multibin('s:REDALERT'), B'REDALERT')
        self.assertEqual(multibin('u:AB'), B'A\0B\0')
        self.assertEqual(multibin('h:0102FF'), B'\x01\x02\xFF')
        self.assertEqual(multibin('plain text'), B'plain text')
        self.assertEqual(multibin(B'raw'), B'raw')

    def test_multibin_invalid_hex(self):
        with self.assertRaises(ArgumentTypeError):
            multibin('h:XYZ')

    def test_multibin_reads_files(self):
        with tempfile.TemporaryDirectory() as root:
            path = os.path.join(root, 'key.bin')
            with open(path, 'wb') as stream:
                stream.write(B'\x00\x01\x02')
            self.assertEqual(multibin(path), B'\x00\x01\x02')

    def test_number(self):
        self.assertEqual(number('10'), 10)
        self.assertEqual(number('0x10'), 16)
        self.assertEqual(number('1FH'), 31)
        self.assertEqual(number('ff'), 255)
        with self.assertRaises(ArgumentTypeError):
            number('ten')

    def test_number_bounds(self):
        nonnegative = number[0:]
        self.assertEqual(nonnegative('0'), 0)
        with self.assertRaises(ArgumentTypeError):
            nonnegative('-1')
        bounded = number[1:5]
        with self.assertRaises(ArgumentTypeError):
            bounded('5')
