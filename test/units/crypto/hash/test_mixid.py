from ... import TestUnitBase


class TestMixID(TestUnitBase):

    def test_binary_output(self):
        unit = self.load()
        self.assertEqual(unit(B'ABCD'), bytes.fromhex('41424344'))
        self.assertEqual(unit(B'ABCDE'), bytes.fromhex('C7848688'))

    def test_text_output(self):
        unit = self.load(text=True)
        self.assertEqual(unit(B'abcde'), B'888684C7')
        self.assertEqual(unit(B''), B'00000000')

    def test_whitespace_is_ignored(self):
        unit = self.load(text=True)
        self.assertEqual(unit(B'  Local.Mix\r\n'), unit(B'LOCAL.MIX'))

    def test_command_line(self):
        unit = self.assemble('-t')
        self.assertEqual(unit(B'A\n'), B'00000041')
