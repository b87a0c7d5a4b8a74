from __future__ import annotations

import struct

from westmix.lib.mixkey import KEY_BLOCK_SIZE, PUBLIC_EXPONENT, PUBLIC_MODULUS, MixKeyUnwrapper
from westmix.lib.types import Param, buf
from westmix.units import Arg, Unit


class mixkey(Unit):
    """
    Recovers the 56-byte Blowfish key from the 80-byte key block of an encrypted MIX archive. By
    default, the input is the key block itself; with `-a`, the input is an entire archive and the key
    block is taken from its header. The public key of the retail archives is used unless another
    modulus is specified.
    """
    def __init__(
        self,
        archive: Param[bool, Arg.Switch('-a', '--archive', help='The input is an encrypted archive rather than a key block.')] = False,
        modulus: Param[buf, Arg.Binary('-m', '--modulus', help='Big-endian RSA modulus; the default is the retail key.')] = PUBLIC_MODULUS,
        exponent: Param[int, Arg.Number('-e', '--exponent', bound=(1, None), help='Public exponent, the default is %(default)s.')] = PUBLIC_EXPONENT,
    ):
        ...

    def process(self, data: bytearray) -> bytes:
        if self.args.archive:
            if len(data) < 4:
                raise ValueError('the input is too short to be an archive')
            first, flags = struct.unpack_from('<HH', data)
            if first or not flags & 2:
                raise ValueError('the input is not an encrypted archive')
            data = data[4:4 + KEY_BLOCK_SIZE]
        unwrapper = MixKeyUnwrapper(self.args.modulus, self.args.exponent)
        self.log_info(F'unwrapping {unwrapper.block_count} chunks with a {unwrapper.bit_length}-bit modulus')
        if len(data) > unwrapper.input_size:
            self.log_info(F'ignoring {len(data) - unwrapper.input_size} trailing bytes of input')
        return unwrapper.unwrap(data)
