"""
## Argument Formats

Command line arguments that represent binary data are given in **multibin** format:

- `s:string` is the UTF8 encoding of `string`
- `u:string` is the UTF16-LE encoding of `string`
- `h:string` is the byte sequence given by the hexadecimal string `string`

If a multibin argument does not use any handler, it is first interpreted as the path of an existing
file on disk whose contents are returned. If there is no such file, the UTF8 encoding of the string
is returned.

Numeric arguments are parsed by `westmix.lib.argformats.number`, which accepts Python integer
literals as well as hexadecimal numbers with an optional `H` suffix.
"""
from __future__ import annotations

import codecs
import os
import re

from argparse import ArgumentTypeError

__all__ = ['multibin', 'number']


def multibin(expression: str | bytes | bytearray) -> bytes:
    """
    This is the argument parser type for binary arguments; see the module documentation.
    """
    if not isinstance(expression, str):
        return bytes(expression)
    handler, colon, rest = expression.partition(':')
    if colon:
        if handler == 's':
            return rest.encode('utf8')
        if handler == 'u':
            return rest.encode('utf-16le')
        if handler == 'h':
            try:
                return bytes.fromhex(rest)
            except ValueError as E:
                raise ArgumentTypeError(F'invalid hexadecimal string: {rest}') from E
    if os.path.isfile(expression):
        with open(expression, 'rb') as stream:
            return stream.read()
    return codecs.encode(expression, 'utf8')


class number:
    __name__ = 'number'

    def __init__(self, min=None, max=None):
        self.min = min
        self.max = max

    def __getitem__(self, bounds):
        return self.__class__(bounds.start, bounds.stop)

    def __call__(self, value):
        if not isinstance(value, int):
            try:
                value = int(value, 0)
            except ValueError:
                match = re.fullmatch('(?:0x)?([A-F0-9]+)H?', value, flags=re.IGNORECASE)
                if not match:
                    raise ArgumentTypeError(F'not a number: {value}')
                value = int(match[1], 16)
        if self.min is not None and value < self.min:
            raise ArgumentTypeError(F'value {value} is less than the minimum {self.min}')
        if self.max is not None and value >= self.max:
            raise ArgumentTypeError(F'value {value} is not less than the maximum {self.max}')
        return value


number = number()
"""
The singleton instance of a class that parses integer arguments. This singleton can be slice
accessed to create new number parsers, e.g. `number[0:]` will refuse to parse negative integers.
"""
