#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from westmix.lib.lcw import decompress
from westmix.lib.types import Param
from westmix.units import Arg, Unit


class lcw(Unit):
    """
    LCW decompression, also known as Format80. This is the compression used for most graphics
    and many other assets stored in Westwood MIX archives.
    """
    def __init__(
        self,
        size: Param[int, Arg.Number('-s', '--size', bound=(0, None),
            help='The expected size of the decompressed data. By default, the output is not limited.')] = 0,
    ):
        super().__init__(size=size)

    def process(self, data: bytearray):
        size = self.args.size or None
        output = decompress(data, size)
        if size is not None and len(output) < size:
            self.log_info(F'decompressed {len(output)} bytes, expected {size}')
        return output
