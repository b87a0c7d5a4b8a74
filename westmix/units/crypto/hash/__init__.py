"""
Implements the hash algorithms of the MIX format.
"""
from __future__ import annotations

from westmix.lib.types import Param, buf
from westmix.units import Arg, Unit, abc


class HashUnit(Unit, abstract=True):

    @abc.abstractmethod
    def _algorithm(self, data: buf) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def _digest(self, value: int) -> bytes:
        raise NotImplementedError

    def __init__(
        self,
        text: Param[bool, Arg.Switch('-t', '--text', help='Output a hexadecimal representation of the hash.')] = False,
        **kwargs
    ):
        super().__init__(text=text, **kwargs)

    def process(self, data: bytearray) -> bytes:
        value = self._algorithm(data)
        digest = self._digest(value)
        if self.args.text:
            return digest[::-1].hex().upper().encode(self.codec)
        return digest
