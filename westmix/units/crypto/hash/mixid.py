from __future__ import annotations

from westmix.lib.namehash import name_hash
from westmix.lib.types import buf
from westmix.units.crypto.hash import HashUnit


class mixid(HashUnit):
    """
    Computes the identifier under which a file of the given name is stored in a MIX archive. Leading
    and trailing whitespace of the input is ignored and the name is not case sensitive. The output
    is the identifier as four little-endian bytes, or eight hexadecimal digits when `-t` is given.
    """
    def _algorithm(self, data: buf) -> int:
        name = bytes(data).strip()
        self.log_debug(F'computing identifier for name: {name!r}')
        return name_hash(name)

    def _digest(self, value: int) -> bytes:
        return value.to_bytes(4, 'little')
