"""
Exceptions raised by the archive layer. All of them derive from `westmix.lib.exceptions.MixError`
so that callers which probe several candidate archives can catch a single type and move on to
the next candidate.
"""
from __future__ import annotations

from westmix.lib.types import buf


class MixError(Exception):
    """
    Base class for all errors raised while opening or reading MIX archives.
    """


class NotFound(MixError, KeyError):
    """
    An archive file could not be found, or an entry lookup by name or hash failed.
    """
    def __init__(self, what: str | int):
        if isinstance(what, int):
            what = F'entry with id {what:08X}'
        super().__init__(what)
        self.what = what

    def __str__(self):
        return F'not found: {self.what}'


class InvalidFormat(MixError, ValueError):
    """
    The header of an archive is implausible; for example, its entry count is out of bounds.
    """


class DecryptionUnavailable(MixError):
    """
    The archive index is encrypted, but no usable Blowfish key could be derived from its key block.
    """


class Truncated(MixError, EOFError):
    """
    Fewer bytes were available than the archive declares. The exception carries the data that
    could be read before the end of the input was reached.
    """
    def __init__(self, size: int, partial: buf = B''):
        super().__init__(F'expected {size} bytes, but only {len(partial)} were available')
        self.size = size
        self.partial = partial

    def __bytes__(self):
        return bytes(self.partial)


class OutOfMemory(MixError, MemoryError):
    """
    A buffer for an entry could not be allocated.
    """
