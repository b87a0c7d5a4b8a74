"""
Reading of little-endian binary structures from memory. The archive index is parsed with the
`westmix.lib.structures.StructReader` and `westmix.lib.structures.Struct` classes from this module.
"""
from __future__ import annotations

import enum
import io
import struct

from typing import TYPE_CHECKING, Generic, TypeVar, Union, cast

if TYPE_CHECKING:
    from typing import Generator, Self

    from westmix.lib.types import buf

    T = TypeVar('T', bound=Union[bytearray, bytes, memoryview])
else:
    T = TypeVar('T')


UnpackType = Union[int, bool, float, bytes]


class EOF(EOFError):
    """
    Raised by a `westmix.lib.structures.StructReader` when fewer bytes remain than were requested.
    The bytes that could still be read are available from the exception.
    """
    def __init__(self, size: int, rest: buf = B''):
        super().__init__(F'Unexpected end of buffer; attempted to read {size} bytes, but got only {len(rest)}.')
        self.rest = rest
        self.size = size

    def __bytes__(self):
        return bytes(self.rest)


class MemoryFile(Generic[T], io.RawIOBase):
    """
    A read-only file-like view of a byte buffer. Reads return slices of the buffer, so they have
    the same type as the buffer itself.
    """
    _data: T
    _cursor: int

    def __init__(self, data: T):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(F'Invalid input: {data!r}.')
        super().__init__()
        self._data = data
        self._cursor = 0

    def __len__(self):
        return len(self._data)

    def readable(self) -> bool:
        return not self.closed

    def seekable(self) -> bool:
        return not self.closed

    @property
    def eof(self) -> bool:
        return self.closed or self._cursor >= len(self._data)

    @property
    def remaining_bytes(self) -> int:
        return len(self._data) - self._cursor

    def read(self, size: int | None = None, peek: bool = False) -> T:
        start = self._cursor
        end = len(self._data)
        if size is not None and size >= 0:
            end = min(end, start + size)
        if not peek:
            self._cursor = end
        return self._data[start:end]

    def readinto(self, b) -> int:
        data = self.read(len(b))
        b[:len(data)] = data
        return len(data)

    def tell(self) -> int:
        return self._cursor

    def seek(self, offset: int, whence=io.SEEK_SET) -> int:
        if whence == io.SEEK_SET and offset < 0:
            raise ValueError('no negative offsets allowed for SEEK_SET.')
        base = {io.SEEK_SET: 0, io.SEEK_CUR: self._cursor, io.SEEK_END: len(self._data)}[whence]
        self._cursor = max(base + offset, 0)
        return self._cursor

    def getbuffer(self) -> memoryview:
        return memoryview(self._data)

    def getvalue(self) -> T:
        return self._data


class StructReader(MemoryFile[T]):
    """
    A `westmix.lib.structures.MemoryFile` with methods to read integers and `struct` formats. The
    byte order is little-endian unless `bigendian` is set.
    """
    def __init__(self, data: T, bigendian: bool = False):
        super().__init__(data)
        self.bigendian = bigendian

    @property
    def byteorder_format(self) -> str:
        return '>' if self.bigendian else '<'

    @property
    def byteorder_name(self):
        return 'big' if self.bigendian else 'little'

    def read_exactly(self, size: int | None = None, peek: bool = False) -> T:
        """
        Like `read`, but raises `westmix.lib.structures.EOF` if fewer than `size` bytes remain.
        """
        data = self.read(size, peek)
        if size and len(data) < size:
            raise EOF(size, data)
        return data

    def read_integer(self, size: int, peek: bool = False, signed: bool = False) -> int:
        """
        Read an integer of the given size in bits, which has to be a multiple of eight.
        """
        if size % 8:
            raise ValueError(F'A {self.__class__.__name__} can only read integers of a whole number of bytes, not {size} bits.')
        return int.from_bytes(self.read_exactly(size // 8, peek), self.byteorder_name, signed=signed)

    def read_struct(self, spec: str, peek=False) -> list[UnpackType]:
        """
        Unpack a format of the `struct` module. Unless the format starts with a byte order
        character, the byte order of the reader is used.
        """
        if not spec:
            raise ValueError('no format specified')
        if spec[:1] not in '<!=@>':
            spec = F'{self.byteorder_format}{spec}'
        return list(struct.unpack(spec, self.read_exactly(struct.calcsize(spec), peek)))

    def u8(self, peek: bool = False) -> int:
        return self.read_integer(8, peek)

    def u16(self, peek: bool = False) -> int:
        return self.read_integer(16, peek)

    def u32(self, peek: bool = False) -> int:
        return self.read_integer(32, peek)

    def i16(self, peek: bool = False) -> int:
        return self.read_integer(16, peek, signed=True)

    def i32(self, peek: bool = False) -> int:
        return self.read_integer(32, peek, signed=True)


class Struct(Generic[T]):
    """
    Base class for parsed structures. A subclass reads its fields from a
    `westmix.lib.structures.StructReader` in its initialization routine and is instantiated via
    `Parse`, which also accepts a plain buffer:

        index = MixIndex.Parse(data, max_entries)

    The bytes that were consumed by the structure are kept as its binary representation.
    """
    _data: memoryview

    @classmethod
    def Parse(cls, reader: T | StructReader[T], *args, **kwargs) -> Self:
        if not isinstance(reader, StructReader):
            reader = StructReader(reader)
        start = reader.tell()
        self = cls(reader, *args, **kwargs)
        self._data = reader.getbuffer()[start:reader.tell()]
        return self

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def __init__(self, reader: StructReader[T], *args, **kwargs):
        pass


class FlagAccessMixin:
    """
    Mixed into an `enum.IntFlag`, this class allows to test for a flag by attribute access and to
    iterate over the flags that are set:

        class MixFlags(FlagAccessMixin, enum.IntFlag):
            Checksum = 1
            Encrypted = 2

        if MixFlags(3).Encrypted:
            decrypt()

    A flag value is represented by its name.
    """
    def __getattribute__(self, name: str):
        if not name.startswith('_'):
            try:
                flag = type(self)[name]
            except KeyError:
                pass
            else:
                return flag in self
        return super().__getattribute__(name)

    def __iter__(self) -> Generator[Self]:
        for flag in type(self):
            if flag in self:
                yield cast('Self', flag)

    def __repr__(self):
        if name := self.name:
            return name
        return super().__repr__()
