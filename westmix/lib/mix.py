"""
Reading of Westwood MIX archives. A MIX archive is a flat container of files that are addressed
only by the `westmix.lib.namehash.name_hash` of their names. There are two layouts:

- The legacy layout starts immediately with the index header `{i16 count; i32 data_size}`,
  followed by `count` entries of the form `{u32 hash; u32 offset; u32 size}` and the data.
- The flagged layout starts with a zero word and a flags word. If the index is encrypted, an
  80-byte key block follows which contains the Blowfish key for the index in RSA encrypted form,
  and then the index itself, encrypted with Blowfish in ECB mode and padded to a multiple of eight
  bytes. Otherwise, the plain index follows the flags word. The checksum flag indicates a 20-byte
  digest at the end of the archive which is never verified.

Entry offsets are relative to the first byte after the index. The entry table is sorted by hash
when the archive is opened so that lookups can use a binary search.
"""
from __future__ import annotations

import bisect
import enum
import io
import os
import struct

from abc import ABC, abstractmethod
from typing import IO, TYPE_CHECKING, Iterator, NamedTuple, Union

from westmix.lib.blowfish import Blowfish
from westmix.lib.environment import environment, logger
from westmix.lib.exceptions import (
    DecryptionUnavailable,
    InvalidFormat,
    MixError,
    NotFound,
    OutOfMemory,
    Truncated,
)
from westmix.lib.lcw import decompress
from westmix.lib.mixkey import KEY_BLOCK_SIZE, MixKeyUnwrapper, unwrap_key
from westmix.lib.namehash import name_hash
from westmix.lib.structures import FlagAccessMixin, Struct, StructReader
from westmix.lib.types import buf

if TYPE_CHECKING:
    from typing import Self

__all__ = [
    'Entry',
    'MixArchive',
    'MixFlags',
    'MixIndex',
    'open',
    'open_memory',
    'open_stream',
]

EntryKey = Union[str, bytes, int, 'Entry']

CHECKSUM_SIZE = 20
HEADER_SIZE = 6
ENTRY_SIZE = 12

log = logger(__name__)


class MixFlags(FlagAccessMixin, enum.IntFlag):
    Checksum = 1
    Encrypted = 2


class Entry(NamedTuple):
    hash: int
    offset: int
    size: int


def _check_count(count: int, max_entries: int | None, hint: str | None = None):
    if max_entries is None:
        max_entries = environment.max_entries.value
    if not 0 <= count <= max_entries:
        message = F'the index declares {count} entries, which is not in range [0, {max_entries}]'
        if hint:
            message = F'{message}; {hint}'
        raise InvalidFormat(message)


class MixIndex(Struct):
    """
    The index header and the entry table, in the order in which they are stored.
    """
    def __init__(self, reader: StructReader, max_entries: int | None = None):
        self.count = count = reader.i16()
        self.data_size = reader.i32()
        _check_count(count, max_entries)
        self.entries = [Entry(*reader.read_struct('III')) for _ in range(count)]

    @staticmethod
    def size(count: int) -> int:
        return HEADER_SIZE + ENTRY_SIZE * count


class _Source(ABC):
    @abstractmethod
    def read_at(self, offset: int, size: int) -> buf:
        ...

    @property
    @abstractmethod
    def size(self) -> int:
        ...

    @abstractmethod
    def close(self) -> None:
        ...


class _StreamSource(_Source):
    def __init__(self, stream: IO[bytes], owned: bool):
        self.stream = stream
        self.owned = owned

    def read_at(self, offset: int, size: int) -> bytes:
        self.stream.seek(offset, io.SEEK_SET)
        return self.stream.read(size)

    @property
    def size(self) -> int:
        return self.stream.seek(0, io.SEEK_END)

    def close(self) -> None:
        if self.owned:
            self.stream.close()


class _BorrowedMemory(_Source):
    def __init__(self, data: buf):
        self.view = memoryview(data)

    def read_at(self, offset: int, size: int) -> memoryview:
        return self.view[offset:offset + size]

    @property
    def size(self) -> int:
        return len(self.view)

    def close(self) -> None:
        self.view.release()


class _OwnedMemory(_BorrowedMemory):
    def __init__(self, data: buf):
        super().__init__(data)
        self.data = data

    def close(self) -> None:
        super().close()
        self.data = None


class MixArchive:
    """
    An open MIX archive. Instances are created with `westmix.lib.mix.open`,
    `westmix.lib.mix.open_memory`, or `westmix.lib.mix.open_stream` and should be closed when they
    are no longer required, which is done automatically when they are used as a context manager.
    All lookup methods accept a file name, a file name hash, or an `westmix.lib.mix.Entry`.
    """
    def __init__(
        self,
        source: _Source,
        name: str = '',
        max_entries: int | None = None,
        unwrapper: MixKeyUnwrapper | None = None,
    ):
        self.name = name
        self._source = source
        self._closed = False
        try:
            self._parse(max_entries, unwrapper)
        except BaseException:
            self._closed = True
            source.close()
            raise

    @classmethod
    def FromPath(cls, path: str | os.PathLike, **kwargs) -> Self:
        try:
            stream = io.open(path, 'rb')
        except OSError as E:
            raise NotFound(os.fspath(path)) from E
        return cls(_StreamSource(stream, True), name=os.fspath(path), **kwargs)

    @classmethod
    def FromBuffer(cls, data: buf, owns: bool = False, **kwargs) -> Self:
        source = _OwnedMemory(data) if owns else _BorrowedMemory(data)
        return cls(source, **kwargs)

    @classmethod
    def FromStream(cls, stream: IO[bytes], **kwargs) -> Self:
        kwargs.setdefault('name', getattr(stream, 'name', ''))
        return cls(_StreamSource(stream, False), **kwargs)

    def _read_exactly(self, offset: int, size: int) -> buf:
        data = self._source.read_at(offset, size)
        if len(data) < size:
            raise Truncated(size, bytes(data))
        return data

    def _parse(self, max_entries: int | None, unwrapper: MixKeyUnwrapper | None):
        first, flags = struct.unpack('<HH', self._read_exactly(0, 4))
        if first:
            self.flags = MixFlags(0)
            offset = 0
        else:
            if flags & ~0x3:
                log.debug(F'ignoring unknown archive flags: {flags:#06x}')
            self.flags = MixFlags(flags & 0x3)
            offset = 4
        if self.flags.Encrypted:
            index = self._decrypt_index(max_entries, unwrapper)
            offset += KEY_BLOCK_SIZE
        else:
            count, = struct.unpack_from('<h', self._read_exactly(offset, HEADER_SIZE))
            _check_count(count, max_entries)
            index = self._read_exactly(offset, MixIndex.size(count))
        parsed = MixIndex.Parse(bytes(index), max_entries)
        offset += len(index)
        self.data_offset = offset
        self.data_size = parsed.data_size
        table: dict[int, Entry] = {}
        for entry in parsed.entries:
            if table.setdefault(entry.hash, entry) is not entry:
                log.warning(F'ignoring duplicate entry for id {entry.hash:08X} in {self!r}')
        self._entries = sorted(table.values())
        self._hashes = [e.hash for e in self._entries]
        log.info(F'opened {self!r} with {len(self._entries)} entries, data section at {offset:#x}')
        available = self._source.size - offset
        if self.flags.Checksum:
            available -= CHECKSUM_SIZE
        if self.data_size > available:
            log.warning(F'{self!r} declares {self.data_size} bytes of data, but only {available} are available')

    def _decrypt_index(self, max_entries: int | None, unwrapper: MixKeyUnwrapper | None) -> bytearray:
        key_block = self._read_exactly(4, KEY_BLOCK_SIZE)
        try:
            key = unwrap_key(key_block) if unwrapper is None else unwrapper.unwrap(key_block)
            cipher = Blowfish(key)
        except ValueError as E:
            raise DecryptionUnavailable(F'failed to derive the index key: {E!s}') from E
        start = 4 + KEY_BLOCK_SIZE
        index = bytearray(cipher.decrypt(bytes(self._read_exactly(start, 8))))
        count, = struct.unpack_from('<h', index)
        _check_count(count, max_entries, 'the key block is likely corrupt')
        size = MixIndex.size(count)
        size += -size % 8
        log.debug(F'decrypting index of {count} entries, {size} bytes')
        if size > 8:
            index.extend(cipher.decrypt(bytes(self._read_exactly(start + 8, size - 8))))
        return index

    def __repr__(self):
        return F'{self.__class__.__name__}({self.name!r})'

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()
        return False

    def close(self) -> None:
        """
        Release the underlying file or buffer. Closing an archive twice has no effect.
        """
        if not self._closed:
            self._closed = True
            self._source.close()
            log.debug(F'closed {self!r}')

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise ValueError(F'operation on closed archive {self!r}')

    @property
    def is_encrypted(self) -> bool:
        return bool(self.flags.Encrypted)

    @property
    def has_checksum(self) -> bool:
        return bool(self.flags.Checksum)

    @property
    def checksum(self) -> bytes | None:
        """
        The trailing digest of a checksummed archive. It is reported as-is and never verified.
        """
        self._check_open()
        if not self.flags.Checksum:
            return None
        size = self._source.size
        if size - self.data_offset < CHECKSUM_SIZE:
            return None
        return bytes(self._source.read_at(size - CHECKSUM_SIZE, CHECKSUM_SIZE))

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def file_count(self) -> int:
        return len(self._entries)

    def __len__(self):
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __contains__(self, key: EntryKey):
        return self.file_exists(key)

    def find(self, key: EntryKey) -> Entry | None:
        """
        Look up an entry by name or hash. Returns `None` when the archive has no such entry.
        """
        if isinstance(key, Entry):
            key = key.hash
        elif not isinstance(key, int):
            try:
                key = name_hash(key)
            except UnicodeEncodeError:
                log.debug(F'the name {key!r} cannot be encoded and is not contained in any archive')
                return None
        k = bisect.bisect_left(self._hashes, key)
        if k < len(self._hashes) and self._hashes[k] == key:
            return self._entries[k]
        return None

    def _lookup(self, key: EntryKey) -> Entry:
        if (entry := self.find(key)) is None:
            raise NotFound(key if isinstance(key, (str, int)) else repr(key))
        return entry

    def file_exists(self, key: EntryKey) -> bool:
        return self.find(key) is not None

    def file_size(self, key: EntryKey) -> int:
        """
        The size of the given entry, or zero if it does not exist.
        """
        entry = self.find(key)
        return 0 if entry is None else entry.size

    def read(self, key: EntryKey) -> bytearray:
        """
        Read the raw contents of an entry into a new buffer. Raises `westmix.lib.exceptions.NotFound`
        if there is no such entry and `westmix.lib.exceptions.Truncated` when the archive ends before
        the end of the entry.
        """
        self._check_open()
        entry = self._lookup(key)
        try:
            data = self._source.read_at(self.data_offset + entry.offset, entry.size)
            if len(data) < entry.size:
                raise Truncated(entry.size, bytes(data))
            log.debug(F'reading {entry.size} bytes for id {entry.hash:08X} from {self!r}')
            return bytearray(data)
        except MemoryError as E:
            raise OutOfMemory(F'unable to allocate {entry.size} bytes for id {entry.hash:08X}') from E

    def read_into(self, key: EntryKey, buffer: bytearray | memoryview) -> int:
        """
        Read at most `len(buffer)` bytes of the given entry into the buffer and return the number
        of bytes that were copied.
        """
        self._check_open()
        entry = self._lookup(key)
        view = memoryview(buffer)
        size = min(entry.size, len(view))
        data = self._source.read_at(self.data_offset + entry.offset, size)
        view[:len(data)] = data
        return len(data)

    def alloc_read(self, key: EntryKey) -> bytearray | None:
        """
        Like `westmix.lib.mix.MixArchive.read`, but returns `None` instead of raising an exception
        when the entry cannot be read.
        """
        try:
            return self.read(key)
        except MixError as E:
            log.debug(F'failed to read from {self!r}: {E!s}')
            return None

    def read_lcw(self, key: EntryKey, size: int | None = None) -> bytearray:
        """
        Read an entry and decompress it as LCW data. When the uncompressed size is given, the
        output is limited to that many bytes.
        """
        return decompress(self.read(key), size)

    def open_nested(self, key: EntryKey, **kwargs) -> MixArchive:
        """
        Open an entry as a MIX archive. The nested archive owns a copy of the entry data and is
        independent of this archive.
        """
        entry = self._lookup(key)
        data = self.read(entry)
        label = key if isinstance(key, str) else F'{entry.hash:08X}'
        kwargs.setdefault('name', F'{self.name}/{label}')
        return MixArchive.FromBuffer(data, owns=True, **kwargs)


def open(path: str | os.PathLike, **kwargs) -> MixArchive:
    """
    Open the MIX archive at the given path.
    """
    return MixArchive.FromPath(path, **kwargs)


def open_memory(data: buf, owns: bool = False, **kwargs) -> MixArchive:
    """
    Open a MIX archive from memory. If `owns` is true, the archive takes over the reference to the
    buffer and drops it when the archive is closed. Otherwise, the archive only holds a view of
    the buffer which is released on close; the caller must not resize the buffer in the meantime.
    """
    return MixArchive.FromBuffer(data, owns=owns, **kwargs)


def open_stream(stream: IO[bytes], **kwargs) -> MixArchive:
    """
    Open a MIX archive from a seekable binary stream. The stream is not closed with the archive.
    """
    return MixArchive.FromStream(stream, **kwargs)
