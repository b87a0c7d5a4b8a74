"""
The games do not read assets from a single archive. Instead, several archives are mounted in a
fixed order, some of which are nested inside others, and a file is read from the first archive
that contains it. Installations also differ in where the archives are located, so every archive
has a list of candidate locations. The `westmix.lib.library.ArchiveLibrary` implements this search
logic on top of `westmix.lib.mix.MixArchive`.
"""
from __future__ import annotations

import os

from typing import Iterable, Iterator

from westmix.lib.environment import logger
from westmix.lib.exceptions import MixError, NotFound
from westmix.lib.mix import Entry, EntryKey, MixArchive
from westmix.lib.mixkey import MixKeyUnwrapper

__all__ = ['ArchiveLibrary']

log = logger(__name__)


class ArchiveLibrary:
    """
    An ordered collection of mounted archives. The library owns every archive that is mounted into
    it and closes them in reverse order when it is closed itself.
    """
    def __init__(self, unwrapper: MixKeyUnwrapper | None = None, max_entries: int | None = None):
        self._archives: list[MixArchive] = []
        self._options = dict(unwrapper=unwrapper, max_entries=max_entries)

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()
        return False

    def __len__(self):
        return len(self._archives)

    def __iter__(self) -> Iterator[MixArchive]:
        return iter(self._archives)

    def __contains__(self, key: EntryKey):
        return self.find(key) is not None

    def add(self, archive: MixArchive) -> MixArchive:
        """
        Add an archive that was opened elsewhere to the end of the search order. The library takes
        ownership of the archive.
        """
        self._archives.append(archive)
        log.debug(F'mounted {archive!r} at search position {len(self._archives)}')
        return archive

    def mount(self, candidates: str | os.PathLike | Iterable[str | os.PathLike]) -> MixArchive | None:
        """
        Open the first of the given candidate paths that can be opened as an archive and add it to
        the end of the search order. Returns `None` if none of the candidates could be opened.
        """
        if isinstance(candidates, (str, os.PathLike)):
            candidates = [candidates]
        for path in candidates:
            try:
                archive = MixArchive.FromPath(path, **self._options)
            except (MixError, OSError) as E:
                log.debug(F'unable to mount {os.fspath(path)}: {E!s}')
                continue
            return self.add(archive)
        log.info('none of the candidate archives could be mounted')
        return None

    def mount_nested(self, name: str | bytes | int, parent: MixArchive | None = None) -> MixArchive | None:
        """
        Open an archive that is stored inside another archive and add it to the end of the search
        order. If no parent is given, the nested archive is read from the first mounted archive
        that contains it. Returns `None` on failure.
        """
        if parent is None:
            located = self.find(name)
            if located is None:
                log.info(F'nested archive {name!r} not found in any mounted archive')
                return None
            parent, _ = located
        try:
            archive = parent.open_nested(name, **self._options)
        except MixError as E:
            log.info(F'unable to open nested archive {name!r} from {parent!r}: {E!s}')
            return None
        return self.add(archive)

    def find(self, key: EntryKey) -> tuple[MixArchive, Entry] | None:
        """
        Return the first mounted archive that contains the given entry, together with the entry.
        """
        for archive in self._archives:
            if (entry := archive.find(key)) is not None:
                return archive, entry
        return None

    def file_exists(self, key: EntryKey) -> bool:
        return self.find(key) is not None

    def file_size(self, key: EntryKey) -> int:
        located = self.find(key)
        return 0 if located is None else located[1].size

    def read(self, key: EntryKey) -> bytearray:
        """
        Read an entry from the first archive that can provide it. An archive that contains the
        entry but fails to read it is skipped. Raises `westmix.lib.exceptions.NotFound` when no
        archive can provide the entry.
        """
        for archive in self._archives:
            if archive.find(key) is None:
                continue
            if (data := archive.alloc_read(key)) is not None:
                return data
        raise NotFound(key if isinstance(key, (str, int)) else repr(key))

    def alloc_read(self, key: EntryKey) -> bytearray | None:
        try:
            return self.read(key)
        except NotFound:
            return None

    def close(self) -> None:
        while self._archives:
            self._archives.pop().close()
