from __future__ import annotations

from contextlib import ExitStack
from functools import partial

from westmix.lib.exceptions import MixError
from westmix.lib.mix import MixArchive
from westmix.lib.types import Param
from westmix.units import Arg
from westmix.units.formats.archive import ArchiveUnit, UnpackResult


class xtmix(ArchiveUnit):
    """
    Extract files from a Westwood MIX archive. Since these archives do not store file names, the
    files have to be requested by name or, with `-i`, by their hexadecimal identifier. A path such
    as `conquer.mix/temperat.pal` reads a file from an archive that is nested inside the input.
    Without any paths, all files are extracted in the order of their identifiers; the listing
    shows identifier, size and path of every selected file.
    """
    def __init__(
        self, *paths,
        list=False,
        ids: Param[bool, Arg.Switch('-i', '--ids', help='Interpret the path components as hexadecimal identifiers.')] = False,
        **keywords
    ):
        super().__init__(*paths, list=list, ids=ids, **keywords)

    def _key(self, component: str) -> str | int:
        if self.args.ids:
            try:
                return int(component, 16)
            except ValueError as E:
                raise ValueError(F'invalid identifier in path: {component}') from E
        return component

    def _listing(self, result: UnpackResult) -> str:
        return F'{result.meta["id"]:08X} {result.meta["size"]:10d} {result.path}'

    def _resolve(self, stack: ExitStack, root: MixArchive, path: str) -> UnpackResult | None:
        archive = root
        *nested, name = path.strip('/').split('/')
        try:
            for component in nested:
                archive = stack.enter_context(archive.open_nested(self._key(component)))
            entry = archive.find(self._key(name))
        except MixError as E:
            self.log_warn(F'unable to open the parent archive of {path}: {E!s}')
            return None
        if entry is None:
            self.log_warn(F'not found: {path}')
            return None
        return self._pack(path, partial(archive.read, entry), id=entry.hash, size=entry.size)

    def unpack(self, data: bytearray):
        with ExitStack() as stack:
            archive = stack.enter_context(MixArchive.FromBuffer(data, name=self.name))
            self.log_debug(lambda: F'archive flags: {archive.flags!r}')
            if not self.args.paths:
                for entry in archive:
                    yield self._pack(F'{entry.hash:08X}', partial(archive.read, entry), id=entry.hash, size=entry.size)
                return
            for path in self.args.paths:
                result = self._resolve(stack, archive, path)
                if result is not None:
                    yield result
