"""
Units that extract files from archives.
"""
from __future__ import annotations

from westmix.units.formats import PathExtractorUnit, UnpackResult

__all__ = ['ArchiveUnit', 'UnpackResult']


class ArchiveUnit(PathExtractorUnit, abstract=True):

    def _pack(self, path: str, data, **meta) -> UnpackResult:
        return UnpackResult(path, data, **meta)
