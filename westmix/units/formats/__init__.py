"""
A package containing units that extract the contents of container formats.
"""
from __future__ import annotations

from typing import Callable, Iterable

from westmix.lib.types import Param, buf
from westmix.units import Arg, Unit, abc


class UnpackResult:

    def get_data(self) -> buf:
        if callable(self.data):
            self.data = self.data()
        return self.data

    def __init__(self, _wm__path: str, _wm__data: buf | Callable[[], buf], **_wm__meta):
        self.path = _wm__path
        self.data = _wm__data
        self.meta = _wm__meta
        for key in [key for key, value in _wm__meta.items() if value is None]:
            del _wm__meta[key]


class PathExtractorUnit(Unit, abstract=True):
    """
    The base class for units that extract items from a container by their path. When no paths are
    given, all items are extracted. In list mode, one line of text is emitted for every item that
    would otherwise be extracted.
    """
    def __init__(
        self,
        *paths: Param[str, Arg.String(help='The paths of the items to extract; all items by default.')],
        list: Param[bool, Arg.Switch('-l', '--list', help='Print a listing of the items instead of extracting them.')] = False,
        **keywords
    ):
        super().__init__(paths=paths, list=list, **keywords)

    @abc.abstractmethod
    def unpack(self, data: bytearray) -> Iterable[UnpackResult]:
        raise NotImplementedError

    def _listing(self, result: UnpackResult) -> str:
        return result.path

    def process(self, data: bytearray):
        for result in self.unpack(data):
            if self.args.list:
                yield F'{self._listing(result)}\n'.encode(self.codec)
                continue
            self.log_info(F'extracting: {result.path}')
            yield result.get_data()
