R"""
A reader for the MIX archives of the Westwood Studios games Command & Conquer and Red Alert. The
package provides the following library interface:

1. `westmix.lib.mix`: opening archives from disk, memory, or streams, and reading their entries
2. `westmix.lib.library`: searching an ordered collection of mounted archives
3. `westmix.lib.lcw`: decompression of LCW (Format80) data
4. `westmix.lib.blowfish` and `westmix.lib.mixkey`: decryption of encrypted archive indices
5. `westmix.lib.namehash`: the identifier hash of archive file names

The package also exports all `westmix.units.Unit`s which are of type `westmix.units.Entry`; these
units are available as shell commands. The import of a unit is performed on demand.
"""
from __future__ import annotations

__version__ = '0.4.2'
__distribution__ = 'westmix'

from threading import RLock

from westmix.lib.blowfish import Blowfish
from westmix.lib.exceptions import (
    DecryptionUnavailable,
    InvalidFormat,
    MixError,
    NotFound,
    OutOfMemory,
    Truncated,
)
from westmix.lib.lcw import decompress as lcw_decompress
from westmix.lib.lcw import decompress_into as lcw_decompress_into
from westmix.lib.library import ArchiveLibrary
from westmix.lib.mix import Entry, MixArchive, open, open_memory, open_stream
from westmix.lib.mixkey import unwrap_key
from westmix.lib.namehash import name_hash
from westmix.units import Arg, Unit


class _unit_loader:
    """
    Every unit can be imported from the westmix base module. The import is performed on demand; the
    `units` dictionary maps unit names to their corresponding module path.
    """
    units = {
        'blowfish' : 'westmix.units.crypto.cipher.blowfish',  # noqa
        'lcw'      : 'westmix.units.compression.lcw',         # noqa
        'mixid'    : 'westmix.units.crypto.hash.mixid',       # noqa
        'mixkey'   : 'westmix.units.crypto.mixkey',           # noqa
        'xtmix'    : 'westmix.units.formats.archive.xtmix',   # noqa
    }

    def __init__(self):
        self.cache: dict[str, type[Unit]] = {}
        self._lock = RLock()

    def __enter__(self):
        self._lock.__enter__()
        return self

    def __exit__(self, et, ev, tb):
        return self._lock.__exit__(et, ev, tb)

    def resolve(self, name: str) -> type[Unit] | None:
        try:
            return self.cache[name]
        except KeyError:
            pass
        try:
            module_path = self.units[name]
        except KeyError:
            return None
        module = __import__(module_path, None, None, [name])
        entry = self.cache[name] = getattr(module, name)
        return entry


__unit_loader__ = _unit_loader()

__all__ = sorted(__unit_loader__.units) + [
    'ArchiveLibrary',
    'Blowfish',
    'DecryptionUnavailable',
    'Entry',
    'InvalidFormat',
    'MixArchive',
    'MixError',
    'NotFound',
    'OutOfMemory',
    'Truncated',
    'lcw_decompress',
    'lcw_decompress_into',
    'name_hash',
    'open',
    'open_memory',
    'open_stream',
    'unwrap_key',
    Unit.__name__,
    Arg.__name__,
]


def load(name) -> type[Unit] | None:
    with __unit_loader__ as ul:
        return ul.resolve(name)


def __getattr__(name):
    with __unit_loader__ as ul:
        unit = ul.resolve(name)
    if unit is None:
        raise AttributeError(name)
    return unit


def __dir__():
    return __all__
