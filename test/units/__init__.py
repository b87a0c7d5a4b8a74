from __future__ import annotations

import importlib

from .. import westmix, TestBase, NameUnknownException, MixTestKey, build_mix
from westmix.units import Entry, Unit
from westmix.lib.environment import LogLevel

__all__ = ['westmix', 'TestUnitBase', 'NameUnknownException', 'MixTestKey', 'build_mix']


class TestUnitBase(TestBase):

    @staticmethod
    def _relative_module_path(path: str, strip_test=True):
        path = path.split('.')
        path = path[1:]
        if strip_test:
            path = [x[4:].lstrip('_-.') if x.startswith('test') else x for x in path]
        return '.'.join(path)

    @classmethod
    def unit(cls) -> type[Unit]:
        name = cls._relative_module_path(cls.__module__)
        try:
            module = importlib.import_module(F'westmix.{name}')
        except ImportError:
            pass
        else:
            for object in vars(module).values():
                if isinstance(object, type) and issubclass(object, Entry) and object.__module__ == module.__name__:
                    return object
        basename = name.rsplit('.', 1)[-1]
        entry = westmix.load(basename)
        if entry is None:
            raise NameUnknownException(name)
        return entry

    @classmethod
    def load(cls, *args, **kwargs) -> Unit:
        unit = cls.unit()(*args, **kwargs)
        unit.log_level = LogLevel.DETACHED
        return unit

    @classmethod
    def assemble(cls, *args: str) -> Unit:
        unit = cls.unit().assemble(*args)
        unit.log_level = LogLevel.DETACHED
        return unit
