"""
Type aliases that are used in annotations throughout the package. At runtime, `Param[T, arg]`
evaluates to `arg`, which is how the units declare their command line arguments.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing import Annotated, Union

    Param = Annotated
    buf = Union[bytes, bytearray, memoryview]

else:
    class _ParamAlias:
        def __getitem__(self, annotation):
            _, argument = annotation
            return argument

    Param = _ParamAlias()
    buf = Any


__all__ = [
    'buf',
    'isbuffer',
    'Param',
]


def isbuffer(obj) -> bool:
    """
    Return whether `obj` supports the buffer protocol.
    """
    try:
        memoryview(obj).release()
    except TypeError:
        return False
    return True
