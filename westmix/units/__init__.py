"""
This package contains all westmix units. A unit is a command line tool that reads binary data from
standard input, transforms it, and writes the result to standard output. To write a unit, it is
sufficient to write a class inheriting from `westmix.units.Unit` that implements the method
`westmix.units.Unit.process`. If the operation implemented by the unit can be reversed, a method
called `reverse` with the same signature can be implemented as well; it becomes available via the
`-R` switch. For example:

    from westmix.units import Unit

    class swab(Unit):
        def process(self, data):
            data[0::2], data[1::2] = data[1::2], data[0::2]
            return data

        reverse = process

### Command Line Parameters

The command line interface of a unit is derived from the signature of its initialization routine.
The annotation of each parameter can be an `westmix.units.Arg` to control the argument parser:

    from westmix.lib.types import Param, buf
    from westmix.units import Arg, Unit

    class myxor(Unit):
        def __init__(self, key: Param[buf, Arg.Binary(help='Encryption key')]):
            super().__init__(key=key)

        def process(self, data: bytearray):
            for k, b in enumerate(data):
                data[k] ^= self.args.key[k % len(self.args.key)]
            return data

All parameters passed to `westmix.units.Unit.__init__` are available as members of `self.args`.
When the body of `__init__` does not call the parent initialization, this is done automatically
with all the parameters of the routine.

### Units in Code

Units can also be used from Python code. A unit object is callable and returns the complete output
for the given input data; unary negation creates a copy of the unit in reverse mode:

    >>> from westmix.units.crypto.hash.mixid import mixid
    >>> mixid(text=True)(b'local.mix')
    b'...'

Units that are instantiated in code log nothing and raise exceptions, while units that run on the
command line report errors through the log.
"""
from __future__ import annotations

import abc
import argparse
import copy
import functools
import inspect
import os
import sys

from typing import Any, Callable, Iterable, Iterator

from westmix.lib.argformats import multibin, number
from westmix.lib.environment import Logger, LogLevel, environment, logger
from westmix.lib.types import buf, isbuffer

__all__ = [
    'abc',
    'Arg',
    'Entry',
    'Executable',
    'Unit',
]


class Entry:
    """
    An empty class marker. Any entry point unit (i.e. any unit that can be executed via the command
    line) is an instance of this class.
    """


class Argument:
    """
    Stores positional and keyword arguments for a later call. Applying it to a callable with the
    matrix multiplication operator, as in `function @ Argument(a, b, kwd=c)`, performs the call
    `function(a, b, kwd=c)`.
    """
    __slots__ = 'args', 'kwargs'

    args: list[Any]
    kwargs: dict[str, Any]

    def __init__(self, *args, **kwargs):
        self.args = list(args)
        self.kwargs = kwargs

    def __rmatmul__(self, method):
        return method(*self.args, **self.kwargs)

    def __repr__(self):
        arglist = [repr(a) for a in self.args]
        arglist.extend(F'{key!s}={value!r}' for key, value in self.kwargs.items())
        return ', '.join(arglist)


class Arg(Argument):
    """
    The arguments for one call to `argparse.ArgumentParser.add_argument`. Used in the annotation of a
    unit's constructor parameter, it defines how that parameter appears on the command line.
    """

    class omit:
        """
        A sentinel class to mark arguments as omitted for the argument parser.
        """

    def __init__(
        self, *args: str,
        action   : type[omit] | str                  = omit,  # noqa
        choices  : type[omit] | Iterable[Any]        = omit,  # noqa
        default  : type[omit] | Any                  = omit,  # noqa
        dest     : type[omit] | str                  = omit,  # noqa
        help     : type[omit] | str                  = omit,  # noqa
        metavar  : type[omit] | str                  = omit,  # noqa
        nargs    : type[omit] | int | str            = omit,  # noqa
        type     : type[omit] | type | Callable      = omit,  # noqa
    ) -> None:
        kwargs = dict(action=action, choices=choices, default=default, dest=dest,
            help=help, metavar=metavar, nargs=nargs, type=type)
        kwargs = {key: value for key, value in kwargs.items() if value is not self.omit}
        super().__init__(*args, **kwargs)

    @classmethod
    def Switch(cls, *args: str, off=False, help: type[omit] | str = omit):
        """
        A convenience method to add argparse arguments that change a boolean value from True to
        False or vice versa. By default, a switch will have a False default and change it to True
        when specified.
        """
        return cls(*args, help=help, action='store_false' if off else 'store_true')

    @classmethod
    def Binary(cls, *args: str, help: type[omit] | str = omit, nargs: type[omit] | int | str = omit, metavar='B'):
        """
        Used to add argparse arguments that contain binary data; see `westmix.lib.argformats`.
        """
        return cls(*args, help=help, nargs=nargs, metavar=metavar, type=multibin)

    @classmethod
    def String(cls, *args: str, help: type[omit] | str = omit, nargs: type[omit] | int | str = omit, metavar='STR'):
        """
        Used to add argparse arguments that contain a string.
        """
        return cls(*args, help=help, nargs=nargs, metavar=metavar, type=str)

    @classmethod
    def Number(cls, *args: str, bound: type[omit] | tuple[int | None, int | None] = omit,
               help: type[omit] | str = omit, metavar='N'):
        """
        Used to add argparse arguments that contain a number.
        """
        nt = number
        if bound is not cls.omit:
            lower, upper = bound
            nt = nt[lower:upper]
        return cls(*args, help=help, metavar=metavar, type=nt)

    @property
    def positional(self) -> bool:
        return not any(a.startswith('-') for a in self.args)


def _resolve_annotation(function: Callable, annotation: Any) -> Arg | None:
    if isinstance(annotation, str):
        module = sys.modules.get(function.__module__)
        try:
            annotation = eval(annotation, vars(module) if module else {})
        except Exception:
            return None
    if isinstance(annotation, Arg):
        return annotation
    return None


def _compile_argument(parameter: inspect.Parameter, annotation: Arg | None) -> Argument:
    args = list(annotation.args) if annotation else []
    kwargs = dict(annotation.kwargs) if annotation else {}
    name = parameter.name
    if parameter.kind is parameter.VAR_POSITIONAL:
        kwargs.setdefault('nargs', '*')
        kwargs.setdefault('metavar', name)
        kwargs.setdefault('type', multibin)
        return Arg(name, **kwargs)
    default = parameter.default
    if not args:
        args = [name]
    if any(a.startswith('-') for a in args):
        kwargs.setdefault('dest', name)
        if default is not parameter.empty:
            kwargs.setdefault('default', default)
        elif kwargs.get('action') != 'store_true':
            kwargs.setdefault('required', True)
    else:
        args = [name]
        kwargs.pop('dest', None)
        if default is not parameter.empty:
            kwargs.setdefault('nargs', '?')
            kwargs.setdefault('default', default)
        kwargs.setdefault('metavar', name)
    return Argument(*args, **kwargs)


class Executable(abc.ABCMeta):
    """
    The metaclass for all units. It derives the command line interface of a unit from the signature
    of its initialization routine, marks all non-abstract units as `westmix.units.Entry`, and runs
    a unit when it is defined in the `__main__` module.
    """
    _argument_specification: dict[str, tuple[inspect.Parameter, Argument]]

    def __new__(mcs, name: str, bases: tuple[type, ...], nmspc: dict[str, Any], abstract=False):
        if not abstract and not any(issubclass(b, Entry) for b in bases):
            bases = bases + (Entry,)
        nmspc.setdefault('__doc__', '')
        return super().__new__(mcs, name, bases, nmspc)

    def __init__(cls, name: str, bases: tuple[type, ...], nmspc: dict[str, Any], abstract=False):
        super().__init__(name, bases, nmspc)
        cls._abstract = abstract
        spec: dict[str, tuple[inspect.Parameter, Argument]] = {}
        for base in reversed(cls.__mro__):
            if not isinstance(base, Executable) or '__init__' not in base.__dict__:
                continue
            init = base.__dict__['__init__']
            init = getattr(init, '__wrapped__', init)
            for parameter in list(inspect.signature(init).parameters.values())[1:]:
                if parameter.kind is parameter.VAR_KEYWORD:
                    continue
                annotation = _resolve_annotation(init, parameter.annotation)
                if annotation is None and parameter.name in spec:
                    previous, argument = spec[parameter.name]
                    if parameter.default is not parameter.empty:
                        argument = copy.copy(argument)
                        argument.kwargs = dict(argument.kwargs, default=parameter.default)
                    spec[parameter.name] = parameter, argument
                    continue
                spec[parameter.name] = parameter, _compile_argument(parameter, annotation)
        cls._argument_specification = spec

        if '__init__' in nmspc and not hasattr(nmspc['__init__'], '__wrapped__'):
            original = nmspc['__init__']
            signature = inspect.signature(original)

            @functools.wraps(original)
            def __init__(self, *args, **kwargs):
                original(self, *args, **kwargs)
                if 'args' not in self.__dict__:
                    bound = signature.bind(self, *args, **kwargs)
                    bound.apply_defaults()
                    keywords = {}
                    for key, value in list(bound.arguments.items())[1:]:
                        if signature.parameters[key].kind is inspect.Parameter.VAR_KEYWORD:
                            keywords.update(value)
                        else:
                            keywords[key] = value
                    Unit.__init__(self, **keywords)

            setattr(cls, '__init__', __init__)

        if not abstract and nmspc.get('__module__') == '__main__':
            cls.run()

    def __neg__(cls):
        unit = cls()
        unit.args.reverse = True
        return unit

    @property
    def is_reversible(cls) -> bool:
        """
        This property is `True` if and only if the unit has a member function named `reverse`.
        """
        return callable(getattr(cls, 'reverse', None))

    @property
    def codec(cls) -> str:
        """
        The default codec for encoding textual information between units.
        """
        return 'utf8'

    @property
    def name(cls) -> str:
        return cls.__name__

    @property
    def logger(cls) -> Logger:
        try:
            return cls.__dict__['_logger']
        except KeyError:
            pass
        _logger = logger(cls.name)
        setattr(cls, '_logger', _logger)
        return _logger


class Unit(metaclass=Executable, abstract=True):
    """
    The base class for all westmix units. It implements the command line interface and the logging
    facilities of a unit.
    """

    @property
    def is_reversible(self) -> bool:
        return self.__class__.is_reversible

    @property
    def codec(self) -> str:
        return self.__class__.codec

    @property
    def logger(self) -> Logger:
        return self.__class__.logger

    @property
    def name(self) -> str:
        return self.__class__.name

    @property
    def log_level(self) -> LogLevel:
        """
        Returns the current log level as an element of `westmix.lib.environment.LogLevel`.
        """
        return LogLevel(self.logger.getEffectiveLevel())

    @log_level.setter
    def log_level(self, value: int | LogLevel) -> None:
        if not isinstance(value, LogLevel):
            value = LogLevel.FromVerbosity(value)
        self.logger.setLevel(value)

    def log_detach(self):
        self.log_level = LogLevel.DETACHED
        return self

    @classmethod
    def _log(cls, level: LogLevel, messages) -> bool:
        enabled = cls.logger.isEnabledFor(level)
        if enabled and messages:
            cls.logger.log(level, cls._output(*messages))
        return enabled

    @classmethod
    def log_fail(cls, *messages) -> bool:
        """
        Emit an error message. The return value indicates whether errors are logged at all, so
        calling this method without arguments tests the log level.
        """
        return cls._log(LogLevel.ERROR, messages)

    @classmethod
    def log_warn(cls, *messages) -> bool:
        """
        Same as `westmix.units.Unit.log_fail`, but for warnings.
        """
        return cls._log(LogLevel.WARNING, messages)

    @classmethod
    def log_info(cls, *messages) -> bool:
        return cls._log(LogLevel.INFO, messages)

    @classmethod
    def log_debug(cls, *messages) -> bool:
        return cls._log(LogLevel.DEBUG, messages)

    @classmethod
    def _output(cls, *messages) -> str:
        def transform(message):
            if callable(message):
                message = message()
            if isinstance(message, Exception):
                return F'exception of type {message.__class__.__name__}; {message!s}'
            if isinstance(message, str):
                return message
            if isbuffer(message):
                text = bytes(message).decode(cls.codec, 'surrogateescape')
                if not text.isprintable():
                    text = bytes(message).hex().upper()
                return text
            return repr(message)
        return ' '.join(transform(msg) for msg in messages)

    def __init__(self, **keywords):
        for key, value in dict(reverse=False, verbose=0, quiet=False).items():
            keywords.setdefault(key, value)
        self.args = argparse.Namespace(**keywords)
        self.log_detach()

    def __copy__(self):
        cls = self.__class__
        clone: Unit = cls.__new__(cls)
        clone.__dict__.update(self.__dict__)
        clone.args = copy.copy(self.args)
        return clone

    def __neg__(self) -> Unit:
        if not self.is_reversible:
            raise TypeError(F'the unit {self.name} is not reversible')
        clone = copy.copy(self)
        clone.args.reverse = not self.args.reverse
        return clone

    def process(self, data: bytearray) -> buf | Iterable[buf] | None:
        return data

    def _exception_handler(self, exception: BaseException):
        if self.log_level >= LogLevel.DETACHED:
            raise exception
        self.log_fail(exception)

    def act(self, data: buf) -> Iterator[buf]:
        """
        Apply the unit to the given input and generate all output chunks.
        """
        if not isinstance(data, bytearray):
            data = bytearray(data)
        operation = self.reverse if self.args.reverse else self.process
        try:
            result = operation(data)
            if result is None:
                return
            if isbuffer(result):
                yield result
                return
            for chunk in result:
                yield chunk
        except Exception as exception:
            self._exception_handler(exception)

    def __call__(self, data: buf = B'') -> bytes:
        return B''.join(bytes(chunk) for chunk in self.act(data))

    @classmethod
    def argparser(cls) -> argparse.ArgumentParser:
        argp = argparse.ArgumentParser(
            prog=cls.name, description=inspect.cleandoc(cls.__doc__ or ''), add_help=False,
            formatter_class=argparse.RawDescriptionHelpFormatter)
        for _, argument in cls._argument_specification.values():
            argp.add_argument @ argument
        base = argp.add_argument_group('generic options')
        base.set_defaults(reverse=False)
        base.add_argument('-h', '--help', action='help', help='Show this help message and exit.')
        base.add_argument('-Q', '--quiet', action='store_true', help='Disables all log output.')
        base.add_argument('-v', '--verbose', action='count', default=0,
            help='Specify up to two times to increase log level.')
        if cls.is_reversible:
            base.add_argument('-R', '--reverse', action='store_true',
                help='Use the reverse operation.')
        return argp

    @classmethod
    def assemble(cls, *_args: str):
        """
        Creates a unit from the given command line arguments.
        """
        argp = cls.argparser()
        args = vars(argp.parse_args(_args))
        generic = {key: args.pop(key) for key in ('quiet', 'verbose', 'reverse')}
        positional = []
        for name, (parameter, _) in cls._argument_specification.items():
            if parameter.kind is parameter.VAR_POSITIONAL:
                positional = args.pop(name, None) or []
        try:
            unit = cls(*positional, **args)
        except ValueError as E:
            argp.error(str(E))
        unit.args.quiet = generic['quiet']
        unit.args.verbose = generic['verbose']
        unit.args.reverse = generic['reverse']
        if unit.args.quiet:
            unit.log_level = LogLevel.NONE
        else:
            unit.log_level = unit.args.verbose
        return unit

    @classmethod
    def run(cls, argv=None, stream=None) -> None:
        """
        Implements command line execution: the unit is assembled from the command line arguments,
        reads all of standard input, and writes its output to standard output.
        """
        argv = argv if argv is not None else sys.argv[1:]
        if stream is None:
            stream = open(os.devnull, 'rb') if sys.stdin.isatty() else sys.stdin.buffer
        with stream as source:
            try:
                unit = cls.assemble(*argv)
            except Exception as msg:
                cls.logger.critical(cls._output('initialization failed:', msg))
                return
            loglevel = environment.verbosity.value
            if loglevel:
                unit.log_level = loglevel
            data = source.read()
            output = sys.stdout.buffer
            try:
                for chunk in unit.act(data):
                    output.write(chunk)
                output.flush()
            except KeyboardInterrupt:
                unit.logger.warning('aborting due to keyboard interrupt')
            except BrokenPipeError:
                pass
