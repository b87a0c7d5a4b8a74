#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Settings that can be changed through environment variables, and the logging setup that is shared
by the archive reader and the units. Every setting is read once when this module is imported; the
name of the variable is the setting name with the prefix `WESTMIX_`:

- `WESTMIX_VERBOSITY` overrides the log level of units that run on the command line. It is either
  a level name such as `DEBUG` or a verbosity number as it would be given by repeating `-v`.
- `WESTMIX_MAX_ENTRIES` is the largest entry count that an archive index may declare before it is
  rejected as corrupt. The default is 10000.
"""
from __future__ import annotations

import os
import logging

from enum import IntEnum
from typing import Optional, TypeVar, Generic

_T = TypeVar('_T')

Logger = logging.Logger


class LogLevel(IntEnum):
    """
    The logging levels together with two additional levels above all others.
    """
    DETACHED = logging.CRITICAL + 100
    """
    The unit was created in code rather than on the command line. Nothing is logged and errors
    are raised as exceptions.
    """
    NONE = logging.CRITICAL + 50
    """
    Nothing is logged and errors are swallowed; this is the level of the `-Q` switch.
    """
    CRITICAL = logging.CRITICAL  # noqa
    ERROR    = logging.ERROR     # noqa
    WARNING  = logging.WARNING   # noqa
    INFO     = logging.INFO      # noqa
    DEBUG    = logging.DEBUG     # noqa
    NOTSET   = logging.NOTSET    # noqa

    @classmethod
    def FromVerbosity(cls, verbosity: int) -> LogLevel:
        """
        Translate the number of `-v` switches into a log level; negative values detach.
        """
        if verbosity < 0:
            return cls.DETACHED
        levels = (cls.WARNING, cls.INFO, cls.DEBUG)
        return levels[min(verbosity, len(levels) - 1)]

    @property
    def verbosity(self) -> int:
        if self >= LogLevel.DETACHED:
            return -1
        for verbosity, level in enumerate((LogLevel.WARNING, LogLevel.INFO)):
            if self >= level:
                return verbosity
        return 2


class WestmixFormatter(logging.Formatter):
    """
    Renders the level of a record as one of the words failure, warning, comment, or verbose.
    """
    NAMES = {
        logging.CRITICAL : 'failure',
        logging.ERROR    : 'failure',
        logging.WARNING  : 'warning',
        logging.INFO     : 'comment',
        logging.DEBUG    : 'verbose',
    }

    def formatMessage(self, record: logging.LogRecord) -> str:
        record.custom_level_name = self.NAMES.get(record.levelno, record.levelname.lower())
        return super().formatMessage(record)


def logger(name: str) -> logging.Logger:
    """
    Return the logger of the given name. A stream handler with the westmix format is attached on
    first use unless logging was already configured elsewhere.
    """
    log = logging.getLogger(name)
    if not log.hasHandlers():
        handler = logging.StreamHandler()
        handler.setFormatter(WestmixFormatter(
            '({asctime}) {custom_level_name} in {name}: {message}', style='{', datefmt='%H:%M:%S'))
        log.addHandler(handler)
    log.propagate = False
    return log


class EnvironmentVariableSetting(Generic[_T]):
    """
    A setting backed by the environment variable `WESTMIX_{name}`. Subclasses implement `parse`
    to convert the text of the variable; the default is used when the variable is missing or
    cannot be parsed.
    """
    key: str
    value: Optional[_T]

    def __init__(self, name: str, default: Optional[_T] = None):
        self.key = F'WESTMIX_{name}'
        self.default = default
        self.value = self.read()

    def read(self) -> Optional[_T]:
        try:
            text = os.environ[self.key]
        except KeyError:
            return self.default
        try:
            return self.parse(text.strip())
        except ValueError as E:
            logger(__name__).warning(F'ignoring invalid value of {self.key}: {E!s}')
            return self.default

    def parse(self, text: str) -> Optional[_T]:
        raise NotImplementedError


class EVInt(EnvironmentVariableSetting[int]):
    def parse(self, text: str) -> int:
        return int(text, 0)


class EVLog(EnvironmentVariableSetting[Optional[LogLevel]]):
    def parse(self, text: str) -> LogLevel:
        if text.isdigit():
            return LogLevel.FromVerbosity(int(text))
        try:
            return LogLevel[text.upper()]
        except KeyError:
            levels = ', '.join(ll.name for ll in LogLevel)
            raise ValueError(F'unknown verbosity {text!r}; pick from: {levels}') from None


class environment:
    verbosity = EVLog('VERBOSITY')
    max_entries = EVInt('MAX_ENTRIES', 10000)
