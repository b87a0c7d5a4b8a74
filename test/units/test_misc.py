#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import inspect

from . import TestUnitBase, westmix

from westmix.lib.environment import LogLevel
from westmix.units import Arg, Entry, Unit


class TestUnitFramework(TestUnitBase):

    def test_all_units_are_exported(self):
        for name in westmix.__unit_loader__.units:
            unit = getattr(westmix, name)
            self.assertTrue(issubclass(unit, Entry), name)
            self.assertEqual(unit.name, name)
            self.assertIs(westmix.load(name), unit)

    def test_unknown_unit(self):
        self.assertIsNone(westmix.load('nonexistent'))
        with self.assertRaises(AttributeError):
            westmix.nonexistent

    def test_argument_parsers(self):
        for name in westmix.__unit_loader__.units:
            unit = westmix.load(name)
            helptext = unit.argparser().format_help()
            self.assertIn('--verbose', helptext)
            self.assertIn(inspect.cleandoc(unit.__doc__).split()[0], helptext)

    def test_reversible_units(self):
        self.assertTrue(westmix.blowfish.is_reversible)
        self.assertFalse(westmix.xtmix.is_reversible)
        with self.assertRaises(TypeError):
            -westmix.mixid()

    def test_automatic_initialization(self):
        class scale(Unit):
            def __init__(self, factor: Arg.Number('-f') = 2):
                pass

            def process(self, data: bytearray):
                return data * self.args.factor

        self.assertEqual(scale()(B'ab'), B'abab')
        self.assertEqual(scale(3)(B'ab'), B'ababab')
        self.assertEqual(scale.assemble('-f', '4')(B'a'), B'aaaa')

    def test_detached_units_raise(self):
        class fail(Unit):
            def process(self, data):
                raise RuntimeError('failure')

        unit = fail()
        self.assertEqual(unit.log_level, LogLevel.DETACHED)
        with self.assertRaises(RuntimeError):
            unit(B'')
        unit.log_level = LogLevel.NONE
        self.assertEqual(unit(B''), B'')

    def test_verbosity_switches(self):
        unit = westmix.lcw.assemble('-v')
        self.assertEqual(unit.log_level, LogLevel.INFO)
        unit = westmix.lcw.assemble('-vv')
        self.assertEqual(unit.log_level, LogLevel.DEBUG)
        unit = westmix.lcw.assemble('-Q')
        self.assertEqual(unit.log_level, LogLevel.NONE)
