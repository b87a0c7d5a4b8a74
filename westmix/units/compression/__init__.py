#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Decompression of the compression formats used inside MIX archives.
"""
