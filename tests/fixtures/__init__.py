#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ******************************************************************************
# Project: CRS ToolKit (CRSK)
# Author: Eric Robeck <robeckgeo@gmail.com>
#
# Copyright (c) 2025, Eric Robeck
# Licensed under the MIT License
# ******************************************************************************

"""
Test fixtures and catalog factories for CRSK tests.

This package contains:
- make_catalog: Builds two-tier catalogs holding hand-picked rows
- row / structure: Catalog rows and structured definitions from proj4 text
- CountingComparator: Fake equivalence test that records its calls
"""

from tests.fixtures.catalog_factory import CountingComparator, make_catalog, row, structure

__all__ = ['CountingComparator', 'make_catalog', 'row', 'structure']
