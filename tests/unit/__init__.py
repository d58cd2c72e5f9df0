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
Unit tests for CRSK components.

This package contains unit tests that verify individual functions and classes
in isolation. Tests marked `catalog` additionally need GDAL's EPSG database to
build the shared baseline catalog.
"""
