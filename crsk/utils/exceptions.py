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
Custom Exceptions Module.

A centralized module for custom exceptions used throughout the CRS ToolKit.
"""

class CrsError(Exception):
    """Base exception for all CRS resolution errors."""
    pass

class FormatError(CrsError, ValueError):
    """Raised when a definition string matches no recognized CRS format."""
    pass

class LookupMiss(CrsError, LookupError):
    """Raised when no catalog row matches a lookup."""
    pass

class StoreUnavailable(CrsError, RuntimeError):
    """Raised for I/O failures against either catalog tier."""
    pass

class MalformedPersistedState(CrsError, ValueError):
    """Raised when a persisted spatialrefsys element is missing required fields."""
    pass
