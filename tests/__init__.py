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
CRS ToolKit Test Suite.

This package contains tests for CRSK components including:
- Unit tests for the parser, catalog tiers, matcher, entity and codec
- Integration tests for resolve/register/persist workflows
- End-to-end tests for CLI commands
"""
