#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ******************************************************************************
# Project: CRS ToolKit (CRSK)
# Author: Eric Robeck <robeckgeo@gmail.com>
#
# Copyright (c) 2025, Eric Robeck
# Licensed under the MIT License
# ******************************************************************************

from crsk.main import main

main()
