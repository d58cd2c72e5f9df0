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
Catalog Maintenance Tools for CRSK.

Powers the 'build' command (create a baseline catalog from GDAL's EPSG
definitions) and the 'sync' command (refresh EPSG-based overlay rows).
"""

import logging
from crsk.utils.catalog_store import build_baseline_catalog, sync_db
from crsk.utils.script_arguments import BuildArguments, SyncArguments

logger = logging.getLogger('sync_catalog')


def build_catalog(args: BuildArguments) -> int:
    """Write a new baseline catalog and return the number of rows."""
    count = build_baseline_catalog(args.baseline_path, args.epsg_codes, overwrite=args.overwrite)
    logger.info(f"Baseline catalog {args.baseline_path}: {count} of {len(args.epsg_codes)} EPSG codes written.")
    return count


def sync_catalog(args: SyncArguments) -> int:
    """Run the overlay sync; a negative result counts rows that failed."""
    with args.open_store() as store:
        result = sync_db(store)
    if result < 0:
        logger.warning(f"{-result} overlay row(s) could not be synchronized.")
    else:
        logger.info(f"{result} overlay row(s) updated.")
    return result
