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
User CRS Registration Tool for CRSK.

This module powers the 'register' command: it resolves a definition and, when
the catalog has no equivalent entry (or --force is given), stores it in the
overlay tier under a user-supplied name.
"""

import logging
from typing import Optional
from crsk.utils.crs import CoordinateReferenceSystem
from crsk.utils.exceptions import StoreUnavailable
from crsk.utils.script_arguments import RegisterArguments

logger = logging.getLogger('register_crs')


def register_crs(args: RegisterArguments) -> Optional[int]:
    """
    Register `args.definition` as a user CRS named `args.name`.

    Returns:
        The srsid of the new row, or of the existing equivalent row when the
        definition is already in the catalog and --force was not given.

    Raises:
        CrsError: If the definition cannot be parsed.
        StoreUnavailable: If the overlay write fails.
    """
    with args.open_store() as store:
        crs = CoordinateReferenceSystem(store).create_from_user_input(args.definition)
        if crs.srsid and not args.force:
            logger.info(f"'{args.definition}' is already in the catalog as srsid {crs.srsid} ({crs.description}).")
            return crs.srsid

        srsid = crs.save_as_user_crs(args.name)
        if not srsid:
            raise StoreUnavailable(f"Could not register '{args.name}' in {store.overlay.path}")
        logger.info(f"Registered '{args.name}' as srsid {srsid}.")
        return srsid
