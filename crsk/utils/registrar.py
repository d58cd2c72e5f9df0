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
User CRS Registration.

Appends definitions that matched nothing in the catalog to the overlay tier.
Registration does not check for an existing equivalent row, and nothing
coordinates concurrent writers, so two processes registering the same
definition at once can both succeed and create duplicate rows.
"""
import logging
from typing import Union

from crsk.utils.catalog_store import CatalogStore
from crsk.utils.data_models import CatalogRow, CrsRecord
from crsk.utils.exceptions import StoreUnavailable
from crsk.utils.proj4_string import build_proj4

logger = logging.getLogger(__name__)

def save_as_user_crs(store: CatalogStore, record: CrsRecord, name: str) -> Union[int, bool]:
    """
    Store `record` under `name` as a new overlay-tier row.

    The record itself is not modified; callers re-resolve (e.g. through
    `create_from_srs_id`) to pick up the new id.

    Args:
        store: The catalog to write to.
        record: The CRS to register; needs both acronyms.
        name: Description for the new row.

    Returns:
        The new srsid (always above the store's threshold), or False if the
        record is incomplete or the overlay write failed.
    """
    if not record.projection_acronym or not record.ellipsoid_acronym:
        logger.error(f"Cannot save '{name}' as a user CRS: the CRS has no proj4 definition.")
        return False

    try:
        srsid = store.next_user_srsid()
        if record.epsg_id:
            auth_name, auth_id = "EPSG", str(record.epsg_id)
        else:
            auth_name, auth_id = "USER", str(srsid)
        store.overlay.insert(CatalogRow(
            srsid=srsid,
            description=name,
            projection_acronym=record.projection_acronym,
            ellipsoid_acronym=record.ellipsoid_acronym,
            proj4=build_proj4(record.projection_acronym, record.ellipsoid_acronym, record.proj4_params),
            postgis_srid=record.postgis_srid,
            auth_name=auth_name,
            auth_id=auth_id,
            is_geo=record.geographic_flag,
            wkt=record.wkt,
        ))
    except StoreUnavailable as e:
        logger.error(f"Could not save '{name}' as a user CRS: {e}")
        return False

    logger.info(f"Saved user CRS '{name}' with srsid {srsid}")
    return srsid
