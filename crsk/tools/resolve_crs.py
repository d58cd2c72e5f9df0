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
CRS Resolution Tool for CRSK.

This module powers the 'resolve' command: it resolves a definition against
the catalog and reports the canonical CRS, optionally as a spatialrefsys XML
fragment.
"""

import logging
from typing import List
import lxml.etree as etree
from crsk.utils.crs import CoordinateReferenceSystem
from crsk.utils.script_arguments import ResolveArguments

logger = logging.getLogger('resolve_crs')


def resolve(crs: CoordinateReferenceSystem, definition: str, mode: str) -> CoordinateReferenceSystem:
    """Dispatch a definition to the creation path named by `mode`."""
    if mode == 'user':
        return crs.create_from_user_input(definition)
    if mode == 'wms':
        return crs.create_from_ogc_wms_crs(definition)
    if mode == 'srsid':
        return crs.create_from_srs_id(int(definition))
    if mode == 'srid':
        return crs.create_from_srid(int(definition))
    if mode == 'epsg':
        return crs.create_from_epsg(int(definition))
    if mode == 'proj4':
        return crs.create_from_proj4(definition)
    if mode == 'wkt':
        return crs.create_from_wkt(definition)
    return crs.create_from_string(definition)


def summarize(crs: CoordinateReferenceSystem) -> List[str]:
    """Human readable lines describing a resolved CRS."""
    return [
        f"Description:  {crs.description}",
        f"Authority:    {crs.authid or '(none)'}",
        f"srsid:        {crs.srsid if crs.srsid else '(unresolved)'}",
        f"PostGIS SRID: {crs.postgis_srid or '(none)'}",
        f"Projection:   {crs.projection_acronym}",
        f"Ellipsoid:    {crs.ellipsoid_acronym}",
        f"Geographic:   {crs.geographic_flag}",
        f"Map units:    {crs.map_units}",
        f"proj4:        {crs.to_proj4()}",
    ]


def resolve_crs(args: ResolveArguments) -> CoordinateReferenceSystem:
    """
    Resolve `args.definition` and log a summary (or the XML fragment).

    Raises:
        CrsError: If the definition cannot be resolved.
    """
    with args.open_store() as store:
        crs = resolve(CoordinateReferenceSystem(store), args.definition, args.mode)
        if args.xml:
            root = etree.Element("qgis")
            crs.write_xml(root)
            logger.info(etree.tostring(root, pretty_print=True, encoding='unicode').rstrip())
        else:
            for line in summarize(crs):
                logger.info(line)
    return crs
