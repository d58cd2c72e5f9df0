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
CRS Definition String Classification.

Decides which creation path a definition string belongs to without touching
the catalog or GDAL:

    'epsg:4326', 'postgis:4326', 'internal:3452'  -> id-based lookups
    'wkt:GEOGCS[...]', 'proj4:+proj=...'           -> explicit string forms
    'GEOGCS[...]', 'PROJCRS[...]'                  -> raw WKT
    '+proj=longlat ...'                            -> raw proj4

OGC WMS CRS labels ('EPSG:4326', 'CRS:84', URNs and opengis.net URIs) are
parsed separately by `parse_ogc_wms_crs`.
"""
import logging
import re
from typing import NamedTuple

from crsk.utils.data_models import ParsedDefinition
from crsk.utils.exceptions import FormatError

logger = logging.getLogger(__name__)

ID_AUTHORITY_PATTERN = re.compile(r"^\s*(epsg|postgis|internal)\s*:\s*(\d+)\s*$", re.IGNORECASE)
STRING_AUTHORITY_PATTERN = re.compile(r"^\s*(wkt|proj4)\s*:\s*(.+?)\s*$", re.IGNORECASE | re.DOTALL)

WKT_KEYWORDS = (
    "GEOGCS", "PROJCS", "GEOCCS", "COMPD_CS", "VERT_CS", "LOCAL_CS",
    "GEOGCRS", "GEOGRAPHICCRS", "GEODCRS", "GEODETICCRS", "PROJCRS", "PROJECTEDCRS",
    "VERTCRS", "VERTICALCRS", "COMPOUNDCRS", "BOUNDCRS", "ENGCRS", "ENGINEERINGCRS",
)
WKT_PATTERN = re.compile(r"^\s*(%s)\s*\[" % "|".join(WKT_KEYWORDS), re.IGNORECASE)
PROJ4_PATTERN = re.compile(r"^\s*\+?proj\s*=", re.IGNORECASE)

WMS_SHORT_PATTERN = re.compile(r"^\s*([A-Za-z]+)\s*:\s*([A-Za-z0-9.]+)\s*$")
WMS_URN_PATTERN = re.compile(r"^\s*urn:ogc:def:crs:([A-Za-z]+):[^:]*:([A-Za-z0-9.]+)\s*$", re.IGNORECASE)
WMS_URI_PATTERN = re.compile(r"^\s*https?://www\.opengis\.net/def/crs/([A-Za-z]+)/[^/]+/([A-Za-z0-9.]+)\s*$", re.IGNORECASE)

# OGC CRS codes and the EPSG geographic CRS they share a datum with (lon/lat axis order)
OGC_CRS_CODES = {
    "84": 4326,
    "CRS84": 4326,
    "83": 4269,
    "CRS83": 4269,
    "27": 4267,
    "CRS27": 4267,
}

class WmsCrs(NamedTuple):
    """An OGC WMS CRS label resolved to an EPSG code."""
    epsg_code: int
    lon_lat_order: bool  # True for the OGC CRS:84 family, which fixes x=lon, y=lat

def is_wkt(definition: str) -> bool:
    return bool(WKT_PATTERN.match(definition or ""))

def is_proj4(definition: str) -> bool:
    return bool(PROJ4_PATTERN.match(definition or ""))

def parse_definition(definition: str) -> ParsedDefinition:
    """
    Classify a definition string for `create_from_string`.

    Args:
        definition: e.g. 'EPSG:4326', 'postgis:4326', 'internal:3452',
                    'wkt:GEOGCS[...]', 'proj4:+proj=...', raw WKT or raw proj4.

    Returns:
        ParsedDefinition: kind is one of 'epsg', 'postgis', 'internal', 'wkt', 'proj4';
                          value is an int for id kinds and the definition text otherwise.

    Raises:
        FormatError: If the string matches none of the supported forms.
    """
    if not definition or not definition.strip():
        raise FormatError("Empty CRS definition.")

    match = ID_AUTHORITY_PATTERN.match(definition)
    if match:
        return ParsedDefinition(match.group(1).lower(), int(match.group(2)))

    match = STRING_AUTHORITY_PATTERN.match(definition)
    if match:
        return ParsedDefinition(match.group(1).lower(), match.group(2))

    if is_wkt(definition):
        return ParsedDefinition("wkt", definition.strip())
    if is_proj4(definition):
        return ParsedDefinition("proj4", definition.strip())

    raise FormatError(f"Unrecognized CRS definition: '{definition}'")

def parse_ogc_wms_crs(label: str) -> WmsCrs:
    """
    Parse an OGC WMS CRS label into an EPSG code.

    Supported forms: 'EPSG:4326', 'CRS:84', 'OGC:CRS84',
    'urn:ogc:def:crs:EPSG::4326', 'urn:ogc:def:crs:OGC:1.3:CRS84',
    'http://www.opengis.net/def/crs/EPSG/0/4326'.

    Raises:
        FormatError: If the label cannot be parsed or names an unsupported authority.
    """
    match = (WMS_URN_PATTERN.match(label or "")
             or WMS_URI_PATTERN.match(label or "")
             or WMS_SHORT_PATTERN.match(label or ""))
    if not match:
        raise FormatError(f"Unparsable OGC WMS CRS label: '{label}'")

    authority, code = match.group(1).upper(), match.group(2).upper()
    if authority == "EPSG" and code.isdigit():
        return WmsCrs(int(code), False)
    if authority in ("CRS", "OGC") and code in OGC_CRS_CODES:
        return WmsCrs(OGC_CRS_CODES[code], True)

    raise FormatError(f"Unsupported OGC WMS CRS label: '{label}'")
