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
Esri-to-EPSG Coordinate System Name Lookup Utility.

Esri WKT that GDAL cannot identify keeps its Esri names ('GCS_WGS_1984',
'WGS_1984_Web_Mercator_Auxiliary_Sphere', ...). This module maps those names
to EPSG codes using a packaged JSON lookup table, and handles deprecated Esri
naming conventions.
"""
import json
import logging
import re
from importlib import resources
from typing import Dict, Optional

logger = logging.getLogger(__name__)

CATEGORIES = ("ProjectedCoordinateSystems", "GeographicCoordinateSystems")

# Mapping of deprecated Esri PE name parts to the latest versions
DEPRECATED_PE_NAME_PARTS: Dict[str, str] = {
    "ITRF_2008": "ITRF2008",
    "_Auxiliary_Sphere_Web_Mercator": "_Web_Mercator_Auxiliary_Sphere",
}

_INITIALIZED = False
_LOOKUP: Dict[str, Dict[str, int]] = {}

def get_epsg_from_esri_name(category: str, name: str) -> Optional[int]:
    """
    Find the EPSG code for a given Esri PE name from the lookup dictionary.

    This function performs a case-insensitive match and handles known deprecated
    name parts.

    Args:
        category: The CRS category (e.g., "ProjectedCoordinateSystems").
        name: The Esri PE name to look up.

    Returns:
        The matching EPSG code (latestWkid) as an integer, or None if not found.
    """
    if not _INITIALIZED:
        initialize_lookup()

    if not name or not category:
        return None

    cat_lookup = _LOOKUP.get(category)
    if cat_lookup is None:
        logger.warning(f"Invalid category provided to Esri EPSG lookup: {category}")
        return None

    # Primary match (case-insensitive)
    value = cat_lookup.get(name.casefold())

    # Fallback match for deprecated name parts
    if value is None:
        converted_name = _convert_deprecated_pe_names(name)
        if converted_name != name:
            value = cat_lookup.get(converted_name.casefold())
            if value:
                logger.debug(f"Matched deprecated Esri name '{name}' to '{converted_name}' -> EPSG:{value}")

    return value

def initialize_lookup(lookup_path: Optional[str] = None, force: bool = False) -> None:
    """
    Load and normalize the Esri->EPSG lookup JSON.

    Args:
        lookup_path: Optional JSON file to use instead of the packaged table.
        force: Reload even if a table is already loaded.
    """
    global _LOOKUP, _INITIALIZED
    if _INITIALIZED and not force:
        return

    path = None
    try:
        if lookup_path:
            path = lookup_path
            logger.info(f"Using custom Esri->EPSG lookup file: {path}")
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            resource_file = resources.files('crsk.resources.esri').joinpath('esri_cs_epsg_lookup.json')
            path = str(resource_file)
            logger.debug(f"Loading packaged Esri->EPSG lookup table from {path}")
            with resource_file.open('r', encoding='utf-8') as f:
                data = json.load(f)
        _LOOKUP = _normalize_lookup_keys(data)
        logger.debug("Esri->EPSG lookup initialized successfully.")
    except FileNotFoundError:
        logger.error(f"Esri->EPSG lookup file not found at {path}.")
        _LOOKUP = _get_empty_lookup()
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load Esri->EPSG lookup file: {e}")
        _LOOKUP = _get_empty_lookup()
    _INITIALIZED = True

def _normalize_lookup_keys(data: dict) -> Dict[str, Dict[str, int]]:
    """Normalize all keys in the lookup dictionary to be case-insensitive."""
    normalized = _get_empty_lookup()
    for cat, items in data.items():
        if cat in CATEGORIES and isinstance(items, dict):
            normalized[cat] = {str(k).casefold(): int(v) for k, v in items.items()}
    return normalized

def _get_empty_lookup() -> Dict[str, Dict[str, int]]:
    """Return a default empty structure for the lookup dictionary."""
    return {category: {} for category in CATEGORIES}

def _convert_deprecated_pe_names(name: str) -> str:
    """Replace known deprecated Esri PE name parts with modern equivalents (case-insensitive)."""
    if not name:
        return ""
    new_name = name
    for old, new in DEPRECATED_PE_NAME_PARTS.items():
        new_name = re.sub(re.escape(old), new, new_name, flags=re.IGNORECASE)
    return new_name
