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
Data Models for the CRS ToolKit.

This module defines strongly-typed data classes for the values passed between
the parser, the catalog, the equivalence matcher and the CRS entity.

Domain model classes:
    CrsRecord: The full field set of a CRS entity (resolved or unresolved)
    CatalogRow: One immutable row of a catalog tier (tbl_srs)
    ProjStructure: Structured view of a WKT/proj4 definition parsed by OSR
    ParsedDefinition: Result of classifying a definition string
"""

from osgeo import osr
from dataclasses import dataclass, field
from typing import Optional

from crsk.utils.proj4_string import strip_proj4_keys


# ============================================================================
# CRS entity state
# ============================================================================

@dataclass
class CrsRecord:
    """
    The complete state of a CoordinateReferenceSystem.

    A record is either unresolved (srsid is None, built from proj4/WKT alone)
    or resolved (srsid set, consistent with the tier its id falls in).

    Attributes:
        srsid: Catalog primary key, None until resolved.
        postgis_srid: PostGIS SRID of the catalog row.
        epsg_id: EPSG code, 0 when the CRS has no EPSG authority.
        authority_id: Authority and code, e.g. 'EPSG:4326'.
        description: Human readable name.
        projection_acronym: PROJ projection name, e.g. 'longlat', 'utm'.
        ellipsoid_acronym: PROJ ellipsoid name or a 'PARAMETER:a:b' encoding.
        wkt: WKT definition if known.
        proj4_params: Canonical proj4 parameters without 'proj' and 'ellps'.
        geographic_flag: True for angular (lat/long) systems.
        axis_inverted: True when the authority axis order is northing/easting.
        map_units: 'degrees', 'metre', 'foot', ...
        axes_derived: True when axes and units were derived from the definition itself.
        validation_hint: Transient UI text; never persisted.
    """
    srsid: Optional[int] = None
    postgis_srid: int = 0
    epsg_id: int = 0
    authority_id: str = ""
    description: str = ""
    projection_acronym: str = ""
    ellipsoid_acronym: str = ""
    wkt: str = ""
    proj4_params: str = ""
    geographic_flag: bool = False
    axis_inverted: bool = False
    map_units: str = ""
    axes_derived: bool = False
    validation_hint: str = field(default="", compare=False)


# ============================================================================
# Catalog rows
# ============================================================================

@dataclass(frozen=True)
class CatalogRow:
    """
    A row of the tbl_srs table in either catalog tier.

    Attributes:
        srsid: Primary key (srs_id column).
        description: CRS name.
        projection_acronym: PROJ projection name.
        ellipsoid_acronym: PROJ ellipsoid name or 'PARAMETER:a:b'.
        proj4: Full canonical proj4 string (parameters column).
        postgis_srid: PostGIS SRID (srid column), 0 if none.
        auth_name: Authority name, e.g. 'EPSG'.
        auth_id: Code within the authority, as text.
        is_geo: True for geographic systems.
        wkt: WKT definition, may be empty.
    """
    srsid: int
    description: str
    projection_acronym: str
    ellipsoid_acronym: str
    proj4: str
    postgis_srid: int = 0
    auth_name: str = ""
    auth_id: str = ""
    is_geo: bool = False
    wkt: str = ""

    @property
    def epsg_id(self) -> int:
        if self.auth_name.upper() == "EPSG" and self.auth_id.isdigit():
            return int(self.auth_id)
        return 0

    @property
    def authority_id(self) -> str:
        if self.auth_name and self.auth_id:
            return f"{self.auth_name.upper()}:{self.auth_id}"
        return ""


# ============================================================================
# Structured CRS (OSR view)
# ============================================================================

@dataclass
class ProjStructure:
    """
    Structured representation of a CRS definition, as produced by the OSR adapter.

    Attributes:
        projection_acronym: PROJ projection name.
        ellipsoid_acronym: PROJ ellipsoid name or 'PARAMETER:a:b'.
        datum: Datum name reported by OSR, may be empty.
        units: Linear unit name for projected systems, 'degrees' for geographic ones.
        geographic_flag: True for geographic systems.
        axis_inverted: True when the authority axis order is northing/easting.
        proj4: Canonical proj4 string.
        wkt: WKT1 export of the definition.
        srs: The underlying osr.SpatialReference used for comparisons.
        authority_name: Authority of the definition itself, if any.
        authority_code: Code within that authority, if any.
        name: CRS name reported by OSR.
    """
    projection_acronym: str
    ellipsoid_acronym: str
    datum: str
    units: str
    geographic_flag: bool
    axis_inverted: bool
    proj4: str
    wkt: str
    srs: osr.SpatialReference = field(repr=False, compare=False)
    authority_name: Optional[str] = None
    authority_code: Optional[str] = None
    name: str = ""

    @property
    def proj4_params(self) -> str:
        return strip_proj4_keys(self.proj4)


# ============================================================================
# Parser output
# ============================================================================

@dataclass(frozen=True)
class ParsedDefinition:
    """
    Classification of a definition string.

    Attributes:
        kind: One of 'epsg', 'postgis', 'internal', 'wkt', 'proj4'.
        value: The code (int) for id-based kinds, the definition text otherwise.
    """
    kind: str
    value: object
