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
Spatial Reference System (SRS) Handling and Logic for CRSK.

This module is the only place that talks to GDAL/OSR. It parses WKT, proj4
strings, EPSG codes and free-form user input into `ProjStructure` values,
standardizes Esri-flavored WKT to EPSG-based definitions where possible, and
provides the equivalence test used by the catalog matcher.
"""
import logging
import re
from enum import Enum
from pathlib import Path
from osgeo import osr
from typing import Optional

from crsk.utils.data_models import ProjStructure
from crsk.utils.esri_epsg_lookup import get_epsg_from_esri_name
from crsk.utils.exceptions import FormatError
from crsk.utils.proj4_string import normalize_proj4, split_acronyms

logger = logging.getLogger(__name__)

osr.UseExceptions()

ESRI_PREFIX = "ESRI::"

# Markers of Esri WKT1 dialect (GCS_/D_ prefixed names)
ESRI_WKT_PATTERN = re.compile(r'GEOGCS\[\s*"GCS_|DATUM\[\s*"D_', re.IGNORECASE)

class EquivalenceMode(Enum):
    """How two structured CRS definitions are compared."""
    GEOGRAPHIC = "geographic"  # datum, ellipsoid, prime meridian and angular units only
    FULL = "full"              # complete definition including projection parameters

def new_srs() -> osr.SpatialReference:
    """Create an empty SpatialReference using traditional GIS (x=lon, y=lat) axis order."""
    srs = osr.SpatialReference()
    srs.SetAxisMappingStrategy(osr.OAMS_TRADITIONAL_GIS_ORDER)
    return srs

def structure_from_srs(srs: osr.SpatialReference, proj4: Optional[str] = None) -> ProjStructure:
    """
    Build a ProjStructure from an OSR spatial reference.

    Args:
        srs (osr.SpatialReference): A populated spatial reference.
        proj4 (str, optional): The proj4 text the SRS was imported from. When given,
                               its canonical form is kept instead of OSR's re-export.

    Returns:
        ProjStructure: The structured representation.

    Raises:
        FormatError: If the SRS has no proj4 representation.
    """
    if proj4 is None:
        try:
            proj4 = srs.ExportToProj4()
        except RuntimeError as e:
            raise FormatError(f"CRS '{srs.GetName()}' has no proj4 representation: {e}") from e
    proj4 = normalize_proj4(proj4)
    if not proj4:
        raise FormatError(f"CRS '{srs.GetName()}' has no proj4 representation.")

    projection_acronym, ellipsoid_acronym, _ = split_acronyms(proj4)
    if not projection_acronym:
        raise FormatError(f"proj4 definition has no +proj key: {proj4}")
    if not ellipsoid_acronym:
        ellipsoid_acronym = f"PARAMETER:{srs.GetSemiMajor():.6f}:{srs.GetSemiMinor():.6f}"

    geographic = bool(srs.IsGeographic())
    if geographic:
        units = "degrees"
    else:
        units = (srs.GetLinearUnitsName() or "").lower()

    authority_name = srs.GetAuthorityName(None)
    authority_code = srs.GetAuthorityCode(None)
    axis_inverted = False
    if authority_name and authority_name.upper() == "EPSG":
        axis_inverted = bool(srs.EPSGTreatsAsLatLong() or srs.EPSGTreatsAsNorthingEasting())

    return ProjStructure(
        projection_acronym=projection_acronym,
        ellipsoid_acronym=ellipsoid_acronym,
        datum=srs.GetAttrValue("DATUM") or "",
        units=units,
        geographic_flag=geographic,
        axis_inverted=axis_inverted,
        proj4=proj4,
        wkt=srs.ExportToWkt(),
        srs=srs,
        authority_name=authority_name,
        authority_code=authority_code,
        name=srs.GetName() or "",
    )

def parse_proj4(proj4: str) -> ProjStructure:
    """
    Parse a proj4 string into a ProjStructure.

    Raises:
        FormatError: If OSR cannot import the string.
    """
    canonical = normalize_proj4(proj4)
    if not canonical.startswith("+proj="):
        raise FormatError(f"Not a proj4 definition: '{proj4}'")
    srs = new_srs()
    try:
        srs.ImportFromProj4(canonical)
    except RuntimeError as e:
        raise FormatError(f"Invalid proj4 definition '{proj4}': {e}") from e
    return structure_from_srs(srs, proj4=canonical)

def parse_wkt(wkt: str) -> ProjStructure:
    """
    Parse a WKT string into a ProjStructure, identifying its EPSG code where possible.

    Raises:
        FormatError: If OSR cannot import the WKT.
    """
    srs = new_srs()
    try:
        srs.ImportFromWkt(wkt.strip())
    except RuntimeError as e:
        raise FormatError(f"Invalid WKT definition: {e}") from e
    if not srs.GetAuthorityCode(None):
        try:
            srs.AutoIdentifyEPSG()
        except RuntimeError:
            logger.debug(f"No EPSG code identified for '{srs.GetName()}'")
    return structure_from_srs(srs)

def parse_epsg(code: int) -> ProjStructure:
    """
    Build a ProjStructure from GDAL's EPSG definition of `code`.

    Raises:
        FormatError: If GDAL does not know the code.
    """
    srs = new_srs()
    try:
        srs.ImportFromEPSG(int(code))
    except (RuntimeError, ValueError, TypeError) as e:
        raise FormatError(f"Unknown EPSG code {code}: {e}") from e
    return structure_from_srs(srs)

def is_esri_flavored(definition: str) -> bool:
    """True if the definition is Esri WKT (explicit 'ESRI::' prefix or Esri naming)."""
    text = definition.strip()
    return text.upper().startswith(ESRI_PREFIX) or bool(ESRI_WKT_PATTERN.search(text))

def fix_esri_wkt(definition: str) -> osr.SpatialReference:
    """
    Standardizes Esri-flavored WKT to an OSR SpatialReference, EPSG-based if possible.

    GDAL morphs Esri names when the input carries the 'ESRI::' prefix. If the
    result still has no authority code, the packaged Esri name lookup is tried
    under the projected or geographic name of the definition.

    Args:
        definition (str): Esri WKT with or without the 'ESRI::' prefix.

    Returns:
        osr.SpatialReference: The standardized spatial reference.

    Raises:
        FormatError: If the WKT cannot be parsed.
    """
    body = definition.strip()
    if body.upper().startswith(ESRI_PREFIX):
        body = body[len(ESRI_PREFIX):]

    srs = new_srs()
    try:
        srs.SetFromUserInput(ESRI_PREFIX + body)
    except RuntimeError as e:
        raise FormatError(f"Invalid Esri WKT: {e}") from e

    if srs.GetAuthorityCode(None):
        return srs
    try:
        srs.AutoIdentifyEPSG()
    except RuntimeError:
        logger.debug(f"No EPSG code identified for Esri SRS '{srs.GetName()}'")
    if srs.GetAuthorityCode(None):
        return srs

    if srs.IsProjected():
        srs_name = srs.GetName()
        epsg_code = get_epsg_from_esri_name("ProjectedCoordinateSystems", srs_name)
    else:
        srs_name = srs.GetAttrValue("GEOGCS") or srs.GetName()
        epsg_code = get_epsg_from_esri_name("GeographicCoordinateSystems", srs_name)
    if epsg_code:
        logger.info(f"Standardized Esri SRS '{srs_name}' to EPSG:{epsg_code} via Esri name lookup.")
        clean_srs = new_srs()
        clean_srs.ImportFromEPSG(epsg_code)
        return clean_srs
    return srs

def user_input_to_wkt(definition: str) -> str:
    """
    Normalize free-form user input into WKT.

    Accepts anything GDAL's SetFromUserInput understands (EPSG:n, EPSGA:n,
    AUTO:..., urn:ogc:def:crs:..., well-known names such as 'WGS84', proj4,
    WKT, paths to .prj files) plus Esri-flavored WKT.

    Raises:
        FormatError: If the input cannot be interpreted.
    """
    if not definition or not definition.strip():
        raise FormatError("Empty CRS definition.")
    logger.debug(f"Parsing user input SRS: {definition}")

    if is_esri_flavored(definition):
        return fix_esri_wkt(definition).ExportToWkt()

    text = definition.strip()
    srs = new_srs()
    try:
        if Path(text).suffix.lower() in (".prj", ".wkt") and Path(text).is_file():
            text = Path(text).read_text(encoding="utf-8").strip()
            if is_esri_flavored(text):
                return fix_esri_wkt(text).ExportToWkt()
        srs.SetFromUserInput(text)
    except (RuntimeError, OSError) as e:
        raise FormatError(f"Unrecognized CRS definition '{definition}': {e}") from e
    return srs.ExportToWkt()

def equivalent(a: ProjStructure, b: ProjStructure, mode: EquivalenceMode = EquivalenceMode.FULL) -> bool:
    """
    Test two structured CRS definitions for equivalence.

    Args:
        a (ProjStructure): First definition.
        b (ProjStructure): Second definition.
        mode (EquivalenceMode): GEOGRAPHIC compares only the geographic part
                                (datum, ellipsoid, prime meridian, units); FULL
                                compares the complete definition.

    Returns:
        bool: True if OSR considers the definitions the same.
    """
    try:
        if mode is EquivalenceMode.GEOGRAPHIC:
            return bool(a.srs.IsSameGeogCS(b.srs))
        return bool(a.srs.IsSame(b.srs))
    except RuntimeError as e:
        logger.debug(f"OSR comparison failed: {e}")
        return False
