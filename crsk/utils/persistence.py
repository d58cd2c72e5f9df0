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
spatialrefsys XML Codec.

Reads and writes a CRS record as a fixed-shape element inside a caller
supplied lxml tree:

    <spatialrefsys>
      <proj4>+proj=longlat +datum=WGS84 +no_defs</proj4>
      <srsid>1</srsid>
      <srid>4326</srid>
      <epsg>4326</epsg>
      <description>WGS 84</description>
      <projectionacronym>longlat</projectionacronym>
      <ellipsoidacronym>WGS84</ellipsoidacronym>
    </spatialrefsys>

Every element is always written, with empty text for unset values, so the
schema never varies.
"""
import logging
import lxml.etree as etree
from typing import Dict, Optional

from crsk.utils.config_loader import config
from crsk.utils.data_models import CrsRecord, ProjStructure
from crsk.utils.exceptions import FormatError, MalformedPersistedState
from crsk.utils.proj4_string import build_proj4, strip_proj4_keys
from crsk.utils import srs_logic

logger = logging.getLogger(__name__)

SPATIALREFSYS_TAG = "spatialrefsys"
FIELD_TAGS = ("proj4", "srsid", "srid", "epsg", "description", "projectionacronym", "ellipsoidacronym")


def write_record(record: CrsRecord, parent: etree._Element) -> etree._Element:
    """
    Append a spatialrefsys element describing `record` to `parent`.

    Args:
        record: The CRS state to serialize. `validation_hint` is never written.
        parent: The element to append to.

    Returns:
        The new spatialrefsys element.
    """
    proj4 = ""
    if record.projection_acronym:
        proj4 = build_proj4(record.projection_acronym, record.ellipsoid_acronym, record.proj4_params)
    values = {
        "proj4": proj4,
        "srsid": str(record.srsid) if record.srsid else "",
        "srid": str(record.postgis_srid) if record.postgis_srid else "",
        "epsg": str(record.epsg_id) if record.epsg_id else "",
        "description": record.description,
        "projectionacronym": record.projection_acronym,
        "ellipsoidacronym": record.ellipsoid_acronym,
    }
    node = etree.SubElement(parent, SPATIALREFSYS_TAG)
    for tag in FIELD_TAGS:
        etree.SubElement(node, tag).text = values[tag]
    return node


def _find_spatialrefsys(node: etree._Element) -> etree._Element:
    if node.tag == SPATIALREFSYS_TAG:
        return node
    found = node.find(SPATIALREFSYS_TAG)
    if found is None:
        found = node.find(f".//{SPATIALREFSYS_TAG}")
    if found is None:
        raise MalformedPersistedState(f"No <{SPATIALREFSYS_TAG}> element under <{node.tag}>.")
    return found


def _int_field(values: Dict[str, str], tag: str) -> int:
    text = values[tag]
    if not text:
        return 0
    try:
        return int(text)
    except ValueError as e:
        raise MalformedPersistedState(f"<{tag}> is not an integer: '{text}'") from e


def read_record(node: etree._Element) -> CrsRecord:
    """
    Rebuild a CRS record from a spatialrefsys element.

    Args:
        node: The spatialrefsys element, or an ancestor containing one.

    Returns:
        CrsRecord: The stored fields, with geographic flag, units and axis
                   order re-derived from the stored proj4 and EPSG code.

    Raises:
        MalformedPersistedState: If the element or any of its fields is missing
                                 or an id field is not an integer.
    """
    srs_node = _find_spatialrefsys(node)
    values = {}
    for tag in FIELD_TAGS:
        child = srs_node.find(tag)
        if child is None:
            raise MalformedPersistedState(f"<{SPATIALREFSYS_TAG}> is missing required element <{tag}>.")
        values[tag] = (child.text or "").strip()

    srsid = _int_field(values, "srsid") or None
    epsg_id = _int_field(values, "epsg")
    threshold = config.get("catalog.user_srsid_threshold", 100000)
    if epsg_id:
        authority_id = f"EPSG:{epsg_id}"
    elif srsid and srsid > threshold:
        authority_id = f"USER:{srsid}"
    else:
        authority_id = ""

    record = CrsRecord(
        srsid=srsid,
        postgis_srid=_int_field(values, "srid"),
        epsg_id=epsg_id,
        authority_id=authority_id,
        description=values["description"],
        projection_acronym=values["projectionacronym"],
        ellipsoid_acronym=values["ellipsoidacronym"],
        proj4_params=strip_proj4_keys(values["proj4"]),
    )
    _derive_axes(record, values["proj4"])
    return record


def _derive_axes(record: CrsRecord, proj4: str) -> None:
    structure: Optional[ProjStructure] = None
    try:
        if record.epsg_id:
            structure = srs_logic.parse_epsg(record.epsg_id)
        elif proj4:
            structure = srs_logic.parse_proj4(proj4)
    except FormatError as e:
        logger.warning(f"Could not derive axes for persisted CRS '{record.description}': {e}")
    if structure is None:
        return
    record.geographic_flag = structure.geographic_flag
    record.axis_inverted = structure.axis_inverted
    record.map_units = structure.units
    record.wkt = structure.wkt
    record.axes_derived = True
