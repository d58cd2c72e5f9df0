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
Coordinate Reference System Entity.

`CoordinateReferenceSystem` is the canonical in-memory CRS value. It is
created invalid and populated through one of the `create_from_*` methods:

    create_from_string      'EPSG:4326', 'postgis:4326', 'internal:1', 'wkt:...', 'proj4:...'
    create_from_user_input  anything GDAL understands, Esri WKT included
    create_from_ogc_wms_crs 'EPSG:4326', 'CRS:84', URNs, opengis.net URIs
    create_from_srs_id      catalog primary key (tier chosen by id)
    create_from_srid        PostGIS SRID
    create_from_epsg        EPSG code
    create_from_wkt         WKT, resolved through its EPSG code or its proj4 form
    create_from_proj4       proj4, resolved through the equivalence matcher

Each method either replaces the whole state and returns the entity, or raises
a `CrsError` subclass and leaves the state as it was. `validate()` is the
lenient counterpart: it never raises and always leaves a valid CRS behind.

Example:
    >>> crs = CoordinateReferenceSystem(store).create_from_ogc_wms_crs("EPSG:4326")
    >>> crs.authid, crs.geographic_flag
    ('EPSG:4326', True)
"""
import copy
import logging
import lxml.etree as etree
from dataclasses import replace
from typing import Callable, Optional, Union

from crsk.utils import persistence, registrar, srs_logic
from crsk.utils.catalog_store import CatalogStore
from crsk.utils.config_loader import config
from crsk.utils.data_models import CatalogRow, CrsRecord, ProjStructure
from crsk.utils.definition_parser import parse_definition, parse_ogc_wms_crs
from crsk.utils.equivalence_matcher import LOOKUP_MISS, EquivalenceMatcher, is_geographic
from crsk.utils.exceptions import CrsError, FormatError, LookupMiss
from crsk.utils.proj4_string import build_proj4, strip_proj4_keys
from crsk.utils.srs_logic import EquivalenceMode

logger = logging.getLogger(__name__)

WGS84_WKT = (
    'GEOGCS["WGS 84",DATUM["WGS_1984",SPHEROID["WGS 84",6378137,298.257223563,'
    'AUTHORITY["EPSG","7030"]],AUTHORITY["EPSG","6326"]],PRIMEM["Greenwich",0,'
    'AUTHORITY["EPSG","8901"]],UNIT["degree",0.0174532925199433,'
    'AUTHORITY["EPSG","9122"]],AXIS["Latitude",NORTH],AXIS["Longitude",EAST],'
    'AUTHORITY["EPSG","4326"]]'
)

def wgs84_record() -> CrsRecord:
    """Hard-coded geographic WGS 84, the last resort of `validate()`."""
    return CrsRecord(
        postgis_srid=4326,
        epsg_id=4326,
        authority_id="EPSG:4326",
        description="WGS 84",
        projection_acronym="longlat",
        ellipsoid_acronym="WGS84",
        wkt=WGS84_WKT,
        proj4_params="+datum=WGS84 +no_defs",
        geographic_flag=True,
        axis_inverted=True,
        map_units="degrees",
        axes_derived=True,
    )

ValidationStrategy = Callable[["CoordinateReferenceSystem"], None]


class CoordinateReferenceSystem:
    """
    A coordinate reference system resolved against a two-tier catalog.

    Args:
        store: Catalog to resolve against. Defaults to the tiers named in config,
               opened on first use.
        matcher: Equivalence matcher for proj4/WKT definitions. Defaults to an
                 OSR-backed matcher over `store`.
    """

    def __init__(self, store: Optional[CatalogStore] = None, matcher: Optional[EquivalenceMatcher] = None):
        self._record = CrsRecord()
        self._store = store
        self._matcher = matcher

    def __repr__(self):
        if not self.is_valid():
            return "<CoordinateReferenceSystem: invalid>"
        label = self.authid or (f"srsid {self.srsid}" if self.srsid else "unresolved")
        return f"<CoordinateReferenceSystem: {label} {self.to_proj4()!r}>"

    # --- Collaborators ---------------------------------------------------------

    @property
    def store(self) -> CatalogStore:
        if self._store is None:
            self._store = CatalogStore.from_config()
        return self._store

    @property
    def matcher(self) -> EquivalenceMatcher:
        if self._matcher is None:
            self._matcher = EquivalenceMatcher(self.store)
        return self._matcher

    # --- Accessors -------------------------------------------------------------

    @property
    def record(self) -> CrsRecord:
        """A copy of the current state."""
        return replace(self._record)

    @property
    def srsid(self) -> Optional[int]:
        return self._record.srsid

    @property
    def postgis_srid(self) -> int:
        return self._record.postgis_srid

    @property
    def epsg(self) -> int:
        return self._record.epsg_id

    @property
    def authid(self) -> str:
        return self._record.authority_id

    @property
    def description(self) -> str:
        return self._record.description

    @property
    def projection_acronym(self) -> str:
        return self._record.projection_acronym

    @property
    def ellipsoid_acronym(self) -> str:
        return self._record.ellipsoid_acronym

    @property
    def geographic_flag(self) -> bool:
        return self._record.geographic_flag

    @property
    def axis_inverted(self) -> bool:
        return self._record.axis_inverted

    @property
    def map_units(self) -> str:
        return self._record.map_units

    @property
    def validation_hint(self) -> str:
        return self._record.validation_hint

    @validation_hint.setter
    def validation_hint(self, hint: str):
        self._record.validation_hint = hint

    def to_proj4(self) -> str:
        """Full canonical proj4 string, or '' if the CRS has no definition."""
        if not self._record.projection_acronym:
            return ""
        return build_proj4(self._record.projection_acronym, self._record.ellipsoid_acronym,
                           self._record.proj4_params)

    def to_wkt(self) -> str:
        """WKT definition; derived from the proj4 string when none was stored."""
        if self._record.wkt:
            return self._record.wkt
        proj4 = self.to_proj4()
        if not proj4:
            return ""
        try:
            return srs_logic.parse_proj4(proj4).wkt
        except FormatError as e:
            logger.debug(f"No WKT for '{proj4}': {e}")
            return ""

    def to_ogc_urn(self) -> str:
        """OGC URN for CRSs with an EPSG code, e.g. 'urn:ogc:def:crs:EPSG::4326'."""
        if self._record.epsg_id:
            return f"urn:ogc:def:crs:EPSG::{self._record.epsg_id}"
        return ""

    def copy(self) -> "CoordinateReferenceSystem":
        """An independent copy sharing the same catalog."""
        clone = copy.copy(self)
        clone._record = replace(self._record)
        return clone

    # --- Validity --------------------------------------------------------------

    def is_valid(self) -> bool:
        r = self._record
        has_definition = bool(r.projection_acronym and r.ellipsoid_acronym and r.proj4_params)
        return has_definition and (bool(r.srsid) or r.axes_derived)

    def validate(self, strategy: Optional[ValidationStrategy] = None) -> None:
        """
        Make the CRS valid, whatever it takes. Never raises.

        Order of attempts:
            1. `strategy(self)`, if given (e.g. a UI prompt that asks the user).
            2. Re-derivation from whatever identifiers the state still holds.
            3. The configured default ('validation.default_crs').
            4. A hard-coded geographic WGS 84.

        Args:
            strategy: Optional callable that may populate the CRS in place.
        """
        if self.is_valid():
            return

        if strategy is not None:
            try:
                strategy(self)
            except Exception as e:
                logger.warning(f"CRS validation strategy failed: {e}", exc_info=True)
            if self.is_valid():
                return

        for description, attempt in self._rederivation_attempts():
            try:
                attempt()
            except CrsError as e:
                logger.debug(f"Re-deriving CRS from {description} failed: {e}")
                continue
            if self.is_valid():
                logger.info(f"CRS re-derived from {description}.")
                return

        default = config.get("validation.default_crs", "EPSG:4326")
        try:
            self.create_from_string(default)
        except CrsError as e:
            logger.warning(f"Default CRS '{default}' unavailable ({e}); using built-in WGS 84.")
        if not self.is_valid():
            self._record = wgs84_record()
        logger.info(f"Invalid CRS replaced with default {self.authid or default}.")

    def _rederivation_attempts(self):
        r = self._record
        if r.authority_id:
            yield f"authority id {r.authority_id}", lambda: self.create_from_string(r.authority_id)
        if r.epsg_id:
            yield f"EPSG:{r.epsg_id}", lambda: self.create_from_epsg(r.epsg_id)
        if r.postgis_srid:
            yield f"SRID {r.postgis_srid}", lambda: self.create_from_srid(r.postgis_srid)
        if r.wkt:
            yield "WKT", lambda: self.create_from_wkt(r.wkt)
        if r.projection_acronym and r.ellipsoid_acronym:
            proj4 = self.to_proj4()
            yield "proj4", lambda: self.create_from_proj4(proj4)

    # --- Equality --------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, CoordinateReferenceSystem):
            return NotImplemented
        a, b = self._record, other._record
        if a.srsid and a.srsid == b.srsid and a.authority_id == b.authority_id:
            return True
        if not self.is_valid() and not other.is_valid():
            return True
        if not self.is_valid() or not other.is_valid():
            return False
        if (a.projection_acronym, a.ellipsoid_acronym) != (b.projection_acronym, b.ellipsoid_acronym):
            return False
        try:
            left = srs_logic.parse_proj4(self.to_proj4())
            right = srs_logic.parse_proj4(other.to_proj4())
        except FormatError:
            return False
        mode = EquivalenceMode.GEOGRAPHIC if is_geographic(left) else EquivalenceMode.FULL
        return srs_logic.equivalent(left, right, mode)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    # --- Catalog lookups -------------------------------------------------------

    def _record_from_row(self, row: CatalogRow) -> CrsRecord:
        structure: Optional[ProjStructure] = None
        try:
            structure = srs_logic.parse_wkt(row.wkt) if row.wkt else srs_logic.parse_proj4(row.proj4)
        except FormatError as e:
            logger.warning(f"Catalog row {row.srsid} has an unparsable definition: {e}")
        return CrsRecord(
            srsid=row.srsid,
            postgis_srid=row.postgis_srid,
            epsg_id=row.epsg_id,
            authority_id=row.authority_id,
            description=row.description,
            projection_acronym=row.projection_acronym,
            ellipsoid_acronym=row.ellipsoid_acronym,
            wkt=row.wkt,
            proj4_params=strip_proj4_keys(row.proj4),
            geographic_flag=row.is_geo,
            axis_inverted=structure.axis_inverted if structure else False,
            map_units=structure.units if structure else "",
            axes_derived=structure is not None,
        )

    def create_from_srs_id(self, srsid: int) -> "CoordinateReferenceSystem":
        """
        Load a catalog row by primary key. Ids above the threshold are read
        from the overlay tier only, all others from the baseline tier only.

        Raises:
            LookupMiss: No such row in the tier the id belongs to.
            StoreUnavailable: The tier cannot be read.
        """
        self._record = self._record_from_row(self.store.get(int(srsid)))
        return self

    def create_from_srid(self, srid: int) -> "CoordinateReferenceSystem":
        """Load the first row with this PostGIS SRID, baseline tier first."""
        self._record = self._record_from_row(self.store.find_by_srid(int(srid)))
        return self

    def create_from_epsg(self, code: int) -> "CoordinateReferenceSystem":
        """Load the first row with this EPSG code, baseline tier first."""
        self._record = self._record_from_row(self.store.find_by_authority("EPSG", int(code)))
        return self

    def create_from_ogc_wms_crs(self, label: str) -> "CoordinateReferenceSystem":
        """
        Resolve an OGC WMS CRS label ('EPSG:4326', 'CRS:84', URN, URI) through the EPSG path.

        The OGC CRS:84 family fixes longitude/latitude order, so those labels
        are never axis-inverted.

        Raises:
            FormatError: The label cannot be parsed.
            LookupMiss: The EPSG code is not in the catalog.
        """
        wms = parse_ogc_wms_crs(label)
        record = self._record_from_row(self.store.find_by_authority("EPSG", wms.epsg_code))
        if wms.lon_lat_order:
            record.axis_inverted = False
        self._record = record
        return self

    def create_from_string(self, definition: str) -> "CoordinateReferenceSystem":
        """
        Dispatch a definition string to the matching creation path.

        Raises:
            FormatError: The string matches no supported form.
        """
        parsed = parse_definition(definition)
        if parsed.kind == "epsg":
            return self.create_from_epsg(parsed.value)
        if parsed.kind == "postgis":
            return self.create_from_srid(parsed.value)
        if parsed.kind == "internal":
            return self.create_from_srs_id(parsed.value)
        if parsed.kind == "wkt":
            return self.create_from_wkt(parsed.value)
        return self.create_from_proj4(parsed.value)

    def create_from_user_input(self, definition: str) -> "CoordinateReferenceSystem":
        """
        Accept any definition GDAL can interpret (EPSG/EPSGA codes, AUTO codes,
        URNs, Esri WKT, well-known names, .prj files) and resolve it via WKT.
        """
        return self.create_from_wkt(srs_logic.user_input_to_wkt(definition))

    def create_from_wkt(self, wkt: str) -> "CoordinateReferenceSystem":
        """
        Resolve a WKT definition: by its EPSG code when it carries one that is
        in the catalog, otherwise through its proj4 form.

        Raises:
            FormatError: The WKT cannot be parsed or has no proj4 form.
        """
        structure = srs_logic.parse_wkt(wkt)
        if structure.authority_name and structure.authority_name.upper() == "EPSG" and structure.authority_code:
            try:
                return self.create_from_epsg(int(structure.authority_code))
            except LookupMiss:
                logger.debug(f"EPSG:{structure.authority_code} not in catalog; matching by definition.")
        record = self._resolve_structure(structure)
        if not record.srsid:
            record.wkt = wkt.strip()
        self._record = record
        return self

    def create_from_proj4(self, proj4: str, name: Optional[str] = None) -> "CoordinateReferenceSystem":
        """
        Resolve a proj4 definition through the equivalence matcher.

        A definition that matches no catalog row still yields a valid,
        unresolved CRS (no srsid) whose axes and units come from the definition.

        Args:
            proj4: The proj4 string.
            name: Optional name; a catalog row with this description is an exact match.

        Raises:
            FormatError: The string is not a usable proj4 definition.
        """
        structure = srs_logic.parse_proj4(proj4)
        self._record = self._resolve_structure(structure, name)
        return self

    def _resolve_structure(self, structure: ProjStructure, name: Optional[str] = None) -> CrsRecord:
        srsid = self.matcher.find_matching_proj(structure, name)
        if srsid is not LOOKUP_MISS:
            return self._record_from_row(self.store.get(srsid))

        logger.debug(f"No catalog match for '{structure.proj4}'; CRS left unresolved.")
        epsg_id = 0
        authority_id = ""
        if structure.authority_name and structure.authority_code:
            authority_id = f"{structure.authority_name.upper()}:{structure.authority_code}"
            if structure.authority_name.upper() == "EPSG" and structure.authority_code.isdigit():
                epsg_id = int(structure.authority_code)
        return CrsRecord(
            epsg_id=epsg_id,
            authority_id=authority_id,
            description=name or structure.name,
            projection_acronym=structure.projection_acronym,
            ellipsoid_acronym=structure.ellipsoid_acronym,
            wkt=structure.wkt,
            proj4_params=structure.proj4_params,
            geographic_flag=structure.geographic_flag,
            axis_inverted=structure.axis_inverted,
            map_units=structure.units,
            axes_derived=True,
        )

    def find_matching_proj(self) -> Optional[int]:
        """srsid of the catalog row equivalent to this CRS, or LOOKUP_MISS."""
        proj4 = self.to_proj4()
        if not proj4:
            return LOOKUP_MISS
        try:
            structure = srs_logic.parse_proj4(proj4)
        except FormatError as e:
            logger.debug(f"Cannot match '{proj4}': {e}")
            return LOOKUP_MISS
        return self.matcher.find_matching_proj(structure)

    # --- Boundary operations ---------------------------------------------------

    def save_as_user_crs(self, name: str) -> Union[int, bool]:
        """
        Register this definition in the overlay tier under `name`.

        Returns the new srsid, or False on failure. This CRS keeps its current
        srsid either way; call `create_from_srs_id` to switch to the new row.
        """
        return registrar.save_as_user_crs(self.store, self._record, name)

    def write_xml(self, parent: etree._Element) -> etree._Element:
        """Append a spatialrefsys element for this CRS to `parent`."""
        return persistence.write_record(self._record, parent)

    def read_xml(self, node: etree._Element) -> "CoordinateReferenceSystem":
        """
        Load state from a spatialrefsys element (or an ancestor of one).

        Raises:
            MalformedPersistedState: A required element is missing. The prior
                                     state must not be relied upon afterwards.
        """
        self._record = persistence.read_record(node)
        return self
