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
Hand-built catalog factory for CRSK tests.

Creates two-tier catalogs with exactly the rows a test asks for, without
going through GDAL, and builds ProjStructure values from proj4 text alone.
Together with a fake comparator this lets matcher tests control every
candidate and count every comparison.

Example:
    >>> store = make_catalog(tmp_path, baseline=[row(1, "+proj=longlat +datum=WGS84")])
    >>> store.get(1).projection_acronym
    'longlat'
"""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from crsk.utils.catalog_store import CatalogStore, CatalogTier
from crsk.utils.data_models import CatalogRow, ProjStructure
from crsk.utils.proj4_string import normalize_proj4, split_acronyms


def row(srsid: int, proj4: str, description: Optional[str] = None, auth_name: str = "",
        auth_id: str = "", postgis_srid: int = 0) -> CatalogRow:
    """Build a CatalogRow whose acronyms are derived from `proj4`."""
    proj, ellps, _ = split_acronyms(proj4)
    return CatalogRow(
        srsid=srsid,
        description=description or f"test crs {srsid}",
        projection_acronym=proj or "",
        ellipsoid_acronym=ellps or "",
        proj4=proj4,
        postgis_srid=postgis_srid,
        auth_name=auth_name,
        auth_id=auth_id,
        is_geo=proj == "longlat",
    )


def structure(proj4: str) -> ProjStructure:
    """A ProjStructure built from text only (no OSR object)."""
    canonical = normalize_proj4(proj4)
    proj, ellps, _ = split_acronyms(canonical)
    return ProjStructure(
        projection_acronym=proj or "",
        ellipsoid_acronym=ellps or "",
        datum="",
        units="degrees" if proj == "longlat" else "metre",
        geographic_flag=proj == "longlat",
        axis_inverted=False,
        proj4=canonical,
        wkt="",
        srs=None,
    )


def make_catalog(directory: Path, baseline: Iterable[CatalogRow] = (),
                 overlay: Iterable[CatalogRow] = (), threshold: int = 100000) -> CatalogStore:
    """
    Create baseline and overlay databases under `directory` holding the given rows.

    The baseline is written through a writable tier, then reopened read-only.
    """
    baseline_path = directory / "baseline.db"
    overlay_path = directory / "overlay.db"
    with CatalogTier(baseline_path, "baseline", read_only=False) as tier:
        tier.connect()
        for r in baseline:
            tier.insert(r)
    store = CatalogStore.from_paths(baseline_path, overlay_path, threshold=threshold)
    for r in overlay:
        store.overlay.insert(r)
    return store


class CountingComparator:
    """
    Fake equivalence test that records each call.

    Args:
        matches: proj4 strings (canonical) of candidates that should compare equal.
        always: Compare every candidate equal.
    """

    def __init__(self, matches: Iterable[str] = (), always: bool = False):
        self.matches = {normalize_proj4(m) for m in matches}
        self.always = always
        self.calls: List[Tuple[str, str, object]] = []

    def __call__(self, a: ProjStructure, b: ProjStructure, mode) -> bool:
        self.calls.append((a.proj4, b.proj4, mode))
        return self.always or b.proj4 in self.matches

    @property
    def call_count(self) -> int:
        return len(self.calls)
