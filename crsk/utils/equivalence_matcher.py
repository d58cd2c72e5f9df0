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
Catalog Equivalence Matcher.

Finds the catalog row denoting the same CRS as a structured definition that
has no catalog id. The search runs in two passes:

    1. Exact text: the canonical proj4 string (or the CRS name) is looked up
       in the overlay tier, then the baseline tier. No OSR comparison is made.
    2. Semantic: rows sharing the projection AND ellipsoid acronyms are parsed
       and compared with OSR, baseline tier first, then overlay tier. Geographic
       sources are compared on their geographic part only.

Only rows sharing the acronym pair are ever compared, so the semantic pass
costs O(k) comparisons for k rows with that key, not O(n) over the catalog.
"""
import logging
from typing import Callable, Optional

from crsk.utils.catalog_store import CatalogStore
from crsk.utils.data_models import CatalogRow, ProjStructure
from crsk.utils.exceptions import FormatError
from crsk.utils.proj4_string import build_proj4
from crsk.utils import srs_logic
from crsk.utils.srs_logic import EquivalenceMode

logger = logging.getLogger(__name__)

# Returned by find_matching_proj when no row matches
LOOKUP_MISS = None

Comparator = Callable[[ProjStructure, ProjStructure, EquivalenceMode], bool]

def is_geographic(structure: ProjStructure) -> bool:
    """Classify a definition as geographic (angular, datum-only) or projected."""
    return bool(structure.geographic_flag) or structure.projection_acronym == "longlat"

class EquivalenceMatcher:
    """
    Resolves structured CRS definitions to catalog srsids.

    Attributes:
        store: The two-tier catalog to search.
        comparator: `equivalent(a, b, mode) -> bool`; OSR-based by default.
        structure_builder: Builds a ProjStructure from a row's proj4 string.
    """

    def __init__(self, store: CatalogStore, comparator: Optional[Comparator] = None,
                 structure_builder: Optional[Callable[[str], ProjStructure]] = None):
        self.store = store
        self.comparator = comparator or srs_logic.equivalent
        self.structure_builder = structure_builder or srs_logic.parse_proj4

    def find_matching_proj(self, structure: ProjStructure, name: Optional[str] = None) -> Optional[int]:
        """
        Find the srsid of the catalog row equivalent to `structure`.

        Args:
            structure: The source definition (must carry both acronyms).
            name: Optional CRS name; a row with this exact description is an exact hit.

        Returns:
            The matching srsid, or LOOKUP_MISS if neither pass finds a row.

        Raises:
            StoreUnavailable: If a tier cannot be queried.
        """
        srsid = self._exact_text_match(structure, name)
        if srsid is not None:
            return srsid
        return self._semantic_match(structure)

    def _exact_text_match(self, structure: ProjStructure, name: Optional[str]) -> Optional[int]:
        proj4_forms = {
            structure.proj4,
            build_proj4(structure.projection_acronym, structure.ellipsoid_acronym, structure.proj4_params),
        }
        for tier in (self.store.overlay, self.store.baseline):
            row = tier.find_by_proj4(proj4_forms, name)
            if row is not None:
                logger.debug(f"Exact proj4 match in {tier.name} catalog: srsid {row.srsid}")
                return row.srsid
        return None

    def _semantic_match(self, structure: ProjStructure) -> Optional[int]:
        if not structure.projection_acronym or not structure.ellipsoid_acronym:
            return LOOKUP_MISS

        mode = EquivalenceMode.GEOGRAPHIC if is_geographic(structure) else EquivalenceMode.FULL
        for tier in (self.store.baseline, self.store.overlay):
            candidates = tier.candidates(structure.projection_acronym, structure.ellipsoid_acronym)
            logger.debug(
                f"{len(candidates)} {tier.name} candidate(s) for "
                f"{structure.projection_acronym}/{structure.ellipsoid_acronym} ({mode.value})"
            )
            for row in candidates:
                if self._matches(structure, row, mode):
                    logger.debug(f"Semantic match in {tier.name} catalog: srsid {row.srsid}")
                    return row.srsid
        return LOOKUP_MISS

    def _matches(self, structure: ProjStructure, row: CatalogRow, mode: EquivalenceMode) -> bool:
        try:
            candidate = self.structure_builder(row.proj4)
        except FormatError as e:
            logger.debug(f"Skipping srsid {row.srsid}, unparsable proj4: {e}")
            return False
        return bool(self.comparator(structure, candidate, mode))
