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
Unit tests for canonical proj4 string handling.

Organization:
- Tokenizing and normalizing
- Acronym derivation and parameter stripping
- Rebuilding full strings from stored parts
"""

import pytest
from crsk.utils.proj4_string import (
    build_proj4,
    derive_ellipsoid_acronym,
    normalize_proj4,
    proj4_value,
    split_acronyms,
    strip_proj4_keys,
    tokenize_proj4,
)


@pytest.mark.unit
class TestNormalizeProj4:
    """Test the canonical form used for exact-text catalog matching."""

    def test_key_order_does_not_matter(self):
        a = normalize_proj4("+proj=utm +zone=33 +datum=WGS84 +units=m +no_defs")
        b = normalize_proj4("+units=m +no_defs +datum=WGS84 +zone=33 +proj=utm")
        assert a == b
        assert a == "+proj=utm +datum=WGS84 +units=m +zone=33 +no_defs"

    def test_whitespace_and_missing_plus_signs(self):
        assert normalize_proj4("  proj=longlat   datum=WGS84 ") == "+proj=longlat +datum=WGS84 +no_defs"

    def test_no_defs_always_present(self):
        assert normalize_proj4("+proj=longlat +datum=WGS84").endswith("+no_defs")

    def test_flags_sorted_after_pairs(self):
        result = normalize_proj4("+wktext +proj=merc +a=6378137 +no_defs +b=6378137")
        assert result == "+proj=merc +a=6378137 +b=6378137 +no_defs +wktext"

    def test_type_crs_dropped(self):
        assert "+type" not in normalize_proj4("+proj=longlat +datum=WGS84 +type=crs")

    def test_first_duplicate_wins(self):
        assert normalize_proj4("+proj=utm +zone=33 +zone=34") == "+proj=utm +zone=33 +no_defs"

    @pytest.mark.parametrize("alias", ["latlong", "lonlat", "latlon"])
    def test_longlat_aliases_folded(self, alias):
        assert normalize_proj4(f"+proj={alias} +datum=WGS84") == "+proj=longlat +datum=WGS84 +no_defs"

    def test_empty_input(self):
        assert normalize_proj4("") == ""
        assert normalize_proj4("   ") == ""

    def test_idempotent(self):
        once = normalize_proj4("+zone=10 +proj=utm +ellps=GRS80 +towgs84=0,0,0")
        assert normalize_proj4(once) == once


@pytest.mark.unit
class TestTokenizeProj4:
    """Test splitting proj4 strings into tokens."""

    def test_pairs_and_flags(self):
        assert tokenize_proj4("+proj=utm +no_defs") == [("proj", "utm"), ("no_defs", None)]

    def test_empty_values_are_kept(self):
        assert tokenize_proj4("+nadgrids=") == [("nadgrids", "")]

    def test_value_lookup(self):
        assert proj4_value("+proj=utm +zone=33", "zone") == "33"
        assert proj4_value("+proj=utm", "zone") is None


@pytest.mark.unit
class TestEllipsoidAcronym:
    """Test ellipsoid acronym derivation."""

    def test_explicit_ellps(self):
        assert derive_ellipsoid_acronym("+proj=tmerc +ellps=airy") == "airy"

    def test_datum_implies_ellipsoid(self):
        assert derive_ellipsoid_acronym("+proj=longlat +datum=WGS84") == "WGS84"
        assert derive_ellipsoid_acronym("+proj=longlat +datum=NAD83") == "GRS80"
        assert derive_ellipsoid_acronym("+proj=longlat +datum=NAD27") == "clrk66"

    def test_sphere_radius(self):
        assert derive_ellipsoid_acronym("+proj=merc +R=6371000") == "PARAMETER:6371000:6371000"

    def test_semi_axes(self):
        assert derive_ellipsoid_acronym("+proj=merc +a=6378137 +b=6378137") == "PARAMETER:6378137:6378137"

    def test_inverse_flattening(self):
        acronym = derive_ellipsoid_acronym("+proj=longlat +a=6378137 +rf=298.257223563")
        assert acronym == "PARAMETER:6378137:6356752.314245"

    def test_no_ellipsoid(self):
        assert derive_ellipsoid_acronym("+proj=longlat") is None


@pytest.mark.unit
class TestSplitAndBuild:
    """Test the stored (acronyms, params) form and its inverse."""

    def test_split(self):
        proj, ellps, params = split_acronyms("+proj=tmerc +ellps=airy +lat_0=49 +units=m")
        assert proj == "tmerc"
        assert ellps == "airy"
        assert params == "+lat_0=49 +units=m +no_defs"

    def test_split_folds_alias(self):
        proj, _, _ = split_acronyms("+proj=latlong +datum=WGS84")
        assert proj == "longlat"

    def test_strip_keys(self):
        assert strip_proj4_keys("+proj=longlat +datum=WGS84 +no_defs") == "+datum=WGS84 +no_defs"

    def test_build_adds_ellps_when_params_lack_it(self):
        rebuilt = build_proj4("tmerc", "airy", "+lat_0=49 +units=m +no_defs")
        assert rebuilt == "+proj=tmerc +ellps=airy +lat_0=49 +units=m +no_defs"

    def test_build_skips_ellps_when_datum_present(self):
        assert build_proj4("longlat", "WGS84", "+datum=WGS84 +no_defs") == "+proj=longlat +datum=WGS84 +no_defs"

    def test_build_skips_parameter_encoding(self):
        rebuilt = build_proj4("merc", "PARAMETER:6378137:6378137", "+a=6378137 +b=6378137 +no_defs")
        assert "+ellps" not in rebuilt

    def test_split_then_build_is_canonical(self):
        source = "+units=m +ellps=GRS80 +proj=utm +zone=33"
        proj, ellps, params = split_acronyms(source)
        assert build_proj4(proj, ellps, params) == normalize_proj4(source)
