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
Unit tests for the GDAL/OSR adapter.
"""

import pytest
from crsk.utils.exceptions import FormatError
from crsk.utils.srs_logic import (
    EquivalenceMode,
    equivalent,
    fix_esri_wkt,
    is_esri_flavored,
    parse_epsg,
    parse_proj4,
    parse_wkt,
    user_input_to_wkt,
)

ESRI_WGS84 = (
    'GEOGCS["GCS_WGS_1984",DATUM["D_WGS_1984",SPHEROID["WGS_1984",6378137.0,298.257223563]],'
    'PRIMEM["Greenwich",0.0],UNIT["Degree",0.0174532925199433]]'
)


@pytest.mark.unit
class TestParsing:
    """Test building ProjStructure values."""

    def test_parse_epsg_geographic(self):
        s = parse_epsg(4326)
        assert s.projection_acronym == "longlat"
        assert s.ellipsoid_acronym == "WGS84"
        assert s.geographic_flag
        assert s.axis_inverted
        assert s.units == "degrees"
        assert (s.authority_name, s.authority_code) == ("EPSG", "4326")
        assert s.proj4_params == "+datum=WGS84 +no_defs"

    def test_parse_epsg_projected(self):
        s = parse_epsg(32633)
        assert s.projection_acronym == "utm"
        assert not s.geographic_flag
        assert not s.axis_inverted
        assert s.units == "metre"

    def test_parse_epsg_spherical_ellipsoid(self):
        assert parse_epsg(3857).ellipsoid_acronym == "PARAMETER:6378137:6378137"

    def test_parse_epsg_unknown(self):
        with pytest.raises(FormatError):
            parse_epsg(999999)

    def test_parse_proj4_keeps_canonical_input(self):
        s = parse_proj4("+zone=33 +proj=utm +datum=WGS84 +units=m")
        assert s.proj4 == "+proj=utm +datum=WGS84 +units=m +zone=33 +no_defs"
        assert s.authority_code is None

    def test_parse_proj4_without_leading_plus(self):
        s = parse_proj4("proj=longlat +datum=WGS84")
        assert s.proj4 == "+proj=longlat +datum=WGS84 +no_defs"
        assert s.projection_acronym == "longlat"
        assert s.geographic_flag

    @pytest.mark.parametrize("text", ["", "EPSG:4326", "+proj=nonsense", "+ellps=WGS84"])
    def test_parse_proj4_rejects(self, text):
        with pytest.raises(FormatError):
            parse_proj4(text)

    def test_parse_wkt(self, sample_wkt_projected):
        s = parse_wkt(sample_wkt_projected)
        assert s.authority_code == "32633"
        assert s.name == "WGS 84 / UTM zone 33N"

    def test_parse_wkt_rejects(self):
        with pytest.raises(FormatError):
            parse_wkt("PROJCS[")


@pytest.mark.unit
class TestEsriWkt:
    """Test Esri WKT handling."""

    def test_detection(self, sample_wkt_geographic):
        assert is_esri_flavored(ESRI_WGS84)
        assert is_esri_flavored("ESRI::" + ESRI_WGS84)
        assert not is_esri_flavored(sample_wkt_geographic)

    def test_fix_esri_wkt_identifies_epsg(self):
        srs = fix_esri_wkt(ESRI_WGS84)
        assert srs.GetAuthorityCode(None) == "4326"

    def test_user_input_handles_esri(self):
        assert 'AUTHORITY["EPSG","4326"]' in user_input_to_wkt(ESRI_WGS84)


@pytest.mark.unit
class TestUserInput:
    """Test free-form user input."""

    def test_epsg_code(self):
        assert "UTM zone 33N" in user_input_to_wkt("EPSG:32633")

    def test_prj_file(self, tmp_path, sample_wkt_projected):
        prj = tmp_path / "roads.prj"
        prj.write_text(sample_wkt_projected, encoding="utf-8")
        assert "UTM zone 33N" in user_input_to_wkt(str(prj))

    @pytest.mark.parametrize("text", ["", "   ", "no such crs anywhere"])
    def test_rejects(self, text):
        with pytest.raises(FormatError):
            user_input_to_wkt(text)


@pytest.mark.unit
class TestEquivalent:
    """Test the OSR equivalence test."""

    def test_geographic_mode(self):
        a = parse_epsg(4326)
        b = parse_proj4("+proj=longlat +datum=WGS84 +no_defs")
        assert equivalent(a, b, EquivalenceMode.GEOGRAPHIC)

    def test_full_mode_same_definition(self):
        a = parse_proj4("+proj=utm +zone=33 +datum=WGS84 +units=m")
        b = parse_proj4("+units=m +datum=WGS84 +proj=utm +zone=33")
        assert equivalent(a, b)

    def test_full_mode_different_zone(self):
        a = parse_proj4("+proj=utm +zone=33 +datum=WGS84 +units=m")
        b = parse_proj4("+proj=utm +zone=34 +datum=WGS84 +units=m")
        assert not equivalent(a, b, EquivalenceMode.FULL)
        assert equivalent(a, b, EquivalenceMode.GEOGRAPHIC)
