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
Unit tests for the Esri name to EPSG code lookup.
"""

import json
import pytest
from crsk.utils import esri_epsg_lookup
from crsk.utils.esri_epsg_lookup import get_epsg_from_esri_name, initialize_lookup


@pytest.fixture
def packaged_lookup():
    """Reload the packaged table after a test swaps it out."""
    yield
    initialize_lookup(force=True)


@pytest.mark.unit
class TestEsriEpsgLookup:
    """Test lookups against the packaged table."""

    def test_geographic_name(self):
        assert get_epsg_from_esri_name("GeographicCoordinateSystems", "GCS_WGS_1984") == 4326

    def test_projected_name(self):
        assert get_epsg_from_esri_name("ProjectedCoordinateSystems", "British_National_Grid") == 27700

    def test_case_insensitive(self):
        assert get_epsg_from_esri_name("GeographicCoordinateSystems", "gcs_north_american_1983") == 4269

    def test_deprecated_name_parts(self):
        name = "WGS_1984_Auxiliary_Sphere_Web_Mercator"
        assert get_epsg_from_esri_name("ProjectedCoordinateSystems", name) == 3857
        assert get_epsg_from_esri_name("GeographicCoordinateSystems", "GCS_Mexico_ITRF_2008") == 6365

    def test_unknown_name(self):
        assert get_epsg_from_esri_name("ProjectedCoordinateSystems", "Not_A_Real_System") is None

    def test_invalid_category(self):
        assert get_epsg_from_esri_name("VerticalCoordinateSystems", "GCS_WGS_1984") is None

    def test_empty_inputs(self):
        assert get_epsg_from_esri_name("GeographicCoordinateSystems", "") is None
        assert get_epsg_from_esri_name("", "GCS_WGS_1984") is None

    def test_custom_lookup_file(self, tmp_path, packaged_lookup):
        path = tmp_path / "lookup.json"
        path.write_text(json.dumps({"ProjectedCoordinateSystems": {"My_Grid": 2154}}), encoding="utf-8")
        initialize_lookup(str(path), force=True)
        assert get_epsg_from_esri_name("ProjectedCoordinateSystems", "my_grid") == 2154
        assert get_epsg_from_esri_name("GeographicCoordinateSystems", "GCS_WGS_1984") is None

    def test_missing_lookup_file(self, tmp_path, packaged_lookup):
        initialize_lookup(str(tmp_path / "missing.json"), force=True)
        assert esri_epsg_lookup._LOOKUP == {
            "ProjectedCoordinateSystems": {},
            "GeographicCoordinateSystems": {},
        }
