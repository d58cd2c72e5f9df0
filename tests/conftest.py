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
Pytest configuration and shared fixtures for the CRSK test suite.

This module provides:
- Shared catalog fixtures (a baseline built from GDAL's EPSG definitions,
  a fresh overlay per test, and the store composing both)
- Sample definition strings
- A factory for CRS entities bound to the test catalog

Fixtures are organized by scope:
- session: Created once per test session (the baseline catalog build)
- module: Created once per test module
- function: Created for each test function (default; overlays are never shared)

Example:
    >>> def test_using_fixture(crs_factory):
    ...     '''Test using the crs_factory fixture.'''
    ...     assert crs_factory().create_from_epsg(4326).srsid == 1
"""

import pytest
from osgeo import osr

# pythonpath is configured in pyproject.toml to include project root
from crsk.utils.catalog_store import CatalogStore, build_baseline_catalog
from crsk.utils.config_loader import DEFAULT_CONFIG_PATH, config
from crsk.utils.crs import CoordinateReferenceSystem

# Baseline contents; srsids follow this order starting at 1
BASELINE_EPSG_CODES = [4326, 4269, 3857, 32633, 27700]

USER_THRESHOLD = 100000


# =============================================================================
# Session-scope Fixtures (Created once per test session)
# =============================================================================

@pytest.fixture(scope="session")
def baseline_db(tmp_path_factory):
    """
    Build a baseline catalog from GDAL's EPSG definitions once per session.

    The baseline tier is opened read-only by every store, so sharing it
    between tests is safe.

    Returns:
        Path: Path to the baseline SQLite database
    """
    path = tmp_path_factory.mktemp("crsk_catalog") / "srs.db"
    count = build_baseline_catalog(path, BASELINE_EPSG_CODES)
    assert count == len(BASELINE_EPSG_CODES), "Every baseline EPSG code should build"
    return path


@pytest.fixture(scope="session")
def empty_baseline_db(tmp_path_factory):
    """A baseline catalog with the schema but no rows."""
    path = tmp_path_factory.mktemp("crsk_empty") / "srs.db"
    build_baseline_catalog(path, [])
    return path


# =============================================================================
# Module-scope Fixtures (Created once per test module)
# =============================================================================

@pytest.fixture(scope="module")
def sample_wkt_geographic():
    """
    WKT string for WGS 84 geographic coordinate system.

    Returns:
        str: WKT1 string for EPSG:4326
    """
    srs = osr.SpatialReference()
    srs.ImportFromEPSG(4326)
    return srs.ExportToWkt()


@pytest.fixture(scope="module")
def sample_wkt_projected():
    """
    WKT string for UTM Zone 33N projected coordinate system.

    Returns:
        str: WKT1 string for EPSG:32633
    """
    srs = osr.SpatialReference()
    srs.ImportFromEPSG(32633)
    return srs.ExportToWkt()


@pytest.fixture(scope="module")
def custom_tmerc_proj4():
    """A Transverse Mercator definition that no baseline row matches."""
    return "+proj=tmerc +lat_0=0 +lon_0=15 +k=0.9996 +x_0=500000 +y_0=0 +ellps=GRS80 +units=m +no_defs"


# =============================================================================
# Function-scope Fixtures (Created for each test)
# =============================================================================

@pytest.fixture
def overlay_db(tmp_path):
    """Path for a fresh, not yet created, overlay catalog."""
    return tmp_path / "user.db"


@pytest.fixture
def store(baseline_db, overlay_db):
    """
    A CatalogStore over the shared baseline and a per-test overlay.

    Example:
        >>> def test_lookup(store):
        ...     assert store.get(1).auth_id == "4326"
    """
    catalog = CatalogStore.from_paths(baseline_db, overlay_db, threshold=USER_THRESHOLD)
    yield catalog
    catalog.close()


@pytest.fixture
def empty_store(empty_baseline_db, overlay_db):
    """A CatalogStore whose baseline has no rows."""
    catalog = CatalogStore.from_paths(empty_baseline_db, overlay_db, threshold=USER_THRESHOLD)
    yield catalog
    catalog.close()


@pytest.fixture
def crs_factory(store):
    """
    Factory for invalid CRS entities bound to the test catalog.

    Returns:
        Callable[[], CoordinateReferenceSystem]
    """
    def _make():
        return CoordinateReferenceSystem(store)
    return _make


@pytest.fixture
def restore_config():
    """Reload the packaged configuration after a test that changes it."""
    yield config
    config.load_file(DEFAULT_CONFIG_PATH)
