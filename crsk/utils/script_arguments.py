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
Dataclass-based Argument Models for CRSK Tools.

This module defines strongly-typed dataclasses for the command-line arguments
of each tool (`resolve`, `register`, `sync`, `build`). `__post_init__`
validates inputs and resolves defaults from the configuration, so the tools
receive clean values.

Classes:
    BaseArguments: Catalog locations and options shared by all tools.
    ResolveArguments: Arguments for the resolve_crs tool.
    RegisterArguments: Arguments for the register_crs tool.
    SyncArguments: Arguments for the sync_catalog tool.
    BuildArguments: Arguments for the build_catalog tool.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from crsk.utils.catalog_store import CatalogStore
from crsk.utils.config_loader import config

logger = logging.getLogger(__name__)

RESOLVE_MODES = ('string', 'user', 'wms', 'srsid', 'srid', 'epsg', 'proj4', 'wkt')

@dataclass
class BaseArguments:
    """A base dataclass for common script arguments."""
    baseline_path: Optional[Path] = None
    overlay_path: Optional[Path] = None
    config_path: Optional[Path] = None
    verbose: bool = False

    def __post_init__(self):
        """Load an alternate config file and fill catalog paths from config."""
        if self.config_path:
            self.config_path = Path(self.config_path)
            if not self.config_path.exists():
                self.handle_error(f"Configuration file not found: {self.config_path}")
            config.load_file(self.config_path)
        self.baseline_path = Path(self.baseline_path).expanduser() if self.baseline_path else config.get_path("paths.baseline_db")
        self.overlay_path = Path(self.overlay_path).expanduser() if self.overlay_path else config.get_path("paths.overlay_db")

    def handle_error(self, message: str):
        """Logs an error and raises ValueError."""
        logger.error(message)
        raise ValueError(message)

    def open_store(self) -> CatalogStore:
        """Open the catalog named by these arguments."""
        return CatalogStore.from_paths(self.baseline_path, self.overlay_path)

@dataclass
class ResolveArguments(BaseArguments):
    """Arguments for the resolve_crs tool."""
    definition: str = ''
    mode: str = 'string'
    xml: bool = False

    def __post_init__(self):
        super().__post_init__()
        if not self.definition.strip():
            self.handle_error("A CRS definition is required.")
        if self.mode not in RESOLVE_MODES:
            self.handle_error(f"Unknown resolve mode '{self.mode}'. Choose from: {', '.join(RESOLVE_MODES)}")
        if self.mode in ('srsid', 'srid', 'epsg') and not self.definition.strip().isdigit():
            self.handle_error(f"Mode '{self.mode}' expects an integer, got '{self.definition}'")

@dataclass
class RegisterArguments(BaseArguments):
    """Arguments for the register_crs tool."""
    definition: str = ''
    name: str = ''
    force: bool = False

    def __post_init__(self):
        super().__post_init__()
        if not self.definition.strip():
            self.handle_error("A CRS definition is required.")
        if not self.name.strip():
            self.handle_error("A name is required to register a user CRS.")

@dataclass
class SyncArguments(BaseArguments):
    """Arguments for the sync_catalog tool."""
    pass

@dataclass
class BuildArguments(BaseArguments):
    """Arguments for the build_catalog tool."""
    epsg_codes: List[int] = field(default_factory=list)
    overwrite: bool = False

    def __post_init__(self):
        super().__post_init__()
        if not self.epsg_codes:
            self.epsg_codes = [int(c) for c in config.get("catalog.baseline_epsg_codes", [4326])]
        if self.baseline_path is None:
            self.handle_error("No baseline catalog path given or configured.")
