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
Command-line interface for the CRS ToolKit (CRSK).

This script provides the main entry point for the `crsk` command,
parsing user arguments and dispatching them to the appropriate tool.
"""
import argparse
import logging
import sys
from pathlib import Path
from crsk.utils.config_loader import config
from crsk.utils.exceptions import CrsError
from crsk.utils.log_helpers import setup_logger, shutdown_logger
from crsk.utils.script_arguments import (
    RESOLVE_MODES, BuildArguments, RegisterArguments, ResolveArguments, SyncArguments
)

def epsg_code(value: str) -> int:
    """Accept '4326' or 'EPSG:4326'."""
    text = value.strip()
    if text.upper().startswith('EPSG:'):
        text = text[5:]
    try:
        return int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid EPSG code: '{value}'")

def add_common_args(p, overlay=True):
    p.add_argument('-c', '--config', type=Path, default=None, dest='config_path', help='Path to a custom configuration file.')
    p.add_argument('--baseline', type=Path, default=None, dest='baseline_path', help='Baseline (read-only) catalog database. Default: paths.baseline_db from config.')
    if overlay:
        p.add_argument('--overlay', type=Path, default=None, dest='overlay_path', help='Overlay (user) catalog database. Default: paths.overlay_db from config.')
    p.add_argument('--log-file', type=Path, default=None, dest='log_file', help='Path to a log file for debugging.')
    p.add_argument('-v', '--verbose', action='store_true', dest='verbose', help='Enable verbose logging.')

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='crsk',
        description='CRSK',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    subparsers = parser.add_subparsers(dest='tool', help='Available tools')
    subparsers.required = True

    # --- Resolve Tool ---
    resolve_parser = subparsers.add_parser(
        'resolve',
        help='Resolve a CRS definition against the catalog.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    resolve_parser.add_argument('definition', help="CRS definition, e.g. 'EPSG:4326', 'postgis:4326', a proj4 string or WKT.")
    resolve_parser.add_argument('-m', '--mode', type=str.lower, default='string', choices=RESOLVE_MODES, dest='mode', help='How to interpret the definition.')
    resolve_parser.add_argument('-x', '--xml', action='store_true', dest='xml', help='Print the resolved CRS as a spatialrefsys XML fragment.')
    add_common_args(resolve_parser)

    # --- Register Tool ---
    register_parser = subparsers.add_parser(
        'register',
        help='Register a CRS definition as a user CRS in the overlay catalog.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    register_parser.add_argument('definition', help='Any definition GDAL understands (proj4, WKT, Esri WKT, EPSG code).')
    register_parser.add_argument('-n', '--name', required=True, dest='name', help='Description for the new user CRS.')
    register_parser.add_argument('-f', '--force', action='store_true', dest='force', help='Register even if an equivalent CRS is already in the catalog.')
    add_common_args(register_parser)

    # --- Sync Tool ---
    sync_parser = subparsers.add_parser(
        'sync',
        help="Refresh EPSG-based overlay rows from GDAL's current definitions.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    add_common_args(sync_parser)

    # --- Build Tool ---
    build_parser_ = subparsers.add_parser(
        'build',
        help="Build a baseline catalog from GDAL's EPSG definitions.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    build_parser_.add_argument('-e', '--epsg', type=epsg_code, nargs='+', default=None, dest='epsg_codes', help='EPSG codes to include. Default: catalog.baseline_epsg_codes from config.')
    build_parser_.add_argument('--overwrite', action='store_true', dest='overwrite', help='Replace an existing baseline catalog.')
    add_common_args(build_parser_, overlay=False)
    return parser

def main(argv=None):
    """
    Main function to parse arguments and call the appropriate tool.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    tool = args.tool
    args_dict = vars(args)
    args_dict.pop('tool', None)
    log_file = args_dict.pop('log_file', None)

    # --- Config must be in place before the logger reads logging.* ---
    config_path = args_dict.get('config_path')
    if config_path and config_path.exists():
        config.load_file(config_path)

    # --- Logger Setup ---
    log_level = logging.DEBUG if args.verbose else config.get('logging.level', 'INFO')
    logger = setup_logger(log_file=str(log_file) if log_file else config.get('logging.file') or None, level=log_level)

    try:
        if tool == 'resolve':
            from crsk.tools.resolve_crs import resolve_crs
            resolve_crs(ResolveArguments(**args_dict))
        elif tool == 'register':
            from crsk.tools.register_crs import register_crs
            register_crs(RegisterArguments(**args_dict))
        elif tool == 'sync':
            from crsk.tools.sync_catalog import sync_catalog
            if sync_catalog(SyncArguments(**args_dict)) < 0:
                sys.exit(1)
        elif tool == 'build':
            from crsk.tools.sync_catalog import build_catalog
            if args_dict.get('epsg_codes') is None:
                args_dict.pop('epsg_codes')
            build_catalog(BuildArguments(**args_dict))
    except (CrsError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}", exc_info=True)
        sys.exit(1)
    finally:
        shutdown_logger(logger)

if __name__ == "__main__":
    main()
