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
Two-Tier CRS Catalog Store.

The catalog is split across two SQLite databases with the same `tbl_srs`
schema:

    baseline tier: read-only, ids in [1, threshold], built from GDAL's EPSG
                   definitions by `build_baseline_catalog`.
    overlay tier:  writable, ids > threshold, holds user-registered CRSs.

`CatalogStore` composes the two tiers and routes id-based lookups by the id
threshold, so a srsid always names exactly one tier.

The `parameters` column always holds a canonical proj4 string
(see `proj4_string.normalize_proj4`); every write path normalizes first, so
exact-text matching is a plain indexed equality.
"""
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from crsk.utils.config_loader import config
from crsk.utils.data_models import CatalogRow
from crsk.utils.exceptions import FormatError, LookupMiss, StoreUnavailable
from crsk.utils.proj4_string import normalize_proj4, split_acronyms
from crsk.utils import srs_logic

logger = logging.getLogger(__name__)

DEFAULT_USER_SRSID_THRESHOLD = 100000

SCHEMA = """
CREATE TABLE IF NOT EXISTS tbl_srs (
    srs_id INTEGER PRIMARY KEY,
    description TEXT NOT NULL,
    projection_acronym TEXT NOT NULL,
    ellipsoid_acronym TEXT NOT NULL,
    parameters TEXT NOT NULL,
    srid INTEGER NOT NULL DEFAULT 0,
    auth_name TEXT NOT NULL DEFAULT '',
    auth_id TEXT NOT NULL DEFAULT '',
    is_geo INTEGER NOT NULL DEFAULT 0,
    wkt TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_srs_acronyms ON tbl_srs (projection_acronym, ellipsoid_acronym);
CREATE INDEX IF NOT EXISTS idx_srs_parameters ON tbl_srs (parameters);
CREATE INDEX IF NOT EXISTS idx_srs_srid ON tbl_srs (srid);
CREATE INDEX IF NOT EXISTS idx_srs_auth ON tbl_srs (auth_name, auth_id);
"""

# CatalogRow attribute -> tbl_srs column
FIELD_COLUMNS = {
    "srsid": "srs_id",
    "description": "description",
    "projection_acronym": "projection_acronym",
    "ellipsoid_acronym": "ellipsoid_acronym",
    "proj4": "parameters",
    "postgis_srid": "srid",
    "auth_name": "auth_name",
    "auth_id": "auth_id",
    "is_geo": "is_geo",
    "wkt": "wkt",
}

SELECT_ROWS = f"SELECT {', '.join(FIELD_COLUMNS.values())} FROM tbl_srs"


def _row_from_sql(record: sqlite3.Row) -> CatalogRow:
    return CatalogRow(
        srsid=record["srs_id"],
        description=record["description"],
        projection_acronym=record["projection_acronym"],
        ellipsoid_acronym=record["ellipsoid_acronym"],
        proj4=record["parameters"],
        postgis_srid=record["srid"] or 0,
        auth_name=record["auth_name"] or "",
        auth_id=str(record["auth_id"] or ""),
        is_geo=bool(record["is_geo"]),
        wkt=record["wkt"] or "",
    )


class CatalogTier:
    """
    One tier of the catalog, backed by a single SQLite database.

    The connection is opened lazily on first use and kept for the lifetime of
    the tier. A read-only tier is opened through a `mode=ro` URI and must
    already exist; a writable tier is created (schema included) on demand.

    Attributes:
        path: Database file path.
        name: Label used in log messages ('baseline' or 'overlay').
        read_only: True if the tier rejects writes.
    """

    def __init__(self, path: Union[str, Path], name: str, read_only: bool = False):
        self.path = Path(path)
        self.name = name
        self.read_only = read_only
        self._conn: Optional[sqlite3.Connection] = None

    def __repr__(self):
        mode = "ro" if self.read_only else "rw"
        return f"<CatalogTier {self.name} ({mode}) {self.path}>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def connect(self) -> sqlite3.Connection:
        """Open (once) and return the tier's connection."""
        if self._conn is not None:
            return self._conn
        try:
            if self.read_only:
                if not self.path.exists():
                    raise StoreUnavailable(f"{self.name} catalog not found at {self.path}")
                conn = sqlite3.connect(f"file:{self.path.as_posix()}?mode=ro", uri=True)
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(self.path))
                self.create_schema(conn)
            conn.row_factory = sqlite3.Row
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailable(f"Cannot open {self.name} catalog {self.path}: {e}") from e
        logger.debug(f"Opened {self!r}")
        self._conn = conn
        return conn

    @staticmethod
    def create_schema(conn: sqlite3.Connection):
        """Create the tbl_srs table and its indexes if they do not exist."""
        conn.executescript(SCHEMA)

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _query(self, sql: str, params: Iterable = ()) -> List[CatalogRow]:
        conn = self.connect()
        try:
            return [_row_from_sql(r) for r in conn.execute(sql, tuple(params))]
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Query against {self.name} catalog failed: {e}") from e

    def _write(self, sql: str, params: Iterable = ()) -> int:
        if self.read_only:
            raise StoreUnavailable(f"The {self.name} catalog is read-only.")
        conn = self.connect()
        try:
            with conn:
                cursor = conn.execute(sql, tuple(params))
            return cursor.rowcount
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Write to {self.name} catalog failed: {e}") from e

    # --- Queries ---------------------------------------------------------------

    def get(self, srsid: int) -> Optional[CatalogRow]:
        """Return the row with the given srsid, or None."""
        rows = self._query(f"{SELECT_ROWS} WHERE srs_id = ?", (srsid,))
        return rows[0] if rows else None

    def find(self, **fields) -> List[CatalogRow]:
        """
        Exact-match query on CatalogRow attributes, ordered by srsid.

        Example:
            >>> tier.find(auth_name="EPSG", auth_id="4326")
        """
        unknown = set(fields) - set(FIELD_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown catalog field(s): {', '.join(sorted(unknown))}")
        if not fields:
            return list(self.scan())
        clauses = " AND ".join(f"{FIELD_COLUMNS[name]} = ?" for name in fields)
        return self._query(f"{SELECT_ROWS} WHERE {clauses} ORDER BY srs_id", fields.values())

    def scan(self) -> Iterator[CatalogRow]:
        """Full scan in srsid order."""
        return iter(self._query(f"{SELECT_ROWS} ORDER BY srs_id"))

    def find_by_proj4(self, proj4_strings: Iterable[str], name: Optional[str] = None) -> Optional[CatalogRow]:
        """
        First row whose canonical proj4 equals one of `proj4_strings`, or whose
        description equals `name`.
        """
        candidates = sorted({normalize_proj4(p) for p in proj4_strings if p})
        clauses = []
        params: List = []
        if candidates:
            clauses.append(f"parameters IN ({', '.join('?' for _ in candidates)})")
            params.extend(candidates)
        if name:
            clauses.append("description = ?")
            params.append(name)
        if not clauses:
            return None
        rows = self._query(f"{SELECT_ROWS} WHERE {' OR '.join(clauses)} ORDER BY srs_id LIMIT 1", params)
        return rows[0] if rows else None

    def candidates(self, projection_acronym: str, ellipsoid_acronym: str) -> List[CatalogRow]:
        """Rows sharing both acronyms (the matcher's prefilter key)."""
        return self._query(
            f"{SELECT_ROWS} WHERE projection_acronym = ? AND ellipsoid_acronym = ? ORDER BY srs_id",
            (projection_acronym, ellipsoid_acronym),
        )

    def max_srsid(self) -> int:
        conn = self.connect()
        try:
            value = conn.execute("SELECT MAX(srs_id) FROM tbl_srs").fetchone()[0]
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Query against {self.name} catalog failed: {e}") from e
        return value or 0

    # --- Writes ----------------------------------------------------------------

    def insert(self, row: CatalogRow) -> int:
        """Insert a row (proj4 is canonicalized first) and return its srsid."""
        self._write(
            "INSERT INTO tbl_srs (srs_id, description, projection_acronym, ellipsoid_acronym, "
            "parameters, srid, auth_name, auth_id, is_geo, wkt) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (row.srsid, row.description, row.projection_acronym, row.ellipsoid_acronym,
             normalize_proj4(row.proj4), row.postgis_srid, row.auth_name, row.auth_id,
             int(row.is_geo), row.wkt),
        )
        return row.srsid

    def update_proj4(self, srsid: int, proj4: str, projection_acronym: Optional[str] = None,
                     ellipsoid_acronym: Optional[str] = None) -> bool:
        """
        Replace a row's proj4 string and its acronyms.

        Acronyms not passed in are derived from the proj4 text.
        """
        canonical = normalize_proj4(proj4)
        derived_proj, derived_ellps, _ = split_acronyms(canonical)
        projection_acronym = projection_acronym or derived_proj
        ellipsoid_acronym = ellipsoid_acronym or derived_ellps
        changed = self._write(
            "UPDATE tbl_srs SET parameters = ?, projection_acronym = ?, ellipsoid_acronym = ? WHERE srs_id = ?",
            (canonical, projection_acronym or "", ellipsoid_acronym or "", srsid),
        )
        return changed > 0


class CatalogStore:
    """
    Baseline and overlay tiers composed behind one lookup interface.

    Ids above `threshold` live in the overlay tier, all others in the baseline
    tier. Lookups that are not id-based consult the baseline tier first.
    """

    def __init__(self, baseline: CatalogTier, overlay: CatalogTier, threshold: int = DEFAULT_USER_SRSID_THRESHOLD):
        self.baseline = baseline
        self.overlay = overlay
        self.threshold = int(threshold)

    @classmethod
    def from_paths(cls, baseline_path, overlay_path, threshold: Optional[int] = None) -> "CatalogStore":
        if threshold is None:
            threshold = config.get("catalog.user_srsid_threshold", DEFAULT_USER_SRSID_THRESHOLD)
        return cls(
            CatalogTier(baseline_path, "baseline", read_only=True),
            CatalogTier(overlay_path, "overlay", read_only=False),
            threshold,
        )

    @classmethod
    def from_config(cls) -> "CatalogStore":
        """Open the tiers named by 'paths.baseline_db' and 'paths.overlay_db'."""
        baseline_path = config.get_path("paths.baseline_db")
        overlay_path = config.get_path("paths.overlay_db")
        if baseline_path is None or overlay_path is None:
            raise StoreUnavailable("Catalog paths are not configured (paths.baseline_db / paths.overlay_db).")
        return cls.from_paths(baseline_path, overlay_path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.baseline.close()
        self.overlay.close()

    @property
    def tiers(self):
        """Both tiers, baseline first."""
        return (self.baseline, self.overlay)

    def tier_for(self, srsid: int) -> CatalogTier:
        return self.overlay if srsid > self.threshold else self.baseline

    def get(self, srsid: int) -> CatalogRow:
        """
        Fetch a row by srsid from the tier its id belongs to.

        Raises:
            LookupMiss: If that tier has no such row.
        """
        tier = self.tier_for(srsid)
        row = tier.get(srsid)
        if row is None:
            raise LookupMiss(f"No CRS with srsid {srsid} in the {tier.name} catalog.")
        return row

    def _first(self, description: str, **fields) -> CatalogRow:
        for tier in self.tiers:
            rows = tier.find(**fields)
            if rows:
                return rows[0]
        raise LookupMiss(f"No CRS with {description} in the catalog.")

    def find_by_srid(self, srid: int) -> CatalogRow:
        """First row with the given PostGIS SRID, baseline first."""
        return self._first(f"PostGIS SRID {srid}", postgis_srid=srid)

    def find_by_authority(self, auth_name: str, auth_id: Union[int, str]) -> CatalogRow:
        """First row with the given authority code, baseline first."""
        return self._first(f"authority id {auth_name}:{auth_id}", auth_name=auth_name.upper(), auth_id=str(auth_id))

    def next_user_srsid(self) -> int:
        """Next free overlay id, always above the threshold."""
        return max(self.threshold, self.overlay.max_srsid()) + 1


def build_baseline_catalog(path: Union[str, Path], epsg_codes: Iterable[int], overwrite: bool = False,
                           threshold: Optional[int] = None) -> int:
    """
    Build a baseline catalog database from GDAL's EPSG definitions.

    Rows get consecutive srsids starting at 1 in the order of `epsg_codes`;
    the PostGIS SRID is the EPSG code. Codes GDAL cannot express as proj4 are
    skipped with a warning.

    Args:
        path: Output database path.
        epsg_codes: EPSG codes to include.
        overwrite: Replace an existing database at `path`.
        threshold: Highest srsid the baseline may hold. Defaults to
                   `catalog.user_srsid_threshold` from config.

    Returns:
        int: Number of rows written.

    Raises:
        StoreUnavailable: If the database exists and `overwrite` is False, or on I/O failure.
    """
    path = Path(path)
    if path.exists():
        if not overwrite:
            raise StoreUnavailable(f"Catalog already exists at {path}; pass overwrite=True to replace it.")
        path.unlink()

    if threshold is None:
        threshold = config.get("catalog.user_srsid_threshold", DEFAULT_USER_SRSID_THRESHOLD)
    threshold = int(threshold)

    written = 0
    with CatalogTier(path, "baseline", read_only=False) as tier:
        for code in dict.fromkeys(int(c) for c in epsg_codes):
            if written >= threshold:
                logger.warning("Baseline catalog is full; remaining EPSG codes skipped.")
                break
            try:
                structure = srs_logic.parse_epsg(code)
            except FormatError as e:
                logger.warning(f"Skipping EPSG:{code}: {e}")
                continue
            tier.insert(CatalogRow(
                srsid=written + 1,
                description=structure.name or f"EPSG:{code}",
                projection_acronym=structure.projection_acronym,
                ellipsoid_acronym=structure.ellipsoid_acronym,
                proj4=structure.proj4,
                postgis_srid=code,
                auth_name="EPSG",
                auth_id=str(code),
                is_geo=structure.geographic_flag,
                wkt=structure.wkt,
            ))
            written += 1
    logger.info(f"Built baseline catalog with {written} CRS definitions at {path}")
    return written


def sync_db(store: CatalogStore) -> int:
    """
    Reconcile overlay rows carrying an EPSG authority with GDAL's current definitions.

    Returns:
        int: Number of rows whose proj4 string was updated, or the negated
             number of failures if any row could not be reconciled.
    """
    updated = 0
    errors = 0
    for row in store.overlay.find(auth_name="EPSG"):
        try:
            structure = srs_logic.parse_epsg(int(row.auth_id))
            if structure.proj4 != normalize_proj4(row.proj4):
                store.overlay.update_proj4(row.srsid, structure.proj4,
                                           projection_acronym=structure.projection_acronym,
                                           ellipsoid_acronym=structure.ellipsoid_acronym)
                logger.info(f"Updated srsid {row.srsid} (EPSG:{row.auth_id}) to '{structure.proj4}'")
                updated += 1
        except (FormatError, StoreUnavailable, ValueError) as e:
            logger.error(f"Could not sync srsid {row.srsid} (EPSG:{row.auth_id}): {e}")
            errors += 1
    if errors:
        logger.warning(f"Catalog sync finished with {errors} error(s); {updated} row(s) updated.")
        return -errors
    logger.info(f"Catalog sync updated {updated} row(s).")
    return updated
