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
Canonical proj4 String Handling.

PROJ accepts the same definition in many textual forms: keys in any order,
optional leading '+', repeated whitespace, redundant '+type=crs'. Catalog
matching compares proj4 strings as text, so every string stored in or looked
up against the catalog first passes through `normalize_proj4`.

Canonical form:
    1. '+proj=...' first, with longlat synonyms folded to 'longlat'.
    2. Remaining key=value tokens sorted by key.
    3. Bare flags (e.g. '+no_defs', '+wktext') sorted, after all key=value tokens.
    4. Duplicate keys keep their first occurrence; '+type=crs' is dropped.
    5. '+no_defs' is always present.
"""
import logging
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Ellipsoid implied by a +datum when no +ellps is given (PROJ's pj_datums table)
DATUM_ELLIPSOIDS: Dict[str, str] = {
    "WGS84": "WGS84",
    "GGRS87": "GRS80",
    "NAD83": "GRS80",
    "NAD27": "clrk66",
    "potsdam": "bessel",
    "carthage": "clrk80ign",
    "hermannskogel": "bessel",
    "ire65": "mod_airy",
    "nzgd49": "intl",
    "OSGB36": "airy",
}

# Projection names PROJ treats as synonyms of "longlat"
PROJECTION_ALIASES: Dict[str, str] = {
    "latlong": "longlat",
    "lonlat": "longlat",
    "latlon": "longlat",
}

# Keys that carry the ellipsoid; when present, '+ellps' is redundant in a rebuilt string
ELLIPSOID_CARRYING_KEYS = ("datum", "a", "R")

def tokenize_proj4(text: str) -> List[Tuple[str, Optional[str]]]:
    """
    Split a proj4 string into (key, value) pairs. Flags have a value of None.

    Args:
        text: A proj4 string such as '+proj=utm +zone=33 +datum=WGS84'.

    Returns:
        The tokens in their original order, duplicates included.
    """
    tokens = []
    for raw in (text or "").split():
        token = raw.lstrip("+")
        if not token:
            continue
        key, sep, value = token.partition("=")
        if not key:
            continue
        tokens.append((key, value if sep else None))
    return tokens

def normalize_proj4(text: str) -> str:
    """
    Return the canonical form of a proj4 string (see module docstring).

    An empty or whitespace-only input yields an empty string.
    """
    seen = set()
    proj = None
    pairs = []
    flags = []
    for key, value in tokenize_proj4(text):
        if key in seen:
            continue
        seen.add(key)
        if key == "type" and value == "crs":
            continue
        if key == "proj":
            proj = PROJECTION_ALIASES.get(value, value)
        elif value is None:
            flags.append(key)
        else:
            pairs.append((key, value))

    if proj is None and not pairs and not flags:
        return ""

    if "no_defs" not in flags:
        flags.append("no_defs")

    parts = [f"+proj={proj}"] if proj is not None else []
    parts.extend(f"+{key}={value}" for key, value in sorted(pairs))
    parts.extend(f"+{flag}" for flag in sorted(flags))
    return " ".join(parts)

def proj4_value(text: str, key: str) -> Optional[str]:
    """Return the first value of `key` in a proj4 string, or None if absent."""
    for k, value in tokenize_proj4(text):
        if k == key:
            return value
    return None

def strip_proj4_keys(text: str, keys=("proj", "ellps")) -> str:
    """Return the canonical proj4 string with the given keys removed."""
    kept = [
        f"+{key}" if value is None else f"+{key}={value}"
        for key, value in tokenize_proj4(text)
        if key not in keys
    ]
    return normalize_proj4(" ".join(kept))

def derive_ellipsoid_acronym(text: str) -> Optional[str]:
    """
    Work out the ellipsoid acronym for a proj4 string.

    Explicit '+ellps' wins, then the ellipsoid implied by '+datum'. Custom
    ellipsoids given by '+a'/'+b'/'+rf' or '+R' are encoded as
    'PARAMETER:<a>:<b>'.
    """
    tokens = dict(reversed(tokenize_proj4(text)))
    if tokens.get("ellps"):
        return tokens["ellps"]
    datum = tokens.get("datum")
    if datum and datum in DATUM_ELLIPSOIDS:
        return DATUM_ELLIPSOIDS[datum]
    if tokens.get("R"):
        return f"PARAMETER:{tokens['R']}:{tokens['R']}"
    if tokens.get("a"):
        a = tokens["a"]
        if tokens.get("b"):
            return f"PARAMETER:{a}:{tokens['b']}"
        if tokens.get("rf"):
            try:
                b = float(a) * (1.0 - 1.0 / float(tokens["rf"]))
            except (ValueError, ZeroDivisionError):
                logger.debug(f"Unusable +a/+rf pair in proj4 string: {text}")
                return None
            return f"PARAMETER:{a}:{b:.6f}"
        return f"PARAMETER:{a}:{a}"
    return None

def split_acronyms(text: str) -> Tuple[Optional[str], Optional[str], str]:
    """
    Split a proj4 string into (projection_acronym, ellipsoid_acronym, params).

    `params` is the canonical string with the 'proj' and 'ellps' keys stripped.
    """
    return (
        proj4_value(normalize_proj4(text), "proj"),
        derive_ellipsoid_acronym(text),
        strip_proj4_keys(text),
    )

def build_proj4(projection_acronym: Optional[str], ellipsoid_acronym: Optional[str], params: str) -> str:
    """
    Rebuild a canonical proj4 string from its acronyms and stripped parameters.

    '+ellps' is only emitted when the parameters do not already carry the
    ellipsoid (through '+datum', '+a' or '+R') and the acronym names a PROJ
    ellipsoid rather than a 'PARAMETER:' encoding.
    """
    parts = []
    if projection_acronym:
        parts.append(f"+proj={projection_acronym}")
    param_keys = {key for key, _ in tokenize_proj4(params)}
    if (ellipsoid_acronym
            and not ellipsoid_acronym.startswith("PARAMETER")
            and not param_keys.intersection(ELLIPSOID_CARRYING_KEYS)):
        parts.append(f"+ellps={ellipsoid_acronym}")
    if params:
        parts.append(params)
    return normalize_proj4(" ".join(parts))
