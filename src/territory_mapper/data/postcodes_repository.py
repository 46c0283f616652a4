"""Data access helpers for the postcode reference dataset and boundary shapes."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Optional

from shapely.errors import GEOSException
from shapely.geometry import shape

from ..config import settings
from ..models.domain import PostalArea, normalize_region, postal_area_key
from ..services.boundaries import BoundarySource

logger = logging.getLogger(__name__)

# ACT postcodes ship inside the NSW boundary file
BOUNDARY_FILE_ALIASES = {"ACT": "NSW"}
BOUNDARY_KEY_PROPERTY = "POA"


def _coerce_float(value: Optional[str]) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return None


def load_postcodes(source: Optional[Path] = None) -> list[PostalArea]:
    """Load postal areas from the reference CSV.

    Rows are de-duplicated on postcode and state; extra rows for the same
    key contribute their locality name.
    """

    csv_path = source or settings.postcode_file
    if not csv_path.exists():
        raise FileNotFoundError(f"Postcode file not found: {csv_path}")

    postal_areas: dict[str, PostalArea] = {}
    with csv_path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"Postcode file '{csv_path}' is missing a header row.")
        for row in reader:
            state = (row.get("state") or "").strip()
            postcode = (row.get("postcode") or "").strip()
            if not state or not postcode:
                continue
            lat = _coerce_float(row.get("lat"))
            lon = _coerce_float(row.get("long"))
            if lat is None or lon is None:
                continue  # centroid is mandatory

            locality = (row.get("locality") or "").strip().upper()
            key = postal_area_key(postcode, state)
            existing = postal_areas.get(key)
            if existing is not None:
                if locality and locality not in existing.localities:
                    existing.localities.append(locality)
                continue

            postal_areas[key] = PostalArea(
                postcode=postcode,
                state=state,
                latitude=lat,
                longitude=lon,
                localities=[locality] if locality else [],
                sa3name=(row.get("sa3name") or "").strip(),
                sa4name=(row.get("sa4name") or "").strip(),
            )

    logger.info(f"Loaded {len(postal_areas)} postal areas from {csv_path.name}")
    return list(postal_areas.values())


def boundary_file_for(region: str, directory: Optional[Path] = None) -> Path:
    name = BOUNDARY_FILE_ALIASES.get(region, region)
    return (directory or settings.boundary_dir) / f"{name}.geojson"


def load_boundaries(region: Optional[str], source: Optional[Path] = None) -> BoundarySource:
    """Load postal area shapes for one state.

    Whole-country loads are skipped. A missing or unreadable file yields an
    empty source so territory outlines fall back to convex hulls.
    """

    normalized = normalize_region(region)
    if normalized is None and source is None:
        return BoundarySource()

    path = source or boundary_file_for(normalized)
    if not path.exists():
        logger.warning(f"Boundary file not found for {normalized}: {path}")
        return BoundarySource()

    try:
        with path.open("r", encoding="utf-8") as handle:
            collection = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(f"Failed to read boundary file {path}: {exc}")
        return BoundarySource()

    features = {}
    for feature in collection.get("features", []):
        properties = feature.get("properties") or {}
        postcode = properties.get(BOUNDARY_KEY_PROPERTY)
        geometry = feature.get("geometry")
        if not postcode or not geometry:
            continue
        try:
            features[str(postcode)] = shape(geometry)
        except (GEOSException, ValueError, TypeError, AttributeError) as exc:
            logger.debug(f"Skipping malformed boundary for {postcode}: {exc}")

    logger.info(f"Loaded {len(features)} postcode boundaries for {normalized or path.stem}")
    if not features:
        return BoundarySource()
    return BoundarySource(features=features, loaded_region=normalized)
