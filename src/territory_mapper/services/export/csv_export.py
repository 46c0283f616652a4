"""CSV and CRM list exports of postal area assignments."""

from __future__ import annotations

import csv
import io
import re
from typing import Iterable, Optional

from ...models.domain import PostalArea, normalize_region

TERRITORY_FIELDS = ["postcode", "locality", "state", "lat", "long"]
ALL_TERRITORIES_FIELDS = ["postcode", "locality", "state", "territory", "lat", "long"]


def territory_slug(territory_name: str) -> str:
    return re.sub(r"\s+", "_", territory_name.lower())


def territory_csv_filename(territory_name: str, suffix: Optional[str] = None) -> str:
    stem = territory_slug(territory_name) if suffix is None else f"{territory_slug(territory_name)}_{suffix}"
    return f"{stem}_postcodes.csv"


def hubspot_filename(territory_name: str, suffix: Optional[str] = None) -> str:
    stem = territory_slug(territory_name) if suffix is None else f"{territory_slug(territory_name)}_{suffix}"
    return f"{stem}_hubspot.txt"


def unassigned_csv_filename(region_filter: Optional[str] = None) -> str:
    region = normalize_region(region_filter)
    prefix = f"{region.lower()}_" if region else ""
    return f"{prefix}unassigned_postcodes.csv"


def _row(area: PostalArea) -> dict:
    return {
        "postcode": area.postcode,
        "locality": area.localities[0] if area.localities else "",
        "state": area.state,
        "territory": area.territory or "",
        "lat": area.latitude,
        "long": area.longitude,
    }


def _write(rows: Iterable[dict], fieldnames: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def territory_to_csv(postal_areas: Iterable[PostalArea], territory_name: str) -> str:
    rows = (_row(area) for area in postal_areas if area.territory == territory_name)
    return _write(rows, TERRITORY_FIELDS)


def all_territories_to_csv(postal_areas: Iterable[PostalArea]) -> str:
    rows = (_row(area) for area in postal_areas if area.territory)
    return _write(rows, ALL_TERRITORIES_FIELDS)


def unassigned_to_csv(postal_areas: Iterable[PostalArea], region_filter: Optional[str] = None) -> str:
    region = normalize_region(region_filter)
    rows = (
        _row(area)
        for area in postal_areas
        if not area.territory and (region is None or area.state == region)
    )
    return _write(rows, TERRITORY_FIELDS)


def hubspot_postcode_list(postal_areas: Iterable[PostalArea], territory_name: str) -> str:
    """Comma-separated, de-duplicated and sorted postcodes for a CRM list filter."""

    postcodes = {area.postcode for area in postal_areas if area.territory == territory_name}
    return ",".join(sorted(postcodes))
