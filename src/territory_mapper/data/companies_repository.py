"""Company feed loader with database-first approach, falling back to the CSV export."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from ..config import settings
from ..db.supabase import COMPANIES_TABLE, get_supabase_client
from ..models.domain import Company, CoordSource, LifecycleStage, PostalArea, postal_area_key

logger = logging.getLogger(__name__)

PostalAreaLookup = Mapping[str, PostalArea]
CompanyLoader = Callable[[PostalAreaLookup], Optional[tuple[Company, ...]]]

_LIFECYCLE_ALIASES = {
    "target": LifecycleStage.TARGET,
    "lead": LifecycleStage.LEAD,
    "mql": LifecycleStage.MQL,
    "marketingqualifiedlead": LifecycleStage.MQL,
    "sql": LifecycleStage.SQL,
    "salesqualifiedlead": LifecycleStage.SQL,
    "opportunity": LifecycleStage.OPPORTUNITY,
    "customer": LifecycleStage.CUSTOMER,
    "evangelist": LifecycleStage.EVANGELIST,
}


def normalize_lifecycle_stage(value: Optional[str]) -> LifecycleStage:
    normalized = (value or "").strip().lower()
    return _LIFECYCLE_ALIASES.get(normalized, LifecycleStage.OTHER)


def build_hubspot_url(record_id: str) -> str:
    return f"https://app.hubspot.com/contacts/{settings.hubspot_account_id}/company/{record_id}"


def _coerce_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _coerce_pum(value: Any) -> int:
    if value is None:
        return 0
    text = str(value).strip().replace(",", "")
    try:
        return max(int(float(text)), 0)
    except ValueError:
        return 0


def resolve_coordinates(
    lat: Any,
    lon: Any,
    postcode: str,
    state: str,
    postal_areas: PostalAreaLookup,
) -> tuple[Optional[float], Optional[float], CoordSource]:
    """Use CRM coordinates when valid, else the postal area centroid."""

    lat_value = _coerce_float(lat)
    lon_value = _coerce_float(lon)
    if lat_value is not None and lon_value is not None and lat_value != 0 and lon_value != 0:
        return lat_value, lon_value, CoordSource.HUBSPOT
    if postcode and state:
        area = postal_areas.get(postal_area_key(postcode, state))
        if area is not None:
            return area.latitude, area.longitude, CoordSource.POSTCODE
    return None, None, CoordSource.MISSING


def _company_from_record(
    record: Mapping[str, Any],
    postal_areas: PostalAreaLookup,
    *,
    keys: Mapping[str, str],
) -> Optional[Company]:
    record_id = str(record.get(keys["id"]) or "").strip()
    if not record_id:
        return None
    postcode = str(record.get(keys["postcode"]) or "").strip()
    state = str(record.get(keys["state"]) or "").strip().upper()
    lat, lon, coord_source = resolve_coordinates(
        record.get(keys["latitude"]),
        record.get(keys["longitude"]),
        postcode,
        state,
        postal_areas,
    )
    return Company(
        id=record_id,
        name=str(record.get(keys["name"]) or "").strip(),
        address=str(record.get(keys["address"]) or "").strip(),
        city=str(record.get(keys["city"]) or "").strip(),
        state=state,
        postcode=postcode,
        latitude=lat,
        longitude=lon,
        owner=str(record.get(keys["owner"]) or "").strip(),
        lifecycle_stage=normalize_lifecycle_stage(record.get(keys["lifecycle_stage"])),
        domain=str(record.get(keys["domain"]) or "").strip(),
        phase=str(record.get(keys["phase"]) or "").strip(),
        pum=_coerce_pum(record.get(keys["pum"])),
        hubspot_url=build_hubspot_url(record_id),
        coord_source=coord_source,
    )


CSV_COLUMNS = {
    "id": "Record ID",
    "name": "Company name",
    "address": "Street Address",
    "city": "City",
    "state": "State/Region (AU)",
    "postcode": "Postal Code",
    "latitude": "Latitude",
    "longitude": "Longitude",
    "owner": "Company owner",
    "lifecycle_stage": "Lifecycle Stage",
    "domain": "Company Domain Name",
    "phase": "Phase",
    "pum": "Estimated PUM",
}

DATABASE_COLUMNS = {
    "id": "hubspot_id",
    "name": "name",
    "address": "address",
    "city": "city",
    "state": "state",
    "postcode": "postcode",
    "latitude": "latitude",
    "longitude": "longitude",
    "owner": "owner",
    "lifecycle_stage": "lifecycle_stage",
    "domain": "domain",
    "phase": "phase",
    "pum": "pum",
}


def load_companies_from_database(postal_areas: PostalAreaLookup) -> tuple[Company, ...] | None:
    """Load companies from Supabase. Returns None if database not available or empty."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        response = supabase.table(COMPANIES_TABLE).select("*").execute()
    except Exception as e:
        logger.debug(f"Company query failed, falling back to file: {e}")
        return None

    companies: list[Company] = []
    for row in response.data or []:
        company = _company_from_record(row, postal_areas, keys=DATABASE_COLUMNS)
        if company is not None:
            companies.append(company)
    return tuple(companies) if companies else None


def load_companies_from_file(
    postal_areas: PostalAreaLookup,
    source: Optional[Path] = None,
) -> tuple[Company, ...] | None:
    """Load companies from the CRM CSV export. Returns None when the file is absent."""
    csv_path = source or settings.company_file
    if not csv_path.exists():
        logger.warning(f"Company file not found: {csv_path}")
        return None

    companies: list[Company] = []
    with csv_path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            company = _company_from_record(row, postal_areas, keys=CSV_COLUMNS)
            if company is not None:
                companies.append(company)
    return tuple(companies)


def get_companies(
    postal_areas: PostalAreaLookup,
    loaders: Sequence[CompanyLoader] | None = None,
) -> tuple[Company, ...]:
    """Return the first non-empty result of the configured loaders (database, then file)."""

    for loader in loaders or (load_companies_from_database, load_companies_from_file):
        companies = loader(postal_areas)
        if companies is not None:
            logger.info(f"Loaded {len(companies)} companies via {loader.__name__}")
            return companies
    return tuple()
