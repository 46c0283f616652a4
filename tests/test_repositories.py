import json
from pathlib import Path

import pytest

from territory_mapper.config import settings
from territory_mapper.data import companies_repository
from territory_mapper.data.companies_repository import (
    build_hubspot_url,
    get_companies,
    load_companies_from_file,
    normalize_lifecycle_stage,
    resolve_coordinates,
)
from territory_mapper.data.postcodes_repository import boundary_file_for, load_boundaries, load_postcodes
from territory_mapper.models.domain import Company, CoordSource, LifecycleStage, PostalArea

POSTCODE_CSV = """postcode,locality,state,lat,long,sa3name,sa4name
2000,Sydney,NSW,-33.8688,151.2093,Sydney Inner City,Sydney - City and Inner South
2000,Barangaroo,NSW,-33.8688,151.2093,Sydney Inner City,Sydney - City and Inner South
2000,sydney,NSW,-33.8688,151.2093,Sydney Inner City,Sydney - City and Inner South
2600,Canberra,ACT,-35.2809,149.1300,North Canberra,Australian Capital Territory
0200,ANU,,-35.2777,149.1185,,
3000,Melbourne,VIC,,,Melbourne City,Melbourne - Inner
"""

COMPANY_CSV = """Record ID,Company name,Street Address,City,State/Region (AU),Postal Code,Latitude,Longitude,Company owner,Lifecycle Stage,Company Domain Name,Phase,Estimated PUM
101,Harbour Realty,1 George St,Sydney,nsw,2000,-33.86,151.20,Alex Chen,customer,harbour.example,Adoption,"1,250"
102,Capital Homes,,Canberra,ACT,2600,,,Sam Patel,salesqualifiedlead,,,
103,Nowhere Agency,,,NSW,9999,0,0,,unknown,,,abc
,Missing Id,,,NSW,2000,,,,,,,
"""


def _lookup() -> dict[str, PostalArea]:
    area = PostalArea(postcode="2600", state="ACT", latitude=-35.28, longitude=149.13)
    return {area.id: area}


def test_load_postcodes_deduplicates_and_merges_localities(tmp_path: Path) -> None:
    source = tmp_path / "postcodes.csv"
    source.write_text(POSTCODE_CSV, encoding="utf-8")

    areas = {area.id: area for area in load_postcodes(source)}

    assert set(areas) == {"2000-NSW", "2600-ACT"}
    assert areas["2000-NSW"].localities == ["SYDNEY", "BARANGAROO"]
    assert areas["2000-NSW"].sa3name == "Sydney Inner City"
    assert areas["2600-ACT"].centroid == (-35.2809, 149.13)
    assert all(area.territory is None for area in areas.values())


def test_load_postcodes_requires_the_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_postcodes(tmp_path / "missing.csv")


def test_boundary_file_for_act_uses_nsw_file(tmp_path: Path) -> None:
    assert boundary_file_for("ACT", tmp_path) == tmp_path / "NSW.geojson"
    assert boundary_file_for("VIC", tmp_path) == tmp_path / "VIC.geojson"


def test_load_boundaries_keys_shapes_by_postcode(tmp_path: Path) -> None:
    collection = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"POA": "2000"},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[151.0, -34.0], [151.5, -34.0], [151.5, -33.5], [151.0, -33.5], [151.0, -34.0]]],
                },
            },
            {"type": "Feature", "properties": {"POA": "2010"}, "geometry": None},
            {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [151, -33]}},
        ],
    }
    source = tmp_path / "NSW.geojson"
    source.write_text(json.dumps(collection), encoding="utf-8")

    boundaries = load_boundaries("NSW", source)

    assert boundaries.loaded
    assert boundaries.loaded_region == "NSW"
    assert set(boundaries.features) == {"2000"}
    assert boundaries.get("2000").bounds == (151.0, -34.0, 151.5, -33.5)
    assert boundaries.matches_region("ACT")
    assert not boundaries.matches_region("VIC")


def test_missing_or_broken_boundary_files_are_unloaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "boundary_dir", tmp_path)
    broken = tmp_path / "QLD.geojson"
    broken.write_text("{", encoding="utf-8")

    assert not load_boundaries("VIC").loaded
    assert not load_boundaries("QLD").loaded
    assert not load_boundaries(None).loaded


def test_resolve_coordinates_prefers_crm_then_postcode_centroid() -> None:
    lookup = _lookup()

    assert resolve_coordinates("-33.1", "151.1", "2600", "ACT", lookup) == (-33.1, 151.1, CoordSource.HUBSPOT)
    assert resolve_coordinates("0", "0", "2600", "ACT", lookup) == (-35.28, 149.13, CoordSource.POSTCODE)
    assert resolve_coordinates(None, "", "9999", "NSW", lookup) == (None, None, CoordSource.MISSING)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("customer", LifecycleStage.CUSTOMER),
        (" MQL ", LifecycleStage.MQL),
        ("marketingqualifiedlead", LifecycleStage.MQL),
        ("salesqualifiedlead", LifecycleStage.SQL),
        ("", LifecycleStage.OTHER),
        (None, LifecycleStage.OTHER),
        ("partner", LifecycleStage.OTHER),
    ],
)
def test_normalize_lifecycle_stage(raw, expected) -> None:
    assert normalize_lifecycle_stage(raw) is expected


def test_load_companies_from_file(tmp_path: Path) -> None:
    source = tmp_path / "companies.csv"
    source.write_text(COMPANY_CSV, encoding="utf-8")

    companies = {company.id: company for company in load_companies_from_file(_lookup(), source)}

    assert set(companies) == {"101", "102", "103"}
    harbour = companies["101"]
    assert harbour.state == "NSW"
    assert harbour.pum == 1250
    assert harbour.lifecycle_stage is LifecycleStage.CUSTOMER
    assert harbour.coord_source is CoordSource.HUBSPOT
    assert harbour.hubspot_url == build_hubspot_url("101")
    assert companies["102"].coord_source is CoordSource.POSTCODE
    assert companies["102"].lifecycle_stage is LifecycleStage.SQL
    assert companies["103"].coord_source is CoordSource.MISSING
    assert companies["103"].pum == 0
    assert not companies["103"].has_coordinates


def test_hubspot_url_uses_configured_account(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "hubspot_account_id", "123")

    assert build_hubspot_url("42") == "https://app.hubspot.com/contacts/123/company/42"


def test_missing_company_file_returns_none(tmp_path: Path) -> None:
    assert load_companies_from_file({}, tmp_path / "missing.csv") is None


def test_get_companies_uses_first_available_loader() -> None:
    company = Company(id="1", name="A", state="NSW", postcode="2000", latitude=None, longitude=None)

    def unavailable(lookup):
        return None

    def available(lookup):
        return (company,)

    assert get_companies({}, loaders=[unavailable, available]) == (company,)
    assert get_companies({}, loaders=[unavailable]) == ()


def test_get_companies_falls_back_to_file_without_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = tmp_path / "companies.csv"
    source.write_text(COMPANY_CSV, encoding="utf-8")
    monkeypatch.setattr(companies_repository, "get_supabase_client", lambda: None)
    monkeypatch.setattr(settings, "company_file", source)

    assert len(get_companies(_lookup())) == 3
