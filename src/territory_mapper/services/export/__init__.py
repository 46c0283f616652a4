"""Export services."""

from .csv_export import (
    all_territories_to_csv,
    hubspot_filename,
    hubspot_postcode_list,
    territory_csv_filename,
    territory_to_csv,
    unassigned_csv_filename,
    unassigned_to_csv,
)
from .geojson import outline_to_feature, outlines_to_feature_collection

__all__ = [
    "all_territories_to_csv",
    "hubspot_filename",
    "hubspot_postcode_list",
    "outline_to_feature",
    "outlines_to_feature_collection",
    "territory_csv_filename",
    "territory_to_csv",
    "unassigned_csv_filename",
    "unassigned_to_csv",
]
