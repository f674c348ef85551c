"""
Services module for AutoParts.

This module contains the catalog logic: vehicle compatibility resolution,
part filtering, vehicle search and maintenance, and the vehicle CSV import.
"""

from autoparts.services.compatibility import (
    Exact,
    PartialEnd,
    PartialStart,
    Range,
    VehicleFilter,
    YearMatching,
    YearSpec,
    part_matches,
    resolve_vehicle_ids,
    restricted_vehicle_ids,
    year_matches,
    year_spec,
)
from autoparts.services.part_catalog import (
    BrowseResult,
    FilterFacets,
    PartCatalogService,
    PartQuery,
    PartSort,
    browse_parts,
    build_filter_facets,
    compatible_vehicles,
    filter_parts,
    sort_parts,
)
from autoparts.services.part_maintenance import PartMaintenanceService
from autoparts.services.vehicle_catalog import (
    VehicleCatalogService,
    VehicleQuery,
    VehicleSearchResult,
    VehicleSort,
    normalize_vehicle_years,
    search_vehicles,
    sort_vehicles,
)
from autoparts.services.vehicle_import import (
    VehicleCsvImporter,
    VehicleImportResult,
    build_column_map,
    detect_delimiter,
    parse_csv_line,
    stage_vehicles,
)

__all__ = [
    # Compatibility
    "Exact",
    "PartialEnd",
    "PartialStart",
    "Range",
    "VehicleFilter",
    "YearMatching",
    "YearSpec",
    "part_matches",
    "resolve_vehicle_ids",
    "restricted_vehicle_ids",
    "year_matches",
    "year_spec",
    # Part catalog
    "BrowseResult",
    "FilterFacets",
    "PartCatalogService",
    "PartQuery",
    "PartSort",
    "browse_parts",
    "build_filter_facets",
    "compatible_vehicles",
    "filter_parts",
    "sort_parts",
    # Part maintenance
    "PartMaintenanceService",
    # Vehicle catalog
    "VehicleCatalogService",
    "VehicleQuery",
    "VehicleSearchResult",
    "VehicleSort",
    "normalize_vehicle_years",
    "search_vehicles",
    "sort_vehicles",
    # Vehicle import
    "VehicleCsvImporter",
    "VehicleImportResult",
    "build_column_map",
    "detect_delimiter",
    "parse_csv_line",
    "stage_vehicles",
]
