"""
Zonal Statistics Module
=======================

Aggregate a suitability mask by zone polygons and report per-zone results.

Pipeline:
    1. zonal_suitable_area() → per-zone suitable cells/area + zone area
    2. build_zone_report()   → stats joined onto polygons, % suitable, ranks
    3. rank_zones()          → sorted summary table

Example:
    from aquaculture_suitability.zonal import zonal_suitable_area, build_zone_report

    zonal = zonal_suitable_area(zones, mask, zone_field="rgn")
    report = build_zone_report(zones, zonal['stats'], zone_field="rgn")
"""

from .aggregate import (
    ZoneJoinError,
    dissolve_zones,
    rasterize_zones,
    zonal_suitable_area,
)

from .report import (
    build_zone_report,
    rank_zones,
)

__all__ = [
    "dissolve_zones",
    "rasterize_zones",
    "zonal_suitable_area",
    "build_zone_report",
    "rank_zones",
    "ZoneJoinError",
]
