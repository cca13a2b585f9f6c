"""
Zone Report
===========

Join zonal statistics back onto the zone polygons, compute percent
suitable and rank zones. The result feeds the choropleth maps in
visualization.py and the exports in save_results.py.
"""

import warnings

import numpy as np
import pandas as pd

from ..config import DEFAULT_AREA_BASIS, ZONE_AREA_FIELD, ZONE_NAME_FIELD
from .aggregate import ZoneJoinError

AREA_BASES = ("grid", "attribute")

SUMMARY_COLUMNS = [
    "suitable_area_km2",
    "zone_area_km2",
    "pct_suitable",
    "rank_area",
    "rank_pct",
]


def _check_unique(frame, zone_field, label):
    dupes = frame.loc[frame[zone_field].duplicated(), zone_field].unique()
    if len(dupes):
        raise ZoneJoinError(
            f"Duplicate zone names in {label}: {list(dupes)}\n"
            "Merge the polygons with dissolve_zones() before building the report."
        )


def build_zone_report(zones, stats, zone_field=ZONE_NAME_FIELD,
                      area_field=ZONE_AREA_FIELD, area_basis=DEFAULT_AREA_BASIS):
    """
    Join zone statistics onto zone polygons.

    Every zone polygon is kept; zones missing from ``stats`` or with no
    suitable cells get suitable area 0 and 0 %.

    Args:
        zones: GeoDataFrame of zone polygons
        stats: DataFrame from zonal_suitable_area()['stats']
        zone_field: Zone name column shared by both tables
        area_field: Nominal zone area column on the polygons (km²)
        area_basis: Denominator for pct_suitable:
            "grid"      – zone area rasterized on the analysis grid
            "attribute" – nominal ``area_field`` of the polygons

    Returns:
        GeoDataFrame with the zone columns plus suitable_cells,
        suitable_area_km2, zone_area_km2, nominal_area_km2 (if
        ``area_field`` exists), pct_suitable, rank_area, rank_pct

    Raises:
        ZoneJoinError: If zone names are duplicated or stats name zones
            that are not in ``zones``
        ValueError: If ``area_basis`` is unknown or its column is missing
    """
    if area_basis not in AREA_BASES:
        raise ValueError(f"area_basis must be one of {AREA_BASES}, got '{area_basis}'")
    if area_basis == "attribute" and area_field not in zones.columns:
        raise ValueError(
            f"area_basis='attribute' needs column '{area_field}' on the zones.\n"
            f"Available columns: {list(zones.columns)}"
        )

    _check_unique(zones, zone_field, "zone polygons")
    _check_unique(stats, zone_field, "zone statistics")

    unknown = set(stats[zone_field]) - set(zones[zone_field])
    if unknown:
        raise ZoneJoinError(
            f"Statistics reference zones not present in the polygons: {sorted(unknown)}\n"
            f"Known zones: {sorted(zones[zone_field])}"
        )

    stat_cols = [c for c in ("suitable_cells", "suitable_area_km2", "zone_area_km2")
                 if c in stats.columns]
    report = zones.merge(stats[[zone_field] + stat_cols], on=zone_field, how="left")

    if "suitable_cells" in report.columns:
        report["suitable_cells"] = report["suitable_cells"].fillna(0).astype(np.int64)
    report["suitable_area_km2"] = report["suitable_area_km2"].fillna(0.0)
    if "zone_area_km2" in report.columns:
        report["zone_area_km2"] = report["zone_area_km2"].fillna(0.0)
    else:
        report["zone_area_km2"] = 0.0

    if area_field in report.columns:
        report["nominal_area_km2"] = report[area_field].astype(float)

    if area_basis == "grid":
        denominator = report["zone_area_km2"].to_numpy(dtype=float)
    else:
        denominator = report["nominal_area_km2"].to_numpy(dtype=float)

    suitable = report["suitable_area_km2"].to_numpy(dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        pct = np.where(denominator > 0, suitable / denominator * 100.0, 0.0)

    over = pct > 100.0 + 1e-9
    if over.any():
        names = report.loc[over, zone_field].tolist()
        warnings.warn(
            f"Percent suitable exceeds 100% for zones {names} "
            f"(area_basis='{area_basis}'). The zone area and the raster grid "
            "likely disagree, e.g. a CRS mismatch.",
            UserWarning,
            stacklevel=2,
        )

    report["pct_suitable"] = pct
    report["rank_area"] = report["suitable_area_km2"].rank(
        ascending=False, method="min").astype(int)
    report["rank_pct"] = report["pct_suitable"].rank(
        ascending=False, method="min").astype(int)

    return report


def rank_zones(report, by="suitable_area_km2", zone_field=ZONE_NAME_FIELD):
    """
    Plain summary table of the report sorted by ``by`` (descending).

    Args:
        report: GeoDataFrame from build_zone_report()
        by: "suitable_area_km2" or "pct_suitable"
        zone_field: Zone name column

    Returns:
        DataFrame without geometry, one row per zone
    """
    if by not in ("suitable_area_km2", "pct_suitable"):
        raise ValueError(f"Cannot rank by '{by}'")

    columns = [zone_field] + [c for c in SUMMARY_COLUMNS if c in report.columns]
    table = pd.DataFrame(report[columns])
    return table.sort_values([by, zone_field], ascending=[False, True]).reset_index(drop=True)
