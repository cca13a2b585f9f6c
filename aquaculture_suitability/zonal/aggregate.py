"""
Zonal Aggregation
=================

Sum suitable area per zone polygon.

Steps:
    1. Rasterize zone polygons onto the mask grid (ids 1..n, 0 = no zone)
    2. Compute per-cell area (varies with latitude on geographic grids)
    3. Group suitable cells by zone id → suitable cell count and area
    4. Group all cells by zone id → total zone area on the same grid
    5. Left-join the zone list against both, so zones with no suitable
       cells are kept with zeros
"""

import numpy as np
import pandas as pd
from rasterio.crs import CRS
from rasterio.features import rasterize
from shapely.geometry import mapping

from ..config import ZONE_AREA_FIELD, ZONE_NAME_FIELD
from ..raster_processing.grid import CRSError, cell_areas_km2, with_values


class ZoneJoinError(ValueError):
    """Raised when zone statistics and zone polygons cannot be matched one to one."""
    pass


def _align_zone_crs(zones, crs):
    if zones.crs is None:
        raise CRSError("Zone polygons have no CRS; cannot place them on the raster grid")
    if CRS.from_user_input(zones.crs.to_wkt()) != crs:
        zones = zones.to_crs(crs.to_wkt())
    return zones


def dissolve_zones(zones, zone_field=ZONE_NAME_FIELD, area_field=ZONE_AREA_FIELD):
    """
    Merge polygon rows that share a zone name into one row per zone.

    EEZ layers often store a zone as several parts (islands, exclaves).
    Rows keep the order in which each name first appears; the nominal
    ``area_field`` is summed over the parts, other attributes come from
    the first part.

    Args:
        zones: GeoDataFrame of zone polygons
        zone_field: Zone name column
        area_field: Nominal zone area column (km²), summed when present

    Returns:
        GeoDataFrame with unique ``zone_field`` values (``zones`` itself
        when names are already unique)
    """
    if not zones[zone_field].duplicated().any():
        return zones

    dissolved = zones.dissolve(by=zone_field, as_index=False, sort=False)
    if area_field in zones.columns:
        totals = zones.groupby(zone_field, sort=False)[area_field].sum()
        dissolved[area_field] = dissolved[zone_field].map(totals).to_numpy()
    return dissolved


def rasterize_zones(zones, like, all_touched=False):
    """
    Burn zone ids onto the grid of a raster layer.

    Zone ``i`` (0-based row of ``zones``) gets id ``i + 1``; cells outside
    every zone get 0. Where polygons overlap, the later zone wins.

    Args:
        zones: GeoDataFrame of zone polygons (in the layer's CRS)
        like: Raster layer defining the grid
        all_touched: Burn every cell touched by a polygon instead of only
            cells whose centre is inside (default: False)

    Returns:
        2D int32 array of zone ids
    """
    shape = like['values'].shape
    shapes = [
        (mapping(geom), zone_id)
        for zone_id, geom in enumerate(zones.geometry, start=1)
        if geom is not None and not geom.is_empty
    ]
    if not shapes:
        return np.zeros(shape, dtype=np.int32)

    return rasterize(
        shapes,
        out_shape=shape,
        transform=like['transform'],
        fill=0,
        dtype="int32",
        all_touched=all_touched,
    )


def _group_area(zone_ids, areas, prefix):
    frame = pd.DataFrame({"zone_id": zone_ids, "cell_area_km2": areas})
    frame = frame[frame["zone_id"] > 0]
    return (
        frame.groupby("zone_id")
        .agg(**{
            f"{prefix}_cells": ("cell_area_km2", "size"),
            f"{prefix}_area_km2": ("cell_area_km2", "sum"),
        })
        .reset_index()
    )


def zonal_suitable_area(zones, mask, zone_field=ZONE_NAME_FIELD, all_touched=False,
                        verbose=False):
    """
    Suitable cell count and area per zone.

    Polygon rows sharing a zone name are dissolved first (see
    dissolve_zones), so each zone is counted once.

    Args:
        zones: GeoDataFrame of zone polygons with a ``zone_field`` column
        mask: Suitability mask layer (1.0 suitable, NaN otherwise)
        zone_field: Zone name column
        all_touched: Passed to rasterize_zones
        verbose: Print a short summary (default: False)

    Returns:
        dict with:
            - stats: DataFrame, one row per zone name in first-appearance order with
              zone_id, <zone_field>, zone_cells, zone_area_km2,
              suitable_cells, suitable_area_km2, pct_suitable
            - zone_ids: layer of rasterized zone ids
            - cell_area_km2: 2D array of cell areas
            - total_suitable_area_km2: suitable area over the whole grid
            - zoned_suitable_area_km2: suitable area inside any zone
            - unzoned_suitable_area_km2: suitable area outside every zone

    Raises:
        CRSError: If the mask or the zones have no CRS
        ValueError: If ``zone_field`` is missing
        ZoneJoinError: If aggregated ids do not match the zone list
    """
    if mask['crs'] is None:
        raise CRSError(f"Mask layer '{mask['name']}' has no CRS")
    if zone_field not in zones.columns:
        raise ValueError(
            f"Zone field '{zone_field}' not found.\n"
            f"Available columns: {list(zones.columns)}"
        )

    zones = dissolve_zones(zones, zone_field)
    zones = _align_zone_crs(zones, mask['crs'])
    zone_ids = rasterize_zones(zones, mask, all_touched=all_touched)

    values = mask['values']
    areas = cell_areas_km2(mask['transform'], values.shape, mask['crs'])
    suitable = values == 1.0

    suitable_stats = _group_area(zone_ids[suitable], areas[suitable], "suitable")
    zone_totals = _group_area(zone_ids.ravel(), areas.ravel(), "zone")

    zone_table = pd.DataFrame({
        "zone_id": np.arange(1, len(zones) + 1, dtype=np.int32),
        zone_field: zones[zone_field].to_numpy(),
    })

    unmatched = set(suitable_stats["zone_id"]) - set(zone_table["zone_id"])
    if unmatched:
        raise ZoneJoinError(
            f"Aggregated statistics reference zone ids not in the zone list: "
            f"{sorted(unmatched)}"
        )

    stats = (
        zone_table
        .merge(zone_totals, on="zone_id", how="left")
        .merge(suitable_stats, on="zone_id", how="left")
    )
    for col in ("zone_cells", "suitable_cells"):
        stats[col] = stats[col].fillna(0).astype(np.int64)
    for col in ("zone_area_km2", "suitable_area_km2"):
        stats[col] = stats[col].fillna(0.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        stats["pct_suitable"] = np.where(
            stats["zone_area_km2"] > 0,
            stats["suitable_area_km2"] / stats["zone_area_km2"] * 100.0,
            0.0,
        )

    total_suitable = float(areas[suitable].sum())
    zoned_suitable = float(stats["suitable_area_km2"].sum())

    if verbose:
        print(f"  Suitable area: {total_suitable:,.1f} km2 total, "
              f"{zoned_suitable:,.1f} km2 inside {len(zones)} zones")

    return {
        'stats': stats,
        'zone_ids': with_values(mask, zone_ids.astype(np.float64), name="zone_ids"),
        'cell_area_km2': areas,
        'total_suitable_area_km2': total_suitable,
        'zoned_suitable_area_km2': zoned_suitable,
        'unzoned_suitable_area_km2': total_suitable - zoned_suitable,
    }
