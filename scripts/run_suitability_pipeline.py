#!/usr/bin/env python3
"""
Aquaculture Suitability for One Species
=======================================

Given yearly sea-surface-temperature rasters, a bathymetry raster and EEZ
zone polygons, this script finds the cells suitable for one species and
ranks the zones by suitable area and by percent of zone suitable.

Results are saved as CSV/JSON tables and PNG maps under
outputs/<study_area>/.

Usage:
    python scripts/run_suitability_pipeline.py

Requires:
    rasterio, geopandas, matplotlib (xarray + netcdf4 for NetCDF inputs)
"""

import sys
from pathlib import Path

import numpy as np

# Add repository root to path for imports
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from aquaculture_suitability import (
    load_all,
    load_species,
    plot_all,
    rank_zones,
    run_suitability_analysis,
    save_results,
)
from aquaculture_suitability.config import (
    DEFAULT_AREA_BASIS,
    DEFAULT_CRS,
    DEFAULT_SPECIES,
    DEPTH_MAX_M,
    DEPTH_MIN_M,
    TEMP_MAX_C,
    TEMP_MIN_C,
    ZONE_NAME_FIELD,
    get_data_paths,
)

# =============================================================================
# CONFIGURATION - Modify these parameters as needed
# =============================================================================

# Study area, must match a folder under data/study_areas/
STUDY_AREA = "West_Coast"

_paths = get_data_paths(STUDY_AREA)
SST_PATHS = _paths["sst_paths"]
BATHYMETRY_PATH = _paths["bathymetry_path"]
ZONES_PATH = _paths["zones_path"]

# Species name (must match a SPECIES in data/species_thresholds.csv).
# Set USE_CUSTOM_THRESHOLDS = True to override the database values below.
SPECIES_NAME = DEFAULT_SPECIES
USE_CUSTOM_THRESHOLDS = False
CUSTOM_TEMP_RANGE_C = (TEMP_MIN_C, TEMP_MAX_C)
CUSTOM_DEPTH_RANGE_M = (DEPTH_MIN_M, DEPTH_MAX_M)  # metres below sea level

# SST rasters in Kelvin (NOAA CoralTemp annual means); bathymetry as
# elevation (negative underwater)
SST_UNITS = "kelvin"
BATHYMETRY_IS_ELEVATION = True

CRS = DEFAULT_CRS
ZONE_FIELD = ZONE_NAME_FIELD
AREA_BASIS = DEFAULT_AREA_BASIS

RESULTS_DIR = Path(_paths["results_dir"])
PLOTS_DIR = Path(_paths["plots_dir"])


# =============================================================================
# SUMMARY PRINTING
# =============================================================================


def print_summary(result):
    """
    Print a numerical summary of each pipeline stage.

    Args:
        result: Dict from run_suitability_analysis()
    """
    print("\n" + "=" * 70)
    print(f"SUITABILITY SUMMARY: {result['species']}")
    print("=" * 70)

    # --- Thresholds ---
    print("\n--- Thresholds ---")
    print(f"  SST:    {result['temp_range_c'][0]}–{result['temp_range_c'][1]} °C")
    print(f"  Depth:  {result['depth_range_m'][0]}–{result['depth_range_m'][1]} m")

    # --- Inputs on the analysis grid ---
    print("\n--- Analysis Grid ---")
    sst = result["mean_sst_c"]["values"]
    depth = result["depth_m"]["values"]
    rows, cols = sst.shape
    print(f"  Grid dimensions:    {rows} rows × {cols} cols")
    if np.any(~np.isnan(sst)):
        print(f"  Mean SST range:     {np.nanmin(sst):.2f} to {np.nanmax(sst):.2f} °C")
    if np.any(~np.isnan(depth)):
        print(f"  Depth range:        {np.nanmin(depth):.1f} to {np.nanmax(depth):.1f} m")

    # --- Masks ---
    print("\n--- Suitable Cells ---")
    n_sst = int(np.sum(result["sst_mask"]["values"] == 1))
    n_depth = int(np.sum(result["depth_mask"]["values"] == 1))
    n_both = int(np.sum(result["suitability_mask"]["values"] == 1))
    print(f"  SST only:    {n_sst}")
    print(f"  Depth only:  {n_depth}")
    print(f"  Both:        {n_both}")

    # --- Areas ---
    print("\n--- Suitable Area ---")
    print(f"  Whole grid:     {result['total_suitable_area_km2']:,.1f} km2")
    print(f"  Inside zones:   {result['zoned_suitable_area_km2']:,.1f} km2")
    print(f"  Outside zones:  {result['unzoned_suitable_area_km2']:,.1f} km2")

    if n_both == 0:
        print("\n  WARNING: No suitable cells. Check thresholds and units.")

    # --- Zones ---
    print("\n--- Zones Ranked by Suitable Area ---")
    table = rank_zones(result["report"], zone_field=ZONE_FIELD)
    print(f"  {'Zone':<28s} {'Area km2':>12s} {'% zone':>8s}")
    for _, row in table.iterrows():
        print(f"  {str(row[ZONE_FIELD]):<28s} {row['suitable_area_km2']:12,.1f} "
              f"{row['pct_suitable']:7.2f}%")


# =============================================================================
# MAIN
# =============================================================================


def main():
    print("=" * 70)
    print("AQUACULTURE SUITABILITY PIPELINE")
    print("=" * 70)

    print("\n[1/4] Loading species thresholds...")
    if USE_CUSTOM_THRESHOLDS:
        species_name = SPECIES_NAME
        temp_range = CUSTOM_TEMP_RANGE_C
        depth_range = CUSTOM_DEPTH_RANGE_M
    else:
        species = load_species(SPECIES_NAME)
        species_name = species["name"]
        temp_range = (species["temp_min_c"], species["temp_max_c"])
        depth_range = (species["depth_min_m"], species["depth_max_m"])
    print(f"      {species_name}: SST {temp_range}, depth {depth_range}")

    print("\n[2/4] Loading input data...")
    data = load_all(
        temperature_paths=SST_PATHS,
        bathymetry_path=BATHYMETRY_PATH,
        zones_path=ZONES_PATH,
        crs=CRS,
        zone_field=ZONE_FIELD,
        verbose=True,
    )

    print("\n[3/4] Running analysis...")
    result = run_suitability_analysis(
        data["sst_stack"],
        data["bathymetry"],
        data["zones"],
        temp_range_c=temp_range,
        depth_range_m=depth_range,
        species_name=species_name,
        zone_field=ZONE_FIELD,
        area_basis=AREA_BASIS,
        sst_units=SST_UNITS,
        bathymetry_is_elevation=BATHYMETRY_IS_ELEVATION,
        verbose=True,
    )

    print_summary(result)

    print("\n[4/4] Saving results...")
    save_results(result, RESULTS_DIR, zone_field=ZONE_FIELD, study_area=STUDY_AREA)
    plot_all(result, save_dir=str(PLOTS_DIR), zone_field=ZONE_FIELD)


if __name__ == "__main__":
    main()
