#!/usr/bin/env python3
"""
Species Comparison
==================

Runs the suitability pipeline for every species in
data/species_thresholds.csv on one study area and prints a summary table
of suitable area per species, plus the best zone for each.

Inputs are loaded once and reused for every species.

Usage:
    python scripts/compare_species.py
"""

import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from aquaculture_suitability import (
    list_available_species,
    load_all,
    rank_zones,
    run_for_species,
    save_results,
)
from aquaculture_suitability.config import DEFAULT_CRS, ZONE_NAME_FIELD, get_data_paths

# =============================================================================
# CONFIGURATION (same inputs as run_suitability_pipeline.py)
# =============================================================================

STUDY_AREA = "West_Coast"
CRS = DEFAULT_CRS
ZONE_FIELD = ZONE_NAME_FIELD
SST_UNITS = "kelvin"
SAVE_TABLES = True


def run_species(name, data):
    """Run one species, return summary dict."""
    t0 = time.time()

    result = run_for_species(name, data, zone_field=ZONE_FIELD,
                             sst_units=SST_UNITS, verbose=False)
    best = rank_zones(result["report"], zone_field=ZONE_FIELD).iloc[0]

    return {
        "species": result["species"],
        "result": result,
        "total_km2": result["zoned_suitable_area_km2"],
        "best_zone": best[ZONE_FIELD],
        "best_zone_km2": float(best["suitable_area_km2"]),
        "best_zone_pct": float(best["pct_suitable"]),
        "time_s": time.time() - t0,
    }


def main():
    print("=" * 90)
    print("SPECIES COMPARISON")
    print("=" * 90)

    paths = get_data_paths(STUDY_AREA)
    data = load_all(
        temperature_paths=paths["sst_paths"],
        bathymetry_path=paths["bathymetry_path"],
        zones_path=paths["zones_path"],
        crs=CRS,
        zone_field=ZONE_FIELD,
        verbose=True,
    )

    species_names = list_available_species()
    print(f"\nFound {len(species_names)} species: {', '.join(species_names)}\n")

    summaries = []
    for i, name in enumerate(species_names):
        print(f"[{i+1:2d}/{len(species_names)}] {name}...", end=" ", flush=True)
        s = run_species(name, data)
        summaries.append(s)
        print(f"{s['total_km2']:10,.1f} km2 suitable in {s['time_s']:.1f}s")

        if SAVE_TABLES:
            save_results(s["result"], paths["results_dir"], zone_field=ZONE_FIELD,
                         study_area=STUDY_AREA)

    # Summary table
    print("\n" + "=" * 90)
    print("SUMMARY TABLE")
    print("=" * 90)
    header = (f"{'Species':<22s} {'Suitable km2':>14s} {'Best zone':<28s} "
              f"{'Zone km2':>10s} {'Zone %':>7s}")
    print(header)
    print("-" * 90)

    for s in sorted(summaries, key=lambda s: s["total_km2"], reverse=True):
        tag = "" if s["total_km2"] > 0 else " *"
        print(f"{s['species']:<22s} {s['total_km2']:14,.1f} {str(s['best_zone']):<28s} "
              f"{s['best_zone_km2']:10,.1f} {s['best_zone_pct']:6.2f}%{tag}")

    print("-" * 90)
    print("* = no suitable area")


if __name__ == "__main__":
    main()
