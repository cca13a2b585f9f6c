"""
Suitability Pipeline
====================

Orchestrates the full analysis for one species:

    1. mean_layers()          → mean SST over all years
    2. kelvin_to_celsius()    → SST in °C
    3. harmonize_to_grid()    → bathymetry on the SST grid
    4. depth_from_elevation() → positive depth below sea level
    5. classify_range()       → SST mask and depth mask
    6. combine_masks()        → overall suitability
    7. zonal_suitable_area()  → suitable area per zone
    8. build_zone_report()    → % suitable and ranks per zone

Datasets are passed in explicitly (see raster_processing.load_all); nothing
is cached between calls, so the same inputs always give the same result.
Plotting lives in visualization.py and only consumes the returned dict.

Example:
    from aquaculture_suitability import load_all, run_for_species

    data = load_all("sst/*.tif", "depth.tif", "wc_regions_clean.shp")
    result = run_for_species("Oyster", data)
    print(result['report'][['rgn', 'suitable_area_km2', 'pct_suitable']])
"""

import pandas as pd

from .config import (
    DEFAULT_AREA_BASIS,
    ZONE_AREA_FIELD,
    ZONE_NAME_FIELD,
)
from .raster_processing import (
    classify_range,
    combine_masks,
    depth_from_elevation,
    harmonize_to_grid,
    kelvin_to_celsius,
    mean_layers,
)
from .species import list_available_species, load_species
from .zonal import build_zone_report, dissolve_zones, rank_zones, zonal_suitable_area

SST_UNITS = ("kelvin", "celsius")


def run_suitability_analysis(sst_stack, bathymetry, zones,
                             temp_range_c, depth_range_m,
                             species_name="",
                             zone_field=ZONE_NAME_FIELD,
                             area_field=ZONE_AREA_FIELD,
                             area_basis=DEFAULT_AREA_BASIS,
                             sst_units="kelvin",
                             bathymetry_is_elevation=True,
                             verbose=True):
    """
    Run the suitability analysis for one set of thresholds.

    Args:
        sst_stack: dict name → SST layer (or list of layers) on one grid
        bathymetry: Bathymetry layer on any grid overlapping the SST grid
        zones: GeoDataFrame of zone polygons; rows sharing a zone name are
            dissolved into one zone
        temp_range_c: (min, max) suitable mean SST in °C
        depth_range_m: (min, max) suitable depth in metres below sea level
        species_name: Display label only
        zone_field: Zone name column
        area_field: Nominal zone area column (km²)
        area_basis: "grid" or "attribute" percent denominator
        sst_units: Units of the SST rasters, "kelvin" or "celsius"
        bathymetry_is_elevation: True if bathymetry is elevation (negative
            underwater, GEBCO convention); False if it is already depth
        verbose: Print progress messages (default: True)

    Returns:
        dict with:
            - species: species label
            - temp_range_c, depth_range_m: thresholds used
            - mean_sst_c: mean SST layer (°C)
            - depth_m: depth layer on the SST grid
            - sst_mask, depth_mask, suitability_mask: 1/NaN layers
            - stats: per-zone DataFrame from zonal_suitable_area
            - report: GeoDataFrame from build_zone_report
            - total_suitable_area_km2, zoned_suitable_area_km2,
              unzoned_suitable_area_km2: grid-wide aggregates
    """
    if sst_units not in SST_UNITS:
        raise ValueError(f"sst_units must be one of {SST_UNITS}, got '{sst_units}'")

    label = species_name or "unnamed species"
    if verbose:
        print(f"Running suitability analysis for {label}...")
        print(f"  SST {temp_range_c[0]}-{temp_range_c[1]} C, "
              f"depth {depth_range_m[0]}-{depth_range_m[1]} m")

    # Stage 1-2: temporal mean, units
    mean_sst = mean_layers(sst_stack, name="mean_sst")
    if sst_units == "kelvin":
        mean_sst = kelvin_to_celsius(mean_sst)

    # Stage 3-4: bathymetry onto the SST grid
    depth = harmonize_to_grid(bathymetry, mean_sst)
    if bathymetry_is_elevation:
        depth = depth_from_elevation(depth)
    depth['name'] = "depth_m"

    if verbose:
        rows, cols = mean_sst['values'].shape
        print(f"  Harmonized bathymetry onto {rows}x{cols} SST grid")

    # Stage 5-6: reclassify and combine
    sst_mask = classify_range(mean_sst, *temp_range_c)
    depth_mask = classify_range(depth, *depth_range_m)
    suitability = combine_masks(sst_mask, depth_mask, name="suitability")

    if verbose:
        n_sst = int((sst_mask['values'] == 1).sum())
        n_depth = int((depth_mask['values'] == 1).sum())
        n_both = int((suitability['values'] == 1).sum())
        print(f"  Suitable cells: SST={n_sst}, depth={n_depth}, both={n_both}")

    # Stage 7-8: zonal statistics and report
    zones = dissolve_zones(zones, zone_field=zone_field, area_field=area_field)
    zonal = zonal_suitable_area(zones, suitability, zone_field=zone_field,
                                verbose=verbose)
    report = build_zone_report(zones, zonal['stats'], zone_field=zone_field,
                               area_field=area_field, area_basis=area_basis)

    if verbose and len(report):
        top = rank_zones(report, zone_field=zone_field).iloc[0]
        print(f"  Top zone by area: {top[zone_field]} "
              f"({top['suitable_area_km2']:,.1f} km2, {top['pct_suitable']:.2f}%)")

    return {
        'species': species_name,
        'temp_range_c': tuple(temp_range_c),
        'depth_range_m': tuple(depth_range_m),
        'mean_sst_c': mean_sst,
        'depth_m': depth,
        'sst_mask': sst_mask,
        'depth_mask': depth_mask,
        'suitability_mask': suitability,
        'stats': zonal['stats'],
        'report': report,
        'total_suitable_area_km2': zonal['total_suitable_area_km2'],
        'zoned_suitable_area_km2': zonal['zoned_suitable_area_km2'],
        'unzoned_suitable_area_km2': zonal['unzoned_suitable_area_km2'],
    }


def run_for_species(species_name, data, species_csv=None, **kwargs):
    """
    Run the analysis with thresholds looked up in the species database.

    Args:
        species_name: Species name in the species CSV
        data: dict from load_all() (sst_stack, bathymetry, zones)
        species_csv: Optional path to a species thresholds CSV
        **kwargs: Passed to run_suitability_analysis

    Returns:
        dict from run_suitability_analysis, with 'species_info' added
    """
    species = load_species(species_name, csv_path=species_csv)

    result = run_suitability_analysis(
        data['sst_stack'],
        data['bathymetry'],
        data['zones'],
        temp_range_c=(species['temp_min_c'], species['temp_max_c']),
        depth_range_m=(species['depth_min_m'], species['depth_max_m']),
        species_name=species['name'],
        **kwargs,
    )
    result['species_info'] = species
    return result


def compare_species(data, species_names=None, species_csv=None,
                    zone_field=ZONE_NAME_FIELD, verbose=True, **kwargs):
    """
    Run every species and collect per-zone results in one table.

    Args:
        data: dict from load_all()
        species_names: Species to run (default: all in the database)
        species_csv: Optional path to a species thresholds CSV
        zone_field: Zone name column
        verbose: Print progress messages (default: True)
        **kwargs: Passed to run_suitability_analysis

    Returns:
        DataFrame with columns species, <zone_field>, suitable_area_km2,
        zone_area_km2, pct_suitable, rank_area, rank_pct
    """
    if species_names is None:
        species_names = list_available_species(csv_path=species_csv)

    frames = []
    for name in species_names:
        result = run_for_species(name, data, species_csv=species_csv,
                                 zone_field=zone_field, verbose=verbose, **kwargs)
        table = rank_zones(result['report'], zone_field=zone_field)
        table.insert(0, "species", result['species'])
        frames.append(table)

    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)
