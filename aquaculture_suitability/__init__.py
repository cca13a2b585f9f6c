"""
Aquaculture Suitability Package
===============================

Find marine areas suitable for aquaculture of a species from sea-surface
temperature and bathymetry rasters, and rank EEZ zones by suitable area.

Modules:
    - raster_processing: load, average, harmonize and reclassify rasters
    - zonal: per-zone suitable area and the zone report
    - pipeline: end-to-end analysis for one species or many
    - species: species threshold database
    - visualization: choropleth and mask maps
    - save_results: CSV / JSON export

Example:
    from aquaculture_suitability import load_all, run_for_species, plot_all

    data = load_all(
        temperature_paths="sst/average_annual_sst_*.tif",
        bathymetry_path="depth.tif",
        zones_path="wc_regions_clean.shp",
    )
    result = run_for_species("Oyster", data)
    print(result['report'][['rgn', 'suitable_area_km2', 'pct_suitable']])
    plot_all(result, save_dir="plots")
"""

__version__ = "1.0.0"
__author__ = "Aquaculture Suitability Project"

# Species thresholds
from .species import load_species, list_available_species, SpeciesNotFoundError

# Raster processing
from .raster_processing import (
    load_all,
    load_raster,
    load_raster_stack,
    load_zones,
    mean_layers,
    kelvin_to_celsius,
    depth_from_elevation,
    harmonize_to_grid,
    classify_range,
    combine_masks,
    cell_areas_km2,
    CRSError,
    GridMismatchError,
    InputFileError,
    NoOverlapError,
)

# Zonal statistics
from .zonal import (
    zonal_suitable_area,
    build_zone_report,
    rank_zones,
    ZoneJoinError,
)

# Pipeline
from .pipeline import (
    run_suitability_analysis,
    run_for_species,
    compare_species,
)

# Export
from .save_results import save_results, save_zone_stats_csv, save_results_json

# Visualization functions
from .visualization import (
    plot_all,
    plot_suitable_area_map,
    plot_percent_suitable_map,
    plot_suitability_mask,
)

__all__ = [
    # Species thresholds
    "load_species",
    "list_available_species",
    "SpeciesNotFoundError",
    # Raster processing
    "load_all",
    "load_raster",
    "load_raster_stack",
    "load_zones",
    "mean_layers",
    "kelvin_to_celsius",
    "depth_from_elevation",
    "harmonize_to_grid",
    "classify_range",
    "combine_masks",
    "cell_areas_km2",
    # Zonal statistics
    "zonal_suitable_area",
    "build_zone_report",
    "rank_zones",
    # Pipeline
    "run_suitability_analysis",
    "run_for_species",
    "compare_species",
    # Export
    "save_results",
    "save_zone_stats_csv",
    "save_results_json",
    # Visualization functions
    "plot_all",
    "plot_suitable_area_map",
    "plot_percent_suitable_map",
    "plot_suitability_mask",
    # Errors
    "CRSError",
    "GridMismatchError",
    "InputFileError",
    "NoOverlapError",
    "ZoneJoinError",
]
