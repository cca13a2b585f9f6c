"""
Raster Processing Module
========================

Load raster layers and turn them into a combined suitability mask.

Pipeline:
    1. load_all()           → SST stack + bathymetry + zone polygons
    2. mean_layers()        → mean SST (then kelvin_to_celsius)
    3. harmonize_to_grid()  → bathymetry on the SST grid (nearest neighbour)
    4. classify_range()     → binary mask per layer (1 / NaN)
    5. combine_masks()      → overall suitability (logical AND)

Example:
    from aquaculture_suitability.raster_processing import (
        load_all, mean_layers, kelvin_to_celsius, depth_from_elevation,
        harmonize_to_grid, classify_range, combine_masks,
    )

    data = load_all("sst/*.tif", "depth.tif", "wc_regions_clean.shp")
    sst = kelvin_to_celsius(mean_layers(data['sst_stack']))
    depth = depth_from_elevation(harmonize_to_grid(data['bathymetry'], sst))
    mask = combine_masks(classify_range(sst, 11, 30), classify_range(depth, 0, 70))
"""

from .grid import (
    CRSError,
    GridMismatchError,
    cell_areas_km2,
    check_same_grid,
    layer_bounds,
    layer_resolution,
    make_layer,
    make_stack,
    same_grid,
    with_values,
)

from .loaders import (
    InputFileError,
    load_all,
    load_raster,
    load_raster_stack,
    load_zones,
)

from .harmonize import (
    NoOverlapError,
    crop_to_extent,
    depth_from_elevation,
    harmonize_to_grid,
    kelvin_to_celsius,
    mean_layers,
    reproject_layer,
)

from .reclassify import (
    classify_range,
    combine_masks,
    reclass_table,
)

__all__ = [
    # Layers and grids
    "make_layer",
    "make_stack",
    "with_values",
    "layer_bounds",
    "layer_resolution",
    "same_grid",
    "check_same_grid",
    "cell_areas_km2",
    # Loading
    "load_all",
    "load_raster",
    "load_raster_stack",
    "load_zones",
    # Harmonization
    "mean_layers",
    "kelvin_to_celsius",
    "depth_from_elevation",
    "reproject_layer",
    "crop_to_extent",
    "harmonize_to_grid",
    # Classification
    "reclass_table",
    "classify_range",
    "combine_masks",
    # Errors
    "CRSError",
    "GridMismatchError",
    "InputFileError",
    "NoOverlapError",
]
