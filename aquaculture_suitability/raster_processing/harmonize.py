"""
Layer Harmonization
===================

Temporal reduction, unit conversion and grid alignment of raster layers.

Includes:
    - mean_layers: cell-wise mean of a raster stack (e.g. yearly SST)
    - kelvin_to_celsius / depth_from_elevation: unit and sign conversion
    - reproject_layer: warp a layer to another CRS
    - crop_to_extent / harmonize_to_grid: put a secondary raster
      (bathymetry) onto the reference grid of another (SST)

All resampling is nearest neighbour, which keeps original cell values
(e.g. depth soundings) instead of blending neighbours.
"""

import math

import numpy as np
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.errors import CRSError as RasterioCRSError
from rasterio.errors import TransformError, WarpOperationError
from rasterio.warp import calculate_default_transform, reproject, transform_bounds
from rasterio.windows import Window
from rasterio.windows import transform as window_transform

from ..config import KELVIN_OFFSET
from .grid import CRSError, check_same_grid, layer_bounds, make_layer, with_values

# Sub-cell tolerance when snapping bounds to cell edges
_EDGE_EPS = 1e-9

# rasterio failures raised when two CRSs cannot be reconciled
_WARP_ERRORS = (RasterioCRSError, TransformError, WarpOperationError)


class NoOverlapError(ValueError):
    """Raised when a raster does not overlap the requested extent."""
    pass


def _warp_error(layer, src_crs, dst_crs, err):
    return CRSError(
        f"Cannot transform layer '{layer['name']}' from {src_crs} to {dst_crs}:\n  {err}"
    )


# =============================================================================
# TEMPORAL REDUCTION AND UNITS
# =============================================================================

def mean_layers(stack, name="mean"):
    """
    Cell-wise mean of all layers in a stack.

    A NaN in any layer makes that cell NaN in the result, so a cell is only
    averaged when every year has a valid reading.

    Args:
        stack: dict name → layer, or list of layers, sharing one grid
        name: Name of the output layer

    Returns:
        Raster layer with the mean values

    Raises:
        ValueError: If the stack is empty
        GridMismatchError: If the layers are on different grids
    """
    layers = list(stack.values()) if isinstance(stack, dict) else list(stack)
    if not layers:
        raise ValueError("Cannot average an empty raster stack")

    check_same_grid(layers)

    cube = np.stack([layer['values'] for layer in layers], axis=0)
    return with_values(layers[0], cube.mean(axis=0), name=name)


def kelvin_to_celsius(layer):
    """Convert a temperature layer from Kelvin to degrees Celsius."""
    return with_values(layer, layer['values'] - KELVIN_OFFSET)


def depth_from_elevation(layer):
    """
    Convert an elevation raster to depth below sea level.

    Bathymetry products such as GEBCO store elevation (negative =
    underwater). Depth is returned positive downward, so a cell at -70 m
    elevation has depth 70 m; land cells get negative depth.
    """
    return with_values(layer, -layer['values'])


# =============================================================================
# REPROJECTION
# =============================================================================

def reproject_layer(layer, dst_crs, resampling=Resampling.nearest):
    """
    Warp a layer to another CRS at the default output resolution.

    Args:
        layer: Raster layer dict
        dst_crs: Target CRS
        resampling: rasterio Resampling method (default: nearest)

    Returns:
        New raster layer in ``dst_crs``

    Raises:
        CRSError: If the layer has no CRS or cannot be transformed to dst_crs
    """
    if layer['crs'] is None:
        raise CRSError(f"Cannot reproject layer '{layer['name']}': CRS is undefined")

    dst_crs = CRS.from_user_input(dst_crs)
    height, width = layer['values'].shape
    west, south, east, north = layer_bounds(layer)

    try:
        dst_transform, dst_width, dst_height = calculate_default_transform(
            layer['crs'], dst_crs, width, height, west, south, east, north,
        )

        destination = np.full((dst_height, dst_width), np.nan, dtype=np.float64)
        reproject(
            source=layer['values'],
            destination=destination,
            src_transform=layer['transform'],
            src_crs=layer['crs'],
            src_nodata=np.nan,
            dst_transform=dst_transform,
            dst_crs=dst_crs,
            dst_nodata=np.nan,
            resampling=resampling,
        )
    except _WARP_ERRORS as e:
        raise _warp_error(layer, layer['crs'], dst_crs, e) from e

    return make_layer(destination, transform=dst_transform, crs=dst_crs,
                      nodata=layer['nodata'], name=layer['name'])


# =============================================================================
# GRID HARMONIZATION
# =============================================================================

def crop_to_extent(layer, bounds):
    """
    Crop a layer to the cells covering ``bounds``.

    Every cell that intersects the bounds is kept, so the crop may extend
    up to one cell beyond them.

    Args:
        layer: Raster layer dict
        bounds: (west, south, east, north) in the layer's CRS

    Returns:
        Cropped raster layer

    Raises:
        NoOverlapError: If the layer and the bounds do not overlap
    """
    west, south, east, north = bounds
    l_west, l_south, l_east, l_north = layer_bounds(layer)

    i_west, i_east = max(west, l_west), min(east, l_east)
    i_south, i_north = max(south, l_south), min(north, l_north)
    if i_west >= i_east or i_south >= i_north:
        raise NoOverlapError(
            f"Layer '{layer['name']}' does not overlap the requested extent.\n"
            f"  layer bounds:     {(l_west, l_south, l_east, l_north)}\n"
            f"  requested bounds: {tuple(bounds)}"
        )

    n_rows, n_cols = layer['values'].shape
    inverse = ~layer['transform']
    col_start, row_start = inverse * (i_west, i_north)
    col_stop, row_stop = inverse * (i_east, i_south)

    col_start = max(0, math.floor(col_start + _EDGE_EPS))
    row_start = max(0, math.floor(row_start + _EDGE_EPS))
    col_stop = min(n_cols, math.ceil(col_stop - _EDGE_EPS))
    row_stop = min(n_rows, math.ceil(row_stop - _EDGE_EPS))

    window = Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
    values = layer['values'][row_start:row_stop, col_start:col_stop]

    return make_layer(values, transform=window_transform(window, layer['transform']),
                      crs=layer['crs'], nodata=layer['nodata'], name=layer['name'])


def harmonize_to_grid(source, reference, resampling=Resampling.nearest):
    """
    Put ``source`` onto the grid of ``reference``.

    Steps:
        1. Crop source to the reference extent (in the source CRS)
        2. Resample the crop onto the reference grid (nearest neighbour)

    Reference cells not covered by the source are NaN.

    Args:
        source: Layer to align (e.g. bathymetry)
        reference: Layer defining the target grid (e.g. mean SST)
        resampling: rasterio Resampling method (default: nearest)

    Returns:
        Layer with source values on the reference grid

    Raises:
        CRSError: If either layer has no CRS or the two CRSs cannot be
            reconciled
        NoOverlapError: If the source does not overlap the reference
    """
    for role, layer in (("source", source), ("reference", reference)):
        if layer['crs'] is None:
            raise CRSError(
                f"Cannot harmonize: {role} layer '{layer['name']}' has no CRS.\n"
                "Both layers need a defined CRS to be aligned."
            )

    ref_bounds = layer_bounds(reference)
    if source['crs'] != reference['crs']:
        try:
            ref_bounds = transform_bounds(reference['crs'], source['crs'], *ref_bounds,
                                          densify_pts=21)
        except _WARP_ERRORS as e:
            raise _warp_error(reference, reference['crs'], source['crs'], e) from e

    cropped = crop_to_extent(source, ref_bounds)

    destination = np.full(reference['values'].shape, np.nan, dtype=np.float64)
    try:
        reproject(
            source=cropped['values'],
            destination=destination,
            src_transform=cropped['transform'],
            src_crs=cropped['crs'],
            src_nodata=np.nan,
            dst_transform=reference['transform'],
            dst_crs=reference['crs'],
            dst_nodata=np.nan,
            resampling=resampling,
        )
    except _WARP_ERRORS as e:
        raise _warp_error(source, source['crs'], reference['crs'], e) from e

    result = with_values(reference, destination, name=source['name'])
    result['nodata'] = source['nodata']
    return result
