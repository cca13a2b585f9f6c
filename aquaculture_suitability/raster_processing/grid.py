"""
Raster Layer Helpers
====================

A raster layer is a plain dict::

    {
        'values':    2D float64 array (nodata cells are NaN),
        'transform': affine transform (north-up),
        'crs':       rasterio CRS (or None when undefined),
        'nodata':    nodata value of the source file (informational),
        'name':      layer name,
    }

Extent and resolution are derived from ``transform`` and ``values.shape``.
A raster stack is an ordered dict name → layer whose members all share one
grid (see ``make_stack``).

Also provides per-cell area in km², which is not constant across a
geographic (lat/lon) grid.
"""

import numpy as np
from pyproj import CRS as ProjCRS
from rasterio.crs import CRS
from rasterio.transform import array_bounds, from_origin

from ..config import EARTH_RADIUS_KM, M2_PER_KM2


class GridMismatchError(ValueError):
    """Raised when layers that must share a grid do not."""
    pass


class CRSError(ValueError):
    """Raised when a dataset has no usable coordinate reference system."""
    pass


# =============================================================================
# LAYER CONSTRUCTION
# =============================================================================

def make_layer(values, transform, crs, nodata=None, name=None):
    """
    Build a raster layer dict.

    Args:
        values: 2D array-like of cell values (converted to float64)
        transform: Affine transform of the grid; a south-up grid (positive
            y step) is flipped to north-up
        crs: CRS as anything rasterio understands ("EPSG:4326", CRS, None)
        nodata: Nodata value of the source data; those cells become NaN
        name: Optional layer name

    Returns:
        Raster layer dict
    """
    values = np.array(values, dtype=np.float64)
    if values.ndim != 2:
        raise ValueError(f"Raster values must be 2D, got shape {values.shape}")

    if nodata is not None and not np.isnan(nodata):
        values[values == nodata] = np.nan

    # South-up grid: flip rows so row 0 is the northernmost
    if transform.e > 0 and transform.b == 0 and transform.d == 0:
        values = values[::-1, :].copy()
        top = transform.f + transform.e * values.shape[0]
        transform = from_origin(transform.c, top, transform.a, transform.e)

    return {
        'values': values,
        'transform': transform,
        'crs': CRS.from_user_input(crs) if crs is not None else None,
        'nodata': nodata,
        'name': name,
    }


def with_values(layer, values, name=None):
    """Return a copy of ``layer`` on the same grid carrying new values."""
    values = np.asarray(values, dtype=np.float64)
    if values.shape != layer['values'].shape:
        raise GridMismatchError(
            f"New values shape {values.shape} does not match "
            f"layer shape {layer['values'].shape}"
        )
    return {
        'values': values,
        'transform': layer['transform'],
        'crs': layer['crs'],
        'nodata': layer['nodata'],
        'name': name if name is not None else layer['name'],
    }


def layer_bounds(layer):
    """Return (west, south, east, north) of a layer."""
    height, width = layer['values'].shape
    return array_bounds(height, width, layer['transform'])


def layer_resolution(layer):
    """Return (x_res, y_res) cell size in CRS units (both positive)."""
    t = layer['transform']
    return abs(t.a), abs(t.e)


# =============================================================================
# GRID CHECKS
# =============================================================================

def same_grid(a, b, tolerance=1e-9):
    """True if two layers share shape, transform and CRS."""
    if a['values'].shape != b['values'].shape:
        return False
    if a['crs'] is None or b['crs'] is None:
        if a['crs'] is not b['crs']:
            return False
    elif a['crs'] != b['crs']:
        return False
    return bool(np.allclose(tuple(a['transform'])[:6],
                            tuple(b['transform'])[:6],
                            rtol=0.0, atol=tolerance))


def check_same_grid(layers):
    """
    Raise GridMismatchError unless every layer shares the first layer's grid.

    Args:
        layers: Iterable of raster layer dicts
    """
    layers = list(layers)
    if not layers:
        return
    ref = layers[0]
    for layer in layers[1:]:
        if not same_grid(ref, layer):
            raise GridMismatchError(
                f"Layer '{layer['name']}' is not on the same grid as '{ref['name']}'.\n"
                f"  shape:     {layer['values'].shape} vs {ref['values'].shape}\n"
                f"  crs:       {layer['crs']} vs {ref['crs']}\n"
                f"  transform: {tuple(layer['transform'])[:6]} vs "
                f"{tuple(ref['transform'])[:6]}\n"
                "Harmonize the layers onto a common grid first."
            )


def make_stack(layers):
    """
    Build a raster stack (ordered dict name → layer) from a list of layers.

    Unnamed layers are named ``layer_<i>``. Duplicate names are an error.

    Raises:
        GridMismatchError: If the layers do not share one grid
        ValueError: If the list is empty or names collide
    """
    layers = list(layers)
    if not layers:
        raise ValueError("Cannot build a raster stack from zero layers")

    check_same_grid(layers)

    stack = {}
    for i, layer in enumerate(layers):
        name = layer['name'] or f"layer_{i}"
        if name in stack:
            raise ValueError(f"Duplicate layer name in stack: '{name}'")
        stack[name] = layer
    return stack


# =============================================================================
# CELL AREA
# =============================================================================

def cell_areas_km2(transform, shape, crs):
    """
    Compute the area of every cell of a north-up grid in km².

    Geographic CRS: exact area of each lat/lon cell on a sphere of radius
    EARTH_RADIUS_KM, ``R² · Δλ · |sin φ_top − sin φ_bottom|``, so area
    shrinks toward the poles.

    Projected CRS: constant ``|a · e|`` scaled by the CRS linear unit.

    Args:
        transform: Affine transform of the grid
        shape: (n_rows, n_cols)
        crs: CRS of the grid

    Returns:
        2D float64 array of cell areas (km²)

    Raises:
        ValueError: If the CRS is undefined or the grid is rotated
    """
    if crs is None:
        raise ValueError("Cannot compute cell areas on a grid without a CRS")
    if transform.b != 0 or transform.d != 0:
        raise ValueError("Rotated grids are not supported for cell area calculation")

    n_rows, n_cols = shape
    proj_crs = ProjCRS.from_user_input(CRS.from_user_input(crs).to_wkt())

    if proj_crs.is_geographic:
        rows = np.arange(n_rows + 1)
        edge_lats = np.clip(transform.f + rows * transform.e, -90.0, 90.0)
        sin_edges = np.sin(np.radians(edge_lats))
        band = np.abs(np.diff(sin_edges))  # (n_rows,)
        dlon = np.radians(abs(transform.a))
        row_area = EARTH_RADIUS_KM ** 2 * dlon * band
        return np.repeat(row_area[:, np.newaxis], n_cols, axis=1)

    unit_factor = proj_crs.axis_info[0].unit_conversion_factor  # → metres
    area_m2 = abs(transform.a * transform.e) * unit_factor ** 2
    return np.full((n_rows, n_cols), area_m2 / M2_PER_KM2)
