"""
Data Loaders
============

Functions for loading sea-surface-temperature rasters, bathymetry and EEZ
zone polygons for aquaculture suitability analysis.

Main functions:
    - load_raster: Load one GeoTIFF or NetCDF raster into a layer dict
    - load_raster_stack: Load N rasters sharing a grid into a stack
    - load_zones: Load zone polygons with a name attribute
    - load_all: Load and combine all data sources (SST + bathymetry + zones)

Every loader optionally reprojects to a common CRS so downstream stages
work in one coordinate system.

Example:
    from aquaculture_suitability.raster_processing import load_all

    data = load_all(
        temperature_paths="sst/*.tif",
        bathymetry_path="depth.tif",
        zones_path="wc_regions_clean.shp",
        crs="EPSG:4326",
    )
"""

import glob
from pathlib import Path

import numpy as np
import rasterio
from rasterio.crs import CRS
from rasterio.errors import RasterioIOError
from rasterio.transform import from_origin

from ..config import DEFAULT_CRS, NETCDF_DEFAULT_CRS, ZONE_NAME_FIELD
from .grid import CRSError, make_layer, make_stack, layer_resolution
from .harmonize import reproject_layer


NETCDF_SUFFIXES = {".nc", ".nc4", ".cdf"}

_LAT_NAMES = ("lat", "latitude", "y")
_LON_NAMES = ("lon", "longitude", "x")


class InputFileError(FileNotFoundError):
    """Raised when an input file is missing or cannot be read."""
    pass


# =============================================================================
# DEPENDENCY HELPERS
# =============================================================================

def _require_xarray():
    """Get xarray module, raising helpful error if not available."""
    try:
        import xarray as xr
        return xr
    except ImportError:
        raise ImportError(
            "xarray is required for loading NetCDF data.\n\n"
            "Install with:\n"
            "    pip install xarray netcdf4\n\n"
            "Or with conda:\n"
            "    conda install -c conda-forge xarray netcdf4"
        )


def _require_geo():
    """Get geopandas, raising helpful error if not available."""
    try:
        import geopandas as gpd
        return gpd
    except ImportError:
        raise ImportError(
            "geopandas is required for loading zone polygons.\n\n"
            "Install with:\n"
            "    pip install geopandas shapely pyproj\n\n"
            "Or with conda:\n"
            "    conda install -c conda-forge geopandas shapely pyproj"
        )


# =============================================================================
# RASTER LOADERS
# =============================================================================

def _load_geotiff(path, band, name):
    try:
        with rasterio.open(path) as src:
            values = src.read(band)
            return make_layer(
                values,
                transform=src.transform,
                crs=src.crs,
                nodata=src.nodata,
                name=name,
            )
    except (RasterioIOError, IndexError) as e:
        raise InputFileError(f"Could not read raster band {band} from {path}:\n  {e}") from e


def _pick_coord(names, candidates, path):
    for candidate in candidates:
        if candidate in names:
            return candidate
    raise ValueError(
        f"No coordinate named any of {candidates} in {path}\n"
        f"Available coordinates: {sorted(names)}"
    )


def _netcdf_crs(ds):
    """Read a CF grid-mapping CRS if present, else the package default."""
    for var_name in ("crs", "spatial_ref"):
        if var_name in ds.variables:
            attrs = ds[var_name].attrs
            wkt = attrs.get("crs_wkt") or attrs.get("spatial_ref")
            if wkt:
                return CRS.from_wkt(wkt)
    return CRS.from_user_input(NETCDF_DEFAULT_CRS)


def _load_netcdf(path, variable, name):
    """
    Load a 2D lat/lon variable from a NetCDF file.

    Fill values are decoded to NaN by xarray. Latitude is flipped to run
    north → south so the grid is north-up.
    """
    xr = _require_xarray()

    try:
        ds = xr.open_dataset(path)
    except (OSError, ValueError) as e:
        raise InputFileError(f"Could not open NetCDF file {path}:\n  {e}") from e

    try:
        if variable is None:
            candidates = [v for v in ds.data_vars if ds[v].ndim >= 2]
            if not candidates:
                raise ValueError(f"No 2D data variable found in {path}")
            variable = candidates[0]
        elif variable not in ds.data_vars:
            raise ValueError(
                f"Variable '{variable}' not found in {path}\n"
                f"Available variables: {sorted(ds.data_vars)}"
            )

        da = ds[variable].squeeze(drop=True)
        if da.ndim != 2:
            raise ValueError(
                f"Variable '{variable}' in {path} has {da.ndim} dimensions after "
                "squeezing; reduce it to a single 2D slice first."
            )

        lat_name = _pick_coord(set(da.dims), _LAT_NAMES, path)
        lon_name = _pick_coord(set(da.dims), _LON_NAMES, path)
        da = da.transpose(lat_name, lon_name)

        lats = da[lat_name].values.astype(np.float64)
        lons = da[lon_name].values.astype(np.float64)
        values = da.values.astype(np.float64)
        crs = _netcdf_crs(ds)
    finally:
        ds.close()

    if len(lats) < 2 or len(lons) < 2:
        raise ValueError(f"Grid in {path} must be at least 2x2 to infer resolution")

    # North-up: first row is the northernmost
    if lats[0] < lats[-1]:
        lats = lats[::-1]
        values = values[::-1, :]

    dx = (lons[-1] - lons[0]) / (len(lons) - 1)
    dy = (lats[0] - lats[-1]) / (len(lats) - 1)
    transform = from_origin(lons[0] - dx / 2, lats[0] + dy / 2, dx, dy)

    return make_layer(values, transform=transform, crs=crs, nodata=None,
                      name=name or variable)


def load_raster(file_path, dst_crs=None, band=1, variable=None, name=None):
    """
    Load a single-band raster into a layer dict.

    GeoTIFFs (and anything else GDAL reads) go through rasterio; NetCDF
    files go through xarray. Nodata cells become NaN.

    Args:
        file_path: Path to the raster file
        dst_crs: CRS to reproject to (nearest neighbour); None keeps native CRS
        band: Band index for rasterio sources (1-based)
        variable: Variable name for NetCDF sources (default: first 2D variable)
        name: Layer name (default: file stem)

    Returns:
        Raster layer dict (see grid.py)

    Raises:
        InputFileError: If the file is missing or unreadable
        CRSError: If the raster has no CRS
    """
    path = Path(file_path)
    if not path.exists():
        raise InputFileError(f"Raster file not found: {path}")

    name = name or path.stem
    if path.suffix.lower() in NETCDF_SUFFIXES:
        layer = _load_netcdf(path, variable, name)
    else:
        layer = _load_geotiff(path, band, name)

    if layer['crs'] is None:
        raise CRSError(
            f"Raster has no coordinate reference system: {path}\n"
            "Assign one (e.g. gdal_edit.py -a_srs EPSG:4326) before loading."
        )

    if dst_crs is not None and layer['crs'] != CRS.from_user_input(dst_crs):
        layer = reproject_layer(layer, dst_crs)

    return layer


def _expand_paths(paths):
    if isinstance(paths, (str, Path)):
        pattern = str(paths)
        files = sorted(glob.glob(pattern))
        if not files:
            raise InputFileError(f"No files found matching pattern: {pattern}")
        return files
    return [str(p) for p in paths]


def load_raster_stack(paths, dst_crs=None, verbose=False):
    """
    Load temporally distinct rasters into a raster stack.

    Args:
        paths: List of raster paths, or a glob pattern (e.g. "sst/*.tif")
        dst_crs: CRS to reproject every layer to
        verbose: Print one line per layer (default: False)

    Returns:
        dict name → layer, ordered as ``paths`` (sorted when a pattern)

    Raises:
        InputFileError: If no files are given/matched or one is unreadable
        GridMismatchError: If the layers do not share one grid
    """
    files = _expand_paths(paths)
    if not files:
        raise InputFileError("No raster paths given for stack")

    layers = []
    for f in files:
        layer = load_raster(f, dst_crs=dst_crs)
        if verbose:
            rows, cols = layer['values'].shape
            print(f"    {layer['name']}: {rows}x{cols}, crs={layer['crs']}")
        layers.append(layer)

    return make_stack(layers)


# =============================================================================
# ZONE LOADER
# =============================================================================

def load_zones(file_path, dst_crs=None, zone_field=ZONE_NAME_FIELD):
    """
    Load zone polygons (e.g. EEZ regions).

    Args:
        file_path: Path to a vector file readable by geopandas
        dst_crs: CRS to reproject to; None keeps native CRS
        zone_field: Column holding the zone name

    Returns:
        GeoDataFrame of zone polygons

    Raises:
        InputFileError: If the file is missing or unreadable
        CRSError: If the file has no CRS
        ValueError: If ``zone_field`` is not a column
    """
    path = Path(file_path)
    if not path.exists():
        raise InputFileError(f"Zone file not found: {path}")

    gpd = _require_geo()

    try:
        zones = gpd.read_file(path)
    except (OSError, RuntimeError, ValueError) as e:
        raise InputFileError(f"Could not read zone file {path}:\n  {e}") from e

    if zones.crs is None:
        raise CRSError(
            f"Zone file has no coordinate reference system: {path}\n"
            "Check that the .prj sidecar file is present."
        )

    if zone_field not in zones.columns:
        raise ValueError(
            f"Zone field '{zone_field}' not found in {path}\n"
            f"Available columns: {list(zones.columns)}"
        )

    if dst_crs is not None:
        zones = zones.to_crs(dst_crs)

    return zones


# =============================================================================
# ORCHESTRATOR
# =============================================================================

def load_all(temperature_paths, bathymetry_path, zones_path,
             crs=DEFAULT_CRS, zone_field=ZONE_NAME_FIELD, verbose=True):
    """
    Load all data sources into a single dict.

    This is the main entry point for loading raw inputs. Every dataset is
    reprojected to ``crs``. The bathymetry raster keeps its own grid; it
    is put on the SST grid later by ``harmonize_to_grid``.

    Args:
        temperature_paths: SST raster paths or glob pattern (one per year)
        bathymetry_path: Path to the bathymetry (elevation) raster
        zones_path: Path to the zone polygon file
        crs: Common CRS for every dataset (default: EPSG:4326)
        zone_field: Zone name column
        verbose: Print progress messages (default: True)

    Returns:
        dict with:
            - sst_stack: dict name → SST layer (native units)
            - bathymetry: bathymetry layer (elevation, native grid)
            - zones: GeoDataFrame of zone polygons
            - crs: the common CRS
            - n_sst_layers: number of SST layers
    """
    # Step 1: SST layers
    if verbose:
        print("Loading SST rasters...")

    sst_stack = load_raster_stack(temperature_paths, dst_crs=crs, verbose=verbose)
    first = next(iter(sst_stack.values()))

    if verbose:
        rows, cols = first['values'].shape
        print(f"  Loaded: {len(sst_stack)} layers, {rows}x{cols} grid, "
              f"res={layer_resolution(first)}")

    # Step 2: Bathymetry
    if verbose:
        print("Loading bathymetry...")

    bathymetry = load_raster(bathymetry_path, dst_crs=crs, name="bathymetry")

    if verbose:
        rows, cols = bathymetry['values'].shape
        print(f"  Loaded: {rows}x{cols} grid, res={layer_resolution(bathymetry)}")

    # Step 3: Zones
    if verbose:
        print("Loading zone polygons...")

    zones = load_zones(zones_path, dst_crs=crs, zone_field=zone_field)

    if verbose:
        print(f"  Loaded: {len(zones)} zones ({zone_field})")

    return {
        'sst_stack': sst_stack,
        'bathymetry': bathymetry,
        'zones': zones,
        'crs': CRS.from_user_input(crs),
        'n_sst_layers': len(sst_stack),
    }
