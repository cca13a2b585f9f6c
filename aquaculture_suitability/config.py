"""
Configuration Constants
========================

Central location for configuration parameters and constants used
throughout the aquaculture suitability analysis.

Module-level constants plus a ``get_data_paths()`` helper that returns
all input and output paths for a given study area.

For species thresholds, see species.py.
"""

from pathlib import Path


# =============================================================================
# DATA PATHS
# =============================================================================

_PACKAGE_DIR = Path(__file__).parent
DATA_DIR = _PACKAGE_DIR / "data"
OUTPUTS_DIR = _PACKAGE_DIR / "outputs"

STUDY_AREAS_DIR = DATA_DIR / "study_areas"
DEFAULT_STUDY_AREA = "West_Coast"

SPECIES_CSV_PATH = str(DATA_DIR / "species_thresholds.csv")


# =============================================================================
# STUDY AREA PATH HELPERS
# =============================================================================


def _find_rasters(raster_dir):
    """Return all .tif/.nc files in a directory, sorted by name."""
    raster_dir = Path(raster_dir)
    matches = sorted(list(raster_dir.glob("*.tif")) + list(raster_dir.glob("*.nc")))
    return [str(p) for p in matches]


def _find_first(directory, pattern):
    """Find the first file matching ``pattern`` in a directory."""
    directory = Path(directory)
    matches = sorted(directory.glob(pattern))
    if matches:
        return str(matches[0])
    return str(directory / pattern)  # fallback pattern for error messages


def get_data_paths(study_area=None):
    """
    Return a dict of all data and output paths for a given study area.

    Input data lives under ``data/study_areas/<area>/``, while generated
    outputs (statistics tables, maps) live under ``outputs/<area>/``.

    Expected input layout::

        <area>/sst/*.tif          annual SST rasters (one per year)
        <area>/bathymetry/*.tif   bathymetry (elevation) raster
        <area>/zones/*.shp        EEZ zone polygons

    Parameters
    ----------
    study_area : str or None
        Name of the folder under ``data/study_areas/``.
        Defaults to ``DEFAULT_STUDY_AREA`` ("West_Coast").

    Returns
    -------
    dict
        Input paths: study_area, area_dir, sst_paths, bathymetry_path,
        zones_path.
        Output paths: output_dir, results_dir, plots_dir.
    """
    area = study_area or DEFAULT_STUDY_AREA
    area_dir = STUDY_AREAS_DIR / area
    output_dir = OUTPUTS_DIR / area
    return {
        # Input data paths
        "study_area": area,
        "area_dir": str(area_dir),
        "sst_paths": _find_rasters(area_dir / "sst"),
        "bathymetry_path": _find_first(area_dir / "bathymetry", "*.tif"),
        "zones_path": _find_first(area_dir / "zones", "*.shp"),
        # Output paths
        "output_dir": str(output_dir),
        "results_dir": str(output_dir / "results"),
        "plots_dir": str(output_dir / "plots"),
    }


# =============================================================================
# PHYSICAL CONSTANTS
# =============================================================================

KELVIN_OFFSET = 273.15
EARTH_RADIUS_KM = 6371.0088  # IUGG mean radius
M2_PER_KM2 = 1_000_000.0


# =============================================================================
# SPATIAL DEFAULTS
# =============================================================================

DEFAULT_CRS = "EPSG:4326"

# NetCDF rasters carry no CRS attribute in many products (e.g. GEBCO)
NETCDF_DEFAULT_CRS = "EPSG:4326"


# =============================================================================
# ZONE ATTRIBUTES
# =============================================================================

ZONE_NAME_FIELD = "rgn"
ZONE_AREA_FIELD = "area_km2"

# Percent-suitable denominator: "grid" (rasterized zone area on the analysis
# grid) or "attribute" (nominal area column on the polygons)
DEFAULT_AREA_BASIS = "grid"


# =============================================================================
# DEFAULT THRESHOLDS (Pacific oyster)
# =============================================================================

DEFAULT_SPECIES = "Oyster"
TEMP_MIN_C = 11.0
TEMP_MAX_C = 30.0
DEPTH_MIN_M = 0.0  # metres below sea level
DEPTH_MAX_M = 70.0


# =============================================================================
# PLOTTING
# =============================================================================

PLOT_DPI = 150
AREA_CMAP = "YlGnBu"
PERCENT_CMAP = "PuBuGn"
