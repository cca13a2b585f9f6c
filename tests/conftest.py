"""Shared fixtures: small synthetic grids, zones and files on disk.

The synthetic study area is a 10 x 15 grid of 1 km cells in UTM zone 10N:

    x: 500 000 – 515 000 m   (15 columns)
    y: 4 000 000 – 4 010 000 m (10 rows)

Zone A covers columns 0-9 (100 km²), zone B columns 10-14 (50 km²).
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin
from shapely.geometry import box

from aquaculture_suitability.raster_processing import make_layer, make_stack

UTM = "EPSG:32610"
WEST, NORTH = 500_000.0, 4_010_000.0
N_ROWS, N_COLS = 10, 15


def utm_layer(values, name=None, res=1000.0, origin=(WEST, NORTH), crs=UTM):
    """Raster layer on a north-up UTM grid."""
    return make_layer(values, transform=from_origin(origin[0], origin[1], res, res),
                      crs=crs, name=name)


def write_geotiff(path, values, transform, crs=UTM, nodata=None):
    """Write a single-band float32 GeoTIFF."""
    values = np.asarray(values, dtype=np.float32)
    with rasterio.open(
        path, "w", driver="GTiff",
        height=values.shape[0], width=values.shape[1], count=1,
        dtype="float32", crs=crs, transform=transform, nodata=nodata,
    ) as dst:
        dst.write(values, 1)
    return path


@pytest.fixture
def two_zones():
    """Zones A (100 km²) and B (50 km²) with nominal areas."""
    zone_a = box(WEST, NORTH - 10_000, WEST + 10_000, NORTH)
    zone_b = box(WEST + 10_000, NORTH - 10_000, WEST + 15_000, NORTH)
    return gpd.GeoDataFrame(
        {"rgn": ["A", "B"], "area_km2": [100.0, 50.0]},
        geometry=[zone_a, zone_b],
        crs=UTM,
    )


@pytest.fixture
def forty_cell_mask():
    """Mask with rows 0-3 of zone A suitable (40 km²), everything else NaN."""
    values = np.full((N_ROWS, N_COLS), np.nan)
    values[0:4, 0:10] = 1.0
    return utm_layer(values, name="suitability")


@pytest.fixture
def sst_stack():
    """Two yearly SST layers in Kelvin; mean is 15 °C in rows 0-3, 35 °C below."""
    base = np.full((N_ROWS, N_COLS), 308.15)
    base[0:4, :] = 288.15
    return make_stack([
        utm_layer(base - 1.0, name="sst_2008"),
        utm_layer(base + 1.0, name="sst_2009"),
    ])


@pytest.fixture
def bathymetry():
    """Elevation on a finer 500 m grid overlapping the SST grid on all sides.

    Shallow (-20 m) under zone A, deep (-500 m) under zone B.
    """
    values = np.full((24, 34), -20.0)
    values[:, 22:] = -500.0
    return utm_layer(values, name="bathymetry", res=500.0,
                     origin=(WEST - 1_000, NORTH + 1_000))


@pytest.fixture
def input_files(tmp_path, sst_stack, bathymetry, two_zones):
    """The synthetic study area written to GeoTIFFs and a shapefile."""
    sst_dir = tmp_path / "sst"
    sst_dir.mkdir()
    sst_paths = []
    for name, layer in sst_stack.items():
        sst_paths.append(str(write_geotiff(sst_dir / f"{name}.tif",
                                           layer["values"], layer["transform"])))

    bathy_path = write_geotiff(tmp_path / "depth.tif", bathymetry["values"],
                               bathymetry["transform"])

    zones_path = tmp_path / "zones.shp"
    two_zones.to_file(zones_path)

    return {
        "sst_paths": sst_paths,
        "sst_pattern": str(sst_dir / "*.tif"),
        "bathymetry_path": str(bathy_path),
        "zones_path": str(zones_path),
    }


@pytest.fixture
def species_csv(tmp_path):
    path = tmp_path / "species.csv"
    path.write_text(
        "SPECIES,SCIENTIFIC_NAME,TEMP_MIN_C,TEMP_MAX_C,DEPTH_MIN_M,DEPTH_MAX_M\n"
        "Oyster,Crassostrea gigas,11,30,0,70\n"
        "Deep crab,Testus profundus,11,30,100,1000\n"
    )
    return path
