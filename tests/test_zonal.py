"""Tests for zonal aggregation of suitable area and the zone report.

The fixtures place zone A (100 km²) and zone B (50 km²) on a grid of
1 km² cells; the mask marks 40 cells of zone A suitable.
"""

from __future__ import annotations

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from conftest import N_COLS, N_ROWS, NORTH, WEST, utm_layer
from shapely.geometry import box

from aquaculture_suitability.raster_processing import CRSError
from aquaculture_suitability.zonal import (
    ZoneJoinError,
    build_zone_report,
    dissolve_zones,
    rank_zones,
    rasterize_zones,
    zonal_suitable_area,
)


@pytest.fixture
def split_zones(two_zones):
    """Zone A stored as two polygon rows (60 + 40 km²) followed by zone B."""
    north_a = box(WEST, NORTH - 6_000, WEST + 10_000, NORTH)
    south_a = box(WEST, NORTH - 10_000, WEST + 10_000, NORTH - 6_000)
    return gpd.GeoDataFrame(
        {"rgn": ["A", "B", "A"], "area_km2": [60.0, 50.0, 40.0]},
        geometry=[north_a, two_zones.geometry.iloc[1], south_a],
        crs="EPSG:32610",
    )


# =============================================================================
# dissolve_zones
# =============================================================================


class TestDissolveZones:

    def test_unique_names_untouched(self, two_zones):
        assert dissolve_zones(two_zones) is two_zones

    def test_parts_merged_in_first_appearance_order(self, split_zones):
        dissolved = dissolve_zones(split_zones)
        assert list(dissolved["rgn"]) == ["A", "B"]
        assert list(dissolved["area_km2"]) == [100.0, 50.0]
        assert dissolved.geometry.iloc[0].area == pytest.approx(100_000_000.0)

    def test_without_area_column(self, split_zones):
        dissolved = dissolve_zones(split_zones.drop(columns="area_km2"))
        assert list(dissolved["rgn"]) == ["A", "B"]


# =============================================================================
# rasterize_zones
# =============================================================================


class TestRasterizeZones:

    def test_ids_follow_row_order(self, two_zones, forty_cell_mask):
        ids = rasterize_zones(two_zones, forty_cell_mask)
        assert ids.dtype == np.int32
        assert (ids[:, :10] == 1).all()
        assert (ids[:, 10:] == 2).all()

    def test_cells_outside_zones_are_zero(self, forty_cell_mask):
        zones = gpd.GeoDataFrame({"rgn": ["A"]},
                                 geometry=[box(WEST, NORTH - 5_000, WEST + 5_000, NORTH)],
                                 crs="EPSG:32610")
        ids = rasterize_zones(zones, forty_cell_mask)
        assert ids.sum() == 25
        assert (ids[5:, :] == 0).all()

    def test_no_geometries(self, forty_cell_mask):
        zones = gpd.GeoDataFrame({"rgn": []}, geometry=[], crs="EPSG:32610")
        ids = rasterize_zones(zones, forty_cell_mask)
        assert ids.shape == (N_ROWS, N_COLS)
        assert not ids.any()


# =============================================================================
# zonal_suitable_area
# =============================================================================


class TestZonalSuitableArea:

    def test_two_zone_example(self, two_zones, forty_cell_mask):
        result = zonal_suitable_area(two_zones, forty_cell_mask)
        stats = result["stats"].set_index("rgn")

        assert stats.loc["A", "suitable_cells"] == 40
        assert stats.loc["A", "suitable_area_km2"] == pytest.approx(40.0)
        assert stats.loc["A", "zone_area_km2"] == pytest.approx(100.0)
        assert stats.loc["A", "pct_suitable"] == pytest.approx(40.0)

        assert stats.loc["B", "suitable_cells"] == 0
        assert stats.loc["B", "suitable_area_km2"] == 0.0
        assert stats.loc["B", "zone_area_km2"] == pytest.approx(50.0)
        assert stats.loc["B", "pct_suitable"] == 0.0

    def test_one_row_per_zone_in_input_order(self, two_zones, forty_cell_mask):
        stats = zonal_suitable_area(two_zones, forty_cell_mask)["stats"]
        assert list(stats["rgn"]) == ["A", "B"]
        assert list(stats["zone_id"]) == [1, 2]

    def test_totals(self, two_zones, forty_cell_mask):
        result = zonal_suitable_area(two_zones, forty_cell_mask)
        assert result["total_suitable_area_km2"] == pytest.approx(40.0)
        assert result["zoned_suitable_area_km2"] == pytest.approx(40.0)
        assert result["unzoned_suitable_area_km2"] == pytest.approx(0.0)

    def test_suitable_area_outside_zones(self, two_zones):
        values = np.full((N_ROWS, N_COLS), np.nan)
        values[0:4, :] = 1.0
        mask = utm_layer(values)
        zone_a = two_zones[two_zones["rgn"] == "A"]

        result = zonal_suitable_area(zone_a, mask)

        assert result["total_suitable_area_km2"] == pytest.approx(60.0)
        assert result["zoned_suitable_area_km2"] == pytest.approx(40.0)
        assert result["unzoned_suitable_area_km2"] == pytest.approx(20.0)
        assert result["stats"]["suitable_area_km2"].sum() <= result["total_suitable_area_km2"]

    def test_zone_split_across_rows_counted_once(self, split_zones, forty_cell_mask):
        stats = zonal_suitable_area(split_zones, forty_cell_mask)["stats"]
        assert list(stats["rgn"]) == ["A", "B"]
        row = stats.set_index("rgn").loc["A"]
        assert row["suitable_area_km2"] == pytest.approx(40.0)
        assert row["zone_area_km2"] == pytest.approx(100.0)
        assert row["pct_suitable"] == pytest.approx(40.0)

    def test_zone_off_grid_kept_with_zeros(self, two_zones, forty_cell_mask):
        far = gpd.GeoDataFrame({"rgn": ["Far"], "area_km2": [10.0]},
                               geometry=[box(900_000, 3_000_000, 901_000, 3_001_000)],
                               crs="EPSG:32610")
        zones = pd.concat([two_zones, far], ignore_index=True)

        stats = zonal_suitable_area(zones, forty_cell_mask)["stats"].set_index("rgn")

        assert stats.loc["Far", "zone_cells"] == 0
        assert stats.loc["Far", "suitable_area_km2"] == 0.0
        assert stats.loc["Far", "pct_suitable"] == 0.0

    def test_zones_in_other_crs_are_reprojected(self, two_zones, forty_cell_mask):
        result = zonal_suitable_area(two_zones.to_crs("EPSG:4326"), forty_cell_mask)
        stats = result["stats"].set_index("rgn")
        assert stats.loc["A", "suitable_area_km2"] == pytest.approx(40.0)
        assert stats.loc["B", "zone_area_km2"] == pytest.approx(50.0)

    def test_empty_mask(self, two_zones):
        mask = utm_layer(np.full((N_ROWS, N_COLS), np.nan))
        result = zonal_suitable_area(two_zones, mask)
        assert (result["stats"]["suitable_area_km2"] == 0).all()
        assert result["total_suitable_area_km2"] == 0.0

    def test_zone_ids_layer(self, two_zones, forty_cell_mask):
        zone_ids = zonal_suitable_area(two_zones, forty_cell_mask)["zone_ids"]
        assert zone_ids["transform"] == forty_cell_mask["transform"]
        assert zone_ids["values"][0, 0] == 1.0
        assert zone_ids["values"][0, 14] == 2.0

    def test_missing_zone_field(self, two_zones, forty_cell_mask):
        with pytest.raises(ValueError, match="region"):
            zonal_suitable_area(two_zones, forty_cell_mask, zone_field="region")

    def test_mask_without_crs(self, two_zones):
        mask = utm_layer(np.ones((N_ROWS, N_COLS)), crs=None)
        with pytest.raises(CRSError):
            zonal_suitable_area(two_zones, mask)

    def test_zones_without_crs(self, two_zones, forty_cell_mask):
        zones = gpd.GeoDataFrame({"rgn": two_zones["rgn"]}, geometry=list(two_zones.geometry))
        with pytest.raises(CRSError):
            zonal_suitable_area(zones, forty_cell_mask)


# =============================================================================
# build_zone_report / rank_zones
# =============================================================================


@pytest.fixture
def stats(two_zones, forty_cell_mask):
    return zonal_suitable_area(two_zones, forty_cell_mask)["stats"]


class TestBuildZoneReport:

    def test_joins_onto_polygons(self, two_zones, stats):
        report = build_zone_report(two_zones, stats)
        assert isinstance(report, gpd.GeoDataFrame)
        assert len(report) == 2
        row = report.set_index("rgn").loc["A"]
        assert row["suitable_area_km2"] == pytest.approx(40.0)
        assert row["pct_suitable"] == pytest.approx(40.0)
        assert row["nominal_area_km2"] == 100.0

    def test_ranks(self, two_zones, stats):
        report = build_zone_report(two_zones, stats).set_index("rgn")
        assert report.loc["A", "rank_area"] == 1
        assert report.loc["B", "rank_area"] == 2
        assert report.loc["A", "rank_pct"] == 1

    def test_zone_missing_from_stats_gets_zero(self, two_zones, stats):
        report = build_zone_report(two_zones, stats[stats["rgn"] == "A"]).set_index("rgn")
        assert report.loc["B", "suitable_area_km2"] == 0.0
        assert report.loc["B", "pct_suitable"] == 0.0
        assert report.loc["B", "suitable_cells"] == 0

    def test_attribute_basis(self, two_zones, stats):
        zones = two_zones.copy()
        zones["area_km2"] = [80.0, 50.0]
        report = build_zone_report(zones, stats, area_basis="attribute").set_index("rgn")
        assert report.loc["A", "pct_suitable"] == pytest.approx(50.0)

    def test_percent_over_100_warns(self, two_zones, stats):
        zones = two_zones.copy()
        zones["area_km2"] = [20.0, 50.0]
        with pytest.warns(UserWarning, match="exceeds 100%"):
            report = build_zone_report(zones, stats, area_basis="attribute")
        assert report.set_index("rgn").loc["A", "pct_suitable"] == pytest.approx(200.0)

    def test_unknown_zone_in_stats(self, two_zones, stats):
        extra = pd.concat([stats, pd.DataFrame({"rgn": ["Z"], "suitable_area_km2": [1.0]})],
                          ignore_index=True)
        with pytest.raises(ZoneJoinError, match="Z"):
            build_zone_report(two_zones, extra)

    def test_duplicate_zone_names(self, two_zones, stats):
        zones = two_zones.copy()
        zones["rgn"] = ["A", "A"]
        with pytest.raises(ZoneJoinError, match="Duplicate"):
            build_zone_report(zones, stats[stats["rgn"] == "A"])

    def test_unknown_area_basis(self, two_zones, stats):
        with pytest.raises(ValueError, match="area_basis"):
            build_zone_report(two_zones, stats, area_basis="polygon")

    def test_attribute_basis_without_column(self, two_zones, stats):
        with pytest.raises(ValueError, match="area_km2"):
            build_zone_report(two_zones.drop(columns="area_km2"), stats,
                              area_basis="attribute")


class TestRankZones:

    def test_sorted_by_area(self, two_zones, stats):
        table = rank_zones(build_zone_report(two_zones, stats))
        assert list(table["rgn"]) == ["A", "B"]
        assert "geometry" not in table.columns

    def test_ties_broken_by_name(self, two_zones):
        stats = pd.DataFrame({"rgn": ["B", "A"], "suitable_area_km2": [5.0, 5.0],
                              "zone_area_km2": [10.0, 10.0]})
        table = rank_zones(build_zone_report(two_zones, stats))
        assert list(table["rgn"]) == ["A", "B"]
        assert list(table["rank_area"]) == [1, 1]

    def test_by_percent(self, two_zones):
        stats = pd.DataFrame({"rgn": ["A", "B"], "suitable_area_km2": [30.0, 20.0],
                              "zone_area_km2": [100.0, 50.0]})
        table = rank_zones(build_zone_report(two_zones, stats), by="pct_suitable")
        assert list(table["rgn"]) == ["B", "A"]

    def test_bad_column(self, two_zones, stats):
        with pytest.raises(ValueError):
            rank_zones(build_zone_report(two_zones, stats), by="zone_area_km2")
