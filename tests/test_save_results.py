"""Tests for CSV/JSON export and the plotting smoke path."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from aquaculture_suitability import (
    plot_all,
    run_suitability_analysis,
    save_results,
    save_results_json,
    save_zone_stats_csv,
)
from aquaculture_suitability.save_results import _make_json_serializable
from aquaculture_suitability.visualization import (
    _axis_labels,
    plot_suitability_mask,
    plot_suitable_area_map,
)


@pytest.fixture
def result(sst_stack, bathymetry, two_zones):
    return run_suitability_analysis(
        sst_stack, bathymetry, two_zones,
        temp_range_c=(11.0, 30.0), depth_range_m=(0.0, 70.0),
        species_name="Pacific oyster", verbose=False,
    )


class TestMakeJsonSerializable:

    def test_numpy_types(self):
        data = {"a": np.int64(3), "b": np.float32(1.5), "c": np.bool_(True),
                "d": np.array([1, 2]), "e": (np.float64(2.0), "x")}
        assert _make_json_serializable(data) == {
            "a": 3, "b": 1.5, "c": True, "d": [1, 2], "e": [2.0, "x"],
        }


class TestSaveCsv:

    def test_rows_ordered_by_area_rank(self, result, tmp_path):
        path = tmp_path / "out" / "zones.csv"
        save_zone_stats_csv(result["report"], path)

        table = pd.read_csv(path)
        assert list(table["rgn"]) == ["A", "B"]
        assert "geometry" not in table.columns
        assert table.loc[0, "suitable_area_km2"] == pytest.approx(40.0)
        assert table.loc[0, "pct_suitable"] == pytest.approx(40.0)


class TestSaveJson:

    def test_contents(self, result, tmp_path):
        path = tmp_path / "results.json"
        save_results_json(result, path, study_area="Synthetic")

        with open(path) as f:
            data = json.load(f)

        assert data["metadata"]["species"] == "Pacific oyster"
        assert data["metadata"]["study_area"] == "Synthetic"
        assert data["thresholds"]["temp_range_c"] == [11.0, 30.0]
        assert data["totals"]["total_suitable_area_km2"] == pytest.approx(40.0)
        assert [z["rgn"] for z in data["zones"]] == ["A", "B"]
        assert data["species_info"] is None


class TestSaveResults:

    def test_file_names_from_species(self, result, tmp_path):
        paths = save_results(result, tmp_path)
        assert paths["csv_path"].endswith("pacific_oyster_zone_stats.csv")
        assert paths["json_path"].endswith("pacific_oyster_results.json")
        for path in paths.values():
            assert Path(path).exists()


class TestPlots:

    def test_plot_all_writes_pngs(self, result, tmp_path):
        paths = plot_all(result, save_dir=str(tmp_path / "plots"))
        assert set(paths) == {"suitable_area", "percent_suitable", "suitability_mask"}
        for path in paths.values():
            assert path.endswith(".png")
            assert Path(path).stat().st_size > 0

    def test_projected_axis_labels(self, result):
        fig = plot_suitability_mask(result)
        assert fig.axes[0].get_xlabel() == "Easting (metre)"
        assert fig.axes[0].get_ylabel() == "Northing (metre)"

        fig = plot_suitable_area_map(result)
        assert fig.axes[0].get_xlabel() == "Easting (metre)"

    def test_geographic_axis_labels(self):
        assert _axis_labels("EPSG:4326") == ("Longitude (°)", "Latitude (°)")

    def test_plot_all_without_save_dir(self, result):
        paths = plot_all(result)
        assert all(path is None for path in paths.values())
