"""
Save Suitability Results
========================

Exports zone statistics to CSV and JSON formats.

- CSV: Flat table with one row per zone
- JSON: Thresholds, grid-wide aggregates and per-zone results
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pandas as pd

from .config import ZONE_NAME_FIELD

CSV_COLUMNS = [
    "suitable_cells",
    "suitable_area_km2",
    "zone_area_km2",
    "nominal_area_km2",
    "pct_suitable",
    "rank_area",
    "rank_pct",
]


def _make_json_serializable(obj):
    """Recursively convert numpy types to native Python types for JSON."""
    if isinstance(obj, dict):
        return {k: _make_json_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_make_json_serializable(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, (np.bool_,)):
        return bool(obj)
    return obj


def _slug(text):
    return "_".join(str(text).lower().split()) or "species"


def zone_table(report, zone_field=ZONE_NAME_FIELD):
    """Report columns worth exporting, as a plain DataFrame (no geometry)."""
    columns = [zone_field] + [c for c in CSV_COLUMNS if c in report.columns]
    return pd.DataFrame(report[columns]).sort_values("rank_area", kind="stable")


def save_zone_stats_csv(report, output_path, zone_field=ZONE_NAME_FIELD):
    """
    Save the per-zone table to CSV, ordered by suitable area rank.

    Parameters
    ----------
    report : GeoDataFrame
        Output of ``build_zone_report()``.
    output_path : str or Path
        Destination CSV file path.
    zone_field : str
        Zone name column.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    zone_table(report, zone_field).to_csv(output_path, index=False, float_format="%.4f")

    print(f"      Saved CSV: {output_path}")


def save_results_json(result, output_path, zone_field=ZONE_NAME_FIELD, study_area=None):
    """
    Save thresholds, aggregates and per-zone results to a JSON file.

    Parameters
    ----------
    result : dict
        Output from ``run_suitability_analysis()`` or ``run_for_species()``.
    output_path : str or Path
        Destination JSON file path.
    zone_field : str
        Zone name column.
    study_area : str or None
        Study area name (e.g. "West_Coast").
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    zones = zone_table(result["report"], zone_field).to_dict(orient="records")

    data = {
        "metadata": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "study_area": study_area,
            "species": result["species"],
        },
        "thresholds": {
            "temp_range_c": result["temp_range_c"],
            "depth_range_m": result["depth_range_m"],
        },
        "species_info": result.get("species_info"),
        "totals": {
            "total_suitable_area_km2": result["total_suitable_area_km2"],
            "zoned_suitable_area_km2": result["zoned_suitable_area_km2"],
            "unzoned_suitable_area_km2": result["unzoned_suitable_area_km2"],
        },
        "zones": zones,
    }

    data = _make_json_serializable(data)

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"      Saved JSON: {output_path}")


def save_results(result, output_dir, zone_field=ZONE_NAME_FIELD, study_area=None):
    """
    Save CSV and JSON results for one species run.

    Files are named ``<species>_zone_stats.csv`` and
    ``<species>_results.json`` inside ``output_dir``.

    Returns:
        dict with csv_path and json_path
    """
    output_dir = Path(output_dir)
    stem = _slug(result["species"])

    csv_path = output_dir / f"{stem}_zone_stats.csv"
    json_path = output_dir / f"{stem}_results.json"

    save_zone_stats_csv(result["report"], csv_path, zone_field=zone_field)
    save_results_json(result, json_path, zone_field=zone_field, study_area=study_area)

    return {"csv_path": str(csv_path), "json_path": str(json_path)}
