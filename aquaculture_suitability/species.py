"""
Species Threshold Loader
========================

Loads species habitat thresholds from a CSV database.

Functions:
    - load_species: Load a single species' thresholds by name → dict
    - list_available_species: Names of all species in the database

Example:
    from aquaculture_suitability.species import load_species

    oyster = load_species("Oyster")
    print(oyster['temp_min_c'], oyster['temp_max_c'])  # 11.0 30.0
"""

import csv
from pathlib import Path

from aquaculture_suitability.config import SPECIES_CSV_PATH


REQUIRED_COLUMNS = {
    "SPECIES",
    "TEMP_MIN_C",
    "TEMP_MAX_C",
    "DEPTH_MIN_M",
    "DEPTH_MAX_M",
}


class SpeciesNotFoundError(Exception):
    """Raised when a species is not found in the CSV database."""
    pass


def _open_species_csv(csv_path):
    if csv_path is None:
        csv_path = SPECIES_CSV_PATH
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(
            f"Species database not found: {csv_path}\n"
            f"Please provide a valid path to your species thresholds CSV file."
        )
    return csv_path


def _validate_columns(reader, csv_path):
    if reader.fieldnames is None:
        raise ValueError(f"CSV file appears to be empty: {csv_path}")

    available_cols = set(reader.fieldnames)
    missing_cols = REQUIRED_COLUMNS - available_cols
    if missing_cols:
        raise ValueError(
            f"CSV missing required columns: {missing_cols}\n"
            f"Available columns: {available_cols}"
        )


def load_species(species_name, csv_path=None):
    """
    Load species thresholds from a CSV database.

    Name matching is case-insensitive.

    Parameters
    ----------
    species_name : str
        Name of the species to load (must match SPECIES column in CSV).
    csv_path : str or Path, optional
        Path to the CSV file. Defaults to data/species_thresholds.csv.

    Returns
    -------
    dict
        Species thresholds with keys: name, scientific_name, temp_min_c,
        temp_max_c, depth_min_m, depth_max_m. Depths are metres below
        sea level (positive).

    Raises
    ------
    FileNotFoundError
        If the CSV file does not exist.
    SpeciesNotFoundError
        If the species name is not found in the CSV.
    ValueError
        If required columns are missing or values are invalid.
    """
    csv_path = _open_species_csv(csv_path)

    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        _validate_columns(reader, csv_path)

        available = []
        for row in reader:
            name = row["SPECIES"].strip()
            available.append(name)
            if name.lower() == species_name.strip().lower():
                return _parse_csv_row(row, name)

    raise SpeciesNotFoundError(
        f"Species '{species_name}' not found in database.\n"
        f"Available species: {available}\n"
        f"Database path: {csv_path}"
    )


def list_available_species(csv_path=None):
    """Return the species names in the database, in file order."""
    csv_path = _open_species_csv(csv_path)

    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        _validate_columns(reader, csv_path)
        return [row["SPECIES"].strip() for row in reader]


def _parse_csv_row(row, species_name):
    """Parse a CSV row into a species thresholds dict.

    All threshold fields are required. Raises ValueError if any value is
    missing or cannot be parsed as a float, or if a range is inverted.
    """

    def parse_float(value, field_name):
        value = value.strip() if value else ""
        if value in ("", "-"):
            raise ValueError(
                f"Missing required value for '{field_name}' in species '{species_name}'"
            )
        try:
            return float(value)
        except ValueError:
            raise ValueError(
                f"Invalid value '{value}' for '{field_name}' in species '{species_name}'"
            )

    temp_min = parse_float(row["TEMP_MIN_C"], "TEMP_MIN_C")
    temp_max = parse_float(row["TEMP_MAX_C"], "TEMP_MAX_C")
    depth_min = parse_float(row["DEPTH_MIN_M"], "DEPTH_MIN_M")
    depth_max = parse_float(row["DEPTH_MAX_M"], "DEPTH_MAX_M")

    if temp_min > temp_max or depth_min > depth_max:
        raise ValueError(
            f"Inverted threshold range for species '{species_name}': "
            f"temp [{temp_min}, {temp_max}], depth [{depth_min}, {depth_max}]"
        )

    return {
        "name": species_name,
        "scientific_name": (row.get("SCIENTIFIC_NAME") or "").strip(),
        "temp_min_c": temp_min,
        "temp_max_c": temp_max,
        "depth_min_m": depth_min,
        "depth_max_m": depth_max,
    }
