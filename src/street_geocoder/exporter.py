"""
Street Geocoder — Results Exporter
===================================
Serialises geocoded results for download.

Formats:
    csv      Comma-delimited ``Adresse,Latitude,Longitude``.
    xlsx     One-sheet workbook with the same columns (openpyxl).
    geojson  FeatureCollection; failed rows keep a ``null`` geometry.

Default filenames embed the current date, e.g.
``geocoded_addresses_2024-05-01.csv``.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Literal, Sequence

import pandas as pd

from shared.python.exceptions import ExportError
from shared.python.validators import Validators
from street_geocoder.models import GeocodedAddress

logger = logging.getLogger("street_geocoder.exporter")

ExportFormat = Literal["csv", "xlsx", "geojson"]
EXPORT_FORMATS: tuple[str, ...] = ("csv", "xlsx", "geojson")

COLUMNS = ["Adresse", "Latitude", "Longitude"]
SHEET_NAME = "Geocodierte Adressen"
FILENAME_STEM = "geocoded_addresses"


def default_filename(fmt: ExportFormat, today: date | None = None) -> str:
    """Return ``geocoded_addresses_<YYYY-MM-DD>.<fmt>``."""
    today = today or date.today()
    return f"{FILENAME_STEM}_{today.isoformat()}.{fmt}"


def is_directory_destination(destination: Path | str) -> bool:
    """Whether *destination* names a directory rather than an export file.

    True for existing directories, paths written with a trailing
    separator and paths without a file extension (``output/``, ``exports``).
    """
    raw = str(destination)
    if raw.endswith(("/", os.sep)):
        return True
    path = Path(destination)
    return path.is_dir() or not path.suffix


def results_to_frame(results: Sequence[GeocodedAddress]) -> pd.DataFrame:
    """Tabulate *results*; missing coordinates stay null."""
    return pd.DataFrame(
        [[r.full_address, r.latitude, r.longitude] for r in results],
        columns=COLUMNS,
    ).astype({"Latitude": "float64", "Longitude": "float64"})


def to_csv_text(results: Sequence[GeocodedAddress]) -> str:
    """Render *results* as CSV: a header line plus one line per result.

    Coordinate fields are blank when the value is ``None``.
    """
    return results_to_frame(results).to_csv(index=False, na_rep="", lineterminator="\n")


def write_csv(results: Sequence[GeocodedAddress], path: Path) -> Path:
    try:
        Path(path).write_text(to_csv_text(results), encoding="utf-8")
    except OSError as exc:
        raise ExportError(str(path), str(exc)) from exc
    return Path(path)


def write_excel(results: Sequence[GeocodedAddress], path: Path) -> Path:
    """Write a single-sheet workbook named ``Geocodierte Adressen``."""
    try:
        results_to_frame(results).to_excel(
            path, sheet_name=SHEET_NAME, index=False, engine="openpyxl"
        )
    except (OSError, ValueError) as exc:
        raise ExportError(str(path), str(exc)) from exc
    return Path(path)


def write_geojson(results: Sequence[GeocodedAddress], path: Path) -> Path:
    geojson: dict[str, Any] = {
        "type": "FeatureCollection",
        "features": [r.to_geojson_feature() for r in results],
    }
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(geojson, fh, indent=2, ensure_ascii=False)
    except OSError as exc:
        raise ExportError(str(path), str(exc)) from exc
    return Path(path)


_WRITERS = {
    "csv": write_csv,
    "xlsx": write_excel,
    "geojson": write_geojson,
}


def export_results(
    results: Sequence[GeocodedAddress],
    destination: Path | str,
    fmt: ExportFormat = "csv",
) -> Path:
    """Write *results* in *fmt* and return the file path.

    Args:
        results: Geocoded results, in input order.
        destination: A file path, or a directory (created if missing) in
                     which a dated default filename is used.
        fmt: One of ``"csv"``, ``"xlsx"``, ``"geojson"``.

    Raises:
        ExportError: If the format is unknown or the file cannot be written.
    """
    if fmt not in _WRITERS:
        raise ExportError(str(destination), f"unknown export format {fmt!r}")

    path = Path(destination)
    if is_directory_destination(destination):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExportError(str(path), str(exc)) from exc
        path = path / default_filename(fmt)
    Validators.assert_output_dir_writable(path)

    _WRITERS[fmt](results, path)
    logger.info("Exported %d result(s) to %s", len(results), path)
    return path
