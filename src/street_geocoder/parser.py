"""
Street Geocoder — Address Parser
=================================
Turns an uploaded ``.csv`` or ``.xlsx`` file into :class:`Address` records.

Expected layout (no fixed header, columns by position)::

    Straße       ; Hausnummer ; Zusatz
    Pracherbusch ; 10         ; a
    Hauptstraße  ; 5          ;

A first row whose first cell mentions ``straße`` is treated as a header
and skipped.  Rows without a street or a house number are dropped.

Functions:
    parse_address_rows   Row lists → addresses (pure, no I/O).
    read_address_file    Read a file with pandas and parse its rows.
"""

from __future__ import annotations

import logging
import math
import zipfile
from pathlib import Path
from typing import Any, Iterable, Sequence

import pandas as pd

from shared.python.exceptions import EmptyInputError, InputValidationError
from shared.python.validators import Validators
from street_geocoder.models import Address

logger = logging.getLogger("street_geocoder.parser")

SUPPORTED_EXTENSIONS = [".csv", ".xlsx"]
CSV_DELIMITER = ";"
_HEADER_MARKERS = ("straße", "strasse")


def _cell_text(value: Any) -> str:
    """Render a spreadsheet cell as stripped text.

    ``None`` and NaN become ``""``; whole-number floats such as ``10.0``
    (house numbers typed into Excel) become ``"10"``.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _is_header(row: Sequence[Any]) -> bool:
    if not row or not isinstance(row[0], str):
        return False
    first = row[0].lower()
    return any(marker in first for marker in _HEADER_MARKERS)


def parse_address_rows(rows: Iterable[Sequence[Any]]) -> list[Address]:
    """Convert raw tabular rows into addresses.

    Args:
        rows: Rows of cells; column 0 is the street, 1 the house number and
              the optional column 2 a house-number suffix.

    Returns:
        Addresses in row order.  Incomplete rows are skipped.

    Example::

        parse_address_rows([["Pracherbusch", "10", "a"], ["Hauptstraße", "", ""]])
        # [Address(street='Pracherbusch', house_number='10', extra='a', ...)]
    """
    rows = list(rows)
    start = 1 if rows and _is_header(rows[0]) else 0

    addresses: list[Address] = []
    for row in rows[start:]:
        if not row or len(row) < 2:
            continue
        street = _cell_text(row[0])
        house_number = _cell_text(row[1])
        extra = _cell_text(row[2]) if len(row) > 2 else ""

        if not street or not house_number or "undefined" in (street, house_number):
            continue
        addresses.append(Address.from_parts(street, house_number, extra))

    skipped = len(rows) - start - len(addresses)
    if skipped:
        logger.debug("Skipped %d incomplete row(s).", skipped)
    return addresses


def _first_three_cells(fields: list[str]) -> list[str]:
    # Extra columns (e.g. notes) are ignored.
    return fields[:3]


def _read_rows(path: Path) -> list[list[Any]]:
    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            df = pd.read_csv(
                path,
                sep=CSV_DELIMITER,
                header=None,
                names=[0, 1, 2],
                index_col=False,
                engine="python",
                on_bad_lines=_first_three_cells,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8",
            )
        else:
            df = pd.read_excel(path, sheet_name=0, header=None, engine="openpyxl")
    except pd.errors.EmptyDataError:
        return []
    except (ValueError, OSError, zipfile.BadZipFile) as exc:
        raise InputValidationError(f"Could not read '{path.name}': {exc}") from exc

    return df.astype(object).where(df.notna(), None).values.tolist()


def read_address_file(path: Path | str) -> list[Address]:
    """Read ``.csv`` (semicolon-delimited, UTF-8) or ``.xlsx`` addresses.

    Raises:
        InputValidationError: If the file is missing or cannot be decoded.
        UnsupportedFileError: For any other extension.
        EmptyInputError: If the file yields no usable address.
    """
    path = Path(path)
    Validators.assert_file_exists(path)
    Validators.assert_supported_extension(path, SUPPORTED_EXTENSIONS)

    addresses = parse_address_rows(_read_rows(path))
    if not addresses:
        raise EmptyInputError(path)

    logger.info("Loaded %d address(es) from %s", len(addresses), path.name)
    return addresses
