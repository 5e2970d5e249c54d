"""
Street Geocoder — Shared Input Validators
==========================================
Static precondition checks used before any address is geocoded.

All methods raise an exception from :mod:`shared.python.exceptions`
rather than returning booleans, which keeps ``validate_inputs``
implementations short::

    class MyTool(GeoTool):
        def validate_inputs(self) -> None:
            Validators.assert_file_exists(self.input_path)
            Validators.assert_supported_extension(self.input_path, [".csv", ".xlsx"])
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from shared.python.exceptions import (
    InputValidationError,
    OutputWriteError,
    UnsupportedFileError,
)

_POSTAL_CODE_RE = re.compile(r"^\d{4,}$")


class Validators:
    """Collection of static precondition checks.

    All methods are ``@staticmethod``; this class is never instantiated.
    """

    # ------------------------------------------------------------------
    # File-system checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_file_exists(path: Path) -> None:
        """Assert that *path* points to an existing regular file.

        Raises:
            InputValidationError: If *path* does not exist or is a
                directory rather than a file.
        """
        path = Path(path)
        if not path.exists():
            raise InputValidationError(
                f"Input file not found: '{path}'. "
                "Check that the path is correct and the file exists."
            )
        if path.is_dir():
            raise InputValidationError(
                f"Expected a file but got a directory: '{path}'."
            )

    @staticmethod
    def assert_output_dir_writable(output_path: Path) -> None:
        """Create the parent directory of *output_path* if it is missing.

        Raises:
            OutputWriteError: If the parent directory cannot be created.
        """
        parent = Path(output_path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(str(output_path), str(exc)) from exc

    @staticmethod
    def assert_supported_extension(path: Path, extensions: Sequence[str]) -> None:
        """Assert that *path* has one of the allowed file extensions.

        Args:
            path: File path to check.
            extensions: Allowed extensions, each starting with a dot
                        (e.g. ``[".csv", ".xlsx"]``).

        Raises:
            UnsupportedFileError: If the extension is not in *extensions*.
        """
        path = Path(path)
        allowed = [ext.lower() for ext in extensions]
        if path.suffix.lower() not in allowed:
            raise UnsupportedFileError(path, allowed)

    # ------------------------------------------------------------------
    # Location hint checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_postal_code_valid(postal_code: str) -> None:
        """Assert that *postal_code* consists of at least four digits.

        Raises:
            InputValidationError: If the code is too short or contains
                anything other than digits.

        Example::

            Validators.assert_postal_code_valid("21493")
        """
        if not _POSTAL_CODE_RE.match(postal_code.strip()):
            raise InputValidationError(
                f"Invalid postal code {postal_code!r}: expected at least 4 digits."
            )

    @staticmethod
    def assert_city_valid(city: str) -> None:
        """Assert that *city* has at least two non-blank characters.

        Raises:
            InputValidationError: If the name is shorter than two characters.
        """
        if len(city.strip()) < 2:
            raise InputValidationError(
                f"Invalid city {city!r}: expected at least 2 characters."
            )
