"""
Street Geocoder — Shared Python Package
========================================
Re-exports the shared base class, exception hierarchy, and validator
utilities so modules can import from a single location::

    from shared.python import GeoTool, Validators
    from shared.python.exceptions import GeocodingError
"""

from shared.python.base_tool import GeoTool
from shared.python.exceptions import (
    EmptyInputError,
    ExportError,
    GeocodingError,
    GeocodingRateLimitError,
    InputValidationError,
    OutputWriteError,
    ProcessorStateError,
    StreetGeocoderError,
    UnsupportedFileError,
)
from shared.python.validators import Validators

__all__ = [
    "GeoTool",
    "Validators",
    "StreetGeocoderError",
    "InputValidationError",
    "UnsupportedFileError",
    "EmptyInputError",
    "GeocodingError",
    "GeocodingRateLimitError",
    "ProcessorStateError",
    "OutputWriteError",
    "ExportError",
]
