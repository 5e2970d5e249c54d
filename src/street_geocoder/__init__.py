"""
Street Geocoder
================
Batch geocoding of street-address spreadsheets through OpenStreetMap's
Nominatim API, with pause / resume control and CSV, XLSX and GeoJSON export.

Public API::

    from street_geocoder import BatchProcessor, NominatimClient, read_address_file
"""

from street_geocoder.client import (
    Coordinates,
    GeocoderConfig,
    GeocodingClient,
    NominatimClient,
)
from street_geocoder.exporter import default_filename, export_results, to_csv_text
from street_geocoder.models import (
    Address,
    BatchSummary,
    GeocodedAddress,
    GeocodeStatus,
    LocationContext,
)
from street_geocoder.parser import parse_address_rows, read_address_file
from street_geocoder.processor import BatchProcessor, ProcessorState
from street_geocoder.tool import AddressGeocoder

__all__ = [
    "Address",
    "AddressGeocoder",
    "BatchProcessor",
    "BatchSummary",
    "Coordinates",
    "GeocodedAddress",
    "GeocodeStatus",
    "GeocoderConfig",
    "GeocodingClient",
    "LocationContext",
    "NominatimClient",
    "ProcessorState",
    "default_filename",
    "export_results",
    "parse_address_rows",
    "read_address_file",
    "to_csv_text",
]
__version__ = "1.0.0"
