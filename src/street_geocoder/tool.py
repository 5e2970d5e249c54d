"""
Street Geocoder — Pipeline Tool
================================
Reads an address file, geocodes every address and exports the results.

Classes:
    AddressGeocoder     Primary tool class (inherits GeoTool).

Usage::

    from pathlib import Path
    from street_geocoder.models import LocationContext
    from street_geocoder.tool import AddressGeocoder

    tool = AddressGeocoder(
        input_path=Path("data/adressen.xlsx"),
        output_path=Path("output/"),
        output_format="xlsx",
        location=LocationContext("21493", "Schwarzenbek"),
    )
    tool.run()
"""

from __future__ import annotations

import logging
from pathlib import Path

from shared.python.base_tool import GeoTool
from shared.python.exceptions import ProcessorStateError
from shared.python.validators import Validators
from street_geocoder.client import GeocoderConfig, GeocodingClient, NominatimClient
from street_geocoder.exporter import (
    ExportFormat,
    default_filename,
    export_results,
    is_directory_destination,
)
from street_geocoder.models import Address, BatchSummary, GeocodedAddress, LocationContext
from street_geocoder.parser import SUPPORTED_EXTENSIONS, read_address_file
from street_geocoder.processor import BatchProcessor, ResultCallback

logger = logging.getLogger("street_geocoder.tool")


class AddressGeocoder(GeoTool):
    """Geocode every address in a ``.csv``/``.xlsx`` file and export them.

    Failed lookups are exported with blank coordinates so no row is lost.
    If the batch is paused (e.g. via :attr:`processor` from a signal
    handler), the partial results are exported and :attr:`summary`
    reports ``completed=False``.

    Args:
        input_path: Address file to read.
        output_path: Output file, or a directory for a dated default name.
        output_format: ``"csv"``, ``"xlsx"`` or ``"geojson"``.
        location: Optional postal code / city hint for every query.
        client: Geocoding client.  Defaults to :class:`NominatimClient`
                built from *config*.
        config: Endpoint and timing settings.
        on_result: Forwarded to :class:`BatchProcessor`.
        verbose: Enable DEBUG-level logging.
    """

    def __init__(
        self,
        input_path: Path,
        output_path: Path,
        output_format: ExportFormat = "csv",
        location: LocationContext | None = None,
        client: GeocodingClient | None = None,
        config: GeocoderConfig | None = None,
        on_result: ResultCallback | None = None,
        *,
        verbose: bool = False,
    ) -> None:
        super().__init__(input_path, output_path, verbose=verbose)
        self.output_format: ExportFormat = output_format
        self.location = location
        self.config = config or GeocoderConfig()
        self.client: GeocodingClient = client or NominatimClient(self.config)
        self.on_result = on_result

        self.addresses: list[Address] = []
        self.processor: BatchProcessor | None = None
        self._exported_to: Path | None = None

    # ------------------------------------------------------------------
    # GeoTool abstract method implementations
    # ------------------------------------------------------------------

    def validate_inputs(self) -> None:
        """Check the input file and load its addresses.

        Raises:
            InputValidationError: If the file is missing or unreadable.
            UnsupportedFileError: If the extension is not supported.
            EmptyInputError: If no row holds a street and house number.
            OutputWriteError: If the output directory cannot be created.
        """
        Validators.assert_file_exists(self.input_path)
        Validators.assert_supported_extension(self.input_path, SUPPORTED_EXTENSIONS)
        if is_directory_destination(self.output_path):
            Validators.assert_output_dir_writable(
                self.output_path / default_filename(self.output_format)
            )
        else:
            Validators.assert_output_dir_writable(self.output_path)

        self.addresses = read_address_file(self.input_path)
        self.processor = BatchProcessor(
            self.addresses,
            self.client,
            self.location,
            delay_seconds=self.config.delay_seconds,
            on_result=self.on_result,
        )
        logger.debug("Inputs validated successfully.")

    def process(self) -> None:
        """Run the batch and export whatever results it produced.

        Raises:
            ExportError: If writing the output file fails.
        """
        if self.processor is None:
            raise ProcessorStateError("process", "not loaded; call validate_inputs() first")
        results = self.processor.start()
        self._exported_to = export_results(results, self.output_path, self.output_format)
        logger.info(self.summary.summary())

    def _report_success(self, elapsed: float) -> None:
        logger.info(
            "%s finished in %.2fs → %s",
            self.__class__.__name__,
            elapsed,
            self._exported_to or self.output_path,
        )

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def results(self) -> tuple[GeocodedAddress, ...]:
        """Results of the last run, or ``()``."""
        return self.processor.results if self.processor else ()

    @property
    def summary(self) -> BatchSummary:
        if self.processor is None:
            return BatchSummary(total=0, succeeded=0, failed=0, completed=False)
        return self.processor.summary()

    @property
    def exported_to(self) -> Path | None:
        """Path of the written export file, ``None`` before :meth:`run`."""
        return self._exported_to
