"""
Street Geocoder — CLI Entry Point
==================================
Installed as the ``street-geocode`` command via ``pyproject.toml``.

Usage:
    street-geocode --input data/adressen.xlsx --output output/ \\
                   --format xlsx --postal-code 21493 --city Schwarzenbek

Press Ctrl-C once to pause: the running lookup finishes, the results so
far are exported and the command exits.
"""

from __future__ import annotations

import signal
import sys
from pathlib import Path

import click

from shared.python.exceptions import StreetGeocoderError
from street_geocoder.client import GeocoderConfig
from street_geocoder.exporter import EXPORT_FORMATS
from street_geocoder.models import GeocodedAddress, LocationContext
from street_geocoder.tool import AddressGeocoder


def _echo_progress(result: GeocodedAddress, attempted: int, total: int) -> None:
    mark = "✓" if result.success else "✗"
    line = f"[{attempted / total * 100:5.1f}%] {mark} {result.full_address}"
    if not result.success:
        line += f" ({result.error_message})"
    click.echo(line)


@click.command(
    name="street-geocode",
    help="Geocode a CSV/XLSX file of street addresses via Nominatim.",
)
@click.option(
    "--input", "-i", "input_path",
    required=True,
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    help="Address file (.csv with ';' delimiter, or .xlsx).",
)
@click.option(
    "--output", "-o", "output_path",
    default=".",
    show_default=True,
    type=click.Path(path_type=Path),
    help="Output file, or a directory for geocoded_addresses_<date>.<format>.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(list(EXPORT_FORMATS), case_sensitive=False),
    default="csv",
    show_default=True,
    help="Export format.",
)
@click.option("--postal-code", default=None, help="Postal code added to every query (needs --city).")
@click.option("--city", default=None, help="City added to every query (needs --postal-code).")
@click.option(
    "--delay",
    default=1.0,
    show_default=True,
    type=click.FloatRange(min=0),
    help="Seconds to wait between geocoding requests.",
)
@click.option(
    "--user-agent",
    default=GeocoderConfig.user_agent,
    show_default=True,
    envvar="STREET_GEOCODER_USER_AGENT",
    help="User-Agent sent to Nominatim. "
         "Can also be set via the STREET_GEOCODER_USER_AGENT environment variable.",
)
@click.option(
    "--standardize", is_flag=True, default=False,
    help="Title-case addresses and expand 'Str.'/'St.' before querying.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def main(
    input_path: Path,
    output_path: Path,
    output_format: str,
    postal_code: str | None,
    city: str | None,
    delay: float,
    user_agent: str,
    standardize: bool,
    verbose: bool,
) -> None:
    """CLI entry point: wires Click options into AddressGeocoder."""
    if bool(postal_code) != bool(city):
        click.echo("Error: --postal-code and --city must be given together.", err=True)
        sys.exit(1)

    config = GeocoderConfig(
        user_agent=user_agent,
        delay_seconds=delay,
        standardize=standardize,
    )

    try:
        location = LocationContext(postal_code, city) if postal_code and city else None
        tool = AddressGeocoder(
            input_path=input_path,
            output_path=output_path,
            output_format=output_format.lower(),  # type: ignore[arg-type]
            location=location,
            config=config,
            on_result=_echo_progress,
            verbose=verbose,
        )
    except StreetGeocoderError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    def _pause(signum: int, frame: object) -> None:
        if tool.processor is None:
            raise KeyboardInterrupt
        click.echo("\nPausing after the current lookup...", err=True)
        tool.processor.pause()

    previous_handler = signal.signal(signal.SIGINT, _pause)
    try:
        tool.run()
    except StreetGeocoderError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    summary = tool.summary
    click.echo(f"\nResults written to: {tool.exported_to}")
    if summary.completed:
        click.echo(f"Geocoded: {summary.succeeded}/{summary.total} addresses successfully.")
    else:
        click.echo(
            f"Paused after {summary.attempted} of {summary.total} addresses "
            f"({summary.succeeded} geocoded)."
        )


if __name__ == "__main__":
    main()
