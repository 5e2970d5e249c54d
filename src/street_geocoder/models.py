"""
Street Geocoder — Data Model
=============================
Immutable records that flow through the pipeline::

    Address ──► (BatchProcessor) ──► GeocodedAddress

Classes:
    Address             One parsed street address.
    GeocodeStatus       Outcome of a geocoding attempt.
    GeocodedAddress     An Address annotated with coordinates and status.
    LocationContext     Optional postal code / city hint for a whole batch.
    BatchSummary        Success / failure counts for a finished batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from shared.python.validators import Validators

NOT_FOUND_MESSAGE = "coordinates not found"


@dataclass(frozen=True)
class Address:
    """A single street address as read from the input file.

    Attributes:
        street: Street name, e.g. ``"Pracherbusch"``.
        house_number: House number without suffix, e.g. ``"10"``.
        extra: Optional house-number suffix, e.g. ``"a"``.
        full_address: ``street + " " + house_number + extra``.
    """

    street: str
    house_number: str
    extra: str
    full_address: str

    @classmethod
    def from_parts(cls, street: str, house_number: str, extra: str = "") -> "Address":
        """Build an address and derive :attr:`full_address`.

        Example::

            Address.from_parts("Pracherbusch", "10", "a").full_address
            # 'Pracherbusch 10a'
        """
        return cls(
            street=street,
            house_number=house_number,
            extra=extra,
            full_address=f"{street} {house_number}{extra}",
        )


class GeocodeStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class GeocodedAddress:
    """Immutable result for one geocoding attempt.

    ``status`` is :attr:`GeocodeStatus.SUCCESS` exactly when both
    coordinates are present.  Use :meth:`succeeded` and :meth:`failed`
    rather than the constructor to keep that invariant.

    Attributes:
        street: Copied from the source :class:`Address`.
        house_number: Copied from the source :class:`Address`.
        extra: Copied from the source :class:`Address`.
        full_address: Copied from the source :class:`Address`.
        latitude: WGS84 latitude, or ``None`` on failure.
        longitude: WGS84 longitude, or ``None`` on failure.
        status: Outcome of the attempt.
        error_message: Why the attempt failed, ``None`` on success.
    """

    street: str
    house_number: str
    extra: str
    full_address: str
    latitude: float | None
    longitude: float | None
    status: GeocodeStatus
    error_message: str | None = None

    @classmethod
    def succeeded(cls, address: Address, latitude: float, longitude: float) -> "GeocodedAddress":
        return cls(
            street=address.street,
            house_number=address.house_number,
            extra=address.extra,
            full_address=address.full_address,
            latitude=latitude,
            longitude=longitude,
            status=GeocodeStatus.SUCCESS,
        )

    @classmethod
    def failed(cls, address: Address, message: str) -> "GeocodedAddress":
        return cls(
            street=address.street,
            house_number=address.house_number,
            extra=address.extra,
            full_address=address.full_address,
            latitude=None,
            longitude=None,
            status=GeocodeStatus.ERROR,
            error_message=message,
        )

    @property
    def success(self) -> bool:
        return self.status is GeocodeStatus.SUCCESS

    def to_geojson_feature(self) -> dict[str, Any]:
        """Convert this result to a GeoJSON Feature dict.

        Failed results keep their properties and get a ``None`` geometry
        so no row is silently lost.
        """
        props: dict[str, Any] = {
            "address": self.full_address,
            "street": self.street,
            "house_number": self.house_number,
            "extra": self.extra,
            "status": self.status.value,
            "error": self.error_message,
        }
        geometry = (
            {"type": "Point", "coordinates": [self.longitude, self.latitude]}
            if self.success
            else None
        )
        return {"type": "Feature", "geometry": geometry, "properties": props}


@dataclass(frozen=True)
class LocationContext:
    """Postal code and city appended to every query of a batch.

    Validated on construction.

    Raises:
        InputValidationError: If the postal code has fewer than four
            digits or the city fewer than two characters.
    """

    postal_code: str
    city: str

    def __post_init__(self) -> None:
        Validators.assert_postal_code_valid(self.postal_code)
        Validators.assert_city_valid(self.city)
        # Frozen dataclass: normalise through object.__setattr__.
        object.__setattr__(self, "postal_code", self.postal_code.strip())
        object.__setattr__(self, "city", self.city.strip())

    def hint(self) -> str:
        """Return the free-text hint, e.g. ``"21493 Schwarzenbek"``."""
        return f"{self.postal_code} {self.city}"


@dataclass(frozen=True)
class BatchSummary:
    """Counts for a batch run.

    Attributes:
        total: Number of addresses in the batch.
        succeeded: Results with coordinates.
        failed: Results with an error status.
        completed: ``False`` when the run was paused or reset early.
    """

    total: int
    succeeded: int
    failed: int
    completed: bool

    @property
    def attempted(self) -> int:
        return self.succeeded + self.failed

    def summary(self) -> str:
        """Human-readable one-line summary for logging or display."""
        state = "complete" if self.completed else "incomplete"
        return (
            f"Geocoding {state}: {self.succeeded}/{self.total} succeeded, "
            f"{self.failed} failed."
        )
