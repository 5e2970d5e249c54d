"""
Street Geocoder — Batch Processor
==================================
Drives a list of :class:`~street_geocoder.models.Address` records through a
:class:`~street_geocoder.client.GeocodingClient`, one lookup at a time, with a
fixed delay between consecutive requests.

State machine::

            start()               loop finished
    IDLE ─────────────► RUNNING ─────────────────► COMPLETED
      ▲                  │  ▲
      │          pause() │  │ resume()
      │                  ▼  │
      └───── reset() ── PAUSED
      (reset() is accepted in every state)

``pause()`` and ``reset()`` may be called from another thread or from the
``on_result`` callback.  They take effect at the top of the loop, after the
in-flight lookup has returned; a running request is never aborted.  A
pending inter-request delay is cut short.

``resume()`` continues with the first address that has no result yet.
Accumulated results are kept.

Usage::

    processor = BatchProcessor(addresses, NominatimClient(), location)
    results = processor.start()
    print(processor.summary().summary())
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Sequence

from shared.python.exceptions import GeocodingError, ProcessorStateError
from street_geocoder.client import GeocodingClient
from street_geocoder.models import (
    NOT_FOUND_MESSAGE,
    Address,
    BatchSummary,
    GeocodedAddress,
    LocationContext,
)

logger = logging.getLogger("street_geocoder.processor")

# (result, attempted_so_far, total)
ResultCallback = Callable[[GeocodedAddress, int, int], None]


class ProcessorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class BatchProcessor:
    """Sequential, rate-limited geocoding loop with pause / resume / reset.

    Exactly one lookup is in flight at any time.  Each address gets one
    attempt per run; there is no retry and no backoff.  Lookup failures
    are recorded on the result and never abort the batch.

    Args:
        addresses: Ordered addresses to geocode.
        client: Any :class:`GeocodingClient`.
        location: Optional postal code / city hint added to every query.
        delay_seconds: Fixed pause between consecutive lookups.  Not
                       applied after the last address.
        on_result: Called after every appended result with
                   ``(result, attempted, total)``.
    """

    def __init__(
        self,
        addresses: Sequence[Address],
        client: GeocodingClient,
        location: LocationContext | None = None,
        *,
        delay_seconds: float = 1.0,
        on_result: ResultCallback | None = None,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be ≥ 0")
        self.addresses: tuple[Address, ...] = tuple(addresses)
        self.client = client
        self.location = location
        self.delay_seconds = delay_seconds
        self.on_result = on_result

        self._lock = threading.Lock()
        self._state = ProcessorState.IDLE
        self._results: list[GeocodedAddress] = []
        self._cursor = 0
        self._current_address: str | None = None
        self._pause_requested = False
        # Bumped by reset() so a loop that is mid-lookup discards its result.
        self._generation = 0
        # Set by pause() and reset() to cut the inter-request delay short.
        self._wake = threading.Event()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> ProcessorState:
        return self._state

    @property
    def results(self) -> tuple[GeocodedAddress, ...]:
        """Snapshot of the results accumulated so far, in input order."""
        with self._lock:
            return tuple(self._results)

    @property
    def progress(self) -> float:
        """Percentage of addresses attempted, 0–100."""
        total = len(self.addresses)
        if not total:
            return 0.0
        with self._lock:
            return self._cursor / total * 100

    @property
    def current_address(self) -> str | None:
        """Full address of the in-flight lookup, ``None`` between runs."""
        return self._current_address

    def summary(self) -> BatchSummary:
        results = self.results
        succeeded = sum(1 for r in results if r.success)
        return BatchSummary(
            total=len(self.addresses),
            succeeded=succeeded,
            failed=len(results) - succeeded,
            completed=self._state is ProcessorState.COMPLETED,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> list[GeocodedAddress]:
        """Discard previous results and geocode the batch from the beginning.

        Blocks until the batch completes, is paused or is reset.

        Returns:
            The results accumulated when the loop stopped; an empty list
            if the run was reset.

        Raises:
            ProcessorStateError: If the batch is already running.
        """
        with self._lock:
            if self._state is ProcessorState.RUNNING:
                raise ProcessorStateError("start", self._state.value)
            self._results = []
            self._cursor = 0
            self._pause_requested = False
            self._state = ProcessorState.RUNNING
            generation = self._generation
            self._wake.clear()
        return self._run(generation)

    def resume(self) -> list[GeocodedAddress]:
        """Continue a paused batch with the next unprocessed address.

        Raises:
            ProcessorStateError: If the batch is not paused.
        """
        with self._lock:
            if self._state is not ProcessorState.PAUSED:
                raise ProcessorStateError("resume", self._state.value)
            self._pause_requested = False
            self._state = ProcessorState.RUNNING
            generation = self._generation
            self._wake.clear()
        logger.info("Resuming at address %d/%d", self._cursor + 1, len(self.addresses))
        return self._run(generation)

    def pause(self) -> None:
        """Ask a running batch to stop before its next address.

        No-op unless the batch is running.
        """
        with self._lock:
            if self._state is not ProcessorState.RUNNING:
                logger.debug("pause() ignored while %s", self._state.value)
                return
            self._pause_requested = True
            self._wake.set()
        logger.info("Pause requested; waiting for the current lookup to finish.")

    def reset(self) -> None:
        """Discard all results and progress and return to IDLE.

        Accepted in every state.  A running loop stops at its next check
        and drops the result of its in-flight lookup.
        """
        with self._lock:
            self._generation += 1
            self._results = []
            self._cursor = 0
            self._current_address = None
            self._pause_requested = False
            self._state = ProcessorState.IDLE
            self._wake.set()
        logger.info("Batch reset.")

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def _run(self, generation: int) -> list[GeocodedAddress]:
        try:
            return self._loop(generation)
        except BaseException:
            # An escaping exception pauses the batch; resume() continues it.
            with self._lock:
                if generation == self._generation and self._state is ProcessorState.RUNNING:
                    self._state = ProcessorState.PAUSED
                    self._pause_requested = False
                    self._current_address = None
            logger.error(
                "Batch interrupted after %d/%d address(es).", self._cursor, len(self.addresses)
            )
            raise

    def _loop(self, generation: int) -> list[GeocodedAddress]:
        total = len(self.addresses)
        hint = self.location.hint() if self.location else None
        logger.info(
            "Geocoding %d address(es) via %s%s",
            total - self._cursor,
            self.client.__class__.__name__,
            f" near {hint}" if hint else "",
        )

        while True:
            with self._lock:
                if generation != self._generation:
                    return []
                if self._cursor >= total:
                    break
                if self._pause_requested:
                    self._pause_requested = False
                    self._state = ProcessorState.PAUSED
                    self._current_address = None
                    logger.info("Batch paused after %d/%d address(es).", self._cursor, total)
                    return list(self._results)
                address = self.addresses[self._cursor]
                self._current_address = address.full_address

            logger.debug("[%d/%d] Geocoding: %s", self._cursor + 1, total, address.full_address)
            result = self._geocode_one(address, hint)

            with self._lock:
                if generation != self._generation:
                    return []
                self._results.append(result)
                self._cursor += 1
                attempted = self._cursor

            if self.on_result is not None:
                self.on_result(result, attempted, total)

            if attempted < total and self.delay_seconds > 0:
                self._wake.wait(self.delay_seconds)

        with self._lock:
            self._state = ProcessorState.COMPLETED
            self._pause_requested = False
            self._current_address = None
            results = list(self._results)

        logger.info(self.summary().summary())
        return results

    def _geocode_one(self, address: Address, hint: str | None) -> GeocodedAddress:
        try:
            coords = self.client.lookup(address.full_address, hint)
        except GeocodingError as exc:
            logger.warning("  ✗ Failed: %s (%s)", address.full_address, exc.message)
            return GeocodedAddress.failed(address, exc.message)
        except Exception as exc:  # noqa: BLE001
            message = str(exc) or exc.__class__.__name__
            logger.warning("  ✗ Failed: %s (%s)", address.full_address, message)
            return GeocodedAddress.failed(address, message)

        if coords.latitude is None or coords.longitude is None:
            logger.warning("  ✗ Not found: %s", address.full_address)
            return GeocodedAddress.failed(address, NOT_FOUND_MESSAGE)

        logger.debug(
            "  ✓ %s → (%.5f, %.5f)", address.full_address, coords.latitude, coords.longitude
        )
        return GeocodedAddress.succeeded(address, coords.latitude, coords.longitude)
