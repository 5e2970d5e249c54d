"""
Tests — Batch Processor
========================
Unit tests for :class:`~street_geocoder.processor.BatchProcessor`.

The geocoding client is a ``MagicMock`` built against the
:class:`~street_geocoder.client.GeocodingClient` interface, so no HTTP
requests are made.  ``delay_seconds=0`` keeps the loop instant except in
the tests that check the throttle.
"""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest

from shared.python.exceptions import GeocodingError, ProcessorStateError
from street_geocoder.client import Coordinates, GeocodingClient
from street_geocoder.models import Address, GeocodeStatus, LocationContext
from street_geocoder.processor import BatchProcessor, ProcessorState


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _addresses(n: int = 3) -> list[Address]:
    return [Address.from_parts("Teststraße", str(i + 1)) for i in range(n)]


def _client(coords: Coordinates | None = None) -> MagicMock:
    client = MagicMock(spec=GeocodingClient)
    client.lookup.return_value = coords or Coordinates(53.65, 10.48)
    return client


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestBatchProcessorHappyPath:
    def test_known_address_succeeds(self) -> None:
        client = _client(Coordinates(53.65, 10.48))
        address = Address.from_parts("Pracherbusch", "10", "a")
        results = BatchProcessor([address], client, delay_seconds=0).start()

        assert len(results) == 1
        r = results[0]
        assert r.full_address == "Pracherbusch 10a"
        assert r.latitude == 53.65
        assert r.longitude == 10.48
        assert r.status is GeocodeStatus.SUCCESS
        assert r.error_message is None

    def test_output_matches_input_length_and_order(self) -> None:
        addresses = _addresses(5)
        processor = BatchProcessor(addresses, _client(), delay_seconds=0)
        results = processor.start()
        assert [r.full_address for r in results] == [a.full_address for a in addresses]

    def test_state_completed_and_progress_full(self) -> None:
        processor = BatchProcessor(_addresses(2), _client(), delay_seconds=0)
        processor.start()
        assert processor.state is ProcessorState.COMPLETED
        assert processor.progress == 100.0
        assert processor.current_address is None

    def test_one_lookup_per_address_in_order(self) -> None:
        client = _client()
        addresses = _addresses(3)
        BatchProcessor(addresses, client, delay_seconds=0).start()
        called = [c.args[0] for c in client.lookup.call_args_list]
        assert called == [a.full_address for a in addresses]

    def test_location_hint_passed_to_client(self) -> None:
        client = _client()
        location = LocationContext("21493", "Schwarzenbek")
        BatchProcessor(_addresses(1), client, location, delay_seconds=0).start()
        client.lookup.assert_called_once_with("Teststraße 1", "21493 Schwarzenbek")

    def test_summary_counts(self) -> None:
        client = _client()
        client.lookup.side_effect = [
            Coordinates(53.6, 10.4),
            Coordinates(None, None),
            Coordinates(53.7, 10.5),
        ]
        processor = BatchProcessor(_addresses(3), client, delay_seconds=0)
        processor.start()
        summary = processor.summary()
        assert (summary.total, summary.succeeded, summary.failed) == (3, 2, 1)
        assert summary.completed is True
        assert "2/3" in summary.summary()

    def test_empty_batch_completes(self) -> None:
        processor = BatchProcessor([], _client(), delay_seconds=0)
        assert processor.start() == []
        assert processor.state is ProcessorState.COMPLETED


# ---------------------------------------------------------------------------
# Failures are recorded, not raised
# ---------------------------------------------------------------------------


class TestBatchProcessorFailures:
    def test_not_found_is_error_with_message(self) -> None:
        results = BatchProcessor(
            _addresses(1), _client(Coordinates(None, None)), delay_seconds=0
        ).start()
        assert results[0].status is GeocodeStatus.ERROR
        assert results[0].error_message == "coordinates not found"
        assert results[0].latitude is None and results[0].longitude is None

    def test_exception_is_recorded_and_loop_continues(self) -> None:
        addresses = [
            Address.from_parts("Unbekannt", "1"),
            Address.from_parts("Pracherbusch", "10", "a"),
        ]

        def lookup(text: str, hint: str | None = None) -> Coordinates:
            if text == "Unbekannt 1":
                raise RuntimeError("connection reset")
            return Coordinates(53.65, 10.48)

        client = _client()
        client.lookup.side_effect = lookup
        results = BatchProcessor(addresses, client, delay_seconds=0).start()

        assert len(results) == 2
        assert results[0].status is GeocodeStatus.ERROR
        assert results[0].error_message == "connection reset"
        assert results[1].status is GeocodeStatus.SUCCESS

    def test_geocoding_error_message_kept(self) -> None:
        client = _client()
        client.lookup.side_effect = GeocodingError("HTTP Error: 503")
        results = BatchProcessor(_addresses(2), client, delay_seconds=0).start()
        assert [r.error_message for r in results] == ["HTTP Error: 503"] * 2

    def test_exception_without_text_uses_class_name(self) -> None:
        client = _client()
        client.lookup.side_effect = TimeoutError()
        results = BatchProcessor(_addresses(1), client, delay_seconds=0).start()
        assert results[0].error_message == "TimeoutError"

    def test_status_success_iff_coordinates(self) -> None:
        client = _client()
        client.lookup.side_effect = [
            Coordinates(1.0, 2.0),
            Coordinates(None, None),
            GeocodingError("boom"),
            Coordinates(0.0, 0.0),
        ]
        results = BatchProcessor(_addresses(4), client, delay_seconds=0).start()
        for r in results:
            has_coords = r.latitude is not None and r.longitude is not None
            assert (r.status is GeocodeStatus.SUCCESS) == has_coords


# ---------------------------------------------------------------------------
# Throttle
# ---------------------------------------------------------------------------


class TestBatchProcessorDelay:
    def test_delay_between_lookups_not_after_last(self) -> None:
        processor = BatchProcessor(_addresses(3), _client(), delay_seconds=1.0)
        with patch.object(processor, "_wake") as wake:
            processor.start()
        assert wake.wait.call_count == 2
        wake.wait.assert_called_with(1.0)

    def test_delay_applies_after_errors_too(self) -> None:
        client = _client()
        client.lookup.side_effect = GeocodingError("down")
        processor = BatchProcessor(_addresses(3), client, delay_seconds=1.0)
        with patch.object(processor, "_wake") as wake:
            processor.start()
        assert wake.wait.call_count == 2

    def test_pause_cuts_delay_short(self) -> None:
        first_done = threading.Event()

        def on_result(result, attempted, total) -> None:
            first_done.set()

        processor = BatchProcessor(
            _addresses(3), _client(), delay_seconds=30.0, on_result=on_result
        )
        output: list = []
        worker = threading.Thread(target=lambda: output.append(processor.start()))
        worker.start()
        assert first_done.wait(timeout=5)
        processor.pause()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert processor.state is ProcessorState.PAUSED
        assert len(output[0]) == 1

    def test_reset_cuts_delay_short(self) -> None:
        first_done = threading.Event()

        def on_result(result, attempted, total) -> None:
            first_done.set()

        processor = BatchProcessor(
            _addresses(3), _client(), delay_seconds=30.0, on_result=on_result
        )
        output: list = []
        worker = threading.Thread(target=lambda: output.append(processor.start()))
        worker.start()
        assert first_done.wait(timeout=5)
        processor.reset()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert output == [[]]
        assert processor.state is ProcessorState.IDLE

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            BatchProcessor(_addresses(1), _client(), delay_seconds=-1)


# ---------------------------------------------------------------------------
# Pause / resume / reset
# ---------------------------------------------------------------------------


class TestBatchProcessorControl:
    def test_pause_after_k_addresses(self) -> None:
        processor: BatchProcessor

        def on_result(result, attempted, total) -> None:
            if attempted == 2:
                processor.pause()

        processor = BatchProcessor(
            _addresses(5), _client(), delay_seconds=0, on_result=on_result
        )
        results = processor.start()

        assert len(results) == 2
        assert processor.state is ProcessorState.PAUSED
        assert processor.summary().completed is False
        assert processor.progress == pytest.approx(40.0)

    def test_resume_continues_from_cursor(self) -> None:
        processor: BatchProcessor
        client = _client()

        def on_result(result, attempted, total) -> None:
            if attempted == 2:
                processor.pause()

        addresses = _addresses(4)
        processor = BatchProcessor(addresses, client, delay_seconds=0, on_result=on_result)
        processor.start()
        results = processor.resume()

        assert processor.state is ProcessorState.COMPLETED
        assert [r.full_address for r in results] == [a.full_address for a in addresses]
        assert client.lookup.call_count == 4

    def test_resume_when_not_paused_raises(self) -> None:
        processor = BatchProcessor(_addresses(1), _client(), delay_seconds=0)
        with pytest.raises(ProcessorStateError):
            processor.resume()

    def test_pause_when_idle_is_noop(self) -> None:
        processor = BatchProcessor(_addresses(2), _client(), delay_seconds=0)
        processor.pause()
        assert processor.state is ProcessorState.IDLE
        assert len(processor.start()) == 2

    def test_start_after_pause_restarts(self) -> None:
        processor: BatchProcessor
        paused_once = []

        def on_result(result, attempted, total) -> None:
            if not paused_once:
                paused_once.append(True)
                processor.pause()

        processor = BatchProcessor(_addresses(3), _client(), delay_seconds=0, on_result=on_result)
        assert len(processor.start()) == 1
        results = processor.start()
        assert len(results) == 3
        assert processor.state is ProcessorState.COMPLETED

    def test_reset_after_completion_clears_everything(self) -> None:
        processor = BatchProcessor(_addresses(3), _client(), delay_seconds=0)
        processor.start()
        processor.reset()
        assert processor.state is ProcessorState.IDLE
        assert processor.results == ()
        assert processor.progress == 0.0

    def test_reset_while_paused(self) -> None:
        processor: BatchProcessor

        def on_result(result, attempted, total) -> None:
            processor.pause()

        processor = BatchProcessor(_addresses(3), _client(), delay_seconds=0, on_result=on_result)
        processor.start()
        processor.reset()
        assert processor.state is ProcessorState.IDLE
        assert processor.results == ()
        with pytest.raises(ProcessorStateError):
            processor.resume()

    def test_reset_during_run_discards_results(self) -> None:
        processor: BatchProcessor

        def on_result(result, attempted, total) -> None:
            if attempted == 2:
                processor.reset()

        client = _client()
        processor = BatchProcessor(_addresses(5), client, delay_seconds=0, on_result=on_result)
        assert processor.start() == []
        assert processor.state is ProcessorState.IDLE
        assert processor.results == ()
        assert processor.progress == 0.0
        assert client.lookup.call_count == 2

    def test_pause_from_another_thread_waits_for_in_flight_lookup(self) -> None:
        in_flight = threading.Event()
        release = threading.Event()

        def lookup(text: str, hint: str | None = None) -> Coordinates:
            in_flight.set()
            release.wait(timeout=5)
            return Coordinates(53.0, 10.0)

        client = _client()
        client.lookup.side_effect = lookup
        processor = BatchProcessor(_addresses(3), client, delay_seconds=0)

        output: list = []
        worker = threading.Thread(target=lambda: output.append(processor.start()))
        worker.start()
        assert in_flight.wait(timeout=5)
        processor.pause()
        release.set()
        worker.join(timeout=5)

        assert processor.state is ProcessorState.PAUSED
        assert len(output[0]) == 1
        assert output[0][0].status is GeocodeStatus.SUCCESS

    def test_start_while_running_raises(self) -> None:
        processor: BatchProcessor
        errors: list[Exception] = []

        def on_result(result, attempted, total) -> None:
            try:
                processor.start()
            except ProcessorStateError as exc:
                errors.append(exc)

        processor = BatchProcessor(_addresses(1), _client(), delay_seconds=0, on_result=on_result)
        processor.start()
        assert len(errors) == 1

    def test_callback_error_leaves_batch_resumable(self) -> None:
        calls: list[int] = []

        def on_result(result, attempted, total) -> None:
            calls.append(attempted)
            if attempted == 1 and len(calls) == 1:
                raise RuntimeError("display closed")

        client = _client()
        processor = BatchProcessor(_addresses(3), client, delay_seconds=0, on_result=on_result)
        with pytest.raises(RuntimeError):
            processor.start()

        assert processor.state is ProcessorState.PAUSED
        assert len(processor.results) == 1
        assert processor.current_address is None

        results = processor.resume()
        assert processor.state is ProcessorState.COMPLETED
        assert len(results) == 3
        assert client.lookup.call_count == 3

    def test_start_works_after_callback_error(self) -> None:
        def on_result(result, attempted, total) -> None:
            raise RuntimeError("display closed")

        processor = BatchProcessor(_addresses(2), _client(), delay_seconds=0, on_result=on_result)
        with pytest.raises(RuntimeError):
            processor.start()

        processor.on_result = None
        assert len(processor.start()) == 2
        assert processor.summary().completed
