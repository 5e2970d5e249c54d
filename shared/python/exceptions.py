"""
Street Geocoder — Custom Exception Hierarchy
=============================================
Every module in the project raises exceptions from this module so callers
can catch them at the right level of granularity.

Hierarchy::

    StreetGeocoderError                  ← catch-all base
    ├── InputValidationError             ← bad files, bad location hints
    │   ├── UnsupportedFileError         ← extension we cannot decode
    │   └── EmptyInputError              ← file holds no usable address
    ├── GeocodingError                   ← lookup transport / parse failures
    │   └── GeocodingRateLimitError      ← provider answered HTTP 429
    ├── ProcessorStateError              ← illegal batch state transition
    └── OutputWriteError                 ← cannot write to output path
        └── ExportError                  ← result serialisation failed

Usage::

    from shared.python.exceptions import EmptyInputError

    raise EmptyInputError(path)
"""

from __future__ import annotations

from pathlib import Path


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class StreetGeocoderError(Exception):
    """Base exception for the whole project.

    Args:
        message: Human-readable description of the error.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class InputValidationError(StreetGeocoderError):
    """Raised when inputs fail validation before processing starts."""


class UnsupportedFileError(InputValidationError):
    """Raised when an address file has an extension we cannot read.

    Args:
        path: The offending file.
        accepted: Extensions that are supported, each with a leading dot.
    """

    def __init__(self, path: Path | str, accepted: list[str]) -> None:
        path = Path(path)
        super().__init__(
            f"Unsupported file type '{path.suffix.lower() or path.name}'. "
            f"Accepted extensions: {', '.join(accepted)}"
        )
        self.path: Path = path
        self.accepted: list[str] = accepted


class EmptyInputError(InputValidationError):
    """Raised when an input file contains no usable address rows.

    Args:
        path: The file that was read.
    """

    def __init__(self, path: Path | str) -> None:
        super().__init__(
            f"No addresses found in '{path}'. Each row needs a street and "
            "a house number."
        )
        self.path: str = str(path)


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------


class GeocodingError(StreetGeocoderError):
    """Raised when a single geocoding lookup fails.

    Covers network errors, non-2xx responses and unparseable payloads.
    The batch processor records these per address and carries on.
    """


class GeocodingRateLimitError(GeocodingError):
    """Raised when the geocoding provider returns a rate-limit response.

    Args:
        provider: Name of the geocoding service (e.g. ``"Nominatim"``).
        retry_after: Suggested seconds to wait, if the API sent one.

    Example::

        raise GeocodingRateLimitError("Nominatim", retry_after=60)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        hint = f" Retry after {retry_after}s." if retry_after else ""
        super().__init__(f"Rate limit exceeded for provider '{provider}'.{hint}")
        self.provider: str = provider
        self.retry_after: int | None = retry_after


# ---------------------------------------------------------------------------
# Batch state machine
# ---------------------------------------------------------------------------


class ProcessorStateError(StreetGeocoderError):
    """Raised when a batch command is not valid in the current state.

    Args:
        command: The command that was issued (``"resume"``, ``"start"``).
        state: The state the processor was in.
    """

    def __init__(self, command: str, state: str) -> None:
        super().__init__(f"Cannot {command} while the batch is {state}.")
        self.command: str = command
        self.state: str = state


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class OutputWriteError(StreetGeocoderError):
    """Raised when output cannot be written to disk.

    Args:
        output_path: String representation of the path that failed.
        reason: Underlying OS or library error message.
    """

    def __init__(self, output_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to write output to '{output_path}': {reason}"
        )
        self.output_path: str = output_path
        self.reason: str = reason


class ExportError(OutputWriteError):
    """Raised when geocoded results cannot be serialised for download.

    Accumulated results are never touched by a failed export, so the
    caller may retry with another format or path.
    """
