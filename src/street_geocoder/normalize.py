"""
Street Geocoder — Address Normalisation
========================================
Text clean-up applied to an address before it is sent to the geocoder.

Functions:
    normalize_address       Whitespace clean-up and ``strasse`` → ``straße``.
    standardize_address     Title-case and expand street abbreviations.
    build_query             Assemble ``"<address>, <hint>, <country>"``.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger("street_geocoder.normalize")

_WHITESPACE_RE = re.compile(r"\s+")
_STRASSE_RE = re.compile(r"strasse", re.IGNORECASE)
_WORD_RE = re.compile(r"\w\S*")

# Applied in order after title-casing, so "Str." must precede "St.".
_ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("Str ", "Straße "),
    ("Str.", "Straße"),
    ("St ", "Straße "),
    ("St.", "Straße"),
)


def _spell_strasse(match: re.Match[str]) -> str:
    return "Straße" if match.group(0)[0].isupper() else "straße"


def normalize_address(address: str) -> str:
    """Clean up *address* for a geocoding query.

    Replaces semicolons (stray CSV delimiters) with spaces, trims,
    collapses runs of whitespace and spells ``strasse`` as ``straße``.

    Example::

        normalize_address("  Hauptstrasse ;  5 ")
        # 'Hauptstraße 5'
    """
    cleaned = str(address).replace(";", " ").strip()
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return _STRASSE_RE.sub(_spell_strasse, cleaned)


def standardize_address(address: str) -> str:
    """Title-case *address* and expand common street abbreviations.

    Returns an empty string (and logs a warning) for blank input.

    Example::

        standardize_address("bahnhof str. 3")
        # 'Bahnhof Straße 3'
    """
    address = str(address).strip()
    if not address:
        logger.warning("Empty address passed to standardize_address.")
        return ""

    address = _WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), address)
    for abbreviation, full in _ABBREVIATIONS:
        address = address.replace(abbreviation, full)

    logger.debug("Standardised address: %s", address)
    return address


def build_query(address: str, location_hint: str | None, country: str) -> str:
    """Assemble the free-text query sent to the geocoder.

    Args:
        address: Normalised address text.
        location_hint: Optional ``"<postal code> <city>"`` string.
        country: Country name appended last, e.g. ``"Deutschland"``.
    """
    parts = [address]
    if location_hint and location_hint.strip():
        parts.append(location_hint.strip())
    if country:
        parts.append(country)
    return ", ".join(parts)
