"""Code shared across Street Geocoder modules; see :mod:`shared.python`."""
