"""Backfill smart-meter consumption history from the Geredis API.

``plotting`` is not imported here; it pulls in matplotlib and is only
needed by the ``plot`` command.
"""

from . import config, format, geredis_api, linky_data

__all__ = ["config", "format", "geredis_api", "linky_data"]
