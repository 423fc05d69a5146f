"""Exception hierarchy for the exporter."""

from __future__ import annotations


class KeyLightExporterError(Exception):
    """Base class for exporter errors."""


class AddressError(KeyLightExporterError, ValueError):
    """A scrape target could not be turned into a device endpoint."""


class FetchError(KeyLightExporterError):
    """Device data could not be fetched from an endpoint."""


class UnhandledMetricError(KeyLightExporterError, RuntimeError):
    """A scrape was asked to emit a metric outside the declared schema."""
