"""
Elgato Key Light Prometheus Exporter

Scrapes an Elgato Key Light accessory named by the ``target`` query parameter
on every request and exposes its state as Prometheus gauges.
"""

__version__ = "0.1.0"
