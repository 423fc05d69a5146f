"""
Key Light metric schema and Prometheus exposition.

The four gauge families are declared once per registry by KeyLightCollector.
Each scrape replaces the collector's observations wholesale before the
registry is rendered.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterator, Mapping

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector


class KeyLightMetric(Enum):
    """The closed set of gauges exported for a device."""

    INFO = "keylight_info"
    LIGHT_ON = "keylight_light_on"
    LIGHT_BRIGHTNESS_PERCENT = "keylight_light_brightness_percent"
    LIGHT_TEMPERATURE_KELVIN = "keylight_light_temperature_kelvin"

    @property
    def documentation(self) -> str:
        return _DOCUMENTATION[self]

    @property
    def labels(self) -> tuple[str, ...]:
        if self is KeyLightMetric.INFO:
            return ("firmware", "name", "serial")
        return ("light", "serial")


_DOCUMENTATION = {
    KeyLightMetric.INFO: "Metadata about an Elgato Key Light device.",
    KeyLightMetric.LIGHT_ON: (
        "Reports whether a given light on a device is turned on (0: off, 1: on)."
    ),
    KeyLightMetric.LIGHT_BRIGHTNESS_PERCENT: (
        "The brightness percentage of a given light on a device."
    ),
    KeyLightMetric.LIGHT_TEMPERATURE_KELVIN: (
        "The color temperature in Kelvin of a given light on a device."
    ),
}

LIGHT_METRICS = frozenset({
    KeyLightMetric.LIGHT_ON,
    KeyLightMetric.LIGHT_BRIGHTNESS_PERCENT,
    KeyLightMetric.LIGHT_TEMPERATURE_KELVIN,
})

Observation = tuple[tuple[str, ...], float]
Emit = Callable[..., None]
ScrapeFunc = Callable[[Mapping[KeyLightMetric, Emit]], None]


class KeyLightCollector(Collector):
    """
    Custom collector holding the current observations for every gauge.

    Registering the collector declares the schema; registering a second one
    on the same registry fails with a duplicated timeseries error.
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self._observations: dict[KeyLightMetric, list[Observation]] = {
            metric: [] for metric in KeyLightMetric
        }
        registry.register(self)

    def on_scrape(self, scrape: ScrapeFunc) -> None:
        """Run scrape against fresh emitters and keep only its observations."""
        observations: dict[KeyLightMetric, list[Observation]] = {
            metric: [] for metric in KeyLightMetric
        }

        def emitter(metric: KeyLightMetric) -> Emit:
            def emit(value: float, *labels: str) -> None:
                observations[metric].append((labels, value))
            return emit

        scrape({metric: emitter(metric) for metric in KeyLightMetric})
        self._observations = observations

    def observations(self, metric: KeyLightMetric) -> list[Observation]:
        return list(self._observations[metric])

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for metric in KeyLightMetric:
            yield GaugeMetricFamily(metric.value, metric.documentation, labels=metric.labels)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        for metric in KeyLightMetric:
            family = GaugeMetricFamily(metric.value, metric.documentation, labels=metric.labels)
            for labels, value in self._observations[metric]:
                family.add_metric(labels, value)
            yield family


class PrometheusMetricsRenderer:
    """Render all metrics in a shared CollectorRegistry."""

    def __init__(self, registry: CollectorRegistry) -> None:
        self._registry = registry

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def generate(self) -> bytes:
        return generate_latest(self._registry)
