"""Translation of fetched device data into gauge observations."""

from __future__ import annotations

from typing import Mapping

from .exceptions import UnhandledMetricError
from .fetcher import DeviceData, Light
from .metrics import LIGHT_METRICS, Emit, KeyLightMetric, ScrapeFunc


def scrape_device(data: DeviceData) -> ScrapeFunc:
    """Gather metrics for a single device's data."""
    device = data.device
    serial = device.serial_number

    def scrape(metrics: Mapping[KeyLightMetric, Emit]) -> None:
        for metric, emit in metrics.items():
            if metric is KeyLightMetric.INFO:
                emit(1.0, device.firmware_version, device.display_name, serial)
            elif metric in LIGHT_METRICS:
                # Lights are identified only by their position on the device.
                for i, light in enumerate(data.lights):
                    emit(light_value(metric, light), f"light{i}", serial)
            else:
                raise UnhandledMetricError(f"unhandled metric {metric!r}")

    return scrape


def light_value(metric: KeyLightMetric, light: Light) -> float:
    if metric is KeyLightMetric.LIGHT_ON:
        return bool_float(light.on)
    if metric is KeyLightMetric.LIGHT_BRIGHTNESS_PERCENT:
        return float(light.brightness)
    if metric is KeyLightMetric.LIGHT_TEMPERATURE_KELVIN:
        return float(light.temperature)
    raise UnhandledMetricError(f"unhandled light metric {metric!r}")


def bool_float(b: bool) -> float:
    return 1.0 if b else 0.0
