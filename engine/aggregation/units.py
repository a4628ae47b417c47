"""
Conversion of raw footprint sums into the units each metric is reported in.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Optional

from config import CO2E_TONNES_TO_KG, KWH_TO_MWH, WUE_2024, settings
from engine.enums import MetricKind

_WUE_BY_NAME = {
    key.lower(): wue for region_id, (name, wue) in WUE_2024.items() for key in (region_id, name)
}


def wue_for_region(region: Optional[str]) -> float:
    """Litres of water withdrawn per kWh of IT energy in ``region``."""
    if not region:
        return settings.default_wue
    return _WUE_BY_NAME.get(region.strip().lower(), settings.default_wue)


def to_metric_units(metric: MetricKind, raw: float, region: Optional[str] = None) -> float:
    if metric is MetricKind.emissions:
        return raw * CO2E_TONNES_TO_KG
    if metric is MetricKind.energy:
        return raw * KWH_TO_MWH
    return raw * wue_for_region(region)
