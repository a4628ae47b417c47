"""
Enumerations for the metric kinds an organization can be projected on.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum

from engine.errors import InvalidArgument


class MetricKind(str, Enum):
    emissions = "emissions"
    water = "water"
    energy = "energy"

    @classmethod
    def parse(cls, value: "str | MetricKind") -> MetricKind:
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        try:
            return cls(raw)
        except ValueError as exc:
            allowed = ", ".join(m.value for m in cls)
            raise InvalidArgument(f"Unsupported metric {value!r}; expected one of: {allowed}") from exc

    @property
    def unit(self) -> str:
        return _UNITS[self]


_UNITS = {
    MetricKind.emissions: "kgCO2e",
    MetricKind.water: "L",
    MetricKind.energy: "MWh",
}
