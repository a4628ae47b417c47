"""
Base interface for footprint data sources

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from engine.enums import MetricKind


@dataclass(frozen=True)
class FootprintSum:
    period_start: datetime
    total: float
    region: Optional[str] = None


class FootprintSource(ABC):
    """Read-only access to an organization's reported cloud footprint.

    Implementations are blocking; callers on the event loop hop to a worker
    thread before invoking them.
    """

    @abstractmethod
    def organization_exists(self, organization_id: str) -> bool: ...

    @abstractmethod
    def monthly_sums(
        self,
        organization_id: str,
        metric: MetricKind,
        start: datetime,
        end: datetime,
    ) -> List[FootprintSum]:
        """Raw per-period sums for rows with ``start <= period_start < end``.

        Values are in storage units (tonnes CO2e or kWh). Water sums are
        split by region so the caller can apply a per-region WUE.
        """
