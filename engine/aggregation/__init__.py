"""
Monthly aggregation of footprint records into contiguous, zero-filled calendar-month totals.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.aggregation.monthly import MonthlyMetric, aggregate_monthly
from engine.aggregation.calendar import add_months, month_key, month_window

__all__ = ["MonthlyMetric", "aggregate_monthly", "add_months", "month_key", "month_window"]
