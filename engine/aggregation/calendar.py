"""
Calendar-month arithmetic used to lay out history and projection windows.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from config import MONTH_KEY_FORMAT


def month_start(value: date) -> date:
    return date(value.year, value.month, 1)


def add_months(value: date, months: int) -> date:
    return month_start(value) + relativedelta(months=months)


def month_key(value: date) -> str:
    return value.strftime(MONTH_KEY_FORMAT)


def month_window(months: int, now: Optional[datetime] = None) -> List[date]:
    """First day of each of the ``months`` calendar months ending at ``now``'s month, oldest first."""
    current = month_start(now or datetime.now(timezone.utc))
    return [add_months(current, offset) for offset in range(1 - months, 1)]
