"""
Shared utilities and dependencies for API route modules.

Provides a centralized place for obtaining the footprint data source and for
turning failed action results into HTTP responses, so individual route files
stay thin.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, status

from datasources.base import FootprintSource
from datasources.sql import SqlFootprintSource
from services.projection_service import ERROR_NOT_FOUND, ActionResult

_source: Optional[FootprintSource] = None


def get_source() -> FootprintSource:
    global _source
    if _source is None:
        _source = SqlFootprintSource()
    return _source


def raise_for_result(result: ActionResult) -> None:
    if result.success:
        return
    code = status.HTTP_404_NOT_FOUND if result.error_code == ERROR_NOT_FOUND else status.HTTP_502_BAD_GATEWAY
    raise HTTPException(status_code=code, detail=result.error)
