"""
Constants and configuration for GreenRatchet.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import Dict, Optional

from pydantic_settings import BaseSettings


GREENRATCHET_DATABASE_URL = os.getenv("GREENRATCHET_DATABASE_URL", "")
GREENRATCHET_HISTORY_MONTHS = int(os.getenv("GREENRATCHET_HISTORY_MONTHS", "12"))
GREENRATCHET_PROJECTION_MONTHS = int(os.getenv("GREENRATCHET_PROJECTION_MONTHS", "6"))

# month keys are rendered as e.g. "2026-03"
MONTH_KEY_FORMAT = "%Y-%m"

# fewest points a line can be fitted through
MIN_HISTORY_MONTHS = 2

# source rows store co2e in metric tonnes and energy in kWh
CO2E_TONNES_TO_KG: float = 1000.0
KWH_TO_MWH: float = 1 / 1000.0

# Water Usage Effectiveness, litres per kWh of IT energy (AWS, 2024).
# Keys are region ids; names are kept alongside so lookups accept either.
WUE_2024: Dict[str, tuple[str, float]] = {
    "GLOBAL": ("GLOBAL", 0.15),
    "AMER": ("AMER", 0.14),
    "EMEA": ("EMEA", 0.12),
    "APAC": ("APAC", 0.27),
    "Europe": ("Europe", 0.04),
    "North America": ("North America", 0.13),
    "Central/South America": ("Central/South America", 0.23),
    "Asia Pacific (excl. China)": ("Asia Pacific (excl. China)", 0.98),
    "eu-north-1": ("Europe (Stockholm)", 0.02),
    "us-east-2": ("U.S. East (Ohio)", 0.10),
    "eu-west-1": ("Europe (Ireland)", 0.03),
    "eu-central-1": ("Europe (Frankfurt)", 0.01),
    "sa-east-1": ("South America (Sao Paulo)", 0.23),
    "us-east-1": ("U.S. East (Northern Virginia)", 0.12),
    "ap-southeast-4": ("Asia-Pacific (Melbourne)", 0.02),
    "ap-northeast-1": ("Asia-Pacific (Tokyo)", 0.91),
    "us-west-2": ("U.S. West (Oregon)", 0.16),
    "us-west-1": ("U.S. West (Northern California)", 0.51),
    "ap-southeast-1": ("Asia-Pacific (Singapore)", 1.68),
    "ap-southeast-2": ("Asia-Pacific (Sydney)", 0.12),
    "ca-central-1": ("Canada (Central)", 0.04),
    "eu-south-2": ("Europe (Spain)", 0.24),
    "ca-west-1": ("Canada (West)", 0.08),
    "ap-southeast-3": ("Asia-Pacific (Jakarta)", 2.75),
}

HEALTH_PATH = "/api/v1/ready"


class Settings(BaseSettings):
    database_url: str = GREENRATCHET_DATABASE_URL
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800

    # projection window defaults and hard caps
    default_history_months: int = GREENRATCHET_HISTORY_MONTHS
    default_projection_months: int = GREENRATCHET_PROJECTION_MONTHS
    max_history_months: int = 120
    max_projection_months: int = 60

    # litres per kWh used when a region has no published WUE
    default_wue: float = 0.15

    # dashboard fans out one timeline per metric
    max_parallel_metric_queries: int = 3

    # internal auth between the dashboard frontend and this service
    expected_service_token: str = ""
    context_verify_key: str = ""
    context_issuer: str = "greenratchet-web"
    context_audience: str = "greenratchet-projections"
    context_algorithms: str = "HS256"

    host: str = "0.0.0.0"
    port: int = 4322
    log_level: str = "info"
    ssl_enabled: bool = False
    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None

    model_config = {
        "env_prefix": "GREENRATCHET_",
        "extra": "ignore",
    }


settings = Settings()
