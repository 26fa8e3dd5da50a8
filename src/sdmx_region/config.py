from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

from sdmx_region.catalogue.roles import (
    DEFAULT_FREQUENCY_DIMENSION_ID,
    DEFAULT_REGION_DIMENSION_ID,
    DEFAULT_REGION_TYPE_DIMENSION_ID,
    DEFAULT_TIME_PERIOD_DIMENSION_ID,
    RoleIds,
)
from sdmx_region.io.fetch import DEFAULT_TIMEOUT_SECONDS
from sdmx_region.io.urls import DEFAULT_AGENCY
from sdmx_region.region_mapping import DEFAULT_REGION_TYPES


class DimensionsConfig(BaseModel):
    region: str = DEFAULT_REGION_DIMENSION_ID
    region_type: str = DEFAULT_REGION_TYPE_DIMENSION_ID
    time_period: str = DEFAULT_TIME_PERIOD_DIMENSION_ID
    frequency: str = DEFAULT_FREQUENCY_DIMENSION_ID

    def role_ids(self) -> RoleIds:
        return RoleIds(
            region=self.region,
            region_type=self.region_type,
            time_period=self.time_period,
            frequency=self.frequency,
        )


class SourceConfig(BaseModel):
    url: str | None = None
    agency: str = DEFAULT_AGENCY


class HttpConfig(BaseModel):
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    proxy_url: str | None = None
    user_agent: str | None = None


class RegionsConfig(BaseModel):
    region_types: list[str] = Field(default_factory=lambda: list(DEFAULT_REGION_TYPES))


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dimensions: DimensionsConfig = Field(default_factory=DimensionsConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    regions: RegionsConfig = Field(default_factory=RegionsConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path | None = None) -> AppConfig:
    if path is None and DEFAULT_CONFIG_PATH.exists():
        path = DEFAULT_CONFIG_PATH
    if path is None:
        config = AppConfig()
    else:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        config = AppConfig.model_validate(data)

    config.http.proxy_url = config.http.proxy_url or os.getenv("SDMX_REGION_PROXY_URL")
    return config
