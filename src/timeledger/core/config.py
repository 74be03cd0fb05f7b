"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings


class IngestConfig(BaseSettings):
    """Timesheet ingestion configuration."""

    model_config = {"env_prefix": "TIMELEDGER_INGEST_"}

    export_worksheet: str = "Data"  # column-header export format
    grid_worksheet: str = "Sheet1"  # manual monthly grid format
    max_concurrent_files: int = 8
    default_premium: str = "1"
    holiday_code: str = "h"
    subtotal_marker: str = "total"


class ReportConfig(BaseSettings):
    """Period aggregation and report configuration."""

    model_config = {"env_prefix": "TIMELEDGER_REPORT_"}

    standard_workday_hours: Decimal = Decimal("8.0")
    aggregation_workers: int = 1


class S3Config(BaseSettings):
    """S3 timesheet drop-zone configuration."""

    model_config = {"env_prefix": "TIMELEDGER_S3_"}

    bucket: str = "timeledger-timesheets"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    processed_prefix: str = "processed/"
    failed_prefix: str = "failed/"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "TIMELEDGER_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    ingest: IngestConfig = IngestConfig()
    report: ReportConfig = ReportConfig()
    s3: S3Config = S3Config()
