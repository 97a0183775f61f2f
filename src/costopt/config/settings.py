# config/settings.py
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from enum import Enum
from dotenv import load_dotenv

# Load .env file explicitly
load_dotenv()


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"


class AzureSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AZURE_", extra="ignore")
    
    subscription_id: Optional[str] = Field(None, description="Azure subscription ID")
    tenant_id: Optional[str] = Field(None, description="Azure tenant ID")
    client_id: Optional[str] = Field(None, description="Azure client ID for service principal")
    client_secret: Optional[str] = Field(None, description="Azure client secret")
    resource_group: Optional[str] = Field(None, description="Default resource group scope")


class ThresholdSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", extra="ignore")
    
    vm_cpu_threshold: float = Field(10.0, description="Average CPU % below which a VM is underutilized")
    vm_cpu_monitor_threshold: float = Field(20.0, description="Average CPU % below which a VM is monitored longer")
    storage_access_threshold: int = Field(30, description="Days without access before Hot moves to Cool")
    storage_archive_threshold: int = Field(90, description="Days without access before Cool moves to Archive")
    storage_hot_archive_threshold: int = Field(180, description="Days without access before Hot moves straight to Archive")
    database_dtu_threshold: float = Field(20.0, description="Average DTU % below which a database is underutilized")
    database_dtu_strict_threshold: float = Field(10.0, description="Average DTU % for the highly underutilized band")
    database_daily_connections_threshold: float = Field(10.0, description="Daily connections below which a database is idle")
    database_dtu_high_threshold: float = Field(80.0, description="Average DTU % above which a scale up is suggested")
    cosmos_ru_low_threshold: float = Field(20.0, description="Normalized RU % below which autoscale is suggested")
    cosmos_ru_high_threshold: float = Field(80.0, description="Normalized RU % above which more RU/s is suggested")


class ApprovalSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", extra="ignore")
    
    auto_approve_threshold: float = Field(100.0, ge=0, description="Monthly savings (USD) approved without sign-off")
    require_approval_threshold: float = Field(500.0, ge=0, description="Monthly savings (USD) at which automation never acts")

    @model_validator(mode="after")
    def validate_ceilings(self):
        if self.require_approval_threshold < self.auto_approve_threshold:
            raise ValueError("require_approval_threshold must not be below auto_approve_threshold")
        return self


class RunbookSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RUNBOOK_", extra="ignore")
    
    lookback_days: int = Field(7, ge=1, description="Metrics lookback window in days")
    min_data_points: int = Field(24, ge=0, description="Hourly points required to trust a recommendation")
    strict_min_data_points: int = Field(48, ge=0, description="Hourly points required for the strict database band")
    poll_interval_seconds: float = Field(15.0, ge=0, description="Seconds between power state polls")
    max_poll_attempts: int = Field(40, ge=1, description="Power state polls before giving up on deallocation")
    catalog_path: Optional[str] = Field(None, description="YAML file overriding the built-in pricing catalog")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_format: LogFormat = Field(LogFormat.JSON, description="Log format (json or text)")
    
    azure: AzureSettings = Field(default_factory=lambda: AzureSettings())
    thresholds: ThresholdSettings = Field(default_factory=lambda: ThresholdSettings())
    approval: ApprovalSettings = Field(default_factory=lambda: ApprovalSettings())
    runbook: RunbookSettings = Field(default_factory=lambda: RunbookSettings())

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @field_validator('log_format', mode='before')
    @classmethod
    def validate_log_format(cls, v):
        if isinstance(v, str):
            return LogFormat(v.lower())
        return v

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()
