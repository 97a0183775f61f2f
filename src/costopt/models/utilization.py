"""Utilization samples reduced from Azure Monitor series."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime, timezone


class UtilizationSample(BaseModel):
    """Scalar aggregates of one resource's metrics over the lookback window.

    Series that are missing or unsupported for a resource stay at zero.
    ``data_points`` counts the hourly points of the primary series (CPU, DTU
    or RU) and gates how far the recommendation may be trusted.
    """
    
    model_config = ConfigDict(frozen=True)
    
    resource_id: str
    window_days: int = Field(..., ge=1)
    data_points: int = Field(0, ge=0)
    
    avg_cpu_percent: float = Field(0.0, ge=0)
    max_cpu_percent: float = Field(0.0, ge=0)
    avg_available_memory_bytes: float = Field(0.0, ge=0)
    avg_disk_ops_per_sec: float = Field(0.0, ge=0)
    
    avg_dtu_percent: float = Field(0.0, ge=0)
    max_dtu_percent: float = Field(0.0, ge=0)
    daily_connections: float = Field(0.0, ge=0)
    
    avg_ru_percent: float = Field(0.0, ge=0)
    max_ru_percent: float = Field(0.0, ge=0)
    provisioned_throughput: float = Field(0.0, ge=0, description="RU/s")
    
    total_transactions: float = Field(0.0, ge=0)
    total_egress_bytes: float = Field(0.0, ge=0)
    avg_used_capacity_bytes: float = Field(0.0, ge=0)


class BlobAccessInfo(BaseModel):
    """Tiering-relevant properties of a single block blob."""
    
    model_config = ConfigDict(frozen=True)
    
    container: str
    name: str
    access_tier: Optional[str] = None
    size_bytes: int = Field(0, ge=0)
    last_modified: Optional[datetime] = None
    last_accessed_on: Optional[datetime] = None
    
    @property
    def path(self) -> str:
        return f"{self.container}/{self.name}"
    
    @property
    def size_gb(self) -> float:
        return self.size_bytes / (1024 ** 3)
    
    @property
    def uses_access_tracking(self) -> bool:
        return self.last_accessed_on is not None
    
    def days_since_access(self, now: Optional[datetime] = None) -> Optional[int]:
        """Days since last read, falling back to last write when tracking is off."""
        reference = self.last_accessed_on or self.last_modified
        if reference is None:
            return None
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        return max((now - reference).days, 0)
