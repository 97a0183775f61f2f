"""Static lookup tables used by the recommendation engines.

The tables are plain data injected at startup. Every engine receives a
``PricingCatalog`` instance instead of reaching for module constants, so a
YAML file can replace any table without touching the decision logic.
"""

from pathlib import Path
from typing import Dict, Optional, Tuple, Union
import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from costopt.core.exceptions import ConfigurationException

logger = structlog.get_logger(__name__)


class SqlTier(BaseModel):
    """One row of the DTU price table."""
    
    model_config = ConfigDict(frozen=True)
    
    edition: str = Field(..., description="Basic, Standard or Premium")
    dtu: int = Field(..., gt=0)
    monthly_cost: float = Field(..., ge=0)


DEFAULT_VM_SIZE_MAPPING: Dict[str, str] = {
    "Standard_D2s_v3": "Standard_B2s",
    "Standard_D4s_v3": "Standard_D2s_v3",
    "Standard_D8s_v3": "Standard_D4s_v3",
    "Standard_D16s_v3": "Standard_D8s_v3",
    "Standard_E2s_v3": "Standard_B2ms",
    "Standard_E4s_v3": "Standard_E2s_v3",
    "Standard_E8s_v3": "Standard_E4s_v3",
    "Standard_F4s_v2": "Standard_F2s_v2",
    "Standard_F8s_v2": "Standard_F4s_v2",
    "Standard_B4ms": "Standard_B2ms",
    "Standard_B2ms": "Standard_B2s",
}

# Pay-as-you-go Linux, USD per month (730 h)
DEFAULT_VM_PRICES: Dict[str, float] = {
    "Standard_B1s": 7.59,
    "Standard_B1ms": 15.18,
    "Standard_B2s": 35.04,
    "Standard_B2ms": 60.74,
    "Standard_B4ms": 121.18,
    "Standard_D2s_v3": 85.68,
    "Standard_D4s_v3": 171.36,
    "Standard_D8s_v3": 342.72,
    "Standard_D16s_v3": 685.44,
    "Standard_E2s_v3": 110.96,
    "Standard_E4s_v3": 221.92,
    "Standard_E8s_v3": 443.84,
    "Standard_F2s_v2": 61.32,
    "Standard_F4s_v2": 122.64,
    "Standard_F8s_v2": 245.28,
}

# USD per GB-month
DEFAULT_STORAGE_TIER_PRICES: Dict[str, float] = {
    "Hot": 0.0184,
    "Cool": 0.01,
    "Archive": 0.00099,
}

# Fraction of the current tier's storage cost saved by a transition
DEFAULT_TIER_SAVINGS: Dict[str, float] = {
    "Hot->Cool": 0.46,
    "Hot->Archive": 0.95,
    "Cool->Archive": 0.90,
}

DEFAULT_SQL_TIERS: Dict[str, SqlTier] = {
    "Basic": SqlTier(edition="Basic", dtu=5, monthly_cost=4.90),
    "S0": SqlTier(edition="Standard", dtu=10, monthly_cost=14.72),
    "S1": SqlTier(edition="Standard", dtu=20, monthly_cost=29.45),
    "S2": SqlTier(edition="Standard", dtu=50, monthly_cost=73.62),
    "S3": SqlTier(edition="Standard", dtu=100, monthly_cost=147.24),
    "S4": SqlTier(edition="Standard", dtu=200, monthly_cost=294.47),
    "S6": SqlTier(edition="Standard", dtu=400, monthly_cost=588.93),
    "S7": SqlTier(edition="Standard", dtu=800, monthly_cost=1177.86),
    "P1": SqlTier(edition="Premium", dtu=125, monthly_cost=456.25),
    "P2": SqlTier(edition="Premium", dtu=250, monthly_cost=912.50),
    "P4": SqlTier(edition="Premium", dtu=500, monthly_cost=1825.00),
    "P6": SqlTier(edition="Premium", dtu=1000, monthly_cost=3650.00),
}

DEFAULT_SQL_TIER_MAPPING: Dict[str, str] = {
    "S1": "S0",
    "S2": "S1",
    "S3": "S2",
    "S4": "S3",
    "S6": "S4",
    "S7": "S6",
    "P2": "P1",
    "P4": "P2",
    "P6": "P4",
}


class PricingCatalog(BaseModel):
    """Size mappings, tier tables and price tables for all three runbooks."""
    
    model_config = ConfigDict(frozen=True)
    
    vm_size_mapping: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_VM_SIZE_MAPPING))
    vm_prices: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_VM_PRICES))
    storage_tier_prices: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_STORAGE_TIER_PRICES))
    tier_savings: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_TIER_SAVINGS))
    sql_tiers: Dict[str, SqlTier] = Field(default_factory=lambda: dict(DEFAULT_SQL_TIERS))
    sql_tier_mapping: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SQL_TIER_MAPPING))
    cosmos_price_per_100_ru: float = Field(5.84, ge=0, description="USD per 100 RU/s per month")
    cosmos_autoscale_savings: float = Field(0.30, ge=0, le=1, description="Expected saving from autoscale")
    
    def vm_price(self, size: Optional[str]) -> Optional[float]:
        return self.vm_prices.get(size) if size else None
    
    def tier_transition(self, current: str, target: str) -> Tuple[float, float]:
        """Return (price per GB of current tier, savings fraction) for a tier move."""
        price = self.storage_tier_prices.get(current, 0.0)
        fraction = self.tier_savings.get(f"{current}->{target}", 0.0)
        return price, fraction
    
    def sql_tier(self, service_objective: Optional[str]) -> Optional[SqlTier]:
        return self.sql_tiers.get(service_objective) if service_objective else None


def load_catalog(path: Optional[Union[str, Path]] = None) -> PricingCatalog:
    """Build the catalog, overlaying tables from a YAML file when one is given.

    Top-level keys in the file replace the matching table entirely; keys the
    file does not mention keep their built-in defaults.
    """
    if not path:
        return PricingCatalog()
    
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise ConfigurationException(f"Catalog file not found: {catalog_path}")
    
    try:
        with open(catalog_path, 'r') as f:
            overrides = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationException(f"Catalog file is not valid YAML: {e}")
    
    if not isinstance(overrides, dict):
        raise ConfigurationException("Catalog file must contain a mapping of table names")
    
    unknown = set(overrides) - set(PricingCatalog.model_fields)
    if unknown:
        raise ConfigurationException(f"Unknown catalog tables: {', '.join(sorted(unknown))}")
    
    try:
        catalog = PricingCatalog(**overrides)
    except ValidationError as e:
        raise ConfigurationException(f"Invalid catalog file {catalog_path}: {e}")
    
    logger.info("Loaded pricing catalog overrides", path=str(catalog_path), tables=sorted(overrides))
    return catalog
