from .settings import Settings, AzureSettings, ThresholdSettings, ApprovalSettings, RunbookSettings
from .catalog import PricingCatalog, SqlTier, load_catalog

__all__ = [
    "Settings",
    "AzureSettings",
    "ThresholdSettings",
    "ApprovalSettings",
    "RunbookSettings",
    "PricingCatalog",
    "SqlTier",
    "load_catalog",
]
