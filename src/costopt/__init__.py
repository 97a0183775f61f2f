"""Cost optimization runbooks for Azure VMs, blob storage and databases."""

__version__ = "0.1.0"
