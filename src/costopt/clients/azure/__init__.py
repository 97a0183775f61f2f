from .client_factory import AzureClientFactory
from .compute_client import ComputeClient
from .database_client import DatabaseClient
from .monitor_client import MonitorClient
from .storage_client import StorageClient


__all__ = [
    "AzureClientFactory",
    "ComputeClient",
    "DatabaseClient",
    "MonitorClient",
    "StorageClient",
]
