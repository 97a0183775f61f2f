from .exceptions import *
from .base_client import BaseClient
from .utils import *

__all__ = [
    "BaseClient",
    "CostOptimizationException",
    "ConfigurationException",
    "AuthenticationException",
    "ClientConnectionException",
    "MetricsException",
    "ResourceNotFoundException",
    "MutationException",
    "DeallocationTimeoutException",
    "retry_with_backoff",
    "setup_logging",
    "safe_get",
    "parse_resource_id",
    "resource_group_from_id",
    "format_currency",
]
