"""Utility functions and decorators."""

import logging
import logging.config
import sys
import structlog
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Union
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from azure.core.exceptions import ServiceRequestError, ServiceResponseError

from costopt.core.exceptions import ClientConnectionException


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 1.5,
    max_wait: float = 60.0
):
    """Decorator for retry with exponential backoff on transient service errors."""
    return retry(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=backoff_factor, max=max_wait),
        retry=retry_if_exception_type((ServiceRequestError, ServiceResponseError, ClientConnectionException)),
        reraise=True
    )


def setup_logging(log_level: str = "INFO", log_format: str = "json",
                  config_path: Optional[Union[str, Path]] = None) -> None:
    """Setup structured logging configuration.

    JSON output yields one line per record with timestamp, level and message,
    which is what the automation account job stream captures.
    """
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(message)s',
            stream=sys.stdout,
            force=True
        )
    
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def safe_get(obj: Any, path: str, default: Any = None) -> Any:
    """Walk a dotted attribute path on an SDK model, returning default on any gap."""
    value = obj
    for part in path.split('.'):
        if value is None:
            return default
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return default if value is None else value


def parse_resource_id(resource_id: str) -> Dict[str, str]:
    """Split an ARM resource ID into its key/value segments.

    '/subscriptions/s/resourceGroups/rg/providers/Microsoft.Compute/virtualMachines/vm1'
    yields {'subscriptions': 's', 'resourceGroups': 'rg', 'providers': 'Microsoft.Compute',
    'virtualMachines': 'vm1'}.
    """
    parts = [p for p in (resource_id or "").split('/') if p]
    return {parts[i]: parts[i + 1] for i in range(0, len(parts) - 1, 2)}


def resource_group_from_id(resource_id: str) -> Optional[str]:
    """Extract the resource group name from an ARM resource ID."""
    segments = parse_resource_id(resource_id)
    for key, value in segments.items():
        if key.lower() == "resourcegroups":
            return value
    return None


def format_currency(amount: float) -> str:
    """Format a USD amount for log and summary lines."""
    return f"${amount:,.2f}"
