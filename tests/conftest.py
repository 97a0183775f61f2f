"""Pytest configuration and fixtures for the runbook tests."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List
from unittest.mock import AsyncMock

import pytest

from costopt.config.catalog import PricingCatalog
from costopt.config.settings import AzureSettings, RunbookSettings, Settings
from costopt.core.exceptions import MetricsException
from costopt.models.utilization import BlobAccessInfo

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog() -> PricingCatalog:
    return PricingCatalog()


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults except for a fake subscription and an instant poll loop."""
    return Settings(
        azure=AzureSettings(subscription_id="00000000-0000-0000-0000-000000000000", resource_group="rg-test"),
        runbook=RunbookSettings(poll_interval_seconds=0, max_poll_attempts=3),
    )


@pytest.fixture
def metric_source():
    """Build a query_metric replacement from {metric_name: {aggregation: values}}."""
    def build(series: Dict[str, Dict[str, List[float]]], failing=()):
        async def query_metric(resource_id, metric_name, days, aggregations=("Average",), **kwargs):
            if metric_name in failing:
                raise MetricsException(f"{metric_name} query failed for {resource_id}")
            data = series.get(metric_name, {})
            return {a: list(data.get(a, [])) for a in aggregations}
        return query_metric
    return build


@pytest.fixture
def monitor_client(metric_source):
    """Monitor client whose every series is empty until a test says otherwise."""
    client = AsyncMock()
    client.query_metric.side_effect = metric_source({})
    return client


@pytest.fixture
def compute_client():
    client = AsyncMock()
    client.get_power_state.return_value = "running"
    return client


@pytest.fixture
def storage_client():
    return AsyncMock()


@pytest.fixture
def database_client():
    return AsyncMock()


@pytest.fixture
def make_blob():
    def build(name="logs/app.log", tier="Hot", size_gb=100.0, accessed_days=None, modified_days=None):
        container, _, blob_name = name.partition('/')
        return BlobAccessInfo(
            container=container,
            name=blob_name,
            access_tier=tier,
            size_bytes=int(size_gb * 1024 ** 3),
            last_accessed_on=NOW - timedelta(days=accessed_days) if accessed_days is not None else None,
            last_modified=NOW - timedelta(days=modified_days) if modified_days is not None else None,
        )
    return build


def vm_record(name="vm-web-01", size="Standard_D2s_v3"):
    return {
        'name': name,
        'id': f"/subscriptions/sub/resourceGroups/rg-test/providers/Microsoft.Compute/virtualMachines/{name}",
        'resource_group': "rg-test",
        'location': "westeurope",
        'vm_size': size,
        'tags': {},
    }


@pytest.fixture
def make_vm():
    return vm_record
