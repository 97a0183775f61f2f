"""Tests for the Azure Monitor metrics client."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import ClientAuthenticationError, HttpResponseError, ServiceRequestError

from costopt.clients.azure.monitor_client import MonitorClient
from costopt.core.exceptions import AuthenticationException, MetricsException


@pytest.fixture
def client():
    monitor = MonitorClient(credential=MagicMock(), subscription_id="sub", config={})
    monitor._metrics_client = MagicMock()
    monitor._connected = True
    return monitor


def metrics_response(points):
    series = SimpleNamespace(data=[SimpleNamespace(average=a, maximum=m) for a, m in points])
    return SimpleNamespace(metrics=[SimpleNamespace(timeseries=[series])])


class TestMonitorClient:
    """Test series extraction and error mapping."""

    @pytest.mark.asyncio
    async def test_extracts_requested_aggregations(self, client):
        client._metrics_client.query_resource.return_value = metrics_response([(1.0, 2.0), (None, 5.0), (3.0, 4.0)])

        values = await client.query_metric("vm", "Percentage CPU", 7, aggregations=("Average", "Maximum"))

        assert values == {"Average": [1.0, 3.0], "Maximum": [2.0, 5.0, 4.0]}

    @pytest.mark.asyncio
    async def test_unsupported_metric_returns_empty(self, client):
        error = HttpResponseError(message="Metric not supported")
        error.status_code = 400
        client._metrics_client.query_resource.side_effect = error

        values = await client.query_metric("st", "Egress", 7, aggregations=("Total",))

        assert values == {"Total": []}

    @pytest.mark.asyncio
    async def test_auth_failure_is_not_a_missing_metric(self, client):
        client._metrics_client.query_resource.side_effect = ClientAuthenticationError("token expired")

        with pytest.raises(AuthenticationException):
            await client.query_metric("db", "dtu_consumption_percent", 7)

    @pytest.mark.asyncio
    async def test_service_error_raises(self, client):
        client._metrics_client.query_resource.side_effect = ServiceRequestError("connection reset")

        with pytest.raises(MetricsException):
            await client.query_metric("vm", "Percentage CPU", 7)

    @pytest.mark.asyncio
    async def test_unknown_aggregation(self, client):
        with pytest.raises(MetricsException):
            await client.query_metric("vm", "Percentage CPU", 7, aggregations=("Median",))

    @pytest.mark.asyncio
    async def test_requires_connection(self):
        monitor = MonitorClient(credential=MagicMock(), subscription_id="sub", config={})

        with pytest.raises(MetricsException):
            await monitor.query_metric("vm", "Percentage CPU", 7)
