# src/costopt/clients/azure/monitor_client.py
"""Azure Monitor metrics client."""

from typing import Dict, Any, List, Optional, Sequence
from datetime import datetime, timedelta, timezone
import structlog
from azure.monitor.query import MetricsQueryClient, MetricAggregationType
from azure.core.exceptions import AzureError, HttpResponseError, ClientAuthenticationError

from costopt.core.base_client import BaseClient
from costopt.core.exceptions import AuthenticationException, ClientConnectionException, MetricsException

logger = structlog.get_logger(__name__)

AGGREGATIONS = {
    "Average": MetricAggregationType.AVERAGE,
    "Maximum": MetricAggregationType.MAXIMUM,
    "Minimum": MetricAggregationType.MINIMUM,
    "Total": MetricAggregationType.TOTAL,
}


class MonitorClient(BaseClient):
    """Reads hourly metric series for a resource."""
    
    def __init__(self, credential, subscription_id: str, config: Dict[str, Any]):
        super().__init__(credential, subscription_id, config, "MonitorClient")
        self._metrics_client = None
    
    async def connect(self) -> None:
        """Connect to Azure Monitor."""
        try:
            self._metrics_client = MetricsQueryClient(credential=self.credential)
            self._connected = True
            self.logger.info("Azure Monitor client connected successfully")
            
        except ClientAuthenticationError as e:
            raise ClientConnectionException("AzureMonitor", f"Authentication failed: {e}")
        except Exception as e:
            raise ClientConnectionException("AzureMonitor", f"Connection failed: {e}")
    
    async def disconnect(self) -> None:
        """Disconnect from Azure Monitor."""
        self._close_all(self._metrics_client)
        self.logger.info("Azure Monitor client disconnected")
    
    async def query_metric(self, resource_id: str, metric_name: str, days: int,
                           aggregations: Sequence[str] = ("Average",),
                           granularity: timedelta = timedelta(hours=1),
                           end_time: Optional[datetime] = None) -> Dict[str, List[float]]:
        """Fetch one metric series and return its values per aggregation.

        An unsupported or empty metric yields empty lists. Any other service
        failure raises MetricsException.
        """
        if not self._connected:
            raise MetricsException("Monitor client not connected")
        
        unknown = [a for a in aggregations if a not in AGGREGATIONS]
        if unknown:
            raise MetricsException(f"Unsupported aggregation(s): {', '.join(unknown)}")
        
        end_time = end_time or datetime.now(timezone.utc)
        start_time = end_time - timedelta(days=days)
        values: Dict[str, List[float]] = {a: [] for a in aggregations}
        
        try:
            response = self._metrics_client.query_resource(
                resource_uri=resource_id,
                metric_names=[metric_name],
                timespan=(start_time, end_time),
                granularity=granularity,
                aggregations=[AGGREGATIONS[a] for a in aggregations]
            )
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except HttpResponseError as e:
            if e.status_code == 400:
                self.logger.debug(f"Metric {metric_name} not supported", resource=resource_id, error=str(e))
                return values
            raise MetricsException(f"{metric_name} query failed for {resource_id}: {e}")
        except AzureError as e:
            raise MetricsException(f"{metric_name} query failed for {resource_id}: {e}")
        
        if not response or not response.metrics:
            return values
        
        for metric in response.metrics:
            for timeseries in metric.timeseries or []:
                for data_point in timeseries.data or []:
                    for aggregation in aggregations:
                        value = getattr(data_point, aggregation.lower(), None)
                        if value is not None:
                            values[aggregation].append(float(value))
        
        self.logger.debug(
            f"Collected {metric_name}",
            resource=resource_id,
            points={a: len(v) for a, v in values.items()}
        )
        return values
