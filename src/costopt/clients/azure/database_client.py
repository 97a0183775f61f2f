"""Azure SQL Database and Cosmos DB client."""

from typing import Dict, Any, List, Optional
import structlog
from azure.mgmt.sql import SqlManagementClient
from azure.mgmt.sql.models import DatabaseUpdate, Sku
from azure.mgmt.cosmosdb import CosmosDBManagementClient
from azure.core.exceptions import AzureError, ClientAuthenticationError, ResourceNotFoundError

from costopt.core.base_client import BaseClient
from costopt.core.exceptions import (
    AuthenticationException, ClientConnectionException, MutationException, ResourceNotFoundException
)
from costopt.core.utils import retry_with_backoff, resource_group_from_id, safe_get

logger = structlog.get_logger(__name__)

SYSTEM_DATABASES = {"master", "tempdb", "model", "msdb"}


class DatabaseClient(BaseClient):
    """Client for SQL databases and Cosmos DB accounts."""
    
    def __init__(self, credential, subscription_id: str, config: Dict[str, Any]):
        super().__init__(credential, subscription_id, config, "DatabaseClient")
        self._sql_client = None
        self._cosmos_client = None
    
    async def connect(self) -> None:
        """Connect to Azure SQL and Cosmos DB management."""
        try:
            self._sql_client = SqlManagementClient(
                credential=self.credential,
                subscription_id=self.subscription_id
            )
            self._cosmos_client = CosmosDBManagementClient(
                credential=self.credential,
                subscription_id=self.subscription_id
            )
            self._connected = True
            self.logger.info("Azure database clients connected successfully")
            
        except Exception as e:
            raise ClientConnectionException("AzureDatabase", f"Connection failed: {e}")
    
    async def disconnect(self) -> None:
        """Disconnect from Azure SQL and Cosmos DB management."""
        self._close_all(self._sql_client, self._cosmos_client)
        self.logger.info("Azure database clients disconnected")
    
    @retry_with_backoff(max_retries=3)
    async def list_sql_databases(self, resource_group: str,
                                 database_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """List user databases on every SQL server of the resource group."""
        try:
            databases = []
            for server in self._sql_client.servers.list_by_resource_group(resource_group):
                for db in self._sql_client.databases.list_by_server(resource_group, server.name):
                    if db.name in SYSTEM_DATABASES:
                        continue
                    if database_name and db.name != database_name:
                        continue
                    databases.append({
                        'name': db.name,
                        'id': db.id,
                        'server': server.name,
                        'resource_group': resource_group_from_id(db.id) or resource_group,
                        'service_objective': db.current_service_objective_name or safe_get(db, 'sku.name'),
                        'edition': safe_get(db, 'sku.tier'),
                        'status': db.status,
                    })
            
            self.logger.info(f"Discovered {len(databases)} SQL databases", resource_group=resource_group)
            return databases
            
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise ClientConnectionException("AzureSql", f"Failed to list databases: {e}")
    
    @retry_with_backoff(max_retries=3)
    async def list_cosmos_accounts(self, resource_group: str,
                                   account_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """List Cosmos DB accounts in a resource group, or just the named one."""
        try:
            if account_name:
                try:
                    accounts = [self._cosmos_client.database_accounts.get(resource_group, account_name)]
                except ResourceNotFoundError:
                    return []
            else:
                accounts = list(self._cosmos_client.database_accounts.list_by_resource_group(resource_group))
            
            account_list = [
                {
                    'name': account.name,
                    'id': account.id,
                    'resource_group': resource_group_from_id(account.id) or resource_group,
                    'kind': account.kind,
                }
                for account in accounts
            ]
            self.logger.info(f"Discovered {len(account_list)} Cosmos DB accounts", resource_group=resource_group)
            return account_list
            
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise ClientConnectionException("AzureCosmosDB", f"Failed to list accounts: {e}")
    
    async def set_service_objective(self, resource_group: str, server: str, database: str,
                                    service_objective: str, edition: Optional[str] = None) -> None:
        """Scale a DTU database to another service objective and wait for completion."""
        try:
            poller = self._sql_client.databases.begin_update(
                resource_group,
                server,
                database,
                DatabaseUpdate(sku=Sku(name=service_objective, tier=edition))
            )
            poller.result()
        except ResourceNotFoundError:
            raise ResourceNotFoundException("SqlDatabase", database, f"{resource_group}/{server}")
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise MutationException(database, "set service objective", str(e))
