"""Azure Storage client for account inventory and blob tiering."""

from typing import Dict, Any, List, Optional
import structlog
from azure.mgmt.storage import StorageManagementClient
from azure.storage.blob import BlobServiceClient, BlobType
from azure.core.exceptions import AzureError, ClientAuthenticationError, ResourceNotFoundError

from costopt.core.base_client import BaseClient
from costopt.core.exceptions import (
    AuthenticationException, ClientConnectionException, MutationException, ResourceNotFoundException
)
from costopt.core.utils import retry_with_backoff, resource_group_from_id, safe_get
from costopt.models.utilization import BlobAccessInfo

logger = structlog.get_logger(__name__)


def _enum_value(value):
    return getattr(value, "value", value)


class StorageClient(BaseClient):
    """Client for storage accounts and their block blobs."""
    
    def __init__(self, credential, subscription_id: str, config: Dict[str, Any]):
        super().__init__(credential, subscription_id, config, "StorageClient")
        self._storage_client = None
        self._blob_clients: Dict[str, BlobServiceClient] = {}
    
    async def connect(self) -> None:
        """Connect to Azure Storage management."""
        try:
            self._storage_client = StorageManagementClient(
                credential=self.credential,
                subscription_id=self.subscription_id
            )
            self._connected = True
            self.logger.info("Azure Storage client connected successfully")
            
        except Exception as e:
            raise ClientConnectionException("AzureStorage", f"Connection failed: {e}")
    
    async def disconnect(self) -> None:
        """Disconnect from Azure Storage."""
        self._close_all(self._storage_client, *self._blob_clients.values())
        self._blob_clients = {}
        self.logger.info("Azure Storage client disconnected")
    
    @retry_with_backoff(max_retries=3)
    async def list_storage_accounts(self, resource_group: str,
                                    account_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """List storage accounts in a resource group, or just the named one."""
        try:
            if account_name:
                try:
                    accounts = [self._storage_client.storage_accounts.get_properties(resource_group, account_name)]
                except ResourceNotFoundError:
                    raise ResourceNotFoundException("StorageAccount", account_name, resource_group)
            else:
                accounts = list(self._storage_client.storage_accounts.list_by_resource_group(resource_group))
            
            account_list = [
                {
                    'name': account.name,
                    'id': account.id,
                    'resource_group': resource_group_from_id(account.id),
                    'kind': account.kind,
                    'access_tier': account.access_tier or "Hot",
                    'blob_endpoint': safe_get(account, 'primary_endpoints.blob',
                                              f"https://{account.name}.blob.core.windows.net"),
                }
                for account in accounts
            ]
            self.logger.info(f"Discovered {len(account_list)} storage accounts", resource_group=resource_group)
            return account_list
            
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise ClientConnectionException("AzureStorage", f"Failed to list storage accounts: {e}")
    
    def _blob_service(self, account: Dict[str, Any]) -> BlobServiceClient:
        name = account['name']
        if name not in self._blob_clients:
            self._blob_clients[name] = BlobServiceClient(account['blob_endpoint'], credential=self.credential)
        return self._blob_clients[name]
    
    @retry_with_backoff(max_retries=3)
    async def list_blobs(self, account: Dict[str, Any]) -> List[BlobAccessInfo]:
        """List every block blob in every container of the account."""
        service = self._blob_service(account)
        blobs = []
        
        try:
            for container in service.list_containers():
                container_client = service.get_container_client(container.name)
                for blob in container_client.list_blobs():
                    if blob.blob_type and blob.blob_type != BlobType.BLOCKBLOB:
                        continue
                    blobs.append(BlobAccessInfo(
                        container=container.name,
                        name=blob.name,
                        access_tier=_enum_value(blob.blob_tier),
                        size_bytes=blob.size or 0,
                        last_modified=blob.last_modified,
                        last_accessed_on=getattr(blob, 'last_accessed_on', None),
                    ))
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise ClientConnectionException("AzureBlob", f"Failed to list blobs in {account['name']}: {e}")
        
        self.logger.info(f"Listed {len(blobs)} block blobs", account=account['name'])
        return blobs
    
    async def set_blob_tier(self, account: Dict[str, Any], container: str, blob_name: str, tier: str) -> None:
        service = self._blob_service(account)
        try:
            service.get_blob_client(container=container, blob=blob_name).set_standard_blob_tier(tier)
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise MutationException(f"{account['name']}/{container}/{blob_name}", "set tier", str(e))
