# src/costopt/clients/azure/client_factory.py
"""Azure client factory: one credential, explicitly threaded into every client."""

from typing import Dict, Any
import structlog
from azure.identity import DefaultAzureCredential, ClientSecretCredential
from azure.mgmt.resource import ResourceManagementClient
from azure.core.exceptions import AzureError, ClientAuthenticationError

from costopt.core.exceptions import (
    AuthenticationException, ConfigurationException, ResourceNotFoundException
)
from .compute_client import ComputeClient
from .database_client import DatabaseClient
from .monitor_client import MonitorClient
from .storage_client import StorageClient

logger = structlog.get_logger(__name__)

MANAGEMENT_SCOPE = "https://management.azure.com/.default"

CLIENT_TYPES = {
    "monitor": MonitorClient,
    "compute": ComputeClient,
    "storage": StorageClient,
    "database": DatabaseClient,
}


class AzureClientFactory:
    """Factory for creating Azure service clients."""
    
    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.subscription_id = config.get("subscription_id")
        self.tenant_id = config.get("tenant_id")
        self.client_id = config.get("client_id")
        self.client_secret = config.get("client_secret")
        
        if not self.subscription_id:
            raise ConfigurationException("Azure subscription_id is required (set AZURE_SUBSCRIPTION_ID)")
        
        self._credential = None
        self._clients: Dict[str, Any] = {}
        self.logger = logger.bind(factory="azure")
    
    def _get_credential(self):
        """Get Azure credential based on configuration."""
        if self._credential:
            return self._credential
        
        if self.client_id and self.client_secret and self.tenant_id:
            self._credential = ClientSecretCredential(
                tenant_id=self.tenant_id,
                client_id=self.client_id,
                client_secret=self.client_secret
            )
            self.logger.info("Using service principal authentication")
        else:
            # Managed identity inside the automation account, CLI login locally
            self._credential = DefaultAzureCredential()
            self.logger.info("Using default credential chain")
        
        return self._credential
    
    def authenticate(self):
        """Acquire a management token up front so a bad credential aborts the run."""
        credential = self._get_credential()
        try:
            credential.get_token(MANAGEMENT_SCOPE)
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        self.logger.info("Authenticated against Azure", subscription_id=self.subscription_id)
        return credential
    
    def verify_resource_group(self, resource_group: str) -> None:
        """Fail fast when the scope resource group does not exist."""
        client = ResourceManagementClient(credential=self._get_credential(), subscription_id=self.subscription_id)
        try:
            exists = client.resource_groups.check_existence(resource_group)
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise ConfigurationException(f"Could not verify resource group {resource_group}: {e}")
        finally:
            client.close()
        
        if not exists:
            raise ResourceNotFoundException("ResourceGroup", resource_group, f"subscription {self.subscription_id}")
    
    async def create_clients(self, *names: str) -> Dict[str, Any]:
        """Create and connect the named clients ('monitor', 'compute', 'storage', 'database')."""
        credential = self.authenticate()
        
        for name in names:
            if name not in CLIENT_TYPES:
                raise ConfigurationException(f"Unknown client type: {name}")
            if name in self._clients:
                continue
            client = CLIENT_TYPES[name](
                credential=credential,
                subscription_id=self.subscription_id,
                config=self.config
            )
            await client.connect()
            self._clients[name] = client
            self.logger.info(f"Connected {name} client successfully")
        
        return {name: self._clients[name] for name in names}
    
    async def disconnect_all(self) -> None:
        """Disconnect all clients (for cleanup)."""
        for name, client in self._clients.items():
            try:
                await client.disconnect()
            except Exception as e:
                self.logger.warning(f"Error disconnecting {name} client: {e}")
        
        self._clients = {}
        if self._credential is not None and hasattr(self._credential, 'close'):
            self._credential.close()
        self.logger.info("Azure client factory cleanup completed")
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect_all()
