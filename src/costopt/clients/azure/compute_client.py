"""Azure Compute client for VM inventory and lifecycle control."""

from typing import Dict, Any, List, Optional
import structlog
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.compute.models import HardwareProfile, VirtualMachineUpdate
from azure.core.exceptions import AzureError, ClientAuthenticationError, ResourceNotFoundError

from costopt.core.base_client import BaseClient
from costopt.core.exceptions import (
    AuthenticationException, ClientConnectionException, MutationException, ResourceNotFoundException
)
from costopt.core.utils import retry_with_backoff, resource_group_from_id, safe_get

logger = structlog.get_logger(__name__)


class ComputeClient(BaseClient):
    """Client for virtual machine operations."""
    
    def __init__(self, credential, subscription_id: str, config: Dict[str, Any]):
        super().__init__(credential, subscription_id, config, "ComputeClient")
        self._compute_client = None
    
    async def connect(self) -> None:
        """Connect to Azure Compute."""
        try:
            self._compute_client = ComputeManagementClient(
                credential=self.credential,
                subscription_id=self.subscription_id
            )
            self._connected = True
            self.logger.info("Azure Compute client connected successfully")
            
        except Exception as e:
            raise ClientConnectionException("AzureCompute", f"Connection failed: {e}")
    
    async def disconnect(self) -> None:
        """Disconnect from Azure Compute."""
        self._close_all(self._compute_client)
        self.logger.info("Azure Compute client disconnected")
    
    @retry_with_backoff(max_retries=3)
    async def list_virtual_machines(self, resource_group: str,
                                    vm_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """List VMs in a resource group, or just the named one."""
        try:
            if vm_name:
                try:
                    vms = [self._compute_client.virtual_machines.get(resource_group, vm_name)]
                except ResourceNotFoundError:
                    raise ResourceNotFoundException("VirtualMachine", vm_name, resource_group)
            else:
                vms = list(self._compute_client.virtual_machines.list(resource_group))
            
            vm_list = [self._extract_vm_data(vm) for vm in vms]
            self.logger.info(f"Discovered {len(vm_list)} virtual machines", resource_group=resource_group)
            return vm_list
            
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise ClientConnectionException("AzureCompute", f"Failed to list VMs: {e}")
    
    async def get_power_state(self, resource_group: str, vm_name: str) -> Optional[str]:
        """Return the PowerState code suffix, e.g. 'running' or 'deallocated'."""
        try:
            instance_view = self._compute_client.virtual_machines.instance_view(resource_group, vm_name)
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise MutationException(vm_name, "get power state", str(e))
        
        for status in instance_view.statuses or []:
            if status.code and status.code.startswith('PowerState/'):
                return status.code.split('/')[-1]
        return None
    
    async def deallocate(self, resource_group: str, vm_name: str) -> None:
        """Issue a deallocate without waiting; callers poll the power state."""
        try:
            self._compute_client.virtual_machines.begin_deallocate(resource_group, vm_name)
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise MutationException(vm_name, "deallocate", str(e))
    
    async def resize(self, resource_group: str, vm_name: str, vm_size: str) -> None:
        try:
            poller = self._compute_client.virtual_machines.begin_update(
                resource_group,
                vm_name,
                VirtualMachineUpdate(hardware_profile=HardwareProfile(vm_size=vm_size))
            )
            poller.result()
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise MutationException(vm_name, "resize", str(e))
    
    async def start(self, resource_group: str, vm_name: str) -> None:
        try:
            self._compute_client.virtual_machines.begin_start(resource_group, vm_name).result()
        except ClientAuthenticationError as e:
            raise AuthenticationException(str(e))
        except AzureError as e:
            raise MutationException(vm_name, "start", str(e))
    
    def _extract_vm_data(self, vm) -> Dict[str, Any]:
        """Extract VM data from Azure response."""
        return {
            'name': vm.name,
            'id': vm.id,
            'resource_group': resource_group_from_id(vm.id),
            'location': vm.location,
            'vm_size': safe_get(vm, 'hardware_profile.vm_size'),
            'tags': vm.tags or {},
        }
