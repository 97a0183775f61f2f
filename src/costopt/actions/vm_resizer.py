"""VM resize with the stop → resize → start lifecycle."""

from typing import Any, Dict
from enum import Enum
import structlog
from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_attempt, wait_fixed

from costopt.core.exceptions import DeallocationTimeoutException
from costopt.models.results import MutationOutcome

logger = structlog.get_logger(__name__)

RUNNING = "running"
DEALLOCATED = "deallocated"


class ResizeState(str, Enum):
    RUNNING = "Running"
    STOPPING = "Stopping"
    DEALLOCATED = "Deallocated"
    RESIZING = "Resizing"
    STARTING = "Starting"


class VmResizer:
    """Applies a new VM size, restarting the VM only if it was running.

    ``Running → Stopping → Deallocated → Resizing → (Starting → Running | Deallocated)``.
    Any failure raises and leaves the remaining steps undone.
    """
    
    def __init__(self, compute_client, poll_interval_seconds: float = 15.0, max_poll_attempts: int = 40):
        self.compute = compute_client
        self.poll_interval_seconds = poll_interval_seconds
        self.max_poll_attempts = max_poll_attempts
    
    async def wait_for_deallocation(self, resource_group: str, vm_name: str) -> str:
        """Poll the power state on a fixed interval until deallocated or the budget runs out."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_poll_attempts),
            wait=wait_fixed(self.poll_interval_seconds),
            retry=retry_if_result(lambda state: state != DEALLOCATED),
        )
        try:
            return await retrying(self.compute.get_power_state, resource_group, vm_name)
        except RetryError as e:
            raise DeallocationTimeoutException(
                vm_name, e.last_attempt.attempt_number, e.last_attempt.result()
            )
    
    async def resize(self, vm: Dict[str, Any], target_size: str, dry_run: bool = False) -> MutationOutcome:
        name = vm['name']
        resource_group = vm['resource_group']
        current_size = vm.get('vm_size')
        log = logger.bind(resource=name, current=current_size, target=target_size)
        
        if dry_run:
            log.info("DRY RUN: would resize VM")
            return MutationOutcome(
                applied=False,
                simulated=True,
                message=f"Would resize {name} from {current_size} to {target_size}",
            )
        
        original_state = await self.compute.get_power_state(resource_group, name)
        was_running = original_state == RUNNING
        log.info("Starting resize", power_state=original_state)
        
        if was_running:
            log.info("VM state transition", state=ResizeState.STOPPING.value)
            await self.compute.deallocate(resource_group, name)
            await self.wait_for_deallocation(resource_group, name)
            log.info("VM state transition", state=ResizeState.DEALLOCATED.value)
        
        log.info("VM state transition", state=ResizeState.RESIZING.value)
        await self.compute.resize(resource_group, name, target_size)
        
        final_state = original_state
        if was_running:
            log.info("VM state transition", state=ResizeState.STARTING.value)
            await self.compute.start(resource_group, name)
            final_state = RUNNING
        
        log.info("Resize completed", final_state=final_state)
        return MutationOutcome(
            applied=True,
            message=f"Resized {name} from {current_size} to {target_size}",
            succeeded=1,
            final_state=final_state,
        )
