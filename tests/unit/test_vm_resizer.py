"""Tests for the VM resize lifecycle."""

from unittest.mock import call

import pytest

from costopt.actions.vm_resizer import VmResizer
from costopt.core.exceptions import DeallocationTimeoutException, MutationException


class TestVmResizer:
    """Test the stop, resize and start sequence."""

    @pytest.fixture
    def resizer(self, compute_client):
        return VmResizer(compute_client, poll_interval_seconds=0, max_poll_attempts=3)

    @pytest.mark.asyncio
    async def test_running_vm_is_stopped_resized_and_started(self, resizer, compute_client, make_vm):
        compute_client.get_power_state.side_effect = ["running", "deallocating", "deallocated"]

        outcome = await resizer.resize(make_vm(), "Standard_B2s")

        assert outcome.applied is True
        assert outcome.final_state == "running"
        compute_client.deallocate.assert_awaited_once_with("rg-test", "vm-web-01")
        compute_client.resize.assert_awaited_once_with("rg-test", "vm-web-01", "Standard_B2s")
        compute_client.start.assert_awaited_once_with("rg-test", "vm-web-01")
        assert compute_client.get_power_state.await_count == 3

    @pytest.mark.asyncio
    async def test_deallocated_vm_stays_deallocated(self, resizer, compute_client, make_vm):
        compute_client.get_power_state.side_effect = ["deallocated"]

        outcome = await resizer.resize(make_vm(), "Standard_B2s")

        assert outcome.final_state == "deallocated"
        compute_client.deallocate.assert_not_awaited()
        compute_client.start.assert_not_awaited()
        compute_client.resize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stopped_vm_is_resized_without_start(self, resizer, compute_client, make_vm):
        compute_client.get_power_state.side_effect = ["stopped"]

        outcome = await resizer.resize(make_vm(), "Standard_B2s")

        assert outcome.final_state == "stopped"
        compute_client.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_poll_timeout_leaves_vm_unresized(self, resizer, compute_client, make_vm):
        compute_client.get_power_state.side_effect = ["running"] + ["deallocating"] * 3

        with pytest.raises(DeallocationTimeoutException) as exc_info:
            await resizer.resize(make_vm(), "Standard_B2s")

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_power_state == "deallocating"
        compute_client.resize.assert_not_awaited()
        compute_client.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resize_failure_skips_start(self, resizer, compute_client, make_vm):
        compute_client.get_power_state.side_effect = ["running", "deallocated"]
        compute_client.resize.side_effect = MutationException("vm-web-01", "resize", "SKU not available")

        with pytest.raises(MutationException):
            await resizer.resize(make_vm(), "Standard_B2s")

        compute_client.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dry_run_touches_nothing(self, resizer, compute_client, make_vm):
        outcome = await resizer.resize(make_vm(), "Standard_B2s", dry_run=True)

        assert outcome.simulated is True
        assert outcome.applied is False
        assert compute_client.mock_calls == []

    @pytest.mark.asyncio
    async def test_wait_for_deallocation_polls_until_done(self, resizer, compute_client):
        compute_client.get_power_state.side_effect = ["stopping", "deallocated"]

        state = await resizer.wait_for_deallocation("rg-test", "vm-web-01")

        assert state == "deallocated"
        assert compute_client.get_power_state.await_args_list == [call("rg-test", "vm-web-01")] * 2
