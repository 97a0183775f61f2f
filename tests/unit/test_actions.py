"""Tests for blob tier changes and database scaling."""

import pytest

from costopt.actions.blob_tiering import BlobTierChanger
from costopt.actions.database_scaler import DatabaseScaler
from costopt.core.exceptions import MutationException
from costopt.models.recommendation import (
    Confidence, OptimizationRecommendation, RecommendedAction, TieringPlan
)

ACCOUNT = {'name': "stlogs", 'id': "st-id", 'resource_group': "rg-test", 'access_tier': "Hot"}
DATABASE = {'name': "orders", 'id': "db-id", 'server': "sql-prod", 'resource_group': "rg-test",
            'service_objective': "S2", 'edition': "Standard"}


def tier_change(path: str, target: str = "Cool") -> OptimizationRecommendation:
    return OptimizationRecommendation(
        current_configuration="Hot",
        recommended_configuration=target,
        justification="idle",
        estimated_monthly_savings=1.0,
        confidence=Confidence.HIGH,
        should_optimize=True,
        action=RecommendedAction.CHANGE_TIER,
        resource_name=path,
    )


def scaling(action: RecommendedAction, target: str = "S1") -> OptimizationRecommendation:
    return OptimizationRecommendation(
        current_configuration="S2",
        recommended_configuration=target,
        justification="low DTU",
        estimated_monthly_savings=44.17,
        confidence=Confidence.MEDIUM,
        should_optimize=True,
        action=action,
    )


class TestBlobTierChanger:
    """Test best-effort batch tiering."""

    @pytest.fixture
    def plan(self):
        return TieringPlan(
            account_name="stlogs",
            blobs_scanned=5,
            recommendations=[tier_change("logs/a.log"), tier_change("logs/b.log"), tier_change("raw/c.bin", "Archive")],
        )

    @pytest.mark.asyncio
    async def test_all_blobs_changed(self, storage_client, plan):
        outcome = await BlobTierChanger(storage_client).apply(ACCOUNT, plan)

        assert outcome.applied is True
        assert (outcome.succeeded, outcome.failed) == (3, 0)
        assert outcome.realized_savings == pytest.approx(3.0)
        storage_client.set_blob_tier.assert_any_await(ACCOUNT, "raw", "c.bin", "Archive")

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_batch(self, storage_client, plan):
        storage_client.set_blob_tier.side_effect = [
            None, MutationException("stlogs/logs/b.log", "set tier", "lease present"), None
        ]

        outcome = await BlobTierChanger(storage_client).apply(ACCOUNT, plan)

        assert (outcome.succeeded, outcome.failed) == (2, 1)
        assert outcome.realized_savings == pytest.approx(2.0)
        assert storage_client.set_blob_tier.await_count == 3

    @pytest.mark.asyncio
    async def test_dry_run_touches_nothing(self, storage_client, plan):
        outcome = await BlobTierChanger(storage_client).apply(ACCOUNT, plan, dry_run=True)

        assert outcome.simulated is True
        storage_client.set_blob_tier.assert_not_awaited()


class TestDatabaseScaler:
    """Test dispatch on the recommended action."""

    @pytest.mark.asyncio
    async def test_scale_down_is_applied(self, database_client, catalog):
        outcome = await DatabaseScaler(database_client, catalog).apply(DATABASE, scaling(RecommendedAction.SCALE_DOWN))

        assert outcome.applied is True
        database_client.set_service_objective.assert_awaited_once_with(
            "rg-test", "sql-prod", "orders", "S1", edition="Standard"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", [
        RecommendedAction.SCALE_UP, RecommendedAction.ENABLE_AUTOSCALE, RecommendedAction.INCREASE_RU
    ])
    async def test_advisory_actions_are_acknowledged(self, database_client, catalog, action):
        outcome = await DatabaseScaler(database_client, catalog).apply(DATABASE, scaling(action, "S3"))

        assert outcome.applied is False
        assert outcome.simulated is False
        database_client.set_service_objective.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dry_run_touches_nothing(self, database_client, catalog):
        outcome = await DatabaseScaler(database_client, catalog).apply(
            DATABASE, scaling(RecommendedAction.SCALE_DOWN), dry_run=True
        )

        assert outcome.simulated is True
        database_client.set_service_objective.assert_not_awaited()
