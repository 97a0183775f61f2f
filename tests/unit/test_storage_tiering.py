"""Tests for blob tiering recommendations."""

import pytest

from costopt.analytics.storage_tiering import StorageTieringEngine
from costopt.models.recommendation import Confidence, RecommendedAction
from tests.conftest import NOW


class TestStorageTieringEngine:
    """Test the days-since-access ladder."""

    @pytest.fixture
    def engine(self, catalog):
        return StorageTieringEngine(catalog)

    def test_hot_idle_for_45_days_moves_to_cool(self, engine, make_blob):
        blob = make_blob(tier="Hot", size_gb=100.0, accessed_days=45)

        rec = engine.recommend_blob(blob, now=NOW)

        assert rec.should_optimize is True
        assert rec.recommended_configuration == "Cool"
        assert rec.estimated_monthly_savings == pytest.approx(100.0 * 0.0184 * 0.46)
        assert rec.confidence == Confidence.HIGH
        assert rec.action == RecommendedAction.CHANGE_TIER

    def test_hot_idle_for_200_days_moves_to_archive(self, engine, make_blob):
        rec = engine.recommend_blob(make_blob(tier="Hot", accessed_days=200), now=NOW)

        assert rec.recommended_configuration == "Archive"
        assert rec.estimated_monthly_savings == pytest.approx(100.0 * 0.0184 * 0.95)

    def test_cool_idle_for_120_days_moves_to_archive(self, engine, make_blob):
        rec = engine.recommend_blob(make_blob(tier="Cool", accessed_days=120), now=NOW)

        assert rec.recommended_configuration == "Archive"
        assert rec.estimated_monthly_savings == pytest.approx(100.0 * 0.01 * 0.90)

    def test_cool_idle_for_60_days_stays(self, engine, make_blob):
        rec = engine.recommend_blob(make_blob(tier="Cool", accessed_days=60), now=NOW)

        assert rec.should_optimize is False

    def test_recently_used_hot_blob_stays(self, engine, make_blob):
        rec = engine.recommend_blob(make_blob(tier="Hot", accessed_days=3), now=NOW)

        assert rec.should_optimize is False

    def test_archive_blob_never_moves(self, engine, make_blob):
        rec = engine.recommend_blob(make_blob(tier="Archive", accessed_days=900), now=NOW)

        assert rec.should_optimize is False

    def test_last_modified_fallback_lowers_confidence(self, engine, make_blob):
        rec = engine.recommend_blob(make_blob(tier="Hot", modified_days=45), now=NOW)

        assert rec.recommended_configuration == "Cool"
        assert rec.confidence == Confidence.MEDIUM

    def test_no_timestamps_is_low_confidence(self, engine, make_blob):
        rec = engine.recommend_blob(make_blob(tier="Hot"), now=NOW)

        assert rec.should_optimize is False
        assert rec.confidence == Confidence.LOW

    def test_blob_without_tier_uses_account_default(self, engine, make_blob):
        blob = make_blob(tier=None, accessed_days=45)

        rec = engine.recommend_blob(blob, default_tier="Cool", now=NOW)

        assert rec.current_configuration == "Cool"
        assert rec.should_optimize is False

    def test_plan_keeps_only_actionable_blobs(self, engine, make_blob):
        blobs = [
            make_blob("logs/a.log", "Hot", accessed_days=45),
            make_blob("logs/b.log", "Hot", accessed_days=2),
            make_blob("backups/c.bak", "Cool", accessed_days=100),
        ]

        plan = engine.plan_account("stlogs", blobs, now=NOW)

        assert plan.blobs_scanned == 3
        assert [r.resource_name for r in plan.recommendations] == ["logs/a.log", "backups/c.bak"]
        assert plan.transitions == {"Hot->Cool": 1, "Cool->Archive": 1}
        assert plan.describe_target() == "Archive:1,Cool:1"

    def test_plan_with_explicit_target(self, engine, make_blob):
        blobs = [make_blob("logs/a.log", "Hot", accessed_days=1), make_blob("logs/b.log", "Cool", accessed_days=1)]

        plan = engine.plan_account("stlogs", blobs, target_tier="Cool", now=NOW)

        assert len(plan.recommendations) == 1
        assert plan.recommendations[0].estimated_monthly_savings == pytest.approx(100.0 * (0.0184 - 0.01))
