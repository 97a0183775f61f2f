"""Tests for settings and the pricing catalog."""

import pytest
from pydantic import ValidationError

from costopt.config.catalog import PricingCatalog, load_catalog
from costopt.config.settings import ApprovalSettings, LogLevel, RunbookSettings, Settings, ThresholdSettings
from costopt.core.exceptions import ConfigurationException


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        thresholds = ThresholdSettings()
        approval = ApprovalSettings()

        assert thresholds.vm_cpu_threshold == 10.0
        assert thresholds.storage_access_threshold == 30
        assert approval.auto_approve_threshold == 100.0
        assert approval.require_approval_threshold == 500.0

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("VM_CPU_THRESHOLD", "7.5")
        monkeypatch.setenv("AUTO_APPROVE_THRESHOLD", "250")
        monkeypatch.setenv("RUNBOOK_LOOKBACK_DAYS", "14")

        assert ThresholdSettings().vm_cpu_threshold == 7.5
        assert ApprovalSettings().auto_approve_threshold == 250.0
        assert RunbookSettings().lookback_days == 14

    def test_ceilings_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ApprovalSettings(auto_approve_threshold=600, require_approval_threshold=500)

    def test_log_level_is_case_insensitive(self):
        assert Settings(log_level="debug").log_level == LogLevel.DEBUG


class TestCatalog:
    """Test the injectable lookup tables."""

    def test_builtin_tables(self, catalog):
        assert catalog.vm_price("Standard_D2s_v3") == 85.68
        assert catalog.vm_price(None) is None
        assert catalog.tier_transition("Hot", "Cool") == (0.0184, 0.46)
        assert catalog.tier_transition("Archive", "Hot") == (0.00099, 0.0)
        assert catalog.sql_tier("S2").dtu == 50

    def test_no_path_gives_defaults(self):
        assert load_catalog(None) == PricingCatalog()

    def test_yaml_overlay_replaces_named_tables(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "vm_prices:\n"
            "  Standard_D2s_v3: 90.0\n"
            "  Standard_B2s: 30.0\n"
            "cosmos_autoscale_savings: 0.5\n"
        )

        catalog = load_catalog(path)

        assert catalog.vm_prices == {"Standard_D2s_v3": 90.0, "Standard_B2s": 30.0}
        assert catalog.cosmos_autoscale_savings == 0.5
        assert catalog.vm_size_mapping["Standard_D2s_v3"] == "Standard_B2s"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationException):
            load_catalog(tmp_path / "missing.yaml")

    def test_unknown_table(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("gpu_prices: {}\n")

        with pytest.raises(ConfigurationException, match="gpu_prices"):
            load_catalog(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("cosmos_autoscale_savings: 3\n")

        with pytest.raises(ConfigurationException):
            load_catalog(path)
