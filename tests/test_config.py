"""Tests for settings."""

import pytest
from pydantic import ValidationError

from financetracker.config import ApiSettings, AppSettings, PayPalSettings


class TestSettings:

    def test_url_for_joins_prefix(self):
        """Test that trailing slashes never double up."""
        api = ApiSettings(base_url="https://n8n.example.com/webhook/", api_prefix="/finance")
        assert api.url_for("/api/message") == "https://n8n.example.com/webhook/finance/api/message"

    def test_env_override(self, monkeypatch):
        """Test that environment variables are read with the prefix."""
        monkeypatch.setenv("FINANCETRACKER_API_BASE_URL", "http://10.0.0.5:5678/webhook")
        assert ApiSettings().base_url == "http://10.0.0.5:5678/webhook"

    def test_log_level_normalised(self):
        assert AppSettings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="LOUD")

    def test_upload_helpers(self):
        app = AppSettings(supported_image_formats="PNG, jpg", max_upload_size_mb=2)
        assert app.supported_formats_list == ["png", "jpg"]
        assert app.max_upload_size_bytes == 2 * 1024 * 1024

    def test_paypal_settings_only_hosted_checkout(self, monkeypatch):
        """Test that PayPal config is just plan ids and the hosted page."""
        monkeypatch.setenv("PAYPAL_MONTHLY_PLAN_ID", "P-ENV")
        paypal = PayPalSettings()
        assert paypal.monthly_plan_id == "P-ENV"
        assert set(PayPalSettings.model_fields) == {
            "monthly_plan_id", "yearly_plan_id", "subscribe_url",
        }
