"""Tests for settings loading."""

from cs_actions.config import get_settings, reset_settings


class TestSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.terraform_host == "app.terraform.io"
        assert settings.response_character_set == "ISO-8859-1"
        assert settings.abbyy_time_to_wait == 20
        assert settings.abbyy_number_of_retries == 5

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("CS_ACTIONS_TERRAFORM_HOST", "tfe.example.com")
        monkeypatch.setenv("CS_ACTIONS_DEFAULT_PROXY_PORT", "3128")
        reset_settings()

        settings = get_settings()
        assert settings.terraform_host == "tfe.example.com"
        assert settings.default_proxy_port == 3128

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()
