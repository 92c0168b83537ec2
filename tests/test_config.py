import pytest
from pydantic import ValidationError

from app.config import EXPO_PUSH_URL, Settings
from app.errors import ConfigError

ENV_VARS = [
    "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "EXPO_ACCESS_TOKEN", "PUSH_GATEWAY_URL",
    "PUSH_TIMEOUT_SECONDS", "PROFILE_TIMEOUT_SECONDS", "PROFILE_BACKEND", "USERS_TABLE",
    "USERS_PARTITION", "AZURE_STORAGE_CONNECTION_STRING", "NOTIFICATIONS_TABLE",
    "WEBHOOK_SECRET", "WEBHOOK_JWT_SECRET", "JWT_ALG", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()

    assert settings == Settings()
    assert settings.push_gateway_url == EXPO_PUSH_URL
    assert settings.push_timeout_seconds == 10.0
    assert settings.notifications_table == "notifications"
    assert settings.profile_backend == "supabase"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "key")
    monkeypatch.setenv("EXPO_ACCESS_TOKEN", "expo")
    monkeypatch.setenv("PUSH_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("PROFILE_BACKEND", "AZURE_TABLE")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("WEBHOOK_SECRET", "  ")

    settings = Settings.from_env()

    assert settings.supabase_url == "https://proj.supabase.co"
    assert settings.expo_access_token == "expo"
    assert settings.push_timeout_seconds == 2.5
    assert settings.profile_backend == "azure_table"
    assert settings.log_level == "DEBUG"
    assert settings.webhook_secret is None


@pytest.mark.parametrize("value", ["abc", "0", "-1"])
def test_invalid_timeout(monkeypatch, value):
    monkeypatch.setenv("PUSH_TIMEOUT_SECONDS", value)

    with pytest.raises(ConfigError):
        Settings.from_env()


def test_unknown_backend(monkeypatch):
    monkeypatch.setenv("PROFILE_BACKEND", "firebase")

    with pytest.raises(ConfigError):
        Settings.from_env()


def test_settings_are_immutable():
    with pytest.raises(ValidationError):
        Settings().notifications_table = "other"


def test_whitespace_values_are_unset(monkeypatch):
    monkeypatch.setenv("EXPO_ACCESS_TOKEN", "  ")
    monkeypatch.setenv("USERS_TABLE", "")

    settings = Settings.from_env()

    assert settings.expo_access_token is None
    assert settings.users_table == "users"
