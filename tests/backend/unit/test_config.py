from randomencounter.backend.config import DEFAULT_NAMESPACE, load_settings


def test_load_settings_reads_expected_env(monkeypatch) -> None:
    monkeypatch.setenv("RANDOMENCOUNTER_SERVER_SALT", "salt-1")
    monkeypatch.setenv("RANDOMENCOUNTER_DATABASE_URL", "postgresql://local")
    monkeypatch.setenv("RANDOMENCOUNTER_HOST", "localhost")
    monkeypatch.setenv("RANDOMENCOUNTER_PORT", "9000")
    monkeypatch.setenv("RANDOMENCOUNTER_GM_TOKEN", "gm-secret")
    monkeypatch.setenv("RANDOMENCOUNTER_NAMESPACE", "Campaign2")
    monkeypatch.setenv("RANDOMENCOUNTER_PUBLIC_ROLLS", "yes")
    monkeypatch.setenv("RANDOMENCOUNTER_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.server_salt == "salt-1"
    assert settings.database_url == "postgresql://local"
    assert settings.host == "localhost"
    assert settings.port == 9000
    assert settings.gm_token == "gm-secret"
    assert settings.namespace == "Campaign2"
    assert settings.public_rolls is True
    assert settings.log_level == "DEBUG"


def test_load_settings_applies_defaults(monkeypatch) -> None:
    for name in (
        "RANDOMENCOUNTER_SERVER_SALT",
        "RANDOMENCOUNTER_DATABASE_URL",
        "RANDOMENCOUNTER_HOST",
        "RANDOMENCOUNTER_PORT",
        "RANDOMENCOUNTER_GM_TOKEN",
        "RANDOMENCOUNTER_NAMESPACE",
        "RANDOMENCOUNTER_PUBLIC_ROLLS",
        "RANDOMENCOUNTER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.server_salt == "dev-salt"
    assert settings.database_url is None
    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.gm_token == "dev-gm-token"
    assert settings.namespace == DEFAULT_NAMESPACE
    assert settings.public_rolls is False
    assert settings.log_level == "INFO"


def test_public_rolls_flag_is_false_for_unrecognised_values(monkeypatch) -> None:
    monkeypatch.setenv("RANDOMENCOUNTER_PUBLIC_ROLLS", "maybe")

    assert load_settings().public_rolls is False
