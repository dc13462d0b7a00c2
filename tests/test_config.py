from pathlib import Path

from services.config import FALLBACK_CSV_URL, load_settings

ENV_VARS = [
    "STATUS_OS_ONEDRIVE_URL",
    "STATUS_OS_TIMEOUT",
    "STATUS_OS_TENANT_ID",
    "STATUS_OS_CLIENT_ID",
    "STATUS_OS_CLIENT_SECRET",
    "STATUS_OS_GRAPH_SCOPE",
    "UPLOAD_ROOT",
    "UPLOAD_PREFIX",
    "DEFAULT_VISIBLE_COLUMNS",
    "LOG_LEVEL",
]


def _clear_env(monkeypatch):
    # setenv first so teardown also undoes whatever load_dotenv writes
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults(monkeypatch, tmp_path):
    _clear_env(monkeypatch)

    settings = load_settings(str(tmp_path / "missing.env"))

    assert settings.status_os_url == FALLBACK_CSV_URL
    assert settings.timeout == 30
    assert settings.default_visible_columns == 6
    assert settings.upload_root == Path("storage")
    assert settings.upload_prefix == "inventarios"
    assert not settings.uses_client_credentials


def test_env_overrides(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.setenv("STATUS_OS_ONEDRIVE_URL", "  https://example.test/x.csv  ")
    monkeypatch.setenv("STATUS_OS_TIMEOUT", "12")
    monkeypatch.setenv("DEFAULT_VISIBLE_COLUMNS", "nope")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("STATUS_OS_TENANT_ID", "t")
    monkeypatch.setenv("STATUS_OS_CLIENT_ID", "c")
    monkeypatch.setenv("STATUS_OS_CLIENT_SECRET", "s")

    settings = load_settings(str(tmp_path / "missing.env"))

    assert settings.status_os_url == "https://example.test/x.csv"
    assert settings.timeout == 12
    assert settings.default_visible_columns == 6
    assert settings.log_level == "DEBUG"
    assert settings.uses_client_credentials


def test_dotenv_file_is_read(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("UPLOAD_PREFIX=cargas\n", encoding="utf-8")

    settings = load_settings(str(env_file))

    assert settings.upload_prefix == "cargas"
