from __future__ import annotations

import json

import pytest

from utils.settings import TaggingSettings, load_settings


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("GCP_TAGGING_SETTINGS_JSON", raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults_when_no_source() -> None:
    settings = load_settings(None)
    assert settings == TaggingSettings()
    assert settings.poll_interval_s == 2.0
    assert settings.operation_timeout_s == 60.0
    assert settings.derive_region_from_zone is True
    assert settings.transport == "rest"


def test_load_settings_from_yaml_file(tmp_path) -> None:
    config = tmp_path / "tagging.yaml"
    config.write_text(
        """
tagging:
  poll_interval_s: 1
  operation_timeout_s: 10
  derive_region_from_zone: false
  transport: api-client
""".lstrip(),
        encoding="utf-8",
    )

    settings = load_settings(str(config))
    assert settings.poll_interval_s == 1.0
    assert settings.operation_timeout_s == 10.0
    assert settings.derive_region_from_zone is False
    assert settings.transport == "api-client"


def test_default_config_path_is_picked_up(tmp_path) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "tagging.yaml").write_text("request_timeout_s: 5\n", encoding="utf-8")
    assert load_settings(None).request_timeout_s == 5.0


def test_load_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("GCP_TAGGING_SETTINGS_JSON", json.dumps({"operation_timeout_s": 120}))
    assert load_settings(None).operation_timeout_s == 120.0


def test_invalid_env_json_raises(monkeypatch) -> None:
    monkeypatch.setenv("GCP_TAGGING_SETTINGS_JSON", "{not json")
    with pytest.raises(ValueError, match="GCP_TAGGING_SETTINGS_JSON"):
        load_settings(None)


def test_unknown_keys_and_bad_types_are_rejected(tmp_path) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text("retries: 3\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown settings key"):
        load_settings(str(config))

    config.write_text("poll_interval_s: true\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(str(config))

    config.write_text("transport: grpc\n", encoding="utf-8")
    with pytest.raises(ValueError, match="transport"):
        load_settings(str(config))


def test_explicit_missing_file_raises() -> None:
    with pytest.raises(FileNotFoundError):
        load_settings("does/not/exist.yaml")
