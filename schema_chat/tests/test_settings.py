import pytest

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.config.settings import Settings
from schema_chat.domain.exceptions import ValidationError


class SettingsStub:
    openai_api_host = "https://example.openai.azure.com"
    openai_api_type = "azure"
    azure_deployment_id = "schema-gpt"
    openai_api_version = "2023-05-15"
    openai_organization = ""
    openai_api_key = "sk-0123456789"
    supabase_url = "https://db.example.co"
    supabase_service_role_key = "svc"
    moderation_failure_mode = "strict"
    http_timeout = 5.0


def test_pipeline_config_from_settings():
    cfg = PipelineConfig.from_settings(SettingsStub())
    assert cfg.provider_kind == "gateway"
    assert cfg.deployment_id == "schema-gpt"
    assert cfg.api_key == "sk-0123456789"
    assert cfg.vector_store_url == "https://db.example.co"
    assert cfg.moderation_failure_mode == "strict"
    assert cfg.http_timeout == 5.0


def test_pipeline_config_openai_is_direct():
    stub = SettingsStub()
    stub.openai_api_type = "openai"
    assert PipelineConfig.from_settings(stub).provider_kind == "direct"


def test_pipeline_config_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        PipelineConfig(provider_kind="proxy")
    with pytest.raises(ValidationError):
        PipelineConfig(moderation_failure_mode="lenient")


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENAI_API_HOST", "https://example.openai.azure.com/")
    monkeypatch.setenv("OPENAI_API_TYPE", "azure")
    monkeypatch.setenv("MODERATION_FAILURE_MODE", "strict")
    s = Settings(_env_file=None)
    assert s.openai_api_host == "https://example.openai.azure.com"
    assert s.openai_api_type == "azure"
    assert s.moderation_failure_mode == "strict"


def test_settings_from_yaml(monkeypatch, tmp_path):
    cfg_file = tmp_path / "schema_chat.yaml"
    cfg_file.write_text("supabase_url: https://db.example.co/\nhttp_timeout: 12\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SCHEMA_CHAT_CONFIG_FILE", str(cfg_file))
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("HTTP_TIMEOUT", raising=False)
    s = Settings(_env_file=None)
    assert s.supabase_url == "https://db.example.co"
    assert s.http_timeout == 12.0


def test_settings_rejects_short_api_key(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENAI_API_KEY", "short")
    with pytest.raises(ValueError):
        Settings(_env_file=None)
