#!/usr/bin/env python3
"""
Test explicit configuration requirements.
"""

import httpx
import pytest
import yaml

from chatstream.config import Configuration
from chatstream.llm.client import ChatCompletionsClient


def base_config() -> dict:
    return {
        "llm": {
            "active": "openai",
            "providers": {
                "openai": {
                    "base_url": "https://api.openai.com/v1/",
                    "model": "gpt-4-turbo",
                    "temperature": 0.7,
                    "http_client": {
                        "connect_timeout": 5.0,
                        "read_timeout": 30.0,
                        "write_timeout": 5.0,
                        "pool_timeout": 5.0,
                    },
                },
            },
        },
        "streaming": {"queue_size": 16},
        "chat": {"system_prompt": "Be brief.", "title_prefix": "Chat"},
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture
def write_config(tmp_path):
    def _write(data) -> Configuration:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump(data))
        return Configuration(str(path))
    return _write


def test_packaged_default_config_loads():
    config = Configuration()
    assert config.get_llm_config()["model"] == "gpt-4-turbo"
    assert config.endpoint_url == "https://api.openai.com/v1/chat/completions"
    assert config.get_streaming_config()["queue_size"] >= 0


def test_endpoint_url_strips_trailing_slash(write_config):
    config = write_config(base_config())
    assert config.endpoint_url == "https://api.openai.com/v1/chat/completions"


def test_non_mapping_yaml_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="YAML dict"):
        Configuration(str(path))


def test_unknown_active_provider(write_config):
    data = base_config()
    data["llm"]["active"] = "nowhere"
    config = write_config(data)
    with pytest.raises(ValueError, match="not found in providers"):
        config.get_llm_config()


def test_llm_config_requires_model(write_config):
    data = base_config()
    del data["llm"]["providers"]["openai"]["model"]
    config = write_config(data)
    with pytest.raises(ValueError, match="model must be explicitly configured"):
        config.get_llm_config()


def test_http_client_config_requires_positive_timeouts(write_config):
    data = base_config()
    data["llm"]["providers"]["openai"]["http_client"]["read_timeout"] = 0
    config = write_config(data)
    with pytest.raises(ValueError, match="read_timeout must be positive"):
        config.get_http_client_config()


def test_http_client_config_requires_all_keys(write_config):
    data = base_config()
    del data["llm"]["providers"]["openai"]["http_client"]["pool_timeout"]
    config = write_config(data)
    with pytest.raises(ValueError, match="pool_timeout must be explicitly configured"):
        config.get_http_client_config()


def test_streaming_config_requires_queue_size(write_config):
    data = base_config()
    data["streaming"] = {}
    config = write_config(data)
    with pytest.raises(ValueError, match="queue_size"):
        config.get_streaming_config()


def test_api_key_from_environment(write_config, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "  sk-env  ")
    config = write_config(base_config())
    assert config.llm_api_key == "sk-env"


def test_missing_api_key_is_empty(write_config, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(Configuration, "load_env", staticmethod(lambda: None))
    config = write_config(base_config())
    assert config.llm_api_key == ""


def test_custom_api_key_env(write_config, monkeypatch):
    data = base_config()
    data["llm"]["providers"]["openai"]["api_key_env"] = "MY_GATEWAY_KEY"
    monkeypatch.setenv("MY_GATEWAY_KEY", "gw-123")
    config = write_config(data)
    assert config.llm_api_key == "gw-123"


@pytest.mark.asyncio
async def test_client_from_configuration(write_config, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    config = write_config(base_config())

    async with ChatCompletionsClient.from_configuration(config, model="gpt-4o") as client:
        assert client.api_key == "sk-env"
        assert client.endpoint == "https://api.openai.com/v1/chat/completions"
        assert client.model == "gpt-4o"
        assert client.temperature == 0.7
        assert client.queue_size == 16
        assert client.client.timeout == httpx.Timeout(
            connect=5.0, read=30.0, write=5.0, pool=5.0
        )
