"""Configuration management for the chat streaming client."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")


class Configuration:
    """Manages configuration and environment variables for the streaming client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @property
    def active_provider(self) -> str:
        return self._config.get("llm", {}).get("active", "openai")

    @property
    def llm_api_key(self) -> str:
        """Get the API key for the active LLM provider.

        Returns:
            The API key, or an empty string when the variable is unset.
            Streams opened without a key fail with MISSING_CREDENTIAL.

        Raises:
            ValueError: If the active provider has no API key mapping.
        """
        provider_config = self.get_llm_config()

        # Map provider names to environment variable names
        provider_key_map = {
            "openai": "OPENAI_API_KEY",
            "groq": "GROQ_API_KEY",
            "openrouter": "OPENROUTER_API_KEY",
            "azure": "AZURE_OPENAI_API_KEY",
            "mistral": "MISTRAL_API_KEY",
        }

        env_key = provider_config.get("api_key_env") or provider_key_map.get(
            self.active_provider
        )
        if not env_key:
            raise ValueError(
                f"Unknown provider '{self.active_provider}' - no API key mapping found"
            )

        return os.getenv(env_key, "").strip()

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get_llm_config(self) -> dict[str, Any]:
        """Get active LLM provider configuration from YAML.

        Returns:
            Active LLM provider configuration dictionary.

        Raises:
            ValueError: If the provider is missing or lacks required keys.
        """
        providers = self._config.get("llm", {}).get("providers", {})
        active_provider = self.active_provider

        if active_provider not in providers:
            raise ValueError(
                f"Active provider '{active_provider}' not found in providers config"
            )

        provider_config = providers[active_provider]
        for key in ["base_url", "model", "temperature"]:
            if key not in provider_config:
                raise ValueError(
                    f"llm.providers.{active_provider}.{key} must be explicitly "
                    "configured in config.yaml"
                )

        temperature = provider_config["temperature"]
        if isinstance(temperature, bool) or not isinstance(temperature, int | float):
            raise ValueError("temperature must be a number")

        return provider_config

    @property
    def endpoint_url(self) -> str:
        """Full chat-completions URL for the active provider."""
        base_url = self.get_llm_config()["base_url"].rstrip("/")
        return f"{base_url}/chat/completions"

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client configuration for the active LLM provider.

        Returns:
            HTTP client configuration dictionary with validated values.

        Raises:
            ValueError: If required HTTP client parameters are missing or invalid.
        """
        http_config = self.get_llm_config().get("http_client", {})

        required_keys = [
            "connect_timeout", "read_timeout", "write_timeout", "pool_timeout"
        ]
        for key in required_keys:
            if key not in http_config:
                raise ValueError(
                    f"http_client.{key} must be explicitly configured "
                    f"for provider '{self.active_provider}' in config.yaml"
                )
            if http_config[key] <= 0:
                raise ValueError(f"http_client.{key} must be positive")

        return http_config

    def get_streaming_config(self) -> dict[str, Any]:
        """Get streaming configuration from YAML.

        Raises:
            ValueError: If queue_size is missing or negative.
        """
        streaming_config = self._config.get("streaming", {})

        if "queue_size" not in streaming_config:
            raise ValueError(
                "streaming.queue_size must be explicitly configured in config.yaml"
            )
        queue_size = streaming_config["queue_size"]
        if not isinstance(queue_size, int) or queue_size < 0:
            raise ValueError("streaming.queue_size must be a non-negative integer")

        return streaming_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        return self._config.get("logging", {})

    def get_chat_config(self) -> dict[str, Any]:
        """Get chat defaults (system prompt, titles) from YAML."""
        return self._config.get("chat", {})
