"""Named configurations for OpenAI-compatible chat providers."""

import os
from dataclasses import dataclass
from typing import Dict, Optional

from openai import OpenAI

OPENROUTER_BASE = "https://openrouter.ai/api/v1"
GROQ_BASE = "https://api.groq.com/openai/v1"
OLLAMA_BASE = "http://localhost:11434/v1"
HUGGINGFACE_BASE = "https://router.huggingface.co/v1"
OPENAI_BASE = "https://api.openai.com/v1"


@dataclass(frozen=True)
class ProviderConfig:
    """How to reach one provider.

    Attributes:
        name: registry key.
        base_url: default endpoint.
        default_model: model used when none is given.
        api_key_env: environment variable holding the key; None for keyless
            providers such as a local Ollama.
        base_url_env: optional environment variable overriding base_url.
        json_mode: whether to request ``response_format={"type": "json_object"}``.
    """

    name: str
    base_url: str
    default_model: str
    api_key_env: Optional[str] = None
    base_url_env: Optional[str] = None
    json_mode: bool = False

    @property
    def requires_api_key(self) -> bool:
        return self.api_key_env is not None

    def resolved_base_url(self) -> str:
        if self.base_url_env:
            return os.environ.get(self.base_url_env, self.base_url)
        return self.base_url


DEFAULT_PROVIDERS = (
    ProviderConfig("openrouter", OPENROUTER_BASE, "openai/gpt-4o-mini", "OPENROUTER_API_KEY", "OPENROUTER_BASE_URL"),
    ProviderConfig("groq", GROQ_BASE, "llama-3.1-8b-instant", "GROQ_API_KEY", json_mode=True),
    ProviderConfig("ollama", OLLAMA_BASE, "llama3", base_url_env="OLLAMA_BASE_URL"),
    ProviderConfig("huggingface", HUGGINGFACE_BASE, "meta-llama/Llama-3.1-8B-Instruct", "HUGGINGFACE_API_KEY"),
    ProviderConfig("openai", OPENAI_BASE, "gpt-4o-mini", "OPENAI_API_KEY", json_mode=True),
)


class ProviderRegistry:
    """Registry of provider configs.

    Passed explicitly to whatever builds LLM strategies; there is no
    process-wide instance.
    """

    def __init__(self) -> None:
        self._providers: Dict[str, ProviderConfig] = {}

    @classmethod
    def with_defaults(cls) -> "ProviderRegistry":
        registry = cls()
        for config in DEFAULT_PROVIDERS:
            registry.register(config)
        return registry

    def register(self, config: ProviderConfig) -> None:
        self._providers[config.name] = config

    def unregister(self, name: str) -> None:
        self._providers.pop(name, None)

    def get(self, name: str) -> ProviderConfig:
        if name not in self._providers:
            raise ValueError(f"Unknown provider: {name}. Known: {', '.join(self.names()) or 'none'}")
        return self._providers[name]

    def names(self) -> list[str]:
        return sorted(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def resolve_api_key(self, name: str, api_key: Optional[str] = None) -> str:
        config = self.get(name)
        if not config.requires_api_key:
            # The OpenAI client insists on a non-empty key
            return api_key or name
        key = api_key or os.environ.get(config.api_key_env or "")
        if not key:
            raise ValueError(
                f"API key required for {name}. Set {config.api_key_env} or pass api_key."
            )
        return key

    def create_client(self, name: str, api_key: Optional[str] = None) -> OpenAI:
        config = self.get(name)
        return OpenAI(api_key=self.resolve_api_key(name, api_key), base_url=config.resolved_base_url())
