from typing import ClassVar

from scanflow.classification.base import BaseClassifier
from scanflow.classification.classifier import LLMClassifier
from scanflow.classification.example_client_adapter import ExampleClientAdapter
from scanflow.classification.openai_client_adapter import OpenAIClientAdapter
from scanflow.config.settings import Settings


class ClassifierFactory:
    """Creates the configured classifier."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseClassifier:
        """Create a configured classifier from application settings."""
        provider = settings.classification_provider.lower()
        if provider == "example":
            return LLMClassifier(client=ExampleClientAdapter(), model="example")
        base_url = cls._resolve_base_url(provider, settings)
        client = OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=cls._resolve_timeout_seconds(provider, settings),
            base_url=base_url,
        )
        return LLMClassifier(
            client=client,
            model=cls._resolve_model_name(provider, settings),
            temperature=settings.classification_temperature,
            max_tokens=settings.classification_max_tokens,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.classification_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "classification_openai_compatible_base_url is required for "
                    "classification_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown classification provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.classification_openai_api_key,
            "openai_compatible": settings.classification_openai_compatible_api_key,
            "openrouter": settings.classification_openrouter_api_key,
            "ollama": settings.classification_ollama_api_key,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.classification_openai_model_name,
            "openai_compatible": settings.classification_openai_compatible_model_name,
            "openrouter": settings.classification_openrouter_model_name,
            "ollama": settings.classification_ollama_model_name,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_timeout_seconds(cls, provider: str, settings: Settings) -> int:
        key_map = {
            "openai": settings.classification_openai_timeout_seconds,
            "openai_compatible": settings.classification_openai_compatible_timeout_seconds,
            "openrouter": settings.classification_openrouter_timeout_seconds,
            "ollama": settings.classification_ollama_timeout_seconds,
        }
        return key_map.get(provider, 60) or 60
