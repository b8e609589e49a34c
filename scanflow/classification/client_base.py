from abc import ABC, abstractmethod


class BaseClassificationClient(ABC):
    """Contract for provider-specific vision chat clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
        image_urls: list[str],
        json_schema: dict[str, object],
    ) -> str:
        """Return provider response as plain text."""
