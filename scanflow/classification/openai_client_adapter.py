import httpx
import openai

from scanflow.classification.client_base import BaseClassificationClient
from scanflow.classification.exceptions import (
    ClassificationError,
    ClassificationNetworkError,
)


class OpenAIClientAdapter(BaseClassificationClient):
    """Classification client built on the OpenAI-compatible chat API with image input."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

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
        user_content: list[dict[str, object]] = [{"type": "text", "text": user_prompt}]
        user_content.extend(
            {"type": "image_url", "image_url": {"url": url}} for url in image_urls
        )
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "classification_result",
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ClassificationNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ClassificationNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise ClassificationError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ClassificationError("AI returned empty response")
        return content
