"""Offline classification client.

Returns a fixed, valid classification without any network call. Used for
local development and tests, and as a template for new provider adapters.
"""

import json
from typing import ClassVar

from scanflow.classification.client_base import BaseClassificationClient


class ExampleClientAdapter(BaseClassificationClient):
    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "dates": [{"date": "2024-01-31", "description": "Issue date"}],
        "type_name": "Invoice",
        "type_abbr": "INV",
        "summary": "Example document",
        "suggested_file_name": "2024-01-31-INV-example_document",
    }

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
        _ = model, temperature, max_tokens, system_prompt, user_prompt, image_urls, json_schema
        return json.dumps(self.DEFAULT_RESPONSE)
