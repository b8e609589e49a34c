"""AI-powered page range classifier."""

import base64
import json
import mimetypes
from collections.abc import Sequence
from pathlib import Path

from scanflow.classification.base import BaseClassifier
from scanflow.classification.client_base import BaseClassificationClient
from scanflow.classification.exceptions import ClassificationError
from scanflow.classification.prompt_loader import load_json_schema, load_prompt_template
from scanflow.classification.validator import validate_and_build
from scanflow.logging.logger import Log
from scanflow.workflow.models import ClassificationResult

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert in document analysis and information extraction, "
    "specializing in business documents. Output only JSON."
)


class LLMClassifier(BaseClassifier):
    """Classifies page images by sending them to a vision-capable language model."""

    def __init__(
        self,
        *,
        client: BaseClassificationClient,
        model: str,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._max_tokens = max_tokens
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(prompt_template_path)
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    def classify(self, image_paths: Sequence[str]) -> ClassificationResult:
        if not image_paths:
            raise ClassificationError("No page images to classify")
        image_urls = [self._encode_image(path) for path in image_paths]
        prompt = self._build_prompt(len(image_urls))
        Log.debug(f"Classification prompt:\n{prompt}")

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            image_urls=image_urls,
            json_schema=self._json_schema_dict,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        result = validate_and_build(self._parse_json(raw_response))
        Log.info(
            f"Classified {len(image_urls)} page(s) as {result.type_abbr}: "
            f"{result.suggested_file_name}"
        )
        return result

    def _build_prompt(self, page_count: int) -> str:
        return self._prompt_template.format(
            page_count=page_count,
            json_schema=self._json_schema,
        )

    @staticmethod
    def _encode_image(path: str) -> str:
        mime_type = mimetypes.guess_type(path)[0] or "image/webp"
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise ClassificationError(f"Failed to read page image {path}: {exc}") from exc
        return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ClassificationError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ClassificationError("JSON response must be an object")
        return parsed
