"""Validates the model's parsed JSON answer and builds a ClassificationResult."""

from typing import Any

from scanflow.classification.exceptions import ClassificationValidationError
from scanflow.files.naming import sanitize_file_name
from scanflow.workflow.models import ClassificationResult, DateEntry

_MAX_DATES = 50
_TEXT_FIELDS = ("type_name", "type_abbr", "summary", "suggested_file_name")


def validate_and_build(data: dict[str, Any]) -> ClassificationResult:
    """Validate raw parsed JSON and build a ClassificationResult.

    Raises:
        ClassificationValidationError: on any validation failure.
    """
    for name in ("dates", *_TEXT_FIELDS):
        if name not in data:
            raise ClassificationValidationError(f"Missing required field: {name}")
    dates = _build_dates(data["dates"])
    texts = {name: _require_text(data[name], name) for name in _TEXT_FIELDS}
    return ClassificationResult(
        dates=dates,
        type_name=texts["type_name"],
        type_abbr=texts["type_abbr"].upper(),
        summary=texts["summary"],
        suggested_file_name=sanitize_file_name(texts["suggested_file_name"]),
    )


def _require_text(raw: Any, name: str) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ClassificationValidationError(f"'{name}' must be a non-empty string")
    return raw.strip()


def _build_dates(raw: Any) -> tuple[DateEntry, ...]:
    if not isinstance(raw, list):
        raise ClassificationValidationError("'dates' must be a list")
    if not raw:
        raise ClassificationValidationError("'dates' must contain at least one entry")
    if len(raw) > _MAX_DATES:
        raise ClassificationValidationError(f"Too many dates: {len(raw)} (max {_MAX_DATES})")
    entries: list[DateEntry] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ClassificationValidationError(f"Date at index {i} must be an object")
        date = item.get("date")
        description = item.get("description")
        if not isinstance(date, str):
            raise ClassificationValidationError(f"Date at index {i}: 'date' must be a string")
        if not isinstance(description, str):
            raise ClassificationValidationError(
                f"Date at index {i}: 'description' must be a string"
            )
        entries.append(DateEntry(date=date.strip(), description=description.strip()))
    return tuple(entries)
