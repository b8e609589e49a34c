from pathlib import Path

from scanflow.classification.exceptions import ClassificationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the classification prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled classification_prompt.txt.

    Returns:
        The raw template string with placeholders.

    Raises:
        ClassificationError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "classification_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ClassificationError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(path: Path | None = None) -> str:
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "classification_schema.json"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ClassificationError(f"Failed to load JSON schema: {exc}") from exc
