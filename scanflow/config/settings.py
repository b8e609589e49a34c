from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"

    pdf_engine: str = "pymupdf"
    output_directory_name: str = "done"
    max_concurrent_jobs: int = 4

    magick_binary: str = "magick"
    image_density: int = 150
    image_resize: str = "1500x1500"
    image_format: str = "webp"
    extraction_max_retries: int = 3
    extraction_timeout_seconds: int = 60
    extraction_min_batch_size: int = 5
    extraction_max_batch_size: int = 20

    classification_provider: str = "openai"
    classification_temperature: float = 0.0
    classification_max_tokens: int = 4096

    classification_openai_api_key: str = ""
    classification_openai_model_name: str = "gpt-4o-mini"
    classification_openai_timeout_seconds: int = 60

    classification_openai_compatible_base_url: str = ""
    classification_openai_compatible_api_key: str = ""
    classification_openai_compatible_model_name: str = ""
    classification_openai_compatible_timeout_seconds: int = 60

    classification_openrouter_api_key: str = ""
    classification_openrouter_model_name: str = ""
    classification_openrouter_timeout_seconds: int = 60

    classification_ollama_api_key: str = "ollama"
    classification_ollama_model_name: str = "llava"
    classification_ollama_timeout_seconds: int = 120
