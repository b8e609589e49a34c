from scanflow.config.settings import Settings
from scanflow.extraction.base import BaseImageExtractor
from scanflow.extraction.magick_adapter import MagickImageExtractor
from scanflow.pdf.factory import PdfEngineFactory


class ImageExtractorFactory:
    """Creates the configured image extractor."""

    @classmethod
    def create(cls, settings: Settings) -> BaseImageExtractor:
        return MagickImageExtractor(
            page_counter=PdfEngineFactory.create_page_counter(settings),
            binary=settings.magick_binary,
            density=settings.image_density,
            resize=settings.image_resize,
            image_format=settings.image_format,
            max_retries=settings.extraction_max_retries,
            timeout_seconds=settings.extraction_timeout_seconds,
            min_batch_size=settings.extraction_min_batch_size,
            max_batch_size=settings.extraction_max_batch_size,
        )
