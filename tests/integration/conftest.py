import threading
from pathlib import Path

import pytest

from scanflow.extraction.base import BaseImageExtractor
from scanflow.extraction.models import ExtractionReport, ProgressCallback
from scanflow.pdf.pymupdf_adapter import PyMuPdfAdapter


class PlaceholderImageExtractor(BaseImageExtractor):
    """Writes one placeholder image per page instead of shelling out to magick."""

    def extract(
        self,
        document_path: str,
        output_directory: str,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ExtractionReport:
        total = PyMuPdfAdapter().count_pages(document_path)
        images = Path(output_directory)
        images.mkdir(parents=True, exist_ok=True)
        for page in range(1, total + 1):
            (images / f"{page}.webp").write_bytes(f"page {page}".encode())
        return ExtractionReport(
            total_pages=total,
            extracted_pages=tuple(range(1, total + 1)),
            newly_extracted=total,
        )


@pytest.fixture()
def placeholder_extractor() -> PlaceholderImageExtractor:
    return PlaceholderImageExtractor()
