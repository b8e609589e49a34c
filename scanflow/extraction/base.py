import threading
from abc import ABC, abstractmethod

from scanflow.extraction.models import ExtractionReport, ProgressCallback


class BaseImageExtractor(ABC):
    """Contract for adapters that render one image file per document page."""

    @abstractmethod
    def extract(
        self,
        document_path: str,
        output_directory: str,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ExtractionReport:
        """Render every page of `document_path` into `output_directory`.

        Pages already present in the output directory are skipped. Setting
        `cancel_event` stops the run between batches.

        Raises:
            ImageExtractionError: if any page ultimately fails to render.
        """
