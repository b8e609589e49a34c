from abc import ABC, abstractmethod
from collections.abc import Sequence

from scanflow.workflow.models import ClassificationResult


class BaseClassifier(ABC):
    """Contract for all page-range classifiers."""

    @abstractmethod
    def classify(self, image_paths: Sequence[str]) -> ClassificationResult:
        """Classify the document made of the given page images.

        Args:
            image_paths: One image per page, in reading order.

        Returns:
            ClassificationResult with dates, type, summary and file name.

        Raises:
            ClassificationError: on any failure.
        """
