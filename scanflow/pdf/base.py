from abc import ABC, abstractmethod
from collections.abc import Sequence


class BasePageCounter(ABC):
    """Contract for adapters that report how many pages a PDF has."""

    @abstractmethod
    def count_pages(self, pdf_path: str) -> int:
        """Return the number of pages in the PDF at `pdf_path`.

        Raises:
            PdfError: if the file cannot be opened as a PDF.
        """


class BaseDocumentWriter(ABC):
    """Contract for adapters that write a page selection out as a new PDF."""

    @abstractmethod
    def write_pages(
        self,
        source_path: str,
        page_indices: Sequence[int],
        output_path: str,
    ) -> str:
        """Copy the given 0-based pages, in order, into a new PDF.

        Returns:
            The path of the written document.

        Raises:
            PdfError: if the source cannot be read, a page is out of range,
                      or the output cannot be saved.
        """
