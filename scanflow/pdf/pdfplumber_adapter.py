import pdfplumber

from scanflow.pdf.base import BasePageCounter
from scanflow.pdf.exceptions import PdfError


class PdfPlumberAdapter(BasePageCounter):
    """Counts PDF pages using pdfplumber."""

    def count_pages(self, pdf_path: str) -> int:
        try:
            with pdfplumber.open(pdf_path) as pdf:
                return len(pdf.pages)
        except Exception as exc:
            raise PdfError(f"pdfplumber could not open {pdf_path}: {exc}") from exc
