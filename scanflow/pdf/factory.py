from scanflow.config.settings import Settings
from scanflow.pdf.base import BaseDocumentWriter, BasePageCounter
from scanflow.pdf.pdfplumber_adapter import PdfPlumberAdapter
from scanflow.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfEngineFactory:
    """Creates the PDF adapters selected by settings."""

    PAGE_COUNTERS: dict[str, type[BasePageCounter]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create_page_counter(cls, settings: Settings) -> BasePageCounter:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PAGE_COUNTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PAGE_COUNTERS)}"
            )
        return adapter_cls()

    @classmethod
    def create_document_writer(cls, settings: Settings) -> BaseDocumentWriter:
        """Only PyMuPDF can write PDFs, whatever engine counts pages."""
        _ = settings
        return PyMuPdfAdapter()
