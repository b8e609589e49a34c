import io
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from scanflow.workflow.models import ClassificationResult, DateEntry


def _pdf_bytes(page_texts: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for text in page_texts:
        c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_path(tmp_path: Path) -> Path:
    """A single-page PDF on disk."""
    path = tmp_path / "scan.pdf"
    path.write_bytes(_pdf_bytes(["Hello PDF World"]))
    return path


@pytest.fixture()
def multi_page_pdf_path(tmp_path: Path) -> Path:
    """A four-page PDF on disk with the page number printed on each page."""
    path = tmp_path / "batch.pdf"
    path.write_bytes(_pdf_bytes([f"Page {n}" for n in range(1, 5)]))
    return path


@pytest.fixture()
def classification_result() -> ClassificationResult:
    return ClassificationResult(
        dates=(DateEntry(date="2018-04-25", description="Issue date"),),
        type_name="Nota Fiscal de Servicos Eletronica",
        type_abbr="NFS-E",
        summary="Printing of 130 certificates",
        suggested_file_name="2018-04-25-NFS-E-printing_of_130_certificates",
    )
