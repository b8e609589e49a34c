from collections.abc import Sequence
from pathlib import Path

import pymupdf

from scanflow.pdf.base import BaseDocumentWriter, BasePageCounter
from scanflow.pdf.exceptions import PdfError


class PyMuPdfAdapter(BasePageCounter, BaseDocumentWriter):
    """Counts and splits PDF pages using PyMuPDF."""

    def count_pages(self, pdf_path: str) -> int:
        try:
            with pymupdf.open(pdf_path) as doc:  # type: ignore[no-untyped-call]
                return int(doc.page_count)
        except Exception as exc:
            raise PdfError(f"pymupdf could not open {pdf_path}: {exc}") from exc

    def write_pages(
        self,
        source_path: str,
        page_indices: Sequence[int],
        output_path: str,
    ) -> str:
        try:
            with pymupdf.open(source_path) as source:  # type: ignore[no-untyped-call]
                out_of_range = [p for p in page_indices if not 0 <= p < source.page_count]
                if out_of_range:
                    raise PdfError(
                        f"Pages {out_of_range} out of range for {source_path} "
                        f"({source.page_count} pages)"
                    )
                Path(output_path).parent.mkdir(parents=True, exist_ok=True)
                with pymupdf.open() as target:  # type: ignore[no-untyped-call]
                    for page in page_indices:
                        target.insert_pdf(source, from_page=page, to_page=page)
                    target.save(output_path, garbage=3, deflate=True)
            return output_path
        except PdfError:
            raise
        except Exception as exc:
            raise PdfError(f"pymupdf failed to write {output_path}: {exc}") from exc
