class PdfError(Exception):
    """Raised when a PDF cannot be opened, counted or written."""
