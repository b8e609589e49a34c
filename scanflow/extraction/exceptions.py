class ImageExtractionError(Exception):
    """Raised when page images cannot be extracted from a document."""

    def __init__(self, message: str, diagnostic: str = "") -> None:
        super().__init__(message)
        self.diagnostic = diagnostic
