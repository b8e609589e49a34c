class RenameError(Exception):
    """Raised when a document cannot be renamed on disk."""
