from abc import ABC, abstractmethod


class BaseRenamer(ABC):
    """Contract for the rename operation applied to finished documents."""

    @abstractmethod
    def rename(self, document_path: str, new_file_name: str) -> str:
        """Rename a document, keeping its directory and extension.

        Args:
            document_path: Current full path of the document.
            new_file_name: New base name, without directory or extension.

        Returns:
            The new full path of the document.

        Raises:
            RenameError: if the rename is rejected.
        """
