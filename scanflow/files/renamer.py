from pathlib import Path

from scanflow.files.base import BaseRenamer
from scanflow.files.exceptions import RenameError
from scanflow.logging.logger import Log

_FORBIDDEN = frozenset('/\\<>:"|?*')


class FileRenamer(BaseRenamer):
    """Renames documents on the local filesystem within their directory."""

    def rename(self, document_path: str, new_file_name: str) -> str:
        source = Path(document_path)
        if not new_file_name.strip():
            raise RenameError("New file name must not be empty")
        if any(ch in _FORBIDDEN for ch in new_file_name):
            raise RenameError(f"File name contains forbidden characters: {new_file_name!r}")
        if not source.exists():
            raise RenameError(f"Document not found: {source}")

        target = source.with_name(new_file_name + source.suffix)
        if target == source:
            return str(source)
        if target.exists():
            raise RenameError(f"Target already exists: {target}")
        try:
            source.rename(target)
        except OSError as exc:
            raise RenameError(f"Failed to rename {source} to {target}: {exc}") from exc
        Log.debug(f"Renamed {source} -> {target}")
        return str(target)
