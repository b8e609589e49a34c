from pathlib import Path

import pytest

from scanflow.files.exceptions import RenameError
from scanflow.files.renamer import FileRenamer


class TestFileRenamer:
    def test_renames_keeping_directory_and_suffix(self, tmp_path: Path) -> None:
        source = tmp_path / "invoice.pdf"
        source.write_bytes(b"%PDF")

        new_path = FileRenamer().rename(str(source), "acme_invoice")

        assert new_path == str(tmp_path / "acme_invoice.pdf")
        assert not source.exists()
        assert (tmp_path / "acme_invoice.pdf").read_bytes() == b"%PDF"

    def test_same_name_returns_source(self, tmp_path: Path) -> None:
        source = tmp_path / "invoice.pdf"
        source.write_bytes(b"%PDF")

        assert FileRenamer().rename(str(source), "invoice") == str(source)
        assert source.exists()

    def test_rejects_existing_target(self, tmp_path: Path) -> None:
        source = tmp_path / "a.pdf"
        source.write_bytes(b"a")
        (tmp_path / "b.pdf").write_bytes(b"b")

        with pytest.raises(RenameError, match="already exists"):
            FileRenamer().rename(str(source), "b")
        assert source.read_bytes() == b"a"

    def test_rejects_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(RenameError, match="not found"):
            FileRenamer().rename(str(tmp_path / "missing.pdf"), "b")

    @pytest.mark.parametrize("name", ["", "   ", "a/b", "a:b", "what?"])
    def test_rejects_invalid_names(self, tmp_path: Path, name: str) -> None:
        source = tmp_path / "a.pdf"
        source.write_bytes(b"a")

        with pytest.raises(RenameError):
            FileRenamer().rename(str(source), name)
        assert source.exists()
