"""Derived filesystem locations for a source document.

Paths are built with plain string operations so the convention holds
regardless of the host platform's separator.
"""

import os
from dataclasses import dataclass

_PDF_SUFFIX = ".pdf"


@dataclass(frozen=True)
class DocumentPaths:
    document_path: str
    data_directory: str
    images_directory: str
    document_clone_path: str
    output_directory: str
    sep: str = os.sep

    def join(self, directory: str, name: str) -> str:
        return directory + self.sep + name


def data_directory_for(document_path: str) -> str:
    """`/a/file.pdf` -> `/a/file-data`; any other name gets `-data` appended."""
    if document_path.endswith(_PDF_SUFFIX):
        return document_path[: -len(_PDF_SUFFIX)] + "-data"
    return document_path + "-data"


def images_directory_for(document_path: str, sep: str = os.sep) -> str:
    return data_directory_for(document_path) + sep + "images"


def document_clone_path_for(document_path: str, sep: str = os.sep) -> str:
    basename = document_path.rsplit(sep, 1)[-1]
    return data_directory_for(document_path) + sep + basename


def derive_paths(
    document_path: str,
    sep: str = os.sep,
    output_directory_name: str = "done",
) -> DocumentPaths:
    data_directory = data_directory_for(document_path)
    return DocumentPaths(
        document_path=document_path,
        data_directory=data_directory,
        images_directory=images_directory_for(document_path, sep),
        document_clone_path=document_clone_path_for(document_path, sep),
        output_directory=data_directory + sep + output_directory_name,
        sep=sep,
    )
