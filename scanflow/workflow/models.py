from dataclasses import dataclass
from enum import Enum

from scanflow.workflow.exceptions import InvalidRecordError


class LifecycleStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    ERRORED = "errored"


class StageLevel(str, Enum):
    PAGE = "page"
    DOCUMENT = "document"
    FINISHED = "finished"


class Partition(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    ERRORED = "errored"
    FINISHED = "finished"


@dataclass(frozen=True)
class DateEntry:
    """A date found in the document and what it refers to."""

    date: str
    description: str


@dataclass(frozen=True)
class ClassificationResult:
    """Output of the classification step for one page range."""

    dates: tuple[DateEntry, ...]
    type_name: str
    type_abbr: str
    summary: str
    suggested_file_name: str

    def __post_init__(self) -> None:
        if not self.dates:
            raise InvalidRecordError("ClassificationResult.dates must not be empty")


@dataclass(frozen=True)
class StageRecord:
    """One unit of work (a page range or a whole document) at one lifecycle point.

    `level` refines `status`: page-level records are classified, document-level
    records are written to disk, finished records may only be renamed.
    """

    id: str
    selected_pages: tuple[int, ...]
    data_directory: str
    images_directory: str
    status: LifecycleStatus = LifecycleStatus.PENDING
    level: StageLevel = StageLevel.PAGE
    result: ClassificationResult | None = None
    error_message: str | None = None
    document_path: str | None = None
    file_name: str | None = None
    file_name_history: tuple[str, ...] | None = None
    page_number_prefix: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidRecordError("StageRecord.id must be a non-empty string")
        _check_pages(self.selected_pages)
        _check_payload(self)
        _check_document_fields(self)
        _check_history(self.file_name_history, self.level)

    @property
    def partition(self) -> Partition:
        if self.level is StageLevel.FINISHED:
            return Partition.FINISHED
        return Partition(self.status.value)

    @property
    def display_name(self) -> str | None:
        """File name as shown to the user, with the page number prefix."""
        if self.file_name is None:
            return None
        return prefixed_file_name(self.page_number_prefix, self.file_name)


def page_number_prefix(selected_pages: tuple[int, ...]) -> str:
    """Build the file name prefix for a page selection, e.g. (2, 3) -> '003_004'."""
    return "_".join(f"{page + 1:03d}" for page in selected_pages)


def prefixed_file_name(prefix: str | None, file_name: str) -> str:
    """Name used on disk: `<prefix>-<file_name>`, or the bare name without a prefix."""
    if not prefix:
        return file_name
    return f"{prefix}-{file_name}"


def _check_pages(selected_pages: tuple[int, ...]) -> None:
    if not selected_pages:
        raise InvalidRecordError("selected_pages must not be empty")
    for page in selected_pages:
        if isinstance(page, bool) or not isinstance(page, int) or page < 0:
            raise InvalidRecordError(
                f"selected_pages must hold non-negative integers, got {page!r}"
            )
    if len(set(selected_pages)) != len(selected_pages):
        raise InvalidRecordError(f"selected_pages must be unique, got {selected_pages}")


def _check_payload(record: StageRecord) -> None:
    if record.status is LifecycleStatus.PENDING:
        if record.error_message is not None:
            raise InvalidRecordError("pending records cannot carry an error_message")
        # document-level pending records inherit the page classification
        if record.level is StageLevel.PAGE and record.result is not None:
            raise InvalidRecordError("pending page records cannot carry a result")
    elif record.status is LifecycleStatus.SUCCEEDED:
        if record.result is None or record.error_message is not None:
            raise InvalidRecordError("succeeded records carry a result and no error_message")
    elif record.status is LifecycleStatus.ERRORED:
        if record.error_message is None or record.result is not None:
            raise InvalidRecordError("errored records carry an error_message and no result")
    if record.level is StageLevel.FINISHED and record.status is not LifecycleStatus.SUCCEEDED:
        raise InvalidRecordError("finished records must be succeeded")


def _check_document_fields(record: StageRecord) -> None:
    if record.level is StageLevel.PAGE:
        return
    if not record.document_path or not record.file_name:
        raise InvalidRecordError(
            f"{record.level.value} records require document_path and file_name"
        )


def _check_history(history: tuple[str, ...] | None, level: StageLevel) -> None:
    if (history is not None) != (level is StageLevel.FINISHED):
        raise InvalidRecordError("file_name_history is present only on finished records")
    if history is None:
        return
    if not history:
        raise InvalidRecordError("file_name_history must not be empty")
    for previous, current in zip(history, history[1:]):
        if previous == current:
            raise InvalidRecordError(
                f"file_name_history has consecutive duplicate entry {current!r}"
            )
