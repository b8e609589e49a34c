"""Pure stage transitions for the document processing pipeline.

page pending -> page succeeded | page errored
page succeeded -> document pending -> document succeeded | document errored
document succeeded -> finished

Each function only builds the next record. Invoking the classifier, writing
the document or renaming files is left to the caller.
"""

from collections.abc import Iterable
from dataclasses import replace

from scanflow.workflow.exceptions import InvalidTransitionError
from scanflow.workflow.models import (
    ClassificationResult,
    LifecycleStatus,
    StageLevel,
    StageRecord,
    page_number_prefix,
)


def begin_preprocess(
    record_id: str,
    selected_pages: Iterable[int],
    data_directory: str,
    images_directory: str,
) -> StageRecord:
    return StageRecord(
        id=record_id,
        selected_pages=tuple(selected_pages),
        data_directory=data_directory,
        images_directory=images_directory,
    )


def complete_preprocess(pending: StageRecord, result: ClassificationResult) -> StageRecord:
    _require(pending, StageLevel.PAGE, LifecycleStatus.PENDING, "complete_preprocess")
    return replace(
        pending,
        status=LifecycleStatus.SUCCEEDED,
        result=result,
        page_number_prefix=page_number_prefix(pending.selected_pages),
    )


def fail_preprocess(pending: StageRecord, error_message: str) -> StageRecord:
    _require(pending, StageLevel.PAGE, LifecycleStatus.PENDING, "fail_preprocess")
    return replace(pending, status=LifecycleStatus.ERRORED, error_message=error_message)


def promote_to_document(
    succeeded: StageRecord, document_path: str, file_name: str
) -> StageRecord:
    _require(succeeded, StageLevel.PAGE, LifecycleStatus.SUCCEEDED, "promote_to_document")
    return replace(
        succeeded,
        status=LifecycleStatus.PENDING,
        level=StageLevel.DOCUMENT,
        document_path=document_path,
        file_name=file_name,
    )


def complete_document(pending: StageRecord, document_path: str | None = None) -> StageRecord:
    """Mark a document as written; `document_path` overrides the planned location."""
    _require(pending, StageLevel.DOCUMENT, LifecycleStatus.PENDING, "complete_document")
    return replace(
        pending,
        status=LifecycleStatus.SUCCEEDED,
        document_path=document_path or pending.document_path,
    )


def fail_document(pending: StageRecord, error_message: str) -> StageRecord:
    _require(pending, StageLevel.DOCUMENT, LifecycleStatus.PENDING, "fail_document")
    return replace(
        pending,
        status=LifecycleStatus.ERRORED,
        result=None,
        error_message=error_message,
    )


def finalize(succeeded: StageRecord) -> StageRecord:
    _require(succeeded, StageLevel.DOCUMENT, LifecycleStatus.SUCCEEDED, "finalize")
    return replace(
        succeeded,
        level=StageLevel.FINISHED,
        file_name_history=(succeeded.file_name,),
    )


def _require(
    record: StageRecord,
    level: StageLevel,
    status: LifecycleStatus,
    transition: str,
) -> None:
    if record.level is not level or record.status is not status:
        raise InvalidTransitionError(
            f"{transition} requires a {level.value}-level {status.value} record, "
            f"got {record.level.value}-level {record.status.value} record {record.id}"
        )
