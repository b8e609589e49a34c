"""Tests for the Processor orchestration, with every adapter mocked."""

import itertools
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from scanflow.classification.base import BaseClassifier
from scanflow.classification.exceptions import ClassificationNetworkError
from scanflow.extraction.base import BaseImageExtractor
from scanflow.extraction.exceptions import ImageExtractionError
from scanflow.files.base import BaseRenamer
from scanflow.pdf.base import BaseDocumentWriter
from scanflow.pdf.exceptions import PdfError
from scanflow.processor.processor import Processor
from scanflow.workflow.exceptions import InvalidTransitionError
from scanflow.workflow.models import (
    ClassificationResult,
    LifecycleStatus,
    Partition,
    StageLevel,
)
from scanflow.workflow.paths import derive_paths
from scanflow.workflow.store import WorkflowStore


def _make_processor(
    document_path: Path,
    classifier: MagicMock | None = None,
    writer: MagicMock | None = None,
    extractor: MagicMock | None = None,
    renamer: MagicMock | None = None,
) -> Processor:
    counter = itertools.count(1)
    if writer is None:
        writer = MagicMock(spec=BaseDocumentWriter)
        writer.write_pages.side_effect = lambda source, pages, output: output
    return Processor(
        paths=derive_paths(str(document_path)),
        store=WorkflowStore(),
        extractor=extractor or MagicMock(spec=BaseImageExtractor),
        classifier=classifier or MagicMock(spec=BaseClassifier),
        document_writer=writer,
        renamer=renamer or MagicMock(spec=BaseRenamer),
        max_workers=2,
        id_factory=lambda: f"rec-{next(counter)}",
    )


def _classifier(result: ClassificationResult) -> MagicMock:
    classifier = MagicMock(spec=BaseClassifier)
    classifier.classify.return_value = result
    return classifier


class TestPrepare:
    def test_copies_document_and_extracts(self, sample_pdf_path: Path) -> None:
        extractor = MagicMock(spec=BaseImageExtractor)
        processor = _make_processor(sample_pdf_path, extractor=extractor)

        processor.prepare()

        clone = sample_pdf_path.parent / "scan-data" / "scan.pdf"
        assert clone.read_bytes() == sample_pdf_path.read_bytes()
        extractor.extract.assert_called_once_with(
            str(clone),
            str(sample_pdf_path.parent / "scan-data" / "images"),
            progress=None,
            cancel_event=None,
        )

    def test_missing_document(self, tmp_path: Path) -> None:
        extractor = MagicMock(spec=BaseImageExtractor)
        processor = _make_processor(tmp_path / "missing.pdf", extractor=extractor)

        with pytest.raises(ImageExtractionError, match="Failed to copy"):
            processor.prepare()
        extractor.extract.assert_not_called()


class TestProcessPages:
    def test_success_moves_record_to_succeeded(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        classifier = _classifier(classification_result)
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)

        record = processor.process_pages([2, 0])

        images = tmp_path / "scan-data" / "images"
        classifier.classify.assert_called_once_with([str(images / "3.webp"), str(images / "1.webp")])
        assert record.status is LifecycleStatus.SUCCEEDED
        assert record.page_number_prefix == "003_001"
        assert processor.store.partition(Partition.SUCCEEDED) == (record,)
        assert processor.store.partition(Partition.PENDING) == ()

    def test_classification_error_moves_record_to_errored(self, tmp_path: Path) -> None:
        classifier = MagicMock(spec=BaseClassifier)
        classifier.classify.side_effect = ClassificationNetworkError("AI provider network error")
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)

        record = processor.process_pages([0])

        assert record.status is LifecycleStatus.ERRORED
        assert record.error_message == "AI provider network error"
        assert processor.store.partition(Partition.ERRORED) == (record,)

    def test_unexpected_classifier_error_moves_record_to_errored(self, tmp_path: Path) -> None:
        classifier = MagicMock(spec=BaseClassifier)
        classifier.classify.side_effect = ValueError("boom")
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)

        record = processor.submit_pages([0]).result(timeout=5)

        assert record.status is LifecycleStatus.ERRORED
        assert record.error_message == "boom"
        assert processor.store.partition(Partition.PENDING) == ()
        assert processor.store.partition(Partition.ERRORED) == (record,)

    def test_error_without_message_uses_exception_name(self, tmp_path: Path) -> None:
        classifier = MagicMock(spec=BaseClassifier)
        classifier.classify.side_effect = KeyError
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)

        record = processor.process_pages([0])

        assert record.error_message == "KeyError"

    def test_submit_pages_registers_pending_record_first(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        release = threading.Event()
        classifier = MagicMock(spec=BaseClassifier)

        def slow_classify(paths: list[str]) -> ClassificationResult:
            release.wait(timeout=5)
            return classification_result

        classifier.classify.side_effect = slow_classify
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)

        future = processor.submit_pages([0])
        pending_ids = [r.id for r in processor.store.partition(Partition.PENDING)]
        release.set()
        record = future.result(timeout=5)

        assert pending_ids == ["rec-1"]
        assert record.status is LifecycleStatus.SUCCEEDED
        assert processor.store.get("rec-1") == record

    def test_late_result_after_close_is_dropped(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        started = threading.Event()
        release = threading.Event()
        classifier = MagicMock(spec=BaseClassifier)

        def slow_classify(paths: list[str]) -> ClassificationResult:
            started.set()
            release.wait(timeout=5)
            return classification_result

        classifier.classify.side_effect = slow_classify
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)

        future = processor.submit_pages([0])
        assert started.wait(timeout=5)
        processor.close()
        release.set()
        future.result(timeout=5)

        assert len(processor.store) == 0


class TestProcessDocument:
    def test_writes_pages_and_finishes(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        writer = MagicMock(spec=BaseDocumentWriter)
        writer.write_pages.side_effect = lambda source, pages, output: output
        processor = _make_processor(
            tmp_path / "scan.pdf", classifier=_classifier(classification_result), writer=writer
        )
        record = processor.process_pages([2])

        finished = processor.process_document(record.id)

        done = tmp_path / "scan-data" / "done"
        output = done / f"003-{classification_result.suggested_file_name}.pdf"
        writer.write_pages.assert_called_once_with(str(tmp_path / "scan.pdf"), (2,), str(output))
        assert finished.level is StageLevel.FINISHED
        assert finished.document_path == str(output)
        assert finished.file_name_history == (classification_result.suggested_file_name,)
        assert finished.display_name == f"003-{classification_result.suggested_file_name}"
        assert processor.store.partition(Partition.FINISHED) == (finished,)
        assert processor.store.partition(Partition.SUCCEEDED) == ()

    def test_custom_file_name_is_sanitized(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        processor = _make_processor(
            tmp_path / "scan.pdf", classifier=_classifier(classification_result)
        )
        record = processor.process_pages([0])

        finished = processor.process_document(record.id, "my invoice/2024")

        assert finished.file_name == "my_invoice_2024"

    def test_reads_from_clone_when_present(
        self, sample_pdf_path: Path, classification_result: ClassificationResult
    ) -> None:
        writer = MagicMock(spec=BaseDocumentWriter)
        writer.write_pages.side_effect = lambda source, pages, output: output
        processor = _make_processor(
            sample_pdf_path, classifier=_classifier(classification_result), writer=writer
        )
        processor.prepare()
        record = processor.process_pages([0])

        processor.process_document(record.id)

        assert writer.write_pages.call_args.args[0] == processor.paths.document_clone_path

    def test_write_failure_moves_record_to_errored(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        writer = MagicMock(spec=BaseDocumentWriter)
        writer.write_pages.side_effect = PdfError("disk full")
        processor = _make_processor(
            tmp_path / "scan.pdf", classifier=_classifier(classification_result), writer=writer
        )
        record = processor.process_pages([0])

        errored = processor.process_document(record.id)

        assert errored.status is LifecycleStatus.ERRORED
        assert errored.level is StageLevel.DOCUMENT
        assert errored.result is None
        assert errored.error_message == "disk full"
        assert processor.store.partition(Partition.ERRORED) == (errored,)

    def test_rejects_unclassified_record(self, tmp_path: Path) -> None:
        classifier = MagicMock(spec=BaseClassifier)
        classifier.classify.side_effect = ClassificationNetworkError("down")
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)
        record = processor.process_pages([0])

        with pytest.raises(InvalidTransitionError):
            processor.process_document(record.id)

    def test_same_suggestion_writes_distinct_files(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        processor = _make_processor(
            tmp_path / "scan.pdf", classifier=_classifier(classification_result)
        )
        first = processor.process_document(processor.process_pages([0, 1]).id)
        second = processor.process_document(processor.process_pages([2, 3]).id)

        done = tmp_path / "scan-data" / "done"
        name = classification_result.suggested_file_name
        assert first.document_path == str(done / f"001_002-{name}.pdf")
        assert second.document_path == str(done / f"003_004-{name}.pdf")
        assert first.file_name == second.file_name == name

    def test_unexpected_write_failure_moves_record_to_errored(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        writer = MagicMock(spec=BaseDocumentWriter)
        writer.write_pages.side_effect = RuntimeError("writer crashed")
        processor = _make_processor(
            tmp_path / "scan.pdf", classifier=_classifier(classification_result), writer=writer
        )
        record = processor.process_pages([0])

        errored = processor.process_document(record.id)

        assert errored.status is LifecycleStatus.ERRORED
        assert errored.error_message == "writer crashed"
        assert processor.store.partition(Partition.PENDING) == ()
        assert processor.store.partition(Partition.ERRORED) == (errored,)


class TestRetryAndRename:
    def test_retry_replaces_errored_record(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        classifier = MagicMock(spec=BaseClassifier)
        classifier.classify.side_effect = [ClassificationNetworkError("down"), classification_result]
        processor = _make_processor(tmp_path / "scan.pdf", classifier=classifier)
        errored = processor.process_pages([1, 2])

        retried = processor.retry(errored.id)

        assert retried.id == "rec-2"
        assert retried.selected_pages == (1, 2)
        assert retried.status is LifecycleStatus.SUCCEEDED
        assert "rec-1" not in processor.store
        assert processor.store.partition(Partition.ERRORED) == ()

    def test_retry_rejects_non_errored(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        processor = _make_processor(
            tmp_path / "scan.pdf", classifier=_classifier(classification_result)
        )
        record = processor.process_pages([0])

        with pytest.raises(InvalidTransitionError, match="Only errored records"):
            processor.retry(record.id)

    def test_rename_uses_renamer(
        self, tmp_path: Path, classification_result: ClassificationResult
    ) -> None:
        renamer = MagicMock(spec=BaseRenamer)
        renamer.rename.return_value = str(tmp_path / "scan-data" / "done" / "renamed.pdf")
        processor = _make_processor(
            tmp_path / "scan.pdf", classifier=_classifier(classification_result), renamer=renamer
        )
        record = processor.process_pages([0])
        finished = processor.process_document(record.id)

        renamed = processor.rename(record.id, "001-renamed")

        renamer.rename.assert_called_once_with(finished.document_path, "001-renamed")
        assert renamed is not None
        assert renamed.file_name_history == (finished.file_name, "renamed")
