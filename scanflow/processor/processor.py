import shutil
import threading
import uuid
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from scanflow.classification.base import BaseClassifier
from scanflow.classification.exceptions import ClassificationError
from scanflow.classification.factory import ClassifierFactory
from scanflow.config.settings import Settings
from scanflow.extraction.base import BaseImageExtractor
from scanflow.extraction.exceptions import ImageExtractionError
from scanflow.extraction.factory import ImageExtractorFactory
from scanflow.extraction.models import ExtractionReport, ProgressCallback
from scanflow.files.base import BaseRenamer
from scanflow.files.naming import sanitize_file_name
from scanflow.files.renamer import FileRenamer
from scanflow.logging.logger import Log
from scanflow.pdf.base import BaseDocumentWriter
from scanflow.pdf.exceptions import PdfError
from scanflow.pdf.factory import PdfEngineFactory
from scanflow.workflow.exceptions import InvalidTransitionError
from scanflow.workflow.models import (
    LifecycleStatus,
    StageLevel,
    StageRecord,
    prefixed_file_name,
)
from scanflow.workflow.paths import DocumentPaths, derive_paths
from scanflow.workflow.store import WorkflowStore
from scanflow.workflow.transitions import (
    begin_preprocess,
    complete_document,
    complete_preprocess,
    fail_document,
    fail_preprocess,
    finalize,
    promote_to_document,
)


def _new_id() -> str:
    return uuid.uuid4().hex


class Processor:
    """Drives one document through the pipeline against a WorkflowStore.

    Pipeline: prepare (copy + extract images) -> classify page ranges ->
    write each classified range as its own PDF -> finished -> rename.
    The store only records state; every side effect happens here.
    """

    def __init__(
        self,
        *,
        paths: DocumentPaths,
        store: WorkflowStore,
        extractor: BaseImageExtractor,
        classifier: BaseClassifier,
        document_writer: BaseDocumentWriter,
        renamer: BaseRenamer,
        image_format: str = "webp",
        max_workers: int = 4,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._paths = paths
        self._store = store
        self._extractor = extractor
        self._classifier = classifier
        self._document_writer = document_writer
        self._renamer = renamer
        self._image_format = image_format
        self._id_factory = id_factory
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers), thread_name_prefix="scanflow"
        )

    @property
    def paths(self) -> DocumentPaths:
        return self._paths

    @property
    def store(self) -> WorkflowStore:
        return self._store

    def prepare(
        self,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ExtractionReport:
        """Copy the document into its data directory and extract page images."""
        clone_path = Path(self._paths.document_clone_path)
        try:
            clone_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self._paths.document_path, clone_path)
        except OSError as exc:
            raise ImageExtractionError(
                f"Failed to copy document to data directory: {exc}"
            ) from exc
        Log.info(f"Copied {self._paths.document_path} to {clone_path}")
        return self._extractor.extract(
            str(clone_path),
            self._paths.images_directory,
            progress=progress,
            cancel_event=cancel_event,
        )

    def page_image_paths(self, selected_pages: Iterable[int]) -> list[str]:
        return [
            self._paths.join(self._paths.images_directory, f"{page + 1}.{self._image_format}")
            for page in selected_pages
        ]

    def begin(self, selected_pages: Iterable[int]) -> StageRecord:
        """Register a new pending page range in the store."""
        record = begin_preprocess(
            self._id_factory(),
            selected_pages,
            self._paths.data_directory,
            self._paths.images_directory,
        )
        self._store.add(record)
        Log.info(f"Record {record.id} pending for pages {list(record.selected_pages)}")
        return record

    def process_pages(self, selected_pages: Iterable[int]) -> StageRecord:
        """Classify a page range synchronously. Returns the succeeded or errored record."""
        generation = self._store.generation
        record = self.begin(selected_pages)
        return self._classify(record, generation)

    def submit_pages(self, selected_pages: Iterable[int]) -> "Future[StageRecord]":
        """Register a page range now and classify it on the worker pool."""
        generation = self._store.generation
        record = self.begin(selected_pages)
        return self._executor.submit(self._classify, record, generation)

    def process_document(self, record_id: str, file_name: str | None = None) -> StageRecord:
        """Write a classified page range as its own PDF and mark it finished."""
        generation = self._store.generation
        succeeded = self._store.get(record_id)
        result = succeeded.result
        if succeeded.level is not StageLevel.PAGE or result is None:
            raise InvalidTransitionError(f"Record {record_id} is not a classified page range")
        name = sanitize_file_name(file_name or result.suggested_file_name)
        disk_name = prefixed_file_name(succeeded.page_number_prefix, name)
        output_path = self._paths.join(self._paths.output_directory, f"{disk_name}.pdf")

        pending = promote_to_document(succeeded, output_path, name)
        if not self._store.move_to_partition(record_id, pending, generation, expected=succeeded):
            return pending

        try:
            written = self._document_writer.write_pages(
                self._source_path(), pending.selected_pages, output_path
            )
        except PdfError as exc:
            Log.error(f"Record {record_id} failed to write {output_path}: {exc}")
            errored = fail_document(pending, str(exc))
            self._store.move_to_partition(record_id, errored, generation)
            return errored
        except Exception as exc:
            Log.exception(f"Record {record_id} failed unexpectedly while writing {output_path}")
            errored = fail_document(pending, str(exc) or type(exc).__name__)
            self._store.move_to_partition(record_id, errored, generation)
            return errored

        done = complete_document(pending, written)
        if not self._store.move_to_partition(record_id, done, generation):
            return done
        finished = finalize(done)
        self._store.move_to_partition(record_id, finished, generation)
        Log.info(f"Record {record_id} finished as {finished.display_name}")
        return finished

    def submit_document(
        self, record_id: str, file_name: str | None = None
    ) -> "Future[StageRecord]":
        return self._executor.submit(self.process_document, record_id, file_name)

    def rename(self, record_id: str, new_file_name: str) -> StageRecord | None:
        return self._store.rename_finished(record_id, new_file_name, self._renamer)

    def retry(self, record_id: str) -> StageRecord:
        """Start a new attempt for an errored record's pages, discarding the errored one."""
        errored = self._store.get(record_id)
        if errored.status is not LifecycleStatus.ERRORED:
            raise InvalidTransitionError(
                f"Only errored records can be retried, {record_id} is {errored.status.value}"
            )
        self._store.discard(record_id)
        Log.info(f"Retrying pages {list(errored.selected_pages)} from record {record_id}")
        return self.process_pages(errored.selected_pages)

    def close(self) -> None:
        """Tear the session down; in-flight work finishes without touching the store."""
        self._store.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "Processor":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _classify(self, record: StageRecord, generation: int) -> StageRecord:
        try:
            result = self._classifier.classify(self.page_image_paths(record.selected_pages))
        except ClassificationError as exc:
            Log.error(f"Record {record.id} classification failed: {exc}")
            updated = fail_preprocess(record, str(exc))
        except Exception as exc:
            Log.exception(f"Record {record.id} classification failed unexpectedly")
            updated = fail_preprocess(record, str(exc) or type(exc).__name__)
        else:
            updated = complete_preprocess(record, result)
        self._store.move_to_partition(record.id, updated, generation)
        return updated

    def _source_path(self) -> str:
        clone_path = self._paths.document_clone_path
        return clone_path if Path(clone_path).exists() else self._paths.document_path


def build_processor(
    settings: Settings,
    document_path: str,
    store: WorkflowStore | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    return Processor(
        paths=derive_paths(document_path, output_directory_name=settings.output_directory_name),
        store=store if store is not None else WorkflowStore(),
        extractor=ImageExtractorFactory.create(settings),
        classifier=ClassifierFactory.create(settings),
        document_writer=PdfEngineFactory.create_document_writer(settings),
        renamer=FileRenamer(),
        image_format=settings.image_format,
        max_workers=settings.max_concurrent_jobs,
    )
