"""In-memory store of stage records, partitioned by outcome."""

import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from scanflow.files.base import BaseRenamer
from scanflow.files.exceptions import RenameError
from scanflow.logging.logger import Log
from scanflow.workflow.exceptions import (
    DuplicateIdError,
    InvalidTransitionError,
    RecordNotFoundError,
)
from scanflow.workflow.history import append_history, clean_file_name
from scanflow.workflow.models import Partition, StageRecord, prefixed_file_name


class StoreEventKind(str, Enum):
    ADDED = "added"
    MOVED = "moved"
    RENAMED = "renamed"
    DISCARDED = "discarded"
    CLEARED = "cleared"


@dataclass(frozen=True)
class StoreEvent:
    """Change notification, delivered after the mutation has been applied."""

    kind: StoreEventKind
    generation: int
    record_id: str | None = None
    record: StageRecord | None = None
    partition: Partition | None = None
    previous_partition: Partition | None = None


Listener = Callable[[StoreEvent], None]


class WorkflowStore:
    """Holds pending, succeeded, errored and finished records keyed by id.

    All partition mutations happen under one lock, so an id is never absent
    from every partition or present in two of them. `generation` increases on
    every `clear()`; callers capture it before slow work and pass it back to
    `move_to_partition` so results from a torn-down session are dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._partitions: dict[Partition, list[StageRecord]] = {p: [] for p in Partition}
        self._index: dict[str, Partition] = {}
        self._renaming: set[str] = set()
        self._listeners: list[Listener] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def add(self, record: StageRecord) -> None:
        with self._lock:
            if record.id in self._index:
                raise DuplicateIdError(
                    f"Record {record.id} already present in {self._index[record.id].value}"
                )
            self._insert(record)
            event = StoreEvent(
                kind=StoreEventKind.ADDED,
                generation=self._generation,
                record_id=record.id,
                record=record,
                partition=record.partition,
            )
        self._emit(event)

    def move_to_partition(
        self,
        record_id: str,
        new_record: StageRecord,
        generation: int | None = None,
        expected: StageRecord | None = None,
    ) -> bool:
        """Replace a record and file it under the partition its new stage implies.

        Returns False without touching the store when `generation` is stale.
        When `expected` is given the move only applies if the stored record
        still equals it.

        Raises:
            RecordNotFoundError: if `record_id` is not in any partition.
            InvalidTransitionError: if `new_record` carries a different id, or
                the stored record no longer matches `expected`.
        """
        if new_record.id != record_id:
            raise InvalidTransitionError(
                f"Cannot move record {record_id} to a record with id {new_record.id}"
            )
        with self._lock:
            if generation is not None and generation != self._generation:
                Log.debug(
                    f"Dropping late result for record {record_id} "
                    f"(generation {generation}, store at {self._generation})"
                )
                return False
            previous = self._index.get(record_id)
            if previous is None:
                raise RecordNotFoundError(f"Record {record_id} not found")
            if expected is not None and self._lookup(record_id) != expected:
                raise InvalidTransitionError(
                    f"Record {record_id} changed since it was read, refusing to move it"
                )
            self._remove(record_id)
            self._insert(new_record)
            event = StoreEvent(
                kind=StoreEventKind.MOVED,
                generation=self._generation,
                record_id=record_id,
                record=new_record,
                partition=new_record.partition,
                previous_partition=previous,
            )
        self._emit(event)
        return True

    def rename_finished(
        self,
        record_id: str,
        new_file_name_raw: str,
        renamer: BaseRenamer,
    ) -> StageRecord | None:
        """Rename a finished document on disk and record the name in its history.

        The file on disk keeps the page number prefix, while `file_name` and the
        history hold the clean name. The record stays in place while the rename
        runs; on failure it is left exactly as it was. Returns the updated
        record, or None when the store was cleared before the rename completed.

        Raises:
            RecordNotFoundError: if `record_id` is not in any partition.
            InvalidTransitionError: if the record is not finished.
            RenameError: if the rename is rejected or already in progress.
        """
        with self._lock:
            record = self._lookup(record_id)
            if record.partition is not Partition.FINISHED:
                raise InvalidTransitionError(
                    f"Only finished records can be renamed, {record_id} is "
                    f"{record.partition.value}"
                )
            if record_id in self._renaming:
                raise RenameError(f"Rename already in progress for record {record_id}")
            clean_name = clean_file_name(new_file_name_raw, record.page_number_prefix)
            if clean_name == record.file_name:
                return record
            if not clean_name.strip():
                raise RenameError("New file name must not be empty")
            self._renaming.add(record_id)
            generation = self._generation

        try:
            new_path = renamer.rename(
                record.document_path,
                prefixed_file_name(record.page_number_prefix, clean_name),
            )
        except OSError as exc:
            self._release_rename(record_id)
            raise RenameError(f"Failed to rename {record.document_path}: {exc}") from exc
        except Exception:
            self._release_rename(record_id)
            raise

        updated = replace(
            record,
            document_path=new_path,
            file_name=clean_name,
            file_name_history=append_history(record.file_name_history, clean_name),
        )
        with self._lock:
            self._renaming.discard(record_id)
            if generation != self._generation:
                Log.debug(f"Store cleared while renaming record {record_id}, dropping result")
                return None
            if self._index.get(record_id) is not Partition.FINISHED:
                Log.warning(f"Record {record_id} left the finished list while being renamed")
                return None
            records = self._partitions[Partition.FINISHED]
            position = next(i for i, r in enumerate(records) if r.id == record_id)
            records[position] = updated
            event = StoreEvent(
                kind=StoreEventKind.RENAMED,
                generation=self._generation,
                record_id=record_id,
                record=updated,
                partition=Partition.FINISHED,
                previous_partition=Partition.FINISHED,
            )
        Log.info(f"Renamed record {record_id}: {record.file_name} -> {clean_name}")
        self._emit(event)
        return updated

    def discard(self, record_id: str) -> StageRecord:
        with self._lock:
            record = self._lookup(record_id)
            previous = self._remove(record_id)
            event = StoreEvent(
                kind=StoreEventKind.DISCARDED,
                generation=self._generation,
                record_id=record_id,
                record=record,
                previous_partition=previous,
            )
        self._emit(event)
        return record

    def clear(self) -> int:
        """Drop every record and start a new generation, which is returned."""
        with self._lock:
            for records in self._partitions.values():
                records.clear()
            self._index.clear()
            self._renaming.clear()
            self._generation += 1
            event = StoreEvent(kind=StoreEventKind.CLEARED, generation=self._generation)
        self._emit(event)
        return event.generation

    def get(self, record_id: str) -> StageRecord:
        with self._lock:
            return self._lookup(record_id)

    def find(self, record_id: str) -> tuple[Partition, StageRecord] | None:
        with self._lock:
            partition = self._index.get(record_id)
            if partition is None:
                return None
            return partition, self._lookup(record_id)

    def partition(self, partition: Partition) -> tuple[StageRecord, ...]:
        with self._lock:
            return tuple(self._partitions[partition])

    def snapshot(self) -> dict[Partition, tuple[StageRecord, ...]]:
        with self._lock:
            return {p: tuple(records) for p, records in self._partitions.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._index

    def _lookup(self, record_id: str) -> StageRecord:
        partition = self._index.get(record_id)
        if partition is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return next(r for r in self._partitions[partition] if r.id == record_id)

    def _insert(self, record: StageRecord) -> None:
        self._partitions[record.partition].append(record)
        self._index[record.id] = record.partition

    def _remove(self, record_id: str) -> Partition:
        partition = self._index.pop(record_id)
        records = self._partitions[partition]
        records[:] = [r for r in records if r.id != record_id]
        return partition

    def _release_rename(self, record_id: str) -> None:
        with self._lock:
            self._renaming.discard(record_id)

    def _emit(self, event: StoreEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                Log.exception(f"Store listener failed on {event.kind.value} event")
