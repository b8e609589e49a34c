import time
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class ProgressState:
    """Image extraction progress, reported after every batch."""

    total_document_pages: int
    pages_processed: int = 0
    pages_to_process: int = 0
    estimated_seconds_remaining: int = 0
    extracted_page_numbers: list[int] = field(default_factory=list)

    def update(
        self,
        pages_processed: int,
        pages_to_process: int,
        started_at: float,
        extracted_page_numbers: list[int],
        now: float | None = None,
    ) -> None:
        self.pages_processed = pages_processed
        self.pages_to_process = pages_to_process
        self.extracted_page_numbers = sorted(extracted_page_numbers)
        elapsed = (now if now is not None else time.monotonic()) - started_at
        remaining = max(pages_to_process - pages_processed, 0)
        if pages_processed > 0 and elapsed > 0:
            pages_per_second = pages_processed / elapsed
            self.estimated_seconds_remaining = int(remaining / pages_per_second)
        else:
            # one second per page until there is a measured rate
            self.estimated_seconds_remaining = remaining


ProgressCallback = Callable[[ProgressState], None]


@dataclass(frozen=True)
class ExtractionReport:
    """Outcome of an extraction run. Page numbers are 1-based."""

    total_pages: int
    extracted_pages: tuple[int, ...]
    newly_extracted: int = 0
    cancelled: bool = False

    @property
    def complete(self) -> bool:
        return len(self.extracted_pages) == self.total_pages
