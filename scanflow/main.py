import argparse
from collections.abc import Sequence

from scanflow.config.settings import Settings
from scanflow.extraction.exceptions import ImageExtractionError
from scanflow.extraction.models import ProgressState
from scanflow.logging.logger import Log
from scanflow.processor.processor import build_processor
from scanflow.workflow.models import LifecycleStatus, Partition


def parse_page_ranges(spec: str) -> list[tuple[int, ...]]:
    """Parse 1-based ranges like "1-3,4,7-8" into 0-based page selections.

    Each comma-separated item is one unit of work.
    """
    selections: list[tuple[int, ...]] = []
    for item in spec.split(","):
        item = item.strip()
        if not item:
            continue
        first, _, last = item.partition("-")
        start = int(first)
        end = int(last) if last else start
        if start < 1 or end < start:
            raise ValueError(f"Invalid page range '{item}'")
        selections.append(tuple(range(start - 1, end)))
    if not selections:
        raise ValueError("No page ranges given")
    return selections


def _log_progress(state: ProgressState) -> None:
    Log.info(
        f"Extracted {state.pages_processed}/{state.pages_to_process} pages, "
        f"~{state.estimated_seconds_remaining}s remaining"
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: settings -> processor -> extract -> classify ranges -> write documents."""
    parser = argparse.ArgumentParser(prog="scanflow")
    parser.add_argument("document", help="Path to the scanned PDF")
    parser.add_argument("ranges", help='Page ranges to split out, e.g. "1-3,4,5-6"')
    args = parser.parse_args(argv)

    settings = Settings()
    Log.configure(settings.log_level)
    try:
        selections = parse_page_ranges(args.ranges)
    except ValueError as exc:
        Log.error(f"Invalid page ranges '{args.ranges}': {exc}")
        return 2

    with build_processor(settings, args.document) as processor:
        try:
            processor.prepare(progress=_log_progress)
        except ImageExtractionError as exc:
            Log.error(f"Failed to extract page images from {args.document}: {exc}")
            if exc.diagnostic:
                Log.error(exc.diagnostic)
            return 1
        futures = [processor.submit_pages(pages) for pages in selections]
        classified = [future.result() for future in futures]
        for record in classified:
            if record.status is LifecycleStatus.SUCCEEDED:
                processor.process_document(record.id)

        for record in processor.store.partition(Partition.FINISHED):
            Log.info(f"{record.display_name}: {record.document_path}")
        errored = processor.store.partition(Partition.ERRORED)
        for record in errored:
            Log.error(f"Pages {list(record.selected_pages)} failed: {record.error_message}")
    return 1 if errored else 0


if __name__ == "__main__":
    raise SystemExit(main())
