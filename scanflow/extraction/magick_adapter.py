import os
import subprocess
import threading
import time
from dataclasses import replace
from pathlib import Path

from scanflow.extraction.base import BaseImageExtractor
from scanflow.extraction.exceptions import ImageExtractionError
from scanflow.extraction.models import ExtractionReport, ProgressCallback, ProgressState
from scanflow.extraction.page_spec import chunk, create_page_spec, find_missing_pages
from scanflow.logging.logger import Log
from scanflow.pdf.base import BasePageCounter
from scanflow.pdf.exceptions import PdfError


class MagickImageExtractor(BaseImageExtractor):
    """Renders PDF pages to images with the ImageMagick `magick` CLI.

    Missing pages are rendered in batches; each batch is one `magick` call
    writing `index-<n>.<fmt>` frames that are then renamed to `<page>.<fmt>`.
    """

    def __init__(
        self,
        *,
        page_counter: BasePageCounter,
        binary: str = "magick",
        density: int = 150,
        resize: str = "1500x1500",
        image_format: str = "webp",
        max_retries: int = 3,
        timeout_seconds: int = 60,
        min_batch_size: int = 5,
        max_batch_size: int = 20,
    ) -> None:
        self._page_counter = page_counter
        self._binary = binary
        self._density = density
        self._resize = resize
        self._image_format = image_format
        self._max_retries = max(1, max_retries)
        self._timeout_seconds = timeout_seconds
        self._min_batch_size = min_batch_size
        self._max_batch_size = max(min_batch_size, max_batch_size)

    def extract(
        self,
        document_path: str,
        output_directory: str,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ExtractionReport:
        images_directory = Path(output_directory)
        try:
            images_directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ImageExtractionError(f"Failed to create output directory: {exc}") from exc

        try:
            total_pages = self._page_counter.count_pages(document_path)
        except PdfError as exc:
            raise ImageExtractionError(f"Cannot read {document_path}: {exc}") from exc
        missing, extracted = find_missing_pages(images_directory, total_pages, self._image_format)
        if not missing:
            Log.info(f"All {total_pages} page images already extracted for {document_path}")
            return ExtractionReport(total_pages=total_pages, extracted_pages=tuple(extracted))

        batch_size = self.batch_size()
        Log.info(
            f"Extracting {len(missing)} of {total_pages} pages from {document_path} "
            f"in batches of {batch_size}"
        )
        state = ProgressState(total_document_pages=total_pages, pages_to_process=len(missing))
        started_at = time.monotonic()
        state.update(0, len(missing), started_at, extracted)
        self._report(progress, state)

        processed = 0
        failed: list[int] = []
        diagnostic = ""
        cancelled = False
        for batch in chunk(missing, batch_size):
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break
            ok, diagnostic_output = self._render_batch(
                document_path, images_directory, batch, cancel_event
            )
            if ok:
                self._rename_frames(images_directory, batch)
                processed += len(batch)
                extracted.extend(batch)
            else:
                failed.extend(batch)
                diagnostic = diagnostic_output or diagnostic
            state.update(processed, len(missing), started_at, extracted)
            self._report(progress, state)

        cancelled = cancelled or (cancel_event is not None and cancel_event.is_set())
        if cancelled:
            Log.info(
                f"Extraction cancelled: {processed} of {len(missing)} missing pages extracted"
            )
        elif failed:
            raise ImageExtractionError(
                f"Extracted {processed} missing pages. Failed to extract pages: {failed}",
                diagnostic=diagnostic,
            )
        else:
            Log.info(f"Extracted {processed} missing pages from {document_path}")
        return ExtractionReport(
            total_pages=total_pages,
            extracted_pages=tuple(sorted(extracted)),
            newly_extracted=processed,
            cancelled=cancelled,
        )

    def batch_size(self) -> int:
        cpu_count = os.cpu_count() or 4
        return max(self._min_batch_size, min(cpu_count, self._max_batch_size))

    def build_command(
        self, document_path: str, images_directory: Path, batch: list[int]
    ) -> list[str]:
        return [
            self._binary,
            "-density",
            str(self._density),
            f"{document_path}[{create_page_spec(batch)}]",
            "-resize",
            self._resize,
            "+adjoin",
            "-scene",
            "0",
            str(images_directory / f"index-%d.{self._image_format}"),
        ]

    def _render_batch(
        self,
        document_path: str,
        images_directory: Path,
        batch: list[int],
        cancel_event: threading.Event | None,
    ) -> tuple[bool, str]:
        command = self.build_command(document_path, images_directory, batch)
        diagnostic = ""
        for attempt in range(1, self._max_retries + 1):
            if cancel_event is not None and cancel_event.is_set():
                return False, "cancelled"
            Log.debug(f"Running {command} (attempt {attempt})")
            try:
                completed = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    timeout=self._timeout_seconds,
                    check=False,
                )
            except FileNotFoundError as exc:
                raise ImageExtractionError(
                    f"Image extractor '{self._binary}' not found", diagnostic=str(exc)
                ) from exc
            except subprocess.TimeoutExpired:
                diagnostic = f"timed out after {self._timeout_seconds}s"
                Log.warning(f"Batch {batch} timed out (attempt {attempt})")
                continue
            if completed.returncode == 0:
                return True, ""
            diagnostic = (
                f"{self._binary} exited with code {completed.returncode}. "
                f"Error output: {completed.stderr.strip()}"
            )
            Log.warning(f"Batch {batch} failed (attempt {attempt}): {diagnostic}")
        Log.warning(f"Failed to process batch {batch} after {self._max_retries} retries")
        return False, diagnostic

    def _rename_frames(self, images_directory: Path, batch: list[int]) -> None:
        for frame, page in enumerate(batch):
            source = images_directory / f"index-{frame}.{self._image_format}"
            target = images_directory / f"{page}.{self._image_format}"
            try:
                os.replace(source, target)
            except OSError as exc:
                raise ImageExtractionError(
                    f"Failed to rename {source.name} to {target.name}: {exc}"
                ) from exc

    @staticmethod
    def _report(progress: ProgressCallback | None, state: ProgressState) -> None:
        if progress is not None:
            progress(replace(state))
