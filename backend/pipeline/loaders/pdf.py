"""PDF loader using PyMuPDF.

Pages are processed one at a time on the event loop thread, yielding
between pages so timeouts and cancellation can take effect. The document
is closed on every exit path.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from ..cancellation import CancellationToken, is_cancelled
from ..capabilities import require_capability
from ..chunker import PAGE_SEPARATOR, RollingChunkBuffer
from ..errors import FileProcessingError, ProcessingErrorCode
from ..models import ChunkingOptions, ExtractionMethod, ExtractionResult, ProcessingOptions
from .base import BaseLoader

logger = logging.getLogger(__name__)

PROGRESS_LOG_INTERVAL = 10


def open_pdf(buffer: bytes):
    """Open *buffer* as a PyMuPDF document."""
    require_capability("pdf")
    import fitz  # PyMuPDF

    try:
        return fitz.open(stream=buffer, filetype="pdf")
    except Exception as e:
        logger.error("PDF could not be opened (%d bytes): %s", len(buffer), e)
        raise FileProcessingError(
            "Failed to parse PDF file",
            ProcessingErrorCode.EXTRACTION_FAILED,
            cause=e,
        ) from e


def page_text(doc, page_index: int) -> str:
    """Text runs of one page joined with single spaces."""
    page = doc.load_page(page_index)
    raw = page.get_text("text")
    return " ".join(line.strip() for line in raw.splitlines() if line.strip())


class PDFLoader(BaseLoader):
    """Extract text from every page of a PDF."""

    supported_extensions = [".pdf"]
    method = ExtractionMethod.PDF

    async def load(self, buffer: bytes, options: ProcessingOptions) -> ExtractionResult:
        signal = options.signal
        self._check_not_aborted(signal)

        doc = open_pdf(buffer)
        try:
            self._check_not_aborted(signal)
            total_pages = doc.page_count
            logger.debug("PDF loaded, extracting text from %d pages", total_pages)

            page_texts = []
            failed_pages = 0
            for page_num in range(1, total_pages + 1):
                self._check_not_timed_out(signal)
                try:
                    text = page_text(doc, page_num - 1)
                except Exception as e:
                    logger.warning("Failed to extract text from PDF page %d: %s", page_num, e)
                    failed_pages += 1
                    continue
                self._check_not_timed_out(signal)

                if text:
                    page_texts.append(text)
                if page_num % PROGRESS_LOG_INTERVAL == 0:
                    logger.debug(
                        "PDF text extraction progress: %d/%d pages (%d%%)",
                        page_num, total_pages, round(page_num / total_pages * 100),
                    )
                await asyncio.sleep(0)
        finally:
            doc.close()

        content = PAGE_SEPARATOR.join(page_texts).strip()
        if not content:
            raise FileProcessingError(
                "PDF has no selectable text (likely a scanned document or image-based PDF)",
                ProcessingErrorCode.EXTRACTION_FAILED,
            )

        logger.info(
            "PDF parsed: %d chars, %d pages, %d with text",
            len(content), total_pages, len(page_texts),
        )
        warnings = []
        if failed_pages:
            warnings.append(f"{failed_pages} of {total_pages} pages failed to extract")
        blank_pages = total_pages - len(page_texts) - failed_pages
        if blank_pages:
            warnings.append(f"{blank_pages} of {total_pages} pages had no extractable text")
        return ExtractionResult(content=content, method=self.method, page_count=total_pages, warnings=warnings)


async def stream_pdf_chunks(
    buffer: bytes,
    options: ChunkingOptions | None = None,
    signal: CancellationToken | None = None,
) -> AsyncIterator[str]:
    """Yield chunks of a PDF's text without holding the whole text in memory.

    Chunks are cut with the same boundary rules as ``chunk_text``. The
    generator can be consumed once; closing it early (``aclose()`` or
    leaving an ``async with aclosing(...)`` block) still closes the document.
    A cancelled *signal* stops page processing and flushes what was read.
    """
    rolling = RollingChunkBuffer(options)
    doc = open_pdf(buffer)
    try:
        for page_index in range(doc.page_count):
            if is_cancelled(signal):
                logger.info("PDF streaming aborted at page %d/%d", page_index + 1, doc.page_count)
                break
            try:
                text = page_text(doc, page_index)
            except Exception as e:
                logger.warning("Failed to extract text from PDF page %d (streaming): %s", page_index + 1, e)
                continue

            for chunk in rolling.append(text):
                yield chunk
            await asyncio.sleep(0)

        for chunk in rolling.flush():
            yield chunk
    finally:
        doc.close()
