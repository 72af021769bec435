"""Bounded-concurrency batch extraction."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from config.settings import settings
from monitoring.telemetry import Telemetry

from .models import BatchItemResult, ProcessedFile, ProcessingOptions, RawDocument
from .processor import extract_text_from_file

logger = logging.getLogger(__name__)

UNKNOWN_FILE = "unknown"


class BatchItemNotFoundError(LookupError):
    """A batch slot held no usable file."""


def _coerce(item: Any) -> RawDocument | None:
    """Accept ``RawDocument`` or a mapping with buffer/file_name(/mime_type)."""
    if isinstance(item, RawDocument):
        return item
    if isinstance(item, Mapping):
        buffer = item.get("buffer")
        file_name = item.get("file_name") or item.get("fileName")
        if isinstance(buffer, (bytes, bytearray)) and isinstance(file_name, str):
            return RawDocument(
                buffer=bytes(buffer),
                file_name=file_name,
                mime_type=item.get("mime_type") or item.get("mimeType"),
            )
    return None


async def process_file_batch(
    files: Iterable[RawDocument | Mapping[str, Any] | None],
    options: ProcessingOptions | None = None,
    concurrency: int | None = None,
    telemetry: Telemetry | None = None,
) -> list[BatchItemResult]:
    """Extract text from many files, at most *concurrency* at a time.

    Results come back in input order. A failing file only fails its own
    slot; entries that are missing or malformed get a "not found" error.

    *concurrency* is a keyword of its own rather than a field of
    *options*, since ``ProcessingOptions`` describes a single file. It
    defaults to ``settings.batch_concurrency``.
    """
    concurrency = concurrency if concurrency is not None else settings.batch_concurrency
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    documents = [_coerce(item) for item in files]
    semaphore = asyncio.Semaphore(concurrency)

    async def _extract_with_limit(doc: RawDocument | None) -> ProcessedFile:
        if doc is None:
            raise BatchItemNotFoundError("File not found in batch")
        async with semaphore:
            return await extract_text_from_file(
                doc.buffer, doc.file_name, doc.mime_type, options, telemetry
            )

    outcomes = await asyncio.gather(
        *[_extract_with_limit(doc) for doc in documents],
        return_exceptions=True,
    )

    results = []
    for doc, outcome in zip(documents, outcomes):
        file_name = doc.file_name if doc is not None else UNKNOWN_FILE
        if isinstance(outcome, BaseException):
            results.append(BatchItemResult(file=file_name, error=outcome))
        else:
            results.append(BatchItemResult(file=file_name, result=outcome))

    failed = sum(1 for r in results if r.error is not None)
    logger.info("Batch processed: %d files, %d succeeded, %d failed", len(results), len(results) - failed, failed)
    return results
