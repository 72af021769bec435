"""Single-file extraction: validate -> extract (with timeout) -> clean -> check."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
import uuid

from config.settings import settings
from monitoring.telemetry import Telemetry, get_telemetry

from .cancellation import CancellationToken
from .errors import (
    FileProcessingBaseError,
    FileProcessingError,
    FileValidationError,
    ProcessingErrorCode,
    ValidationErrorCode,
    error_code,
)
from .loaders import get_loader
from .models import ExtractionResult, FileMetadata, ProcessedFile, ProcessingOptions
from .normalizer import clean_text, estimate_word_count
from .validation import get_file_extension, sanitize_filename, validate_file_buffer, validate_file_type

logger = logging.getLogger(__name__)


async def extract_by_file_type(
    buffer: bytes,
    ext: str,
    options: ProcessingOptions | None = None,
) -> ExtractionResult:
    """Run the loader for *ext* under the configured timeout.

    The loader gets its own cancellation token, linked to the caller's
    ``signal``. On timeout the token is cancelled and the loader task is
    cancelled too, which closes any document it had open.
    """
    options = options or ProcessingOptions()
    loader = get_loader(ext)
    timeout_ms = options.resolved_timeout_ms()
    token = CancellationToken(parent=options.signal)
    scoped_options = dataclasses.replace(options, signal=token)

    try:
        return await asyncio.wait_for(loader.load(buffer, scoped_options), timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as e:
        token.cancel("timeout")
        raise FileProcessingError(
            f"Extraction timed out after {timeout_ms} ms",
            ProcessingErrorCode.TIMEOUT,
            cause=e,
        ) from e


async def extract_text_from_file(
    buffer: bytes,
    file_name: str,
    mime_type: str | None = None,
    options: ProcessingOptions | None = None,
    telemetry: Telemetry | None = None,
) -> ProcessedFile:
    """Extract clean text from one uploaded file.

    Raises:
        FileValidationError: the file is empty, too large, of a disallowed
            type, or produced more text than allowed.
        FileProcessingError: extraction failed, timed out, the format is
            unsupported or a required library is missing.
    """
    options = options or ProcessingOptions()
    telemetry = telemetry or get_telemetry()
    file_id = str(uuid.uuid4())
    start_time = time.perf_counter()
    ext = get_file_extension(file_name)
    safe_name = sanitize_filename(file_name)

    span = telemetry.start_span("file.extraction", {
        "extension": ext,
        "sizeBytes": len(buffer),
        "fileId": file_id,
    })

    try:
        validate_file_buffer(buffer, file_name, options, mime_type)

        if not validate_file_type(file_name, mime_type):
            raise FileValidationError(
                f"Unsupported file type: {ext or '(none)'}{f' ({mime_type})' if mime_type else ''}",
                ValidationErrorCode.INVALID_TYPE,
                file_name,
            )

        logger.info(
            "Starting file text extraction (file_id=%s ext=%s mime=%s size=%d)",
            file_id, ext, mime_type, len(buffer),
        )
        span.set_attribute("mimeType", mime_type or "unknown")
        span.set_attribute("fileType", ext)

        result = await extract_by_file_type(buffer, ext, options)

        content = clean_text(result.content)
        if len(content) < settings.knowledge_min_content_length:
            raise FileProcessingError(
                "Extracted content is too short or empty",
                ProcessingErrorCode.EXTRACTION_FAILED,
                file_name,
            )
        if len(content) > settings.max_content_length:
            raise FileValidationError(
                f"Content exceeds {settings.max_content_length} characters ({len(content)}). "
                "Split the file or upload it in parts.",
                ValidationErrorCode.CONTENT_TOO_LARGE,
                file_name,
            )

        word_count = estimate_word_count(content)
        processing_ms = (time.perf_counter() - start_time) * 1000

        telemetry.increment_counter("files_processed_total", {"status": "success", "type": ext})
        telemetry.record_histogram("file_processing_duration_ms", processing_ms, {"file_type": ext})
        telemetry.record_histogram("file_content_length_chars", len(content), {"file_type": ext})

        span.set_attribute("wordCount", word_count)
        span.set_attribute("pageCount", result.page_count or 0)
        span.set_attribute("extractionMethod", result.method.value)

        metadata = FileMetadata(
            file_name=safe_name,
            file_type=ext,
            size_bytes=len(buffer),
            word_count=word_count,
            extraction_method=result.method,
            page_count=result.page_count or None,
            encoding=result.encoding,
            warnings=list(result.warnings),
        )

        logger.info(
            "File text extraction completed (file_id=%s chars=%d words=%d method=%s %.0fms)",
            file_id, len(content), word_count, result.method.value, processing_ms,
        )
        return ProcessedFile(content=content, file_name=safe_name, file_type=ext, metadata=metadata)

    except Exception as e:
        processing_ms = (time.perf_counter() - start_time) * 1000
        code = error_code(e)

        telemetry.increment_counter("files_processed_total", {"status": "error", "type": ext, "error": code})
        telemetry.record_histogram(
            "file_processing_duration_ms", processing_ms, {"file_type": ext, "status": "error"}
        )
        span.set_attribute("error", True)
        span.set_attribute("errorMessage", str(e))

        logger.error(
            "File text extraction failed (file_id=%s ext=%s code=%s %.0fms): %s",
            file_id, ext, code, processing_ms, e,
            exc_info=not isinstance(e, FileProcessingBaseError),
        )

        if isinstance(e, FileProcessingBaseError):
            if e.file_name is None:
                e.file_name = file_name
            raise
        raise FileProcessingError(
            f"Failed to process file: {e}",
            ProcessingErrorCode.EXTRACTION_FAILED,
            file_name,
            cause=e,
        ) from e
    finally:
        span.end()
