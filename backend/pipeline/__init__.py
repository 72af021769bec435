"""Document ingestion pipeline: validate, extract, normalize, chunk."""

from .batch import process_file_batch
from .cancellation import CancellationToken
from .capabilities import Capabilities, ensure_dependencies, get_capabilities
from .chunker import chunk_spans, chunk_text
from .errors import (
    FileProcessingError,
    FileValidationError,
    ProcessingErrorCode,
    ValidationErrorCode,
)
from .loaders import stream_pdf_chunks
from .models import (
    BatchItemResult,
    ChunkingOptions,
    ExtractionMethod,
    FileMetadata,
    ProcessedFile,
    ProcessingOptions,
    RawDocument,
)
from .normalizer import clean_text
from .processor import extract_text_from_file
from .validation import get_file_extension, validate_file_type

__all__ = [
    "extract_text_from_file",
    "chunk_text",
    "chunk_spans",
    "stream_pdf_chunks",
    "process_file_batch",
    "clean_text",
    "get_file_extension",
    "validate_file_type",
    "ensure_dependencies",
    "get_capabilities",
    "Capabilities",
    "CancellationToken",
    "ChunkingOptions",
    "ProcessingOptions",
    "RawDocument",
    "ProcessedFile",
    "FileMetadata",
    "BatchItemResult",
    "ExtractionMethod",
    "FileValidationError",
    "FileProcessingError",
    "ValidationErrorCode",
    "ProcessingErrorCode",
]
