"""Data structures passed through the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from config.settings import settings

from .cancellation import CancellationToken

# Below 30% of the target size chunks get too fragmented to be useful.
MIN_CHUNK_SIZE_RATIO = 0.3


class ExtractionMethod(str, Enum):
    """Which strategy produced a document's text."""

    TEXT = "text"
    PDF = "pdf"
    DOCX = "docx"
    HTML = "html"
    MARKDOWN = "markdown"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RawDocument:
    """An uploaded file as received from the upload layer."""
    buffer: bytes
    file_name: str
    mime_type: str | None = None


@dataclass
class ProcessingOptions:
    """Per-call extraction options. ``None`` means "use the configured default".

    ``preserve_formatting`` is reserved: it is accepted for callers that
    already send it, but no loader reads it yet and output is always cleaned.
    """
    max_file_size_bytes: int | None = None
    timeout_ms: int | None = None
    encoding: str | None = None
    strip_html_tags: bool | None = None
    preserve_formatting: bool = False
    signal: CancellationToken | None = None

    def resolved_max_file_size(self) -> int:
        if self.max_file_size_bytes is None:
            return settings.max_file_size_bytes
        return self.max_file_size_bytes

    def resolved_timeout_ms(self) -> int:
        if self.timeout_ms is None:
            return settings.knowledge_processing_timeout_ms
        return self.timeout_ms

    def resolved_encoding(self) -> str:
        return self.encoding or settings.knowledge_default_encoding

    def resolved_strip_html_tags(self) -> bool:
        if self.strip_html_tags is None:
            return settings.knowledge_strip_html_tags
        return self.strip_html_tags


@dataclass(frozen=True)
class ChunkingOptions:
    """Chunker configuration.

    ``min_chunk_size`` defaults to 30% of ``chunk_size``. An ``overlap`` that
    is not smaller than ``chunk_size`` is accepted; the chunker still makes
    progress on every step.
    """
    chunk_size: int = 1000
    overlap: int = 200
    respect_boundaries: bool = True
    min_chunk_size: int | None = None

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.overlap < 0:
            raise ValueError(f"overlap must not be negative, got {self.overlap}")
        if self.min_chunk_size is None:
            object.__setattr__(self, "min_chunk_size", int(self.chunk_size * MIN_CHUNK_SIZE_RATIO))

    @classmethod
    def from_settings(cls, **overrides) -> ChunkingOptions:
        params = {"chunk_size": settings.chunk_size, "overlap": settings.chunk_overlap}
        params.update(overrides)
        return cls(**params)


@dataclass
class ExtractionResult:
    """Raw output of a loader, before cleaning and validation."""
    content: str
    method: ExtractionMethod
    page_count: int | None = None
    encoding: str | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class FileMetadata:
    """Metadata captured while processing one file."""
    file_name: str
    file_type: str
    size_bytes: int
    word_count: int
    extraction_method: ExtractionMethod
    processed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    page_count: int | None = None
    encoding: str | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            "file_name": self.file_name,
            "file_type": self.file_type,
            "processed_at": self.processed_at,
            "size_bytes": self.size_bytes,
            "word_count": self.word_count,
            "extraction_method": self.extraction_method.value,
        }
        if self.page_count:
            data["page_count"] = self.page_count
        if self.encoding:
            data["encoding"] = self.encoding
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


@dataclass
class ProcessedFile:
    """Cleaned, length-checked text of one file. Chunking is a separate step."""
    content: str
    file_name: str
    file_type: str
    metadata: FileMetadata


@dataclass
class BatchItemResult:
    """Outcome of one file in a batch: either a result or the captured error."""
    file: str
    result: ProcessedFile | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None
