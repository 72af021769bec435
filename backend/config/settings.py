"""Central configuration using Pydantic BaseSettings."""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

MB = 1024 * 1024


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    log_level: str = "INFO"

    # Knowledge base upload limits
    knowledge_max_file_size_mb: int = 50
    knowledge_processing_timeout_ms: int = 60000
    knowledge_min_content_length: int = 10
    knowledge_max_content_length_mb: int = 10  # measured in characters of cleaned text

    # Extraction defaults
    knowledge_default_encoding: str = "utf-8"
    knowledge_strip_html_tags: bool = True
    knowledge_strict_mime_validation: bool = False  # reject instead of warn on MIME mismatch

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Batch processing
    batch_concurrency: int = 5

    @field_validator(
        "knowledge_max_file_size_mb",
        "knowledge_processing_timeout_ms",
        "knowledge_max_content_length_mb",
        "chunk_size",
        "batch_concurrency",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).upper()

    @model_validator(mode="after")
    def check_overlap(self) -> "Settings":
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
        return self

    @property
    def max_file_size_bytes(self) -> int:
        return self.knowledge_max_file_size_mb * MB

    @property
    def max_content_length(self) -> int:
        return self.knowledge_max_content_length_mb * MB

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
