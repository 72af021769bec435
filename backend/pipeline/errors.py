"""Error taxonomy for document ingestion.

Validation errors describe problems with the caller's input and are never
retried. Processing errors describe problems in the pipeline or its
environment; ``DEPENDENCY_MISSING`` is kept apart from ``EXTRACTION_FAILED``
so operators can tell a missing package from a broken file.
"""

from __future__ import annotations

from enum import Enum


class ValidationErrorCode(str, Enum):
    INVALID_TYPE = "INVALID_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    EMPTY_FILE = "EMPTY_FILE"
    CORRUPTED = "CORRUPTED"
    CONTENT_TOO_LARGE = "CONTENT_TOO_LARGE"


class ProcessingErrorCode(str, Enum):
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    TIMEOUT = "TIMEOUT"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    DEPENDENCY_MISSING = "DEPENDENCY_MISSING"


class FileProcessingBaseError(Exception):
    """Common base carrying a stable code, the file name and the root cause."""

    def __init__(
        self,
        message: str,
        code: ValidationErrorCode | ProcessingErrorCode,
        file_name: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.file_name = file_name
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value!r}, message={self.message!r})"


class FileValidationError(FileProcessingBaseError):
    """The uploaded file itself is unacceptable."""

    def __init__(
        self,
        message: str,
        code: ValidationErrorCode,
        file_name: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, ValidationErrorCode(code), file_name, cause)


class FileProcessingError(FileProcessingBaseError):
    """Extraction could not complete."""

    def __init__(
        self,
        message: str,
        code: ProcessingErrorCode,
        file_name: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, ProcessingErrorCode(code), file_name, cause)


def error_code(exc: BaseException) -> str:
    """Stable label for metrics and logs."""
    if isinstance(exc, FileProcessingBaseError):
        return exc.code.value
    return "UNKNOWN"
