"""Base document loader interface."""

from abc import ABC, abstractmethod

from ..cancellation import CancellationToken, is_cancelled
from ..errors import FileProcessingError, ProcessingErrorCode
from ..models import ExtractionMethod, ExtractionResult, ProcessingOptions


class BaseLoader(ABC):
    """Abstract base for all format extractors.

    Loaders work on in-memory buffers and never keep a reference to them
    after ``load`` returns.
    """

    supported_extensions: list[str] = []
    method: ExtractionMethod = ExtractionMethod.FALLBACK

    @abstractmethod
    async def load(self, buffer: bytes, options: ProcessingOptions) -> ExtractionResult:
        """Extract raw text from *buffer*."""
        ...

    def _check_not_aborted(self, signal: CancellationToken | None) -> None:
        """Refuse to start work on an already-cancelled token."""
        if is_cancelled(signal):
            raise FileProcessingError(
                "Extraction aborted",
                ProcessingErrorCode.EXTRACTION_FAILED,
                cause=RuntimeError(signal.reason or "cancelled"),
            )

    def _check_not_timed_out(self, signal: CancellationToken | None) -> None:
        """Stop work that is already under way."""
        if is_cancelled(signal):
            raise FileProcessingError(
                "Extraction aborted",
                ProcessingErrorCode.TIMEOUT,
                cause=RuntimeError(signal.reason or "cancelled"),
            )
