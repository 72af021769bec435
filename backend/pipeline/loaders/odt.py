"""OpenDocument text placeholder: accepted by validation, not extractable yet."""

from ..errors import FileProcessingError, ProcessingErrorCode
from ..models import ExtractionMethod, ExtractionResult, ProcessingOptions
from .base import BaseLoader


class ODTLoader(BaseLoader):
    supported_extensions = [".odt"]
    method = ExtractionMethod.FALLBACK

    async def load(self, buffer: bytes, options: ProcessingOptions) -> ExtractionResult:
        raise FileProcessingError(
            "ODT format not yet supported. Use DOCX or PDF instead.",
            ProcessingErrorCode.UNSUPPORTED_FORMAT,
        )
