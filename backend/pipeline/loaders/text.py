"""Plain text, markdown and best-effort fallback loaders."""

import asyncio

from ..errors import FileProcessingError, ProcessingErrorCode
from ..models import ExtractionMethod, ExtractionResult, ProcessingOptions
from .base import BaseLoader


class TextLoader(BaseLoader):
    """Decode plain text with the configured encoding."""

    supported_extensions = [".txt"]
    method = ExtractionMethod.TEXT

    async def load(self, buffer: bytes, options: ProcessingOptions) -> ExtractionResult:
        encoding = self._encoding(options)
        content = await asyncio.to_thread(self._decode, buffer, encoding)
        return ExtractionResult(content=content, method=self.method, encoding=encoding)

    def _encoding(self, options: ProcessingOptions) -> str:
        return options.resolved_encoding()

    def _decode(self, buffer: bytes, encoding: str) -> str:
        try:
            return buffer.decode(encoding, errors="replace")
        except LookupError as e:
            raise FileProcessingError(
                f"Unknown text encoding: {encoding}",
                ProcessingErrorCode.EXTRACTION_FAILED,
                cause=e,
            ) from e


class MarkdownLoader(TextLoader):
    """Markdown is kept as-is; at this layer it is plain text."""

    supported_extensions = [".md", ".markdown"]
    method = ExtractionMethod.MARKDOWN


class FallbackLoader(TextLoader):
    """Unknown extensions: decode as UTF-8 and hope for the best."""

    supported_extensions = []
    method = ExtractionMethod.FALLBACK

    async def load(self, buffer: bytes, options: ProcessingOptions) -> ExtractionResult:
        result = await super().load(buffer, options)
        result.warnings.append("Unrecognized file extension; content decoded as UTF-8")
        return result

    def _encoding(self, options: ProcessingOptions) -> str:
        return "utf-8"
