"""DOCX document loader using python-docx."""

import asyncio
import io
import logging

from ..capabilities import require_capability
from ..errors import FileProcessingError, ProcessingErrorCode
from ..models import ExtractionMethod, ExtractionResult, ProcessingOptions
from .base import BaseLoader

logger = logging.getLogger(__name__)


class DocxLoader(BaseLoader):
    """Load DOCX files using python-docx.

    Legacy binary ``.doc`` files are routed here too; python-docx cannot
    open them, so they fail as ``EXTRACTION_FAILED``.
    """

    supported_extensions = [".docx", ".doc"]
    method = ExtractionMethod.DOCX

    async def load(self, buffer: bytes, options: ProcessingOptions) -> ExtractionResult:
        self._check_not_aborted(options.signal)
        require_capability("docx")

        try:
            content = await asyncio.to_thread(self._load_sync, buffer)
        except Exception as e:
            logger.error("DOC/DOCX parsing error (%s): %s", type(e).__name__, e)
            raise FileProcessingError(
                "Failed to parse DOC/DOCX file",
                ProcessingErrorCode.EXTRACTION_FAILED,
                cause=e,
            ) from e

        if not content.strip():
            raise FileProcessingError(
                "Document contains no extractable text",
                ProcessingErrorCode.EXTRACTION_FAILED,
            )
        return ExtractionResult(content=content, method=self.method)

    def _load_sync(self, buffer: bytes) -> str:
        from docx import Document as DocxDocument

        doc = DocxDocument(io.BytesIO(buffer))
        text_parts = []

        # Extract paragraphs
        for para in doc.paragraphs:
            if para.text.strip():
                text_parts.append(para.text.strip())

        # Extract tables
        for table in doc.tables:
            table_text = self._extract_table(table)
            if table_text:
                text_parts.append(table_text)

        return "\n\n".join(text_parts)

    def _extract_table(self, table) -> str:
        """Extract table as markdown-like format."""
        rows = []
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                rows.append(" | ".join(cells))
        return "\n".join(rows)
