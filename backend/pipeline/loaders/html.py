"""HTML loader using BeautifulSoup.

Markup is only ever stripped with a real parser. Without one HTML uploads
are rejected; a regex tag stripper is not a safe substitute.
"""

import asyncio
import logging

from ..capabilities import require_capability
from ..errors import FileProcessingError, ProcessingErrorCode
from ..models import ExtractionMethod, ExtractionResult, ProcessingOptions
from .base import BaseLoader

logger = logging.getLogger(__name__)

# Executable or non-content elements whose text must never reach the index.
NON_CONTENT_ELEMENTS = ["script", "style", "head", "svg", "noscript", "iframe", "object", "embed", "applet"]


def extract_text_from_html(html: str, strip_tags: bool = True) -> str:
    """Return visible text of *html*, or *html* unchanged when ``strip_tags`` is off."""
    if not strip_tags:
        return html

    require_capability("html")
    from bs4 import BeautifulSoup

    try:
        soup = BeautifulSoup(html, "html.parser")
        for element in soup.find_all(NON_CONTENT_ELEMENTS):
            element.extract()
        return soup.get_text().strip()
    except Exception as e:
        logger.error("HTML parsing failed: %s", e)
        raise FileProcessingError(
            "Failed to parse HTML file securely",
            ProcessingErrorCode.EXTRACTION_FAILED,
            cause=e,
        ) from e


class HTMLLoader(BaseLoader):
    """Load HTML files, dropping scripts, styles and other non-content elements."""

    supported_extensions = [".html", ".htm"]
    method = ExtractionMethod.HTML

    async def load(self, buffer: bytes, options: ProcessingOptions) -> ExtractionResult:
        html = buffer.decode("utf-8", errors="replace")
        content = await asyncio.to_thread(
            extract_text_from_html, html, options.resolved_strip_html_tags()
        )
        return ExtractionResult(content=content, method=self.method, encoding="utf-8")
