"""Document loaders for multiple file formats."""

from .base import BaseLoader
from .docx import DocxLoader
from .html import HTMLLoader, extract_text_from_html
from .odt import ODTLoader
from .pdf import PDFLoader, stream_pdf_chunks
from .text import FallbackLoader, MarkdownLoader, TextLoader

LOADER_MAP: dict[str, type[BaseLoader]] = {
    ".txt": TextLoader,
    ".md": MarkdownLoader,
    ".markdown": MarkdownLoader,
    ".html": HTMLLoader,
    ".htm": HTMLLoader,
    ".pdf": PDFLoader,
    ".doc": DocxLoader,
    ".docx": DocxLoader,
    ".odt": ODTLoader,
}


def get_loader(file_extension: str) -> BaseLoader:
    """Get appropriate loader for file extension; unknown ones get the UTF-8 fallback."""
    return LOADER_MAP.get(file_extension.lower(), FallbackLoader)()


__all__ = [
    "BaseLoader", "get_loader", "LOADER_MAP",
    "TextLoader", "MarkdownLoader", "FallbackLoader", "HTMLLoader",
    "PDFLoader", "DocxLoader", "ODTLoader",
    "extract_text_from_html", "stream_pdf_chunks",
]
