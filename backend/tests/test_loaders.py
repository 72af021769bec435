"""Tests for the per-format loaders."""

import pytest

from pipeline.cancellation import CancellationToken
from pipeline.errors import FileProcessingError, ProcessingErrorCode
from pipeline.loaders import (
    LOADER_MAP,
    DocxLoader,
    FallbackLoader,
    HTMLLoader,
    MarkdownLoader,
    ODTLoader,
    PDFLoader,
    TextLoader,
    extract_text_from_html,
    get_loader,
)
from pipeline.loaders import pdf as pdf_module
from pipeline.models import ExtractionMethod, ProcessingOptions

HTML_DOC = """<!DOCTYPE html>
<html>
<head><title>Hidden title</title><style>body { color: red; }</style></head>
<body>
  <h1>Safety bulletin</h1>
  <script>alert('steal cookies');</script>
  <p>Close the main valve before maintenance.</p>
  <noscript>Enable JavaScript</noscript>
  <iframe src="https://example.com">frame text</iframe>
  <svg><text>vector label</text></svg>
</body>
</html>"""


class TestGetLoader:

    def test_mapping(self):
        assert isinstance(get_loader(".txt"), TextLoader)
        assert isinstance(get_loader(".MD"), MarkdownLoader)
        assert isinstance(get_loader(".markdown"), MarkdownLoader)
        assert isinstance(get_loader(".htm"), HTMLLoader)
        assert isinstance(get_loader(".pdf"), PDFLoader)
        assert isinstance(get_loader(".doc"), DocxLoader)
        assert isinstance(get_loader(".docx"), DocxLoader)
        assert isinstance(get_loader(".odt"), ODTLoader)

    def test_unknown_extension_falls_back(self):
        assert isinstance(get_loader(".csv"), FallbackLoader)
        assert isinstance(get_loader(""), FallbackLoader)

    def test_every_mapped_loader_declares_its_extension(self):
        for ext, loader_cls in LOADER_MAP.items():
            assert ext in loader_cls.supported_extensions


class TestTextLoaders:

    async def test_text(self):
        result = await TextLoader().load("plain text body".encode(), ProcessingOptions())
        assert result.content == "plain text body"
        assert result.method == ExtractionMethod.TEXT
        assert result.encoding == "utf-8"

    async def test_markdown(self):
        result = await MarkdownLoader().load(b"# Title\n\n- item", ProcessingOptions())
        assert result.content == "# Title\n\n- item"
        assert result.method == ExtractionMethod.MARKDOWN

    async def test_custom_encoding(self):
        data = "café crème".encode("latin-1")
        result = await TextLoader().load(data, ProcessingOptions(encoding="latin-1"))
        assert result.content == "café crème"

    async def test_invalid_bytes_are_replaced(self):
        result = await TextLoader().load(b"ok \xff\xfe ok", ProcessingOptions())
        assert result.content.startswith("ok ")
        assert "�" in result.content

    async def test_unknown_encoding(self):
        with pytest.raises(FileProcessingError) as exc_info:
            await TextLoader().load(b"data", ProcessingOptions(encoding="no-such-codec"))
        assert exc_info.value.code == ProcessingErrorCode.EXTRACTION_FAILED
        assert isinstance(exc_info.value.cause, LookupError)

    async def test_fallback_ignores_configured_encoding(self):
        result = await FallbackLoader().load("naïve".encode(), ProcessingOptions(encoding="latin-1"))
        assert result.content == "naïve"
        assert result.method == ExtractionMethod.FALLBACK
        assert result.warnings


class TestHTMLLoader:

    def test_strips_non_content_elements(self):
        text = extract_text_from_html(HTML_DOC)
        assert "Safety bulletin" in text
        assert "Close the main valve before maintenance." in text
        for hidden in ("alert", "steal cookies", "Hidden title", "color: red",
                       "Enable JavaScript", "frame text", "vector label"):
            assert hidden not in text

    def test_passthrough_when_not_stripping(self):
        assert extract_text_from_html(HTML_DOC, strip_tags=False) == HTML_DOC

    def test_requires_parser(self, override_capabilities):
        override_capabilities(html=False)
        with pytest.raises(FileProcessingError) as exc_info:
            extract_text_from_html("<p>hello</p>")
        assert exc_info.value.code == ProcessingErrorCode.DEPENDENCY_MISSING

    def test_passthrough_needs_no_parser(self, override_capabilities):
        override_capabilities(html=False)
        assert extract_text_from_html("<p>hello</p>", strip_tags=False) == "<p>hello</p>"

    async def test_loader(self):
        result = await HTMLLoader().load(HTML_DOC.encode(), ProcessingOptions())
        assert result.method == ExtractionMethod.HTML
        assert "<script>" not in result.content
        assert "steal cookies" not in result.content

    async def test_loader_respects_option(self):
        result = await HTMLLoader().load(HTML_DOC.encode(), ProcessingOptions(strip_html_tags=False))
        assert "<script>" in result.content


class TestPDFLoader:

    async def test_extracts_all_pages(self, sample_pdf):
        result = await PDFLoader().load(sample_pdf, ProcessingOptions())
        assert result.method == ExtractionMethod.PDF
        assert result.page_count == 3
        assert "gas pipeline safety" in result.content
        assert "incident reporting procedure" in result.content
        assert result.content.count("\n\n") == 2
        assert result.warnings == []

    async def test_page_runs_joined_with_spaces(self, make_pdf):
        data = make_pdf(["word " * 40])
        result = await PDFLoader().load(data, ProcessingOptions())
        assert "\n" not in result.content
        assert result.content.split() == ["word"] * 40

    async def test_image_only_pdf_fails(self, make_pdf):
        data = make_pdf(["", ""], draw_shapes=True)
        with pytest.raises(FileProcessingError) as exc_info:
            await PDFLoader().load(data, ProcessingOptions())
        assert exc_info.value.code == ProcessingErrorCode.EXTRACTION_FAILED
        assert "scanned" in str(exc_info.value)

    async def test_blank_pages_reported(self, make_pdf):
        data = make_pdf(["Only the first page has any text on it.", ""])
        result = await PDFLoader().load(data, ProcessingOptions())
        assert result.page_count == 2
        assert result.warnings == ["1 of 2 pages had no extractable text"]

    async def test_corrupted_pdf(self):
        with pytest.raises(FileProcessingError) as exc_info:
            await PDFLoader().load(b"this is not a pdf at all", ProcessingOptions())
        assert exc_info.value.code == ProcessingErrorCode.EXTRACTION_FAILED

    async def test_aborted_before_open(self, sample_pdf):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(FileProcessingError) as exc_info:
            await PDFLoader().load(sample_pdf, ProcessingOptions(signal=token))
        assert exc_info.value.code == ProcessingErrorCode.EXTRACTION_FAILED

    async def test_failed_page_is_skipped(self, make_pdf, failing_page):
        data = make_pdf(["first page text here ok", "second page text", "third page text"])
        failing_page(1)
        result = await PDFLoader().load(data, ProcessingOptions())
        assert result.content == "first page text here ok\n\nthird page text"
        assert result.page_count == 3
        assert result.warnings == ["1 of 3 pages failed to extract"]

    async def test_failed_and_blank_pages_reported_separately(self, make_pdf, failing_page):
        data = make_pdf(["first page text here ok", "", "third page text"])
        failing_page(2)
        result = await PDFLoader().load(data, ProcessingOptions())
        assert result.content == "first page text here ok"
        assert result.warnings == [
            "1 of 3 pages failed to extract",
            "1 of 3 pages had no extractable text",
        ]

    async def test_cancelled_mid_document(self, make_pdf, opened_docs, monkeypatch):
        data = make_pdf(["first page text", "second page text", "third page text"])
        token = CancellationToken()
        seen = []
        real_page_text = pdf_module.page_text

        def _page_text(doc, page_index):
            seen.append(page_index)
            text = real_page_text(doc, page_index)
            if page_index == 1:
                token.cancel("timeout")
            return text

        monkeypatch.setattr(pdf_module, "page_text", _page_text)
        with pytest.raises(FileProcessingError) as exc_info:
            await PDFLoader().load(data, ProcessingOptions(signal=token))
        assert exc_info.value.code == ProcessingErrorCode.TIMEOUT
        assert seen == [0, 1]
        assert opened_docs[0].is_closed

    async def test_document_closed_after_load(self, sample_pdf, opened_docs):
        await PDFLoader().load(sample_pdf, ProcessingOptions())
        assert len(opened_docs) == 1
        assert opened_docs[0].is_closed

    async def test_missing_dependency(self, sample_pdf, override_capabilities):
        override_capabilities(pdf=False)
        with pytest.raises(FileProcessingError) as exc_info:
            await PDFLoader().load(sample_pdf, ProcessingOptions())
        assert exc_info.value.code == ProcessingErrorCode.DEPENDENCY_MISSING


class TestDocxLoader:

    async def test_paragraphs_and_tables(self, make_docx):
        data = make_docx(
            ["Quarterly inspection report", "All valves passed."],
            table=[["Valve", "Status"], ["V-101", "OK"]],
        )
        result = await DocxLoader().load(data, ProcessingOptions())
        assert result.method == ExtractionMethod.DOCX
        assert "Quarterly inspection report\n\nAll valves passed." in result.content
        assert "Valve | Status\nV-101 | OK" in result.content

    async def test_empty_document(self, make_docx):
        with pytest.raises(FileProcessingError) as exc_info:
            await DocxLoader().load(make_docx(["", "   "]), ProcessingOptions())
        assert exc_info.value.code == ProcessingErrorCode.EXTRACTION_FAILED

    async def test_corrupted_document(self):
        with pytest.raises(FileProcessingError) as exc_info:
            await DocxLoader().load(b"PK\x03\x04 broken zip", ProcessingOptions())
        assert exc_info.value.code == ProcessingErrorCode.EXTRACTION_FAILED
        assert exc_info.value.cause is not None

    async def test_aborted(self, make_docx):
        token = CancellationToken()
        token.cancel("user")
        with pytest.raises(FileProcessingError) as exc_info:
            await DocxLoader().load(make_docx(["text"]), ProcessingOptions(signal=token))
        assert exc_info.value.code == ProcessingErrorCode.EXTRACTION_FAILED

    async def test_missing_dependency(self, make_docx, override_capabilities):
        override_capabilities(docx=False)
        with pytest.raises(FileProcessingError) as exc_info:
            await DocxLoader().load(make_docx(["text"]), ProcessingOptions())
        assert exc_info.value.code == ProcessingErrorCode.DEPENDENCY_MISSING


async def test_odt_unsupported():
    with pytest.raises(FileProcessingError) as exc_info:
        await ODTLoader().load(b"PK\x03\x04", ProcessingOptions())
    assert exc_info.value.code == ProcessingErrorCode.UNSUPPORTED_FORMAT
