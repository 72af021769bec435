"""Shared fixtures: in-memory PDF/DOCX builders and a recording telemetry."""

import io
import textwrap

import pytest

from monitoring.telemetry import set_telemetry
from pipeline import capabilities
from pipeline.loaders import pdf as pdf_module


def build_pdf(pages: list[str], draw_shapes: bool = False) -> bytes:
    """Build a PDF with one page per entry; empty entries give text-less pages."""
    import fitz

    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), textwrap.fill(text, width=70), fontsize=10)
        if draw_shapes:
            page.draw_rect(fitz.Rect(50, 50, 300, 300), color=(0, 0, 0), fill=(0.6, 0.6, 0.6))
    data = doc.tobytes()
    doc.close()
    return data


def build_docx(paragraphs: list[str], table: list[list[str]] | None = None) -> bytes:
    from docx import Document

    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                grid.cell(r, c).text = value
    out = io.BytesIO()
    document.save(out)
    return out.getvalue()


class RecordingSpan:
    def __init__(self, name, attributes):
        self.name = name
        self.attributes = dict(attributes or {})
        self.ended = False

    def set_attribute(self, key, value):
        self.attributes[key] = value

    def end(self):
        self.ended = True


class RecordingTelemetry:
    """Telemetry double that keeps every call for assertions."""

    def __init__(self):
        self.spans: list[RecordingSpan] = []
        self.counters: list[tuple[str, dict]] = []
        self.histograms: list[tuple[str, float, dict]] = []

    def start_span(self, name, attributes=None):
        span = RecordingSpan(name, attributes)
        self.spans.append(span)
        return span

    def increment_counter(self, name, labels=None):
        self.counters.append((name, dict(labels or {})))

    def record_histogram(self, name, value, labels=None):
        self.histograms.append((name, value, dict(labels or {})))


@pytest.fixture
def telemetry():
    return RecordingTelemetry()


@pytest.fixture(autouse=True)
def reset_global_telemetry():
    yield
    set_telemetry(None)


@pytest.fixture
def override_capabilities(monkeypatch):
    """Pin the capability probe result for one test."""

    def _override(**flags):
        caps = capabilities.Capabilities(
            **{"html": True, "docx": True, "pdf": True, "sniffing": True, **flags}
        )
        monkeypatch.setattr(capabilities, "_cached", caps)
        return caps

    return _override


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def make_docx():
    return build_docx


@pytest.fixture
def sample_pdf():
    return build_pdf([
        "Page one talks about gas pipeline safety inspections and schedules.",
        "Page two lists the maintenance checklist for pressure regulators.",
        "Page three summarizes the incident reporting procedure.",
    ])


@pytest.fixture
def opened_docs(monkeypatch):
    """Record every PDF document the loaders open."""
    docs = []
    real_open = pdf_module.open_pdf

    def _recording_open(buffer):
        doc = real_open(buffer)
        docs.append(doc)
        return doc

    monkeypatch.setattr(pdf_module, "open_pdf", _recording_open)
    return docs


@pytest.fixture
def failing_page(monkeypatch):
    """Make text extraction raise for the given zero-based page indexes."""

    def _fail(*indexes):
        real_page_text = pdf_module.page_text

        def _page_text(doc, page_index):
            if page_index in indexes:
                raise RuntimeError(f"damaged content stream on page {page_index + 1}")
            return real_page_text(doc, page_index)

        monkeypatch.setattr(pdf_module, "page_text", _page_text)

    return _fail
