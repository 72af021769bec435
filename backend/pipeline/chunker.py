"""Boundary-aware text chunking.

Chunks are size-bounded windows over the normalized text that overlap by a
fixed number of characters. Where possible a window ends on a semantic
boundary, searched in this order: paragraph break, line break, sentence end,
word break. Without a boundary in the search window the text is cut hard at
``chunk_size``.
"""

from __future__ import annotations

from .models import ChunkingOptions

# Boundaries are only searched in the last 30% of a window...
BREAK_SEARCH_WINDOW_RATIO = 0.3
# ...and never before the first half of it.
MIN_BREAK_POINT_RATIO = 0.5

SENTENCE_ENDINGS = (". ", "! ", "? ", ".\n", "!\n", "?\n")

PAGE_SEPARATOR = "\n\n"


def find_best_break_point(text: str, start: int, ideal_end: int, chunk_size: int) -> int:
    """Return the offset at which the window ``[start, ideal_end)`` should end.

    The returned offset is just past the chosen separator and never exceeds
    ``ideal_end``; ``ideal_end`` itself is returned when no boundary qualifies.
    """
    min_break_point = start + int(chunk_size * MIN_BREAK_POINT_RATIO)
    search_start = max(start, ideal_end - int(chunk_size * BREAK_SEARCH_WINDOW_RATIO))
    lo = max(min_break_point, search_start)
    if lo >= ideal_end:
        return ideal_end

    pos = text.rfind("\n\n", lo, ideal_end)
    if pos != -1:
        return pos + 2

    pos = text.rfind("\n", lo, ideal_end)
    if pos != -1:
        return pos + 1

    best_sentence_break = -1
    for ending in SENTENCE_ENDINGS:
        pos = text.rfind(ending, lo, ideal_end)
        if pos != -1:
            best_sentence_break = max(best_sentence_break, pos + len(ending))
    if best_sentence_break != -1:
        return best_sentence_break

    pos = text.rfind(" ", lo, ideal_end)
    if pos != -1:
        return pos + 1

    return ideal_end


def _window_end(text: str, start: int, options: ChunkingOptions) -> int:
    end = min(start + options.chunk_size, len(text))
    if end < len(text) and options.respect_boundaries:
        break_point = find_best_break_point(text, start, end, options.chunk_size)
        if break_point - start >= options.min_chunk_size:
            end = break_point
    return end


def _next_start(start: int, end: int, overlap: int) -> int:
    next_start = end - overlap
    # an overlap as large as the window would never advance
    if next_start <= start:
        return end
    return next_start


def chunk_spans(text: str, options: ChunkingOptions | None = None) -> list[tuple[int, int]]:
    """Source windows ``(start, end)`` that ``chunk_text`` slices and trims.

    Consecutive windows share ``overlap`` characters and together cover the
    whole text.
    """
    options = options or ChunkingOptions.from_settings()
    spans: list[tuple[int, int]] = []
    start = 0

    while start < len(text):
        end = _window_end(text, start, options)
        spans.append((start, end))
        if end >= len(text):
            break
        start = _next_start(start, end, options.overlap)

    return spans


def chunk_text(text: str, options: ChunkingOptions | None = None) -> list[str]:
    """Split *text* into overlapping, size-bounded, non-empty chunks.

    Deterministic: the same text and options always give the same chunks.
    """
    chunks = []
    for start, end in chunk_spans(text, options):
        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)
    return chunks


class RollingChunkBuffer:
    """Incremental chunker for text that arrives piece by piece (e.g. PDF pages).

    Only the unflushed tail of the text is kept in memory: after each
    completed chunk the buffer is trimmed to the overlap it has to carry over.
    """

    def __init__(self, options: ChunkingOptions | None = None):
        self.options = options or ChunkingOptions.from_settings()
        self._buffer = ""
        # chars at the head of the buffer that were already emitted as overlap
        self._carried = 0

    def __len__(self) -> int:
        return len(self._buffer)

    def append(self, text: str) -> list[str]:
        """Add *text* and return every chunk that is now complete."""
        if not text:
            return []
        self._buffer = f"{self._buffer}{PAGE_SEPARATOR}{text}" if self._buffer else text
        return self._drain()

    def flush(self) -> list[str]:
        """Return the remainder as a final chunk, if it holds anything new."""
        remainder = self._buffer.strip()
        has_new_text = len(self._buffer) > self._carried
        self._buffer = ""
        self._carried = 0
        if remainder and has_new_text:
            return [remainder]
        return []

    def _drain(self) -> list[str]:
        options = self.options
        chunks = []
        while len(self._buffer) >= options.chunk_size:
            end = options.chunk_size
            if options.respect_boundaries and end < len(self._buffer):
                break_point = find_best_break_point(self._buffer, 0, end, options.chunk_size)
                if break_point >= options.min_chunk_size:
                    end = break_point

            chunk = self._buffer[:end].strip()
            if chunk:
                chunks.append(chunk)

            next_start = _next_start(0, end, options.overlap)
            self._buffer = self._buffer[next_start:]
            self._carried = end - next_start
        return chunks
