"""Format-agnostic text cleanup applied to every extractor's output."""

import re

_EXCESS_BLANK_LINES_RE = re.compile(r"\n{4,}")
_HORIZONTAL_WS_RE = re.compile(r"[ \t]+")
_WORD_SPLIT_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Normalize line endings and whitespace.

    - ``\\r\\n`` and ``\\r`` become ``\\n``
    - runs of four or more newlines shrink to three (two blank lines)
    - runs of spaces/tabs collapse to one space
    - every line and the whole text are trimmed
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _EXCESS_BLANK_LINES_RE.sub("\n\n\n", text)
    text = _HORIZONTAL_WS_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    return text.strip()


def estimate_word_count(text: str) -> int:
    return sum(1 for word in _WORD_SPLIT_RE.split(text) if word)
