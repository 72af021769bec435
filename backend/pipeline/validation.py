"""Upload validation: size limits, allow-lists and magic-byte sniffing."""

from __future__ import annotations

import logging
import re

from config.settings import settings

from .capabilities import get_capabilities
from .errors import FileValidationError, ValidationErrorCode
from .models import ProcessingOptions

logger = logging.getLogger(__name__)

EXTENSION_MIME_TYPES: dict[str, str] = {
    ".txt": "text/plain",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".html": "text/html",
    ".htm": "text/html",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".odt": "application/vnd.oasis.opendocument.text",
}

ALLOWED_EXTENSIONS: frozenset[str] = frozenset(EXTENSION_MIME_TYPES)
ALLOWED_FILE_TYPES: frozenset[str] = frozenset(EXTENSION_MIME_TYPES.values())

# Generic container types a sniffer may report for office formats built on them.
CONTAINER_MIME_TYPES: dict[str, frozenset[str]] = {
    "application/zip": frozenset({".docx", ".odt"}),
    "application/x-ole-storage": frozenset({".doc"}),
    "application/x-cfb": frozenset({".doc"}),
}

MAX_FILENAME_LENGTH = 255

_PATH_PREFIX_RE = re.compile(r"^.*[\\/]")
_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9._-]")


def get_file_extension(file_name: str) -> str:
    """Lower-cased extension including the dot, or ``""``."""
    last_dot = file_name.rfind(".")
    if last_dot == -1:
        return ""
    return file_name[last_dot:].lower()


def mime_type_from_extension(ext: str) -> str | None:
    return EXTENSION_MIME_TYPES.get(ext.lower())


def sanitize_filename(name: str) -> str:
    """Strip path components and unsafe characters so the name is safe to log or store."""
    sanitized = _PATH_PREFIX_RE.sub("", name or "")
    sanitized = _UNSAFE_CHARS_RE.sub("_", sanitized)[:MAX_FILENAME_LENGTH]
    return sanitized or "unknown_file"


def validate_file_type(file_name: str, mime_type: str | None = None) -> bool:
    """Check the extension (and the MIME type, when given) against the allow-lists."""
    has_valid_extension = get_file_extension(file_name) in ALLOWED_EXTENSIONS
    if mime_type:
        return has_valid_extension and mime_type in ALLOWED_FILE_TYPES
    return has_valid_extension


def detect_mime_type(buffer: bytes, file_name: str = "") -> str | None:
    """Sniff the MIME type from magic bytes; ``None`` when unknown or unavailable."""
    if not get_capabilities().sniffing:
        return None

    import filetype

    try:
        kind = filetype.guess(buffer)
    except Exception as e:
        logger.warning("File type detection failed for %s: %s", sanitize_filename(file_name), e)
        return None
    return kind.mime if kind is not None else None


def _is_container_of(detected: str, ext: str) -> bool:
    return ext in CONTAINER_MIME_TYPES.get(detected, frozenset())


def _validate_magic_bytes(buffer: bytes, file_name: str, declared_mime: str | None) -> None:
    detected = detect_mime_type(buffer, file_name)
    if detected is None:
        return

    ext = get_file_extension(file_name)
    expected = declared_mime or mime_type_from_extension(ext)

    if detected not in ALLOWED_FILE_TYPES and not _is_container_of(detected, ext):
        raise FileValidationError(
            f"File type mismatch: detected {detected}, not in allowed types",
            ValidationErrorCode.INVALID_TYPE,
            file_name,
        )

    if expected and detected != expected and not _is_container_of(detected, ext):
        if settings.knowledge_strict_mime_validation:
            raise FileValidationError(
                f"Declared type {expected} does not match detected type {detected}",
                ValidationErrorCode.INVALID_TYPE,
                file_name,
            )
        logger.warning(
            "MIME type mismatch for %s (ext=%s declared=%s detected=%s)",
            sanitize_filename(file_name), ext, expected, detected,
        )


def validate_file_buffer(
    buffer: bytes,
    file_name: str,
    options: ProcessingOptions | None = None,
    declared_mime: str | None = None,
) -> None:
    """Reject empty, oversized or mis-typed uploads before extraction starts."""
    options = options or ProcessingOptions()
    max_size = options.resolved_max_file_size()

    if not buffer:
        raise FileValidationError("File is empty", ValidationErrorCode.EMPTY_FILE, file_name)

    if len(buffer) > max_size:
        raise FileValidationError(
            f"File size {len(buffer)} exceeds maximum {max_size} bytes",
            ValidationErrorCode.FILE_TOO_LARGE,
            file_name,
        )

    _validate_magic_bytes(buffer, file_name, declared_mime)
