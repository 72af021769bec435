"""Probe optional format libraries once and gate each format on the result.

Missing libraries never block import of the pipeline. PDF and DOCX support
are required: using them without the library raises ``DEPENDENCY_MISSING``
and ``ensure_dependencies`` fails fast at startup. HTML parsing and
magic-byte sniffing are optional: without them HTML uploads are rejected
and validation relies on extensions only.
"""

from __future__ import annotations

import importlib
import logging
import threading
from dataclasses import dataclass

from .errors import FileProcessingError, ProcessingErrorCode

logger = logging.getLogger(__name__)

# capability -> (import name, distribution name, required)
CAPABILITY_MODULES: dict[str, tuple[str, str, bool]] = {
    "html": ("bs4", "beautifulsoup4", False),
    "docx": ("docx", "python-docx", True),
    "pdf": ("fitz", "PyMuPDF", True),
    "sniffing": ("filetype", "filetype", False),
}


@dataclass(frozen=True)
class Capabilities:
    """Which optional extraction features are usable in this process."""
    html: bool = False
    docx: bool = False
    pdf: bool = False
    sniffing: bool = False

    def missing(self, required_only: bool = False) -> list[str]:
        return [
            name for name, (_, _, required) in CAPABILITY_MODULES.items()
            if not getattr(self, name) and (required or not required_only)
        ]

    def as_dict(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in CAPABILITY_MODULES}


_lock = threading.Lock()
_cached: Capabilities | None = None
_validated = False


def _probe(name: str) -> bool:
    module_name, dist_name, required = CAPABILITY_MODULES[name]
    try:
        importlib.import_module(module_name)
    except ImportError as e:
        if required:
            logger.error("%s not available; %s files will fail (install %s): %s", module_name, name, dist_name, e)
        else:
            logger.warning("%s not available; %s disabled (install %s): %s", module_name, name, dist_name, e)
        return False
    logger.info("%s loaded, %s capability enabled", module_name, name)
    return True


def get_capabilities(refresh: bool = False) -> Capabilities:
    """Return the cached probe result, probing on first use."""
    global _cached
    if _cached is not None and not refresh:
        return _cached
    with _lock:
        if _cached is None or refresh:
            _cached = Capabilities(**{name: _probe(name) for name in CAPABILITY_MODULES})
        return _cached


def require_capability(name: str) -> None:
    """Raise ``DEPENDENCY_MISSING`` if *name* is not available."""
    if name not in CAPABILITY_MODULES:
        raise KeyError(f"Unknown capability: {name}")
    if not getattr(get_capabilities(), name):
        module_name, dist_name, _ = CAPABILITY_MODULES[name]
        raise FileProcessingError(
            f"{name.upper()} processing unavailable: {module_name} is not installed. Install: pip install {dist_name}",
            ProcessingErrorCode.DEPENDENCY_MISSING,
        )


def ensure_dependencies() -> Capabilities:
    """Startup check: fail if a required capability is missing."""
    global _validated
    caps = get_capabilities()
    missing = caps.missing(required_only=True)
    if missing:
        packages = " ".join(CAPABILITY_MODULES[name][1] for name in missing)
        logger.error("Dependency validation failed, missing: %s", missing)
        raise FileProcessingError(
            f"Critical dependencies missing: {', '.join(missing)}. Run: pip install {packages}",
            ProcessingErrorCode.DEPENDENCY_MISSING,
        )
    for name in caps.missing():
        logger.warning("Optional capability unavailable: %s", name)
    _validated = True
    return caps


def dependencies_validated() -> bool:
    return _validated
