"""Upload-time content type detection."""

from pathlib import Path
from typing import Optional

from common.constants import GENERIC_MIME_TYPE
from common.logging_config import get_logger
from shareline import config

logger = get_logger(__name__)

STRATEGIES = ("content", "auto", "declared")


def sniff_content_type(path: Path, sample_size: Optional[int] = None) -> Optional[str]:
    """
    Classify stored bytes with libmagic. The file name is never consulted.

    Args:
        path: Location of the stored content
        sample_size: Number of leading bytes to inspect

    Returns:
        Detected MIME type, or None when nothing was detected
    """
    import magic

    with open(path, "rb") as f:
        sample = f.read(sample_size or config.SNIFF_BYTES)

    detected = magic.from_buffer(sample, mime=True)
    return detected or None


def _usable(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.strip().lower() != GENERIC_MIME_TYPE


def detect_content_type(path: Path, declared: Optional[str] = None, strategy: Optional[str] = None) -> str:
    """
    Determine the MIME type recorded for an upload.

    The default 'content' strategy sniffs the stored bytes and falls back to
    the generic type. 'auto' tries the client hint first unless it is the
    generic fallback. 'declared' uses the hint and never sniffs.
    """
    strategy = (strategy or config.MIME_DETECTION).lower()
    if strategy not in STRATEGIES:
        logger.warning(f"Unknown MIME detection strategy '{strategy}', using 'content'")
        strategy = "content"

    if strategy != "content" and _usable(declared):
        return declared.split(";", 1)[0].strip().lower()

    if strategy != "declared":
        try:
            detected = sniff_content_type(path)
        except Exception as e:
            logger.warning(f"Content sniffing failed for {path.name}: {e}")
            detected = None
        if _usable(detected):
            return detected

    return GENERIC_MIME_TYPE
