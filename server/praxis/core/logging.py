from __future__ import annotations
import logging
import re
from typing import Optional


REDACT_PATTERNS = [
    re.compile(r"(sk-or-v1-[A-Za-z0-9]{20,})"),  # OpenRouter keys
    re.compile(r"(sk-[A-Za-z0-9_\-]{20,})"),  # OpenAI-style keys
    re.compile(r"(AIza[0-9A-Za-z_\-]{30,})"),  # Google API keys
    re.compile(r"(?i)(?<=bearer )([A-Za-z0-9._\-]{12,})"),
]

MASK_PREFIX_LENGTH = 8


def redact(value: str) -> str:
    redacted = value
    for pat in REDACT_PATTERNS:
        redacted = pat.sub("***", redacted)
    return redacted


def mask_secret(value: Optional[str]) -> Optional[str]:
    """Render a secret as a fixed-length prefix, e.g. ``sk-or-v1...``."""
    if not value:
        return None
    return f"{value[:MASK_PREFIX_LENGTH]}..."


class RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        # Redact the fully rendered line so secrets passed as %-args are covered too
        return redact(super().format(record))


def setup_logging(level: int = logging.INFO) -> None:
    logger = logging.getLogger()
    logger.setLevel(level)
    # Clear existing handlers in reload scenarios
    logger.handlers.clear()

    handler = logging.StreamHandler()
    formatter = RedactingFormatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logging.getLogger("uvicorn.error").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level)
    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
