"""Sanitized logging helpers for the duplicate detection engine.

Context passed as keyword arguments is serialized to JSON and scrubbed of
emails, tokens and URLs before it reaches the log stream, so candidate
content and project identifiers can be logged safely.
"""
import json
import logging
import re
from typing import Any

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('dupcheck')


def sanitize_text(text: str) -> str:
    """Remove sensitive information from text.

    Args:
        text: Input text that may contain sensitive data

    Returns:
        Sanitized text with sensitive patterns replaced
    """
    if not text:
        return text

    text = re.sub(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}', '<email>', text)

    text = re.sub(r'sk-[a-zA-Z0-9]{20,}', '<api-key>', text)
    text = re.sub(r'ghp_[a-zA-Z0-9]{36}', '<github-token>', text)

    text = re.sub(r'https?://[^\s"]+', '<url>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Serialize an object to JSON with sensitive data sanitized.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return "<unable to serialize>"

    sanitized = sanitize_text(json_str)
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "... [truncated]"
    return sanitized


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    if kwargs:
        logger.info(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    if kwargs:
        logger.warning(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    if kwargs:
        logger.error(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    if kwargs:
        logger.debug(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.debug(message)


def log_duplicate_detection(confidence: int, match_type: str, **kwargs) -> None:
    """Log a positive duplicate verdict.

    Args:
        confidence: Confidence score (0-100)
        match_type: Match tier that produced the verdict
        **kwargs: Additional context
    """
    log_warning("Duplicate detected",
                confidence=confidence,
                match_type=match_type,
                **kwargs)


def set_log_level(level: str) -> None:
    """Apply a level name such as ``"DEBUG"`` to the dupcheck logger."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
