"""
Parsing of raw model replies into JSON invoice records.

Vision models often wrap their answer in markdown fences or add chatter
around it. The parser keeps only the span from the first ``{`` to the
last ``}`` before decoding.
"""

import json
import re
from typing import Any, Dict

from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.exceptions import ExtractionParseError

logger = get_logger(__name__)

_FENCE_PATTERN = re.compile(r'```(?:json)?', re.IGNORECASE)


def clean_model_text(text: str) -> str:
    """
    Strip code fences and surrounding chatter from a model reply.

    Example:
        >>> clean_model_text('Sure! ```json\\n{"a": 1}\\n``` Done')
        '{"a": 1}'
    """
    cleaned = _FENCE_PATTERN.sub('', text)

    first_open = cleaned.find('{')
    last_close = cleaned.rfind('}')
    if first_open != -1 and last_close > first_open:
        cleaned = cleaned[first_open:last_close + 1]

    return cleaned.strip()


def parse_model_response(text: str) -> Dict[str, Any]:
    """
    Decode a model reply into an invoice record mapping.

    Args:
        text: Raw reply text.

    Returns:
        The decoded JSON object.

    Raises:
        ExtractionParseError: If the reply is empty, not JSON, or not an object.
    """
    if not text or not text.strip():
        raise ExtractionParseError("Empty response")

    cleaned = clean_model_text(text)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Model response failed to parse: {text[:200]!r}")
        raise ExtractionParseError(f"Invalid JSON: {e.msg}", raw_response=text) from e

    if not isinstance(data, dict):
        raise ExtractionParseError(
            f"Expected a JSON object, got {type(data).__name__}",
            raw_response=text
        )

    return data
