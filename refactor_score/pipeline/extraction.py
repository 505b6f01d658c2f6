"""
Balanced-span extraction of JSON from free-form model output.

The model is asked for bare JSON but often wraps it in prose or markdown.
These helpers cut the span between the first opening and the last closing
delimiter. They do not parse anything.
"""

import logging

logger = logging.getLogger(__name__)

EMPTY_OBJECT = "{}"
EMPTY_ARRAY = "[]"


def find_json_span(text: str, opening: str, closing: str) -> str | None:
    """Return text[first opening .. last closing] inclusive, or None if there is no such span."""
    if not text:
        return None

    start = text.find(opening)
    end = text.rfind(closing)
    if start == -1 or end == -1 or end < start:
        return None

    span = text[start:end + 1]
    logger.debug(f"Extracted JSON span: {span}")
    return span


def find_array_span(text: str) -> str | None:
    """
    Array span, or a single object wrapped as a one-element array.

    Models asked for a list of suggestions sometimes answer with just one
    object; that is still a usable answer.
    """
    span = find_json_span(text, "[", "]")
    if span is not None:
        return span

    single = find_json_span(text, "{", "}")
    if single is not None:
        logger.debug("Single JSON object found, wrapping it in an array")
        return f"[{single}]"

    return None

