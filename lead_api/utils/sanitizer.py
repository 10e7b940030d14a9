from typing import Any, Mapping

MAX_FIELD_CHARS = 2000


def sanitize(value: str, max_chars: int = MAX_FIELD_CHARS) -> str:
    """Trim surrounding whitespace and cap the length of a form value.

    Args:
        value: Raw string submitted by the client.
        max_chars: Maximum characters kept after trimming.

    Returns:
        str: Trimmed string of at most ``max_chars`` characters.
    """
    return value.strip()[:max_chars]


def sanitize_submission(data: Mapping[str, Any]) -> dict[str, str]:
    """Sanitize every string field of a submission.

    Non-string values (numbers, booleans, nested objects) are dropped, so the
    result only ever holds strings.

    Args:
        data: Parsed JSON object from the request body.

    Returns:
        dict[str, str]: Sanitized string fields keyed by field name.
    """
    return {key: sanitize(value) for key, value in data.items() if isinstance(value, str)}
