import html
import re
from typing import Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def clean_text_input(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """
    Trim free-text input and strip control characters.

    Stored text stays unescaped; escaping happens where it is rendered
    (see ``sanitize_string`` in the email templates).

    Raises:
        ValueError: If input exceeds ``max_length``
    """
    if value is None:
        return None

    value = str(value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    return re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", value)
