"""
Field Sanitizer

Free-text values are written unquoted, so any delimiter or line break inside
them would shift columns or split the row. clean() flattens them to spaces.

Author: Shubham Singh
Date: December 2025
"""

import re
from typing import Optional

_UNSAFE_CHARACTERS = re.compile(r"\r\n|\r|\n|,")


def clean(text: Optional[str]) -> str:
    """
    Replace carriage returns, line feeds and commas with a single space,
    then trim surrounding whitespace.

    Args:
        text: Raw field value, may be None

    Returns:
        Sanitized value, "" for None

    Example:
        >>> clean("Hypertension,\\nessential ")
        'Hypertension  essential'
    """
    if text is None:
        return ""
    return _UNSAFE_CHARACTERS.sub(" ", str(text)).strip()
