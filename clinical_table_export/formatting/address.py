"""
Address Decomposer

Splits a single free-form street line into STREETADDRESS1 / STREETADDRESS2
using a positional heuristic keyed only on the number of whitespace tokens:

    3 tokens: number street street              → line 1
    4 tokens: number street street street       → line 1
    5 tokens: number street street | unit unit  → line 1 | line 2
    6 tokens: number street street street | unit unit

Any other count yields a placeholder naming the count instead of a guess.
The output is best-effort and not a data-quality guarantee.

Author: Shubham Singh
Date: December 2025
"""

from typing import Dict, List, Optional, Tuple

from loguru import logger

from clinical_table_export.core.constants import ADDRESS_PLACEHOLDER_TEMPLATE, DEFAULT_COUNTRY
from clinical_table_export.formatting.sanitizer import clean


# Token count → number of leading tokens that form line 1.
LINE_ONE_TOKEN_COUNTS: Dict[int, int] = {
    3: 3,
    4: 4,
    5: 3,
    6: 4,
}


def split_street_line(street_line: Optional[str]) -> Tuple[str, str]:
    """
    Split a street line into (line1, line2).

    Args:
        street_line: Raw street line, may be None or blank

    Returns:
        Tuple of line 1 and line 2. Line 2 is "" when not present.
        Unsupported token counts return the placeholder as line 1.

    Example:
        >>> split_street_line("100 Main St Apt 4")
        ('100 Main St', 'Apt 4')
    """
    tokens = [clean(token) for token in (street_line or "").split()]

    split_at = LINE_ONE_TOKEN_COUNTS.get(len(tokens))
    if split_at is None:
        logger.warning(f"Street line has unsupported token count: {len(tokens)}")
        return ADDRESS_PLACEHOLDER_TEMPLATE.format(count=len(tokens)), ""

    return " ".join(tokens[:split_at]), " ".join(tokens[split_at:])


def split_address(
    street_line: Optional[str],
    city: Optional[str],
    state: Optional[str],
    postal_code: Optional[str],
) -> List[str]:
    """
    Decompose an address into the six structured address columns.

    Args:
        street_line: Free-form street line
        city: City name
        state: State name or abbreviation
        postal_code: Postal code

    Returns:
        [line1, line2, city, state, postal_code, country]

    Example:
        >>> split_address("100 Main St", "Springfield", "IL", "62704")
        ['100 Main St', '', 'Springfield', 'IL', '62704', 'US']
    """
    line_one, line_two = split_street_line(street_line)
    return [
        line_one,
        line_two,
        clean(city),
        clean(state),
        clean(postal_code),
        DEFAULT_COUNTRY,
    ]
