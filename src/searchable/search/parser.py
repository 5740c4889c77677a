"""Search string parsing for fuzzy subsequence matching."""

import re
from typing import Any

WILDCARD = "%"

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def strip_search_str(search_str: Any) -> str:
    """Remove every character that is not an ASCII letter or digit."""
    if search_str is None:
        return ""
    return _NON_ALPHANUMERIC.sub("", str(search_str))


def parse_search_str(search_str: Any) -> str:
    """Turn a raw search string into a LIKE pattern.

    Each remaining character must appear in order, separated by anything,
    the way a fuzzy file finder matches "cp" against "control panel":

        >>> parse_search_str("c-p!")
        '%c%p%'

    An empty (or fully stripped) string yields ``%%``, which matches every
    non-null value.
    """
    return WILDCARD + WILDCARD.join(strip_search_str(search_str)) + WILDCARD
