"""
Query interpretation for lyrics searches

Users type free text such as "Amazing Grace", "Amazing Grace - Chris Tomlin"
or "How Great Thou Art by Carrie Underwood". The raw text is always what the
providers receive; the optional title/artist split only feeds display titles.
"""

import re
from typing import Optional

from .models import ParsedQuery, SearchQuery


# " - ", " – " or " — " surrounded by whitespace
_DASH_SEPARATOR = re.compile(r'\s+[-–—]\s+')
# " by " (case-insensitive), only consulted when no dash splits the query
_BY_SEPARATOR = re.compile(r'\s+by\s+', re.IGNORECASE)
_WHITESPACE_PATTERN = re.compile(r'\s+')


def normalize_query(query: str) -> str:
    """Trim and collapse internal whitespace"""
    return _WHITESPACE_PATTERN.sub(' ', query or '').strip()


def parse_query(query: str) -> Optional[ParsedQuery]:
    """
    Split "<title> - <artist>" or "<title> by <artist>" queries

    Dashes take precedence over "by", which also occurs inside titles
    ("Stand by Me - Ben E King"). Among separators of the same kind the
    earliest one is used so the trailing artist part is as long as possible
    ("A - B - C" gives artist "B - C").

    Args:
        query: Query text

    Returns:
        ParsedQuery, or None when no separator splits the text into two
        non-empty parts
    """
    text = normalize_query(query)
    for pattern in (_DASH_SEPARATOR, _BY_SEPARATOR):
        for match in pattern.finditer(text):
            title = text[:match.start()].strip()
            artist = text[match.end():].strip()
            if title and artist:
                return ParsedQuery(title=title, artist=artist)
    return None


def interpret_query(query: str) -> SearchQuery:
    """Normalize a raw query and attach its title/artist split"""
    raw = normalize_query(query)
    return SearchQuery(raw=raw, parsed=parse_query(raw))
