"""
Result normalization: display titles, source labels and bounded lyrics

Page titles on lyrics sites carry decoration such as
"Amazing Grace - Lyrics | HymnSite" or "How Great Thou Art Lyrics". The
normalizer reduces them to the song title, labels each candidate with the host
it came from and caps the lyrics length.
"""

import re
import unicodedata
from urllib.parse import urlparse

from .models import PageHit, SongCandidate

DEFAULT_MAX_LYRICS_CHARS = 5000

_SUFFIX_WORDS = r'(?:lyrics?|songs?|hymns?|christian|gospel|worship)'

# Ordered title clean-up patterns, applied until the title stops changing
_TITLE_SUFFIX_PATTERNS = [
    # "... | Site Name"
    re.compile(r'\s*\|[^|]*$'),
    # "... - Lyrics", "... – Hymn Lyrics & Chords"
    re.compile(r'\s+[-–—]\s*' + _SUFFIX_WORDS + r'\b.*$', re.IGNORECASE),
    # "...: Christian Song Lyrics", only when nothing but decoration follows
    re.compile(r'\s*:\s*(?:' + _SUFFIX_WORDS + r'\s*)+$', re.IGNORECASE),
    # "... (Lyrics)", "... [Official Lyrics]"
    re.compile(r'\s*[(\[](?:official\s+)?' + _SUFFIX_WORDS + r'[^)\]]*[)\]]$', re.IGNORECASE),
    # "... Lyrics"
    re.compile(r'\s+lyrics$', re.IGNORECASE),
]

# A title made only of decoration words, e.g. "Lyrics" or "Gospel Songs"
_BARE_SUFFIX_PATTERN = re.compile(r'^(?:' + _SUFFIX_WORDS + r'\s*)+$', re.IGNORECASE)


def clean_title(title: str, fallback: str) -> str:
    """
    Strip site-name and "- Lyrics/Song/Hymn..." decoration from a page title

    Args:
        title: Title as reported by the page, possibly empty
        fallback: Returned when the title is empty or cleans down to nothing

    Returns:
        Cleaned title, never empty as long as ``fallback`` is not
    """
    cleaned = (title or '').strip()

    previous = None
    while cleaned and cleaned != previous:
        previous = cleaned
        for pattern in _TITLE_SUFFIX_PATTERNS:
            cleaned = pattern.sub('', cleaned).strip()

    cleaned = cleaned.strip(' -–—|:')
    if _BARE_SUFFIX_PATTERN.match(cleaned):
        cleaned = ''
    return cleaned or fallback.strip()


def source_label(url: str) -> str:
    """Host component of a URL, lowercased"""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    return host or 'web'


def truncate_lyrics(lyrics: str, max_chars: int = DEFAULT_MAX_LYRICS_CHARS) -> str:
    """
    Cap lyrics at ``max_chars`` characters

    The cut never separates a base character from the combining marks that
    follow it; the whole cluster is dropped instead.
    """
    if len(lyrics) <= max_chars:
        return lyrics

    cut = max_chars
    while cut > 0 and unicodedata.combining(lyrics[cut]):
        cut -= 1
    return lyrics[:cut].rstrip()


def normalize_candidate(
    hit: PageHit,
    block: str,
    query: str,
    max_lyrics_chars: int = DEFAULT_MAX_LYRICS_CHARS
) -> SongCandidate:
    """
    Turn a page hit and its winning lyrics block into a SongCandidate

    Args:
        hit: Web search hit the block was extracted from
        block: Winning lyrics block for the hit
        query: Original query, the title of last resort
        max_lyrics_chars: Lyrics length cap

    Returns:
        SongCandidate labelled with the hit's host
    """
    return SongCandidate(
        title=clean_title(hit.page_title, fallback=query),
        lyrics=truncate_lyrics(block, max_lyrics_chars),
        source=source_label(hit.url),
        url=hit.url,
    )
