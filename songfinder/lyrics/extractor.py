"""
Lyrics block extraction from scraped page text

Scraped lyrics pages mix the lyrics with navigation, ads, credits and footer
text. The lyrics themselves are almost always a run of several consecutive
medium-length lines, so the page is segmented into blocks at every line that
cannot belong to a lyric stanza, and the largest block wins.

Segmentation Rules:
A line is a boundary when, after trimming, it is
- empty or shorter than ``min_line_length``
- a short "Label:" line ("Album:", "Writer: John Newton", "Verse 2:")
- a known boilerplate line (copyright/attribution, sharing and cookie
  notices, markdown headings, link/image lines, table rows, rules)

The buffered lines are flushed at each boundary and kept as a block only when
there are at least ``min_block_lines`` of them. Among the kept blocks the one
with the greatest character length is returned; on a tie the first one seen
wins. The scan is a single pass over the text.
"""

import re
from typing import Iterator, List

DEFAULT_MIN_BLOCK_LINES = 4
DEFAULT_MIN_LINE_LENGTH = 3

# Short "Label:" lines: up to four words before the colon
_LABEL_PATTERN = re.compile(
    r"^[A-Za-z][A-Za-z0-9'&/()#.-]*(?: [A-Za-z0-9'&/()#.-]+){0,3}:(?:\s|$)"
)

# Lowercased line prefixes that never occur inside a lyric stanza
BOILERPLATE_PREFIXES = (
    # copyright and attribution
    '©', '(c) ', 'copyright', 'all rights reserved', 'public domain',
    'lyrics provided by', 'lyrics licensed', 'lyrics powered by',
    'lyrics courtesy', 'used by permission', 'ccli', 'written by',
    'words by', 'music by', 'submitted by', 'transcribed by',
    # page furniture
    'share this', 'share on', 'follow us', 'sign up', 'subscribe',
    'advertisement', 'we use cookies', 'cookie', 'privacy policy',
    'terms of', 'click here', 'read more', 'related songs', 'more lyrics',
    'http://', 'https://', 'www.',
    # markdown structure from scraped pages
    '#', '![', '[', '* [', '- [', '+ [', '|', '---', '***', '```', '>',
)


def _clean_line(line: str) -> str:
    """Trim whitespace and a trailing markdown hard break"""
    line = line.strip()
    if line.endswith('\\'):
        line = line[:-1].rstrip()
    return line


def is_boundary_line(line: str, min_line_length: int = DEFAULT_MIN_LINE_LENGTH) -> bool:
    """
    Check whether a trimmed line ends the current block

    Args:
        line: Trimmed line text
        min_line_length: Lines shorter than this are boundaries

    Returns:
        True if the line cannot be part of a lyrics block
    """
    if len(line) < min_line_length:
        return True

    if _LABEL_PATTERN.match(line):
        return True

    lowered = line.lower()
    return lowered.startswith(BOILERPLATE_PREFIXES)


def iter_blocks(
    raw_text: str,
    min_block_lines: int = DEFAULT_MIN_BLOCK_LINES,
    min_line_length: int = DEFAULT_MIN_LINE_LENGTH
) -> Iterator[str]:
    """
    Yield every completed block of ``raw_text`` in document order

    Args:
        raw_text: Unstructured page text
        min_block_lines: Minimum number of lines for a run to count as a block
        min_line_length: Minimum trimmed line length for content lines

    Yields:
        Newline-joined block text
    """
    buffer: List[str] = []

    for raw_line in (raw_text or '').splitlines():
        line = _clean_line(raw_line)

        if is_boundary_line(line, min_line_length):
            if len(buffer) >= min_block_lines:
                yield '\n'.join(buffer)
            buffer = []
            continue

        buffer.append(line)

    if len(buffer) >= min_block_lines:
        yield '\n'.join(buffer)


def extract_lyrics_block(
    raw_text: str,
    min_block_lines: int = DEFAULT_MIN_BLOCK_LINES,
    min_line_length: int = DEFAULT_MIN_LINE_LENGTH
) -> str:
    """
    Extract the most likely lyrics block from scraped page text

    Args:
        raw_text: Unstructured page text
        min_block_lines: Minimum number of lines for a run to count as a block
        min_line_length: Minimum trimmed line length for content lines

    Returns:
        The longest block (first one on ties), or an empty string when no run
        reached ``min_block_lines``
    """
    best = ''
    for block in iter_blocks(raw_text, min_block_lines, min_line_length):
        # strict comparison keeps the first block on ties
        if len(block) > len(best):
            best = block
    return best
