"""
Utility functions and helpers for SongFinder
Common functions for lyrics text processing
"""

import re


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length with suffix

    Args:
        text: Original text
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    truncate_length = max_length - len(suffix)
    if truncate_length <= 0:
        return suffix[:max_length]

    return text[:truncate_length] + suffix


def clean_lyrics_text(lyrics: str) -> str:
    """
    Clean lyrics text by removing metadata and formatting

    Handles the decoration lyrics sites put around the text: a leading
    "<n> Contributors ... <Title> Lyrics" header, section headers such as
    "[Verse 1]", "You might also like" inserts and the trailing "Embed"
    marker. Stanza breaks are kept as single blank lines.

    Args:
        lyrics: Raw lyrics text

    Returns:
        Cleaned lyrics text
    """
    if not lyrics:
        return ""

    cleaned = lyrics.replace('\r\n', '\n').replace('\r', '\n')

    # Header line: "12 ContributorsTranslationsAmazing Grace Lyrics"
    cleaned = re.sub(r'^[^\n]*?\bLyrics(?=\[|\n|$)', '', cleaned, count=1)

    patterns_to_remove = [
        r'\[[^\]\n]*\]',                # [Verse 1], [Chorus], [Bridge]
        r'You might also like',
        r'\d*\s*Embed\s*$',             # trailing embed marker
    ]
    for pattern in patterns_to_remove:
        cleaned = re.sub(pattern, '', cleaned, flags=re.IGNORECASE)

    # Trim lines and collapse runs of blank lines into single stanza breaks
    lines = [line.strip() for line in cleaned.split('\n')]
    result = []
    for line in lines:
        if line or (result and result[-1]):
            result.append(line)

    return '\n'.join(result).strip()


def validate_lyrics_content(lyrics: str, min_length: int = 100) -> bool:
    """
    Validate if lyrics content is meaningful

    Args:
        lyrics: Lyrics text to validate
        min_length: Minimum length for valid lyrics

    Returns:
        True if lyrics are valid
    """
    if not lyrics or len(lyrics) < min_length:
        return False

    # Check for common "no lyrics" indicators
    no_lyrics_indicators = [
        'lyrics not available',
        'sorry, no lyrics',
        'no lyrics found',
        'we do not have the lyrics',
    ]

    lyrics_lower = lyrics.lower()
    for indicator in no_lyrics_indicators:
        if indicator in lyrics_lower:
            return False

    # Check if it's mostly non-text characters
    text_chars = sum(1 for c in lyrics if c.isalnum() or c.isspace())
    if text_chars / len(lyrics) < 0.7:
        return False

    return True
