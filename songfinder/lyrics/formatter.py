"""
Response rendering for search outcomes

Turns a SearchOutcome (or an error raised at the service boundary) into what
callers receive: a JSON-ready payload with its HTTP status, or the markdown
document the song editor shows in its preview pane.
"""

from typing import Any, Dict, Optional, Tuple

from ..exceptions import LyricsNotFoundError, SongFinderError, UnexpectedFaultError
from ..utils.helpers import truncate_string
from .models import LOOKUP_URL_SENTINEL, SearchOutcome


NOT_FOUND_MARKDOWN = "**Sorry, no lyrics found.**"


def error_payload(error: SongFinderError) -> Tuple[Dict[str, Any], int]:
    """
    Build the failure payload for a typed error

    Args:
        error: Error to report

    Returns:
        Tuple of ({error, category, details?}, http_status)
    """
    payload: Dict[str, Any] = {
        'error': error.message,
        'category': error.category,
    }
    if error.detail:
        payload['details'] = error.detail
    return payload, error.http_status


def outcome_payload(outcome: SearchOutcome) -> Tuple[Dict[str, Any], int]:
    """
    Build the response payload for a search outcome

    Returns:
        Tuple of (payload, http_status); 200 with ``results`` on success
    """
    if not outcome.success:
        return error_payload(outcome.error or UnexpectedFaultError())

    return {
        'query': outcome.query,
        'results': [candidate.to_dict() for candidate in outcome.candidates],
    }, 200


def render_error_markdown(error: SongFinderError, query: Optional[str] = None) -> str:
    """Render an error as a short markdown document"""
    if isinstance(error, LyricsNotFoundError):
        heading = f"# {query}" if query else "# Lyrics search"
        hint = error.detail or "Try another song or double-check the title and artist."
        return f"{heading}\n\n{NOT_FOUND_MARKDOWN}\n\n{hint}"

    body = error.message
    if error.detail:
        body += f"\n\n{error.detail}"
    return f"# Error\n\n{body}"


def render_markdown(outcome: SearchOutcome, preview_chars: Optional[int] = None) -> str:
    """
    Render a search outcome as markdown

    Each candidate becomes a level-3 heading linking to its page (lookup
    results have no page and are rendered without a link) followed by the
    lyrics.

    Args:
        outcome: Outcome to render
        preview_chars: Cut each lyrics body to this many characters

    Returns:
        Markdown text
    """
    if not outcome.success:
        return render_error_markdown(outcome.error or UnexpectedFaultError(), outcome.query)

    sections = [f"# Lyrics search: {outcome.query}"]
    for candidate in outcome.candidates:
        if candidate.url == LOOKUP_URL_SENTINEL:
            heading = f"### {candidate.title} ({candidate.source})"
        else:
            heading = f"### [{candidate.title}]({candidate.url})"

        lyrics = candidate.lyrics
        if preview_chars:
            lyrics = truncate_string(lyrics, preview_chars)

        # Two trailing spaces keep single line breaks in rendered markdown
        body = '\n'.join(f"{line}  " if line else line for line in lyrics.split('\n'))
        sections.append(f"{heading}\n\n{body.rstrip()}")

    return '\n\n'.join(sections)
