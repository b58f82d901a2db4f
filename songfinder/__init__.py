"""
SongFinder: lyrics search for a church song library
Finds the lyrics of a worship song from a free-text title so an editor can
fill in a new song without typing it out.

## Overview

A content-management UI for children's church lessons keeps a library of
songs. When an editor adds a song they type its title, optionally with the
artist, and SongFinder proposes lyrics to pick from.

## Core Architecture

**Lyrics Search (`songfinder/lyrics/`)**
- Query interpretation (title/artist split)
- Web search provider (Firecrawl) returning scraped lyrics pages
- Direct lookup provider (Genius) used as the fallback
- Lyrics block extraction from noisy page text and candidate normalization
- The search processor that consults providers strictly in order

**HTTP Service (`songfinder/api/`)**
- Flask endpoint called from the browser, with CORS and JSON or markdown output

**Configuration Management (`songfinder/config/`)**
- YAML files plus environment variables, loaded into frozen settings

**Utilities (`songfinder/utils/`)**
- Colored console and rotating file logging
- Deadline tokens bounding every provider call
- Lyrics text helpers

## Error Model

Provider failures are recovered inside the search; callers only ever see the
typed errors in `songfinder.exceptions`, each with a category and an HTTP status.
"""

__version__ = "1.0.0"

__author__ = "SongFinder Team"

__description__ = "Lyrics search with web search extraction and lookup fallback"

__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
