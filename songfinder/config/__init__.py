"""
Configuration package for SongFinder

Settings are loaded once from YAML files and environment variables and then
passed explicitly to the search processor and the web app:

    from songfinder.config import Settings

    settings = Settings.load()

The CLI uses the lazily created process-wide instance via ``get_settings()``.
"""

from .settings import (
    get_settings,
    reload_settings,
    Settings,
    SearchConfig,
    LookupConfig,
    ExtractionConfig,
    ServerConfig,
    LoggingConfig,
    NetworkConfig,
)

__all__ = [
    'get_settings',
    'reload_settings',
    'Settings',
    'SearchConfig',
    'LookupConfig',
    'ExtractionConfig',
    'ServerConfig',
    'LoggingConfig',
    'NetworkConfig',
]
