"""
Configuration management for SongFinder

This module handles loading and validation of application settings from YAML
files and environment variables. Settings are built once, before the service
starts answering requests, and are immutable afterwards: every section is a
frozen dataclass and the search processor and web app receive the Settings
object explicitly rather than reading global state.

The configuration is organized into logical sections:
- Web search provider (Firecrawl credential, endpoint, result cap, timeout)
- Direct lookup provider (Genius credential, timeout)
- Extraction thresholds (block size, content threshold, lyrics cap)
- HTTP server options (bind address, CORS origin)
- Logging and network options

Sources in increasing order of precedence:
1. Dataclass defaults
2. The first YAML file found (explicit path, ~/.songfinder/config.yaml,
   config/config.yaml, config.yaml)
3. Environment variables (a .env file is loaded if present)

API keys should only ever come from the environment.
"""

import os
import yaml
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

from ..exceptions import ConfigError

# Load environment variables from .env file if present
load_dotenv()


@dataclass(frozen=True)
class SearchConfig:
    """
    Web search provider (Firecrawl) configuration

    The domain qualifier is appended to every query to keep results on
    devotional/worship lyrics pages.
    """
    api_key: str = ""
    endpoint: str = "https://api.firecrawl.dev/v1/search"
    domain_qualifier: str = "christian lyrics"
    result_limit: int = 5
    timeout: float = 25.0
    max_response_bytes: int = 5_000_000


@dataclass(frozen=True)
class LookupConfig:
    """Direct lookup provider (Genius) configuration"""
    genius_api_key: str = ""
    timeout: float = 20.0


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Lyrics extraction thresholds

    A block needs ``min_block_lines`` lines and ``min_content_chars``
    characters to become a candidate; candidate lyrics are capped at
    ``max_lyrics_chars``. Scraped pages longer than ``max_page_chars`` are
    cut before extraction.
    """
    min_block_lines: int = 4
    min_line_length: int = 3
    min_content_chars: int = 100
    max_lyrics_chars: int = 5000
    max_page_chars: int = 200_000


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server configuration"""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origin: str = "*"
    debug: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls log level, optional rotating log file and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass(frozen=True)
class NetworkConfig:
    """Network and HTTP client configuration"""
    user_agent: str = "SongFinder/1.0"


_SECTIONS = {
    'search': SearchConfig,
    'lookup': LookupConfig,
    'extraction': ExtractionConfig,
    'server': ServerConfig,
    'logging': LoggingConfig,
    'network': NetworkConfig,
}

# Environment variable -> (section, field, converter)
_ENV_MAPPINGS = {
    'FIRECRAWL_API_KEY': ('search', 'api_key', str),
    'GENIUS_API_KEY': ('lookup', 'genius_api_key', str),
    'SONGFINDER_LOG_LEVEL': ('logging', 'level', str),
    'SONGFINDER_LOG_FILE': ('logging', 'file', str),
    'SONGFINDER_HOST': ('server', 'host', str),
    'SONGFINDER_PORT': ('server', 'port', int),
    'SONGFINDER_CORS_ORIGIN': ('server', 'cors_origin', str),
}


class Settings:
    """
    Immutable application settings

    Use ``Settings.load()`` to read files and environment variables; the
    constructor only assembles sections and is what tests use to build
    deterministic configurations.

    Attributes:
        search: Web search provider settings
        lookup: Direct lookup provider settings
        extraction: Extraction thresholds
        server: HTTP server settings
        logging: Logging settings
        network: HTTP client settings
        config_path: YAML file the settings came from, if any
    """

    def __init__(
        self,
        search: Optional[SearchConfig] = None,
        lookup: Optional[LookupConfig] = None,
        extraction: Optional[ExtractionConfig] = None,
        server: Optional[ServerConfig] = None,
        logging: Optional[LoggingConfig] = None,
        network: Optional[NetworkConfig] = None,
        config_path: Optional[Path] = None
    ):
        self.search = search or SearchConfig()
        self.lookup = lookup or LookupConfig()
        self.extraction = extraction or ExtractionConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()
        self.network = network or NetworkConfig()
        self.config_path = config_path

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
        strict: bool = False
    ) -> 'Settings':
        """
        Load settings from YAML and environment variables

        Args:
            config_path: Explicit YAML file; default locations are searched otherwise
            environ: Environment mapping (defaults to os.environ)
            strict: Raise ConfigError if validation finds problems

        Returns:
            Settings instance

        Raises:
            ConfigError: If the YAML file is unreadable, or strict validation fails
        """
        path = cls._find_config_file(config_path)
        config_data = cls._read_config_file(path) if path else {}

        sections = {}
        for name, section_cls in _SECTIONS.items():
            section_data = config_data.get(name) or {}
            if not isinstance(section_data, dict):
                raise ConfigError(
                    f"Config section '{name}' must be a mapping",
                    details={'file_path': str(path)}
                )
            sections[name] = _build_section(section_cls, section_data)

        sections = _apply_environment(sections, os.environ if environ is None else environ)
        settings = cls(config_path=path, **sections)

        if strict:
            problems = settings.validate()
            if problems:
                raise ConfigError(
                    "Invalid configuration: " + "; ".join(problems),
                    details={'problems': problems, 'file_path': str(path) if path else None}
                )

        return settings

    @staticmethod
    def _find_config_file(config_path: Optional[str]) -> Optional[Path]:
        """
        Locate the YAML config file

        An explicit path must exist; otherwise the first default location
        that exists is used.
        """
        if config_path:
            path = Path(config_path).expanduser()
            if not path.exists():
                raise ConfigError(
                    f"Config file not found: {path}",
                    details={'file_path': str(path)}
                )
            return path

        candidates = [
            Path.home() / ".songfinder" / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml"),
        ]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return None

    @staticmethod
    def _read_config_file(path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(
                f"Failed to load config from {path}: {e}",
                details={'file_path': str(path), 'original_error': str(e)}
            )

        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {path} must contain a mapping",
                details={'file_path': str(path)}
            )
        return data

    @property
    def search_configured(self) -> bool:
        return bool(self.search.api_key.strip())

    @property
    def lookup_configured(self) -> bool:
        return bool(self.lookup.genius_api_key.strip())

    def validate(self, require_credentials: bool = True) -> List[str]:
        """
        Validate configuration values

        Args:
            require_credentials: Report a problem when no provider key is set

        Returns:
            List of problems, empty when the configuration is valid
        """
        errors = []

        if require_credentials and not self.search_configured and not self.lookup_configured:
            errors.append("At least one of FIRECRAWL_API_KEY or GENIUS_API_KEY is required")

        if not 1 <= self.search.result_limit <= 20:
            errors.append(f"search.result_limit must be between 1 and 20: {self.search.result_limit}")

        for name, timeout in (('search.timeout', self.search.timeout),
                              ('lookup.timeout', self.lookup.timeout)):
            if not 1 <= timeout <= 60:
                errors.append(f"{name} must be between 1 and 60 seconds: {timeout}")

        extraction = self.extraction
        if extraction.min_block_lines < 1:
            errors.append(f"extraction.min_block_lines must be positive: {extraction.min_block_lines}")
        if extraction.min_content_chars < 1:
            errors.append(f"extraction.min_content_chars must be positive: {extraction.min_content_chars}")
        if extraction.max_lyrics_chars < extraction.min_content_chars:
            errors.append(
                "extraction.max_lyrics_chars must not be below extraction.min_content_chars: "
                f"{extraction.max_lyrics_chars} < {extraction.min_content_chars}"
            )

        if self.logging.level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"Invalid logging level: {self.logging.level}")

        if not 0 < self.server.port < 65536:
            errors.append(f"Invalid server port: {self.server.port}")

        return errors

    def to_dict(self, redact: bool = True) -> Dict[str, Dict[str, Any]]:
        """
        Settings as nested dictionaries

        Args:
            redact: Mask API keys
        """
        data = {name: asdict(getattr(self, name)) for name in _SECTIONS}
        if redact:
            for section, key in (('search', 'api_key'), ('lookup', 'genius_api_key')):
                if data[section][key]:
                    data[section][key] = "***"
        return data

    def __str__(self) -> str:
        sections = [
            f"Web search: {'configured' if self.search_configured else 'not configured'}",
            f"Lookup: {'configured' if self.lookup_configured else 'not configured'}",
            f"Cap: {self.extraction.max_lyrics_chars} chars",
        ]
        return f"Settings({', '.join(sections)})"


def _build_section(section_cls, section_data: Dict[str, Any]):
    """Build a section dataclass from YAML data, ignoring unknown keys"""
    known = {f.name: f for f in fields(section_cls)}
    values = {}
    for key, value in section_data.items():
        if key not in known:
            continue
        default = known[key].default
        try:
            if value is None:
                values[key] = default
            elif isinstance(default, bool):
                values[key] = _to_bool(value)
            else:
                values[key] = type(default)(value)
        except (TypeError, ValueError):
            raise ConfigError(
                f"Invalid value for {section_cls.__name__}.{key}: {value!r}",
                details={'field': key, 'value': value}
            )
    return section_cls(**values)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('1', 'true', 'yes', 'y', 'on'):
        return True
    if text in ('0', 'false', 'no', 'n', 'off', ''):
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def _apply_environment(sections: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    """Override sections with environment variables that are set"""
    for env_var, (section, key, convert) in _ENV_MAPPINGS.items():
        value = environ.get(env_var)
        if not value:
            continue
        try:
            sections[section] = replace(sections[section], **{key: convert(value)})
        except ValueError:
            raise ConfigError(
                f"Invalid value for {env_var}: {value!r}",
                details={'env_var': env_var}
            )
    return sections


# Process-wide settings, created on first access
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the process-wide settings instance

    Loaded from default locations on first access. The web app and search
    processor take Settings explicitly; this accessor is for the CLI.
    """
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Replace the process-wide settings with a fresh load

    Args:
        config_path: Optional path to a specific config file

    Returns:
        New Settings instance
    """
    global _settings
    _settings = Settings.load(config_path)
    return _settings
