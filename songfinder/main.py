"""
Main CLI interface for SongFinder

This module provides the command-line interface for the lyrics search service:
running one-off searches from the terminal, serving the HTTP endpoint the song
editor calls, and inspecting configuration and provider setup.

The CLI is built using Click framework and provides:
- Searching (search)
- Serving the HTTP API (serve)
- Configuration management (config show)
- System diagnostics (doctor)
"""

import json
import sys
import click
import functools

from . import __version__
from .config.settings import get_settings, reload_settings
from .exceptions import ConfigError, SongFinderError
from .lyrics.formatter import outcome_payload, render_markdown
from .lyrics.models import LOOKUP_URL_SENTINEL
from .lyrics.processor import create_processor
from .utils.logger import configure_from_settings, get_logger
from .utils.helpers import truncate_string


logger = get_logger(__name__)


def print_banner():
    """
    Print application banner to console

    Displays a styled banner with the application title and a one-line
    description when the CLI is run without a command.
    """
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                          SongFinder                           ║
║                                                               ║
║     Find worship song lyrics for the song library editor      ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='green', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Wraps CLI command functions to provide consistent error handling across
    all commands. Typed errors are shown with their detail; anything else is
    logged with its traceback and reported generically.

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except SongFinderError as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            if e.detail:
                click.echo(f"   {e.detail}", err=True)
            sys.exit(1)
        except Exception as e:
            logger.exception(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def require_valid_settings(settings) -> None:
    """
    Refuse to run on out-of-range configuration values

    Missing provider keys are not fatal here: the search then answers with
    PROVIDER_UNAVAILABLE, which is what callers are told to expect.

    Raises:
        ConfigError: If any configuration value is invalid
    """
    problems = settings.validate(require_credentials=False)
    if problems:
        raise ConfigError(
            "Invalid configuration: " + "; ".join(problems),
            details={'problems': problems, 'detail': "Fix the values above, then run `songfinder config show`."}
        )


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    SongFinder - Lyrics search for the song library

    Searches the web for lyrics pages, extracts the lyrics and falls back to
    a direct lyrics lookup when the web search comes up empty.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"SongFinder v{__version__}")
        return

    try:
        settings = reload_settings(config) if config else get_settings()
    except ConfigError as e:
        click.echo(click.style(f"Configuration error: {e}", fg='red'), err=True)
        sys.exit(1)

    configure_from_settings(settings, level='DEBUG' if verbose else None)

    if config:
        logger.info(f"Loaded config: {config}")
    if verbose:
        ctx.obj['verbose'] = True
        logger.debug("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


@cli.command()
@click.argument('query')
@click.option('--json', 'output_format', flag_value='json', help='Print the JSON response payload')
@click.option('--markdown', 'output_format', flag_value='markdown', help='Print the markdown rendering')
@click.option('--full', is_flag=True, help='Print complete lyrics instead of a preview')
@handle_error
def search(query, output_format, full):
    """
    Search lyrics for a song

    QUERY is free text such as "Amazing Grace" or "How Great Is Our God -
    Chris Tomlin". Exits with status 1 when nothing is found.
    """
    settings = get_settings()
    require_valid_settings(settings)
    processor = create_processor(settings)

    outcome = processor.search(query)

    if output_format == 'json':
        payload, _ = outcome_payload(outcome)
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    elif output_format == 'markdown':
        click.echo(render_markdown(outcome, preview_chars=None if full else 400))
    elif outcome.success:
        click.echo(f"Found {len(outcome.candidates)} result(s) for: {outcome.query}\n")
        for index, candidate in enumerate(outcome.candidates, 1):
            click.echo(click.style(f"{index}. {candidate.title}", fg='green', bold=True))
            location = "" if candidate.url == LOOKUP_URL_SENTINEL else f" - {candidate.url}"
            click.echo(f"   Source: {candidate.source}{location}")
            lyrics = candidate.lyrics if full else truncate_string(candidate.lyrics, 200)
            for line in lyrics.splitlines():
                click.echo(f"   {line}")
            click.echo()
    else:
        error = outcome.error
        click.echo(click.style(f"{error.message} ({error.category})", fg='yellow'))
        if error.detail:
            click.echo(f"   {error.detail}")

    if not outcome.success:
        sys.exit(1)


@cli.command()
@click.option('--host', help='Interface to bind (overrides config)')
@click.option('--port', type=int, help='Port to listen on (overrides config)')
@click.option('--debug', is_flag=True, help='Run the Flask debug server')
@handle_error
def serve(host, port, debug):
    """
    Serve the lyrics search HTTP API

    Starts the Flask app exposing POST /api/song-search and GET /health.
    """
    from .api.app import create_app

    settings = get_settings()
    require_valid_settings(settings)

    if not settings.search_configured and not settings.lookup_configured:
        click.echo(click.style(
            "Warning: no provider key set, every search will answer PROVIDER_UNAVAILABLE",
            fg='yellow'
        ), err=True)

    app = create_app(settings)

    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    click.echo(f"Serving lyrics search on http://{bind_host}:{bind_port}/api/song-search")
    app.run(host=bind_host, port=bind_port, debug=debug or settings.server.debug, threaded=True)


# Configuration commands group
@cli.group()
def config():
    """
    Configuration management

    Command group for viewing the active configuration.
    """
    pass


@config.command()
@handle_error
def show():
    """
    Show current configuration

    Displays all current settings grouped by section. API keys are masked.
    """
    settings = get_settings()

    click.echo("Current Configuration:\n")
    if settings.config_path:
        click.echo(f"Config file: {settings.config_path}\n")
    else:
        click.echo("Config file: none (defaults and environment)\n")

    for section, values in settings.to_dict(redact=True).items():
        click.echo(f"{section.capitalize()}:")
        for key, value in values.items():
            display = value if value != "" else "(not set)"
            click.echo(f"   {key.replace('_', ' ').capitalize()}: {display}")
        click.echo()


@cli.command()
@handle_error
def doctor():
    """
    Run system diagnostics

    Checks provider credentials, configuration values and installed
    dependencies. Useful for troubleshooting a deployment that returns
    "temporarily unavailable".
    """
    click.echo("Running diagnostics...\n")

    issues = []
    settings = get_settings()

    if settings.search_configured:
        click.echo(f"Web search (Firecrawl): OK - {settings.search.endpoint}")
    else:
        click.echo("Web search (Firecrawl): Not configured")
        issues.append("Set FIRECRAWL_API_KEY to enable web search")

    if settings.lookup_configured:
        click.echo("Lyrics lookup (Genius): OK")
    else:
        click.echo("Lyrics lookup (Genius): Not configured")
        issues.append("Set GENIUS_API_KEY to enable the lookup fallback")

    for problem in settings.validate():
        if problem not in issues:
            issues.append(problem)

    dependencies = [
        ('requests', 'requests', 'required for web search'),
        ('lyricsgenius', 'lyricsgenius', 'required for lyrics lookup'),
        ('flask', 'Flask', 'required for the HTTP API'),
        ('yaml', 'PyYAML', 'required for config files'),
    ]

    for module_name, display_name, purpose in dependencies:
        try:
            __import__(module_name)
            click.echo(f"{display_name}: OK")
        except ImportError:
            click.echo(f"{display_name}: Not installed")
            issues.append(f"{display_name} is {purpose}")

    if settings.logging.file:
        click.echo(f"Logging: {settings.logging.file}")
    else:
        click.echo("Logging: Console only")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo("\nAll systems operational!")


# Entry point for module execution
if __name__ == '__main__':
    cli()
