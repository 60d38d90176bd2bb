"""
CLI Command Definitions.
Contains all Click command definitions and decorators.
"""

import click
from . import __version__

PROVIDERS = ["ollama", "openai", "gemini", "none"]
CONTENT_TYPES = ["music", "movie", "book", "meme", "unknown"]
CORRECTION_REASONS = ["wrong_category", "wrong_title", "wrong_creator", "wrong_both", "missed_content", "other"]


# Main CLI group
@click.group()
@click.version_option(__version__)
@click.option("--log-level", type=click.Choice(["none", "error", "info", "debug"]), help="Set the log level")
def cli(log_level):
    """ScreenSort: classify screenshots and sort them into music, movies, books and memes."""
    from .core.logging import setup_logging
    from .core.settings import LogLevel, BackendSettings

    if log_level:
        # Override setting for this run and update persistent setting
        lvl = LogLevel(log_level)
        BackendSettings.set_log_level(lvl)
        setup_logging(lvl)
    else:
        setup_logging()


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--provider", type=click.Choice(PROVIDERS), help="Semantic model provider (defaults to the saved setting)")
@click.option("--no-move", "move_files", is_flag=True, flag_value=False, default=True, help="Leave screenshots where they are")
@click.option("--quiet", is_flag=True, help="Only print the final summary")
def run(directory, provider, move_files, quiet):
    """Process every screenshot in DIRECTORY that has not been sorted yet."""
    from .cli_handlers import handle_run
    handle_run(directory, provider, move_files, quiet)


@cli.command()
@click.option("--status", type=click.Choice(["success", "flagged", "failed"]), help="Filter by outcome status")
@click.option("--format", "output_format", default="table", type=click.Choice(["table", "json"]), help="Output format")
def results(status, output_format):
    """List cached results from earlier runs."""
    from .cli_handlers import handle_results
    handle_results(status, output_format)


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
def reconcile(directory):
    """Forget screenshots that were deleted from DIRECTORY since they were processed."""
    from .cli_handlers import handle_reconcile
    handle_reconcile(directory)


@cli.command()
@click.argument("item_id")
@click.option("--type", "content_type", type=click.Choice(CONTENT_TYPES), help="Corrected content type")
@click.option("--title", help="Corrected title")
@click.option("--creator", help="Corrected artist, director or author")
@click.option("--reason", type=click.Choice(CORRECTION_REASONS), help="Why the result was wrong")
def correct(item_id, content_type, title, creator, reason):
    """Correct the result for one processed screenshot."""
    from .cli_handlers import handle_correct
    handle_correct(item_id, content_type, title, creator, reason)


@cli.command("config")
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]), help="Output format")
def show_config(output_format):
    """Show the effective pipeline configuration (including environment overrides)."""
    from .cli_handlers import handle_show_config
    handle_show_config(output_format)


# Settings command group
@cli.group()
def settings():
    """Read and write persisted settings."""
    pass


@settings.command("get")
@click.argument("key", required=False)
@click.option("--format", "output_format", default="table", type=click.Choice(["table", "json"]), help="Output format")
def get_setting(key, output_format):
    """Show one setting, or all of them."""
    from .cli_handlers import SETTING_KEYS, handle_settings_get
    if key and key not in SETTING_KEYS:
        raise click.BadParameter(f"Unknown setting: {key}. Known: {', '.join(SETTING_KEYS)}")
    handle_settings_get(key, output_format)


@settings.command("set")
@click.argument("key")
@click.argument("value")
def set_setting(key, value):
    """Persist a setting value."""
    from .cli_handlers import SETTING_KEYS, handle_settings_set
    if key not in SETTING_KEYS:
        raise click.BadParameter(f"Unknown setting: {key}. Known: {', '.join(SETTING_KEYS)}")
    handle_settings_set(key, value)


if __name__ == "__main__":
    cli()
