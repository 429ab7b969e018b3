"""
Main CLI entry point for metagen.

Global options select the settings file and the audit log; every subcommand
reads them from the click context object. A .env file in the working directory
(or a parent) is loaded first, so API keys can live there.
"""

import click
from dotenv import find_dotenv, load_dotenv

from ..utils import setup_logging
from .context import CliContext
from .generate import alt_tag, icon, seo_description, seo_title
from .info import analyze, providers, settings, usage


@click.group()
@click.version_option(version="0.1.0", prog_name="metagen")
@click.option(
    "--settings",
    "settings_path",
    default=None,
    help="AI settings YAML file (default: $METAGEN_SETTINGS or ai_settings.yaml)",
)
@click.option(
    "--audit-log",
    default=None,
    help="JSON lines audit log (default: $METAGEN_AUDIT_LOG or logs/ai_logs.jsonl)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, settings_path, audit_log, verbose):
    """
    metagen - AI-assisted metadata for CMS content.

    Generates image alt text, SEO titles and descriptions, and icon search
    metadata through a configurable AI provider.

    \b
    Examples:
        metagen alt-tag https://cdn.example.com/photo.jpg
        metagen seo-title page.json --keywords "web design"
        metagen usage
    """
    # Variables already in the environment win over .env entries
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(verbose=verbose)
    ctx.obj = CliContext(settings_path=settings_path, audit_log=audit_log)


# Register subcommands
main.add_command(alt_tag)
main.add_command(seo_title)
main.add_command(seo_description)
main.add_command(icon)
main.add_command(providers)
main.add_command(settings)
main.add_command(analyze)
main.add_command(usage)


if __name__ == "__main__":
    main()
