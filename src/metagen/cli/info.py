"""
Inspection CLI commands.

Read-only commands for checking a deployment: which providers are registered,
what the current settings look like, how a document is analyzed before prompts
are built, and what the audit log says about usage and cost.
"""

import sys
from typing import Optional

import click

from ..database.audit_log import JsonLinesAuditStore
from ..errors import ConfigurationError
from ..processors.content_analyzer import DEFAULT_MAX_CONTENT_TOKENS, analyze_content
from ..providers import get_available_providers
from ..settings import read_settings_file, settings_to_dict
from ..utils.monitoring import UsageMonitor
from .context import echo_json, get_cli_context, load_document


@click.command()
def providers():
    """
    List AI providers with their availability.

    Examples:
        metagen providers
    """
    echo_json(get_available_providers())


@click.command()
@click.option("--show-secrets", is_flag=True, help="Print the API key unmasked")
@click.pass_context
def settings(ctx: click.Context, show_secrets: bool):
    """
    Show the effective AI settings, defaults included.

    Examples:
        metagen --settings ai_settings.yaml settings
    """
    cli = get_cli_context(ctx)

    try:
        loaded = read_settings_file(cli.settings_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    if loaded is None:
        click.echo(f"Error: Settings file not found: {cli.settings_path}", err=True)
        sys.exit(1)

    echo_json(settings_to_dict(loaded, include_secrets=show_secrets))


@click.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--max-tokens",
    type=int,
    default=DEFAULT_MAX_CONTENT_TOKENS,
    help=f"Token budget for the content summary (default: {DEFAULT_MAX_CONTENT_TOKENS})",
)
def analyze(document: str, max_tokens: int):
    """
    Show the content context extracted from a page or post.

    This is exactly what SEO prompts see: title, categories, hero image,
    table of contents and the truncated content summary.

    Examples:
        metagen analyze page.json --max-tokens 500
    """
    context = analyze_content(load_document(document), max_tokens)
    echo_json(context)


@click.command()
@click.option(
    "--budget",
    type=float,
    default=None,
    help="Monthly budget in dollars (default: from cost tracking settings)",
)
@click.pass_context
def usage(ctx: click.Context, budget: Optional[float]):
    """
    Summarize generations, tokens and estimated cost from the audit log.

    Examples:
        metagen usage
        metagen --audit-log logs/ai_logs.jsonl usage --budget 50
    """
    cli = get_cli_context(ctx)

    if budget is None:
        try:
            loaded = read_settings_file(cli.settings_path)
        except ConfigurationError:
            loaded = None
        if loaded is not None:
            budget = loaded.cost_tracking.monthly_budget

    entries = JsonLinesAuditStore(cli.audit_log_path).read_entries()
    if not entries:
        click.echo(f"No audit entries found in {cli.audit_log_path}")
        return

    monitor = UsageMonitor(monthly_budget=budget)
    monitor.record_many(entries)
    click.echo(monitor.format_report())

    if monitor.is_over_budget():
        click.echo("Warning: monthly budget exceeded", err=True)
