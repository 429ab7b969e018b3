"""
Generation CLI commands.

Manual triggers for every orchestrator. Each command prints the tagged result
as JSON on stdout and exits with status 1 when generation failed, so the
commands compose with shell scripts and CI jobs.
"""

import asyncio
import sys
from typing import Optional

import click

from ..errors import ConfigurationError
from ..generators import (
    generate_alt_tag,
    generate_alt_tag_with_fallback,
    generate_icon_metadata,
    generate_seo_description,
    generate_seo_title,
    seo_description_config_from_settings,
    seo_title_config_from_settings,
)
from ..settings import AiSettings, read_settings_file
from .context import echo_json, get_cli_context, load_document


def _settings_for_config(path) -> AiSettings:
    # Missing settings still produce a config; the orchestrator reports the error
    try:
        return read_settings_file(path) or AiSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)


@click.command("alt-tag")
@click.argument("image_url")
@click.option(
    "--filename",
    default=None,
    help="Original filename; enables the filename fallback when generation fails",
)
@click.option("--max-length", type=int, default=None, help="Override the maximum length")
@click.pass_context
def alt_tag(ctx: click.Context, image_url: str, filename: Optional[str], max_length: Optional[int]):
    """
    Generate alt text for an image.

    Examples:
        metagen alt-tag https://cdn.example.com/team-photo.jpg
        metagen alt-tag https://cdn.example.com/x.jpg --filename My_Team-Photo_02.jpg
    """
    cli = get_cli_context(ctx)
    custom_config = {"max_length": max_length} if max_length else None
    options = dict(audit_store=cli.audit_store, monitor=cli.usage_monitor())

    if filename:
        text = asyncio.run(
            generate_alt_tag_with_fallback(
                image_url,
                filename,
                cli.settings_loader,
                custom_config=custom_config,
                **options,
            )
        )
        echo_json({"alt_text": text})
        if not text:
            sys.exit(1)
        return

    result = asyncio.run(
        generate_alt_tag(image_url, cli.settings_loader, custom_config, **options)
    )
    echo_json(result)
    if not result.success:
        sys.exit(1)


@click.command("seo-title")
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--keywords", default=None, help="Target keywords, comma or newline separated")
@click.option("--guidance", default=None, help="Page-specific instruction for the model")
@click.pass_context
def seo_title(ctx: click.Context, document: str, keywords: Optional[str], guidance: Optional[str]):
    """
    Generate an SEO meta title for a page or post stored as JSON/YAML.

    Examples:
        metagen seo-title page.json --keywords "web design, seo"
    """
    cli = get_cli_context(ctx)
    settings = _settings_for_config(cli.settings_path)
    config = seo_title_config_from_settings(
        settings, load_document(document), keywords, guidance
    )

    result = asyncio.run(
        generate_seo_title(
            config,
            cli.settings_loader,
            audit_store=cli.audit_store,
            monitor=cli.usage_monitor(),
        )
    )
    echo_json(result)
    if not result.success:
        sys.exit(1)


@click.command("seo-description")
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--keywords", default=None, help="Target keywords, comma or newline separated")
@click.option("--guidance", default=None, help="Page-specific instruction for the model")
@click.pass_context
def seo_description(
    ctx: click.Context, document: str, keywords: Optional[str], guidance: Optional[str]
):
    """
    Generate an SEO meta description for a page or post stored as JSON/YAML.

    Examples:
        metagen seo-description post.yaml --guidance "Mention the free trial"
    """
    cli = get_cli_context(ctx)
    settings = _settings_for_config(cli.settings_path)
    config = seo_description_config_from_settings(
        settings, load_document(document), keywords, guidance
    )

    result = asyncio.run(
        generate_seo_description(
            config,
            cli.settings_loader,
            audit_store=cli.audit_store,
            monitor=cli.usage_monitor(),
        )
    )
    echo_json(result)
    if not result.success:
        sys.exit(1)


@click.command("icon")
@click.argument("name")
@click.pass_context
def icon(ctx: click.Context, name: str):
    """
    Suggest keywords, category, description and tags for an icon.

    Fallback metadata is printed even when generation fails.

    Examples:
        metagen icon arrow-right
    """
    cli = get_cli_context(ctx)
    result = asyncio.run(
        generate_icon_metadata(
            name,
            cli.settings_loader,
            audit_store=cli.audit_store,
            monitor=cli.usage_monitor(),
        )
    )
    echo_json(result)
    if not result.success:
        sys.exit(1)
