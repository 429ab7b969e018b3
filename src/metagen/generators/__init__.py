"""
Generation orchestrators.

Each orchestrator runs one operation end to end (settings, feature gate,
provider, invocation, post-processing, audit) and returns a tagged result.
None of them raise: every failure becomes ``success=False`` plus a readable
error string.

Available orchestrators:
    - generate_alt_tag / generate_alt_tag_with_fallback: image alt text
    - generate_seo_title / generate_seo_description: SEO meta fields
    - generate_icon_metadata / apply_icon_metadata: icon library metadata

Example Usage:
    from metagen.generators import generate_alt_tag
    from metagen.settings import file_settings_loader

    result = await generate_alt_tag(url, file_settings_loader("ai_settings.yaml"))

Python Learning Notes:
    - __all__ controls what's exported with "from generators import *"
    - All orchestrators are coroutines and must be awaited
"""

from .alt_tag import generate_alt_tag, generate_alt_tag_with_fallback, resolve_alt_tag_config
from .icons import apply_icon_metadata, fallback_icon_metadata, generate_icon_metadata
from .pipeline import EventSink, GenerationEvent, GenerationRun, Stage, log_event_sink
from .seo import (
    generate_seo_description,
    generate_seo_title,
    seo_description_config_from_settings,
    seo_title_config_from_settings,
)

__all__ = [
    # Alt text
    "generate_alt_tag",
    "generate_alt_tag_with_fallback",
    "resolve_alt_tag_config",
    # SEO
    "generate_seo_title",
    "generate_seo_description",
    "seo_title_config_from_settings",
    "seo_description_config_from_settings",
    # Icons
    "generate_icon_metadata",
    "apply_icon_metadata",
    "fallback_icon_metadata",
    # Pipeline
    "EventSink",
    "GenerationEvent",
    "GenerationRun",
    "Stage",
    "log_event_sink",
]
