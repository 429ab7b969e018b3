"""
Alt text generation for uploaded images.

``generate_alt_tag`` is the orchestrator: it loads the global settings, checks
that the feature is switched on, builds and validates the configured provider,
sends the image and records the outcome. It always returns a tagged
GenerationResult and never raises.

``generate_alt_tag_with_fallback`` wraps it for upload hooks that just need a
string: when AI generation fails and the settings allow it, alt text is derived
from the uploaded file's name instead.

Configuration precedence for each call:
    1. Fields explicitly set on ``custom_config``
    2. The settings record's alt tag group
    3. Built-in defaults (125 characters, the default primer)

Python Learning Notes:
    - pydantic's model_fields_set tells explicitly-set fields apart from defaults
    - Keyword-only parameters (after ``*``) keep call sites self-describing
"""

from typing import Any, Mapping, Optional, Union

from ..database.audit_log import AuditLogEntry, AuditStore
from ..models import AltTagConfig, GenerationResult, OperationKind
from ..providers import ProviderFactory
from ..settings import AiSettings, SettingsLoader
from ..utils import get_logger
from ..utils.monitoring import UsageMonitor
from ..utils.text import clean_filename_for_alt, truncate_at_word
from .pipeline import (
    EventSink,
    GenerationRun,
    Stage,
    build_provider,
    error_message,
    failed_result,
    fetch_settings,
    handle_failure,
    load_gated_settings,
    record_audit,
    should_audit,
)

logger = get_logger(__name__)

ALT_TAG_DISABLED = "ALT tag generation is not enabled in AI Settings"

AltTagOverrides = Union[AltTagConfig, Mapping[str, Any]]


def resolve_alt_tag_config(
    settings: AiSettings, custom_config: Optional[AltTagOverrides] = None
) -> AltTagConfig:
    """
    Merge per-call overrides over the settings record.

    Only fields the caller actually set on ``custom_config`` override the
    settings; unset fields keep the editor-configured values.
    """
    alt = settings.alt_tag
    resolved = {
        "system_primer": alt.system_primer,
        "max_length": alt.max_length,
        "include_context": alt.include_context,
    }

    if custom_config is not None:
        if not isinstance(custom_config, AltTagConfig):
            custom_config = AltTagConfig.model_validate(dict(custom_config))
        resolved.update(
            {name: getattr(custom_config, name) for name in custom_config.model_fields_set}
        )

    return AltTagConfig(**resolved)


async def generate_alt_tag(
    image_url: str,
    settings_loader: SettingsLoader,
    custom_config: Optional[AltTagOverrides] = None,
    *,
    audit_store: Optional[AuditStore] = None,
    provider_factory: Optional[ProviderFactory] = None,
    event_sink: Optional[EventSink] = None,
    monitor: Optional[UsageMonitor] = None,
    actor: Optional[str] = None,
) -> GenerationResult:
    """
    Generate alt text for an image using the configured AI provider.

    Args:
        image_url (str): Public http(s) URL or ``data:image`` URI.
        settings_loader (SettingsLoader): Async callable returning the settings
            record; called exactly once.
        custom_config (Optional[AltTagOverrides]): Per-call overrides for the
            primer, max length, include_context and context.
        audit_store (Optional[AuditStore]): Where audit entries are written.
        provider_factory (Optional[ProviderFactory]): Provider constructor;
            defaults to the registry's create_provider.
        event_sink (Optional[EventSink]): Receives one event per stage.
        monitor (Optional[UsageMonitor]): Usage accounting for stored entries.
        actor (Optional[str]): User that triggered the generation.

    Returns:
        GenerationResult: Alt text no longer than the resolved max length, or
            a failure with an editor-readable error. When the feature is
            disabled no provider is built and no backend call is made.

    Example:
        result = await generate_alt_tag(url, file_settings_loader("ai_settings.yaml"))
        if result.success:
            media["alt"] = result.alt_text
    """
    run = GenerationRun(OperationKind.ALT_TAG, event_sink)
    settings: Optional[AiSettings] = None

    try:
        settings = await load_gated_settings(
            run, settings_loader, lambda s: s.alt_tag.enabled, ALT_TAG_DISABLED
        )

        provider_config = settings.provider_config(model=settings.alt_tag.model)
        provider = build_provider(run, provider_config, provider_factory)
        alt_config = resolve_alt_tag_config(settings, custom_config)

        logger.debug(
            f"Generating alt text with {provider_config.provider}/{provider_config.model} "
            f"(max {alt_config.max_length} chars)"
        )

        run.enter(Stage.INVOKE)
        result = await provider.generate_alt_tag(image_url, alt_config)
        if result.success:
            run.complete(tokens=result.metadata.tokens_used if result.metadata else None)
        else:
            run.fail(result.error or "Alt text generation failed")

    except Exception as e:
        message = handle_failure(run, e)
        if should_audit(settings, success=False, log_generations=False):
            await record_audit(
                run,
                audit_store,
                _entry(image_url, settings, None, error=message, actor=actor),
                monitor,
            )
        return failed_result(run, message)

    if result.success:
        run.enter(Stage.POST_PROCESS)
        text = truncate_at_word(result.text, alt_config.max_length)
        if text != result.text:
            result = result.model_copy(update={"text": text})
        run.complete(characters=len(text))

    if should_audit(settings, result.success, settings.alt_tag.log_generations):
        await record_audit(
            run,
            audit_store,
            _entry(image_url, settings, result, error=result.error, actor=actor),
            monitor,
        )

    run.finish(result.success, result.error)
    return result


def _entry(
    image_url: str,
    settings: AiSettings,
    result: Optional[GenerationResult],
    error: Optional[str] = None,
    actor: Optional[str] = None,
) -> AuditLogEntry:
    metadata = result.metadata if result else None
    return AuditLogEntry(
        operation=OperationKind.ALT_TAG.value,
        provider=metadata.provider if metadata else settings.provider,
        model=metadata.model if metadata else (settings.alt_tag.model or settings.model),
        success=bool(result and result.success),
        tokens_used=(metadata.tokens_used or 0) if metadata else 0,
        cost=(metadata.cost or 0.0) if metadata else 0.0,
        duration_ms=(metadata.duration_ms or 0) if metadata else 0,
        input_excerpt=image_url,
        output=result.text if result and result.success else None,
        error=error,
        actor=actor,
        character_count=len(result.text) if result and result.success else None,
    )


async def generate_alt_tag_with_fallback(
    image_url: str,
    filename: str,
    settings_loader: SettingsLoader,
    **kwargs: Any,
) -> str:
    """
    Generate alt text, falling back to a cleaned filename on failure.

    The settings are read again after a failure so the fallback decision uses
    the current record. If they cannot be read the fallback counts as disabled.

    Args:
        image_url (str): Image to describe.
        filename (str): Original upload filename, e.g. "My_Great-Photo_02.jpg".
        settings_loader (SettingsLoader): Settings source.
        **kwargs: Passed through to generate_alt_tag.

    Returns:
        str: AI alt text, the cleaned filename ("My Great Photo"), or "" when
            the fallback is disabled.
    """
    result = await generate_alt_tag(image_url, settings_loader, **kwargs)
    if result.success and result.text:
        return result.text

    logger.warning(f"AI alt text generation failed for {filename}: {result.error}")

    try:
        settings = await fetch_settings(settings_loader)
    except Exception as e:
        logger.warning(f"Alt text fallback unavailable: {error_message(e)}")
        return ""

    if settings.alt_tag.fallback_to_filename:
        cleaned = clean_filename_for_alt(filename)
        logger.info(f"Using filename fallback for alt text: {cleaned!r}")
        return cleaned

    logger.info("Filename fallback disabled, leaving alt text empty")
    return ""
