"""
SEO meta title and description generation.

Both orchestrators follow the shared stage machine: load settings, check the
``seo_meta.enabled`` gate, build and validate the provider, send one text-only
completion and post-process the answer.

Post-processing rules:
    - Titles: strip wrapping quotes, cut to ``max_length`` at a word boundary,
      then append " | <brand>" when configured, still within ``max_length``
    - Descriptions: strip wrapping quotes and cut to ``max_length``; an answer
      shorter than ``min_length`` is logged as a warning and still returned

The ``*_config_from_settings`` helpers build per-call configurations the way
the CMS admin does: editor keywords are parsed from free text and the document
is analyzed only when ``seo_meta.analyze_full_content`` is on.

Python Learning Notes:
    - Small private helpers (_generate_seo_text) remove duplication between
      two orchestrators that differ only in prompt and post-processing
    - Callable parameters pass behavior (the post-processing step) as data
"""

from typing import Any, Callable, List, Mapping, Optional, Union

from ..database.audit_log import AuditLogEntry, AuditStore
from ..errors import BackendError
from ..models import (
    ContentContext,
    GenerationMetadata,
    GenerationResult,
    OperationKind,
    SeoDescriptionConfig,
    SeoTitleConfig,
)
from ..processors.content_analyzer import analyze_content
from ..processors.prompts import build_seo_description_prompt, build_seo_title_prompt
from ..providers import ProviderFactory
from ..settings import AiSettings, SettingsLoader
from ..utils import get_logger
from ..utils.monitoring import UsageMonitor
from ..utils.text import (
    apply_brand_suffix,
    parse_keywords,
    strip_wrapping_quotes,
    truncate_at_word,
)
from .pipeline import (
    EventSink,
    GenerationRun,
    Stage,
    build_provider,
    failed_result,
    handle_failure,
    load_gated_settings,
    record_audit,
    should_audit,
)

logger = get_logger(__name__)

SEO_DISABLED = "SEO meta generation is not enabled in AI Settings"

SeoConfig = Union[SeoTitleConfig, SeoDescriptionConfig]


def seo_log_generations(settings: AiSettings) -> bool:
    """SEO audit switch; unset falls back to the alt tag switch."""
    if settings.seo_meta.log_generations is not None:
        return settings.seo_meta.log_generations
    return settings.alt_tag.log_generations


def finalize_seo_title(text: str, config: SeoTitleConfig) -> str:
    """Apply the title post-processing rules to a raw model answer."""
    title = strip_wrapping_quotes(text)
    if not title:
        return ""

    if len(title) > config.max_length:
        logger.debug(f"Title exceeds {config.max_length} characters, truncating")
        title = truncate_at_word(title, config.max_length)

    if config.include_brand:
        title = apply_brand_suffix(title, config.brand_name, config.max_length)

    return title


def finalize_seo_description(text: str, config: SeoDescriptionConfig) -> str:
    """Apply the description post-processing rules to a raw model answer."""
    description = strip_wrapping_quotes(text)

    if len(description) > config.max_length:
        logger.debug(f"Description exceeds {config.max_length} characters, truncating")
        description = truncate_at_word(description, config.max_length)

    if len(description) < config.min_length:
        logger.warning(
            f"Description is under min length: {len(description)} < {config.min_length}"
        )

    return description


async def _generate_seo_text(
    operation: OperationKind,
    config: SeoConfig,
    settings_loader: SettingsLoader,
    build_prompt: Callable[[Any, str], str],
    finalize: Callable[[str, Any], str],
    audit_store: Optional[AuditStore],
    provider_factory: Optional[ProviderFactory],
    event_sink: Optional[EventSink],
    monitor: Optional[UsageMonitor],
    actor: Optional[str],
) -> GenerationResult:
    run = GenerationRun(operation, event_sink)
    settings: Optional[AiSettings] = None
    model: Optional[str] = None
    themes = config.content_context.extracted_themes if config.content_context else None

    try:
        settings = await load_gated_settings(
            run, settings_loader, lambda s: s.seo_meta.enabled, SEO_DISABLED
        )

        provider_config = settings.provider_config(model=settings.seo_meta.model)
        model = provider_config.model
        provider = build_provider(run, provider_config, provider_factory)

        prompt = build_prompt(config, settings.seo_meta.content_weight)
        logger.debug(
            f"{operation.value} prompt: {len(prompt)} characters, "
            f"{len(config.keywords)} target keywords"
        )

        run.enter(Stage.INVOKE)
        response = await provider.generate_text(prompt)
        run.complete(tokens=response.tokens_used)

        run.enter(Stage.POST_PROCESS)
        text = finalize(response.text, config)
        if not text:
            raise BackendError(
                f"Failed to generate {operation.value.replace('seo-', '')}",
                provider=provider.name,
            )
        run.complete(characters=len(text))

    except Exception as e:
        message = handle_failure(run, e)
        if should_audit(settings, success=False, log_generations=False):
            await record_audit(
                run,
                audit_store,
                AuditLogEntry(
                    operation=operation.value,
                    provider=settings.provider,
                    model=model or settings.model,
                    success=False,
                    duration_ms=run.elapsed_ms,
                    input_excerpt=_input_excerpt(config),
                    error=message,
                    actor=actor,
                    keywords=list(config.keywords),
                ),
                monitor,
            )
        return failed_result(run, message)

    metadata = GenerationMetadata(
        provider=provider.name,
        model=model,
        tokens_used=response.tokens_used,
        cost=provider.calculate_cost(response.tokens_used),
        duration_ms=run.elapsed_ms,
        character_count=len(text),
        keywords_used=list(config.keywords),
        content_themes=themes,
    )
    result = GenerationResult(text=text, success=True, metadata=metadata)

    if should_audit(settings, True, seo_log_generations(settings)):
        await record_audit(
            run,
            audit_store,
            AuditLogEntry(
                operation=operation.value,
                provider=metadata.provider,
                model=metadata.model,
                success=True,
                tokens_used=metadata.tokens_used or 0,
                cost=metadata.cost or 0.0,
                duration_ms=metadata.duration_ms or 0,
                input_excerpt=_input_excerpt(config),
                output=text,
                actor=actor,
                keywords=list(config.keywords),
                content_themes=themes or [],
                character_count=len(text),
            ),
            monitor,
        )

    run.finish(True)
    return result


def _input_excerpt(config: SeoConfig) -> Optional[str]:
    context = config.content_context
    if context and context.title:
        return context.title
    if context and context.content_summary:
        return context.content_summary
    return None


async def generate_seo_title(
    config: SeoTitleConfig,
    settings_loader: SettingsLoader,
    *,
    audit_store: Optional[AuditStore] = None,
    provider_factory: Optional[ProviderFactory] = None,
    event_sink: Optional[EventSink] = None,
    monitor: Optional[UsageMonitor] = None,
    actor: Optional[str] = None,
) -> GenerationResult:
    """
    Generate an SEO meta title.

    Args:
        config (SeoTitleConfig): Primer, length limit, brand and content context.
        settings_loader (SettingsLoader): Settings source, read once.
        audit_store, provider_factory, event_sink, monitor, actor: As for
            generate_alt_tag.

    Returns:
        GenerationResult: Title of at most ``config.max_length`` characters
            (brand suffix included), or a failure.
    """
    return await _generate_seo_text(
        OperationKind.SEO_TITLE,
        config,
        settings_loader,
        build_seo_title_prompt,
        finalize_seo_title,
        audit_store,
        provider_factory,
        event_sink,
        monitor,
        actor,
    )


async def generate_seo_description(
    config: SeoDescriptionConfig,
    settings_loader: SettingsLoader,
    *,
    audit_store: Optional[AuditStore] = None,
    provider_factory: Optional[ProviderFactory] = None,
    event_sink: Optional[EventSink] = None,
    monitor: Optional[UsageMonitor] = None,
    actor: Optional[str] = None,
) -> GenerationResult:
    """
    Generate an SEO meta description.

    A description shorter than ``config.min_length`` is still a success; the
    shortfall is only logged.
    """
    return await _generate_seo_text(
        OperationKind.SEO_DESCRIPTION,
        config,
        settings_loader,
        build_seo_description_prompt,
        finalize_seo_description,
        audit_store,
        provider_factory,
        event_sink,
        monitor,
        actor,
    )


def _content_context(
    settings: AiSettings, document: Optional[Mapping[str, Any]]
) -> Optional[ContentContext]:
    if document is None or not settings.seo_meta.analyze_full_content:
        return None
    return analyze_content(document, settings.seo_meta.max_content_tokens)


def _keywords(keywords: Union[str, List[str], None]) -> List[str]:
    if isinstance(keywords, str):
        return parse_keywords(keywords)
    return list(keywords or [])


def seo_title_config_from_settings(
    settings: AiSettings,
    document: Optional[Mapping[str, Any]] = None,
    keywords: Union[str, List[str], None] = None,
    guidance: Optional[str] = None,
) -> SeoTitleConfig:
    """
    Build a title configuration from the settings record and a document.

    Args:
        settings (AiSettings): Settings record.
        document (Optional[Mapping[str, Any]]): Page or post to analyze.
        keywords (Union[str, List[str], None]): Editor keywords, either raw
            newline/comma separated text or an already parsed list.
        guidance (Optional[str]): Page-specific instruction for the model.
    """
    seo = settings.seo_meta
    return SeoTitleConfig(
        system_primer=seo.title_system_primer,
        max_length=seo.title_max_length,
        include_brand=seo.include_brand_in_title,
        brand_name=seo.brand_name,
        keywords=_keywords(keywords),
        guidance=guidance or None,
        content_context=_content_context(settings, document),
    )


def seo_description_config_from_settings(
    settings: AiSettings,
    document: Optional[Mapping[str, Any]] = None,
    keywords: Union[str, List[str], None] = None,
    guidance: Optional[str] = None,
) -> SeoDescriptionConfig:
    """Build a description configuration; see seo_title_config_from_settings."""
    seo = settings.seo_meta
    return SeoDescriptionConfig(
        system_primer=seo.description_system_primer,
        min_length=seo.description_min_length,
        max_length=seo.description_max_length,
        keywords=_keywords(keywords),
        guidance=guidance or None,
        content_context=_content_context(settings, document),
    )
