"""
Icon metadata suggestions.

When an icon is added to the icon library the model is asked, in JSON mode,
for search keywords, a category, a short description, tags and a confidence
score, based only on the icon's name. A failed or malformed answer never blocks
the upload: the result then carries deterministic fallback metadata derived
from the name, flagged with ``success=False``.

``apply_icon_metadata`` merges a result into an icon document without
overwriting anything an editor already filled in.

Python Learning Notes:
    - json.loads() raises json.JSONDecodeError (a ValueError) on invalid JSON
    - {**mapping} copies a dict so the caller's document is never mutated
"""

import json
from typing import Any, Dict, List, Mapping, Optional

from ..database.audit_log import AuditLogEntry, AuditStore
from ..errors import ParseError
from ..models import (
    GenerationMetadata,
    IconMetadata,
    IconMetadataConfig,
    IconMetadataResult,
    OperationKind,
    utc_timestamp,
)
from ..processors.prompts import ICON_SYSTEM_MESSAGE, build_icon_metadata_prompt
from ..providers import ProviderFactory
from ..settings import AiSettings, SettingsLoader
from ..utils import get_logger
from ..utils.monitoring import UsageMonitor
from .pipeline import (
    EventSink,
    GenerationRun,
    Stage,
    build_provider,
    handle_failure,
    load_gated_settings,
    record_audit,
    should_audit,
)

logger = get_logger(__name__)

ICON_ENHANCEMENT_DISABLED = (
    "AI icon enhancement is not enabled. Please configure in AI Settings."
)
FALLBACK_CATEGORY = "custom"


def fallback_icon_metadata(icon_name: str) -> IconMetadata:
    """Deterministic metadata used when the model cannot provide any."""
    return IconMetadata(
        keywords=[icon_name.lower()],
        category=FALLBACK_CATEGORY,
        description=f"Icon: {icon_name}",
        tags=[],
        confidence=0,
    )


def _string_list(value: Any, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [str(item).strip() for item in value if isinstance(item, (str, int, float))]
    return [item for item in items if item][:limit]


def _confidence(value: Any) -> int:
    try:
        confidence = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, confidence))


def parse_icon_metadata(raw: str, config: IconMetadataConfig) -> IconMetadata:
    """
    Parse and validate the model's JSON answer.

    Keywords and tags are trimmed to the configured limits and the confidence
    score is clamped to 0-100.

    Raises:
        ParseError: The answer is not a JSON object, or keywords, category or
            description are missing or empty.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"AI response is not valid JSON: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise ParseError("Invalid metadata structure from AI response")

    keywords = _string_list(data.get("keywords"), config.max_keywords)
    category = data.get("category")
    description = data.get("description")

    if (
        not keywords
        or not isinstance(category, str)
        or not category.strip()
        or not isinstance(description, str)
        or not description.strip()
    ):
        raise ParseError("Invalid metadata structure from AI response")

    return IconMetadata(
        keywords=keywords,
        category=category.strip(),
        description=description.strip(),
        tags=_string_list(data.get("tags"), config.max_tags),
        confidence=_confidence(data.get("confidence")),
    )


def _icon_enabled(settings: AiSettings) -> bool:
    return settings.icon_enhancement.enabled and bool(settings.api_key)


async def generate_icon_metadata(
    icon_name: str,
    settings_loader: SettingsLoader,
    config: Optional[IconMetadataConfig] = None,
    *,
    audit_store: Optional[AuditStore] = None,
    provider_factory: Optional[ProviderFactory] = None,
    event_sink: Optional[EventSink] = None,
    monitor: Optional[UsageMonitor] = None,
    actor: Optional[str] = None,
) -> IconMetadataResult:
    """
    Suggest search metadata for an icon.

    Args:
        icon_name (str): Icon name as uploaded, e.g. "arrow-right".
        settings_loader (SettingsLoader): Settings source, read once.
        config (Optional[IconMetadataConfig]): Limits and category list;
            defaults use the settings record's icon primer.
        audit_store, provider_factory, event_sink, monitor, actor: As for
            generate_alt_tag.

    Returns:
        IconMetadataResult: Parsed metadata with the raw answer and prompt, or
            fallback metadata with ``success=False`` and an error.
    """
    run = GenerationRun(OperationKind.ICON_METADATA, event_sink)
    settings: Optional[AiSettings] = None
    model: Optional[str] = None
    prompt: Optional[str] = None
    raw: Optional[str] = None

    try:
        settings = await load_gated_settings(
            run, settings_loader, _icon_enabled, ICON_ENHANCEMENT_DISABLED
        )

        icon_settings = settings.icon_enhancement
        provider_config = settings.provider_config(
            model=icon_settings.model, max_tokens=icon_settings.max_tokens
        )
        model = provider_config.model
        provider = build_provider(run, provider_config, provider_factory)

        icon_config = config or IconMetadataConfig(system_primer=icon_settings.system_primer)
        prompt = build_icon_metadata_prompt(icon_name, icon_config)

        run.enter(Stage.INVOKE)
        response = await provider.generate_text(
            prompt, system=ICON_SYSTEM_MESSAGE, json_mode=True
        )
        raw = response.text
        run.complete(tokens=response.tokens_used)

        run.enter(Stage.POST_PROCESS)
        metadata = parse_icon_metadata(raw, icon_config)
        run.complete(category=metadata.category, keywords=len(metadata.keywords))

    except Exception as e:
        message = handle_failure(run, e)
        logger.error(f"Icon metadata generation failed for {icon_name!r}: {message}")

        result = IconMetadataResult(
            metadata=fallback_icon_metadata(icon_name),
            success=False,
            error=message,
            raw_response=raw,
            prompt=prompt,
        )
        if should_audit(settings, success=False, log_generations=False):
            await record_audit(
                run,
                audit_store,
                AuditLogEntry(
                    operation=OperationKind.ICON_METADATA.value,
                    provider=settings.provider,
                    model=model or settings.model,
                    success=False,
                    duration_ms=run.elapsed_ms,
                    input_excerpt=icon_name,
                    output=raw,
                    error=message,
                    actor=actor,
                    details={"iconName": icon_name},
                ),
                monitor,
            )
        run.finish(False, message)
        return result

    usage = GenerationMetadata(
        provider=provider.name,
        model=model,
        tokens_used=response.tokens_used,
        cost=provider.calculate_cost(response.tokens_used),
        duration_ms=run.elapsed_ms,
    )
    result = IconMetadataResult(
        metadata=metadata,
        success=True,
        raw_response=raw,
        prompt=prompt,
        usage=usage,
    )

    if should_audit(settings, True, settings.icon_enhancement.log_generations):
        await record_audit(
            run,
            audit_store,
            AuditLogEntry(
                operation=OperationKind.ICON_METADATA.value,
                provider=usage.provider,
                model=usage.model,
                success=True,
                tokens_used=usage.tokens_used or 0,
                cost=usage.cost or 0.0,
                duration_ms=usage.duration_ms or 0,
                input_excerpt=icon_name,
                output=raw,
                actor=actor,
                details={
                    "iconName": icon_name,
                    "category": metadata.category,
                    "keywordCount": len(metadata.keywords),
                },
            ),
            monitor,
        )

    run.finish(True)
    return result


def apply_icon_metadata(
    icon: Mapping[str, Any], result: IconMetadataResult, model: Optional[str] = None
) -> Dict[str, Any]:
    """
    Merge suggested metadata into an icon document.

    Only empty fields are filled: an editor's category, description, keywords
    or tags always win. Keywords and tags use the CMS array shapes
    (``{"keyword": ...}`` and ``{"tag": ...}``). Icons that already carry an
    ``aiMetadata.enhancedAt`` stamp are returned unchanged.

    Args:
        icon (Mapping[str, Any]): Icon document about to be saved.
        result (IconMetadataResult): Output of generate_icon_metadata.
        model (Optional[str]): Model name recorded in ``aiMetadata``; defaults
            to the model reported in the result's usage.

    Returns:
        Dict[str, Any]: A new document; the input is not modified.
    """
    ai_metadata = icon.get("aiMetadata")
    if isinstance(ai_metadata, Mapping) and ai_metadata.get("enhancedAt"):
        return dict(icon)

    suggested = result.metadata
    enhanced = {**icon}

    enhanced["category"] = icon.get("category") or suggested.category
    enhanced["description"] = icon.get("description") or suggested.description
    enhanced["keywords"] = icon.get("keywords") or [
        {"keyword": keyword} for keyword in suggested.keywords
    ]
    enhanced["tags"] = icon.get("tags") or [{"tag": tag} for tag in suggested.tags]
    enhanced["aiMetadata"] = {
        "enhancedAt": utc_timestamp(),
        "model": model or (result.usage.model if result.usage else None),
        "confidence": suggested.confidence,
    }

    return enhanced
