"""
Global AI settings record and the loaders that fetch it.

Editors manage a single AI settings record in the content management system:
provider, credentials, model, sampling parameters and one group of options per
feature. The record arrives as a camelCase mapping in which unset fields are
often ``null`` or empty strings. The models below accept that shape (as well as
snake_case keys from Python callers) and replace missing values with defaults.

Orchestrators never read the record directly. They receive a *settings loader*,
an async callable returning an ``AiSettings`` (or a raw mapping), and call it
once per generation. This keeps every call independent and makes the document
store trivially replaceable in tests.

Python Learning Notes:
    - alias_generator=to_camel lets pydantic read "maxLength" into max_length
    - populate_by_name=True still accepts the snake_case field names
    - A mode="before" model validator sees the raw input before field validation
    - Closures (functions returning inner async functions) capture their arguments
"""

from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError
from .models import (
    DEFAULT_ALT_TAG_PRIMER,
    DEFAULT_ICON_PRIMER,
    DEFAULT_SEO_DESCRIPTION_PRIMER,
    DEFAULT_SEO_TITLE_PRIMER,
    ContentPriority,
)
from .providers.base import ProviderConfig
from .utils import get_logger
from .utils.config import get_api_key

logger = get_logger(__name__)

SettingsLike = Union["AiSettings", Mapping[str, Any]]
SettingsLoader = Callable[[], Awaitable[Optional[SettingsLike]]]


class SettingsModel(BaseModel):
    """Base for settings groups: camelCase aliases and null-means-default."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data: Any) -> Any:
        # Unset CMS fields arrive as null or ""; let the field default apply
        if isinstance(data, Mapping):
            return {
                key: value
                for key, value in data.items()
                if value is not None and not (isinstance(value, str) and not value.strip())
            }
        return data


class AltTagSettings(SettingsModel):
    enabled: bool = False
    model: Optional[str] = None
    system_primer: str = DEFAULT_ALT_TAG_PRIMER
    max_length: int = Field(default=125, gt=0)
    include_context: bool = False
    require_review: bool = False
    fallback_to_filename: bool = True
    log_generations: bool = True


class SeoMetaSettings(SettingsModel):
    enabled: bool = False
    model: Optional[str] = None
    title_system_primer: str = DEFAULT_SEO_TITLE_PRIMER
    title_max_length: int = Field(default=60, gt=0)
    include_brand_in_title: bool = True
    brand_name: Optional[str] = None
    description_system_primer: str = DEFAULT_SEO_DESCRIPTION_PRIMER
    description_min_length: int = Field(default=120, ge=0)
    description_max_length: int = Field(default=160, gt=0)
    content_weight: ContentPriority = "balanced"
    analyze_full_content: bool = True
    max_content_tokens: int = Field(default=2000, gt=0)
    log_generations: Optional[bool] = None


class IconEnhancementSettings(SettingsModel):
    enabled: bool = False
    model: Optional[str] = None
    system_primer: str = DEFAULT_ICON_PRIMER
    max_tokens: int = Field(default=500, gt=0)
    log_generations: bool = True


class CostTrackingSettings(SettingsModel):
    enabled: bool = False
    monthly_budget: Optional[float] = Field(default=None, ge=0)


class AiSettings(SettingsModel):
    """
    The global AI settings record.

    Attributes:
        provider (str): Provider id, resolved through the provider registry.
        api_key (Optional[str]): Credential passed to the provider.
        model (str): Default model for every feature without its own override.
        custom_endpoint (Optional[str]): Required when provider is "custom".
        temperature (float): Sampling temperature, passed to the backend as is.
        max_tokens (int): Completion token limit for alt text and SEO calls.
        timeout (int): Seconds allowed for one backend call.
        log_failed_generations (bool): Also audit calls that failed.
    """

    provider: str = "openai"
    api_key: Optional[str] = None
    model: str = "gpt-4o"
    custom_endpoint: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = Field(default=150, gt=0)
    timeout: int = Field(default=30, gt=0)
    log_failed_generations: bool = False

    alt_tag: AltTagSettings = Field(default_factory=AltTagSettings)
    seo_meta: SeoMetaSettings = Field(default_factory=SeoMetaSettings)
    icon_enhancement: IconEnhancementSettings = Field(
        default_factory=IconEnhancementSettings
    )
    cost_tracking: CostTrackingSettings = Field(default_factory=CostTrackingSettings)

    def provider_config(
        self, model: Optional[str] = None, max_tokens: Optional[int] = None
    ) -> ProviderConfig:
        """
        Build the provider configuration for one call.

        Args:
            model (Optional[str]): Feature-specific model override. Falls back
                to the global model when None or empty.
            max_tokens (Optional[int]): Feature-specific completion limit.

        Returns:
            ProviderConfig: Immutable configuration for the provider registry.
        """
        return ProviderConfig(
            provider=self.provider,
            api_key=self.api_key or "",
            model=model or self.model,
            custom_endpoint=self.custom_endpoint,
            temperature=self.temperature,
            max_tokens=max_tokens or self.max_tokens,
            timeout=self.timeout,
        )


def coerce_settings(raw: Optional[SettingsLike]) -> Optional[AiSettings]:
    """
    Turn whatever a settings loader returned into an AiSettings instance.

    Returns None when the loader found no record.

    Raises:
        ConfigurationError: If the record cannot be validated.
    """
    if raw is None:
        return None
    if isinstance(raw, AiSettings):
        return raw

    try:
        return AiSettings.model_validate(dict(raw))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid AI settings record: {e}", cause=e) from e


def static_settings_loader(settings: Optional[SettingsLike]) -> SettingsLoader:
    """Return a loader that always yields the given record."""
    resolved = coerce_settings(settings)

    async def load() -> Optional[AiSettings]:
        return resolved

    return load


def read_settings_file(path: Union[str, Path]) -> Optional[AiSettings]:
    """
    Read a settings record from a YAML (or JSON) file.

    When the file does not carry an API key, the key is taken from the
    environment if one is set there.

    Returns:
        Optional[AiSettings]: None when the file does not exist.

    Raises:
        ConfigurationError: If the file is not a valid settings mapping.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"AI settings file not found: {path}")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse AI settings file {path}: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"AI settings file {path} must contain a mapping")

    settings = coerce_settings(data)
    if not settings.api_key:
        try:
            settings = settings.model_copy(update={"api_key": get_api_key()})
        except ValueError:
            logger.debug("No API key in settings file or environment")

    return settings


def file_settings_loader(path: Union[str, Path]) -> SettingsLoader:
    """
    Return a loader that re-reads the settings file on every call.

    Each generation sees the current file contents, the same way each request
    in the CMS reads the current global record.
    """

    async def load() -> Optional[AiSettings]:
        return read_settings_file(path)

    return load


def settings_to_dict(settings: AiSettings, include_secrets: bool = False) -> Dict[str, Any]:
    """Dump settings with camelCase keys, masking the API key unless asked."""
    data = settings.model_dump(by_alias=True)
    if not include_secrets and data.get("apiKey"):
        data["apiKey"] = "***"
    return data
