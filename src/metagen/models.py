"""
Pydantic value types shared across the metagen pipeline.

This module defines the per-call generation configurations, the content context
produced by the content analyzer and the results returned to callers. Every
configuration is frozen: it is built once per call from the global settings and
never mutated afterwards.

The models cover:
    - Generation configurations (alt tag, SEO title, SEO description, icon metadata)
    - ContentContext: bounded plain-text summary plus projected document fields
    - GenerationResult / IconMetadataResult: tagged results with usage metadata

Python Learning Notes:
    - Pydantic validates data at runtime and provides type hints
    - ConfigDict(frozen=True) makes instances immutable and hashable
    - Field(default_factory=list) gives every instance its own empty list
    - Enum subclasses of str serialize as plain strings in JSON
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ContentPriority = Literal["keywords", "balanced", "content"]

DEFAULT_ALT_TAG_PRIMER = (
    "Generate concise, SEO-optimized alt text under 125 characters. Describe key "
    "visual elements, context, and relevant details for accessibility and search "
    'engines. Focus on what is important, avoid phrases like "image of" or '
    '"picture of". Be specific and descriptive.'
)
DEFAULT_SEO_TITLE_PRIMER = (
    "You are an SEO specialist. Write a compelling, keyword-aware meta title that "
    "accurately reflects the page and encourages clicks from search results."
)
DEFAULT_SEO_DESCRIPTION_PRIMER = (
    "You are an SEO specialist. Write a compelling meta description that summarizes "
    "the page, includes the most relevant keywords naturally and invites the reader "
    "to click."
)
DEFAULT_ICON_PRIMER = "Analyze this icon and provide metadata for search and organization."
DEFAULT_ICON_CATEGORIES = (
    "navigation",
    "action",
    "social",
    "communication",
    "interface",
    "file",
    "device",
    "commerce",
    "media",
    "custom",
)


def utc_timestamp() -> str:
    """Return the current time as an ISO 8601 string in UTC."""
    return datetime.now(timezone.utc).isoformat()


class OperationKind(str, Enum):
    """Kinds of generation operations recorded in results and audit logs."""

    ALT_TAG = "alt-tag"
    SEO_TITLE = "seo-title"
    SEO_DESCRIPTION = "seo-description"
    ICON_METADATA = "icon-enhancement"


class AltTagContext(BaseModel):
    """Where an image is used; only sent to the model when include_context is on."""

    model_config = ConfigDict(frozen=True)

    page_title: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class AltTagConfig(BaseModel):
    """Configuration for a single alt text generation."""

    model_config = ConfigDict(frozen=True)

    system_primer: str = DEFAULT_ALT_TAG_PRIMER
    max_length: int = Field(default=125, gt=0)
    include_context: bool = False
    context: Optional[AltTagContext] = None


class HeroImage(BaseModel):
    alt: str = ""
    url: str = ""


class TocEntry(BaseModel):
    title: str = ""
    href: str = ""


class ContentContext(BaseModel):
    """
    Everything the prompt assembler knows about a page or post.

    Produced by metagen.processors.content_analyzer.analyze_content. Categories
    and table of contents keep the order they have in the document.
    ``content_summary`` is already truncated to the analyzer's character budget.
    """

    title: Optional[str] = None
    subtitle: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    hero_image: Optional[HeroImage] = None
    table_of_contents: Optional[List[TocEntry]] = None
    content_summary: Optional[str] = None
    extracted_themes: Optional[List[str]] = None


class SeoTitleConfig(BaseModel):
    """Configuration for a single SEO meta title generation."""

    model_config = ConfigDict(frozen=True)

    system_primer: str = DEFAULT_SEO_TITLE_PRIMER
    max_length: int = Field(default=60, gt=0)
    include_brand: bool = False
    brand_name: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    guidance: Optional[str] = None
    content_context: Optional[ContentContext] = None


class SeoDescriptionConfig(BaseModel):
    """Configuration for a single SEO meta description generation."""

    model_config = ConfigDict(frozen=True)

    system_primer: str = DEFAULT_SEO_DESCRIPTION_PRIMER
    min_length: int = Field(default=120, ge=0)
    max_length: int = Field(default=160, gt=0)
    keywords: List[str] = Field(default_factory=list)
    guidance: Optional[str] = None
    content_context: Optional[ContentContext] = None


class IconMetadataConfig(BaseModel):
    """Configuration for icon metadata suggestions."""

    model_config = ConfigDict(frozen=True)

    system_primer: str = DEFAULT_ICON_PRIMER
    max_keywords: int = 10
    max_tags: int = 5
    description_max_words: int = 50
    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_ICON_CATEGORIES))


class GenerationMetadata(BaseModel):
    """Usage details attached to a generation result."""

    provider: str
    model: str
    tokens_used: Optional[int] = None
    cost: Optional[float] = None
    duration_ms: Optional[int] = None
    timestamp: str = Field(default_factory=utc_timestamp)
    character_count: Optional[int] = None
    keywords_used: Optional[List[str]] = None
    content_themes: Optional[List[str]] = None


class GenerationResult(BaseModel):
    """
    Tagged result of an alt text, title or description generation.

    On failure ``text`` is always the empty string and ``error`` says why; no
    partial output is ever returned.
    """

    text: str = ""
    success: bool
    error: Optional[str] = None
    metadata: Optional[GenerationMetadata] = None

    @property
    def alt_text(self) -> str:
        return self.text

    @classmethod
    def failure(
        cls, error: str, metadata: Optional[GenerationMetadata] = None
    ) -> "GenerationResult":
        return cls(text="", success=False, error=error, metadata=metadata)


class IconMetadata(BaseModel):
    """Search metadata suggested for an icon."""

    keywords: List[str]
    category: str
    description: str
    tags: List[str] = Field(default_factory=list)
    confidence: int = 0


class IconMetadataResult(BaseModel):
    """Icon metadata plus the raw exchange with the model, for auditing."""

    metadata: IconMetadata
    success: bool
    error: Optional[str] = None
    raw_response: Optional[str] = None
    prompt: Optional[str] = None
    usage: Optional[GenerationMetadata] = None
