"""
Prompt assembly for every generation operation.

Each builder turns a frozen generation configuration into the exact text sent to
the model. Builders are pure functions: the same configuration always yields the
same prompt, which keeps prompts easy to test and to record in the audit log.

Prompt anatomy:
    1. The editor-configured system primer
    2. A hard length constraint the model is told to respect
    3. Optional context (page, categories, keywords, content summary)
    4. A closing instruction demanding a bare answer with no commentary

Python Learning Notes:
    - Building a list of parts and joining once avoids repeated string copies
    - list.insert(0, x) puts an element at the front of a list
    - Triple-quoted f-strings keep multi-line templates readable
"""

from typing import List, Optional, Sequence

from ..models import (
    AltTagConfig,
    ContentContext,
    ContentPriority,
    IconMetadataConfig,
    SeoDescriptionConfig,
    SeoTitleConfig,
)

ALT_TAG_ANSWER_INSTRUCTION = (
    'Respond with ONLY the alt text, no explanations, no quotes, no prefix like "Alt text:".'
)
SEO_ANSWER_INSTRUCTION = "Respond with ONLY the {kind}, no explanations and no quotes."
ICON_SYSTEM_MESSAGE = (
    "You are an expert in icon design and categorization. Always respond with valid JSON."
)


def build_alt_tag_prompt(config: AltTagConfig) -> str:
    """
    Build the instruction text sent alongside an image.

    The context block is only added when the configuration asks for it and a
    context is present; empty context fields are skipped.

    Args:
        config (AltTagConfig): Alt text configuration for this call.

    Returns:
        str: Prompt text for the multimodal message.

    Example:
        >>> config = AltTagConfig(system_primer="Describe.", max_length=80)
        >>> print(build_alt_tag_prompt(config))
        Describe.
        <BLANKLINE>
        IMPORTANT: Your response must be 80 characters or less.
        <BLANKLINE>
        Respond with ONLY the alt text, no explanations, no quotes, no prefix like "Alt text:".
    """
    prompt = config.system_primer
    prompt += f"\n\nIMPORTANT: Your response must be {config.max_length} characters or less."

    if config.include_context and config.context:
        context = config.context
        prompt += "\n\nContext:"
        if context.page_title:
            prompt += f"\n- Page: {context.page_title}"
        if context.category:
            prompt += f"\n- Category: {context.category}"
        if context.tags:
            prompt += f"\n- Tags: {', '.join(context.tags)}"

    prompt += f"\n\n{ALT_TAG_ANSWER_INSTRUCTION}"
    return prompt


def build_prompt_context(
    context: ContentContext,
    keywords: Sequence[str],
    guidance: Optional[str] = None,
    priority: ContentPriority = "balanced",
) -> str:
    """
    Render a content context as the informational block of an SEO prompt.

    Lines appear in a fixed order: title, subtitle, categories, keywords,
    guidance, content summary and themes. When ``priority`` is "keywords" the
    keyword line moves to the very top and is phrased as the primary target;
    otherwise it follows the categories.

    Args:
        context (ContentContext): Output of the content analyzer.
        keywords (Sequence[str]): Editor-provided target keywords.
        guidance (Optional[str]): Free-form page-specific instruction.
        priority (ContentPriority): "keywords", "balanced" or "content".

    Returns:
        str: Lines joined with newlines; empty when there is nothing to say.
    """
    parts: List[str] = []

    if context.title:
        parts.append(f"Page Title: {context.title}")
    if context.subtitle:
        parts.append(f"Subtitle: {context.subtitle}")
    if context.categories:
        parts.append(f"Categories: {', '.join(context.categories)}")

    if keywords:
        keyword_list = ", ".join(keywords)
        if priority == "keywords":
            parts.insert(0, f"PRIMARY TARGET KEYWORDS: {keyword_list}")
        else:
            parts.append(f"Target Keywords: {keyword_list}")

    if guidance and guidance.strip():
        parts.append(f"\nSpecific Guidance: {guidance}")
    if context.content_summary:
        parts.append(f"\nPage Content:\n{context.content_summary}")
    if context.extracted_themes:
        parts.append(f"\nKey Themes: {', '.join(context.extracted_themes)}")

    return "\n".join(parts)


def _seo_context_block(
    content_context: Optional[ContentContext],
    keywords: Sequence[str],
    guidance: Optional[str],
    priority: ContentPriority,
) -> str:
    # Keywords and guidance still apply when no document was analyzed
    return build_prompt_context(
        content_context or ContentContext(), keywords, guidance, priority
    )


def _join_sections(*sections: str) -> str:
    return "\n\n".join(section for section in sections if section)


def build_seo_title_prompt(
    config: SeoTitleConfig, priority: ContentPriority = "balanced"
) -> str:
    """Build the prompt for an SEO meta title."""
    instruction = f"Generate a compelling SEO meta title (max {config.max_length} characters)."
    if config.include_brand:
        instruction += " Include brand name at the end if appropriate."
    instruction += " " + SEO_ANSWER_INSTRUCTION.format(kind="title")

    context_block = _seo_context_block(
        config.content_context, config.keywords, config.guidance, priority
    )
    return _join_sections(config.system_primer, context_block, instruction)


def build_seo_description_prompt(
    config: SeoDescriptionConfig, priority: ContentPriority = "balanced"
) -> str:
    """Build the prompt for an SEO meta description."""
    instruction = (
        "Generate a compelling SEO meta description between "
        f"{config.min_length}-{config.max_length} characters. "
        + SEO_ANSWER_INSTRUCTION.format(kind="description")
    )

    context_block = _seo_context_block(
        config.content_context, config.keywords, config.guidance, priority
    )
    return _join_sections(config.system_primer, context_block, instruction)


def build_icon_metadata_prompt(icon_name: str, config: IconMetadataConfig) -> str:
    """
    Build the JSON-mode prompt asking for icon search metadata.

    The model only sees the icon's name, so the prompt asks it to reason from
    common icon usage patterns.
    """
    categories = ", ".join(config.categories)

    return f"""{config.system_primer}

Icon name: "{icon_name}"

Based on the icon name and common icon usage patterns, provide:

1. Keywords ({config.max_keywords} or fewer relevant search terms, including synonyms and related concepts)
2. Category (choose ONE from: {categories})
3. Brief description (max {config.description_max_words} words, describing what the icon represents and its common use cases)
4. Tags ({config.max_tags} or fewer additional categorization tags)

Respond in JSON format:
{{
  "keywords": ["keyword1", "keyword2", ...],
  "category": "category_name",
  "description": "Brief description",
  "tags": ["tag1", "tag2", ...],
  "confidence": 85
}}

The confidence score (0-100) indicates how certain you are about the categorization."""
