"""
Document processing modules for metagen.

This package turns CMS documents into prompt text. It holds no state and
performs no I/O, so everything here can run before a backend is contacted.

The processors package includes:
    - content_analyzer: Projects pages (layout blocks) and posts (rich text)
      into a ContentContext with a bounded plain-text summary
    - prompts: Builds the exact prompt for each generation operation

Example Usage:
    from metagen.processors import analyze_content, build_prompt_context

    context = analyze_content(page, max_tokens=2000)
    print(build_prompt_context(context, ["web design"], priority="keywords"))

Python Learning Notes:
    - __all__ controls what's exported with "from processors import *"
    - Relative imports (.) reference modules in the same package
"""

from .content_analyzer import analyze_content, extract_layout_blocks, extract_rich_text
from .prompts import (
    build_alt_tag_prompt,
    build_icon_metadata_prompt,
    build_prompt_context,
    build_seo_description_prompt,
    build_seo_title_prompt,
)

__all__ = [
    # Content analysis
    "analyze_content",
    "extract_layout_blocks",
    "extract_rich_text",
    # Prompt assembly
    "build_alt_tag_prompt",
    "build_prompt_context",
    "build_seo_title_prompt",
    "build_seo_description_prompt",
    "build_icon_metadata_prompt",
]
