#!/usr/bin/env python3
"""
Example demonstrating settings loaders and offline metagen features.

Everything here runs without an API key: settings are built in memory, the
document is analyzed locally and the alt tag call shows the filename fallback
that upload hooks rely on when AI generation is switched off.
"""

import asyncio

from metagen.generators import generate_alt_tag, generate_alt_tag_with_fallback
from metagen.processors import analyze_content
from metagen.settings import settings_to_dict, static_settings_loader

SETTINGS = {
    "provider": "openai",
    "model": "gpt-4o",
    "altTag": {"enabled": False, "fallbackToFilename": True},
    "seoMeta": {"enabled": True, "brandName": "Acme", "contentWeight": "keywords"},
}

PAGE = {
    "title": "Pricing",
    "categories": [{"title": "SaaS"}],
    "layout": [
        {"blockType": "heroHeading", "heading": "Simple plans", "subheading": "For every team"},
        {
            "blockType": "accordion",
            "heading": "Questions",
            "items": [{"question": "Is there a free trial?"}],
        },
    ],
}


async def main():
    """Demonstrate settings and offline generation paths."""

    print("=" * 60)
    print("metagen Settings Examples")
    print("=" * 60)

    loader = static_settings_loader(SETTINGS)

    # Example 1: Settings with defaults filled in
    print("\n1. Effective settings:")
    settings = await loader()
    data = settings_to_dict(settings)
    print(f"   Model: {data['model']}")
    print(f"   Alt text max length: {data['altTag']['maxLength']}")
    print(f"   Title max length: {data['seoMeta']['titleMaxLength']}")

    # Example 2: Disabled features fail without contacting a backend
    print("\n2. Alt text with the feature disabled:")
    result = await generate_alt_tag("https://cdn.example.com/team.jpg", loader)
    print(f"   Success: {result.success}")
    print(f"   Error: {result.error}")

    # Example 3: Upload hooks fall back to the filename
    print("\n3. Filename fallback:")
    alt_text = await generate_alt_tag_with_fallback(
        "https://cdn.example.com/team.jpg", "Team_Offsite-2024_01.jpg", loader
    )
    print(f"   Alt text: {alt_text!r}")

    # Example 4: What SEO prompts see for a page
    print("\n4. Content analysis:")
    context = analyze_content(PAGE, max_tokens=100)
    print(f"   Title: {context.title}")
    print(f"   Categories: {context.categories}")
    print(f"   Summary: {context.content_summary!r}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
