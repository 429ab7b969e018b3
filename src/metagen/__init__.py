"""
metagen: AI-generated content metadata for a headless CMS.

metagen turns structured content documents (pages built from typed layout
blocks, posts stored as rich-text trees) into short, constrained metadata:
image alt text, SEO meta titles, SEO meta descriptions and icon search
metadata. Text generation is delegated to interchangeable LLM backends that are
only ever reached through the provider registry.

Package Structure:
    - providers/: Provider interface, registry, OpenAI and custom endpoint
      backends, price tables
    - processors/: Content analysis and prompt assembly
    - generators/: Per-operation orchestrators and the filename fallback
    - database/: Audit log entries and their stores
    - utils/: Logging, environment configuration, text utilities, usage accounting
    - cli/: Command line entry point for manual runs

Environment Requirements:
    - Python 3.11+ (specified in pyproject.toml)
    - METAGEN_API_KEY or OPENAI_API_KEY when the settings record has no key
    - An AI settings record (YAML file or a loader backed by the CMS)

Python Learning Notes:
    - __version__: Special variable that defines the package version
    - Submodules are imported explicitly, e.g. metagen.generators

Version History:
    - 0.1.0: Alt text, SEO title/description and icon metadata generation
"""

__version__ = "0.1.0"
