"""
Command-line interface for metagen.

Usage:
    metagen alt-tag IMAGE_URL          # Generate image alt text
    metagen seo-title DOCUMENT         # Generate an SEO meta title
    metagen seo-description DOCUMENT   # Generate an SEO meta description
    metagen icon NAME                  # Suggest icon search metadata
    metagen usage                      # Summarize the audit log
"""

from .main import main

__all__ = ["main"]
