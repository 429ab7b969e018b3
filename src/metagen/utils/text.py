"""
Text post-processing helpers shared by every generation path.

Models rarely answer with exactly the string an editor wants: they wrap answers
in quotes, open with "Image of ...", overrun the length limit or end alt text
with a period that screen readers pause on. The functions here normalize those
answers and enforce the hard length limits.

Python Learning Notes:
    - re.compile() builds a pattern once at import time so repeated calls are cheap
    - str.rfind() returns -1 when the substring is absent
    - Pure functions (no I/O, no state) are trivial to unit test
"""

import re
from typing import List, Optional

# Share of the window in which a word boundary is preferred over a hard cut
WORD_BOUNDARY_RATIO = 0.8
CHARS_PER_TOKEN = 4
MAX_CONTENT_LENGTH = 10000
ELLIPSIS = "..."

REDUNDANT_PHRASES = (
    re.compile(r"^(an? )?(image|picture|photo|photograph) (of|showing) ", re.IGNORECASE),
    re.compile(r"^(an? )?(image|picture|photo|photograph) ", re.IGNORECASE),
    re.compile(r"^(this is|here is|this shows) ", re.IGNORECASE),
)

_QUOTE_CHARS = "\"'"


def truncate_at_word(text: str, max_length: int) -> str:
    """
    Truncate text to at most max_length characters, preferring a word boundary.

    The cut backs off to the last space only when that space lies in the final
    20% of the window; otherwise a hard cut keeps as much text as possible.

    Args:
        text (str): Text to truncate.
        max_length (int): Maximum number of characters in the result.

    Returns:
        str: The original text when it already fits, else the truncated text
            with surrounding whitespace removed.

    Example:
        >>> truncate_at_word("Sunset over the quiet harbor", 18)
        'Sunset over the'
    """
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")

    if last_space > max_length * WORD_BOUNDARY_RATIO:
        return truncated[:last_space].strip()

    return truncated.strip()


def truncate_content(
    content: str,
    max_tokens: int,
    ceiling: int = MAX_CONTENT_LENGTH,
    marker: str = ELLIPSIS,
) -> str:
    """
    Bound extracted document text to a character budget for prompting.

    The budget is ``min(max_tokens * 4, ceiling)`` (roughly four characters per
    token). Over-budget content is cut so that the text plus the marker still
    fits the budget. The cut lands on a word boundary when the nearest
    preceding space is within the last 20% of the window, otherwise it is a hard
    cut; the marker is appended either way.

    Args:
        content (str): Plain text extracted by the content analyzer.
        max_tokens (int): Approximate token allowance for the summary.
        ceiling (int): Absolute character ceiling regardless of max_tokens.
        marker (str): Appended to truncated text.

    Returns:
        str: Text whose length never exceeds the budget.
    """
    max_chars = max(0, min(max_tokens * CHARS_PER_TOKEN, ceiling))

    if len(content) <= max_chars:
        return content
    if max_chars <= len(marker):
        return content[:max_chars]

    window = max_chars - len(marker)
    truncated = content[:window]
    last_space = truncated.rfind(" ")

    if last_space > window * WORD_BOUNDARY_RATIO:
        return truncated[:last_space] + marker

    return truncated + marker


def strip_wrapping_quotes(text: str) -> str:
    """Remove one pair of matching single or double quotes around text."""
    cleaned = text.strip()
    for quote in _QUOTE_CHARS:
        if len(cleaned) >= 2 and cleaned.startswith(quote) and cleaned.endswith(quote):
            cleaned = cleaned[1:-1].strip()
    return cleaned


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def clean_alt_text(text: str) -> str:
    """
    Normalize model output into alt text.

    Steps, in order: trim, strip wrapping quotes, drop redundant lead-ins such as
    "Image of" or "This shows" (case-insensitive), strip trailing periods and
    capitalize the first character.

    Example:
        >>> clean_alt_text('"a photo of golden retriever puppies on grass."')
        'Golden retriever puppies on grass'
    """
    cleaned = strip_wrapping_quotes(text)

    for phrase in REDUNDANT_PHRASES:
        cleaned = phrase.sub("", cleaned)

    # Screen readers pause on the final period
    cleaned = re.sub(r"\.+$", "", cleaned.strip()).strip()

    return capitalize_first(cleaned)


def clean_filename_for_alt(filename: str) -> str:
    """
    Derive readable alt text from an uploaded file's name.

    The extension is removed, hyphens and underscores become spaces, digit runs
    at the start and end are dropped and every word is title-cased.

    Example:
        >>> clean_filename_for_alt("My_Great-Photo_02.jpg")
        'My Great Photo'
    """
    cleaned = re.sub(r"\.[^/.]+$", "", filename)
    cleaned = re.sub(r"[-_]", " ", cleaned)
    cleaned = re.sub(r"^\d+\s*", "", cleaned.strip())
    cleaned = re.sub(r"\s*\d+$", "", cleaned)

    words = [word[:1].upper() + word[1:].lower() for word in cleaned.split()]
    return " ".join(words)


def apply_brand_suffix(title: str, brand_name: Optional[str], max_length: int) -> str:
    """
    Append " | <brand>" to a title without exceeding max_length.

    The title is shortened at a word boundary to make room for the suffix.
    Titles that already mention the brand are returned unchanged, as are
    titles when no brand is configured or the suffix alone would not fit.
    A blank title stays blank so it never turns into a bare suffix.
    """
    if not title.strip():
        return ""

    if not brand_name or brand_name in title:
        return title

    suffix = f" | {brand_name}"
    available = max_length - len(suffix)
    if available <= 0:
        return title

    if len(title) > available:
        title = truncate_at_word(title, available)

    return title + suffix


def parse_keywords(keywords_text: Optional[str]) -> List[str]:
    """
    Parse keywords typed by an editor.

    Keywords may be separated by newlines or commas. Blank entries are dropped
    and duplicates are removed case-insensitively, keeping the first spelling.

    Example:
        >>> parse_keywords("SEO, seo\\nweb design")
        ['SEO', 'web design']
    """
    if not keywords_text or not isinstance(keywords_text, str):
        return []

    seen = set()
    keywords: List[str] = []
    for raw in re.split(r"[\n,]", keywords_text):
        keyword = raw.strip()
        if not keyword or keyword.lower() in seen:
            continue
        seen.add(keyword.lower())
        keywords.append(keyword)

    return keywords
