"""
Content analysis for SEO generation.

Pages are built from a list of typed layout blocks; posts carry a rich-text
editor tree (a ``root`` node with nested ``children``). This module projects
both shapes into a ContentContext: the document's title-like fields plus a plain
text summary bounded to a character budget so prompts never grow unbounded.

Extraction is driven by two dispatch tables:
    - NODE_HANDLERS maps rich-text node kinds to handlers that emit fragments
    - BLOCK_EXTRACTORS maps layout block kinds to functions returning fragments

Unknown node and block kinds are tolerated: unknown nodes are traversed for
their children and unknown blocks contribute their ``heading``/``text`` fields.
Malformed input (missing children, non-mapping nodes, wrong field types) is
skipped rather than raised, so analysis never blocks generation.

Python Learning Notes:
    - Dictionaries of functions replace long if/elif chains
    - isinstance(x, Mapping) accepts dicts and any other mapping type
    - Recursion walks trees whose depth is not known in advance
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..models import ContentContext, HeroImage, TocEntry
from ..utils import get_logger
from ..utils.text import truncate_content

logger = get_logger(__name__)

DEFAULT_MAX_CONTENT_TOKENS = 2000

Node = Mapping[str, Any]
NodeHandler = Callable[[Node, List[str]], None]
BlockExtractor = Callable[[Node], List[str]]


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _children(node: Node) -> List[Node]:
    children = node.get("children")
    if not isinstance(children, list):
        return []
    return [child for child in children if isinstance(child, Mapping)]


def _inline_text(node: Node, skip: Tuple[str, ...] = ()) -> str:
    """Concatenate the text of every text node below ``node``."""
    parts: List[str] = []
    for child in _children(node):
        kind = child.get("type")
        if kind in skip:
            continue
        if kind == "text":
            parts.append(_string(child.get("text")))
        elif kind == "linebreak":
            parts.append("\n")
        else:
            parts.append(_inline_text(child))
    return "".join(parts)


def _handle_text(node: Node, fragments: List[str]) -> None:
    text = _string(node.get("text"))
    if text:
        fragments.append(text)


def _handle_heading(node: Node, fragments: List[str]) -> None:
    text = _inline_text(node)
    if text:
        fragments.append(f"\n{text}\n")


def _handle_paragraph(node: Node, fragments: List[str]) -> None:
    text = _inline_text(node)
    if text:
        fragments.append(text)


def _handle_list(node: Node, fragments: List[str]) -> None:
    for item in _children(node):
        if item.get("type") == "list":
            _handle_list(item, fragments)
            continue

        text = _inline_text(item, skip=("list",))
        if text:
            fragments.append(f"• {text}")

        # Nested lists keep one bullet per item
        for child in _children(item):
            if child.get("type") == "list":
                _handle_list(child, fragments)


def _handle_quote(node: Node, fragments: List[str]) -> None:
    text = _inline_text(node)
    if text:
        fragments.append(f'"{text}"')


# Container kinds emit their inline text and are not descended into again
NODE_HANDLERS: Dict[str, NodeHandler] = {
    "text": _handle_text,
    "heading": _handle_heading,
    "paragraph": _handle_paragraph,
    "list": _handle_list,
    "listitem": _handle_paragraph,
    "listItem": _handle_paragraph,
    "quote": _handle_quote,
}


def _traverse(node: Any, fragments: List[str]) -> None:
    if not isinstance(node, Mapping):
        return

    handler = NODE_HANDLERS.get(node.get("type"))
    if handler is not None:
        handler(node, fragments)
        return

    for child in _children(node):
        _traverse(child, fragments)


def extract_rich_text(data: Any) -> str:
    """
    Flatten a rich-text editor tree into plain text.

    Accepts either the stored field value (``{"root": node}``) or a bare node.
    Headings are set off with newlines, list items get a bullet and quotes are
    wrapped in double quotes. Fragments are joined with single spaces.

    Args:
        data (Any): Rich-text field value or node.

    Returns:
        str: Plain text, or "" when the input has no text.

    Example:
        >>> extract_rich_text({"root": {"type": "root", "children": [
        ...     {"type": "paragraph", "children": [{"type": "text", "text": "Hello"}]}
        ... ]}})
        'Hello'
    """
    if not isinstance(data, Mapping):
        return ""

    root = data.get("root", data)
    fragments: List[str] = []
    _traverse(root, fragments)

    return " ".join(fragments).strip()


def _cards(block: Node) -> List[str]:
    fragments: List[str] = []
    cards = block.get("cards")
    if not isinstance(cards, list):
        return fragments

    for card in cards:
        if not isinstance(card, Mapping):
            continue
        for field in ("title", "description"):
            value = _string(card.get(field))
            if value:
                fragments.append(value)
    return fragments


def _labelled_heading(block: Node, label: str) -> List[str]:
    heading = _string(block.get("heading"))
    return [f"{label}: {heading}"] if heading else []


def _rich_text_fragment(value: Any, prefix: str = "") -> List[str]:
    text = extract_rich_text(value)
    return [f"{prefix}{text}"] if text else []


def _extract_hero_heading(block: Node) -> List[str]:
    fragments = _labelled_heading(block, "HERO")
    subheading = _string(block.get("subheading"))
    if subheading:
        fragments.append(subheading)
    return fragments


def _extract_content(block: Node) -> List[str]:
    fragments: List[str] = []
    columns = block.get("columns")
    if isinstance(columns, list):
        for column in columns:
            if isinstance(column, Mapping):
                fragments.extend(_rich_text_fragment(column.get("richText")))
    return fragments


def _extract_cta(block: Node) -> List[str]:
    return _labelled_heading(block, "CTA") + _rich_text_fragment(block.get("richText"))


def _extract_features(block: Node) -> List[str]:
    return _labelled_heading(block, "FEATURES") + _cards(block)


def _extract_card_grid(block: Node) -> List[str]:
    return _labelled_heading(block, "CARDS") + _cards(block)


def _extract_accordion(block: Node) -> List[str]:
    fragments = _labelled_heading(block, "FAQ")
    items = block.get("items")
    if not isinstance(items, list):
        return fragments

    for item in items:
        if not isinstance(item, Mapping):
            continue
        question = _string(item.get("question"))
        if question:
            fragments.append(f"Q: {question}")
        fragments.extend(_rich_text_fragment(item.get("answer"), prefix="A: "))
    return fragments


def _skip_block(block: Node) -> List[str]:
    return []


def _extract_unknown(block: Node) -> List[str]:
    return [
        value
        for value in (_string(block.get("heading")), _string(block.get("text")))
        if value
    ]


BLOCK_EXTRACTORS: Dict[str, BlockExtractor] = {
    "heroHeading": _extract_hero_heading,
    "content": _extract_content,
    "cta": _extract_cta,
    "features": _extract_features,
    "cardGrid": _extract_card_grid,
    "accordion": _extract_accordion,
    # Post listings say little about the page itself
    "latestPosts": _skip_block,
    "archive": _skip_block,
}


def extract_layout_blocks(blocks: Any) -> str:
    """
    Extract readable text from a page's layout blocks.

    Each block kind has an extractor in BLOCK_EXTRACTORS; section headings are
    labelled (HERO, CTA, FEATURES, CARDS, FAQ) so the model can tell page
    structure apart from body copy.

    Args:
        blocks (Any): The page's ``layout`` list.

    Returns:
        str: Fragments in block order joined with blank lines.
    """
    if not isinstance(blocks, list):
        return ""

    fragments: List[str] = []
    for block in blocks:
        if not isinstance(block, Mapping):
            continue
        extractor = BLOCK_EXTRACTORS.get(block.get("blockType"), _extract_unknown)
        fragments.extend(extractor(block))

    return "\n\n".join(fragments)


def _project_categories(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []

    categories: List[str] = []
    for category in raw:
        if isinstance(category, Mapping):
            title = category.get("title")
            if title:
                categories.append(str(title))
        elif category:
            categories.append(str(category))
    return categories


def _project_hero_image(raw: Any) -> Optional[HeroImage]:
    if not raw:
        return None
    if not isinstance(raw, Mapping):
        # An unpopulated relation id carries no alt text or URL
        return HeroImage()
    return HeroImage(alt=_string(raw.get("alt")), url=_string(raw.get("url")))


def _project_table_of_contents(raw: Any) -> Optional[List[TocEntry]]:
    if not isinstance(raw, list):
        return None
    return [
        TocEntry(title=_string(item.get("title")), href=_string(item.get("href")))
        if isinstance(item, Mapping)
        else TocEntry()
        for item in raw
    ]


def analyze_content(
    document: Mapping[str, Any], max_tokens: int = DEFAULT_MAX_CONTENT_TOKENS
) -> ContentContext:
    """
    Analyze a page or post and build its content context.

    Field projection is mechanical: title, subtitle, categories, hero image and
    table of contents are copied when present. The summary comes from the
    ``layout`` blocks when the document has them (pages) and from the ``content``
    rich-text tree otherwise (posts), then is bounded by ``truncate_content``.

    Args:
        document (Mapping[str, Any]): Page or post document.
        max_tokens (int): Approximate token budget for the summary. The summary
            never exceeds ``min(max_tokens * 4, 10000)`` characters.

    Returns:
        ContentContext: Projection of the document for prompt assembly.

    Example:
        >>> context = analyze_content({"title": "Pricing", "layout": [
        ...     {"blockType": "heroHeading", "heading": "Simple plans"}
        ... ]})
        >>> context.content_summary
        'HERO: Simple plans'
    """
    if not isinstance(document, Mapping):
        logger.warning("Content analysis skipped: document is not a mapping")
        return ContentContext()

    summary: Optional[str] = None
    layout = document.get("layout")
    if isinstance(layout, list):
        logger.debug(f"Analyzing {len(layout)} layout blocks")
        summary = truncate_content(extract_layout_blocks(layout), max_tokens)
    elif document.get("content"):
        logger.debug("Analyzing rich text content")
        summary = truncate_content(extract_rich_text(document.get("content")), max_tokens)

    context = ContentContext(
        title=_string(document.get("title")) or None,
        subtitle=_string(document.get("subtitle")) or None,
        categories=_project_categories(document.get("categories")),
        hero_image=_project_hero_image(document.get("heroImage")),
        table_of_contents=_project_table_of_contents(document.get("tableOfContents")),
        content_summary=summary,
    )

    logger.debug(
        f"Content analysis complete: {len(summary or '')} characters of summary"
    )
    return context
