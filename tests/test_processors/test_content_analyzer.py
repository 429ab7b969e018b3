"""
Unit tests for content analysis of pages and posts.

Test Categories:
    - Rich text: node kinds, nesting, malformed trees
    - Layout blocks: every known block kind plus unknown and skipped kinds
    - Document projection: fields, summary source, budget

Python Learning Notes:
    - Helper functions build nested fixtures without repeating boilerplate
    - Tests on malformed input verify that analysis never raises
"""

from metagen.models import ContentContext, HeroImage, TocEntry
from metagen.processors.content_analyzer import (
    analyze_content,
    extract_layout_blocks,
    extract_rich_text,
)


def text(value):
    return {"type": "text", "text": value}


def paragraph(*children):
    return {"type": "paragraph", "children": list(children)}


def rich_text(*children):
    return {"root": {"type": "root", "children": list(children)}}


class TestExtractRichText:
    """Tests for flattening rich-text editor trees."""

    def test_node_kinds(self):
        tree = rich_text(
            {"type": "heading", "tag": "h2", "children": [text("Intro")]},
            paragraph(text("Hello "), {"type": "bold", "children": [text("world")]}),
            {
                "type": "list",
                "children": [
                    {"type": "listitem", "children": [text("One")]},
                    {"type": "listitem", "children": [text("Two")]},
                ],
            },
            {"type": "quote", "children": [text("Wise words")]},
        )

        assert extract_rich_text(tree) == 'Intro\n Hello world • One • Two "Wise words"'

    def test_nested_list_items_get_their_own_bullets(self):
        tree = rich_text(
            {
                "type": "list",
                "children": [
                    {"type": "listitem", "children": [text("Parent")]},
                    {
                        "type": "listitem",
                        "children": [
                            {
                                "type": "list",
                                "children": [
                                    {"type": "listitem", "children": [text("Child one")]},
                                    {"type": "listitem", "children": [text("Child two")]},
                                ],
                            }
                        ],
                    },
                ],
            }
        )

        assert extract_rich_text(tree) == "• Parent • Child one • Child two"

    def test_item_text_and_nested_list(self):
        nested = {"type": "list", "children": [{"type": "listitem", "children": [text("Sub")]}]}
        tree = rich_text(
            {"type": "list", "children": [{"type": "listitem", "children": [text("Top"), nested]}]}
        )

        assert extract_rich_text(tree) == "• Top • Sub"

    def test_same_tree_gives_same_text(self):
        tree = rich_text(
            {"type": "heading", "children": [text("Intro")]},
            paragraph(text("Body "), {"type": "link", "children": [text("link")]}),
            {"type": "quote", "children": [text("Quote")]},
        )

        assert extract_rich_text(tree) == extract_rich_text(tree)

    def test_linebreak_inside_paragraph(self):
        tree = rich_text(paragraph(text("a"), {"type": "linebreak"}, text("b")))

        assert extract_rich_text(tree) == "a\nb"

    def test_unknown_nodes_are_traversed(self):
        tree = rich_text({"type": "callout", "children": [paragraph(text("Inside"))]})

        assert extract_rich_text(tree) == "Inside"

    def test_bare_node_is_accepted(self):
        assert extract_rich_text(paragraph(text("Bare"))) == "Bare"

    def test_malformed_input(self):
        assert extract_rich_text(None) == ""
        assert extract_rich_text("plain string") == ""
        assert extract_rich_text({"root": {"type": "root", "children": "oops"}}) == ""
        assert extract_rich_text(rich_text("not a node", paragraph(text("ok")))) == "ok"


class TestExtractLayoutBlocks:
    """Tests for page layout block extraction."""

    def test_all_block_kinds(self):
        blocks = [
            {"blockType": "heroHeading", "heading": "Simple plans", "subheading": "For every team"},
            {"blockType": "content", "columns": [{"richText": rich_text(paragraph(text("Body copy")))}]},
            {
                "blockType": "cta",
                "heading": "Start today",
                "richText": rich_text(paragraph(text("No card needed"))),
            },
            {
                "blockType": "features",
                "heading": "Why us",
                "cards": [{"title": "Fast", "description": "Very fast"}],
            },
            {"blockType": "cardGrid", "heading": "Plans", "cards": [{"title": "Pro"}, "junk"]},
            {
                "blockType": "accordion",
                "heading": "Questions",
                "items": [
                    {
                        "question": "Is there a trial?",
                        "answer": rich_text(paragraph(text("Yes, 14 days"))),
                    }
                ],
            },
            {"blockType": "latestPosts", "heading": "Ignored"},
            {"blockType": "archive", "heading": "Also ignored"},
            {"blockType": "banner", "heading": "Sale", "text": "50% off"},
            "junk",
        ]

        assert extract_layout_blocks(blocks).split("\n\n") == [
            "HERO: Simple plans",
            "For every team",
            "Body copy",
            "CTA: Start today",
            "No card needed",
            "FEATURES: Why us",
            "Fast",
            "Very fast",
            "CARDS: Plans",
            "Pro",
            "FAQ: Questions",
            "Q: Is there a trial?",
            "A: Yes, 14 days",
            "Sale",
            "50% off",
        ]

    def test_blocks_with_missing_fields(self):
        blocks = [
            {"blockType": "heroHeading"},
            {"blockType": "content", "columns": None},
            {"blockType": "accordion", "items": "oops"},
        ]

        assert extract_layout_blocks(blocks) == ""

    def test_non_list_input(self):
        assert extract_layout_blocks(None) == ""


class TestAnalyzeContent:
    """Tests for the document projection."""

    def test_page_projection(self):
        document = {
            "title": "Pricing",
            "subtitle": "Plans for every team",
            "categories": [{"title": "SaaS"}, "Tools", None, {"id": 3}],
            "heroImage": {"alt": "Team at work", "url": "/media/hero.jpg"},
            "tableOfContents": [{"title": "Intro", "href": "#intro"}],
            "layout": [{"blockType": "heroHeading", "heading": "Simple plans"}],
        }

        context = analyze_content(document)

        assert context.title == "Pricing"
        assert context.subtitle == "Plans for every team"
        assert context.categories == ["SaaS", "Tools"]
        assert context.hero_image == HeroImage(alt="Team at work", url="/media/hero.jpg")
        assert context.table_of_contents == [TocEntry(title="Intro", href="#intro")]
        assert context.content_summary == "HERO: Simple plans"
        assert context.extracted_themes is None

    def test_post_uses_rich_text_content(self):
        document = {"title": "Release notes", "content": rich_text(paragraph(text("New editor")))}

        assert analyze_content(document).content_summary == "New editor"

    def test_layout_wins_over_content(self):
        document = {
            "layout": [{"blockType": "banner", "heading": "From layout"}],
            "content": rich_text(paragraph(text("From content"))),
        }

        assert analyze_content(document).content_summary == "From layout"

    def test_no_body(self):
        context = analyze_content({"title": "Empty"})

        assert context.content_summary is None
        assert context.categories == []
        assert context.hero_image is None
        assert context.table_of_contents is None

    def test_unpopulated_hero_image(self):
        assert analyze_content({"heroImage": 42}).hero_image == HeroImage()

    def test_summary_respects_budget(self):
        document = {"layout": [{"blockType": "banner", "text": "lorem ipsum " * 500}]}

        summary = analyze_content(document, max_tokens=50).content_summary

        assert len(summary) <= 200
        assert summary.endswith("...")

    def test_analysis_is_repeatable(self):
        document = {
            "title": "Pricing",
            "categories": [{"title": "SaaS"}, "Tools"],
            "layout": [
                {"blockType": "heroHeading", "heading": "Simple plans", "subheading": "For teams"},
                {"blockType": "accordion", "heading": "FAQ", "items": [{"question": "Trial?"}]},
            ],
        }

        first = analyze_content(document)
        second = analyze_content(document)

        assert first.model_dump_json() == second.model_dump_json()

    def test_non_mapping_document(self):
        assert analyze_content(["not", "a", "document"]) == ContentContext()
