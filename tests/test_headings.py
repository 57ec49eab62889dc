"""Tests for heading slugs, ids and self-links."""

import pytest
from bs4 import BeautifulSoup

from blogkit.services.headings import add_heading_ids, autolink_headings
from blogkit.services.normalizer import FALLBACK_SLUG, HeadingSlugger, slugify
from blogkit.services.serializer import serialize


def _fragment(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestSlugify:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Introduction", "introduction"),
            ("Hello, World!", "hello-world"),
            ("  Leading and trailing  ", "leading-and-trailing"),
            ("snake_case_name", "snake-case-name"),
            ("What's new in 2.0?", "what-s-new-in-2-0"),
            ("Café au lait", "café-au-lait"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, text, expected):
        assert slugify(text) == expected


class TestHeadingSlugger:
    def test_repeats_get_numeric_suffixes(self):
        slugger = HeadingSlugger()
        assert [slugger.slug("Intro") for _ in range(3)] == ["intro", "intro-1", "intro-2"]

    def test_empty_text_uses_fallback(self):
        slugger = HeadingSlugger()
        assert slugger.slug("???") == FALLBACK_SLUG
        assert slugger.slug("") == f"{FALLBACK_SLUG}-1"

    def test_reserved_values_are_skipped(self):
        slugger = HeadingSlugger()
        assert slugger.reserve("intro") is True
        assert slugger.reserve("intro") is False
        assert slugger.slug("Intro") == "intro-1"

    def test_suffix_collision_with_literal_heading(self):
        slugger = HeadingSlugger()
        assert slugger.slug("Intro 1") == "intro-1"
        assert slugger.slug("Intro") == "intro"
        assert slugger.slug("Intro") == "intro-2"


class TestAddHeadingIds:
    def test_duplicate_headings(self):
        root = _fragment("<h2>Intro</h2><h2>Intro</h2>")
        add_heading_ids(root)
        assert [h["id"] for h in root.find_all("h2")] == ["intro", "intro-1"]

    def test_all_levels_get_ids(self):
        root = _fragment("".join(f"<h{n}>Level {n}</h{n}>" for n in range(1, 7)))
        add_heading_ids(root)
        assert [root.find(f"h{n}")["id"] for n in range(1, 7)] == [
            f"level-{n}" for n in range(1, 7)
        ]

    def test_heading_text_includes_nested_markup(self):
        root = _fragment("<h3>Using <code>pip</code> <em>safely</em></h3>")
        add_heading_ids(root)
        assert root.find("h3")["id"] == "using-pip-safely"

    def test_existing_heading_id_is_kept(self):
        root = _fragment('<h2 id="custom">Title</h2>')
        add_heading_ids(root)
        assert root.find("h2")["id"] == "custom"

    def test_ids_of_other_elements_are_not_reused(self):
        root = _fragment('<h2>Notes</h2><p id="notes">para</p>')
        add_heading_ids(root)
        assert root.find("h2")["id"] == "notes-1"

    def test_duplicate_existing_id_is_replaced(self):
        root = _fragment('<div id="setup"></div><h2 id="setup">Install steps</h2>')
        add_heading_ids(root)
        assert root.find("h2")["id"] == "install-steps"

    def test_later_heading_id_is_not_taken_by_earlier_slug(self):
        root = _fragment('<h2>Footnote label</h2><h2 id="footnote-label" class="sr-only">Footnotes</h2>')
        add_heading_ids(root)
        first, second = root.find_all("h2")
        assert first["id"] == "footnote-label-1"
        assert second["id"] == "footnote-label"

    def test_duplicate_heading_ids_rename_the_later_one(self):
        root = _fragment('<h2 id="x">One</h2><h2 id="x">Two</h2>')
        add_heading_ids(root)
        assert [h["id"] for h in root.find_all("h2")] == ["x", "two"]

    def test_empty_id_is_replaced(self):
        root = _fragment('<h2 id="">Empty</h2>')
        add_heading_ids(root)
        assert root.find("h2")["id"] == "empty"

    def test_ids_unique_across_document(self):
        html = "".join(
            f"<h2>{text}</h2>" for text in ["A", "a", "A!", "a-1", "", "", "Section", "A"]
        )
        root = _fragment(html + '<span id="a-2"></span>')
        add_heading_ids(root)
        ids = [tag["id"] for tag in root.find_all(id=True)]
        assert len(ids) == len(set(ids))


class TestAutolinkHeadings:
    def test_wraps_content_in_self_link(self):
        root = _fragment('<h2 id="intro">Intro <em>text</em></h2>')
        autolink_headings(root)
        assert serialize(root) == '<h2 id="intro"><a href="#intro">Intro <em>text</em></a></h2>'

    def test_heading_without_id_is_untouched(self):
        root = _fragment("<h2>Plain</h2>")
        autolink_headings(root)
        assert serialize(root) == "<h2>Plain</h2>"

    def test_nested_links_are_unwrapped(self):
        root = _fragment('<h2 id="docs">See <a href="https://example.com">the docs</a></h2>')
        autolink_headings(root)
        heading = root.find("h2")
        links = heading.find_all("a")
        assert len(links) == 1
        assert links[0]["href"] == "#docs"
        assert heading.get_text() == "See the docs"

    def test_ids_then_links(self):
        root = _fragment("<h1>Title</h1><p>body</p>")
        autolink_headings(add_heading_ids(root))
        assert serialize(root) == '<h1 id="title"><a href="#title">Title</a></h1><p>body</p>'
