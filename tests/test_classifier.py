"""Tests for classifier.classify and add_class."""

import pytest
from bs4 import BeautifulSoup

from blogkit.services.classifier import add_class, classify


def _classify(html: str) -> BeautifulSoup:
    # html.parser keeps the whitespace text nodes between blocks
    return classify(BeautifulSoup(html, "html.parser"))


class TestKeyTakeaways:
    def test_key_takeaways_blockquote(self):
        soup = _classify("<blockquote>\n<p>Key Takeaways: Do X, Y, Z</p>\n</blockquote>")
        assert soup.find("blockquote")["class"] == ["key-takeaways"]

    def test_prefix_is_case_sensitive(self):
        soup = _classify("<blockquote><p>key takeaways: lowercase</p></blockquote>")
        assert soup.find("blockquote").get("class") is None

    def test_nested_markup_is_flattened(self):
        soup = _classify("<blockquote><p><strong>Key Takeaways</strong></p><ul><li>one</li></ul></blockquote>")
        assert soup.find("blockquote")["class"] == ["key-takeaways"]


class TestCallouts:
    def test_pro_tip(self):
        soup = _classify("<blockquote>\n<p>Pro tip: always test twice</p>\n</blockquote>")
        assert soup.find("blockquote")["class"] == ["callout", "callout--tip"]

    @pytest.mark.parametrize(
        "lead_in, variant",
        [
            ("Key insight:", "callout--insight"),
            ("BOTTOM LINE:", "callout--bottom-line"),
            ("by the numbers:", "callout--stat"),
            ("Pro Tip:", "callout--tip"),
        ],
    )
    def test_variants_are_case_insensitive(self, lead_in, variant):
        soup = _classify(f"<blockquote><p>{lead_in} something</p></blockquote>")
        assert soup.find("blockquote")["class"] == ["callout", variant]

    def test_first_pattern_wins(self):
        soup = _classify("<blockquote><p>Key insight: Pro tip: both</p></blockquote>")
        assert soup.find("blockquote")["class"] == ["callout", "callout--insight"]

    def test_lead_in_must_start_the_text(self):
        soup = _classify("<blockquote><p>Remember, pro tip: later in text</p></blockquote>")
        assert soup.find("blockquote").get("class") is None

    def test_key_takeaways_takes_precedence(self):
        soup = _classify("<blockquote><p>Key Takeaways Pro tip: nope</p></blockquote>")
        assert soup.find("blockquote")["class"] == ["key-takeaways"]

    def test_paragraph_is_not_a_callout(self):
        soup = _classify("<p>Pro tip: not in a quote</p>")
        assert soup.find("p").get("class") is None


class TestTableOfContents:
    def test_contents_heading_and_list(self):
        soup = _classify('<h2 id="contents">Contents</h2>\n<ul>\n<li>One</li>\n</ul>')
        assert soup.find("h2")["class"] == ["toc-heading"]
        assert soup.find("ul")["class"] == ["toc"]

    def test_contents_followed_by_paragraph(self):
        soup = _classify("<h2>Contents</h2>\n<p>No list here</p>\n<ul><li>later</li></ul>")
        assert soup.find("h2")["class"] == ["toc-heading"]
        assert soup.find("p").get("class") is None
        assert soup.find("ul").get("class") is None

    def test_heading_text_is_trimmed_and_case_insensitive(self):
        soup = _classify("<h2><a href='#c'>  CONTENTS </a></h2><ul><li>x</li></ul>")
        assert soup.find("h2")["class"] == ["toc-heading"]
        assert soup.find("ul")["class"] == ["toc"]

    def test_only_exact_text_matches(self):
        soup = _classify("<h2>Table of Contents</h2><ul><li>x</li></ul>")
        assert soup.find("h2").get("class") is None
        assert soup.find("ul").get("class") is None

    def test_h3_contents_is_ignored(self):
        soup = _classify("<h3>Contents</h3><ul><li>x</li></ul>")
        assert soup.find("h3").get("class") is None

    def test_ordered_list_is_not_a_toc(self):
        soup = _classify("<h2>Contents</h2><ol><li>x</li></ol>")
        assert soup.find("ol").get("class") is None


class TestCiteableSnippet:
    def test_bold_led_paragraph_after_h2(self):
        soup = _classify("<h2>Why</h2>\n<p><strong>Because.</strong> More text.</p>")
        assert soup.find("p")["class"] == ["citeable-snippet"]

    def test_bold_paragraph_not_after_h2(self):
        soup = _classify("<h2>Why</h2>\n<p>Intro</p>\n<p><strong>Bold</strong> later</p>")
        assert all(p.get("class") is None for p in soup.find_all("p"))

    def test_first_child_must_be_strong(self):
        soup = _classify("<h2>Why</h2><p>Text then <strong>bold</strong></p>")
        assert soup.find("p").get("class") is None

    def test_leading_whitespace_text_blocks_the_match(self):
        soup = _classify("<h2>Why</h2><p> <strong>bold</strong></p>")
        assert soup.find("p").get("class") is None

    def test_emphasis_is_not_strong(self):
        soup = _classify("<h2>Why</h2><p><em>emph</em></p>")
        assert soup.find("p").get("class") is None

    def test_h3_does_not_trigger(self):
        soup = _classify("<h3>Why</h3><p><strong>Bold</strong></p>")
        assert soup.find("p").get("class") is None

    def test_contents_heading_also_checks_snippet(self):
        soup = _classify("<h2>Contents</h2><p><strong>Lead</strong> in</p>")
        assert soup.find("h2")["class"] == ["toc-heading"]
        assert soup.find("p")["class"] == ["citeable-snippet"]


class TestClassifyBehaviour:
    def test_existing_classes_are_kept(self):
        soup = _classify('<blockquote class="quote"><p>Pro tip: x</p></blockquote>')
        assert soup.find("blockquote")["class"] == ["quote", "callout", "callout--tip"]

    def test_nested_elements_are_visited(self):
        soup = _classify("<div><section><blockquote><p>Bottom line: x</p></blockquote></section></div>")
        assert soup.find("blockquote")["class"] == ["callout", "callout--bottom-line"]

    def test_content_is_unchanged(self):
        html = "<h2>Contents</h2>\n<ul><li>a</li></ul>\n<blockquote><p>Pro tip: x</p></blockquote>"
        before = BeautifulSoup(html, "html.parser")
        after = _classify(html)
        assert after.get_text() == before.get_text()
        assert [t.name for t in after.find_all(True)] == [t.name for t in before.find_all(True)]

    def test_running_twice_duplicates_classes(self):
        soup = classify(_classify("<blockquote><p>Pro tip: x</p></blockquote>"))
        classes = soup.find("blockquote")["class"]
        assert classes == ["callout", "callout--tip", "callout", "callout--tip"]
        assert len(classes) != len(set(classes))


class TestAddClass:
    def test_appends_to_empty(self):
        tag = BeautifulSoup("<p>x</p>", "html.parser").p
        add_class(tag, "a", "b")
        assert tag["class"] == ["a", "b"]

    def test_appends_after_existing(self):
        tag = BeautifulSoup('<p class="one two">x</p>', "html.parser").p
        add_class(tag, "three")
        assert tag["class"] == ["one", "two", "three"]

    def test_string_class_value_is_split(self):
        tag = BeautifulSoup("<p>x</p>", "html.parser").p
        tag["class"] = "one two"
        add_class(tag, "three")
        assert tag["class"] == ["one", "two", "three"]
