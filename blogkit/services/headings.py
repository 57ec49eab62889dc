"""Heading enrichment: stable anchor ids and self-links.

Both passes run after sanitization. Everything they add (an ``id`` and an
``<a href="#id">``) is already permitted by the default sanitize schema.
"""

from bs4 import BeautifulSoup, Tag

from blogkit.services.normalizer import HeadingSlugger

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


def add_heading_ids(root: Tag) -> Tag:
    """Give every heading below *root* an id unique within the document.

    Every id already in the document is reserved before any slug is
    generated, so a heading such as the footnotes label keeps its id. A
    heading whose id repeats one seen earlier is renamed; headings without an
    id get one derived from their text.
    """
    slugger = HeadingSlugger()
    kept = set()

    for element in root.find_all(id=True):
        value = str(element["id"])
        if value and slugger.reserve(value):
            kept.add(id(element))

    for heading in root.find_all(HEADING_TAGS):
        if id(heading) not in kept:
            heading["id"] = slugger.slug(heading.get_text())
    return root


def autolink_headings(root: BeautifulSoup) -> BeautifulSoup:
    """Wrap the content of each heading with an id in a link to itself.

    Links already inside a heading are unwrapped (their text is kept), since
    anchors cannot nest.
    """
    for heading in root.find_all(HEADING_TAGS):
        anchor_id = heading.get("id")
        if not anchor_id:
            continue
        for inner in heading.find_all("a"):
            inner.unwrap()
        link = root.new_tag("a", attrs={"href": f"#{anchor_id}"})
        for child in list(heading.contents):
            link.append(child)
        heading.append(link)
    return root
