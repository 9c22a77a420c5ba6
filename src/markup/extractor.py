"""
Structural extraction of generated markup into a DocumentModel.

The markup uses a small, shallow vocabulary: one <h1> title, <h2> section
headings, paragraphs, and single-level <ul>/<ol> lists. It is parsed into a
tree with BeautifulSoup and walked once in document order:

1. The first <h1> becomes the title
2. Everything before the first <h2> becomes the introduction
3. Each <h2> opens a section that runs up to the next <h2>
4. Within a section, content before the first list marker is the
   description and every <li> is an item

Fragments are collected as markup and cleaned with the normalizer, so line
breaks and paragraph ends survive into the extracted text.

Edge cases:
- An <ol> anywhere in a section makes its list numbered, even when <ul> or
  bare <li> markers are also present
- Sections without <li> items fall back to plain-text bullets ("-", "* ", "•")
- A list marker that yields no items is treated as no list at all
- Nested lists are flattened into the enclosing item's text
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from src.markup.models import DEFAULT_TITLE, DocumentModel, Section
from src.markup.normalizer import normalize, split_paragraphs


# Configure logging for the extractor module
logger = logging.getLogger(__name__)


LIST_TAGS = {"ol", "ul"}
# Closing one of these ends a paragraph
PARAGRAPH_TAGS = {
    "p", "div", "h1", "h3", "h4", "h5", "h6", "blockquote",
    "section", "article", "header", "footer", "pre", "table",
}
# Closing one of these ends a line
LINE_TAGS = {"li", "tr", "dt", "dd"}
VOID_TAGS = {"br", "hr", "img", "input", "meta", "link", "wbr", "col", "area", "source"}
# Never part of the document text
SKIP_TAGS = {"script", "style", "head", "title", "template"}
# Where an unclosed heading stops and the content it swallowed starts
STRUCTURAL_TAGS = PARAGRAPH_TAGS | LIST_TAGS | {"li", "h2"}

# Plain-text bullet lines emitted when the generator skips list markup
BULLET_LINE_PATTERN = re.compile(r"^(?:-\s*|\*\s+|•\s*)(.*)$")


def _inline_text(markup: str) -> str:
    """Normalize markup and fold it onto a single line."""
    return " ".join(split_paragraphs(normalize(markup)))


class _SectionDraft:
    """Markup collected for one section while walking the tree."""

    def __init__(self, heading_markup: str):
        self.heading_markup = heading_markup
        self.block: List[str] = []
        self.lead: List[str] = []
        self.items: List[str] = []
        self.has_ordered = False
        self.has_unordered = False

    @property
    def list_started(self) -> bool:
        return self.has_ordered or self.has_unordered

    def write(self, markup: str) -> None:
        self.block.append(markup)
        if not self.list_started:
            self.lead.append(markup)

    def build(self) -> Section:
        """
        Resolve the collected markup into a Section.

        Returns:
            Section with description, items and numbering resolved
        """
        heading = _inline_text(self.heading_markup)
        block_text = normalize("".join(self.block))

        if self.items:
            return Section(
                heading=heading,
                description=normalize("".join(self.lead)) or None,
                items=tuple(self.items),
                is_numbered=self.has_ordered,
            )

        # No <li> items: look for plain-text bullets
        items, leading = _textual_items(block_text)
        if items:
            return Section(
                heading=heading,
                description=leading or None,
                items=tuple(items),
                is_numbered=self.has_ordered,
            )

        return Section(heading=heading, description=block_text or None)


def _textual_items(text: str) -> Tuple[List[str], str]:
    """
    Extract list items from lines starting with a bullet glyph.

    Args:
        text: Normalized block text

    Returns:
        Tuple of (items, text of the lines preceding the first bullet line)
    """
    items: List[str] = []
    leading: List[str] = []

    for line in text.split("\n"):
        match = BULLET_LINE_PATTERN.match(line.strip())
        if match:
            item = match.group(1).strip()
            if item:
                items.append(item)
        elif not items:
            leading.append(line)

    return items, normalize("\n".join(leading))


def _node_markup(node: PageElement) -> str:
    """
    Markup of a single node; comments and other non-text strings are dropped.

    List elements are unwrapped with an explicit stack, so deeply nested
    lists cannot exhaust the interpreter's recursion limit.
    """
    parts: List[str] = []
    pending: List[PageElement] = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, Tag):
            if current.name in LIST_TAGS or current.name == "li":
                # Keep nested list entries apart when they are flattened
                parts.append("<br>")
                pending.extend(reversed(list(current.children)))
            else:
                parts.append(str(current))
        elif isinstance(current, NavigableString) and not isinstance(current, PreformattedString):
            # Re-escape so literal "<" in text is not mistaken for a tag
            parts.append(current.output_ready())
    return "".join(parts)


def _split_heading(tag: Tag) -> Tuple[str, List[PageElement]]:
    """
    Split a heading into its inline markup and any swallowed block content.

    An unclosed heading swallows the content that follows it, e.g.
    "<h2>Risks<p>text" parses as a <p> inside the <h2>.

    Args:
        tag: <h1> or <h2> element

    Returns:
        Tuple of (heading markup, block-level children to walk afterwards)
    """
    children = list(tag.children)
    for index, child in enumerate(children):
        if isinstance(child, Tag) and child.name in STRUCTURAL_TAGS:
            heading = "".join(_node_markup(node) for node in children[:index])
            return heading, children[index:]
    return "".join(_node_markup(node) for node in children), []


class _MarkupScanner:
    """
    Walks the parsed tree once and routes markup to the right buffer.

    The walk keeps its own stack of pending steps instead of recursing, so
    arbitrarily deep nesting only costs memory. A step is either a node to
    visit or markup to write once the node's children are done.
    """

    def __init__(self):
        self.title_markup: Optional[str] = None
        self.intro: List[str] = []
        self.sections: List[_SectionDraft] = []

    def _write(self, markup: str) -> None:
        if self.sections:
            self.sections[-1].write(markup)
        else:
            self.intro.append(markup)

    def walk(self, nodes: Iterable[PageElement]) -> None:
        pending: List[tuple] = [("visit", node) for node in reversed(list(nodes))]
        while pending:
            step = pending.pop()
            if step[0] == "write":
                self._write(step[1])
            elif step[0] == "write_section":
                step[1].write(step[2])
            elif isinstance(step[1], Tag):
                pending.extend(reversed(self._visit_tag(step[1])))
            else:
                self._write(_node_markup(step[1]))

    def _visit_tag(self, tag: Tag) -> List[tuple]:
        """Handle one element and return the steps that follow it, in order."""
        name = (tag.name or "").lower()

        if name == "h1" and self.title_markup is None:
            self.title_markup, rest = _split_heading(tag)
            return [("visit", node) for node in rest]

        if name == "h2":
            heading, rest = _split_heading(tag)
            self.sections.append(_SectionDraft(heading))
            return [("visit", node) for node in rest]

        section = self.sections[-1] if self.sections else None
        children = [("visit", node) for node in tag.children]

        if section is not None and name in LIST_TAGS:
            if name == "ol":
                section.has_ordered = True
            else:
                section.has_unordered = True
            section.write(f"<{name}>")
            return children + [("write_section", section, f"</{name}>")]

        if section is not None and name == "li":
            # Bare <li> outside any list counts as a bulleted marker
            if not section.list_started:
                section.has_unordered = True
            markup = "".join(_node_markup(child) for child in tag.children)
            item = _inline_text(markup)
            if item:
                section.items.append(item)
            section.write(markup + "<br>")
            return []

        if name in SKIP_TAGS:
            return []

        if name in VOID_TAGS:
            self._write(f"<{name}>")
            return []

        self._write(f"<{name}>")
        if name in PARAGRAPH_TAGS:
            return children + [("write", "</p>")]
        if name in LINE_TAGS:
            return children + [("write", "<br>")]
        return children


def extract(markup: Optional[str]) -> DocumentModel:
    """
    Extract a DocumentModel from generated markup.

    Never raises for malformed content: missing titles fall back to
    "Documento" and empty sections are dropped.

    Args:
        markup: Markup string from the content generator

    Returns:
        Frozen DocumentModel
    """
    if not markup or not markup.strip():
        return DocumentModel(title=DEFAULT_TITLE)

    try:
        soup = BeautifulSoup(markup, "html.parser")
    except ParserRejectedMarkup as e:
        logger.warning(f"Markup rejected by parser, exporting empty document: {e}")
        return DocumentModel(title=DEFAULT_TITLE)

    scanner = _MarkupScanner()
    try:
        scanner.walk(list(soup.children))
    except RecursionError:
        # Serializing pathologically deep inline markup can still recurse in
        # the parser library; keep the text as plain introduction paragraphs
        logger.warning("Markup nested too deeply to walk, exporting it as plain text")
        return DocumentModel(
            title=DEFAULT_TITLE,
            introduction=tuple(split_paragraphs(normalize(markup))),
        )

    title = _inline_text(scanner.title_markup or "")
    introduction = tuple(split_paragraphs(normalize("".join(scanner.intro))))

    sections = []
    for draft in scanner.sections:
        section = draft.build()
        if section.is_empty():
            continue
        sections.append(section)

    doc = DocumentModel(
        title=title or DEFAULT_TITLE,
        introduction=introduction,
        sections=tuple(sections),
    )
    logger.debug(
        f"Extracted document '{doc.title}': {len(doc.introduction)} intro paragraphs, "
        f"{len(doc.sections)} sections, {doc.item_count()} items"
    )
    return doc
