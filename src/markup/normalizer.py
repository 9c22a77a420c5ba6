"""
Markup normalization for generated document content.

Turns a markup fragment into plain text:
- Line breaks (<br>) become newlines
- Paragraph ends (</p>) become blank lines, used later as paragraph separators
- Every other tag is dropped, whatever its nesting
- &nbsp; and the other character entities are decoded
- Control characters that XML documents cannot carry are removed
- Horizontal whitespace is collapsed and lines are trimmed

Line structure is kept: newlines are not folded into spaces, so the
extractor can still find plain-text bullet lines and paragraph breaks.
split_paragraphs() does the final folding.

This is a flat text-extraction pass, not a tree walk. It never raises:
unbalanced or malformed tags simply vanish and the text between them survives.
"""

import html
import re
from typing import List, Optional


LINE_BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
PARAGRAPH_END_PATTERN = re.compile(r"</p\s*>", re.IGNORECASE)
# Also matches an unterminated tag running to end of input
TAG_PATTERN = re.compile(r"</?[^>]+(>|$)")
NBSP_PATTERN = re.compile(r"&nbsp;", re.IGNORECASE)
HORIZONTAL_SPACE_PATTERN = re.compile(r"[^\S\n]+")
BLANK_LINES_PATTERN = re.compile(r"\n{3,}")
# Not allowed in XML 1.0, so python-docx rejects them
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def normalize(fragment: Optional[str]) -> str:
    """
    Convert a markup fragment to plain text.

    Args:
        fragment: Markup fragment, possibly with malformed tags

    Returns:
        Plain text where paragraphs are separated by one blank line
    """
    if not fragment:
        return ""

    text = LINE_BREAK_PATTERN.sub("\n", fragment)
    text = PARAGRAPH_END_PATTERN.sub("\n\n", text)
    text = TAG_PATTERN.sub("", text)

    # Entities are decoded after tag removal so escaped markup stays literal
    text = NBSP_PATTERN.sub(" ", text)
    text = html.unescape(text)
    text = CONTROL_CHAR_PATTERN.sub("", text)

    lines = [HORIZONTAL_SPACE_PATTERN.sub(" ", line).strip() for line in text.split("\n")]
    text = "\n".join(lines)
    text = BLANK_LINES_PATTERN.sub("\n\n", text)

    return text.strip()


def split_paragraphs(text: Optional[str]) -> List[str]:
    """
    Split normalized text into paragraphs on blank lines.

    Single newlines inside a paragraph are folded into spaces.

    Args:
        text: Output of normalize()

    Returns:
        Non-empty paragraphs in order
    """
    if not text:
        return []

    paragraphs = []
    for chunk in re.split(r"\n\s*\n", text):
        paragraph = " ".join(line.strip() for line in chunk.split("\n") if line.strip())
        if paragraph:
            paragraphs.append(paragraph)
    return paragraphs
