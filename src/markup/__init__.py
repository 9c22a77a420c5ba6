"""
Markup module for the document export engine.

Turns generated markup into the renderer-agnostic document model.

Functions:
    normalize: Flat markup-to-text cleanup
    split_paragraphs: Split normalized text on blank lines
    extract: Build a DocumentModel from markup
"""

from src.markup.normalizer import normalize, split_paragraphs
from src.markup.models import (
    DEFAULT_TITLE,
    Block,
    DocumentModel,
    HeadingBlock,
    ListItemBlock,
    ParagraphBlock,
    Section,
)
from src.markup.extractor import extract

__all__ = [
    # Normalization
    "normalize",
    "split_paragraphs",
    # Document model
    "DEFAULT_TITLE",
    "DocumentModel",
    "Section",
    # Render blocks
    "Block",
    "HeadingBlock",
    "ParagraphBlock",
    "ListItemBlock",
    # Extraction
    "extract",
]
