"""
Pydantic models for the document model shared by extraction and rendering.

Provides data structures for:
- Sections (heading, optional description, optional bulleted/numbered items)
- The document model (title, introduction paragraphs, sections)
- Render blocks (heading, paragraph, list item) yielded in reading order

All models are frozen: renderers read them but never change them.
"""

from typing import Iterator, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.markup.normalizer import split_paragraphs


# Title used when the markup carries no top-level heading
DEFAULT_TITLE = "Documento"


class Section(BaseModel):
    """
    A heading-delimited unit of a document.

    The heading may be empty when malformed markup omits it. ``is_numbered``
    only matters when ``items`` is present and defaults to a bulleted list.
    """

    model_config = ConfigDict(frozen=True)

    heading: str = Field(
        default="",
        description="Normalized text of the section heading"
    )
    description: Optional[str] = Field(
        default=None,
        description="Free text appearing before the list, or the whole block when there is no list"
    )
    items: Optional[Tuple[str, ...]] = Field(
        default=None,
        description="List entries in document order"
    )
    is_numbered: bool = Field(
        default=False,
        description="Render items as an ordered list instead of a bulleted one"
    )

    @field_validator("description")
    @classmethod
    def empty_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Store a blank description as absent."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("items")
    @classmethod
    def empty_items_is_none(cls, v: Optional[Tuple[str, ...]]) -> Optional[Tuple[str, ...]]:
        """Store an empty item list as absent."""
        if v is not None and len(v) == 0:
            return None
        return v

    def is_empty(self) -> bool:
        """True when the section has no heading, description or items."""
        return not (self.heading or self.description or self.items)


class HeadingBlock(BaseModel):
    """Heading block: level 1 for the title, level 2 for section headings."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["heading"] = "heading"
    level: Literal[1, 2]
    text: str


class ParagraphBlock(BaseModel):
    """Body paragraph block."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["paragraph"] = "paragraph"
    text: str


class ListItemBlock(BaseModel):
    """List entry with its 1-based position inside the owning section."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list_item"] = "list_item"
    text: str
    ordinal: int = Field(ge=1)
    numbered: bool = False


Block = Union[HeadingBlock, ParagraphBlock, ListItemBlock]


class DocumentModel(BaseModel):
    """
    Renderer-agnostic structure of a document.

    Created fresh for every export by the extractor and consumed by exactly
    one renderer.

    Example:
        doc = extract("<h1>Report</h1><h2>Goals</h2><ul><li>Ship</li></ul>")
        for block in doc.blocks():
            ...
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(
        default=DEFAULT_TITLE,
        description="Single top-level heading of the document"
    )
    introduction: Tuple[str, ...] = Field(
        default=(),
        description="Lead paragraphs appearing before any section heading"
    )
    sections: Tuple[Section, ...] = Field(
        default=(),
        description="Sections in source order"
    )

    def blocks(self) -> Iterator[Block]:
        """
        Yield render blocks in reading order.

        The title comes first, then each introduction paragraph, then for
        every section its heading (skipped when empty), its description
        split into paragraphs, and its items.

        Returns:
            Iterator over HeadingBlock, ParagraphBlock and ListItemBlock
        """
        yield HeadingBlock(level=1, text=self.title)

        for paragraph in self.introduction:
            yield ParagraphBlock(text=paragraph)

        for section in self.sections:
            if section.heading:
                yield HeadingBlock(level=2, text=section.heading)

            if section.description:
                for paragraph in split_paragraphs(section.description):
                    yield ParagraphBlock(text=paragraph)

            for ordinal, item in enumerate(section.items or (), start=1):
                yield ListItemBlock(
                    text=item,
                    ordinal=ordinal,
                    numbered=section.is_numbered,
                )

    def item_count(self) -> int:
        """Total number of list items across all sections."""
        return sum(len(section.items or ()) for section in self.sections)
