import pytest
from docx.shared import Twips

from src.export.docx import CLOSING_REMARK, DocxExporter, render_flow
from src.export.models import ExportFormat, ExportOptions
from src.markup.extractor import extract
from src.markup.models import DocumentModel

from tests.conftest import numbered_sections_markup, presented_numbers, read_docx


def test_export_produces_docx(sample_markup):
    result = DocxExporter().export(extract(sample_markup))

    assert result.format == ExportFormat.DOCX
    assert result.filename == "documento.docx"
    assert result.content_type == (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert result.content_bytes.startswith(b"PK")
    assert result.page_count is None


def test_headings_use_native_styles(sample_markup):
    doc = read_docx(render_flow(extract(sample_markup)))

    headings = [(p.style.name, p.text) for p in doc.paragraphs if p.style.name.startswith("Heading")]
    assert headings == [
        ("Heading 1", "Piano di progetto"),
        ("Heading 2", "Obiettivi"),
        ("Heading 2", "Rischi"),
        ("Heading 2", "Conclusione"),
    ]


def test_paragraphs_follow_reading_order(sample_markup):
    doc = read_docx(render_flow(extract(sample_markup)))

    texts = [p.text for p in doc.paragraphs]
    assert texts[:3] == [
        "Piano di progetto",
        "Questo documento descrive il piano.",
        "Contiene obiettivi e rischi.",
    ]
    assert texts.index("Cosa vogliamo ottenere entro fine anno.") < texts.index("Rilasciare la prima versione")


def test_closing_remark_is_last_paragraph(sample_markup):
    doc = read_docx(render_flow(extract(sample_markup)))

    last = doc.paragraphs[-1]
    assert last.text == CLOSING_REMARK
    assert last.runs[0].italic is True


def test_closing_remark_without_sections():
    doc = read_docx(render_flow(DocumentModel()))

    assert [p.text for p in doc.paragraphs] == ["Documento", CLOSING_REMARK]


def test_numbered_lists_restart_in_every_section():
    doc = read_docx(render_flow(extract(numbered_sections_markup(sections=2, items=3))))

    assert presented_numbers(doc) == [1, 2, 3, 1, 2, 3]


def test_numbered_sections_do_not_share_numbering_instance():
    doc = read_docx(render_flow(extract(numbered_sections_markup(sections=3, items=2))))

    num_ids = [
        int(p._p.pPr.numPr.numId.val)
        for p in doc.paragraphs
        if p.style.name == "List Number"
    ]
    assert len(num_ids) == 6
    assert len(set(num_ids)) == 3
    assert num_ids[0] == num_ids[1]


def test_bulleted_items_use_bullet_list(sample_markup):
    doc = read_docx(render_flow(extract(sample_markup)))

    bullets = [p.text for p in doc.paragraphs if p.style.name == "List Bullet"]
    assert bullets == ["Ritardi nelle forniture", "Costi superiori al previsto"]
    for para in doc.paragraphs:
        if para.style.name == "List Bullet":
            assert para._p.pPr.numPr is not None


@pytest.mark.parametrize("layout,twips", [("standard", 1000), ("compact", 600)])
def test_layout_sets_page_margins(sample_markup, layout, twips):
    doc = read_docx(render_flow(extract(sample_markup), ExportOptions(layout=layout)))

    section = doc.sections[0]
    assert section.left_margin == Twips(twips)
    assert section.top_margin == Twips(twips)


@pytest.mark.parametrize("style,font", [
    ("academic", "Times New Roman"),
    ("classic", "Times New Roman"),
    ("modern", "Calibri"),
    ("minimal", "Calibri"),
])
def test_style_sets_base_font(sample_markup, style, font):
    doc = read_docx(render_flow(extract(sample_markup), ExportOptions(style=style)))

    assert doc.styles["Normal"].font.name == font


def test_document_title_property(sample_markup):
    doc = read_docx(render_flow(extract(sample_markup)))

    assert doc.core_properties.title == "Piano di progetto"


def test_renders_are_independent():
    first = read_docx(render_flow(extract(numbered_sections_markup(sections=1, items=2))))
    second = read_docx(render_flow(extract(numbered_sections_markup(sections=1, items=2))))

    assert presented_numbers(first) == presented_numbers(second) == [1, 2]


def test_control_characters_in_markup_do_not_break_export():
    doc = read_docx(render_flow(extract("<h1>T</h1><p>a\x01b</p><h2>S</h2><ul><li>c\x1fd</li></ul>")))

    texts = [p.text for p in doc.paragraphs]
    assert "ab" in texts
    assert "cd" in texts
