import io

import pytest
from docx import Document


W = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


SAMPLE_MARKUP = """
<h1>Piano di progetto</h1>
<p>Questo documento descrive il piano.</p>
<p>Contiene obiettivi e rischi.</p>
<h2>Obiettivi</h2>
<p>Cosa vogliamo ottenere entro fine anno.</p>
<ol>
  <li>Rilasciare la prima versione</li>
  <li>Raccogliere feedback</li>
  <li>Pianificare la seconda versione</li>
</ol>
<h2>Rischi</h2>
<ul>
  <li>Ritardi nelle forniture</li>
  <li>Costi superiori al previsto</li>
</ul>
<h2>Conclusione</h2>
<p>Il piano verrà rivisto ogni trimestre.</p>
"""


def numbered_sections_markup(sections: int = 2, items: int = 3) -> str:
    parts = ["<h1>Elenchi</h1>"]
    for s in range(1, sections + 1):
        parts.append(f"<h2>Sezione {s}</h2><ol>")
        parts.extend(f"<li>Voce {s}.{i}</li>" for i in range(1, items + 1))
        parts.append("</ol>")
    return "".join(parts)


def read_docx(content: bytes):
    return Document(io.BytesIO(content))


def presented_numbers(doc) -> list:
    """Numbers a word processor would show for each 'List Number' paragraph."""
    numbering = doc.part.numbering_part.element
    starts = {}
    for num in numbering.findall(f"{W}num"):
        override = num.find(f"{W}lvlOverride/{W}startOverride")
        starts[int(num.get(f"{W}numId"))] = int(override.get(f"{W}val")) if override is not None else 1

    counters = {}
    numbers = []
    for para in doc.paragraphs:
        if para.style.name != "List Number":
            continue
        num_id = int(para._p.pPr.numPr.numId.val)
        counters[num_id] = counters.get(num_id, starts[num_id] - 1) + 1
        numbers.append(counters[num_id])
    return numbers


@pytest.fixture
def sample_markup():
    return SAMPLE_MARKUP
