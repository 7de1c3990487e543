import base64

import pytest

from report import diagrams
from report.diagrams import DiagramKind, classify_diagram, generate_diagram, svg_data_uri

PREFIX = "data:image/svg+xml;base64,"


def _decode(uri: str) -> str:
    assert uri.startswith(PREFIX)
    return base64.b64decode(uri[len(PREFIX):]).decode("utf-8")


@pytest.mark.parametrize("description, kind", [
    ("Show the project structure and file organization", DiagramKind.STRUCTURE),
    ("Describe data flow and state management", DiagramKind.STATE_TREE),
    ("Explain analogies and concepts", DiagramKind.ANALOGY),
    ("Something else entirely", DiagramKind.GENERIC),
])
def test_classify_diagram(description, kind):
    assert classify_diagram(description) is kind


def test_classification_is_case_insensitive_and_ordered():
    # structure keywords are checked before state keywords
    assert classify_diagram("PROJECT STRUCTURE with shared STATE") is DiagramKind.STRUCTURE
    assert classify_diagram("Props drilling") is DiagramKind.STATE_TREE


def test_svg_data_uri_handles_unicode():
    assert _decode(svg_data_uri("<svg>résumé ✓</svg>")) == "<svg>résumé ✓</svg>"


@pytest.mark.parametrize("description, limit", [
    ("project structure " + "x" * 200, 60),
    ("data flow " + "y" * 200, 80),
    ("analogies " + "z" * 200, 70),
    ("anything " + "w" * 200, 60),
])
def test_description_is_truncated_per_template(description, limit):
    svg = _decode(generate_diagram(description))
    assert description[:limit] + "..." in svg
    assert description[:limit + 1] not in svg


def test_generator_failure_uses_fallback(monkeypatch):
    def boom(description):
        raise RuntimeError("template exploded")

    monkeypatch.setitem(diagrams.TEMPLATES, DiagramKind.GENERIC, boom)
    svg = _decode(generate_diagram("Something else entirely"))

    assert "System Architecture" in svg
    assert "Something else entirely..." in svg


def test_generate_diagram_never_raises_on_odd_input():
    uri = generate_diagram("")
    assert uri.startswith(PREFIX)
    assert generate_diagram("état des données: state ✓").startswith(PREFIX)
