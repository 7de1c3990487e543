"""
Code Tutor report rendering

Turns the model's comprehensive analysis markdown into sanitized HTML:
- markup: escaping, inline markup, quiz blocks, resource citations
- blocks: line scanner producing a section tree
- document: section tree with code promotion, resources and diagrams
- diagrams: keyword-selected SVG diagrams as data URIs
"""

from .blocks import normalize_blocks, scan_blocks, tokenize
from .diagrams import DiagramKind, classify_diagram, generate_diagram
from .document import Document, Section
from .markup import (
    ResourceItem,
    escape_html,
    extract_resources,
    render_inline,
    transform_quiz_blocks,
)
from .render import (
    CODE_ANALOGIES_DIAGRAM_PATH,
    COMPREHENSIVE_PATH,
    DATA_FLOW_DIAGRAM_PATH,
    render_analysis_page,
    render_report,
    render_report_html,
    render_viewer_page,
)

__all__ = [
    "normalize_blocks",
    "scan_blocks",
    "tokenize",
    "DiagramKind",
    "classify_diagram",
    "generate_diagram",
    "Document",
    "Section",
    "ResourceItem",
    "escape_html",
    "extract_resources",
    "render_inline",
    "transform_quiz_blocks",
    "CODE_ANALOGIES_DIAGRAM_PATH",
    "COMPREHENSIVE_PATH",
    "DATA_FLOW_DIAGRAM_PATH",
    "render_analysis_page",
    "render_report",
    "render_report_html",
    "render_viewer_page",
]
