"""
Diagram selection and SVG generation.

A free-text description is matched against keyword groups to pick one of
four hand-built templates. The description is truncated and written into
a text node near the bottom of the template. Output is a base64 data URI.
"""

import base64
import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class DiagramKind(str, Enum):
    STRUCTURE = "structure"
    STATE_TREE = "state_tree"
    ANALOGY = "analogy"
    GENERIC = "generic"


# Checked in order, first hit wins
KEYWORD_GROUPS: list[tuple[DiagramKind, tuple[str, ...]]] = [
    (DiagramKind.STRUCTURE, ("project structure", "file organization")),
    (DiagramKind.STATE_TREE, ("data flow", "state", "props")),
    (DiagramKind.ANALOGY, ("analogies", "concepts")),
]


def classify_diagram(description: str) -> DiagramKind:
    lowered = description.lower()
    for kind, keywords in KEYWORD_GROUPS:
        if any(keyword in lowered for keyword in keywords):
            return kind
    return DiagramKind.GENERIC


def svg_data_uri(svg: str) -> str:
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


# =============================================================================
# TEMPLATES
# =============================================================================

def render_structure_svg(description: str) -> str:
    return f"""
    <svg width="600" height="500" xmlns="http://www.w3.org/2000/svg">
      <defs>
        <style>
          .folder {{ fill: #ffd700; stroke: #b8860b; stroke-width: 2; }}
          .file {{ fill: #e6f3ff; stroke: #007acc; stroke-width: 1; }}
          .text {{ font-family: Arial, sans-serif; font-size: 12px; fill: #333; }}
          .title {{ font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; fill: #333; }}
          .line {{ stroke: #666; stroke-width: 1; }}
        </style>
      </defs>

      <rect width="600" height="500" fill="white" stroke="#ddd"/>

      <text x="300" y="30" text-anchor="middle" class="title">Project Structure</text>

      <rect x="50" y="60" width="100" height="30" class="folder"/>
      <text x="100" y="80" text-anchor="middle" class="text">Root</text>

      <line x1="100" y1="90" x2="100" y2="120" class="line"/>
      <line x1="100" y1="120" x2="150" y2="120" class="line"/>

      <rect x="150" y="105" width="80" height="30" class="folder"/>
      <text x="190" y="125" text-anchor="middle" class="text">src/</text>

      <rect x="150" y="145" width="80" height="30" class="folder"/>
      <text x="190" y="165" text-anchor="middle" class="text">config/</text>

      <line x1="190" y1="135" x2="190" y2="200" class="line"/>
      <line x1="190" y1="200" x2="280" y2="200" class="line"/>

      <rect x="280" y="185" width="100" height="25" class="file"/>
      <text x="330" y="202" text-anchor="middle" class="text">index.ts</text>

      <rect x="280" y="220" width="100" height="25" class="file"/>
      <text x="330" y="237" text-anchor="middle" class="text">schema.ts</text>

      <text x="300" y="300" text-anchor="middle" class="text">{description[:60]}...</text>
    </svg>
    """


def render_state_tree_svg(description: str) -> str:
    return f"""
    <svg width="800" height="600" xmlns="http://www.w3.org/2000/svg">
      <defs>
        <style>
          .component {{ fill: #e1f5fe; stroke: #0277bd; stroke-width: 2; }}
          .state {{ fill: #fff3e0; stroke: #f57c00; stroke-width: 2; }}
          .props {{ fill: #e8f5e8; stroke: #388e3c; stroke-width: 2; }}
          .text {{ font-family: Arial, sans-serif; font-size: 12px; fill: #333; }}
          .title {{ font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; fill: #333; }}
          .line {{ stroke: #666; stroke-width: 2; }}
          .arrow {{ stroke: #666; stroke-width: 2; marker-end: url(#arrowhead); }}
        </style>
        <marker id="arrowhead" markerWidth="10" markerHeight="7" refX="9" refY="3.5" orient="auto">
          <polygon points="0 0, 10 3.5, 0 7" fill="#666" />
        </marker>
      </defs>

      <rect width="800" height="600" fill="white" stroke="#ddd"/>

      <text x="400" y="30" text-anchor="middle" class="title">State &amp; Props Flow Tree Structure</text>

      <rect x="350" y="60" width="100" height="40" class="component"/>
      <text x="400" y="85" text-anchor="middle" class="text">App Component</text>

      <rect x="200" y="140" width="80" height="30" class="state"/>
      <text x="240" y="160" text-anchor="middle" class="text">State</text>

      <rect x="520" y="140" width="80" height="30" class="props"/>
      <text x="560" y="160" text-anchor="middle" class="text">Props</text>

      <rect x="150" y="220" width="90" height="35" class="component"/>
      <text x="195" y="242" text-anchor="middle" class="text">Child A</text>

      <rect x="280" y="220" width="90" height="35" class="component"/>
      <text x="325" y="242" text-anchor="middle" class="text">Child B</text>

      <rect x="470" y="220" width="90" height="35" class="component"/>
      <text x="515" y="242" text-anchor="middle" class="text">Child C</text>

      <rect x="600" y="220" width="90" height="35" class="component"/>
      <text x="645" y="242" text-anchor="middle" class="text">Child D</text>

      <line x1="400" y1="100" x2="240" y2="140" class="arrow"/>
      <line x1="400" y1="100" x2="560" y2="140" class="arrow"/>

      <line x1="240" y1="170" x2="195" y2="220" class="arrow"/>
      <line x1="240" y1="170" x2="325" y2="220" class="arrow"/>

      <line x1="560" y1="170" x2="515" y2="220" class="arrow"/>
      <line x1="560" y1="170" x2="645" y2="220" class="arrow"/>

      <rect x="50" y="350" width="700" height="200" fill="#f9f9f9" stroke="#ccc"/>
      <text x="400" y="375" text-anchor="middle" class="title">Tree Structure Legend</text>

      <rect x="80" y="390" width="60" height="25" class="component"/>
      <text x="110" y="407" text-anchor="middle" class="text">Component</text>
      <text x="160" y="407" class="text">- React functional/class components</text>

      <rect x="80" y="430" width="60" height="25" class="state"/>
      <text x="110" y="447" text-anchor="middle" class="text">State</text>
      <text x="160" y="447" class="text">- Internal component state (useState, this.state)</text>

      <rect x="80" y="470" width="60" height="25" class="props"/>
      <text x="110" y="487" text-anchor="middle" class="text">Props</text>
      <text x="160" y="487" class="text">- Data passed from parent to child components</text>

      <line x1="80" y1="510" x2="140" y2="510" class="arrow"/>
      <text x="160" y="515" class="text">- Data flow direction (parent → child)</text>

      <text x="400" y="580" text-anchor="middle" class="text">{description[:80]}...</text>
    </svg>
    """


def render_analogy_svg(description: str) -> str:
    return f"""
    <svg width="700" height="500" xmlns="http://www.w3.org/2000/svg">
      <defs>
        <style>
          .analogy-box {{ fill: #f3e5f5; stroke: #7b1fa2; stroke-width: 2; }}
          .code-box {{ fill: #e8f5e8; stroke: #388e3c; stroke-width: 2; }}
          .text {{ font-family: Arial, sans-serif; font-size: 12px; fill: #333; }}
          .title {{ font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; fill: #333; }}
          .arrow {{ stroke: #666; stroke-width: 2; marker-end: url(#arrowhead); }}
        </style>
        <marker id="arrowhead" markerWidth="10" markerHeight="7" refX="9" refY="3.5" orient="auto">
          <polygon points="0 0, 10 3.5, 0 7" fill="#666" />
        </marker>
      </defs>

      <rect width="700" height="500" fill="white" stroke="#ddd"/>

      <text x="350" y="30" text-anchor="middle" class="title">Code Analogies &amp; Visual Explanations</text>

      <rect x="50" y="80" width="250" height="120" class="analogy-box"/>
      <text x="175" y="105" text-anchor="middle" class="title">Real World Analogy</text>
      <text x="175" y="130" text-anchor="middle" class="text">Train Station Dispatcher</text>
      <text x="175" y="150" text-anchor="middle" class="text">• Directs passengers to platforms</text>
      <text x="175" y="170" text-anchor="middle" class="text">• Each platform leads to different city</text>
      <text x="175" y="190" text-anchor="middle" class="text">• Based on destination (URL)</text>

      <rect x="400" y="80" width="250" height="120" class="code-box"/>
      <text x="525" y="105" text-anchor="middle" class="title">Code Concept</text>
      <text x="525" y="130" text-anchor="middle" class="text">React Router</text>
      <text x="525" y="150" text-anchor="middle" class="text">• Routes components to paths</text>
      <text x="525" y="170" text-anchor="middle" class="text">• Each route renders component</text>
      <text x="525" y="190" text-anchor="middle" class="text">• Based on URL pathname</text>

      <line x1="300" y1="140" x2="400" y2="140" class="arrow"/>
      <text x="350" y="135" text-anchor="middle" class="text">Maps to</text>

      <text x="350" y="420" text-anchor="middle" class="text">{description[:70]}...</text>
    </svg>
    """


def render_generic_svg(description: str) -> str:
    return f"""
    <svg width="600" height="400" xmlns="http://www.w3.org/2000/svg">
      <defs>
        <style>
          .box {{ fill: #f0f8ff; stroke: #007acc; stroke-width: 2; }}
          .text {{ font-family: Arial, sans-serif; font-size: 12px; fill: #333; }}
          .title {{ font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; fill: #333; }}
          .arrow {{ stroke: #007acc; stroke-width: 2; marker-end: url(#arrowhead); }}
        </style>
        <marker id="arrowhead" markerWidth="10" markerHeight="7" refX="9" refY="3.5" orient="auto">
          <polygon points="0 0, 10 3.5, 0 7" fill="#007acc" />
        </marker>
      </defs>

      <rect width="600" height="400" fill="white" stroke="#ddd"/>

      <text x="300" y="30" text-anchor="middle" class="title">System Diagram</text>

      <rect x="100" y="80" width="120" height="60" class="box"/>
      <text x="160" y="115" text-anchor="middle" class="text">Component A</text>

      <rect x="380" y="80" width="120" height="60" class="box"/>
      <text x="440" y="115" text-anchor="middle" class="text">Component B</text>

      <rect x="240" y="200" width="120" height="60" class="box"/>
      <text x="300" y="235" text-anchor="middle" class="text">Core System</text>

      <line x1="220" y1="110" x2="380" y2="110" class="arrow"/>
      <line x1="160" y1="140" x2="300" y2="200" class="arrow"/>
      <line x1="440" y1="140" x2="300" y2="200" class="arrow"/>

      <text x="300" y="320" text-anchor="middle" class="text">{description[:60]}...</text>
    </svg>
    """


def render_fallback_svg(description: str) -> str:
    return f"""
    <svg width="600" height="400" xmlns="http://www.w3.org/2000/svg">
      <defs>
        <style>
          .title {{ font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; fill: #333; }}
          .subtitle {{ font-family: Arial, sans-serif; font-size: 12px; fill: #666; }}
          .box {{ fill: #f0f8ff; stroke: #007acc; stroke-width: 2; }}
          .arrow {{ stroke: #007acc; stroke-width: 2; marker-end: url(#arrowhead); }}
        </style>
        <marker id="arrowhead" markerWidth="10" markerHeight="7" refX="9" refY="3.5" orient="auto">
          <polygon points="0 0, 10 3.5, 0 7" fill="#007acc" />
        </marker>
      </defs>

      <rect width="600" height="400" fill="white" stroke="#ddd"/>

      <rect x="50" y="50" width="120" height="60" class="box"/>
      <text x="110" y="85" text-anchor="middle" class="title">Component A</text>

      <rect x="250" y="50" width="120" height="60" class="box"/>
      <text x="310" y="85" text-anchor="middle" class="title">Component B</text>

      <rect x="450" y="50" width="120" height="60" class="box"/>
      <text x="510" y="85" text-anchor="middle" class="title">Component C</text>

      <line x1="170" y1="80" x2="250" y2="80" class="arrow"/>
      <line x1="370" y1="80" x2="450" y2="80" class="arrow"/>

      <text x="300" y="180" text-anchor="middle" class="title">System Architecture</text>
      <text x="300" y="200" text-anchor="middle" class="subtitle">{str(description)[:80]}...</text>

      <rect x="150" y="250" width="100" height="40" class="box"/>
      <text x="200" y="275" text-anchor="middle" class="subtitle">Data Store</text>

      <rect x="350" y="250" width="100" height="40" class="box"/>
      <text x="400" y="275" text-anchor="middle" class="subtitle">API Layer</text>

      <line x1="250" y1="270" x2="350" y2="270" class="arrow"/>
    </svg>
    """


TEMPLATES: dict[DiagramKind, Callable[[str], str]] = {
    DiagramKind.STRUCTURE: render_structure_svg,
    DiagramKind.STATE_TREE: render_state_tree_svg,
    DiagramKind.ANALOGY: render_analogy_svg,
    DiagramKind.GENERIC: render_generic_svg,
}


def generate_diagram(description: str, api_key: str | None = None) -> str:
    """
    Render the template matching `description` as a data URI.

    `api_key` is accepted for a future image-model backend and is unused.
    Any failure falls back to the simpler fallback template; this function
    never raises.
    """
    try:
        kind = classify_diagram(description)
        return svg_data_uri(TEMPLATES[kind](description))
    except Exception as e:
        logger.warning(f"Diagram generation failed, using fallback: {e}")
        return svg_data_uri(render_fallback_svg(description))
