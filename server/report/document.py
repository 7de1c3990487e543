"""
Document tree for the rendered analysis report.

The line scanner produces a Document made of numbered Sections. Later
passes (code promotion, resource reinsertion, diagram attachment) work on
section nodes instead of searching the HTML string for headings.
"""

import re
from dataclasses import dataclass, field

from .markup import ResourceItem, escape_html, render_inline, render_resource_list

RESOURCES_SECTION_NUMBER = 8
RESOURCES_SECTION_TITLE = "SUPPLEMENTAL LEARNING RESOURCES"

INLINE_CODE_SPAN_RE = re.compile(r'<span class="inline-code">(.*?)</span>', re.DOTALL)
CODE_BLOCK_RE = re.compile(r'<pre class="code-block">(.*?)</pre>', re.DOTALL)
EMPTY_PARAGRAPH_RE = re.compile(r"\s*<p>\s*</p>\s*")


def upgrade_code_markup(html: str) -> str:
    """
    Swap the inert code wrappers for native <code> markup.

    Content is already escaped and is not escaped again.
    """
    html = INLINE_CODE_SPAN_RE.sub(r"<code>\1</code>", html)
    return CODE_BLOCK_RE.sub(r"<pre><code>\1</code></pre>", html)


def _normalize_title(title: str) -> str:
    return " ".join(title.replace("*", " ").split()).upper()


@dataclass
class Diagram:
    data_uri: str
    alt: str

    def to_html(self) -> str:
        return (
            f'<div class="diagram"><img src="{escape_html(self.data_uri)}" '
            f'alt="{escape_html(self.alt)}" style="max-width: 100%; height: auto;"/></div>'
        )


@dataclass
class Section:
    """One "## N. Title" block. The preamble before the first heading has no number."""
    number: int | None = None
    title: str | None = None
    body: list[str] = field(default_factory=list)
    diagrams: list[Diagram] = field(default_factory=list)
    rich_code: bool = False

    @property
    def is_empty(self) -> bool:
        return self.title is None and not self.body and not self.diagrams

    def heading_html(self) -> str:
        if self.title is None:
            return ""
        return f"<h2>{self.number}. {render_inline(self.title)}</h2>"

    def to_html(self) -> str:
        parts = ["<section>"]
        if self.title is not None:
            parts.append(self.heading_html())
        parts.extend(self.body)
        parts.extend(diagram.to_html() for diagram in self.diagrams)
        parts.append("</section>")
        html = "\n".join(parts)
        if self.rich_code:
            html = upgrade_code_markup(html)
        return html


@dataclass
class Document:
    sections: list[Section] = field(default_factory=list)

    def section(self, number: int) -> Section | None:
        for section in self.sections:
            if section.number == number:
                return section
        return None

    def find_section(self, title: str) -> Section | None:
        wanted = _normalize_title(title)
        for section in self.sections:
            if section.title is not None and _normalize_title(section.title) == wanted:
                return section
        return None

    def promote_code(self, number: int = 2) -> bool:
        """Render code in section `number` with native <code> elements."""
        section = self.section(number)
        if section is None:
            return False
        section.rich_code = True
        return True

    def attach_resources(self, items: list[ResourceItem]) -> Section | None:
        """
        Place the resource list under the resources heading, or append a
        new resources section when the document has none.
        """
        if not items:
            return None

        list_html = render_resource_list(items)
        section = self.find_section(RESOURCES_SECTION_TITLE)
        if section is not None:
            while section.body and EMPTY_PARAGRAPH_RE.fullmatch(section.body[0]):
                section.body.pop(0)
            section.body.insert(0, list_html)
            return section

        section = Section(
            number=RESOURCES_SECTION_NUMBER,
            title=RESOURCES_SECTION_TITLE,
            body=[list_html],
        )
        self.sections.append(section)
        return section

    def attach_diagram(self, number: int, data_uri: str | None, alt: str) -> bool:
        if not data_uri:
            return False
        section = self.section(number)
        if section is None:
            return False
        section.diagrams.append(Diagram(data_uri=data_uri, alt=alt))
        return True

    def to_html(self) -> str:
        return "\n".join(section.to_html() for section in self.sections if not section.is_empty)
