"""
Markup helpers for the comprehensive analysis report.

Converts the model's markdown conventions (inline bold/code, fenced code,
quiz blocks and resource citations) into HTML fragments. Multi-line
fragments are parked in a BlockStash behind placeholder lines so the line
scanner in report.blocks can treat them as opaque markup.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


# =============================================================================
# PATTERNS
# =============================================================================

CODE_SPAN_RE = re.compile(r"`([^`\n]+)`")
BOLD_RE = re.compile(r"\*\*(.+?)\*\*", re.DOTALL)
CODE_FENCE_RE = re.compile(r"```[\w+#.-]*[ \t]*\n?(.*?)```", re.DOTALL)

# Inline code is shielded from the bold rule behind \x00C<n>\x00
_SHIELD_RE = re.compile(r"\x00C(\d+)\x00")
# Stashed blocks live behind \x00B<n>\x00
PLACEHOLDER_RE = re.compile(r"\x00B(\d+)\x00")

# Optional bullet or numbered-list prefix in front of a marker
_LIST_MARKER = r"[ \t]*(?:(?:[-*+]|\d+[.)])[ \t]+)?"

# A field ends where the next marker or heading starts
_FIELD = (
    r"((?:(?!\n\*\*(?:Expected Answer:|Follow-up:)"
    r"|\n" + _LIST_MARKER + r"\*\*(?:Question|Resource)|\n#{1,6} ).)*?)"
)

QUIZ_BLOCK_RE = re.compile(
    r"\*\*Question (\d+):\*\*[ \t]*" + _FIELD + r"[ \t]*\n"
    r"\*\*Expected Answer:\*\*[ \t]*" + _FIELD + r"[ \t]*\n"
    r"\*\*Follow-up:\*\*[ \t]*" + _FIELD +
    r"(?=\n" + _LIST_MARKER + r"\*\*(?:Question|Resource)|\n#{1,6} |\Z)",
    re.DOTALL,
)

# One citation per line, list prefix included; the description ends with its line
RESOURCE_RE = re.compile(
    r"^" + _LIST_MARKER + r"\*\*Resource (\d+):\*\*[ \t]*([^\n]*?)[ \t]+-[ \t]+"
    r"(?:\[([^\]\n]*)\]\((https?://\S+?)\)|(https?://\S+))"
    r"(?:[ \t]+-[ \t]*([^\n]*?))?[ \t]*$",
    re.MULTILINE,
)
RESOURCE_MARKER_RE = re.compile(r"^" + _LIST_MARKER + r"\*\*Resource \d+:\*\*", re.MULTILINE)


# =============================================================================
# ESCAPING AND INLINE MARKUP
# =============================================================================

def escape_html(text: str) -> str:
    """Escape the five reserved HTML characters. Ampersands go first."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def render_inline(text: str) -> str:
    """
    Render a text fragment: escape it, then turn **bold** into <strong> and
    `code` into an escaped inline-code span.

    Code spans are pulled out before the bold rule runs so asterisks inside
    code are never treated as emphasis.
    """
    spans: list[str] = []

    def _shield(match: re.Match) -> str:
        spans.append(match.group(1))
        return f"\x00C{len(spans) - 1}\x00"

    def _restore(match: re.Match) -> str:
        index = int(match.group(1))
        if index >= len(spans):
            return match.group(0)
        return f'<span class="inline-code">{escape_html(spans[index])}</span>'

    shielded = CODE_SPAN_RE.sub(_shield, text)
    html = BOLD_RE.sub(r"<strong>\1</strong>", escape_html(shielded))
    return _SHIELD_RE.sub(_restore, html)


# =============================================================================
# BLOCK STASH
# =============================================================================

class BlockStash:
    """Holds generated multi-line HTML blocks behind placeholder lines."""

    def __init__(self):
        self.blocks: list[str] = []

    def add(self, html: str) -> str:
        self.blocks.append(html)
        return f"\x00B{len(self.blocks) - 1}\x00"

    def get(self, index: int) -> str | None:
        if 0 <= index < len(self.blocks):
            return self.blocks[index]
        return None

    def expand(self, text: str) -> str:
        """Replace placeholders with their blocks (blocks may nest)."""

        def _replace(match: re.Match) -> str:
            block = self.get(int(match.group(1)))
            if block is None:
                return ""
            return self.expand(block)

        return PLACEHOLDER_RE.sub(_replace, text)

    def __len__(self) -> int:
        return len(self.blocks)


def _emit(html: str, stash: BlockStash | None) -> str:
    if stash is None:
        return f"\n{html}\n"
    return f"\n{stash.add(html)}\n"


# =============================================================================
# CODE FENCES
# =============================================================================

def convert_code_fences(text: str, stash: BlockStash | None = None) -> str:
    """Turn ```lang fenced blocks into escaped <pre class="code-block"> blocks."""

    def _replace(match: re.Match) -> str:
        code = match.group(1).rstrip("\n")
        return _emit(f'<pre class="code-block">{escape_html(code)}</pre>', stash)

    return CODE_FENCE_RE.sub(_replace, text)


# =============================================================================
# QUIZ BLOCKS
# =============================================================================

def render_quiz_block(number: str, question: str, expected_answer: str, follow_up: str) -> str:
    return (
        "<details>\n"
        f"  <summary><strong>Question {number}:</strong> {render_inline(question.strip())}</summary>\n"
        f"  <p><strong>Expected Answer:</strong> {render_inline(expected_answer.strip())}</p>\n"
        f"  <p><strong>Follow-up:</strong> {render_inline(follow_up.strip())}</p>\n"
        "</details>"
    )


def transform_quiz_blocks(text: str, stash: BlockStash | None = None) -> str:
    """
    Rewrite every **Question N:** / **Expected Answer:** / **Follow-up:**
    triple into a collapsible <details> block.

    Text that does not follow the pattern is left untouched.
    """

    def _replace(match: re.Match) -> str:
        number, question, expected_answer, follow_up = match.groups()
        return _emit(render_quiz_block(number, question, expected_answer, follow_up), stash)

    return QUIZ_BLOCK_RE.sub(_replace, text)


# =============================================================================
# RESOURCES
# =============================================================================

@dataclass
class ResourceItem:
    """A single **Resource N:** citation"""
    number: int
    title: str
    url: str
    description: str = ""


def _resource_from_match(match: re.Match) -> ResourceItem:
    number, plain_title, link_label, link_url, plain_url, description = match.groups()
    # The markdown link wins when both forms are present
    title = (link_label or plain_title or "").strip() or "Resource"
    url = link_url or plain_url or ""
    return ResourceItem(
        number=int(number),
        title=title,
        url=url,
        description=(description or "").strip(),
    )


def extract_resources(text: str) -> tuple[str, list[ResourceItem]]:
    """
    Pull resource citations out of the document.

    Returns the text with every matched citation removed together with the
    parsed items. Citations whose URL matches neither the bare nor the
    markdown-link form stay in the text and are logged.
    """
    items = [_resource_from_match(match) for match in RESOURCE_RE.finditer(text)]
    remaining = RESOURCE_RE.sub("", text)

    unmatched = RESOURCE_MARKER_RE.findall(remaining)
    if unmatched:
        logger.warning(
            f"Skipped {len(unmatched)} resource citation(s) without a recognizable URL; "
            "rendering them as plain text"
        )

    return remaining, items


def render_resource_list(items: list[ResourceItem]) -> str:
    lines = ["<ul>"]
    for item in items:
        lines.append(f"  <li>{escape_html(item.title)} - {escape_html(item.url)}</li>")
    lines.append("</ul>")
    return "\n".join(lines)
