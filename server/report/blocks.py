"""
Line scanner that turns the pre-processed report into a Document.

Lines are classified into tokens first; a small state machine then walks
the token stream and assembles sections, lists and paragraphs.
"""

import re
from dataclasses import dataclass
from enum import Enum

from .document import Document, Section
from .markup import BlockStash, PLACEHOLDER_RE, render_inline

SECTION_HEADING_RE = re.compile(r"^##\s+(\d+)\.\s+(.+?)\s*#*$")
SUBHEADING_RE = re.compile(r"^###\s+(.+?)\s*#*$")
BULLET_RE = re.compile(r"^-\s+(.*)$")
NUMBERED_RE = re.compile(r"^\d+\.\s+(.*)$")


class TokenKind(str, Enum):
    BLANK = "blank"
    SECTION = "section"
    SUBHEADING = "subheading"
    MARKUP = "markup"
    BULLET = "bullet"
    NUMBERED = "numbered"
    TEXT = "text"


@dataclass
class Token:
    kind: TokenKind
    text: str = ""
    number: int | None = None


def classify_line(line: str, stash: BlockStash | None = None) -> Token:
    """Classify one line. Priority matches the order of the checks below."""
    stripped = line.strip()

    if not stripped:
        return Token(TokenKind.BLANK)

    placeholder = PLACEHOLDER_RE.fullmatch(stripped)
    if placeholder and stash is not None:
        return Token(TokenKind.MARKUP, text=stash.expand(stripped))

    match = SECTION_HEADING_RE.match(stripped)
    if match:
        return Token(TokenKind.SECTION, text=match.group(2), number=int(match.group(1)))

    match = SUBHEADING_RE.match(stripped)
    if match:
        return Token(TokenKind.SUBHEADING, text=match.group(1))

    match = BULLET_RE.match(stripped)
    if match:
        return Token(TokenKind.BULLET, text=match.group(1).strip())

    match = NUMBERED_RE.match(stripped)
    if match:
        return Token(TokenKind.NUMBERED, text=match.group(1).strip())

    return Token(TokenKind.TEXT, text=stripped)


def tokenize(text: str, stash: BlockStash | None = None) -> list[Token]:
    return [classify_line(line, stash) for line in text.split("\n")]


# =============================================================================
# SCANNER
# =============================================================================

class ListState(str, Enum):
    NONE = "none"
    UNORDERED = "ul"
    ORDERED = "ol"


class BlockScanner:
    """
    Walks tokens left to right, tracking whether a list is open and of
    which kind. A kind switch closes the open list before opening the new one.
    """

    def __init__(self, stash: BlockStash | None = None):
        self.stash = stash
        self.state = ListState.NONE
        self.document = Document(sections=[Section()])

    @property
    def current(self) -> Section:
        return self.document.sections[-1]

    def _inline(self, text: str) -> str:
        html = render_inline(text)
        if self.stash is not None:
            html = self.stash.expand(html)
        return html

    def _emit(self, html: str) -> None:
        self.current.body.append(html)

    def close_list(self) -> None:
        if self.state is not ListState.NONE:
            self._emit(f"</{self.state.value}>")
            self.state = ListState.NONE

    def _list_item(self, kind: ListState, text: str) -> None:
        if self.state is not kind:
            self.close_list()
            self._emit(f"<{kind.value}>")
            self.state = kind
        self._emit(f"  <li><p>{self._inline(text)}</p></li>")

    def feed(self, token: Token) -> None:
        if token.kind is TokenKind.BLANK:
            self.close_list()
        elif token.kind is TokenKind.SECTION:
            self.close_list()
            self.document.sections.append(Section(number=token.number, title=token.text))
        elif token.kind is TokenKind.SUBHEADING:
            self.close_list()
            self._emit(f"<h3>{self._inline(token.text)}</h3>")
        elif token.kind is TokenKind.MARKUP:
            self.close_list()
            self._emit(token.text)
        elif token.kind is TokenKind.BULLET:
            self._list_item(ListState.UNORDERED, token.text)
        elif token.kind is TokenKind.NUMBERED:
            self._list_item(ListState.ORDERED, token.text)
        else:
            self.close_list()
            self._emit(f"<p>{self._inline(token.text)}</p>")

    def finish(self) -> Document:
        self.close_list()
        return self.document


def scan_blocks(text: str, stash: BlockStash | None = None) -> Document:
    scanner = BlockScanner(stash)
    for token in tokenize(text, stash):
        scanner.feed(token)
    return scanner.finish()


def normalize_blocks(text: str, stash: BlockStash | None = None) -> str:
    """Headings, lists and paragraphs to section-wrapped HTML."""
    return scan_blocks(text, stash).to_html()
