"""Split AI-formatted field notes into their canonical sections.

The notes are semi-structured text, so this is a best-effort scan for four known headers rather
than a grammar. Headers may appear bold (``**Interventions:**``), as markdown headings
(``## Interventions``) or as plain text, in any order, and any of them may be missing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

TASKS = "TASKS & PRODUCTIVITY"
BARRIERS = "BARRIERS & BEHAVIORS"
INTERVENTIONS = "INTERVENTIONS"
PROGRESS = "PROGRESS ON GOALS"

CANONICAL_HEADERS = (TASKS, BARRIERS, INTERVENTIONS, PROGRESS)

_HEADER_PATTERNS = (
    (TASKS, r"tasks?\s*(?:&|and)?\s*productivity"),
    (BARRIERS, r"barriers?\s*(?:&|and)?\s*behaviou?rs?"),
    (INTERVENTIONS, r"interventions?"),
    (PROGRESS, r"progress\s*(?:on\s*)?goals?"),
)

_HEADER_RE = re.compile(
    r"(?:^[ \t]*#{1,6}[ \t]*)?"
    r"\*{0,2}[ \t]*(?P<name>"
    + "|".join(f"(?P<h{index}>{pattern})" for index, (_, pattern) in enumerate(_HEADER_PATTERNS))
    + r")[ \t]*:?[ \t]*\*{0,2}[ \t]*:?",
    re.IGNORECASE | re.MULTILINE,
)

_REPLACEMENTS = {
    chr(0x2026): "...",
    chr(0x2018): "'",
    chr(0x2019): "'",
    chr(0x201A): "'",
    chr(0x201B): "'",
    chr(0x201C): '"',
    chr(0x201D): '"',
    chr(0x201E): '"',
    chr(0x2013): "-",
    chr(0x2014): "-",
    chr(0x2212): "-",
    chr(0x00A0): " ",
    chr(0x2022): "*",
}


@dataclass(frozen=True)
class NarrativeSection:
    header: str
    content: str


def _label_for(match: re.Match[str]) -> str:
    for index, (label, _) in enumerate(_HEADER_PATTERNS):
        if match.group(f"h{index}") is not None:
            return label
    return ""


def parse_sections(note: str | None) -> list[NarrativeSection]:
    """Return the note's sections in order of appearance.

    Text before the first header, or a note without headers, comes back with ``header=""``.
    Empty chunks are never emitted; headers without content are dropped.
    """
    if not note:
        return []

    sections: list[NarrativeSection] = []
    header = ""
    position = 0
    for match in _HEADER_RE.finditer(note):
        chunk = note[position:match.start()].strip()
        if chunk:
            sections.append(NarrativeSection(header=header, content=chunk))
        header = _label_for(match)
        position = match.end()

    tail = note[position:].strip()
    if tail:
        sections.append(NarrativeSection(header=header, content=tail))
    return sections


def sanitize_text(text: str | None) -> str:
    """Map typographic characters to ASCII and drop anything the PDF fonts cannot encode."""
    if not text:
        return ""
    for source, target in _REPLACEMENTS.items():
        text = text.replace(source, target)
    return text.encode("ascii", "ignore").decode("ascii")
