from __future__ import annotations
import re
from dataclasses import dataclass, replace
from typing import Callable, Tuple
from markupsafe import escape
HEADING_1_PATTERN = re.compile(r"^# (.+)$")
HEADING_2_PATTERN = re.compile(r"^## (.+)$")
BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
BLOCKQUOTE_PATTERN = re.compile(r"^> (.+)$")
LIST_ITEM_PATTERN = re.compile(r"^\* (.+)$")
LIST_RUN_PATTERN = re.compile(r"(<li>.*</li>\n?)+")
ALIGNMENT_CELL_PATTERN = re.compile(r"^:?-+:?$")
HORIZONTAL_RULE = "---"
@dataclass(frozen=True)
class Document:
    """Lines being rewritten plus the untouched input lines.
    Every pass keeps ``lines`` aligned with ``source`` until the table pass,
    which looks up header rows by the original adjacency.
    """
    lines: Tuple[str, ...]
    source: Tuple[str, ...]
    @classmethod
    def from_text(cls, text: str) -> "Document":
        lines = tuple(text.replace("\r\n", "\n").split("\n"))
        return cls(lines=lines, source=lines)
    def text(self) -> str:
        return "\n".join(self.lines)
@dataclass(frozen=True)
class TableState:
    inside_table: bool = False
    pending_rows: Tuple[str, ...] = ()
    emitted: Tuple[str, ...] = ()
    def close(self, trailing: str = "") -> "TableState":
        table = "<table>" + "".join(self.pending_rows) + "</table>"
        return TableState(emitted=self.emitted + (table + trailing,))
RenderStep = Callable[[Document], Document]
def _map_lines(pattern: re.Pattern, template: str) -> RenderStep:
    def step(document: Document) -> Document:
        return replace(document, lines=tuple(pattern.sub(template, line) for line in document.lines))
    return step
def _wrap_lists(document: Document) -> Document:
    wrapped = LIST_RUN_PATTERN.sub(lambda match: f"<ul>{match.group(0)}</ul>", document.text())
    return replace(document, lines=tuple(wrapped.split("\n")))
def split_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.split("|") if cell.strip()]
def is_alignment_row(cells: list[str]) -> bool:
    return all(ALIGNMENT_CELL_PATTERN.match(cell) for cell in cells)
def _is_header_row(document: Document, index: int) -> bool:
    return index == 0 or "|" not in document.source[index - 1]
def _table_step(document: Document, state: TableState, index: int) -> TableState:
    line = document.lines[index]
    if "|" not in line:
        if state.inside_table:
            return state.close(trailing=line)
        return replace(state, emitted=state.emitted + (line,))
    cells = split_cells(line)
    if is_alignment_row(cells):
        return replace(state, inside_table=True)
    tag = "th" if _is_header_row(document, index) else "td"
    row = "<tr>" + "".join(f"<{tag}>{cell}</{tag}>" for cell in cells) + "</tr>"
    return replace(state, inside_table=True, pending_rows=state.pending_rows + (row,))
def convert_tables(document: Document) -> Document:
    state = TableState()
    for index in range(len(document.lines)):
        state = _table_step(document, state, index)
    if state.inside_table:
        state = state.close()
    # A table's lines collapse into one, so source alignment ends here.
    return replace(document, lines=state.emitted)
def _horizontal_rules(document: Document) -> Document:
    return replace(
        document,
        lines=tuple("<hr>" if line == HORIZONTAL_RULE else line for line in document.lines),
    )
RENDER_STEPS: Tuple[RenderStep, ...] = (
    _map_lines(HEADING_1_PATTERN, r"<h1>\1</h1>"),
    _map_lines(HEADING_2_PATTERN, r"<h2>\1</h2>"),
    _map_lines(BOLD_PATTERN, r"<strong>\1</strong>"),
    _map_lines(BLOCKQUOTE_PATTERN, r"<blockquote>\1</blockquote>"),
    _map_lines(LIST_ITEM_PATTERN, r"<li>\1</li>"),
    _wrap_lists,
    convert_tables,
    _horizontal_rules,
)
def _wrap_paragraphs(html: str) -> str:
    return "<p>" + html.replace("\n\n", "</p><p>") + "</p>"
def _escape_line(line: str) -> str:
    escaped = str(escape(line))
    if line.startswith("> "):
        return "> " + escaped[len("&gt; "):]
    return escaped
def render_markdown(markdown: str, *, escape_html: bool = False) -> str:
    """Render the report markdown dialect to an HTML fragment.
    Supports ``#``/``##`` headings, ``**bold**``, ``> `` quotes, ``* `` lists,
    pipe tables, ``---`` rules and blank-line paragraphs. Unknown syntax is
    left as text. Output is not valid input: rendering twice double-wraps.
    With ``escape_html`` the text is HTML-escaped first so that model output
    cannot inject markup; the markers above keep their meaning.
    """
    document = Document.from_text(markdown or "")
    if escape_html:
        document = replace(document, lines=tuple(_escape_line(line) for line in document.lines))
    for step in RENDER_STEPS:
        document = step(document)
    return _wrap_paragraphs(document.text())
