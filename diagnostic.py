"""
Annotated source snippets for compiler diagnostics.

A `Diagnostic` collects labelled spans; `SnippetRenderer` lays them out
under the source lines they point at and returns styled rows:

error: mismatched borrow
demo.rs:1:10: 1:13
vec.push(vec.pop().unwrap());
---      ^^^ error occurs here
|
previous borrow of `vec` occurs here

When labels would collide they hang below the underline on their own
rows, joined to it by `|` connectors:

fn foo(x: u32) {
--------------
|      |
|      x_span
fn_span

Rendering never touches a stream; see `terminal` for printing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from codemap import CodeMap, CodeMapError, Span
from text_buffer import Style, StyledString, TextBuffer2D

logger = logging.getLogger(__name__)

class Level(Enum):
    BUG = auto()
    FATAL = auto()
    ERROR = auto()
    WARNING = auto()
    NOTE = auto()
    HELP = auto()

    def __str__(self) -> str:
        return _LEVEL_TITLES[self]

_LEVEL_TITLES = {
    Level.BUG: "error: internal compiler error",
    Level.FATAL: "error",
    Level.ERROR: "error",
    Level.WARNING: "warning",
    Level.NOTE: "note",
    Level.HELP: "help",
}

@dataclass(frozen=True)
class SpanLabel:
    span: Span
    is_primary: bool
    label: Optional[str] = None

@dataclass(frozen=True)
class Annotation:
    """One underline on one source line.

    Columns are 0-based and count characters; `end_col` is exclusive.
    """

    start_col: int
    end_col: int
    is_primary: bool = False
    # a multi-line span squeezed down to a single caret
    is_minimized: bool = False
    label: Optional[str] = None

@dataclass
class Line:
    span: Span
    annotations: List[Annotation] = field(default_factory=list)

@dataclass
class Diagnostic:
    level: Level
    message: str
    primary_span: Span
    span_labels: List[SpanLabel] = field(default_factory=list)

    def span_label(self, span: Span, label: Optional[str] = None) -> Diagnostic:
        self.span_labels.append(SpanLabel(span, span == self.primary_span, label))
        return self

@dataclass
class RenderOptions:
    # caret-and-tilde underlines, no labels
    old_school: bool = False

def overlaps(a1: Annotation, a2: Annotation) -> bool:
    return (a2.start_col <= a1.start_col < a2.end_col
            or a1.start_col <= a2.start_col < a1.end_col)

def sort_annotations(annotations: Sequence[Annotation]) -> List[Annotation]:
    return sorted(annotations, key=lambda a: (a.start_col, a.end_col))

def build_annotation(span_label: SpanLabel, cm: CodeMap) -> Tuple[str, int, Annotation]:
    """Resolve a span label to ``(filename, line number, annotation)``."""
    lo = cm.lookup_char_pos(span_label.span.lo)
    hi = cm.lookup_char_pos(span_label.span.hi)

    if lo.line != hi.line:
        start_col, end_col, is_minimized = lo.col, lo.col + 1, True
    else:
        start_col, end_col, is_minimized = lo.col, hi.col, False

    # Empty spans such as EOF still get a single `^`.
    if end_col <= start_col:
        end_col = start_col + 1

    annotation = Annotation(start_col, end_col, span_label.is_primary, is_minimized, span_label.label)

    return lo.file.name, lo.line, annotation

def group_lines(span_labels: Sequence[SpanLabel], cm: CodeMap) -> Dict[str, Dict[int, Line]]:
    file_map: Dict[str, Dict[int, Line]] = {}
    for span_label in span_labels:
        try:
            filename, line_no, annotation = build_annotation(span_label, cm)
        except CodeMapError as e:
            logger.warning("dropping label %r: %s", span_label.label, e)
            continue
        line_map = file_map.setdefault(filename, {})
        line = line_map.setdefault(line_no, Line(span_label.span))
        line.annotations.append(annotation)

    return file_map

def iter_lines(file_map: Dict[str, Dict[int, Line]]) -> Iterator[Line]:
    # TODO: print the primary file first instead of going alphabetically
    for filename in sorted(file_map):
        line_map = file_map[filename]
        for line_no in sorted(line_map):
            yield line_map[line_no]

def _draw_old_school(buffer: TextBuffer2D, line_offset: int, annotations: Sequence[Annotation]) -> None:
    for annotation in annotations:
        style = Style.UNDERLINE_PRIMARY if annotation.is_primary else Style.OLD_SCHOOL_NOTE
        for p in range(annotation.start_col, annotation.end_col):
            buffer.putc(line_offset + 1, p, "^" if p == annotation.start_col else "~", style)

def draw_annotations(
    buffer: TextBuffer2D,
    line_offset: int,
    annotations: Sequence[Annotation],
    old_school: bool = False,
) -> None:
    """Draw underlines and labels below the source text at `line_offset`.

    Overlapping underlines overwrite each other in column order. Labels go
    on the underline row when the rightmost labelled annotation is clear of
    everything else; otherwise, and for all the others, each label hangs
    below its start column, one row further down for every label still
    waiting to its right, so their `|` connectors never cross a label:

        vec.push(vec.pop().unwrap());
        ---      ^^^               - previous borrow ends here
        |        |
        |        error occurs here
        previous borrow of `vec` occurs here
    """
    annotations = sort_annotations(annotations)
    if not annotations:
        return

    if old_school:
        _draw_old_school(buffer, line_offset, annotations)
        return

    for annotation in annotations:
        if annotation.is_primary:
            mark, style = "^", Style.UNDERLINE_PRIMARY
        else:
            mark, style = "-", Style.UNDERLINE_SECONDARY
        for p in range(annotation.start_col, annotation.end_col):
            buffer.putc(line_offset + 1, p, mark, style)
            if not annotation.is_minimized:
                buffer.set_style(line_offset, p, style)

    labeled = [a for a in annotations if a.label is not None]
    unlabeled = [a for a in annotations if a.label is None]
    if not labeled:
        return

    *previous, last = labeled
    if not any(overlaps(a, last) for a in previous + unlabeled):
        style = Style.LABEL_PRIMARY if last.is_primary else Style.LABEL_SECONDARY
        buffer.append(line_offset + 1, f" {last.label}", style)
        labeled = previous

    for index, annotation in enumerate(labeled):
        comes_after = len(labeled) - index - 1
        blank_lines = 3 + comes_after
        if annotation.is_primary:
            connector, label_style = Style.UNDERLINE_PRIMARY, Style.LABEL_PRIMARY
        else:
            connector, label_style = Style.UNDERLINE_SECONDARY, Style.LABEL_SECONDARY
        for row in range(2, blank_lines):
            buffer.putc(line_offset + row, annotation.start_col, "|", connector)
        buffer.puts(line_offset + blank_lines, annotation.start_col, annotation.label, label_style)

    if labeled:
        logger.debug("laid out %d hanging label(s) at row %d", len(labeled), line_offset)

class SnippetRenderer:
    """Lays out a `Diagnostic` against the sources in a `CodeMap`."""

    def __init__(self, cm: CodeMap, options: Optional[RenderOptions] = None):
        self.cm = cm
        self.opt = options or RenderOptions()

    def render(self, diag: Diagnostic) -> List[List[StyledString]]:
        buffer = TextBuffer2D()
        self._render_header(buffer, diag)
        self._render_source_lines(buffer, diag)

        return buffer.render()

    def _render_header(self, buffer: TextBuffer2D, diag: Diagnostic) -> None:
        buffer.append(0, str(diag.level), diag.level)
        buffer.append(0, ": ", Style.HEADER_MSG)
        buffer.append(0, diag.message, Style.HEADER_MSG)

        try:
            position = self.cm.span_to_string(diag.primary_span)
        except CodeMapError as e:
            logger.warning("cannot locate primary span: %s", e)
            position = "(span out of range)"
        buffer.append(1, position, Style.LINE_AND_COLUMN)

    def _render_source_lines(self, buffer: TextBuffer2D, diag: Diagnostic) -> None:
        file_map = group_lines(diag.span_labels, self.cm)
        for line in iter_lines(file_map):
            self._render_source_line(buffer, line)

    def _source_text(self, line: Line) -> str:
        try:
            result = self.cm.span_to_lines(line.span)
        except CodeMapError as e:
            logger.warning("cannot fetch source line: %s", e)
            return ""
        return result.file.get_line(result.lines[0].line_index) or ""

    def _render_source_line(self, buffer: TextBuffer2D, line: Line) -> None:
        line_offset = buffer.num_lines()
        buffer.append(line_offset, self._source_text(line), Style.QUOTATION)
        draw_annotations(buffer, line_offset, line.annotations, self.opt.old_school)
