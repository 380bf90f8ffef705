"""
Turns styled lines into terminal text.

Colour is opt-in; the stream is never probed for capabilities.
"""

from __future__ import annotations

import sys
from typing import Dict, Hashable, List, Optional, Sequence, TextIO

from diagnostic import Diagnostic, Level, SnippetRenderer
from text_buffer import Style, StyledString

class TerminalTheme:
    def __init__(self, use_color: bool = False):
        self.use_color = use_color
        self.reset = "\x1b[0m"
        self.palette: Dict[Hashable, str] = {
            Level.BUG: "\x1b[1;31m",
            Level.FATAL: "\x1b[1;31m",
            Level.ERROR: "\x1b[1;31m",
            Level.WARNING: "\x1b[1;33m",
            Level.NOTE: "\x1b[1;32m",
            Level.HELP: "\x1b[1;36m",
            Style.HEADER_MSG: "\x1b[1m",
            Style.LINE_AND_COLUMN: "\x1b[1;34m",
            Style.UNDERLINE_PRIMARY: "\x1b[1;31m",
            Style.LABEL_PRIMARY: "\x1b[1;31m",
            Style.UNDERLINE_SECONDARY: "\x1b[1;34m",
            Style.LABEL_SECONDARY: "\x1b[1;34m",
            Style.OLD_SCHOOL_NOTE: "\x1b[1;32m",
        }

    def paint(self, style: Hashable, text: str) -> str:
        code = self.palette.get(style)
        if not self.use_color or code is None:
            return text

        return f"{code}{text}{self.reset}"

    def format_lines(self, lines: Sequence[Sequence[StyledString]]) -> str:
        return "\n".join("".join(self.paint(s.style, s.text) for s in line) for line in lines)

class TerminalEmitter:
    """Prints rendered diagnostics to a stream."""

    def __init__(self, renderer: SnippetRenderer, theme: Optional[TerminalTheme] = None):
        self.renderer = renderer
        self.theme = theme or TerminalTheme()

    def format(self, diag: Diagnostic) -> str:
        return self.theme.format_lines(self.renderer.render(diag))

    def emit(self, diag: Diagnostic, *, out: TextIO = sys.stdout) -> None:
        out.write(self.format(diag) + "\n")

    def emit_all(self, diags: List[Diagnostic], *, out: TextIO = sys.stdout) -> None:
        for diag in diags:
            self.emit(diag, out=out)


if __name__ == "__main__":
    from codemap import CodeMap, MemorySourceProvider, Span
    from diagnostic import RenderOptions

    cm = CodeMap(
        MemorySourceProvider(
            {
                "borrow.rs": "fn main() {\n    vec.push(vec.pop().unwrap());\n}\n",
                "sig.rs": "fn foo(x: u32) {",
            }
        )
    )
    borrow = cm.load_file("borrow.rs")
    sig = cm.load_file("sig.rs")

    def at(fm, lo, hi):
        return Span(fm.start_pos + lo, fm.start_pos + hi)

    d1 = Diagnostic(Level.ERROR, "cannot borrow `vec` as mutable more than once", at(borrow, 25, 28))
    d1.span_label(at(borrow, 16, 19), "first mutable borrow occurs here")
    d1.span_label(at(borrow, 25, 28), "second mutable borrow occurs here")
    d1.span_label(at(borrow, 43, 44), "first borrow ends here")

    d2 = Diagnostic(Level.WARNING, "unused variable: `x`", at(sig, 7, 8))
    d2.span_label(at(sig, 0, 14), "fn_span").span_label(at(sig, 7, 8), "x_span")

    d3 = Diagnostic(Level.ERROR, "unexpected end of file", at(sig, 16, 16))
    d3.span_label(at(sig, 16, 16), "expected `}`")

    TerminalEmitter(SnippetRenderer(cm), TerminalTheme(use_color=True)).emit_all([d1, d2, d3])
    TerminalEmitter(SnippetRenderer(cm, RenderOptions(old_school=True))).emit(d1)
