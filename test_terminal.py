import io

import pytest

from codemap import CodeMap, Span
from diagnostic import Diagnostic, Level, SnippetRenderer
from terminal import TerminalEmitter, TerminalTheme
from text_buffer import Style, StyledString

@pytest.fixture
def sample_emitter():
    cm = CodeMap()
    cm.new_filemap("demo.cool", "fun main() {\n    let x = 1 + ;\n}\n")
    return TerminalEmitter(SnippetRenderer(cm), TerminalTheme(use_color=False))

def test_paint_without_color():
    theme = TerminalTheme()
    assert theme.paint(Level.ERROR, "error") == "error"

def test_paint_with_color():
    theme = TerminalTheme(use_color=True)
    assert theme.paint(Style.UNDERLINE_PRIMARY, "^") == "\x1b[1;31m^\x1b[0m"
    assert theme.paint(Style.NO_STYLE, "   ") == "   "

def test_format_lines():
    theme = TerminalTheme()
    lines = [[StyledString("a", Style.QUOTATION), StyledString("b", Style.QUOTATION)], []]
    assert theme.format_lines(lines) == "ab\n"

def test_format(sample_emitter):
    diag = Diagnostic(Level.ERROR, "expected expression", Span(29, 30)).span_label(Span(29, 30), "here")

    assert sample_emitter.format(diag) == (
        "error: expected expression\n"
        "demo.cool:2:17: 2:18\n"
        "    let x = 1 + ;\n"
        "                ^ here"
    )

def test_emit_writes_to_stream(sample_emitter):
    buf = io.StringIO()
    sample_emitter.emit_all(
        [
            Diagnostic(Level.WARNING, "dummy", Span(0, 3)),
            Diagnostic(Level.NOTE, "other", Span(0, 3)),
        ],
        out=buf,
    )
    assert buf.getvalue() == "warning: dummy\ndemo.cool:1:1: 1:4\nnote: other\ndemo.cool:1:1: 1:4\n"
