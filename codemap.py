"""
Source positions for diagnostics.

Every loaded file occupies its own range of global character positions, so
a `Span` is just a pair of integers and can be resolved back to a file,
a 1-based line and a 0-based column. Columns count characters, never bytes,
which keeps underlines aligned with multi-byte text.

    cm = CodeMap()
    fm = cm.new_filemap("demo.cool", "let x = 1 + ;\n")
    sp = Span(fm.start_pos + 12, fm.start_pos + 13)
    cm.span_to_string(sp)   # 'demo.cool:1:13: 1:14'
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

class CodeMapError(LookupError):
    """Base class for position lookup failures."""

class NoSuchFileError(CodeMapError):
    pass

class UnknownPositionError(CodeMapError):
    pass

class SpanLinesError(CodeMapError):
    pass

class DistinctSourcesError(SpanLinesError):
    pass

class MalformedSpanError(SpanLinesError):
    pass

@dataclass(frozen=True)
class Span:
    """Half-open range of global character positions."""

    lo: int
    hi: int

class SourceProvider:
    """Abstract interface."""
    def get(self, _path: str) -> Optional[str]:
        raise NotImplementedError

class FileSystemSourceProvider(SourceProvider):
    def get(self, path: str) -> Optional[str]:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError:
            return None

class MemorySourceProvider(SourceProvider):
    def __init__(self, files: Dict[str, str]):
        self.files = dict(files)

    def get(self, path: str) -> Optional[str]:
        return self.files.get(path)

@dataclass(eq=False)
class FileMap:
    name: str
    src: str
    start_pos: int
    lines: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.lines:
            self.lines = [0]
            for i, ch in enumerate(self.src):
                if ch == "\n":
                    self.lines.append(i + 1)

    @property
    def end_pos(self) -> int:
        return self.start_pos + len(self.src)

    def contains(self, pos: int) -> bool:
        # end_pos itself is valid: parsers point EOF diagnostics there
        return self.start_pos <= pos <= self.end_pos

    def lookup_line(self, pos: int) -> int:
        """0-based index of the line holding `pos`."""
        return bisect.bisect_right(self.lines, pos - self.start_pos) - 1

    def get_line(self, index: int) -> Optional[str]:
        if not 0 <= index < len(self.lines):
            return None
        begin = self.lines[index]
        end = self.src.find("\n", begin)
        text = self.src[begin:] if end < 0 else self.src[begin:end]

        return text[:-1] if text.endswith("\r") else text

@dataclass(frozen=True)
class Loc:
    file: FileMap
    line: int
    col: int

@dataclass(frozen=True)
class LineInfo:
    line_index: int
    start_col: int
    end_col: int

@dataclass(frozen=True)
class FileLines:
    file: FileMap
    lines: List[LineInfo]

class CodeMap:
    def __init__(self, provider: Optional[SourceProvider] = None):
        self.files: List[FileMap] = []
        self.provider = provider or FileSystemSourceProvider()

    def _next_start_pos(self) -> int:
        if not self.files:
            return 0
        return self.files[-1].end_pos + 1

    def new_filemap(self, name: str, src: str) -> FileMap:
        fm = FileMap(name, src, self._next_start_pos())
        self.files.append(fm)
        logger.debug("registered %s at %d..%d", name, fm.start_pos, fm.end_pos)

        return fm

    def load_file(self, path: str) -> FileMap:
        src = self.provider.get(path)
        if src is None:
            raise NoSuchFileError(f"no such file: {path}")
        return self.new_filemap(path, src)

    def lookup_filemap(self, pos: int) -> FileMap:
        for fm in self.files:
            if fm.contains(pos):
                return fm
        raise UnknownPositionError(f"position {pos} is not inside any known file")

    def lookup_char_pos(self, pos: int) -> Loc:
        fm = self.lookup_filemap(pos)
        index = fm.lookup_line(pos)
        col = pos - fm.start_pos - fm.lines[index]

        return Loc(fm, index + 1, col)

    def span_to_filename(self, span: Span) -> str:
        return self.lookup_filemap(span.lo).name

    def span_to_string(self, span: Span) -> str:
        lo = self.lookup_char_pos(span.lo)
        hi = self.lookup_char_pos(span.hi)

        return f"{lo.file.name}:{lo.line}:{lo.col + 1}: {hi.line}:{hi.col + 1}"

    def span_to_lines(self, span: Span) -> FileLines:
        if span.hi < span.lo:
            raise MalformedSpanError(f"span {span.lo}..{span.hi} ends before it starts")

        lo = self.lookup_char_pos(span.lo)
        hi = self.lookup_char_pos(span.hi)
        if lo.file is not hi.file:
            raise DistinctSourcesError(
                f"span crosses from {lo.file.name} into {hi.file.name}"
            )

        lines: List[LineInfo] = []
        for line_index in range(lo.line - 1, hi.line):
            start_col = lo.col if line_index == lo.line - 1 else 0
            if line_index == hi.line - 1:
                end_col = hi.col
            else:
                end_col = len(lo.file.get_line(line_index) or "")
            lines.append(LineInfo(line_index, start_col, end_col))

        return FileLines(lo.file, lines)
