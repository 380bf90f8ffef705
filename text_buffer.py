"""
A grow-on-write grid of characters, each carrying a style.

Rows and columns are created on demand; gaps are filled with unstyled
spaces. `render()` collapses every row into runs of equally styled text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Hashable, List

class Style(Enum):
    NO_STYLE = auto()
    HEADER_MSG = auto()
    LINE_AND_COLUMN = auto()
    QUOTATION = auto()
    UNDERLINE_PRIMARY = auto()
    UNDERLINE_SECONDARY = auto()
    LABEL_PRIMARY = auto()
    LABEL_SECONDARY = auto()
    OLD_SCHOOL_NOTE = auto()

@dataclass(frozen=True)
class StyledString:
    text: str
    style: Hashable

class TextBuffer2D:
    def __init__(self) -> None:
        self.text: List[List[str]] = []
        self.styles: List[List[Hashable]] = []

    def _ensure_lines(self, line: int) -> None:
        while line >= len(self.text):
            self.text.append([])
            self.styles.append([])

    def putc(self, line: int, col: int, ch: str, style: Hashable) -> None:
        self._ensure_lines(line)
        row, row_styles = self.text[line], self.styles[line]
        if col < len(row):
            row[col] = ch
            row_styles[col] = style
            return
        while len(row) < col:
            row.append(" ")
            row_styles.append(Style.NO_STYLE)
        row.append(ch)
        row_styles.append(style)

    def puts(self, line: int, col: int, string: str, style: Hashable) -> None:
        for n, ch in enumerate(string):
            self.putc(line, col + n, ch, style)

    def set_style(self, line: int, col: int, style: Hashable) -> None:
        if line < len(self.styles) and col < len(self.styles[line]):
            self.styles[line][col] = style

    def append(self, line: int, string: str, style: Hashable) -> None:
        if line >= len(self.text):
            self.puts(line, 0, string, style)
        else:
            self.puts(line, len(self.text[line]), string, style)

    def num_lines(self) -> int:
        return len(self.text)

    def render(self) -> List[List[StyledString]]:
        output: List[List[StyledString]] = []
        for row, row_styles in zip(self.text, self.styles):
            styled: List[StyledString] = []
            current_style: Hashable = Style.NO_STYLE
            current_text: List[str] = []
            for ch, style in zip(row, row_styles):
                if style != current_style:
                    if current_text:
                        styled.append(StyledString("".join(current_text), current_style))
                    current_style = style
                    current_text = []
                current_text.append(ch)
            if current_text:
                styled.append(StyledString("".join(current_text), current_style))
            output.append(styled)

        return output
