from text_buffer import Style, StyledString, TextBuffer2D

def test_putc_pads_with_unstyled_spaces():
    buf = TextBuffer2D()
    buf.putc(1, 3, "^", Style.UNDERLINE_PRIMARY)

    assert buf.num_lines() == 2
    assert buf.render() == [
        [],
        [StyledString("   ", Style.NO_STYLE), StyledString("^", Style.UNDERLINE_PRIMARY)],
    ]

def test_puts_overwrites():
    buf = TextBuffer2D()
    buf.puts(0, 0, "-----", Style.UNDERLINE_SECONDARY)
    buf.puts(0, 2, "^", Style.UNDERLINE_PRIMARY)

    assert buf.render() == [
        [
            StyledString("--", Style.UNDERLINE_SECONDARY),
            StyledString("^", Style.UNDERLINE_PRIMARY),
            StyledString("--", Style.UNDERLINE_SECONDARY),
        ]
    ]

def test_append_continues_row():
    buf = TextBuffer2D()
    buf.append(0, "error", Style.HEADER_MSG)
    buf.append(0, ": boom", Style.HEADER_MSG)
    buf.append(2, "x", Style.QUOTATION)

    assert buf.render() == [
        [StyledString("error: boom", Style.HEADER_MSG)],
        [],
        [StyledString("x", Style.QUOTATION)],
    ]

def test_set_style():
    buf = TextBuffer2D()
    buf.append(0, "abc", Style.QUOTATION)
    buf.set_style(0, 1, Style.UNDERLINE_PRIMARY)
    buf.set_style(0, 10, Style.UNDERLINE_PRIMARY)
    buf.set_style(5, 0, Style.UNDERLINE_PRIMARY)

    assert buf.num_lines() == 1
    assert buf.render() == [
        [
            StyledString("a", Style.QUOTATION),
            StyledString("b", Style.UNDERLINE_PRIMARY),
            StyledString("c", Style.QUOTATION),
        ]
    ]

def test_any_hashable_style():
    buf = TextBuffer2D()
    buf.append(0, "warning", "level")
    assert buf.render() == [[StyledString("warning", "level")]]
