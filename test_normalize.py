"""Line-ending normalization of outgoing programs."""

import pytest

from cosirelay.transport import normalize_program


@pytest.mark.parametrize("program", ["", "\n\n\r\n", "   \r\n\t\r", "\r\r\r"])
def test_blank_input_gives_empty_string(program):
    assert normalize_program(program) == ""


def test_unix_lines_joined_with_cr():
    assert normalize_program("00 sp 50\n00 mo 1 100") == "00 sp 50\r00 mo 1 100"


def test_windows_lines_joined_with_cr():
    assert normalize_program("00 sp 50\r\n00 mo 1 100\r\n") == "00 sp 50\r00 mo 1 100"


def test_lone_cr_kept_as_separator():
    assert normalize_program("a\rb\rc") == "a\rb\rc"


def test_mixed_endings_and_blank_lines_dropped():
    program = "\r\n00 ho\n\n   \r\n00 mv 1\r\r00 st\n"
    out = normalize_program(program)

    assert out == "00 ho\r00 mv 1\r00 st"
    assert "\n" not in out
    assert all(seg.strip() for seg in out.split("\r"))


def test_no_trailing_separator():
    assert not normalize_program("00 ve\n").endswith("\r")


def test_line_content_is_not_trimmed():
    # пробелы внутри строки контроллер может учитывать – не трогаем
    assert normalize_program("  00 rd 3  \n") == "  00 rd 3  "
