import pytest

from tileworld.textutil import (
    file_exists,
    iter_codepoints,
    next_utf8_codepoint,
    rich_text_bounds,
    text_bounds,
)

ADVANCES = {ord("a"): 10 << 6, ord("b"): 7 << 6, ord("é"): 12 << 6}


def test_file_exists_true(tmp_path):
    path = tmp_path / "present.txt"
    path.write_text("x")
    assert file_exists(path) is True


def test_file_exists_false(tmp_path):
    assert file_exists(tmp_path / "missing.txt") is False


def test_ascii_codepoint():
    assert next_utf8_codepoint(b"AB", 0) == (ord("A"), 1)
    assert next_utf8_codepoint(b"AB", 1) == (ord("B"), 2)


def test_two_byte_codepoint():
    data = "é".encode("utf-8")
    assert next_utf8_codepoint(data, 0) == (ord("é"), 2)


def test_three_byte_codepoint():
    data = "€".encode("utf-8")
    assert next_utf8_codepoint(data, 0) == (ord("€"), 3)


def test_four_byte_sequence_advances_four():
    data = "\U0001F600x".encode("utf-8")
    _, pos = next_utf8_codepoint(data, 0)
    assert pos == 4
    assert next_utf8_codepoint(data, pos) == (ord("x"), 5)


@pytest.mark.parametrize(
    "text", ["hello", "Съешь ещё этих мягких булок", "æøå €uro", ""]
)
def test_iter_codepoints_matches_decoding(text):
    assert list(iter_codepoints(text.encode("utf-8"))) == [ord(c) for c in text]


def test_iter_codepoints_accepts_str():
    assert list(iter_codepoints("aé")) == [ord("a"), ord("é")]


def test_truncated_sequence_raises():
    with pytest.raises(ValueError):
        next_utf8_codepoint("€".encode("utf-8")[:2], 0)


def test_position_out_of_range_raises():
    with pytest.raises(IndexError):
        next_utf8_codepoint(b"a", 1)


def test_empty_text_bounds_are_zero():
    assert text_bounds("", 16.0, 16.0, ADVANCES) == (0.0, 0.0)


def test_width_grows_linearly():
    one_width, _ = text_bounds("a", 16.0, 16.0, ADVANCES)
    three_width, _ = text_bounds("aaa", 16.0, 16.0, ADVANCES)
    assert three_width == pytest.approx(3 * one_width)


def test_width_scales_with_size():
    small, _ = text_bounds("ab", 16.0, 16.0, ADVANCES)
    large, _ = text_bounds("ab", 32.0, 16.0, ADVANCES)
    assert large == pytest.approx(2 * small)


def test_newline_adds_size_to_height():
    _, height = text_bounds("a\na\n", 20.0, 16.0, ADVANCES)
    assert height == pytest.approx(40.0)


def test_width_is_widest_line():
    widest, _ = text_bounds("aaa", 16.0, 16.0, ADVANCES)
    width, _ = text_bounds("a\naaa\nb", 16.0, 16.0, ADVANCES)
    assert width == pytest.approx(widest)


def test_missing_glyph_raises():
    with pytest.raises(KeyError):
        text_bounds("z", 16.0, 16.0, ADVANCES)


def test_rich_text_single_section_equals_plain():
    assert rich_text_bounds([("abé", 18.0)], 16.0, ADVANCES) == text_bounds(
        "abé", 18.0, 16.0, ADVANCES
    )


def test_rich_text_takes_maximum_of_sections():
    sections = [("aaaa", 16.0), ("b\nb\nb", 24.0)]
    width, height = rich_text_bounds(sections, 16.0, ADVANCES)
    first = text_bounds("aaaa", 16.0, 16.0, ADVANCES)
    second = text_bounds("b\nb\nb", 24.0, 16.0, ADVANCES)
    assert width == max(first[0], second[0])
    assert height == max(first[1], second[1])