"""File checks, UTF-8 decoding and text measurement helpers."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Tuple, Union

TextLike = Union[str, bytes]


def file_exists(path) -> bool:
    """True when ``path`` can be opened for reading."""
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def _as_bytes(data: TextLike) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def next_utf8_codepoint(data: bytes, pos: int = 0) -> Tuple[int, int]:
    """Decode the code point starting at ``pos``; return it and the next position."""
    if not 0 <= pos < len(data):
        raise IndexError(f"position {pos} outside data of length {len(data)}")
    lead = data[pos]

    if lead & 0xF8 == 0xF0:
        length = 4
    elif lead & 0xF0 == 0xE0:
        length = 3
    elif lead & 0xE0 == 0xC0:
        length = 2
    else:
        return lead, pos + 1

    if pos + length > len(data):
        raise ValueError(f"truncated UTF-8 sequence at position {pos}")
    chunk = data[pos:pos + length]
    b1 = chunk[-1]
    b2 = chunk[-2]
    y = ((b1 & 0x30) >> 4) | ((b2 & 0x03) << 2)
    z = b1 & 0x0F

    if length == 2:
        x = (b2 & 0x1C) >> 2
        return (x << 8) | (y << 4) | z, pos + length

    x = (b2 & 0x3C) >> 2
    b3 = chunk[-3]
    w = b3 & 0x0F
    if length == 3:
        return (w << 12) | (x << 8) | (y << 4) | z, pos + length

    b4 = chunk[-4]
    v = ((b3 & 0x30) >> 4) | (b4 & 0x03)
    u = b4 & 0x04
    return (u << 18) | (v << 16) | (w << 12) | (x << 8) | (y << 4) | z, pos + length


def iter_codepoints(data: TextLike) -> Iterator[int]:
    """Yield every code point of ``data`` in order."""
    raw = _as_bytes(data)
    pos = 0
    while pos < len(raw):
        codepoint, pos = next_utf8_codepoint(raw, pos)
        yield codepoint


def text_bounds(
    text: TextLike, size: float, font_size: float, advances: Mapping[int, int]
) -> Tuple[float, float]:
    """Width and height of ``text`` drawn at ``size``.

    ``advances`` maps code points to glyph advances in 26.6 fixed point.
    Each newline adds ``size`` to the height.
    """
    scale = size / font_size
    width = 0.0
    height = 0.0
    line_x = 0.0
    for codepoint in iter_codepoints(text):
        if codepoint == ord("\n"):
            height += size
            line_x = 0.0
            continue
        try:
            advance = advances[codepoint]
        except KeyError:
            raise KeyError(f"no glyph for code point U+{codepoint:04X}") from None
        line_x += (advance >> 6) * scale
        width = max(width, line_x)
    return width, height


def rich_text_bounds(
    sections: Iterable[Tuple[TextLike, float]],
    font_size: float,
    advances: Mapping[int, int],
) -> Tuple[float, float]:
    """Largest width and height among ``(text, size)`` sections."""
    width = 0.0
    height = 0.0
    for text, size in sections:
        section_width, section_height = text_bounds(text, size, font_size, advances)
        width = max(width, section_width)
        height = max(height, section_height)
    return width, height