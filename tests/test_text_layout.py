"""Tests for word wrapping and text layout."""

from PIL import Image, ImageDraw

from visionpress.core.layout.font_manager import FontManager
from visionpress.core.layout.text_renderer import (
    TextLayoutEngine, TextStyle, line_height_px, split_paragraphs, wrap_words,
)


def char_measure(text):
    """Ten pixels per character."""
    return len(text) * 10


def test_split_paragraphs_on_blank_lines():
    assert split_paragraphs("One.\n\nTwo.\n   \nThree.") == ["One.", "Two.", "Three."]
    assert split_paragraphs("") == []


def test_wrap_is_greedy():
    lines = wrap_words("aaa bbb ccc ddd", char_measure, 80)
    assert [l.text for l in lines] == ["aaa bbb", "ccc ddd"]
    assert [l.word_count for l in lines] == [2, 2]
    assert lines[0].width == 70


def test_line_stays_narrower_than_max_width():
    lines = wrap_words("aaa bbb ccc ddd", char_measure, 70)
    assert [l.text for l in lines] == ["aaa", "bbb", "ccc", "ddd"]
    assert all(l.width < 70 for l in lines)


def test_overlong_word_gets_its_own_line():
    lines = wrap_words("a supercalifragilistic b", char_measure, 50)
    assert [l.text for l in lines] == ["a", "supercalifragilistic", "b"]


def test_single_newline_forces_break():
    lines = wrap_words("first\nsecond", char_measure, 1000)
    assert [l.text for l in lines] == ["first", "second"]


class TestLayoutEngine:
    def setup_method(self):
        self.font = FontManager(custom_dirs=[]).pil_font("sans-serif", 20)
        self.draw = ImageDraw.Draw(Image.new("RGB", (400, 400), "white"))
        self.engine = TextLayoutEngine()
        self.style = TextStyle()

    def test_paragraph_spacing(self):
        paragraphs, height = self.engine.layout_text("One.\n\nTwo.", self.font, 300, 1000, self.style, self.draw)
        step = line_height_px(self.font, self.style)
        assert len(paragraphs) == 2
        assert paragraphs[0].spacing_after == int(step * self.style.paragraph_spacing)
        assert paragraphs[1].spacing_after == 0
        assert height == 2 * step + paragraphs[0].spacing_after
        assert all(p.lines[-1].is_paragraph_end for p in paragraphs)

    def test_text_is_truncated_to_max_height(self):
        step = line_height_px(self.font, self.style)
        text = " ".join(["word"] * 200)
        paragraphs, height = self.engine.layout_text(text, self.font, 100, step * 3, self.style, self.draw)
        assert sum(len(p.lines) for p in paragraphs) == 3
        assert height <= step * 3

    def test_draw_text_returns_y_below_text(self):
        step = line_height_px(self.font, self.style)
        y = self.engine.draw_text(self.draw, "Hello world", (10, 20, 300, 200), self.font, self.style)
        assert y == 20 + step
