"""
Text layout for rendered pages.

Greedy word wrap into lines, with paragraphs split on blank lines and extra
spacing between paragraphs.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Tuple

from PIL import ImageDraw, ImageFont

from ..themes import hex_to_rgb

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

Measure = Callable[[str], float]


@dataclass
class TextStyle:
    color: str = "#333333"
    align: str = "left"  # left | center | right
    line_height: float = 1.2
    paragraph_spacing: float = 0.5  # extra space after a paragraph, in line heights


@dataclass
class LayoutLine:
    """A single line of text with layout information."""
    text: str
    width: float  # Actual width in pixels
    word_count: int
    is_paragraph_end: bool = False


@dataclass
class LayoutParagraph:
    """A paragraph with its layout lines."""
    lines: List[LayoutLine]
    spacing_after: int = 0  # Pixels to add after this paragraph


def split_paragraphs(text: str) -> List[str]:
    return [p.strip() for p in PARAGRAPH_BREAK.split(text or "") if p.strip()]


def wrap_words(text: str, measure: Measure, max_width: float) -> List[LayoutLine]:
    """
    Greedy word wrap.

    Words are added to the current line while ``line + " " + word`` stays
    narrower than ``max_width``; otherwise the line is emitted and the word
    starts the next one. A word wider than ``max_width`` gets a line of its own.
    Single newlines force a line break.
    """
    lines: List[LayoutLine] = []
    for raw_line in text.split("\n"):
        words = raw_line.split()
        if not words:
            continue
        current = words[0]
        count = 1
        for word in words[1:]:
            candidate = f"{current} {word}"
            if measure(candidate) < max_width:
                current = candidate
                count += 1
            else:
                lines.append(LayoutLine(text=current, width=measure(current), word_count=count))
                current = word
                count = 1
        lines.append(LayoutLine(text=current, width=measure(current), word_count=count))
    return lines


def line_height_px(font: ImageFont.ImageFont, style: TextStyle) -> int:
    ascent, descent = font.getmetrics()
    return max(1, int((ascent + descent) * style.line_height))


class TextLayoutEngine:
    """Lays out and draws wrapped multi-paragraph text."""

    def layout_text(
        self,
        text: str,
        font: ImageFont.ImageFont,
        max_width: int,
        max_height: int,
        style: TextStyle,
        draw: ImageDraw.ImageDraw
    ) -> Tuple[List[LayoutParagraph], int]:
        """
        Layout text into paragraphs and lines.

        Args:
            text: Text to layout (blank lines separate paragraphs)
            font: Font to use
            max_width: Maximum width in pixels
            max_height: Maximum height in pixels
            style: Text style configuration
            draw: ImageDraw instance for measuring text

        Returns:
            Tuple of (paragraphs, total_height)
        """
        measure = lambda s: draw.textlength(s, font=font)
        step = line_height_px(font, style)
        paragraphs_text = split_paragraphs(text)

        paragraphs = []
        total_height = 0
        for i, para_text in enumerate(paragraphs_text):
            lines = wrap_words(para_text, measure, max_width)
            is_last_para = i == len(paragraphs_text) - 1
            spacing_after = 0 if is_last_para else int(step * style.paragraph_spacing)
            para_height = len(lines) * step

            if total_height + para_height > max_height:
                max_lines = (max_height - total_height) // step
                if max_lines <= 0:
                    break
                logger.debug(f"Text truncated to {max_lines} lines of paragraph {i + 1}")
                lines = lines[:max_lines]
                para_height = len(lines) * step
                spacing_after = 0

            lines[-1].is_paragraph_end = True
            paragraphs.append(LayoutParagraph(lines=lines, spacing_after=spacing_after))
            total_height += para_height + spacing_after
            if total_height >= max_height:
                break

        return paragraphs, total_height

    def draw_layout(
        self,
        paragraphs: List[LayoutParagraph],
        draw: ImageDraw.ImageDraw,
        origin: Tuple[int, int],
        font: ImageFont.ImageFont,
        style: TextStyle,
        box_width: int
    ) -> int:
        """Draw laid-out text; returns the y coordinate below the last line."""
        x, y = origin
        step = line_height_px(font, style)
        color = hex_to_rgb(style.color)

        for para in paragraphs:
            for line in para.lines:
                if style.align == "center":
                    tx = x + (box_width - int(line.width)) // 2
                elif style.align == "right":
                    tx = x + box_width - int(line.width)
                else:
                    tx = x
                draw.text((tx, y), line.text, fill=color, font=font)
                y += step
            y += para.spacing_after
        return y

    def draw_text(self, draw: ImageDraw.ImageDraw, text: str, box: Tuple[int, int, int, int],
                  font: ImageFont.ImageFont, style: TextStyle) -> int:
        """Layout and draw ``text`` inside ``box`` (x, y, width, height)."""
        x, y, w, h = box
        paragraphs, _ = self.layout_text(text, font, w, h, style, draw)
        return self.draw_layout(paragraphs, draw, (x, y), font, style, w)
