"""
Workbook renderer.

Each page is rasterized with Pillow at exactly its LayoutMeta pixel size and
placed on a reportlab PDF page whose point size equals the trim size. Page
routines are chosen from a dispatch table keyed by PageType; page types
without a routine use the generic block renderer.

Routine geometry is written in points (1/72 in) and scaled to pixels with
``PageContext.pt`` so the same layout works at any DPI.
"""

import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from PIL import Image, ImageDraw
from reportlab.pdfgen import canvas as pdf_canvas

from ..assets import open_image, prefetch_images
from ..config import WorkbookConfig
from ..constants import APP_NAME, VERSION
from ..errors import AssetFetchError
from ..fallbacks import MONTHLY_REFLECTION_PROMPTS, WEEKDAYS, WEEKLY_REFLECTION_PROMPTS
from ..print_specs import POINTS_PER_INCH, LayoutMeta, Margins, content_margins
from ..themes import CoverTheme, hex_to_rgb
from .font_manager import FontManager, default_font_manager
from .image_processor import ImageProcessor
from .models import Document, ImageBlock, ImageLayout, Page, PageType, TableBlock, TextRole
from .text_renderer import TextLayoutEngine, TextStyle

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RULE_GREY = (217, 217, 217)
LIGHT_GREY = (230, 230, 230)
GRID_GREY = (204, 204, 204)
LABEL_GREY = (128, 128, 128)
GOLD = (204, 153, 0)

SERIF = "serif"
SANS = "sans-serif"

Assets = Dict[str, Union[bytes, AssetFetchError]]


def _rgb_to_hex(color: RGB) -> str:
    return "#%02X%02X%02X" % color


@dataclass
class Colors:
    primary: RGB
    secondary: RGB
    accent: RGB


@dataclass
class PageContext:
    """Everything a page routine draws with."""

    page: Page
    layout: LayoutMeta
    colors: Colors
    cover_theme: CoverTheme
    canvas: Image.Image
    draw: ImageDraw.ImageDraw
    margins: Margins
    fonts: FontManager
    text_engine: TextLayoutEngine
    assets: Assets = field(default_factory=dict)
    missing_assets: List[str] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.layout.width_px

    @property
    def height(self) -> int:
        return self.layout.height_px

    @property
    def left(self) -> int:
        return self.margins.left

    @property
    def right(self) -> int:
        return self.width - self.margins.right

    @property
    def top(self) -> int:
        return self.margins.top

    @property
    def bottom(self) -> int:
        return self.height - self.margins.bottom

    @property
    def content_width(self) -> int:
        return self.right - self.left

    def pt(self, value: float) -> int:
        """Points to pixels at the page's DPI."""
        return int(round(value * self.layout.dpi / POINTS_PER_INCH))

    def font(self, family: str, size_pt: float, bold: bool = False):
        return self.fonts.pil_font(family, self.pt(size_pt), bold)

    def text(self, x: float, baseline: float, text: str, font, color: RGB) -> None:
        """Draw text with its baseline at ``baseline``."""
        ascent, _ = font.getmetrics()
        self.draw.text((x, baseline - ascent), text, fill=color, font=font)

    def centered_text(self, baseline: float, text: str, font, color: RGB) -> None:
        width = self.draw.textlength(text, font=font)
        self.text((self.width - width) / 2, baseline, text, font, color)

    def hline(self, y: float, x0: float, x1: float, color: RGB, thickness_pt: float = 0.5) -> None:
        self.draw.line([(x0, y), (x1, y)], fill=color, width=max(1, self.pt(thickness_pt)))

    def rect(self, x0: float, y0: float, x1: float, y1: float, outline: Optional[RGB] = None,
             fill: Optional[RGB] = None, thickness_pt: float = 0.5) -> None:
        self.draw.rectangle([x0, y0, x1, y1], outline=outline, fill=fill, width=max(1, self.pt(thickness_pt)))

    def wrapped(self, text: str, box: Tuple[int, int, int, int], font, color: RGB,
                align: str = "left", line_height: float = 1.2) -> int:
        """Word-wrap ``text`` into ``box``; returns the y below the last line."""
        style = TextStyle(color=_rgb_to_hex(color), align=align, line_height=line_height)
        return self.text_engine.draw_text(self.draw, text, box, font, style)

    def block_text(self, role: TextRole, default: str = "") -> str:
        block = self.page.text_by_role(role)
        return block.content if block and block.content else default

    def image(self, url: Optional[str]) -> Optional[Image.Image]:
        """Decoded image for ``url``, or None when it could not be loaded."""
        if not url:
            return None
        data = self.assets.get(url)
        if data is None or isinstance(data, AssetFetchError):
            self.missing_assets.append(url)
            return None
        try:
            return open_image(data)
        except AssetFetchError as e:
            logger.warning(f"Could not decode image {url}: {e}")
            self.missing_assets.append(url)
            return None


Routine = Callable[[PageContext], None]


# Page routines

def draw_cover(ctx: PageContext) -> None:
    theme = ctx.cover_theme
    _fill_background(ctx, theme)

    background = next((b for b in ctx.page.image_blocks if b.layout is ImageLayout.BACKGROUND),
                      ctx.page.image_blocks[0] if ctx.page.image_blocks else None)
    if background is not None:
        img = ctx.image(background.url)
        if img is not None:
            ImageProcessor.paste_fitted(ctx.canvas, img, (0, 0, ctx.width, ctx.height), "cover")
            if theme.use_overlay:
                ImageProcessor.overlay(ctx.canvas, (0, 0, ctx.width, ctx.height),
                                       opacity=theme.overlay_opacity)

    title = ctx.page.title or ctx.block_text(TextRole.TITLE, "My Vision Workbook")
    title_font = ctx.font(theme.title_family, 28, bold=theme.title_weight == "bold")
    mid = ctx.height / 2
    title_box = (ctx.left, int(mid - ctx.pt(30) - title_font.getmetrics()[0]), ctx.content_width, ctx.pt(120))
    if theme.title_position == "top":
        title_box = (ctx.left, ctx.top + ctx.pt(60), ctx.content_width, ctx.pt(120))
    elif theme.title_position == "bottom":
        title_box = (ctx.left, ctx.bottom - ctx.pt(180), ctx.content_width, ctx.pt(120))
    below = ctx.wrapped(title, title_box, title_font, hex_to_rgb(theme.title_color), align="center")

    subtitle = ctx.page.subtitle or ctx.block_text(TextRole.SUBTITLE)
    if subtitle:
        sub_font = ctx.font(theme.subtitle_family, 16)
        ctx.wrapped(subtitle, (ctx.left, below + ctx.pt(10), ctx.content_width, ctx.pt(60)),
                    sub_font, hex_to_rgb(theme.subtitle_color), align="center")


def draw_back_cover(ctx: PageContext) -> None:
    theme = ctx.cover_theme
    _fill_background(ctx, theme)
    quote = ctx.block_text(TextRole.QUOTE) or ctx.block_text(TextRole.BODY)
    if quote:
        font = ctx.font(SERIF, 16)
        ctx.wrapped(quote, (ctx.left + ctx.pt(20), int(ctx.height * 0.4), ctx.content_width - ctx.pt(40),
                            int(ctx.height * 0.3)), font, hex_to_rgb(theme.subtitle_color), align="center")
    ctx.hline(ctx.bottom - ctx.pt(40), ctx.width / 3, 2 * ctx.width / 3, hex_to_rgb(theme.accent_color), 1)


def draw_title_page(ctx: PageContext) -> None:
    title = ctx.page.title or ctx.block_text(TextRole.TITLE, "My Vision Workbook")
    ctx.centered_text(ctx.pt(200), title, ctx.font(SERIF, 32), ctx.colors.primary)
    subtitle = ctx.page.subtitle or ctx.block_text(TextRole.SUBTITLE)
    if subtitle:
        ctx.centered_text(ctx.pt(240), subtitle, ctx.font(SANS, 18), ctx.colors.accent)
    ctx.hline(ctx.pt(260), ctx.width / 3, 2 * ctx.width / 3, ctx.colors.secondary, 2)
    owner = ctx.block_text(TextRole.LABEL)
    if owner:
        ctx.centered_text(ctx.pt(300), owner, ctx.font(SANS, 12), ctx.colors.accent)


def draw_dedication(ctx: PageContext) -> None:
    title = ctx.block_text(TextRole.TITLE, "Letter from Your Future Self")
    ctx.centered_text(ctx.pt(80), title, ctx.font(SERIF, 18), ctx.colors.primary)
    ctx.hline(ctx.pt(100), ctx.width / 3, 2 * ctx.width / 3, ctx.colors.secondary, 1)

    body = ctx.block_text(TextRole.BODY)
    if body:
        font = ctx.font(SERIF, 11)
        top = ctx.pt(140) - font.getmetrics()[0]
        ctx.wrapped(body, (ctx.left, top, ctx.content_width, ctx.height - ctx.pt(60) - top),
                    font, ctx.colors.accent, line_height=1.35)


def draw_financial_overview(ctx: PageContext) -> None:
    title = ctx.block_text(TextRole.TITLE) or ctx.page.title or "My Financial Vision"
    ctx.centered_text(ctx.pt(80), title, ctx.font(SERIF, 24), ctx.colors.primary)
    ctx.hline(ctx.pt(100), ctx.width / 4, 3 * ctx.width / 4, ctx.colors.secondary, 2)

    subtitle = ctx.block_text(TextRole.SUBTITLE, "Financial Freedom")
    ctx.centered_text(ctx.pt(140), subtitle, ctx.font(SANS, 14), ctx.colors.accent)
    target = ctx.block_text(TextRole.BODY)
    if target:
        ctx.centered_text(ctx.pt(200), target, ctx.font(SANS, 32, bold=True), ctx.colors.secondary)

    bar_x0 = ctx.left + ctx.pt(20)
    bar_x1 = ctx.right - ctx.pt(20)
    ctx.rect(bar_x0, ctx.pt(250), bar_x1, ctx.pt(280), outline=ctx.colors.accent, thickness_pt=1)
    small = ctx.font(SANS, 10)
    ctx.text(bar_x0, ctx.pt(300), "0%", small, ctx.colors.accent)
    ctx.text(bar_x1 - ctx.draw.textlength("100%", font=small), ctx.pt(300), "100%", small, ctx.colors.accent)

    heading = ctx.font(SANS, 14, bold=True)
    ctx.text(ctx.left, ctx.pt(350), "Key Milestones:", heading, ctx.colors.primary)
    y = ctx.pt(380)
    for _ in range(5):
        if y > ctx.bottom:
            return
        ctx.hline(y, ctx.left, ctx.right, RULE_GREY)
        y += ctx.pt(35)

    if y + ctx.pt(20) > ctx.bottom:
        return
    ctx.text(ctx.left, y + ctx.pt(20), "Notes & Affirmations:", heading, ctx.colors.primary)
    y += ctx.pt(50)
    for _ in range(3):
        if y > ctx.bottom:
            return
        ctx.hline(y, ctx.left, ctx.right, RULE_GREY)
        y += ctx.pt(30)


def draw_vision_board(ctx: PageContext) -> None:
    ctx.text(ctx.left, ctx.top + ctx.pt(20), "Vision Board", ctx.font(SERIF, 20), ctx.colors.primary)

    box_top = ctx.top + ctx.pt(60)
    for block in ctx.page.image_blocks[:1]:
        img = ctx.image(block.url)
        if img is not None:
            ImageProcessor.paste_fitted(ctx.canvas, img, (ctx.left, box_top, ctx.content_width,
                                                          int(ctx.height * 0.6)))
        else:
            ImageProcessor.draw_placeholder(
                ctx.draw, (ctx.left, box_top, ctx.content_width, int(ctx.height * 0.5)),
                "[Vision Board Image]", ctx.font(SANS, 12),
                fill=None, outline=ctx.colors.accent, text_color=ctx.colors.accent,
                line_width=max(1, ctx.pt(1)),
            )

    caption = ctx.block_text(TextRole.CAPTION)
    if not caption and ctx.page.image_blocks:
        caption = ctx.page.image_blocks[0].alt or ""
    if caption:
        font = ctx.font(SANS, 11)
        top = ctx.bottom - ctx.pt(80) - font.getmetrics()[0]
        ctx.wrapped(caption, (ctx.left, top, ctx.content_width, ctx.bottom - top), font, ctx.colors.accent)


GOAL_NUMBER = re.compile(r"^\s*\d+[.)]\s*")


def draw_goal_overview(ctx: PageContext) -> None:
    title = ctx.block_text(TextRole.TITLE, "Annual Goals")
    _page_heading(ctx, title, rule=True)

    goals = [GOAL_NUMBER.sub("", b.content) for b in ctx.page.text_blocks if b.role is TextRole.BODY]
    number_font = ctx.font(SANS, 10)
    goal_font = ctx.font(SANS, 11)
    y = ctx.top + ctx.pt(80)
    for i in range(10):
        if y > ctx.bottom:
            break
        ctx.hline(y, ctx.left + ctx.pt(20), ctx.right, RULE_GREY)
        ctx.text(ctx.left, y - ctx.pt(2), f"{i + 1}.", number_font, ctx.colors.accent)
        if i < len(goals):
            ctx.text(ctx.left + ctx.pt(25), y - ctx.pt(4), _fit(ctx, goals[i], goal_font, ctx.content_width - ctx.pt(25)),
                     goal_font, ctx.colors.primary)
        y += ctx.pt(45)


def draw_weekly_planner(ctx: PageContext) -> None:
    title = ctx.block_text(TextRole.TITLE, "Weekly Planner")
    _page_heading(ctx, title)

    data = ctx.page.weekly_data
    days = [(d.label, d.iso_date) for d in data.days] if data and data.days else [(d, "") for d in WEEKDAYS]
    label_font = ctx.font(SANS, 11)
    date_font = ctx.font(SANS, 8)
    y = ctx.top + ctx.pt(60)
    for label, iso_date in days:
        if y + ctx.pt(50) > ctx.bottom + ctx.pt(10):
            break
        ctx.text(ctx.left, y, label, label_font, ctx.colors.primary)
        if iso_date:
            ctx.text(ctx.left, y + ctx.pt(12), iso_date, date_font, ctx.colors.accent)
        ctx.rect(ctx.left + ctx.pt(80), y - ctx.pt(15), ctx.right, y + ctx.pt(50), outline=LIGHT_GREY)
        y += ctx.pt(70)


def draw_reflection(ctx: PageContext) -> None:
    weekly = ctx.page.type is PageType.REFLECTION_WEEK
    default_title = "Weekly Reflection" if weekly else "Monthly Reflection"
    _page_heading(ctx, ctx.block_text(TextRole.TITLE, default_title))

    if ctx.page.reflection_prompts:
        prompts = [p.question for p in ctx.page.reflection_prompts]
    else:
        prompts = WEEKLY_REFLECTION_PROMPTS if weekly else MONTHLY_REFLECTION_PROMPTS
    font = ctx.font(SANS, 11)
    y = ctx.top + ctx.pt(80)
    for prompt in prompts:
        if y > ctx.bottom - ctx.pt(75):
            break
        ctx.text(ctx.left, y, _fit(ctx, prompt, font, ctx.content_width), font, ctx.colors.primary)
        for _ in range(3):
            y += ctx.pt(25)
            ctx.hline(y, ctx.left, ctx.right, RULE_GREY)
        y += ctx.pt(30)


def draw_notes_lined(ctx: PageContext) -> None:
    ctx.text(ctx.left, ctx.top + ctx.pt(24), ctx.block_text(TextRole.TITLE, "Notes"),
             ctx.font(SERIF, 20), ctx.colors.primary)
    y = ctx.top + ctx.pt(60)
    while y < ctx.bottom - ctx.pt(20):
        ctx.hline(y, ctx.left, ctx.right, LIGHT_GREY)
        y += ctx.pt(25)


def draw_notes_dotgrid(ctx: PageContext) -> None:
    ctx.text(ctx.left, ctx.top + ctx.pt(24), ctx.block_text(TextRole.TITLE, "Notes"),
             ctx.font(SERIF, 20), ctx.colors.primary)
    step = ctx.pt(18)
    radius = max(1, ctx.pt(0.8))
    y = ctx.top + ctx.pt(60)
    while y < ctx.bottom:
        x = ctx.left
        while x <= ctx.right:
            ctx.draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=GRID_GREY)
            x += step
        y += step


def draw_monthly_planner(ctx: PageContext) -> None:
    data = ctx.page.monthly_data
    month_label = data.month_label if data else "MONTH"
    baseline = ctx.top + ctx.pt(24)
    ctx.text(ctx.left, baseline, month_label, ctx.font(SERIF, 32), ctx.colors.primary)
    if data:
        ctx.text(ctx.left + ctx.pt(150), baseline, str(data.year), ctx.font(SANS, 18), ctx.colors.accent)

    grid_top = ctx.top + ctx.pt(60)
    grid_bottom = ctx.bottom - ctx.pt(100)
    cols = 7
    rows = max(5, len(data.weeks)) if data else 5
    col_w = ctx.content_width / cols
    row_h = (grid_bottom - grid_top) / rows

    header_font = ctx.font(SANS, 8, bold=True)
    for i, day in enumerate(("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT")):
        ctx.text(ctx.left + i * col_w + ctx.pt(5), grid_top - ctx.pt(5), day, header_font, (77, 77, 77))
    for i in range(cols + 1):
        x = ctx.left + i * col_w
        ctx.draw.line([(x, grid_top), (x, grid_bottom)], fill=GRID_GREY, width=max(1, ctx.pt(0.5)))
    for i in range(rows + 1):
        ctx.hline(grid_top + i * row_h, ctx.left, ctx.right, GRID_GREY)

    if data:
        date_font = ctx.font(SANS, 10)
        for w, week in enumerate(data.weeks[:rows]):
            for d, day in enumerate(week[:cols]):
                if day.date_label:
                    ctx.text(ctx.left + d * col_w + ctx.pt(5), grid_top + w * row_h + ctx.pt(15),
                             day.date_label, date_font, (51, 51, 51))

    ctx.text(ctx.left, grid_bottom + ctx.pt(20), "MONTHLY FOCUS", ctx.font(SANS, 10, bold=True), LABEL_GREY)
    for i in range(3):
        ctx.hline(grid_bottom + ctx.pt(40 + i * 20), ctx.left, ctx.right, GRID_GREY)


MAX_TRACKED_HABITS = 15


def draw_habit_tracker(ctx: PageContext) -> None:
    _page_heading(ctx, "HABIT ARCHITECTURE", rule=True)

    start_y = ctx.top + ctx.pt(80)
    row_h = ctx.pt(30)
    grid_left = ctx.left + ctx.pt(140)
    day_w = min(ctx.pt(8), (ctx.right - grid_left) / 31)
    box = max(1, int(day_w * 7 / 8))

    number_font = ctx.font(SANS, 6)
    for d in range(1, 32):
        if d % 5 == 1 or d == 31:
            ctx.text(grid_left + (d - 1) * day_w, start_y - ctx.pt(15), str(d), number_font, ctx.colors.accent)

    habits = ctx.page.habit_tracker.habits if ctx.page.habit_tracker else []
    name_font = ctx.font(SANS, 10)
    desc_font = ctx.font(SANS, 7)
    for idx, habit in enumerate(habits[:MAX_TRACKED_HABITS]):
        y = start_y + idx * row_h
        if y > ctx.bottom:
            break
        name = (habit.name or f"Habit {idx + 1}")[:30]
        ctx.text(ctx.left, y, name, name_font, BLACK)
        if habit.description:
            ctx.text(ctx.left, y + ctx.pt(9), _fit(ctx, habit.description, desc_font, ctx.pt(135)),
                     desc_font, ctx.colors.accent)
        for d in range(31):
            x = grid_left + d * day_w
            ctx.rect(x, y - ctx.pt(3), x + box, y - ctx.pt(3) + box, outline=RULE_GREY)


def draw_roadmap(ctx: PageContext) -> None:
    roadmap = ctx.page.roadmap
    default_title = "Annual Roadmap"
    if roadmap:
        default_title = f"Q{roadmap.quarter} Roadmap {roadmap.year}" if roadmap.quarter else f"{roadmap.year} Roadmap"
    _page_heading(ctx, ctx.block_text(TextRole.TITLE, default_title), rule=True)

    y = ctx.top + ctx.pt(60)
    summary = (roadmap.summary if roadmap else None) or ctx.block_text(TextRole.SUBTITLE)
    if summary:
        y = ctx.wrapped(summary, (ctx.left, y, ctx.content_width, ctx.pt(60)), ctx.font(SANS, 11), ctx.colors.accent)
        y += ctx.pt(10)

    if roadmap and roadmap.goals:
        goal_font = ctx.font(SANS, 12)
        date_font = ctx.font(SANS, 9)
        for goal in roadmap.goals:
            if y + ctx.pt(30) > ctx.bottom:
                break
            y += ctx.pt(18)
            ctx.text(ctx.left, y, _fit(ctx, f"• {goal.title}", goal_font, ctx.content_width), goal_font,
                     ctx.colors.primary)
            if goal.target_date:
                y += ctx.pt(13)
                ctx.text(ctx.left + ctx.pt(12), y, f"Target: {goal.target_date}", date_font, ctx.colors.accent)

    milestones = roadmap.key_milestones if roadmap else []
    if y + ctx.pt(60) > ctx.bottom:
        return
    y += ctx.pt(35)
    ctx.text(ctx.left, y, "Key Milestones:", ctx.font(SANS, 14, bold=True), ctx.colors.primary)
    line_font = ctx.font(SANS, 10)
    for i in range(max(4, len(milestones))):
        y += ctx.pt(30)
        if y > ctx.bottom:
            break
        if i < len(milestones):
            ctx.text(ctx.left, y - ctx.pt(4), _fit(ctx, milestones[i], line_font, ctx.content_width), line_font,
                     ctx.colors.primary)
        ctx.hline(y, ctx.left, ctx.right, RULE_GREY)


def draw_quote(ctx: PageContext) -> None:
    quote = ctx.block_text(TextRole.QUOTE) or ctx.block_text(TextRole.AFFIRMATION) or ctx.block_text(TextRole.BODY)
    if not quote:
        return
    font = ctx.font(SERIF, 16)
    ctx.hline(ctx.height * 0.35, ctx.width / 3, 2 * ctx.width / 3, ctx.colors.secondary, 1)
    ctx.wrapped(quote, (ctx.left + ctx.pt(20), int(ctx.height * 0.4), ctx.content_width - ctx.pt(40),
                        int(ctx.height * 0.3)), font, GOLD, align="center", line_height=1.4)


def draw_section_divider(ctx: PageContext) -> None:
    band_top = int(ctx.height * 0.4)
    ctx.rect(0, band_top, ctx.width, band_top + ctx.pt(90), fill=ctx.colors.primary)
    title = ctx.page.title or ctx.block_text(TextRole.TITLE)
    if title:
        ctx.centered_text(band_top + ctx.pt(55), title, ctx.font(SERIF, 28), WHITE)


GENERIC_ROLE_STYLE = {
    TextRole.TITLE: (SERIF, 24, BLACK),
    TextRole.SUBTITLE: (SANS, 14, (102, 102, 102)),
    TextRole.QUOTE: (SERIF, 16, GOLD),
}


def _image_box(ctx: PageContext, block: ImageBlock) -> Tuple[int, int, int, int]:
    """Pixel box (x, y, w, h) for an image block: its percent position, else its layout slot."""
    if block.position is not None:
        x = int(block.position.x / 100 * ctx.width)
        y = int(block.position.y / 100 * ctx.height)
        w = int(block.position.w / 100 * ctx.width) if block.position.w else ctx.right - x
        h = int(block.position.h / 100 * ctx.height) if block.position.h else ctx.bottom - y
        return x, y, max(1, w), max(1, h)
    half = (ctx.bottom - ctx.top) // 2
    third = ctx.content_width // 3
    if block.layout is ImageLayout.HALF_TOP:
        return ctx.left, ctx.top, ctx.content_width, half
    if block.layout is ImageLayout.HALF_BOTTOM:
        return ctx.left, ctx.top + half, ctx.content_width, half
    if block.layout is ImageLayout.LEFT_THIRD:
        return ctx.left, ctx.top, third, ctx.bottom - ctx.top
    if block.layout is ImageLayout.RIGHT_THIRD:
        return ctx.right - third, ctx.top, third, ctx.bottom - ctx.top
    # FULL_BLEED and BACKGROUND
    return 0, 0, ctx.width, ctx.height


def draw_generic(ctx: PageContext) -> None:
    """
    Block-by-block fallback: images in their boxes (placeholders when they
    fail to load), then text blocks at their percent position (or stacked
    from the top when unpositioned), then tables.
    """
    for block in ctx.page.image_blocks:
        box = _image_box(ctx, block)
        img = ctx.image(block.url)
        if img is not None:
            fit = "cover" if block.layout in (ImageLayout.FULL_BLEED, ImageLayout.BACKGROUND) else "contain"
            ImageProcessor.paste_fitted(ctx.canvas, img, box, fit)
        else:
            ImageProcessor.draw_placeholder(ctx.draw, box, block.alt or "[Image]", ctx.font(SANS, 12),
                                            line_width=max(1, ctx.pt(1)))

    y = ctx.top + ctx.pt(10)
    for block in ctx.page.text_blocks:
        family, size, color = GENERIC_ROLE_STYLE.get(block.role, (SANS, 12, BLACK))
        font = ctx.font(family, size)
        if block.position is not None:
            x = int(block.position.x / 100 * ctx.width)
            top = int(block.position.y / 100 * ctx.height)
            width = int(block.position.w / 100 * ctx.width) if block.position.w else ctx.right - x
            height = int(block.position.h / 100 * ctx.height) if block.position.h else ctx.bottom - top
            ctx.wrapped(block.content, (x, top, max(1, width), max(1, height)), font, color,
                        align=block.align or "left")
            continue
        if y >= ctx.bottom:
            break
        y = ctx.wrapped(block.content, (ctx.left, y, ctx.content_width, ctx.bottom - y), font, color,
                        align=block.align or "left")
        y += ctx.pt(8)

    for table in ctx.page.table_blocks:
        if y >= ctx.bottom:
            break
        y = _draw_table(ctx, table, y) + ctx.pt(12)


PAGE_ROUTINES: Dict[PageType, Routine] = {
    PageType.COVER_FRONT: draw_cover,
    PageType.COVER_BACK: draw_back_cover,
    PageType.TITLE_PAGE: draw_title_page,
    PageType.DEDICATION: draw_dedication,
    PageType.SECTION_DIVIDER: draw_section_divider,
    PageType.VISION_BOARD_SPREAD: draw_vision_board,
    PageType.GOAL_OVERVIEW: draw_goal_overview,
    PageType.ROADMAP_YEAR: draw_roadmap,
    PageType.ROADMAP_QUARTER: draw_roadmap,
    PageType.MONTHLY_PLANNER: draw_monthly_planner,
    PageType.WEEKLY_PLANNER: draw_weekly_planner,
    PageType.HABIT_TRACKER: draw_habit_tracker,
    PageType.FINANCIAL_OVERVIEW: draw_financial_overview,
    PageType.QUOTE_PAGE: draw_quote,
    PageType.REFLECTION_WEEK: draw_reflection,
    PageType.REFLECTION_MONTH: draw_reflection,
    PageType.NOTES_LINED: draw_notes_lined,
    PageType.NOTES_DOTGRID: draw_notes_dotgrid,
}


# Drawing helpers

def _fill_background(ctx: PageContext, theme: CoverTheme) -> None:
    if len(theme.gradient) < 2:
        ctx.rect(0, 0, ctx.width, ctx.height, fill=hex_to_rgb(theme.background))
        return
    stops = [hex_to_rgb(c) for c in theme.gradient]
    segments = len(stops) - 1
    for y in range(ctx.height):
        pos = y / max(1, ctx.height - 1) * segments
        i = min(int(pos), segments - 1)
        t = pos - i
        a, b = stops[i], stops[i + 1]
        color = tuple(int(a[k] + (b[k] - a[k]) * t) for k in range(3))
        ctx.draw.line([(0, y), (ctx.width, y)], fill=color)


def _page_heading(ctx: PageContext, title: str, rule: bool = False) -> None:
    ctx.text(ctx.left, ctx.top + ctx.pt(24), title, ctx.font(SERIF, 24), ctx.colors.primary)
    if rule:
        ctx.hline(ctx.top + ctx.pt(40), ctx.left, ctx.right, ctx.colors.secondary, 1)


def _fit(ctx: PageContext, text: str, font, max_width: float) -> str:
    """Truncate ``text`` with an ellipsis so it fits on one line."""
    if ctx.draw.textlength(text, font=font) <= max_width:
        return text
    while text and ctx.draw.textlength(text + "...", font=font) > max_width:
        text = text[:-1]
    return text.rstrip() + "..."


def _draw_table(ctx: PageContext, table: TableBlock, y: int) -> int:
    columns = max([len(table.headers)] + [len(r) for r in table.rows] + [1])
    col_w = ctx.content_width / columns
    row_h = ctx.pt(18)
    font = ctx.font(SANS, 8)
    header_font = ctx.font(SANS, 8, bold=True)

    rows = ([table.headers] if table.headers else []) + table.rows
    for r, row in enumerate(rows):
        if y + row_h > ctx.bottom:
            break
        is_header = r == 0 and bool(table.headers)
        for c in range(columns):
            x = ctx.left + c * col_w
            ctx.rect(x, y, x + col_w, y + row_h, outline=GRID_GREY,
                     fill=LIGHT_GREY if is_header else None)
            cell = row[c] if c < len(row) else ""
            if cell:
                f = header_font if is_header else font
                ctx.text(x + ctx.pt(3), y + ctx.pt(12), _fit(ctx, cell, f, col_w - ctx.pt(6)), f, BLACK)
        y += row_h
    return y


@dataclass
class RenderResult:
    """A rendered PDF and what happened while producing it."""

    pdf_bytes: bytes
    page_count: int
    blank_pages_added: int = 0
    missing_assets: List[str] = field(default_factory=list)

    @property
    def padding_discrepancy(self) -> bool:
        """The document reached the renderer with an odd page count."""
        return self.blank_pages_added > 0

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.pdf_bytes)
        logger.info(f"PDF saved: {path}")
        return path


class WorkbookRenderer:
    """
    Renders a Document to a print-ready PDF.

    Args:
        config: Shared workbook configuration
        font_manager: Font resolver; a shared system-font manager by default
        routines: Extra or replacement page routines keyed by page type
    """

    def __init__(self, config: Optional[WorkbookConfig] = None, font_manager: Optional[FontManager] = None,
                 routines: Optional[Dict[PageType, Routine]] = None):
        self.config = config or WorkbookConfig.default()
        self.fonts = font_manager or default_font_manager()
        self.text_engine = TextLayoutEngine()
        self.routines: Dict[PageType, Routine] = dict(PAGE_ROUTINES)
        self.routines.update(routines or {})

    def routine_for(self, page_type: PageType) -> Routine:
        return self.routines.get(page_type, draw_generic)

    def _colors(self, document: Document) -> Colors:
        palette = self.config.theme_pack(document.theme_pack).palette
        return Colors(hex_to_rgb(palette.primary), hex_to_rgb(palette.secondary), hex_to_rgb(palette.accent))

    def render_page(self, page: Page, document: Document, assets: Optional[Assets] = None,
                    missing_assets: Optional[List[str]] = None) -> Image.Image:
        """Rasterize one page at its LayoutMeta pixel size."""
        layout = page.layout
        canvas = Image.new("RGB", (layout.width_px, layout.height_px), WHITE)
        ctx = PageContext(
            page=page,
            layout=layout,
            colors=self._colors(document),
            cover_theme=self.config.cover_theme(document.cover_theme),
            canvas=canvas,
            draw=ImageDraw.Draw(canvas),
            margins=content_margins(layout, page.page_number or 1),
            fonts=self.fonts,
            text_engine=self.text_engine,
            assets=assets or {},
            missing_assets=missing_assets if missing_assets is not None else [],
        )
        routine = self.routine_for(page.type)
        try:
            routine(ctx)
        except Exception as e:
            logger.error(f"Failed to render page {page.page_number} ({page.type.value}): {e}", exc_info=True)
            ctx.text(ctx.left, ctx.pt(50), f"Page {page.page_number}: {page.type.value}",
                     ctx.font(SANS, 14), (102, 102, 102))
        return canvas

    async def prefetch(self, document: Document) -> Assets:
        """Fetch every image the document references, concurrently."""
        return await prefetch_images(document.image_urls(), timeout=self.config.asset_timeout,
                                     max_concurrency=self.config.max_concurrency)

    async def render(self, document: Document) -> RenderResult:
        """
        Render all pages to a PDF.

        Image fetch failures draw placeholders. If the page count is odd a
        blank page is appended; validation padding should have made it even.
        """
        logger.info(f"Rendering '{document.title}' ({document.page_count} pages)")
        assets = await self.prefetch(document)
        missing: List[str] = []

        buffer = io.BytesIO()
        c = pdf_canvas.Canvas(buffer)
        c.setTitle(document.title)
        c.setAuthor(APP_NAME)
        c.setCreator(f"{APP_NAME} {VERSION}")

        last_layout: Optional[LayoutMeta] = None
        for i, page in enumerate(document.pages, start=1):
            logger.debug(f"Adding page {i}/{document.page_count} to PDF")
            img = self.render_page(page, document, assets, missing)
            w_pt, h_pt = page.layout.page_size_points
            c.setPageSize((w_pt, h_pt))
            c.drawInlineImage(img, 0, 0, width=w_pt, height=h_pt)
            c.showPage()
            last_layout = page.layout

        blank_pages = 0
        if document.page_count % 2:
            logger.warning(f"Page count {document.page_count} is odd; padding was not applied before "
                           "rendering. Appending a blank page.")
            if last_layout is not None:
                c.setPageSize(last_layout.page_size_points)
            c.showPage()
            blank_pages = 1

        c.save()
        result = RenderResult(
            pdf_bytes=buffer.getvalue(),
            page_count=document.page_count + blank_pages,
            blank_pages_added=blank_pages,
            missing_assets=list(dict.fromkeys(missing)),
        )
        if result.missing_assets:
            logger.warning(f"{len(result.missing_assets)} image(s) rendered as placeholders")
        logger.info(f"PDF generation complete with {result.page_count} pages")
        return result

    async def render_to_file(self, document: Document, out_pdf: Path) -> RenderResult:
        result = await self.render(document)
        result.save(out_pdf)
        return result
