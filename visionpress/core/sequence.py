"""
Page sequence builder.

Turns the user's build options into an ordered, paginated Document. Page
content for the AI-driven page kinds is generated concurrently; pagination
runs once every page has resolved.
"""

import asyncio
import calendar
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .ai_content import AIContentContext, AIContentGenerator
from .config import WorkbookConfig
from .fallbacks import WEEKDAYS
from .layout.models import (
    AIGeneratedContent, AIGenerationInfo, CalendarDay, Document, Edition, GoalItem, Habit,
    HabitTrackerData, ImageBlock, ImageLayout, ImageSource, MonthlyCalendarData, Page, PageType,
    PlannerDay, ReflectionPrompt, RoadmapData, TextBlock, TextRole, WeeklyPlannerData,
)
from .print_specs import BindingType, LayoutMeta, TrimSize, resolve_layout
from .themes import DEFAULT_COVER_THEME, DEFAULT_THEME_PACK

logger = logging.getLogger(__name__)

MAX_VISION_SPREADS = 4
DEDICATION_TITLE = "Letter from Your Future Self"
WEEKLY_SECTIONS = ["Top Priority", "Tasks", "Notes"]


@dataclass
class VisionImage:
    id: str
    url: str
    caption: Optional[str] = None

    @classmethod
    def from_value(cls, value, index: int = 0) -> "VisionImage":
        """Accept a bare URL or a ``{id, url, caption}`` mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(id=f"image-{index + 1}", url=value)
        return cls(id=str(value.get("id") or f"image-{index + 1}"), url=value["url"],
                   caption=value.get("caption"))


@dataclass
class HabitSelection:
    id: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_value(cls, value, index: int = 0) -> "HabitSelection":
        """Accept a bare habit name or a ``{id, name, description}`` mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(id=f"habit-{index + 1}", name=value)
        return cls(id=str(value.get("id") or f"habit-{index + 1}"), name=value["name"],
                   description=value.get("description"))


@dataclass
class BuildOptions:
    """What the user picked in the workbook wizard."""

    edition: Edition = Edition.EXECUTIVE_VISION_BOOK
    trim_size: Optional[TrimSize] = None
    goals: List[str] = field(default_factory=list)
    habits: List[HabitSelection] = field(default_factory=list)
    vision_images: List[VisionImage] = field(default_factory=list)
    include_foreword: bool = False
    title: str = "My Vision Workbook"
    subtitle: Optional[str] = None
    cover_theme: str = DEFAULT_COVER_THEME
    theme_pack: str = DEFAULT_THEME_PACK
    financial_target: Optional[float] = None
    user_name: Optional[str] = None
    vision_text: Optional[str] = None
    planning_year: Optional[int] = None

    def __post_init__(self):
        self.edition = Edition.parse(self.edition)
        if self.trim_size is not None:
            self.trim_size = TrimSize.parse(self.trim_size)
        self.habits = [HabitSelection.from_value(h, i) for i, h in enumerate(self.habits)]
        self.vision_images = [VisionImage.from_value(v, i) for i, v in enumerate(self.vision_images)]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildOptions":
        """Build options from the wizard's camelCase JSON."""
        target = data.get("financialTarget")
        return cls(
            edition=data.get("edition", Edition.EXECUTIVE_VISION_BOOK),
            trim_size=data.get("trimSize"),
            goals=[str(g) for g in data.get("goals", [])],
            habits=list(data.get("habits", [])),
            vision_images=list(data.get("visionImages", [])),
            include_foreword=bool(data.get("includeForeword", False)),
            title=data.get("title") or "My Vision Workbook",
            subtitle=data.get("subtitle"),
            cover_theme=data.get("coverTheme") or DEFAULT_COVER_THEME,
            theme_pack=data.get("themePack") or DEFAULT_THEME_PACK,
            financial_target=float(target) if target is not None else None,
            user_name=data.get("userName"),
            vision_text=data.get("visionText"),
            planning_year=data.get("planningYear"),
        )

    def year(self) -> int:
        return self.planning_year or date.today().year

    def to_context(self) -> AIContentContext:
        return AIContentContext(
            theme_pack=self.theme_pack,
            financial_target=self.financial_target,
            goals=list(self.goals),
            habits=[h.name for h in self.habits],
            vision_text=self.vision_text,
            user_name=self.user_name,
        )


@dataclass(frozen=True)
class EditionTemplate:
    """Page mix and physical format of one edition."""

    binding_type: BindingType
    default_trim: TrimSize
    months: int
    notes_pages: int
    financial_overview: bool = False
    roadmap: bool = False
    back_cover: bool = False


EDITION_TEMPLATES: Dict[Edition, EditionTemplate] = {
    Edition.SOFTCOVER_JOURNAL: EditionTemplate(
        binding_type=BindingType.SOFTCOVER,
        default_trim=TrimSize.A5_5_83x8_27,
        months=3,
        notes_pages=2,
    ),
    Edition.HARDCOVER_PLANNER: EditionTemplate(
        binding_type=BindingType.HARDCOVER,
        default_trim=TrimSize.A5_5_83x8_27,
        months=12,
        notes_pages=2,
        financial_overview=True,
        roadmap=True,
    ),
    Edition.EXECUTIVE_VISION_BOOK: EditionTemplate(
        binding_type=BindingType.HARDCOVER,
        default_trim=TrimSize.EXECUTIVE_7x9,
        months=12,
        notes_pages=4,
        financial_overview=True,
        roadmap=True,
        back_cover=True,
    ),
    Edition.LEGACY_EDITION: EditionTemplate(
        binding_type=BindingType.HARDCOVER,
        default_trim=TrimSize.LETTER_8_5x11,
        months=12,
        notes_pages=6,
        financial_overview=True,
        roadmap=True,
        back_cover=True,
    ),
}


def edition_template(edition) -> EditionTemplate:
    return EDITION_TEMPLATES[Edition.parse(edition)]


def generate_calendar_weeks(year: int, month_index: int) -> List[List[CalendarDay]]:
    """
    Sunday-first weeks for a month.

    Cells before the 1st and after the last day have an empty ``date_label``.
    """
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    weeks = []
    for w, week in enumerate(cal.monthdayscalendar(year, month_index + 1)):
        weeks.append([
            CalendarDay(id=f"{year}-{month_index + 1:02d}-w{w}-d{d}", date_label=str(day) if day else "")
            for d, day in enumerate(week)
        ])
    return weeks


def monthly_calendar(year: int, month_index: int) -> MonthlyCalendarData:
    return MonthlyCalendarData(
        year=year,
        month_index=month_index,
        month_label=calendar.month_name[month_index + 1],
        weeks=generate_calendar_weeks(year, month_index),
    )


def first_monday(year: int) -> date:
    day = date(year, 1, 1)
    return day + timedelta(days=(7 - day.weekday()) % 7)


def weekly_planner_data(year: int) -> WeeklyPlannerData:
    """A blank week starting on the first Monday of the planning year."""
    start = first_monday(year)
    days = [
        PlannerDay(iso_date=(start + timedelta(days=i)).isoformat(), label=name,
                   sections=list(WEEKLY_SECTIONS))
        for i, name in enumerate(WEEKDAYS)
    ]
    return WeeklyPlannerData(week_of=start.isoformat(), days=days)


def roadmap_data(year: int, goals: List[str]) -> RoadmapData:
    items = []
    milestones = []
    for i, goal in enumerate(goals):
        quarter = min(i, 3) + 1
        # Quarter end dates: Mar 31, Jun 30, Sep 30, Dec 31
        end_month = quarter * 3
        end_day = calendar.monthrange(year, end_month)[1]
        items.append(GoalItem(id=f"goal-{i + 1}", title=goal,
                              target_date=date(year, end_month, end_day).isoformat()))
        milestones.append(f"Q{quarter}: {goal}")
    return RoadmapData(year=year, goals=items, key_milestones=milestones)


def _page_id() -> str:
    return uuid.uuid4().hex


PageFactory = Callable[[], Awaitable[Page]]


class PageSequenceBuilder:
    """
    Builds a workbook Document from BuildOptions.

    Args:
        config: Shared workbook configuration
        generator: AI content generator; one is created from ``config`` if omitted
    """

    def __init__(self, config: Optional[WorkbookConfig] = None,
                 generator: Optional[AIContentGenerator] = None):
        self.config = config or WorkbookConfig.default()
        self.generator = generator or AIContentGenerator(self.config)

    async def build(self, options: BuildOptions) -> Document:
        template = edition_template(options.edition)
        trim_size = options.trim_size or template.default_trim
        layout = resolve_layout(trim_size, template.binding_type, self.config.dpi)
        context = options.to_context()
        logger.info(f"Building {options.edition.value} workbook ({trim_size.name}, "
                    f"{template.binding_type.value})")

        ai_content = None
        if options.include_foreword:
            ai_content = await self.generator.generate_all(context)

        factories = self._plan(options, template, layout, context, ai_content)
        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrency))

        async def bounded(factory: PageFactory) -> Page:
            async with semaphore:
                return await factory()

        pages = await asyncio.gather(*(bounded(f) for f in factories))

        document = Document(
            edition=options.edition,
            trim_size=trim_size,
            binding_type=template.binding_type,
            pages=list(pages),
            cover_theme=options.cover_theme,
            theme_pack=options.theme_pack,
            title=options.title,
            subtitle=options.subtitle,
            ai_content=ai_content,
        )
        document.paginate()

        degraded = [p.type.value for p in document.pages if p.ai_generation and p.ai_generation.fallback_used]
        if degraded:
            logger.warning(f"Fallback content used for: {', '.join(degraded)}")
        logger.info(f"Built workbook with {document.page_count} pages")
        return document

    def _plan(self, options: BuildOptions, template: EditionTemplate, layout: LayoutMeta,
              context: AIContentContext, ai_content: Optional[AIGeneratedContent]) -> List[PageFactory]:
        """Ordered page factories for the edition."""
        year = options.year()
        plan: List[PageFactory] = [
            self._static(lambda: self._cover_page(options, layout)),
            self._static(lambda: self._title_page(options, layout, year)),
        ]
        if options.include_foreword:
            plan.append(self._static(lambda: self._dedication_page(layout, ai_content)))

        for image in options.vision_images[:MAX_VISION_SPREADS]:
            plan.append(self._static(lambda image=image: self._vision_page(layout, image)))

        plan.append(self._generated(PageType.GOAL_OVERVIEW, layout, context))
        if template.financial_overview and options.financial_target:
            plan.append(self._generated(PageType.FINANCIAL_OVERVIEW, layout, context))
        if template.roadmap:
            plan.append(self._generated(PageType.ROADMAP_YEAR, layout, context,
                                        roadmap=roadmap_data(year, options.goals)))
        if options.habits:
            habits = [Habit(id=h.id, name=h.name, description=h.description) for h in options.habits]
            plan.append(self._generated(PageType.HABIT_TRACKER, layout, context,
                                        habit_tracker=HabitTrackerData(habits=habits)))

        for month_index in range(template.months):
            plan.append(self._static(lambda m=month_index: self._monthly_page(layout, year, m)))

        plan.append(self._generated(PageType.WEEKLY_PLANNER, layout, context,
                                    weekly_data=weekly_planner_data(year)))

        if ai_content and ai_content.reflection_prompts:
            questions = ai_content.reflection_prompts
        else:
            questions = self.generator.generate_reflection_prompts(context)
        prompts = [ReflectionPrompt(id=f"prompt-{i + 1}", question=q) for i, q in enumerate(questions)]
        plan.append(self._generated(PageType.REFLECTION_MONTH, layout, context, reflection_prompts=prompts))

        for _ in range(template.notes_pages):
            plan.append(self._static(lambda: self._notes_page(layout)))
        if template.back_cover:
            plan.append(self._static(lambda: self._back_cover_page(options, layout)))
        return plan

    @staticmethod
    def _static(make: Callable[[], Page]) -> PageFactory:
        async def factory() -> Page:
            return make()
        return factory

    def _generated(self, page_type: PageType, layout: LayoutMeta, context: AIContentContext,
                   **payload) -> PageFactory:
        async def factory() -> Page:
            content = await self.generator.generate_page_content(context, page_type.value)
            title_block = next((b for b in content.text_blocks if b.role is TextRole.TITLE), None)
            return Page(
                id=_page_id(),
                type=page_type,
                layout=layout,
                title=title_block.content if title_block else None,
                text_blocks=content.text_blocks,
                table_blocks=content.table_blocks,
                ai_generation=AIGenerationInfo(provider=content.provider, model=content.model,
                                               fallback_used=content.fallback_used),
                **payload,
            )
        return factory

    def _cover_page(self, options: BuildOptions, layout: LayoutMeta) -> Page:
        theme = self.config.cover_theme(options.cover_theme)
        text_blocks = [TextBlock(id="cover-title", role=TextRole.TITLE, content=options.title,
                                 align="center", emphasis="bold")]
        if options.subtitle:
            text_blocks.append(TextBlock(id="cover-subtitle", role=TextRole.SUBTITLE,
                                         content=options.subtitle, align="center"))
        image_blocks = []
        if theme.uses_vision_image and options.vision_images:
            first = options.vision_images[0]
            image_blocks.append(ImageBlock(
                id="cover-image",
                source_type=ImageSource.VISION_IMAGE,
                url=first.url,
                alt=first.caption,
                layout=ImageLayout.BACKGROUND,
            ))
        return Page(id=_page_id(), type=PageType.COVER_FRONT, layout=layout, title=options.title,
                    subtitle=options.subtitle, text_blocks=text_blocks, image_blocks=image_blocks)

    @staticmethod
    def _title_page(options: BuildOptions, layout: LayoutMeta, year: int) -> Page:
        subtitle = options.subtitle or f"{year} Vision & Planning"
        text_blocks = [
            TextBlock(id="title", role=TextRole.TITLE, content=options.title, align="center"),
            TextBlock(id="subtitle", role=TextRole.SUBTITLE, content=subtitle, align="center"),
        ]
        if options.user_name:
            text_blocks.append(TextBlock(id="owner", role=TextRole.LABEL,
                                         content=f"This workbook belongs to {options.user_name}",
                                         align="center"))
        return Page(id=_page_id(), type=PageType.TITLE_PAGE, layout=layout, title=options.title,
                    subtitle=subtitle, text_blocks=text_blocks)

    @staticmethod
    def _dedication_page(layout: LayoutMeta, ai_content: Optional[AIGeneratedContent]) -> Page:
        foreword = (ai_content.foreword if ai_content else None) or ""
        fallback_used = bool(ai_content and ai_content.fallback_used)
        return Page(
            id=_page_id(),
            type=PageType.DEDICATION,
            layout=layout,
            title=DEDICATION_TITLE,
            text_blocks=[
                TextBlock(id="dedication-title", role=TextRole.TITLE, content=DEDICATION_TITLE,
                          align="center", editable=False),
                TextBlock(id="foreword", role=TextRole.BODY, content=foreword,
                          ai_generated=not fallback_used),
            ],
            ai_generation=AIGenerationInfo(fallback_used=fallback_used),
        )

    @staticmethod
    def _vision_page(layout: LayoutMeta, image: VisionImage) -> Page:
        text_blocks = [TextBlock(id="vision-title", role=TextRole.TITLE, content="Vision Board",
                                 editable=False)]
        if image.caption:
            text_blocks.append(TextBlock(id="vision-caption", role=TextRole.CAPTION, content=image.caption))
        return Page(
            id=_page_id(),
            type=PageType.VISION_BOARD_SPREAD,
            layout=layout,
            title="Vision Board",
            text_blocks=text_blocks,
            image_blocks=[ImageBlock(id=f"vision-{image.id}", source_type=ImageSource.VISION_IMAGE,
                                     url=image.url, alt=image.caption)],
        )

    @staticmethod
    def _monthly_page(layout: LayoutMeta, year: int, month_index: int) -> Page:
        data = monthly_calendar(year, month_index)
        return Page(id=_page_id(), type=PageType.MONTHLY_PLANNER, layout=layout,
                    title=f"{data.month_label} {year}", monthly_data=data)

    @staticmethod
    def _notes_page(layout: LayoutMeta) -> Page:
        return Page(id=_page_id(), type=PageType.NOTES_LINED, layout=layout, title="Notes",
                    text_blocks=[TextBlock(id="notes-title", role=TextRole.TITLE, content="Notes",
                                           editable=False)])

    def _back_cover_page(self, options: BuildOptions, layout: LayoutMeta) -> Page:
        pack = self.config.theme_pack(options.theme_pack)
        return Page(
            id=_page_id(),
            type=PageType.COVER_BACK,
            layout=layout,
            text_blocks=[TextBlock(id="back-quote", role=TextRole.QUOTE, content=pack.opener,
                                   align="center")],
        )
