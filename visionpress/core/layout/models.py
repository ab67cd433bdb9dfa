"""
Data models for workbook documents.

Defines pages, content blocks, typed page payloads and the document, plus
their camelCase JSON wire format.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..errors import MalformedPageError
from ..print_specs import BindingType, LayoutMeta, TrimSize


class PageType(Enum):
    COVER_FRONT = "COVER_FRONT"
    COVER_BACK = "COVER_BACK"
    COVER_SPINE = "COVER_SPINE"
    TITLE_PAGE = "TITLE_PAGE"
    DEDICATION = "DEDICATION"
    SECTION_DIVIDER = "SECTION_DIVIDER"
    VISION_BOARD_SPREAD = "VISION_BOARD_SPREAD"
    GOAL_OVERVIEW = "GOAL_OVERVIEW"
    ROADMAP_YEAR = "ROADMAP_YEAR"
    ROADMAP_QUARTER = "ROADMAP_QUARTER"
    MONTHLY_PLANNER = "MONTHLY_PLANNER"
    WEEKLY_PLANNER = "WEEKLY_PLANNER"
    HABIT_TRACKER = "HABIT_TRACKER"
    FINANCIAL_OVERVIEW = "FINANCIAL_OVERVIEW"
    QUOTE_PAGE = "QUOTE_PAGE"
    REFLECTION_WEEK = "REFLECTION_WEEK"
    REFLECTION_MONTH = "REFLECTION_MONTH"
    NOTES_LINED = "NOTES_LINED"
    NOTES_DOTGRID = "NOTES_DOTGRID"
    CUSTOM = "CUSTOM"


class Edition(Enum):
    SOFTCOVER_JOURNAL = "SOFTCOVER_JOURNAL"
    HARDCOVER_PLANNER = "HARDCOVER_PLANNER"
    EXECUTIVE_VISION_BOOK = "EXECUTIVE_VISION_BOOK"
    LEGACY_EDITION = "LEGACY_EDITION"

    @classmethod
    def parse(cls, value) -> "Edition":
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        if name == "EXECUTIVE":
            return cls.EXECUTIVE_VISION_BOOK
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown edition: {value}. Valid: {valid}") from None


class TextRole(Enum):
    TITLE = "TITLE"
    SUBTITLE = "SUBTITLE"
    BODY = "BODY"
    QUOTE = "QUOTE"
    CAPTION = "CAPTION"
    LABEL = "LABEL"
    SCRIPTURE = "SCRIPTURE"
    AFFIRMATION = "AFFIRMATION"

    @classmethod
    def parse(cls, value) -> "TextRole":
        """Parse a role leniently; providers return lower-case or unknown roles."""
        if isinstance(value, cls):
            return value
        name = str(value or "").strip().upper()
        if name == "PROMPT":
            return cls.LABEL
        try:
            return cls(name)
        except ValueError:
            return cls.BODY


class ImageSource(Enum):
    VISION_IMAGE = "VISION_IMAGE"
    AI_GENERATED = "AI_GENERATED"
    UPLOAD = "UPLOAD"
    PLACEHOLDER = "PLACEHOLDER"


class ImageLayout(Enum):
    FULL_BLEED = "FULL_BLEED"
    HALF_TOP = "HALF_TOP"
    HALF_BOTTOM = "HALF_BOTTOM"
    LEFT_THIRD = "LEFT_THIRD"
    RIGHT_THIRD = "RIGHT_THIRD"
    BACKGROUND = "BACKGROUND"


TABLE_TYPES = ("budget", "habit_grid", "goal_tracker", "schedule", "generic")


@dataclass
class Position:
    """Block position in percent of the page (0-100)."""

    x: float = 0.0
    y: float = 0.0
    w: Optional[float] = None
    h: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        data = {"x": self.x, "y": self.y}
        if self.w is not None:
            data["w"] = self.w
        if self.h is not None:
            data["h"] = self.h
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Position"]:
        if not data:
            return None
        return cls(x=float(data.get("x", 0)), y=float(data.get("y", 0)),
                   w=data.get("w"), h=data.get("h"))


@dataclass
class TextBlock:
    id: str
    role: TextRole
    content: str
    align: Optional[str] = None  # left | center | right
    emphasis: Optional[str] = None  # bold | italic | highlight
    position: Optional[Position] = None
    style: Dict[str, Any] = field(default_factory=dict)
    editable: bool = True
    ai_generated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "role": self.role.value, "content": self.content}
        if self.align:
            data["align"] = self.align
        if self.emphasis:
            data["emphasis"] = self.emphasis
        if self.position:
            data["position"] = self.position.to_dict()
        if self.style:
            data["style"] = dict(self.style)
        data["editable"] = self.editable
        data["aiGenerated"] = self.ai_generated
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextBlock":
        return cls(
            id=str(data.get("id", "")),
            role=TextRole.parse(data.get("role")),
            content=str(data.get("content", "")),
            align=data.get("align"),
            emphasis=data.get("emphasis"),
            position=Position.from_dict(data.get("position")),
            style=dict(data.get("style") or {}),
            editable=bool(data.get("editable", True)),
            ai_generated=bool(data.get("aiGenerated", data.get("ai_generated", False))),
        )


@dataclass
class ImageBlock:
    id: str
    source_type: ImageSource
    url: Optional[str] = None
    alt: Optional[str] = None
    layout: ImageLayout = ImageLayout.FULL_BLEED
    position: Optional[Position] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "sourceType": self.source_type.value,
            "layout": self.layout.value,
        }
        if self.url:
            data["url"] = self.url
        if self.alt:
            data["alt"] = self.alt
        if self.position:
            data["position"] = self.position.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageBlock":
        return cls(
            id=str(data.get("id", "")),
            source_type=ImageSource(data.get("sourceType", "PLACEHOLDER")),
            url=data.get("url"),
            alt=data.get("alt"),
            layout=ImageLayout(data.get("layout", "FULL_BLEED")),
            position=Position.from_dict(data.get("position")),
        )


@dataclass
class TableBlock:
    id: str
    type: str = "generic"
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)
    ai_populated: bool = False

    def __post_init__(self):
        if self.type not in TABLE_TYPES:
            self.type = "generic"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "headers": list(self.headers),
            "rows": [list(r) for r in self.rows],
            "aiPopulated": self.ai_populated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableBlock":
        return cls(
            id=str(data.get("id", "")),
            type=str(data.get("type", "generic")),
            headers=[str(h) for h in data.get("headers") or []],
            rows=[[str(c) for c in row] for row in data.get("rows") or []],
            ai_populated=bool(data.get("aiPopulated", data.get("ai_populated", False))),
        )


ContentBlock = Union[TextBlock, ImageBlock, TableBlock]


# Typed page payloads

@dataclass
class CalendarDay:
    id: str
    date_label: str = ""
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "dateLabel": self.date_label}
        if self.notes:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarDay":
        return cls(id=data["id"], date_label=data.get("dateLabel", ""), notes=data.get("notes"))


@dataclass
class MonthlyCalendarData:
    year: int
    month_index: int  # 0-11
    month_label: str
    weeks: List[List[CalendarDay]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "monthIndex": self.month_index,
            "monthLabel": self.month_label,
            "weeks": [[d.to_dict() for d in week] for week in self.weeks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthlyCalendarData":
        return cls(
            year=int(data["year"]),
            month_index=int(data["monthIndex"]),
            month_label=data.get("monthLabel", ""),
            weeks=[[CalendarDay.from_dict(d) for d in week] for week in data.get("weeks", [])],
        )


@dataclass
class PlannerDay:
    iso_date: str
    label: str
    sections: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"isoDate": self.iso_date, "label": self.label, "sections": list(self.sections)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannerDay":
        return cls(iso_date=data["isoDate"], label=data.get("label", ""),
                   sections=list(data.get("sections", [])))


@dataclass
class WeeklyPlannerData:
    week_of: str
    days: List[PlannerDay] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"weekOf": self.week_of, "days": [d.to_dict() for d in self.days]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeeklyPlannerData":
        return cls(week_of=data["weekOf"], days=[PlannerDay.from_dict(d) for d in data.get("days", [])])


@dataclass
class Habit:
    id: str
    name: str
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "name": self.name}
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        return cls(id=str(data["id"]), name=data["name"], description=data.get("description"))


HABIT_PERIODS = ("MONTH", "QUARTER", "YEAR")


@dataclass
class HabitTrackerData:
    habits: List[Habit] = field(default_factory=list)
    period: str = "MONTH"

    def __post_init__(self):
        if self.period not in HABIT_PERIODS:
            raise ValueError(f"Invalid habit tracker period: {self.period}")

    def to_dict(self) -> Dict[str, Any]:
        return {"habits": [h.to_dict() for h in self.habits], "period": self.period}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HabitTrackerData":
        return cls(habits=[Habit.from_dict(h) for h in data.get("habits", [])],
                   period=data.get("period", "MONTH"))


@dataclass
class GoalItem:
    id: str
    title: str
    target_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "title": self.title}
        if self.target_date:
            data["targetDate"] = self.target_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GoalItem":
        return cls(id=str(data["id"]), title=data["title"], target_date=data.get("targetDate"))


@dataclass
class RoadmapData:
    year: int
    quarter: Optional[int] = None
    summary: Optional[str] = None
    goals: List[GoalItem] = field(default_factory=list)
    key_milestones: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "year": self.year,
            "goals": [g.to_dict() for g in self.goals],
            "keyMilestones": list(self.key_milestones),
        }
        if self.quarter is not None:
            data["quarter"] = self.quarter
        if self.summary:
            data["summary"] = self.summary
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoadmapData":
        return cls(
            year=int(data["year"]),
            quarter=data.get("quarter"),
            summary=data.get("summary"),
            goals=[GoalItem.from_dict(g) for g in data.get("goals", [])],
            key_milestones=list(data.get("keyMilestones", [])),
        )


@dataclass
class ReflectionPrompt:
    id: str
    question: str
    helper_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "question": self.question}
        if self.helper_text:
            data["helperText"] = self.helper_text
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReflectionPrompt":
        return cls(id=str(data["id"]), question=data["question"], helper_text=data.get("helperText"))


# Page type -> the one payload attribute it must carry
PAYLOAD_FIELD_BY_TYPE: Dict[PageType, str] = {
    PageType.MONTHLY_PLANNER: "monthly_data",
    PageType.WEEKLY_PLANNER: "weekly_data",
    PageType.HABIT_TRACKER: "habit_tracker",
    PageType.ROADMAP_YEAR: "roadmap",
    PageType.ROADMAP_QUARTER: "roadmap",
    PageType.REFLECTION_WEEK: "reflection_prompts",
    PageType.REFLECTION_MONTH: "reflection_prompts",
}

PAYLOAD_FIELDS = ("monthly_data", "weekly_data", "habit_tracker", "roadmap", "reflection_prompts")

_PAYLOAD_TYPES = {
    "monthly_data": MonthlyCalendarData,
    "weekly_data": WeeklyPlannerData,
    "habit_tracker": HabitTrackerData,
    "roadmap": RoadmapData,
}

_WIRE_NAMES = {
    "monthly_data": "monthlyData",
    "weekly_data": "weeklyData",
    "habit_tracker": "habitTracker",
    "roadmap": "roadmap",
    "reflection_prompts": "reflectionPrompts",
}


@dataclass
class AIGenerationInfo:
    """Where a page's text came from."""

    provider: Optional[str] = None
    model: Optional[str] = None
    fallback_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider, "model": self.model, "fallbackUsed": self.fallback_used}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIGenerationInfo":
        return cls(provider=data.get("provider"), model=data.get("model"),
                   fallback_used=bool(data.get("fallbackUsed", False)))


@dataclass
class Page:
    """
    A single typed workbook page.

    A page carries a typed payload if and only if its type requires one;
    construction with a mismatched payload raises MalformedPageError.
    ``page_number`` stays 0 until the sequence has been paginated.
    """

    id: str
    type: PageType
    layout: LayoutMeta
    page_number: int = 0
    title: Optional[str] = None
    subtitle: Optional[str] = None
    text_blocks: List[TextBlock] = field(default_factory=list)
    image_blocks: List[ImageBlock] = field(default_factory=list)
    table_blocks: List[TableBlock] = field(default_factory=list)
    monthly_data: Optional[MonthlyCalendarData] = None
    weekly_data: Optional[WeeklyPlannerData] = None
    habit_tracker: Optional[HabitTrackerData] = None
    roadmap: Optional[RoadmapData] = None
    reflection_prompts: Optional[List[ReflectionPrompt]] = None
    ai_generation: Optional[AIGenerationInfo] = None
    is_padding: bool = False

    def __post_init__(self):
        if not isinstance(self.type, PageType):
            self.type = PageType(self.type)
        if not is_page_type_consistent(self):
            required = PAYLOAD_FIELD_BY_TYPE.get(self.type)
            present = [name for name in PAYLOAD_FIELDS if getattr(self, name) is not None]
            raise MalformedPageError(
                f"Page {self.id} of type {self.type.value} requires payload "
                f"{required or 'none'} but has {present or 'none'}"
            )
        self._check_block_ids()

    def _check_block_ids(self) -> None:
        seen = set()
        for block in self.blocks:
            key = (type(block).__name__, block.id)
            if key in seen:
                raise MalformedPageError(f"Page {self.id} has duplicate block id {block.id!r}")
            seen.add(key)

    @property
    def blocks(self) -> List[ContentBlock]:
        return [*self.text_blocks, *self.image_blocks, *self.table_blocks]

    @property
    def payload(self):
        name = PAYLOAD_FIELD_BY_TYPE.get(self.type)
        return getattr(self, name) if name else None

    def text_by_role(self, role: TextRole) -> Optional[TextBlock]:
        for block in self.text_blocks:
            if block.role is role:
                return block
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "pageNumber": self.page_number,
            "layout": self.layout.to_dict(),
            "textBlocks": [b.to_dict() for b in self.text_blocks],
            "imageBlocks": [b.to_dict() for b in self.image_blocks],
            "tableBlocks": [b.to_dict() for b in self.table_blocks],
        }
        if self.title is not None:
            data["title"] = self.title
        if self.subtitle is not None:
            data["subtitle"] = self.subtitle
        for name in PAYLOAD_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if name == "reflection_prompts":
                data[_WIRE_NAMES[name]] = [p.to_dict() for p in value]
            else:
                data[_WIRE_NAMES[name]] = value.to_dict()
        if self.ai_generation is not None:
            data["aiGeneration"] = self.ai_generation.to_dict()
        if self.is_padding:
            data["isPadding"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Page":
        payloads: Dict[str, Any] = {}
        for name in PAYLOAD_FIELDS:
            raw = data.get(_WIRE_NAMES[name])
            if raw is None:
                continue
            if name == "reflection_prompts":
                payloads[name] = [ReflectionPrompt.from_dict(p) for p in raw]
            else:
                payloads[name] = _PAYLOAD_TYPES[name].from_dict(raw)
        ai_generation = data.get("aiGeneration")
        return cls(
            id=str(data["id"]),
            type=PageType(data["type"]),
            layout=LayoutMeta.from_dict(data["layout"]),
            page_number=int(data.get("pageNumber", 0)),
            title=data.get("title"),
            subtitle=data.get("subtitle"),
            text_blocks=[TextBlock.from_dict(b) for b in data.get("textBlocks", [])],
            image_blocks=[ImageBlock.from_dict(b) for b in data.get("imageBlocks", [])],
            table_blocks=[TableBlock.from_dict(b) for b in data.get("tableBlocks", [])],
            ai_generation=AIGenerationInfo.from_dict(ai_generation) if ai_generation else None,
            is_padding=bool(data.get("isPadding", False)),
            **payloads,
        )


def is_page_type_consistent(page: Page) -> bool:
    """True when the page carries exactly the payload its type requires."""
    required = PAYLOAD_FIELD_BY_TYPE.get(page.type)
    for name in PAYLOAD_FIELDS:
        present = getattr(page, name) is not None
        if present != (name == required):
            return False
    return True


@dataclass
class AIGeneratedContent:
    """
    Document-level AI text.

    ``fallback_used`` marks the content as template text rather than
    personalized output.
    """

    foreword: Optional[str] = None
    foreword_generated_at: Optional[str] = None
    coach_letter: Optional[str] = None
    theme_prompts: Dict[str, List[str]] = field(default_factory=dict)
    reflection_prompts: List[str] = field(default_factory=list)
    fallback_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "themePrompts": {k: list(v) for k, v in self.theme_prompts.items()},
            "reflectionPrompts": list(self.reflection_prompts),
            "fallbackUsed": self.fallback_used,
        }
        if self.foreword is not None:
            data["foreword"] = self.foreword
        if self.foreword_generated_at is not None:
            data["forewordGeneratedAt"] = self.foreword_generated_at
        if self.coach_letter is not None:
            data["coachLetter"] = self.coach_letter
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIGeneratedContent":
        return cls(
            foreword=data.get("foreword"),
            foreword_generated_at=data.get("forewordGeneratedAt"),
            coach_letter=data.get("coachLetter"),
            theme_prompts={k: list(v) for k, v in (data.get("themePrompts") or {}).items()},
            reflection_prompts=list(data.get("reflectionPrompts") or []),
            fallback_used=bool(data.get("fallbackUsed", False)),
        )


@dataclass
class Document:
    """
    An ordered workbook.

    Page parity and vendor page-count bounds are not enforced here; a
    document may violate them until validation and padding have run.
    """

    edition: Edition
    trim_size: TrimSize
    binding_type: BindingType
    pages: List[Page] = field(default_factory=list)
    cover_theme: str = "executive_dark"
    theme_pack: str = "executive"
    title: str = "My Vision Workbook"
    subtitle: Optional[str] = None
    ai_content: Optional[AIGeneratedContent] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def paginate(self) -> None:
        """Assign 1-based page numbers in sequence order."""
        for number, page in enumerate(self.pages, start=1):
            page.page_number = number

    def image_urls(self) -> List[str]:
        """All image URLs in page order, one entry per image block."""
        return [block.url for page in self.pages for block in page.image_blocks if block.url]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "edition": self.edition.value,
            "trimSize": self.trim_size.name,
            "bindingType": self.binding_type.value,
            "coverTheme": self.cover_theme,
            "themePack": self.theme_pack,
            "title": self.title,
            "pages": [p.to_dict() for p in self.pages],
        }
        if self.subtitle is not None:
            data["subtitle"] = self.subtitle
        if self.ai_content is not None:
            data["aiContent"] = self.ai_content.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        ai_content = data.get("aiContent")
        return cls(
            edition=Edition.parse(data["edition"]),
            trim_size=TrimSize.parse(data["trimSize"]),
            binding_type=BindingType.parse(data["bindingType"]),
            pages=[Page.from_dict(p) for p in data.get("pages", [])],
            cover_theme=data.get("coverTheme", "executive_dark"),
            theme_pack=data.get("themePack", "executive"),
            title=data.get("title", "My Vision Workbook"),
            subtitle=data.get("subtitle"),
            ai_content=AIGeneratedContent.from_dict(ai_content) if ai_content else None,
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "Document":
        return cls.from_dict(json.loads(text))
