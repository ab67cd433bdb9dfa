"""
AI content generation for workbook pages.

Builds a prompt from the user's context, routes it to a provider, retries
failed calls, and parses the JSON answer into content blocks. Provider
failures never propagate: when every attempt fails the generator returns
theme-keyed template content flagged with ``fallback_used``.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import WorkbookConfig
from .errors import ProviderError
from .fallbacks import (
    FALLBACK_REFLECTION_PROMPTS, fallback_coach_letter, fallback_foreword,
    fallback_page_content, format_money, personal_reflection_prompts,
)
from .layout.models import AIGeneratedContent, TableBlock, TextBlock, TextRole
from .retry import RetryPolicy
from .themes import PROMPT_CATEGORIES, ThemePack

logger = logging.getLogger(__name__)

FOREWORD = "FOREWORD"
COACH_LETTER = "COACH_LETTER"
REFLECTION_PROMPTS = "REFLECTION_PROMPTS"
THEME_PROMPTS_PREFIX = "THEME_PROMPTS:"
ALL = "ALL"

# Categories filled into the content package by generate_all
PACKAGE_PROMPT_CATEGORIES = ("financial", "health", "career", "relationship")


@dataclass
class AIContentContext:
    """Everything the generator needs to know about the user."""

    theme_pack: str = "executive"
    financial_target: Optional[float] = None
    financial_target_label: Optional[str] = None
    goals: List[str] = field(default_factory=list)
    habits: List[str] = field(default_factory=list)
    vision_text: Optional[str] = None
    user_name: Optional[str] = None


@dataclass
class PageContent:
    text_blocks: List[TextBlock] = field(default_factory=list)
    table_blocks: List[TableBlock] = field(default_factory=list)
    fallback_used: bool = False
    provider: Optional[str] = None
    model: Optional[str] = None


@dataclass
class GeneratedText:
    text: str
    fallback_used: bool = False
    provider: Optional[str] = None


@dataclass
class Parsed:
    """A provider answer that parsed as a JSON object."""
    content: Dict[str, Any]


@dataclass
class Degraded:
    """A provider answer that could not be parsed; kept verbatim."""
    raw_text: str


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence and its language tag."""
    content = content.strip()
    if content.startswith("```"):
        parts = content.split("```")
        if len(parts) >= 2:
            content = parts[1]
            if content[:4].lower() == "json":
                content = content[4:]
            content = content.strip()
    return content


def parse_or_degrade(raw: str) -> Union[Parsed, Degraded]:
    """Parse a provider answer as a JSON object, degrading to raw text on failure."""
    try:
        result = json.loads(strip_code_fences(raw or ""))
    except json.JSONDecodeError as e:
        logger.debug(f"JSON parsing failed: {e}")
        return Degraded(raw_text=raw)
    if not isinstance(result, dict):
        logger.warning(f"Expected JSON object, got {type(result).__name__}")
        return Degraded(raw_text=raw)
    return Parsed(content=result)


def blocks_from_content(content: Dict[str, Any], ai_generated: bool) -> Tuple[List[TextBlock], List[TableBlock]]:
    """Turn parsed ``textBlocks``/``tableBlocks`` into blocks with stable ids."""
    text_blocks = []
    for i, raw in enumerate(content.get("textBlocks") or []):
        if not isinstance(raw, dict):
            continue
        text_blocks.append(TextBlock(
            id=f"text-{i}",
            role=TextRole.parse(raw.get("role")),
            content=str(raw.get("content", "")),
            align=raw.get("align"),
            emphasis=raw.get("emphasis"),
            editable=True,
            ai_generated=ai_generated,
        ))
    table_blocks = []
    for i, raw in enumerate(content.get("tableBlocks") or []):
        if not isinstance(raw, dict):
            continue
        table_blocks.append(TableBlock(
            id=f"table-{i}",
            type=str(raw.get("type", "generic")),
            headers=[str(h) for h in raw.get("headers") or []],
            rows=[[str(c) for c in row] for row in raw.get("rows") or [] if isinstance(row, list)],
            ai_populated=ai_generated,
        ))
    return text_blocks, table_blocks


def page_content_from_response(raw: str) -> PageContent:
    outcome = parse_or_degrade(raw)
    if isinstance(outcome, Parsed):
        text_blocks, table_blocks = blocks_from_content(outcome.content, ai_generated=True)
        return PageContent(text_blocks=text_blocks, table_blocks=table_blocks)
    return PageContent(text_blocks=[TextBlock(
        id="text-0", role=TextRole.BODY, content=outcome.raw_text, editable=True, ai_generated=True,
    )])


# Prompt building

TONES = {
    "professional": "Use clear, professional language appropriate for executive planning.",
    "casual": "Use friendly, conversational language that feels approachable.",
    "inspirational": "Use uplifting, motivational language that energizes and inspires action.",
    "analytical": "Use data-driven, logical language focused on metrics and outcomes.",
}

PAGE_TASKS = {
    "GOAL_OVERVIEW": """Create a Goal Overview page that:
- States the user's top goals for the year in their own words
- Gives each goal a measurable outcome and a target date
- Adds one sentence on why each goal matters
Format as: Title, then one body block per goal""",

    "ROADMAP_YEAR": """Create an Annual Roadmap page for the upcoming year that:
- Sets the theme/focus for the year
- Defines 3-5 major goals
- Identifies quarterly milestones
Format as: Year Title, Annual Theme, Top Goals (with target dates), Quarterly Milestones""",

    "ROADMAP_QUARTER": """Create a Quarterly Roadmap page that:
- Names the focus for the quarter
- Breaks the user's goals into 90-day milestones
- Lists the first three actions to take
Format as: Quarter Title, Focus, Milestones, First Actions""",

    "FINANCIAL_OVERVIEW": """Create a Financial Overview with:
- The financial target stated as a headline number
- Income streams and savings goals that lead to it
- Key milestones along the way
Format as: Title, subtitle naming the target, body with the target amount, milestone labels""",

    "WEEKLY_PLANNER": """Create a Weekly Planner template with:
- Week of [date]
- Top 3 priorities for the week
- Daily sections (Monday-Sunday), each with a top priority and tasks
Format as a schedule table with one row per day""",

    "HABIT_TRACKER": """Create a Habit Tracker with:
- The user's habits, each with a target frequency
- Monthly grid (31 days)
Format as a habit_grid table""",

    "REFLECTION_MONTH": """Create a Monthly Review template with:
- Wins and achievements this month
- Challenges and lessons learned
- Progress on key goals
- Focus for next month
Format as prompts with space for answers""",

    "REFLECTION_WEEK": """Create a Weekly Reflection template with:
- What went well this week?
- What didn't go as planned?
- Key lessons learned
- Next week's focus
Format as reflection prompts with writing space""",

    "QUOTE_PAGE": """Create a Quote page with one short, original quote or affirmation that fits the user's theme and goals.
Format as a single quote block""",
}

FOREWORD_PROMPT = """You are writing a deeply personal "Letter from Your Future Self" for {name}.
This is the opening page of their Vision Workbook.

**Context:**
- Theme: {theme} - {guidance}
- Financial Target: {target}
- Vision: "{vision}"
- Goals: {goals}

**Instructions:**
Write a 200-300 word letter in first person from their FUTURE SELF (3 years from now) looking back at this moment.
- Celebrate specific achievements they will accomplish
- Reference their actual goals and financial targets
- Match the {theme} coaching style
- Be emotionally resonant but not cheesy
- End with encouragement to trust the process

Begin the letter with "Dear [Current Self]," and sign it "With pride, Your Future Self\""""

COACH_LETTER_PROMPT = """You are AMIE, an AI Vision Coach specializing in the {theme} journey.
Write a brief (150-200 words) letter to {name} about their vision workbook journey.

Their goals include: {goals}

The letter should:
- Be warm but professional
- Reference their specific goals
- Match the {theme} coaching style: {guidance}
- Include one actionable piece of advice
- End with encouragement

Sign as "Your AI Coach, AMIE\""""

OUTPUT_FORMAT = """OUTPUT FORMAT:
Return a JSON object with the following structure:
{
  "textBlocks": [
    {
      "role": "title" | "subtitle" | "body" | "label" | "quote",
      "content": "text content here"
    }
  ],
  "tableBlocks": [
    {
      "type": "budget" | "habit_grid" | "goal_tracker" | "schedule" | "generic",
      "headers": ["Column 1", "Column 2", ...],
      "rows": [["Cell 1", "Cell 2", ...], ...]
    }
  ]
}

CRITICAL: Return ONLY valid JSON. No markdown formatting, no explanations, just the JSON object."""


def system_instructions(tone: str = "professional") -> str:
    return (
        "You are an expert executive planner and life coach creating personalized content for a "
        f"premium planning workbook. {TONES.get(tone, TONES['professional'])}\n\n"
        "Your content should be:\n"
        "- Actionable and specific\n"
        "- Personalized to the user's context\n"
        "- Formatted for print (concise, scannable)\n"
        "- Motivating and empowering\n"
        "- Free of generic platitudes"
    )


def user_context_section(context: AIContentContext) -> str:
    lines = ["USER CONTEXT:"]
    if context.user_name:
        lines.append(f"Name: {context.user_name}")
    if context.goals:
        lines.append(f"Goals: {', '.join(context.goals)}")
    if context.habits:
        lines.append(f"Habits: {', '.join(context.habits)}")
    if context.financial_target:
        label = context.financial_target_label or "Financial Target"
        lines.append(f"{label}: {format_money(context.financial_target)}")
    if context.vision_text:
        lines.append(f"Vision: {context.vision_text}")
    return "\n".join(lines)


def build_page_prompt(kind: str, context: AIContentContext, pack: ThemePack, tone: str = "professional") -> str:
    """System instructions, theme guidance, user context, page task and output format."""
    task = PAGE_TASKS.get(kind) or (
        f"Create content for a {kind} page in an executive planner. Include relevant headings, "
        "prompts, and structure appropriate for this page type."
    )
    sections = [
        system_instructions(tone),
        f"THEME CONTEXT:\n{pack.guidance}\nUse motivation style consistent with: {pack.name}",
        user_context_section(context),
        task,
        OUTPUT_FORMAT,
    ]
    return "\n\n".join(sections)


def build_foreword_prompt(context: AIContentContext, pack: ThemePack) -> str:
    return FOREWORD_PROMPT.format(
        name=context.user_name or "the reader",
        theme=pack.id,
        guidance=pack.guidance,
        target=format_money(context.financial_target) if context.financial_target else "Not specified",
        vision=context.vision_text or "A life of purpose and achievement",
        goals=", ".join(context.goals) if context.goals else "Personal growth and fulfillment",
    )


def build_coach_letter_prompt(context: AIContentContext, pack: ThemePack) -> str:
    return COACH_LETTER_PROMPT.format(
        theme=pack.id,
        name=context.user_name or "your mentee",
        goals=", ".join(context.goals) or "personal growth and achievement",
        guidance=pack.guidance,
    )



class AIContentGenerator:
    """
    Produces workbook text through routed AI providers.

    Args:
        config: Shared workbook configuration (routing, retry, provider settings)
        provider: Single provider used for every call, bypassing routing
        providers: Provider instances keyed by provider id
        retry_policy: Override for the retry policy built from ``config``
        tone: Prompt tone (professional, casual, inspirational, analytical)
    """

    def __init__(self, config: Optional[WorkbookConfig] = None, provider=None,
                 providers: Optional[Dict[str, Any]] = None,
                 retry_policy: Optional[RetryPolicy] = None, tone: str = "professional"):
        self.config = config or WorkbookConfig.default()
        self._provider = provider
        self._providers = dict(providers or {})
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=self.config.max_attempts, base_delay=self.config.retry_delay
        )
        self.tone = tone

    def select_provider_id(self, kind: str) -> str:
        if self._provider is not None:
            return getattr(self._provider, "provider_id", "custom")
        return self.config.routing.select(kind)

    def _resolve_provider(self, provider_id: str):
        if self._provider is not None:
            return self._provider
        if provider_id not in self._providers:
            from ..providers import get_provider
            settings = self.config.provider_settings(provider_id)
            self._providers[provider_id] = get_provider(provider_id, settings.to_config())
        return self._providers[provider_id]

    async def _complete(self, kind: str, prompt: str, max_tokens: Optional[int] = None) -> Tuple[str, str]:
        """Call the routed provider with retries. Raises the last error."""
        provider_id = self.select_provider_id(kind)

        async def attempt():
            provider = self._resolve_provider(provider_id)
            text = await provider.complete(prompt, max_tokens=max_tokens)
            if not text or not str(text).strip():
                raise ProviderError(f"{provider_id} returned an empty response", provider=provider_id)
            return str(text)

        text = await self.retry_policy.run(attempt, description=f"{kind} generation via {provider_id}")
        return text, provider_id

    async def generate_page_content(self, context: AIContentContext, kind: str) -> PageContent:
        """Generate text and table blocks for one page kind."""
        pack = self.config.theme_pack(context.theme_pack)
        prompt = build_page_prompt(kind, context, pack, self.tone)
        try:
            raw, provider_id = await self._complete(kind, prompt)
        except Exception as e:
            logger.warning(f"Using fallback content for {kind}: {e}")
            content = fallback_page_content(kind, pack, context.goals, context.habits, context.financial_target)
            text_blocks, table_blocks = blocks_from_content(content, ai_generated=False)
            return PageContent(text_blocks=text_blocks, table_blocks=table_blocks, fallback_used=True)

        result = page_content_from_response(raw)
        result.provider = provider_id
        return result

    async def generate_foreword(self, context: AIContentContext) -> GeneratedText:
        """The "Letter from Your Future Self" dedication text."""
        pack = self.config.theme_pack(context.theme_pack)
        try:
            text, provider_id = await self._complete(FOREWORD, build_foreword_prompt(context, pack), max_tokens=800)
            return GeneratedText(text=text.strip(), provider=provider_id)
        except Exception as e:
            logger.warning(f"Foreword generation failed, using template: {e}")
            return GeneratedText(text=fallback_foreword(pack, context.financial_target), fallback_used=True)

    async def generate_coach_letter(self, context: AIContentContext) -> GeneratedText:
        pack = self.config.theme_pack(context.theme_pack)
        try:
            text, provider_id = await self._complete(
                COACH_LETTER, build_coach_letter_prompt(context, pack), max_tokens=400
            )
            return GeneratedText(text=text.strip(), provider=provider_id)
        except Exception as e:
            logger.warning(f"Coach letter generation failed, using template: {e}")
            return GeneratedText(text=fallback_coach_letter(context.user_name, context.goals), fallback_used=True)

    def generate_theme_prompts(self, context: AIContentContext, category: str) -> List[str]:
        """Curated reflection questions for a theme and life category."""
        if category not in PROMPT_CATEGORIES:
            raise ValueError(f"Unknown prompt category: {category}")
        return self.config.theme_pack(context.theme_pack).prompts_for(category)

    def generate_reflection_prompts(self, context: AIContentContext) -> List[str]:
        return personal_reflection_prompts(self.config.theme_pack(context.theme_pack), context.goals)

    async def generate_all(self, context: AIContentContext) -> AIGeneratedContent:
        """Foreword, coach letter and prompt library for a whole workbook."""
        foreword, coach_letter = await asyncio.gather(
            self.generate_foreword(context),
            self.generate_coach_letter(context),
        )
        fallback_used = foreword.fallback_used or coach_letter.fallback_used
        reflection = (FALLBACK_REFLECTION_PROMPTS if fallback_used
                      else self.generate_reflection_prompts(context))
        return AIGeneratedContent(
            foreword=foreword.text,
            foreword_generated_at=datetime.now(timezone.utc).isoformat(),
            coach_letter=coach_letter.text,
            theme_prompts={c: self.generate_theme_prompts(context, c) for c in PACKAGE_PROMPT_CATEGORIES},
            reflection_prompts=list(reflection),
            fallback_used=fallback_used,
        )

    async def generate(self, context: AIContentContext, kind: str):
        """
        Dispatch on content kind.

        Returns:
            AIGeneratedContent for ``ALL``, GeneratedText for ``FOREWORD`` and
            ``COACH_LETTER``, a list of strings for ``REFLECTION_PROMPTS`` and
            ``THEME_PROMPTS:<category>``, otherwise PageContent for a page kind.
        """
        kind = kind.strip().upper()
        if kind == ALL:
            return await self.generate_all(context)
        if kind == FOREWORD:
            return await self.generate_foreword(context)
        if kind == COACH_LETTER:
            return await self.generate_coach_letter(context)
        if kind == REFLECTION_PROMPTS:
            return self.generate_reflection_prompts(context)
        if kind.startswith(THEME_PROMPTS_PREFIX):
            return self.generate_theme_prompts(context, kind.split(":", 1)[1].strip().lower())
        return await self.generate_page_content(context, kind)
