"""
Deterministic template content used when AI generation is unavailable.

Templates use ``{{variable}}`` placeholders filled from the user's context,
so fallback text still carries the theme voice and the user's own goals.
"""

import logging
import re
from typing import Dict, List, Optional

from .themes import ThemePack

logger = logging.getLogger(__name__)

VARIABLE_PATTERN = re.compile(r'\{\{([^}]+)\}\}')


def fill_template(template: str, variables: Dict[str, str]) -> str:
    """Substitute ``{{name}}`` placeholders; unknown names are left as-is."""

    def replace_var(match):
        var_name = match.group(1).strip()
        if var_name in variables:
            return str(variables[var_name])
        logger.warning(f"Variable '{var_name}' not found in template")
        return match.group(0)

    return VARIABLE_PATTERN.sub(replace_var, template)


def format_money(amount: Optional[float]) -> str:
    if amount is None:
        return ""
    return f"${amount:,.0f}"


FOREWORD_TEMPLATE = """Dear Self,

As I write this from three years in the future, I want you to know that the vision you're holding right now becomes real. {{opener}}

Every goal you've written in this workbook, every habit you're building, leads to this moment of pride. The path wasn't always easy, but it was always worth it.

{{financial_line}}

Trust the process. Stay consistent. Your future self is grateful for the work you're about to do.

With pride,
Your Future Self"""

COACH_LETTER_TEMPLATE = """Dear {{name}},

Congratulations on taking this powerful step toward your dreams. This workbook represents your commitment to growth, and I'm honored to be part of your journey.

Your goals ({{goals}}) are not just dreams. They are destinations you are capable of reaching.

My advice: Start with one small action today. Momentum builds through consistency, not perfection.

I believe in you.

Your AI Coach,
AMIE"""

FALLBACK_REFLECTION_PROMPTS = [
    "What am I grateful for today?",
    "What progress have I made toward my goals?",
    "How am I showing up as my best self?",
]

MONTHLY_REFLECTION_PROMPTS = [
    "Wins this month:",
    "Challenges faced:",
    "Lessons learned:",
    "Focus for next month:",
]

WEEKLY_REFLECTION_PROMPTS = [
    "What went well this week?",
    "What didn't go as planned?",
    "Key lessons learned:",
    "Next week's focus:",
]

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def fallback_foreword(pack: ThemePack, financial_target: Optional[float] = None) -> str:
    if financial_target:
        financial_line = f"That financial target of {format_money(financial_target)}? You exceeded it."
    else:
        financial_line = "Your financial goals? Achieved and exceeded."
    return fill_template(FOREWORD_TEMPLATE, {"opener": pack.opener, "financial_line": financial_line})


def fallback_coach_letter(user_name: Optional[str], goals: List[str]) -> str:
    return fill_template(COACH_LETTER_TEMPLATE, {
        "name": user_name or "Visionary",
        "goals": ", ".join(goals[:3]) or "the vision you hold",
    })


def personal_reflection_prompts(pack: ThemePack, goals: List[str]) -> List[str]:
    """Reflection prompts personalized with the theme and first goal."""
    primary = goals[0] if goals else "primary"
    return [
        f"As someone focused on {pack.id}, what am I most grateful for today?",
        f"What progress have I made toward my {primary} goal?",
        "How am I showing up as my best self?",
        "What challenges have I overcome this week?",
        "What will I focus on tomorrow?",
    ]


def _title_from_kind(kind: str) -> str:
    return kind.replace("_", " ").title()


def fallback_page_content(kind: str, pack: ThemePack, goals: List[str], habits: List[str],
                          financial_target: Optional[float] = None) -> Dict[str, list]:
    """
    Template text and table blocks for a page kind, in the same shape a
    provider's JSON answer is parsed into.
    """
    if kind == "WEEKLY_PLANNER":
        return {
            "textBlocks": [
                {"role": "TITLE", "content": "Weekly Planner"},
                {"role": "LABEL", "content": "Week of:"},
            ],
            "tableBlocks": [{
                "type": "schedule",
                "headers": ["Day", "Top Priority", "Tasks"],
                "rows": [[day, "", ""] for day in WEEKDAYS],
            }],
        }
    if kind == "HABIT_TRACKER":
        names = habits[:3] or ["Habit 1", "Habit 2", "Habit 3"]
        return {
            "textBlocks": [
                {"role": "TITLE", "content": "Habit Tracker"},
                {"role": "LABEL", "content": "Month:"},
            ],
            "tableBlocks": [{
                "type": "habit_grid",
                "headers": ["Habit"] + [str(d) for d in range(1, 32)],
                "rows": [[name] + [""] * 31 for name in names],
            }],
        }
    if kind == "GOAL_OVERVIEW":
        blocks = [{"role": "TITLE", "content": "Annual Goals"}]
        blocks += [{"role": "BODY", "content": f"{i}. {goal}"} for i, goal in enumerate(goals, start=1)]
        return {"textBlocks": blocks, "tableBlocks": []}
    if kind == "FINANCIAL_OVERVIEW":
        target = format_money(financial_target) if financial_target else "Set your number"
        return {
            "textBlocks": [
                {"role": "TITLE", "content": "My Financial Vision"},
                {"role": "SUBTITLE", "content": "Financial Freedom"},
                {"role": "BODY", "content": target},
            ],
            "tableBlocks": [],
        }
    if kind in ("ROADMAP_YEAR", "ROADMAP_QUARTER"):
        blocks = [{"role": "TITLE", "content": "Annual Roadmap"}]
        for quarter, goal in zip(("Q1", "Q2", "Q3", "Q4"), goals):
            blocks.append({"role": "BODY", "content": f"{quarter}: {goal}"})
        return {"textBlocks": blocks, "tableBlocks": []}
    if kind in ("REFLECTION_MONTH", "REFLECTION_WEEK"):
        prompts = MONTHLY_REFLECTION_PROMPTS if kind == "REFLECTION_MONTH" else WEEKLY_REFLECTION_PROMPTS
        title = "Monthly Reflection" if kind == "REFLECTION_MONTH" else "Weekly Reflection"
        return {
            "textBlocks": [{"role": "TITLE", "content": title}]
                          + [{"role": "LABEL", "content": p} for p in prompts],
            "tableBlocks": [],
        }
    if kind == "QUOTE_PAGE":
        return {"textBlocks": [{"role": "QUOTE", "content": pack.opener}], "tableBlocks": []}
    return {"textBlocks": [{"role": "TITLE", "content": _title_from_kind(kind)}], "tableBlocks": []}
