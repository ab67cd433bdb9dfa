"""
Cover themes and theme packs.

Cover themes style the front cover; theme packs carry the coaching voice
(AI guidance, fallback openers, reflection prompts) and the interior print
palette.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

VISION_BOARD_COVER = "use_vision_board_cover"
DEFAULT_COVER_THEME = "executive_dark"
DEFAULT_THEME_PACK = "executive"

PROMPT_CATEGORIES = ("financial", "health", "career", "relationship", "spiritual")


@dataclass(frozen=True)
class CoverTheme:
    id: str
    name: str
    description: str
    background: str
    title_color: str
    subtitle_color: str
    accent_color: str
    gradient: Tuple[str, ...] = ()
    title_family: str = "serif"  # serif | sans-serif
    title_weight: str = "bold"  # normal | bold
    subtitle_family: str = "sans-serif"
    title_position: str = "center"  # center | top | bottom
    use_overlay: bool = False
    overlay_opacity: float = 0.0

    @property
    def uses_vision_image(self) -> bool:
        """The cover background comes from the user's first vision image."""
        return self.id == VISION_BOARD_COVER


COVER_THEMES: Dict[str, CoverTheme] = {
    "executive_dark": CoverTheme(
        id="executive_dark",
        name="Executive Dark",
        description="Premium matte black with gold foil accents",
        background="#1E243C",
        gradient=("#1E243C", "#0F1219"),
        title_color="#FFFFFF",
        subtitle_color="#D97706",
        accent_color="#D97706",
    ),
    "faith_purpose": CoverTheme(
        id="faith_purpose",
        name="Faith & Purpose",
        description="Warm ivory with burgundy and gold accents",
        background="#FDF5E6",
        gradient=("#FDF5E6", "#F5E6D3"),
        title_color="#722F37",
        subtitle_color="#8B7355",
        accent_color="#C5A572",
        subtitle_family="serif",
    ),
    "tropical_retirement": CoverTheme(
        id="tropical_retirement",
        name="Tropical Retirement",
        description="Ocean blue with sunset coral highlights",
        background="#0369A1",
        gradient=("#0369A1", "#075985", "#0C4A6E"),
        title_color="#FFFFFF",
        subtitle_color="#FCD34D",
        accent_color="#F97316",
        title_family="sans-serif",
    ),
    "minimal_white_gold": CoverTheme(
        id="minimal_white_gold",
        name="Minimal White & Gold",
        description="Clean white with elegant gold typography",
        background="#FFFFFF",
        gradient=("#FFFFFF", "#F8FAFC"),
        title_color="#1E293B",
        subtitle_color="#B8860B",
        accent_color="#D4AF37",
        title_weight="normal",
    ),
    VISION_BOARD_COVER: CoverTheme(
        id=VISION_BOARD_COVER,
        name="Vision Board Cover",
        description="Use your first vision board as the cover background",
        background="#000000",
        title_color="#FFFFFF",
        subtitle_color="#FFFFFF",
        accent_color="#D97706",
        use_overlay=True,
        overlay_opacity=0.4,
    ),
}


@dataclass(frozen=True)
class Palette:
    primary: str
    secondary: str
    accent: str


@dataclass(frozen=True)
class ThemePack:
    id: str
    name: str
    guidance: str
    opener: str
    palette: Palette
    prompts: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def prompts_for(self, category: str) -> List[str]:
        return list(self.prompts.get(category) or DEFAULT_THEME_PROMPTS)


DEFAULT_THEME_PROMPTS = (
    "What does success look like in this area?",
    "What habits will support this goal?",
    "How will I know I've achieved it?",
)

THEME_PACKS: Dict[str, ThemePack] = {
    "faith": ThemePack(
        id="faith",
        name="Faith & Purpose",
        guidance=(
            "Include references to faith, purpose, and divine guidance. Use scripture-inspired "
            "language. Focus on spiritual growth and service to others."
        ),
        opener="Through faith and purpose, you have built something beautiful.",
        palette=Palette("#4C4C80", "#D6AE5E", "#878799"),
        prompts={
            "financial": (
                "How will financial freedom allow me to serve others?",
                "What is my stewardship goal this year?",
                "How can I be a blessing with my resources?",
            ),
            "health": (
                "How can I honor my body as a temple?",
                "What wellness practices align with my faith?",
                "How will health help me serve longer?",
            ),
            "spiritual": (
                "What spiritual disciplines am I committing to?",
                "How will I grow closer to God this year?",
                "What legacy of faith am I building?",
            ),
            "relationship": (
                "How can I love others as myself?",
                "What relationships need reconciliation?",
                "How will I serve my community?",
            ),
            "career": (
                "How does my work serve a higher purpose?",
                "What values guide my professional decisions?",
                "How can I be a light in my workplace?",
            ),
        },
    ),
    "executive": ThemePack(
        id="executive",
        name="Executive Performance",
        guidance=(
            "Use strategic language, KPIs, and measurable outcomes. Focus on leadership impact, "
            "professional excellence, and data-driven achievement."
        ),
        opener="Every strategic decision has led to this moment of achievement.",
        palette=Palette("#1E243C", "#D97706", "#666666"),
        prompts={
            "financial": (
                "What is my 3-year revenue target?",
                "What ROI do I expect from this investment in myself?",
                "What metrics define financial success?",
            ),
            "career": (
                "What leadership impact will I create?",
                "How will I develop my team?",
                "What strategic initiatives will I drive?",
            ),
            "health": (
                "How will peak performance improve my leadership?",
                "What energy management systems will I implement?",
                "How does wellness affect my decision-making?",
            ),
            "relationship": (
                "How will I balance ambition with family time?",
                "What networking goals will I set?",
                "How can I mentor others effectively?",
            ),
            "spiritual": (
                "What is my purpose beyond profit?",
                "How do I define meaningful success?",
                "What legacy am I building?",
            ),
        },
    ),
    "retirement": ThemePack(
        id="retirement",
        name="Retirement & Legacy",
        guidance=(
            "Focus on freedom, legacy, and the fulfillment of life goals. Celebrate the journey "
            "and emphasize quality time with loved ones."
        ),
        opener="The freedom you dreamed of is now your daily reality.",
        palette=Palette("#156680", "#F69951", "#808080"),
        prompts={
            "financial": (
                "What does financial freedom look like daily?",
                "How will I manage my retirement income?",
                "What legacy will I leave?",
            ),
            "relationship": (
                "How will I invest in family relationships?",
                "What experiences will I share with loved ones?",
                "How will I stay socially connected?",
            ),
            "health": (
                "How will I maintain vitality in retirement?",
                "What adventures require good health?",
                "What wellness routines will I establish?",
            ),
            "career": (
                "What passion projects will I pursue?",
                "How might I contribute through part-time work?",
                "What skills will I share with others?",
            ),
            "spiritual": (
                "What gives my life meaning now?",
                "How will I practice gratitude daily?",
                "What wisdom will I pass on?",
            ),
        },
    ),
    "health": ThemePack(
        id="health",
        name="Health & Vitality",
        guidance=(
            "Emphasize vitality, wellness milestones, and physical transformation. Celebrate "
            "energy, longevity, and mind-body connection."
        ),
        opener="Your body and mind are now in perfect harmony.",
        palette=Palette("#2E8B57", "#1DA0E2", "#708090"),
        prompts={
            "health": (
                "What does my ideal body feel like?",
                "What nutrition habits will I build?",
                "How will I measure progress?",
            ),
            "relationship": (
                "How will better health improve my relationships?",
                "Who will support my health journey?",
                "How can I inspire others to be healthy?",
            ),
            "financial": (
                "How will health save me money long-term?",
                "What investments will I make in my wellness?",
                "How does energy affect my earning potential?",
            ),
            "career": (
                "How will vitality improve my work performance?",
                "What health boundaries will I set at work?",
                "How does sleep affect my productivity?",
            ),
            "spiritual": (
                "How is physical health connected to mental peace?",
                "What mindfulness practices will I adopt?",
                "How will I honor my body?",
            ),
        },
    ),
    "entrepreneur": ThemePack(
        id="entrepreneur",
        name="Entrepreneur",
        guidance=(
            "Highlight innovation, risk-taking, and building something meaningful. Celebrate "
            "hustle, vision, and creating value."
        ),
        opener="Your vision has become a thriving reality.",
        palette=Palette("#333333", "#FF7A00", "#999999"),
        prompts={
            "financial": (
                "What revenue milestone am I targeting?",
                "How will I reinvest profits?",
                "What is my exit strategy?",
            ),
            "career": (
                "What problem am I solving?",
                "How will I scale my impact?",
                "What partnerships will I build?",
            ),
            "relationship": (
                "How will I balance business with family?",
                "Who are my key advisors?",
                "How will I build my team culture?",
            ),
            "health": (
                "How will I avoid burnout?",
                "What boundaries protect my energy?",
                "How does health fuel my hustle?",
            ),
            "spiritual": (
                "What drives me beyond money?",
                "How will my business make a difference?",
                "What values guide my decisions?",
            ),
        },
    ),
    "relationship": ThemePack(
        id="relationship",
        name="Relationships",
        guidance=(
            "Focus on connection, love, and meaningful relationships. Celebrate partnership, "
            "communication, and growing together."
        ),
        opener="The connections you cultivated have blossomed beyond measure.",
        palette=Palette("#BC3B71", "#E1826D", "#978087"),
        prompts={
            "relationship": (
                "What does my ideal relationship look like?",
                "How will I show up for my partner?",
                "What experiences will we share?",
            ),
            "spiritual": (
                "How will we grow together spiritually?",
                "What values do we share?",
                "How do we practice gratitude together?",
            ),
            "financial": (
                "What are our shared financial goals?",
                "How will we make money decisions together?",
                "What experiences are worth investing in?",
            ),
            "health": (
                "How will we support each other's health?",
                "What activities will we enjoy together?",
                "How do healthy habits strengthen us?",
            ),
            "career": (
                "How do we support each other's ambitions?",
                "What work-life balance will we maintain?",
                "How do we celebrate each other's wins?",
            ),
        },
    ),
}


def hex_to_rgb(hex_color: str):
    """Convert hex color string to RGB tuple."""
    h = hex_color.strip("#")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    if len(h) == 6:
        return tuple(int(h[i:i + 2], 16) for i in (0, 2, 4))
    raise ValueError(f"Only #RGB or #RRGGBB format supported, got: {hex_color}")
