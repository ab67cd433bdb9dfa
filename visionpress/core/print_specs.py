"""
Print vendor specifications and the layout metrics resolver.

All geometry is derived from millimeters at a target DPI:
    px = round(mm / 25.4 * dpi)

No bleed is ever added here; the print vendor generates bleed itself.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, Optional, Tuple

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72

# Vendor constants
DPI = 300
SAFETY_MARGIN_MM = 10
SPIRAL_EDGE_MARGIN_MM = 12

# Image quality thresholds
MIN_DPI_ERROR = 150    # below this the image is rejected
MIN_DPI_WARNING = 300  # below this the image is accepted with a warning


def mm_to_px(mm: float, dpi: int = DPI) -> int:
    """Convert millimeters to whole pixels at the given DPI."""
    return int(round(mm / MM_PER_INCH * dpi))


def px_to_mm(px: float, dpi: int = DPI) -> float:
    """Convert pixels to millimeters at the given DPI."""
    return px / dpi * MM_PER_INCH


def mm_to_inches(mm: float) -> float:
    return mm / MM_PER_INCH


def px_to_points(px: float, dpi: int = DPI) -> float:
    """Convert pixels at ``dpi`` to PDF points."""
    return px * POINTS_PER_INCH / dpi


class TrimSize(Enum):
    """Final (after trim) page sizes offered by the vendor."""

    LETTER_8_5x11 = ("US Letter", 215.9, 279.4)
    A4_8_27x11_69 = ("A4", 210.0, 297.0)
    A5_5_83x8_27 = ("A5", 148.0, 210.0)
    TRADE_6x9 = ("Trade (6x9)", 152.4, 228.6)
    EXECUTIVE_7x9 = ("Executive (7x9)", 177.8, 228.6)
    CARD_3x5 = ("Index Card (3x5)", 76.2, 127.0)

    def __init__(self, label: str, width_mm: float, height_mm: float):
        self.label = label
        self.width_mm = width_mm
        self.height_mm = height_mm

    @property
    def width_px(self) -> int:
        """Width in pixels at the 300 DPI reference."""
        return mm_to_px(self.width_mm)

    @property
    def height_px(self) -> int:
        """Height in pixels at the 300 DPI reference."""
        return mm_to_px(self.height_mm)

    @property
    def width_in(self) -> float:
        return round(mm_to_inches(self.width_mm), 2)

    @property
    def height_in(self) -> float:
        return round(mm_to_inches(self.height_mm), 2)

    @property
    def dimensions_mm(self) -> Tuple[float, float]:
        return (self.width_mm, self.height_mm)

    @classmethod
    def parse(cls, value) -> "TrimSize":
        """Look up a trim size by enum name, accepting an existing member."""
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip()]
        except KeyError:
            valid = ", ".join(m.name for m in cls)
            raise ValueError(f"Unknown trim size: {value}. Valid: {valid}") from None


class BindingType(Enum):
    SOFTCOVER = "SOFTCOVER"
    HARDCOVER = "HARDCOVER"
    SPIRAL = "SPIRAL"
    PAD = "PAD"
    CARDS = "CARDS"

    @classmethod
    def parse(cls, value) -> "BindingType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown binding type: {value}. Valid: {valid}") from None


@dataclass(frozen=True)
class PageLimits:
    minimum: int
    maximum: int


# Bindings without their own vendor limits follow the softcover rules
PAGE_LIMITS: Dict[BindingType, PageLimits] = {
    BindingType.SOFTCOVER: PageLimits(20, 300),
    BindingType.HARDCOVER: PageLimits(24, 300),
    BindingType.SPIRAL: PageLimits(20, 300),
    BindingType.PAD: PageLimits(20, 300),
    BindingType.CARDS: PageLimits(20, 300),
}


def page_limits(binding_type: BindingType) -> PageLimits:
    return PAGE_LIMITS[BindingType.parse(binding_type)]


@dataclass(frozen=True)
class LayoutMeta:
    """Pixel geometry for one trim size and binding at a given DPI."""

    trim_size: TrimSize
    width_px: int
    height_px: int
    safe_margin_px: int
    binding_type: BindingType
    dpi: int = DPI
    spiral_edge_margin_px: Optional[int] = None

    @property
    def is_spiral(self) -> bool:
        return self.spiral_edge_margin_px is not None

    @property
    def page_size_points(self) -> Tuple[float, float]:
        return (px_to_points(self.width_px, self.dpi), px_to_points(self.height_px, self.dpi))

    def to_dict(self) -> Dict:
        data = {
            "trimSize": self.trim_size.name,
            "widthPx": self.width_px,
            "heightPx": self.height_px,
            "safeMarginPx": self.safe_margin_px,
            "bindingType": self.binding_type.value,
            "dpi": self.dpi,
        }
        if self.spiral_edge_margin_px is not None:
            data["spiralEdgeMarginPx"] = self.spiral_edge_margin_px
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "LayoutMeta":
        return cls(
            trim_size=TrimSize.parse(data["trimSize"]),
            width_px=int(data["widthPx"]),
            height_px=int(data["heightPx"]),
            safe_margin_px=int(data["safeMarginPx"]),
            binding_type=BindingType.parse(data["bindingType"]),
            dpi=int(data.get("dpi", DPI)),
            spiral_edge_margin_px=data.get("spiralEdgeMarginPx"),
        )


@dataclass(frozen=True)
class Margins:
    left: int
    top: int
    right: int
    bottom: int


@lru_cache(maxsize=None)
def resolve_layout(trim_size: TrimSize, binding_type: BindingType, dpi: int = DPI) -> LayoutMeta:
    """
    Resolve the pixel geometry of a trim size and binding.

    Args:
        trim_size: Named physical page size
        binding_type: Binding of the finished product
        dpi: Target resolution (default: 300)

    Returns:
        LayoutMeta with dimensions and margins in pixels
    """
    trim_size = TrimSize.parse(trim_size)
    binding_type = BindingType.parse(binding_type)
    if dpi <= 0:
        raise ValueError(f"DPI must be positive, got {dpi}")

    spiral = None
    if binding_type is BindingType.SPIRAL:
        spiral = mm_to_px(SPIRAL_EDGE_MARGIN_MM, dpi)

    return LayoutMeta(
        trim_size=trim_size,
        width_px=mm_to_px(trim_size.width_mm, dpi),
        height_px=mm_to_px(trim_size.height_mm, dpi),
        safe_margin_px=mm_to_px(SAFETY_MARGIN_MM, dpi),
        binding_type=binding_type,
        dpi=dpi,
        spiral_edge_margin_px=spiral,
    )


def is_recto(page_number: int) -> bool:
    """Odd-numbered pages are right-hand (recto) pages."""
    return page_number % 2 == 1


def content_margins(layout: LayoutMeta, page_number: int) -> Margins:
    """
    Margins for the content area of a page.

    Recto (odd) pages are bound on their left edge and verso (even) pages on
    their right edge. The spiral margin is added to the bound edge only.
    """
    safe = layout.safe_margin_px
    left = right = safe
    if layout.spiral_edge_margin_px is not None:
        if is_recto(page_number):
            left += layout.spiral_edge_margin_px
        else:
            right += layout.spiral_edge_margin_px
    return Margins(left=left, top=safe, right=right, bottom=safe)


def safe_area(layout: LayoutMeta, page_number: int = 1) -> Tuple[int, int, int, int]:
    """Return the printable content rect (x, y, width, height) inside the margins."""
    m = content_margins(layout, page_number)
    return (m.left, m.top, layout.width_px - m.left - m.right, layout.height_px - m.top - m.bottom)


# Vendor product codes
PRODUCT_SKUS = {
    "SOFTCOVER_A5_80": "GLOBAL-NTB-A5-SC-80",
    "SOFTCOVER_A5_100": "GLOBAL-NTB-A5-SC-100",
    "HARDCOVER_A5_100": "GLOBAL-NTB-A5-HC-100",
    "HARDCOVER_A4_120": "GLOBAL-NTB-A4-HC-120",
    "HARDCOVER_LETTER_150": "GLOBAL-NTB-LTR-HC-150",
    "DAILY_PAD_A5": "GLOBAL-PAD-A5",
    "HABIT_CARDS": "GLOBAL-CRD-3x5",
}

PRODUCT_TYPE_TO_SKU = {
    "SOFTCOVER_JOURNAL": PRODUCT_SKUS["SOFTCOVER_A5_100"],
    "HARDCOVER_PLANNER": PRODUCT_SKUS["HARDCOVER_A5_100"],
    "EXECUTIVE_VISION_BOOK": PRODUCT_SKUS["HARDCOVER_A4_120"],
    "LEGACY_EDITION": PRODUCT_SKUS["HARDCOVER_LETTER_150"],
    "DAILY_PAD_A5": PRODUCT_SKUS["DAILY_PAD_A5"],
    "HABIT_CARDS": PRODUCT_SKUS["HABIT_CARDS"],
}


# Poster sizes used for print-size recommendations (inches)
PRINT_SIZES = {
    "12x18": (12, 18),
    "18x24": (18, 24),
    "24x36": (24, 36),
}
