"""
Print validation.

Checks a document against the vendor's page-count rules and every image
against the resolution needed at its printed size. Validation only reports;
``pad_document`` is the single place where padding pages are added.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .assets import probe_dimensions
from .config import WorkbookConfig
from .errors import PrintValidationError
from .layout.models import Document, Page, PageType, TextBlock, TextRole
from .print_specs import (
    DPI, MIN_DPI_ERROR, MIN_DPI_WARNING, MM_PER_INCH, PRINT_SIZES, BindingType, mm_to_px,
    page_limits, resolve_layout,
)

logger = logging.getLogger(__name__)

DPI_EXCELLENT = 300
DPI_GOOD = 200
DPI_ACCEPTABLE = MIN_DPI_ERROR


class ProductKind(Enum):
    PAPER = "PAPER"
    CANVAS = "CANVAS"


class Quality(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


QUALITY_MESSAGES = {
    Quality.EXCELLENT: "Excellent quality - Your image will print beautifully at this size.",
    Quality.GOOD: "Good quality - Your print will look great.",
    Quality.ACCEPTABLE: "Acceptable quality - Print will be clear but not optimal.",
}


def calculate_effective_dpi(width_px: int, height_px: int, width_in: float, height_in: float) -> float:
    """The lower of the horizontal and vertical DPI; the limiting dimension decides."""
    return min(width_px / width_in, height_px / height_in)


def quality_rating(dpi: float) -> Quality:
    if dpi >= DPI_EXCELLENT:
        return Quality.EXCELLENT
    if dpi >= DPI_GOOD:
        return Quality.GOOD
    if dpi >= DPI_ACCEPTABLE:
        return Quality.ACCEPTABLE
    return Quality.POOR


def is_quality_valid(quality: Quality, product: ProductKind = ProductKind.PAPER) -> bool:
    """Canvas prints need at least good quality; paper accepts acceptable."""
    if quality is Quality.POOR:
        return False
    if product is ProductKind.CANVAS and quality is Quality.ACCEPTABLE:
        return False
    return True


def find_recommended_size(width_px: int, height_px: int) -> Optional[str]:
    """Largest poster size the image still prints acceptably at, or None."""
    by_area = sorted(PRINT_SIZES.items(), key=lambda item: item[1][0] * item[1][1], reverse=True)
    for size_id, (w_in, h_in) in by_area:
        if calculate_effective_dpi(width_px, height_px, w_in, h_in) >= DPI_ACCEPTABLE:
            return size_id
    return None


@dataclass
class PrintQualityResult:
    effective_dpi: int
    quality: Quality
    message: str
    can_print: bool
    recommended_size: Optional[str] = None


def validate_print_asset(width_px: int, height_px: int, print_size_id: str) -> PrintQualityResult:
    """Rate an image for one of the poster sizes in ``PRINT_SIZES``."""
    if print_size_id not in PRINT_SIZES:
        return PrintQualityResult(0, Quality.POOR, "Invalid print size selected", False)
    w_in, h_in = PRINT_SIZES[print_size_id]
    dpi = calculate_effective_dpi(width_px, height_px, w_in, h_in)
    quality = quality_rating(dpi)
    if quality is not Quality.POOR:
        return PrintQualityResult(round(dpi), quality, QUALITY_MESSAGES[quality], True)

    recommended = find_recommended_size(width_px, height_px)
    if recommended:
        message = f"Low quality at this size. For best results, try {recommended}."
    else:
        message = "Image resolution is too low for quality printing."
    return PrintQualityResult(round(dpi), quality, message, False, recommended)


@dataclass
class ImageResolution:
    url: str
    dpi: int
    quality: Quality
    is_valid: bool
    width_px: int = 0
    height_px: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "dpi": self.dpi,
            "quality": self.quality.value,
            "isValid": self.is_valid,
            "widthPx": self.width_px,
            "heightPx": self.height_px,
        }


@dataclass
class PageCountCheck:
    current: int
    minimum: int
    maximum: int
    is_even: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"current": self.current, "min": self.minimum, "max": self.maximum, "isEven": self.is_even}


@dataclass
class ValidationReport:
    status: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    image_resolutions: List[ImageResolution] = field(default_factory=list)
    page_count: Optional[PageCountCheck] = None
    padding_needed: int = 0
    validated_at: str = ""

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "imageResolutions": [r.to_dict() for r in self.image_resolutions],
            "pageCount": self.page_count.to_dict() if self.page_count else None,
            "paddingNeeded": self.padding_needed,
            "validatedAt": self.validated_at,
        }

    def to_messages(self) -> List[str]:
        """User-facing lines, errors first."""
        messages = [f"Error: {e}" for e in self.errors]
        messages += [f"Warning: {w}" for w in self.warnings]
        if not messages:
            messages.append("Ready to print.")
        return messages


def calculate_padding(current: int, minimum: int) -> int:
    """Pages to append so the count reaches the minimum and is even."""
    padding = max(0, minimum - current)
    if (current + padding) % 2:
        padding += 1
    return padding


def validate_page_count(current: int, binding_type) -> Tuple[PageCountCheck, List[str], int]:
    """
    Check a page count against the binding's vendor limits.

    Returns:
        (page count summary, error messages, padding pages needed)
    """
    binding_type = BindingType.parse(binding_type)
    limits = page_limits(binding_type)
    check = PageCountCheck(current, limits.minimum, limits.maximum, current % 2 == 0)
    binding_name = binding_type.value.lower()
    errors = []
    if not check.is_even:
        errors.append(f"Page count must be even. Current: {current}. A blank page will be added automatically.")
    if current < limits.minimum:
        errors.append(f"Minimum {limits.minimum} pages required for {binding_name} binding. Current: {current}.")
    if current > limits.maximum:
        errors.append(f"Maximum {limits.maximum} pages allowed for {binding_name} binding. Current: {current}.")
    return check, errors, calculate_padding(current, limits.minimum)


def validate_image(url: str, width_px: int, height_px: int, target_mm: Tuple[float, float],
                   product: ProductKind = ProductKind.PAPER) -> Tuple[ImageResolution, List[str], List[str]]:
    """
    Rate one image for printing at ``target_mm``.

    Returns:
        (resolution entry, error messages, warning messages)
    """
    width_mm, height_mm = target_mm
    dpi = calculate_effective_dpi(width_px, height_px, width_mm / MM_PER_INCH, height_mm / MM_PER_INCH)
    quality = quality_rating(dpi)
    valid = is_quality_valid(quality, product)
    required_w, required_h = mm_to_px(width_mm, DPI), mm_to_px(height_mm, DPI)
    resolution = ImageResolution(url, round(dpi), quality, valid, width_px, height_px)

    errors, warnings = [], []
    if not valid:
        errors.append(
            f"Image resolution too low ({round(dpi)} DPI). "
            f"Minimum {MIN_DPI_WARNING} DPI required for acceptable print quality. "
            f"Current image: {width_px}x{height_px}px, Required: {required_w}x{required_h}px."
        )
    elif dpi < MIN_DPI_WARNING:
        warnings.append(
            f"Image resolution ({round(dpi)} DPI) is below optimal {MIN_DPI_WARNING} DPI. "
            "Print quality may be affected. Consider using a higher resolution image."
        )
    return resolution, errors, warnings


Probe = Callable[[str], Tuple[int, int]]


class PrintValidator:
    """
    Validates documents before checkout or rendering.

    Args:
        config: Shared workbook configuration
        probe: Returns (width, height) for an image URL; defaults to fetching
            the image with Pillow
    """

    def __init__(self, config: Optional[WorkbookConfig] = None, probe: Optional[Probe] = None):
        self.config = config or WorkbookConfig.default()
        self.probe = probe or (lambda url: probe_dimensions(url, self.config.asset_timeout))

    async def _probe_all(self, urls: List[str]) -> List[Any]:
        loop = asyncio.get_running_loop()
        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrency))

        async def one(url: str):
            async with semaphore:
                return await loop.run_in_executor(None, self.probe, url)

        return await asyncio.gather(*(one(u) for u in urls), return_exceptions=True)

    async def validate(self, document: Document, target_print_dimensions_mm: Optional[Tuple[float, float]] = None,
                       binding_type=None, product: ProductKind = ProductKind.PAPER) -> ValidationReport:
        """
        Validate page count and image resolution.

        Args:
            document: Document to check; it is not modified
            target_print_dimensions_mm: Printed (width, height); defaults to the trim size
            binding_type: Binding whose limits apply; defaults to the document's
            product: PAPER or CANVAS

        Returns:
            ValidationReport with status ``valid`` or ``invalid``
        """
        target_mm = target_print_dimensions_mm or document.trim_size.dimensions_mm
        binding = BindingType.parse(binding_type or document.binding_type)

        page_check, errors, padding = validate_page_count(document.page_count, binding)
        warnings: List[str] = []
        resolutions: List[ImageResolution] = []

        urls = document.image_urls()
        results = await self._probe_all(urls)
        for url, result in zip(urls, results):
            if isinstance(result, Exception):
                logger.warning(f"Image validation failed for {url}: {result}")
                errors.append(f"Failed to load or validate image: {result}")
                resolutions.append(ImageResolution(url, 0, Quality.POOR, False))
                continue
            width, height = result
            resolution, img_errors, img_warnings = validate_image(url, width, height, target_mm, product)
            resolutions.append(resolution)
            errors.extend(img_errors)
            warnings.extend(img_warnings)

        report = ValidationReport(
            status="invalid" if errors else "valid",
            errors=errors,
            warnings=warnings,
            image_resolutions=resolutions,
            page_count=page_check,
            padding_needed=padding,
            validated_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(f"Validation {report.status}: {len(errors)} errors, {len(warnings)} warnings, "
                    f"{len(urls)} images, {document.page_count} pages")
        return report


def ensure_printable(report: ValidationReport) -> None:
    """
    Raise unless the report is valid.

    Raises:
        PrintValidationError: With the report's error messages
    """
    if not report.is_valid:
        raise PrintValidationError(report.errors)


def pad_document(document: Document, report: Optional[ValidationReport] = None) -> int:
    """
    Append lined notes pages so the page count meets the binding minimum and
    is even, then renumber.

    Returns:
        Number of pages added
    """
    if report is not None:
        padding = report.padding_needed
    else:
        padding = validate_page_count(document.page_count, document.binding_type)[2]
    if padding <= 0:
        return 0

    if document.pages:
        layout = document.pages[-1].layout
    else:
        layout = resolve_layout(document.trim_size, document.binding_type)
    for i in range(padding):
        document.pages.append(Page(
            id=f"padding-{document.page_count + 1}",
            type=PageType.NOTES_LINED,
            layout=layout,
            title="Notes",
            text_blocks=[TextBlock(id="notes-title", role=TextRole.TITLE, content="Notes", editable=False)],
            is_padding=True,
        ))
    document.paginate()
    logger.info(f"Added {padding} padding page(s); document now has {document.page_count} pages")
    return padding
