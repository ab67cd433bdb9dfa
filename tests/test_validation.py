"""Tests for print validation and padding."""

import asyncio

import pytest

from visionpress.core.errors import PrintValidationError
from visionpress.core.layout.models import (
    Document, Edition, ImageBlock, ImageSource, Page, PageType, TextRole,
)
from visionpress.core.print_specs import BindingType, TrimSize, resolve_layout
from visionpress.core.validation import (
    PrintValidator, ProductKind, Quality, ValidationReport, calculate_effective_dpi,
    calculate_padding, ensure_printable, find_recommended_size, pad_document, quality_rating,
    validate_image, validate_page_count, validate_print_asset,
)

POSTER_18x24_MM = (18 * 25.4, 24 * 25.4)


def make_document(page_count, binding=BindingType.SOFTCOVER, image_urls=()):
    layout = resolve_layout(TrimSize.TRADE_6x9, binding, 72)
    pages = []
    for i in range(page_count):
        images = []
        if i < len(image_urls):
            images = [ImageBlock(id="img", source_type=ImageSource.UPLOAD, url=image_urls[i])]
        pages.append(Page(id=f"page-{i}", type=PageType.CUSTOM, layout=layout, image_blocks=images))
    document = Document(edition=Edition.SOFTCOVER_JOURNAL, trim_size=TrimSize.TRADE_6x9,
                        binding_type=binding, pages=pages)
    document.paginate()
    return document


def validator_with_sizes(config, sizes):
    def probe(url):
        if url not in sizes:
            raise OSError(f"cannot open {url}")
        return sizes[url]
    return PrintValidator(config, probe=probe)


class TestDpi:
    def test_effective_dpi_uses_limiting_dimension(self):
        assert calculate_effective_dpi(1200, 1800, 18, 24) == pytest.approx(66.67, abs=0.01)

    @pytest.mark.parametrize("dpi,quality", [
        (300, Quality.EXCELLENT), (250, Quality.GOOD), (200, Quality.GOOD),
        (150, Quality.ACCEPTABLE), (149.9, Quality.POOR),
    ])
    def test_quality_bands(self, dpi, quality):
        assert quality_rating(dpi) is quality

    def test_low_resolution_image_is_an_error(self):
        resolution, errors, warnings = validate_image("u", 1200, 1800, POSTER_18x24_MM)
        assert resolution.dpi == 67
        assert resolution.quality is Quality.POOR
        assert not resolution.is_valid
        assert errors == [
            "Image resolution too low (67 DPI). Minimum 300 DPI required for acceptable print "
            "quality. Current image: 1200x1800px, Required: 5400x7200px."
        ]
        assert warnings == []

    def test_good_image_gets_a_warning(self):
        resolution, errors, warnings = validate_image("u", 3780, 5040, POSTER_18x24_MM)
        assert resolution.quality is Quality.GOOD
        assert errors == []
        assert "below optimal 300 DPI" in warnings[0]

    def test_canvas_rejects_acceptable_quality(self):
        _, paper_errors, _ = validate_image("u", 2880, 3840, POSTER_18x24_MM, ProductKind.PAPER)
        _, canvas_errors, _ = validate_image("u", 2880, 3840, POSTER_18x24_MM, ProductKind.CANVAS)
        assert paper_errors == []
        assert len(canvas_errors) == 1

    def test_recommended_size(self):
        assert find_recommended_size(5400, 7200) == "24x36"
        assert find_recommended_size(1800, 2700) == "12x18"
        assert find_recommended_size(100, 100) is None

    def test_print_asset_suggests_smaller_size(self):
        result = validate_print_asset(1800, 2700, "24x36")
        assert not result.can_print
        assert result.recommended_size == "12x18"
        assert "12x18" in result.message

    def test_print_asset_unknown_size(self):
        assert not validate_print_asset(1000, 1000, "8x10").can_print


class TestPageCount:
    def test_padding_for_nineteen_softcover_pages(self):
        check, errors, padding = validate_page_count(19, BindingType.SOFTCOVER)
        assert padding == 1
        assert not check.is_even
        assert errors == [
            "Page count must be even. Current: 19. A blank page will be added automatically.",
            "Minimum 20 pages required for softcover binding. Current: 19.",
        ]

    def test_padding_reaches_even_minimum(self):
        assert calculate_padding(10, 20) == 10
        assert calculate_padding(21, 20) == 1
        assert calculate_padding(22, 24) == 2
        assert calculate_padding(30, 24) == 0

    def test_too_many_pages_needs_no_padding(self):
        _, errors, padding = validate_page_count(302, BindingType.HARDCOVER)
        assert padding == 0
        assert errors == ["Maximum 300 pages allowed for hardcover binding. Current: 302."]

    def test_odd_count_above_maximum_still_needs_one_page(self):
        check, errors, padding = validate_page_count(301, BindingType.SOFTCOVER)
        assert padding == 1
        assert not check.is_even
        assert errors == [
            "Page count must be even. Current: 301. A blank page will be added automatically.",
            "Maximum 300 pages allowed for softcover binding. Current: 301.",
        ]


class TestValidator:
    def test_valid_document(self, config):
        report = asyncio.run(PrintValidator(config, probe=lambda url: (10, 10)).validate(make_document(20)))
        assert report.is_valid
        assert report.to_messages() == ["Ready to print."]
        assert report.page_count.to_dict() == {"current": 20, "min": 20, "max": 300, "isEven": True}

    def test_low_resolution_poster(self, config):
        document = make_document(20, image_urls=["https://cdn/a.jpg"])
        validator = validator_with_sizes(config, {"https://cdn/a.jpg": (1200, 1800)})
        report = asyncio.run(validator.validate(document, target_print_dimensions_mm=POSTER_18x24_MM))
        assert report.status == "invalid"
        assert report.image_resolutions[0].dpi == 67
        assert report.to_messages()[0].startswith("Error: Image resolution too low (67 DPI)")

    def test_unloadable_image_is_reported(self, config):
        document = make_document(20, image_urls=["https://cdn/missing.jpg"])
        report = asyncio.run(validator_with_sizes(config, {}).validate(document))
        assert not report.is_valid
        assert report.errors[0].startswith("Failed to load or validate image:")
        assert report.image_resolutions[0].dpi == 0

    def test_binding_override(self, config):
        report = asyncio.run(PrintValidator(config, probe=lambda url: (1, 1)).validate(
            make_document(20), binding_type=BindingType.HARDCOVER))
        assert report.padding_needed == 4
        assert not report.is_valid

    def test_validation_does_not_modify_document(self, config):
        document = make_document(19)
        asyncio.run(PrintValidator(config).validate(document))
        assert document.page_count == 19

    def test_default_probe_reads_local_files(self, config, make_image):
        path = make_image(330, 495)
        document = make_document(20, image_urls=[path])
        report = asyncio.run(PrintValidator(config).validate(document, target_print_dimensions_mm=(25.4, 38.1)))
        assert report.image_resolutions[0].width_px == 330
        assert report.image_resolutions[0].quality is Quality.EXCELLENT

    def test_report_dict(self, config):
        report = asyncio.run(PrintValidator(config).validate(make_document(19)))
        data = report.to_dict()
        assert data["status"] == "invalid"
        assert data["paddingNeeded"] == 1
        assert data["validatedAt"]


class TestPadding:
    def test_pad_document_appends_notes_pages(self, config):
        document = make_document(19)
        report = asyncio.run(PrintValidator(config).validate(document))
        added = pad_document(document, report)
        assert added == 1
        assert document.page_count == 20
        last = document.pages[-1]
        assert last.type is PageType.NOTES_LINED
        assert last.is_padding
        assert last.page_number == 20
        assert last.text_by_role(TextRole.TITLE).content == "Notes"

        after = asyncio.run(PrintValidator(config).validate(document))
        assert after.is_valid

    def test_pad_without_report(self):
        document = make_document(5)
        assert pad_document(document) == 15
        assert document.page_count == 20
        assert len({p.id for p in document.pages}) == 20

    def test_nothing_to_pad(self):
        assert pad_document(make_document(20)) == 0


def test_ensure_printable():
    ensure_printable(ValidationReport(status="valid"))
    with pytest.raises(PrintValidationError):
        ensure_printable(ValidationReport(status="invalid", errors=["too short"]))
