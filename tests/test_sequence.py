"""Tests for the page sequence builder and its planner payloads."""

import asyncio
from collections import Counter

import pytest

from visionpress.core.layout.models import Document, Edition, ImageLayout, PageType, TextRole
from visionpress.core.print_specs import BindingType, TrimSize
from visionpress.core.sequence import (
    DEDICATION_TITLE, MAX_VISION_SPREADS, BuildOptions, PageSequenceBuilder, edition_template,
    first_monday, generate_calendar_weeks, monthly_calendar, roadmap_data, weekly_planner_data,
)

IMAGES = [f"https://images.example.com/vision-{i}.jpg" for i in range(1, 7)]


def executive_options(**overrides):
    data = {
        "edition": "EXECUTIVE_VISION_BOOK",
        "goals": ["Grow revenue 30%", "Run a marathon", "Write a book"],
        "habits": ["Meditate", {"id": "h2", "name": "Read", "description": "20 pages"}],
        "visionImages": IMAGES,
        "includeForeword": True,
        "title": "My 2025 Vision",
        "subtitle": "Executive Edition",
        "coverTheme": "executive_dark",
        "themePack": "executive",
        "financialTarget": 500000,
        "userName": "Alex",
        "planningYear": 2025,
    }
    data.update(overrides)
    return BuildOptions.from_dict(data)


def build(generator, config, options) -> Document:
    return asyncio.run(PageSequenceBuilder(config, generator=generator).build(options))


class TestCalendar:
    def test_weeks_are_sunday_first(self):
        # June 2025 starts on a Sunday
        weeks = generate_calendar_weeks(2025, 5)
        assert weeks[0][0].date_label == "1"
        assert all(len(week) == 7 for week in weeks)

    def test_padding_cells_are_empty(self):
        # January 2025 starts on a Wednesday
        weeks = generate_calendar_weeks(2025, 0)
        assert [d.date_label for d in weeks[0][:3]] == ["", "", ""]
        assert weeks[0][3].date_label == "1"
        labels = [d.date_label for week in weeks for d in week if d.date_label]
        assert labels == [str(n) for n in range(1, 32)]

    def test_day_ids_are_unique(self):
        weeks = generate_calendar_weeks(2025, 1)
        ids = [d.id for week in weeks for d in week]
        assert len(ids) == len(set(ids))
        assert ids[0] == "2025-02-w0-d0"

    def test_monthly_calendar_label(self):
        data = monthly_calendar(2024, 11)
        assert data.month_label == "December"
        assert data.month_index == 11

    def test_weekly_planner_starts_first_monday(self):
        assert first_monday(2025).isoformat() == "2025-01-06"
        data = weekly_planner_data(2025)
        assert data.week_of == "2025-01-06"
        assert [d.label for d in data.days][0] == "Monday"
        assert data.days[-1].iso_date == "2025-01-12"

    def test_roadmap_quarter_targets(self):
        data = roadmap_data(2025, ["A", "B", "C", "D", "E"])
        assert [g.target_date for g in data.goals] == [
            "2025-03-31", "2025-06-30", "2025-09-30", "2025-12-31", "2025-12-31"]
        assert data.key_milestones[0] == "Q1: A"


class TestBuildOptions:
    def test_from_dict_coerces_values(self):
        options = executive_options(trimSize="TRADE_6x9")
        assert options.edition is Edition.EXECUTIVE_VISION_BOOK
        assert options.trim_size is TrimSize.TRADE_6x9
        assert options.habits[0].id == "habit-1"
        assert options.habits[1].description == "20 pages"
        assert options.vision_images[0].id == "image-1"
        assert options.financial_target == 500000.0

    def test_defaults(self):
        options = BuildOptions.from_dict({})
        assert options.edition is Edition.EXECUTIVE_VISION_BOOK
        assert options.title == "My Vision Workbook"
        assert options.trim_size is None

    def test_unknown_edition_is_rejected(self):
        with pytest.raises(ValueError):
            BuildOptions.from_dict({"edition": "POCKET"})


class TestExecutiveBuild:
    @pytest.fixture
    def document(self, fake_generator, config):
        return build(fake_generator, config, executive_options())

    def test_page_order(self, document):
        types = [p.type for p in document.pages]
        assert types[:3] == [PageType.COVER_FRONT, PageType.TITLE_PAGE, PageType.DEDICATION]
        assert types[3:7] == [PageType.VISION_BOARD_SPREAD] * 4
        assert types[7:11] == [PageType.GOAL_OVERVIEW, PageType.FINANCIAL_OVERVIEW,
                               PageType.ROADMAP_YEAR, PageType.HABIT_TRACKER]
        assert types[11:23] == [PageType.MONTHLY_PLANNER] * 12
        assert types[23:25] == [PageType.WEEKLY_PLANNER, PageType.REFLECTION_MONTH]
        assert types[25:29] == [PageType.NOTES_LINED] * 4
        assert types[-1] == PageType.COVER_BACK

    def test_vision_spreads_are_capped(self, document):
        counts = Counter(p.type for p in document.pages)
        assert counts[PageType.VISION_BOARD_SPREAD] == MAX_VISION_SPREADS
        vision_urls = [b.url for p in document.pages if p.type is PageType.VISION_BOARD_SPREAD
                       for b in p.image_blocks]
        assert vision_urls == IMAGES[:4]

    def test_format_follows_edition(self, document):
        assert document.binding_type is BindingType.HARDCOVER
        assert document.trim_size is TrimSize.EXECUTIVE_7x9
        assert all(p.layout.trim_size is TrimSize.EXECUTIVE_7x9 for p in document.pages)
        assert all(p.layout.dpi == 72 for p in document.pages)

    def test_pages_are_numbered(self, document):
        assert [p.page_number for p in document.pages] == list(range(1, document.page_count + 1))
        assert len({p.id for p in document.pages}) == document.page_count

    def test_dedication_carries_foreword(self, document):
        dedication = document.pages[2]
        assert dedication.title == DEDICATION_TITLE
        assert dedication.text_by_role(TextRole.BODY).content == document.ai_content.foreword

    def test_payloads(self, document):
        by_type = {p.type: p for p in document.pages}
        months = [p.monthly_data.month_label for p in document.pages if p.type is PageType.MONTHLY_PLANNER]
        assert months[0] == "January" and months[-1] == "December"
        assert by_type[PageType.WEEKLY_PLANNER].weekly_data.week_of == "2025-01-06"
        assert [h.name for h in by_type[PageType.HABIT_TRACKER].habit_tracker.habits] == ["Meditate", "Read"]
        assert len(by_type[PageType.ROADMAP_YEAR].roadmap.goals) == 3
        assert by_type[PageType.REFLECTION_MONTH].reflection_prompts

    def test_generated_pages_record_provider(self, document):
        goal = next(p for p in document.pages if p.type is PageType.GOAL_OVERVIEW)
        assert goal.ai_generation.provider == "fake"
        assert not goal.ai_generation.fallback_used
        assert goal.title == "Generated Title"

    def test_back_cover_uses_theme_opener(self, document, config):
        back = document.pages[-1]
        assert back.text_by_role(TextRole.QUOTE).content == config.theme_pack("executive").opener

    def test_document_round_trip(self, document):
        assert Document.from_json(document.to_json()) == document


def test_failing_provider_still_builds(failing_generator, config):
    document = build(failing_generator, config, executive_options())
    generated = [p for p in document.pages if p.ai_generation is not None]
    assert generated
    assert all(p.ai_generation.fallback_used for p in generated)
    assert document.ai_content.fallback_used
    assert "Dear Self" in document.pages[2].text_by_role(TextRole.BODY).content


def test_softcover_journal(fake_generator, config):
    options = BuildOptions.from_dict({"edition": "SOFTCOVER_JOURNAL", "goals": ["Save more"],
                                      "financialTarget": 1000, "planningYear": 2025})
    document = build(fake_generator, config, options)
    types = [p.type for p in document.pages]
    assert document.binding_type is BindingType.SOFTCOVER
    assert types.count(PageType.MONTHLY_PLANNER) == 3
    assert PageType.FINANCIAL_OVERVIEW not in types
    assert PageType.ROADMAP_YEAR not in types
    assert PageType.DEDICATION not in types
    assert PageType.HABIT_TRACKER not in types
    assert PageType.COVER_BACK not in types


def test_trim_override(fake_generator, config):
    document = build(fake_generator, config, executive_options(trimSize="LETTER_8_5x11"))
    assert document.trim_size is TrimSize.LETTER_8_5x11


def test_vision_board_cover_uses_first_image(fake_generator, config):
    document = build(fake_generator, config, executive_options(coverTheme="use_vision_board_cover"))
    cover = document.pages[0]
    assert cover.image_blocks[0].url == IMAGES[0]
    assert cover.image_blocks[0].layout is ImageLayout.BACKGROUND


def test_edition_templates():
    assert edition_template("LEGACY_EDITION").default_trim is TrimSize.LETTER_8_5x11
    assert edition_template(Edition.HARDCOVER_PLANNER).back_cover is False
