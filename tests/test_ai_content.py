"""Tests for AI content generation, parsing and fallbacks."""

import asyncio
import json

import pytest

from visionpress.core.ai_content import (
    AIContentContext, AIContentGenerator, Degraded, GeneratedText, PageContent, Parsed,
    build_page_prompt, parse_or_degrade, strip_code_fences,
)
from visionpress.core.config import WorkbookConfig
from visionpress.core.fallbacks import FALLBACK_REFLECTION_PROMPTS, fill_template, format_money
from visionpress.core.layout.models import AIGeneratedContent, TextRole
from visionpress.core.llm_models import RoutingTable


@pytest.fixture
def context():
    return AIContentContext(
        theme_pack="faith",
        financial_target=250000,
        goals=["Launch my ministry", "Run a half marathon"],
        habits=["Morning prayer"],
        vision_text="A life of service",
        user_name="Jordan",
    )


class TestParsing:
    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_parse_json_object(self):
        outcome = parse_or_degrade('```json\n{"textBlocks": []}\n```')
        assert isinstance(outcome, Parsed)
        assert outcome.content == {"textBlocks": []}

    def test_unparseable_answer_degrades_to_raw_text(self):
        outcome = parse_or_degrade("Here is your page: a title and some text")
        assert isinstance(outcome, Degraded)
        assert outcome.raw_text.startswith("Here is your page")

    def test_json_array_degrades(self):
        assert isinstance(parse_or_degrade("[1, 2, 3]"), Degraded)


class TestPageContent:
    def test_parsed_blocks(self, fake_generator, context):
        content = asyncio.run(fake_generator.generate_page_content(context, "GOAL_OVERVIEW"))
        assert isinstance(content, PageContent)
        assert not content.fallback_used
        assert content.provider == "fake"
        assert [b.role for b in content.text_blocks] == [TextRole.TITLE, TextRole.BODY]
        assert [b.id for b in content.text_blocks] == ["text-0", "text-1"]
        assert all(b.ai_generated and b.editable for b in content.text_blocks)

    def test_table_blocks_are_parsed(self, config, fake_provider, retry_policy, context):
        fake_provider.response = json.dumps({
            "textBlocks": [{"role": "title", "content": "Weekly Planner"}],
            "tableBlocks": [{"type": "schedule", "headers": ["Day", "Tasks"],
                             "rows": [["Monday", "Plan"], ["Tuesday", ""]]}],
        })
        generator = AIContentGenerator(config, provider=fake_provider, retry_policy=retry_policy)
        content = asyncio.run(generator.generate_page_content(context, "WEEKLY_PLANNER"))
        table = content.table_blocks[0]
        assert table.type == "schedule"
        assert table.rows == [["Monday", "Plan"], ["Tuesday", ""]]
        assert table.ai_populated

    def test_degraded_answer_becomes_one_body_block(self, config, fake_provider, retry_policy, context):
        fake_provider.response = "Just some prose."
        generator = AIContentGenerator(config, provider=fake_provider, retry_policy=retry_policy)
        content = asyncio.run(generator.generate_page_content(context, "QUOTE_PAGE"))
        assert not content.fallback_used
        assert len(content.text_blocks) == 1
        assert content.text_blocks[0].role is TextRole.BODY
        assert content.text_blocks[0].content == "Just some prose."

    def test_prompt_includes_theme_and_user_context(self, fake_generator, fake_provider, context):
        asyncio.run(fake_generator.generate_page_content(context, "FINANCIAL_OVERVIEW"))
        prompt = fake_provider.prompts[0]
        assert "Faith & Purpose" in prompt
        assert "Launch my ministry" in prompt
        assert "$250,000" in prompt
        assert "Return ONLY valid JSON" in prompt

    def test_unknown_kind_gets_generic_task(self, config, context):
        prompt = build_page_prompt("SECTION_DIVIDER", context, config.theme_pack("faith"))
        assert "SECTION_DIVIDER page" in prompt


class TestFallbacks:
    def test_always_failing_provider_falls_back(self, failing_generator, failing_provider, context):
        content = asyncio.run(failing_generator.generate_page_content(context, "GOAL_OVERVIEW"))
        assert content.fallback_used
        assert content.provider is None
        assert failing_provider.calls == 3
        bodies = [b.content for b in content.text_blocks if b.role is TextRole.BODY]
        assert bodies == ["1. Launch my ministry", "2. Run a half marathon"]
        assert not any(b.ai_generated for b in content.text_blocks)

    def test_fallback_quote_is_keyed_to_theme(self, failing_generator, config, context):
        content = asyncio.run(failing_generator.generate_page_content(context, "QUOTE_PAGE"))
        assert content.text_blocks[0].content == config.theme_pack("faith").opener

    def test_fallback_financial_overview_shows_target(self, failing_generator, context):
        content = asyncio.run(failing_generator.generate_page_content(context, "FINANCIAL_OVERVIEW"))
        assert [b.content for b in content.text_blocks][-1] == "$250,000"

    def test_fallback_foreword_uses_theme_opener(self, failing_generator, config, context):
        result = asyncio.run(failing_generator.generate_foreword(context))
        assert isinstance(result, GeneratedText)
        assert result.fallback_used
        assert config.theme_pack("faith").opener in result.text
        assert "$250,000" in result.text

    def test_fallback_coach_letter_names_user(self, failing_generator, context):
        result = asyncio.run(failing_generator.generate_coach_letter(context))
        assert result.fallback_used
        assert result.text.startswith("Dear Jordan,")

    def test_generate_all_with_failures(self, failing_generator, context):
        content = asyncio.run(failing_generator.generate_all(context))
        assert isinstance(content, AIGeneratedContent)
        assert content.fallback_used
        assert content.reflection_prompts == FALLBACK_REFLECTION_PROMPTS
        assert set(content.theme_prompts) == {"financial", "health", "career", "relationship"}
        assert content.foreword_generated_at

    def test_generate_all_with_working_provider(self, fake_generator, context):
        content = asyncio.run(fake_generator.generate_all(context))
        assert not content.fallback_used
        assert "Launch my ministry" in content.reflection_prompts[1]


class TestDispatch:
    def test_generate_dispatches_on_kind(self, fake_generator, context):
        assert isinstance(asyncio.run(fake_generator.generate(context, "foreword")), GeneratedText)
        assert isinstance(asyncio.run(fake_generator.generate(context, "GOAL_OVERVIEW")), PageContent)
        assert isinstance(asyncio.run(fake_generator.generate(context, "ALL")), AIGeneratedContent)

    def test_theme_prompts_by_category(self, fake_generator, config, context):
        prompts = asyncio.run(fake_generator.generate(context, "THEME_PROMPTS:health"))
        assert prompts == list(config.theme_pack("faith").prompts["health"])

    def test_unknown_category_is_rejected(self, fake_generator, context):
        with pytest.raises(ValueError):
            fake_generator.generate_theme_prompts(context, "hobbies")

    def test_unknown_theme_pack_uses_executive(self, fake_generator, config):
        prompts = fake_generator.generate_theme_prompts(AIContentContext(theme_pack="unknown"), "career")
        assert prompts == list(config.theme_pack("executive").prompts["career"])


class RecordingProvider:
    def __init__(self, provider_id, calls):
        self.provider_id = provider_id
        self.calls = calls

    async def complete(self, prompt, model=None, max_tokens=None, **kwargs):
        self.calls.append(self.provider_id)
        return '{"textBlocks": [{"role": "title", "content": "ok"}]}'


def test_routing_picks_provider_by_kind(retry_policy, context):
    calls = []
    providers = {pid: RecordingProvider(pid, calls) for pid in ("gemini", "openai", "anthropic")}
    generator = AIContentGenerator(WorkbookConfig(), providers=providers, retry_policy=retry_policy)

    asyncio.run(generator.generate_page_content(context, "FINANCIAL_OVERVIEW"))
    asyncio.run(generator.generate_page_content(context, "REFLECTION_MONTH"))
    asyncio.run(generator.generate_page_content(context, "GOAL_OVERVIEW"))
    assert calls == ["openai", "anthropic", "gemini"]


def test_routing_table_defaults():
    table = RoutingTable()
    assert table.select("VISION_BOARD_SPREAD") == "gemini"
    assert table.select("budget_table") == "openai"
    assert table.select("WEEKLY_PLANNER") == "gemini"


def test_template_helpers():
    assert fill_template("Hi {{name}}, {{missing}}", {"name": "Ana"}) == "Hi Ana, {{missing}}"
    assert format_money(1234567.8) == "$1,234,568"
    assert format_money(None) == ""
