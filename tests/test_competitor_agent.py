"""Tests for the competitor search agent with an injected model call."""
import pytest

from sitesmith.core import competitor_agent
from sitesmith.core.competitor_agent import normalize_competitors, search_competitors
from sitesmith.core.llm_client import LLMGenerationError

PAYLOAD = {
    "projectName": "Bean There",
    "projectDescription": "A neighbourhood coffee shop",
    "businessType": "website",
}

RAW = (
    "Here are the top competitors:\n```json\n"
    '[{"name": "Blue Bottle", "description": "Specialty roaster", "url": "https://bluebottlecoffee.com"},'
    ' {"name": "Local Grind", "description": "Cafe chain"}]\n```'
)


class FakeModel:
    def __init__(self, raw=RAW):
        self.raw = raw
        self.prompts = []

    async def __call__(self, system_prompt, user_prompt):
        self.prompts.append((system_prompt, user_prompt))
        return self.raw


class TestSearchCompetitors:
    @pytest.mark.asyncio
    async def test_competitors_are_recovered_from_model_text(self):
        model = FakeModel()
        result = await search_competitors(PAYLOAD, call_model=model)

        assert result["competitors"] == [
            {"name": "Blue Bottle", "description": "Specialty roaster", "url": "https://bluebottlecoffee.com"},
            {"name": "Local Grind", "description": "Cafe chain", "url": None},
        ]
        assert '"Bean There"' in model.prompts[0][1]
        assert "JSON array" in model.prompts[0][1]

    @pytest.mark.asyncio
    async def test_unparseable_output_raises(self):
        with pytest.raises(LLMGenerationError):
            await search_competitors(PAYLOAD, call_model=FakeModel("I could not find any."))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["projectName", "projectDescription", "businessType"])
    async def test_required_fields(self, missing):
        payload = {k: v for k, v in PAYLOAD.items() if k != missing}
        with pytest.raises(ValueError):
            await search_competitors(payload, call_model=FakeModel())

    @pytest.mark.asyncio
    async def test_no_credentials(self, monkeypatch):
        monkeypatch.setattr(competitor_agent, "has_llm_credentials", lambda: False)

        with pytest.raises(LLMGenerationError):
            await search_competitors(PAYLOAD)


class TestNormalizeCompetitors:
    def test_entries_without_a_name_are_dropped(self):
        items = [{"name": "  A  ", "url": ""}, {"description": "no name"}, "B", {"name": ""}]

        assert normalize_competitors(items) == [{"name": "A", "description": "", "url": None}]
