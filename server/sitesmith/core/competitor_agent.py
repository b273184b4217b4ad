# sitesmith/core/competitor_agent.py
"""
Competitor Search Agent
- Exposes:
    async def search_competitors(payload, call_model=None) -> Dict[str, Any]
- Asks the model for a JSON array of {name, description, url} and recovers it
  with the same extract/repair helpers used for generated files. The result
  feeds lifecycle.record_competitors.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from sitesmith.core.codegen_agent import ModelCall
from sitesmith.core.llm_client import LLMGenerationError, call_text_generation, has_llm_credentials
from sitesmith.core.prompts import build_competitor_prompt
from sitesmith.core.recovery import recover_list
from sitesmith.utils.config import AGENT_TEMPERATURES, GEMINI_API_KEY_ENV

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a market research assistant. Answer with JSON only."


class Competitor(BaseModel):
    name: str
    description: str = ""
    url: Optional[str] = None


def normalize_competitors(items: List[Any]) -> List[Dict[str, Any]]:
    """Keep entries that have a name; drop anything else."""
    competitors: List[Dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict) or not str(item.get("name") or "").strip():
            continue
        try:
            competitor = Competitor.model_validate({
                "name": str(item["name"]).strip(),
                "description": str(item.get("description") or ""),
                "url": str(item["url"]) if item.get("url") else None,
            })
        except ValidationError:
            continue
        competitors.append(competitor.model_dump())
    return competitors


async def search_competitors(payload: Dict[str, Any],
                             call_model: Optional[ModelCall] = None) -> Dict[str, Any]:
    project_name = payload.get("projectName")
    project_description = payload.get("projectDescription")
    business_type = payload.get("businessType")
    if not project_name or not project_description or not business_type:
        raise ValueError("Missing required fields: projectName, projectDescription and businessType")

    if call_model is None:
        if not has_llm_credentials():
            raise LLMGenerationError(f"{GEMINI_API_KEY_ENV} is not set")
        options = payload.get("options", {}) or {}

        async def call_model(system_prompt: str, user_prompt: str) -> str:
            return await call_text_generation(
                system_prompt,
                user_prompt,
                temperature=AGENT_TEMPERATURES.get("competitors", 0.5),
                debug=bool(options.get("debug", False)),
            )

    raw = await call_model(SYSTEM_PROMPT, build_competitor_prompt(project_name, project_description, business_type))
    items = recover_list(raw)
    if items is None:
        logger.warning("Failed to parse competitors from %d chars of output", len(raw or ""))
        raise LLMGenerationError("Failed to parse competitors")
    return {"competitors": normalize_competitors(items)}
