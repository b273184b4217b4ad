# sitesmith/core/llm_client.py
import asyncio
import json
import logging
import os
import time
from typing import Any, Dict, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from sitesmith.utils.config import GEMINI_API_KEY_ENV, LLM_RETRIES, LOG_DIR, MODEL_NAME, TIMEOUT

logger = logging.getLogger(__name__)


class LLMGenerationError(RuntimeError):
    pass


def has_llm_credentials() -> bool:
    return bool(os.getenv(GEMINI_API_KEY_ENV))


# -------------------------
# LLM init + text call
# -------------------------
def get_llm(temperature: float = 0.5):
    api_key = os.getenv(GEMINI_API_KEY_ENV)
    if not api_key:
        raise LLMGenerationError(f"Please set {GEMINI_API_KEY_ENV} environment variable for Gemini access.")
    if "GOOGLE_API_KEY" not in os.environ:
        os.environ["GOOGLE_API_KEY"] = api_key
    return ChatGoogleGenerativeAI(model=MODEL_NAME, temperature=temperature)


def _save_debug_log(prefix: str, payload: Dict[str, Any]):
    fname = f"{int(time.time())}_{prefix}.json"
    path = os.path.join(LOG_DIR, fname)
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
    except OSError:
        logger.exception("Failed to write debug log")


def _message_text(message: Any) -> str:
    """Concatenate the text blocks of a chat response."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    parts: List[str] = []
    if isinstance(content, list):
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
    return "".join(parts)


async def call_text_generation(system_prompt: str,
                               user_prompt: str,
                               temperature: float = 0.5,
                               max_retries: int = LLM_RETRIES,
                               timeout: int = TIMEOUT,
                               debug: bool = False) -> str:
    """
    Plain text completion via ChatGoogleGenerativeAI. No structure is assumed
    about the returned text; callers run it through the recovery pipeline.
    Raises LLMGenerationError once every attempt has failed.
    """
    llm = get_llm(temperature)
    messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]

    last_exc: Optional[Exception] = None
    # Total attempts = 1 initial + max_retries
    total_attempts = 1 + max_retries
    for attempt in range(1, total_attempts + 1):
        start_ts = time.time()
        try:
            message = await asyncio.wait_for(llm.ainvoke(messages), timeout=timeout)
            text = _message_text(message)
            logger.info("LLM attempt %d returned %d chars in %.1fs", attempt, len(text), time.time() - start_ts)
            if debug:
                _save_debug_log(f"llm_attempt_{attempt}", {
                    "system_prompt": system_prompt,
                    "user_prompt": user_prompt,
                    "raw_result": text,
                })
            if not text:
                raise LLMGenerationError("No text content in model response")
            return text
        except Exception as e:
            last_exc = e
            logger.warning("LLM attempt %d failed: %r", attempt, e)
            if debug:
                _save_debug_log(f"llm_error_attempt_{attempt}", {"user_prompt": user_prompt, "error": repr(e)})
            # backoff
            if attempt < total_attempts:
                await asyncio.sleep(1 * attempt)

    raise LLMGenerationError(f"LLM generation failed after {total_attempts} attempts. Last error: {last_exc}")
