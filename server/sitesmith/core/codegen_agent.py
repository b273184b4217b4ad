# sitesmith/core/codegen_agent.py
"""
Code Generation Agent
- Exposes:
    async def generate_code(payload, ...) -> Dict[str, Any]
    async def generate_file_content(payload, ...) -> Dict[str, Any]
- Responsible for:
    - turning a project request into prompts and cache parameters
    - calling the model through the result cache + recovery pipeline
    - sanitizing recovered paths into a persisted flat file map
    - falling back to deterministic template files when generation fails
"""
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from sitesmith.core.file_tree import FileTreeError, create_file
from sitesmith.core.json_extract import extract_fenced_code
from sitesmith.core.llm_client import LLMGenerationError, call_text_generation, has_llm_credentials
from sitesmith.core.prompts import (
    build_file_system_prompt,
    build_file_user_prompt,
    build_system_prompt,
    build_user_prompt,
)
from sitesmith.core.recovery import RecoveredDocument
from sitesmith.core.result_cache import CacheStore, get_default_store, recover_with_cache
from sitesmith.core.templates import default_site_files, placeholder_file_content
from sitesmith.utils.config import AGENT_TEMPERATURES, GEMINI_API_KEY_ENV
from sitesmith.utils.file_helpers import _safe_normalize

logger = logging.getLogger(__name__)

# (system_prompt, user_prompt) -> raw model text
ModelCall = Callable[[str, str], Awaitable[str]]

CODE_PARAM_FIELDS = (
    "name",
    "description",
    "projectType",
    "targetAudience",
    "valueProposition",
    "userFlow",
    "aiResponse",
)

_DEFAULT_STORE: Any = object()


class MissingCredentialsError(LLMGenerationError):
    pass


def _model_call(agent: str, debug: bool) -> ModelCall:
    async def _call(system_prompt: str, user_prompt: str) -> str:
        return await call_text_generation(
            system_prompt,
            user_prompt,
            temperature=AGENT_TEMPERATURES.get(agent, 0.5),
            debug=debug,
        )
    return _call


def _step_text(step: Any) -> str:
    if isinstance(step, dict):
        return str(step.get("content") or step.get("title") or step.get("description") or "")
    return str(step)


def build_cache_params(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flat string / string-list parameters that determine the generated output.
    The project id is left out so identical requests share one cache entry.
    """
    params: Dict[str, Any] = {}
    for field in CODE_PARAM_FIELDS:
        value = payload.get(field)
        if value is None or value == "":
            continue
        if field == "userFlow":
            if isinstance(value, list):
                params[field] = [_step_text(step) for step in value]
            continue
        params[field] = str(value)
    return params


def files_from_document(document: RecoveredDocument, now: Optional[int] = None) -> Tuple[Dict[str, Dict[str, Any]], List[str]]:
    """
    Sanitize recovered paths into a flat file map. Unsafe paths and
    file/folder clashes are dropped with a warning instead of overwriting.
    """
    stamp = now if now is not None else int(time.time() * 1000)
    files: Dict[str, Dict[str, Any]] = {}
    warnings: List[str] = []
    for path in sorted(document.files):
        entry = document.files[path]
        safe_path = _safe_normalize(path)
        if safe_path is None:
            warnings.append(f"skipped unsafe path: {path!r}")
            continue
        try:
            files = create_file(files, safe_path, entry.content, entry.language, now=stamp)
        except FileTreeError as e:
            warnings.append(f"skipped {path!r}: {e}")
    return files, warnings


def _template_response(project_name: str, warnings: List[str], failure: Optional[str] = None) -> Dict[str, Any]:
    return {
        "files": default_site_files(project_name),
        "source": "template",
        "stage": None,
        "warnings": warnings,
        "failure": failure,
    }


# ----------------------------
# Main: multi-file generation
# ----------------------------
async def generate_code(payload: Dict[str, Any],
                        store: Optional[CacheStore] = _DEFAULT_STORE,
                        call_model: Optional[ModelCall] = None) -> Dict[str, Any]:
    """
    Returns {"files": {path: {content, language, lastModified}}, "source",
    "stage", "warnings", "failure"}. source is one of model / cache / template.
    """
    if not payload.get("projectId") or not payload.get("name") or not payload.get("description"):
        raise ValueError("Missing required fields: projectId, name and description")

    options = payload.get("options", {}) or {}
    debug = bool(options.get("debug", False))
    project_name = str(payload.get("name"))
    if store is _DEFAULT_STORE:
        store = get_default_store()

    if call_model is None and has_llm_credentials():
        call_model = _model_call("codegen", debug)

    params = build_cache_params(payload)
    system_prompt = build_system_prompt(params.get("projectType"))
    user_prompt = build_user_prompt(params)

    async def _invoke() -> str:
        # only reached on a cache miss
        if call_model is None:
            raise MissingCredentialsError(f"{GEMINI_API_KEY_ENV} is not set")
        return await call_model(system_prompt, user_prompt)

    try:
        cached = await recover_with_cache(params, _invoke, store)
    except MissingCredentialsError:
        logger.warning("%s is not set, using template files", GEMINI_API_KEY_ENV,
                       extra={"project_id": payload.get("projectId")})
        return _template_response(project_name, [f"{GEMINI_API_KEY_ENV} is not set; returned template files"])
    except Exception as e:
        logger.exception("Error generating code files", extra={"project_id": payload.get("projectId")})
        return _template_response(project_name, [f"llm_call_failed: {e}"])

    result = cached.result
    if not result.ok:
        return _template_response(
            project_name,
            [f"Failed to parse generated code: {result.detail}"],
            failure=result.failure.value,
        )

    files, warnings = files_from_document(result.document)
    if not files:
        warnings.append("generated output contained no usable files; returned template files")
        return _template_response(project_name, warnings)

    return {
        "files": files,
        "source": "cache" if cached.cache_hit else "model",
        "stage": result.stage.value if result.stage else None,
        "warnings": warnings,
        "failure": None,
    }


# ----------------------------
# Single file generation
# ----------------------------
async def generate_file_content(payload: Dict[str, Any],
                                call_model: Optional[ModelCall] = None) -> Dict[str, Any]:
    file_name = payload.get("fileName")
    language = payload.get("language")
    if not file_name or not language:
        raise ValueError("Missing required fields: fileName and language")

    options = payload.get("options", {}) or {}
    if call_model is None:
        if not has_llm_credentials():
            logger.warning("%s is not set, returning placeholder content", GEMINI_API_KEY_ENV)
            content = placeholder_file_content(
                file_name, language, payload.get("projectName"), payload.get("projectDescription"),
            )
            return {"content": content, "source": "template"}
        call_model = _model_call("file", bool(options.get("debug", False)))

    existing = payload.get("existingFiles") or []
    system_prompt = build_file_system_prompt(payload.get("projectType"))
    user_prompt = build_file_user_prompt(
        file_name,
        language,
        payload.get("projectName"),
        payload.get("projectDescription"),
        payload.get("projectType"),
        [str(f) for f in existing] if isinstance(existing, list) else None,
    )
    raw = await call_model(system_prompt, user_prompt)
    content = extract_fenced_code(raw)
    if not content:
        raise LLMGenerationError("No content in model response")
    return {"content": content, "source": "model"}
