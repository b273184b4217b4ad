# sitesmith/core/recovery.py
"""
Recovery pipeline for generated multi-file payloads.

recover_document(raw) turns raw model text into a RecoveredDocument or a
classified failure, trying in order:
    1. direct parse of the raw text
    2. direct parse of each extracted candidate (most likely first)
    3. parse of each failed candidate after one repair pass
Failures are returned, never raised.
"""
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError, field_validator

from sitesmith.core.json_extract import extract_array_candidates, extract_candidates
from sitesmith.core.json_repair import repair_json
from sitesmith.utils.file_helpers import PLAINTEXT, language_for_path

logger = logging.getLogger(__name__)


class GeneratedFile(BaseModel):
    content: str
    language: str = PLAINTEXT


class RecoveredDocument(BaseModel):
    files: Dict[str, GeneratedFile]

    @field_validator("files", mode="before")
    @classmethod
    def _coerce_entries(cls, value: Any) -> Any:
        # accept {"path": "content"} as well as {"path": {"content", "language"}}
        if not isinstance(value, dict):
            return value
        coerced: Dict[str, Any] = {}
        for path, entry in value.items():
            if isinstance(entry, dict) and "content" in entry:
                content = entry["content"]
                if not isinstance(content, str):
                    content = json.dumps(content, indent=2)
                language = entry.get("language") or language_for_path(str(path))
                coerced[path] = {"content": content, "language": language}
            elif isinstance(entry, str):
                coerced[path] = {"content": entry, "language": language_for_path(str(path))}
            else:
                # e.g. package.json returned as an object instead of a string
                coerced[path] = {"content": json.dumps(entry, indent=2), "language": language_for_path(str(path))}
        return coerced


class RecoveryFailure(str, Enum):
    NO_CANDIDATE = "no_candidate"
    UNREPAIRABLE_SYNTAX = "unrepairable_syntax"
    MISSING_REQUIRED_SHAPE = "missing_required_shape"


class RecoveryStage(str, Enum):
    DIRECT = "direct"
    EXTRACTED = "extracted"
    REPAIRED = "repaired"
    CACHED = "cached"


@dataclass(frozen=True)
class RecoveryResult:
    document: Optional[RecoveredDocument] = None
    failure: Optional[RecoveryFailure] = None
    stage: Optional[RecoveryStage] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.document is not None


def _try_parse(text: str) -> Tuple[bool, Any]:
    try:
        # strict=False: models often leave raw newlines/tabs inside strings
        return True, json.loads(text, strict=False)
    except (ValueError, RecursionError):
        return False, None


def validate_shape(value: Any, stage: RecoveryStage) -> RecoveryResult:
    """Check a parsed value for the required top-level 'files' mapping."""
    if not isinstance(value, dict) or "files" not in value:
        return RecoveryResult(
            failure=RecoveryFailure.MISSING_REQUIRED_SHAPE,
            stage=stage,
            detail="parsed value has no top-level 'files' key",
        )
    try:
        document = RecoveredDocument.model_validate(value)
    except ValidationError as e:
        return RecoveryResult(
            failure=RecoveryFailure.MISSING_REQUIRED_SHAPE,
            stage=stage,
            detail=f"'files' is not a path -> content mapping: {e.errors()[0].get('msg', '')}",
        )
    return RecoveryResult(document=document, stage=stage)


def recover_document(raw: str) -> RecoveryResult:
    if not isinstance(raw, str):
        raw = "" if raw is None else str(raw)

    parsed_ok, value = _try_parse(raw.strip())
    if parsed_ok and isinstance(value, (dict, list)):
        logger.debug("Raw model output parsed directly")
        return validate_shape(value, RecoveryStage.DIRECT)

    candidates = extract_candidates(raw)
    if not candidates:
        logger.debug("No JSON candidate found in %d chars of output", len(raw))
        return RecoveryResult(failure=RecoveryFailure.NO_CANDIDATE, detail="no JSON-shaped text found")

    shape_miss: Optional[RecoveryResult] = None
    unparsed = []
    for candidate in reversed(candidates):
        parsed_ok, value = _try_parse(candidate)
        if not parsed_ok:
            unparsed.append(candidate)
            continue
        result = validate_shape(value, RecoveryStage.EXTRACTED)
        if result.ok:
            logger.debug("Recovered document from extracted candidate")
            return result
        shape_miss = shape_miss or result

    for candidate in unparsed:
        parsed_ok, value = _try_parse(repair_json(candidate))
        if not parsed_ok:
            continue
        result = validate_shape(value, RecoveryStage.REPAIRED)
        if result.ok:
            logger.debug("Recovered document after repair")
            return result
        shape_miss = shape_miss or result

    if shape_miss is not None:
        return shape_miss
    return RecoveryResult(
        failure=RecoveryFailure.UNREPAIRABLE_SYNTAX,
        detail=f"{len(candidates)} candidate(s) still invalid after repair",
    )


def recover_list(raw: str) -> Optional[List[Any]]:
    """
    Recover a top-level JSON array (e.g. a competitor list) from model text
    with the same parse -> extract -> repair order. None when nothing parses
    to a list.
    """
    if not isinstance(raw, str):
        return None
    parsed_ok, value = _try_parse(raw.strip())
    if parsed_ok and isinstance(value, list):
        return value

    candidates = list(reversed(extract_array_candidates(raw)))
    for text in candidates + [repair_json(c) for c in candidates]:
        parsed_ok, value = _try_parse(text)
        if parsed_ok and isinstance(value, list):
            return value
    return None
