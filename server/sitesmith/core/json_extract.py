# sitesmith/core/json_extract.py
"""
Candidate extraction for model output that should contain a JSON document.

Models wrap the payload in prose, in markdown fences, or both. The helpers
here only locate text; they never parse it and never raise.
"""
import re
from typing import List, Optional, Tuple

# fenced block, untagged or tagged json; body filtered afterwards.
# The closing fence must start a line so a ``` inside a JSON string
# (where newlines are escaped) does not end the block.
_JSON_FENCE_RE = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)^[ \t]*```", re.DOTALL | re.MULTILINE)
# fenced block with any language tag
_ANY_FENCE_RE = re.compile(r"```(?:[\w+\-.#]+)?[ \t]*\r?\n?(.*?)```", re.DOTALL)


def _fenced_json_blocks(text: str) -> List[str]:
    blocks = []
    for match in _JSON_FENCE_RE.finditer(text):
        body = match.group(1).strip()
        if body.startswith("{") or body.startswith("["):
            blocks.append(body)
    return blocks


def _last_brace_span(text: str) -> Optional[Tuple[int, int]]:
    """
    Span (start, end) of the object closed by the final '}' in text.
    Braces inside string literals are ignored. Falls back to the first '{'
    when the final '}' has no opener of its own.
    """
    last_close = text.rfind("}")
    first_open = text.find("{")
    if last_close == -1 or first_open == -1 or first_open > last_close:
        return None

    stack: List[int] = []
    in_string = False
    escaped = False
    last_pair: Optional[Tuple[int, int]] = None
    for i, ch in enumerate(text[:last_close + 1]):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            stack.append(i)
        elif ch == "}" and stack:
            last_pair = (stack.pop(), i)

    if last_pair is not None and last_pair[1] == last_close:
        return last_pair
    return first_open, last_close


def extract_candidates(text: str) -> List[str]:
    """
    Ordered JSON candidates found in text, most-likely-complete last.

    1. the last ``` / ```json fenced block whose body looks like JSON
    2. the object closed by the final '}'
    3. otherwise the whole text, if it opens a structure at all

    A fenced block and the brace span are both returned when they differ,
    the fenced block last. An empty list means nothing JSON-shaped was found.
    """
    if not isinstance(text, str) or not text.strip():
        return []

    candidates: List[str] = []
    span = _last_brace_span(text)
    if span is not None:
        start, end = span
        candidates.append(text[start:end + 1])

    blocks = _fenced_json_blocks(text)
    if blocks and blocks[-1] not in candidates:
        candidates.append(blocks[-1])
    if candidates:
        return candidates

    if "{" in text or "[" in text:
        return [text.strip()]
    return []


def extract_array_candidates(text: str) -> List[str]:
    """
    Ordered JSON array candidates, most-likely-complete last: the span from
    the first '[' to the last ']', then the last fenced block opening with '['.
    """
    if not isinstance(text, str) or not text.strip():
        return []

    candidates: List[str] = []
    first_open = text.find("[")
    last_close = text.rfind("]")
    if first_open != -1 and last_close > first_open:
        candidates.append(text[first_open:last_close + 1])

    blocks = [b for b in _fenced_json_blocks(text) if b.startswith("[")]
    if blocks and blocks[-1] not in candidates:
        candidates.append(blocks[-1])
    return candidates


def extract_fenced_code(text: str) -> str:
    """Body of the first fenced code block, or the stripped text when unfenced."""
    if not isinstance(text, str):
        return ""
    match = _ANY_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()
