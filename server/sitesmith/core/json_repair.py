# sitesmith/core/json_repair.py
"""
Best-effort structural repair of near-JSON text produced by a model.

Each pass is a single left-to-right scan that tracks whether it is inside a
string literal, whether the previous character was a backslash, and the
stack of open containers. Passes run in a fixed order:

  1. missing colon after an object key
  2. unescaped quotes inside string values
  3. missing separator between adjacent containers
  4. trailing commas before a closing token

repair_json() is deterministic and never raises. It does not guarantee the
result parses; the caller decides what to do with it.
"""
from typing import List, Optional

_CLOSE_FOR = {"{": "}", "[": "]"}
_OPEN_FOR = {"}": "{", "]": "["}


def _next_significant(text: str, start: int) -> int:
    """Index of the first non-whitespace char at or after start (len(text) if none)."""
    n = len(text)
    i = start
    while i < n and text[i].isspace():
        i += 1
    return i


def insert_missing_colons(text: str) -> str:
    out: List[str] = []
    stack: List[str] = []
    in_string = False
    escaped = False
    is_key = False
    prev_sig: Optional[str] = None

    for i, ch in enumerate(text):
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
                prev_sig = '"'
                if is_key:
                    j = _next_significant(text, i + 1)
                    if j < len(text) and (text[j] in '{["-' or text[j].isdigit()):
                        out.append(":")
                        prev_sig = ":"
            continue

        out.append(ch)
        if ch == '"':
            in_string = True
            is_key = bool(stack) and stack[-1] == "{" and prev_sig in ("{", ",")
        elif ch in "{[":
            stack.append(ch)
            prev_sig = ch
        elif ch in "}]":
            if stack:
                stack.pop()
            prev_sig = ch
        elif not ch.isspace():
            prev_sig = ch
    return "".join(out)


def escape_inner_quotes(text: str) -> str:
    # A quote inside a string only terminates it when structure follows.
    # Anything else is treated as data and escaped.
    out: List[str] = []
    in_string = False
    escaped = False
    n = len(text)

    for i, ch in enumerate(text):
        if not in_string:
            out.append(ch)
            if ch == '"':
                in_string = True
            continue
        if escaped:
            escaped = False
            out.append(ch)
        elif ch == "\\":
            escaped = True
            out.append(ch)
        elif ch == '"':
            j = _next_significant(text, i + 1)
            if j >= n or text[j] in ":,}]":
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
        else:
            out.append(ch)
    return "".join(out)


def insert_missing_commas(text: str) -> str:
    out: List[str] = []
    stack: List[str] = []
    in_string = False
    escaped = False
    last_sig: Optional[str] = None
    n = len(text)
    i = 0

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
                last_sig = '"'
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
        elif ch in "{[":
            stack.append(ch)
            out.append(ch)
            last_sig = ch
        elif ch in "}]":
            closed_empty = last_sig == _OPEN_FOR[ch]
            if stack:
                stack.pop()
            j = _next_significant(text, i + 1)
            if j < n and text[j] in "{[":
                if stack and stack[-1] == "{" and text[j] == _OPEN_FOR[ch]:
                    # "key": {...} {...}  ->  "key": {..., ...}
                    k = _next_significant(text, j + 1)
                    next_empty = k < n and text[k] == ch
                    stack.append(text[j])
                    if not closed_empty and not next_empty:
                        out.append(",")
                        out.append(text[i + 1:j])
                        last_sig = ","
                    i = j + 1
                    continue
                out.append(ch)
                out.append(",")
                last_sig = ","
                i += 1
                continue
            out.append(ch)
            last_sig = ch
        else:
            out.append(ch)
            if not ch.isspace():
                last_sig = ch
        i += 1
    return "".join(out)


def drop_trailing_commas(text: str) -> str:
    out: List[str] = []
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == ",":
            j = _next_significant(text, i + 1)
            if j < len(text) and text[j] in "}]":
                continue
        out.append(ch)
    return "".join(out)


_PASSES = (
    insert_missing_colons,
    escape_inner_quotes,
    insert_missing_commas,
    drop_trailing_commas,
)


def repair_json(candidate: str) -> str:
    """Apply every repair pass in order and return the patched text."""
    if not isinstance(candidate, str):
        return ""
    repaired = candidate
    for repair_pass in _PASSES:
        repaired = repair_pass(repaired)
    return repaired
