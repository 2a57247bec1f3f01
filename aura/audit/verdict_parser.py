"""Salvage a safety verdict from free-form model output.

The model is an untrusted peer: replies may be wrapped in prose or code
fences, fields may be missing or mistyped. Each field is validated on its own
so one bad field never discards an otherwise usable verdict. The only hard
failure is a reply with no decodable JSON object at all.
"""

from __future__ import annotations

import json
import math
from typing import Any

from aura.schemas.audit import FailureReason, ParseFailure
from aura.schemas.models import SCORE_MAX, SCORE_MIN, SUMMARY_FALLBACK, Verdict

DEFAULT_SCORE = 50  # neutral midpoint for a missing or non-numeric score
MAX_REPLY_CHARS = 100_000
MAX_CANDIDATES = 64


def _balanced_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` of every balanced ``{...}`` substring, ordered by opening brace.

    One pass with a stack of open-brace positions. String literals are tracked
    while inside an object so braces inside quoted text do not count.
    """
    spans: list[tuple[int, int]] = []
    stack: list[int] = []
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"' and stack:
            in_string = True
        elif ch == "{":
            stack.append(i)
        elif ch == "}" and stack:
            spans.append((stack.pop(), i + 1))
    spans.sort()
    return spans


def extract_json_object(raw: str) -> dict[str, Any] | None:
    """Return the first balanced substring of *raw* that decodes to a JSON object.

    Only the first ``MAX_REPLY_CHARS`` characters are scanned and at most
    ``MAX_CANDIDATES`` substrings are decoded.
    """
    text = raw[:MAX_REPLY_CHARS]
    for start, end in _balanced_spans(text)[:MAX_CANDIDATES]:
        try:
            data = json.loads(text[start:end])
        except (ValueError, RecursionError):
            continue
        if isinstance(data, dict):
            return data
    return None


def coerce_score(value: Any) -> int:
    """Clamp *value* into [0, 100]; anything non-numeric becomes the midpoint."""
    if isinstance(value, bool):
        return DEFAULT_SCORE
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return DEFAULT_SCORE
    if not isinstance(value, (int, float)) or math.isnan(value):
        return DEFAULT_SCORE
    if math.isinf(value):
        return SCORE_MAX if value > 0 else SCORE_MIN
    return max(SCORE_MIN, min(SCORE_MAX, int(round(value))))


def coerce_summary(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return SUMMARY_FALLBACK


def coerce_flags(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [f for f in value if isinstance(f, str)]


def parse_verdict(raw: str | None) -> Verdict | ParseFailure:
    """Turn a raw model reply into a ``Verdict`` or a ``ParseFailure``. Never raises."""
    text = raw if isinstance(raw, str) else ""
    data = extract_json_object(text)
    if data is None:
        return ParseFailure(reason=FailureReason.MALFORMED_REPLY, raw=text)
    return Verdict(
        score=coerce_score(data.get("score")),
        summary=coerce_summary(data.get("summary")),
        flags=coerce_flags(data.get("flags")),
    )
