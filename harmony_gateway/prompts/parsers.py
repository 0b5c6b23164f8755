"""
Parsers turning raw provider text into operation payloads.

A parser raising ValueError, KeyError or TypeError marks the provider's
output as unusable; the orchestrator then moves on to the next provider.
"""

import json
import re
from typing import Any

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_WHITESPACE = re.compile(r"\s+")
_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def clean_bio_text(raw: str) -> str:
    """Strip markdown bold and collapse whitespace."""
    text = _WHITESPACE.sub(" ", _BOLD.sub(r"\1", raw)).strip()
    if not text:
        raise ValueError("empty bio")
    return text


def load_json_object(raw: str) -> dict[str, Any]:
    """Decode a JSON object, tolerating a surrounding markdown code fence."""
    text = raw.strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def parse_rewrite(raw: str) -> dict[str, Any]:
    """
    Rewrite payload from JSON output; plain text is taken as the prompt itself.
    """
    try:
        data = load_json_object(raw)
    except ValueError:
        return {"rewritten_prompt": raw.strip(), "analysis": "", "improvements": []}

    rewritten = _first(data, "rewrittenPrompt", "rewritten_prompt", "prompt")
    if not isinstance(rewritten, str) or not rewritten.strip():
        raise ValueError("rewrite response has no rewrittenPrompt")
    return {
        "rewritten_prompt": rewritten.strip(),
        "analysis": str(_first(data, "analysis", default="")),
        "improvements": _string_list(_first(data, "improvements")),
    }


def parse_analysis(raw: str) -> dict[str, Any]:
    """Analysis payload; the output must be JSON with a numeric quality score."""
    data = load_json_object(raw)
    score = float(_first(data, "qualityScore", "quality_score"))
    effectiveness = _first(data, "platformEffectiveness", "platform_effectiveness", default={})
    if not isinstance(effectiveness, dict):
        raise TypeError("platformEffectiveness must be an object")
    return {
        "quality_score": min(10.0, max(0.0, score)),
        "strengths": _string_list(_first(data, "strengths")),
        "weaknesses": _string_list(_first(data, "weaknesses")),
        "recommendations": _string_list(_first(data, "recommendations")),
        "platform_effectiveness": effectiveness,
    }
