"""
Tests for the provider output parsers.
"""

import json

import pytest

from harmony_gateway.prompts.parsers import (
    clean_bio_text,
    load_json_object,
    parse_analysis,
    parse_rewrite,
)


class TestCleanBioText:

    def test_strips_bold_and_collapses_whitespace(self) -> None:
        assert clean_bio_text("  **Nova** is\n\n a   star.  ") == "Nova is a star."

    def test_blank_output_rejected(self) -> None:
        with pytest.raises(ValueError):
            clean_bio_text(" \n ")


class TestLoadJsonObject:

    def test_plain_json(self) -> None:
        assert load_json_object('{"a": 1}') == {"a": 1}

    def test_code_fence_tolerated(self) -> None:
        assert load_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_array_rejected(self) -> None:
        with pytest.raises(ValueError):
            load_json_object("[1, 2]")

    def test_invalid_json_is_value_error(self) -> None:
        # json.JSONDecodeError subclasses ValueError
        with pytest.raises(ValueError):
            load_json_object("{not json")


class TestParseRewrite:

    def test_camel_case_payload(self) -> None:
        raw = json.dumps(
            {
                "rewrittenPrompt": " Lush lofi with vinyl crackle ",
                "analysis": "Added texture",
                "improvements": ["texture", "tempo"],
            }
        )

        assert parse_rewrite(raw) == {
            "rewritten_prompt": "Lush lofi with vinyl crackle",
            "analysis": "Added texture",
            "improvements": ["texture", "tempo"],
        }

    def test_plain_text_taken_as_prompt(self) -> None:
        result = parse_rewrite("Lush lofi with vinyl crackle\n")

        assert result == {
            "rewritten_prompt": "Lush lofi with vinyl crackle",
            "analysis": "",
            "improvements": [],
        }

    def test_single_improvement_string_listed(self) -> None:
        result = parse_rewrite('{"rewritten_prompt": "x", "improvements": "more bass"}')

        assert result["improvements"] == ["more bass"]

    def test_json_without_prompt_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_rewrite('{"analysis": "nothing to see"}')


class TestParseAnalysis:

    def test_full_payload(self) -> None:
        raw = json.dumps(
            {
                "qualityScore": 8,
                "strengths": ["clear"],
                "weaknesses": ["vague mood"],
                "recommendations": ["add tempo"],
                "platformEffectiveness": {"suno": "high"},
            }
        )

        result = parse_analysis(raw)

        assert result["quality_score"] == 8.0
        assert result["platform_effectiveness"] == {"suno": "high"}
        assert result["weaknesses"] == ["vague mood"]

    def test_score_clamped(self) -> None:
        assert parse_analysis('{"qualityScore": 14}')["quality_score"] == 10.0
        assert parse_analysis('{"quality_score": -2}')["quality_score"] == 0.0

    def test_missing_score_rejected(self) -> None:
        with pytest.raises(TypeError):
            parse_analysis('{"strengths": []}')

    def test_non_numeric_score_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_analysis('{"qualityScore": "great"}')

    def test_effectiveness_must_be_object(self) -> None:
        with pytest.raises(TypeError):
            parse_analysis('{"qualityScore": 5, "platformEffectiveness": ["suno"]}')

    def test_plain_text_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_analysis("This prompt is pretty good.")
