"""
Tests for the deterministic fallback builders.
"""

from harmony_gateway.models.requests import (
    ArtistInfo,
    ImageOptions,
    ImageRequest,
    PromptAnalysisRequest,
    PromptRewriteRequest,
)
from harmony_gateway.prompts.fallbacks import (
    FALLBACK_IMAGE_BASE,
    fallback_analysis,
    fallback_bio,
    fallback_image_url,
    fallback_rewrite,
)


class TestFallbackBio:

    def test_mentions_artist_and_signature(self, artist_info) -> None:
        bio = fallback_bio(ArtistInfo.model_validate(artist_info))

        assert bio.startswith("Nova is an innovative AI artist who masters electronic")
        assert "neon cyberpunk approach" in bio
        assert "curious, bold personality traits" in bio
        assert bio.endswith("Pioneering the future of sound.")

    def test_deterministic(self, artist_info) -> None:
        artist = ArtistInfo.model_validate(artist_info)

        assert fallback_bio(artist) == fallback_bio(artist)


class TestFallbackImageUrl:

    def test_shape_and_dimensions(self) -> None:
        request = ImageRequest(name="Nova", visual_style="neon")

        url = fallback_image_url(request, "prompt", ImageOptions(size="640x480"))

        assert url.startswith(f"{FALLBACK_IMAGE_BASE}/")
        assert url.endswith("/640/480")

    def test_same_input_same_url(self) -> None:
        request = ImageRequest(name="Nova", visual_style="neon")

        first = fallback_image_url(request, "prompt", ImageOptions())
        second = fallback_image_url(request, "prompt", ImageOptions())

        assert first == second

    def test_variation_prompts_differ(self) -> None:
        request = ImageRequest(name="Nova", visual_style="neon")

        first = fallback_image_url(request, "prompt variation 1", ImageOptions())
        second = fallback_image_url(request, "prompt variation 2", ImageOptions())

        assert first != second


class TestFallbackRewrite:

    def test_contains_original_and_defaults(self) -> None:
        result = fallback_rewrite(PromptRewriteRequest(original_prompt="chill beats"))

        assert "chill beats" in result["rewritten_prompt"]
        assert result["rewritten_prompt"].startswith(
            "Enhanced general music generation prompt with balanced mood and contemporary style."
        )
        assert len(result["improvements"]) == 3

    def test_uses_request_descriptors(self) -> None:
        result = fallback_rewrite(
            PromptRewriteRequest(original_prompt="x", genre="jazz", mood="sad", style="bebop")
        )

        assert "Enhanced jazz music generation prompt with sad mood and bebop style." in (
            result["rewritten_prompt"]
        )


class TestFallbackAnalysis:

    def test_genre_and_mood_scores_seven(self) -> None:
        result = fallback_analysis(PromptAnalysisRequest(prompt="happy rock anthem"))

        assert result["quality_score"] == 7
        assert result["weaknesses"] == []
        assert result["platform_effectiveness"] == {
            "suno": "medium",
            "udio": "medium",
            "stability": "medium",
        }
        assert result["strengths"] == ["Concise"]

    def test_long_descriptive_prompt_scores_ten(self) -> None:
        prompt = "An energetic electronic track with pulsing bass and soaring synth leads"

        assert fallback_analysis(PromptAnalysisRequest(prompt=prompt))["quality_score"] == 10

    def test_bare_prompt_scores_zero_with_advice(self) -> None:
        result = fallback_analysis(PromptAnalysisRequest(prompt="a song"))

        assert result["quality_score"] == 0
        assert result["weaknesses"] == ["Lacks genre specification", "Missing mood description"]
        assert result["recommendations"] == ["Specify musical genre", "Add emotional context"]
        assert set(result["platform_effectiveness"].values()) == {"low"}
