"""
Tests for the prompt builders and template lookup.
"""

import pytest

from harmony_gateway.models.requests import (
    ArtistInfo,
    BioOptions,
    ImageOptions,
    ImageRequest,
    PromptAnalysisRequest,
    PromptOptions,
    PromptRewriteRequest,
)
from harmony_gateway.prompts.templates import (
    BIO_TEMPLATES,
    bio_template_for,
    build_analysis_prompt,
    build_bio_prompt,
    build_image_prompt,
    build_rewrite_prompt,
    template_key,
)


@pytest.fixture
def artist(artist_info):
    return ArtistInfo.model_validate(artist_info)


class TestTemplateLookup:

    @pytest.mark.parametrize(
        "raw, key",
        [("Hip-Hop", "hip_hop"), (" Jazz ", "jazz"), ("hip hop", "hip_hop"), (None, "")],
    )
    def test_template_key(self, raw, key) -> None:
        assert template_key(raw) == key

    def test_explicit_template_beats_genre(self) -> None:
        assert bio_template_for("rock", "mystic") is BIO_TEMPLATES["mystic"]

    def test_genre_template(self) -> None:
        assert bio_template_for("Classical") is BIO_TEMPLATES["classical"]

    def test_unknown_genre_uses_electronic(self) -> None:
        assert bio_template_for("polka", "nonexistent") is BIO_TEMPLATES["electronic"]


class TestBioPrompt:

    def test_includes_artist_details_and_signature(self, artist) -> None:
        prompt = build_bio_prompt(artist, BioOptions())

        assert 'named "Nova"' in prompt
        assert "Primary Genre: electronic" in prompt
        assert "Personality Traits: curious, bold" in prompt
        assert "pioneering the future of sound" in prompt
        assert "Backstory: To be developed" in prompt

    def test_complexity_and_audience_instructions(self, artist) -> None:
        prompt = build_bio_prompt(
            artist, BioOptions(complexity="professional", target_audience="academic")
        )

        assert "industry publications" in prompt
        assert "academic contexts" in prompt

    def test_custom_prompt_used_verbatim(self, artist) -> None:
        assert build_bio_prompt(artist, BioOptions(customPrompt="Just say hi")) == "Just say hi"

    def test_persona_selects_template(self, artist_info) -> None:
        artist = ArtistInfo.model_validate({**artist_info, "persona": "storyteller"})

        assert "Every note tells a story" in build_bio_prompt(artist, BioOptions())


class TestImagePrompt:

    def test_genre_style_and_size(self) -> None:
        request = ImageRequest(name="Nova", visual_style="neon", genre="rock")

        prompt = build_image_prompt(request, ImageOptions(size="768x768"))

        assert "who creates rock music" in prompt
        assert "edgy rockstar appearance" in prompt
        assert "768x768 portrait" in prompt

    def test_missing_genre_defaults_to_electronic(self) -> None:
        prompt = build_image_prompt(ImageRequest(name="Nova", visual_style="neon"), ImageOptions())

        assert "futuristic digital aesthetic" in prompt

    def test_description_and_variation_appended(self) -> None:
        request = ImageRequest(
            name="Nova", visual_style="neon", description="holding a synth", variation=2
        )

        prompt = build_image_prompt(request, ImageOptions())

        assert prompt.endswith("holding a synth variation 2")


class TestRewriteAndAnalysisPrompts:

    def test_rewrite_prompt_fields(self) -> None:
        request = PromptRewriteRequest(
            original_prompt="chill beats",
            genre="lofi",
            instruments=("piano", "vinyl crackle"),
            target_platform="suno",
        )

        prompt = build_rewrite_prompt(request, PromptOptions(length="short"))

        assert 'Original Prompt: "chill beats"' in prompt
        assert "effective and detailed for suno" in prompt
        assert "Instruments: piano, vinyl crackle" in prompt
        assert "50-100 words" in prompt
        assert '"rewrittenPrompt"' in prompt
        assert "alternative take" not in prompt

    def test_rewrite_variation_asks_for_distinct_take(self) -> None:
        request = PromptRewriteRequest(original_prompt="chill beats", variation=3)

        prompt = build_rewrite_prompt(request, PromptOptions())

        assert "alternative take #3" in prompt
        assert "AI music generation" in prompt

    def test_analysis_prompt_with_platform_focus(self) -> None:
        prompt = build_analysis_prompt(
            PromptAnalysisRequest(prompt="happy rock anthem", target_platform="udio")
        )

        assert 'Prompt: "happy rock anthem"' in prompt
        assert "effectiveness on udio" in prompt
        assert '"qualityScore"' in prompt
