"""
Tests for the operation input models.
"""

import pytest
from pydantic import ValidationError

from harmony_gateway.models.requests import (
    ArtistInfo,
    BioOptions,
    Complexity,
    ImageOptions,
    ImageRequest,
    PromptOptions,
    PromptRewriteRequest,
    parse_size,
)


class TestArtistInfo:

    def test_camel_case_input(self, artist_info) -> None:
        artist = ArtistInfo.model_validate(artist_info)

        assert artist.visual_style == "neon cyberpunk"
        assert artist.personality_traits == ("curious", "bold")

    def test_snake_case_input(self) -> None:
        artist = ArtistInfo(
            name="Nova",
            genre="jazz",
            personality_traits=["calm"],
            visual_style="noir",
            speaking_style="laconic",
        )

        assert artist.genre == "jazz"

    def test_blank_name_rejected(self, artist_info) -> None:
        with pytest.raises(ValidationError):
            ArtistInfo.model_validate({**artist_info, "name": "   "})

    def test_empty_traits_rejected(self, artist_info) -> None:
        with pytest.raises(ValidationError):
            ArtistInfo.model_validate({**artist_info, "personalityTraits": []})

    def test_unknown_fields_ignored(self, artist_info) -> None:
        artist = ArtistInfo.model_validate({**artist_info, "favouriteColour": "teal"})

        assert not hasattr(artist, "favouriteColour")


class TestOptions:

    def test_bio_defaults(self) -> None:
        options = BioOptions()

        assert options.complexity == Complexity.STANDARD
        assert options.temperature == 0.8
        assert options.providers is None

    def test_single_provider_shorthand(self) -> None:
        assert BioOptions.model_validate({"provider": "openai"}).providers == ("openai",)

    def test_providers_list(self) -> None:
        options = ImageOptions.model_validate({"providers": ["seedance", "nanobanana"]})

        assert options.providers == ("seedance", "nanobanana")

    def test_temperature_bounds(self) -> None:
        with pytest.raises(ValidationError):
            BioOptions(temperature=3.0)

    def test_image_size_pattern_and_dimensions(self) -> None:
        assert ImageOptions(size="1024x768").dimensions == (1024, 768)
        with pytest.raises(ValidationError):
            ImageOptions(size="big")

    def test_parse_size(self) -> None:
        assert parse_size("768x512") == (768, 512)

    def test_prompt_option_literals(self) -> None:
        with pytest.raises(ValidationError):
            PromptOptions(length="epic")


class TestImageAndPromptRequests:

    def test_image_request_camel_case(self, image_request) -> None:
        request = ImageRequest.model_validate(image_request)

        assert request.visual_style == "neon cyberpunk"
        assert request.variation is None

    def test_image_variation_is_one_based(self) -> None:
        with pytest.raises(ValidationError):
            ImageRequest(name="Nova", visual_style="neon", variation=0)

    @pytest.mark.parametrize(
        "provider, expected",
        [
            ("seedance", ("seedance",)),
            (["seedance", "nanobanana"], ("seedance", "nanobanana")),
        ],
    )
    def test_image_request_provider_shorthand(self, provider, expected) -> None:
        request = ImageRequest.model_validate(
            {"name": "Nova", "visualStyle": "neon", "provider": provider}
        )

        assert request.providers == expected

    def test_rewrite_request_from_camel_case(self) -> None:
        request = PromptRewriteRequest.model_validate(
            {"originalPrompt": "chill beats", "targetPlatform": "suno"}
        )

        assert request.original_prompt == "chill beats"
        assert request.target_platform == "suno"

    def test_models_are_frozen(self, image_request) -> None:
        request = ImageRequest.model_validate(image_request)

        with pytest.raises(ValidationError):
            request.name = "Vega"
