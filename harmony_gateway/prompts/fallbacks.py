"""
Deterministic fallback output, used once every provider has failed.

Every function here is pure: identical inputs give identical output, so a
caller retrying a degraded request sees the same result.
"""

import hashlib
from typing import Any

from harmony_gateway.models.requests import (
    ArtistInfo,
    ImageOptions,
    ImageRequest,
    PromptAnalysisRequest,
    PromptRewriteRequest,
)
from harmony_gateway.prompts.templates import bio_template_for

FALLBACK_IMAGE_BASE = "https://picsum.photos/seed"
PLATFORMS = ("suno", "udio", "stability")

GENRE_KEYWORDS = ("rock", "jazz", "electronic", "classical")
MOOD_KEYWORDS = ("happy", "sad", "energetic", "calm")


def _sentence(text: str) -> str:
    text = text.strip()
    if not text:
        return text
    text = text[0].upper() + text[1:]
    return text if text.endswith((".", "!", "?")) else f"{text}."


def fallback_bio(artist: ArtistInfo) -> str:
    template = bio_template_for(artist.genre)
    return (
        f"{artist.name} is an innovative AI artist who masters {artist.genre} "
        f"with a unique {artist.visual_style} approach. "
        f"With {', '.join(artist.personality_traits)} personality traits and a "
        f"{artist.speaking_style} speaking style, {artist.name} creates music that "
        f"pushes the boundaries of digital expression. {_sentence(template.signature)}"
    )


def fallback_image_url(request: ImageRequest, prompt: str, options: ImageOptions) -> str:
    """
    Placeholder image URL seeded from the request content.

    The seed covers name, visual style and the prompt (which carries the
    variation suffix), so variations of one batch get distinct images.
    """
    material = "|".join((request.name, request.visual_style, prompt))
    seed = hashlib.sha256(material.encode()).hexdigest()[:16]
    width, height = options.dimensions
    return f"{FALLBACK_IMAGE_BASE}/{seed}/{width}/{height}"


def fallback_rewrite(request: PromptRewriteRequest) -> dict[str, Any]:
    genre = request.genre or "general"
    mood = request.mood or "balanced"
    style = request.style or "contemporary"
    rewritten = (
        f"Enhanced {genre} music generation prompt with {mood} mood and {style} style.\n"
        f"{request.original_prompt}\n\n"
        "Additional details: professional production quality, dynamic range, rich "
        "harmonies, innovative sound design, and engaging musical structure."
    )
    return {
        "rewritten_prompt": rewritten,
        "analysis": "Basic enhancement with genre, mood, and style elements",
        "improvements": [
            "Added genre-specific terminology",
            "Incorporated mood descriptions",
            "Enhanced with production quality details",
        ],
    }


def fallback_analysis(request: PromptAnalysisRequest) -> dict[str, Any]:
    """Keyword heuristic: genre named +4, mood named +3, longer than 50 chars +3."""
    text = request.prompt.lower()
    has_genre = any(word in text for word in GENRE_KEYWORDS)
    has_mood = any(word in text for word in MOOD_KEYWORDS)
    length = len(request.prompt)
    score = (4 if has_genre else 0) + (3 if has_mood else 0) + (3 if length > 50 else 0)

    weaknesses: list[str] = []
    recommendations: list[str] = []
    if not has_genre:
        weaknesses.append("Lacks genre specification")
        recommendations.append("Specify musical genre")
    if not has_mood:
        weaknesses.append("Missing mood description")
        recommendations.append("Add emotional context")

    effectiveness = "medium" if score > 5 else "low"
    return {
        "quality_score": score,
        "strengths": (
            ["Sufficient length", "Contains descriptive elements"] if length > 20 else ["Concise"]
        ),
        "weaknesses": weaknesses,
        "recommendations": recommendations,
        "platform_effectiveness": {platform: effectiveness for platform in PLATFORMS},
    }
