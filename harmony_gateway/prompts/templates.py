"""
Prompt templates and builders for each generation operation.

Genre and persona templates carry the style, signature line and tone used
both in upstream prompts and in the deterministic fallbacks.
"""

from dataclasses import dataclass

from harmony_gateway.models.requests import (
    ArtistInfo,
    BioOptions,
    Complexity,
    ImageOptions,
    ImageRequest,
    PromptAnalysisRequest,
    PromptOptions,
    PromptRewriteRequest,
    TargetAudience,
)


@dataclass(frozen=True)
class BioTemplate:
    style: str
    signature: str
    tone: str
    keywords: tuple[str, ...]


# =============================================================================
# Bio Templates (genres, then artist personas)
# =============================================================================

BIO_TEMPLATES: dict[str, BioTemplate] = {
    "electronic": BioTemplate(
        "innovative and futuristic",
        "pioneering the future of sound",
        "Futuristic and energetic",
        ("synthesis", "digital", "electronic", "innovation", "technology"),
    ),
    "hip_hop": BioTemplate(
        "authentic and groundbreaking",
        "redefining the rhythm of tomorrow",
        "Confident and authentic",
        ("rhythm", "flow", "beats", "lyrics", "street", "culture"),
    ),
    "classical": BioTemplate(
        "timeless and sophisticated",
        "bridging tradition with innovation",
        "Elegant and refined",
        ("symphony", "orchestra", "composition", "precision", "beauty", "tradition"),
    ),
    "jazz": BioTemplate(
        "improvisational and creative",
        "where melody meets machine",
        "Smooth and sophisticated",
        ("improvisation", "sophistication", "melody", "harmony", "swing", "class"),
    ),
    "rock": BioTemplate(
        "powerful and rebellious",
        "rocking the digital revolution",
        "Powerful and rebellious",
        ("guitar", "drums", "energy", "rebellion", "passion", "power"),
    ),
    "pop": BioTemplate(
        "catchy and innovative",
        "creating the next big thing",
        "Energetic and catchy",
        ("melody", "hook", "viral", "trendy", "accessible", "mainstream"),
    ),
    "ambient": BioTemplate(
        "Atmospheric soundscapes and digital meditation",
        "The architect of atmosphere",
        "Calm and immersive",
        ("atmosphere", "ambient", "meditation", "space", "immersive", "calm"),
    ),
    "experimental": BioTemplate(
        "Boundary-pushing sonic exploration",
        "The pioneer of the possible",
        "Innovative and avant-garde",
        ("experimental", "innovation", "exploration", "avant-garde", "future", "unknown"),
    ),
    "visionary": BioTemplate(
        "Forward-thinking artistic innovation",
        "Seeing beyond the horizon",
        "Inspiring and visionary",
        ("vision", "future", "innovation", "inspiration", "dream", "possibility"),
    ),
    "rebel": BioTemplate(
        "Defiant artistic expression",
        "Breaking the rules, creating the future",
        "Edgy and rebellious",
        ("rebel", "defiant", "edge", "revolution", "change", "disrupt"),
    ),
    "innovator": BioTemplate(
        "Cutting-edge technological artistry",
        "Inventing tomorrow's sound today",
        "Progressive and technical",
        ("innovation", "technology", "progress", "cutting-edge", "future", "advance"),
    ),
    "storyteller": BioTemplate(
        "Narrative-driven emotional journeys",
        "Every note tells a story",
        "Emotional and narrative",
        ("story", "narrative", "journey", "emotion", "tale", "experience"),
    ),
    "virtuoso": BioTemplate(
        "Technical mastery and artistic excellence",
        "The perfectionist of pixels",
        "Precise and masterful",
        ("mastery", "excellence", "precision", "technique", "perfect", "flawless"),
    ),
    "mystic": BioTemplate(
        "Enigmatic and otherworldly soundscapes",
        "Channeling the digital unknown",
        "Mysterious and ethereal",
        ("mystery", "ethereal", "unknown", "spiritual", "mystic", "otherworldly"),
    ),
    "default": BioTemplate(
        "Digital innovation and artistic experimentation",
        "Where code meets creativity",
        "Balanced and creative",
        ("innovation", "creativity", "digital", "artistic", "experiment", "future"),
    ),
}

IMAGE_STYLES: dict[str, str] = {
    "electronic": "futuristic digital aesthetic, neon colors, cyberpunk elements",
    "hip_hop": "urban street style, bold colors, modern fashion",
    "classical": "elegant timeless portrait, classical art style, sophisticated",
    "jazz": "smooth sophisticated vibe, warm colors, artistic expression",
    "rock": "edgy rockstar appearance, dynamic pose, electric energy",
    "pop": "bright colorful style, modern pop art, engaging expression",
}

COMPLEXITY_INSTRUCTIONS: dict[Complexity, str] = {
    Complexity.SIMPLE: "Keep the bio concise and straightforward, focusing on key aspects.",
    Complexity.STANDARD: "Create a balanced bio that is both informative and engaging.",
    Complexity.DETAILED: (
        "Include rich details about their creative process, musical techniques, "
        "and artistic vision."
    ),
    Complexity.PROFESSIONAL: (
        "Craft a professional bio suitable for industry publications, highlighting "
        "technical expertise and artistic achievements."
    ),
}

AUDIENCE_INSTRUCTIONS: dict[TargetAudience, str] = {
    TargetAudience.GENERAL: "Make the bio accessible to all music lovers.",
    TargetAudience.INDUSTRY: (
        "Use industry terminology and highlight technical expertise for music professionals."
    ),
    TargetAudience.FANS: (
        "Create an engaging, fan-friendly bio that emphasizes connection and musical experience."
    ),
    TargetAudience.ACADEMIC: (
        "Write an analytical bio suitable for academic contexts, focusing on innovation "
        "and cultural impact."
    ),
}

LENGTH_GUIDANCE = {
    "short": "50-100 words",
    "medium": "100-200 words",
    "long": "200-300 words",
}

LANGUAGE_GUIDANCE = {
    "simple": "clear and straightforward language",
    "medium": "detailed descriptive language with some technical terms",
    "advanced": "highly technical and descriptive language with specific musical terminology",
}


def template_key(value: str | None) -> str:
    """Normalize a genre or persona name: "Hip-Hop" -> "hip_hop"."""
    return (value or "").strip().lower().replace("-", "_").replace(" ", "_")


def bio_template_for(genre: str | None, template: str | None = None) -> BioTemplate:
    """Explicit template first, then the genre's, then electronic."""
    for key in (template_key(template), template_key(genre)):
        if key in BIO_TEMPLATES:
            return BIO_TEMPLATES[key]
    return BIO_TEMPLATES["electronic"]


# =============================================================================
# Builders
# =============================================================================


def build_bio_prompt(artist: ArtistInfo, options: BioOptions) -> str:
    if options.custom_prompt:
        return options.custom_prompt

    template = bio_template_for(artist.genre, options.template or artist.persona)
    influences = ", ".join(artist.influences) or "Various electronic and digital artists"
    return f"""Create a compelling and creative bio for an AI artist named "{artist.name}".

Details:
- Primary Genre: {artist.genre}
- Personality Traits: {", ".join(artist.personality_traits)}
- Visual Style: {artist.visual_style}
- Speaking Style: {artist.speaking_style}
- Backstory: {artist.background or "To be developed"}
- Influences: {influences}
- Signature Style: {template.style}

Requirements:
1. Make the bio engaging and creative (100-200 words)
2. Reflect the AI nature of the artist
3. Incorporate the personality traits and visual style
4. Show musical innovation and uniqueness
5. {COMPLEXITY_INSTRUCTIONS[options.complexity]}
6. {AUDIENCE_INSTRUCTIONS[options.target_audience]}
7. Write in a {artist.speaking_style} tone ({template.tone.lower()})
8. End with a signature phrase: "{template.signature}"
9. Mention how they blend technology with artistic expression

Return only the bio text without any additional formatting or explanation."""


def build_image_prompt(request: ImageRequest, options: ImageOptions) -> str:
    genre = request.genre or "electronic"
    style = IMAGE_STYLES.get(template_key(genre), IMAGE_STYLES["electronic"])
    prompt = (
        f'Professional profile picture for an AI artist named "{request.name}" '
        f"who creates {genre} music. "
        f"Visual style: {request.visual_style}. Genre influence: {style}. "
        "Digital/AI aesthetic with artistic elements, expressive face, background "
        "complementing the visual style, studio lighting, cinematic composition, "
        f"high detail, {options.size} portrait."
    )
    if request.description:
        prompt = f"{prompt} {request.description}"
    if request.variation is not None:
        prompt = f"{prompt} variation {request.variation}"
    return prompt


def build_rewrite_prompt(request: PromptRewriteRequest, options: PromptOptions) -> str:
    platform = request.target_platform or "AI music generation"
    instruments = ", ".join(request.instruments) or "unspecified"
    prompt = f"""You are an expert AI music prompt engineer. Rewrite and enhance the following music generation prompt to make it more effective and detailed for {platform}.

Original Prompt: "{request.original_prompt}"

Enhancement Requirements:
- Genre: {request.genre or "unspecified"}
- Mood/Emotion: {request.mood or "unspecified"}
- Musical Style: {request.style or "unspecified"}
- Instruments: {instruments}
- Complexity Level: {options.complexity}
- Target Length: {LENGTH_GUIDANCE[options.length]}
- Language Style: {LANGUAGE_GUIDANCE[options.complexity]}

Format your response as JSON:
{{
  "rewrittenPrompt": "enhanced prompt text",
  "analysis": "2-3 sentences on what was improved and why",
  "improvements": ["improvement 1", "improvement 2", "improvement 3"]
}}"""
    if request.variation is not None:
        prompt += (
            f"\n\nThis is alternative take #{request.variation}: choose a creative "
            "direction distinct from a straightforward rewrite."
        )
    return prompt


def build_analysis_prompt(request: PromptAnalysisRequest) -> str:
    focus = (
        f"\nPay particular attention to effectiveness on {request.target_platform}."
        if request.target_platform
        else ""
    )
    return f"""Analyze the following music generation prompt for quality and effectiveness:

Prompt: "{request.prompt}"
{focus}
Provide an overall quality score (1-10), 3-5 strengths, 3-5 weaknesses, specific
recommendations, and estimated effectiveness (high/medium/low) on suno, udio and stability.

Format your response as JSON:
{{
  "qualityScore": 8,
  "strengths": ["clear direction", "specific elements"],
  "weaknesses": ["lacks emotional depth"],
  "recommendations": ["specify instrumentation"],
  "platformEffectiveness": {{"suno": "high", "udio": "medium", "stability": "low"}}
}}"""
