"""
Prompt builders and response contracts for the three Gemini calls.

  analysis  → ANALYSIS_INSTRUCTION + analysis_schema()
  rendering → build_image_prompt() (manual or guided template)
  captions  → build_caption_prompt() + caption_schema()

Fallback values used when an advisory call fails also live here, next to
the prompts that would have produced them.
"""

from google.genai import types

from ..models.content import SUGGESTIONS_PER_CATEGORY, SocialPost, Suggestions
from ..models.options import CaptionStrategy, OptionSelection

# ── Analysis ─────────────────────────────────────────────────────────

ANALYSIS_INSTRUCTION = (
    "Analyze this image. I want to generate variations of this subject. "
    "Provide a brief description of the original image, and then provide creative "
    "suggestions for facial expressions, clothing, background scenes, and art styles "
    "that would work well with this subject image."
)

_ANALYSIS_FIELDS = {
    "expressions": (
        "distinct facial expressions suitable for the subject "
        "(e.g., 'Heroic Smile', 'Mysterious', 'Laughing')."
    ),
    "clothing": (
        "creative clothing options matching the subject's gender/form "
        "(e.g., 'Cyberpunk Armor', 'Vintage Suit', 'Casual Hoodie')."
    ),
    "scenes": (
        "interesting background settings or situations "
        "(e.g., 'Neon City Street', 'Sunny Beach', 'Ancient Library')."
    ),
    "styles": (
        "art styles for the output image "
        "(e.g., 'Cinematic Realistic', 'Anime Style', 'Oil Painting', '3D Render', 'Pencil Sketch')."
    ),
}

FALLBACK_SUGGESTIONS = Suggestions(
    original_description="A portrait of a person.",
    expressions=["Happy", "Serious", "Surprised", "Cool", "Neutral"],
    clothing=["Casual", "Formal", "Fantasy", "Sci-Fi", "Sporty"],
    scenes=["Park", "Office", "Space", "City", "Studio"],
    styles=["Realistic", "Cartoon", "Sketch", "Painting", "Digital Art"],
)


def analysis_schema() -> types.Schema:
    """JSON schema Gemini must follow for the analysis response."""
    properties = {
        "originalDescription": types.Schema(
            type=types.Type.STRING,
            description=(
                "A concise 1-2 sentence description of the original image context, "
                "subject, and setting."
            ),
        ),
    }
    for name, description in _ANALYSIS_FIELDS.items():
        properties[name] = types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            min_items=SUGGESTIONS_PER_CATEGORY,
            max_items=SUGGESTIONS_PER_CATEGORY,
            description=f"{SUGGESTIONS_PER_CATEGORY} {description}",
        )
    return types.Schema(
        type=types.Type.OBJECT,
        properties=properties,
        required=["originalDescription", *_ANALYSIS_FIELDS],
    )


# ── Image rendering ──────────────────────────────────────────────────

VIRAL_BLOCK = (
    "MAKE THIS IMAGE EXTRAORDINARY AND VIRAL. "
    "Use cinematic lighting, 8k resolution, highly detailed, trending on ArtStation, "
    "masterpiece quality, rare and unique composition, dramatic atmosphere, stunning visuals."
)


def build_manual_prompt(custom_prompt: str) -> str:
    """Free-text template: keep the subject's identity, follow the user verbatim."""
    return (
        "Generate a high-quality image based on the provided reference image. "
        f"Instruction: {custom_prompt}. "
        "Maintain the key facial features and identity of the subject in the reference "
        "image, but strictly follow the user's instruction for style, clothing, and background."
    )


def build_guided_prompt(options: OptionSelection) -> str:
    """Structured template. Clause order is fixed."""
    parts = ["Generate a high-quality image of the person in the reference image."]

    if options.accessory is not None:
        parts.append(f"The subject is wearing a '{options.accessory}' style hijab/headscarf.")

    if options.clothing:
        color = f"{options.clothing_color} colored " if options.clothing_color else ""
        parts.append(f"The subject is wearing {color}{options.clothing}.")

    block = [f"Facial Expression: {options.expression}."]
    if options.scene:
        block.append(f"Background/Scene: {options.scene}.")
    block.append(f"Art Style: {options.style}.")
    parts.append("\n".join(block))

    if options.viral:
        parts.append(VIRAL_BLOCK)

    if options.custom_prompt.strip():
        parts.append(f"Additional details: {options.custom_prompt.strip()}.")

    parts.append(
        "Maintain resemblance to the person's key facial features but change the "
        "context and style as requested."
    )
    return "\n".join(parts)


def build_image_prompt(options: OptionSelection) -> str:
    if options.manual_mode:
        return build_manual_prompt(options.custom_prompt)
    return build_guided_prompt(options)


# ── Captions ─────────────────────────────────────────────────────────

# Captions are always written in Malay, whatever the UI language.
CAPTION_LANGUAGE = "BAHASA MELAYU"
MANDATORY_HASHTAGS = ["#wanysaEdutech", "#fbpro", "#tipsfbpro"]

CAPTION_STRATEGIES: dict[CaptionStrategy, str] = {
    CaptionStrategy.REACTION_HOOK: """STRATEGY: Big Text + Reaction Photo.
Structure:
- Headline: VERY Short, Explosive Hook (e.g., "TAK SANGKA!", "RAHSIA TERBONGKAR!").
- Content: Short and snappy. Direct to the point. Focus on awareness or a quick call-out.
- Tone: Shocked, Excited, or Urgent.""",
    CaptionStrategy.TUTORIAL: """STRATEGY: Mini Tutorial Card.
Structure:
- Headline: "Cara Buat [X]" or "Tips [X]".
- Content: Break down into 3 simple steps or 1 solid actionable insight. Educational value is priority.
- Tone: Helpful, Teacher-like, Structured.""",
    CaptionStrategy.SITUATIONAL_STORY: """STRATEGY: Situational Story Photo.
Structure:
- Headline: Relatable POV (e.g., "Pernah tak rasa macam ni?", "POV: Bila client minta...").
- Content: A short story relating the image to a common struggle/win in the FB Pro journey.
- Tone: Empathy, Storytelling, Relatable.""",
    CaptionStrategy.CORPORATE_STATEMENT: """STRATEGY: Clean Corporate Statement.
Structure:
- Headline: Professional Statement/Quote.
- Content: High-level wisdom, monetization strategy, or trust-building advice. Minimalist text.
- Tone: Professional, Authority, Serious but inspiring.""",
    CaptionStrategy.MEME: """STRATEGY: Silent Meme Style.
Structure:
- Headline: The Punchline (1 sentence).
- Content: Short context that makes the expression in the photo funny.
- Tone: Humorous, Sarcastic, Light-hearted. High engagement focus.""",
}

FALLBACK_POST = SocialPost(
    headline="Jom Monetize FB! 🚀",
    content=(
        "Gambar ini menunjukkan betapa mudahnya kita boleh hasilkan konten berkualiti "
        "dengan AI. Jom belajar cara buat duit dengan FB Pro sekarang!"
    ),
    hashtags=list(MANDATORY_HASHTAGS),
)


def build_caption_context(options: OptionSelection) -> str:
    """One-line description of the rendered image, used as caption context."""
    if options.manual_mode:
        return options.custom_prompt
    context = (
        f"A person wearing {options.clothing} ({options.clothing_color or 'default color'}) "
        f"with a {options.expression} expression in a {options.scene} setting. "
        f"Style: {options.style}."
    )
    if options.accessory is not None:
        context += f" Wearing {options.accessory} style hijab."
    return context


def build_caption_prompt(options: OptionSelection, strategy: CaptionStrategy) -> str:
    return f"""Act as a 'FB Pro Content Monetization Expert' and 'Social Media Coach'.

I have generated an AI image with this context: "{build_caption_context(options)}".

Task: Write a Facebook post caption in **{CAPTION_LANGUAGE}** strictly.
Niche: FB Pro Content Monetization, AI Solutions, Tips & Tricks.

{CAPTION_STRATEGIES[CaptionStrategy(strategy)]}

Mandatory Hashtags to include at the end: {' '.join(MANDATORY_HASHTAGS)}

Return the response in JSON format."""


def caption_schema() -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "headline": types.Schema(type=types.Type.STRING),
            "content": types.Schema(
                type=types.Type.STRING, description="The main body of the post.",
            ),
            "hashtags": types.Schema(
                type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING),
            ),
        },
        required=["headline", "content", "hashtags"],
    )


def with_mandatory_hashtags(post: SocialPost) -> SocialPost:
    """Normalize tags to start with '#' and append any missing mandatory tag."""
    tags = []
    for tag in post.hashtags:
        tag = tag.strip()
        if not tag:
            continue
        if not tag.startswith("#"):
            tag = f"#{tag}"
        if tag.lower() not in {t.lower() for t in tags}:
            tags.append(tag)
    present = {t.lower() for t in tags}
    tags.extend(t for t in MANDATORY_HASHTAGS if t.lower() not in present)
    return post.model_copy(update={"hashtags": tags})
