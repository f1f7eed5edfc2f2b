"""
Image prompt assembly.

Structure: [description], [mood], [technical base], [visual style],
[character descriptions...], [framing]
"""
from typing import Optional, Sequence

from studio.models.enums import AspectRatio, ShotMood, VisualStyle

VISUAL_STYLE_MODIFIERS = {
    VisualStyle.PHOTOREALISTIC: "photorealistic, 35mm lens, natural skin texture, documentary photography",
    VisualStyle.HYPERREALISTIC_CINEMATIC: "hyperrealistic film still, practical lighting, film grain, anamorphic lens",
    VisualStyle.DRAMATIC_REALISM: "dramatic realism, chiaroscuro lighting, gritty photojournalism",
    VisualStyle.EPIC_FILM_STILL: "epic film still, 70mm photography, real locations, practical effects",
    VisualStyle.PAINTERLY_ARTISTIC: "digital painting, concept art, painterly brushstrokes",
    VisualStyle.ANIMATED_STYLIZED: "3D animated style, stylized characters",
}

MOOD_MODIFIERS = {
    ShotMood.DRAMATIC: "dramatic lighting, intense emotional moment",
    ShotMood.PEACEFUL: "serene atmosphere, golden hour light, calm",
    ShotMood.APOCALYPTIC: "apocalyptic atmosphere, ominous skies",
    ShotMood.DIVINE: "divine radiance, rays of light, transcendent",
    ShotMood.FOREBODING: "ominous shadows, building tension, sense of dread",
    ShotMood.ACTION: "dynamic composition, motion energy, urgency",
}

TECHNICAL_BASE = "8k resolution, cinematic lighting"

FRAMING = {
    AspectRatio.LANDSCAPE: "wide 16:9 composition",
    AspectRatio.PORTRAIT: "vertical 9:16 composition",
}


def build_image_prompt(
    description: str,
    mood: ShotMood = ShotMood.DRAMATIC,
    visual_style: VisualStyle = VisualStyle.PHOTOREALISTIC,
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE,
    character_descriptions: Optional[Sequence[str]] = None,
) -> str:
    parts = [
        description.strip(),
        MOOD_MODIFIERS.get(mood, ""),
        TECHNICAL_BASE,
        VISUAL_STYLE_MODIFIERS.get(visual_style, ""),
        *(text.strip() for text in character_descriptions or ()),
        FRAMING.get(aspect_ratio, ""),
    ]
    return ", ".join(part for part in parts if part)
