"""Style catalogue and prompt compilation for drawing transformation.

Two prompts are produced for every request:

1. The **analysis instruction** sent alongside the drawing to the multimodal
   model.  It asks for a single-paragraph description of the drawing that is
   usable as a text-to-image prompt, steered towards the requested style.
2. The **generation prompt** sent to the image endpoint.  It is compiled
   from the model's description and the style's fixed modifiers.

Generation Structure::

    [Description returned by the analysis model]

    Style: [Style modifier]

    [Fixed quality boilerplate]

Each section is separated by double newlines.

Usage
-----
::

    style = resolve_style("Watercolor")
    instruction = build_analysis_instruction(style, hint="it's my cat")
    prompt = build_generation_prompt("A tabby cat asleep on a rug.", style)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Style:
    """A selectable output style.

    Attributes:
        id: Stable identifier sent by clients (e.g. ``"oil-painting"``).
        label: Human-readable name.
        modifier: Text appended to the generation prompt.
        preset: Matching ``style_preset`` of the image endpoint, if any.
    """

    id: str
    label: str
    modifier: str
    preset: str | None = None


DEFAULT_STYLE_ID = "realistic"

STYLES: dict[str, Style] = {
    s.id: s
    for s in (
        Style(
            "realistic",
            "Realistic",
            "photorealistic, natural lighting, high detail, sharp focus",
            "photographic",
        ),
        Style(
            "cartoon",
            "Cartoon",
            "bold outlines, flat vibrant colours, playful cartoon illustration",
            "comic-book",
        ),
        Style(
            "anime",
            "Anime",
            "anime illustration, cel shading, expressive eyes, clean line art",
            "anime",
        ),
        Style(
            "watercolor",
            "Watercolor",
            "soft watercolor painting, bleeding pigments, textured paper",
        ),
        Style(
            "oil-painting",
            "Oil painting",
            "classical oil painting, visible brush strokes, rich canvas texture",
        ),
        Style(
            "pixel-art",
            "Pixel art",
            "retro 16-bit pixel art, limited palette, crisp pixels",
            "pixel-art",
        ),
        Style(
            "sketch",
            "Pencil sketch",
            "detailed graphite pencil sketch, cross-hatching, paper grain",
            "line-art",
        ),
        Style(
            "3d-render",
            "3D render",
            "3D render, soft global illumination, smooth materials",
            "3d-model",
        ),
    )
}

_QUALITY_BOILERPLATE = (
    "High quality, coherent composition, faithful to the subject and layout of the "
    "original drawing."
)

_ANALYSIS_TEMPLATE = (
    "You are looking at a hand-made drawing. Describe what it depicts as a single "
    "vivid paragraph that can be used directly as a prompt for an image generator. "
    "Keep the subjects, their positions and the colours the artist chose. "
    "The final image will be rendered in a {label} style ({modifier}). "
    "Reply with the prompt text only, without preamble or formatting."
)


def resolve_style(style_id: str | None, default: str = DEFAULT_STYLE_ID) -> Style:
    """Look up a style by identifier.

    Matching is case-insensitive and treats spaces and underscores as
    hyphens, so ``"Oil Painting"`` and ``"oil_painting"`` both resolve to
    ``"oil-painting"``.  Unknown or empty identifiers fall back to *default*,
    and to ``"realistic"`` if *default* itself is unknown.

    Args:
        style_id: Identifier sent by the client.
        default: Identifier used when *style_id* is empty or unknown.

    Returns:
        The matching :class:`Style`.
    """
    key = (style_id or "").strip().lower().replace("_", "-").replace(" ", "-")
    if key in STYLES:
        return STYLES[key]
    return STYLES.get(default, STYLES[DEFAULT_STYLE_ID])


def build_analysis_instruction(style: Style, hint: str | None = None) -> str:
    """Compile the instruction sent with the drawing to the analysis model.

    Args:
        style: Target style for the final image.
        hint: Optional free text from the user describing the drawing.

    Returns:
        The instruction text.
    """
    instruction = _ANALYSIS_TEMPLATE.format(label=style.label, modifier=style.modifier)
    stripped_hint = (hint or "").strip()
    if stripped_hint:
        instruction += f"\n\nThe artist describes the drawing as: {stripped_hint}"
    return instruction


def build_generation_prompt(description: str, style: Style) -> str:
    """Compile the text-to-image prompt from the drawing description.

    Args:
        description: Description returned by the analysis model.
        style: Target style.

    Returns:
        The fully compiled prompt with sections separated by double newlines.
    """
    parts = [description.strip(), f"Style: {style.modifier}", _QUALITY_BOILERPLATE]
    return "\n\n".join(p for p in parts if p)
