# Prompt Templates for Visual Metaphor Generation
# Every builder here is pure: identical options always render identical text

from config.generation_options import (
    ANIMATION_PATTERNS,
    SVG_SIZE,
    describe_complexity,
    get_animation_preset,
    get_metaphor_catalog,
    get_style_palette,
)

SYSTEM_PROMPT_TEMPLATE = """You are a visual metaphor designer specializing in Swiss Design style SVG graphics.

DESIGN SYSTEM:
- Canvas: {size}x{size}px, viewBox="0 0 {size} {size}"
- Background: {bg}
- Primary accent: Swiss Red ({accent})
- Text color: {text}
- Muted color: {muted}
- Typography: IBM Plex Mono, font-size 24px for labels
- Style: Minimal, geometric, clean lines

SVG REQUIREMENTS:
1. Output ONLY valid SVG code, no markdown, no explanation
2. Start with <svg width="{size}" height="{size}" viewBox="0 0 {size} {size}" xmlns="http://www.w3.org/2000/svg">
3. Use simple geometric shapes (circles, lines, polygons, rects)
4. Complexity budget: {complexity}
5. NO title text in the SVG

ANIMATION:
{animation}
{patterns}
METAPHOR TYPES TO CHOOSE FROM:
{catalog}

Choose the most fitting metaphor based on the input concept.

OUTPUT:
Return ONLY the complete SVG code. No explanation, no markdown."""

USER_PROMPT_TEMPLATE = """Create a visual metaphor SVG for this concept:

"{text}"

Generate a single SVG that visually represents this idea. Choose the most fitting metaphor type based on the content.
The visual should be immediately understandable and memorable.
Complexity: {complexity}.
Animation: {animation}
Do NOT include any title text in the SVG."""

TITLE_SYSTEM_PROMPT = """You are naming visual metaphors.
Return ONLY valid JSON with keys "title" and "titleEn".
Rules:
- "title": Russian, 1-2 words, no punctuation
- "titleEn": English, 1-2 words, no punctuation
- Use Title Case when possible
Example output: {"title":"Экзоскелет","titleEn":"Exoskeleton"}"""


def build_system_prompt(style: str, complexity: str, animation: str) -> str:
    """Render the system instruction for an SVG generation request."""
    palette = get_style_palette(style)
    animation_preset = get_animation_preset(animation)
    # Reference keyframes only make sense when animation is allowed
    patterns = "" if animation == "none" else f"Reference patterns:\n{ANIMATION_PATTERNS}\n"
    return SYSTEM_PROMPT_TEMPLATE.format(
        size=SVG_SIZE,
        bg=palette["bg"],
        accent=palette["accent"],
        text=palette["text"],
        muted=palette["muted"],
        complexity=describe_complexity(complexity),
        animation=animation_preset["directive"],
        patterns=patterns,
        catalog=get_metaphor_catalog(),
    )


def build_user_prompt(text: str, complexity: str, animation: str) -> str:
    """Render the user instruction embedding the concept text."""
    return USER_PROMPT_TEMPLATE.format(
        text=text,
        complexity=describe_complexity(complexity),
        animation=get_animation_preset(animation)["reminder"],
    )


def build_title_user_prompt(text: str) -> str:
    return f'Concept: "{text}"'
