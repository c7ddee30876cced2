"""
Generation Options Configuration for the Metaphor backend

This module contains the centralized configuration for the style palettes,
complexity budgets and animation levels a caller can pick when generating
a metaphor, plus the catalog of metaphor archetypes the model chooses from.
"""

from typing import Dict, List, TypedDict


SVG_SIZE = 800


class StylePalette(TypedDict):
    """Type definition for a style palette."""
    bg: str
    accent: str
    text: str
    muted: str


class ComplexityPreset(TypedDict):
    """Type definition for a complexity budget."""
    min_shapes: int
    max_shapes: int
    max_lines: int


class AnimationPreset(TypedDict):
    """Type definition for an animation level."""
    directive: str
    reminder: str


STYLE_PALETTES: Dict[str, StylePalette] = {
    "light": {
        "bg": "#FFFFFF",
        "accent": "#DC2626",
        "text": "#171717",
        "muted": "#737373",
    },
    "dark": {
        "bg": "#0a0a0a",
        "accent": "#DC2626",
        "text": "#e8e8e8",
        "muted": "#666666",
    },
}

COMPLEXITY_PRESETS: Dict[str, ComplexityPreset] = {
    "minimal": {"min_shapes": 3, "max_shapes": 5, "max_lines": 50},
    "standard": {"min_shapes": 5, "max_shapes": 10, "max_lines": 100},
    "detailed": {"min_shapes": 10, "max_shapes": 20, "max_lines": 150},
}

ANIMATION_PRESETS: Dict[str, AnimationPreset] = {
    "none": {
        "directive": (
            "NO animation of any kind: do not use @keyframes, CSS animation or transition "
            "properties, <animate>, <animateTransform> or <animateMotion>. The graphic must be fully static."
        ),
        "reminder": "Keep the graphic completely static, no animation.",
    },
    "subtle": {
        "directive": (
            "Use 1-2 subtle animations only: slow (4-8s cycles), low amplitude "
            "(scale at most 1.05, opacity between 0.6 and 1), ease-in-out timing."
        ),
        "reminder": "Add 1-2 slow, subtle animations.",
    },
    "active": {
        "directive": (
            "Use 3-5 lively animations: fast (1-3s cycles), varied effects "
            "(pulse, glow, rotate, expand, dash offset), staggered with animation-delay."
        ),
        "reminder": "Add 3-5 fast, varied animations.",
    },
}

ANIMATION_PATTERNS = """- Pulse: @keyframes pulse { 0%,100% { transform: scale(1); } 50% { transform: scale(1.1); } }
- Glow: @keyframes glow { 0%,100% { opacity: 0.5; } 50% { opacity: 1; } }
- Expand: use <animate> for radius or size changes"""

# Ordered catalog of archetypes, name -> visual description
METAPHOR_TYPES: Dict[str, str] = {
    "signal_noise": "concentric circles + scattered noise dots, central bright core",
    "exoskeleton": "hexagonal frame around pulsing human-like core",
    "network": "nodes connected with lines, some nodes highlighted",
    "flow": "directional arrows or wave patterns",
    "layers": "horizontal stacked rectangles",
    "growth": "ascending bars or branching tree",
    "portal": "nested shapes creating depth illusion",
    "balance": "symmetrical scales or mirrored elements",
    "compass": "directional indicator, navigation metaphor",
    "dna": "double helix pattern for transformation",
}

DEFAULT_STYLE = "light"
DEFAULT_COMPLEXITY = "standard"
DEFAULT_ANIMATION = "subtle"


def get_style_palette(style: str) -> StylePalette:
    """
    Get the colour palette for a style.

    Raises:
        KeyError: If the style is not known
    """
    if style not in STYLE_PALETTES:
        raise KeyError(f"Style '{style}' not found. Available styles: {list(STYLE_PALETTES.keys())}")
    return STYLE_PALETTES[style]


def get_complexity_preset(complexity: str) -> ComplexityPreset:
    if complexity not in COMPLEXITY_PRESETS:
        raise KeyError(f"Complexity '{complexity}' not found. Available levels: {list(COMPLEXITY_PRESETS.keys())}")
    return COMPLEXITY_PRESETS[complexity]


def get_animation_preset(animation: str) -> AnimationPreset:
    if animation not in ANIMATION_PRESETS:
        raise KeyError(f"Animation '{animation}' not found. Available levels: {list(ANIMATION_PRESETS.keys())}")
    return ANIMATION_PRESETS[animation]


def describe_complexity(complexity: str) -> str:
    """One-line shape and line budget for a complexity level."""
    preset = get_complexity_preset(complexity)
    return (
        f"{preset['min_shapes']}-{preset['max_shapes']} shapes, "
        f"maximum {preset['max_lines']} lines of SVG code"
    )


def get_metaphor_catalog() -> str:
    """
    Render the archetype catalog as a prompt bullet list.

    Returns:
        String in the format:
        - name: description
    """
    return "\n".join(f"- {name}: {description}" for name, description in METAPHOR_TYPES.items())


def get_option_info_for_frontend() -> Dict[str, List[str]]:
    """Get the selectable option names for the frontend."""
    return {
        "styles": list(STYLE_PALETTES.keys()),
        "complexity": list(COMPLEXITY_PRESETS.keys()),
        "animation": list(ANIMATION_PRESETS.keys()),
    }
