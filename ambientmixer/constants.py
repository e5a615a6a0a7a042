"""
Constants and configuration values for the Ambient Mixer.

Uses emoji-data-python to resolve sound icons and the colour library for card theming.
"""

from functools import lru_cache
from typing import List, Tuple

from colour import Color  # type: ignore[import-untyped]
from emoji_data_python import emoji_short_names  # type: ignore[import-untyped]


# =============================================================================
# ICONS (from emoji-data-python library)
# =============================================================================

DEFAULT_ICON = "🎵"


@lru_cache(maxsize=None)
def get_icon(short_name: str) -> str:
    """Resolve an emoji short name (e.g. "fire") to its character."""
    emoji_obj = emoji_short_names.get(short_name)
    if emoji_obj is None or not emoji_obj.char:
        return DEFAULT_ICON
    return emoji_obj.char


# =============================================================================
# COLOR PALETTE
# =============================================================================


class MixerColors:
    """Dark night-sky palette with semantic naming."""

    # Background layers (darkest to lightest)
    BG_DARKEST = "#0F172A"
    BG_DARK = "#1E293B"
    BG_MEDIUM = "#273449"  # Card background
    BG_LIGHT = "#334155"
    BG_LIGHTER = "#475569"  # Hover states

    # Accent colors
    ACCENT = "#6366F1"
    ACCENT_HOVER = "#4F46E5"
    GREEN = "#22C55E"
    GREEN_HOVER = "#16A34A"
    RED = "#EF4444"
    RED_HOVER = "#DC2626"

    # Playback states
    PLAYING = "#38BDF8"  # Card border while a sound is playing

    # Text colors
    TEXT_PRIMARY = "#F8FAFC"
    TEXT_SECONDARY = "#CBD5E1"
    TEXT_MUTED = "#94A3B8"


# Dict-style access
COLORS = {
    "bg_darkest": MixerColors.BG_DARKEST,
    "bg_dark": MixerColors.BG_DARK,
    "bg_medium": MixerColors.BG_MEDIUM,
    "bg_light": MixerColors.BG_LIGHT,
    "bg_lighter": MixerColors.BG_LIGHTER,
    "accent": MixerColors.ACCENT,
    "accent_hover": MixerColors.ACCENT_HOVER,
    "green": MixerColors.GREEN,
    "green_hover": MixerColors.GREEN_HOVER,
    "red": MixerColors.RED,
    "red_hover": MixerColors.RED_HOVER,
    "playing": MixerColors.PLAYING,
    "text_primary": MixerColors.TEXT_PRIMARY,
    "text_secondary": MixerColors.TEXT_SECONDARY,
    "text_muted": MixerColors.TEXT_MUTED,
}


# =============================================================================
# COLOR UTILITIES (using colour library)
# =============================================================================


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to RGB tuple (0-255)."""
    c = Color(hex_color)
    return (int(round(c.red * 255)), int(round(c.green * 255)), int(round(c.blue * 255)))


def lighten_color(hex_color: str, amount: float = 0.2) -> str:
    """Lighten a color by the given amount (0.0-1.0)."""
    c = Color(hex_color)
    c.luminance = min(1.0, c.luminance + amount)
    return c.hex_l


def darken_color(hex_color: str, amount: float = 0.2) -> str:
    """Darken a color by the given amount (0.0-1.0)."""
    c = Color(hex_color)
    c.luminance = max(0.0, c.luminance - amount)
    return c.hex_l


def generate_color_gradient(start_hex: str, end_hex: str, steps: int = 5) -> List[str]:
    """Generate a gradient between two colors."""
    start = Color(start_hex)
    end = Color(end_hex)
    return [c.hex_l for c in start.range_to(end, steps)]


def is_light_color(hex_color: str) -> bool:
    """Check if a color is light (for text contrast decisions)."""
    return Color(hex_color).luminance > 0.5


def get_text_color_for_bg(hex_color: str) -> str:
    """Get appropriate text color (light or dark) for a background."""
    return MixerColors.TEXT_PRIMARY if not is_light_color(hex_color) else MixerColors.BG_DARKEST


# =============================================================================
# FONT CONFIGURATION
# =============================================================================


class FontConfig:
    """Font family and size configuration."""

    FAMILY = "Segoe UI Emoji"
    FAMILY_TEXT = "Segoe UI"

    SIZE_XS = 10
    SIZE_SM = 11
    SIZE_MD = 13
    SIZE_LG = 15
    SIZE_XL = 18
    SIZE_XXL = 24


FONTS = {
    "family": FontConfig.FAMILY,
    "family_text": FontConfig.FAMILY_TEXT,
    "size_xs": FontConfig.SIZE_XS,
    "size_sm": FontConfig.SIZE_SM,
    "size_md": FontConfig.SIZE_MD,
    "size_lg": FontConfig.SIZE_LG,
    "size_xl": FontConfig.SIZE_XL,
    "size_xxl": FontConfig.SIZE_XXL,
}


# =============================================================================
# AUDIO SETTINGS
# =============================================================================

AUDIO = {
    "sample_rate": 48000,
    "block_size": 1024,
    "channels": 2,
}


# =============================================================================
# MIXER SETTINGS
# =============================================================================

MIXER = {
    "min_volume": 0,
    "max_volume": 100,
    "default_volume": 50,  # Used when a sound is started with its target at 0
    "master_volume": 100,
    "presets_enabled": True,
}


# =============================================================================
# UI SETTINGS
# =============================================================================

UI = {
    "window_title": "Ambient Mixer",
    "window_size": "960x760",
    "grid_columns": 4,
    "corner_radius": 12,
    "button_corner_radius": 8,
    "padding": 12,
    "card_padding": 10,
    "icon_size": 44,
}


# =============================================================================
# FILE/PATH SETTINGS
# =============================================================================

AUDIO_DIR = "audio"
STORAGE_FILE = "ambientmixer_storage.json"
PRESETS_KEY = "ambientMixerPresets"
CUSTOM_PRESET_PREFIX = "custom-"
