"""
Presentation callbacks used by the mixer engine.

The engine never reads widget state; it only pushes changes out through a
MixerView. Subclass it and override what the front end needs to show.
"""

from typing import Dict, List

from .models import Preset, SoundDefinition


class MixerView:
    """No-op base view. Every callback is optional."""

    def render_sounds(self, sounds: List[SoundDefinition]):
        """Build one card per sound."""

    def render_presets(self, presets: Dict[str, Preset]):
        """Show the stored custom presets as selectable entries."""

    def update_sound_playing(self, sound_id: str, is_playing: bool):
        pass

    def update_sound_volume(self, sound_id: str, volume: int):
        pass

    def update_master_volume(self, volume: int):
        pass

    def update_main_play_button(self, any_playing: bool):
        pass

    def add_preset(self, preset_id: str, preset: Preset):
        """Show a newly saved preset."""

    def show_save_prompt(self):
        """Ask the user for a preset name, then call ``MixerEngine.save_preset``."""

    def hide_save_prompt(self):
        pass

    def show_notice(self, message: str):
        """Blocking notice for rejected user actions."""
