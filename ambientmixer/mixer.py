"""
Mixer state engine.

Single source of truth for what should be playing and at what volume. Each
sound has a target volume (0-100) that is scaled by the master volume before
it reaches the playback engine:

    effective = round(target * master / 100)

The engine drives the PlaybackEngine, saves/loads presets through the
PresetStore and reports every visible change to a MixerView. None of its
public operations raise; problems are logged or shown as notices.
"""

import asyncio
import logging
from typing import Dict, Optional

from .audio import PlaybackEngine
from .catalog import SoundCatalog
from .constants import AUDIO_DIR, MIXER
from .models import MixerSession, Preset, SoundState, clamp_volume
from .presets import PresetError, PresetStore
from .view import MixerView

logger = logging.getLogger(__name__)

NO_ACTIVE_SOUNDS = "No active sounds to save in preset."
EMPTY_PRESET_NAME = "Please enter a preset name."
DUPLICATE_PRESET_NAME = "A preset with that name already exists."
PRESET_SAVE_FAILED = "Could not save the preset. Please try again."


def effective_volume(target_volume: int, master_volume: int) -> int:
    """Scale a target volume by the master volume, rounding halves up."""
    return (target_volume * master_volume + 50) // 100


class MixerEngine:
    """
    Orchestrates per-sound volumes, the master volume and playback.

    Usage:
        engine = MixerEngine(SoundCatalog(), PlaybackEngine(), presets=PresetStore(), view=app)
        engine.start()
        await engine.toggle_sound("rain")
        engine.set_master_volume(60)
    """

    def __init__(
        self,
        catalog: SoundCatalog,
        playback: PlaybackEngine,
        presets: Optional[PresetStore] = None,
        view: Optional[MixerView] = None,
        session: Optional[MixerSession] = None,
        audio_dir: str = AUDIO_DIR,
        default_volume: Optional[int] = None,
        presets_enabled: Optional[bool] = None,
    ):
        self.catalog = catalog
        self.playback = playback
        self.view = view or MixerView()
        self.session = session or MixerSession.for_sounds(catalog.ids())
        self.audio_dir = audio_dir
        self.default_volume = clamp_volume(
            MIXER["default_volume"] if default_volume is None else default_volume
        )
        self.presets_enabled = MIXER["presets_enabled"] if presets_enabled is None else presets_enabled
        self.presets = presets if self.presets_enabled else None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def start(self):
        """Load every catalog sound and render the initial view."""
        self.load_all_sounds()
        self.view.render_sounds(self.catalog.all())
        if self.presets is not None:
            self.view.render_presets(dict(self.presets.presets))
        self.view.update_master_volume(self.session.master_volume)
        self.view.update_main_play_button(False)

    def load_all_sounds(self) -> int:
        """Load each catalog sound from the audio directory. Returns how many loaded."""
        loaded = 0
        for sound in self.catalog.all():
            if self.playback.load(sound.id, sound.audio_path(self.audio_dir)):
                loaded += 1
            else:
                logger.error("Failed to load sound: %s", sound.id)
        logger.info("Loaded %d of %d sounds", loaded, len(self.catalog))
        return loaded

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def master_volume(self) -> int:
        return self.session.master_volume

    def sound_volume(self, sound_id: str) -> Optional[int]:
        state = self.session.sounds.get(sound_id)
        return state.target_volume if state else None

    def effective_volume(self, sound_id: str) -> Optional[int]:
        state = self.session.sounds.get(sound_id)
        if state is None:
            return None
        return effective_volume(state.target_volume, self.session.master_volume)

    def is_sound_playing(self, sound_id: str) -> bool:
        state = self.session.sounds.get(sound_id)
        return bool(state and state.is_playing)

    def sound_state(self, sound_id: str) -> Optional[SoundState]:
        """A copy of the sound's state; the session itself stays private."""
        state = self.session.sounds.get(sound_id)
        return SoundState(state.target_volume, state.is_playing) if state else None

    def volumes(self) -> Dict[str, int]:
        return self.session.volumes()

    def has_active_sounds(self) -> bool:
        return self.session.has_active_sounds()

    # ------------------------------------------------------------------
    # Single sound
    # ------------------------------------------------------------------

    async def toggle_sound(self, sound_id: str) -> bool:
        """
        Turn a sound on (at its target volume, or the default if that is 0)
        or off. Turning a sound off discards its level: the target goes to 0.

        Returns False if the sound is unknown or not loaded.
        """
        state = self.session.sounds.get(sound_id)
        if state is None or not self.playback.has_sound(sound_id):
            logger.error("Sound %s not found", sound_id)
            return False

        if self.playback.is_paused(sound_id):
            volume = state.target_volume
            if volume == 0:
                volume = self.default_volume
                self.view.update_sound_volume(sound_id, volume)
            state.target_volume = volume
            state.is_playing = True
            self.view.update_sound_playing(sound_id, True)

            self._apply_volume(sound_id)
            if not await self.playback.play(sound_id):
                logger.warning("Sound %s did not start", sound_id)
            self._sync_playing(sound_id)
        else:
            self.playback.pause(sound_id)
            state.target_volume = 0
            state.is_playing = False
            self.view.update_sound_volume(sound_id, 0)
            self.view.update_sound_playing(sound_id, False)

        self._refresh_main_play_button()
        return True

    def set_sound_volume(self, sound_id: str, volume: int):
        """Store a sound's target volume and apply it, playing or not."""
        state = self.session.sounds.get(sound_id)
        if state is None:
            logger.error("Sound %s not found", sound_id)
            return
        state.target_volume = clamp_volume(volume)
        self._apply_volume(sound_id)
        self.view.update_sound_volume(sound_id, state.target_volume)
        self._refresh_main_play_button()

    # ------------------------------------------------------------------
    # Master volume
    # ------------------------------------------------------------------

    def set_master_volume(self, volume: int):
        """Store the master volume and re-apply it to every playing sound."""
        self.session.master_volume = clamp_volume(volume)
        self.view.update_master_volume(self.session.master_volume)
        # Paused sounds keep their stale volume; it is re-applied when they start
        for sound_id in self.session.sounds:
            if not self.playback.is_paused(sound_id):
                self._apply_volume(sound_id)

    # ------------------------------------------------------------------
    # All sounds
    # ------------------------------------------------------------------

    async def toggle_all(self):
        """Pause everything if anything plays, otherwise start every loaded sound."""
        if self.playback.any_playing():
            self.playback.pause_all()
            for sound_id, state in self.session.sounds.items():
                state.is_playing = False
                self.view.update_sound_playing(sound_id, False)
            self.view.update_main_play_button(False)
            return

        for sound_id in self.playback.sound_ids():
            state = self.session.sounds.get(sound_id)
            if state is None:
                continue
            if state.target_volume == 0:
                state.target_volume = self.default_volume
                self.view.update_sound_volume(sound_id, state.target_volume)
            self._apply_volume(sound_id)

        results = await self.playback.play_all()
        for sound_id in results:
            self._sync_playing(sound_id)
        self._refresh_main_play_button()

    def reset(self):
        """Stop and rewind everything, master back to 100, every sound to 0."""
        self.playback.stop_all()
        self.session.master_volume = MIXER["master_volume"]
        self._zero_all_sounds()
        self.view.update_master_volume(self.session.master_volume)
        self.view.update_main_play_button(False)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    async def apply_preset(self, preset: Preset):
        """Stop everything, then start exactly the sounds in ``preset``."""
        self.playback.stop_all()
        self._zero_all_sounds()

        to_start = []
        for sound_id, volume in preset.sounds.items():
            state = self.session.sounds.get(sound_id)
            if state is None:
                logger.error("Preset '%s' references unknown sound %s", preset.name, sound_id)
                continue
            state.target_volume = clamp_volume(volume)
            self.view.update_sound_volume(sound_id, state.target_volume)
            if self._apply_volume(sound_id):
                state.is_playing = True
                self.view.update_sound_playing(sound_id, True)
                to_start.append(sound_id)

        await asyncio.gather(*(self.playback.play(sound_id) for sound_id in to_start))
        for sound_id in to_start:
            self._sync_playing(sound_id)
        self._refresh_main_play_button()

    async def load_preset(self, preset_id: str) -> bool:
        """Apply a built-in or saved preset by id."""
        preset = self.catalog.presets.get(preset_id)
        if preset is None and self.presets is not None:
            preset = self.presets.get(preset_id)
        if preset is None:
            logger.error("Preset not found: %s", preset_id)
            return False
        logger.info("Loading preset '%s'", preset.name)
        await self.apply_preset(preset)
        return True

    def request_save_preset(self) -> bool:
        """Open the save prompt if there is something worth saving."""
        if self.presets is None:
            logger.warning("Presets are disabled")
            return False
        if not self.has_active_sounds():
            self.view.show_notice(NO_ACTIVE_SOUNDS)
            return False
        self.view.show_save_prompt()
        return True

    def save_preset(self, name: Optional[str]) -> Optional[str]:
        """
        Save the current mix under ``name``.

        Returns the new preset id, or None if the save was refused (no active
        sounds, empty or duplicate name) or could not be written.
        """
        if self.presets is None:
            logger.warning("Presets are disabled")
            return None

        name = (name or "").strip()
        if not self.has_active_sounds():
            self.view.show_notice(NO_ACTIVE_SOUNDS)
            return None
        if not name:
            self.view.show_notice(EMPTY_PRESET_NAME)
            return None
        if self.presets.name_exists(name):
            self.view.show_notice(DUPLICATE_PRESET_NAME)
            return None

        try:
            preset_id = self.presets.save(name, self.volumes())
        except PresetError:
            self.view.show_notice(PRESET_SAVE_FAILED)
            return None

        self.view.add_preset(preset_id, self.presets.presets[preset_id])
        self.view.hide_save_prompt()
        return preset_id

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_volume(self, sound_id: str) -> bool:
        volume = self.effective_volume(sound_id)
        if volume is None:
            return False
        return self.playback.set_volume(sound_id, volume)

    def _sync_playing(self, sound_id: str):
        """Make the logical playing flag match the track after a start attempt."""
        state = self.session.sounds[sound_id]
        is_playing = not self.playback.is_paused(sound_id)
        if state.is_playing != is_playing:
            state.is_playing = is_playing
            self.view.update_sound_playing(sound_id, is_playing)

    def _zero_all_sounds(self):
        for sound_id, state in self.session.sounds.items():
            state.target_volume = 0
            state.is_playing = False
            self.view.update_sound_volume(sound_id, 0)
            self.view.update_sound_playing(sound_id, False)

    def _refresh_main_play_button(self):
        """Recompute "anything playing" from the tracks, not the cached flag."""
        any_playing = self.playback.any_playing()
        self.playback.is_playing = any_playing
        self.view.update_main_play_button(any_playing)
