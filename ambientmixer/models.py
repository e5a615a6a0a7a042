"""
Data models for the Ambient Mixer.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable

from .constants import MIXER, get_icon


class PresetDecodeError(ValueError):
    """Raised when stored preset data does not have the expected shape."""


def clamp_volume(volume: Any) -> int:
    """Coerce a volume to an int inside the allowed 0-100 range."""
    return max(MIXER["min_volume"], min(MIXER["max_volume"], int(volume)))


@dataclass(frozen=True)
class SoundDefinition:
    """A sound track offered by the mixer. Fixed for the whole session."""

    id: str
    name: str
    description: str
    icon: str  # emoji short name
    color: str  # hex color for the card accent
    file: str  # file name inside the audio directory

    @property
    def emoji(self) -> str:
        return get_icon(self.icon)

    def audio_path(self, audio_dir: str) -> str:
        """Location of the sound file inside ``audio_dir``."""
        return str(Path(audio_dir) / self.file)


@dataclass
class SoundState:
    """Mutable per-sound mixer state."""

    target_volume: int = 0
    is_playing: bool = False


@dataclass
class MixerSession:
    """Master volume plus every sound's state for the current run."""

    master_volume: int = MIXER["master_volume"]
    sounds: Dict[str, SoundState] = field(default_factory=dict)

    @classmethod
    def for_sounds(cls, sound_ids: Iterable[str]) -> "MixerSession":
        """Create a session with every sound silent and stopped."""
        return cls(sounds={sound_id: SoundState() for sound_id in sound_ids})

    def volumes(self) -> Dict[str, int]:
        return {sound_id: state.target_volume for sound_id, state in self.sounds.items()}

    def has_active_sounds(self) -> bool:
        return any(state.target_volume > 0 for state in self.sounds.values())


@dataclass(frozen=True)
class Preset:
    """A named snapshot of which sounds were active and at what volume."""

    name: str
    sounds: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_volumes(cls, name: str, volumes: Dict[str, int]) -> "Preset":
        """Build a preset keeping only the sounds with a volume above zero."""
        return cls(
            name=name,
            sounds={sound_id: volume for sound_id, volume in volumes.items() if volume > 0},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "sounds": dict(self.sounds)}

    @classmethod
    def from_dict(cls, data: Any) -> "Preset":
        """
        Create a Preset from a decoded JSON value.

        Validation is strict: ``name`` must be a non-empty string and ``sounds``
        a mapping of sound id to an integer volume in 1-100. Nothing is coerced.

        Raises:
            PresetDecodeError if the value has any other shape
        """
        if not isinstance(data, dict):
            raise PresetDecodeError(f"Preset must be an object, got {type(data).__name__}")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise PresetDecodeError(f"Preset name must be a non-empty string, got {name!r}")

        sounds = data.get("sounds")
        if not isinstance(sounds, dict):
            raise PresetDecodeError(f"Preset '{name}' sounds must be an object")

        for sound_id, volume in sounds.items():
            # bool is an int subclass; reject it explicitly
            if not isinstance(sound_id, str) or isinstance(volume, bool) or not isinstance(volume, int):
                raise PresetDecodeError(f"Preset '{name}' has invalid entry {sound_id!r}: {volume!r}")
            if not MIXER["min_volume"] < volume <= MIXER["max_volume"]:
                raise PresetDecodeError(f"Preset '{name}' volume out of range for {sound_id}: {volume}")

        return cls(name=name, sounds=dict(sounds))


def decode_presets(data: Any) -> Dict[str, "Preset"]:
    """Decode a whole stored preset collection, failing on the first bad entry."""
    if not isinstance(data, dict):
        raise PresetDecodeError(f"Preset collection must be an object, got {type(data).__name__}")
    return {str(preset_id): Preset.from_dict(value) for preset_id, value in data.items()}


def encode_presets(presets: Dict[str, Preset]) -> Dict[str, Any]:
    return {preset_id: preset.to_dict() for preset_id, preset in presets.items()}

