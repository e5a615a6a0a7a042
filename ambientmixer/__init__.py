"""
Ambient Mixer Package

A desktop ambient-sound mixer: loop several background sounds, balance them
against a master volume, and save the mix as a named preset.

The GUI lives in ``ambientmixer.gui`` and is not imported here, so the engine
can be used without a display.
"""

from .audio import AudioOutput, LoopingTrack, PlaybackEngine, TransportState
from .catalog import SoundCatalog
from .mixer import MixerEngine, effective_volume
from .models import MixerSession, Preset, PresetDecodeError, SoundDefinition, SoundState
from .presets import PresetError, PresetStore
from .storage import JsonFileStorage, StorageError
from .view import MixerView

__all__ = [
    "AudioOutput",
    "JsonFileStorage",
    "LoopingTrack",
    "MixerEngine",
    "MixerSession",
    "MixerView",
    "PlaybackEngine",
    "Preset",
    "PresetDecodeError",
    "PresetError",
    "PresetStore",
    "SoundCatalog",
    "SoundDefinition",
    "SoundState",
    "StorageError",
    "TransportState",
    "effective_volume",
]
__version__ = "1.0.0"
