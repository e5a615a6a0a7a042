"""
Sound catalog and built-in presets.
"""

from typing import Dict, Iterable, List, Optional

from .models import Preset, SoundDefinition

SOUNDS = (
    SoundDefinition(
        id="rain",
        name="Rain",
        description="Gentle rainfall",
        icon="rain_cloud",
        color="#3B82F6",
        file="rain.mp3",
    ),
    SoundDefinition(
        id="ocean",
        name="Ocean Waves",
        description="Waves rolling onto the shore",
        icon="ocean",
        color="#06B6D4",
        file="ocean.mp3",
    ),
    SoundDefinition(
        id="forest",
        name="Forest",
        description="Birds and rustling leaves",
        icon="deciduous_tree",
        color="#22C55E",
        file="birds.mp3",
    ),
    SoundDefinition(
        id="fireplace",
        name="Fireplace",
        description="Crackling fire",
        icon="fire",
        color="#F97316",
        file="fireplace.mp3",
    ),
    SoundDefinition(
        id="thunder",
        name="Thunder",
        description="Distant thunderstorm",
        icon="zap",
        color="#A855F7",
        file="thunder.mp3",
    ),
    SoundDefinition(
        id="wind",
        name="Wind",
        description="Wind through the trees",
        icon="dash",
        color="#94A3B8",
        file="wind.mp3",
    ),
    SoundDefinition(
        id="cafe",
        name="Cafe",
        description="Coffee shop chatter",
        icon="coffee",
        color="#B45309",
        file="cafe.mp3",
    ),
    SoundDefinition(
        id="night",
        name="Night",
        description="Crickets on a summer night",
        icon="crescent_moon",
        color="#6366F1",
        file="night.mp3",
    ),
)

DEFAULT_PRESETS = {
    "focus": Preset(name="Focus", sounds={"rain": 30, "cafe": 40}),
    "relax": Preset(name="Relax", sounds={"ocean": 50, "wind": 20}),
    "sleep": Preset(name="Sleep", sounds={"rain": 40, "night": 30}),
    "nature": Preset(name="Nature", sounds={"forest": 60, "wind": 25, "rain": 15}),
    "cozy": Preset(name="Cozy", sounds={"fireplace": 60, "rain": 35, "thunder": 15}),
}


class SoundCatalog:
    """Read-only list of the sounds available for the session."""

    def __init__(
        self,
        sounds: Optional[Iterable[SoundDefinition]] = None,
        presets: Optional[Dict[str, Preset]] = None,
    ):
        self._sounds = tuple(SOUNDS if sounds is None else sounds)
        self._by_id = {sound.id: sound for sound in self._sounds}
        self.presets: Dict[str, Preset] = dict(DEFAULT_PRESETS if presets is None else presets)

    def all(self) -> List[SoundDefinition]:
        return list(self._sounds)

    def get(self, sound_id: str) -> Optional[SoundDefinition]:
        return self._by_id.get(sound_id)

    def ids(self) -> List[str]:
        return [sound.id for sound in self._sounds]

    def __len__(self) -> int:
        return len(self._sounds)
