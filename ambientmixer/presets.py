"""
Preset store - named mixes persisted through the key/value storage.
"""

import json
import logging
import time
from typing import Callable, Dict, Optional

from .constants import CUSTOM_PRESET_PREFIX, PRESETS_KEY
from .models import Preset, PresetDecodeError, decode_presets, encode_presets
from .storage import JsonFileStorage, StorageError

logger = logging.getLogger(__name__)


class PresetError(Exception):
    """Raised when a preset cannot be persisted."""


class PresetStore:
    """
    Holds the custom preset collection and writes it through on every save.

    The whole collection lives under a single storage key as a JSON object:
    ``{preset_id: {"name": ..., "sounds": {sound_id: volume}}}``.

    Precondition checks (active sounds, non-empty and unique name) belong to
    the caller; ``save`` only filters and persists.
    """

    def __init__(
        self,
        storage: Optional[JsonFileStorage] = None,
        key: str = PRESETS_KEY,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage or JsonFileStorage()
        self.key = key
        self._clock = clock
        self.presets: Dict[str, Preset] = self.load()

    def load(self) -> Dict[str, Preset]:
        """Read the collection from storage. Missing or malformed data gives an empty collection."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            return {}
        try:
            presets = decode_presets(json.loads(raw))
        except (ValueError, PresetDecodeError) as e:
            logger.warning("Ignoring malformed preset data: %s", e)
            return {}
        logger.debug("Loaded %d presets", len(presets))
        return presets

    def save(self, name: str, volumes: Dict[str, int]) -> str:
        """
        Save the active part of ``volumes`` as a new preset.

        Returns the new preset id.

        Raises:
            PresetError if the collection could not be written (nothing is kept)
        """
        preset = Preset.from_volumes(name, volumes)
        preset_id = self._new_id()
        self.presets[preset_id] = preset
        try:
            self._persist()
        except StorageError as e:
            del self.presets[preset_id]
            logger.error("Failed to save preset '%s': %s", name, e)
            raise PresetError(f"Could not save preset '{name}'") from e
        logger.info("Saved preset '%s' as %s (%d sounds)", name, preset_id, len(preset.sounds))
        return preset_id

    def name_exists(self, name: str) -> bool:
        return any(preset.name == name for preset in self.presets.values())

    def get(self, preset_id: str) -> Optional[Preset]:
        return self.presets.get(preset_id)

    def __len__(self) -> int:
        return len(self.presets)

    def _persist(self):
        self.storage.set_item(self.key, json.dumps(encode_presets(self.presets)))

    def _new_id(self) -> str:
        """Timestamp-derived id, bumped by a millisecond until unique."""
        stamp = int(self._clock() * 1000)
        while f"{CUSTOM_PRESET_PREFIX}{stamp}" in self.presets:
            stamp += 1
        return f"{CUSTOM_PRESET_PREFIX}{stamp}"
