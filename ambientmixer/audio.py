"""
Looping playback for the Ambient Mixer.

Every sound gets one long-lived LoopingTrack. Loading a track only reads the
file's metadata; sample data is decoded the first time the track is played.
All playing tracks are summed into a single sounddevice output stream.
"""

import asyncio
import logging
import threading
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import soundfile as sf

from .constants import AUDIO

logger = logging.getLogger(__name__)


def read_audio_file(file_path: str) -> Tuple[np.ndarray, int]:
    """
    Read an audio file with soundfile.

    Returns:
        Tuple of (audio_data as float32 numpy array, sample_rate)

    Raises:
        RuntimeError if the file cannot be decoded
    """
    try:
        data, sr = sf.read(file_path, dtype="float32")
    except Exception as e:
        raise RuntimeError(f"Failed to load audio file '{file_path}': {e}") from e
    return data, sr


def _resample_audio(data: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    """
    Resample audio using numpy linear interpolation.

    Args:
        data: Audio data as numpy array (mono or stereo)
        orig_sr: Original sample rate
        target_sr: Target sample rate

    Returns:
        Resampled audio data
    """
    if orig_sr == target_sr:
        return data

    ratio = target_sr / orig_sr
    new_length = int(len(data) * ratio)
    old_indices = np.arange(len(data))
    new_indices = np.linspace(0, len(data) - 1, new_length)

    if data.ndim == 1:
        return np.interp(new_indices, old_indices, data).astype(np.float32)
    else:
        result = np.zeros((new_length, data.shape[1]), dtype=np.float32)
        for ch in range(data.shape[1]):
            result[:, ch] = np.interp(new_indices, old_indices, data[:, ch])
        return result


def _to_stereo(chunk: np.ndarray) -> np.ndarray:
    """Convert a mono (or single-column) block to two channels."""
    if chunk.ndim == 1:
        return np.column_stack([chunk, chunk])
    if chunk.shape[1] == 1:
        return np.column_stack([chunk[:, 0], chunk[:, 0]])
    return chunk[:, :2]


class TransportState(Enum):
    STOPPED = "stopped"
    STARTING = "starting"  # play requested, data/output not ready yet
    PLAYING = "playing"
    PAUSED = "paused"


class LoopingTrack:
    """
    One sound file bound to a sound id, looping forever.

    Only the file metadata is read on construction (raises if the file is
    missing or not a supported format). ``ensure_loaded`` decodes the samples.
    """

    def __init__(self, file_path: str, sample_rate: Optional[int] = None):
        self.file_path = str(file_path)
        self.sample_rate = sample_rate or AUDIO["sample_rate"]
        self.info = sf.info(self.file_path)
        self.loop = True
        self.volume = 1.0  # native 0.0-1.0 scale
        self.position = 0
        self.state = TransportState.STOPPED
        # Bumped on every transport request; a pending start only commits
        # if nothing else was requested in the meantime.
        self.request = 0
        self._data: Optional[np.ndarray] = None

    @property
    def paused(self) -> bool:
        return self.state not in (TransportState.STARTING, TransportState.PLAYING)

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    @property
    def duration(self) -> float:
        return float(self.info.duration)

    def ensure_loaded(self) -> np.ndarray:
        """Decode and resample the sample data once. Safe to call from a worker thread."""
        if self._data is None:
            data, sr = read_audio_file(self.file_path)
            if sr != self.sample_rate:
                data = _resample_audio(data, sr, self.sample_rate)
            if len(data) == 0:
                raise RuntimeError(f"Audio file '{self.file_path}' is empty")
            self._data = _to_stereo(np.asarray(data, dtype=np.float32))
            logger.debug("Decoded %s: %d samples", self.file_path, len(self._data))
        return self._data

    def rewind(self):
        self.position = 0

    def read(self, frames: int) -> np.ndarray:
        """Return the next ``frames`` stereo samples, wrapping around at the end."""
        data = self._data
        if data is None:
            return np.zeros((frames, 2), dtype=np.float32)
        length = len(data)
        indices = (self.position + np.arange(frames)) % length
        self.position = (self.position + frames) % length
        return data[indices]


class AudioOutput:
    """
    Single output stream to the default (or given) device.

    The stream is opened lazily on the first ``start`` so that constructing
    the engine never touches the audio hardware.
    """

    def __init__(
        self,
        render: Callable[[int], np.ndarray],
        device: Optional[int] = None,
        sample_rate: Optional[int] = None,
        block_size: Optional[int] = None,
    ):
        self._render = render
        self.device = device
        self.sample_rate = sample_rate or AUDIO["sample_rate"]
        self.block_size = block_size or AUDIO["block_size"]
        self.channels = AUDIO["channels"]
        self.stream = None
        self.running = False

    def start(self):
        """Open and start the stream. Raises if no output device is available."""
        if self.running:
            return

        # Imported here: loading PortAudio fails on hosts without an audio stack
        import sounddevice as sd

        self.stream = sd.OutputStream(
            device=self.device,
            samplerate=self.sample_rate,
            blocksize=self.block_size,
            channels=self.channels,
            callback=self._output_callback,
            dtype=np.float32,
        )
        self.stream.start()
        self.running = True
        logger.info("Output stream started (%d Hz, block %d)", self.sample_rate, self.block_size)

    def stop(self):
        """Stop and close the stream. Non-blocking - uses abort()."""
        self.running = False
        if self.stream:
            try:
                self.stream.abort()
                self.stream.close()
            except Exception as e:
                logger.warning("Error closing output stream: %s", e)
            self.stream = None

    def _output_callback(self, outdata, frames, time, status):
        """Called by sounddevice for each audio block. Keep this minimal."""
        if status:
            logger.debug("Output status: %s", status)
        outdata[:] = self._render(frames)


class PlaybackEngine:
    """
    Maps sound ids to looping tracks and provides transport/volume primitives.

    ``is_playing`` is a cached flag updated only by the bulk operations;
    use ``any_playing`` for the real state.
    """

    def __init__(self, output=None, sample_rate: Optional[int] = None):
        self.sample_rate = sample_rate or AUDIO["sample_rate"]
        self.tracks: Dict[str, LoopingTrack] = {}
        self.is_playing = False
        # Guards track state shared with the audio callback thread
        self.lock = threading.Lock()
        self.output = output or AudioOutput(self.render_block, sample_rate=self.sample_rate)

    def load(self, sound_id: str, file_path: str) -> bool:
        """Create (or replace) the track for ``sound_id``. Returns False on failure."""
        try:
            track = LoopingTrack(file_path, self.sample_rate)
        except Exception as e:
            logger.error("Error loading sound %s: %s", sound_id, e)
            return False

        with self.lock:
            previous = self.tracks.get(sound_id)
            if previous is not None:
                previous.request += 1
                previous.state = TransportState.STOPPED
            self.tracks[sound_id] = track
        logger.debug("Loaded sound %s from %s (%.1fs)", sound_id, file_path, track.duration)
        return True

    def has_sound(self, sound_id: str) -> bool:
        return sound_id in self.tracks

    def sound_ids(self) -> List[str]:
        return list(self.tracks)

    def is_paused(self, sound_id: str) -> bool:
        """True if the track is stopped/paused (or unknown)."""
        track = self.tracks.get(sound_id)
        return track is None or track.paused

    def get_state(self, sound_id: str) -> Optional[TransportState]:
        track = self.tracks.get(sound_id)
        return track.state if track else None

    def get_volume(self, sound_id: str) -> Optional[float]:
        track = self.tracks.get(sound_id)
        return track.volume if track else None

    async def play(self, sound_id: str) -> bool:
        """
        Start or resume a track.

        Returns False if the track is unknown, its data cannot be decoded,
        the output cannot be started, or a pause/stop/newer play arrived
        before the start completed. The caller must not assume the track is
        playing after a False return.
        """
        track = self.tracks.get(sound_id)
        if track is None:
            logger.error("Sound %s not found", sound_id)
            return False
        if track.state == TransportState.PLAYING:
            return True

        with self.lock:
            previous = track.state if track.state != TransportState.STARTING else TransportState.STOPPED
            track.request += 1
            request = track.request
            track.state = TransportState.STARTING

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, track.ensure_loaded)
            self.output.start()
        except Exception as e:
            logger.error("Error playing sound %s: %s", sound_id, e)
            with self.lock:
                if track.request == request:
                    track.state = previous
            return False

        with self.lock:
            if track.request != request:
                logger.debug("Start of %s superseded by a later request", sound_id)
                return False
            track.state = TransportState.PLAYING
        return True

    def pause(self, sound_id: str):
        """Pause a track. No-op if it is already paused or stopped."""
        track = self.tracks.get(sound_id)
        if track is None:
            logger.error("Sound %s not found", sound_id)
            return
        with self.lock:
            if track.paused:
                return
            track.request += 1
            track.state = TransportState.PAUSED

    def set_volume(self, sound_id: str, volume: int) -> bool:
        """Set a track's volume from the 0-100 scale. False if the sound is not loaded."""
        track = self.tracks.get(sound_id)
        if track is None:
            logger.debug("Set volume for sound %s ignored: not loaded", sound_id)
            return False
        track.volume = max(0, min(100, volume)) / 100
        logger.debug("Set volume for sound %s to %s", sound_id, volume)
        return True

    def stop_all(self):
        """Pause every track and rewind it to the start."""
        with self.lock:
            for track in self.tracks.values():
                if not track.paused:
                    track.request += 1
                track.state = TransportState.STOPPED
                track.rewind()
        self.is_playing = False

    async def play_all(self) -> Dict[str, bool]:
        """Start every paused track. Returns the play result per started sound id."""
        sound_ids = [sound_id for sound_id, track in self.tracks.items() if track.paused]
        results = await asyncio.gather(*(self.play(sound_id) for sound_id in sound_ids))
        self.is_playing = True
        return dict(zip(sound_ids, results))

    def pause_all(self):
        for sound_id, track in self.tracks.items():
            if not track.paused:
                self.pause(sound_id)
        self.is_playing = False

    def any_playing(self) -> bool:
        """Scan every track for one that is not paused."""
        return any(not track.paused for track in self.tracks.values())

    def render_block(self, frames: int) -> np.ndarray:
        """Mix the next ``frames`` samples of every playing track."""
        mixed = np.zeros((frames, AUDIO["channels"]), dtype=np.float32)
        with self.lock:
            for track in self.tracks.values():
                if track.state != TransportState.PLAYING or not track.is_loaded:
                    continue
                mixed += track.read(frames) * track.volume
        return np.clip(mixed, -1.0, 1.0)

    def close(self):
        self.stop_all()
        self.output.stop()
