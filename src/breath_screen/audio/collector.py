"""Audio input: WAV loading and bounded microphone capture into a ring buffer."""

import logging
import threading
from typing import Optional

import numpy as np

try:
    import sounddevice as sd
except ImportError:
    sd = None  # type: ignore

from breath_screen.audio.config import AnalysisConfig
from breath_screen.audio.features import RingBuffer

logger = logging.getLogger(__name__)

_PCM_SCALE = {
    np.dtype(np.int16): 32768.0,
    np.dtype(np.int32): 2147483648.0,
}


def load_wav(path: str, sample_rate: Optional[int] = None) -> np.ndarray:
    """Read a WAV file as mono float32 samples normalized to [-1, 1].

    Args:
        path: WAV file path.
        sample_rate: Expected rate in Hz. None accepts whatever the file has.

    Returns:
        Mono float32 array, shape (n_samples,).
    """
    import scipy.io.wavfile as wavfile

    sr, audio = wavfile.read(str(path))
    if sample_rate is not None and sr != sample_rate:
        raise ValueError(f"Expected {sample_rate} Hz, got {sr} Hz. Resample the file.")
    if audio.dtype in _PCM_SCALE:
        audio = audio.astype(np.float32) / _PCM_SCALE[audio.dtype]
    elif audio.dtype == np.uint8:
        audio = (audio.astype(np.float32) - 128.0) / 128.0
    else:
        audio = audio.astype(np.float32)
    if audio.ndim > 1:
        audio = audio.mean(axis=1)
    logger.debug("Loaded %s: %d samples at %d Hz", path, len(audio), sr)
    return audio


class AudioCollector:
    """Records a bounded mono take into a ring buffer.

    The stream callback is the single writer; `snapshot()` copies the buffer
    under the same lock, so a reader never sees a half-written block.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self.buffer = RingBuffer(self.config.buffer_capacity, dtype=np.float32)
        self._lock = threading.Lock()

    def on_block(self, block: np.ndarray) -> None:
        """Push one captured block (callback side)."""
        with self._lock:
            self.buffer.push_batch(np.asarray(block, dtype=np.float32).ravel())

    def snapshot(self) -> np.ndarray:
        """Chronological copy of the captured samples (reader side)."""
        with self._lock:
            return self.buffer.get_all()

    def reset(self) -> None:
        """Clear the buffer for a new session."""
        with self._lock:
            self.buffer.clear()

    def record(
        self,
        duration_sec: float,
        device: Optional[int] = None,
        block_sec: float = 0.1,
    ) -> np.ndarray:
        """Record for duration_sec seconds and return the captured samples.

        Args:
            duration_sec: Recording duration in seconds.
            device: Input device index (None = default).
            block_sec: Callback block duration in seconds.

        Returns:
            Mono float32 array covering the whole take. The buffer grows
            (plus one block of headroom) when duration_sec exceeds buffer_sec.
        """
        if sd is None:
            raise ImportError("sounddevice is required for recording. pip install sounddevice")

        block_samples = int(block_sec * self.config.sample_rate)
        needed = int(duration_sec * self.config.sample_rate) + block_samples
        if needed > self.buffer.capacity:
            logger.info(
                "Growing capture buffer from %d to %d samples for a %.1f s take",
                self.buffer.capacity, needed, duration_sec,
            )
            with self._lock:
                self.buffer = RingBuffer(needed, dtype=np.float32)

        def callback(indata: np.ndarray, _frames: int, _time: object, status: object) -> None:
            if status:
                logger.warning("Input stream status: %s", status)
            self.on_block(indata[:, 0] if indata.ndim > 1 else indata)

        self.reset()
        with sd.InputStream(
            samplerate=self.config.sample_rate,
            channels=self.config.channels,
            dtype=self.config.dtype,
            blocksize=block_samples,
            device=device,
            callback=callback,
        ):
            sd.sleep(int(duration_sec * 1000))
        audio = self.snapshot()
        logger.debug("Captured %d samples", len(audio))
        return audio
